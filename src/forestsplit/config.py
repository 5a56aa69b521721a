"""Named constants that steer split search.

The categorical cutoffs compare against the number of distinct categories
present at a node, not the column's full cardinality.
"""

# Up to this many categories every bipartition is scored.
MAX_EXHAUSTIVE_CATS = 5
# Up to this many categories a non-random search uses the greedy iterative walk.
MAX_NON_RANDOM_EXHAUSTIVE = 10
# Up to this many categories a random bipartition is drawn as one integer mask.
MAX_NON_BIG_CATS = 30

# A split must decrease impurity by strictly more than this to be kept.
MIN_IMP = 0.0
# Numeric columns whose span over a case set is below this are constant.
CONSTANT_CUTOFF = 1e-7

# Bipartitions sampled for high cardinality columns in exhaustive mode.
RANDOM_PARTITIONS = 2 ** (MAX_NON_RANDOM_EXHAUSTIVE - 1) - 1
# Candidates (thresholds or bipartitions) scored per column in randomized mode.
RANDOM_SPLIT_DRAWS = 1

SHUFFLED_SUFFIX = ":SHUFFLED"
MISSING_TOKENS = frozenset({"?", "nan", "na", "null"})
NUMERIC_PREFIX = "N:"
