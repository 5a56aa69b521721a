"""Reusable scratch state for split search.

One :class:`BestSplitAllocs` belongs to one thread of control.  Every column
search overwrites the buffers it uses, so contents never carry meaning from
one call to the next.
"""
from __future__ import annotations

import numpy as np
from sklearn.utils import check_random_state

# Rows of ``counters`` and ``stats``.
LEFT, RIGHT, MISSING = 0, 1, 2
# Columns of ``stats``.
COUNT, SUM, SUMSQ = 0, 1, 2


class BestSplitAllocs:
    """Preallocated buffers shared by every split evaluation of one worker.

    Parameters
    ----------
    n_cases : int
        Number of cases in the matrix; bounds every case set.
    max_cats : int
        Largest category count among the predictors and the target.
    random_state : int, RandomState or None, default=None
        Seed or generator for randomized search and sampled bipartitions.

    Attributes
    ----------
    counter : ndarray of shape (max_cats,)
        General purpose per-category counts.
    counters : ndarray of shape (3, max_cats)
        Per-partition (left, right, missing) category counts of the target.
    stats : ndarray of shape (3, 3)
        Per-partition count, sum and sum of squares of a numeric target,
        taken about :attr:`shift`.
    shift : float
        Known target mean of the node whose split is being scored.
    sorted_cases : ndarray of shape (n_cases,)
        Buffer the numeric search sorts cases into; partitions are views of it.
    rng : numpy.random.RandomState
    """

    def __init__(self, n_cases: int, max_cats: int, random_state=None):
        max_cats = max(int(max_cats), 1)
        self.n_cases = int(n_cases)
        self.max_cats = max_cats
        self.counter = np.zeros(max_cats, dtype=float)
        self.counters = np.zeros((3, max_cats), dtype=float)
        self.stats = np.zeros((3, 3), dtype=float)
        self.shift = 0.0
        self.sorted_cases = np.empty(self.n_cases, dtype=np.intp)
        self.rng = check_random_state(random_state)

    @classmethod
    def for_matrix(cls, fm, target, random_state=None) -> "BestSplitAllocs":
        """Size buffers for searching ``fm`` against ``target``."""
        return cls(fm.n_cases(), max(fm.max_cats(), target.n_cats()), random_state)

    def case_buffer(self, n: int) -> np.ndarray:
        """View of the first ``n`` slots of :attr:`sorted_cases`.

        Bagged case sets may repeat cases and outgrow ``n_cases``; the buffer
        grows to fit and stays grown.
        """
        if n > self.sorted_cases.size:
            self.sorted_cases = np.empty(n, dtype=np.intp)
        return self.sorted_cases[:n]

    def reset(self) -> None:
        self.counter[:] = 0.0
        self.counters[:] = 0.0
        self.stats[:] = 0.0
        self.shift = 0.0

    def snapshot(self) -> tuple[np.ndarray, np.ndarray]:
        """Copy the per-partition state; cost depends on ``max_cats`` only."""
        return self.counters.copy(), self.stats.copy()

    def restore(self, state: tuple[np.ndarray, np.ndarray]) -> None:
        counters, stats = state
        self.counters[:] = counters
        self.stats[:] = stats
