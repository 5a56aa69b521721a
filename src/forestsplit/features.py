# -*- coding: utf-8 -*-
"""
forestsplit.features
====================

Column types.  A :class:`Feature` holds one variable's values across every
case together with a missing mask.  :class:`NumFeature` stores floats and
:class:`CatFeature` stores integer codes resolved through a
:class:`~forestsplit.encoder.CatMap`.

Both kinds double as regression / classification responses: a numeric column
measures impurity as variance and a categorical column as Gini impurity.  The
wrappers in :mod:`forestsplit.targets` build on these methods.

Case sets are integer index arrays.  Split search hands the target views of a
reusable buffer and tracks per-partition counts or sums in a
:class:`~forestsplit.allocs.BestSplitAllocs` so that moving a handful of cases
from the right partition to the left one costs time proportional to the moved
cases only.
"""
from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod

import numpy as np
from sklearn.utils import check_random_state

from .allocs import COUNT, LEFT, MISSING, RIGHT, SUM, SUMSQ
from .config import (
    CONSTANT_CUTOFF,
    MAX_EXHAUSTIVE_CATS,
    MAX_NON_BIG_CATS,
    MAX_NON_RANDOM_EXHAUSTIVE,
    MIN_IMP,
    MISSING_TOKENS,
    NUMERIC_PREFIX,
    RANDOM_PARTITIONS,
    RANDOM_SPLIT_DRAWS,
    SHUFFLED_SUFFIX,
)
from .encoder import CatMap
from .splitter import CategoricalSplit, NumericSplit, Splitter

logger = logging.getLogger(__name__)

_NA = "NA"


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
def _as_cases(cases) -> np.ndarray:
    return np.asarray(cases, dtype=np.intp)

def _gini(counts: np.ndarray) -> float:
    tot = counts.sum()
    if tot <= 0:
        return 0.0
    p = counts / tot
    return float(1.0 - np.sum(p * p))

def _entropy(counts: np.ndarray) -> float:
    tot = counts.sum()
    if tot <= 0:
        return 0.0
    p = counts / tot
    p = p[p > 0]
    return float(-np.sum(p * np.log2(p)))

def _weighted_impurity(counters: np.ndarray, impurity) -> float:
    """Case weighted mean of ``impurity`` over the L/R/M rows of ``counters``."""
    total, acc = 0.0, 0.0
    for row in (LEFT, RIGHT, MISSING):
        n = counters[row].sum()
        if n > 0:
            acc += n * impurity(counters[row])
            total += n
    return acc / total if total > 0 else 0.0

def _split_variance(stats: np.ndarray) -> float:
    # n * var = sum(x^2) - sum(x)^2 / n
    total, acc = 0.0, 0.0
    for row in (LEFT, RIGHT, MISSING):
        n = stats[row, COUNT]
        if n > 0:
            acc += max(stats[row, SUMSQ] - stats[row, SUM] ** 2 / n, 0.0)
            total += n
    return acc / total if total > 0 else 0.0

def _is_missing_token(v) -> bool:
    if v is None:
        return True
    if isinstance(v, float) and math.isnan(v):
        return True
    return str(v).strip().lower() in MISSING_TOKENS

def _parse_float(v) -> float | None:
    if v is None:
        return None
    try:
        x = float(v)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(x) else x

def _exhaustive_sides(k: int):
    # The last category is pinned right so each bipartition shows up once.
    bits = np.arange(k)
    for mask in range(1, 2 ** (k - 1)):
        yield ((mask >> bits) & 1).astype(bool)

def _random_sides(k: int, n: int, rng):
    bits = np.arange(k)
    for _ in range(n):
        if k <= MAX_NON_BIG_CATS:
            mask = int(rng.randint(1, 2 ** k - 1))
            yield ((mask >> bits) & 1).astype(bool)
        else:
            side = rng.randint(0, 2, size=k).astype(bool)
            while side.all() or not side.any():
                side = rng.randint(0, 2, size=k).astype(bool)
            yield side


# -----------------------------------------------------------------------------
# Base column
# -----------------------------------------------------------------------------
class Feature(ABC):
    """Shared behaviour of numeric and categorical columns.

    Parameters
    ----------
    name : str
        Column name, unique within a :class:`~forestsplit.matrix.FeatureMatrix`.
    data : ndarray
        One value per case.
    missing : ndarray of bool, optional
        Missing mask aligned with ``data``; all ``False`` when omitted.
    """

    numerical: bool = False

    def __init__(self, name: str, data: np.ndarray, missing: np.ndarray | None = None):
        self.name = str(name)
        self.data = data
        if missing is None:
            missing = np.zeros(len(data), dtype=bool)
        self.missing = np.asarray(missing, dtype=bool).copy()
        if len(self.missing) != len(self.data):
            raise ValueError("missing mask must have the same length as data")

    # ------------------------------------------------------------------
    # Shape and missingness
    # ------------------------------------------------------------------
    def length(self) -> int:
        return len(self.data)

    def __len__(self) -> int:
        return len(self.data)

    def get_name(self) -> str:
        return self.name

    def is_missing(self, i: int) -> bool:
        return bool(self.missing[i])

    def missing_vals(self) -> bool:
        return bool(self.missing.any())

    def put_missing(self, i: int) -> None:
        self.missing[i] = True

    @abstractmethod
    def n_cats(self) -> int:
        """Number of categories; 0 for numeric columns."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, length={len(self)})"

    # ------------------------------------------------------------------
    # Copies and permutations
    # ------------------------------------------------------------------
    @abstractmethod
    def copy(self) -> "Feature":
        ...

    def copy_into(self, other: "Feature") -> None:
        """Overwrite ``other``'s values and mask with this column's."""
        if len(other) != len(self):
            raise ValueError(f"cannot copy {len(self)} cases into a column of {len(other)}")
        other.data[:] = self.data
        other.missing[:] = self.missing

    def shuffle(self, random_state=None) -> None:
        """Permute values in place; each value keeps its missing flag."""
        rng = check_random_state(random_state)
        perm = rng.permutation(len(self))
        self.data = self.data[perm]
        self.missing = self.missing[perm]

    def shuffle_cases(self, cases, random_state=None) -> None:
        """Permute values among ``cases`` only, leaving other cases untouched."""
        rng = check_random_state(random_state)
        cases = _as_cases(cases)
        src = rng.permutation(cases)
        self.data[cases] = self.data[src]
        self.missing[cases] = self.missing[src]

    def shuffled_copy(self, random_state=None) -> "Feature":
        fake = self.copy()
        fake.name = self.name + SHUFFLED_SUFFIX
        fake.shuffle(random_state)
        return fake

    # ------------------------------------------------------------------
    # Applying splits
    # ------------------------------------------------------------------
    def _partition(self, cases: np.ndarray, left_mask: np.ndarray):
        miss = self.missing[cases]
        left_mask = left_mask & ~miss
        return cases[left_mask], cases[~left_mask & ~miss], cases[miss]

    @abstractmethod
    def _left_mask(self, coded_split, cases: np.ndarray) -> np.ndarray:
        ...

    def split(self, coded_split, cases) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Route ``cases`` with an encoded split from this column's search."""
        cases = _as_cases(cases)
        return self._partition(cases, self._left_mask(coded_split, cases))

    def split_points(self, coded_split, cases: np.ndarray) -> tuple[int, int]:
        """Reorder ``cases`` in place as left | missing | right.

        Returns
        -------
        (last_l, first_r) : tuple of int
            ``cases[:last_l]`` goes left and ``cases[first_r:]`` goes right.
        """
        l, r, m = self.split(coded_split, cases)
        cases[:] = np.concatenate((l, m, r))
        return len(l), len(l) + len(m)

    @abstractmethod
    def goes_left(self, i: int, splitter: Splitter) -> bool:
        ...

    @abstractmethod
    def decode_split(self, coded_split) -> Splitter:
        ...

    # ------------------------------------------------------------------
    # Value access, impurity and search
    # ------------------------------------------------------------------
    @abstractmethod
    def get_str(self, i: int) -> str:
        ...

    @abstractmethod
    def put_str(self, i: int, v) -> None:
        ...

    @abstractmethod
    def append(self, v) -> None:
        ...

    @abstractmethod
    def impute_missing(self) -> None:
        ...

    @abstractmethod
    def impurity(self, cases, counter) -> float:
        ...

    @abstractmethod
    def split_impurity(self, l, r, m, allocs) -> float:
        ...

    @abstractmethod
    def update_simp_from_allocs(self, l, r, m, allocs, moved_r_to_l) -> float:
        ...

    @abstractmethod
    def find_predicted(self, cases):
        ...

    @abstractmethod
    def best_split(self, target, cases, parent_imp: float, leaf_size: int,
                   random_split: bool, allocs):
        """Find this column's best split of ``cases`` for ``target``.

        Parameters
        ----------
        target : Target
            Response whose impurity the split should reduce.
        cases : array-like of int
            Case set of the node being split.
        parent_imp : float
            ``target.impurity`` of ``cases``.
        leaf_size : int
            Minimum number of non-missing cases on each side.
        random_split : bool
            Score only a random subset of candidate splits.
        allocs : BestSplitAllocs
            Scratch buffers owned by the calling worker.

        Returns
        -------
        (coded_split, impurity_decrease, constant)
            ``coded_split`` is ``None`` when nothing beats ``MIN_IMP``.
            ``constant`` is ``True`` when the column has at most one distinct
            non-missing value over ``cases``.
        """


# -----------------------------------------------------------------------------
# Numeric column
# -----------------------------------------------------------------------------
class NumFeature(Feature):
    """Floating point column; as a response its impurity is the variance."""

    numerical = True

    def __init__(self, name: str, data=None, missing=None):
        data = np.zeros(0, dtype=float) if data is None else np.array(data, dtype=float)
        super().__init__(name, data, missing)

    @classmethod
    def from_values(cls, name: str, values) -> "NumFeature":
        """Parse raw values; anything that is not a finite-or-inf number is missing."""
        parsed = [_parse_float(v) for v in values]
        missing = np.array([p is None for p in parsed], dtype=bool)
        data = np.array([0.0 if p is None else p for p in parsed], dtype=float)
        return cls(name, data, missing)

    def copy(self) -> "NumFeature":
        return NumFeature(self.name, self.data.copy(), self.missing.copy())

    # -- values ----------------------------------------------------------
    def n_cats(self) -> int:
        return 0

    def get(self, i: int) -> float:
        return float(self.data[i])

    def put(self, i: int, v: float) -> None:
        self.data[i] = float(v)
        self.missing[i] = False

    def get_str(self, i: int) -> str:
        if self.missing[i]:
            return _NA
        return repr(float(self.data[i]))

    def put_str(self, i: int, v) -> None:
        x = _parse_float(v)
        if x is None:
            self.data[i] = 0.0
            self.missing[i] = True
        else:
            self.put(i, x)

    def append(self, v) -> None:
        x = _parse_float(v)
        self.data = np.append(self.data, 0.0 if x is None else x)
        self.missing = np.append(self.missing, x is None)

    def _known(self, cases) -> np.ndarray:
        cases = _as_cases(cases)
        return cases[~self.missing[cases]]

    # -- statistics ------------------------------------------------------
    def less(self, i: int, j: int) -> bool:
        return bool(self.data[i] < self.data[j])

    def norm(self, i: int, v: float) -> float:
        return abs(float(self.data[i]) - v)

    def span(self, cases) -> float:
        v = self.data[self._known(cases)]
        if v.size == 0:
            return 0.0
        lo, hi = v.min(), v.max()
        # equal infinities would give inf - inf = nan
        return 0.0 if lo == hi else float(hi - lo)

    def mean(self, cases) -> float:
        v = self.data[self._known(cases)]
        if v.size == 0:
            return 0.0
        return float(v.mean())

    def predicted(self, cases) -> float:
        return self.mean(cases)

    def error(self, cases, predicted: float) -> float:
        """Mean squared error of the known values against ``predicted``."""
        v = self.data[self._known(cases)]
        if v.size == 0:
            return 0.0
        d = v - predicted
        return float(np.mean(d * d))

    def find_predicted(self, cases) -> float:
        return self.predicted(cases)

    def impute_missing(self) -> None:
        if not self.missing.any() or self.missing.all():
            return
        self.data[self.missing] = float(self.data[~self.missing].mean())
        self.missing[:] = False

    # -- impurity as a regression response -------------------------------
    def impurity(self, cases, counter=None) -> float:
        return self.error(cases, self.mean(cases))

    def _stats_into(self, cases, row: np.ndarray, shift: float) -> None:
        v = self.data[self._known(cases)] - shift
        row[COUNT] = v.size
        row[SUM] = v.sum()
        row[SUMSQ] = np.dot(v, v)

    def split_impurity(self, l, r, m, allocs) -> float:
        # Sums are taken about the node mean so that offsets do not cancel.
        allocs.shift = self.mean(np.concatenate((_as_cases(l), _as_cases(r), _as_cases(m))))
        self._stats_into(l, allocs.stats[LEFT], allocs.shift)
        self._stats_into(r, allocs.stats[RIGHT], allocs.shift)
        self._stats_into(m, allocs.stats[MISSING], allocs.shift)
        return _split_variance(allocs.stats)

    def update_simp_from_allocs(self, l, r, m, allocs, moved_r_to_l) -> float:
        v = self.data[self._known(moved_r_to_l)] - allocs.shift
        delta = np.array([v.size, v.sum(), np.dot(v, v)])
        allocs.stats[LEFT] += delta
        allocs.stats[RIGHT] -= delta
        return _split_variance(allocs.stats)

    # -- search ----------------------------------------------------------
    def _left_mask(self, coded_split: NumericSplit, cases: np.ndarray) -> np.ndarray:
        return self.data[cases] <= coded_split.threshold

    def goes_left(self, i: int, splitter: Splitter) -> bool:
        return (not self.missing[i]) and bool(self.data[i] <= splitter.value)

    def decode_split(self, coded_split: NumericSplit) -> Splitter:
        return Splitter(self.name, True, float(coded_split.threshold))

    def best_split(self, target, cases, parent_imp, leaf_size, random_split, allocs):
        cases = _as_cases(cases)
        miss = self.missing[cases]
        known, m = cases[~miss], cases[miss]
        if known.size == 0 or self.span(known) < CONSTANT_CUTOFF:
            return None, MIN_IMP, True
        leaf_size = max(int(leaf_size), 1)
        n = known.size
        if n < 2 * leaf_size:
            return None, MIN_IMP, False

        sorted_cases = allocs.case_buffer(n)
        np.take(known, np.argsort(self.data[known], kind="mergesort"), out=sorted_cases)
        vals = self.data[sorted_cases]

        # Boundary i puts sorted_cases[:i] left and sorted_cases[i:] right.
        bounds = np.arange(leaf_size, n - leaf_size + 1)
        bounds = bounds[vals[bounds - 1] < vals[bounds]]
        if bounds.size == 0:
            return None, MIN_IMP, False
        if random_split and bounds.size > RANDOM_SPLIT_DRAWS:
            bounds = np.sort(allocs.rng.choice(bounds, RANDOM_SPLIT_DRAWS, replace=False))

        best, best_i, last = MIN_IMP, -1, -1
        for i in bounds:
            l, r = sorted_cases[:i], sorted_cases[i:]
            if last < 0:
                inner = target.split_impurity(l, r, m, allocs)
            else:
                inner = target.update_simp_from_allocs(l, r, m, allocs, sorted_cases[last:i])
            last = i
            dec = parent_imp - inner
            if dec > best:
                best, best_i = dec, i
        if best_i < 0:
            return None, MIN_IMP, False

        lo, hi = vals[best_i - 1], vals[best_i]
        thr = 0.5 * (lo + hi)
        if not lo <= thr < hi:
            thr = lo
        return NumericSplit(float(thr)), float(best), False


# -----------------------------------------------------------------------------
# Categorical column
# -----------------------------------------------------------------------------
class CatFeature(Feature):
    """Integer coded column; as a response its impurity is Gini impurity.

    Missing entries hold the placeholder code 0 and are never counted.
    """

    numerical = False

    def __init__(self, name: str, data=None, missing=None, encoder: CatMap | None = None):
        data = np.zeros(0, dtype=np.intp) if data is None else np.array(data, dtype=np.intp)
        super().__init__(name, data, missing)
        self.encoder = encoder if encoder is not None else CatMap()

    @classmethod
    def from_values(cls, name: str, values) -> "CatFeature":
        """Encode raw values; ``None``, NaN and the missing tokens become missing."""
        f = cls(name)
        codes, missing = [], []
        for v in values:
            if _is_missing_token(v):
                codes.append(0)
                missing.append(True)
            else:
                codes.append(f.encoder.cat_to_num(str(v)))
                missing.append(False)
        f.data = np.array(codes, dtype=np.intp)
        f.missing = np.array(missing, dtype=bool)
        return f

    def copy(self) -> "CatFeature":
        return CatFeature(self.name, self.data.copy(), self.missing.copy(), self.encoder.copy())

    # -- values ----------------------------------------------------------
    def n_cats(self) -> int:
        return self.encoder.n_cats()

    def cat_to_num(self, value: str) -> int:
        return self.encoder.cat_to_num(value)

    def num_to_cat(self, i: int) -> str:
        return self.encoder.num_to_cat(i)

    def geti(self, i: int) -> int:
        return int(self.data[i])

    def puti(self, i: int, v: int) -> None:
        if v < 0 or v >= self.n_cats():
            raise ValueError(f"code {v} out of range for {self.n_cats()} categories")
        self.data[i] = v
        self.missing[i] = False

    def get_str(self, i: int) -> str:
        if self.missing[i]:
            return _NA
        return self.encoder.num_to_cat(int(self.data[i]))

    def put_str(self, i: int, v) -> None:
        if _is_missing_token(v):
            self.data[i] = 0
            self.missing[i] = True
        else:
            self.data[i] = self.encoder.cat_to_num(str(v))
            self.missing[i] = False

    def append(self, v) -> None:
        miss = _is_missing_token(v)
        code = 0 if miss else self.encoder.cat_to_num(str(v))
        self.data = np.append(self.data, code)
        self.missing = np.append(self.missing, miss)

    def _known(self, cases) -> np.ndarray:
        cases = _as_cases(cases)
        return cases[~self.missing[cases]]

    # -- counting --------------------------------------------------------
    def count_per_cat(self, cases, counter: np.ndarray) -> None:
        """Write per-category counts of the known ``cases`` into ``counter``."""
        n = self.n_cats()
        counter[:] = 0
        counter[:n] += np.bincount(self.data[self._known(cases)], minlength=n)

    def move_counts_r_to_l(self, allocs, moved_r_to_l) -> None:
        n = self.n_cats()
        moved = np.bincount(self.data[self._known(moved_r_to_l)], minlength=n)
        allocs.counters[LEFT, :n] += moved
        allocs.counters[RIGHT, :n] -= moved

    def distinct_cats(self, cases, counter: np.ndarray) -> int:
        self.count_per_cat(cases, counter)
        return int(np.count_nonzero(counter))

    def modei(self, cases) -> int:
        """Most frequent code among the known ``cases``; -1 if there are none."""
        codes = self.data[self._known(cases)]
        if codes.size == 0:
            return -1
        return int(np.argmax(np.bincount(codes, minlength=self.n_cats())))

    def mode(self, cases) -> str | None:
        code = self.modei(cases)
        return None if code < 0 else self.encoder.num_to_cat(code)

    def find_predicted(self, cases) -> str | None:
        return self.mode(cases)

    def gini(self, cases) -> float:
        codes = self.data[self._known(cases)]
        return _gini(np.bincount(codes, minlength=self.n_cats()).astype(float))

    def gini_without_allocate(self, cases, counts: np.ndarray) -> float:
        self.count_per_cat(cases, counts)
        return _gini(counts)

    def impute_missing(self) -> None:
        if not self.missing.any() or self.missing.all():
            return
        self.data[self.missing] = self.modei(np.arange(len(self)))
        self.missing[:] = False

    def encode_to_num(self) -> list[NumFeature]:
        """Expand into one 0/1 indicator column per category."""
        base = self.name[2:] if self.name[1:2] == ":" else self.name
        out = []
        for code, cat in enumerate(self.encoder.back):
            data = (self.data == code).astype(float)
            out.append(NumFeature(f"{NUMERIC_PREFIX}{base}=={cat}", data, self.missing.copy()))
        return out

    # -- impurity as a classification response ---------------------------
    def _counts_impurity(self, counts: np.ndarray) -> float:
        return _gini(counts)

    def impurity(self, cases, counter) -> float:
        self.count_per_cat(cases, counter)
        return self._counts_impurity(counter)

    def split_impurity(self, l, r, m, allocs) -> float:
        self.count_per_cat(l, allocs.counters[LEFT])
        self.count_per_cat(r, allocs.counters[RIGHT])
        self.count_per_cat(m, allocs.counters[MISSING])
        return _weighted_impurity(allocs.counters, self._counts_impurity)

    def update_simp_from_allocs(self, l, r, m, allocs, moved_r_to_l) -> float:
        self.move_counts_r_to_l(allocs, moved_r_to_l)
        return _weighted_impurity(allocs.counters, self._counts_impurity)

    # -- search ----------------------------------------------------------
    def _left_mask(self, coded_split: CategoricalSplit, cases: np.ndarray) -> np.ndarray:
        return np.isin(self.data[cases], list(coded_split.left))

    def goes_left(self, i: int, splitter: Splitter) -> bool:
        return (not self.missing[i]) and self.get_str(i) in splitter.left

    def decode_split(self, coded_split: CategoricalSplit) -> Splitter:
        left = frozenset(self.encoder.num_to_cat(c) for c in coded_split.left)
        return Splitter(self.name, False, left=left)

    def best_split(self, target, cases, parent_imp, leaf_size, random_split, allocs):
        cases = _as_cases(cases)
        miss = self.missing[cases]
        known, m = cases[~miss], cases[miss]
        if known.size == 0:
            return None, MIN_IMP, True
        self.count_per_cat(known, allocs.counter)
        present = np.flatnonzero(allocs.counter[:self.n_cats()])
        k = present.size
        if k < 2:
            return None, MIN_IMP, True
        leaf_size = max(int(leaf_size), 1)
        if known.size < 2 * leaf_size:
            return None, MIN_IMP, False

        # pos[j] is the index into ``present`` of known[j]'s category.
        pos = np.searchsorted(present, self.data[known])
        if k <= MAX_EXHAUSTIVE_CATS:
            sides = _exhaustive_sides(k)
        elif k <= MAX_NON_RANDOM_EXHAUSTIVE and not random_split:
            return self._best_cat_split_iter(target, known, m, pos, present,
                                             parent_imp, leaf_size, allocs)
        else:
            n_draws = min(2 ** (k - 1) - 1,
                          RANDOM_SPLIT_DRAWS if random_split else RANDOM_PARTITIONS)
            logger.debug("%s: sampling %d bipartitions of %d categories", self.name, n_draws, k)
            sides = _random_sides(k, n_draws, allocs.rng)

        best, best_side = MIN_IMP, None
        for side in sides:
            in_left = side[pos]
            l, r = known[in_left], known[~in_left]
            if l.size < leaf_size or r.size < leaf_size:
                continue
            dec = parent_imp - target.split_impurity(l, r, m, allocs)
            if dec > best:
                best, best_side = dec, side
        if best_side is None:
            return None, MIN_IMP, False
        return CategoricalSplit(frozenset(present[best_side].tolist())), float(best), False

    def _best_cat_split_iter(self, target, known, m, pos, present, parent_imp, leaf_size, allocs):
        """Greedy walk: repeatedly move the most helpful category to the left."""
        k = present.size
        order = np.argsort(pos, kind="mergesort")
        bounds = np.searchsorted(pos[order], np.arange(k + 1))
        groups = [known[order[bounds[c]:bounds[c + 1]]] for c in range(k)]

        on_left = np.zeros(k, dtype=bool)
        current = parent_imp - target.split_impurity(known[:0], known, m, allocs)
        n_left = 0
        best, best_side = MIN_IMP, None
        while on_left.sum() < k - 1:
            state = allocs.snapshot()
            round_best, round_cat = -np.inf, -1
            for c in np.flatnonzero(~on_left):
                on_left[c] = True
                in_left = on_left[pos]
                on_left[c] = False
                dec = parent_imp - target.update_simp_from_allocs(
                    known[in_left], known[~in_left], m, allocs, groups[c])
                allocs.restore(state)
                if dec > round_best:
                    round_best, round_cat = dec, c
            if not round_best > current:
                break
            on_left[round_cat] = True
            in_left = on_left[pos]
            current = parent_imp - target.update_simp_from_allocs(
                known[in_left], known[~in_left], m, allocs, groups[round_cat])
            n_left += groups[round_cat].size
            if n_left >= leaf_size and known.size - n_left >= leaf_size and current > best:
                best, best_side = current, on_left.copy()
        if best_side is None:
            return None, MIN_IMP, False
        return CategoricalSplit(frozenset(present[best_side].tolist())), float(best), False
