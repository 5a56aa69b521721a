"""
forestsplit.targets
===================

Response variables as seen by split search.

A :class:`Target` exposes only what the search needs: a node impurity, the
impurity of a left/right/missing partition, the incremental update used when
cases move from right to left, and the prediction for a case set.  Targets
borrow the column they wrap and never modify it; boosting targets keep their
own weights or residuals and update those between trees.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import numpy as np

from .allocs import LEFT, MISSING, RIGHT
from .features import CatFeature, NumFeature, _entropy, _gini, _weighted_impurity

logger = logging.getLogger(__name__)


class Target(ABC):
    """Impurity and prediction contract shared by every response type."""

    def __init__(self, feature):
        self.feature = feature

    def get_name(self) -> str:
        return self.feature.get_name()

    @abstractmethod
    def n_cats(self) -> int:
        """Category count of the response, 0 for numeric responses."""

    @abstractmethod
    def impurity(self, cases, counter) -> float:
        ...

    @abstractmethod
    def split_impurity(self, l, r, m, allocs) -> float:
        """Case weighted impurity of the three partitions.

        Leaves the per-partition state in ``allocs`` so that
        :meth:`update_simp_from_allocs` can continue from it.
        """

    @abstractmethod
    def update_simp_from_allocs(self, l, r, m, allocs, moved_r_to_l) -> float:
        """Split impurity after ``moved_r_to_l`` moved from ``r`` to ``l``.

        ``l`` and ``r`` are the partitions after the move.  Requires the state
        left in ``allocs`` by the previous :meth:`split_impurity` or update.
        """

    @abstractmethod
    def find_predicted(self, cases):
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.get_name()!r})"


class BoostingTarget(Target):
    """Target that adapts itself after each tree of a boosted ensemble."""

    @abstractmethod
    def boost(self, partition) -> float:
        """Take the leaves of a finished tree and return that tree's weight.

        Parameters
        ----------
        partition : list of array-like of int
            Case sets of the tree's leaves.
        """


# -----------------------------------------------------------------------------
# Classification
# -----------------------------------------------------------------------------
class GiniTarget(Target):
    """Classification by Gini impurity of a :class:`CatFeature`."""

    def __init__(self, feature: CatFeature):
        super().__init__(feature)

    def n_cats(self) -> int:
        return self.feature.n_cats()

    def impurity(self, cases, counter) -> float:
        return self.feature.impurity(cases, counter)

    def split_impurity(self, l, r, m, allocs) -> float:
        return self.feature.split_impurity(l, r, m, allocs)

    def update_simp_from_allocs(self, l, r, m, allocs, moved_r_to_l) -> float:
        return self.feature.update_simp_from_allocs(l, r, m, allocs, moved_r_to_l)

    def find_predicted(self, cases):
        return self.feature.find_predicted(cases)


class EntropyTarget(GiniTarget):
    """Classification by Shannon entropy (bits) instead of Gini impurity."""

    def impurity(self, cases, counter) -> float:
        self.feature.count_per_cat(cases, counter)
        return _entropy(counter)

    def split_impurity(self, l, r, m, allocs) -> float:
        f = self.feature
        f.count_per_cat(l, allocs.counters[LEFT])
        f.count_per_cat(r, allocs.counters[RIGHT])
        f.count_per_cat(m, allocs.counters[MISSING])
        return _weighted_impurity(allocs.counters, _entropy)

    def update_simp_from_allocs(self, l, r, m, allocs, moved_r_to_l) -> float:
        self.feature.move_counts_r_to_l(allocs, moved_r_to_l)
        return _weighted_impurity(allocs.counters, _entropy)


class AdaBoostTarget(GiniTarget, BoostingTarget):
    """Weighted Gini target for AdaBoost style reweighting.

    Every case starts with weight 1.  After each tree :meth:`boost` raises the
    weight of the cases the tree misclassified and rescales the weights to
    sum to the number of cases.
    """

    def __init__(self, feature: CatFeature):
        super().__init__(feature)
        self.weights = np.ones(len(feature), dtype=float)

    def _weighted_counts(self, cases, counter: np.ndarray) -> None:
        f = self.feature
        known = f._known(cases)
        n = f.n_cats()
        counter[:] = 0
        counter[:n] += np.bincount(f.data[known], weights=self.weights[known], minlength=n)

    def impurity(self, cases, counter) -> float:
        self._weighted_counts(cases, counter)
        return _gini(counter)

    def split_impurity(self, l, r, m, allocs) -> float:
        self._weighted_counts(l, allocs.counters[LEFT])
        self._weighted_counts(r, allocs.counters[RIGHT])
        self._weighted_counts(m, allocs.counters[MISSING])
        return _weighted_impurity(allocs.counters, _gini)

    def update_simp_from_allocs(self, l, r, m, allocs, moved_r_to_l) -> float:
        f = self.feature
        known = f._known(moved_r_to_l)
        n = f.n_cats()
        moved = np.bincount(f.data[known], weights=self.weights[known], minlength=n)
        allocs.counters[LEFT, :n] += moved
        allocs.counters[RIGHT, :n] -= moved
        return _weighted_impurity(allocs.counters, _gini)

    def _modei(self, cases) -> int:
        f = self.feature
        known = f._known(cases)
        if known.size == 0:
            return -1
        counts = np.bincount(f.data[known], weights=self.weights[known], minlength=f.n_cats())
        return int(np.argmax(counts))

    def find_predicted(self, cases):
        code = self._modei(cases)
        return None if code < 0 else self.feature.num_to_cat(code)

    def boost(self, partition) -> float:
        f = self.feature
        incorrect = np.zeros(len(f), dtype=bool)
        covered = []
        for leaf in partition:
            known = f._known(leaf)
            covered.append(known)
            pred = self._modei(known)
            incorrect[known] = f.data[known] != pred
        if not covered:
            return 0.0
        covered = np.unique(np.concatenate(covered))
        w = self.weights[covered]
        if w.sum() <= 0:
            return 0.0
        err = float(np.sum(w * incorrect[covered]) / w.sum())

        eps = 1e-10
        if err <= eps:
            return 10.0
        if err >= 0.5:
            logger.debug("AdaBoostTarget %s: tree error %.4f, weights left unchanged", self.get_name(), err)
            return 0.0
        K = f.n_cats()
        if K > 2:
            alpha = np.log((1 - err) / err) + np.log(K - 1)
        else:
            alpha = 0.5 * np.log((1 - err) / err)
        self.weights[covered] *= np.exp(alpha * incorrect[covered])
        self.weights *= len(self.weights) / self.weights.sum()
        return float(alpha)


# -----------------------------------------------------------------------------
# Regression
# -----------------------------------------------------------------------------
class RegressionTarget(Target):
    """Regression by variance of a :class:`NumFeature`."""

    def __init__(self, feature: NumFeature):
        super().__init__(feature)

    def n_cats(self) -> int:
        return 0

    def impurity(self, cases, counter=None) -> float:
        return self.feature.impurity(cases, counter)

    def split_impurity(self, l, r, m, allocs) -> float:
        return self.feature.split_impurity(l, r, m, allocs)

    def update_simp_from_allocs(self, l, r, m, allocs, moved_r_to_l) -> float:
        return self.feature.update_simp_from_allocs(l, r, m, allocs, moved_r_to_l)

    def find_predicted(self, cases):
        return self.feature.find_predicted(cases)


class L1Target(RegressionTarget):
    """Regression by mean absolute deviation from the mean.

    Absolute deviations have no running-sum form, so updates recompute from
    the partitions.
    """

    def _mad(self, cases) -> float:
        f = self.feature
        v = f.data[f._known(cases)]
        if v.size == 0:
            return 0.0
        return float(np.mean(np.abs(v - v.mean())))

    def impurity(self, cases, counter=None) -> float:
        return self._mad(cases)

    def split_impurity(self, l, r, m, allocs) -> float:
        f = self.feature
        total, acc = 0, 0.0
        for part in (l, r, m):
            n = f._known(part).size
            if n:
                acc += n * self._mad(part)
                total += n
        return acc / total if total else 0.0

    def update_simp_from_allocs(self, l, r, m, allocs, moved_r_to_l) -> float:
        return self.split_impurity(l, r, m, allocs)


class GradBoostTarget(RegressionTarget, BoostingTarget):
    """Least squares gradient boosting.

    The target works on its own residual column, initialised to the response
    minus its mean; the response column itself is never touched.

    Parameters
    ----------
    feature : NumFeature
        Response column.
    learning_rate : float, default=0.1
        Shrinkage applied to each leaf's mean residual.
    """

    def __init__(self, feature: NumFeature, learning_rate: float = 0.1):
        if not 0.0 < learning_rate <= 1.0:
            raise ValueError("learning_rate must be in (0, 1]")
        self.response = feature
        self.learning_rate = float(learning_rate)
        self.initial = feature.mean(np.arange(len(feature)))
        residual = feature.copy()
        residual.data[~residual.missing] -= self.initial
        super().__init__(residual)

    def get_name(self) -> str:
        return self.response.get_name()

    def boost(self, partition) -> float:
        f = self.feature
        for leaf in partition:
            known = f._known(leaf)
            if known.size == 0:
                continue
            pred = f.data[known].mean()
            f.data[np.unique(known)] -= self.learning_rate * pred
        return self.learning_rate


def target_for(feature) -> Target:
    """Default target for a column: Gini for categorical, variance for numeric."""
    if isinstance(feature, CatFeature):
        return GiniTarget(feature)
    if isinstance(feature, NumFeature):
        return RegressionTarget(feature)
    raise ValueError(f"no default target for {type(feature).__name__}")
