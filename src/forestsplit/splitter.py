"""
forestsplit.splitter
====================

Split representations.

A column's search hands back an *encoded* split, a small value that only makes
sense next to the column that produced it (a threshold, or a set of integer
category codes).  ``Feature.decode_split`` turns it into a :class:`Splitter`,
which carries everything needed to route a case by value or by category
string, so it can be applied to any column with the same name, including one
from a different matrix with its own category coding.
"""
from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class NumericSplit:
    """Cases with ``value <= threshold`` go left."""
    threshold: float


@dataclass(frozen=True)
class CategoricalSplit:
    """Cases whose category code is in ``left`` go left."""
    left: frozenset


@dataclass(frozen=True)
class Splitter:
    """Decoded, directly applicable routing rule.

    Parameters
    ----------
    feature : str
        Name of the column the rule tests.
    numerical : bool
        ``True`` for a threshold rule, ``False`` for a category subset rule.
    value : float
        Threshold for numeric rules; ``nan`` otherwise.
    left : frozenset[str]
        Category strings routed left for categorical rules; empty otherwise.
    """
    feature: str
    numerical: bool
    value: float = float("nan")
    left: frozenset = frozenset()

    def _left_mask(self, f, cases: np.ndarray) -> np.ndarray:
        if self.numerical:
            return f.data[cases] <= self.value
        # Re-resolve strings through the column's own coding.
        codes = [f.encoder.map[s] for s in self.left if s in f.encoder]
        return np.isin(f.data[cases], codes)

    def split(self, fm, cases) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Partition ``cases`` into left, right and missing using ``fm``'s column.

        Parameters
        ----------
        fm : FeatureMatrix
            Matrix holding a column named :attr:`feature`.
        cases : array-like of int
            Case indices to route.

        Returns
        -------
        tuple of ndarray
            ``(left, right, missing)`` case indices, each in input order.
        """
        f = fm.feature(self.feature)
        cases = np.asarray(cases, dtype=np.intp)
        miss = f.missing[cases]
        goes_left = self._left_mask(f, cases) & ~miss
        goes_right = ~goes_left & ~miss
        return cases[goes_left], cases[goes_right], cases[miss]

    def goes_left(self, fm, i: int) -> bool:
        f = fm.feature(self.feature)
        return f.goes_left(i, self)

    def describe(self) -> str:
        if self.numerical:
            return f"{self.feature} <= {self.value:.4f}"
        S = "{" + ", ".join(sorted(self.left)) + "}"
        return f"{self.feature} IN {S}"

    def __str__(self) -> str:
        return self.describe()
