# -*- coding: utf-8 -*-
"""
forestsplit.matrix
==================

:class:`FeatureMatrix` is an ordered collection of columns with a name index
and per-case labels.  It runs the best split search across a candidate subset
of its columns, injects shuffled *contrast* columns used to judge whether an
importance score is better than chance, and imputes missing values.

The module also holds a small reader for annotated feature matrices (AFM):
tab separated text with one column per case and one row per feature.  The
first field of the header row is ignored and the rest are case labels; the
first field of every other row is the feature name, and a name starting with
``N:`` marks a numeric feature while anything else is categorical.
"""
from __future__ import annotations

import csv
import logging
from typing import Iterable, Mapping

import numpy as np
from sklearn.utils import check_random_state

from .config import MIN_IMP, NUMERIC_PREFIX, SHUFFLED_SUFFIX
from .features import CatFeature, Feature, NumFeature
from .splitter import Splitter

logger = logging.getLogger(__name__)


class FeatureMatrix:
    """Columns of a dataset plus a ``name -> position`` index.

    Parameters
    ----------
    data : list[Feature], optional
        Columns, all of the same length.
    case_labels : list[str], optional
        One label per case.

    Attributes
    ----------
    data : list[Feature]
    map : dict[str, int]
        Position of every column in :attr:`data`; kept in sync by
        :meth:`append`.
    case_labels : list[str]
    """

    def __init__(self, data: Iterable[Feature] | None = None,
                 case_labels: list[str] | None = None):
        self.data: list[Feature] = []
        self.map: dict[str, int] = {}
        self.case_labels: list[str] = list(case_labels) if case_labels is not None else []
        for f in data or []:
            self.append(f)

    @classmethod
    def from_columns(cls, columns: Mapping[str, Iterable], categorical: Iterable[str] = (),
                     case_labels: list[str] | None = None) -> "FeatureMatrix":
        """Build a matrix from raw column values.

        Parameters
        ----------
        columns : mapping of str to array-like
            Column name to values, in column order.
        categorical : iterable of str, default=()
            Names of categorical columns.  All other columns are numeric.
        case_labels : list[str], optional
            Defaults to the case indices as strings.
        """
        cats = set(categorical)
        unknown = cats - set(columns)
        if unknown:
            raise ValueError(f"categorical columns not found: {sorted(unknown)}")
        feats = [CatFeature.from_values(name, values) if name in cats
                 else NumFeature.from_values(name, values)
                 for name, values in columns.items()]
        if case_labels is None and feats:
            case_labels = [str(i) for i in range(len(feats[0]))]
        return cls(feats, case_labels)

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------
    def __len__(self) -> int:
        return len(self.data)

    def __repr__(self) -> str:
        return f"FeatureMatrix(n_features={len(self)}, n_cases={self.n_cases()})"

    def n_cases(self) -> int:
        if self.data:
            return len(self.data[0])
        return len(self.case_labels)

    def feature(self, name: str) -> Feature:
        return self.data[self.map[name]]

    def max_cats(self) -> int:
        return max((f.n_cats() for f in self.data), default=0)

    def append(self, feature: Feature) -> None:
        """Add a column, registering it in :attr:`map` at its new position."""
        if self.data and len(feature) != self.n_cases():
            raise ValueError(f"feature {feature.name!r} has {len(feature)} cases, "
                             f"expected {self.n_cases()}")
        if feature.name in self.map:
            raise ValueError(f"duplicate feature name {feature.name!r}")
        self.map[feature.name] = len(self.data)
        self.data.append(feature)

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------
    def best_splitter(self, target, cases, candidates, allocs, leaf_size: int = 1,
                      random_split: bool = False, constants: list | None = None
                      ) -> tuple[Splitter | None, float]:
        """Find the best split of ``cases`` among the ``candidates`` columns.

        Parameters
        ----------
        target : Target
            Response to reduce the impurity of.
        cases : array-like of int
            Case set of the node.
        candidates : iterable of int
            Positions in :attr:`data` of the columns to try.
        allocs : BestSplitAllocs
            Scratch buffers of the calling worker.
        leaf_size : int, default=1
            Minimum number of non-missing cases on each side of a split.
        random_split : bool, default=False
            Extremely randomized search: score only a random subset of each
            column's candidate splits.
        constants : list, optional
            When given, positions of candidates found constant over ``cases``
            are appended to it.

        Returns
        -------
        (splitter, impurity_decrease)
            ``splitter`` is ``None`` when no candidate decreases impurity by
            more than ``MIN_IMP``; the first of equally good candidates wins.
        """
        cases = np.asarray(cases, dtype=np.intp)
        parent_imp = target.impurity(cases, allocs.counter)

        best, best_f, best_split = MIN_IMP, None, None
        for i in candidates:
            f = self.data[i]
            split, dec, constant = f.best_split(target, cases, parent_imp, leaf_size,
                                                random_split, allocs)
            if constant and constants is not None:
                constants.append(i)
            if dec > MIN_IMP and dec > best:
                best, best_f, best_split = dec, f, split

        if best_f is None:
            logger.debug("best_splitter: no split of %d cases beats %g", cases.size, MIN_IMP)
            return None, MIN_IMP
        splitter = best_f.decode_split(best_split)
        logger.debug("best_splitter: %s decreases %s impurity by %.6g",
                     splitter.describe(), target.get_name(), best)
        return splitter, best

    # ------------------------------------------------------------------
    # Contrasts and imputation
    # ------------------------------------------------------------------
    def _append_contrast(self, orig: Feature, rng) -> None:
        fake = orig.shuffled_copy(rng)
        base, j = fake.name, 2
        while fake.name in self.map:
            fake.name = f"{base}{j}"
            j += 1
        self.append(fake)

    def add_contrasts(self, n: int, random_state=None) -> None:
        """Append ``n`` shuffled copies of columns drawn with replacement.

        Each copy is named ``<name>:SHUFFLED`` (a counter is appended when
        that name is taken).  Shuffling keeps a column's values and missing
        flags together and only breaks their link to the cases.
        """
        if n < 0:
            raise ValueError("n must be non-negative")
        if n and not self.data:
            raise ValueError("cannot add contrasts to an empty matrix")
        rng = check_random_state(random_state)
        n_real = len(self.data)
        for _ in range(n):
            self._append_contrast(self.data[rng.randint(n_real)], rng)

    def contrast_all(self, random_state=None) -> None:
        """Append one shuffled copy of every column, in column order."""
        rng = check_random_state(random_state)
        for i in range(len(self.data)):
            self._append_contrast(self.data[i], rng)

    def impute_missing(self) -> None:
        """Fill missing values with each column's mean (numeric) or mode (categorical)."""
        for f in self.data:
            f.impute_missing()

    def encode_to_num(self) -> "FeatureMatrix":
        """Copy of this matrix with categorical columns expanded one-hot."""
        out = FeatureMatrix(case_labels=self.case_labels)
        for f in self.data:
            if isinstance(f, CatFeature):
                for indicator in f.encode_to_num():
                    out.append(indicator)
            else:
                out.append(f.copy())
        return out


# -----------------------------------------------------------------------------
# AFM reader
# -----------------------------------------------------------------------------
def parse_feature(record: list[str]) -> Feature:
    """Build a column from an AFM row: name first, then one value per case."""
    name = record[0]
    if name[:2] == NUMERIC_PREFIX:
        return NumFeature.from_values(name, record[1:])
    return CatFeature.from_values(name, record[1:])


def parse_afm(stream) -> FeatureMatrix:
    """Read an AFM from a text stream.

    Malformed input never raises: cell values that do not parse become
    missing, and a row of the wrong width (or a csv error) is logged and
    ends the read, keeping the rows parsed before it.
    """
    reader = csv.reader(stream, delimiter="\t")
    try:
        headers = next(reader)
    except StopIteration:
        return FeatureMatrix()
    except csv.Error as e:
        logger.error("Error reading AFM header: %s", e)
        return FeatureMatrix()
    fm = FeatureMatrix(case_labels=headers[1:])

    while True:
        try:
            record = next(reader)
        except StopIteration:
            break
        except csv.Error as e:
            logger.error("Error reading AFM line %d: %s", reader.line_num, e)
            break
        if not record:
            continue
        if len(record) != len(headers):
            logger.error("Error reading AFM line %d: %d fields, expected %d",
                         reader.line_num, len(record), len(headers))
            break
        try:
            fm.append(parse_feature(record))
        except ValueError as e:
            logger.error("Error reading AFM line %d: %s", reader.line_num, e)
            break
    return fm


def load_afm(path: str) -> FeatureMatrix:
    with open(path, newline="") as fh:
        return parse_afm(fh)
