# forestsplit/__init__.py
"""
forestsplit: split search and impurity evaluation for random forests.

Exports:
    - FeatureMatrix, parse_afm, load_afm
    - NumFeature, CatFeature, CatMap
    - GiniTarget, EntropyTarget, RegressionTarget, L1Target,
      AdaBoostTarget, GradBoostTarget, target_for
    - BestSplitAllocs, Splitter
"""
from .allocs import BestSplitAllocs
from .encoder import CatMap
from .features import CatFeature, Feature, NumFeature
from .matrix import FeatureMatrix, load_afm, parse_afm, parse_feature
from .splitter import CategoricalSplit, NumericSplit, Splitter
from .targets import (
    AdaBoostTarget,
    BoostingTarget,
    EntropyTarget,
    GiniTarget,
    GradBoostTarget,
    L1Target,
    RegressionTarget,
    Target,
    target_for,
)

__all__ = [
    "AdaBoostTarget",
    "BestSplitAllocs",
    "BoostingTarget",
    "CatFeature",
    "CatMap",
    "CategoricalSplit",
    "EntropyTarget",
    "Feature",
    "FeatureMatrix",
    "GiniTarget",
    "GradBoostTarget",
    "L1Target",
    "NumFeature",
    "NumericSplit",
    "RegressionTarget",
    "Splitter",
    "Target",
    "load_afm",
    "parse_afm",
    "parse_feature",
    "target_for",
]
__version__ = "0.1.0"
