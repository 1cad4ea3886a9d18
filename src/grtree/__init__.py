# grtree/__init__.py
"""
grtree: gain-ratio decision trees for categorical data.

Exports:
    - build, predict, DecisionTree, Leaf, Stage
    - GainRatioTreeClassifier (scikit-learn style)
    - TreeConfig
    - the error types of grtree.exceptions
"""
from .config import TreeConfig
from .exceptions import (
    AttributeIndexOutOfRangeError,
    EmptyDatasetError,
    InconsistentRecordShapeError,
    TreeError,
    UnseenCategoryError,
)
from .tree import (
    DecisionTree,
    GainRatioTreeClassifier,
    Leaf,
    Stage,
    build,
    clearance,
    entropy,
    gain_ratio,
    predict,
    select_attribute,
    split_by_attribute,
)

__all__ = [
    "AttributeIndexOutOfRangeError",
    "DecisionTree",
    "EmptyDatasetError",
    "GainRatioTreeClassifier",
    "InconsistentRecordShapeError",
    "Leaf",
    "Stage",
    "TreeConfig",
    "TreeError",
    "UnseenCategoryError",
    "build",
    "clearance",
    "entropy",
    "gain_ratio",
    "predict",
    "select_attribute",
    "split_by_attribute",
]
__version__ = "0.1.0"
