"""Closed enumerations shared across the dispatcher.

Methods, properties and enum-valued options are matched against these sets;
the string values are the names used on the command protocol.
"""

from __future__ import annotations

from enum import Enum

# =============================================================================
# Command protocol
# =============================================================================


class Method(str, Enum):
    """Operations understood by the dispatcher."""

    NEW = "new"
    DELETE = "delete"
    CLEAR = "clear"
    LOAD = "load"
    SAVE = "save"
    EMPTY = "empty"
    IS_TRAINED = "isTrained"
    IS_CLASSIFIER = "isClassifier"
    GET_VAR_COUNT = "getVarCount"
    GET_DEFAULT_NAME = "getDefaultName"
    TRAIN = "train"
    CALC_ERROR = "calcError"
    PREDICT = "predict"
    GET_NODES = "getNodes"
    GET_ROOTS = "getRoots"
    GET_SPLITS = "getSplits"
    GET_SUBSETS = "getSubsets"
    GET = "get"
    SET = "set"


class Property(str, Enum):
    """Hyperparameters reachable through ``get``/``set``."""

    CV_FOLDS = "CVFolds"
    MAX_CATEGORIES = "MaxCategories"
    MAX_DEPTH = "MaxDepth"
    MIN_SAMPLE_COUNT = "MinSampleCount"
    PRIORS = "Priors"
    REGRESSION_ACCURACY = "RegressionAccuracy"
    TRUNCATE_PRUNED_TREE = "TruncatePrunedTree"
    USE_1SE_RULE = "Use1SERule"
    USE_SURROGATES = "UseSurrogates"
    BOOST_TYPE = "BoostType"
    WEAK_COUNT = "WeakCount"
    WEIGHT_TRIM_RATE = "WeightTrimRate"


# =============================================================================
# Model enums
# =============================================================================


class BoostType(str, Enum):
    """Boosting variant.

    - ``Discrete``: Discrete AdaBoost.
    - ``Real``: Real AdaBoost, weak learners output class-probability scores.
    - ``Logit``: LogitBoost.
    - ``Gentle``: Gentle AdaBoost, down-weights outliers.
    """

    DISCRETE = "Discrete"
    REAL = "Real"
    LOGIT = "Logit"
    GENTLE = "Gentle"

    @property
    def code(self) -> int:
        """Integer code used by the model library."""
        return _BOOST_CODES[self]

    @classmethod
    def from_code(cls, code: int) -> BoostType:
        """Map a library code back to its enum member."""
        for member, value in _BOOST_CODES.items():
            if value == code:
                return member
        raise ValueError(f"Unknown boost type code: {code}")


_BOOST_CODES: dict[BoostType, int] = {
    BoostType.DISCRETE: 0,
    BoostType.REAL: 1,
    BoostType.LOGIT: 2,
    BoostType.GENTLE: 3,
}


class SampleLayout(str, Enum):
    """Whether samples are stored as matrix rows or columns."""

    ROW = "Row"
    COL = "Col"

    @property
    def code(self) -> int:
        """Integer code used by the model library."""
        return 0 if self is SampleLayout.ROW else 1


class VarType(str, Enum):
    """Type of an input or response variable."""

    NUMERICAL = "Numerical"
    ORDERED = "Ordered"
    CATEGORICAL = "Categorical"

    @property
    def code(self) -> int:
        """Integer code used by the model library (numerical and ordered share 0)."""
        return 1 if self is VarType.CATEGORICAL else 0


__all__ = [
    "BoostType",
    "Method",
    "Property",
    "SampleLayout",
    "VarType",
]
