"""Hyperparameter table for ``get``/``set``.

Each :class:`~boostcmd.types.Property` maps to one getter and one setter on
the wrapped library model. The setter converts the host value first, so an
unconvertible value never reaches the model.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import cv2
import numpy as np

from boostcmd.errors import InvalidValueError, UnknownPropertyError
from boostcmd.marshal import to_bool, to_float, to_int, to_mat, to_str
from boostcmd.model import BoostModel
from boostcmd.types import BoostType, Property


@dataclass(frozen=True, slots=True)
class PropertySpec:
    """Accessor pair for one hyperparameter.

    ``convert`` turns a host value into what ``setter`` passes to the library;
    ``getter`` returns a host value.
    """

    getter: Callable[[cv2.ml.Boost], Any]
    setter: Callable[[cv2.ml.Boost, Any], None]
    convert: Callable[[Any], Any]


def _to_boost_type(value: Any) -> int:
    name = to_str(value, "BoostType")
    try:
        return BoostType(name).code
    except ValueError:
        valid = ", ".join(t.value for t in BoostType)
        raise InvalidValueError(f"Unrecognized BoostType {name}; expected one of {valid}") from None


def _to_priors(value: Any) -> np.ndarray:
    return to_mat(value, np.float64, what="Priors")


def _get_priors(boost: cv2.ml.Boost) -> np.ndarray:
    priors = boost.getPriors()
    return np.empty((0, 0), dtype=np.float64) if priors is None else np.asarray(priors)


PROPERTIES: dict[Property, PropertySpec] = {
    Property.CV_FOLDS: PropertySpec(
        lambda b: int(b.getCVFolds()), lambda b, v: b.setCVFolds(v), lambda v: to_int(v, "CVFolds")
    ),
    Property.MAX_CATEGORIES: PropertySpec(
        lambda b: int(b.getMaxCategories()), lambda b, v: b.setMaxCategories(v), lambda v: to_int(v, "MaxCategories")
    ),
    Property.MAX_DEPTH: PropertySpec(
        lambda b: int(b.getMaxDepth()), lambda b, v: b.setMaxDepth(v), lambda v: to_int(v, "MaxDepth")
    ),
    Property.MIN_SAMPLE_COUNT: PropertySpec(
        lambda b: int(b.getMinSampleCount()),
        lambda b, v: b.setMinSampleCount(v),
        lambda v: to_int(v, "MinSampleCount"),
    ),
    Property.PRIORS: PropertySpec(_get_priors, lambda b, v: b.setPriors(v), _to_priors),
    Property.REGRESSION_ACCURACY: PropertySpec(
        lambda b: float(b.getRegressionAccuracy()),
        lambda b, v: b.setRegressionAccuracy(v),
        lambda v: to_float(v, "RegressionAccuracy"),
    ),
    Property.TRUNCATE_PRUNED_TREE: PropertySpec(
        lambda b: bool(b.getTruncatePrunedTree()),
        lambda b, v: b.setTruncatePrunedTree(v),
        lambda v: to_bool(v, "TruncatePrunedTree"),
    ),
    Property.USE_1SE_RULE: PropertySpec(
        lambda b: bool(b.getUse1SERule()), lambda b, v: b.setUse1SERule(v), lambda v: to_bool(v, "Use1SERule")
    ),
    Property.USE_SURROGATES: PropertySpec(
        lambda b: bool(b.getUseSurrogates()),
        lambda b, v: b.setUseSurrogates(v),
        lambda v: to_bool(v, "UseSurrogates"),
    ),
    Property.BOOST_TYPE: PropertySpec(
        lambda b: BoostType.from_code(int(b.getBoostType())).value,
        lambda b, v: b.setBoostType(v),
        _to_boost_type,
    ),
    Property.WEAK_COUNT: PropertySpec(
        lambda b: int(b.getWeakCount()), lambda b, v: b.setWeakCount(v), lambda v: to_int(v, "WeakCount")
    ),
    Property.WEIGHT_TRIM_RATE: PropertySpec(
        lambda b: float(b.getWeightTrimRate()),
        lambda b, v: b.setWeightTrimRate(v),
        lambda v: to_float(v, "WeightTrimRate"),
    ),
}


def parse_property(name: Any) -> Property:
    """Resolve a property name.

    Raises:
        UnknownPropertyError: If the name is not in the property set.
    """
    name = to_str(name, "property name")
    try:
        return Property(name)
    except ValueError:
        raise UnknownPropertyError(name) from None


def get_property(model: BoostModel, prop: Property) -> Any:
    """Read one hyperparameter as a host value."""
    return PROPERTIES[prop].getter(model.boost)


def set_property(model: BoostModel, prop: Property, value: Any) -> None:
    """Write one hyperparameter.

    Raises:
        ArgumentTypeError: If the value has the wrong type.
        InvalidValueError: If the value is out of range for the model.
    """
    spec = PROPERTIES[prop]
    native = spec.convert(value)
    try:
        spec.setter(model.boost, native)
    except cv2.error as e:
        raise InvalidValueError(f"Invalid value for {prop.value}: {e}") from e


__all__ = [
    "PROPERTIES",
    "PropertySpec",
    "get_property",
    "parse_property",
    "set_property",
]
