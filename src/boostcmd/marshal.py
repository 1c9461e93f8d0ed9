"""Conversion between host values and the native types the model library expects.

Inputs arrive as plain Python objects (ints, floats, bools, strings, nested
lists or numpy arrays). These helpers coerce them to the exact types the
wrapped library needs and raise :class:`ArgumentTypeError` with a message
naming the offending argument when that is impossible.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from numbers import Integral, Real
from typing import Any, Literal

import numpy as np
from numpy.typing import DTypeLike, NDArray

from boostcmd.errors import ArgumentTypeError, ArityError

# =============================================================================
# Scalars
# =============================================================================


def _unwrap_scalar(value: Any) -> Any:
    """Return the element of a one-element array, or the value unchanged."""
    if isinstance(value, np.ndarray):
        if value.size != 1:
            raise ArgumentTypeError(f"Expected a scalar, got array of shape {value.shape}")
        return value.reshape(()).item()
    if isinstance(value, np.generic):
        return value.item()
    return value


def to_int(value: Any, what: str = "value") -> int:
    """Convert a host value to ``int``.

    Accepts integers, booleans and floats holding an integral value.
    """
    value = _unwrap_scalar(value)
    if isinstance(value, bool | Integral):
        return int(value)
    if isinstance(value, Real) and float(value).is_integer():
        return int(value)
    raise ArgumentTypeError(f"{what} must be an integer, got {type(value).__name__}")


def to_float(value: Any, what: str = "value") -> float:
    """Convert a host value to ``float``."""
    value = _unwrap_scalar(value)
    if isinstance(value, bool | Real):
        return float(value)
    raise ArgumentTypeError(f"{what} must be a number, got {type(value).__name__}")


def to_bool(value: Any, what: str = "value") -> bool:
    """Convert a host value to ``bool``; numbers are true when non-zero."""
    value = _unwrap_scalar(value)
    if isinstance(value, bool | Real):
        return bool(value)
    raise ArgumentTypeError(f"{what} must be logical or numeric, got {type(value).__name__}")


def to_str(value: Any, what: str = "value") -> str:
    """Convert a host value to ``str``."""
    if isinstance(value, np.str_):
        return str(value)
    if isinstance(value, str):
        return value
    raise ArgumentTypeError(f"{what} must be a string, got {type(value).__name__}")


def is_text(value: Any) -> bool:
    """Whether the host value is a string."""
    return isinstance(value, str | np.str_)


# =============================================================================
# Matrices
# =============================================================================


def is_integer_array(value: Any) -> bool:
    """Whether the host value holds integer elements."""
    try:
        arr = np.asarray(value)
    except (TypeError, ValueError):
        return False
    return arr.dtype.kind in "iu"


def to_mat(
    value: Any,
    dtype: DTypeLike = None,
    *,
    what: str = "value",
    vector: Literal["row", "col"] = "row",
) -> NDArray[Any]:
    """Convert a host value to a C-contiguous 2D array.

    Args:
        value: Scalar, nested sequence or numpy array.
        dtype: Target element type. Keeps the input dtype when None.
        what: Argument name used in error messages.
        vector: How 1D input is shaped: a single row or a single column.

    Returns:
        2D array of the requested dtype.

    Raises:
        ArgumentTypeError: If the value is not numeric or has more than 2 dims.
    """
    try:
        arr = np.asarray(value)
    except (TypeError, ValueError) as e:
        raise ArgumentTypeError(f"{what} must be a numeric matrix") from e

    if arr.dtype.kind not in "biuf":
        raise ArgumentTypeError(f"{what} must be a numeric matrix, got dtype {arr.dtype}")

    if arr.ndim == 0:
        arr = arr.reshape(1, 1)
    elif arr.ndim == 1:
        arr = arr.reshape(1, -1) if vector == "row" else arr.reshape(-1, 1)
    elif arr.ndim > 2:
        raise ArgumentTypeError(f"{what} must be at most 2D, got {arr.ndim}D")

    return np.ascontiguousarray(arr, dtype=dtype if dtype is not None else arr.dtype)


# =============================================================================
# Option pairs
# =============================================================================


def iter_options(args: Sequence[Any]) -> Iterator[tuple[str, Any]]:
    """Iterate ``(name, value)`` pairs from a flat argument list.

    Raises:
        ArityError: If the list has odd length.
        ArgumentTypeError: If a name is not a string.
    """
    if len(args) % 2 != 0:
        raise ArityError("Options must come in name/value pairs")
    for i in range(0, len(args), 2):
        yield to_str(args[i], "option name"), args[i + 1]


def option_items(value: Any) -> list[tuple[str, Any]]:
    """Normalize a nested option list given as a mapping or a flat pair sequence."""
    if value is None:
        return []
    if isinstance(value, Mapping):
        return [(to_str(k, "option name"), v) for k, v in value.items()]
    if isinstance(value, Sequence) and not is_text(value):
        return list(iter_options(value))
    raise ArgumentTypeError("Data options must be a mapping or a list of name/value pairs")


# =============================================================================
# Outputs
# =============================================================================


def to_host(value: Any) -> Any:
    """Convert a native result to a JSON-friendly host value."""
    if isinstance(value, np.ndarray):
        if value.dtype.names:
            return [{name: to_host(row[name]) for name in value.dtype.names} for row in value]
        return value.tolist()
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, tuple | list):
        return [to_host(v) for v in value]
    return value


__all__ = [
    "is_integer_array",
    "is_text",
    "iter_options",
    "option_items",
    "to_bool",
    "to_float",
    "to_host",
    "to_int",
    "to_mat",
    "to_str",
]
