"""Dataset construction shared by ``train`` and ``calcError``.

A dataset is either loaded from a CSV file or assembled from a sample matrix
and a response matrix. Both paths accept a list of named loader options and
return a ``cv2.ml.TrainData`` handle ready to pass to the model.

Types:
    - CsvOptions / MatrixOptions: parsed loader options (see ``boostcmd.config``)
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

import cv2
import numpy as np
from numpy.typing import NDArray
from pydantic import ValidationError

from boostcmd.config import CsvOptions, MatrixOptions
from boostcmd.errors import ArgumentTypeError, InvalidValueError, LibraryError, ModelIOError, UnknownOptionError
from boostcmd.logs import get_logger
from boostcmd.marshal import is_integer_array, is_text, option_items, to_bool, to_float, to_int, to_mat, to_str
from boostcmd.types import SampleLayout, VarType

logger = get_logger(__name__)

# =============================================================================
# Option value converters
# =============================================================================


def _to_layout(value: Any) -> SampleLayout:
    name = to_str(value, "Layout")
    try:
        return SampleLayout(name)
    except ValueError:
        raise InvalidValueError(f"Unrecognized layout {name}") from None


def _to_index(value: Any) -> NDArray[Any]:
    """Index vectors are either 0/1 masks (uint8) or integer positions (int32)."""
    arr = np.asarray(value)
    dtype = np.uint8 if arr.dtype.kind in "bu" and arr.dtype.itemsize == 1 else np.int32
    return to_mat(arr, dtype, what="index", vector="row")


def _to_var_type(value: Any) -> NDArray[np.uint8]:
    """Variable types given as type names, a string of initials, or codes.

    ``"NNC"`` and ``["Numerical", "Numerical", "Categorical"]`` are equivalent.
    """
    if is_text(value):
        names: list[Any] = list(str(value))
    elif isinstance(value, list | tuple) and all(is_text(v) for v in value):
        names = list(value)
    else:
        return to_mat(value, np.uint8, what="VarType", vector="col")

    codes: list[int] = []
    for name in names:
        name = str(name)
        match = next((t for t in VarType if t.value == name or t.value[0] == name.upper()), None)
        if match is None:
            raise InvalidValueError(f"Unrecognized variable type {name}")
        codes.append(match.code)
    return np.asarray(codes, dtype=np.uint8).reshape(-1, 1)


def _to_char(value: Any) -> str:
    return to_str(value, "character option")


_SPLIT_FIELDS: dict[str, tuple[str, Callable[[Any], Any]]] = {
    "TrainTestSplitCount": ("split_count", to_int),
    "TrainTestSplitRatio": ("split_ratio", to_float),
    "TrainTestSplitShuffle": ("split_shuffle", to_bool),
}

_CSV_FIELDS: dict[str, tuple[str, Callable[[Any], Any]]] = {
    "HeaderLineCount": ("header_line_count", to_int),
    "ResponseStartIdx": ("response_start_idx", to_int),
    "ResponseEndIdx": ("response_end_idx", to_int),
    "VarTypeSpec": ("var_type_spec", to_str),
    "Delimiter": ("delimiter", _to_char),
    "Missing": ("missing", _to_char),
    **_SPLIT_FIELDS,
}

_MATRIX_FIELDS: dict[str, tuple[str, Callable[[Any], Any]]] = {
    "Layout": ("layout", _to_layout),
    "VarIdx": ("var_idx", _to_index),
    "SampleIdx": ("sample_idx", _to_index),
    "SampleWeights": ("sample_weights", lambda v: to_mat(v, np.float32, what="SampleWeights", vector="col")),
    "VarType": ("var_type", _to_var_type),
    **_SPLIT_FIELDS,
}


def _collect(
    items: Iterable[tuple[str, Any]],
    fields: dict[str, tuple[str, Callable[[Any], Any]]],
) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for key, raw in items:
        if key not in fields:
            raise UnknownOptionError(key)
        name, convert = fields[key]
        values[name] = convert(raw)
    return values


def parse_csv_options(options: Any) -> CsvOptions:
    """Parse CSV loader options from a mapping or flat pair list."""
    values = _collect(option_items(options), _CSV_FIELDS)
    try:
        return CsvOptions(**values)
    except ValidationError as e:
        raise InvalidValueError(str(e)) from e


def parse_matrix_options(options: Any) -> MatrixOptions:
    """Parse matrix loader options from a mapping or flat pair list."""
    values = _collect(option_items(options), _MATRIX_FIELDS)
    try:
        return MatrixOptions(**values)
    except ValidationError as e:
        raise InvalidValueError(str(e)) from e


# =============================================================================
# Loaders
# =============================================================================


_VAR_TYPE_GROUP = re.compile(r"(ord|cat)\[([^\]]*)\]")


def _parse_var_type_spec(spec: str, n_cols: int) -> dict[int, int]:
    """Column type codes from a spec such as ``ord[0-3,5]cat[4]``.

    Column indices count every CSV column, responses included.
    """
    types: dict[int, int] = {}
    pos = 0
    for match in _VAR_TYPE_GROUP.finditer(spec.replace(" ", "")):
        if match.start() != pos:
            break
        pos = match.end()
        code = VarType.CATEGORICAL.code if match.group(1) == "cat" else VarType.ORDERED.code
        for part in match.group(2).split(","):
            lo, _, hi = part.partition("-")
            try:
                first, last = int(lo), int(hi or lo)
            except ValueError:
                raise InvalidValueError(f"Malformed VarTypeSpec {spec!r}") from None
            if not 0 <= first <= last < n_cols:
                raise InvalidValueError(f"VarTypeSpec range {part} outside {n_cols} columns")
            types.update(dict.fromkeys(range(first, last + 1), code))
    if pos != len(spec.replace(" ", "")):
        raise InvalidValueError(f"Malformed VarTypeSpec {spec!r}")
    return types


def _column_values(tokens: NDArray[np.str_], missing: str) -> tuple[NDArray[np.float32], bool]:
    """Numeric values of one CSV column and whether it held text.

    Missing cells become NaN. Text columns are coded by first appearance.
    """
    absent = (tokens == missing) | (tokens == "")
    try:
        return np.where(absent, "nan", tokens).astype(np.float32), False
    except ValueError:
        codes: dict[str, int] = {}
        values = [np.nan if skip else codes.setdefault(str(t), len(codes)) for t, skip in zip(tokens, absent)]
        return np.asarray(values, dtype=np.float32), True


def _apply_split(data: cv2.ml.TrainData, options: CsvOptions | MatrixOptions) -> None:
    if options.split_count is not None:
        data.setTrainTestSplit(options.split_count, options.split_shuffle)
    elif options.split_ratio is not None:
        data.setTrainTestSplitRatio(options.split_ratio, options.split_shuffle)


def load_train_data(path: str | Path, options: CsvOptions | None = None) -> cv2.ml.TrainData:
    """Load a dataset from a CSV file.

    The response defaults to the last column. Columns are ordered unless they
    hold text or ``VarTypeSpec`` declares them categorical.

    Args:
        path: CSV file path.
        options: Parsed loader options; defaults when None.

    Returns:
        Library dataset handle.

    Raises:
        ModelIOError: If the file is missing or cannot be parsed.
        InvalidValueError: If the response range or ``VarTypeSpec`` does not fit the columns.
    """
    options = options or CsvOptions()
    path = Path(path)
    if not path.is_file():
        raise ModelIOError(f"Failed to load dataset: {path} does not exist")

    try:
        table = np.loadtxt(
            path,
            dtype=str,
            delimiter=options.delimiter,
            skiprows=options.header_line_count,
            comments=None,
            ndmin=2,
        )
    except ValueError as e:
        raise ModelIOError(f"Failed to load dataset {path}: {e}") from e
    table = np.char.strip(table)

    n_rows, n_cols = table.shape
    if n_rows == 0 or n_cols < 2:
        raise ModelIOError(f"Failed to load dataset {path}: need at least one row with two columns")

    start = options.response_start_idx if options.response_start_idx >= 0 else n_cols - 1
    end = options.response_end_idx if options.response_end_idx >= 0 else start + 1
    if not 0 <= start < end <= n_cols or end - start == n_cols:
        raise InvalidValueError(f"Response columns [{start}, {end}) do not fit {n_cols} columns")

    declared = _parse_var_type_spec(options.var_type_spec, n_cols)
    columns: list[NDArray[np.float32]] = []
    types: list[int] = []
    for i in range(n_cols):
        values, categorical = _column_values(table[:, i], options.missing)
        columns.append(values)
        types.append(declared.get(i, VarType.CATEGORICAL.code if categorical else VarType.ORDERED.code))

    response_cols = list(range(start, end))
    input_cols = [i for i in range(n_cols) if not start <= i < end]
    values = np.column_stack(columns)

    try:
        data = cv2.ml.TrainData_create(
            samples=np.ascontiguousarray(values[:, input_cols]),
            layout=SampleLayout.ROW.code,
            responses=np.ascontiguousarray(values[:, response_cols]),
            varType=np.asarray([types[i] for i in input_cols + response_cols], dtype=np.uint8).reshape(-1, 1),
        )
    except cv2.error as e:
        raise ModelIOError(f"Failed to load dataset {path}: {e}") from e

    _apply_split(data, options)
    logger.debug("dataset_loaded", path=str(path), n_samples=data.getNSamples(), n_vars=data.getNVars())
    return data


def create_train_data(
    samples: Any,
    responses: Any,
    options: MatrixOptions | None = None,
) -> cv2.ml.TrainData:
    """Build a dataset from sample and response matrices.

    The response element type selects the task: integer responses are class
    labels, anything else is a regression target.

    Args:
        samples: Feature matrix, one sample per row (or column with ``Layout=Col``).
        responses: Labels or targets.
        options: Parsed loader options; defaults when None.

    Returns:
        Library dataset handle.
    """
    options = options or MatrixOptions()
    x = to_mat(samples, np.float32, what="samples")
    y = to_mat(responses, np.int32 if is_integer_array(responses) else np.float32, what="responses", vector="col")

    try:
        data = cv2.ml.TrainData_create(
            samples=x,
            layout=options.layout.code,
            responses=y,
            varIdx=options.var_idx,
            sampleIdx=options.sample_idx,
            sampleWeights=options.sample_weights,
            varType=options.var_type,
        )
    except cv2.error as e:
        raise LibraryError(f"Failed to create dataset: {e}") from e

    _apply_split(data, options)
    return data


def build_train_data(source: Any, responses: Any, options: Any = None) -> cv2.ml.TrainData:
    """Resolve the dataset arguments of ``train``/``calcError``.

    Args:
        source: CSV path, or the sample matrix.
        responses: Response matrix; ignored when ``source`` is a path.
        options: Loader options (mapping or flat name/value list).
    """
    if is_text(source):
        return load_train_data(str(source), parse_csv_options(options))
    if source is None:
        raise ArgumentTypeError("samples must be a numeric matrix")
    return create_train_data(source, responses, parse_matrix_options(options))


__all__ = [
    "build_train_data",
    "create_train_data",
    "load_train_data",
    "parse_csv_options",
    "parse_matrix_options",
]
