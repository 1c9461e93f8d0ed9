"""Tests for dataset construction."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from boostcmd import ArgumentTypeError, InvalidValueError, ModelIOError, SampleLayout, UnknownOptionError
from boostcmd.data import (
    _column_values,
    _parse_var_type_spec,
    build_train_data,
    create_train_data,
    load_train_data,
    parse_csv_options,
    parse_matrix_options,
)


def write_csv(path: Path, n_rows: int = 20) -> Path:
    """Helper to write a small two-feature CSV with a label column."""
    rng = np.random.default_rng(7)
    lines = ["a,b,label"]
    for _ in range(n_rows):
        a, b = rng.standard_normal(2)
        lines.append(f"{a:.4f},{b:.4f},{int(a > 0)}")
    path.write_text("\n".join(lines) + "\n")
    return path


class TestCsvOptions:
    """Tests for CSV option parsing."""

    def test_defaults(self) -> None:
        """Test the loader defaults."""
        opts = parse_csv_options(None)
        assert opts.header_line_count == 1
        assert opts.response_start_idx == -1
        assert opts.delimiter == ","
        assert opts.missing == "?"

    def test_values(self) -> None:
        """Test named options map onto fields."""
        opts = parse_csv_options(["HeaderLineCount", 0, "Delimiter", ";", "TrainTestSplitCount", 5])
        assert opts.header_line_count == 0
        assert opts.delimiter == ";"
        assert opts.split_count == 5

    def test_unknown_option(self) -> None:
        """Test matrix-only options are rejected for CSV input."""
        with pytest.raises(UnknownOptionError, match="Layout"):
            parse_csv_options({"Layout": "Row"})

    def test_bad_delimiter(self) -> None:
        """Test markers must be single characters."""
        with pytest.raises(InvalidValueError):
            parse_csv_options({"Delimiter": ";;"})

    def test_bad_ratio(self) -> None:
        """Test the split ratio range."""
        with pytest.raises(InvalidValueError):
            parse_csv_options({"TrainTestSplitRatio": 1.5})


class TestMatrixOptions:
    """Tests for matrix option parsing."""

    def test_layout(self) -> None:
        """Test sample layout names."""
        assert parse_matrix_options({"Layout": "Col"}).layout is SampleLayout.COL
        with pytest.raises(InvalidValueError):
            parse_matrix_options({"Layout": "Diagonal"})

    @pytest.mark.parametrize("spec", ["NNC", ["Numerical", "Ordered", "Categorical"], [0, 0, 1]])
    def test_var_type(self, spec: object) -> None:
        """Test equivalent variable type spellings."""
        var_type = parse_matrix_options({"VarType": spec}).var_type
        assert var_type is not None
        assert var_type.ravel().tolist() == [0, 0, 1]
        assert var_type.dtype == np.uint8

    def test_bad_var_type(self) -> None:
        """Test an unknown variable type initial."""
        with pytest.raises(InvalidValueError):
            parse_matrix_options({"VarType": "NX"})

    def test_index_dtype(self) -> None:
        """Test masks stay bytes and positions become int32."""
        opts = parse_matrix_options({"VarIdx": np.array([1, 0, 1], dtype=np.uint8), "SampleIdx": [0, 2]})
        assert opts.var_idx is not None and opts.var_idx.dtype == np.uint8
        assert opts.sample_idx is not None and opts.sample_idx.dtype == np.int32

    def test_unknown_option(self) -> None:
        """Test CSV-only options are rejected for matrix input."""
        with pytest.raises(UnknownOptionError):
            parse_matrix_options({"Delimiter": ","})


class TestLoaders:
    """Tests for dataset loaders."""

    def test_load_csv(self, tmp_path: Path) -> None:
        """Test loading a CSV file with a header line."""
        path = write_csv(tmp_path / "data.csv", n_rows=20)
        data = load_train_data(path)
        assert data.getNSamples() == 20
        assert data.getNVars() == 2

    def test_load_csv_split(self, tmp_path: Path) -> None:
        """Test a split count applied after loading."""
        path = write_csv(tmp_path / "data.csv", n_rows=20)
        data = build_train_data(str(path), None, {"TrainTestSplitCount": 15})
        assert data.getNTrainSamples() == 15
        assert data.getNTestSamples() == 5

    def test_missing_csv(self, tmp_path: Path) -> None:
        """Test a missing file."""
        with pytest.raises(ModelIOError):
            load_train_data(tmp_path / "absent.csv")

    def test_create_from_matrices(self, binary_data: tuple[np.ndarray, np.ndarray]) -> None:
        """Test building a dataset from arrays."""
        x, y = binary_data
        data = create_train_data(x, y)
        assert data.getNSamples() == len(x)
        assert data.getNVars() == x.shape[1]

    def test_ratio_split(self, binary_data: tuple[np.ndarray, np.ndarray]) -> None:
        """Test a ratio split on matrix input."""
        x, y = binary_data
        data = build_train_data(x, y, ["TrainTestSplitRatio", 0.75, "TrainTestSplitShuffle", False])
        assert data.getNTrainSamples() == 150
        assert data.getNTestSamples() == 50

    def test_missing_samples(self) -> None:
        """Test samples are required for matrix input."""
        with pytest.raises(ArgumentTypeError):
            build_train_data(None, [1, 0])


class TestCsvParsing:
    """Tests for CSV column handling."""

    def test_var_type_spec(self) -> None:
        """Test ranges and single columns in a type spec."""
        assert _parse_var_type_spec("ord[0-1]cat[2]", 3) == {0: 0, 1: 0, 2: 1}
        assert _parse_var_type_spec("cat[0,2] ord[1]", 3) == {0: 1, 1: 0, 2: 1}
        assert _parse_var_type_spec("", 3) == {}

    @pytest.mark.parametrize("spec", ["ord[0-1", "num[0]", "ord[a]", "ord[0-5]"])
    def test_bad_var_type_spec(self, spec: str) -> None:
        """Test malformed or out-of-range type specs."""
        with pytest.raises(InvalidValueError):
            _parse_var_type_spec(spec, 3)

    def test_missing_cells(self) -> None:
        """Test missing markers and empty cells become NaN."""
        values, text = _column_values(np.array(["1.5", "?", "", "2"]), "?")
        assert not text
        assert values[0] == pytest.approx(1.5)
        assert np.isnan(values[1]) and np.isnan(values[2])

    def test_text_column(self) -> None:
        """Test text values are coded by first appearance."""
        values, text = _column_values(np.array(["red", "blue", "red", "?"]), "?")
        assert text
        assert values[:3].tolist() == [0.0, 1.0, 0.0]
        assert np.isnan(values[3])

    def test_delimiter_and_types(self, tmp_path: Path) -> None:
        """Test a semicolon file with declared column types."""
        path = tmp_path / "data.csv"
        path.write_text("a;b;label\n1.0;?;0\n2.0;3.0;1\n0.5;1.0;0\n")
        data = load_train_data(path, parse_csv_options({"Delimiter": ";", "VarTypeSpec": "ord[0-1]cat[2]"}))
        assert data.getNSamples() == 3
        assert data.getNVars() == 2
        assert data.getVarType().ravel().tolist() == [0, 0, 1]
        assert np.isnan(data.getSamples()[0, 1])

    def test_text_column_is_categorical(self, tmp_path: Path) -> None:
        """Test a text response defaults to categorical."""
        path = tmp_path / "data.csv"
        path.write_text("a,label\n1.0,yes\n2.0,no\n3.0,yes\n")
        data = load_train_data(path)
        assert data.getVarType().ravel().tolist() == [0, 1]
        assert data.getResponses().ravel().tolist() == [0.0, 1.0, 0.0]

    def test_response_range(self, tmp_path: Path) -> None:
        """Test the response may sit in the first column."""
        path = write_csv(tmp_path / "data.csv", n_rows=5)
        data = load_train_data(path, parse_csv_options({"ResponseStartIdx": 0}))
        assert data.getNVars() == 2
        assert data.getResponses().shape == (5, 1)
        assert data.getVarType().ravel().tolist() == [0, 0, 0]

    @pytest.mark.parametrize("start, end", [(5, -1), (1, 1), (0, 3)])
    def test_bad_response_range(self, tmp_path: Path, start: int, end: int) -> None:
        """Test response ranges that are empty, out of bounds, or cover every column."""
        path = write_csv(tmp_path / "data.csv", n_rows=5)
        with pytest.raises(InvalidValueError):
            load_train_data(path, parse_csv_options({"ResponseStartIdx": start, "ResponseEndIdx": end}))

    def test_single_column(self, tmp_path: Path) -> None:
        """Test a file without a response column."""
        path = tmp_path / "data.csv"
        path.write_text("a\n1\n2\n")
        with pytest.raises(ModelIOError):
            load_train_data(path)
