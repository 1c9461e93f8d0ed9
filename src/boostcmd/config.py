"""Configuration models for the dispatcher and the dataset loaders.

This module defines all Pydantic models for runtime configuration.
"""

from __future__ import annotations

import os
from typing import Any, Literal

import numpy as np
from pydantic import BaseModel, ConfigDict, field_validator

from boostcmd.types import SampleLayout

MemoryFormat = Literal[".xml", ".yml", ".yaml", ".json"]
"""Text formats the in-memory serializer can produce."""

_ENV_PREFIX = "BOOSTCMD_"


class DispatcherConfig(BaseModel):
    """Runtime settings for a dispatcher and its logging."""

    model_config = ConfigDict(frozen=True)

    memory_format: MemoryFormat = ".yml"
    log_level: str = "WARNING"
    json_logs: bool = False

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a stdlib level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @classmethod
    def from_env(cls, **overrides: Any) -> DispatcherConfig:
        """Build a config from ``BOOSTCMD_*`` environment variables.

        Explicit keyword overrides win over the environment.
        """
        values: dict[str, Any] = {}
        if fmt := os.environ.get(f"{_ENV_PREFIX}MEMORY_FORMAT"):
            values["memory_format"] = fmt
        if level := os.environ.get(f"{_ENV_PREFIX}LOG_LEVEL"):
            values["log_level"] = level
        if json_logs := os.environ.get(f"{_ENV_PREFIX}JSON_LOGS"):
            values["json_logs"] = json_logs.strip().lower() in {"1", "true", "yes", "on"}
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


# =============================================================================
# Dataset loader options
# =============================================================================


class SplitOptions(BaseModel):
    """Train/test split applied after a dataset is built.

    A split count wins over a split ratio when both are given.
    """

    model_config = ConfigDict(frozen=True)

    split_count: int | None = None
    split_ratio: float | None = None
    split_shuffle: bool = True

    @field_validator("split_ratio")
    @classmethod
    def validate_split_ratio(cls, v: float | None) -> float | None:
        """Validate ratio lies in [0, 1]."""
        if v is not None and not 0.0 <= v <= 1.0:
            raise ValueError("split_ratio must be in [0, 1]")
        return v


class CsvOptions(SplitOptions):
    """Options for loading a dataset from a CSV file."""

    header_line_count: int = 1
    response_start_idx: int = -1
    response_end_idx: int = -1
    var_type_spec: str = ""
    delimiter: str = ","
    missing: str = "?"

    @field_validator("delimiter", "missing")
    @classmethod
    def validate_single_char(cls, v: str) -> str:
        """Validate the marker is a single character."""
        if len(v) != 1:
            raise ValueError("must be a single character")
        return v


class MatrixOptions(SplitOptions):
    """Options for building a dataset from sample and response matrices."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    layout: SampleLayout = SampleLayout.ROW
    var_idx: np.ndarray | None = None
    sample_idx: np.ndarray | None = None
    sample_weights: np.ndarray | None = None
    var_type: np.ndarray | None = None


__all__ = [
    "CsvOptions",
    "DispatcherConfig",
    "MatrixOptions",
    "MemoryFormat",
    "SplitOptions",
]
