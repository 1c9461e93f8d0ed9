"""Pytest configuration for boostcmd tests."""

from __future__ import annotations

from collections.abc import Iterator

import numpy as np
import pytest
import structlog

from boostcmd import Dispatcher, Registry, configure_logging


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    """Return logging to the package defaults after each test."""
    yield
    structlog.reset_defaults()
    configure_logging()


@pytest.fixture
def binary_data() -> tuple[np.ndarray, np.ndarray]:
    """Small two-class problem with integer labels."""
    rng = np.random.default_rng(42)
    x = rng.standard_normal((200, 4)).astype(np.float32)
    y = (x[:, 0] + 0.5 * x[:, 1] > 0).astype(np.int32)
    return x, y


@pytest.fixture
def registry() -> Registry:
    """Fresh registry."""
    return Registry()


@pytest.fixture
def dispatcher(registry: Registry) -> Dispatcher:
    """Dispatcher over the fresh registry."""
    return Dispatcher(registry)


@pytest.fixture
def trained(dispatcher: Dispatcher, binary_data: tuple[np.ndarray, np.ndarray]) -> int:
    """Handle of a small trained ensemble."""
    x, y = binary_data
    h = dispatcher(0, "new")
    dispatcher(h, "set", "WeakCount", 10)
    dispatcher(h, "set", "MaxDepth", 2)
    assert dispatcher(h, "train", x, y, nargout=1) is True
    return h
