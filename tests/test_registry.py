"""Tests for the handle registry."""

from __future__ import annotations

import threading

import pytest

from boostcmd import BoostModel, Registry, UnknownHandleError


class TestHandles:
    """Tests for handle issuance."""

    def test_handles_start_at_one(self, registry: Registry) -> None:
        """Test the first handle is 1 and handles increase."""
        assert registry.create() == 1
        assert registry.create() == 2
        assert registry.handles() == [1, 2]

    def test_deleted_handle_not_reused(self, registry: Registry) -> None:
        """Test a destroyed handle is never issued again."""
        h1 = registry.create()
        h2 = registry.create()
        registry.destroy(h2)
        h3 = registry.create()
        assert h3 == 3
        assert registry.handles() == [h1, h3]

    def test_resolve_returns_model(self, registry: Registry) -> None:
        """Test resolve returns the stored model."""
        h = registry.create()
        model = registry.resolve(h)
        assert isinstance(model, BoostModel)
        assert registry.resolve(h) is model
        assert h in registry
        assert len(registry) == 1


class TestErrors:
    """Tests for invalid handles."""

    @pytest.mark.parametrize("handle", [0, -1, 7])
    def test_unknown_handle(self, registry: Registry, handle: int) -> None:
        """Test resolving a never-issued handle fails."""
        registry.create()
        with pytest.raises(UnknownHandleError, match=f"Invalid object handle {handle}"):
            registry.resolve(handle)

    def test_destroy_twice(self, registry: Registry) -> None:
        """Test destroying an absent handle fails."""
        h = registry.create()
        registry.destroy(h)
        with pytest.raises(UnknownHandleError):
            registry.resolve(h)
        with pytest.raises(UnknownHandleError):
            registry.destroy(h)

    def test_replace_unknown(self, registry: Registry) -> None:
        """Test replace never creates a handle."""
        with pytest.raises(UnknownHandleError):
            registry.replace(5, BoostModel())
        assert len(registry) == 0


class TestConcurrency:
    """Tests for concurrent creation."""

    def test_concurrent_create_unique(self, registry: Registry) -> None:
        """Test concurrent creates never hand out the same handle."""
        results: list[int] = []
        lock = threading.Lock()

        def worker() -> None:
            for _ in range(10):
                h = registry.create()
                with lock:
                    results.append(h)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(results) == list(range(1, 41))
