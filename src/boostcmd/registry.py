"""Handle registry owning live models."""

from __future__ import annotations

import threading
from collections.abc import Callable

from boostcmd.errors import UnknownHandleError
from boostcmd.logs import get_logger
from boostcmd.model import BoostModel

logger = get_logger(__name__)


class Registry:
    """Map of integer handles to models.

    Handles start at 1 and only ever increase; a deleted handle is never
    issued again. Callers that combine a lookup with a mutation hold
    :attr:`lock` for the whole sequence.

    Args:
        factory: Builds the default model stored by :meth:`create`.
    """

    def __init__(self, factory: Callable[[], BoostModel] = BoostModel) -> None:
        self._factory = factory
        self._models: dict[int, BoostModel] = {}
        self._last_handle = 0
        self.lock = threading.RLock()

    def create(self) -> int:
        """Store a new default model and return its handle."""
        with self.lock:
            model = self._factory()
            self._last_handle += 1
            handle = self._last_handle
            self._models[handle] = model
        logger.debug("handle_created", handle=handle)
        return handle

    def resolve(self, handle: int) -> BoostModel:
        """Get the model behind a handle.

        Raises:
            UnknownHandleError: If the handle is not registered.
        """
        with self.lock:
            try:
                return self._models[handle]
            except KeyError:
                raise UnknownHandleError(handle) from None

    def replace(self, handle: int, model: BoostModel) -> None:
        """Swap the model behind an existing handle."""
        with self.lock:
            if handle not in self._models:
                raise UnknownHandleError(handle)
            self._models[handle] = model

    def destroy(self, handle: int) -> None:
        """Remove a handle and release its trained state.

        Raises:
            UnknownHandleError: If the handle is not registered.
        """
        with self.lock:
            model = self._models.pop(handle, None)
        if model is None:
            raise UnknownHandleError(handle)
        model.clear()
        logger.debug("handle_destroyed", handle=handle)

    def handles(self) -> list[int]:
        """Live handles in ascending order."""
        with self.lock:
            return sorted(self._models)

    def __contains__(self, handle: object) -> bool:
        with self.lock:
            return handle in self._models

    def __len__(self) -> int:
        with self.lock:
            return len(self._models)


__all__ = ["Registry"]
