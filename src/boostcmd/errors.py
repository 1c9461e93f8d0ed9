"""Exception taxonomy for the command dispatcher.

Every failure raised while serving a request derives from
:class:`BoostCommandError`. A failed request never leaves partial results
behind and never touches other registry entries.
"""

from __future__ import annotations


class BoostCommandError(Exception):
    """Base class for all dispatcher errors."""


class ArityError(BoostCommandError):
    """Wrong number of positional arguments, outputs, or unpaired options."""


class UnknownMethodError(BoostCommandError):
    """Method name is not part of the command set."""

    def __init__(self, method: str) -> None:
        super().__init__(f"Unrecognized operation {method}")
        self.method = method


class UnknownOptionError(BoostCommandError):
    """Option key is not accepted by the method or loader."""

    def __init__(self, option: str) -> None:
        super().__init__(f"Unrecognized option {option}")
        self.option = option


class UnknownPropertyError(BoostCommandError):
    """Property name is not in the closed property set."""

    def __init__(self, prop: str) -> None:
        super().__init__(f"Unrecognized property {prop}")
        self.prop = prop


class UnknownHandleError(BoostCommandError):
    """Handle was never issued or has already been deleted."""

    def __init__(self, handle: int) -> None:
        super().__init__(f"Invalid object handle {handle}")
        self.handle = handle


class ArgumentTypeError(BoostCommandError):
    """A host value cannot be converted to the native type a method expects."""


class InvalidValueError(BoostCommandError):
    """Value is of the right type but outside what the model accepts."""


class ModelIOError(BoostCommandError, OSError):
    """Opening, reading or writing external storage failed."""


class DeserializationError(BoostCommandError):
    """Serialized model content is malformed or does not hold a trained model."""


class LibraryError(BoostCommandError):
    """The wrapped model library rejected a train, predict or error call."""


__all__ = [
    "ArgumentTypeError",
    "ArityError",
    "BoostCommandError",
    "DeserializationError",
    "InvalidValueError",
    "LibraryError",
    "ModelIOError",
    "UnknownHandleError",
    "UnknownMethodError",
    "UnknownOptionError",
    "UnknownPropertyError",
]
