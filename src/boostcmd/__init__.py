"""Handle-based command interface to boosted decision-tree models.

Models live in a registry and are addressed by integer handles. Every
operation is a string-named method dispatched against a handle.

Example:
    >>> from boostcmd import Dispatcher
    >>> d = Dispatcher()
    >>> h = d(0, "new")
    >>> d(h, "set", "BoostType", "Gentle")
    >>> d(h, "get", "BoostType")
    'Gentle'
"""

from boostcmd.config import CsvOptions, DispatcherConfig, MatrixOptions
from boostcmd.dispatcher import ARITY, OPTIONS, Dispatcher, Request
from boostcmd.errors import (
    ArgumentTypeError,
    ArityError,
    BoostCommandError,
    DeserializationError,
    InvalidValueError,
    LibraryError,
    ModelIOError,
    UnknownHandleError,
    UnknownMethodError,
    UnknownOptionError,
    UnknownPropertyError,
)
from boostcmd.flags import PredictFlags, TrainFlags
from boostcmd.logs import configure_logging, get_logger
from boostcmd.model import BoostModel
from boostcmd.registry import Registry
from boostcmd.types import BoostType, Method, Property, SampleLayout, VarType

__version__ = "0.1.0"

__all__ = [
    "ARITY",
    "OPTIONS",
    "ArgumentTypeError",
    "ArityError",
    "BoostCommandError",
    "BoostModel",
    "BoostType",
    "CsvOptions",
    "DeserializationError",
    "Dispatcher",
    "DispatcherConfig",
    "InvalidValueError",
    "LibraryError",
    "MatrixOptions",
    "Method",
    "ModelIOError",
    "PredictFlags",
    "Property",
    "Registry",
    "Request",
    "SampleLayout",
    "TrainFlags",
    "UnknownHandleError",
    "UnknownMethodError",
    "UnknownOptionError",
    "UnknownPropertyError",
    "VarType",
    "__version__",
    "configure_logging",
    "get_logger",
]
