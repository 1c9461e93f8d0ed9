"""Command dispatcher.

A request is a positional call ``(handle, method, *args)`` plus the number of
outputs the caller wants. The dispatcher checks the call shape, parses every
option, resolves the handle, and only then runs the operation, so a
malformed request never changes a model.

Example:
    >>> d = Dispatcher()
    >>> h = d(0, "new")
    >>> d(h, "set", "MaxDepth", 3)
    >>> d(h, "get", "MaxDepth")
    3
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from boostcmd.config import DispatcherConfig
from boostcmd.data import build_train_data
from boostcmd.errors import ArityError, BoostCommandError, UnknownMethodError, UnknownOptionError
from boostcmd.flags import PredictFlags, TrainFlags
from boostcmd.logs import ensure_logging, get_logger
from boostcmd.marshal import iter_options, option_items, to_bool, to_int, to_str
from boostcmd.model import BoostModel
from boostcmd.properties import get_property, parse_property, set_property
from boostcmd.registry import Registry
from boostcmd.types import Method

logger = get_logger(__name__)

Outputs = tuple[Any, ...]

# =============================================================================
# Call shapes
# =============================================================================


@dataclass(frozen=True, slots=True)
class Arity:
    """Accepted call shape of a method.

    ``n_args`` counts every positional argument including handle and method.
    """

    min_args: int
    max_args: int | None = None
    parity: int | None = None
    max_out: int = 1

    def check(self, n_args: int, nargout: int) -> None:
        """Raise :class:`ArityError` if the call shape is not accepted."""
        if n_args < self.min_args or (self.max_args is not None and n_args > self.max_args):
            raise ArityError(f"Wrong number of arguments: got {n_args}")
        if self.parity is not None and n_args % 2 != self.parity:
            raise ArityError("Options must come in name/value pairs")
        if nargout > self.max_out:
            raise ArityError(f"Too many outputs requested: {nargout} > {self.max_out}")

    def describe(self) -> str:
        """Short human-readable form, e.g. ``>=4 even``."""
        if self.max_args == self.min_args:
            args = f"=={self.min_args}"
        else:
            args = f">={self.min_args}"
            if self.parity is not None:
                args += " even" if self.parity == 0 else " odd"
        return f"args {args}, outputs <={self.max_out}"


ARITY: dict[Method, Arity] = {
    Method.NEW: Arity(2, 2),
    Method.DELETE: Arity(2, 2, max_out=0),
    Method.CLEAR: Arity(2, 2, max_out=0),
    Method.LOAD: Arity(3, parity=1, max_out=0),
    Method.SAVE: Arity(3, 3),
    Method.EMPTY: Arity(2, 2),
    Method.IS_TRAINED: Arity(2, 2),
    Method.IS_CLASSIFIER: Arity(2, 2),
    Method.GET_VAR_COUNT: Arity(2, 2),
    Method.GET_DEFAULT_NAME: Arity(2, 2),
    Method.TRAIN: Arity(4, parity=0),
    Method.CALC_ERROR: Arity(4, parity=0, max_out=2),
    Method.PREDICT: Arity(3, parity=1, max_out=2),
    Method.GET_NODES: Arity(2, 2),
    Method.GET_ROOTS: Arity(2, 2),
    Method.GET_SPLITS: Arity(2, 2),
    Method.GET_SUBSETS: Arity(2, 2),
    Method.GET: Arity(3, 3),
    Method.SET: Arity(4, 4, max_out=0),
}

# Option names per method, in the order they are documented
OPTIONS: dict[Method, tuple[str, ...]] = {
    Method.LOAD: ("ObjName", "FromString"),
    Method.TRAIN: ("Data", "Flags", "RawOutput", "CompressedInput", "PredictSum", "PredictMaxVote"),
    Method.CALC_ERROR: ("Data", "TestError"),
    Method.PREDICT: (
        "Flags",
        "RawOutput",
        "CompressedInput",
        "PreprocessedInput",
        "PredictAuto",
        "PredictSum",
        "PredictMaxVote",
    ),
}

_TRAIN_FLAG_FIELDS: dict[str, str] = {
    "RawOutput": "raw_output",
    "CompressedInput": "compressed_input",
    "PredictSum": "predict_sum",
    "PredictMaxVote": "predict_max_vote",
}

_PREDICT_FLAG_FIELDS: dict[str, str] = {
    **_TRAIN_FLAG_FIELDS,
    "PreprocessedInput": "preprocessed_input",
}


def parse_method(name: Any) -> Method:
    """Resolve a method name.

    Raises:
        UnknownMethodError: If the name is not in the command set.
    """
    name = to_str(name, "method")
    try:
        return Method(name)
    except ValueError:
        raise UnknownMethodError(name) from None


def parse_train_options(args: Sequence[Any]) -> tuple[TrainFlags, Any]:
    """Parse ``train`` options into flags and the raw dataset options."""
    flags = TrainFlags()
    data_options: Any = None
    for key, value in iter_options(args):
        if key == "Data":
            option_items(value)
            data_options = value
        elif key == "Flags":
            flags = TrainFlags.from_bits(to_int(value, "Flags"))
        elif key in _TRAIN_FLAG_FIELDS:
            flags = flags.model_copy(update={_TRAIN_FLAG_FIELDS[key]: to_bool(value, key)})
        else:
            raise UnknownOptionError(key)
    return flags, data_options


def parse_predict_options(args: Sequence[Any]) -> PredictFlags:
    """Parse ``predict`` options; later options override earlier ones."""
    flags = PredictFlags()
    for key, value in iter_options(args):
        if key == "Flags":
            flags = PredictFlags.from_bits(to_int(value, "Flags"))
        elif key == "PredictAuto":
            flags = flags.with_predict_auto(to_bool(value, key))
        elif key in _PREDICT_FLAG_FIELDS:
            flags = flags.model_copy(update={_PREDICT_FLAG_FIELDS[key]: to_bool(value, key)})
        else:
            raise UnknownOptionError(key)
    return flags


def parse_calc_error_options(args: Sequence[Any]) -> tuple[bool, Any]:
    """Parse ``calcError`` options into the test flag and raw dataset options."""
    test = False
    data_options: Any = None
    for key, value in iter_options(args):
        if key == "Data":
            option_items(value)
            data_options = value
        elif key == "TestError":
            test = to_bool(value, key)
        else:
            raise UnknownOptionError(key)
    return test, data_options


def parse_load_options(args: Sequence[Any]) -> tuple[str, bool]:
    """Parse ``load`` options into the object name and the from-string flag."""
    obj_name = ""
    from_string = False
    for key, value in iter_options(args):
        if key == "ObjName":
            obj_name = to_str(value, key)
        elif key == "FromString":
            from_string = to_bool(value, key)
        else:
            raise UnknownOptionError(key)
    return obj_name, from_string


# =============================================================================
# Requests
# =============================================================================


class Request(BaseModel):
    """One command as read from a script."""

    model_config = ConfigDict(frozen=True)

    handle: int = 0
    method: str
    args: list[Any] = Field(default_factory=list)
    nargout: int = 0


class Dispatcher:
    """Route commands to the models of a registry.

    Args:
        registry: Registry to serve; a fresh one when None.
        config: Runtime settings; defaults when None.
    """

    def __init__(self, registry: Registry | None = None, config: DispatcherConfig | None = None) -> None:
        self.config = config or DispatcherConfig()
        ensure_logging(self.config.log_level, self.config.json_logs)
        self.registry = registry if registry is not None else Registry()
        self._handlers: dict[Method, Callable[[int, Sequence[Any], int], Outputs]] = {
            Method.NEW: self._new,
            Method.DELETE: self._delete,
            Method.CLEAR: self._clear,
            Method.LOAD: self._load,
            Method.SAVE: self._save,
            Method.EMPTY: self._reader(BoostModel.empty),
            Method.IS_TRAINED: self._reader(BoostModel.is_trained),
            Method.IS_CLASSIFIER: self._reader(BoostModel.is_classifier),
            Method.GET_VAR_COUNT: self._reader(BoostModel.get_var_count),
            Method.GET_DEFAULT_NAME: self._reader(BoostModel.get_default_name),
            Method.TRAIN: self._train,
            Method.CALC_ERROR: self._calc_error,
            Method.PREDICT: self._predict,
            Method.GET_NODES: self._reader(BoostModel.get_nodes),
            Method.GET_ROOTS: self._reader(BoostModel.get_roots),
            Method.GET_SPLITS: self._reader(BoostModel.get_splits),
            Method.GET_SUBSETS: self._reader(BoostModel.get_subsets),
            Method.GET: self._get,
            Method.SET: self._set,
        }

    def __call__(self, *argv: Any, nargout: int = 0) -> Any:
        """Execute one command.

        Args:
            *argv: ``handle, method, *args``.
            nargout: Number of requested outputs (0-2).

        Returns:
            None when the method produces nothing, the single output when at
            most one is requested, otherwise a tuple of ``nargout`` outputs.

        Raises:
            BoostCommandError: Any request failure; see :mod:`boostcmd.errors`.
        """
        if len(argv) < 2 or not 0 <= nargout <= 2:
            raise ArityError("Expected (handle, method, ...) and at most 2 outputs")

        method = parse_method(argv[1])
        handle = to_int(argv[0], "handle")
        ARITY[method].check(len(argv), nargout)

        log = logger.bind(handle=handle, method=method.value)
        with self.registry.lock:
            log.debug("dispatch", n_args=len(argv) - 2, nargout=nargout)
            try:
                outputs = self._handlers[method](handle, argv[2:], nargout)
            except BoostCommandError as e:
                log.warning("request_failed", error=type(e).__name__, message=str(e))
                raise

        if not outputs:
            return None
        if nargout <= 1:
            return outputs[0]
        return outputs[:nargout]

    def dispatch(self, request: Request) -> Any:
        """Execute a :class:`Request`."""
        return self(request.handle, request.method, *request.args, nargout=request.nargout)

    # =========================================================================
    # Handlers
    # =========================================================================

    def _reader(self, read: Callable[[BoostModel], Any]) -> Callable[[int, Sequence[Any], int], Outputs]:
        def handler(handle: int, args: Sequence[Any], nargout: int) -> Outputs:
            return (read(self.registry.resolve(handle)),)

        return handler

    def _new(self, handle: int, args: Sequence[Any], nargout: int) -> Outputs:
        return (self.registry.create(),)

    def _delete(self, handle: int, args: Sequence[Any], nargout: int) -> Outputs:
        self.registry.destroy(handle)
        return ()

    def _clear(self, handle: int, args: Sequence[Any], nargout: int) -> Outputs:
        self.registry.resolve(handle).clear()
        return ()

    def _load(self, handle: int, args: Sequence[Any], nargout: int) -> Outputs:
        source = to_str(args[0], "source")
        obj_name, from_string = parse_load_options(args[1:])
        self.registry.resolve(handle)
        model = BoostModel.load(source, obj_name=obj_name, from_string=from_string)
        self.registry.replace(handle, model)
        return ()

    def _save(self, handle: int, args: Sequence[Any], nargout: int) -> Outputs:
        target = to_str(args[0], "file name")
        model = self.registry.resolve(handle)
        if nargout > 0:
            return (model.dumps(target, self.config.memory_format),)
        model.save(target)
        return ()

    def _train(self, handle: int, args: Sequence[Any], nargout: int) -> Outputs:
        flags, data_options = parse_train_options(args[2:])
        model = self.registry.resolve(handle)
        data = build_train_data(args[0], args[1], data_options)
        return (model.train(data, flags),)

    def _calc_error(self, handle: int, args: Sequence[Any], nargout: int) -> Outputs:
        test, data_options = parse_calc_error_options(args[2:])
        model = self.registry.resolve(handle)
        data = build_train_data(args[0], args[1], data_options)
        err, resp = model.calc_error(data, test)
        return (err, resp)

    def _predict(self, handle: int, args: Sequence[Any], nargout: int) -> Outputs:
        flags = parse_predict_options(args[1:])
        model = self.registry.resolve(handle)
        results, value = model.predict(args[0], flags)
        return (results, value)

    def _get(self, handle: int, args: Sequence[Any], nargout: int) -> Outputs:
        prop = parse_property(args[0])
        return (get_property(self.registry.resolve(handle), prop),)

    def _set(self, handle: int, args: Sequence[Any], nargout: int) -> Outputs:
        prop = parse_property(args[0])
        set_property(self.registry.resolve(handle), prop, args[1])
        return ()


__all__ = [
    "ARITY",
    "OPTIONS",
    "Arity",
    "Dispatcher",
    "Request",
    "parse_calc_error_options",
    "parse_load_options",
    "parse_method",
    "parse_predict_options",
    "parse_train_options",
]
