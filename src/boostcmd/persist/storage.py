"""Reading and writing serialized models.

A model is stored as a single top-level node tagged with its default name::

    opencv_ml_boost:
       format: 3
       ...

The same envelope is used for files and for in-memory text.
"""

from __future__ import annotations

from pathlib import Path

import cv2
from pydantic import ValidationError

from boostcmd.config import MemoryFormat
from boostcmd.errors import DeserializationError, ModelIOError
from boostcmd.logs import get_logger
from boostcmd.persist.schema import BoostModelSchema, DocumentEnvelope, node_to_python

logger = get_logger(__name__)

_TEXT_SUFFIXES: frozenset[str] = frozenset({".xml", ".yml", ".yaml", ".json"})


def memory_target(name: str, default: MemoryFormat = ".yml") -> str:
    """Pick the pseudo file name whose extension selects the in-memory text format."""
    # A bare extension such as ".xml" has no suffix as a path
    suffix = (Path(name).suffix or (name if name.startswith(".") else "")).lower()
    return f"model{suffix}" if suffix in _TEXT_SUFFIXES else f"model{default}"


def _require_trained(boost: cv2.ml.Boost) -> None:
    if not boost.isTrained():
        raise ModelIOError("Cannot serialize a model that has not been trained")


def write_model_file(boost: cv2.ml.Boost, path: str | Path) -> None:
    """Write a trained model to a file.

    Raises:
        ModelIOError: If the model is untrained or the file cannot be written.
    """
    _require_trained(boost)
    path = Path(path)
    try:
        fs = cv2.FileStorage(str(path), cv2.FILE_STORAGE_WRITE)
    except cv2.error as e:
        raise ModelIOError(f"Failed to open file {path}: {e}") from e
    if not fs.isOpened():
        raise ModelIOError(f"Failed to open file {path}")
    try:
        boost.write(fs, boost.getDefaultName())
    except cv2.error as e:
        raise ModelIOError(f"Failed to write model to {path}: {e}") from e
    finally:
        fs.release()
    logger.info("model_saved", path=str(path))


def write_model_string(boost: cv2.ml.Boost, name: str = ".yml", default: MemoryFormat = ".yml") -> str:
    """Serialize a trained model to text.

    Args:
        boost: Trained model.
        name: Name whose extension selects XML, YAML or JSON output.
        default: Format used when ``name`` has no recognized extension.

    Returns:
        The serialized document.
    """
    _require_trained(boost)
    fs = cv2.FileStorage(memory_target(name, default), cv2.FILE_STORAGE_WRITE | cv2.FILE_STORAGE_MEMORY)
    if not fs.isOpened():
        raise ModelIOError("Failed to open in-memory storage")
    try:
        boost.write(fs, boost.getDefaultName())
    except cv2.error as e:
        fs.release()
        raise ModelIOError(f"Failed to serialize model: {e}") from e
    return fs.releaseAndGetString()


def _open_for_read(source: str, *, from_string: bool) -> cv2.FileStorage:
    if from_string:
        try:
            fs = cv2.FileStorage(source, cv2.FILE_STORAGE_READ | cv2.FILE_STORAGE_MEMORY)
        except cv2.error as e:
            raise DeserializationError(f"Malformed model text: {e}") from e
        if not fs.isOpened():
            raise DeserializationError("Malformed model text")
        return fs

    path = Path(source)
    if not path.is_file():
        raise ModelIOError(f"Failed to open file {path}")
    try:
        fs = cv2.FileStorage(str(path), cv2.FILE_STORAGE_READ)
    except cv2.error as e:
        raise DeserializationError(f"Malformed model file {path}: {e}") from e
    if not fs.isOpened():
        raise ModelIOError(f"Failed to open file {path}")
    return fs


def read_model(source: str, *, obj_name: str = "", from_string: bool = False) -> cv2.ml.Boost:
    """Deserialize a model from a file or from text.

    Args:
        source: File path, or the serialized text when ``from_string`` is set.
        obj_name: Tag of the node holding the model; the first top-level node
            when empty.
        from_string: Treat ``source`` as the document itself.

    Returns:
        A new trained model.

    Raises:
        ModelIOError: If the file cannot be opened.
        DeserializationError: If the content is malformed, the node is missing,
            or it does not describe a trained model.
    """
    fs = _open_for_read(source, from_string=from_string)
    try:
        node = fs.getNode(obj_name) if obj_name else fs.getFirstTopLevelNode()
        if node is None or node.empty() or node.isNone():
            raise DeserializationError(f"No model node {obj_name or '(first)'} in document")
        boost = cv2.ml.Boost_create()
        try:
            boost.read(node)
        except cv2.error as e:
            raise DeserializationError(f"Malformed model: {e}") from e
    finally:
        fs.release()

    if not boost.isTrained():
        raise DeserializationError("Document does not hold a trained model")
    logger.info("model_loaded", source="<string>" if from_string else source, obj_name=obj_name or None)
    return boost


def read_document(boost: cv2.ml.Boost) -> DocumentEnvelope[BoostModelSchema] | None:
    """Parse the serialized form of a live model into schema records.

    Returns None for an untrained model.
    """
    if not boost.isTrained():
        return None

    text = write_model_string(boost, ".yml")
    fs = cv2.FileStorage(text, cv2.FILE_STORAGE_READ | cv2.FILE_STORAGE_MEMORY)
    try:
        node = fs.getFirstTopLevelNode()
        payload = node_to_python(node)
        name = node.name()
    finally:
        fs.release()

    try:
        return DocumentEnvelope[BoostModelSchema](name=name, model=payload)
    except ValidationError as e:
        raise DeserializationError(f"Unexpected model document layout: {e}") from e


__all__ = [
    "memory_target",
    "read_document",
    "read_model",
    "write_model_file",
    "write_model_string",
]
