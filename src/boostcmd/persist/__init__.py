"""Model serialization and the document schema used for tree introspection."""

from __future__ import annotations

from boostcmd.persist.schema import FORMAT_VERSION, BoostModelSchema, DocumentEnvelope
from boostcmd.persist.storage import (
    memory_target,
    read_document,
    read_model,
    write_model_file,
    write_model_string,
)
from boostcmd.persist.trees import NODE_DTYPE, SPLIT_DTYPE, Forest, link_forest

__all__ = [
    "FORMAT_VERSION",
    "NODE_DTYPE",
    "SPLIT_DTYPE",
    "BoostModelSchema",
    "DocumentEnvelope",
    "Forest",
    "link_forest",
    "memory_target",
    "read_document",
    "read_model",
    "write_model_file",
    "write_model_string",
]
