"""Pydantic models mirroring the serialized boosted-tree document.

The model library writes a hierarchical document (XML, YAML or JSON) tagged
with the model's default name. These models validate the parts of that
document needed to expose the trained ensemble as records. Field names match
the keys the library writes.

Example:
-------
>>> from boostcmd.persist.schema import DocumentEnvelope, BoostModelSchema
>>> envelope = DocumentEnvelope[BoostModelSchema](name="opencv_ml_boost", model=doc)  # doctest: +SKIP
>>> len(envelope.model.trees)  # doctest: +SKIP
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

T = TypeVar("T")

FORMAT_VERSION = 3
"""Document format version written by the library."""

# -----------------------------------------------------------------------------
# Envelope
# -----------------------------------------------------------------------------


class DocumentEnvelope(BaseModel, Generic[T]):
    """Top-level node of a serialized model.

    Attributes:
    ----------
    name
        Tag of the top-level node (the model's default name).
    model
        The model payload.
    """

    name: str
    model: T


# -----------------------------------------------------------------------------
# Trees
# -----------------------------------------------------------------------------


class SplitSchema(BaseModel):
    """One split of a node (primary or surrogate).

    Ordered splits carry ``le`` (go left when ``x <= c``) or ``gt`` (inversed).
    Categorical splits carry the category indices going left in ``in`` or,
    inverted, ``not_in``. A single index may be written as a bare integer.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    var: int
    quality: float = 0.0
    le: float | None = None
    gt: float | None = None
    in_: list[int] | int | None = Field(default=None, alias="in")
    not_in: list[int] | int | None = None

    @property
    def is_categorical(self) -> bool:
        """Whether the split tests category membership."""
        return self.in_ is not None or self.not_in is not None

    @property
    def categories(self) -> list[int]:
        """Category indices listed in the split."""
        values = self.in_ if self.in_ is not None else self.not_in
        if values is None:
            return []
        return [values] if isinstance(values, int) else list(values)


class NodeSchema(BaseModel):
    """One node in depth-first order."""

    model_config = ConfigDict(extra="ignore")

    depth: int
    value: float
    norm_class_idx: int | None = None
    splits: list[SplitSchema] = Field(default_factory=list)


class TreeSchema(BaseModel):
    """A single tree as a depth-first node list."""

    model_config = ConfigDict(extra="ignore")

    nodes: list[NodeSchema]


# -----------------------------------------------------------------------------
# Model
# -----------------------------------------------------------------------------


class TrainingParamsSchema(BaseModel):
    """Hyperparameters recorded alongside the trees."""

    model_config = ConfigDict(extra="allow")

    boosting_type: str | None = None
    use_surrogates: int = 0
    max_categories: int = 0
    regression_accuracy: float = 0.0
    max_depth: int = 0
    min_sample_count: int = 0
    cross_validation_folds: int = 0
    weight_trimming_rate: float | None = None


class BoostModelSchema(BaseModel):
    """Trained boosted-tree ensemble.

    Attributes:
    ----------
    format
        Document format version.
    var_all
        Number of variables including the response.
    var_type
        Per-variable type code (0 ordered, 1 categorical).
    cat_ofs
        Flattened ``(begin, end)`` pairs of category ranges per variable.
    trees
        The weak learners.
    """

    model_config = ConfigDict(extra="ignore")

    format: int = FORMAT_VERSION
    is_classifier: int = 0
    var_all: int
    var_count: int
    training_params: TrainingParamsSchema = Field(default_factory=TrainingParamsSchema)
    var_type: list[int]
    cat_ofs: list[int] = Field(default_factory=list)
    class_labels: list[int] = Field(default_factory=list)
    ntrees: int
    trees: list[TreeSchema]

    @model_validator(mode="after")
    def check_tree_count(self) -> BoostModelSchema:
        """Validate the declared tree count matches the tree list."""
        if self.ntrees != len(self.trees):
            raise ValueError(f"ntrees={self.ntrees} but {len(self.trees)} trees present")
        return self

    def cat_count(self, var_idx: int) -> int:
        """Number of categories of a categorical variable."""
        if 2 * var_idx + 1 >= len(self.cat_ofs):
            return 0
        return self.cat_ofs[2 * var_idx + 1] - self.cat_ofs[2 * var_idx]


def node_to_python(node: Any) -> Any:
    """Convert a ``cv2.FileNode`` subtree to plain dicts, lists and scalars."""
    if node.isMap():
        return {key: node_to_python(node.getNode(key)) for key in node.keys()}
    if node.isSeq():
        return [node_to_python(node.at(i)) for i in range(node.size())]
    if node.isInt():
        return int(node.real())
    if node.isReal():
        return float(node.real())
    if node.isString():
        return node.string()
    return None


__all__ = [
    "FORMAT_VERSION",
    "BoostModelSchema",
    "DocumentEnvelope",
    "NodeSchema",
    "SplitSchema",
    "TrainingParamsSchema",
    "TreeSchema",
    "node_to_python",
]
