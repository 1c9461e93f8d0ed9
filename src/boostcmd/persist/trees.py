"""Flat node/split tables rebuilt from a serialized ensemble.

Trees are stored depth-first, each node followed by its left subtree and then
its right subtree. Linking replays that order: a node with a split becomes the
parent of the next node; after a leaf, the walk climbs to the nearest
ancestor whose right child is still open.

Categorical splits are expanded into 32-bit subset words, one bit per
category, with a set bit meaning "go left".
"""

from __future__ import annotations

from dataclasses import astuple, dataclass, field

import numpy as np
from numpy.typing import NDArray

from boostcmd.persist.schema import BoostModelSchema, SplitSchema

VAR_CATEGORICAL = 1

NODE_DTYPE = np.dtype(
    [
        ("value", np.float64),
        ("classIdx", np.int32),
        ("parent", np.int32),
        ("left", np.int32),
        ("right", np.int32),
        ("defaultDir", np.int32),
        ("split", np.int32),
    ]
)

SPLIT_DTYPE = np.dtype(
    [
        ("varIdx", np.int32),
        ("inversed", np.bool_),
        ("quality", np.float32),
        ("next", np.int32),
        ("c", np.float32),
        ("subsetOfs", np.int32),
    ]
)


@dataclass(slots=True)
class NodeRecord:
    """Tree node; child and split fields are indices, -1 when absent."""

    value: float = 0.0
    class_idx: int = 0
    parent: int = -1
    left: int = -1
    right: int = -1
    default_dir: int = -1
    split: int = -1


@dataclass(slots=True)
class SplitRecord:
    """Split; ``next`` chains surrogate splits of the same node."""

    var_idx: int = 0
    inversed: bool = False
    quality: float = 0.0
    next: int = -1
    c: float = 0.0
    subset_ofs: int = 0


@dataclass
class Forest:
    """Linked ensemble tables."""

    nodes: list[NodeRecord] = field(default_factory=list)
    splits: list[SplitRecord] = field(default_factory=list)
    subsets: list[int] = field(default_factory=list)
    roots: list[int] = field(default_factory=list)

    def node_array(self) -> NDArray[np.void]:
        """Nodes as a structured array."""
        return np.array([astuple(n) for n in self.nodes], dtype=NODE_DTYPE)

    def split_array(self) -> NDArray[np.void]:
        """Splits as a structured array."""
        return np.array([astuple(s) for s in self.splits], dtype=SPLIT_DTYPE)

    def root_array(self) -> NDArray[np.int32]:
        """Root node index of every tree."""
        return np.asarray(self.roots, dtype=np.int32)

    def subset_array(self) -> NDArray[np.int32]:
        """Categorical subset words as signed 32-bit integers."""
        return np.asarray([_as_int32(w) for w in self.subsets], dtype=np.int32)


def _as_int32(word: int) -> int:
    word &= 0xFFFFFFFF
    return word - (1 << 32) if word & 0x80000000 else word


def _read_split(spec: SplitSchema, model: BoostModelSchema, forest: Forest) -> int:
    split = SplitRecord(var_idx=spec.var, quality=spec.quality)

    is_categorical = spec.var < len(model.var_type) and model.var_type[spec.var] == VAR_CATEGORICAL
    if is_categorical:
        n_words = (model.cat_count(spec.var) + 31) // 32
        split.subset_ofs = len(forest.subsets)
        words = [0] * n_words
        for cat in spec.categories:
            if 0 <= cat >> 5 < n_words:
                words[cat >> 5] |= 1 << (cat & 31)
        # Inverted membership is stored by flipping the subset, not the split
        if spec.in_ is None:
            words = [w ^ 0xFFFFFFFF for w in words]
        forest.subsets.extend(words)
    elif spec.le is not None:
        split.c = spec.le
    else:
        split.c = spec.gt if spec.gt is not None else 0.0
        split.inversed = True

    forest.splits.append(split)
    return len(forest.splits) - 1


def link_forest(model: BoostModelSchema) -> Forest:
    """Rebuild the node, split, subset and root tables of an ensemble."""
    forest = Forest()

    for tree in model.trees:
        root = -1
        pidx = -1
        for spec in tree.nodes:
            node = NodeRecord(value=spec.value, class_idx=spec.norm_class_idx or 0, parent=pidx)

            prev = -1
            for split_spec in spec.splits:
                sidx = _read_split(split_spec, model, forest)
                if prev < 0:
                    node.split = sidx
                else:
                    forest.splits[prev].next = sidx
                prev = sidx

            forest.nodes.append(node)
            nidx = len(forest.nodes) - 1

            if pidx < 0:
                root = nidx
            else:
                parent = forest.nodes[pidx]
                if parent.left < 0:
                    parent.left = nidx
                else:
                    parent.right = nidx

            if node.split >= 0:
                pidx = nidx
            else:
                while pidx >= 0 and forest.nodes[pidx].right >= 0:
                    pidx = forest.nodes[pidx].parent

        forest.roots.append(root)

    return forest


__all__ = [
    "NODE_DTYPE",
    "SPLIT_DTYPE",
    "Forest",
    "NodeRecord",
    "SplitRecord",
    "link_forest",
]
