"""Tests for serialized-document schema and forest linking."""

from __future__ import annotations

from typing import Any

import pytest
from pydantic import ValidationError

from boostcmd.persist import FORMAT_VERSION, BoostModelSchema, DocumentEnvelope, Forest, link_forest
from boostcmd.persist.storage import memory_target


def make_document(**overrides: Any) -> dict[str, Any]:
    """Helper for a two-tree document over one ordered and one 3-category variable."""
    doc: dict[str, Any] = {
        "format": 3,
        "is_classifier": 1,
        "var_all": 3,
        "var_count": 2,
        "training_params": {"boosting_type": "RealAdaboost", "max_depth": 2, "splitting_criteria": "Default"},
        "var_type": [0, 1, 1],
        "cat_ofs": [0, 0, 0, 3, 3, 5],
        "class_labels": [0, 1],
        "ntrees": 2,
        "trees": [
            {
                "nodes": [
                    {"depth": 0, "value": 0.0, "norm_class_idx": 0, "splits": [{"var": 0, "quality": 2.0, "le": 0.5}]},
                    {"depth": 1, "value": -1.0, "norm_class_idx": 0},
                    {"depth": 1, "value": 0.2, "norm_class_idx": 1, "splits": [{"var": 1, "quality": 1.0, "in": [0, 2]}]},
                    {"depth": 2, "value": 0.7, "norm_class_idx": 1},
                    {"depth": 2, "value": -0.3, "norm_class_idx": 0},
                ]
            },
            {
                "nodes": [
                    {
                        "depth": 0,
                        "value": 0.0,
                        "splits": [
                            {"var": 0, "quality": 3.0, "gt": 1.5},
                            {"var": 1, "quality": 0.5, "not_in": 1},
                        ],
                    },
                    {"depth": 1, "value": 0.4},
                    {"depth": 1, "value": -0.4},
                ]
            },
        ],
    }
    doc.update(overrides)
    return doc


class TestSchema:
    """Tests for document validation."""

    def test_envelope(self) -> None:
        """Test the named envelope validates the model payload."""
        env = DocumentEnvelope[BoostModelSchema](name="opencv_ml_boost", model=make_document())
        assert env.model.format == FORMAT_VERSION
        assert env.model.ntrees == 2
        assert env.model.training_params.boosting_type == "RealAdaboost"

    def test_tree_count_mismatch(self) -> None:
        """Test the declared tree count must match."""
        with pytest.raises(ValidationError, match="ntrees"):
            BoostModelSchema.model_validate(make_document(ntrees=3))

    def test_split_alias(self) -> None:
        """Test the reserved-word key for category membership."""
        model = BoostModelSchema.model_validate(make_document())
        split = model.trees[0].nodes[2].splits[0]
        assert split.is_categorical
        assert split.categories == [0, 2]

    def test_cat_count(self) -> None:
        """Test category counts from the offset pairs."""
        model = BoostModelSchema.model_validate(make_document())
        assert model.cat_count(0) == 0
        assert model.cat_count(1) == 3
        assert model.cat_count(9) == 0


class TestLinkForest:
    """Tests for depth-first linkage."""

    @pytest.fixture
    def forest(self) -> Forest:
        """Linked forest of the sample document."""
        return link_forest(BoostModelSchema.model_validate(make_document()))

    def test_roots(self, forest: Forest) -> None:
        """Test one root per tree."""
        assert forest.root_array().tolist() == [0, 5]

    def test_children(self, forest: Forest) -> None:
        """Test parent and child indices."""
        nodes = forest.node_array()
        assert nodes["parent"].tolist() == [-1, 0, 0, 2, 2, -1, 5, 5]
        assert nodes["left"].tolist() == [1, -1, 3, -1, -1, 6, -1, -1]
        assert nodes["right"].tolist() == [2, -1, 4, -1, -1, 7, -1, -1]
        assert nodes["split"].tolist() == [0, -1, 1, -1, -1, 2, -1, -1]
        assert nodes["defaultDir"].tolist() == [-1] * 8
        assert nodes["classIdx"].tolist() == [0, 0, 1, 1, 0, 0, 0, 0]

    def test_ordered_splits(self, forest: Forest) -> None:
        """Test le and gt thresholds."""
        splits = forest.split_array()
        assert splits[0]["c"] == pytest.approx(0.5)
        assert not splits[0]["inversed"]
        assert splits[2]["c"] == pytest.approx(1.5)
        assert splits[2]["inversed"]

    def test_surrogate_chain(self, forest: Forest) -> None:
        """Test surrogate splits chain through next."""
        splits = forest.split_array()
        assert splits["next"].tolist() == [-1, -1, 3, -1]
        assert splits[3]["varIdx"] == 1

    def test_categorical_subsets(self, forest: Forest) -> None:
        """Test membership bits, with not_in stored as the complement."""
        splits = forest.split_array()
        assert splits[1]["subsetOfs"] == 0
        assert splits[3]["subsetOfs"] == 1
        # {0, 2} -> 0b101; not {1} -> ~0b010 as a signed word
        assert forest.subset_array().tolist() == [5, -3]

    def test_empty(self) -> None:
        """Test a document without trees."""
        forest = link_forest(BoostModelSchema.model_validate(make_document(ntrees=0, trees=[])))
        assert len(forest.node_array()) == 0
        assert len(forest.root_array()) == 0


class TestMemoryTarget:
    """Tests for picking the in-memory text format."""

    @pytest.mark.parametrize(
        "name, expected",
        [
            (".xml", "model.xml"),
            (".JSON", "model.json"),
            ("out/model.yaml", "model.yaml"),
            ("model.XML", "model.xml"),
            ("plain", "model.yml"),
            (".bin", "model.yml"),
        ],
    )
    def test_suffix(self, name: str, expected: str) -> None:
        """Test bare extensions and file names select the format."""
        assert memory_target(name) == expected

    def test_default(self) -> None:
        """Test the fallback format for unrecognized names."""
        assert memory_target("plain", ".xml") == "model.xml"
