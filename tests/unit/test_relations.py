"""Tests for relation tuples, queries, batches and query modes."""
import json

import pytest

from authz_admin.core.relations import (
    QueryMode,
    RelationBatch,
    RelationCheck,
    RelationQuery,
    RelationTuple,
    load_relation_batch,
    relations_from_wire,
    tuples_from_input,
    validate_query_fields,
)
from authz_admin.core.validators import ValidationError


def make_tuple(target="user:alice"):
    return RelationTuple("doc:1", "owner", "document", target)


class TestRelationTuple:
    def test_equality_is_structural(self):
        assert make_tuple() == make_tuple()
        assert make_tuple() != make_tuple("user:bob")
        assert len({make_tuple(), make_tuple()}) == 1

    @pytest.mark.parametrize("field", ["resource", "relation", "namespace", "target"])
    def test_every_field_is_required(self, field):
        values = {"resource": "doc:1", "relation": "owner", "namespace": "document", "target": "user:alice"}
        values[field] = None
        with pytest.raises(ValidationError, match=field):
            RelationTuple(**values)

    @pytest.mark.parametrize("value", [123, "   ", ["doc:1"]])
    def test_fields_must_be_non_blank_strings(self, value):
        with pytest.raises(ValidationError, match="'resource' must be a non-empty string"):
            RelationTuple.from_dict({**make_tuple().to_dict(), "resource": value})

    def test_wire_uses_relation_definition_key(self):
        payload = make_tuple().to_dict()
        assert payload == {
            "resource": "doc:1",
            "relationDefinition": "owner",
            "namespace": "document",
            "target": "user:alice",
        }
        assert RelationTuple.from_dict(payload) == make_tuple()


class TestRelationQuery:
    def test_all_fields_optional(self):
        assert RelationQuery().to_dict() == {}

    def test_to_dict_drops_missing_fields(self):
        assert RelationQuery(resource="doc:1", target="user:alice").to_dict() == {
            "resource": "doc:1",
            "target": "user:alice",
        }

    def test_check_result_carries_query(self):
        check = RelationCheck(RelationQuery(resource="doc:1"), True)
        assert check.to_dict() == {"resource": "doc:1", "hasRelation": True}


class TestRelationBatch:
    def test_empty_batch_is_rejected(self):
        with pytest.raises(ValidationError, match="Relations list cannot be empty"):
            RelationBatch(())

    def test_preserves_order(self):
        batch = RelationBatch([make_tuple("user:a"), make_tuple("user:b")])
        assert [relation.target for relation in batch] == ["user:a", "user:b"]
        assert len(batch) == 2

    def test_empty_relations_array_in_file_is_rejected(self, tmp_path):
        path = tmp_path / "relations.json"
        path.write_text(json.dumps({"relations": []}))

        with pytest.raises(ValidationError, match="cannot be empty"):
            load_relation_batch(path)

    def test_file_without_relations_array_is_rejected(self, tmp_path):
        path = tmp_path / "relations.json"
        path.write_text(json.dumps({"tuples": []}))

        with pytest.raises(ValidationError, match="'relations' array"):
            load_relation_batch(path)

    def test_loads_file(self, tmp_path):
        path = tmp_path / "relations.json"
        path.write_text(json.dumps({"relations": [make_tuple().to_dict()]}))

        assert load_relation_batch(path).relations == (make_tuple(),)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ValidationError, match="File not found"):
            load_relation_batch(tmp_path / "nope.json")

    def test_to_dict(self):
        assert RelationBatch([make_tuple()]).to_dict() == {"relations": [make_tuple().to_dict()]}


class TestTuplesFromInput:
    def test_individual_fields(self):
        batch = tuples_from_input(resource="doc:1", relation="owner", namespace="document", target="user:alice")
        assert batch.relations == (make_tuple(),)

    def test_file_and_fields_are_exclusive(self, tmp_path):
        with pytest.raises(ValidationError, match="Cannot specify both --file and individual relation options"):
            tuples_from_input(file=str(tmp_path / "r.json"), resource="doc:1")

    def test_partial_fields_are_rejected(self):
        with pytest.raises(ValidationError, match="Either provide --file or all of"):
            tuples_from_input(resource="doc:1", relation="owner")


class TestQueryModes:
    def test_parse_known_modes(self):
        assert QueryMode.parse("who-can-access") is QueryMode.WHO_CAN_ACCESS
        assert QueryMode.parse("resource-relations") is QueryMode.RESOURCE_RELATIONS
        assert QueryMode.parse("target-access") is QueryMode.TARGET_ACCESS

    def test_parse_unknown_mode(self):
        with pytest.raises(ValidationError) as exc:
            QueryMode.parse("everything")
        assert str(exc.value) == "Invalid mode. Must be one of: who-can-access, resource-relations, target-access"

    @pytest.mark.parametrize(
        "mode, fields",
        [
            (QueryMode.WHO_CAN_ACCESS, {"resource": "doc:1", "relation": "owner"}),
            (QueryMode.RESOURCE_RELATIONS, {"target": "user:alice"}),
            (QueryMode.TARGET_ACCESS, {"resource": "doc:1"}),
        ],
    )
    def test_missing_required_fields(self, mode, fields):
        with pytest.raises(ValidationError, match=f"{mode.value} mode requires"):
            validate_query_fields(mode, **fields)

    def test_whitespace_only_field_is_missing(self):
        with pytest.raises(ValidationError, match="target-access mode requires --target"):
            validate_query_fields(QueryMode.TARGET_ACCESS, target="   ")

    def test_complete_fields_pass(self):
        validate_query_fields(QueryMode.WHO_CAN_ACCESS, resource="doc:1", relation="owner", namespace="document")


def test_relations_from_wire():
    assert relations_from_wire(None) == []
    assert relations_from_wire([make_tuple().to_dict()]) == [make_tuple()]
