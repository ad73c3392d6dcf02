"""Relation tuple model, partial-match queries and batch files.

A relation tuple is one edge of the authorization graph: ``target`` holds
``relation`` on ``resource`` within ``namespace``. On the wire the relation
field is named ``relationDefinition``.
"""
from __future__ import annotations
import enum
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple

from .validators import ValidationError

TUPLE_FIELDS = ("resource", "relation", "namespace", "target")


@dataclass(frozen=True)
class RelationTuple:
    resource: str
    relation: str
    namespace: str
    target: str

    def __post_init__(self):
        for name in TUPLE_FIELDS:
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ValidationError(f"Relation tuple field '{name}' must be a non-empty string")

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "RelationTuple":
        if not isinstance(payload, dict):
            raise ValidationError("Relation tuple must be a JSON object")
        return cls(
            resource=payload.get("resource"),
            relation=payload.get("relationDefinition"),
            namespace=payload.get("namespace"),
            target=payload.get("target"),
        )

    def to_dict(self) -> Dict[str, str]:
        return {
            "resource": self.resource,
            "relationDefinition": self.relation,
            "namespace": self.namespace,
            "target": self.target,
        }


@dataclass(frozen=True)
class RelationQuery:
    """Partial-match filter; every field is optional."""
    resource: Optional[str] = None
    relation: Optional[str] = None
    namespace: Optional[str] = None
    target: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "RelationQuery":
        if not isinstance(payload, dict):
            raise ValidationError("Relation query must be a JSON object")
        return cls(
            resource=payload.get("resource"),
            relation=payload.get("relationDefinition"),
            namespace=payload.get("namespace"),
            target=payload.get("target"),
        )

    def to_dict(self) -> Dict[str, str]:
        payload = {
            "resource": self.resource,
            "relationDefinition": self.relation,
            "namespace": self.namespace,
            "target": self.target,
        }
        return {key: value for key, value in payload.items() if value is not None}


@dataclass(frozen=True)
class RelationCheck:
    """Answer to one RelationQuery."""
    query: RelationQuery
    has_relation: bool

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = self.query.to_dict()
        payload["hasRelation"] = self.has_relation
        return payload


@dataclass(frozen=True)
class RelationBatch:
    """Ordered, non-empty list of relation tuples."""
    relations: Tuple[RelationTuple, ...]

    def __post_init__(self):
        relations = tuple(self.relations or ())
        if not relations:
            raise ValidationError("Relations list cannot be empty")
        object.__setattr__(self, "relations", relations)

    def __len__(self) -> int:
        return len(self.relations)

    def __iter__(self):
        return iter(self.relations)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "RelationBatch":
        if not isinstance(payload, dict):
            raise ValidationError("Relation file must contain a JSON object")
        relations = payload.get("relations")
        if not isinstance(relations, list):
            raise ValidationError("Relation file must contain a 'relations' array")
        return cls(tuple(RelationTuple.from_dict(item) for item in relations))

    def to_dict(self) -> Dict[str, Any]:
        return {"relations": [relation.to_dict() for relation in self.relations]}


def load_relation_batch(path: str | Path) -> RelationBatch:
    """Read a ``{"relations": [...]}`` file.

    Raises:
        ValidationError: Missing file, invalid JSON, or an empty batch
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise ValidationError(f"File not found: {path}")
    try:
        payload = json.loads(file_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValidationError(f"Invalid JSON in {path}: {exc}") from exc
    return RelationBatch.from_dict(payload)


def tuples_from_input(
    file: Optional[str] = None,
    resource: Optional[str] = None,
    relation: Optional[str] = None,
    namespace: Optional[str] = None,
    target: Optional[str] = None,
) -> RelationBatch:
    """Resolve relation input given either a batch file or the four individual fields."""
    individual = (resource, relation, namespace, target)
    if file is not None:
        if any(value is not None for value in individual):
            raise ValidationError("Cannot specify both --file and individual relation options")
        return load_relation_batch(file)
    if any(value is None for value in individual):
        raise ValidationError(
            "Either provide --file or all of --resource, --relation, --namespace, and --target"
        )
    return RelationBatch((RelationTuple(resource, relation, namespace, target),))


class QueryMode(enum.Enum):
    """Read-only reachability queries and the fields each one needs."""
    WHO_CAN_ACCESS = "who-can-access"
    RESOURCE_RELATIONS = "resource-relations"
    TARGET_ACCESS = "target-access"

    @property
    def required_fields(self) -> Tuple[str, ...]:
        return _REQUIRED_FIELDS[self]

    @classmethod
    def parse(cls, value: str) -> "QueryMode":
        try:
            return cls(value)
        except ValueError:
            valid = ", ".join(mode.value for mode in cls)
            raise ValidationError(f"Invalid mode. Must be one of: {valid}") from None


_REQUIRED_FIELDS = {
    QueryMode.WHO_CAN_ACCESS: ("resource", "relation", "namespace"),
    QueryMode.RESOURCE_RELATIONS: ("resource",),
    QueryMode.TARGET_ACCESS: ("target",),
}


def validate_query_fields(mode: QueryMode, **fields: Optional[str]) -> None:
    """Reject a query that lacks any field its mode requires."""
    missing = [name for name in mode.required_fields if not (fields.get(name) or "").strip()]
    if missing:
        flags = ", ".join(f"--{name}" for name in mode.required_fields)
        raise ValidationError(f"{mode.value} mode requires {flags}")


def relations_from_wire(items: Optional[Iterable[Dict[str, Any]]]) -> list[RelationTuple]:
    """Convert backend relation objects into tuples."""
    return [RelationTuple.from_dict(item) for item in items or []]
