"""ReBAC schema data model.

Two representations live here:

* the **canonical tree** sent to and received from the backend::

      Schema -> Namespace -> RelationDefinition -> Node -> NodeExpression

  where ``Node`` is a recursive sum type: ``ChildNode(expression)``,
  ``UnionNode(children)``, ``IntersectNode(children)`` or ``SubNode(children)``.

* the **portable models** (``*Model`` classes) mirroring the schema file
  format, in which a relation may be written with the ``targetNamespaces``
  shortcut instead of a full ``complexDefinition`` tree.

Every object is a frozen dataclass whose collections are tuples, so a loaded
schema can be shared without callers corrupting it. Conversion between the two
representations lives in ``schema_codec``.
"""
from __future__ import annotations
import enum
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, ClassVar, Dict, Optional, Tuple

import yaml

from .validators import ValidationError


# ─────────────────────────────────────────────────────────────────────────────
# Canonical tree
# ─────────────────────────────────────────────────────────────────────────────

class NodeType(enum.Enum):
    CHILD = "child"
    UNION = "union"
    INTERSECT = "intersect"
    SUB = "sub"


class NodeExpressionType(enum.Enum):
    SELF = "self"
    TARGET_SET = "targetSet"
    RELATION_LEFT = "relationLeft"
    RELATION_RIGHT = "relationRight"


@dataclass(frozen=True)
class NodeExpression:
    """Leaf of a relation expression.

    The meaning of the four string fields depends on ``kind``; for SELF the
    target pair names the relation and the namespace whose subjects are
    directly assigned.
    """
    kind: NodeExpressionType
    relation_definition: Optional[str] = None
    relation_definition_namespace: Optional[str] = None
    target_relation_definition: Optional[str] = None
    target_relation_definition_namespace: Optional[str] = None

    def to_wire(self) -> Dict[str, Any]:
        payload = {
            "neType": self.kind.value,
            "relationDefinition": self.relation_definition,
            "relationDefinitionNamespace": self.relation_definition_namespace,
            "targetRelationDefinition": self.target_relation_definition,
            "targetRelationDefinitionNamespace": self.target_relation_definition_namespace,
        }
        return {key: value for key, value in payload.items() if value is not None}


class Node:
    """Base of the expression tree sum type."""
    kind: ClassVar[NodeType]

    def to_wire(self) -> Dict[str, Any]:
        raise NotImplementedError


@dataclass(frozen=True)
class ChildNode(Node):
    """Leaf holder: exactly one expression, no children."""
    expression: NodeExpression
    kind: ClassVar[NodeType] = NodeType.CHILD

    @property
    def children(self) -> Tuple[Node, ...]:
        return ()

    def to_wire(self) -> Dict[str, Any]:
        return {"nType": self.kind.value, "expression": self.expression.to_wire()}


@dataclass(frozen=True)
class _CompositeNode(Node):
    children: Tuple[Node, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "children", tuple(self.children or ()))

    def to_wire(self) -> Dict[str, Any]:
        return {"nType": self.kind.value, "children": [child.to_wire() for child in self.children]}


@dataclass(frozen=True)
class UnionNode(_CompositeNode):
    kind: ClassVar[NodeType] = NodeType.UNION


@dataclass(frozen=True)
class IntersectNode(_CompositeNode):
    kind: ClassVar[NodeType] = NodeType.INTERSECT


@dataclass(frozen=True)
class SubNode(_CompositeNode):
    kind: ClassVar[NodeType] = NodeType.SUB


COMPOSITE_NODES = {
    NodeType.UNION: UnionNode,
    NodeType.INTERSECT: IntersectNode,
    NodeType.SUB: SubNode,
}


@dataclass(frozen=True)
class RelationDefinition:
    name: str
    complex_definition: Optional[Node] = None

    def to_wire(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"name": self.name}
        if self.complex_definition is not None:
            payload["complexDefinition"] = self.complex_definition.to_wire()
        return payload


@dataclass(frozen=True)
class Namespace:
    name: str
    relation_definitions: Tuple[RelationDefinition, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "relation_definitions", tuple(self.relation_definitions or ()))

    def to_wire(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "relationDefinitions": [definition.to_wire() for definition in self.relation_definitions],
        }


@dataclass(frozen=True)
class Schema:
    name: Optional[str] = None
    namespaces: Tuple[Namespace, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "namespaces", tuple(self.namespaces or ()))

    def to_wire(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"namespaces": [namespace.to_wire() for namespace in self.namespaces]}
        if self.name is not None:
            payload["name"] = self.name
        return payload


# ─────────────────────────────────────────────────────────────────────────────
# Portable (file) models
# ─────────────────────────────────────────────────────────────────────────────

def _require_name(payload: Dict[str, Any], what: str) -> str:
    name = payload.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ValidationError(f"{what} name cannot be empty")
    return name


def _require_object(payload: Any, what: str) -> Dict[str, Any]:
    if not isinstance(payload, dict):
        raise ValidationError(f"{what} must be an object")
    return payload


def _optional_list(payload: Dict[str, Any], key: str, what: str) -> list:
    value = payload.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValidationError(f"{what} '{key}' must be a list")
    return value


@dataclass(frozen=True)
class NodeExpressionModel:
    ne_type: Optional[str] = None
    relation_definition: Optional[str] = None
    relation_definition_namespace: Optional[str] = None
    target_relation_definition: Optional[str] = None
    target_relation_definition_namespace: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "NodeExpressionModel":
        payload = _require_object(payload, "Node expression")
        return cls(
            ne_type=payload.get("neType"),
            relation_definition=payload.get("relationDefinition"),
            relation_definition_namespace=payload.get("relationDefinitionNamespace"),
            target_relation_definition=payload.get("targetRelationDefinition"),
            target_relation_definition_namespace=payload.get("targetRelationDefinitionNamespace"),
        )

    def to_dict(self) -> Dict[str, Any]:
        payload = {
            "neType": self.ne_type,
            "relationDefinition": self.relation_definition,
            "relationDefinitionNamespace": self.relation_definition_namespace,
            "targetRelationDefinition": self.target_relation_definition,
            "targetRelationDefinitionNamespace": self.target_relation_definition_namespace,
        }
        return {key: value for key, value in payload.items() if value is not None}


@dataclass(frozen=True)
class NodeModel:
    n_type: Optional[str] = None
    children: Optional[Tuple["NodeModel", ...]] = None
    expression: Optional[NodeExpressionModel] = None

    def __post_init__(self):
        if self.children is not None:
            object.__setattr__(self, "children", tuple(self.children))

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "NodeModel":
        payload = _require_object(payload, "Node")
        children = payload.get("children")
        if children is not None and not isinstance(children, list):
            raise ValidationError("Node 'children' must be a list")
        expression = payload.get("expression")
        return cls(
            n_type=payload.get("nType"),
            children=tuple(cls.from_dict(child) for child in children) if children is not None else None,
            expression=NodeExpressionModel.from_dict(expression) if expression is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        if self.n_type is not None:
            payload["nType"] = self.n_type
        if self.children is not None:
            payload["children"] = [child.to_dict() for child in self.children]
        if self.expression is not None:
            payload["expression"] = self.expression.to_dict()
        return payload


@dataclass(frozen=True)
class RelationDefinitionModel:
    name: str
    target_namespaces: Tuple[str, ...] = ()
    complex_definition: Optional[NodeModel] = None

    def __post_init__(self):
        object.__setattr__(self, "target_namespaces", tuple(self.target_namespaces or ()))

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "RelationDefinitionModel":
        payload = _require_object(payload, "Relation definition")
        targets = _optional_list(payload, "targetNamespaces", "Relation definition")
        if not all(isinstance(target, str) for target in targets):
            raise ValidationError("Relation definition 'targetNamespaces' must contain strings")
        complex_definition = payload.get("complexDefinition")
        return cls(
            name=_require_name(payload, "Relation"),
            target_namespaces=tuple(targets),
            complex_definition=NodeModel.from_dict(complex_definition) if complex_definition is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"name": self.name, "targetNamespaces": list(self.target_namespaces)}
        if self.complex_definition is not None:
            payload["complexDefinition"] = self.complex_definition.to_dict()
        return payload


@dataclass(frozen=True)
class NamespaceModel:
    name: str
    relation_definitions: Tuple[RelationDefinitionModel, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "relation_definitions", tuple(self.relation_definitions or ()))

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "NamespaceModel":
        payload = _require_object(payload, "Namespace")
        definitions = _optional_list(payload, "relationDefinitions", "Namespace")
        return cls(
            name=_require_name(payload, "Namespace"),
            relation_definitions=tuple(RelationDefinitionModel.from_dict(item) for item in definitions),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "relationDefinitions": [definition.to_dict() for definition in self.relation_definitions],
        }


@dataclass(frozen=True)
class SchemaModel:
    name: Optional[str] = None
    namespaces: Tuple[NamespaceModel, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "namespaces", tuple(self.namespaces or ()))

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "SchemaModel":
        payload = _require_object(payload, "Schema")
        namespaces = _optional_list(payload, "namespaces", "Schema")
        name = payload.get("name")
        if name is not None and not isinstance(name, str):
            raise ValidationError("Schema 'name' must be a string")
        return cls(name=name, namespaces=tuple(NamespaceModel.from_dict(item) for item in namespaces))

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"namespaces": [namespace.to_dict() for namespace in self.namespaces]}
        if self.name is not None:
            payload["name"] = self.name
        return payload


def read_schema_file(path: str | Path) -> SchemaModel:
    """Load a portable schema from a JSON file (YAML for .yaml / .yml).

    Raises:
        ValidationError: Missing file, unparsable content or malformed schema
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise ValidationError(f"Schema file not found: {path}")
    text = file_path.read_text(encoding="utf-8")
    try:
        if file_path.suffix.lower() in (".yaml", ".yml"):
            payload = yaml.safe_load(text)
        else:
            payload = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ValidationError(f"Failed to read schema file {path}: {exc}") from exc
    return SchemaModel.from_dict(payload)
