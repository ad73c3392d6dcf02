"""Portable schema ↔ canonical tree conversion.

Usage:
    # file model → tree sent to the backend
    schema = SchemaCodec.encode(read_schema_file("schema.json"))

    # backend tree → file model (shortcut form only)
    model = SchemaCodec.decode(schema)

Kind strings are parsed leniently. An unrecognized or missing node kind is
read as CHILD and an unrecognized or missing expression kind as SELF; every
such default is logged at WARNING so that a mistyped schema file is visible.

Decoding is lossy: only CHILD/SELF leaves, directly or under UNION nodes,
contribute target namespaces. Trees using INTERSECT, SUB or non-SELF
expressions decode to an empty or partial ``targetNamespaces`` list.
"""
from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional

from .schema import (
    COMPOSITE_NODES,
    ChildNode,
    Namespace,
    NamespaceModel,
    Node,
    NodeExpression,
    NodeExpressionModel,
    NodeExpressionType,
    NodeModel,
    NodeType,
    RelationDefinition,
    RelationDefinitionModel,
    Schema,
    SchemaModel,
    UnionNode,
)
from .validators import ValidationError

logger = logging.getLogger(__name__)

_NODE_TYPES = {
    "child": NodeType.CHILD,
    "union": NodeType.UNION,
    "intersect": NodeType.INTERSECT,
    "sub": NodeType.SUB,
}

_EXPRESSION_TYPES = {
    "self": NodeExpressionType.SELF,
    "targetset": NodeExpressionType.TARGET_SET,
    "target_set": NodeExpressionType.TARGET_SET,
    "relationleft": NodeExpressionType.RELATION_LEFT,
    "relation_left": NodeExpressionType.RELATION_LEFT,
    "relationright": NodeExpressionType.RELATION_RIGHT,
    "relation_right": NodeExpressionType.RELATION_RIGHT,
}


def parse_node_type(value: Optional[str]) -> NodeType:
    """Map a node kind string to NodeType, defaulting to CHILD."""
    if isinstance(value, str):
        node_type = _NODE_TYPES.get(value.strip().lower())
        if node_type is not None:
            return node_type
    logger.warning("Unrecognized node type %r in schema; defaulting to %s", value, NodeType.CHILD.value)
    return NodeType.CHILD


def parse_expression_type(value: Optional[str]) -> NodeExpressionType:
    """Map an expression kind string to NodeExpressionType, defaulting to SELF."""
    if isinstance(value, str):
        expression_type = _EXPRESSION_TYPES.get(value.strip().lower())
        if expression_type is not None:
            return expression_type
    logger.warning(
        "Unrecognized node expression type %r in schema; defaulting to %s",
        value,
        NodeExpressionType.SELF.value,
    )
    return NodeExpressionType.SELF


def self_node(relation_name: str, target_namespace: str) -> ChildNode:
    """CHILD/SELF leaf: subjects directly assigned to ``relation_name`` from ``target_namespace``."""
    return ChildNode(
        NodeExpression(
            NodeExpressionType.SELF,
            target_relation_definition=relation_name,
            target_relation_definition_namespace=target_namespace,
        )
    )


def extract_target_namespaces(node: Optional[Node]) -> List[str]:
    """Recover shortcut target namespaces from a tree.

    Order is preserved and duplicates are kept.
    """
    if node is None:
        return []
    if isinstance(node, ChildNode):
        expression = node.expression
        if expression.kind is NodeExpressionType.SELF and expression.target_relation_definition_namespace is not None:
            return [expression.target_relation_definition_namespace]
        return []
    if isinstance(node, UnionNode):
        targets: List[str] = []
        for child in node.children:
            targets.extend(extract_target_namespaces(child))
        return targets
    return []


class SchemaCodec:
    """Bidirectional converter between portable schema models and the canonical tree."""

    # ─────────────────────────────────────────────────────────────────────
    # Portable → canonical
    # ─────────────────────────────────────────────────────────────────────

    @staticmethod
    def encode(model: SchemaModel) -> Schema:
        """Convert a portable schema into the canonical tree.

        Example:
            >>> model = SchemaModel.from_dict({"namespaces": [{"name": "doc",
            ...     "relationDefinitions": [{"name": "owner", "targetNamespaces": ["user"]}]}]})
            >>> SchemaCodec.encode(model).namespaces[0].relation_definitions[0].complex_definition.kind
            <NodeType.CHILD: 'child'>
        """
        return Schema(
            name=model.name,
            namespaces=tuple(SchemaCodec.encode_namespace(namespace) for namespace in model.namespaces),
        )

    @staticmethod
    def encode_namespace(model: NamespaceModel) -> Namespace:
        return Namespace(
            name=model.name,
            relation_definitions=tuple(
                SchemaCodec.encode_relation_definition(definition) for definition in model.relation_definitions
            ),
        )

    @staticmethod
    def encode_relation_definition(model: RelationDefinitionModel) -> RelationDefinition:
        """Pick the complex definition, or synthesize one from the shortcut form.

        No targets means no directly assignable subjects, so the relation has no
        complex definition. One target becomes a CHILD/SELF leaf; several become
        a UNION of CHILD/SELF leaves in input order.
        """
        if model.complex_definition is not None:
            node = SchemaCodec.encode_node(model.complex_definition)
        elif not model.target_namespaces:
            node = None
        elif len(model.target_namespaces) == 1:
            node = self_node(model.name, model.target_namespaces[0])
        else:
            node = UnionNode(tuple(self_node(model.name, target) for target in model.target_namespaces))
        return RelationDefinition(name=model.name, complex_definition=node)

    @staticmethod
    def encode_node(model: NodeModel) -> Node:
        node_type = parse_node_type(model.n_type)
        if node_type is NodeType.CHILD:
            if model.expression is None:
                raise ValidationError("Node of type 'child' requires an expression")
            if model.children:
                logger.warning("Ignoring %d children on a 'child' node", len(model.children))
            return ChildNode(SchemaCodec.encode_expression(model.expression))

        if model.expression is not None:
            logger.warning("Ignoring expression on a '%s' node", node_type.value)
        children = tuple(SchemaCodec.encode_node(child) for child in model.children or ())
        return COMPOSITE_NODES[node_type](children)

    @staticmethod
    def encode_expression(model: NodeExpressionModel) -> NodeExpression:
        return NodeExpression(
            kind=parse_expression_type(model.ne_type),
            relation_definition=model.relation_definition,
            relation_definition_namespace=model.relation_definition_namespace,
            target_relation_definition=model.target_relation_definition,
            target_relation_definition_namespace=model.target_relation_definition_namespace,
        )

    # ─────────────────────────────────────────────────────────────────────
    # Canonical → portable
    # ─────────────────────────────────────────────────────────────────────

    @staticmethod
    def decode(schema: Schema) -> SchemaModel:
        """Convert a canonical tree back into the shortcut portable form."""
        return SchemaModel(
            name=schema.name,
            namespaces=tuple(
                NamespaceModel(
                    name=namespace.name,
                    relation_definitions=tuple(
                        RelationDefinitionModel(
                            name=definition.name,
                            target_namespaces=tuple(extract_target_namespaces(definition.complex_definition)),
                        )
                        for definition in namespace.relation_definitions
                    ),
                )
                for namespace in schema.namespaces
            ),
        )

    # ─────────────────────────────────────────────────────────────────────
    # Backend wire format → canonical
    # ─────────────────────────────────────────────────────────────────────

    @staticmethod
    def from_wire(payload: Dict[str, Any]) -> Schema:
        """Parse the backend's schema JSON into the canonical tree.

        The wire format has the same shape as a schema file whose relations all
        carry a ``complexDefinition``, so it is read through the portable models.
        """
        return SchemaCodec.encode(SchemaModel.from_dict(payload))
