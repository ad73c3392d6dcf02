"""Descope ReBAC schema and relation operations."""
from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional, Sequence

from authz_admin.core.relations import (
    RelationCheck,
    RelationQuery,
    RelationTuple,
    relations_from_wire,
)
from authz_admin.core.schema import Schema
from authz_admin.core.schema_codec import SchemaCodec
from authz_admin.core.validators import ValidationError

from .client import DescopeClient
from .exceptions import DescopeAPIError, DescopeResponseError

logger = logging.getLogger(__name__)


class AuthzService:
    """Service for the Descope authorization (ReBAC) endpoints."""

    def __init__(self, client: DescopeClient):
        """Initialize authz service.

        Args:
            client: Descope client for one operation
        """
        self.client = client

    # ─────────────────────────────────────────────────────────────────────
    # Schema
    # ─────────────────────────────────────────────────────────────────────

    def load_schema(self) -> Optional[Schema]:
        """Return the project's schema, or None when none is stored."""
        try:
            body = self.client.post("/v1/mgmt/authz/schema/load", json={})
        except DescopeAPIError as exc:
            if exc.is_not_found:
                return None
            raise
        payload = body.get("schema")
        if not payload:
            return None
        try:
            return SchemaCodec.from_wire(payload)
        except ValidationError as exc:
            raise DescopeResponseError(str(exc), "/v1/mgmt/authz/schema/load") from exc

    def save_schema(self, schema: Schema, upgrade: bool = False) -> None:
        """Store ``schema``, replacing the current one.

        Args:
            schema: Canonical schema tree
            upgrade: Allow changes that would invalidate existing relations
        """
        self.client.post("/v1/mgmt/authz/schema/save", json={"schema": schema.to_wire(), "upgrade": upgrade})
        logger.debug("Saved schema with %d namespaces (upgrade=%s)", len(schema.namespaces), upgrade)

    def delete_schema(self) -> None:
        self.client.post("/v1/mgmt/authz/schema/delete", json={})

    # ─────────────────────────────────────────────────────────────────────
    # Relations
    # ─────────────────────────────────────────────────────────────────────

    def create_relations(self, relations: Sequence[RelationTuple]) -> None:
        self.client.post("/v1/mgmt/authz/re/save", json={"relations": [r.to_dict() for r in relations]})

    def delete_relations(self, relations: Sequence[RelationTuple]) -> None:
        self.client.post("/v1/mgmt/authz/re/delete", json={"relations": [r.to_dict() for r in relations]})

    def has_relations(self, queries: Sequence[RelationQuery]) -> List[RelationCheck]:
        """Ask whether each query matches a stored relation.

        The result holds one entry per query, in input order. A query the
        backend leaves out of its answer is reported as not related.
        """
        body = self.client.post(
            "/v1/mgmt/authz/re/has",
            json={"relationQueries": [query.to_dict() for query in queries]},
        )
        answers: List[Dict[str, Any]] = body.get("relationQueries") or []
        checks = []
        for index, query in enumerate(queries):
            answer = answers[index] if index < len(answers) else {}
            checks.append(RelationCheck(query, bool(answer.get("hasRelation"))))
        return checks

    def who_can_access(self, resource: str, relation: str, namespace: str) -> List[str]:
        body = self.client.post(
            "/v1/mgmt/authz/re/who",
            json={"resource": resource, "relationDefinition": relation, "namespace": namespace},
        )
        return list(body.get("targets") or [])

    def resource_relations(self, resource: str) -> List[RelationTuple]:
        body = self.client.post("/v1/mgmt/authz/re/resource", json={"resource": resource})
        return relations_from_wire(body.get("relations"))

    def what_can_target_access(self, target: str) -> List[RelationTuple]:
        body = self.client.post("/v1/mgmt/authz/re/targetall", json={"targets": [target]})
        return relations_from_wire(body.get("relations"))
