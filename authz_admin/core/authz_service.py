"""
Authorization Service Layer: ReBAC schema and relation tuples

Schema operations:
    - create_schema(): encode a portable schema and save it (upsert with
      replace, ``upgrade`` forwarded to the backend)
    - load_schema(): load and decode to the shortcut form (lossy for
      INTERSECT / SUB trees)
    - delete_schema()

Relation operations:
    - create_relations() / delete_relations(): one all-or-nothing batch call
    - check_relations(): one RelationCheck per query, input order
    - who_can_access() / resource_relations() / what_can_target_access()
    - query_relations(): mode dispatcher, validates required fields first

Absence of a schema is reported as a Failure result. Backend failures raise
DescopeOperationError.
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

from authz_admin.config.settings import DescopeConfig
from authz_admin.core.descope import AuthzService, DescopeError, create_client, wrap_exception
from authz_admin.core.operation_result import OperationResult
from authz_admin.core.relations import (
    QueryMode,
    RelationBatch,
    RelationCheck,
    RelationQuery,
    RelationTuple,
    validate_query_fields,
)
from authz_admin.core.schema import SchemaModel, read_schema_file
from authz_admin.core.schema_codec import SchemaCodec
from authz_admin.core.validators import ValidationError

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Schema
# ─────────────────────────────────────────────────────────────────────────────

def create_schema(
    config: DescopeConfig,
    schema: Union[SchemaModel, str, Path],
    upgrade: bool = False,
) -> OperationResult[SchemaModel]:
    """Create or replace the project's ReBAC schema.

    Args:
        config: Project credentials
        schema: Portable schema, or the path of a schema file (JSON / YAML)
        upgrade: Allow changes that invalidate existing relations

    Returns:
        Created result carrying the portable schema as submitted
    """
    if not isinstance(schema, SchemaModel):
        logger.info("Creating/updating ReBAC schema from file: %s", schema)
        schema = read_schema_file(schema)
    canonical = SchemaCodec.encode(schema)

    try:
        service = AuthzService(create_client(config))
        try:
            existing = service.load_schema()
        except DescopeError as e:
            logger.debug("Could not check for an existing schema: %s", e)
        else:
            if existing is not None:
                logger.info("Schema already exists, updating with upgrade=%s", upgrade)
            else:
                logger.debug("No existing schema found, will create new schema")
        service.save_schema(canonical, upgrade)
    except DescopeError as e:
        raise wrap_exception("create/update ReBAC schema", e) from e

    logger.info("Successfully created/updated ReBAC schema with %d namespaces", len(schema.namespaces))
    return OperationResult.created(
        schema, f"Schema created/updated successfully with upgrade={str(upgrade).lower()}"
    )


def load_schema(config: DescopeConfig) -> OperationResult[SchemaModel]:
    logger.info("Loading current ReBAC schema")
    try:
        schema = AuthzService(create_client(config)).load_schema()
    except DescopeError as e:
        raise wrap_exception("load ReBAC schema", e) from e

    if schema is None:
        logger.info("No schema found")
        return OperationResult.failure("No schema exists")

    model = SchemaCodec.decode(schema)
    logger.info("Successfully loaded ReBAC schema with %d namespaces", len(model.namespaces))
    return OperationResult.success(model, "Schema loaded successfully")


def delete_schema(config: DescopeConfig) -> OperationResult[None]:
    """Delete the project's schema; a missing or empty schema is a Failure."""
    logger.info("Deleting ReBAC schema")
    try:
        service = AuthzService(create_client(config))
        existing = service.load_schema()
        if existing is None or not existing.namespaces:
            logger.info("No schema found to delete")
            return OperationResult.failure("No schema exists to delete")
        service.delete_schema()
    except DescopeError as e:
        raise wrap_exception("delete ReBAC schema", e) from e

    logger.info("Successfully deleted ReBAC schema")
    return OperationResult.success(None, "Schema deleted successfully")


# ─────────────────────────────────────────────────────────────────────────────
# Relation tuples
# ─────────────────────────────────────────────────────────────────────────────

def _as_batch(relations: Union[RelationBatch, Iterable[RelationTuple]]) -> RelationBatch:
    return relations if isinstance(relations, RelationBatch) else RelationBatch(tuple(relations))


def create_relations(
    config: DescopeConfig, relations: Union[RelationBatch, Iterable[RelationTuple]]
) -> OperationResult[List[RelationTuple]]:
    batch = _as_batch(relations)
    logger.info("Creating %d relation tuple(s)", len(batch))
    try:
        AuthzService(create_client(config)).create_relations(batch.relations)
    except DescopeError as e:
        raise wrap_exception("create relations", e) from e
    logger.info("Successfully created %d relation tuple(s)", len(batch))
    return OperationResult.created(list(batch), f"Created {len(batch)} relation tuple(s) successfully")


def delete_relations(
    config: DescopeConfig, relations: Union[RelationBatch, Iterable[RelationTuple]]
) -> OperationResult[List[RelationTuple]]:
    batch = _as_batch(relations)
    logger.info("Deleting %d relation tuple(s)", len(batch))
    try:
        AuthzService(create_client(config)).delete_relations(batch.relations)
    except DescopeError as e:
        raise wrap_exception("delete relations", e) from e
    logger.info("Successfully deleted %d relation tuple(s)", len(batch))
    return OperationResult.success(list(batch), f"Deleted {len(batch)} relation tuple(s)")


def check_relations(config: DescopeConfig, queries: Sequence[RelationQuery]) -> OperationResult[List[RelationCheck]]:
    """Check each query; results correspond to ``queries`` by position."""
    queries = list(queries)
    if not queries:
        raise ValidationError("Relation queries cannot be empty")
    logger.info("Checking %d relation query(ies)", len(queries))
    try:
        checks = AuthzService(create_client(config)).has_relations(queries)
    except DescopeError as e:
        raise wrap_exception("check relations", e) from e
    return OperationResult.success(checks, f"Checked {len(checks)} relation(s)")


def who_can_access(config: DescopeConfig, resource: str, relation: str, namespace: str) -> OperationResult[List[str]]:
    validate_query_fields(QueryMode.WHO_CAN_ACCESS, resource=resource, relation=relation, namespace=namespace)
    logger.info("Querying who can access resource %s via %s in %s", resource, relation, namespace)
    try:
        targets = AuthzService(create_client(config)).who_can_access(resource, relation, namespace)
    except DescopeError as e:
        raise wrap_exception("query who can access", e) from e
    logger.info("Found %d target(s) that can access the resource", len(targets))
    return OperationResult.success(targets, f"Found {len(targets)} target(s) with access")


def resource_relations(config: DescopeConfig, resource: str) -> OperationResult[List[RelationTuple]]:
    validate_query_fields(QueryMode.RESOURCE_RELATIONS, resource=resource)
    logger.info("Querying relations for resource: %s", resource)
    try:
        tuples = AuthzService(create_client(config)).resource_relations(resource)
    except DescopeError as e:
        raise wrap_exception("query resource relations", e) from e
    return OperationResult.success(tuples, f"Found {len(tuples)} relation(s)")


def what_can_target_access(config: DescopeConfig, target: str) -> OperationResult[List[RelationTuple]]:
    validate_query_fields(QueryMode.TARGET_ACCESS, target=target)
    logger.info("Querying what target can access: %s", target)
    try:
        tuples = AuthzService(create_client(config)).what_can_target_access(target)
    except DescopeError as e:
        raise wrap_exception("query target access", e) from e
    return OperationResult.success(tuples, f"Found {len(tuples)} relation(s)")


def query_relations(
    config: DescopeConfig,
    mode: Union[QueryMode, str],
    resource: Optional[str] = None,
    relation: Optional[str] = None,
    namespace: Optional[str] = None,
    target: Optional[str] = None,
) -> OperationResult:
    """Run one of the read-only query modes.

    The mode name and its required fields are checked before any client is
    built, so an invalid request never reaches the backend.
    """
    if not isinstance(mode, QueryMode):
        mode = QueryMode.parse(mode)
    validate_query_fields(mode, resource=resource, relation=relation, namespace=namespace, target=target)

    if mode is QueryMode.WHO_CAN_ACCESS:
        return who_can_access(config, resource, relation, namespace)
    if mode is QueryMode.RESOURCE_RELATIONS:
        return resource_relations(config, resource)
    return what_can_target_access(config, target)
