"""Core Business Logic Module

This module provides the identity and ReBAC administration logic,
independent of the CLI and of Flask.

Module Structure:
    - descope/                : Low-level Descope management API client
    - schema.py               : ReBAC schema tree (canonical sum type) and file models
    - schema_codec.py         : Portable schema <-> canonical tree conversion
    - relations.py            : Relation tuples, queries, batches and query modes
    - reconcile.py            : Idempotent create-if-absent protocol
    - operation_result.py     : Uniform outcome envelope
    - models.py               : Application / tenant / user / role value objects
    - provisioning_service.py : Applications, tenants, users, federated apps, roles
    - authz_service.py        : Schema and relation-tuple operations
    - migration_service.py    : Legacy user migration with bcrypt hashes
    - validators.py           : Input validation and ValidationError

Usage Pattern:
    Import explicitly when needed:
        from authz_admin.core.authz_service import create_schema, query_relations
        from authz_admin.core.schema_codec import SchemaCodec
        from authz_admin.core.reconcile import reconcile
"""
