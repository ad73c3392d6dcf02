"""Descope management API client library.

Architecture:
- client.py: HTTP client with project-key authentication and region routing
- authz.py: ReBAC schema and relation-tuple endpoints
- tenants.py: Tenant listing and creation
- users.py: User lookup, creation and batch creation
- applications.py: Inbound applications and federated (SSO) applications
- roles.py: Role CRUD
- exceptions.py: Typed exceptions and the operation-wrapping helper

Usage:
    from authz_admin.core.descope import create_client, AuthzService

    client = create_client(config)
    schema = AuthzService(client).load_schema()
"""
from .client import (
    DescopeClient,
    create_client,
    base_url_for_project,
    REQUEST_TIMEOUT,
)
from .exceptions import (
    DescopeError,
    DescopeAPIError,
    DescopeOperationError,
    DescopeResponseError,
    wrap_exception,
)
from .authz import AuthzService
from .tenants import TenantService
from .users import UserService
from .applications import ApplicationService, SsoApplicationService
from .roles import RoleService

__all__ = [
    # Client
    "DescopeClient",
    "create_client",
    "base_url_for_project",
    "REQUEST_TIMEOUT",

    # Exceptions
    "DescopeError",
    "DescopeAPIError",
    "DescopeOperationError",
    "DescopeResponseError",
    "wrap_exception",

    # Services
    "AuthzService",
    "TenantService",
    "UserService",
    "ApplicationService",
    "SsoApplicationService",
    "RoleService",
]
