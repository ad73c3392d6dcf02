"""
Provisioning Service Layer: applications, tenants, users, federated apps, roles

Every create operation follows the reconciliation protocol: look for an
existing resource with the same name (or login id) and report AlreadyExists,
otherwise create it and report Created. Role operations are plain
pass-through calls.

Architecture:
    CLI (authz_admin/cli.py) ──┐
                               ├──> provisioning_service.py ──> authz_admin.core.descope ──> Descope
    HTTP API (/authz) ─────────┘

Error policy:
    - Malformed input raises ValidationError before any backend call
    - Backend or transport failures raise DescopeOperationError
      ("Failed to <operation>: <cause>")
"""

from __future__ import annotations
import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from authz_admin.config.settings import DescopeConfig
from authz_admin.core.descope import (
    ApplicationService,
    DescopeError,
    RoleService,
    SsoApplicationService,
    TenantService,
    UserService,
    create_client,
    wrap_exception,
)
from authz_admin.core.models import (
    Application,
    FederatedApplication,
    FederatedAppType,
    Role,
    Tenant,
    User,
)
from authz_admin.core.operation_result import OperationResult
from authz_admin.core.reconcile import reconcile, reconcile_lookup
from authz_admin.core.validators import ValidationError, require, validate_url

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


# ─────────────────────────────────────────────────────────────────────────────
# Applications
# ─────────────────────────────────────────────────────────────────────────────

def _application_from_wire(payload: Dict[str, Any]) -> Application:
    return Application(
        id=payload.get("id", ""),
        name=payload.get("name", ""),
        description=payload.get("description") or "",
    )


def create_application(config: DescopeConfig, name: str, description: Optional[str] = None) -> OperationResult[Application]:
    """Create an inbound application unless one with the same name exists."""
    name = require(name, "Application name")
    logger.info("Creating application: %s", name)
    try:
        service = ApplicationService(create_client(config))

        def _create() -> Application:
            app_id = service.create(name, description or "")
            return Application(id=app_id, name=name, description=description or "", created_at=_now())

        return reconcile(
            name,
            lambda: [_application_from_wire(item) for item in service.load_all()],
            _create,
            label="Application",
        )
    except DescopeError as e:
        raise wrap_exception(f"create application '{name}'", e) from e


# ─────────────────────────────────────────────────────────────────────────────
# Tenants
# ─────────────────────────────────────────────────────────────────────────────

def derive_tenant_id(name: str) -> str:
    """Deterministic tenant id: lowercase, whitespace runs replaced by hyphens.

    >>> derive_tenant_id("My Tenant")
    'my-tenant'
    """
    return re.sub(r"\s+", "-", name.strip().lower())


def create_tenant(config: DescopeConfig, name: str, app_id: Optional[str] = None) -> OperationResult[Tenant]:
    """Create a tenant whose id is derived from its name.

    Args:
        config: Project credentials
        name: Tenant display name (matched exactly against existing tenants)
        app_id: Application the tenant is provisioned for (recorded on the result)
    """
    name = require(name, "Tenant name")
    tenant_id = derive_tenant_id(name)
    logger.info("Creating tenant: %s (id=%s, app=%s)", name, tenant_id, app_id or "-")
    try:
        service = TenantService(create_client(config))

        def _create() -> Tenant:
            created_id = service.create(tenant_id, name)
            return Tenant(id=created_id, name=name, app_id=app_id or "", created_at=_now())

        return reconcile(name, service.load_all, _create, label="Tenant")
    except DescopeError as e:
        raise wrap_exception(f"create tenant '{name}'", e) from e


# ─────────────────────────────────────────────────────────────────────────────
# Users
# ─────────────────────────────────────────────────────────────────────────────

def _user_from_wire(payload: Dict[str, Any], login_id: str, tenant_id: Optional[str]) -> User:
    tenants = payload.get("userTenants") or []
    return User(
        id=payload.get("userId", ""),
        login_id=login_id,
        email=payload.get("email") or None,
        tenant_id=tenant_id or (tenants[0].get("tenantId", "") if tenants else ""),
    )


def create_user(
    config: DescopeConfig,
    login_id: str,
    email: Optional[str] = None,
    tenant_id: Optional[str] = None,
) -> OperationResult[User]:
    """Create a user unless one is already registered under ``login_id``."""
    login_id = require(login_id, "Login id")
    logger.info("Creating user: %s (tenant=%s)", login_id, tenant_id or "-")
    try:
        service = UserService(create_client(config))

        def _lookup() -> Optional[User]:
            existing = service.load(login_id)
            return _user_from_wire(existing, login_id, None) if existing else None

        def _create() -> User:
            created = service.create(login_id, email, tenant_id)
            user = _user_from_wire(created, login_id, tenant_id)
            return User(user.id, login_id, user.email or email, user.tenant_id, _now())

        return reconcile_lookup(login_id, _lookup, _create, label="User")
    except DescopeError as e:
        raise wrap_exception(f"create user '{login_id}'", e) from e


# ─────────────────────────────────────────────────────────────────────────────
# Federated applications
# ─────────────────────────────────────────────────────────────────────────────

def infer_app_type(payload: Dict[str, Any]) -> FederatedAppType:
    """Type of an existing SSO app; anything not reported as SAML is OIDC."""
    app_type = payload.get("appType")
    if isinstance(app_type, str) and app_type.strip().lower() == "saml":
        return FederatedAppType.SAML
    return FederatedAppType.OIDC


def _login_page_url(payload: Dict[str, Any], app_type: FederatedAppType) -> str:
    key = "samlSettings" if app_type is FederatedAppType.SAML else "oidcSettings"
    settings = payload.get(key) or {}
    return settings.get("loginPageUrl") or ""


def _federated_from_wire(payload: Dict[str, Any], app_type: Optional[FederatedAppType] = None) -> FederatedApplication:
    app_type = app_type or infer_app_type(payload)
    return FederatedApplication(
        id=payload.get("id", ""),
        name=payload.get("name", ""),
        description=payload.get("description") or "",
        app_type=app_type,
        login_page_url=_login_page_url(payload, app_type),
    )


def create_federated_application(
    config: DescopeConfig,
    name: str,
    app_type: FederatedAppType | str,
    description: Optional[str] = None,
    login_page_url: Optional[str] = None,
    *,
    metadata_url: Optional[str] = None,
    entity_id: Optional[str] = None,
    acs_url: Optional[str] = None,
    certificate: Optional[str] = None,
) -> OperationResult[FederatedApplication]:
    """Create an OIDC or SAML federated application unless the name is taken.

    SAML apps need either ``metadata_url`` or both ``entity_id`` and ``acs_url``.
    When an app with the same name exists its type is inferred from the
    backend's report, not from ``app_type``.
    """
    name = require(name, "Federated application name")
    if not isinstance(app_type, FederatedAppType):
        try:
            app_type = FederatedAppType.from_string(app_type)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc
    if login_page_url:
        login_page_url = validate_url(login_page_url, "Login page URL")
    if app_type is FederatedAppType.SAML:
        if metadata_url:
            metadata_url = validate_url(metadata_url, "Metadata URL")
        elif not (entity_id and acs_url):
            raise ValidationError("SAML applications require --metadata-url or both --entity-id and --acs-url")
        else:
            acs_url = validate_url(acs_url, "ACS URL")

    logger.info("Creating %s federated application: %s", app_type.value, name)
    try:
        service = SsoApplicationService(create_client(config))

        def _create() -> FederatedApplication:
            if app_type is FederatedAppType.SAML:
                app_id = service.create_saml(
                    name,
                    description or "",
                    login_page_url or "",
                    metadata_url=metadata_url,
                    entity_id=entity_id,
                    acs_url=acs_url,
                    certificate=certificate or "",
                )
            else:
                app_id = service.create_oidc(name, description or "", login_page_url or "")
            loaded = service.load(app_id) or {}
            app = _federated_from_wire({"id": app_id, "name": name, "description": description, **loaded}, app_type)
            return FederatedApplication(
                id=app.id or app_id,
                name=app.name,
                description=app.description,
                app_type=app_type,
                login_page_url=app.login_page_url or login_page_url or "",
                created_at=_now(),
            )

        return reconcile(
            name,
            lambda: [_federated_from_wire(item) for item in service.load_all()],
            _create,
            label="Federated application",
        )
    except DescopeError as e:
        raise wrap_exception(f"create federated application '{name}'", e) from e


# ─────────────────────────────────────────────────────────────────────────────
# Roles
# ─────────────────────────────────────────────────────────────────────────────

def _role_context(tenant_id: Optional[str]) -> str:
    return f" in tenant: {tenant_id}" if tenant_id else " (project-level)"


def create_role(
    config: DescopeConfig,
    name: str,
    description: str = "",
    permission_names: Sequence[str] = (),
    tenant_id: Optional[str] = None,
) -> OperationResult[Role]:
    name = require(name, "Role name")
    context = _role_context(tenant_id)
    logger.info("Creating role: %s%s", name, context)
    try:
        RoleService(create_client(config)).create(name, description, permission_names, tenant_id)
    except DescopeError as e:
        raise wrap_exception(f"create role '{name}'", e) from e
    role = Role(name, description or "", tuple(permission_names), tenant_id)
    return OperationResult.created(role, f"Role '{name}' created successfully{context}")


def list_roles(config: DescopeConfig) -> OperationResult[List[Role]]:
    logger.info("Loading all roles")
    try:
        roles = RoleService(create_client(config)).load_all()
    except DescopeError as e:
        raise wrap_exception("load roles", e) from e
    return OperationResult.success(roles, f"Loaded {len(roles)} roles")


def update_role(
    config: DescopeConfig,
    name: str,
    new_name: Optional[str] = None,
    description: str = "",
    permission_names: Sequence[str] = (),
    tenant_id: Optional[str] = None,
) -> OperationResult[Role]:
    """Replace a role's name, description and permissions (``new_name`` defaults to ``name``)."""
    name = require(name, "Role name")
    new_name = new_name or name
    context = _role_context(tenant_id)
    logger.info("Updating role: %s%s", name, context)
    try:
        RoleService(create_client(config)).update(name, new_name, description, permission_names, tenant_id)
    except DescopeError as e:
        raise wrap_exception(f"update role '{name}'", e) from e
    role = Role(new_name, description or "", tuple(permission_names), tenant_id)
    return OperationResult.success(role, f"Role '{name}' updated successfully{context}")


def delete_role(config: DescopeConfig, name: str, tenant_id: Optional[str] = None) -> OperationResult[None]:
    name = require(name, "Role name")
    context = _role_context(tenant_id)
    logger.info("Deleting role: %s%s", name, context)
    try:
        RoleService(create_client(config)).delete(name, tenant_id)
    except DescopeError as e:
        raise wrap_exception(f"delete role '{name}'", e) from e
    return OperationResult.success(None, f"Role '{name}' deleted successfully{context}")
