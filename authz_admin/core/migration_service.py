"""Legacy user migration with preserved bcrypt credentials.

A migrated user is created through the batch endpoint, which is the only user
creation call that accepts a pre-hashed password. The hash is forwarded
untouched so the user keeps signing in with their existing password.

The batch response is partitioned:
    - any failed users          -> Failure, every (login id, reason) kept
    - no created users          -> Failure("No user was created")
    - otherwise                 -> Created(MigratedUser)

Nothing is retried here; re-run the migration for a failed email.
"""
from __future__ import annotations
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

from authz_admin.config.settings import DescopeConfig
from authz_admin.core.descope import DescopeError, UserService, create_client, wrap_exception
from authz_admin.core.models import MigratedUser
from authz_admin.core.operation_result import OperationResult
from authz_admin.core.validators import require, validate_bcrypt_hash, validate_email, validate_name

logger = logging.getLogger(__name__)

UNKNOWN_FAILURE = "Unknown error"


def build_display_name(first_name: Optional[str], last_name: Optional[str]) -> str:
    """Join first and last name with a space, skipping blank parts."""
    return " ".join(part for part in (first_name, last_name) if part)


def build_batch_user(
    email: str,
    first_name: str,
    last_name: str,
    tenant_id: str,
    roles: Sequence[str],
    bcrypt_hash: str,
) -> Dict[str, Any]:
    """Batch-create record for one legacy user (email doubles as login id)."""
    tenant: Dict[str, Any] = {"tenantId": tenant_id}
    if roles:
        tenant["roleNames"] = list(roles)
    return {
        "loginId": email,
        "email": email,
        "verifiedEmail": True,
        "givenName": first_name,
        "familyName": last_name,
        "displayName": build_display_name(first_name, last_name),
        "userTenants": [tenant],
        "hashedPassword": {"bcrypt": {"hash": bcrypt_hash}},
    }


def _failed_identifier(entry: Dict[str, Any], fallback: str) -> str:
    user = entry.get("user") or {}
    login_ids = user.get("loginIds") or []
    return user.get("loginId") or (login_ids[0] if login_ids else None) or user.get("email") or fallback


def collect_failures(failed_users: List[Dict[str, Any]], fallback_identifier: str) -> List[Tuple[str, str]]:
    """(identifier, reason) for every failed user, in response order."""
    return [
        (_failed_identifier(entry, fallback_identifier), entry.get("failure") or UNKNOWN_FAILURE)
        for entry in failed_users
    ]


def migrate_legacy_user(
    config: DescopeConfig,
    email: str,
    first_name: str,
    last_name: str,
    tenant_id: str,
    roles: Optional[Sequence[str]],
    bcrypt_hash: str,
) -> OperationResult[MigratedUser]:
    """Migrate one legacy user into ``tenant_id`` with their bcrypt hash.

    Args:
        config: Project credentials
        email: Email address, also used as login id
        first_name: Given name
        last_name: Family name
        tenant_id: Tenant the user joins
        roles: Role names granted in the tenant (optional)
        bcrypt_hash: Existing password hash, forwarded unmodified

    Returns:
        Created(MigratedUser), or Failure when the backend rejected the user

    Raises:
        ValidationError: On malformed input (no backend call is made)
        DescopeOperationError: When the batch call itself fails
    """
    email = validate_email(email)
    first_name = validate_name(first_name, "First name")
    last_name = validate_name(last_name, "Last name")
    tenant_id = require(tenant_id, "Tenant id")
    bcrypt_hash = validate_bcrypt_hash(bcrypt_hash)
    roles = tuple(role.strip() for role in roles or () if role and role.strip())

    logger.info("Migrating legacy user: %s to tenant: %s", email, tenant_id)
    record = build_batch_user(email, first_name, last_name, tenant_id, roles, bcrypt_hash)
    try:
        response = UserService(create_client(config)).create_batch([record])
    except DescopeError as e:
        raise wrap_exception(f"migrate user '{email}'", e) from e

    failed = response["failedUsers"]
    if failed:
        failures = collect_failures(failed, email)
        for identifier, reason in failures:
            logger.error("Failed to migrate user '%s': %s", identifier, reason)
        return OperationResult.failure(f"Failed to migrate user: {failures[0][1]}", failures)

    created = response["createdUsers"]
    if not created:
        logger.error("No user created for '%s'", email)
        return OperationResult.failure("No user was created")

    user_id = created[0].get("userId", "")
    migrated = MigratedUser(
        user_id=user_id,
        email=email,
        first_name=first_name,
        last_name=last_name,
        tenant_id=tenant_id,
        roles=roles,
        migrated_at=datetime.now(timezone.utc),
    )
    logger.info("Successfully migrated user: %s (ID: %s) to tenant: %s", email, user_id, tenant_id)
    return OperationResult.created(migrated, f"User '{email}' migrated successfully to tenant '{tenant_id}'")
