"""Operator CLI for Descope identity and ReBAC administration.

This module is a thin argparse wrapper around authz_admin.core services.

Exit codes:
    0  success (created / already exists / success)
    1  operation failure result, configuration or backend error
    2  invalid input
"""
from __future__ import annotations
import argparse
import json
import logging
import os
import sys
from typing import Any, Callable, Dict, List, Optional, Tuple

from authz_admin.audit import AuditLog
from authz_admin.config import (
    ConfigurationError,
    DescopeConfig,
    load_audit_log_dir,
    load_audit_signing_key,
    load_configuration,
)
from authz_admin.core import authz_service, migration_service, provisioning_service
from authz_admin.core.descope import DescopeError
from authz_admin.core.operation_result import OperationResult
from authz_admin.core.relations import RelationQuery, tuples_from_input
from authz_admin.core.validators import ValidationError

logger = logging.getLogger("authz_admin.cli")

SUCCESS_PREFIX = "✓ "
ERROR_PREFIX = "✗ "
SEPARATOR = "─" * 60

# (result, audit event type or None, audit subject, audit details)
Outcome = Tuple[OperationResult, Optional[str], str, Dict[str, Any]]


def _split_csv(value: Optional[str]) -> List[str]:
    """Split a comma-separated option value, dropping blanks."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


# ─────────────────────────────────────────────────────────────────────────────
# Command handlers
# ─────────────────────────────────────────────────────────────────────────────

def _create_app(args, config: DescopeConfig) -> Outcome:
    result = provisioning_service.create_application(config, args.name, args.description)
    return result, "create_application", args.name, {"description": args.description}


def _create_tenant(args, config: DescopeConfig) -> Outcome:
    result = provisioning_service.create_tenant(config, args.name, args.app_id)
    return result, "create_tenant", args.name, {"app_id": args.app_id}


def _create_user(args, config: DescopeConfig) -> Outcome:
    result = provisioning_service.create_user(config, args.login_id, args.email, args.tenant_id)
    return result, "create_user", args.login_id, {"tenant_id": args.tenant_id}


def _create_federated_app(args, config: DescopeConfig) -> Outcome:
    result = provisioning_service.create_federated_application(
        config,
        args.name,
        args.type,
        args.description,
        args.login_page_url,
        metadata_url=args.metadata_url,
        entity_id=args.entity_id,
        acs_url=args.acs_url,
        certificate=args.certificate,
    )
    return result, "create_federated_app", args.name, {"type": args.type}


def _create_role(args, config: DescopeConfig) -> Outcome:
    permissions = _split_csv(args.permissions)
    result = provisioning_service.create_role(config, args.name, args.description, permissions, args.tenant)
    return result, "create_role", args.name, {"tenant": args.tenant, "permissions": permissions}


def _list_roles(args, config: DescopeConfig) -> Outcome:
    return provisioning_service.list_roles(config), None, "", {}


def _update_role(args, config: DescopeConfig) -> Outcome:
    permissions = _split_csv(args.permissions)
    result = provisioning_service.update_role(
        config, args.name, args.new_name, args.description, permissions, args.tenant
    )
    return result, "update_role", args.name, {"new_name": args.new_name, "tenant": args.tenant}


def _delete_role(args, config: DescopeConfig) -> Outcome:
    result = provisioning_service.delete_role(config, args.name, args.tenant)
    return result, "delete_role", args.name, {"tenant": args.tenant}


def _create_schema(args, config: DescopeConfig) -> Outcome:
    result = authz_service.create_schema(config, args.file, upgrade=args.upgrade)
    return result, "create_schema", "schema", {"file": args.file, "upgrade": args.upgrade}


def _load_schema(args, config: DescopeConfig) -> Outcome:
    return authz_service.load_schema(config), None, "", {}


def _delete_schema(args, config: DescopeConfig) -> Outcome:
    return authz_service.delete_schema(config), "delete_schema", "schema", {}


def _create_relation(args, config: DescopeConfig) -> Outcome:
    batch = tuples_from_input(args.file, args.resource, args.relation, args.namespace, args.target)
    result = authz_service.create_relations(config, batch)
    return result, "create_relations", "relations", {"count": len(batch)}


def _delete_relation(args, config: DescopeConfig) -> Outcome:
    batch = tuples_from_input(args.file, args.resource, args.relation, args.namespace, args.target)
    result = authz_service.delete_relations(config, batch)
    return result, "delete_relations", "relations", {"count": len(batch)}


def _check_relation(args, config: DescopeConfig) -> Outcome:
    query = RelationQuery(args.resource, args.relation, args.namespace, args.target)
    return authz_service.check_relations(config, [query]), None, "", {}


def _query_relations(args, config: DescopeConfig) -> Outcome:
    result = authz_service.query_relations(
        config, args.mode, args.resource, args.relation, args.namespace, args.target
    )
    return result, None, "", {}


def _migrate_user(args, config: DescopeConfig) -> Outcome:
    roles = _split_csv(args.roles)
    result = migration_service.migrate_legacy_user(
        config, args.email, args.first_name, args.last_name, args.tenant_id, roles, args.bcrypt_hash
    )
    return result, "migrate_user", args.email, {"tenant_id": args.tenant_id, "roles": roles}


COMMANDS: Dict[str, Callable[[argparse.Namespace, DescopeConfig], Outcome]] = {
    "create-app": _create_app,
    "create-tenant": _create_tenant,
    "create-user": _create_user,
    "create-federated-app": _create_federated_app,
    "create-role": _create_role,
    "list-roles": _list_roles,
    "update-role": _update_role,
    "delete-role": _delete_role,
    "create-rebac-schema": _create_schema,
    "load-rebac-schema": _load_schema,
    "delete-rebac-schema": _delete_schema,
    "create-fga-relation": _create_relation,
    "delete-fga-relation": _delete_relation,
    "check-fga-relation": _check_relation,
    "query-fga-relations": _query_relations,
    "migrate-legacy-user": _migrate_user,
}


# ─────────────────────────────────────────────────────────────────────────────
# Parser
# ─────────────────────────────────────────────────────────────────────────────

def _add_relation_options(parser: argparse.ArgumentParser, with_file: bool = True) -> None:
    if with_file:
        parser.add_argument("-f", "--file", help="Relation batch file ({\"relations\": [...]})")
    parser.add_argument("-r", "--resource")
    parser.add_argument("--relation")
    parser.add_argument("-n", "--namespace")
    parser.add_argument("-t", "--target")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Descope identity and ReBAC administration")
    parser.add_argument("-p", "--project-id", help="Descope project id (overrides DESCOPE_PROJECT_ID)")
    parser.add_argument("-k", "--management-key", help="Descope management key (overrides DESCOPE_MANAGEMENT_KEY)")
    parser.add_argument("-o", "--output", choices=["text", "json"], default="text")
    parser.add_argument("--operator", default=os.environ.get("AUTHZ_ADMIN_OPERATOR", "cli"),
                        help="Operator identifier for audit logs (default: cli)")
    parser.add_argument("--audit-dir", default=None,
                        help="Audit log directory (default: AUDIT_LOG_DIR or .runtime/audit)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="cmd")

    sp = sub.add_parser("create-app")
    sp.add_argument("name")
    sp.add_argument("-d", "--description")

    sp = sub.add_parser("create-tenant")
    sp.add_argument("name")
    sp.add_argument("-a", "--app-id")

    sp = sub.add_parser("create-user")
    sp.add_argument("login_id")
    sp.add_argument("-e", "--email")
    sp.add_argument("-t", "--tenant-id")

    sp = sub.add_parser("create-federated-app")
    sp.add_argument("name")
    sp.add_argument("--type", required=True, help="oidc or saml (case-insensitive)")
    sp.add_argument("-d", "--description")
    sp.add_argument("-l", "--login-page-url")
    sp.add_argument("--metadata-url", help="SAML: service provider metadata URL")
    sp.add_argument("--entity-id", help="SAML: service provider entity id")
    sp.add_argument("--acs-url", help="SAML: assertion consumer service URL")
    sp.add_argument("--certificate", help="SAML: service provider certificate (PEM)")

    sp = sub.add_parser("create-role")
    sp.add_argument("name")
    sp.add_argument("-d", "--description", default="")
    sp.add_argument("-t", "--tenant")
    sp.add_argument("--permissions", help="Comma-separated permission names")

    sub.add_parser("list-roles")

    sp = sub.add_parser("update-role")
    sp.add_argument("name")
    sp.add_argument("-n", "--new-name")
    sp.add_argument("-d", "--description", default="")
    sp.add_argument("-t", "--tenant")
    sp.add_argument("--permissions", help="Comma-separated permission names")

    sp = sub.add_parser("delete-role")
    sp.add_argument("name")
    sp.add_argument("-t", "--tenant")

    sp = sub.add_parser("create-rebac-schema")
    sp.add_argument("-f", "--file", required=True, help="Schema file (JSON, or YAML for .yaml/.yml)")
    sp.add_argument("-u", "--upgrade", action="store_true")

    sub.add_parser("load-rebac-schema")
    sub.add_parser("delete-rebac-schema")

    _add_relation_options(sub.add_parser("create-fga-relation"))
    _add_relation_options(sub.add_parser("delete-fga-relation"))
    _add_relation_options(sub.add_parser("check-fga-relation"), with_file=False)

    sp = sub.add_parser("query-fga-relations")
    sp.add_argument("-m", "--mode", required=True, help="who-can-access, resource-relations or target-access")
    _add_relation_options(sp, with_file=False)

    sub.add_parser("verify-audit-log", help="Check the signatures of the audit trail")

    sp = sub.add_parser("migrate-legacy-user")
    sp.add_argument("-e", "--email", required=True)
    sp.add_argument("-f", "--first-name", required=True)
    sp.add_argument("-l", "--last-name", required=True)
    sp.add_argument("-t", "--tenant-id", required=True)
    sp.add_argument("-r", "--roles", help="Comma-separated role names")
    sp.add_argument("-b", "--bcrypt-hash", required=True)

    return parser


# ─────────────────────────────────────────────────────────────────────────────
# Output
# ─────────────────────────────────────────────────────────────────────────────

def format_result(result: OperationResult, output: str = "text") -> str:
    payload = result.to_dict()
    if output == "json":
        return json.dumps(payload, indent=2, ensure_ascii=False)
    if not result.is_success:
        lines = [f"{ERROR_PREFIX}Error: {result.error_message}"]
        lines.extend(f"  - {identifier}: {reason}" for identifier, reason in result.failures)
        return "\n".join(lines)
    lines = [f"{SUCCESS_PREFIX}{result.message}"]
    if payload.get("data") is not None:
        lines.append(SEPARATOR)
        lines.append(json.dumps(payload["data"], indent=2, ensure_ascii=False))
    return "\n".join(lines)


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, os.environ.get("LOG_LEVEL", "WARNING").upper(), logging.WARNING)
    logging.basicConfig(level=level, stream=sys.stderr, format="%(levelname)s %(name)s: %(message)s")


# ─────────────────────────────────────────────────────────────────────────────
# Entry point
# ─────────────────────────────────────────────────────────────────────────────

def _verify_audit_log(audit_log: AuditLog) -> int:
    if not audit_log.signed:
        print("[verify-audit-log] Error: no audit signing key configured", file=sys.stderr)
        return 1
    total, valid = audit_log.verify()
    print(f"Audit log {audit_log.path}: {valid}/{total} events with valid signatures")
    return 0 if total == valid else 1


def run(argv: Optional[List[str]] = None) -> int:
    """Parse ``argv``, run one command and return its exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.cmd:
        parser.print_help()
        return 0

    _configure_logging(args.verbose)
    audit_log = AuditLog(args.audit_dir or load_audit_log_dir(), load_audit_signing_key())

    if args.cmd == "verify-audit-log":
        return _verify_audit_log(audit_log)

    try:
        config = load_configuration(args.project_id, args.management_key)
        result, event_type, subject, details = COMMANDS[args.cmd](args, config)
    except ValidationError as e:
        print(f"[{args.cmd}] Error: {e}", file=sys.stderr)
        return 2
    except (ConfigurationError, DescopeError) as e:
        print(f"[{args.cmd}] Error: {e}", file=sys.stderr)
        return 1

    if event_type:
        audit_log.record(
            event_type, subject, result, project_id=config.project_id, operator=args.operator, **details
        )

    print(format_result(result, args.output))
    return 0 if result.is_success else 1



def main() -> None:
    """Command-line entry point."""
    sys.exit(run())


if __name__ == "__main__":
    main()
