"""ReBAC admin API endpoints.

All routes delegate to authz_admin.core.authz_service and render the
OperationResult envelope as JSON.

Routes:
    GET    /authz/schema                 load the current schema (shortcut form)
    PUT    /authz/schema?upgrade=true    create or replace the schema
    DELETE /authz/schema                 delete the schema
    POST   /authz/relations              create relation tuples
    DELETE /authz/relations              delete relation tuples
    POST   /authz/relations/check        check partial-match relation queries
    GET    /authz/relations/query        who-can-access / resource-relations / target-access

Security:
    Static Bearer token via @require_api_token
"""

from __future__ import annotations
import logging
from typing import Any, Dict

from flask import Blueprint, current_app, g, jsonify, request

from authz_admin.api.decorators import require_api_token
from authz_admin.core import authz_service
from authz_admin.core.operation_result import OperationResult
from authz_admin.core.relations import RelationBatch, RelationQuery
from authz_admin.core.schema import SchemaModel
from authz_admin.core.validators import ValidationError

bp = Blueprint("authz", __name__, url_prefix="/authz")

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────

def _config():
    return current_app.config["APP_CONFIG"].descope


def _json_body() -> Dict[str, Any]:
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload


def _render(result: OperationResult, success_status: int = 200, failure_status: int = 422):
    return jsonify(result.to_dict()), success_status if result.is_success else failure_status


def _audit(event_type: str, subject: str, result: OperationResult, **details: Any) -> None:
    current_app.config["AUDIT_LOG"].record(
        event_type,
        subject,
        result,
        project_id=_config().project_id,
        operator=g.get("operator", "api"),
        **details,
    )


# ─────────────────────────────────────────────────────────────────────────────
# Schema
# ─────────────────────────────────────────────────────────────────────────────

@bp.route("/schema", methods=["GET"])
@require_api_token
def get_schema():
    return _render(authz_service.load_schema(_config()), failure_status=404)


@bp.route("/schema", methods=["PUT"])
@require_api_token
def put_schema():
    upgrade = request.args.get("upgrade", "false").strip().lower() in _TRUE_VALUES
    model = SchemaModel.from_dict(_json_body())
    result = authz_service.create_schema(_config(), model, upgrade=upgrade)
    _audit("create_schema", "schema", result, namespaces=len(model.namespaces), upgrade=upgrade)
    return _render(result, success_status=201)


@bp.route("/schema", methods=["DELETE"])
@require_api_token
def delete_schema():
    result = authz_service.delete_schema(_config())
    _audit("delete_schema", "schema", result)
    return _render(result, failure_status=404)


# ─────────────────────────────────────────────────────────────────────────────
# Relations
# ─────────────────────────────────────────────────────────────────────────────

@bp.route("/relations", methods=["POST"])
@require_api_token
def create_relations():
    batch = RelationBatch.from_dict(_json_body())
    result = authz_service.create_relations(_config(), batch)
    _audit("create_relations", "relations", result, count=len(batch))
    return _render(result, success_status=201)


@bp.route("/relations", methods=["DELETE"])
@require_api_token
def delete_relations():
    batch = RelationBatch.from_dict(_json_body())
    result = authz_service.delete_relations(_config(), batch)
    _audit("delete_relations", "relations", result, count=len(batch))
    return _render(result)


@bp.route("/relations/check", methods=["POST"])
@require_api_token
def check_relations():
    payload = _json_body()
    items = payload.get("relationQueries", payload.get("queries"))
    if not isinstance(items, list):
        raise ValidationError("Request body must contain a 'relationQueries' array")
    queries = [RelationQuery.from_dict(item) for item in items]
    return _render(authz_service.check_relations(_config(), queries))


@bp.route("/relations/query", methods=["GET"])
@require_api_token
def query_relations():
    mode = request.args.get("mode", "")
    result = authz_service.query_relations(
        _config(),
        mode,
        resource=request.args.get("resource"),
        relation=request.args.get("relation"),
        namespace=request.args.get("namespace"),
        target=request.args.get("target"),
    )
    return _render(result)
