"""
Flask decorators for authentication of the admin API.

The admin API is protected by a static Bearer token (RFC 6750 header syntax)
configured through AUTHZ_ADMIN_API_TOKEN or /run/secrets/authz_admin_api_token.

Security:
- Constant-time comparison (hmac.compare_digest)
- Only a truncated SHA256 of presented tokens is ever logged
"""

import hashlib
import hmac
import logging
from functools import wraps

from flask import current_app, g, jsonify, request

logger = logging.getLogger(__name__)


def _token_fingerprint(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()[:12]


def _unauthorized(detail: str):
    return jsonify({"error": "Unauthorized", "message": detail}), 401


def require_api_token(fn):
    """
    Decorator requiring ``Authorization: Bearer <token>`` matching the configured API token.

    Example:
        @bp.route("/authz/schema", methods=["GET"])
        @require_api_token
        def get_schema():
            ...
    """

    @wraps(fn)
    def wrapper(*args, **kwargs):
        auth_header = request.headers.get("Authorization", "")
        if not auth_header:
            logger.warning("Admin API request missing Authorization header")
            return _unauthorized("Authorization header required. Use 'Authorization: Bearer <token>'")

        if not auth_header.startswith("Bearer "):
            logger.warning("Admin API request with invalid Authorization scheme")
            return _unauthorized("Invalid Authorization header format. Expected 'Bearer <token>'")

        token = auth_header[7:].strip()
        if not token:
            return _unauthorized("Bearer token is empty")

        cfg = current_app.config.get("APP_CONFIG")
        expected = getattr(cfg, "api_token", "") or ""
        if not expected or not hmac.compare_digest(token, expected):
            logger.warning("Admin API token rejected | token_hash=%s | path=%s", _token_fingerprint(token), request.path)
            return _unauthorized("Invalid API token")

        g.operator = request.headers.get("X-Operator", "api")
        return fn(*args, **kwargs)

    return wrapper
