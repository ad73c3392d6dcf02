"""Flask application factory for the authz admin API.

This module provides the create_app() factory function for initializing
the Flask application with its blueprints, error handlers and configuration.
"""
from __future__ import annotations
import logging
from typing import Optional

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from authz_admin.audit import AuditLog
from authz_admin.config import AppConfig, load_settings

JSON_MAX_SIZE_BYTES = 1024 * 1024  # 1 MB, schema documents can be large


# ─────────────────────────────────────────────────────────────────────────────
# Application Factory
# ─────────────────────────────────────────────────────────────────────────────
def create_app(cfg: Optional[AppConfig] = None) -> Flask:
    """Create and configure Flask application.

    Args:
        cfg: Preloaded settings (loaded from environment and secrets when omitted)
    """
    cfg = cfg or load_settings()

    app = Flask(__name__)
    app.config["APP_CONFIG"] = cfg
    app.config["AUDIT_LOG"] = AuditLog(cfg.audit_log_dir, cfg.audit_signing_key)
    app.config["MAX_CONTENT_LENGTH"] = JSON_MAX_SIZE_BYTES
    app.logger.setLevel(getattr(logging, cfg.log_level, logging.INFO))

    # Trust X-Forwarded-* headers from a single reverse proxy
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)  # type: ignore

    # Register blueprints
    from authz_admin.api import authz, errors, health

    app.register_blueprint(health.bp)
    app.register_blueprint(authz.bp)

    # Register error handlers
    errors.register_error_handlers(app)

    app.logger.info("[flask_app] Admin API registered at /authz (project=%s)", cfg.descope.project_id)
    return app
