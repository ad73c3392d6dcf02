"""Error handlers for the application."""
import logging

from flask import jsonify
from werkzeug.exceptions import HTTPException

from authz_admin.core.descope import DescopeError
from authz_admin.core.validators import ValidationError

logger = logging.getLogger(__name__)


def register_error_handlers(app):
    """Register JSON error handlers with the Flask app."""

    @app.errorhandler(ValidationError)
    def validation_error(error):
        """Malformed request input, rejected before any backend call."""
        return jsonify({"error": "Bad Request", "message": str(error)}), 400

    @app.errorhandler(DescopeError)
    def backend_error(error):
        """Backend or transport failure while performing the operation."""
        logger.error("Backend failure: %s", error)
        return jsonify({"error": "Bad Gateway", "message": str(error)}), 502

    @app.errorhandler(400)
    def bad_request(error):
        return jsonify({"error": "Bad Request", "message": _description(error, "Invalid request")}), 400

    @app.errorhandler(401)
    def unauthorized(error):
        return jsonify({"error": "Unauthorized", "message": "Authentication required"}), 401

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({"error": "Not Found", "message": "Resource not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({"error": "Method Not Allowed", "message": _description(error, "Method not allowed")}), 405

    @app.errorhandler(Exception)
    def handle_exception(error):
        """Handle uncaught exceptions."""
        # Pass through HTTP errors
        if isinstance(error, HTTPException):
            return error

        app.logger.error(f"Unhandled exception: {error}", exc_info=True)
        return jsonify({"error": "Internal Server Error", "message": "An unexpected error occurred"}), 500


def _description(error, default: str) -> str:
    description = getattr(error, "description", None)
    return str(description) if description else default
