"""Error handlers for the application.

Error contract:
    ValidationError        -> 400, JSON {field: message}
    BackendOperationError  -> mapped status, message as plain text
    AuthorizationDenied    -> 403, standard JSON forbidden body
    HTTP errors            -> JSON {"error": ..., "message": ...}
"""
from flask import jsonify
from werkzeug.exceptions import HTTPException

from backend_resources.core.errors import (
    AuthorizationDenied,
    OperationError,
    ValidationError,
)


def register_error_handlers(app):
    """Register error handlers with the Flask app."""

    @app.errorhandler(ValidationError)
    def validation_failed(error):
        """Report every violated field at once."""
        return jsonify(error.to_dict()), 400

    @app.errorhandler(AuthorizationDenied)
    def authorization_denied(error):
        return _forbidden_response()

    @app.errorhandler(OperationError)
    def operation_failed(error):
        """Backend failures surface their message as plain text."""
        return (error.message, error.status, {"Content-Type": "text/plain; charset=utf-8"})

    @app.errorhandler(400)
    def bad_request(error):
        return jsonify({"error": "Bad Request", "message": _description(error, "Invalid request")}), 400

    @app.errorhandler(401)
    def unauthorized(error):
        return jsonify({"error": "Unauthorized", "message": _description(error, "Authentication required")}), 401

    @app.errorhandler(403)
    def forbidden(error):
        return _forbidden_response()

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({"error": "Not Found", "message": "Resource not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({"error": "Method Not Allowed", "message": "Method not allowed for this resource"}), 405

    @app.errorhandler(413)
    def request_too_large(error):
        return jsonify({"error": "Payload Too Large", "message": "Request payload exceeds maximum allowed size"}), 413

    @app.errorhandler(Exception)
    def handle_exception(error):
        """Handle uncaught exceptions."""
        if isinstance(error, HTTPException):
            return error

        # Always log the full error; never expose it to the client
        app.logger.error(f"Unhandled exception: {error}", exc_info=True)
        return jsonify({"error": "Internal Server Error", "message": "An unexpected error occurred"}), 500


def _forbidden_response():
    return jsonify({"error": "Forbidden", "message": "Insufficient permissions"}), 403


def _description(error, default: str) -> str:
    description = getattr(error, "description", None)
    return str(description) if description else default
