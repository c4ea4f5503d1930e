"""Flask application entry point."""

import logging
from flask import Flask, jsonify
from flask_cors import CORS

from .config import settings
from .db import get_core, get_schema_version, init_db
from .exceptions import (
    AuthenticationError,
    MemosError,
    PermissionDenied,
    ResourceNotFound,
    ValidationError,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


# Create Flask app
app = Flask(__name__)

# CORS configuration
CORS(app, origins=settings.cors_origins, supports_credentials=True)


def initialize_database():
    """Initialize database on app startup."""
    try:
        init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        raise


with app.app_context():
    initialize_database()


def _error_response(error: MemosError, status: int):
    response = {
        "error": {
            "type": error.__class__.__name__,
            "message": error.message
        }
    }
    if error.details:
        response["error"]["details"] = error.details
    return jsonify(response), status


# Error handlers
@app.errorhandler(ResourceNotFound)
def handle_not_found(error):
    """Missing rows and rows the caller may not see both map to 404."""
    return _error_response(error, 404)


@app.errorhandler(ValidationError)
def handle_validation_error(error):
    return _error_response(error, 400)


@app.errorhandler(AuthenticationError)
def handle_authentication_error(error):
    return _error_response(error, 401)


@app.errorhandler(PermissionDenied)
def handle_permission_denied(error):
    """Denied writes on rows the caller can see."""
    return _error_response(error, 403)


@app.errorhandler(MemosError)
def handle_memos_error(error):
    """Handle any other MemosError (e.g. DatabaseError)."""
    return _error_response(error, 500)


@app.errorhandler(500)
def handle_internal_error(error):
    """Handle internal server errors."""
    logger.error(f"Internal error: {error}")
    return jsonify({
        "error": {
            "type": "InternalServerError",
            "message": "An internal error occurred"
        }
    }), 500


# Health check endpoint
@app.route("/health")
def health():
    """Health check endpoint; reports the applied schema version."""
    core = get_core()
    try:
        version = get_schema_version(core._conn)
    finally:
        core.close()
    return jsonify({"status": "ok", "schema_version": version})


# Register blueprints
from .api.auth import auth_bp
from .api.v1 import api_v1_bp

app.register_blueprint(auth_bp)
app.register_blueprint(api_v1_bp, url_prefix=settings.api_v1_prefix)


if __name__ == "__main__":
    app.run(debug=True)
