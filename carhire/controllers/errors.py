import logging

from flask import jsonify
from werkzeug.exceptions import HTTPException

from ..exceptions import CarHireError

logger = logging.getLogger(__name__)


def _error(message: str, status: int, errors=None):
    body = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    return jsonify(body), status


def handle_app_error(e: CarHireError):
    if e.status_code >= 500:
        logger.error("API error: %s", e.message, exc_info=e)
    else:
        logger.info("Request rejected (%d): %s", e.status_code, e.message)
    return _error(e.message, e.status_code, e.errors)


def handle_http_error(e: HTTPException):
    return _error(e.description or e.name, e.code or 500)


def handle_unexpected(e: Exception):
    logger.exception("Unhandled error")
    return _error("Internal server error", 500)


def register_error_handlers(app):
    app.register_error_handler(CarHireError, handle_app_error)
    app.register_error_handler(HTTPException, handle_http_error)
    app.register_error_handler(Exception, handle_unexpected)
