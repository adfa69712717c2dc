from flask import request
from werkzeug.exceptions import HTTPException

from ..http import api_error, legacy_error
from .exceptions import AppError

LEGACY_PATHS = ("/upload", "/reparaciones", "/download-csv")


def is_legacy_path(path: str) -> bool:
    # exact paths plus /reparaciones/<id>; /uploads/<name> is not one of them
    return path in LEGACY_PATHS or path.startswith("/reparaciones/")


def _error_response(status, code, message):
    path = request.path
    if is_legacy_path(path):
        return legacy_error(status, code, message)
    if path.startswith("/api"):
        return api_error(status, code, message)
    return None


def register_error_handlers(app):
    """Register app-level error handlers.

    Routes let AppError subclasses propagate; this is where they turn into
    the JSON error body. Unexpected errors are logged and hidden behind a
    generic 500 on API paths.
    """

    @app.errorhandler(AppError)
    def handle_app_error(e: AppError):
        if e.status >= 500:
            app.logger.error("%s: %s", e.code, e.message, exc_info=e)
        if is_legacy_path(request.path):
            return legacy_error(e.status, e.code, e.message)
        return api_error(e.status, e.code, e.message)

    @app.errorhandler(HTTPException)
    def handle_http(e: HTTPException):
        resp = _error_response(e.code or 500, e.name.upper().replace(" ", "_"), e.description)
        # Keep Werkzeug default pages outside the JSON paths
        return resp if resp is not None else e

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        app.logger.exception("Unhandled error")
        resp = _error_response(500, "INTERNAL_SERVER_ERROR", "unexpected server error")
        if resp is None:
            raise e
        return resp
