"""
Request hooks applied to every request, in registration order:
origin allow-list, body size ceiling, request log.
"""

import logging
from datetime import datetime, timezone

from flask import current_app, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import Forbidden, HTTPException, RequestEntityTooLarge

from ..models.errors import ModelError

logger = logging.getLogger(__name__)


def _now_iso():
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def error_response(status_code, code, message, **extra):
    error = {"code": code, "message": message}
    error.update(extra)
    return jsonify({"error": error, "generated_at": _now_iso()}), status_code


def reject_unknown_origin():
    origin = request.headers.get("Origin")
    if origin and origin not in current_app.config["CORS_ORIGINS"]:
        logger.warning("Rejected %s %s from origin %s", request.method, request.path, origin)
        raise Forbidden(f"Origin {origin} is not allowed")


def enforce_body_limit():
    limit = current_app.config.get("MAX_CONTENT_LENGTH")
    if limit and request.content_length is not None and request.content_length > limit:
        raise RequestEntityTooLarge()


def log_request():
    logger.info("%s %s", request.method, request.path)


def init_middleware(app):
    CORS(
        app,
        origins=app.config["CORS_ORIGINS"],
        supports_credentials=True,
    )
    app.before_request(reject_unknown_origin)
    app.before_request(enforce_body_limit)
    app.before_request(log_request)


def add_error_handlers(app):
    @app.errorhandler(ModelError)
    def model_error_handler(exc):
        return error_response(exc.status_code, exc.code, exc.message,
                              **{k: v for k, v in exc.to_dict().items() if k not in ("code", "message")})

    @app.errorhandler(HTTPException)
    def http_exception_handler(exc):
        codes = {
            403: "CORS_REJECTED",
            404: "NOT_FOUND",
            405: "METHOD_NOT_ALLOWED",
            413: "PAYLOAD_TOO_LARGE",
        }
        return error_response(exc.code, codes.get(exc.code, "HTTP_ERROR"), exc.description)

    @app.errorhandler(Exception)
    def unhandled_exception_handler(exc):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return error_response(500, "INTERNAL_ERROR", str(exc))
