from __future__ import annotations

import logging
from dataclasses import fields, is_dataclass
from datetime import date
from enum import Enum
from typing import Any

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from ..core.exceptions import ConflictError, DomainError, NotFoundError, TransientStoreError, ValidationError

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (NotFoundError, 404),
    (ConflictError, 409),
    (TransientStoreError, 503),
)


def to_jsonable(value: Any) -> Any:
    """Dataclasses, enums and dates into plain JSON values."""

    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_jsonable(v) for v in value]
    return value


def json_ok(status_code: int = 200, **payload):
    body = {"success": True}
    body.update({k: to_jsonable(v) for k, v in payload.items()})
    return jsonify(body), status_code


def json_error(message: str, status_code: int):
    return jsonify({"success": False, "message": message}), status_code


def get_json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        for error_type, status_code in _STATUS_BY_ERROR:
            if isinstance(e, error_type):
                if status_code >= 500:
                    logger.error("Store unavailable while handling %s %s: %s", request.method, request.path, e)
                return json_error(str(e), status_code)
        return json_error(str(e), 400)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        if isinstance(e, HTTPException):
            return json_error(e.description or e.name, e.code or 500)
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return json_error("Internal server error", 500)
