from __future__ import annotations

import logging
from typing import Any, Optional

from flask import jsonify, request

from ..core.exceptions import (
    DomainError,
    NotOwner,
    PersistenceFailure,
    RecordNotFound,
    SchedulingFailure,
    StateConflict,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Order matters: subclasses before their bases.
_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (RecordNotFound, 404),
    (NotOwner, 403),
    (StateConflict, 409),
    (SchedulingFailure, 503),
    (PersistenceFailure, 503),
)


def status_for(exc: DomainError) -> int:
    for cls, status in _STATUS_BY_ERROR:
        if isinstance(exc, cls):
            return status
    return 500


def error_response(exc: DomainError):
    status = status_for(exc)
    if status >= 500:
        logger.error("%s %s failed: %s", request.method, request.path, exc)
    return jsonify({"success": False, "error": type(exc).__name__, "message": str(exc)}), status


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def param(name: str, body: Optional[dict] = None) -> Any:
    """Read a value from the JSON body first, then the query string."""
    if body is not None and name in body:
        return body[name]
    return request.args.get(name)


def optional_int(value: Any, field_name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a whole number")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a whole number") from None
