"""JSON boundary helpers shared by the controllers.

Services raise; views wrapped with `json_endpoint` turn those exceptions into
`{"success": false, "error": ..., "code": ...}` envelopes.
"""
from __future__ import annotations

import dataclasses
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from functools import wraps
from typing import Any, Optional

from flask import jsonify, request, session

from ..app_logger import get_logger
from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConfigurationError,
    ConflictError,
    DomainError,
    NotFoundError,
    UnexpectedError,
    ValidationError,
)
from .datetime_utils import parse_iso_date

logger = get_logger("http")

GENERIC_ERROR = "Something went wrong. Please try again."

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
)


def status_for(exc: Exception) -> int:
    for exc_type, status in _STATUS_BY_ERROR:
        if isinstance(exc, exc_type):
            return status
    return 500


def error_response(exc: Exception):
    if isinstance(exc, DomainError):
        message = str(exc)
    else:
        message = GENERIC_ERROR
    return jsonify({"success": False, "error": message, "code": type(exc).__name__}), status_for(exc)


def ok(payload: Optional[dict] = None, status: int = 200):
    body = {"success": True}
    body.update(payload or {})
    return jsonify(body), status


def json_endpoint(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except DomainError as e:
            logger.debug("%s rejected: %s", request.path, e)
            return error_response(e)
        except (ConfigurationError, UnexpectedError) as e:
            logger.exception("%s failed: %s", request.path, e)
            return error_response(e)
        except Exception as e:
            logger.exception("Unhandled error on %s", request.path)
            return error_response(e)

    return wrapper


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return error_response(AuthenticationError("Please sign in to continue"))
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return error_response(AuthenticationError("Please sign in to continue"))
        if session.get("role") != Role.ADMIN.value:
            return error_response(AuthorizationError("Admin access required"))
        return view(*args, **kwargs)

    return wrapper


def current_user_id() -> int:
    return int(session["user_id"])


def current_role() -> Role:
    return Role(session.get("role", Role.STUDENT.value))


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def date_arg(value, *, default: Optional[date] = None) -> Optional[date]:
    if value is None or value == "":
        return default
    if isinstance(value, date):
        return value
    try:
        return parse_iso_date(str(value))
    except ValueError:
        raise ValidationError("Date must be in YYYY-MM-DD format")


def serialize(value: Any) -> Any:
    """Dataclasses/enums/dates/decimals -> plain JSON values (ISO dates, string amounts)."""

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: serialize(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, dict):
        return {str(k): serialize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [serialize(v) for v in value]
    return value
