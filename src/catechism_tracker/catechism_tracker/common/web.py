from __future__ import annotations

import logging
from datetime import date
from functools import wraps
from typing import Any, Dict

from flask import jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import AuthorizationError, DomainError, NotFoundError, PersistenceFailure, ValidationError
from .datetime_utils import parse_iso_date

logger = logging.getLogger(__name__)


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"error": "Please sign in to continue"}), 401
        return view(*args, **kwargs)

    return wrapper


def role_required(*roles: Role):
    allowed = {r.value for r in roles}

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"error": "Please sign in to continue"}), 401
            if session.get("role") not in allowed:
                return jsonify({"error": "You do not have permission"}), 403
            return view(*args, **kwargs)

        return wrapper

    return decorator


def current_actor() -> int:
    return int(session["user_id"])


def current_role() -> Role:
    return Role(session.get("role"))


def error_response(exc: DomainError):
    if isinstance(exc, NotFoundError):
        status = 404
    elif isinstance(exc, ValidationError):
        status = 400
    elif isinstance(exc, AuthorizationError):
        status = 403
    elif isinstance(exc, PersistenceFailure):
        status = 500
    else:
        status = 400
    return jsonify({"error": str(exc), "type": type(exc).__name__}), status


def require_json() -> Dict[str, Any]:
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationError("Expected a JSON object body")
    return payload


def json_date(payload: Dict[str, Any], field: str) -> date:
    try:
        return parse_iso_date(str(payload.get(field) or ""))
    except ValueError:
        raise ValidationError(f"{field} must be a YYYY-MM-DD date")


def json_int(payload: Dict[str, Any], field: str, *, required: bool = True):
    value = payload.get(field)
    if value is None or value == "":
        if required:
            raise ValidationError(f"{field} is required")
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be an integer")
