"""Shared Flask plumbing for the JSON controllers.

Every endpoint answers ``{"success": bool, "message": str, ...}``. Domain
errors map to 4xx; anything else is logged and answered with a generic 500.
"""

from __future__ import annotations

import dataclasses
import logging
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from functools import wraps
from typing import Any, Optional

from flask import jsonify, request, session

from ..access.model import Identity
from ..core.enums import PermissionAction, Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    TransitionError,
    ValidationError,
)
from .datetime_utils import parse_iso_date

SESSION_KEY = "identity"

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (TransitionError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
)


def to_jsonable(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_jsonable(v) for v in value]
    return value


def ok(message: str = "OK", http_status: int = 200, **payload):
    body = {"success": True, "message": message}
    body.update({k: to_jsonable(v) for k, v in payload.items()})
    return jsonify(body), http_status


def fail(message: str, http_status: int = 400):
    return jsonify({"success": False, "message": message}), http_status


def handle_errors(logger: logging.Logger):
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                return view(*args, **kwargs)
            except tuple(e for e, _ in _STATUS_BY_ERROR) as e:
                status = next(code for err, code in _STATUS_BY_ERROR if isinstance(e, err))
                return fail(str(e), status)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Bad request on %s: %s", request.path, e)
                return fail("Invalid request data", 400)
            except Exception:
                logger.exception("Unhandled error on %s %s", request.method, request.path)
                return fail("Internal server error", 500)

        return wrapper

    return decorator


def store_identity(identity: Identity) -> None:
    session[SESSION_KEY] = {
        "email": identity.email,
        "role": identity.role.value,
        "employee_id": identity.employee_id,
        "full_name": identity.full_name,
        "department": identity.department,
    }


def current_identity() -> Optional[Identity]:
    data = session.get(SESSION_KEY)
    if not data:
        return None
    return Identity(
        email=data["email"],
        role=Role(data["role"]),
        employee_id=data.get("employee_id"),
        full_name=data.get("full_name") or "",
        department=data.get("department"),
    )


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if SESSION_KEY not in session:
            return fail("Please log in to continue", 401)
        return view(*args, **kwargs)

    return wrapper


def page_required(access, module_id: str, page_id: str, action: PermissionAction = PermissionAction.VIEW):
    """Gate a view on the caller's permission matrix; implies login_required."""

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            identity = current_identity()
            if identity is None:
                return fail("Please log in to continue", 401)
            if not access.can(identity, module_id, page_id, action):
                return fail("You do not have permission to perform this action", 403)
            return view(*args, **kwargs)

        return wrapper

    return decorator


def payload() -> dict:
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def date_arg(name: str, default: Optional[date] = None) -> Optional[date]:
    raw = (request.args.get(name) or "").strip()
    return parse_iso_date(raw) if raw else default


def optional_date(value: Any) -> Optional[date]:
    if value in (None, ""):
        return None
    if isinstance(value, date):
        return value
    return parse_iso_date(str(value))
