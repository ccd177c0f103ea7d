from __future__ import annotations

from functools import wraps
from typing import Any, Optional

from flask import current_app, g, jsonify, request

from ..core.enums import PRIVILEGED_ROLES, Role
from ..core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from .datetime_utils import parse_iso_date
from .pagination import Page
from .serialization import to_json

CONTAINER_KEY = "hrms.container"


def get_container():
    return current_app.extensions[CONTAINER_KEY]


def api_response(data: Any = None, *, message: str = "Success", status_code: int = 200):
    body = {"success": True, "statusCode": status_code, "message": message, "data": to_json(data)}
    return jsonify(body), status_code


def paginated_response(page: Page, *, message: str = "Success", **extra: Any):
    data = {"data": page.items, "pagination": page.pagination()}
    data.update(extra)
    return api_response(data, message=message)


def error_body(code: str, message: str, status_code: int) -> dict:
    return {"success": False, "statusCode": status_code, "error": {"code": code, "message": message}}


def json_body() -> dict:
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload


def _bearer_token() -> str:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("Access token required")
    return token.strip()


def current_user():
    return g.current_user


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        g.current_user = get_container().auth_service.resolve_token(_bearer_token())
        return view(*args, **kwargs)

    return wrapper


def roles_required(*roles: Role):
    allowed = frozenset(roles)

    def decorator(view):
        @wraps(view)
        @login_required
        def wrapper(*args, **kwargs):
            if current_user().role not in allowed:
                raise AuthorizationError("Insufficient permissions")
            return view(*args, **kwargs)

        return wrapper

    return decorator


def is_privileged(user) -> bool:
    return user.role in PRIVILEGED_ROLES


def resolve_employee_id(requested: Optional[str] = None) -> str:
    """Employee the request acts on: an explicit id for privileged callers, else the caller's own."""

    user = current_user()
    if requested and requested != user.employee_id:
        if not is_privileged(user):
            raise AuthorizationError("You can only act on your own records")
        return requested
    if not user.employee_id:
        raise NotFoundError("No employee profile linked to this user")
    return user.employee_id


def query_int(name: str) -> Optional[int]:
    value = request.args.get(name)
    if value in (None, ""):
        return None
    try:
        return int(value)
    except ValueError:
        raise ValidationError(f"{name} must be an integer")


def query_date(name: str):
    value = request.args.get(name)
    if value in (None, ""):
        return None
    return parse_iso_date(value)
