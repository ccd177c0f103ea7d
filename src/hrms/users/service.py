from __future__ import annotations

import logging
from typing import Optional

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from werkzeug.security import check_password_hash

from ..audit.sink import AuditSink
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_TOKEN_MAX_AGE_SECONDS
from ..core.exceptions import AuthenticationError
from ..employees.repository import EmployeeDirectory
from ..notifications.dispatcher import SideEffectDispatcher
from .model import SessionUser, User
from .repository import UserRepository

logger = logging.getLogger(__name__)

_TOKEN_SALT = "hrms-api-token"


class AuthService:
    """Use case: authenticate users and resolve bearer tokens."""

    def __init__(
        self,
        users: UserRepository,
        employees: EmployeeDirectory,
        *,
        secret_key: str,
        max_age_seconds: int = DEFAULT_TOKEN_MAX_AGE_SECONDS,
        audit: Optional[AuditSink] = None,
        dispatcher: Optional[SideEffectDispatcher] = None,
    ):
        self._users = users
        self._employees = employees
        self._serializer = URLSafeTimedSerializer(secret_key, salt=_TOKEN_SALT)
        self._max_age = int(max_age_seconds)
        self._audit = audit
        self._dispatcher = dispatcher or SideEffectDispatcher()

    def _session_user(self, user: User) -> SessionUser:
        employee = self._employees.find_by_user_id(user.user_id)
        return SessionUser(
            user_id=user.user_id,
            email=user.email,
            role=user.role,
            employee_id=employee.employee_id if employee else None,
        )

    def _audit_login(self, *, actor_id: Optional[str], action: str, email: str) -> None:
        if not self._audit:
            return
        self._dispatcher.submit(
            f"audit {action}",
            self._audit.record,
            actor_id=actor_id,
            action=action,
            resource="auth",
            after_data={"email": email},
        )

    def authenticate(self, email: str, password: str) -> tuple[str, SessionUser]:
        email = require_non_empty(email, "email").lower()
        password = require_non_empty(password, "password")

        user = self._users.get_by_email(email)
        ok = False
        if user and user.is_active:
            try:
                ok = check_password_hash(user.password_hash, password)
            except ValueError:
                # Unknown hash method, e.g. a placeholder value.
                ok = False

        if not user or not ok:
            self._audit_login(actor_id=str(user.user_id) if user else None, action="LOGIN_FAILED", email=email)
            raise AuthenticationError("Invalid email or password")

        session_user = self._session_user(user)
        token = self._serializer.dumps({"uid": user.user_id})
        self._audit_login(actor_id=str(user.user_id), action="LOGIN", email=email)
        logger.info("User logged in: %s", user.user_id)
        return token, session_user

    def resolve_token(self, token: str) -> SessionUser:
        if not token:
            raise AuthenticationError("Access token required")
        try:
            payload = self._serializer.loads(token, max_age=self._max_age)
        except SignatureExpired:
            raise AuthenticationError("Token expired")
        except BadSignature:
            raise AuthenticationError("Invalid token")

        user_id = payload.get("uid") if isinstance(payload, dict) else None
        user = self._users.get_by_id(int(user_id)) if user_id is not None else None
        if not user or not user.is_active:
            raise AuthenticationError("Invalid token or user not found")
        return self._session_user(user)
