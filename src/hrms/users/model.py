from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: a login account.

    Note: Plain data object (no DB access code).
    """

    user_id: int
    email: str
    password_hash: str
    role: Role
    is_active: bool = True


@dataclass(frozen=True)
class SessionUser:
    """Identity resolved from a bearer token for the current request."""

    user_id: int
    email: str
    role: Role
    employee_id: Optional[str] = None
