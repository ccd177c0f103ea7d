from __future__ import annotations

from typing import Optional, Protocol

from .model import Employee


class EmployeeDirectory(Protocol):
    """Read-only lookup of employees; resolves caller identity to a business employee id."""

    def find_by_employee_id(self, employee_id: str) -> Optional[Employee]:
        raise NotImplementedError

    def find_by_user_id(self, user_id: int) -> Optional[Employee]:
        raise NotImplementedError
