from __future__ import annotations

from typing import Any, Dict, Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Employee, PersonalInfo, ProfessionalInfo
from .repository import EmployeeDirectory

_SELECT = """
    SELECT e.employee_id, e.user_id, u.email, e.first_name, e.last_name, e.phone,
           e.department, e.designation, e.joining_date, e.is_active
    FROM employees e
    LEFT JOIN users u ON u.user_id = e.user_id
"""


def _to_employee(r: Dict[str, Any]) -> Employee:
    return Employee(
        employee_id=r["employee_id"],
        user_id=int(r["user_id"]) if r.get("user_id") is not None else None,
        email=r.get("email"),
        personal=PersonalInfo(
            first_name=r["first_name"],
            last_name=r["last_name"],
            phone=r.get("phone"),
        ),
        professional=ProfessionalInfo(
            department=r.get("department"),
            designation=r.get("designation"),
            joining_date=r.get("joining_date"),
        ),
        is_active=bool(r.get("is_active", True)),
    )


class MySQLEmployeeRepository(EmployeeDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find_by_employee_id(self, employee_id: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE e.employee_id=%s", (employee_id,))
            row = fetchone(cur)
            return _to_employee(row) if row else None

    def find_by_user_id(self, user_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE e.user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _to_employee(row) if row else None
