from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Iterable, Optional, Sequence

from ..common.pagination import Page, PageRequest, order_by_clause
from ..core.constants import DEFAULT_LEAVE_LOCK_TIMEOUT_SECONDS
from ..core.enums import LeaveStatus, LeaveType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import advisory_lock, as_float, db_cursor, fetchall, fetchone
from .model import LeaveApplication, LeaveFilters
from .repository import LeaveRepository

_COLUMNS = """
    l.leave_id, l.employee_id, l.leave_type, l.start_date, l.end_date, l.is_half_day,
    l.total_days, l.reason, l.status, l.approved_by, l.approved_date,
    l.rejection_reason, l.applied_date
"""

_SORTABLE = {
    "appliedDate": "l.applied_date",
    "startDate": "l.start_date",
    "endDate": "l.end_date",
    "status": "l.status",
    "leaveType": "l.leave_type",
    "totalDays": "l.total_days",
}


def _to_leave(r: Dict[str, Any]) -> LeaveApplication:
    return LeaveApplication(
        leave_id=int(r["leave_id"]),
        employee_id=r["employee_id"],
        leave_type=LeaveType(r["leave_type"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        is_half_day=bool(r.get("is_half_day")),
        total_days=as_float(r["total_days"]),
        reason=r["reason"],
        status=LeaveStatus(r["status"]),
        approved_by=r.get("approved_by"),
        approved_date=r.get("approved_date"),
        rejection_reason=r.get("rejection_reason"),
        applied_date=r["applied_date"],
    )


def _status_placeholders(statuses: Iterable[LeaveStatus]) -> tuple[str, list[str]]:
    values = [s.value for s in statuses]
    return ",".join(["%s"] * len(values)), values


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection, *, lock_timeout: int = DEFAULT_LEAVE_LOCK_TIMEOUT_SECONDS):
        self._conn_factory = conn_factory
        self._lock_timeout = int(lock_timeout)

    def lock_employee(self, employee_id: str):
        return advisory_lock(self._conn_factory, f"hrms.leave.{employee_id}", timeout=self._lock_timeout)

    def get_by_id(self, leave_id: int) -> Optional[LeaveApplication]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM leave_applications l WHERE l.leave_id=%s", (int(leave_id),))
            r = fetchone(cur)
            return _to_leave(r) if r else None

    def find_overlapping(
        self,
        employee_id: str,
        start_date: date,
        end_date: date,
        statuses: Iterable[LeaveStatus],
    ) -> Sequence[LeaveApplication]:
        marks, values = _status_placeholders(statuses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM leave_applications l
                WHERE l.employee_id=%s AND l.status IN ({marks})
                  AND l.start_date <= %s AND l.end_date >= %s
                ORDER BY l.start_date
                """,
                (employee_id, *values, end_date, start_date),
            )
            return [_to_leave(r) for r in fetchall(cur)]

    def find_starting_between(
        self,
        employee_id: str,
        start_date: date,
        end_date: date,
        statuses: Iterable[LeaveStatus],
    ) -> Sequence[LeaveApplication]:
        marks, values = _status_placeholders(statuses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM leave_applications l
                WHERE l.employee_id=%s AND l.status IN ({marks})
                  AND l.start_date BETWEEN %s AND %s
                ORDER BY l.start_date
                """,
                (employee_id, *values, start_date, end_date),
            )
            return [_to_leave(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        employee_id: str,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
        is_half_day: bool,
        total_days: float,
        reason: str,
        applied_date: datetime,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_applications(
                    employee_id, leave_type, start_date, end_date, is_half_day,
                    total_days, reason, status, applied_date
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    employee_id,
                    leave_type.value,
                    start_date,
                    end_date,
                    1 if is_half_day else 0,
                    total_days,
                    reason,
                    LeaveStatus.PENDING.value,
                    applied_date,
                ),
            )
            return int(cur.lastrowid)

    def transition(
        self,
        *,
        leave_id: int,
        from_status: LeaveStatus,
        to_status: LeaveStatus,
        approved_by: Optional[str] = None,
        approved_date: Optional[datetime] = None,
        rejection_reason: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_applications
                SET status=%s,
                    approved_by=COALESCE(%s, approved_by),
                    approved_date=COALESCE(%s, approved_date),
                    rejection_reason=COALESCE(%s, rejection_reason)
                WHERE leave_id=%s AND status=%s
                """,
                (
                    to_status.value,
                    approved_by,
                    approved_date,
                    rejection_reason,
                    int(leave_id),
                    from_status.value,
                ),
            )
            return cur.rowcount > 0

    def search(self, filters: LeaveFilters, page: PageRequest) -> Page:
        where = ["1=1"]
        params: list = []
        join = ""
        if filters.employee_id:
            where.append("l.employee_id=%s")
            params.append(filters.employee_id)
        if filters.status:
            where.append("l.status=%s")
            params.append(filters.status.value)
        if filters.leave_type:
            where.append("l.leave_type=%s")
            params.append(filters.leave_type.value)
        if filters.start_date:
            where.append("l.start_date >= %s")
            params.append(filters.start_date)
        if filters.end_date:
            where.append("l.end_date <= %s")
            params.append(filters.end_date)
        if filters.department:
            join = "JOIN employees e ON e.employee_id = l.employee_id"
            where.append("e.department=%s")
            params.append(filters.department)

        where_sql = " AND ".join(where)
        order_sql = order_by_clause(page.sort, _SORTABLE, default="l.applied_date DESC")

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM leave_applications l {join} WHERE {where_sql}", tuple(params))
            total = int((fetchone(cur) or {}).get("total") or 0)
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM leave_applications l {join}
                WHERE {where_sql}
                ORDER BY {order_sql}
                LIMIT %s OFFSET %s
                """,
                tuple(params) + (page.limit, page.offset),
            )
            items = [_to_leave(r) for r in fetchall(cur)]
        return Page(items=items, total=total, page=page.page, limit=page.limit)
