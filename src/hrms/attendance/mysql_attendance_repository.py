from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence

from mysql.connector.errors import IntegrityError

from ..common.pagination import Page, PageRequest, order_by_clause
from ..core.enums import AttendanceStatus, LocationType
from ..core.exceptions import AlreadyClockedInError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_float, db_cursor, fetchall, fetchone, is_duplicate_key
from .model import AttendanceFilters, AttendanceRecord, EmployeeAttendanceTotals, Location
from .repository import AttendanceRepository

_COLUMNS = """
    a.attendance_id, a.employee_id, a.work_date, a.clock_in, a.clock_out, a.break_minutes,
    a.total_hours, a.overtime_hours, a.status, a.location_type, a.location_address,
    a.latitude, a.longitude, a.notes
"""

_SORTABLE = {
    "date": "a.work_date",
    "clockIn": "a.clock_in",
    "employeeId": "a.employee_id",
    "totalHours": "a.total_hours",
    "status": "a.status",
}


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    location = None
    if r.get("location_type"):
        location = Location(
            type=LocationType(r["location_type"]),
            address=r.get("location_address"),
            latitude=float(r["latitude"]) if r.get("latitude") is not None else None,
            longitude=float(r["longitude"]) if r.get("longitude") is not None else None,
        )
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        employee_id=r["employee_id"],
        work_date=r["work_date"],
        clock_in=r["clock_in"],
        clock_out=r.get("clock_out"),
        status=AttendanceStatus(r["status"]),
        break_minutes=int(r.get("break_minutes") or 0),
        total_hours=as_float(r.get("total_hours")),
        overtime_hours=as_float(r.get("overtime_hours")),
        location=location,
        notes=r.get("notes"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records a WHERE a.attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_for_employee_and_date(self, employee_id: str, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records a WHERE a.employee_id=%s AND a.work_date=%s",
                (employee_id, work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_open_for_employee(self, employee_id: str) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance_records a
                WHERE a.employee_id=%s AND a.clock_out IS NULL
                ORDER BY a.work_date DESC
                LIMIT 1
                """,
                (employee_id,),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def create_clock_in(
        self,
        *,
        employee_id: str,
        work_date: date,
        clock_in: datetime,
        status: AttendanceStatus,
        location: Optional[Location] = None,
        notes: Optional[str] = None,
    ) -> int:
        loc = location or Location()
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(
                        employee_id, work_date, clock_in, status,
                        location_type, location_address, latitude, longitude, notes
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        employee_id,
                        work_date,
                        clock_in,
                        status.value,
                        loc.type.value,
                        loc.address,
                        loc.latitude,
                        loc.longitude,
                        notes,
                    ),
                )
                return int(cur.lastrowid)
        except IntegrityError as exc:
            if is_duplicate_key(exc):
                raise AlreadyClockedInError("Already clocked in today") from exc
            raise

    def update_clock_out(
        self,
        *,
        attendance_id: int,
        clock_out: datetime,
        break_minutes: int,
        total_hours: float,
        overtime_hours: float,
        notes: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            # Guarded on clock_out IS NULL so two concurrent clock-outs cannot both win.
            cur.execute(
                """
                UPDATE attendance_records
                SET clock_out=%s, break_minutes=%s, total_hours=%s, overtime_hours=%s, notes=%s
                WHERE attendance_id=%s AND clock_out IS NULL
                """,
                (clock_out, int(break_minutes), total_hours, overtime_hours, notes, int(attendance_id)),
            )
            return cur.rowcount > 0

    def admin_update_record(
        self,
        *,
        attendance_id: int,
        clock_in: datetime,
        clock_out: Optional[datetime],
        break_minutes: int,
        total_hours: float,
        overtime_hours: float,
        status: AttendanceStatus,
        notes: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET clock_in=%s, clock_out=%s, break_minutes=%s, total_hours=%s,
                    overtime_hours=%s, status=%s, notes=%s
                WHERE attendance_id=%s
                """,
                (
                    clock_in,
                    clock_out,
                    int(break_minutes),
                    total_hours,
                    overtime_hours,
                    status.value,
                    notes,
                    int(attendance_id),
                ),
            )
            return cur.rowcount > 0

    def list_between(self, employee_id: str, start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance_records a
                WHERE a.employee_id=%s AND a.work_date BETWEEN %s AND %s
                ORDER BY a.work_date ASC
                """,
                (employee_id, start_date, end_date),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def search(self, filters: AttendanceFilters, page: PageRequest) -> Page:
        where = ["1=1"]
        params: list = []
        join = ""
        if filters.employee_id:
            where.append("a.employee_id=%s")
            params.append(filters.employee_id)
        if filters.start_date:
            where.append("a.work_date >= %s")
            params.append(filters.start_date)
        if filters.end_date:
            where.append("a.work_date <= %s")
            params.append(filters.end_date)
        if filters.status:
            where.append("a.status=%s")
            params.append(filters.status.value)
        if filters.department:
            join = "JOIN employees e ON e.employee_id = a.employee_id"
            where.append("e.department=%s")
            params.append(filters.department)

        where_sql = " AND ".join(where)
        order_sql = order_by_clause(page.sort, _SORTABLE, default="a.work_date DESC")

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM attendance_records a {join} WHERE {where_sql}", tuple(params))
            total = int((fetchone(cur) or {}).get("total") or 0)
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance_records a {join}
                WHERE {where_sql}
                ORDER BY {order_sql}
                LIMIT %s OFFSET %s
                """,
                tuple(params) + (page.limit, page.offset),
            )
            items = [_to_record(r) for r in fetchall(cur)]
        return Page(items=items, total=total, page=page.page, limit=page.limit)

    def totals_by_employee(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_id: Optional[str] = None,
    ) -> Sequence[EmployeeAttendanceTotals]:
        sql = """
            SELECT employee_id, COUNT(*) AS total_days,
                   COALESCE(SUM(total_hours), 0) AS total_hours,
                   COALESCE(SUM(overtime_hours), 0) AS overtime_hours
            FROM attendance_records
            WHERE work_date BETWEEN %s AND %s
        """
        params: list = [start_date, end_date]
        if employee_id:
            sql += " AND employee_id=%s"
            params.append(employee_id)
        sql += " GROUP BY employee_id ORDER BY employee_id"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [
                EmployeeAttendanceTotals(
                    employee_id=r["employee_id"],
                    total_days=int(r["total_days"]),
                    total_hours=as_float(r["total_hours"]),
                    overtime_hours=as_float(r["overtime_hours"]),
                )
                for r in fetchall(cur)
            ]
