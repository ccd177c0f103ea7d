from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..common.pagination import Page, PageRequest
from ..core.enums import AttendanceStatus
from .model import AttendanceFilters, AttendanceRecord, EmployeeAttendanceTotals, Location


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_employee_and_date(self, employee_id: str, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_open_for_employee(self, employee_id: str) -> Optional[AttendanceRecord]:
        """Most recent record without a clock-out, any date."""

        raise NotImplementedError

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
        """Insert a new record. Raises AlreadyClockedInError on (employee_id, work_date) collision."""

        raise NotImplementedError

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
        raise NotImplementedError

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
        raise NotImplementedError

    def list_between(self, employee_id: str, start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        """Records with work_date in [start_date, end_date], ascending by date."""

        raise NotImplementedError

    def search(self, filters: AttendanceFilters, page: PageRequest) -> Page:
        raise NotImplementedError

    def totals_by_employee(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_id: Optional[str] = None,
    ) -> Sequence[EmployeeAttendanceTotals]:
        raise NotImplementedError
