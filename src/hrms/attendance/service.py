from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from ..audit.sink import AuditSink
from ..common.datetime_utils import month_bounds, now_local
from ..common.pagination import Page, PageRequest
from ..common.serialization import to_json
from ..common.validators import require_int_range, require_non_negative_int
from ..core.enums import WORKED_STATUSES
from ..core.exceptions import AlreadyClockedInError, NoOpenClockInError, NotFoundError, ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeDirectory
from ..notifications.dispatcher import SideEffectDispatcher
from .calculator import StandardHoursCalculator, WorkHoursCalculator
from .factory import AttendanceStrategyFactory
from .model import (
    AttendanceFilters,
    AttendanceRecord,
    AttendanceSummary,
    AttendanceUpdate,
    EmployeeAttendanceTotals,
    Location,
)
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def summarize_records(records: Iterable[AttendanceRecord]) -> AttendanceSummary:
    total_days = 0
    present_days = 0
    total_hours = 0.0
    overtime_hours = 0.0
    for r in records:
        total_days += 1
        if r.status in WORKED_STATUSES:
            present_days += 1
        total_hours += r.total_hours
        overtime_hours += r.overtime_hours
    return AttendanceSummary(
        total_days=total_days,
        present_days=present_days,
        total_hours=round(total_hours, 2),
        overtime_hours=round(overtime_hours, 2),
    )


class AttendanceService:
    """Time accounting: clock events, worked hours and per-period totals."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeDirectory,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
        calculator: WorkHoursCalculator | None = None,
        audit: AuditSink | None = None,
        dispatcher: SideEffectDispatcher | None = None,
    ):
        self._attendance = attendance
        self._employees = employees
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._calculator = calculator or StandardHoursCalculator()
        self._audit = audit
        self._dispatcher = dispatcher or SideEffectDispatcher()

    def _require_employee(self, employee_id: str) -> Employee:
        employee = self._employees.find_by_employee_id(employee_id)
        if not employee:
            raise NotFoundError(f"Employee {employee_id} not found")
        return employee

    def _require_record(self, attendance_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(attendance_id)
        if not record:
            raise NotFoundError("Attendance record not found")
        return record

    def record_clock_in(
        self,
        employee_id: str,
        timestamp: datetime | None = None,
        location: Location | None = None,
        notes: str | None = None,
    ) -> AttendanceRecord:
        now = timestamp or now_local()
        today = now.date()
        self._require_employee(employee_id)

        if self._attendance.get_open_for_employee(employee_id):
            raise AlreadyClockedInError("Already clocked in, clock out first")
        if self._attendance.get_for_employee_and_date(employee_id, today):
            raise AlreadyClockedInError("Already clocked in today")

        strategy = self._factory.for_checkin(location=location)
        decision = strategy.decide_checkin(location=location)

        # The (employee_id, work_date) unique key settles concurrent clock-ins.
        attendance_id = self._attendance.create_clock_in(
            employee_id=employee_id,
            work_date=today,
            clock_in=now,
            status=decision.status,
            location=location,
            notes=notes if notes is not None else decision.note,
        )
        logger.info("Clock-in recorded: employee=%s date=%s status=%s", employee_id, today, decision.status.value)
        return self._require_record(attendance_id)

    def record_clock_out(
        self,
        employee_id: str,
        timestamp: datetime | None = None,
        break_minutes: int = 0,
        notes: str | None = None,
    ) -> AttendanceRecord:
        now = timestamp or now_local()
        break_minutes = require_non_negative_int(break_minutes or 0, "breakDuration")
        self._require_employee(employee_id)

        record = self._attendance.get_for_employee_and_date(employee_id, now.date())
        if not record or not record.is_open:
            raise NoOpenClockInError("No open clock-in found for today")

        total = self._calculator.worked_hours(record.clock_in, now, break_minutes)
        overtime = self._calculator.overtime_hours(total)
        updated = self._attendance.update_clock_out(
            attendance_id=record.attendance_id,
            clock_out=now,
            break_minutes=break_minutes,
            total_hours=total,
            overtime_hours=overtime,
            notes=notes if notes is not None else record.notes,
        )
        if not updated:
            raise NoOpenClockInError("No open clock-in found for today")

        logger.info("Clock-out recorded: employee=%s hours=%.2f overtime=%.2f", employee_id, total, overtime)
        return self._require_record(record.attendance_id)

    def monthly_records(self, employee_id: str, month: int, year: int) -> Sequence[AttendanceRecord]:
        month = require_int_range(month, "month", 1, 12)
        year = require_int_range(year, "year", 1900, 9999)
        start, end = month_bounds(month, year)
        return list(self._attendance.list_between(employee_id, start, end))

    def summarize(self, employee_id: str, month: int, year: int) -> AttendanceSummary:
        return summarize_records(self.monthly_records(employee_id, month, year))

    def list_records(self, filters: AttendanceFilters, page: PageRequest, *, today: date | None = None) -> tuple[Page, AttendanceSummary]:
        """Paginated search; without a date range the current month is used."""

        if filters.start_date is None and filters.end_date is None:
            today = today or now_local().date()
            start, end = month_bounds(today.month, today.year)
            filters = AttendanceFilters(
                employee_id=filters.employee_id,
                start_date=start,
                end_date=end,
                status=filters.status,
                department=filters.department,
            )
        if filters.start_date and filters.end_date and filters.end_date < filters.start_date:
            raise ValidationError("endDate must be on or after startDate")

        result = self._attendance.search(filters, page)
        return result, summarize_records(result.items)

    def team_summary(
        self,
        month: int | None = None,
        year: int | None = None,
        employee_id: str | None = None,
        *,
        today: date | None = None,
    ) -> Sequence[EmployeeAttendanceTotals]:
        today = today or now_local().date()
        month = require_int_range(month if month is not None else today.month, "month", 1, 12)
        year = require_int_range(year if year is not None else today.year, "year", 1900, 9999)
        start, end = month_bounds(month, year)
        return list(self._attendance.totals_by_employee(start_date=start, end_date=end, employee_id=employee_id))

    def update_record(self, attendance_id: int, changes: AttendanceUpdate, *, actor_id: Optional[str] = None) -> AttendanceRecord:
        record = self._require_record(attendance_id)

        clock_in = changes.clock_in or record.clock_in
        clock_out = changes.clock_out or record.clock_out
        break_minutes = (
            require_non_negative_int(changes.break_minutes, "breakDuration")
            if changes.break_minutes is not None
            else record.break_minutes
        )
        if clock_out is not None and clock_out < clock_in:
            raise ValidationError("clockOut must not be before clockIn")

        total = overtime = 0.0
        if clock_out is not None:
            total = self._calculator.worked_hours(clock_in, clock_out, break_minutes)
            overtime = self._calculator.overtime_hours(total)

        self._attendance.admin_update_record(
            attendance_id=record.attendance_id,
            clock_in=clock_in,
            clock_out=clock_out,
            break_minutes=break_minutes,
            total_hours=total,
            overtime_hours=overtime,
            status=changes.status or record.status,
            notes=changes.notes if changes.notes is not None else record.notes,
        )
        updated = self._require_record(record.attendance_id)
        logger.info("Attendance %s updated by %s", record.attendance_id, actor_id)

        if self._audit:
            self._dispatcher.submit(
                f"audit attendance update {record.attendance_id}",
                self._audit.record,
                actor_id=actor_id,
                action="ATTENDANCE_UPDATED",
                resource="attendance",
                resource_id=str(record.attendance_id),
                before_data=to_json(record),
                after_data=to_json(updated),
            )
        return updated
