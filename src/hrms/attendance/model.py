from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus, LocationType


@dataclass(frozen=True)
class Location:
    type: LocationType = LocationType.OFFICE
    address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one attendance record per employee per day."""

    attendance_id: int
    employee_id: str
    work_date: date
    clock_in: datetime
    clock_out: Optional[datetime]
    status: AttendanceStatus
    break_minutes: int = 0
    total_hours: float = 0.0
    overtime_hours: float = 0.0
    location: Optional[Location] = None
    notes: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.clock_out is None


@dataclass(frozen=True)
class AttendanceSummary:
    total_days: int = 0
    present_days: int = 0
    total_hours: float = 0.0
    overtime_hours: float = 0.0


@dataclass(frozen=True)
class EmployeeAttendanceTotals:
    """Read-model for the per-employee monthly summary."""

    employee_id: str
    total_days: int
    total_hours: float
    overtime_hours: float


@dataclass(frozen=True)
class AttendanceFilters:
    employee_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[AttendanceStatus] = None
    department: Optional[str] = None


@dataclass(frozen=True)
class AttendanceUpdate:
    """Admin edit; None leaves a field unchanged."""

    clock_in: Optional[datetime] = None
    clock_out: Optional[datetime] = None
    break_minutes: Optional[int] = None
    status: Optional[AttendanceStatus] = None
    notes: Optional[str] = None
