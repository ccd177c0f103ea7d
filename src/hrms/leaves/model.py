from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import LeaveStatus, LeaveType


@dataclass(frozen=True)
class LeaveApplication:
    """Domain entity: a leave request and its approval state."""

    leave_id: int
    employee_id: str
    leave_type: LeaveType
    start_date: date
    end_date: date
    total_days: float
    reason: str
    status: LeaveStatus
    applied_date: datetime
    is_half_day: bool = False
    approved_by: Optional[str] = None
    approved_date: Optional[datetime] = None
    rejection_reason: Optional[str] = None


@dataclass(frozen=True)
class LeaveBalanceEntry:
    # total/remaining are None for untracked types (UNPAID).
    total: Optional[int]
    used: float
    remaining: Optional[float]


@dataclass(frozen=True)
class LeaveFilters:
    employee_id: Optional[str] = None
    status: Optional[LeaveStatus] = None
    leave_type: Optional[LeaveType] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    department: Optional[str] = None


def calculate_total_days(start_date: date, end_date: date, is_half_day: bool = False) -> float:
    """Inclusive day count; a single-day half-day leave counts 0.5."""

    days = (end_date - start_date).days + 1
    if is_half_day and days == 1:
        return 0.5
    return float(days)
