from __future__ import annotations

from datetime import date, datetime
from typing import ContextManager, Iterable, Optional, Protocol, Sequence

from ..common.pagination import Page, PageRequest
from ..core.enums import LeaveStatus, LeaveType
from .model import LeaveApplication, LeaveFilters


class LeaveRepository(Protocol):
    def get_by_id(self, leave_id: int) -> Optional[LeaveApplication]:
        raise NotImplementedError

    def lock_employee(self, employee_id: str) -> ContextManager[None]:
        """Serialize overlap-check-and-insert for one employee."""

        raise NotImplementedError

    def find_overlapping(
        self,
        employee_id: str,
        start_date: date,
        end_date: date,
        statuses: Iterable[LeaveStatus],
    ) -> Sequence[LeaveApplication]:
        """Leaves with start <= end_date AND end >= start_date in one of `statuses`."""

        raise NotImplementedError

    def find_starting_between(
        self,
        employee_id: str,
        start_date: date,
        end_date: date,
        statuses: Iterable[LeaveStatus],
    ) -> Sequence[LeaveApplication]:
        raise NotImplementedError

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
        raise NotImplementedError

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
        """Compare-and-set on status. False when the leave is no longer in `from_status`."""

        raise NotImplementedError

    def search(self, filters: LeaveFilters, page: PageRequest) -> Page:
        raise NotImplementedError
