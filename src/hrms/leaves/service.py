from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Dict, Optional

from ..audit.sink import AuditSink
from ..common.datetime_utils import now_local, year_bounds
from ..common.pagination import Page, PageRequest
from ..common.serialization import to_json
from ..common.validators import (
    parse_enum,
    require_int_range,
    require_max_length,
    require_min_length,
    require_non_empty,
)
from ..core.constants import LEAVE_POLICY, MAX_REASON_LENGTH, MIN_REASON_LENGTH
from ..core.enums import ACTIVE_LEAVE_STATUSES, LeaveNotificationKind, LeaveStatus, LeaveType
from ..core.exceptions import (
    AlreadyDecidedError,
    AuthorizationError,
    NotFoundError,
    OverlappingLeaveError,
    ValidationError,
)
from ..employees.model import Employee
from ..employees.repository import EmployeeDirectory
from ..notifications.dispatcher import SideEffectDispatcher
from ..notifications.notifier import Notifier
from .model import LeaveApplication, LeaveBalanceEntry, LeaveFilters, calculate_total_days
from .repository import LeaveRepository

logger = logging.getLogger(__name__)

_DECISIONS = frozenset({LeaveStatus.APPROVED, LeaveStatus.REJECTED})


class LeaveService:
    """Leave ledger.

    Workflow: PENDING -> APPROVED | REJECTED (approver) or CANCELLED (applicant).
    Every target state is terminal; a new request is needed to change course.
    """

    def __init__(
        self,
        leaves: LeaveRepository,
        employees: EmployeeDirectory,
        *,
        notifier: Optional[Notifier] = None,
        audit: Optional[AuditSink] = None,
        dispatcher: Optional[SideEffectDispatcher] = None,
    ):
        self._leaves = leaves
        self._employees = employees
        self._notifier = notifier
        self._audit = audit
        self._dispatcher = dispatcher or SideEffectDispatcher()

    def _require_employee(self, employee_id: str) -> Employee:
        employee = self._employees.find_by_employee_id(employee_id)
        if not employee:
            raise NotFoundError(f"Employee {employee_id} not found")
        return employee

    def get(self, leave_id: int) -> LeaveApplication:
        leave = self._leaves.get_by_id(leave_id)
        if not leave:
            raise NotFoundError("Leave application not found")
        return leave

    def apply(
        self,
        employee_id: str,
        leave_type: LeaveType | str,
        start_date: date,
        end_date: date,
        reason: str,
        is_half_day: bool = False,
        *,
        now: Optional[datetime] = None,
    ) -> LeaveApplication:
        leave_type = parse_enum(LeaveType, leave_type, "leaveType")
        reason = require_non_empty(reason, "reason")
        require_min_length(reason, "reason", MIN_REASON_LENGTH)
        require_max_length(reason, "reason", MAX_REASON_LENGTH)
        if end_date < start_date:
            raise ValidationError("endDate must be on or after startDate")

        employee = self._require_employee(employee_id)
        total_days = calculate_total_days(start_date, end_date, bool(is_half_day))

        with self._leaves.lock_employee(employee_id):
            clashes = self._leaves.find_overlapping(employee_id, start_date, end_date, ACTIVE_LEAVE_STATUSES)
            if clashes:
                raise OverlappingLeaveError("Leave application overlaps with existing leave")
            leave_id = self._leaves.create(
                employee_id=employee_id,
                leave_type=leave_type,
                start_date=start_date,
                end_date=end_date,
                is_half_day=bool(is_half_day),
                total_days=total_days,
                reason=reason,
                applied_date=now or now_local(),
            )

        leave = self.get(leave_id)
        logger.info("Leave %s applied: employee=%s %s..%s", leave_id, employee_id, start_date, end_date)
        self._notify(employee, leave, LeaveNotificationKind.APPLIED)
        return leave

    def decide(
        self,
        leave_id: int,
        approver_id: str,
        status: LeaveStatus | str,
        rejection_reason: Optional[str] = None,
        *,
        now: Optional[datetime] = None,
    ) -> LeaveApplication:
        status = parse_enum(LeaveStatus, status, "status")
        if status not in _DECISIONS:
            raise ValidationError("status must be APPROVED or REJECTED")
        if status == LeaveStatus.REJECTED:
            rejection_reason = require_non_empty(rejection_reason or "", "rejectionReason")
            require_max_length(rejection_reason, "rejectionReason", MAX_REASON_LENGTH)
        else:
            rejection_reason = None

        before = self.get(leave_id)
        if before.status != LeaveStatus.PENDING:
            raise AlreadyDecidedError(f"Leave application has already been {before.status.value.lower()}")

        moved = self._leaves.transition(
            leave_id=leave_id,
            from_status=LeaveStatus.PENDING,
            to_status=status,
            approved_by=approver_id,
            approved_date=now or now_local(),
            rejection_reason=rejection_reason,
        )
        if not moved:
            raise AlreadyDecidedError("Leave application has already been decided")

        after = self.get(leave_id)
        logger.info("Leave %s %s by %s", leave_id, status.value, approver_id)
        self._record_audit(approver_id, f"LEAVE_{status.value}", before, after)

        employee = self._employees.find_by_employee_id(after.employee_id)
        if employee:
            kind = LeaveNotificationKind.APPROVED if status == LeaveStatus.APPROVED else LeaveNotificationKind.REJECTED
            self._notify(employee, after, kind)
        return after

    def cancel(self, leave_id: int, requester_id: str) -> LeaveApplication:
        """Applicant-only withdrawal of a pending request."""

        before = self.get(leave_id)
        if before.employee_id != requester_id:
            raise AuthorizationError("Only the applicant can cancel this leave")
        if before.status != LeaveStatus.PENDING:
            raise AlreadyDecidedError(f"Leave application has already been {before.status.value.lower()}")

        moved = self._leaves.transition(
            leave_id=leave_id,
            from_status=LeaveStatus.PENDING,
            to_status=LeaveStatus.CANCELLED,
        )
        if not moved:
            raise AlreadyDecidedError("Leave application has already been decided")

        after = self.get(leave_id)
        logger.info("Leave %s cancelled by %s", leave_id, requester_id)
        self._record_audit(requester_id, "LEAVE_CANCELLED", before, after)
        return after

    def balance(self, employee_id: str, year: int) -> Dict[LeaveType, LeaveBalanceEntry]:
        year = require_int_range(year, "year", 1900, 9999)
        self._require_employee(employee_id)

        start, end = year_bounds(year)
        used: Dict[LeaveType, float] = {t: 0.0 for t in LeaveType}
        for leave in self._leaves.find_starting_between(employee_id, start, end, [LeaveStatus.APPROVED]):
            used[leave.leave_type] += leave.total_days

        result: Dict[LeaveType, LeaveBalanceEntry] = {}
        for leave_type in LeaveType:
            total = LEAVE_POLICY.get(leave_type.value)
            result[leave_type] = LeaveBalanceEntry(
                total=total,
                used=used[leave_type],
                # May go negative when approvals exceed the quota; reported, not blocked.
                remaining=(total - used[leave_type]) if total is not None else None,
            )
        return result

    def approved_leave_days(self, employee_id: str, start_date: date, end_date: date) -> float:
        """Sum of totalDays of APPROVED leaves overlapping [start_date, end_date]."""

        leaves = self._leaves.find_overlapping(employee_id, start_date, end_date, [LeaveStatus.APPROVED])
        return float(sum(leave.total_days for leave in leaves))

    def list_leaves(self, filters: LeaveFilters, page: PageRequest) -> Page:
        if filters.start_date and filters.end_date and filters.end_date < filters.start_date:
            raise ValidationError("endDate must be on or after startDate")
        return self._leaves.search(filters, page)

    def _notify(self, employee: Employee, leave: LeaveApplication, kind: LeaveNotificationKind) -> None:
        if not self._notifier or not employee.email:
            return
        self._dispatcher.submit(
            f"leave {kind.value} notification for leave {leave.leave_id}",
            self._notifier.send_leave_notification,
            employee.email,
            employee.full_name,
            to_json(leave),
            kind,
        )

    def _record_audit(self, actor_id: str, action: str, before: LeaveApplication, after: LeaveApplication) -> None:
        if not self._audit:
            return
        self._dispatcher.submit(
            f"audit {action} {after.leave_id}",
            self._audit.record,
            actor_id=actor_id,
            action=action,
            resource="leave",
            resource_id=str(after.leave_id),
            before_data=to_json(before),
            after_data=to_json(after),
        )
