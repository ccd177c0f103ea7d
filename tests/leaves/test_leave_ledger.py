from __future__ import annotations

from datetime import date, datetime

import pytest

from hrms.common.pagination import PageRequest
from hrms.core.enums import LeaveNotificationKind, LeaveStatus, LeaveType
from hrms.core.exceptions import (
    AlreadyDecidedError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    OverlappingLeaveError,
    ValidationError,
)
from hrms.leaves.model import LeaveApplication, LeaveFilters, calculate_total_days

REASON = "Family function out of town"


def _leave(employee_id, start, end, leave_type=LeaveType.CASUAL, status=LeaveStatus.APPROVED, total_days=None):
    return LeaveApplication(
        leave_id=0,
        employee_id=employee_id,
        leave_type=leave_type,
        start_date=start,
        end_date=end,
        total_days=total_days if total_days is not None else calculate_total_days(start, end),
        reason=REASON,
        status=status,
        applied_date=datetime(2025, 1, 2, 10, 0),
    )


def test_total_days_inclusive_and_half_day():
    assert calculate_total_days(date(2025, 3, 10), date(2025, 3, 10), True) == 0.5
    assert calculate_total_days(date(2025, 3, 10), date(2025, 3, 12)) == 3
    assert calculate_total_days(date(2025, 3, 10), date(2025, 3, 10)) == 1
    # Half-day only collapses a single-day span.
    assert calculate_total_days(date(2025, 3, 10), date(2025, 3, 11), True) == 2


def test_apply_creates_pending_leave_and_notifies(leave_service, leave_repo, notifier, fixed_now):
    leave = leave_service.apply("EMP002", "casual", date(2025, 3, 10), date(2025, 3, 12), REASON, now=fixed_now)

    assert leave.status == LeaveStatus.PENDING
    assert leave.leave_type == LeaveType.CASUAL
    assert leave.total_days == 3
    assert leave.applied_date == fixed_now
    assert leave_repo.locked == ["EMP002"]

    email, name, details, kind = notifier.leave_calls[-1]
    assert (email, name, kind) == ("vikram@hrms.local", "Vikram Nair", LeaveNotificationKind.APPLIED)
    assert details["startDate"] == "2025-03-10"
    assert details["totalDays"] == 3


def test_apply_half_day(leave_service):
    leave = leave_service.apply("EMP002", LeaveType.SICK, date(2025, 3, 10), date(2025, 3, 10), REASON, True)

    assert leave.total_days == 0.5
    assert leave.is_half_day is True


def test_overlapping_approved_leave_conflicts(leave_service, leave_repo):
    leave_repo.add(_leave("EMP002", date(2025, 3, 11), date(2025, 3, 11)))

    with pytest.raises(OverlappingLeaveError):
        leave_service.apply("EMP002", LeaveType.CASUAL, date(2025, 3, 10), date(2025, 3, 12), REASON)

    leave = leave_service.apply("EMP002", LeaveType.CASUAL, date(2025, 3, 13), date(2025, 3, 15), REASON)
    assert leave.total_days == 3


def test_overlapping_pending_leave_conflicts(leave_service):
    leave_service.apply("EMP002", LeaveType.EARNED, date(2025, 3, 10), date(2025, 3, 14), REASON)

    with pytest.raises(ConflictError):
        leave_service.apply("EMP002", LeaveType.SICK, date(2025, 3, 14), date(2025, 3, 14), REASON)


def test_rejected_or_cancelled_leaves_do_not_block(leave_service, leave_repo):
    leave_repo.add(_leave("EMP002", date(2025, 3, 10), date(2025, 3, 12), status=LeaveStatus.REJECTED))
    leave_repo.add(_leave("EMP002", date(2025, 3, 10), date(2025, 3, 12), status=LeaveStatus.CANCELLED))
    leave_repo.add(_leave("EMP003", date(2025, 3, 10), date(2025, 3, 12)))

    leave = leave_service.apply("EMP002", LeaveType.CASUAL, date(2025, 3, 10), date(2025, 3, 12), REASON)

    assert leave.status == LeaveStatus.PENDING


def test_adjacent_ranges_do_not_overlap(leave_service, leave_repo):
    leave_repo.add(_leave("EMP002", date(2025, 3, 10), date(2025, 3, 12)))

    leave = leave_service.apply("EMP002", LeaveType.CASUAL, date(2025, 3, 13), date(2025, 3, 13), REASON)

    assert leave.start_date == date(2025, 3, 13)


@pytest.mark.parametrize(
    "leave_type,start,end,reason",
    [
        ("VACATION", date(2025, 3, 10), date(2025, 3, 10), REASON),
        ("CASUAL", date(2025, 3, 12), date(2025, 3, 10), REASON),
        ("CASUAL", date(2025, 3, 10), date(2025, 3, 10), "short"),
        ("CASUAL", date(2025, 3, 10), date(2025, 3, 10), "x" * 501),
    ],
)
def test_apply_validation(leave_service, leave_type, start, end, reason):
    with pytest.raises(ValidationError):
        leave_service.apply("EMP002", leave_type, start, end, reason)


def test_apply_unknown_employee(leave_service):
    with pytest.raises(NotFoundError):
        leave_service.apply("EMP404", LeaveType.CASUAL, date(2025, 3, 10), date(2025, 3, 10), REASON)


def test_approve_pending_leave(leave_service, notifier, audit, fixed_now):
    leave = leave_service.apply("EMP002", LeaveType.CASUAL, date(2025, 3, 10), date(2025, 3, 11), REASON)

    decided = leave_service.decide(leave.leave_id, "EMP001", "APPROVED", now=fixed_now)

    assert decided.status == LeaveStatus.APPROVED
    assert decided.approved_by == "EMP001"
    assert decided.approved_date == fixed_now
    assert notifier.leave_calls[-1][3] == LeaveNotificationKind.APPROVED
    entry = audit.entries[-1]
    assert entry["action"] == "LEAVE_APPROVED"
    assert entry["before_data"]["status"] == "PENDING"
    assert entry["after_data"]["status"] == "APPROVED"


def test_reject_requires_reason(leave_service):
    leave = leave_service.apply("EMP002", LeaveType.CASUAL, date(2025, 3, 10), date(2025, 3, 11), REASON)

    with pytest.raises(ValidationError):
        leave_service.decide(leave.leave_id, "EMP001", LeaveStatus.REJECTED)

    rejected = leave_service.decide(leave.leave_id, "EMP001", LeaveStatus.REJECTED, "Release week")
    assert rejected.status == LeaveStatus.REJECTED
    assert rejected.rejection_reason == "Release week"


def test_decide_only_accepts_approve_or_reject(leave_service):
    leave = leave_service.apply("EMP002", LeaveType.CASUAL, date(2025, 3, 10), date(2025, 3, 11), REASON)

    with pytest.raises(ValidationError):
        leave_service.decide(leave.leave_id, "EMP001", LeaveStatus.CANCELLED)


def test_approving_twice_fails(leave_service):
    leave = leave_service.apply("EMP002", LeaveType.CASUAL, date(2025, 3, 10), date(2025, 3, 11), REASON)
    leave_service.decide(leave.leave_id, "EMP001", LeaveStatus.APPROVED)

    with pytest.raises(AlreadyDecidedError):
        leave_service.decide(leave.leave_id, "EMP001", LeaveStatus.APPROVED)
    with pytest.raises(ConflictError):
        leave_service.decide(leave.leave_id, "EMP001", LeaveStatus.REJECTED, "Changed mind")


def test_decide_missing_leave(leave_service):
    with pytest.raises(NotFoundError):
        leave_service.decide(404, "EMP001", LeaveStatus.APPROVED)


def test_cancel_by_applicant(leave_service, audit):
    leave = leave_service.apply("EMP002", LeaveType.CASUAL, date(2025, 3, 10), date(2025, 3, 11), REASON)

    cancelled = leave_service.cancel(leave.leave_id, "EMP002")

    assert cancelled.status == LeaveStatus.CANCELLED
    assert audit.entries[-1]["action"] == "LEAVE_CANCELLED"


def test_cancel_by_other_employee_is_forbidden(leave_service):
    leave = leave_service.apply("EMP002", LeaveType.CASUAL, date(2025, 3, 10), date(2025, 3, 11), REASON)

    with pytest.raises(AuthorizationError):
        leave_service.cancel(leave.leave_id, "EMP003")


def test_cancel_after_decision_fails(leave_service):
    leave = leave_service.apply("EMP002", LeaveType.CASUAL, date(2025, 3, 10), date(2025, 3, 11), REASON)
    leave_service.decide(leave.leave_id, "EMP001", LeaveStatus.APPROVED)

    with pytest.raises(AlreadyDecidedError):
        leave_service.cancel(leave.leave_id, "EMP002")


def test_cancelled_leave_is_terminal(leave_service):
    leave = leave_service.apply("EMP002", LeaveType.CASUAL, date(2025, 3, 10), date(2025, 3, 11), REASON)
    leave_service.cancel(leave.leave_id, "EMP002")

    with pytest.raises(AlreadyDecidedError):
        leave_service.decide(leave.leave_id, "EMP001", LeaveStatus.APPROVED)


def test_balance_counts_approved_leaves_in_year(leave_service, leave_repo):
    leave_repo.add(_leave("EMP002", date(2025, 3, 10), date(2025, 3, 11)))
    leave_repo.add(_leave("EMP002", date(2025, 4, 1), date(2025, 4, 1), status=LeaveStatus.PENDING))
    leave_repo.add(_leave("EMP002", date(2024, 12, 30), date(2024, 12, 31)))
    leave_repo.add(_leave("EMP003", date(2025, 3, 10), date(2025, 3, 14)))

    balance = leave_service.balance("EMP002", 2025)

    casual = balance[LeaveType.CASUAL]
    assert (casual.total, casual.used, casual.remaining) == (7, 2, 5)
    assert balance[LeaveType.EARNED].remaining == 21
    assert balance[LeaveType.MATERNITY].total == 182
    assert balance[LeaveType.UNPAID].total is None
    assert balance[LeaveType.UNPAID].remaining is None
    assert leave_service.balance("EMP002", 2025) == balance


def test_balance_uses_start_date_year(leave_service, leave_repo):
    leave_repo.add(_leave("EMP002", date(2024, 12, 30), date(2025, 1, 2), leave_type=LeaveType.EARNED))

    assert leave_service.balance("EMP002", 2024)[LeaveType.EARNED].used == 4
    assert leave_service.balance("EMP002", 2025)[LeaveType.EARNED].used == 0


def test_balance_may_go_negative(leave_service, leave_repo):
    leave_repo.add(_leave("EMP002", date(2025, 5, 1), date(2025, 5, 10), leave_type=LeaveType.BEREAVEMENT))

    entry = leave_service.balance("EMP002", 2025)[LeaveType.BEREAVEMENT]

    assert entry.used == 10
    assert entry.remaining == -5


def test_balance_unknown_employee(leave_service):
    with pytest.raises(NotFoundError):
        leave_service.balance("EMP404", 2025)


def test_approved_leave_days_for_period(leave_service, leave_repo):
    leave_repo.add(_leave("EMP002", date(2025, 2, 27), date(2025, 3, 3)))
    leave_repo.add(_leave("EMP002", date(2025, 3, 10), date(2025, 3, 10), total_days=0.5))
    leave_repo.add(_leave("EMP002", date(2025, 3, 20), date(2025, 3, 21), status=LeaveStatus.PENDING))

    assert leave_service.approved_leave_days("EMP002", date(2025, 3, 1), date(2025, 3, 31)) == 5.5


def test_list_leaves_filters_by_employee(leave_service, leave_repo):
    leave_repo.add(_leave("EMP002", date(2025, 3, 10), date(2025, 3, 10)))
    leave_repo.add(_leave("EMP003", date(2025, 3, 10), date(2025, 3, 10)))

    page = leave_service.list_leaves(LeaveFilters(employee_id="EMP003"), PageRequest())

    assert page.total == 1
    assert page.items[0].employee_id == "EMP003"


def test_get_missing_leave(leave_service):
    with pytest.raises(NotFoundError):
        leave_service.get(1)
