from __future__ import annotations

import logging
from typing import Any, Mapping, Protocol

from ..core.enums import LeaveNotificationKind

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def send_leave_notification(
        self,
        email: str,
        name: str,
        leave_details: Mapping[str, Any],
        kind: LeaveNotificationKind,
    ) -> None:
        raise NotImplementedError

    def send_payroll_notification(self, email: str, name: str, payroll_details: Mapping[str, Any]) -> None:
        raise NotImplementedError


_LEAVE_SUBJECTS = {
    LeaveNotificationKind.APPLIED: "Leave application submitted",
    LeaveNotificationKind.APPROVED: "Leave application approved",
    LeaveNotificationKind.REJECTED: "Leave application rejected",
}


def render_leave_message(name: str, leave: Mapping[str, Any], kind: LeaveNotificationKind) -> tuple[str, str]:
    subject = _LEAVE_SUBJECTS[kind]
    lines = [
        f"Dear {name},",
        f"Your {str(leave.get('leaveType', '')).lower()} leave from {leave.get('startDate')} "
        f"to {leave.get('endDate')} ({leave.get('totalDays')} day(s)) is {kind.value}.",
    ]
    if kind == LeaveNotificationKind.REJECTED and leave.get("rejectionReason"):
        lines.append(f"Reason: {leave['rejectionReason']}")
    return subject, "\n".join(lines)


def render_payroll_message(name: str, payroll: Mapping[str, Any]) -> tuple[str, str]:
    period = payroll.get("payPeriod") or {}
    subject = f"Payslip for {period.get('month')}/{period.get('year')}"
    body = "\n".join(
        [
            f"Dear {name},",
            f"Your salary for {period.get('month')}/{period.get('year')} has been processed.",
            f"Gross salary: {payroll.get('grossSalary')}",
            f"Net salary: {payroll.get('netSalary')}",
        ]
    )
    return subject, body


class LoggingNotifier(Notifier):
    """Renders notifications and writes them to the log instead of a mail server."""

    def send_leave_notification(self, email, name, leave_details, kind) -> None:
        subject, body = render_leave_message(name, leave_details, LeaveNotificationKind(kind))
        logger.info("Notification to %s | %s\n%s", email, subject, body)

    def send_payroll_notification(self, email, name, payroll_details) -> None:
        subject, body = render_payroll_message(name, payroll_details)
        logger.info("Notification to %s | %s\n%s", email, subject, body)
