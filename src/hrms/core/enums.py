from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for authorization."""

    ADMIN = "ADMIN"
    HR = "HR"
    MANAGER = "MANAGER"
    EMPLOYEE = "EMPLOYEE"


PRIVILEGED_ROLES = frozenset({Role.ADMIN, Role.HR, Role.MANAGER})


class AttendanceStatus(str, Enum):
    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    HALF_DAY = "HALF_DAY"
    WORK_FROM_HOME = "WORK_FROM_HOME"
    ON_LEAVE = "ON_LEAVE"


# Statuses that count as a worked day.
WORKED_STATUSES = frozenset({AttendanceStatus.PRESENT, AttendanceStatus.WORK_FROM_HOME})


class LocationType(str, Enum):
    OFFICE = "OFFICE"
    REMOTE = "REMOTE"
    CLIENT_SITE = "CLIENT_SITE"


class LeaveType(str, Enum):
    SICK = "SICK"
    CASUAL = "CASUAL"
    EARNED = "EARNED"
    MATERNITY = "MATERNITY"
    PATERNITY = "PATERNITY"
    BEREAVEMENT = "BEREAVEMENT"
    COMPENSATORY = "COMPENSATORY"
    UNPAID = "UNPAID"


class LeaveStatus(str, Enum):
    """Leave workflow: PENDING -> APPROVED | REJECTED | CANCELLED (all terminal)."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


# Leaves that block an overlapping application.
ACTIVE_LEAVE_STATUSES = frozenset({LeaveStatus.PENDING, LeaveStatus.APPROVED})


class PayrollStatus(str, Enum):
    DRAFT = "DRAFT"
    PROCESSED = "PROCESSED"
    PAID = "PAID"
    ON_HOLD = "ON_HOLD"


class PaymentMethod(str, Enum):
    BANK_TRANSFER = "BANK_TRANSFER"
    CHEQUE = "CHEQUE"
    CASH = "CASH"


class LeaveNotificationKind(str, Enum):
    APPLIED = "applied"
    APPROVED = "approved"
    REJECTED = "rejected"
