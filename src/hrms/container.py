from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .audit.mysql_audit_repository import MySQLAuditRepository
from .core.constants import DEFAULT_LEAVE_LOCK_TIMEOUT_SECONDS, DEFAULT_TOKEN_MAX_AGE_SECONDS
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeDirectory
from .leaves.mysql_leave_repository import MySQLLeaveRepository
from .leaves.service import LeaveService
from .notifications.dispatcher import SideEffectDispatcher
from .notifications.mysql_dead_letter_repository import MySQLDeadLetterRepository
from .notifications.notifier import LoggingNotifier
from .payroll.calculator.standard_calculator import StandardPayrollCalculator
from .payroll.mysql_payroll_repository import MySQLPayrollRepository
from .payroll.service import PayrollService
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import AuthService


@dataclass(frozen=True)
class Container:
    employee_directory: EmployeeDirectory
    dispatcher: SideEffectDispatcher

    auth_service: AuthService
    attendance_service: AttendanceService
    leave_service: LeaveService
    payroll_service: PayrollService


def build_container(
    *,
    db_config: dict,
    secret_key: str,
    token_max_age_seconds: int = DEFAULT_TOKEN_MAX_AGE_SECONDS,
    notify_async: bool = False,
    notify_workers: int = 4,
    leave_lock_timeout: int = DEFAULT_LEAVE_LOCK_TIMEOUT_SECONDS,
    company_info: Optional[Mapping[str, Any]] = None,
) -> Container:
    conn = DatabaseConnection(DBConfig.from_mapping(db_config))

    users_repo = MySQLUserRepository(conn)
    employees_repo = MySQLEmployeeRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    leaves_repo = MySQLLeaveRepository(conn, lock_timeout=leave_lock_timeout)
    payrolls_repo = MySQLPayrollRepository(conn)
    audit = MySQLAuditRepository(conn)

    executor = ThreadPoolExecutor(max_workers=notify_workers, thread_name_prefix="hrms-side-effect") if notify_async else None
    dispatcher = SideEffectDispatcher(MySQLDeadLetterRepository(conn), executor=executor)
    notifier = LoggingNotifier()

    auth_service = AuthService(
        users_repo,
        employees_repo,
        secret_key=secret_key,
        max_age_seconds=token_max_age_seconds,
        audit=audit,
        dispatcher=dispatcher,
    )
    attendance_service = AttendanceService(
        attendance_repo,
        employees_repo,
        strategy_factory=AttendanceStrategyFactory(),
        audit=audit,
        dispatcher=dispatcher,
    )
    leave_service = LeaveService(
        leaves_repo,
        employees_repo,
        notifier=notifier,
        audit=audit,
        dispatcher=dispatcher,
    )
    payroll_service = PayrollService(
        payrolls_repo,
        employees_repo,
        attendance_service,
        leave_service,
        calculator=StandardPayrollCalculator(),
        notifier=notifier,
        audit=audit,
        dispatcher=dispatcher,
        company_info=company_info,
    )

    return Container(
        employee_directory=employees_repo,
        dispatcher=dispatcher,
        auth_service=auth_service,
        attendance_service=attendance_service,
        leave_service=leave_service,
        payroll_service=payroll_service,
    )
