from __future__ import annotations

from contextlib import contextmanager
from dataclasses import replace
from datetime import date, datetime
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from hrms.attendance.model import AttendanceRecord, EmployeeAttendanceTotals, Location
from hrms.attendance.service import AttendanceService
from hrms.common.pagination import Page
from hrms.core.constants import ZERO
from hrms.core.enums import LeaveStatus, Role
from hrms.core.exceptions import AlreadyClockedInError, DuplicatePayrollError
from hrms.employees.model import Employee, PersonalInfo, ProfessionalInfo
from hrms.leaves.model import LeaveApplication
from hrms.leaves.service import LeaveService
from hrms.notifications.dispatcher import SideEffectDispatcher
from hrms.payroll.model import PayrollSummary, quantize_money
from hrms.payroll.service import PayrollService
from hrms.users.model import User
from hrms.users.service import AuthService


def summarize_payrolls(records) -> PayrollSummary:
    items = list(records)
    if not items:
        return PayrollSummary()
    sum_gross = sum((r.gross_salary for r in items), ZERO)
    sum_net = sum((r.net_salary for r in items), ZERO)
    count = len(items)
    return PayrollSummary(
        sum_gross=sum_gross,
        sum_net=sum_net,
        sum_basic=sum((r.basic_salary for r in items), ZERO),
        avg_gross=quantize_money(sum_gross / count),
        avg_net=quantize_money(sum_net / count),
        count=count,
    )


def make_employee(employee_id: str, user_id: Optional[int], first: str, last: str, department: str) -> Employee:
    return Employee(
        employee_id=employee_id,
        user_id=user_id,
        email=f"{first.lower()}@hrms.local",
        personal=PersonalInfo(first_name=first, last_name=last),
        professional=ProfessionalInfo(department=department, designation="Staff"),
    )


class InMemoryEmployees:
    def __init__(self, *employees: Employee):
        self._by_id = {e.employee_id: e for e in employees}

    def add(self, employee: Employee) -> None:
        self._by_id[employee.employee_id] = employee

    def find_by_employee_id(self, employee_id: str) -> Optional[Employee]:
        return self._by_id.get(employee_id)

    def find_by_user_id(self, user_id: int) -> Optional[Employee]:
        return next((e for e in self._by_id.values() if e.user_id == user_id), None)


class InMemoryUsers:
    def __init__(self, *users: User):
        self._by_id = {u.user_id: u for u in users}

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self._by_id.get(user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self._by_id.values() if u.email == email), None)


def _page(items, page) -> Page:
    return Page(items=items[page.offset : page.offset + page.limit], total=len(items), page=page.page, limit=page.limit)


class InMemoryAttendance:
    def __init__(self, employees: Optional[InMemoryEmployees] = None):
        self.records: dict[int, AttendanceRecord] = {}
        self._employees = employees
        self._id = 0

    def add(self, record: AttendanceRecord) -> AttendanceRecord:
        self._id += 1
        stored = replace(record, attendance_id=self._id)
        self.records[self._id] = stored
        return stored

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        return self.records.get(attendance_id)

    def get_for_employee_and_date(self, employee_id: str, work_date: date) -> Optional[AttendanceRecord]:
        return next(
            (r for r in self.records.values() if r.employee_id == employee_id and r.work_date == work_date),
            None,
        )

    def get_open_for_employee(self, employee_id: str) -> Optional[AttendanceRecord]:
        open_records = [r for r in self.records.values() if r.employee_id == employee_id and r.clock_out is None]
        return max(open_records, key=lambda r: r.work_date, default=None)

    def create_clock_in(self, *, employee_id, work_date, clock_in, status, location=None, notes=None) -> int:
        if self.get_for_employee_and_date(employee_id, work_date):
            raise AlreadyClockedInError("Already clocked in today")
        stored = self.add(
            AttendanceRecord(
                attendance_id=0,
                employee_id=employee_id,
                work_date=work_date,
                clock_in=clock_in,
                clock_out=None,
                status=status,
                location=location or Location(),
                notes=notes,
            )
        )
        return stored.attendance_id

    def update_clock_out(self, *, attendance_id, clock_out, break_minutes, total_hours, overtime_hours, notes=None) -> bool:
        record = self.records.get(attendance_id)
        if not record or record.clock_out is not None:
            return False
        self.records[attendance_id] = replace(
            record,
            clock_out=clock_out,
            break_minutes=break_minutes,
            total_hours=total_hours,
            overtime_hours=overtime_hours,
            notes=notes,
        )
        return True

    def admin_update_record(self, *, attendance_id, clock_in, clock_out, break_minutes, total_hours, overtime_hours, status, notes=None) -> bool:
        record = self.records.get(attendance_id)
        if not record:
            return False
        self.records[attendance_id] = replace(
            record,
            clock_in=clock_in,
            clock_out=clock_out,
            break_minutes=break_minutes,
            total_hours=total_hours,
            overtime_hours=overtime_hours,
            status=status,
            notes=notes,
        )
        return True

    def list_between(self, employee_id, start_date, end_date):
        items = [
            r
            for r in self.records.values()
            if r.employee_id == employee_id and start_date <= r.work_date <= end_date
        ]
        return sorted(items, key=lambda r: r.work_date)

    def _department_of(self, employee_id: str) -> Optional[str]:
        employee = self._employees.find_by_employee_id(employee_id) if self._employees else None
        return employee.professional.department if employee else None

    def search(self, filters, page) -> Page:
        items = [
            r
            for r in self.records.values()
            if (not filters.employee_id or r.employee_id == filters.employee_id)
            and (not filters.start_date or r.work_date >= filters.start_date)
            and (not filters.end_date or r.work_date <= filters.end_date)
            and (not filters.status or r.status == filters.status)
            and (not filters.department or self._department_of(r.employee_id) == filters.department)
        ]
        items.sort(key=lambda r: r.work_date, reverse=True)
        return _page(items, page)

    def totals_by_employee(self, *, start_date, end_date, employee_id=None):
        totals: dict[str, list] = {}
        for r in self.records.values():
            if not start_date <= r.work_date <= end_date:
                continue
            if employee_id and r.employee_id != employee_id:
                continue
            row = totals.setdefault(r.employee_id, [0, 0.0, 0.0])
            row[0] += 1
            row[1] += r.total_hours
            row[2] += r.overtime_hours
        return [
            EmployeeAttendanceTotals(employee_id=k, total_days=v[0], total_hours=v[1], overtime_hours=v[2])
            for k, v in sorted(totals.items())
        ]


class InMemoryLeaves:
    def __init__(self, employees: Optional[InMemoryEmployees] = None):
        self.leaves: dict[int, LeaveApplication] = {}
        self.locked: list[str] = []
        self._employees = employees
        self._id = 0

    def add(self, leave: LeaveApplication) -> LeaveApplication:
        self._id += 1
        stored = replace(leave, leave_id=self._id)
        self.leaves[self._id] = stored
        return stored

    @contextmanager
    def lock_employee(self, employee_id: str):
        self.locked.append(employee_id)
        yield

    def get_by_id(self, leave_id: int) -> Optional[LeaveApplication]:
        return self.leaves.get(leave_id)

    def find_overlapping(self, employee_id, start_date, end_date, statuses):
        statuses = set(statuses)
        return [
            l
            for l in self.leaves.values()
            if l.employee_id == employee_id
            and l.status in statuses
            and l.start_date <= end_date
            and l.end_date >= start_date
        ]

    def find_starting_between(self, employee_id, start_date, end_date, statuses):
        statuses = set(statuses)
        return [
            l
            for l in self.leaves.values()
            if l.employee_id == employee_id and l.status in statuses and start_date <= l.start_date <= end_date
        ]

    def create(self, *, employee_id, leave_type, start_date, end_date, is_half_day, total_days, reason, applied_date) -> int:
        stored = self.add(
            LeaveApplication(
                leave_id=0,
                employee_id=employee_id,
                leave_type=leave_type,
                start_date=start_date,
                end_date=end_date,
                is_half_day=is_half_day,
                total_days=total_days,
                reason=reason,
                status=LeaveStatus.PENDING,
                applied_date=applied_date,
            )
        )
        return stored.leave_id

    def transition(self, *, leave_id, from_status, to_status, approved_by=None, approved_date=None, rejection_reason=None) -> bool:
        leave = self.leaves.get(leave_id)
        if not leave or leave.status != from_status:
            return False
        self.leaves[leave_id] = replace(
            leave,
            status=to_status,
            approved_by=approved_by or leave.approved_by,
            approved_date=approved_date or leave.approved_date,
            rejection_reason=rejection_reason or leave.rejection_reason,
        )
        return True

    def search(self, filters, page) -> Page:
        items = [
            l
            for l in self.leaves.values()
            if (not filters.employee_id or l.employee_id == filters.employee_id)
            and (not filters.status or l.status == filters.status)
            and (not filters.leave_type or l.leave_type == filters.leave_type)
        ]
        items.sort(key=lambda l: l.applied_date, reverse=True)
        return _page(items, page)


class InMemoryPayrolls:
    def __init__(self, employees: Optional[InMemoryEmployees] = None):
        self.records: dict[int, object] = {}
        self._employees = employees
        self._id = 0

    def get_by_id(self, payroll_id):
        return self.records.get(payroll_id)

    def _find(self, employee_id, month, year):
        return next(
            (
                r
                for r in self.records.values()
                if r.employee_id == employee_id and r.pay_period.month == month and r.pay_period.year == year
            ),
            None,
        )

    def get_for_period(self, employee_id, month, year):
        return self._find(employee_id, month, year)

    def create(self, record) -> int:
        if self._find(record.employee_id, record.pay_period.month, record.pay_period.year):
            raise DuplicatePayrollError("Payroll already exists for this period")
        self._id += 1
        self.records[self._id] = replace(record, payroll_id=self._id)
        return self._id

    def update_status(self, *, payroll_id, status, payment_date=None, payment_method=None, payment_reference=None) -> bool:
        record = self.records.get(payroll_id)
        if not record:
            return False
        self.records[payroll_id] = replace(
            record,
            status=status,
            payment_date=payment_date or record.payment_date,
            payment_method=payment_method or record.payment_method,
            payment_reference=payment_reference or record.payment_reference,
        )
        return True

    def _matches(self, r, filters) -> bool:
        department = None
        if filters.department and self._employees:
            employee = self._employees.find_by_employee_id(r.employee_id)
            department = employee.professional.department if employee else None
        return (
            (not filters.employee_id or r.employee_id == filters.employee_id)
            and (not filters.month or r.pay_period.month == filters.month)
            and (not filters.year or r.pay_period.year == filters.year)
            and (not filters.status or r.status == filters.status)
            and (not filters.department or department == filters.department)
        )

    def search(self, filters, page) -> Page:
        items = [r for r in self.records.values() if self._matches(r, filters)]
        return _page(items, page)

    def aggregate(self, filters):
        return summarize_payrolls(r for r in self.records.values() if self._matches(r, filters))


class RecordingNotifier:
    def __init__(self):
        self.leave_calls: list[tuple] = []
        self.payroll_calls: list[tuple] = []

    def send_leave_notification(self, email, name, leave_details, kind) -> None:
        self.leave_calls.append((email, name, leave_details, kind))

    def send_payroll_notification(self, email, name, payroll_details) -> None:
        self.payroll_calls.append((email, name, payroll_details))


class RecordingAudit:
    def __init__(self):
        self.entries: list[dict] = []

    def record(self, **entry) -> None:
        self.entries.append(entry)


class ListDeadLetters:
    def __init__(self):
        self.entries: list[dict] = []

    def record(self, *, description: str, error: str) -> None:
        self.entries.append({"description": description, "error": error})


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 3, 10, 9, 0, 0)


@pytest.fixture
def employees() -> InMemoryEmployees:
    return InMemoryEmployees(
        make_employee("EMP001", 1, "Asha", "Rao", "Human Resources"),
        make_employee("EMP002", 2, "Vikram", "Nair", "Engineering"),
        make_employee("EMP003", 3, "Meera", "Iyer", "Engineering"),
    )


@pytest.fixture
def users() -> InMemoryUsers:
    return InMemoryUsers(
        User(user_id=1, email="asha@hrms.local", password_hash=generate_password_hash("hr123456"), role=Role.HR),
        User(user_id=2, email="vikram@hrms.local", password_hash=generate_password_hash("staff123"), role=Role.EMPLOYEE),
        User(user_id=3, email="meera@hrms.local", password_hash=generate_password_hash("staff123"), role=Role.EMPLOYEE),
        User(user_id=4, email="boss@hrms.local", password_hash=generate_password_hash("manager1"), role=Role.MANAGER),
        User(
            user_id=5,
            email="gone@hrms.local",
            password_hash=generate_password_hash("staff123"),
            role=Role.EMPLOYEE,
            is_active=False,
        ),
    )


@pytest.fixture
def attendance_repo(employees) -> InMemoryAttendance:
    return InMemoryAttendance(employees)


@pytest.fixture
def leave_repo(employees) -> InMemoryLeaves:
    return InMemoryLeaves(employees)


@pytest.fixture
def payroll_repo(employees) -> InMemoryPayrolls:
    return InMemoryPayrolls(employees)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def audit() -> RecordingAudit:
    return RecordingAudit()


@pytest.fixture
def dead_letters() -> ListDeadLetters:
    return ListDeadLetters()


@pytest.fixture
def dispatcher(dead_letters) -> SideEffectDispatcher:
    return SideEffectDispatcher(dead_letters)


@pytest.fixture
def attendance_service(attendance_repo, employees, audit, dispatcher) -> AttendanceService:
    return AttendanceService(attendance_repo, employees, audit=audit, dispatcher=dispatcher)


@pytest.fixture
def leave_service(leave_repo, employees, notifier, audit, dispatcher) -> LeaveService:
    return LeaveService(leave_repo, employees, notifier=notifier, audit=audit, dispatcher=dispatcher)


@pytest.fixture
def payroll_service(payroll_repo, employees, attendance_service, leave_service, notifier, audit, dispatcher) -> PayrollService:
    return PayrollService(
        payroll_repo,
        employees,
        attendance_service,
        leave_service,
        notifier=notifier,
        audit=audit,
        dispatcher=dispatcher,
        company_info={"name": "Acme", "email": "hr@acme.test", "website": "https://acme.test"},
    )


@pytest.fixture
def auth_service(users, employees, audit, dispatcher) -> AuthService:
    return AuthService(users, employees, secret_key="test-secret", audit=audit, dispatcher=dispatcher)
