from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Mapping, Optional

from ..attendance.service import AttendanceService
from ..audit.sink import AuditSink
from ..common.datetime_utils import days_in_month, month_bounds, now_local
from ..common.pagination import Page, PageRequest
from ..common.serialization import to_json
from ..common.validators import parse_enum, parse_optional_enum, require_int_range, require_max_length, to_money
from ..core.constants import MAX_PAY_YEAR, MIN_PAY_YEAR
from ..core.enums import WORKED_STATUSES, PaymentMethod, PayrollStatus
from ..core.exceptions import DuplicatePayrollError, NotFoundError, ValidationError
from ..employees.repository import EmployeeDirectory
from ..leaves.service import LeaveService
from ..notifications.dispatcher import SideEffectDispatcher
from ..notifications.notifier import Notifier
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator
from .model import (
    Allowances,
    Deductions,
    Overtime,
    PayPeriod,
    PayrollFilters,
    PayrollRecord,
    PayrollSummary,
    Payslip,
)
from .repository import PayrollRepository

logger = logging.getLogger(__name__)


class PayrollService:
    """Payroll assembler: one record per employee per pay period.

    Attendance and leave figures are read once at processing time and stored
    on the record; later changes to either do not flow back into a payroll.
    """

    def __init__(
        self,
        payrolls: PayrollRepository,
        employees: EmployeeDirectory,
        attendance: AttendanceService,
        leaves: LeaveService,
        *,
        calculator: Optional[PayrollCalculator] = None,
        notifier: Optional[Notifier] = None,
        audit: Optional[AuditSink] = None,
        dispatcher: Optional[SideEffectDispatcher] = None,
        company_info: Optional[Mapping[str, Any]] = None,
    ):
        self._payrolls = payrolls
        self._employees = employees
        self._attendance = attendance
        self._leaves = leaves
        self._calculator = calculator or StandardPayrollCalculator()
        self._notifier = notifier
        self._audit = audit
        self._dispatcher = dispatcher or SideEffectDispatcher()
        self._company_info = dict(company_info or {})

    def get(self, payroll_id: int) -> PayrollRecord:
        record = self._payrolls.get_by_id(payroll_id)
        if not record:
            raise NotFoundError("Payroll record not found")
        return record

    def process(
        self,
        employee_id: str,
        pay_period: PayPeriod,
        basic_salary: Any,
        allowances: Optional[Mapping[str, Any]] = None,
        deductions: Optional[Mapping[str, Any]] = None,
        overtime_rate: Any = None,
        bonus: Any = None,
        incentives: Any = None,
        *,
        processed_by: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> PayrollRecord:
        month = require_int_range(pay_period.month, "payPeriod.month", 1, 12)
        year = require_int_range(pay_period.year, "payPeriod.year", MIN_PAY_YEAR, MAX_PAY_YEAR)
        if basic_salary is None:
            raise ValidationError("basicSalary is required")
        basic = to_money(basic_salary, "basicSalary")
        allowance_values = Allowances.from_mapping(allowances, "allowances")
        deduction_values = Deductions.from_mapping(deductions, "deductions")
        rate = to_money(overtime_rate, "overtimeRate")
        bonus_amount = to_money(bonus, "bonus")
        incentive_amount = to_money(incentives, "incentives")

        employee = self._employees.find_by_employee_id(employee_id)
        if not employee:
            raise NotFoundError(f"Employee {employee_id} not found")

        # Early exit; the unique key on (employee, month, year) is authoritative.
        if self._payrolls.get_for_period(employee_id, month, year):
            raise DuplicatePayrollError("Payroll already processed for this period")

        records = self._attendance.monthly_records(employee_id, month, year)
        actual_working_days = sum(1 for r in records if r.status in WORKED_STATUSES)
        overtime_hours = round(sum(r.overtime_hours for r in records), 2)
        start, end = month_bounds(month, year)
        leave_days = self._leaves.approved_leave_days(employee_id, start, end)

        overtime_amount = self._calculator.overtime_amount(overtime_hours, rate)
        gross = self._calculator.gross_salary(
            basic_salary=basic,
            allowances=allowance_values,
            bonus=bonus_amount,
            incentives=incentive_amount,
            overtime_amount=overtime_amount,
        )
        net = self._calculator.net_salary(gross, deduction_values)

        draft = PayrollRecord(
            employee_id=employee_id,
            pay_period=PayPeriod(month=month, year=year),
            basic_salary=basic,
            allowances=allowance_values,
            deductions=deduction_values,
            overtime=Overtime(hours=overtime_hours, rate=rate, amount=overtime_amount),
            bonus=bonus_amount,
            incentives=incentive_amount,
            working_days=days_in_month(month, year),
            actual_working_days=actual_working_days,
            leave_days=leave_days,
            gross_salary=gross,
            net_salary=net,
            status=PayrollStatus.DRAFT,
            processed_by=processed_by,
            processed_date=now or now_local(),
        )
        payroll_id = self._payrolls.create(draft)
        record = self.get(payroll_id)
        logger.info("Payroll %s processed: employee=%s period=%02d/%d net=%s", payroll_id, employee_id, month, year, net)

        if self._notifier and employee.email:
            self._dispatcher.submit(
                f"payroll notification for payroll {payroll_id}",
                self._notifier.send_payroll_notification,
                employee.email,
                employee.full_name,
                to_json(record),
            )
        self._record_audit(processed_by, "PAYROLL_PROCESSED", None, record)
        return record

    def update_status(
        self,
        payroll_id: int,
        status: PayrollStatus | str,
        payment_date: Optional[datetime] = None,
        payment_method: PaymentMethod | str | None = None,
        payment_reference: Optional[str] = None,
        *,
        actor_id: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> PayrollRecord:
        """Move a payroll to any status. No transition order is enforced."""

        status = parse_enum(PayrollStatus, status, "status")
        method = parse_optional_enum(PaymentMethod, payment_method, "paymentMethod")
        if payment_reference is not None:
            require_max_length(payment_reference, "paymentReference", 100)

        before = self.get(payroll_id)
        if status == PayrollStatus.PAID and payment_date is None:
            payment_date = now or now_local()
        if status == PayrollStatus.PAID and before.status != PayrollStatus.PROCESSED:
            logger.warning("Payroll %s marked PAID from %s", payroll_id, before.status.value)

        self._payrolls.update_status(
            payroll_id=payroll_id,
            status=status,
            payment_date=payment_date,
            payment_method=method,
            payment_reference=payment_reference,
        )
        after = self.get(payroll_id)
        logger.info("Payroll %s status %s -> %s", payroll_id, before.status.value, status.value)
        self._record_audit(actor_id, "PAYROLL_STATUS_UPDATED", before, after)
        return after

    def summary(
        self,
        month: Optional[int] = None,
        year: Optional[int] = None,
        department: Optional[str] = None,
    ) -> PayrollSummary:
        if month is not None:
            month = require_int_range(month, "month", 1, 12)
        if year is not None:
            year = require_int_range(year, "year", MIN_PAY_YEAR, MAX_PAY_YEAR)
        return self._payrolls.aggregate(PayrollFilters(month=month, year=year, department=department))

    def list_payrolls(self, filters: PayrollFilters, page: PageRequest) -> Page:
        return self._payrolls.search(filters, page)

    def payslip(self, payroll_id: int, *, now: Optional[datetime] = None) -> Payslip:
        record = self.get(payroll_id)
        return Payslip(
            payroll=record,
            employee=self._employees.find_by_employee_id(record.employee_id),
            generated_at=now or now_local(),
            company_info=dict(self._company_info),
        )

    def _record_audit(
        self,
        actor_id: Optional[int],
        action: str,
        before: Optional[PayrollRecord],
        after: PayrollRecord,
    ) -> None:
        if not self._audit:
            return
        self._dispatcher.submit(
            f"audit {action} {after.payroll_id}",
            self._audit.record,
            actor_id=str(actor_id) if actor_id is not None else None,
            action=action,
            resource="payroll",
            resource_id=str(after.payroll_id),
            before_data=to_json(before) if before else None,
            after_data=to_json(after),
        )
