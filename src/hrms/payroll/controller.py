from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import parse_iso_datetime
from ..common.http import (
    api_response,
    current_user,
    json_body,
    paginated_response,
    query_int,
    roles_required,
)
from ..common.pagination import parse_page_request
from ..common.validators import parse_optional_enum, require_non_empty
from ..core.enums import PayrollStatus, Role
from ..core.exceptions import ValidationError
from .model import PayPeriod, PayrollFilters


def _pay_period(data: dict) -> PayPeriod:
    period = data.get("payPeriod")
    if not isinstance(period, dict):
        raise ValidationError("payPeriod is required")
    return PayPeriod(month=period.get("month"), year=period.get("year"))


def register(app: Flask, container) -> None:
    service = container.payroll_service

    @app.route("/payroll", methods=["POST"], endpoint="payroll_process")
    @roles_required(Role.ADMIN, Role.HR)
    def process():
        data = json_body()
        overtime = data.get("overtime") or {}
        record = service.process(
            require_non_empty(data.get("employeeId") or "", "employeeId"),
            _pay_period(data),
            data.get("basicSalary"),
            allowances=data.get("allowances"),
            deductions=data.get("deductions"),
            overtime_rate=data.get("overtimeRate", overtime.get("rate") if isinstance(overtime, dict) else None),
            bonus=data.get("bonus"),
            incentives=data.get("incentives"),
            processed_by=current_user().user_id,
        )
        return api_response(record, message="Payroll processed successfully", status_code=201)

    @app.route("/payroll", methods=["GET"], endpoint="payroll_list")
    @roles_required(Role.ADMIN, Role.HR, Role.MANAGER)
    def list_payrolls():
        filters = PayrollFilters(
            employee_id=request.args.get("employeeId") or None,
            month=query_int("month"),
            year=query_int("year"),
            status=parse_optional_enum(PayrollStatus, request.args.get("status"), "status"),
            department=request.args.get("department") or None,
        )
        page = parse_page_request(request.args, default_sort="-payPeriod")
        return paginated_response(service.list_payrolls(filters, page), message="Payroll records retrieved")

    @app.route("/payroll/summary", methods=["GET"], endpoint="payroll_summary")
    @roles_required(Role.ADMIN, Role.HR, Role.MANAGER)
    def summary():
        result = service.summary(
            month=query_int("month"),
            year=query_int("year"),
            department=request.args.get("department") or None,
        )
        return api_response(result, message="Payroll summary retrieved")

    @app.route("/payroll/<int:payroll_id>/status", methods=["PATCH"], endpoint="payroll_status")
    @roles_required(Role.ADMIN, Role.HR)
    def update_status(payroll_id: int):
        data = json_body()
        payment_date = data.get("paymentDate")
        record = service.update_status(
            payroll_id,
            require_non_empty(data.get("status") or "", "status"),
            payment_date=parse_iso_datetime(payment_date) if payment_date else None,
            payment_method=data.get("paymentMethod"),
            payment_reference=data.get("paymentReference"),
            actor_id=current_user().user_id,
        )
        return api_response(record, message="Payroll status updated successfully")

    @app.route("/payroll/<int:payroll_id>/payslip", methods=["GET"], endpoint="payroll_payslip")
    @roles_required(Role.ADMIN, Role.HR)
    def payslip(payroll_id: int):
        return api_response(service.payslip(payroll_id), message="Payslip generated successfully")
