from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import now_local, parse_iso_date
from ..common.http import (
    api_response,
    current_user,
    is_privileged,
    json_body,
    login_required,
    paginated_response,
    query_date,
    query_int,
    resolve_employee_id,
    roles_required,
)
from ..common.pagination import parse_page_request
from ..common.validators import parse_bool, parse_optional_enum, require_non_empty
from ..core.enums import LeaveStatus, LeaveType, Role
from ..core.exceptions import AuthorizationError
from .model import LeaveFilters


def _required_date(data: dict, key: str):
    return parse_iso_date(require_non_empty(data.get(key) or "", key))


def register(app: Flask, container) -> None:
    service = container.leave_service

    @app.route("/leaves", methods=["POST"], endpoint="leaves_apply")
    @login_required
    def apply_leave():
        data = json_body()
        employee_id = resolve_employee_id(data.get("employeeId"))
        leave = service.apply(
            employee_id,
            require_non_empty(data.get("leaveType") or "", "leaveType"),
            _required_date(data, "startDate"),
            _required_date(data, "endDate"),
            data.get("reason") or "",
            parse_bool(data.get("isHalfDay", False), "isHalfDay"),
        )
        return api_response(leave, message="Leave application submitted successfully", status_code=201)

    @app.route("/leaves", methods=["GET"], endpoint="leaves_list")
    @login_required
    def list_leaves():
        user = current_user()
        employee_id = request.args.get("employeeId") or None
        if not is_privileged(user):
            employee_id = resolve_employee_id(None)
        filters = LeaveFilters(
            employee_id=employee_id,
            status=parse_optional_enum(LeaveStatus, request.args.get("status"), "status"),
            leave_type=parse_optional_enum(LeaveType, request.args.get("leaveType"), "leaveType"),
            start_date=query_date("startDate"),
            end_date=query_date("endDate"),
            department=request.args.get("department") or None,
        )
        page = parse_page_request(request.args, default_sort="-appliedDate")
        return paginated_response(service.list_leaves(filters, page), message="Leave applications retrieved")

    @app.route("/leaves/<int:leave_id>", methods=["GET"], endpoint="leaves_get")
    @login_required
    def get_leave(leave_id: int):
        leave = service.get(leave_id)
        user = current_user()
        if not is_privileged(user) and leave.employee_id != user.employee_id:
            raise AuthorizationError("You can only view your own leave applications")
        return api_response(leave, message="Leave application retrieved")

    @app.route("/leaves/<int:leave_id>/approve", methods=["PATCH"], endpoint="leaves_decide")
    @roles_required(Role.ADMIN, Role.HR, Role.MANAGER)
    def decide(leave_id: int):
        data = json_body()
        user = current_user()
        leave = service.decide(
            leave_id,
            user.employee_id or str(user.user_id),
            require_non_empty(data.get("status") or "", "status"),
            data.get("rejectionReason"),
        )
        return api_response(leave, message=f"Leave application {leave.status.value.lower()} successfully")

    @app.route("/leaves/<int:leave_id>/cancel", methods=["PATCH"], endpoint="leaves_cancel")
    @login_required
    def cancel(leave_id: int):
        user = current_user()
        if not user.employee_id:
            raise AuthorizationError("Only the applicant can cancel this leave")
        leave = service.cancel(leave_id, user.employee_id)
        return api_response(leave, message="Leave application cancelled successfully")

    @app.route("/leaves/<employee_id>/balance", methods=["GET"], endpoint="leaves_balance")
    @login_required
    def balance(employee_id: str):
        employee_id = resolve_employee_id(employee_id)
        year = query_int("year")
        if year is None:
            year = now_local().year
        return api_response(
            {"employeeId": employee_id, "year": year, "balance": service.balance(employee_id, year)},
            message="Leave balance retrieved",
        )
