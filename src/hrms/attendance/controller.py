from __future__ import annotations

from typing import Any, Optional

from flask import Flask, request

from ..common.datetime_utils import now_local, parse_iso_datetime
from ..common.http import (
    api_response,
    current_user,
    json_body,
    login_required,
    paginated_response,
    query_date,
    query_int,
    resolve_employee_id,
    roles_required,
)
from ..common.pagination import parse_page_request
from ..common.validators import parse_enum, parse_optional_enum
from ..core.constants import DEFAULT_ATTENDANCE_PAGE_LIMIT
from ..core.enums import AttendanceStatus, LocationType, Role
from ..core.exceptions import ValidationError
from .model import AttendanceFilters, AttendanceUpdate, Location


def _parse_location(data: Any) -> Optional[Location]:
    if data is None:
        return None
    if not isinstance(data, dict):
        raise ValidationError("location must be an object")
    coords = data.get("coordinates") or {}
    latitude = data.get("latitude", coords.get("latitude"))
    longitude = data.get("longitude", coords.get("longitude"))
    try:
        return Location(
            type=parse_enum(LocationType, data.get("type") or LocationType.OFFICE.value, "location.type"),
            address=data.get("address"),
            latitude=float(latitude) if latitude is not None else None,
            longitude=float(longitude) if longitude is not None else None,
        )
    except (TypeError, ValueError):
        raise ValidationError("location coordinates must be numbers")


def _optional_datetime(data: dict, key: str):
    value = data.get(key)
    return parse_iso_datetime(value) if value else None


def register(app: Flask, container) -> None:
    service = container.attendance_service

    @app.route("/attendance/clock-in", methods=["POST"], endpoint="attendance_clock_in")
    @login_required
    def clock_in():
        data = json_body()
        employee_id = resolve_employee_id(data.get("employeeId"))
        record = service.record_clock_in(
            employee_id,
            now_local(),
            location=_parse_location(data.get("location")),
            notes=data.get("notes"),
        )
        return api_response(record, message="Clocked in successfully", status_code=201)

    @app.route("/attendance/clock-out", methods=["POST"], endpoint="attendance_clock_out")
    @login_required
    def clock_out():
        data = json_body()
        employee_id = resolve_employee_id(data.get("employeeId"))
        record = service.record_clock_out(
            employee_id,
            now_local(),
            break_minutes=data.get("breakDuration") or 0,
            notes=data.get("notes"),
        )
        return api_response(record, message="Clocked out successfully")

    @app.route("/attendance", methods=["GET"], endpoint="attendance_list")
    @roles_required(Role.ADMIN, Role.HR, Role.MANAGER)
    def list_attendance():
        filters = AttendanceFilters(
            employee_id=request.args.get("employeeId") or None,
            start_date=query_date("startDate"),
            end_date=query_date("endDate"),
            status=parse_optional_enum(AttendanceStatus, request.args.get("status"), "status"),
            department=request.args.get("department") or None,
        )
        page = parse_page_request(request.args, default_limit=DEFAULT_ATTENDANCE_PAGE_LIMIT, default_sort="-date")
        result, summary = service.list_records(filters, page)
        return paginated_response(result, message="Attendance records retrieved", summary=summary)

    @app.route("/attendance/summary", methods=["GET"], endpoint="attendance_summary")
    @roles_required(Role.ADMIN, Role.HR, Role.MANAGER)
    def team_summary():
        totals = service.team_summary(
            month=query_int("month"),
            year=query_int("year"),
            employee_id=request.args.get("employeeId") or None,
        )
        return api_response(totals, message="Attendance summary retrieved")

    @app.route("/attendance/<employee_id>/monthly", methods=["GET"], endpoint="attendance_monthly")
    @roles_required(Role.ADMIN, Role.HR, Role.MANAGER)
    def monthly(employee_id: str):
        today = now_local().date()
        month = query_int("month")
        year = query_int("year")
        if month is None:
            month = today.month
        if year is None:
            year = today.year
        records = service.monthly_records(employee_id, month, year)
        summary = service.summarize(employee_id, month, year)
        return api_response(
            {"records": records, "summary": summary, "month": month, "year": year},
            message="Monthly attendance retrieved",
        )

    @app.route("/attendance/<int:attendance_id>", methods=["PUT"], endpoint="attendance_update")
    @roles_required(Role.ADMIN, Role.HR)
    def update(attendance_id: int):
        data = json_body()
        changes = AttendanceUpdate(
            clock_in=_optional_datetime(data, "clockIn"),
            clock_out=_optional_datetime(data, "clockOut"),
            break_minutes=data.get("breakDuration"),
            status=parse_optional_enum(AttendanceStatus, data.get("status"), "status"),
            notes=data.get("notes"),
        )
        record = service.update_record(attendance_id, changes, actor_id=str(current_user().user_id))
        return api_response(record, message="Attendance updated successfully")
