from __future__ import annotations

from flask import Flask

from ..common.http import api_response, current_user, json_body, login_required


def register(app: Flask, container) -> None:
    auth = container.auth_service
    employees = container.employee_directory

    @app.route("/auth/login", methods=["POST"], endpoint="auth_login")
    def login():
        data = json_body()
        token, user = auth.authenticate(data.get("email") or "", data.get("password") or "")
        return api_response({"token": token, "user": user}, message="Login successful")

    @app.route("/auth/me", methods=["GET"], endpoint="auth_me")
    @login_required
    def me():
        user = current_user()
        employee = employees.find_by_employee_id(user.employee_id) if user.employee_id else None
        return api_response({"user": user, "employee": employee}, message="Profile retrieved")
