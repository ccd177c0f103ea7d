import pytest

from hrms.core.enums import Role
from hrms.core.exceptions import AuthenticationError, ValidationError
from hrms.users.service import AuthService


def test_login_returns_token_and_session(auth_service, audit):
    token, user = auth_service.authenticate("Vikram@HRMS.local", "staff123")

    assert token
    assert user.role == Role.EMPLOYEE
    assert user.employee_id == "EMP002"
    assert audit.entries[-1]["action"] == "LOGIN"

    resolved = auth_service.resolve_token(token)
    assert resolved == user


def test_wrong_password(auth_service, audit):
    with pytest.raises(AuthenticationError):
        auth_service.authenticate("vikram@hrms.local", "nope")

    assert audit.entries[-1]["action"] == "LOGIN_FAILED"


def test_unknown_and_inactive_users(auth_service):
    with pytest.raises(AuthenticationError):
        auth_service.authenticate("nobody@hrms.local", "staff123")
    with pytest.raises(AuthenticationError):
        auth_service.authenticate("gone@hrms.local", "staff123")


def test_missing_credentials(auth_service):
    with pytest.raises(ValidationError):
        auth_service.authenticate("", "")


def test_user_without_employee_profile(auth_service):
    _, user = auth_service.authenticate("boss@hrms.local", "manager1")

    assert user.role == Role.MANAGER
    assert user.employee_id is None


def test_tampered_token(auth_service):
    token, _ = auth_service.authenticate("vikram@hrms.local", "staff123")

    with pytest.raises(AuthenticationError):
        auth_service.resolve_token(token + "x")
    with pytest.raises(AuthenticationError):
        auth_service.resolve_token("")


def test_token_from_other_secret(users, employees, auth_service):
    other = AuthService(users, employees, secret_key="other-secret")
    token, _ = other.authenticate("vikram@hrms.local", "staff123")

    with pytest.raises(AuthenticationError):
        auth_service.resolve_token(token)


def test_expired_token(users, employees):
    service = AuthService(users, employees, secret_key="test-secret", max_age_seconds=-1)
    token, _ = service.authenticate("vikram@hrms.local", "staff123")

    with pytest.raises(AuthenticationError):
        service.resolve_token(token)
