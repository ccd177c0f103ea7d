import hrms.main as main
from hrms.container import Container


def test_built_container_drains_dispatcher_at_exit(
    monkeypatch, employees, dispatcher, auth_service, attendance_service, leave_service, payroll_service
):
    monkeypatch.setenv("APP_ENV", "testing")
    container = Container(
        employee_directory=employees,
        dispatcher=dispatcher,
        auth_service=auth_service,
        attendance_service=attendance_service,
        leave_service=leave_service,
        payroll_service=payroll_service,
    )
    built = []
    registered = []
    monkeypatch.setattr(main, "build_container", lambda **kwargs: built.append(kwargs) or container)
    monkeypatch.setattr(main.atexit, "register", registered.append)

    main.create_app()

    assert built[0]["leave_lock_timeout"] == 1
    assert registered == [dispatcher.shutdown]


def test_injected_container_is_left_to_the_caller(
    monkeypatch, employees, dispatcher, auth_service, attendance_service, leave_service, payroll_service
):
    monkeypatch.setenv("APP_ENV", "testing")
    registered = []
    monkeypatch.setattr(main.atexit, "register", registered.append)

    main.create_app(
        Container(
            employee_directory=employees,
            dispatcher=dispatcher,
            auth_service=auth_service,
            attendance_service=attendance_service,
            leave_service=leave_service,
            payroll_service=payroll_service,
        )
    )

    assert registered == []
