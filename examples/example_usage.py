"""Example: drive the service layer directly (no Flask).

Controllers are thin; the business rules live in the services.
"""

import importlib

from dotenv import load_dotenv

from hrms.config import get_settings_module
from hrms.container import build_container


def main():
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, secret_key=settings.SECRET_KEY)

    balance = container.leave_service.balance("EMP002", 2025)
    for leave_type, entry in balance.items():
        print(f"{leave_type.value:<13} total={entry.total} used={entry.used} remaining={entry.remaining}")

    print(container.attendance_service.summarize("EMP002", 3, 2025))
    print(container.payroll_service.summary(year=2025))


if __name__ == "__main__":
    main()
