from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class PersonalInfo:
    first_name: str
    last_name: str
    phone: Optional[str] = None


@dataclass(frozen=True)
class ProfessionalInfo:
    department: Optional[str] = None
    designation: Optional[str] = None
    joining_date: Optional[date] = None


@dataclass(frozen=True)
class Employee:
    """Domain entity: an employee, addressed by its business key `employee_id`."""

    employee_id: str
    user_id: Optional[int]
    email: Optional[str]
    personal: PersonalInfo
    professional: ProfessionalInfo
    is_active: bool = True

    @property
    def full_name(self) -> str:
        return f"{self.personal.first_name} {self.personal.last_name}".strip()
