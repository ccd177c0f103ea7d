from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime
from decimal import Decimal
from typing import Any, Mapping, Optional, Type, TypeVar

from ..common.serialization import camelize
from ..common.validators import to_money
from ..core.constants import ZERO
from ..core.enums import PaymentMethod, PayrollStatus
from ..core.exceptions import ValidationError
from ..employees.model import Employee

C = TypeVar("C", bound="_Components")

CENTS = Decimal("0.01")


def quantize_money(amount: Decimal) -> Decimal:
    return amount.quantize(CENTS)


class _Components:
    """Named, non-negative money fields (allowances or deductions)."""

    @classmethod
    def from_mapping(cls: Type[C], data: Optional[Mapping[str, Any]], label: str) -> C:
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise ValidationError(f"{label} must be an object")
        lookup = {}
        for f in fields(cls):
            lookup[f.name] = f.name
            lookup[camelize(f.name)] = f.name
        values = {}
        for key, value in data.items():
            name = lookup.get(key)
            if name is None:
                raise ValidationError(f"Unknown {label} component: {key}")
            values[name] = to_money(value, f"{label}.{key}")
        return cls(**values)

    @property
    def total(self) -> Decimal:
        return sum((getattr(self, f.name) for f in fields(self)), ZERO)


@dataclass(frozen=True)
class Allowances(_Components):
    hra: Decimal = ZERO
    transport: Decimal = ZERO
    medical: Decimal = ZERO
    special: Decimal = ZERO
    other: Decimal = ZERO


@dataclass(frozen=True)
class Deductions(_Components):
    pf: Decimal = ZERO
    esic: Decimal = ZERO
    tds: Decimal = ZERO
    professional_tax: Decimal = ZERO
    loan_deduction: Decimal = ZERO
    other: Decimal = ZERO


@dataclass(frozen=True)
class PayPeriod:
    month: int
    year: int


@dataclass(frozen=True)
class Overtime:
    hours: float = 0.0
    rate: Decimal = ZERO
    amount: Decimal = ZERO


@dataclass(frozen=True)
class PayrollRecord:
    """Domain entity: one payroll per employee per pay period.

    Note: Figures are a snapshot taken at processing time; afterwards only
    status and payment fields change.
    """

    employee_id: str
    pay_period: PayPeriod
    basic_salary: Decimal
    allowances: Allowances
    deductions: Deductions
    overtime: Overtime
    bonus: Decimal
    incentives: Decimal
    working_days: int
    actual_working_days: int
    leave_days: float
    gross_salary: Decimal
    net_salary: Decimal
    status: PayrollStatus = PayrollStatus.DRAFT
    processed_by: Optional[int] = None
    processed_date: Optional[datetime] = None
    payment_date: Optional[datetime] = None
    payment_method: Optional[PaymentMethod] = None
    payment_reference: Optional[str] = None
    payroll_id: Optional[int] = None


@dataclass(frozen=True)
class PayrollSummary:
    sum_gross: Decimal = ZERO
    sum_net: Decimal = ZERO
    sum_basic: Decimal = ZERO
    avg_gross: Decimal = ZERO
    avg_net: Decimal = ZERO
    count: int = 0


@dataclass(frozen=True)
class PayrollFilters:
    employee_id: Optional[str] = None
    month: Optional[int] = None
    year: Optional[int] = None
    status: Optional[PayrollStatus] = None
    department: Optional[str] = None


@dataclass(frozen=True)
class Payslip:
    payroll: PayrollRecord
    employee: Optional[Employee]
    generated_at: datetime
    company_info: Mapping[str, Any] = field(default_factory=dict)
