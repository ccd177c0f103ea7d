from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal

from ..model import Allowances, Deductions


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def overtime_amount(self, hours: float, rate: Decimal) -> Decimal:
        raise NotImplementedError

    @abstractmethod
    def gross_salary(
        self,
        *,
        basic_salary: Decimal,
        allowances: Allowances,
        bonus: Decimal,
        incentives: Decimal,
        overtime_amount: Decimal,
    ) -> Decimal:
        raise NotImplementedError

    @abstractmethod
    def net_salary(self, gross_salary: Decimal, deductions: Deductions) -> Decimal:
        raise NotImplementedError
