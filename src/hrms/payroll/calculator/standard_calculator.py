from __future__ import annotations

from decimal import Decimal

from ..model import Allowances, Deductions, quantize_money
from .base import PayrollCalculator


class StandardPayrollCalculator(PayrollCalculator):
    """Standard rule: gross = basic + allowances + bonus + incentives + overtime; net = gross - deductions."""

    def overtime_amount(self, hours: float, rate: Decimal) -> Decimal:
        return quantize_money(Decimal(str(round(hours or 0.0, 4))) * rate)

    def gross_salary(
        self,
        *,
        basic_salary: Decimal,
        allowances: Allowances,
        bonus: Decimal,
        incentives: Decimal,
        overtime_amount: Decimal,
    ) -> Decimal:
        return quantize_money(basic_salary + allowances.total + bonus + incentives + overtime_amount)

    def net_salary(self, gross_salary: Decimal, deductions: Deductions) -> Decimal:
        # Not floored at zero: deductions larger than gross surface as a negative net.
        return quantize_money(gross_salary - deductions.total)
