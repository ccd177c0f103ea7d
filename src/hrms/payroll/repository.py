from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from ..common.pagination import Page, PageRequest
from ..core.enums import PaymentMethod, PayrollStatus
from .model import PayrollFilters, PayrollRecord, PayrollSummary


class PayrollRepository(Protocol):
    def get_by_id(self, payroll_id: int) -> Optional[PayrollRecord]:
        raise NotImplementedError

    def get_for_period(self, employee_id: str, month: int, year: int) -> Optional[PayrollRecord]:
        raise NotImplementedError

    def create(self, record: PayrollRecord) -> int:
        """Insert a payroll. Raises DuplicatePayrollError on (employee, month, year) collision."""

        raise NotImplementedError

    def update_status(
        self,
        *,
        payroll_id: int,
        status: PayrollStatus,
        payment_date: Optional[datetime] = None,
        payment_method: Optional[PaymentMethod] = None,
        payment_reference: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError

    def search(self, filters: PayrollFilters, page: PageRequest) -> Page:
        raise NotImplementedError

    def aggregate(self, filters: PayrollFilters) -> PayrollSummary:
        raise NotImplementedError
