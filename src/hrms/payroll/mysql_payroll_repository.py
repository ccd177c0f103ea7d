from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from typing import Any, Dict, Optional

from mysql.connector.errors import IntegrityError

from ..common.pagination import Page, PageRequest, order_by_clause
from ..core.enums import PaymentMethod, PayrollStatus
from ..core.exceptions import DuplicatePayrollError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    as_decimal,
    as_float,
    db_cursor,
    dump_json,
    fetchall,
    fetchone,
    is_duplicate_key,
    load_json,
)
from .model import (
    Allowances,
    Deductions,
    Overtime,
    PayPeriod,
    PayrollFilters,
    PayrollRecord,
    PayrollSummary,
    quantize_money,
)
from .repository import PayrollRepository

_COLUMNS = """
    p.payroll_id, p.employee_id, p.pay_month, p.pay_year, p.basic_salary, p.allowances,
    p.deductions, p.overtime_hours, p.overtime_rate, p.overtime_amount, p.bonus, p.incentives,
    p.working_days, p.actual_working_days, p.leave_days, p.gross_salary, p.net_salary,
    p.status, p.processed_by, p.processed_date, p.payment_date, p.payment_method,
    p.payment_reference
"""

_SORTABLE = {
    "createdAt": "p.created_at",
    "payPeriod": "(p.pay_year * 100 + p.pay_month)",
    "grossSalary": "p.gross_salary",
    "netSalary": "p.net_salary",
    "employeeId": "p.employee_id",
    "status": "p.status",
}


def _components(raw: Any) -> Dict[str, Any]:
    return {k: as_decimal(v) for k, v in load_json(raw).items()}


def _to_payroll(r: Dict[str, Any]) -> PayrollRecord:
    return PayrollRecord(
        payroll_id=int(r["payroll_id"]),
        employee_id=r["employee_id"],
        pay_period=PayPeriod(month=int(r["pay_month"]), year=int(r["pay_year"])),
        basic_salary=as_decimal(r["basic_salary"]),
        allowances=Allowances(**_components(r.get("allowances"))),
        deductions=Deductions(**_components(r.get("deductions"))),
        overtime=Overtime(
            hours=as_float(r.get("overtime_hours")),
            rate=as_decimal(r.get("overtime_rate")),
            amount=as_decimal(r.get("overtime_amount")),
        ),
        bonus=as_decimal(r.get("bonus")),
        incentives=as_decimal(r.get("incentives")),
        working_days=int(r["working_days"]),
        actual_working_days=int(r["actual_working_days"]),
        leave_days=as_float(r.get("leave_days")),
        gross_salary=as_decimal(r["gross_salary"]),
        net_salary=as_decimal(r["net_salary"]),
        status=PayrollStatus(r["status"]),
        processed_by=int(r["processed_by"]) if r.get("processed_by") is not None else None,
        processed_date=r.get("processed_date"),
        payment_date=r.get("payment_date"),
        payment_method=PaymentMethod(r["payment_method"]) if r.get("payment_method") else None,
        payment_reference=r.get("payment_reference"),
    )


def _where(filters: PayrollFilters) -> tuple[str, str, list]:
    where = ["1=1"]
    params: list = []
    join = ""
    if filters.employee_id:
        where.append("p.employee_id=%s")
        params.append(filters.employee_id)
    if filters.month:
        where.append("p.pay_month=%s")
        params.append(int(filters.month))
    if filters.year:
        where.append("p.pay_year=%s")
        params.append(int(filters.year))
    if filters.status:
        where.append("p.status=%s")
        params.append(filters.status.value)
    if filters.department:
        join = "JOIN employees e ON e.employee_id = p.employee_id"
        where.append("e.department=%s")
        params.append(filters.department)
    return join, " AND ".join(where), params


class MySQLPayrollRepository(PayrollRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, payroll_id: int) -> Optional[PayrollRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM payroll_records p WHERE p.payroll_id=%s", (int(payroll_id),))
            r = fetchone(cur)
            return _to_payroll(r) if r else None

    def get_for_period(self, employee_id: str, month: int, year: int) -> Optional[PayrollRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM payroll_records p
                WHERE p.employee_id=%s AND p.pay_month=%s AND p.pay_year=%s
                """,
                (employee_id, int(month), int(year)),
            )
            r = fetchone(cur)
            return _to_payroll(r) if r else None

    def create(self, record: PayrollRecord) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO payroll_records(
                        employee_id, pay_month, pay_year, basic_salary, allowances, deductions,
                        overtime_hours, overtime_rate, overtime_amount, bonus, incentives,
                        working_days, actual_working_days, leave_days, gross_salary, net_salary,
                        status, processed_by, processed_date
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        record.employee_id,
                        record.pay_period.month,
                        record.pay_period.year,
                        record.basic_salary,
                        dump_json(asdict(record.allowances)),
                        dump_json(asdict(record.deductions)),
                        record.overtime.hours,
                        record.overtime.rate,
                        record.overtime.amount,
                        record.bonus,
                        record.incentives,
                        record.working_days,
                        record.actual_working_days,
                        record.leave_days,
                        record.gross_salary,
                        record.net_salary,
                        record.status.value,
                        record.processed_by,
                        record.processed_date,
                    ),
                )
                return int(cur.lastrowid)
        except IntegrityError as exc:
            if is_duplicate_key(exc):
                raise DuplicatePayrollError("Payroll already exists for this period") from exc
            raise

    def update_status(
        self,
        *,
        payroll_id: int,
        status: PayrollStatus,
        payment_date: Optional[datetime] = None,
        payment_method: Optional[PaymentMethod] = None,
        payment_reference: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE payroll_records
                SET status=%s,
                    payment_date=COALESCE(%s, payment_date),
                    payment_method=COALESCE(%s, payment_method),
                    payment_reference=COALESCE(%s, payment_reference)
                WHERE payroll_id=%s
                """,
                (
                    status.value,
                    payment_date,
                    payment_method.value if payment_method else None,
                    payment_reference,
                    int(payroll_id),
                ),
            )
            return cur.rowcount > 0

    def search(self, filters: PayrollFilters, page: PageRequest) -> Page:
        join, where_sql, params = _where(filters)
        order_sql = order_by_clause(page.sort, _SORTABLE, default="p.pay_year DESC, p.pay_month DESC")

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM payroll_records p {join} WHERE {where_sql}", tuple(params))
            total = int((fetchone(cur) or {}).get("total") or 0)
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM payroll_records p {join}
                WHERE {where_sql}
                ORDER BY {order_sql}
                LIMIT %s OFFSET %s
                """,
                tuple(params) + (page.limit, page.offset),
            )
            items = [_to_payroll(r) for r in fetchall(cur)]
        return Page(items=items, total=total, page=page.page, limit=page.limit)

    def aggregate(self, filters: PayrollFilters) -> PayrollSummary:
        join, where_sql, params = _where(filters)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT COUNT(*) AS cnt,
                       COALESCE(SUM(p.gross_salary), 0) AS sum_gross,
                       COALESCE(SUM(p.net_salary), 0) AS sum_net,
                       COALESCE(SUM(p.basic_salary), 0) AS sum_basic,
                       COALESCE(AVG(p.gross_salary), 0) AS avg_gross,
                       COALESCE(AVG(p.net_salary), 0) AS avg_net
                FROM payroll_records p {join}
                WHERE {where_sql}
                """,
                tuple(params),
            )
            r = fetchone(cur) or {}
        return PayrollSummary(
            sum_gross=as_decimal(r.get("sum_gross")),
            sum_net=as_decimal(r.get("sum_net")),
            sum_basic=as_decimal(r.get("sum_basic")),
            avg_gross=quantize_money(as_decimal(r.get("avg_gross"))),
            avg_net=quantize_money(as_decimal(r.get("avg_net"))),
            count=int(r.get("cnt") or 0),
        )
