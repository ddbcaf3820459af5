from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import EmployeePayLine, PayrollRecord
from .repository import PayrollRepository


def _money(value: Any) -> Decimal:
    return Decimal(str(value)) if value is not None else Decimal("0.00")


class MySQLPayrollRepository(PayrollRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_record(row: Dict[str, Any], lines: list[EmployeePayLine]) -> PayrollRecord:
        return PayrollRecord(
            id=int(row["id"]),
            run_at=row["run_at"],
            month=row["payroll_month"],
            month_year=row["month_year"],
            total_payroll=_money(row["total_payroll"]),
            total_deductions=_money(row["total_deductions"]),
            total_net_pay=_money(row["total_net_pay"]),
            lines=tuple(lines),
        )

    def _load(self, where: str, params: tuple) -> list[PayrollRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id, run_at, payroll_month, month_year, total_payroll, total_deductions, total_net_pay "
                f"FROM payroll_records WHERE {where} ORDER BY run_at DESC, id DESC",
                params,
            )
            records = fetchall(cur)
            if not records:
                return []
            ids = [int(r["id"]) for r in records]
            cur.execute(
                "SELECT payroll_id, employee_id, employee_name, department, base_salary, deductions, net_pay, "
                "days_present, leave_days FROM payroll_lines "
                f"WHERE payroll_id IN ({','.join(['%s'] * len(ids))}) ORDER BY payroll_id, line_no",
                tuple(ids),
            )
            lines: dict[int, list[EmployeePayLine]] = {}
            for r in fetchall(cur):
                lines.setdefault(int(r["payroll_id"]), []).append(
                    EmployeePayLine(
                        employee_id=int(r["employee_id"]),
                        employee_name=r["employee_name"],
                        department=r.get("department") or "",
                        base_salary=_money(r["base_salary"]),
                        deductions=_money(r["deductions"]),
                        net_pay=_money(r["net_pay"]),
                        days_present=int(r.get("days_present") or 0),
                        leave_days=int(r.get("leave_days") or 0),
                    )
                )
            return [self._to_record(r, lines.get(int(r["id"]), [])) for r in records]

    def create(self, record: PayrollRecord) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO payroll_records(run_at, payroll_month, month_year, total_payroll, total_deductions, total_net_pay)
                VALUES (%s,%s,%s,%s,%s,%s)
                """,
                (
                    record.run_at,
                    record.month,
                    record.month_year,
                    str(record.total_payroll),
                    str(record.total_deductions),
                    str(record.total_net_pay),
                ),
            )
            payroll_id = int(cur.lastrowid)
            cur.executemany(
                """
                INSERT INTO payroll_lines(payroll_id, line_no, employee_id, employee_name, department,
                                          base_salary, deductions, net_pay, days_present, leave_days)
                VALUES (%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                [
                    (
                        payroll_id,
                        line_no,
                        l.employee_id,
                        l.employee_name,
                        l.department,
                        str(l.base_salary),
                        str(l.deductions),
                        str(l.net_pay),
                        l.days_present,
                        l.leave_days,
                    )
                    for line_no, l in enumerate(record.lines, start=1)
                ],
            )
            return payroll_id

    def get(self, payroll_id: int) -> Optional[PayrollRecord]:
        found = self._load("id=%s", (int(payroll_id),))
        return found[0] if found else None

    def list_all(self) -> Sequence[PayrollRecord]:
        return self._load("1=1", ())
