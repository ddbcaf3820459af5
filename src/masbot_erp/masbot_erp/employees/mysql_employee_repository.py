from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import EmployeeStatus, EmploymentType, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import Employee, LeaveBalance, LeaveQuota, NewEmployee
from .repository import EmployeeRepository

_COLUMNS = """
    e.id, e.employee_code, e.first_name, e.last_name, e.email, e.department,
    e.designation, e.role, e.employment_type, e.status, e.joining_date, e.salary,
    e.father_name, e.phone, e.shift
"""


def write_balance(cur, employee_id: int, balance: LeaveBalance) -> None:
    cur.execute("DELETE FROM leave_balances WHERE employee_id=%s", (int(employee_id),))
    for key, quota in balance.quotas.items():
        cur.execute(
            "INSERT INTO leave_balances(employee_id, leave_key, total, used) VALUES (%s,%s,%s,%s)",
            (int(employee_id), key, int(quota.total), int(quota.used)),
        )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _load_balances(cur, ids: list[int]) -> dict[int, LeaveBalance]:
        if not ids:
            return {}
        cur.execute(
            f"SELECT employee_id, leave_key, total, used FROM leave_balances WHERE employee_id IN ({in_clause(ids)})",
            tuple(ids),
        )
        quotas: dict[int, dict[str, LeaveQuota]] = {}
        for r in fetchall(cur):
            quotas.setdefault(int(r["employee_id"]), {})[r["leave_key"]] = LeaveQuota(
                total=int(r["total"]), used=int(r["used"])
            )
        return {emp_id: LeaveBalance(quotas=q) for emp_id, q in quotas.items()}

    @staticmethod
    def _to_employee(r: dict, balance: Optional[LeaveBalance]) -> Employee:
        return Employee(
            id=int(r["id"]),
            employee_code=r["employee_code"],
            first_name=r["first_name"],
            last_name=r["last_name"],
            email=r["email"],
            department=r["department"],
            designation=r["designation"],
            role=Role(r["role"]),
            employment_type=EmploymentType(r["employment_type"]),
            status=EmployeeStatus(r["status"]),
            joining_date=r["joining_date"],
            salary=Decimal(str(r["salary"])),
            leave_balance=balance or LeaveBalance.empty(),
            father_name=r.get("father_name"),
            phone=r.get("phone"),
            shift=r.get("shift"),
        )

    def _select(self, where: str, params: tuple) -> list[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees e WHERE {where} ORDER BY e.first_name, e.last_name", params)
            rows = fetchall(cur)
            balances = self._load_balances(cur, [int(r["id"]) for r in rows])
            return [self._to_employee(r, balances.get(int(r["id"]))) for r in rows]

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        found = self._select("e.id=%s", (int(employee_id),))
        return found[0] if found else None

    def get_by_email(self, email: str) -> Optional[Employee]:
        found = self._select("e.email=%s", (email.lower(),))
        return found[0] if found else None

    def list_all(self, *, department: Optional[str] = None) -> Sequence[Employee]:
        if department:
            return self._select("e.department=%s", (department,))
        return self._select("1=1", ())

    def count(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM employees")
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def create(self, *, data: NewEmployee, employee_code: str, status: EmployeeStatus, balance: LeaveBalance) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO employees(
                    employee_code, first_name, last_name, email, department, designation,
                    role, employment_type, status, joining_date, salary, father_name, phone, shift
                )
                VALUES (%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    employee_code,
                    data.first_name,
                    data.last_name,
                    data.email,
                    data.department,
                    data.designation,
                    data.role.value,
                    data.employment_type.value,
                    status.value,
                    data.joining_date,
                    str(data.salary),
                    data.father_name,
                    data.phone,
                    data.shift,
                ),
            )
            employee_id = int(cur.lastrowid)
            write_balance(cur, employee_id, balance)
            return employee_id

    def update(self, *, employee_id: int, data: NewEmployee, balance: Optional[LeaveBalance] = None) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE employees
                SET first_name=%s, last_name=%s, email=%s, department=%s, designation=%s,
                    role=%s, employment_type=%s, joining_date=%s, salary=%s,
                    father_name=%s, phone=%s, shift=%s
                WHERE id=%s
                """,
                (
                    data.first_name,
                    data.last_name,
                    data.email,
                    data.department,
                    data.designation,
                    data.role.value,
                    data.employment_type.value,
                    data.joining_date,
                    str(data.salary),
                    data.father_name,
                    data.phone,
                    data.shift,
                    int(employee_id),
                ),
            )
            # MySQL reports 0 affected rows when nothing changed; existence was checked by the service.
            if balance is not None:
                write_balance(cur, int(employee_id), balance)
            return True

    def set_status(self, *, employee_id: int, status: EmployeeStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE employees SET status=%s WHERE id=%s", (status.value, int(employee_id)))
            return cur.rowcount > 0
