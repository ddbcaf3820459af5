from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

import pytest

from src.masbot_erp.masbot_erp.access.model import Identity
from src.masbot_erp.masbot_erp.core.enums import EmployeeStatus, EmploymentType, Role
from src.masbot_erp.masbot_erp.employees.model import Employee, LeaveBalance, LeaveQuota, NewEmployee


class InMemoryEmployees:
    def __init__(self, employees=()):
        self._by_id: dict[int, Employee] = {e.id: e for e in employees}

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self._by_id.get(int(employee_id))

    def get_by_email(self, email: str) -> Optional[Employee]:
        return next((e for e in self._by_id.values() if e.email == email), None)

    def list_all(self, *, department: Optional[str] = None):
        rows = sorted(self._by_id.values(), key=lambda e: e.id)
        if department:
            rows = [e for e in rows if e.department == department]
        return rows

    def count(self) -> int:
        return len(self._by_id)

    def create(self, *, data: NewEmployee, employee_code: str, status: EmployeeStatus, balance: LeaveBalance) -> int:
        new_id = max(self._by_id, default=0) + 1
        self._by_id[new_id] = Employee(
            id=new_id,
            employee_code=employee_code,
            first_name=data.first_name,
            last_name=data.last_name,
            email=data.email,
            department=data.department,
            designation=data.designation,
            role=data.role,
            employment_type=data.employment_type,
            status=status,
            joining_date=data.joining_date,
            salary=data.salary,
            leave_balance=balance,
        )
        return new_id

    def update(self, *, employee_id: int, data: NewEmployee, balance: Optional[LeaveBalance] = None) -> bool:
        current = self._by_id.get(int(employee_id))
        if not current:
            return False
        self._by_id[current.id] = replace(
            current,
            first_name=data.first_name,
            last_name=data.last_name,
            email=data.email,
            department=data.department,
            designation=data.designation,
            role=data.role,
            employment_type=data.employment_type,
            salary=data.salary,
            leave_balance=balance if balance is not None else current.leave_balance,
        )
        return True

    def set_status(self, *, employee_id: int, status: EmployeeStatus) -> bool:
        current = self._by_id.get(int(employee_id))
        if not current:
            return False
        self._by_id[current.id] = replace(current, status=status)
        return True


def make_employee(employee_id: int, first: str, last: str, **overrides) -> Employee:
    fields = dict(
        id=employee_id,
        employee_code=f"EMP-{employee_id:03d}",
        first_name=first,
        last_name=last,
        email=f"{first.lower()}@masbot.test",
        department="Kitchen",
        designation="Chef",
        role=Role.EMPLOYEE,
        employment_type=EmploymentType.PERMANENT,
        status=EmployeeStatus.ACTIVE,
        joining_date=date(2020, 1, 1),
        salary=Decimal("30000.00"),
        leave_balance=LeaveBalance(quotas={"casual": LeaveQuota(total=6), "sick": LeaveQuota(total=7)}),
    )
    fields.update(overrides)
    return Employee(**fields)


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 3, 15, 10, 30)


@pytest.fixture
def super_admin() -> Identity:
    return Identity(email="admin@masbot.test", role=Role.SUPER_ADMIN, full_name="Administrator")


@pytest.fixture
def sample_employees() -> list[Employee]:
    return [
        make_employee(1, "Ali", "Khan"),
        make_employee(2, "Sara", "Ahmed", role=Role.HOD, designation="Head Chef"),
        make_employee(3, "Omar", "Raza", department="HR", designation="HR Officer", role=Role.HR),
        make_employee(4, "Hina", "Malik", department="IT", designation="Engineer"),
    ]


@pytest.fixture
def employee_repo(sample_employees) -> InMemoryEmployees:
    return InMemoryEmployees(sample_employees)


@pytest.fixture
def identity_for():
    def build(emp: Employee) -> Identity:
        return Identity(
            email=emp.email,
            role=emp.role,
            employee_id=emp.id,
            full_name=emp.full_name,
            department=emp.department,
        )

    return build


@pytest.fixture
def employee_factory():
    return make_employee
