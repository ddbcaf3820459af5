from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from src.masbot_erp.masbot_erp.core.enums import EmployeeStatus, EmploymentType
from src.masbot_erp.masbot_erp.core.exceptions import NotFoundError, ValidationError
from src.masbot_erp.masbot_erp.employees.leave_allocation import initial_balance, pro_rata_balance
from src.masbot_erp.masbot_erp.employees.model import NewEmployee
from src.masbot_erp.masbot_erp.employees.service import EmployeeService
from src.masbot_erp.masbot_erp.users.model import Account


class FakeAccounts:
    def __init__(self):
        self.created: list[Account] = []

    def get_by_email(self, email: str):
        return next((a for a in self.created if a.email == email), None)

    def create(self, *, email: str, password_hash: str, password_change_required: bool = True) -> int:
        self.created.append(
            Account(id=len(self.created) + 1, email=email, password_hash=password_hash,
                    password_change_required=password_change_required)
        )
        return len(self.created)


def _form(**overrides) -> NewEmployee:
    fields = dict(
        first_name="Zara",
        last_name="Noor",
        email="Zara@Masbot.test",
        department="Kitchen",
        designation="Cook",
        joining_date=date(2024, 3, 1),
        salary=Decimal("25000"),
    )
    fields.update(overrides)
    return NewEmployee(**fields)


@pytest.fixture
def accounts():
    return FakeAccounts()


@pytest.fixture
def service(employee_repo, accounts):
    return EmployeeService(employee_repo, accounts, today=lambda: date(2024, 3, 15))


def test_pro_rata_counts_joining_month_as_full():
    balance = pro_rata_balance(date(2024, 3, 1), today=date(2024, 3, 15))

    assert balance.quotas["annual"].total == 12
    assert balance.quotas["sick"].total == 6
    assert balance.quotas["casual"].total == 5
    assert balance.quotas["alternate_day_off"].total == 42
    assert balance.quotas["maternity"].total == 90
    assert balance.quotas["paternity"].total == 7
    assert balance.quotas["others"].total == 0


def test_earlier_joining_year_gets_full_quotas():
    balance = pro_rata_balance(date(2022, 11, 1), today=date(2024, 3, 15))

    assert balance.quotas["annual"].total == 14
    assert balance.quotas["casual"].total == 6


def test_non_permanent_gets_zero_balance():
    balance = initial_balance(EmploymentType.CONTRACT, date(2024, 1, 1), today=date(2024, 3, 15))

    assert all(q.total == 0 for q in balance.quotas.values())


def test_add_employee_assigns_code_balance_and_account(service, employee_repo, accounts):
    employee_id = service.add_employee(_form(), password="secret1")

    emp = employee_repo.get_by_id(employee_id)
    assert emp.employee_code == "EMP-005"
    assert emp.email == "zara@masbot.test"
    assert emp.status == EmployeeStatus.ACTIVE
    assert emp.leave_balance.quotas["annual"].total == 12
    assert accounts.created[0].email == "zara@masbot.test"
    assert accounts.created[0].password_change_required is True


def test_add_employee_rejects_duplicate_email(service):
    with pytest.raises(ValidationError):
        service.add_employee(_form(email="ali@masbot.test"), password="secret1")


def test_add_employee_requires_fields(service):
    with pytest.raises(ValidationError):
        service.add_employee(_form(department=" "), password="secret1")
    with pytest.raises(ValidationError):
        service.add_employee(_form(), password="123")


def test_promotion_to_permanent_reallocates_from_today(service, employee_repo, employee_factory):
    employee_repo._by_id[10] = employee_factory(10, "Temp", "Worker", employment_type=EmploymentType.CONTRACT)

    service.update_employee(
        10,
        _form(first_name="Temp", last_name="Worker", email="temp@masbot.test", employment_type=EmploymentType.PERMANENT),
    )

    emp = employee_repo.get_by_id(10)
    assert emp.employment_type == EmploymentType.PERMANENT
    assert emp.leave_balance.quotas["annual"].total == 12


def test_resign_employee(service, employee_repo):
    service.resign_employee(1)

    assert employee_repo.get_by_id(1).status == EmployeeStatus.RESIGNED
    with pytest.raises(ValidationError):
        service.resign_employee(1)
    with pytest.raises(NotFoundError):
        service.resign_employee(99)


def test_find_by_full_name_is_case_insensitive(service):
    assert service.find_by_full_name("  sara AHMED ").id == 2
    assert service.find_by_full_name("Nobody") is None
