from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Optional, Sequence

from werkzeug.security import generate_password_hash

from ..common.quantities import to_money
from ..common.validators import require_min_length, require_non_empty
from ..core.enums import EmployeeStatus, EmploymentType
from ..core.exceptions import NotFoundError, ValidationError
from ..users.repository import AccountRepository
from .leave_allocation import initial_balance, pro_rata_balance
from .model import Employee, NewEmployee
from .repository import EmployeeRepository

logger = logging.getLogger(__name__)


class EmployeeService:
    """Use case: HR employee records and their leave balances."""

    def __init__(
        self,
        employees: EmployeeRepository,
        accounts: AccountRepository,
        *,
        today: Callable[[], date] = date.today,
    ):
        self._employees = employees
        self._accounts = accounts
        self._today = today

    def _validate(self, data: NewEmployee) -> NewEmployee:
        require_non_empty(data.first_name, "First name")
        require_non_empty(data.last_name, "Last name")
        require_non_empty(data.email, "Email")
        require_non_empty(data.department, "Department")
        require_non_empty(data.designation, "Designation")
        if data.joining_date is None:
            raise ValidationError("Joining date is required")
        salary = to_money(data.salary, "Salary")
        if salary < 0:
            raise ValidationError("Salary cannot be negative")
        return NewEmployee(
            first_name=data.first_name.strip(),
            last_name=data.last_name.strip(),
            email=data.email.strip().lower(),
            department=data.department.strip(),
            designation=data.designation.strip(),
            joining_date=data.joining_date,
            salary=salary,
            role=data.role,
            employment_type=data.employment_type,
            employee_code=(data.employee_code or "").strip() or None,
            father_name=data.father_name,
            phone=data.phone,
            shift=data.shift,
        )

    def get(self, employee_id: int) -> Employee:
        emp = self._employees.get_by_id(int(employee_id))
        if not emp:
            raise NotFoundError("Employee not found")
        return emp

    def list_employees(self, *, department: Optional[str] = None) -> Sequence[Employee]:
        return self._employees.list_all(department=department)

    def find_by_full_name(self, full_name: str) -> Optional[Employee]:
        wanted = (full_name or "").strip().lower()
        for emp in self._employees.list_all():
            if emp.full_name.lower() == wanted:
                return emp
        return None

    def add_employee(self, data: NewEmployee, *, password: str) -> int:
        data = self._validate(data)
        require_min_length(password, "Password", 6)
        if self._employees.get_by_email(data.email):
            raise ValidationError("An employee with this email already exists")
        if self._accounts.get_by_email(data.email):
            raise ValidationError("An account with this email already exists")

        code = data.employee_code or f"EMP-{self._employees.count() + 1:03d}"
        balance = initial_balance(data.employment_type, data.joining_date, today=self._today())
        employee_id = self._employees.create(
            data=data,
            employee_code=code,
            status=EmployeeStatus.ACTIVE,
            balance=balance,
        )
        self._accounts.create(
            email=data.email,
            password_hash=generate_password_hash(password),
            password_change_required=True,
        )
        logger.info("Added employee %s (%s, %s)", code, data.department, data.employment_type.value)
        return employee_id

    def update_employee(self, employee_id: int, data: NewEmployee) -> None:
        current = self.get(employee_id)
        data = self._validate(data)

        balance = None
        if data.employment_type == EmploymentType.PERMANENT:
            # Promotion (or re-save) as Permanent re-allocates from today.
            balance = pro_rata_balance(self._today(), today=self._today())

        if not self._employees.update(employee_id=current.id, data=data, balance=balance):
            raise ValidationError("Failed to update employee")
        logger.info("Updated employee %s", current.employee_code)

    def resign_employee(self, employee_id: int) -> None:
        current = self.get(employee_id)
        if current.status == EmployeeStatus.RESIGNED:
            raise ValidationError("Employee is already marked as resigned")
        if not self._employees.set_status(employee_id=current.id, status=EmployeeStatus.RESIGNED):
            raise ValidationError("Failed to update employee status")
        logger.info("Employee %s marked as resigned", current.employee_code)
