from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import EmployeeStatus
from .model import Employee, LeaveBalance, NewEmployee


class EmployeeRepository(Protocol):
    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Employee]:
        raise NotImplementedError

    def list_all(self, *, department: Optional[str] = None) -> Sequence[Employee]:
        raise NotImplementedError

    def count(self) -> int:
        raise NotImplementedError

    def create(self, *, data: NewEmployee, employee_code: str, status: EmployeeStatus, balance: LeaveBalance) -> int:
        raise NotImplementedError

    def update(self, *, employee_id: int, data: NewEmployee, balance: Optional[LeaveBalance] = None) -> bool:
        raise NotImplementedError

    def set_status(self, *, employee_id: int, status: EmployeeStatus) -> bool:
        raise NotImplementedError
