from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal
from typing import Dict, Optional

from ..core.constants import FULL_LEAVE_QUOTAS
from ..core.enums import EmployeeStatus, EmploymentType, LeaveType, Role


@dataclass(frozen=True)
class LeaveQuota:
    total: int = 0
    used: int = 0

    @property
    def remaining(self) -> int:
        return max(0, self.total - self.used)


@dataclass(frozen=True)
class LeaveBalance:
    """Per-type quotas keyed by LeaveType.balance_key (annual, sick, casual, ...)."""

    quotas: Dict[str, LeaveQuota] = field(default_factory=dict)

    def get(self, leave_type: LeaveType) -> LeaveQuota:
        return self.quotas.get(leave_type.balance_key, LeaveQuota())

    def with_used(self, leave_type: LeaveType, days: int) -> "LeaveBalance":
        key = leave_type.balance_key
        current = self.quotas.get(key, LeaveQuota())
        quotas = dict(self.quotas)
        quotas[key] = replace(current, used=current.used + int(days))
        return LeaveBalance(quotas=quotas)

    def to_dict(self) -> dict:
        return {k: {"total": q.total, "used": q.used} for k, q in self.quotas.items()}

    @classmethod
    def empty(cls) -> "LeaveBalance":
        return cls(quotas={k: LeaveQuota() for k in FULL_LEAVE_QUOTAS})


@dataclass(frozen=True)
class Employee:
    id: int
    employee_code: str
    first_name: str
    last_name: str
    email: str
    department: str
    designation: str
    role: Role
    employment_type: EmploymentType
    status: EmployeeStatus
    joining_date: date
    salary: Decimal
    leave_balance: LeaveBalance = field(default_factory=LeaveBalance.empty)
    father_name: Optional[str] = None
    phone: Optional[str] = None
    shift: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_active(self) -> bool:
        return self.status == EmployeeStatus.ACTIVE


@dataclass(frozen=True)
class NewEmployee:
    """Form input for add/update; ids and balances are assigned by the service."""

    first_name: str
    last_name: str
    email: str
    department: str
    designation: str
    joining_date: date
    salary: Decimal
    role: Role = Role.EMPLOYEE
    employment_type: EmploymentType = EmploymentType.PERMANENT
    employee_code: Optional[str] = None
    father_name: Optional[str] = None
    phone: Optional[str] = None
    shift: Optional[str] = None
