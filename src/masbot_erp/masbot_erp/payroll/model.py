from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Tuple


@dataclass(frozen=True)
class EmployeePayLine:
    employee_id: int
    employee_name: str
    department: str
    base_salary: Decimal
    deductions: Decimal
    net_pay: Decimal
    days_present: int = 0
    leave_days: int = 0


@dataclass(frozen=True)
class PayrollRecord:
    id: int
    run_at: datetime
    month: str  # YYYY-MM
    month_year: str  # e.g. "July 2024"
    total_payroll: Decimal
    total_deductions: Decimal
    total_net_pay: Decimal
    lines: Tuple[EmployeePayLine, ...] = ()
