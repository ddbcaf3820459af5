from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from ..core.enums import AbsenceStatus


@dataclass(frozen=True)
class MonthlyPerformanceRow:
    employee_id: int
    employee_code: str
    name: str
    department: str
    designation: str
    month: str  # YYYY-MM
    days_present: int
    attendance_pct: int
    leaves_taken: int


@dataclass(frozen=True)
class AbsenteeRow:
    date: date
    employee_code: str
    name: str
    department: str
    designation: str
    status: AbsenceStatus
    remarks: str  # leave type when on leave, "-" otherwise
