from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional, Tuple, Union

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """One daily attendance row, unique per (employee_id, date)."""

    employee_id: int
    date: date
    time_in: str  # "HH:MM"
    time_out: str  # "HH:MM", or "" when only one punch was recorded
    status: AttendanceStatus
    id: Optional[int] = None


@dataclass(frozen=True)
class AttendanceLogRow:
    """Read-model joining a record with the employee it belongs to."""

    record: AttendanceRecord
    employee_code: str
    employee_name: str
    department: str


@dataclass(frozen=True)
class Matched:
    employee_id: int


@dataclass(frozen=True)
class Unmatched:
    reason: str


MatchResult = Union[Matched, Unmatched]


@dataclass(frozen=True)
class ImportReport:
    records: Tuple[AttendanceRecord, ...]
    unmatched: Tuple[Tuple[int, str], ...] = ()

    @property
    def message(self) -> str:
        return f"Attendance records uploaded. ({len(self.records)} daily records processed)"
