from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AttendanceLogRow, AttendanceRecord


class AttendanceRepository(Protocol):
    def upsert_many(self, records: Sequence[AttendanceRecord]) -> int:
        """Insert or replace records keyed by (employee_id, date)."""
        raise NotImplementedError

    def list_between(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_id: Optional[int] = None,
        department: Optional[str] = None,
    ) -> Sequence[AttendanceLogRow]:
        raise NotImplementedError
