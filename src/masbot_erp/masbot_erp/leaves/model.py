from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import inclusive_days
from ..core.enums import LeaveStatus, LeaveType


@dataclass(frozen=True)
class LeaveRequest:
    id: int
    employee_id: int
    from_date: date
    to_date: date
    leave_type: LeaveType
    reason: str
    status: LeaveStatus
    created_at: Optional[datetime] = None
    decided_by: Optional[str] = None
    decided_at: Optional[datetime] = None

    @property
    def days(self) -> int:
        return inclusive_days(self.from_date, self.to_date)

    @property
    def is_final(self) -> bool:
        return self.status in {LeaveStatus.APPROVED, LeaveStatus.REJECTED}
