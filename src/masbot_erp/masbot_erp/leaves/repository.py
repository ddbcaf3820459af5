from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import LeaveStatus, LeaveType
from .model import LeaveRequest


class LeaveRepository(Protocol):
    def get(self, request_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def create(self, *, employee_id: int, from_date: date, to_date: date, leave_type: LeaveType, reason: str) -> int:
        raise NotImplementedError

    def list(
        self,
        *,
        employee_id: Optional[int] = None,
        statuses: Optional[Sequence[LeaveStatus]] = None,
    ) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def list_between(self, *, start: date, end: date, status: Optional[LeaveStatus] = None) -> Sequence[LeaveRequest]:
        """Requests overlapping [start, end]."""
        raise NotImplementedError

    def decide(
        self,
        *,
        request_id: int,
        expected: LeaveStatus,
        new_status: LeaveStatus,
        decided_by: str,
        consume_days: int = 0,
    ) -> bool:
        """Move the request from `expected` to `new_status`.

        When `consume_days` > 0 the requester's balance for the request's leave
        type is charged in the same transaction. Returns False when the
        request is no longer at `expected`; raises ValidationError (and rolls
        the status back) when the remaining balance cannot cover the charge.
        """
        raise NotImplementedError
