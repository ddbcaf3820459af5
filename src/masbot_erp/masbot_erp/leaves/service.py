from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..access.model import Identity
from ..common.datetime_utils import inclusive_days
from ..core.enums import ApprovalAction, EmploymentType, LeaveStatus, LeaveType
from ..core.exceptions import NotFoundError, TransitionError, ValidationError
from ..employees.repository import EmployeeRepository
from .model import LeaveRequest
from .repository import LeaveRepository
from .workflow import can_act, transition

logger = logging.getLogger(__name__)


class LeaveService:
    def __init__(self, leaves: LeaveRepository, employees: EmployeeRepository):
        self._leaves = leaves
        self._employees = employees

    def apply(
        self,
        *,
        employee_id: int,
        from_date: Optional[date],
        to_date: Optional[date],
        leave_type: LeaveType,
        reason: str,
    ) -> int:
        if not from_date or not to_date or not (reason or "").strip():
            raise ValidationError("Please fill in all required fields.")
        if to_date < from_date:
            raise ValidationError('"To Date" cannot be earlier than "From Date".')

        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError("Employee not found")
        if employee.employment_type == EmploymentType.PROBATION:
            raise ValidationError("Employees on probation have no leave allocated")

        days = inclusive_days(from_date, to_date)
        if leave_type != LeaveType.OTHERS:
            remaining = employee.leave_balance.get(leave_type).remaining
            if remaining <= 0:
                logger.warning("Leave refused for %s: %s exhausted", employee.employee_code, leave_type.value)
                raise ValidationError(
                    f"Your {leave_type.value} quota is exhausted. Please select a different leave type."
                )
            if days > remaining:
                logger.warning(
                    "Leave refused for %s: %d days requested, %d remaining", employee.employee_code, days, remaining
                )
                raise ValidationError(
                    f"Insufficient balance for {leave_type.value}. "
                    f"You have {remaining} days remaining, but requested {days}."
                )

        request_id = self._leaves.create(
            employee_id=employee.id,
            from_date=from_date,
            to_date=to_date,
            leave_type=leave_type,
            reason=reason.strip(),
        )
        logger.info("Leave request %s created for %s (%d days)", request_id, employee.employee_code, days)
        return request_id

    def act(self, *, request_id: int, action: ApprovalAction, actor: Identity) -> LeaveStatus:
        req = self._leaves.get(int(request_id))
        if not req:
            raise NotFoundError("Leave request not found")
        requester = self._employees.get_by_id(req.employee_id)
        if not requester:
            raise NotFoundError("Employee not found")

        new_status = transition(req.status, action, actor, requester)
        consume = req.days if new_status == LeaveStatus.APPROVED else 0
        if consume and req.leave_type != LeaveType.OTHERS:
            remaining = requester.leave_balance.get(req.leave_type).remaining
            if consume > remaining:
                logger.warning(
                    "Leave request %s not approved: %d days requested, %d remaining", req.id, consume, remaining
                )
                raise ValidationError(
                    f"Insufficient balance for {req.leave_type.value}. "
                    f"{requester.full_name} has {remaining} days remaining, but the request is for {consume}."
                )

        ok = self._leaves.decide(
            request_id=req.id,
            expected=req.status,
            new_status=new_status,
            decided_by=actor.email,
            consume_days=consume,
        )
        if not ok:
            raise TransitionError("Leave request was already processed by someone else")

        logger.info(
            "Leave request %s: %s -> %s by %s", req.id, req.status.value, new_status.value, actor.email
        )
        return new_status

    def actionable_for(self, actor: Identity) -> list[LeaveRequest]:
        pending = self._leaves.list(statuses=[LeaveStatus.PENDING_HOD, LeaveStatus.PENDING_HR])
        employees = {e.id: e for e in self._employees.list_all()}
        out = []
        for req in pending:
            requester = employees.get(req.employee_id)
            if requester and can_act(req.status, actor, requester):
                out.append(req)
        return out

    def my_requests(self, employee_id: int) -> list[LeaveRequest]:
        rows = self._leaves.list(employee_id=int(employee_id))
        return sorted(rows, key=lambda r: r.from_date, reverse=True)

    def approved_between(self, start: date, end: date) -> Sequence[LeaveRequest]:
        return self._leaves.list_between(start=start, end=end, status=LeaveStatus.APPROVED)
