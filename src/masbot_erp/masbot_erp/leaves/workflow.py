"""Leave approval chain: HOD of the requester's department, then HR."""

from __future__ import annotations

from ..access.model import Identity
from ..core.enums import ApprovalAction, LeaveStatus
from ..core.exceptions import AuthorizationError, TransitionError
from ..employees.model import Employee


def can_act(status: LeaveStatus, actor: Identity, requester: Employee) -> bool:
    if status == LeaveStatus.PENDING_HOD:
        if actor.is_super_admin:
            return True
        return actor.is_hod and actor.department == requester.department
    if status == LeaveStatus.PENDING_HR:
        return actor.is_super_admin or actor.is_hr
    return False


def transition(status: LeaveStatus, action: ApprovalAction, actor: Identity, requester: Employee) -> LeaveStatus:
    if status in {LeaveStatus.APPROVED, LeaveStatus.REJECTED}:
        raise TransitionError(f"Leave request is already {status.value}")

    if not can_act(status, actor, requester):
        raise AuthorizationError("You are not allowed to act on this leave request")

    if action == ApprovalAction.REJECT:
        return LeaveStatus.REJECTED
    if status == LeaveStatus.PENDING_HOD:
        return LeaveStatus.PENDING_HR
    return LeaveStatus.APPROVED
