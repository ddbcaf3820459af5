"""Requisition and purchase-order state machines.

Requisition: Account Manager approval, then either Store issues from stock or
Purchase buys it (PO, then GRN puts it back in front of Store). Requests raised
by the Store department itself are restocks and skip straight to Purchase.
"""

from __future__ import annotations

from ..core.constants import STORE_DEPARTMENT
from ..core.enums import POAction, POStatus, RequestAction, RequestStatus
from ..core.exceptions import TransitionError

_REQUEST_TERMINAL = {RequestStatus.ISSUED, RequestStatus.REJECTED}
_PO_TERMINAL = {POStatus.REJECTED, POStatus.RECEIVED}

_REQUEST_MOVES = {
    (RequestStatus.PENDING_ACCOUNT_MANAGER, RequestAction.REJECT): RequestStatus.REJECTED,
    (RequestStatus.PENDING_STORE, RequestAction.ISSUE): RequestStatus.ISSUED,
    (RequestStatus.PENDING_STORE, RequestAction.FORWARD): RequestStatus.FORWARDED_TO_PURCHASE,
    (RequestStatus.FORWARDED_TO_PURCHASE, RequestAction.CONVERT): RequestStatus.CONVERTED_TO_PO,
    (RequestStatus.CONVERTED_TO_PO, RequestAction.RESTOCK): RequestStatus.PENDING_STORE,
}

_PO_MOVES = {
    (POStatus.PENDING_ACCOUNT_MANAGER, POAction.APPROVE): POStatus.APPROVED,
    (POStatus.PENDING_ACCOUNT_MANAGER, POAction.REJECT): POStatus.REJECTED,
    (POStatus.APPROVED, POAction.RECEIVE): POStatus.RECEIVED,
}


def request_transition(status: RequestStatus, action: RequestAction, department: str) -> RequestStatus:
    if status in _REQUEST_TERMINAL:
        raise TransitionError(f"Request is already {status.value}")

    if status == RequestStatus.PENDING_ACCOUNT_MANAGER and action == RequestAction.APPROVE:
        if department == STORE_DEPARTMENT:
            return RequestStatus.FORWARDED_TO_PURCHASE
        return RequestStatus.PENDING_STORE

    nxt = _REQUEST_MOVES.get((status, action))
    if nxt is None:
        raise TransitionError(f"Cannot {action.value.lower()} a request that is {status.value}")
    return nxt


def po_transition(status: POStatus, action: POAction) -> POStatus:
    if status in _PO_TERMINAL:
        raise TransitionError(f"Purchase order is already {status.value}")
    nxt = _PO_MOVES.get((status, action))
    if nxt is None:
        raise TransitionError(f"Cannot {action.value.lower()} a purchase order that is {status.value}")
    return nxt
