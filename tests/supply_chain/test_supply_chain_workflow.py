import pytest

from src.masbot_erp.masbot_erp.core.enums import POAction, POStatus, RequestAction, RequestStatus
from src.masbot_erp.masbot_erp.core.exceptions import TransitionError
from src.masbot_erp.masbot_erp.supply_chain.workflow import po_transition, request_transition


def test_request_happy_paths():
    assert request_transition(RequestStatus.PENDING_ACCOUNT_MANAGER, RequestAction.APPROVE, "Kitchen") == RequestStatus.PENDING_STORE
    assert request_transition(RequestStatus.PENDING_ACCOUNT_MANAGER, RequestAction.APPROVE, "Store") == RequestStatus.FORWARDED_TO_PURCHASE
    assert request_transition(RequestStatus.PENDING_STORE, RequestAction.FORWARD, "Kitchen") == RequestStatus.FORWARDED_TO_PURCHASE
    assert request_transition(RequestStatus.FORWARDED_TO_PURCHASE, RequestAction.CONVERT, "Kitchen") == RequestStatus.CONVERTED_TO_PO
    assert request_transition(RequestStatus.CONVERTED_TO_PO, RequestAction.RESTOCK, "Kitchen") == RequestStatus.PENDING_STORE


@pytest.mark.parametrize("status", [RequestStatus.ISSUED, RequestStatus.REJECTED])
def test_terminal_requests_never_move(status):
    for action in RequestAction:
        with pytest.raises(TransitionError):
            request_transition(status, action, "Kitchen")


def test_request_cannot_skip_approval():
    with pytest.raises(TransitionError):
        request_transition(RequestStatus.PENDING_ACCOUNT_MANAGER, RequestAction.ISSUE, "Kitchen")


@pytest.mark.parametrize("status", [POStatus.REJECTED, POStatus.RECEIVED])
def test_terminal_purchase_orders_never_move(status):
    for action in POAction:
        with pytest.raises(TransitionError):
            po_transition(status, action)


def test_po_must_be_approved_before_receipt():
    with pytest.raises(TransitionError):
        po_transition(POStatus.PENDING_ACCOUNT_MANAGER, POAction.RECEIVE)
    assert po_transition(POStatus.APPROVED, POAction.RECEIVE) == POStatus.RECEIVED
