from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from decimal import Decimal

import pytest

from src.masbot_erp.masbot_erp.access.model import Identity
from src.masbot_erp.masbot_erp.access.service import AccessControl
from src.masbot_erp.masbot_erp.core.enums import ApprovalAction, POStatus, RequestStatus, Role
from src.masbot_erp.masbot_erp.core.exceptions import AuthorizationError, TransitionError, ValidationError
from src.masbot_erp.masbot_erp.inventory.model import InventoryItem
from src.masbot_erp.masbot_erp.supply_chain.model import (
    PurchaseOrder,
    RequestItem,
    SupplyChainRequest,
    Vendor,
    po_number_for,
)
from src.masbot_erp.masbot_erp.supply_chain.service import SupplyChainService


class NoPermissions:
    def get_for_user(self, email):
        return {}

    def replace_for_user(self, email, permissions):
        pass

    def list_all(self):
        return {}


class FakeInventory:
    def __init__(self, items):
        self.items = {i.id: i for i in items}

    def get_many(self, item_ids):
        return {i: self.items[i] for i in item_ids if i in self.items}

    def apply(self, moves):
        for m in moves:
            item = self.items[m.inventory_id]
            self.items[item.id] = replace(item, quantity=item.quantity + m.delta)


class FakeSupplyChainRepo:
    def __init__(self, inventory: FakeInventory):
        self._inventory = inventory
        self.requests: dict[int, SupplyChainRequest] = {}
        self.pos: dict[int, PurchaseOrder] = {}

    def get_request(self, request_id):
        return self.requests.get(int(request_id))

    def create_request(self, *, requester_name, requester_email, department, date, items, purpose):
        rid = len(self.requests) + 1
        self.requests[rid] = SupplyChainRequest(
            id=rid,
            requester_name=requester_name,
            requester_email=requester_email,
            department=department,
            date=date,
            items=tuple(items),
            purpose=purpose,
            status=RequestStatus.PENDING_ACCOUNT_MANAGER,
        )
        return rid

    def list_requests(self, *, statuses=None, requester_email=None):
        rows = list(self.requests.values())
        if statuses is not None:
            rows = [r for r in rows if r.status in statuses]
        if requester_email is not None:
            rows = [r for r in rows if r.requester_email == requester_email]
        return rows

    def _move_request(self, request_id, expected, new_status, **changes):
        req = self.requests.get(int(request_id))
        if not req or req.status != expected:
            return False
        self.requests[req.id] = replace(req, status=new_status, **changes)
        return True

    def set_request_status(self, *, request_id, expected, new_status, approval_date=None, rejection_reason=None):
        return self._move_request(
            request_id, expected, new_status, approval_date=approval_date, rejection_reason=rejection_reason
        )

    def issue_request(self, *, request_id, expected, issued_date, moves):
        if not self._move_request(request_id, expected, RequestStatus.ISSUED, issued_date=issued_date):
            return False
        self._inventory.apply(moves)
        return True

    def get_po(self, po_id):
        return self.pos.get(int(po_id))

    def list_pos(self, *, statuses=None):
        rows = list(self.pos.values())
        if statuses is not None:
            rows = [p for p in rows if p.status in statuses]
        return rows

    def create_po(self, *, vendor_id, vendor_name, date, items, total_amount, generated_by,
                  original_request_id, request_expected=None, request_new_status=None):
        if original_request_id is not None:
            if not self._move_request(original_request_id, request_expected, request_new_status):
                return 0
        pid = max(self.pos, default=0) + 1
        self.pos[pid] = PurchaseOrder(
            id=pid,
            po_number=po_number_for(pid),
            vendor_id=vendor_id,
            vendor_name=vendor_name,
            date=date,
            items=tuple(items),
            total_amount=total_amount,
            status=POStatus.PENDING_ACCOUNT_MANAGER,
            generated_by=generated_by,
            original_request_id=original_request_id,
        )
        return pid

    def set_po_status(self, *, po_id, expected, new_status, approved_date=None):
        po = self.pos.get(int(po_id))
        if not po or po.status != expected:
            return False
        self.pos[po.id] = replace(po, status=new_status, approved_date=approved_date)
        return True

    def receive_po(self, *, po_id, expected, grn_number, grn_remarks, grn_date, moves,
                   request_id, request_expected, request_new_status):
        po = self.pos.get(int(po_id))
        if not po or po.status != expected:
            return False
        self.pos[po.id] = replace(po, status=POStatus.RECEIVED, grn_number=grn_number,
                                  grn_remarks=grn_remarks, grn_date=grn_date)
        self._inventory.apply(moves)
        if request_id is not None:
            self._move_request(request_id, request_expected, request_new_status)
        return True

    def update_po(self, *, po_id, expected, vendor_id, vendor_name, total_amount, items):
        po = self.pos.get(int(po_id))
        if not po or po.status != expected:
            return False
        self.pos[po.id] = replace(po, vendor_id=vendor_id, vendor_name=vendor_name,
                                  total_amount=total_amount, items=tuple(items))
        return True

    def delete_po(self, *, po_id, expected):
        po = self.pos.get(int(po_id))
        if not po or po.status != expected:
            return False
        del self.pos[po.id]
        return True


class FakeVendors:
    def __init__(self):
        self.rows = {1: Vendor(id=1, name="Metro Cash & Carry", contact_person="Desk", phone="042", address="Lahore")}

    def get(self, vendor_id):
        return self.rows.get(int(vendor_id))

    def list_all(self):
        return list(self.rows.values())


def _stock(item_id, name, qty, unit="kg"):
    return InventoryItem(id=item_id, type="Kitchen", model=name, quantity=Decimal(qty), unit=unit)


@pytest.fixture
def inventory():
    return FakeInventory([_stock(1, "Flour", "25.000"), _stock(2, "Sugar", "10.000"), _stock(3, "Eggs", "100.000", "pieces")])


@pytest.fixture
def repo(inventory):
    return FakeSupplyChainRepo(inventory)


@pytest.fixture
def service(repo, inventory):
    return SupplyChainService(
        repo, FakeVendors(), inventory, AccessControl(NoPermissions()), clock=lambda: datetime(2024, 3, 15, 10, 30)
    )


@pytest.fixture
def chef():
    return Identity(email="ali@masbot.test", role=Role.EMPLOYEE, employee_id=1, full_name="Ali Khan", department="Kitchen")


def _three_items():
    return [
        {"inventory_id": 1, "name": "Flour", "quantity_requested": "2.5", "unit": "kg"},
        {"inventory_id": 2, "name": "Sugar", "quantity_requested": 1, "unit": "kg"},
        {"inventory_id": 3, "name": "Eggs", "quantity_requested": "12", "unit": "pieces"},
    ]


def test_approve_then_issue_reduces_each_item_stock(service, repo, inventory, chef, super_admin):
    rid = service.create_request(actor=chef, items=_three_items(), purpose="Cake")
    assert repo.get_request(rid).status == RequestStatus.PENDING_ACCOUNT_MANAGER

    assert service.act_on_request(request_id=rid, action=ApprovalAction.APPROVE, actor=super_admin) == RequestStatus.PENDING_STORE
    service.issue_request(request_id=rid, actor=super_admin)

    assert repo.get_request(rid).status == RequestStatus.ISSUED
    assert inventory.items[1].quantity == Decimal("22.500")
    assert inventory.items[2].quantity == Decimal("9.000")
    assert inventory.items[3].quantity == Decimal("88.000")


def test_issue_is_blocked_when_stock_is_short(service, repo, inventory, chef, super_admin):
    items = [{"inventory_id": 2, "name": "Sugar", "quantity_requested": "10.5", "unit": "kg"}]
    rid = service.create_request(actor=chef, items=items, purpose="Syrup")
    service.act_on_request(request_id=rid, action=ApprovalAction.APPROVE, actor=super_admin)

    with pytest.raises(ValidationError, match="Insufficient stock for Sugar"):
        service.issue_request(request_id=rid, actor=super_admin)
    assert repo.get_request(rid).status == RequestStatus.PENDING_STORE
    assert inventory.items[2].quantity == Decimal("10.000")


def test_store_department_requests_go_straight_to_purchase(service, repo, super_admin):
    store = Identity(email="store@masbot.test", role=Role.EMPLOYEE, department="Store")
    rid = service.create_request(actor=store, items=_three_items()[:1], purpose="Restock")

    status = service.act_on_request(request_id=rid, action=ApprovalAction.APPROVE, actor=super_admin)

    assert status == RequestStatus.FORWARDED_TO_PURCHASE


def test_reject_needs_reason_and_is_terminal(service, chef, super_admin):
    rid = service.create_request(actor=chef, items=_three_items(), purpose="Cake")

    with pytest.raises(ValidationError):
        service.act_on_request(request_id=rid, action=ApprovalAction.REJECT, actor=super_admin)
    status = service.act_on_request(request_id=rid, action=ApprovalAction.REJECT, actor=super_admin, reason="Budget")
    assert status == RequestStatus.REJECTED

    with pytest.raises(TransitionError):
        service.act_on_request(request_id=rid, action=ApprovalAction.APPROVE, actor=super_admin)
    with pytest.raises(TransitionError):
        service.issue_request(request_id=rid, actor=super_admin)


def test_empty_cart_and_missing_purpose(service, chef):
    with pytest.raises(ValidationError, match="add items"):
        service.create_request(actor=chef, items=[], purpose="Cake")
    with pytest.raises(ValidationError, match="purpose"):
        service.create_request(actor=chef, items=_three_items(), purpose=" ")


def test_unprivileged_actor_cannot_approve(service, chef):
    rid = service.create_request(actor=chef, items=_three_items(), purpose="Cake")

    with pytest.raises(AuthorizationError):
        service.act_on_request(request_id=rid, action=ApprovalAction.APPROVE, actor=chef)


def test_purchase_path_restocks_and_returns_request_to_store(service, repo, inventory, chef, super_admin):
    rid = service.create_request(actor=chef, items=_three_items()[:2], purpose="Cake")
    service.act_on_request(request_id=rid, action=ApprovalAction.APPROVE, actor=super_admin)
    service.forward_to_purchase(request_id=rid, actor=super_admin)

    po_id = service.create_purchase_order(request_id=rid, vendor_id=1, total_amount="1000", actor=super_admin)
    po = repo.get_po(po_id)
    assert repo.get_request(rid).status == RequestStatus.CONVERTED_TO_PO
    assert po.vendor_name == "Metro Cash & Carry"
    assert sum(i.total_price for i in po.items) == Decimal("1000.00")

    with pytest.raises(TransitionError):
        service.receive_grn(po_id=po_id, grn_number="GRN-1", remarks="ok", actor=super_admin)

    assert service.po_action(po_id=po_id, action=ApprovalAction.APPROVE, actor=super_admin) == POStatus.APPROVED
    service.receive_grn(po_id=po_id, grn_number="GRN-1", remarks="All received", actor=super_admin)

    assert repo.get_po(po_id).status == POStatus.RECEIVED
    assert repo.get_request(rid).status == RequestStatus.PENDING_STORE
    assert inventory.items[1].quantity == Decimal("27.500")
    assert inventory.items[2].quantity == Decimal("11.000")

    for action in ApprovalAction:
        with pytest.raises(TransitionError):
            service.po_action(po_id=po_id, action=action, actor=super_admin)


def test_only_pending_purchase_orders_can_be_edited(service, repo, chef, super_admin):
    rid = service.create_request(actor=chef, items=_three_items(), purpose="Cake")
    service.act_on_request(request_id=rid, action=ApprovalAction.APPROVE, actor=super_admin)
    service.forward_to_purchase(request_id=rid, actor=super_admin)
    po_id = service.create_purchase_order(request_id=rid, vendor_id=1, total_amount="300", actor=super_admin)

    service.update_purchase_order(po_id=po_id, vendor_id=1, total_amount="450", actor=super_admin)
    assert repo.get_po(po_id).total_amount == Decimal("450.00")

    service.po_action(po_id=po_id, action=ApprovalAction.REJECT, actor=super_admin)
    with pytest.raises(TransitionError):
        service.update_purchase_order(po_id=po_id, vendor_id=1, total_amount="500", actor=super_admin)
    with pytest.raises(TransitionError):
        service.delete_purchase_order(po_id=po_id, actor=super_admin)


def test_request_item_quantities_are_fixed_point(service, repo, chef):
    rid = service.create_request(
        actor=chef, items=[RequestItem(inventory_id=1, name="Flour", quantity_requested=0.1)], purpose="Roux"
    )

    assert repo.get_request(rid).items[0].quantity_requested == Decimal("0.100")


def test_purchase_orders_raised_at_the_same_instant_get_distinct_numbers(service, repo, chef, super_admin):
    po_ids = []
    for purpose in ("Cake", "Bread"):
        rid = service.create_request(actor=chef, items=_three_items()[:1], purpose=purpose)
        service.act_on_request(request_id=rid, action=ApprovalAction.APPROVE, actor=super_admin)
        service.forward_to_purchase(request_id=rid, actor=super_admin)
        po_ids.append(service.create_purchase_order(request_id=rid, vendor_id=1, total_amount="100", actor=super_admin))

    numbers = [repo.get_po(pid).po_number for pid in po_ids]
    assert numbers == ["PO-000001", "PO-000002"]
    assert repo.get_po(po_ids[0]).date == repo.get_po(po_ids[1]).date
