from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Callable, Iterable, Optional, Sequence, Union

from ..access.model import Identity
from ..access.service import AccessControl
from ..common.datetime_utils import now_local
from ..common.quantities import split_evenly, to_money, to_quantity
from ..common.validators import require_non_empty, require_positive
from ..core.enums import ApprovalAction, PermissionAction, POAction, POStatus, RequestAction, RequestStatus
from ..core.exceptions import NotFoundError, TransitionError, ValidationError
from ..inventory.repository import InventoryRepository
from .model import POItem, PurchaseOrder, RequestItem, StockMove, SupplyChainRequest, Vendor, po_number_for
from .repository import SupplyChainRepository, VendorRepository
from .workflow import po_transition, request_transition

logger = logging.getLogger(__name__)

MODULE = "supply_chain"
APPROVALS_PAGE = "sc_approvals"
STORE_PAGE = "sc_store"
PURCHASE_PAGE = "sc_purchase"
DEFAULT_REQUEST_DEPARTMENT = "Kitchen"


class SupplyChainService:
    """Use case: requisitions from request to issue, and the purchase path."""

    def __init__(
        self,
        repo: SupplyChainRepository,
        vendors: VendorRepository,
        inventory: InventoryRepository,
        access: AccessControl,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._repo = repo
        self._vendors = vendors
        self._inventory = inventory
        self._access = access
        self._clock = clock

    # -------- helpers --------
    def _require(self, actor: Identity, page: str) -> None:
        self._access.require(actor, MODULE, page, PermissionAction.UPDATE)

    def _get_request(self, request_id: int) -> SupplyChainRequest:
        req = self._repo.get_request(int(request_id))
        if not req:
            raise NotFoundError("Request not found")
        return req

    def _get_po(self, po_id: int) -> PurchaseOrder:
        po = self._repo.get_po(int(po_id))
        if not po:
            raise NotFoundError("Purchase order not found")
        return po

    def _get_vendor(self, vendor_id: int) -> Vendor:
        vendor = self._vendors.get(int(vendor_id))
        if not vendor:
            raise NotFoundError("Vendor not found")
        return vendor

    @staticmethod
    def _coerce_item(raw: Union[RequestItem, dict]) -> RequestItem:
        if isinstance(raw, RequestItem):
            item = raw
        else:
            inv = raw.get("inventory_id")
            item = RequestItem(
                inventory_id=int(inv) if inv not in (None, "") else None,
                name=str(raw.get("name") or "").strip(),
                quantity_requested=raw.get("quantity_requested"),
                unit=str(raw.get("unit") or "units"),
            )
        name = require_non_empty(item.name, "Item name")
        qty = require_positive(to_quantity(item.quantity_requested, f"Quantity for {name}"), f"Quantity for {name}")
        return RequestItem(inventory_id=item.inventory_id, name=name, quantity_requested=qty, unit=item.unit or "units")

    def _build_po_items(self, req: Optional[SupplyChainRequest], total: Decimal, existing: Sequence[POItem] = ()) -> list[POItem]:
        lines: list[tuple[str, Decimal, str, Optional[int]]]
        if req is not None:
            lines = [(i.name, i.quantity_requested, i.unit, i.inventory_id) for i in req.items]
        else:
            lines = [(i.item_name, i.quantity, i.unit, i.inventory_id) for i in existing]

        items = []
        for (name, qty, unit, inv_id), share in zip(lines, split_evenly(total, len(lines))):
            unit_price = to_money(share / qty) if qty > 0 else share
            items.append(
                POItem(item_name=name, quantity=qty, unit=unit, unit_price=unit_price, total_price=share, inventory_id=inv_id)
            )
        return items

    @staticmethod
    def _aggregate(pairs: Iterable[tuple[Optional[int], Decimal]]) -> dict[int, Decimal]:
        out: dict[int, Decimal] = {}
        for inv_id, qty in pairs:
            if inv_id is None:
                continue
            out[inv_id] = out.get(inv_id, Decimal("0")) + qty
        return out

    # -------- requisitions --------
    def create_request(
        self,
        *,
        actor: Identity,
        items: Sequence[Union[RequestItem, dict]],
        purpose: str,
        department: Optional[str] = None,
    ) -> int:
        if not items:
            raise ValidationError("Please add items to your request.")
        if not (purpose or "").strip():
            raise ValidationError("Please specify a purpose or recipe for this request.")
        cart = [self._coerce_item(i) for i in items]

        request_id = self._repo.create_request(
            requester_name=actor.display_name,
            requester_email=actor.email,
            department=department or actor.department or DEFAULT_REQUEST_DEPARTMENT,
            date=self._clock(),
            items=cart,
            purpose=purpose.strip(),
        )
        logger.info("Requisition %s created by %s (%d items)", request_id, actor.email, len(cart))
        return request_id

    def act_on_request(
        self,
        *,
        request_id: int,
        action: ApprovalAction,
        actor: Identity,
        reason: Optional[str] = None,
    ) -> RequestStatus:
        self._require(actor, APPROVALS_PAGE)
        req = self._get_request(request_id)

        sc_action = RequestAction.APPROVE if action == ApprovalAction.APPROVE else RequestAction.REJECT
        reason = (reason or "").strip() or None
        if sc_action == RequestAction.REJECT and not reason:
            raise ValidationError("Rejection reason is required")

        new_status = request_transition(req.status, sc_action, req.department)
        ok = self._repo.set_request_status(
            request_id=req.id,
            expected=req.status,
            new_status=new_status,
            approval_date=self._clock(),
            rejection_reason=reason,
        )
        if not ok:
            raise TransitionError("Request was already processed by someone else")
        logger.info("Requisition %s: %s -> %s by %s", req.id, req.status.value, new_status.value, actor.email)
        return new_status

    def issue_request(self, *, request_id: int, actor: Identity) -> None:
        self._require(actor, STORE_PAGE)
        req = self._get_request(request_id)
        request_transition(req.status, RequestAction.ISSUE, req.department)

        needed = self._aggregate((i.inventory_id, i.quantity_requested) for i in req.items)
        stock = self._inventory.get_many(list(needed))
        for inv_id, qty in needed.items():
            item = stock.get(inv_id)
            if item is None:
                raise ValidationError(f"Inventory item {inv_id} no longer exists")
            if item.quantity < qty:
                logger.warning("Issue of requisition %s blocked: %s short", req.id, item.display_name)
                unit = f" {item.unit}" if item.unit else ""
                raise ValidationError(
                    f"Insufficient stock for {item.display_name}: {item.quantity}{unit} available, {qty} requested"
                )

        moves = [StockMove(inventory_id=inv_id, delta=-qty) for inv_id, qty in sorted(needed.items())]
        if not self._repo.issue_request(request_id=req.id, expected=req.status, issued_date=self._clock(), moves=moves):
            raise TransitionError("Request was already processed by someone else")
        logger.info("Requisition %s issued by %s (%d stock rows)", req.id, actor.email, len(moves))

    def forward_to_purchase(self, *, request_id: int, actor: Identity) -> None:
        self._require(actor, STORE_PAGE)
        req = self._get_request(request_id)
        new_status = request_transition(req.status, RequestAction.FORWARD, req.department)
        if not self._repo.set_request_status(request_id=req.id, expected=req.status, new_status=new_status):
            raise TransitionError("Request was already processed by someone else")
        logger.info("Requisition %s forwarded to purchase by %s", req.id, actor.email)

    # -------- purchase orders --------
    def create_purchase_order(self, *, request_id: int, vendor_id: int, total_amount, actor: Identity) -> int:
        self._require(actor, PURCHASE_PAGE)
        req = self._get_request(request_id)
        vendor = self._get_vendor(vendor_id)
        total = require_positive(to_money(total_amount, "Total amount"), "Total amount")
        new_status = request_transition(req.status, RequestAction.CONVERT, req.department)

        now = self._clock()
        po_id = self._repo.create_po(
            vendor_id=vendor.id,
            vendor_name=vendor.name,
            date=now,
            items=self._build_po_items(req, total),
            total_amount=total,
            generated_by=actor.email,
            original_request_id=req.id,
            request_expected=req.status,
            request_new_status=new_status,
        )
        if not po_id:
            raise TransitionError("Request was already processed by someone else")
        logger.info("%s created for requisition %s (%s, %s)", po_number_for(po_id), req.id, vendor.name, total)
        return po_id

    def po_action(self, *, po_id: int, action: ApprovalAction, actor: Identity) -> POStatus:
        self._require(actor, APPROVALS_PAGE)
        po = self._get_po(po_id)
        new_status = po_transition(po.status, POAction.APPROVE if action == ApprovalAction.APPROVE else POAction.REJECT)
        approved = self._clock() if new_status == POStatus.APPROVED else None
        if not self._repo.set_po_status(po_id=po.id, expected=po.status, new_status=new_status, approved_date=approved):
            raise TransitionError("Purchase order was already processed by someone else")
        logger.info("%s: %s -> %s by %s", po.po_number, po.status.value, new_status.value, actor.email)
        return new_status

    def receive_grn(self, *, po_id: int, grn_number: str, remarks: str, actor: Identity) -> None:
        self._require(actor, STORE_PAGE)
        grn_number = require_non_empty(grn_number, "GRN number")
        remarks = require_non_empty(remarks, "GRN remarks")
        po = self._get_po(po_id)
        po_transition(po.status, POAction.RECEIVE)

        req = self._repo.get_request(po.original_request_id) if po.original_request_id else None
        req_new = None
        if req is not None:
            req_new = request_transition(req.status, RequestAction.RESTOCK, req.department)

        received = self._aggregate((i.inventory_id, i.quantity) for i in po.items)
        moves = [StockMove(inventory_id=inv_id, delta=qty) for inv_id, qty in sorted(received.items())]
        ok = self._repo.receive_po(
            po_id=po.id,
            expected=po.status,
            grn_number=grn_number,
            grn_remarks=remarks,
            grn_date=self._clock(),
            moves=moves,
            request_id=req.id if req else None,
            request_expected=req.status if req else None,
            request_new_status=req_new,
        )
        if not ok:
            raise TransitionError("Purchase order was already processed by someone else")
        logger.info("GRN %s recorded for %s (%d stock rows)", grn_number, po.po_number, len(moves))

    def update_purchase_order(self, *, po_id: int, vendor_id: int, total_amount, actor: Identity) -> None:
        self._require(actor, PURCHASE_PAGE)
        po = self._get_po(po_id)
        if po.status != POStatus.PENDING_ACCOUNT_MANAGER:
            raise TransitionError("Only pending purchase orders can be edited")
        vendor = self._get_vendor(vendor_id)
        total = require_positive(to_money(total_amount, "Total amount"), "Total amount")
        ok = self._repo.update_po(
            po_id=po.id,
            expected=po.status,
            vendor_id=vendor.id,
            vendor_name=vendor.name,
            total_amount=total,
            items=self._build_po_items(None, total, po.items),
        )
        if not ok:
            raise TransitionError("Purchase order was already processed by someone else")

    def delete_purchase_order(self, *, po_id: int, actor: Identity) -> None:
        self._require(actor, PURCHASE_PAGE)
        po = self._get_po(po_id)
        if po.status != POStatus.PENDING_ACCOUNT_MANAGER:
            raise TransitionError("Only pending purchase orders can be deleted")
        if not self._repo.delete_po(po_id=po.id, expected=po.status):
            raise TransitionError("Purchase order was already processed by someone else")
        logger.info("%s deleted by %s", po.po_number, actor.email)

    # -------- queues --------
    def pending_approvals(self) -> dict:
        return {
            "requests": self._repo.list_requests(statuses=[RequestStatus.PENDING_ACCOUNT_MANAGER]),
            "purchase_orders": self._repo.list_pos(statuses=[POStatus.PENDING_ACCOUNT_MANAGER]),
        }

    def pending_store(self) -> Sequence[SupplyChainRequest]:
        return self._repo.list_requests(statuses=[RequestStatus.PENDING_STORE])

    def to_purchase(self) -> Sequence[SupplyChainRequest]:
        return self._repo.list_requests(statuses=[RequestStatus.FORWARDED_TO_PURCHASE])

    def awaiting_grn(self) -> Sequence[PurchaseOrder]:
        return self._repo.list_pos(statuses=[POStatus.APPROVED])

    def purchase_orders(self) -> Sequence[PurchaseOrder]:
        return self._repo.list_pos()

    def my_requests(self, actor: Identity) -> Sequence[SupplyChainRequest]:
        if actor.is_super_admin:
            return self._repo.list_requests()
        return self._repo.list_requests(requester_email=actor.email)

    # -------- vendors --------
    def list_vendors(self) -> Sequence[Vendor]:
        return self._vendors.list_all()

    def add_vendor(self, *, name: str, contact_person: str, phone: str, address: str, email: Optional[str] = None) -> int:
        return self._vendors.create(
            name=require_non_empty(name, "Vendor name"),
            contact_person=require_non_empty(contact_person, "Contact person"),
            phone=require_non_empty(phone, "Phone"),
            address=require_non_empty(address, "Address"),
            email=(email or "").strip() or None,
        )

    def update_vendor(self, vendor: Vendor) -> None:
        self._get_vendor(vendor.id)
        require_non_empty(vendor.name, "Vendor name")
        if not self._vendors.update(vendor):
            raise ValidationError("Failed to update vendor")

    def delete_vendor(self, vendor_id: int) -> None:
        if not self._vendors.delete(int(vendor_id)):
            raise NotFoundError("Vendor not found")
