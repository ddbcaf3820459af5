from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import POStatus, RequestStatus
from .model import POItem, PurchaseOrder, RequestItem, StockMove, SupplyChainRequest, Vendor


class SupplyChainRepository(Protocol):
    """Requisitions and purchase orders.

    Status writes take the status the caller saw (`expected`) and return False
    when the row has moved on. Methods that touch more than one table run as a
    single transaction.
    """

    # -------- requisitions --------
    def get_request(self, request_id: int) -> Optional[SupplyChainRequest]:
        raise NotImplementedError

    def create_request(
        self,
        *,
        requester_name: str,
        requester_email: str,
        department: str,
        date: datetime,
        items: Sequence[RequestItem],
        purpose: str,
    ) -> int:
        raise NotImplementedError

    def list_requests(
        self,
        *,
        statuses: Optional[Sequence[RequestStatus]] = None,
        requester_email: Optional[str] = None,
    ) -> Sequence[SupplyChainRequest]:
        raise NotImplementedError

    def set_request_status(
        self,
        *,
        request_id: int,
        expected: RequestStatus,
        new_status: RequestStatus,
        approval_date: Optional[datetime] = None,
        rejection_reason: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError

    def issue_request(
        self,
        *,
        request_id: int,
        expected: RequestStatus,
        issued_date: datetime,
        moves: Sequence[StockMove],
    ) -> bool:
        """Mark Issued and apply the (negative) stock moves together."""
        raise NotImplementedError

    # -------- purchase orders --------
    def get_po(self, po_id: int) -> Optional[PurchaseOrder]:
        raise NotImplementedError

    def list_pos(self, *, statuses: Optional[Sequence[POStatus]] = None) -> Sequence[PurchaseOrder]:
        raise NotImplementedError

    def create_po(
        self,
        *,
        vendor_id: int,
        vendor_name: str,
        date: datetime,
        items: Sequence[POItem],
        total_amount: Decimal,
        generated_by: str,
        original_request_id: Optional[int],
        request_expected: Optional[RequestStatus] = None,
        request_new_status: Optional[RequestStatus] = None,
    ) -> int:
        """Insert the PO numbered from its id; when linked, move the request in the same transaction.

        Returns 0 when the linked request is no longer at `request_expected`.
        """
        raise NotImplementedError

    def set_po_status(
        self,
        *,
        po_id: int,
        expected: POStatus,
        new_status: POStatus,
        approved_date: Optional[datetime] = None,
    ) -> bool:
        raise NotImplementedError

    def receive_po(
        self,
        *,
        po_id: int,
        expected: POStatus,
        grn_number: str,
        grn_remarks: str,
        grn_date: datetime,
        moves: Sequence[StockMove],
        request_id: Optional[int],
        request_expected: Optional[RequestStatus],
        request_new_status: Optional[RequestStatus],
    ) -> bool:
        """Mark Received, add stock and send the linked request back to Store."""
        raise NotImplementedError

    def update_po(
        self,
        *,
        po_id: int,
        expected: POStatus,
        vendor_id: int,
        vendor_name: str,
        total_amount: Decimal,
        items: Sequence[POItem],
    ) -> bool:
        raise NotImplementedError

    def delete_po(self, *, po_id: int, expected: POStatus) -> bool:
        raise NotImplementedError


class VendorRepository(Protocol):
    def get(self, vendor_id: int) -> Optional[Vendor]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Vendor]:
        raise NotImplementedError

    def create(self, *, name: str, contact_person: str, phone: str, address: str, email: Optional[str]) -> int:
        raise NotImplementedError

    def update(self, vendor: Vendor) -> bool:
        raise NotImplementedError

    def delete(self, vendor_id: int) -> bool:
        raise NotImplementedError
