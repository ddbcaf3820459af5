from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional, Tuple

from ..core.enums import POStatus, RequestStatus


@dataclass(frozen=True)
class RequestItem:
    inventory_id: Optional[int]
    name: str
    quantity_requested: Decimal
    unit: str = "units"


@dataclass(frozen=True)
class SupplyChainRequest:
    id: int
    requester_name: str
    requester_email: str
    department: str
    date: datetime
    items: Tuple[RequestItem, ...]
    purpose: str
    status: RequestStatus
    approval_date: Optional[datetime] = None
    issued_date: Optional[datetime] = None
    rejection_reason: Optional[str] = None


@dataclass(frozen=True)
class POItem:
    item_name: str
    quantity: Decimal
    unit: str
    unit_price: Decimal
    total_price: Decimal
    inventory_id: Optional[int] = None


@dataclass(frozen=True)
class PurchaseOrder:
    id: int
    po_number: str
    vendor_id: int
    vendor_name: str
    date: datetime
    items: Tuple[POItem, ...]
    total_amount: Decimal
    status: POStatus
    generated_by: str
    original_request_id: Optional[int] = None
    approved_date: Optional[datetime] = None
    grn_date: Optional[datetime] = None
    grn_number: Optional[str] = None
    grn_remarks: Optional[str] = None


@dataclass(frozen=True)
class Vendor:
    id: int
    name: str
    contact_person: str
    phone: str
    address: str
    email: Optional[str] = None


@dataclass(frozen=True)
class StockMove:
    """Signed quantity change for one inventory row."""

    inventory_id: int
    delta: Decimal


def po_number_for(po_id: int) -> str:
    return f"PO-{po_id:06d}"
