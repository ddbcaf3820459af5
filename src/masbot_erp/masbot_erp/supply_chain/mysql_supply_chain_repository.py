from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import POStatus, RequestStatus
from ..core.exceptions import ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, in_clause
from .model import POItem, PurchaseOrder, RequestItem, StockMove, SupplyChainRequest, po_number_for
from .repository import SupplyChainRepository

_REQUEST_COLUMNS = """
    id, requester_name, requester_email, department, request_date, purpose,
    status, approval_date, issued_date, rejection_reason
"""
_PO_COLUMNS = """
    id, po_number, original_request_id, vendor_id, vendor_name, po_date, total_amount,
    status, generated_by, approved_date, grn_date, grn_number, grn_remarks
"""


def apply_stock_moves(cur, moves: Sequence[StockMove]) -> None:
    """Apply signed deltas; a decrement that would go negative aborts the transaction."""
    for m in moves:
        if m.delta < 0:
            cur.execute(
                "UPDATE inventory_items SET quantity = quantity + %s WHERE id=%s AND quantity >= %s",
                (str(m.delta), int(m.inventory_id), str(-m.delta)),
            )
        else:
            cur.execute(
                "UPDATE inventory_items SET quantity = quantity + %s WHERE id=%s",
                (str(m.delta), int(m.inventory_id)),
            )
        if cur.rowcount == 0:
            raise ValidationError(f"Stock update failed for inventory item {m.inventory_id}")


class MySQLSupplyChainRepository(SupplyChainRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    # -------- requisitions --------
    @staticmethod
    def _load_request_items(cur, ids: list[int]) -> dict[int, tuple[RequestItem, ...]]:
        if not ids:
            return {}
        cur.execute(
            f"""
            SELECT request_id, inventory_id, name, quantity, unit
            FROM sc_request_items
            WHERE request_id IN ({in_clause(ids)})
            ORDER BY request_id, line_no
            """,
            tuple(ids),
        )
        out: dict[int, list[RequestItem]] = {}
        for r in fetchall(cur):
            out.setdefault(int(r["request_id"]), []).append(
                RequestItem(
                    inventory_id=int(r["inventory_id"]) if r.get("inventory_id") is not None else None,
                    name=r["name"],
                    quantity_requested=Decimal(str(r["quantity"])),
                    unit=r["unit"],
                )
            )
        return {k: tuple(v) for k, v in out.items()}

    def _select_requests(self, where: str, params: tuple) -> list[SupplyChainRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_REQUEST_COLUMNS} FROM sc_requests WHERE {where} ORDER BY request_date DESC, id DESC",
                params,
            )
            rows = fetchall(cur)
            items = self._load_request_items(cur, [int(r["id"]) for r in rows])
            return [
                SupplyChainRequest(
                    id=int(r["id"]),
                    requester_name=r["requester_name"],
                    requester_email=r["requester_email"],
                    department=r["department"],
                    date=r["request_date"],
                    items=items.get(int(r["id"]), ()),
                    purpose=r["purpose"],
                    status=RequestStatus(r["status"]),
                    approval_date=r.get("approval_date"),
                    issued_date=r.get("issued_date"),
                    rejection_reason=r.get("rejection_reason"),
                )
                for r in rows
            ]

    def get_request(self, request_id: int) -> Optional[SupplyChainRequest]:
        found = self._select_requests("id=%s", (int(request_id),))
        return found[0] if found else None

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO sc_requests(requester_name, requester_email, department, request_date, purpose, status)
                VALUES (%s,%s,%s,%s,%s,%s)
                """,
                (
                    requester_name,
                    requester_email,
                    department,
                    date,
                    purpose,
                    RequestStatus.PENDING_ACCOUNT_MANAGER.value,
                ),
            )
            request_id = int(cur.lastrowid)
            for line_no, item in enumerate(items, start=1):
                cur.execute(
                    """
                    INSERT INTO sc_request_items(request_id, line_no, inventory_id, name, quantity, unit)
                    VALUES (%s,%s,%s,%s,%s,%s)
                    """,
                    (request_id, line_no, item.inventory_id, item.name, str(item.quantity_requested), item.unit),
                )
            return request_id

    def list_requests(
        self,
        *,
        statuses: Optional[Sequence[RequestStatus]] = None,
        requester_email: Optional[str] = None,
    ) -> Sequence[SupplyChainRequest]:
        clauses = ["1=1"]
        params: list[object] = []
        if statuses:
            values = [s.value for s in statuses]
            clauses.append(f"status IN ({in_clause(values)})")
            params.extend(values)
        if requester_email:
            clauses.append("requester_email=%s")
            params.append(requester_email)
        return self._select_requests(" AND ".join(clauses), tuple(params))

    def set_request_status(
        self,
        *,
        request_id: int,
        expected: RequestStatus,
        new_status: RequestStatus,
        approval_date: Optional[datetime] = None,
        rejection_reason: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE sc_requests
                SET status=%s,
                    approval_date=COALESCE(%s, approval_date),
                    rejection_reason=COALESCE(%s, rejection_reason)
                WHERE id=%s AND status=%s
                """,
                (new_status.value, approval_date, rejection_reason, int(request_id), expected.value),
            )
            return cur.rowcount > 0

    def issue_request(
        self,
        *,
        request_id: int,
        expected: RequestStatus,
        issued_date: datetime,
        moves: Sequence[StockMove],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE sc_requests SET status=%s, issued_date=%s WHERE id=%s AND status=%s",
                (RequestStatus.ISSUED.value, issued_date, int(request_id), expected.value),
            )
            if cur.rowcount == 0:
                return False
            apply_stock_moves(cur, moves)
            return True

    # -------- purchase orders --------
    @staticmethod
    def _load_po_items(cur, ids: list[int]) -> dict[int, tuple[POItem, ...]]:
        if not ids:
            return {}
        cur.execute(
            f"""
            SELECT po_id, item_name, quantity, unit, unit_price, total_price, inventory_id
            FROM po_items
            WHERE po_id IN ({in_clause(ids)})
            ORDER BY po_id, line_no
            """,
            tuple(ids),
        )
        out: dict[int, list[POItem]] = {}
        for r in fetchall(cur):
            out.setdefault(int(r["po_id"]), []).append(
                POItem(
                    item_name=r["item_name"],
                    quantity=Decimal(str(r["quantity"])),
                    unit=r["unit"],
                    unit_price=Decimal(str(r["unit_price"])),
                    total_price=Decimal(str(r["total_price"])),
                    inventory_id=int(r["inventory_id"]) if r.get("inventory_id") is not None else None,
                )
            )
        return {k: tuple(v) for k, v in out.items()}

    @staticmethod
    def _insert_po_items(cur, po_id: int, items: Sequence[POItem]) -> None:
        for line_no, item in enumerate(items, start=1):
            cur.execute(
                """
                INSERT INTO po_items(po_id, line_no, item_name, quantity, unit, unit_price, total_price, inventory_id)
                VALUES (%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    po_id,
                    line_no,
                    item.item_name,
                    str(item.quantity),
                    item.unit,
                    str(item.unit_price),
                    str(item.total_price),
                    item.inventory_id,
                ),
            )

    def _select_pos(self, where: str, params: tuple) -> list[PurchaseOrder]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_PO_COLUMNS} FROM purchase_orders WHERE {where} ORDER BY po_date DESC, id DESC", params)
            rows = fetchall(cur)
            items = self._load_po_items(cur, [int(r["id"]) for r in rows])
            return [
                PurchaseOrder(
                    id=int(r["id"]),
                    po_number=r["po_number"],
                    vendor_id=int(r["vendor_id"]),
                    vendor_name=r["vendor_name"],
                    date=r["po_date"],
                    items=items.get(int(r["id"]), ()),
                    total_amount=Decimal(str(r["total_amount"])),
                    status=POStatus(r["status"]),
                    generated_by=r["generated_by"],
                    original_request_id=(
                        int(r["original_request_id"]) if r.get("original_request_id") is not None else None
                    ),
                    approved_date=r.get("approved_date"),
                    grn_date=r.get("grn_date"),
                    grn_number=r.get("grn_number"),
                    grn_remarks=r.get("grn_remarks"),
                )
                for r in rows
            ]

    def get_po(self, po_id: int) -> Optional[PurchaseOrder]:
        found = self._select_pos("id=%s", (int(po_id),))
        return found[0] if found else None

    def list_pos(self, *, statuses: Optional[Sequence[POStatus]] = None) -> Sequence[PurchaseOrder]:
        if statuses:
            values = [s.value for s in statuses]
            return self._select_pos(f"status IN ({in_clause(values)})", tuple(values))
        return self._select_pos("1=1", ())

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
        with db_cursor(self._conn_factory) as (_, cur):
            if original_request_id is not None and request_expected is not None and request_new_status is not None:
                cur.execute(
                    "UPDATE sc_requests SET status=%s WHERE id=%s AND status=%s",
                    (request_new_status.value, int(original_request_id), request_expected.value),
                )
                if cur.rowcount == 0:
                    return 0

            cur.execute(
                """
                INSERT INTO purchase_orders(
                    original_request_id, vendor_id, vendor_name, po_date,
                    total_amount, status, generated_by
                )
                VALUES (%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    original_request_id,
                    int(vendor_id),
                    vendor_name,
                    date,
                    str(total_amount),
                    POStatus.PENDING_ACCOUNT_MANAGER.value,
                    generated_by,
                ),
            )
            po_id = int(cur.lastrowid)
            cur.execute("UPDATE purchase_orders SET po_number=%s WHERE id=%s", (po_number_for(po_id), po_id))
            self._insert_po_items(cur, po_id, items)
            return po_id

    def set_po_status(
        self,
        *,
        po_id: int,
        expected: POStatus,
        new_status: POStatus,
        approved_date: Optional[datetime] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE purchase_orders
                SET status=%s, approved_date=COALESCE(%s, approved_date)
                WHERE id=%s AND status=%s
                """,
                (new_status.value, approved_date, int(po_id), expected.value),
            )
            return cur.rowcount > 0

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE purchase_orders
                SET status=%s, grn_number=%s, grn_remarks=%s, grn_date=%s
                WHERE id=%s AND status=%s
                """,
                (POStatus.RECEIVED.value, grn_number, grn_remarks, grn_date, int(po_id), expected.value),
            )
            if cur.rowcount == 0:
                return False

            apply_stock_moves(cur, moves)

            if request_id is not None and request_expected is not None and request_new_status is not None:
                cur.execute(
                    "UPDATE sc_requests SET status=%s WHERE id=%s AND status=%s",
                    (request_new_status.value, int(request_id), request_expected.value),
                )
                if cur.rowcount == 0:
                    raise ValidationError("Linked request changed while receiving goods")
            return True

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE purchase_orders
                SET vendor_id=%s, vendor_name=%s, total_amount=%s
                WHERE id=%s AND status=%s
                """,
                (int(vendor_id), vendor_name, str(total_amount), int(po_id), expected.value),
            )
            if cur.rowcount == 0:
                return False
            cur.execute("DELETE FROM po_items WHERE po_id=%s", (int(po_id),))
            self._insert_po_items(cur, int(po_id), items)
            return True

    def delete_po(self, *, po_id: int, expected: POStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM purchase_orders WHERE id=%s AND status=%s", (int(po_id), expected.value))
            return cur.rowcount > 0
