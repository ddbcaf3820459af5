from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import AssetStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, in_clause, load_json
from .model import InventoryItem
from .repository import InventoryRepository

_COLUMNS = """
    id, item_code, item_name, type, sub_category, brand, model, serial_number, status,
    assigned_to, location, item_condition, quantity, unit, purchase_date, cost, vendor,
    issue_date, department, designation, specs, remarks
"""

_WRITE_FIELDS = (
    "item_code", "item_name", "type", "sub_category", "brand", "model", "serial_number", "status",
    "assigned_to", "location", "item_condition", "quantity", "unit", "purchase_date", "cost", "vendor",
    "issue_date", "department", "designation", "specs", "remarks",
)


def _values(item: InventoryItem) -> tuple:
    return (
        item.item_code,
        item.item_name,
        item.type,
        item.sub_category,
        item.brand,
        item.model,
        item.serial_number,
        item.status.value,
        item.assigned_to or "",
        item.location,
        item.condition,
        str(item.quantity),
        item.unit,
        item.purchase_date,
        str(item.cost) if item.cost is not None else None,
        item.vendor,
        item.issue_date,
        item.department,
        item.designation,
        dump_json(item.specs or {}),
        item.remarks,
    )


# db_cursor only rolls back on an exception, so a failed stock guard raises this.
class _InsufficientStock(Exception):
    pass


class MySQLInventoryRepository(InventoryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_item(r: dict) -> InventoryItem:
        return InventoryItem(
            id=int(r["id"]),
            type=r["type"],
            model=r["model"],
            status=AssetStatus(r["status"]),
            assigned_to=r.get("assigned_to") or "",
            item_code=r.get("item_code"),
            item_name=r.get("item_name"),
            sub_category=r.get("sub_category"),
            brand=r.get("brand"),
            serial_number=r.get("serial_number"),
            location=r.get("location"),
            condition=r.get("item_condition"),
            quantity=Decimal(str(r.get("quantity") or "0")),
            unit=r.get("unit"),
            purchase_date=r.get("purchase_date"),
            cost=Decimal(str(r["cost"])) if r.get("cost") is not None else None,
            vendor=r.get("vendor"),
            issue_date=r.get("issue_date"),
            department=r.get("department"),
            designation=r.get("designation"),
            specs=load_json(r.get("specs"), {}),
            remarks=r.get("remarks"),
        )

    def get(self, item_id: int) -> Optional[InventoryItem]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM inventory_items WHERE id=%s", (int(item_id),))
            r = fetchone(cur)
            return self._to_item(r) if r else None

    def get_many(self, item_ids: Sequence[int]) -> dict[int, InventoryItem]:
        ids = [int(i) for i in item_ids]
        if not ids:
            return {}
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM inventory_items WHERE id IN ({in_clause(ids)})", tuple(ids))
            return {int(r["id"]): self._to_item(r) for r in fetchall(cur)}

    def list(self, *, item_type: Optional[str] = None) -> Sequence[InventoryItem]:
        with db_cursor(self._conn_factory) as (_, cur):
            if item_type:
                cur.execute(f"SELECT {_COLUMNS} FROM inventory_items WHERE type=%s ORDER BY model", (item_type,))
            else:
                cur.execute(f"SELECT {_COLUMNS} FROM inventory_items ORDER BY type, model")
            return [self._to_item(r) for r in fetchall(cur)]

    def create_many(self, items: Sequence[InventoryItem]) -> list[int]:
        placeholders = ",".join(["%s"] * len(_WRITE_FIELDS))
        ids: list[int] = []
        with db_cursor(self._conn_factory) as (_, cur):
            for item in items:
                cur.execute(
                    f"INSERT INTO inventory_items({', '.join(_WRITE_FIELDS)}) VALUES ({placeholders})",
                    _values(item),
                )
                ids.append(int(cur.lastrowid))
        return ids

    def update(self, item: InventoryItem) -> bool:
        assignments = ", ".join(f"{f}=%s" for f in _WRITE_FIELDS)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE inventory_items SET {assignments} WHERE id=%s", _values(item) + (int(item.id),))
            return True

    def delete(self, item_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM inventory_items WHERE id=%s", (int(item_id),))
            return cur.rowcount > 0

    def apply_deltas(self, deltas: dict[int, Decimal]) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                for item_id, delta in sorted(deltas.items()):
                    cur.execute(
                        "UPDATE inventory_items SET quantity = quantity + %s WHERE id=%s AND quantity + %s >= 0",
                        (str(delta), int(item_id), str(delta)),
                    )
                    if cur.rowcount == 0:
                        raise _InsufficientStock()
        except _InsufficientStock:
            return False
        return True
