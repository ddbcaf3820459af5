from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Vendor
from .repository import VendorRepository


class MySQLVendorRepository(VendorRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_vendor(r: dict) -> Vendor:
        return Vendor(
            id=int(r["id"]),
            name=r["name"],
            contact_person=r["contact_person"],
            phone=r["phone"],
            address=r["address"],
            email=r.get("email"),
        )

    def get(self, vendor_id: int) -> Optional[Vendor]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id, name, contact_person, phone, email, address FROM vendors WHERE id=%s",
                (int(vendor_id),),
            )
            r = fetchone(cur)
            return self._to_vendor(r) if r else None

    def list_all(self) -> Sequence[Vendor]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, name, contact_person, phone, email, address FROM vendors ORDER BY name")
            return [self._to_vendor(r) for r in fetchall(cur)]

    def create(self, *, name: str, contact_person: str, phone: str, address: str, email: Optional[str]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO vendors(name, contact_person, phone, email, address) VALUES (%s,%s,%s,%s,%s)",
                (name, contact_person, phone, email, address),
            )
            return int(cur.lastrowid)

    def update(self, vendor: Vendor) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE vendors SET name=%s, contact_person=%s, phone=%s, email=%s, address=%s WHERE id=%s",
                (vendor.name, vendor.contact_person, vendor.phone, vendor.email, vendor.address, int(vendor.id)),
            )
            return True

    def delete(self, vendor_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM vendors WHERE id=%s", (int(vendor_id),))
            return cur.rowcount > 0
