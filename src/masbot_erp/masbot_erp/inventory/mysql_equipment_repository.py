from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import MRFStatus, TonerStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json
from .model import MRF, Lab, LabSystem, Toner
from .repository import LabRepository, MRFRepository, TonerRepository


class MySQLTonerRepository(TonerRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Toner]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, model, compatible_printers, quantity, status FROM toners ORDER BY model, status")
            return [
                Toner(
                    id=int(r["id"]),
                    model=r["model"],
                    compatible_printers=tuple(load_json(r.get("compatible_printers"), [])),
                    quantity=int(r["quantity"]),
                    status=TonerStatus(r["status"]),
                )
                for r in fetchall(cur)
            ]

    def create(self, *, model: str, compatible_printers: Sequence[str], quantity: int, status: TonerStatus) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO toners(model, compatible_printers, quantity, status) VALUES (%s,%s,%s,%s)",
                (model, dump_json(list(compatible_printers)), int(quantity), status.value),
            )
            return int(cur.lastrowid)

    def set_quantity(self, toner_id: int, quantity: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE toners SET quantity=%s WHERE id=%s", (int(quantity), int(toner_id)))
            return True

    def set_printers(self, model: str, compatible_printers: Sequence[str]) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE toners SET compatible_printers=%s WHERE model=%s",
                (dump_json(list(compatible_printers)), model),
            )

    def move_unit(self, *, from_id: int, to_id: Optional[int], model: str, to_status: TonerStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE toners SET quantity = quantity - 1 WHERE id=%s AND quantity > 0", (int(from_id),))
            if cur.rowcount == 0:
                return False
            if to_id is not None:
                cur.execute("UPDATE toners SET quantity = quantity + 1 WHERE id=%s", (int(to_id),))
            else:
                cur.execute("SELECT compatible_printers FROM toners WHERE id=%s", (int(from_id),))
                r = fetchone(cur)
                cur.execute(
                    "INSERT INTO toners(model, compatible_printers, quantity, status) VALUES (%s,%s,1,%s)",
                    (model, r["compatible_printers"] if r else "[]", to_status.value),
                )
            return True

    def delete_model(self, model: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM toners WHERE model=%s", (model,))
            return int(cur.rowcount)


class MySQLLabRepository(LabRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    _SYSTEM_FIELDS = (
        "serial_number", "system_model", "lcd_model", "lcd_inches", "cpu", "ram",
        "storage", "gpu", "keyboard", "mouse", "network_device",
    )

    def _to_system(self, r: dict) -> LabSystem:
        return LabSystem(
            id=int(r["id"]),
            lab_id=int(r["lab_id"]),
            **{f: r.get(f) or "" for f in self._SYSTEM_FIELDS},
        )

    def _load(self, where: str, params: tuple) -> list[Lab]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT id, name FROM labs WHERE {where} ORDER BY name", params)
            labs = fetchall(cur)
            cur.execute(
                f"SELECT id, lab_id, {', '.join(self._SYSTEM_FIELDS)} FROM lab_systems ORDER BY lab_id, id"
            )
            systems: dict[int, list[LabSystem]] = {}
            for r in fetchall(cur):
                systems.setdefault(int(r["lab_id"]), []).append(self._to_system(r))
            return [
                Lab(id=int(r["id"]), name=r["name"], systems=tuple(systems.get(int(r["id"]), [])))
                for r in labs
            ]

    def list_all(self) -> Sequence[Lab]:
        return self._load("1=1", ())

    def get(self, lab_id: int) -> Optional[Lab]:
        found = self._load("id=%s", (int(lab_id),))
        return found[0] if found else None

    def create_lab(self, name: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("INSERT INTO labs(name) VALUES (%s)", (name,))
            return int(cur.lastrowid)

    def add_system(self, system: LabSystem) -> int:
        cols = ", ".join(("lab_id",) + self._SYSTEM_FIELDS)
        placeholders = ",".join(["%s"] * (len(self._SYSTEM_FIELDS) + 1))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"INSERT INTO lab_systems({cols}) VALUES ({placeholders})",
                (int(system.lab_id),) + tuple(getattr(system, f) for f in self._SYSTEM_FIELDS),
            )
            return int(cur.lastrowid)

    def update_system(self, system: LabSystem) -> bool:
        assignments = ", ".join(f"{f}=%s" for f in self._SYSTEM_FIELDS)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE lab_systems SET {assignments} WHERE id=%s AND lab_id=%s",
                tuple(getattr(system, f) for f in self._SYSTEM_FIELDS) + (int(system.id), int(system.lab_id)),
            )
            return True

    def delete_system(self, *, lab_id: int, system_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM lab_systems WHERE id=%s AND lab_id=%s", (int(system_id), int(lab_id)))
            return cur.rowcount > 0


class MySQLMRFRepository(MRFRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[MRF]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, mrf_number, demand_number, description, mrf_date, status FROM mrfs")
            return [
                MRF(
                    id=int(r["id"]),
                    mrf_number=r["mrf_number"],
                    demand_number=r["demand_number"],
                    description=r["description"],
                    date=r["mrf_date"],
                    status=MRFStatus(r["status"]),
                )
                for r in fetchall(cur)
            ]

    def create(self, mrf: MRF) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO mrfs(mrf_number, demand_number, description, mrf_date, status) VALUES (%s,%s,%s,%s,%s)",
                (mrf.mrf_number, mrf.demand_number, mrf.description, mrf.date, mrf.status.value),
            )
            return int(cur.lastrowid)

    def update(self, mrf: MRF) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id FROM mrfs WHERE id=%s", (int(mrf.id),))
            if not fetchone(cur):
                return False
            cur.execute(
                """
                UPDATE mrfs SET mrf_number=%s, demand_number=%s, description=%s, mrf_date=%s, status=%s
                WHERE id=%s
                """,
                (mrf.mrf_number, mrf.demand_number, mrf.description, mrf.date, mrf.status.value, int(mrf.id)),
            )
            return True

    def delete(self, mrf_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM mrfs WHERE id=%s", (int(mrf_id),))
            return cur.rowcount > 0

    def set_status(self, mrf_id: int, status: MRFStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id FROM mrfs WHERE id=%s", (int(mrf_id),))
            if not fetchone(cur):
                return False
            cur.execute("UPDATE mrfs SET status=%s WHERE id=%s", (status.value, int(mrf_id)))
            return True
