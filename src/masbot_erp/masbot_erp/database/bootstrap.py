from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

import mysql.connector

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DBTarget:
    host: str
    port: int
    user: str
    password: str
    database: str


# Starter kitchen stock and vendors for a fresh install: (item_code, model, quantity, unit).
DEMO_KITCHEN_STOCK = [
    ("KIT-001", "Flour", "25", "kg"),
    ("KIT-002", "Sugar", "25", "kg"),
    ("KIT-003", "Salt", "10", "kg"),
    ("KIT-004", "Butter", "10", "kg"),
    ("KIT-005", "Milk", "20", "liters"),
    ("KIT-006", "Eggs", "100", "pieces"),
    ("KIT-007", "Coffee Beans", "5", "kg"),
    ("KIT-008", "Yeast", "2", "kg"),
    ("KIT-009", "Olive Oil", "5", "liters"),
    ("KIT-010", "Vinegar", "5", "liters"),
    ("KIT-011", "Onion", "50", "kg"),
]
DEMO_VENDORS = [
    ("Metro Cash & Carry", "Sales Desk", "042-111-638-762", "Thokar Niaz Baig, Lahore"),
    ("Al-Fatah Wholesale", "Procurement", "042-357-717-89", "Gulberg III, Lahore"),
]


def _as_target(db_config: dict) -> DBTarget:
    return DBTarget(
        host=str(db_config.get("host", "localhost")),
        port=int(db_config.get("port", 3306)),
        user=str(db_config.get("user", "root")),
        password=str(db_config.get("password", "")),
        database=str(db_config.get("database", "masbot_erp")),
    )


def _connect(target: DBTarget, *, with_database: bool = True):
    kwargs = dict(host=target.host, port=target.port, user=target.user, password=target.password, use_pure=True)
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema/seed files (handles ';' inside quotes).
    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False

    for ch in sql:
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
            buf.append(ch)
            continue

        if ch == '"' and not in_single:
            in_double = not in_double
            buf.append(ch)
            continue

        if ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(db_config: dict) -> None:
    target = _as_target(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    sql = _strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8"))

    conn = _connect(_as_target(db_config))
    try:
        cur = conn.cursor()
        count = 0
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
            count += 1
        conn.commit()
        logger.info("Applied schema %s (%d statements)", schema_path, count)
    finally:
        conn.close()


def ensure_demo_data(db_config: dict) -> None:
    """Seed kitchen stock and vendors once; safe to call on every start."""
    conn = _connect(_as_target(db_config))
    try:
        cur = conn.cursor(dictionary=True)

        cur.execute("SELECT COUNT(*) AS n FROM inventory_items WHERE type='Kitchen'")
        if int(cur.fetchone()["n"]) == 0:
            for code, model, qty, unit in DEMO_KITCHEN_STOCK:
                cur.execute(
                    """
                    INSERT INTO inventory_items(item_code, type, model, status, assigned_to, quantity, unit)
                    VALUES (%s, 'Kitchen', %s, 'In Stock', '', %s, %s)
                    """,
                    (code, model, qty, unit),
                )
            logger.info("Seeded %d kitchen stock items", len(DEMO_KITCHEN_STOCK))

        cur.execute("SELECT COUNT(*) AS n FROM vendors")
        if int(cur.fetchone()["n"]) == 0:
            for name, contact, phone, address in DEMO_VENDORS:
                cur.execute(
                    "INSERT INTO vendors(name, contact_person, phone, address) VALUES (%s, %s, %s, %s)",
                    (name, contact, phone, address),
                )
            logger.info("Seeded %d vendors", len(DEMO_VENDORS))

        conn.commit()
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(_as_target(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
