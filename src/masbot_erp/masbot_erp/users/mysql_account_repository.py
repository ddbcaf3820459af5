from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Account
from .repository import AccountRepository


class MySQLAccountRepository(AccountRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_account(r: dict) -> Account:
        return Account(
            id=int(r["id"]),
            email=r["email"],
            password_hash=r["password_hash"],
            password_change_required=bool(r["password_change_required"]),
            is_active=bool(r["is_active"]),
        )

    def get_by_email(self, email: str) -> Optional[Account]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, email, password_hash, password_change_required, is_active
                FROM accounts
                WHERE email=%s
                """,
                (email.lower(),),
            )
            r = fetchone(cur)
            return self._to_account(r) if r else None

    def create(self, *, email: str, password_hash: str, password_change_required: bool = True) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO accounts(email, password_hash, password_change_required) VALUES (%s,%s,%s)",
                (email.lower(), password_hash, int(password_change_required)),
            )
            return int(cur.lastrowid)

    def update_password(self, *, email: str, password_hash: str, password_change_required: bool = False) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE accounts SET password_hash=%s, password_change_required=%s WHERE email=%s",
                (password_hash, int(password_change_required), email.lower()),
            )
            return cur.rowcount > 0

    def list_all(self) -> Sequence[Account]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id, email, password_hash, password_change_required, is_active FROM accounts ORDER BY email"
            )
            return [self._to_account(r) for r in fetchall(cur)]
