from __future__ import annotations

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import PagePermissions, UserPermissions
from .repository import PermissionRepository


class MySQLPermissionRepository(PermissionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_matrix(rows: list[dict]) -> UserPermissions:
        matrix: UserPermissions = {}
        for r in rows:
            matrix.setdefault(r["module_id"], {})[r["page_id"]] = PagePermissions(
                view=bool(r["can_view"]),
                edit=bool(r["can_edit"]),
                update=bool(r["can_update"]),
                delete=bool(r["can_delete"]),
            )
        return matrix

    def get_for_user(self, email: str) -> UserPermissions:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT module_id, page_id, can_view, can_edit, can_update, can_delete
                FROM user_permissions
                WHERE user_email=%s
                """,
                (email.lower(),),
            )
            return self._to_matrix(fetchall(cur))

    def replace_for_user(self, email: str, permissions: UserPermissions) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM user_permissions WHERE user_email=%s", (email.lower(),))
            for module_id, pages in permissions.items():
                for page_id, p in pages.items():
                    cur.execute(
                        """
                        INSERT INTO user_permissions(
                            user_email, module_id, page_id, can_view, can_edit, can_update, can_delete
                        )
                        VALUES (%s,%s,%s,%s,%s,%s,%s)
                        """,
                        (email.lower(), module_id, page_id, int(p.view), int(p.edit), int(p.update), int(p.delete)),
                    )

    def list_all(self) -> dict[str, UserPermissions]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_email, module_id, page_id, can_view, can_edit, can_update, can_delete
                FROM user_permissions
                ORDER BY user_email
                """
            )
            by_user: dict[str, list[dict]] = {}
            for r in fetchall(cur):
                by_user.setdefault(r["user_email"], []).append(r)
            return {email: self._to_matrix(rows) for email, rows in by_user.items()}
