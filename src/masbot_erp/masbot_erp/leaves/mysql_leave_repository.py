from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import LeaveStatus, LeaveType
from ..core.exceptions import ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import LeaveRequest
from .repository import LeaveRepository

_COLUMNS = "id, employee_id, from_date, to_date, leave_type, reason, status, created_at, decided_by, decided_at"


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_request(r: dict) -> LeaveRequest:
        return LeaveRequest(
            id=int(r["id"]),
            employee_id=int(r["employee_id"]),
            from_date=r["from_date"],
            to_date=r["to_date"],
            leave_type=LeaveType(r["leave_type"]),
            reason=r["reason"],
            status=LeaveStatus(r["status"]),
            created_at=r.get("created_at"),
            decided_by=r.get("decided_by"),
            decided_at=r.get("decided_at"),
        )

    def get(self, request_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM leave_requests WHERE id=%s", (int(request_id),))
            r = fetchone(cur)
            return self._to_request(r) if r else None

    def create(self, *, employee_id: int, from_date: date, to_date: date, leave_type: LeaveType, reason: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests(employee_id, from_date, to_date, leave_type, reason, status)
                VALUES (%s,%s,%s,%s,%s,%s)
                """,
                (int(employee_id), from_date, to_date, leave_type.value, reason, LeaveStatus.PENDING_HOD.value),
            )
            return int(cur.lastrowid)

    def list(
        self,
        *,
        employee_id: Optional[int] = None,
        statuses: Optional[Sequence[LeaveStatus]] = None,
    ) -> Sequence[LeaveRequest]:
        clauses = ["1=1"]
        params: list[object] = []
        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))
        if statuses:
            values = [s.value for s in statuses]
            clauses.append(f"status IN ({in_clause(values)})")
            params.extend(values)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM leave_requests WHERE {' AND '.join(clauses)} ORDER BY from_date DESC, id DESC",
                tuple(params),
            )
            return [self._to_request(r) for r in fetchall(cur)]

    def list_between(self, *, start: date, end: date, status: Optional[LeaveStatus] = None) -> Sequence[LeaveRequest]:
        clauses = ["from_date <= %s", "to_date >= %s"]
        params: list[object] = [end, start]
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM leave_requests WHERE {' AND '.join(clauses)} ORDER BY from_date",
                tuple(params),
            )
            return [self._to_request(r) for r in fetchall(cur)]

    def decide(
        self,
        *,
        request_id: int,
        expected: LeaveStatus,
        new_status: LeaveStatus,
        decided_by: str,
        consume_days: int = 0,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s, decided_by=%s, decided_at=NOW()
                WHERE id=%s AND status=%s
                """,
                (new_status.value, decided_by, int(request_id), expected.value),
            )
            if cur.rowcount == 0:
                return False

            if consume_days > 0:
                cur.execute("SELECT employee_id, leave_type FROM leave_requests WHERE id=%s", (int(request_id),))
                r = fetchone(cur)
                leave_type = LeaveType(r["leave_type"])
                if leave_type == LeaveType.OTHERS:
                    cur.execute(
                        """
                        INSERT INTO leave_balances(employee_id, leave_key, total, used) VALUES (%s,%s,0,%s)
                        ON DUPLICATE KEY UPDATE used = used + VALUES(used)
                        """,
                        (int(r["employee_id"]), leave_type.balance_key, int(consume_days)),
                    )
                else:
                    cur.execute(
                        """
                        UPDATE leave_balances SET used = used + %s
                        WHERE employee_id=%s AND leave_key=%s AND total - used >= %s
                        """,
                        (int(consume_days), int(r["employee_id"]), leave_type.balance_key, int(consume_days)),
                    )
                    if cur.rowcount == 0:
                        # rolls back the status change above
                        raise ValidationError(f"Insufficient balance for {leave_type.value}")
            return True
