from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, normalize_mysql_time
from .model import AttendanceLogRow, AttendanceRecord
from .repository import AttendanceRepository


def _hhmm(value: Any) -> str:
    t = normalize_mysql_time(value)
    return t.strftime("%H:%M") if t else ""


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def upsert_many(self, records: Sequence[AttendanceRecord]) -> int:
        if not records:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                """
                INSERT INTO attendance_records(employee_id, work_date, time_in, time_out, status)
                VALUES (%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    time_in=VALUES(time_in), time_out=VALUES(time_out), status=VALUES(status)
                """,
                [
                    (r.employee_id, r.date, r.time_in, r.time_out or None, r.status.value)
                    for r in records
                ],
            )
            return len(records)

    @staticmethod
    def _to_row(row: Dict[str, Any]) -> AttendanceLogRow:
        return AttendanceLogRow(
            record=AttendanceRecord(
                id=int(row["id"]),
                employee_id=int(row["employee_id"]),
                date=row["work_date"],
                time_in=_hhmm(row["time_in"]),
                time_out=_hhmm(row.get("time_out")),
                status=AttendanceStatus(row["status"]),
            ),
            employee_code=row.get("employee_code") or "",
            employee_name=f"{row.get('first_name') or ''} {row.get('last_name') or ''}".strip(),
            department=row.get("department") or "",
        )

    def list_between(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_id: Optional[int] = None,
        department: Optional[str] = None,
    ) -> Sequence[AttendanceLogRow]:
        where = ["a.work_date BETWEEN %s AND %s"]
        params: list[Any] = [start_date, end_date]
        if employee_id is not None:
            where.append("a.employee_id=%s")
            params.append(int(employee_id))
        if department:
            where.append("e.department=%s")
            params.append(department)

        sql = f"""
            SELECT a.id, a.employee_id, a.work_date, a.time_in, a.time_out, a.status,
                   e.employee_code, e.first_name, e.last_name, e.department
            FROM attendance_records a
            JOIN employees e ON e.id = a.employee_id
            WHERE {' AND '.join(where)}
            ORDER BY a.work_date DESC, e.first_name, e.last_name
        """
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [self._to_row(r) for r in fetchall(cur)]
