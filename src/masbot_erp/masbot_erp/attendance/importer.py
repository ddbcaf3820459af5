"""Reconcile raw biometric/spreadsheet punches into daily attendance records.

Rows are plain mappings (one per punch). Column headers vary between devices,
so keys are normalized before lookup. Each matched punch contributes one
minutes-since-midnight value to its (employee, date) bucket; the first value
is the time-in and the last one the time-out.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta
from numbers import Real
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..common.datetime_utils import format_hhmm
from ..core.constants import DEFAULT_LATE_THRESHOLD
from ..employees.model import Employee
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord, ImportReport, Matched, MatchResult, Unmatched

ID_COLUMNS = ("employeeid", "empid", "id", "userid", "acno")
NAME_COLUMNS = ("name", "employeename", "empname", "employee")
DATE_COLUMNS = ("date", "attendancedate", "datetime", "time")
TIME_COLUMNS = ("time", "timein", "checkin", "datetime")

SPREADSHEET_EPOCH = date(1899, 12, 30)
# Header row is row 1 in the sheet, so the first data row is row 2.
FIRST_DATA_ROW = 2

_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")
_CLOCK = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?\s*([AaPp][Mm])?$")
_DATE_FORMATS = ("%Y-%m-%d", "%Y/%m/%d", "%m/%d/%Y")


def _blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    # NaN is the only value not equal to itself
    return isinstance(value, float) and value != value


def normalize_row(row: Mapping[str, Any]) -> dict[str, Any]:
    return {_NON_ALNUM.sub("", str(k)).lower(): v for k, v in row.items()}


def _first(row: Mapping[str, Any], keys: Sequence[str]) -> Any:
    for key in keys:
        value = row.get(key)
        if not _blank(value):
            return value
    return None


def _as_text(value: Any) -> str:
    if isinstance(value, Real) and not isinstance(value, bool) and float(value).is_integer():
        return str(int(value))
    return str(value).strip()


def match_row(row: Mapping[str, Any], employees: Iterable[Employee]) -> MatchResult:
    """Match a normalized row to an employee: ID columns first, then full name."""
    employees = list(employees)
    raw_id = _first(row, ID_COLUMNS)
    if raw_id is not None:
        search = _as_text(raw_id)
        for emp in employees:
            if (emp.employee_code or "").strip() == search or str(emp.id) == search:
                return Matched(employee_id=emp.id)

    raw_name = _first(row, NAME_COLUMNS)
    if raw_name is not None:
        search = str(raw_name).strip().lower()
        for emp in employees:
            if emp.full_name.lower() == search:
                return Matched(employee_id=emp.id)

    if raw_id is None and raw_name is None:
        return Unmatched("No employee ID or name column")
    return Unmatched(f"No employee matches {_as_text(raw_id if raw_id is not None else raw_name)!r}")


def parse_date_value(value: Any) -> tuple[Optional[date], Optional[time]]:
    """Return (date, time) where time is set only for combined date-time values."""
    if isinstance(value, datetime):
        t = value.time().replace(second=0, microsecond=0)
        return value.date(), (t if t != time(0, 0) else None)
    if isinstance(value, date):
        return value, None
    if isinstance(value, Real) and not isinstance(value, bool):
        serial = float(value)
        whole = int(serial)
        day = SPREADSHEET_EPOCH + timedelta(days=whole)
        fraction = serial - whole
        return day, (parse_time_value(fraction) if fraction > 0 else None)
    if isinstance(value, str):
        text = value.strip()
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "").replace("z", ""))
        except ValueError:
            parsed = None
        if parsed is not None:
            return parse_date_value(parsed) if len(text) > 10 else (parsed.date(), None)
        for fmt in _DATE_FORMATS:
            try:
                return datetime.strptime(text, fmt).date(), None
            except ValueError:
                continue
    return None, None


def parse_time_value(value: Any) -> Optional[time]:
    if isinstance(value, datetime):
        return value.time().replace(second=0, microsecond=0)
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)
    if isinstance(value, Real) and not isinstance(value, bool):
        total_seconds = round((float(value) % 1) * 86400)
        hours, minutes = total_seconds // 3600, (total_seconds % 3600) // 60
        return time(hours % 24, minutes)
    if isinstance(value, str):
        text = value.strip()
        m = _CLOCK.match(text)
        if m:
            hours, minutes = int(m.group(1)), int(m.group(2))
            meridiem = (m.group(4) or "").lower()
            if meridiem == "pm" and hours < 12:
                hours += 12
            elif meridiem == "am" and hours == 12:
                hours = 0
            if hours < 24 and minutes < 60:
                return time(hours, minutes)
            return None
        try:
            return datetime.fromisoformat(text).time().replace(second=0, microsecond=0)
        except ValueError:
            return None
    return None


def _minutes(t: time) -> int:
    return t.hour * 60 + t.minute


def reconcile(
    rows: Iterable[Mapping[str, Any]],
    employees: Iterable[Employee],
    *,
    threshold: time = DEFAULT_LATE_THRESHOLD,
    factory: Optional[AttendanceStrategyFactory] = None,
) -> ImportReport:
    """Aggregate punches into one record per (employee, date).

    The result does not depend on input row order: punch times are de-duplicated
    and sorted per bucket, and records come back ordered by (employee_id, date).
    """
    factory = factory or AttendanceStrategyFactory()
    employees = list(employees)
    buckets: dict[tuple[int, date], set[int]] = {}
    unmatched: list[tuple[int, str]] = []

    for index, raw in enumerate(rows):
        row_no = index + FIRST_DATA_ROW
        row = normalize_row(raw)

        date_val = _first(row, DATE_COLUMNS)
        if date_val is None:
            unmatched.append((row_no, "Missing date"))
            continue

        match = match_row(row, employees)
        if isinstance(match, Unmatched):
            unmatched.append((row_no, match.reason))
            continue

        day, punch = parse_date_value(date_val)
        if day is None:
            unmatched.append((row_no, f"Unrecognized date {date_val!r}"))
            continue
        if punch is None:
            time_val = _first(row, TIME_COLUMNS)
            punch = parse_time_value(time_val) if time_val is not None else None
        if punch is None:
            unmatched.append((row_no, "Missing or unrecognized time"))
            continue

        buckets.setdefault((match.employee_id, day), set()).add(_minutes(punch))

    records = []
    for (employee_id, day), minutes in sorted(buckets.items()):
        times = sorted(minutes)
        first, last = times[0], times[-1]
        time_in = time(first // 60, first % 60)
        decision = factory.for_time_in(time_in=time_in, threshold=threshold).decide(time_in=time_in, threshold=threshold)
        records.append(
            AttendanceRecord(
                employee_id=employee_id,
                date=day,
                time_in=format_hhmm(first),
                time_out=format_hhmm(last) if len(times) > 1 else "",
                status=decision.status,
            )
        )

    return ImportReport(records=tuple(records), unmatched=tuple(unmatched))
