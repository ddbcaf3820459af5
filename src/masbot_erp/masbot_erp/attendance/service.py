from __future__ import annotations

import logging
import zipfile
from datetime import date, time
from pathlib import Path
from typing import IO, Any, Mapping, Optional, Sequence

import pandas as pd

from ..access.model import Identity
from ..core.constants import DEFAULT_LATE_THRESHOLD
from ..core.exceptions import ValidationError
from ..employees.repository import EmployeeRepository
from .factory import AttendanceStrategyFactory
from .importer import reconcile
from .model import AttendanceLogRow, ImportReport
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

NO_MATCH_MESSAGE = "No valid records matched. Ensure ID or Name columns match your employee data."
BAD_FILE_MESSAGE = "Failed to process the uploaded file. Please ensure it is a valid Excel/CSV file."


def read_sheet(file: IO[bytes], filename: str) -> list[dict[str, Any]]:
    """Read the first sheet of an .xlsx or .csv upload into row dicts (blank cells -> None)."""
    suffix = Path(filename or "").suffix.lower()
    if suffix == ".xls":
        raise ValidationError("Legacy .xls files are not supported. Please save the sheet as .xlsx or .csv.")
    try:
        if suffix == ".csv":
            df = pd.read_csv(file)
        elif suffix in {".xlsx", ".xlsm"}:
            df = pd.read_excel(file, sheet_name=0, engine="openpyxl")
        else:
            raise ValidationError("Unsupported file type. Please upload an .xlsx or .csv file.")
    except (ValueError, OSError, zipfile.BadZipFile) as e:
        logger.warning("Attendance upload %s could not be read: %s", filename, e)
        raise ValidationError(BAD_FILE_MESSAGE) from e

    df = df.astype(object).where(pd.notna(df), None)
    return df.to_dict(orient="records")


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        *,
        late_threshold: time = DEFAULT_LATE_THRESHOLD,
        factory: Optional[AttendanceStrategyFactory] = None,
    ):
        self._attendance = attendance
        self._employees = employees
        self._threshold = late_threshold
        self._factory = factory or AttendanceStrategyFactory()

    def import_rows(self, rows: Sequence[Mapping[str, Any]]) -> ImportReport:
        report = reconcile(rows, self._employees.list_all(), threshold=self._threshold, factory=self._factory)
        if not report.records:
            logger.warning("Attendance import matched no rows (%d rows unmatched)", len(report.unmatched))
            raise ValidationError(NO_MATCH_MESSAGE)

        self._attendance.upsert_many(report.records)
        logger.info(
            "Attendance import: %d daily records stored, %d rows unmatched",
            len(report.records),
            len(report.unmatched),
        )
        return report

    def import_workbook(self, file: IO[bytes], filename: str) -> ImportReport:
        return self.import_rows(read_sheet(file, filename))

    def visible_records(
        self,
        actor: Identity,
        *,
        start_date: date,
        end_date: date,
        department: Optional[str] = None,
    ) -> list[AttendanceLogRow]:
        if end_date < start_date:
            raise ValidationError('"To Date" cannot be earlier than "From Date".')

        if actor.is_super_admin or actor.is_hr:
            dept = department if department and department != "All" else None
            rows = self._attendance.list_between(start_date=start_date, end_date=end_date, department=dept)
        elif actor.employee_id is None:
            rows = []
        else:
            rows = self._attendance.list_between(
                start_date=start_date, end_date=end_date, employee_id=actor.employee_id
            )

        rows = sorted(rows, key=lambda r: r.employee_name)
        return sorted(rows, key=lambda r: r.record.date, reverse=True)
