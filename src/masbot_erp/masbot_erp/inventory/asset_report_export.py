from __future__ import annotations

import io
from datetime import date
from typing import Sequence

from ..core.enums import AssetReportKind
from ..reports.export import to_workbook
from .model import AssetGroup

USER_COLUMNS = (
    "Employee Name", "Department", "Designation", "Asset Type", "Brand", "Model", "Serial Number", "Issue Date", "Status",
)
EQUIPMENT_COLUMNS = ("Type", "Brand", "Model", "Serial Number", "Status", "Assigned To", "Department")
DEPARTMENT_COLUMNS = ("Department", "Assigned Employee", "Asset Type", "Model", "Serial Number", "Status")

COLUMNS = {
    AssetReportKind.USER: USER_COLUMNS,
    AssetReportKind.EQUIPMENT: EQUIPMENT_COLUMNS,
    AssetReportKind.DEPARTMENT: DEPARTMENT_COLUMNS,
}


def asset_report_rows(kind: AssetReportKind, groups: Sequence[AssetGroup]) -> list[dict]:
    rows = []
    for group in groups:
        for item in group.items:
            if kind == AssetReportKind.USER:
                rows.append(
                    {
                        "Employee Name": group.name,
                        "Department": group.department,
                        "Designation": group.designation,
                        "Asset Type": item.type,
                        "Brand": item.brand or "-",
                        "Model": item.model,
                        "Serial Number": item.serial_number or "-",
                        "Issue Date": item.issue_date.isoformat() if item.issue_date else "-",
                        "Status": item.status.value,
                    }
                )
            elif kind == AssetReportKind.EQUIPMENT:
                rows.append(
                    {
                        "Type": item.type,
                        "Brand": item.brand or "-",
                        "Model": item.model,
                        "Serial Number": item.serial_number or "-",
                        "Status": item.status.value,
                        "Assigned To": item.assigned_to or "Unassigned",
                        "Department": item.department or "-",
                    }
                )
            elif item.department:
                # the unassigned pile has no department to file it under
                rows.append(
                    {
                        "Department": item.department,
                        "Assigned Employee": item.assigned_to or "Unassigned",
                        "Asset Type": item.type,
                        "Model": item.model,
                        "Serial Number": item.serial_number or "-",
                        "Status": item.status.value,
                    }
                )
    return rows


def asset_report_workbook(kind: AssetReportKind, groups: Sequence[AssetGroup]) -> io.BytesIO:
    kind = AssetReportKind(kind)
    return to_workbook(asset_report_rows(kind, groups), sheet_name="Report", columns=COLUMNS[kind])


def asset_report_filename(kind: AssetReportKind, day: date) -> str:
    return f"Inventory_{AssetReportKind(kind).value}_report_{day.isoformat()}.xlsx"
