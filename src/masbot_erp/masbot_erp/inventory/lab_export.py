from __future__ import annotations

import csv
import io
import re

from .model import Lab

LAB_CSV_HEADERS = [
    "ID", "Serial Number", "System Model", "LCD Model", "LCD Inches", "CPU",
    "RAM", "Storage", "GPU", "Keyboard", "Mouse", "Network Device",
]


def lab_csv_filename(lab: Lab) -> str:
    stem = re.sub(r"\s+", "_", lab.name)
    return f"{stem}_Inventory.csv"


def lab_inventory_csv(lab: Lab) -> str:
    """One row per system, every field quoted."""
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(LAB_CSV_HEADERS)
    for s in lab.systems:
        writer.writerow(
            [
                s.id, s.serial_number, s.system_model, s.lcd_model, s.lcd_inches, s.cpu,
                s.ram, s.storage, s.gpu, s.keyboard, s.mouse, s.network_device,
            ]
        )
    return buf.getvalue()
