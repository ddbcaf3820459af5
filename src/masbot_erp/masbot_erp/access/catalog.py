"""Modules and their pages, as offered on the user access management screen."""

from __future__ import annotations

MODULES: dict[str, str] = {
    "hr": "HR Module",
    "inventory_management": "Inventory Management",
    "supply_chain": "Supply Chain Module",
    "task_manager": "Task Manager",
    "finance": "Finance Module",
    "student": "Student Module",
    "website": "Website & Portals",
}

MODULE_PAGES: dict[str, tuple[str, ...]] = {
    "hr": (
        "dashboard", "employees", "attendance", "reports", "users", "user-access",
        "departments", "leaves", "payroll", "performance", "training", "recruitment",
    ),
    # asset sub-pages first, then the remaining sidebar pages
    "inventory_management": (
        "master", "laptops", "desktops", "printers", "labs", "kitchen",
        "users", "mrf", "reports", "settings",
    ),
    "supply_chain": ("sc_requests", "sc_my_requests", "sc_approvals", "sc_store", "sc_purchase"),
    "task_manager": ("tasks", "calendar", "analytics"),
    "finance": ("fin_dashboard", "budgeting", "payments", "receipts", "fin_reports"),
    "student": ("std_dashboard", "applicants", "student_portal", "std_attendance", "course_delivery"),
    "website": ("web_dashboard", "applicant_portal", "student_portal_mgmt", "teacher_dash", "admin_dash"),
}

INVENTORY_ASSET_PAGES = ("master", "laptops", "desktops", "printers", "labs", "kitchen")


def pages_for(module_id: str) -> tuple[str, ...]:
    return MODULE_PAGES.get(module_id, ())


def is_known(module_id: str, page_id: str | None = None) -> bool:
    if module_id not in MODULES:
        return False
    if page_id is None:
        return True
    return page_id in MODULE_PAGES.get(module_id, ())
