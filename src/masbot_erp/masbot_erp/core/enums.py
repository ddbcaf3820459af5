from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Identity role used at the access-control boundary."""

    SUPER_ADMIN = "SuperAdmin"
    EMPLOYEE = "Employee"
    HOD = "HOD"
    HR = "HR"


class EmploymentType(str, Enum):
    PERMANENT = "Permanent"
    CONTRACT = "Contract"
    INTERN = "Intern"
    PROBATION = "Probation"


class EmployeeStatus(str, Enum):
    ACTIVE = "Active"
    RESIGNED = "Resigned"
    TERMINATED = "Terminated"


class LeaveType(str, Enum):
    """Leave types as shown on the application form."""

    SICK = "Sick Leave"
    CASUAL = "Casual Leave"
    ANNUAL = "Annual Leave"
    MATERNITY = "Maternity Leave"
    PATERNITY = "Paternity Leave"
    ALTERNATE_DAY_OFF = "Alternate Day Off"
    OTHERS = "Others"

    @property
    def balance_key(self) -> str:
        return _LEAVE_BALANCE_KEYS[self]


_LEAVE_BALANCE_KEYS = {
    LeaveType.SICK: "sick",
    LeaveType.CASUAL: "casual",
    LeaveType.ANNUAL: "annual",
    LeaveType.MATERNITY: "maternity",
    LeaveType.PATERNITY: "paternity",
    LeaveType.ALTERNATE_DAY_OFF: "alternate_day_off",
    LeaveType.OTHERS: "others",
}


class LeaveStatus(str, Enum):
    PENDING_HOD = "Pending HOD"
    PENDING_HR = "Pending HR"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class ApprovalAction(str, Enum):
    APPROVE = "Approve"
    REJECT = "Reject"


class RequestStatus(str, Enum):
    """Supply-chain requisition (MRF) status."""

    PENDING_ACCOUNT_MANAGER = "Pending Account Manager"
    PENDING_STORE = "Pending Store"
    FORWARDED_TO_PURCHASE = "Forwarded to Purchase"
    CONVERTED_TO_PO = "Converted to PO"
    ISSUED = "Issued"
    REJECTED = "Rejected"


class RequestAction(str, Enum):
    APPROVE = "Approve"
    REJECT = "Reject"
    ISSUE = "Issue"
    FORWARD = "Forward"
    CONVERT = "Convert"
    RESTOCK = "Restock"


class POStatus(str, Enum):
    PENDING_ACCOUNT_MANAGER = "Pending Account Manager"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    RECEIVED = "Received"


class POAction(str, Enum):
    APPROVE = "Approve"
    REJECT = "Reject"
    RECEIVE = "Receive"


class AssetStatus(str, Enum):
    IN_USE = "In Use"
    IN_STOCK = "In Stock"
    MAINTENANCE = "Maintenance"


class AssetReportKind(str, Enum):
    USER = "user"
    EQUIPMENT = "equipment"
    DEPARTMENT = "department"


class TonerStatus(str, Enum):
    FILLED = "Filled"
    EMPTY = "Empty"


class MRFStatus(str, Enum):
    PENDING = "Pending"
    PROCEED = "Proceed"


class TaskStatus(str, Enum):
    NEW = "New"
    ASSIGNED = "Assigned"
    IN_PROGRESS = "In Progress"
    PENDING_REVIEW = "Completed - Pending Review"
    CLOSED = "Closed"
    REOPENED = "Reopened"


class TaskAction(str, Enum):
    ACCEPT = "Accept"
    COMPLETE = "Complete"
    APPROVE = "Approve"
    REJECT = "Reject"


class TaskPriority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class TaskCategory(str, Enum):
    ERP = "ERP"
    IT_SUPPORT = "IT Support"
    FINANCE = "Finance"
    HR = "HR"
    OPERATIONS = "Operations"
    OTHER = "Other"


class AttendanceStatus(str, Enum):
    """Daily attendance status stored per (employee, date)."""

    PRESENT = "Present"
    ABSENT = "Absent"
    LATE = "Late"
    HALF_DAY = "Half Day"


class AbsenceStatus(str, Enum):
    ABSENT = "Absent"
    ON_LEAVE = "On Leave"


class PermissionAction(str, Enum):
    VIEW = "view"
    EDIT = "edit"
    UPDATE = "update"
    DELETE = "delete"
