from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from typing import Optional

from .access.mysql_permission_repository import MySQLPermissionRepository
from .access.service import AccessControl
from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_LATE_THRESHOLD
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.service import EmployeeService
from .inventory.equipment_service import LabService, MRFService, TonerService
from .inventory.mysql_equipment_repository import MySQLLabRepository, MySQLMRFRepository, MySQLTonerRepository
from .inventory.mysql_inventory_repository import MySQLInventoryRepository
from .inventory.mysql_recipe_repository import MySQLRecipeRepository
from .inventory.service import InventoryService
from .leaves.mysql_leave_repository import MySQLLeaveRepository
from .leaves.service import LeaveService
from .payroll.calculator.attendance_calculator import AttendancePayrollCalculator
from .payroll.mysql_payroll_repository import MySQLPayrollRepository
from .payroll.service import PayrollService
from .reports.service import ReportService
from .supply_chain.mysql_supply_chain_repository import MySQLSupplyChainRepository
from .supply_chain.mysql_vendor_repository import MySQLVendorRepository
from .supply_chain.service import SupplyChainService
from .tasks.mysql_task_repository import MySQLTaskRepository
from .tasks.service import TaskService
from .users.mysql_account_repository import MySQLAccountRepository
from .users.service import AuthService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    employees_repo: MySQLEmployeeRepository
    accounts_repo: MySQLAccountRepository
    permissions_repo: MySQLPermissionRepository
    leaves_repo: MySQLLeaveRepository
    attendance_repo: MySQLAttendanceRepository
    inventory_repo: MySQLInventoryRepository

    access: AccessControl
    auth_service: AuthService
    employee_service: EmployeeService
    leave_service: LeaveService
    attendance_service: AttendanceService
    report_service: ReportService
    payroll_service: PayrollService
    inventory_service: InventoryService
    toner_service: TonerService
    lab_service: LabService
    mrf_service: MRFService
    supply_chain_service: SupplyChainService
    task_service: TaskService


def build_container(
    *,
    db_config: dict,
    super_admin_email: str = "",
    super_admin_password_hash: Optional[str] = None,
    late_threshold: time = DEFAULT_LATE_THRESHOLD,
) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
    )
    conn = DatabaseConnection.get_instance(config)

    employees_repo = MySQLEmployeeRepository(conn)
    accounts_repo = MySQLAccountRepository(conn)
    permissions_repo = MySQLPermissionRepository(conn)
    leaves_repo = MySQLLeaveRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    inventory_repo = MySQLInventoryRepository(conn)

    access = AccessControl(permissions_repo)
    auth_service = AuthService(
        accounts_repo,
        employees_repo,
        super_admin_email=super_admin_email,
        super_admin_password_hash=super_admin_password_hash,
    )
    employee_service = EmployeeService(employees_repo, accounts_repo)
    leave_service = LeaveService(leaves_repo, employees_repo)
    attendance_service = AttendanceService(
        attendance_repo,
        employees_repo,
        late_threshold=late_threshold,
        factory=AttendanceStrategyFactory(),
    )
    report_service = ReportService(employees_repo, attendance_repo, leaves_repo)
    payroll_service = PayrollService(
        MySQLPayrollRepository(conn),
        employees_repo,
        attendance_repo,
        leaves_repo,
        calculator=AttendancePayrollCalculator(),
    )
    inventory_service = InventoryService(inventory_repo, MySQLRecipeRepository(conn), employees_repo)
    supply_chain_service = SupplyChainService(
        MySQLSupplyChainRepository(conn),
        MySQLVendorRepository(conn),
        inventory_repo,
        access,
    )

    return Container(
        conn=conn,
        employees_repo=employees_repo,
        accounts_repo=accounts_repo,
        permissions_repo=permissions_repo,
        leaves_repo=leaves_repo,
        attendance_repo=attendance_repo,
        inventory_repo=inventory_repo,
        access=access,
        auth_service=auth_service,
        employee_service=employee_service,
        leave_service=leave_service,
        attendance_service=attendance_service,
        report_service=report_service,
        payroll_service=payroll_service,
        inventory_service=inventory_service,
        toner_service=TonerService(MySQLTonerRepository(conn)),
        lab_service=LabService(MySQLLabRepository(conn)),
        mrf_service=MRFService(MySQLMRFRepository(conn)),
        supply_chain_service=supply_chain_service,
        task_service=TaskService(MySQLTaskRepository(conn), employees_repo),
    )
