from __future__ import annotations

import logging

from flask import Flask, request

from ..common.web import handle_errors, ok, optional_date, page_required, payload
from ..container import Container
from ..core.enums import EmploymentType, PermissionAction, Role
from .model import NewEmployee

logger = logging.getLogger(__name__)

MODULE = "hr"
PAGE = "employees"


def _new_employee(data: dict) -> NewEmployee:
    return NewEmployee(
        first_name=data.get("first_name", ""),
        last_name=data.get("last_name", ""),
        email=data.get("email", ""),
        department=data.get("department", ""),
        designation=data.get("designation", ""),
        joining_date=optional_date(data.get("joining_date")),
        salary=data.get("salary"),
        role=Role(data.get("role") or Role.EMPLOYEE.value),
        employment_type=EmploymentType(data.get("employment_type") or EmploymentType.PERMANENT.value),
        employee_code=data.get("employee_code"),
        father_name=data.get("father_name"),
        phone=data.get("phone"),
        shift=data.get("shift"),
    )


def register(app: Flask, container: Container) -> None:
    can_view = page_required(container.access, MODULE, PAGE, PermissionAction.VIEW)
    can_edit = page_required(container.access, MODULE, PAGE, PermissionAction.EDIT)
    can_update = page_required(container.access, MODULE, PAGE, PermissionAction.UPDATE)

    @app.route("/api/employees", methods=["GET"], endpoint="employees_list")
    @can_view
    @handle_errors(logger)
    def employees_list():
        department = request.args.get("department") or None
        if department == "All":
            department = None
        return ok(employees=container.employee_service.list_employees(department=department))

    @app.route("/api/employees/<int:employee_id>", methods=["GET"], endpoint="employees_get")
    @can_view
    @handle_errors(logger)
    def employees_get(employee_id: int):
        return ok(employee=container.employee_service.get(employee_id))

    @app.route("/api/employees", methods=["POST"], endpoint="employees_add")
    @can_edit
    @handle_errors(logger)
    def employees_add():
        data = payload()
        employee_id = container.employee_service.add_employee(_new_employee(data), password=data.get("password", ""))
        return ok("Employee added successfully", 201, employee_id=employee_id)

    @app.route("/api/employees/<int:employee_id>", methods=["PUT"], endpoint="employees_update")
    @can_update
    @handle_errors(logger)
    def employees_update(employee_id: int):
        container.employee_service.update_employee(employee_id, _new_employee(payload()))
        return ok("Employee updated successfully")

    @app.route("/api/employees/<int:employee_id>/resign", methods=["POST"], endpoint="employees_resign")
    @can_update
    @handle_errors(logger)
    def employees_resign(employee_id: int):
        container.employee_service.resign_employee(employee_id)
        return ok("Employee marked as resigned")
