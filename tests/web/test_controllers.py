from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal

import pytest
from flask import Flask

from src.masbot_erp.masbot_erp.access.model import Identity, PagePermissions
from src.masbot_erp.masbot_erp.access.service import AccessControl
from src.masbot_erp.masbot_erp.common.web import SESSION_KEY
from src.masbot_erp.masbot_erp.container import Container
from src.masbot_erp.masbot_erp.core.enums import AssetStatus, LeaveStatus, LeaveType, POStatus, RequestStatus
from src.masbot_erp.masbot_erp.inventory.controller import register as register_inventory
from src.masbot_erp.masbot_erp.inventory.model import InventoryItem
from src.masbot_erp.masbot_erp.inventory.service import InventoryService
from src.masbot_erp.masbot_erp.leaves.controller import register as register_leaves
from src.masbot_erp.masbot_erp.leaves.model import LeaveRequest
from src.masbot_erp.masbot_erp.leaves.service import LeaveService
from src.masbot_erp.masbot_erp.reports.export import XLSX_MIMETYPE
from src.masbot_erp.masbot_erp.supply_chain.controller import register as register_supply_chain
from src.masbot_erp.masbot_erp.supply_chain.model import PurchaseOrder, RequestItem, SupplyChainRequest
from src.masbot_erp.masbot_erp.supply_chain.service import SupplyChainService
from src.masbot_erp.masbot_erp.tasks.controller import register as register_tasks
from src.masbot_erp.masbot_erp.tasks.service import TaskService

NOW = datetime(2024, 3, 15, 10, 30)


class StaticPermissions:
    def __init__(self, rows):
        self.rows = rows

    def get_for_user(self, email):
        return self.rows.get(email, {})


class LeaveRows:
    def __init__(self, employees):
        self._employees = employees
        self.rows: dict[int, LeaveRequest] = {}

    def get(self, request_id):
        return self.rows.get(int(request_id))

    def create(self, *, employee_id, from_date, to_date, leave_type, reason):
        rid = len(self.rows) + 1
        self.rows[rid] = LeaveRequest(id=rid, employee_id=employee_id, from_date=from_date, to_date=to_date,
                                      leave_type=leave_type, reason=reason, status=LeaveStatus.PENDING_HOD)
        return rid

    def decide(self, *, request_id, expected, new_status, decided_by, consume_days=0):
        req = self.rows.get(int(request_id))
        if not req or req.status != expected:
            return False
        self.rows[req.id] = replace(req, status=new_status, decided_by=decided_by)
        if consume_days:
            emp = self._employees.get_by_id(req.employee_id)
            self._employees._by_id[emp.id] = replace(
                emp, leave_balance=emp.leave_balance.with_used(req.leave_type, consume_days)
            )
        return True


class SupplyChainRows:
    def __init__(self):
        self.requests = {
            1: SupplyChainRequest(
                id=1, requester_name="Ali Khan", requester_email="ali@masbot.test", department="Kitchen", date=NOW,
                items=(RequestItem(inventory_id=1, name="Flour", quantity_requested=Decimal("2.000"), unit="kg"),),
                purpose="Bread", status=RequestStatus.PENDING_ACCOUNT_MANAGER,
            )
        }
        self.pos = {
            1: PurchaseOrder(
                id=1, po_number="PO-000001", vendor_id=1, vendor_name="Metro", date=NOW, items=(),
                total_amount=Decimal("500.00"), status=POStatus.PENDING_ACCOUNT_MANAGER, generated_by="admin@masbot.test",
            )
        }

    def get_request(self, request_id):
        return self.requests.get(int(request_id))

    def set_request_status(self, *, request_id, expected, new_status, approval_date=None, rejection_reason=None):
        req = self.requests.get(int(request_id))
        if not req or req.status != expected:
            return False
        self.requests[req.id] = replace(req, status=new_status, approval_date=approval_date,
                                        rejection_reason=rejection_reason)
        return True

    def get_po(self, po_id):
        return self.pos.get(int(po_id))

    def set_po_status(self, *, po_id, expected, new_status, approved_date=None):
        po = self.pos.get(int(po_id))
        if not po or po.status != expected:
            return False
        self.pos[po.id] = replace(po, status=new_status, approved_date=approved_date)
        return True


class TaskRows:
    def list_all(self):
        return []


class AssetRows:
    def __init__(self, items):
        self.rows = {i.id: i for i in items}

    def list(self, *, item_type=None):
        return [i for i in self.rows.values() if not item_type or i.type == item_type]


@pytest.fixture
def leave_rows(employee_repo):
    return LeaveRows(employee_repo)


@pytest.fixture
def sc_rows():
    return SupplyChainRows()


@pytest.fixture
def client(employee_repo, leave_rows, sc_rows):
    approvals = {"supply_chain": {"sc_approvals": PagePermissions(view=True, update=True)}}
    permissions = StaticPermissions({"omar@masbot.test": approvals})
    access = AccessControl(permissions)
    assets = AssetRows(
        [
            InventoryItem(id=1, type="Laptop", model="ThinkPad T14", status=AssetStatus.IN_USE,
                          assigned_to="Hina Malik", department="IT"),
            InventoryItem(id=2, type="Printer", model="LaserJet M404"),
        ]
    )
    container = Container(
        conn=None,
        employees_repo=employee_repo,
        accounts_repo=None,
        permissions_repo=permissions,
        leaves_repo=leave_rows,
        attendance_repo=None,
        inventory_repo=assets,
        access=access,
        auth_service=None,
        employee_service=None,
        leave_service=LeaveService(leave_rows, employee_repo),
        attendance_service=None,
        report_service=None,
        payroll_service=None,
        inventory_service=InventoryService(assets, None, employee_repo),
        toner_service=None,
        lab_service=None,
        mrf_service=None,
        supply_chain_service=SupplyChainService(sc_rows, None, None, access, clock=lambda: NOW),
        task_service=TaskService(TaskRows(), employee_repo, clock=lambda: NOW),
    )

    app = Flask(__name__)
    app.secret_key = "test-secret"
    app.config["TESTING"] = True
    register_leaves(app, container)
    register_supply_chain(app, container)
    register_inventory(app, container)
    register_tasks(app, container)
    return app.test_client()


@pytest.fixture
def login(client, sample_employees, identity_for, super_admin):
    people = {e.first_name.lower(): identity_for(e) for e in sample_employees}
    people["admin"] = super_admin

    def as_user(name):
        identity: Identity = people[name]
        with client.session_transaction() as sess:
            sess[SESSION_KEY] = {
                "email": identity.email,
                "role": identity.role.value,
                "employee_id": identity.employee_id,
                "full_name": identity.full_name,
                "department": identity.department,
            }

    return as_user


def test_leave_goes_through_hod_then_hr(client, login, employee_repo):
    login("ali")
    resp = client.post("/api/leaves", json={"from_date": "2024-03-04", "to_date": "2024-03-06",
                                            "leave_type": LeaveType.CASUAL.value, "reason": "Wedding"})
    assert resp.status_code == 201
    request_id = resp.get_json()["request_id"]

    login("sara")
    resp = client.post(f"/api/leaves/{request_id}/action", json={"action": "Approve"})
    assert resp.status_code == 200
    assert resp.get_json() == {"success": True, "message": "Leave request pending hr", "new_status": "Pending HR"}

    login("omar")
    resp = client.post(f"/api/leaves/{request_id}/action", json={"action": "Approve"})
    assert resp.status_code == 200
    assert resp.get_json()["new_status"] == "Approved"
    assert employee_repo.get_by_id(1).leave_balance.get(LeaveType.CASUAL).used == 3


def test_leave_action_errors(client, login):
    resp = client.post("/api/leaves/1/action", json={"action": "Approve"})
    assert resp.status_code == 401

    login("sara")
    resp = client.post("/api/leaves/99/action", json={"action": "Approve"})
    assert resp.status_code == 404
    assert resp.get_json() == {"success": False, "message": "Leave request not found"}

    resp = client.post("/api/leaves/99/action", json={"action": "Maybe"})
    assert resp.status_code == 400


def test_request_action_needs_the_approvals_page(client, login, sc_rows):
    login("ali")
    resp = client.post("/api/supply-chain/requests/1/action", json={"action": "Approve"})
    assert resp.status_code == 403
    assert sc_rows.requests[1].status == RequestStatus.PENDING_ACCOUNT_MANAGER

    login("omar")
    resp = client.post("/api/supply-chain/requests/1/action", json={"action": "Approve"})
    assert resp.status_code == 200
    assert resp.get_json()["new_status"] == "Pending Store"
    assert resp.get_json()["message"] == "Request moved to Pending Store"


def test_request_rejection_needs_a_reason(client, login, sc_rows):
    login("omar")
    resp = client.post("/api/supply-chain/requests/1/action", json={"action": "Reject"})
    assert resp.status_code == 400

    resp = client.post("/api/supply-chain/requests/1/action", json={"action": "Reject", "reason": "Over budget"})
    assert resp.get_json()["new_status"] == "Rejected"
    assert sc_rows.requests[1].rejection_reason == "Over budget"


def test_po_action(client, login, sc_rows):
    login("admin")
    resp = client.post("/api/supply-chain/purchase-orders/1/action", json={"action": "Approve"})
    assert resp.status_code == 200
    assert resp.get_json()["new_status"] == "Approved"
    assert sc_rows.pos[1].approved_date == NOW

    resp = client.post("/api/supply-chain/purchase-orders/1/action", json={"action": "Approve"})
    assert resp.status_code == 400
    assert client.post("/api/supply-chain/purchase-orders/7/action", json={"action": "Approve"}).status_code == 404


def test_inventory_report_json_and_xlsx(client, login):
    login("ali")
    assert client.get("/api/inventory/reports/user").status_code == 403

    login("admin")
    body = client.get("/api/inventory/reports/department").get_json()
    assert [g["name"] for g in body["groups"]] == ["IT", "Unassigned"]

    resp = client.get("/api/inventory/reports/user?format=xlsx")
    assert resp.status_code == 200
    assert resp.mimetype == XLSX_MIMETYPE
    assert f"Inventory_user_report_{date.today().isoformat()}.xlsx" in resp.headers["Content-Disposition"]

    assert client.get("/api/inventory/reports/vendor").status_code == 400


def test_task_analytics_route(client, login):
    login("ali")
    assert client.get("/api/tasks/analytics").status_code == 403

    login("admin")
    resp = client.get("/api/tasks/analytics")
    assert resp.status_code == 200
    assert resp.get_json()["analytics"]["total"] == 0
