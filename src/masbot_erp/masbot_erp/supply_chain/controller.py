from __future__ import annotations

import logging

from flask import Flask

from ..common.web import current_identity, handle_errors, ok, page_required, payload
from ..container import Container
from ..core.enums import ApprovalAction, PermissionAction
from .model import Vendor
from .service import APPROVALS_PAGE, MODULE, PURCHASE_PAGE, STORE_PAGE

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    def gate(page: str, action: PermissionAction = PermissionAction.VIEW):
        return page_required(container.access, MODULE, page, action)

    sc = container.supply_chain_service

    # -------- requisitions --------
    @app.route("/api/supply-chain/requests", methods=["POST"], endpoint="sc_create_request")
    @gate("sc_requests")
    @handle_errors(logger)
    def sc_create_request():
        data = payload()
        request_id = sc.create_request(
            actor=current_identity(),
            items=data.get("items") or [],
            purpose=data.get("purpose", ""),
            department=data.get("department") or None,
        )
        return ok("Request submitted successfully", 201, request_id=request_id)

    @app.route("/api/supply-chain/requests/mine", methods=["GET"], endpoint="sc_my_requests")
    @gate("sc_my_requests")
    @handle_errors(logger)
    def sc_my_requests():
        return ok(requests=sc.my_requests(current_identity()))

    @app.route("/api/supply-chain/approvals", methods=["GET"], endpoint="sc_approvals")
    @gate(APPROVALS_PAGE)
    @handle_errors(logger)
    def sc_approvals():
        return ok(**sc.pending_approvals())

    @app.route("/api/supply-chain/requests/<int:request_id>/action", methods=["POST"], endpoint="sc_request_action")
    @gate(APPROVALS_PAGE, PermissionAction.UPDATE)
    @handle_errors(logger)
    def sc_request_action(request_id: int):
        data = payload()
        status = sc.act_on_request(
            request_id=request_id,
            action=ApprovalAction(data.get("action", "")),
            actor=current_identity(),
            reason=data.get("reason"),
        )
        return ok(f"Request moved to {status.value}", new_status=status)

    @app.route("/api/supply-chain/store", methods=["GET"], endpoint="sc_store")
    @gate(STORE_PAGE)
    @handle_errors(logger)
    def sc_store():
        return ok(requests=sc.pending_store())

    @app.route("/api/supply-chain/requests/<int:request_id>/issue", methods=["POST"], endpoint="sc_issue")
    @gate(STORE_PAGE, PermissionAction.UPDATE)
    @handle_errors(logger)
    def sc_issue(request_id: int):
        sc.issue_request(request_id=request_id, actor=current_identity())
        return ok("Items issued and stock updated")

    @app.route("/api/supply-chain/requests/<int:request_id>/forward", methods=["POST"], endpoint="sc_forward")
    @gate(STORE_PAGE, PermissionAction.UPDATE)
    @handle_errors(logger)
    def sc_forward(request_id: int):
        sc.forward_to_purchase(request_id=request_id, actor=current_identity())
        return ok("Request forwarded to purchase")

    # -------- purchase --------
    @app.route("/api/supply-chain/purchase", methods=["GET"], endpoint="sc_purchase")
    @gate(PURCHASE_PAGE)
    @handle_errors(logger)
    def sc_purchase():
        return ok(
            to_purchase=sc.to_purchase(),
            purchase_orders=sc.purchase_orders(),
            awaiting_grn=sc.awaiting_grn(),
        )

    @app.route("/api/supply-chain/purchase-orders", methods=["POST"], endpoint="sc_create_po")
    @gate(PURCHASE_PAGE, PermissionAction.EDIT)
    @handle_errors(logger)
    def sc_create_po():
        data = payload()
        po_id = sc.create_purchase_order(
            request_id=int(data.get("request_id") or 0),
            vendor_id=int(data.get("vendor_id") or 0),
            total_amount=data.get("total_amount"),
            actor=current_identity(),
        )
        return ok("Purchase order created", 201, po_id=po_id)

    @app.route("/api/supply-chain/purchase-orders/<int:po_id>", methods=["PUT"], endpoint="sc_update_po")
    @gate(PURCHASE_PAGE, PermissionAction.UPDATE)
    @handle_errors(logger)
    def sc_update_po(po_id: int):
        data = payload()
        sc.update_purchase_order(
            po_id=po_id,
            vendor_id=int(data.get("vendor_id") or 0),
            total_amount=data.get("total_amount"),
            actor=current_identity(),
        )
        return ok("Purchase order updated")

    @app.route("/api/supply-chain/purchase-orders/<int:po_id>", methods=["DELETE"], endpoint="sc_delete_po")
    @gate(PURCHASE_PAGE, PermissionAction.DELETE)
    @handle_errors(logger)
    def sc_delete_po(po_id: int):
        sc.delete_purchase_order(po_id=po_id, actor=current_identity())
        return ok("Purchase order deleted")

    @app.route("/api/supply-chain/purchase-orders/<int:po_id>/action", methods=["POST"], endpoint="sc_po_action")
    @gate(APPROVALS_PAGE, PermissionAction.UPDATE)
    @handle_errors(logger)
    def sc_po_action(po_id: int):
        status = sc.po_action(
            po_id=po_id,
            action=ApprovalAction(payload().get("action", "")),
            actor=current_identity(),
        )
        return ok(f"Purchase order {status.value.lower()}", new_status=status)

    @app.route("/api/supply-chain/purchase-orders/<int:po_id>/grn", methods=["POST"], endpoint="sc_grn")
    @gate(STORE_PAGE, PermissionAction.UPDATE)
    @handle_errors(logger)
    def sc_grn(po_id: int):
        data = payload()
        sc.receive_grn(
            po_id=po_id,
            grn_number=data.get("grn_number", ""),
            remarks=data.get("remarks", ""),
            actor=current_identity(),
        )
        return ok("Goods received and stock updated")

    # -------- vendors --------
    @app.route("/api/supply-chain/vendors", methods=["GET"], endpoint="sc_vendors")
    @gate(PURCHASE_PAGE)
    @handle_errors(logger)
    def sc_vendors():
        return ok(vendors=sc.list_vendors())

    @app.route("/api/supply-chain/vendors", methods=["POST"], endpoint="sc_vendor_add")
    @gate(PURCHASE_PAGE, PermissionAction.EDIT)
    @handle_errors(logger)
    def sc_vendor_add():
        data = payload()
        vendor_id = sc.add_vendor(
            name=data.get("name", ""),
            contact_person=data.get("contact_person", ""),
            phone=data.get("phone", ""),
            address=data.get("address", ""),
            email=data.get("email") or None,
        )
        return ok("Vendor added", 201, vendor_id=vendor_id)

    @app.route("/api/supply-chain/vendors/<int:vendor_id>", methods=["PUT"], endpoint="sc_vendor_update")
    @gate(PURCHASE_PAGE, PermissionAction.UPDATE)
    @handle_errors(logger)
    def sc_vendor_update(vendor_id: int):
        data = payload()
        sc.update_vendor(
            Vendor(
                id=vendor_id,
                name=data.get("name", ""),
                contact_person=data.get("contact_person", ""),
                phone=data.get("phone", ""),
                email=data.get("email") or None,
                address=data.get("address", ""),
            )
        )
        return ok("Vendor updated")

    @app.route("/api/supply-chain/vendors/<int:vendor_id>", methods=["DELETE"], endpoint="sc_vendor_delete")
    @gate(PURCHASE_PAGE, PermissionAction.DELETE)
    @handle_errors(logger)
    def sc_vendor_delete(vendor_id: int):
        sc.delete_vendor(vendor_id)
        return ok("Vendor deleted")
