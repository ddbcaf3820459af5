from __future__ import annotations

import logging
from datetime import date

from flask import Flask, Response, request, send_file

from ..common.web import handle_errors, ok, optional_date, page_required, payload
from ..container import Container
from ..core.enums import AssetReportKind, AssetStatus, MRFStatus, PermissionAction
from ..reports.export import XLSX_MIMETYPE
from .asset_report_export import asset_report_filename, asset_report_workbook
from .lab_export import lab_csv_filename, lab_inventory_csv
from .model import MRF, LabSystem

logger = logging.getLogger(__name__)

MODULE = "inventory_management"

_SYSTEM_FIELDS = (
    "serial_number", "system_model", "lcd_model", "lcd_inches", "cpu", "ram",
    "storage", "gpu", "keyboard", "mouse", "network_device",
)


def _lab_system(data: dict, *, lab_id: int, system_id: int = 0) -> LabSystem:
    return LabSystem(
        id=system_id,
        lab_id=lab_id,
        **{f: str(data.get(f) or "").strip() for f in _SYSTEM_FIELDS},
    )


def _mrf(data: dict, mrf_id: int = 0) -> MRF:
    return MRF(
        id=mrf_id,
        mrf_number=str(data.get("mrf_number") or ""),
        demand_number=str(data.get("demand_number") or ""),
        description=str(data.get("description") or ""),
        date=optional_date(data.get("date")),
        status=MRFStatus(data.get("status") or MRFStatus.PENDING.value),
    )


def register(app: Flask, container: Container) -> None:
    def gate(page: str, action: PermissionAction = PermissionAction.VIEW):
        return page_required(container.access, MODULE, page, action)

    inventory = container.inventory_service

    # -------- assets --------
    @app.route("/api/inventory/items", methods=["GET"], endpoint="inventory_items")
    @gate("master")
    @handle_errors(logger)
    def inventory_items():
        status = request.args.get("status")
        items = inventory.list_items(
            item_type=request.args.get("type") or None,
            status=AssetStatus(status) if status else None,
        )
        return ok(items=items)

    @app.route("/api/inventory/items", methods=["POST"], endpoint="inventory_add")
    @gate("master", PermissionAction.EDIT)
    @handle_errors(logger)
    def inventory_add():
        data = payload()
        assets = data.get("items") if isinstance(data.get("items"), list) else [data]
        ids = inventory.add_assets(assets)
        return ok(f"{len(ids)} item(s) added", 201, ids=ids)

    @app.route("/api/inventory/items/<int:item_id>", methods=["PUT"], endpoint="inventory_update")
    @gate("master", PermissionAction.UPDATE)
    @handle_errors(logger)
    def inventory_update(item_id: int):
        data = dict(payload(), id=item_id)
        inventory.update_asset(data)
        return ok("Item updated")

    @app.route("/api/inventory/items/<int:item_id>", methods=["DELETE"], endpoint="inventory_delete")
    @gate("master", PermissionAction.DELETE)
    @handle_errors(logger)
    def inventory_delete(item_id: int):
        inventory.delete_asset(item_id)
        return ok("Item deleted")

    @app.route("/api/inventory/items/<int:item_id>/issue", methods=["POST"], endpoint="inventory_issue")
    @gate("master", PermissionAction.UPDATE)
    @handle_errors(logger)
    def inventory_issue(item_id: int):
        data = payload()
        item = inventory.issue_asset(
            item_id=item_id,
            employee_name=data.get("employee_name", ""),
            issue_date=optional_date(data.get("issue_date")),
        )
        return ok(f"Asset issued to {item.assigned_to}", item=item)

    @app.route("/api/inventory/items/<int:item_id>/return", methods=["POST"], endpoint="inventory_return")
    @gate("master", PermissionAction.UPDATE)
    @handle_errors(logger)
    def inventory_return(item_id: int):
        return ok("Asset returned to stock", item=inventory.return_asset(item_id))

    @app.route("/api/inventory/reports/<kind>", methods=["GET"], endpoint="inventory_reports")
    @gate("reports")
    @handle_errors(logger)
    def inventory_reports(kind: str):
        groups = inventory.asset_report(kind)
        if (request.args.get("format") or "").lower() == "xlsx":
            kind = AssetReportKind(kind)
            return send_file(
                asset_report_workbook(kind, groups),
                download_name=asset_report_filename(kind, date.today()),
                as_attachment=True,
                mimetype=XLSX_MIMETYPE,
            )
        return ok(kind=kind, groups=groups)

    # -------- kitchen & recipes --------
    @app.route("/api/inventory/kitchen", methods=["GET"], endpoint="kitchen_overview")
    @gate("kitchen")
    @handle_errors(logger)
    def kitchen_overview():
        consumables, fixed = inventory.kitchen_split()
        return ok(
            consumables=consumables,
            fixed_assets=fixed,
            low_stock=inventory.low_stock_count(),
            recipes=inventory.list_recipes(),
        )

    @app.route("/api/inventory/recipes", methods=["POST"], endpoint="recipe_add")
    @gate("kitchen", PermissionAction.EDIT)
    @handle_errors(logger)
    def recipe_add():
        data = payload()
        recipe_id = inventory.add_recipe(name=data.get("name", ""), ingredients=data.get("ingredients") or [])
        return ok("Recipe saved", 201, recipe_id=recipe_id)

    @app.route("/api/inventory/recipes/<int:recipe_id>", methods=["DELETE"], endpoint="recipe_delete")
    @gate("kitchen", PermissionAction.DELETE)
    @handle_errors(logger)
    def recipe_delete(recipe_id: int):
        inventory.delete_recipe(recipe_id)
        return ok("Recipe deleted")

    @app.route("/api/inventory/recipes/<int:recipe_id>/check", methods=["GET"], endpoint="recipe_check")
    @gate("kitchen")
    @handle_errors(logger)
    def recipe_check(recipe_id: int):
        servings = int(request.args.get("servings") or 1)
        checks = inventory.check_recipe(recipe_id=recipe_id, servings=servings)
        return ok(
            ingredients=[dict(name=c.name, required=c.required, unit=c.unit, available=c.available, sufficient=c.sufficient) for c in checks],
            sufficient=all(c.sufficient for c in checks),
        )

    @app.route("/api/inventory/recipes/<int:recipe_id>/use", methods=["POST"], endpoint="recipe_use")
    @gate("kitchen", PermissionAction.UPDATE)
    @handle_errors(logger)
    def recipe_use(recipe_id: int):
        servings = int(payload().get("servings") or 1)
        inventory.use_materials(recipe_id=recipe_id, servings=servings)
        return ok(f"Materials used for {servings} serving(s)")

    @app.route("/api/inventory/recipes/<int:recipe_id>/cart", methods=["GET"], endpoint="recipe_cart")
    @gate("kitchen")
    @handle_errors(logger)
    def recipe_cart(recipe_id: int):
        cart, missing = inventory.recipe_cart(recipe_id=recipe_id, portions=int(request.args.get("portions") or 1))
        return ok(items=cart, missing=missing)

    # -------- toners --------
    @app.route("/api/inventory/toners", methods=["GET"], endpoint="toners_list")
    @gate("printers")
    @handle_errors(logger)
    def toners_list():
        return ok(toners=container.toner_service.grouped())

    @app.route("/api/inventory/toners", methods=["POST"], endpoint="toners_save")
    @gate("printers", PermissionAction.EDIT)
    @handle_errors(logger)
    def toners_save():
        data = payload()
        printers = data.get("compatible_printers") or []
        if isinstance(printers, str):
            printers = printers.split(",")
        container.toner_service.save_model(
            model=data.get("model", ""),
            compatible_printers=printers,
            filled=int(data.get("filled") or 0),
            empty=int(data.get("empty") or 0),
        )
        return ok("Toner saved")

    @app.route("/api/inventory/toners/<path:model>/empty", methods=["POST"], endpoint="toners_mark_empty")
    @gate("printers", PermissionAction.UPDATE)
    @handle_errors(logger)
    def toners_mark_empty(model: str):
        container.toner_service.mark_empty(model)
        return ok("Toner marked empty")

    @app.route("/api/inventory/toners/<path:model>/filled", methods=["POST"], endpoint="toners_mark_filled")
    @gate("printers", PermissionAction.UPDATE)
    @handle_errors(logger)
    def toners_mark_filled(model: str):
        container.toner_service.mark_filled(model)
        return ok("Toner marked filled")

    @app.route("/api/inventory/toners/<path:model>", methods=["DELETE"], endpoint="toners_delete")
    @gate("printers", PermissionAction.DELETE)
    @handle_errors(logger)
    def toners_delete(model: str):
        container.toner_service.delete_model(model)
        return ok("Toner model deleted")

    # -------- labs --------
    @app.route("/api/inventory/labs", methods=["GET"], endpoint="labs_list")
    @gate("labs")
    @handle_errors(logger)
    def labs_list():
        return ok(labs=container.lab_service.list_labs())

    @app.route("/api/inventory/labs", methods=["POST"], endpoint="labs_add")
    @gate("labs", PermissionAction.EDIT)
    @handle_errors(logger)
    def labs_add():
        lab_id = container.lab_service.add_lab(payload().get("name", ""))
        return ok("Lab added", 201, lab_id=lab_id)

    @app.route("/api/inventory/labs/<int:lab_id>/systems", methods=["POST"], endpoint="labs_add_system")
    @gate("labs", PermissionAction.EDIT)
    @handle_errors(logger)
    def labs_add_system(lab_id: int):
        system_id = container.lab_service.add_system(_lab_system(payload(), lab_id=lab_id))
        return ok("System added", 201, system_id=system_id)

    @app.route("/api/inventory/labs/<int:lab_id>/systems/<int:system_id>", methods=["PUT"], endpoint="labs_update_system")
    @gate("labs", PermissionAction.UPDATE)
    @handle_errors(logger)
    def labs_update_system(lab_id: int, system_id: int):
        container.lab_service.update_system(_lab_system(payload(), lab_id=lab_id, system_id=system_id))
        return ok("System updated")

    @app.route("/api/inventory/labs/<int:lab_id>/systems/<int:system_id>", methods=["DELETE"], endpoint="labs_delete_system")
    @gate("labs", PermissionAction.DELETE)
    @handle_errors(logger)
    def labs_delete_system(lab_id: int, system_id: int):
        container.lab_service.delete_system(lab_id=lab_id, system_id=system_id)
        return ok("System deleted")

    @app.route("/api/inventory/labs/<int:lab_id>/export", methods=["GET"], endpoint="labs_export")
    @gate("labs")
    @handle_errors(logger)
    def labs_export(lab_id: int):
        lab = container.lab_service.get_lab(lab_id)
        return Response(
            lab_inventory_csv(lab),
            mimetype="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{lab_csv_filename(lab)}"'},
        )

    # -------- MRF --------
    @app.route("/api/inventory/mrfs", methods=["GET"], endpoint="mrfs_list")
    @gate("mrf")
    @handle_errors(logger)
    def mrfs_list():
        return ok(mrfs=container.mrf_service.list_mrfs())

    @app.route("/api/inventory/mrfs", methods=["POST"], endpoint="mrfs_add")
    @gate("mrf", PermissionAction.EDIT)
    @handle_errors(logger)
    def mrfs_add():
        mrf_id = container.mrf_service.add_mrf(_mrf(payload()))
        return ok("MRF added", 201, mrf_id=mrf_id)

    @app.route("/api/inventory/mrfs/<int:mrf_id>", methods=["PUT"], endpoint="mrfs_update")
    @gate("mrf", PermissionAction.UPDATE)
    @handle_errors(logger)
    def mrfs_update(mrf_id: int):
        container.mrf_service.update_mrf(_mrf(payload(), mrf_id))
        return ok("MRF updated")

    @app.route("/api/inventory/mrfs/<int:mrf_id>", methods=["DELETE"], endpoint="mrfs_delete")
    @gate("mrf", PermissionAction.DELETE)
    @handle_errors(logger)
    def mrfs_delete(mrf_id: int):
        container.mrf_service.delete_mrf(mrf_id)
        return ok("MRF deleted")

    @app.route("/api/inventory/mrfs/<int:mrf_id>/proceed", methods=["POST"], endpoint="mrfs_proceed")
    @gate("mrf", PermissionAction.UPDATE)
    @handle_errors(logger)
    def mrfs_proceed(mrf_id: int):
        container.mrf_service.proceed(mrf_id)
        return ok("MRF marked as proceeded")
