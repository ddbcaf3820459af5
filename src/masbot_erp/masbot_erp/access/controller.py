from __future__ import annotations

import logging

from flask import Flask

from ..common.web import handle_errors, ok, page_required, payload
from ..container import Container
from ..core.enums import PermissionAction
from . import catalog

logger = logging.getLogger(__name__)

MODULE = "hr"
PAGE = "user-access"


def register(app: Flask, container: Container) -> None:
    can_view = page_required(container.access, MODULE, PAGE, PermissionAction.VIEW)
    can_update = page_required(container.access, MODULE, PAGE, PermissionAction.UPDATE)

    @app.route("/api/access/catalog", methods=["GET"], endpoint="access_catalog")
    @can_view
    def access_catalog():
        return ok(modules=catalog.MODULES, pages=catalog.MODULE_PAGES)

    @app.route("/api/access/users/<string:email>", methods=["GET"], endpoint="access_get")
    @can_view
    @handle_errors(logger)
    def access_get(email: str):
        return ok(permissions=container.access.permissions_for(email))

    @app.route("/api/access/users/<string:email>", methods=["PUT"], endpoint="access_replace")
    @can_update
    @handle_errors(logger)
    def access_replace(email: str):
        matrix = container.access.set_user_permissions(email, payload().get("permissions") or {})
        return ok("Permissions saved", permissions=matrix)

    @app.route("/api/access/users/<string:email>/modules/<string:module_id>", methods=["POST"], endpoint="access_enable_module")
    @can_update
    @handle_errors(logger)
    def access_enable_module(email: str, module_id: str):
        return ok("Module enabled", permissions=container.access.enable_module(email, module_id))

    @app.route("/api/access/users/<string:email>/modules/<string:module_id>", methods=["DELETE"], endpoint="access_disable_module")
    @can_update
    @handle_errors(logger)
    def access_disable_module(email: str, module_id: str):
        return ok("Module disabled", permissions=container.access.disable_module(email, module_id))

    @app.route(
        "/api/access/users/<string:email>/modules/<string:module_id>/pages/<string:page_id>",
        methods=["PATCH"],
        endpoint="access_set_page",
    )
    @can_update
    @handle_errors(logger)
    def access_set_page(email: str, module_id: str, page_id: str):
        data = payload()
        matrix = container.access.set_page_permission(
            email,
            module_id,
            page_id,
            PermissionAction(data.get("action", "")),
            bool(data.get("allowed")),
        )
        return ok("Permission updated", permissions=matrix)
