from __future__ import annotations

import logging
from datetime import timedelta

from flask import Flask, session

from ..common.web import current_identity, handle_errors, login_required, ok, payload, store_identity
from ..container import Container
from ..core.constants import DEFAULT_SESSION_DAYS

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/api/login", methods=["POST"], endpoint="login")
    @handle_errors(logger)
    def login():
        data = payload()
        result = container.auth_service.authenticate(data.get("email", ""), data.get("password", ""))

        session.clear()
        session.permanent = bool(data.get("remember_me"))
        app.permanent_session_lifetime = timedelta(days=DEFAULT_SESSION_DAYS)
        store_identity(result.identity)

        logger.info("Login %s (%s)", result.identity.email, result.identity.role.value)
        return ok(
            "Login successful",
            identity=result.identity,
            password_change_required=result.password_change_required,
            modules=container.access.accessible_modules(result.identity),
        )

    @app.route("/api/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return ok("Logged out")

    @app.route("/api/me", methods=["GET"], endpoint="me")
    @login_required
    @handle_errors(logger)
    def me():
        identity = current_identity()
        return ok(
            identity=identity,
            modules=container.access.accessible_modules(identity),
            permissions=container.access.permissions_for(identity.email),
        )

    @app.route("/api/me/password", methods=["POST"], endpoint="change_password")
    @login_required
    @handle_errors(logger)
    def change_password():
        data = payload()
        container.auth_service.change_password(
            identity=current_identity(),
            current_password=data.get("current_password", ""),
            new_password=data.get("new_password", ""),
            confirm_password=data.get("confirm_password", ""),
        )
        return ok("Password updated")
