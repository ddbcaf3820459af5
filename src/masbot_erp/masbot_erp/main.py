from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .common.datetime_utils import parse_hhmm
from .core.constants import DEFAULT_LATE_THRESHOLD
from .database.bootstrap import apply_schema, ensure_demo_data, list_tables

from .container import build_container
from .access.controller import register as register_access
from .attendance.controller import register as register_attendance
from .employees.controller import register as register_employees
from .inventory.controller import register as register_inventory
from .leaves.controller import register as register_leaves
from .payroll.controller import register as register_payroll
from .reports.controller import register as register_reports
from .supply_chain.controller import register as register_supply_chain
from .tasks.controller import register as register_tasks
from .users.controller import register as register_users

logger = logging.getLogger(__name__)


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    auto_init_db = bool(getattr(settings, "AUTO_INIT_DB", False))
    auto_seed_db = bool(getattr(settings, "AUTO_SEED_DB", False))
    if auto_init_db:
        schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
        apply_schema(db_config, schema_path=schema_path)
        logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
    if auto_seed_db:
        ensure_demo_data(db_config)
        logger.info("demo seed ready")

    late_raw = getattr(settings, "LATE_THRESHOLD", "")
    container = build_container(
        db_config=db_config,
        super_admin_email=getattr(settings, "SUPER_ADMIN_EMAIL", ""),
        super_admin_password_hash=getattr(settings, "SUPER_ADMIN_PASSWORD_HASH", None),
        late_threshold=parse_hhmm(late_raw) if late_raw else DEFAULT_LATE_THRESHOLD,
    )

    register_users(app, container)
    register_access(app, container)
    register_employees(app, container)
    register_leaves(app, container)
    register_attendance(app, container)
    register_reports(app, container)
    register_payroll(app, container)
    register_inventory(app, container)
    register_supply_chain(app, container)
    register_tasks(app, container)

    return app
