from __future__ import annotations

import importlib
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .absence.controller import register as register_absence
from .admissions.controller import register as register_admissions
from .app_logger import get_logger, setup_logging
from .attendance.controller import register as register_attendance
from .bookings.controller import register as register_bookings
from .config import get_settings_module
from .container import Container, build_container
from .core.exceptions import ConfigurationError
from .database.bootstrap import apply_schema, ensure_admin_user, list_tables
from .database.connection import DBConfig
from .notifications.controller import register as register_notifications
from .payments.controller import register as register_payments
from .users.controller import register as register_users

SCHEMA_PATH = Path(__file__).resolve().parents[2] / "database" / "schema.sql"


def create_app(container: Optional[Container] = None) -> Flask:
    """Flask app factory.

    Passing a prebuilt container skips every database step (used by tests).
    """

    load_dotenv(override=False)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    setup_logging(getattr(settings, "LOG_LEVEL", None))
    logger = get_logger("app")

    app = Flask(__name__)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    if container is None:
        db_settings = getattr(settings, "DB_CONFIG", {})
        try:
            db_config = DBConfig.from_mapping(db_settings)
        except ConfigurationError:
            logger.exception(
                "Invalid database configuration in %s (host=%s, database=%s)",
                settings_module,
                db_settings.get("host"),
                db_settings.get("database"),
            )
            raise

        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.user,
            db_config.host,
            db_config.port,
            db_config.database,
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.info("schema ready (tables=%s)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            ensure_admin_user(
                db_config,
                email=getattr(settings, "ADMIN_EMAIL"),
                password=getattr(settings, "ADMIN_PASSWORD"),
            )
            logger.info("admin account ready (%s)", getattr(settings, "ADMIN_EMAIL"))

        container = build_container(db_config=db_settings)

    register_users(app, container)
    register_admissions(app, container)
    register_bookings(app, container)
    register_attendance(app, container)
    register_payments(app, container)
    register_notifications(app, container)
    register_absence(app, container)

    return app
