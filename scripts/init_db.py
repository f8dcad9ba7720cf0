from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = REPO_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from dotenv import load_dotenv

from library_desk.app_logger import setup_logging
from library_desk.config import get_settings_module
from library_desk.database.bootstrap import apply_schema, ensure_admin_user, list_tables
from library_desk.database.connection import DBConfig


def main() -> None:
    parser = argparse.ArgumentParser(description="Apply database/schema.sql and optionally create the admin account.")
    parser.add_argument("--seed-admin", action="store_true", help="create the ADMIN_EMAIL account if missing")
    args = parser.parse_args()

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    logger = setup_logging(getattr(settings, "LOG_LEVEL", None))
    db_config = DBConfig.from_mapping(settings.DB_CONFIG)

    apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
    tables = list_tables(db_config)
    logger.info(
        "Applied schema.sql -> %s@%s:%s/%s (tables=%s)",
        db_config.user,
        db_config.host,
        db_config.port,
        db_config.database,
        len(tables),
    )

    if args.seed_admin:
        ensure_admin_user(db_config, email=settings.ADMIN_EMAIL, password=settings.ADMIN_PASSWORD)
        logger.info("Admin account ready: %s", settings.ADMIN_EMAIL)


if __name__ == "__main__":
    main()
