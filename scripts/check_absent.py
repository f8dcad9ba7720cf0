"""Run the absence sweep once. Meant for cron, e.g. hourly:

    0 * * * *  cd /srv/library-desk && python scripts/check_absent.py
"""
from __future__ import annotations

import argparse
import importlib
import json
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = REPO_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from dotenv import load_dotenv

from library_desk.app_logger import setup_logging
from library_desk.common.datetime_utils import parse_iso_date
from library_desk.config import get_settings_module
from library_desk.container import build_container


def main() -> None:
    parser = argparse.ArgumentParser(description="Mark students absent for shifts that ended without a check-in.")
    parser.add_argument("--date", help="YYYY-MM-DD, defaults to today")
    args = parser.parse_args()

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    setup_logging(getattr(settings, "LOG_LEVEL", None))

    container = build_container(db_config=settings.DB_CONFIG)
    report = container.absence_detector.run(parse_iso_date(args.date) if args.date else None)
    print(
        json.dumps(
            {
                "date": report.date.isoformat(),
                "absentCount": report.absent_count,
                "absentStudents": [s.to_dict() for s in report.absent_students],
            }
        )
    )


if __name__ == "__main__":
    main()
