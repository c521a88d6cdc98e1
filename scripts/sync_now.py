"""Run one pull-then-push cycle against REMOTE_DB_CONFIG and print the report."""
from __future__ import annotations

import importlib
import json
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.smart_attendance.smart_attendance.container import build_container
from src.smart_attendance.smart_attendance.core.enums import SyncStatus


def main() -> int:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(level=str(getattr(settings, "LOG_LEVEL", "INFO")).upper())

    remote = getattr(settings, "REMOTE_DB_CONFIG", None)
    if not remote:
        print("REMOTE_DB_CONFIG is not set; nothing to sync against.")
        return 2

    container = build_container(
        db_config=settings.DB_CONFIG,
        remote_db_config=remote,
        remote_connect_timeout=int(getattr(settings, "REMOTE_CONNECT_TIMEOUT_SECONDS", 3)),
    )
    try:
        report = container.sync_reconciler.sync_all()
    finally:
        container.close()

    print(json.dumps(report.as_dict(), indent=2))
    return 0 if report.status == SyncStatus.SUCCESS else 1


if __name__ == "__main__":
    sys.exit(main())
