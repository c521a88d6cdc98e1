"""Seed demo members (idempotent).

Events are created through the API (``POST /api/events``) so their times are
always in the future.
"""
from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.smart_attendance.smart_attendance.database.connection import DBConfig, DatabaseConnection
from src.smart_attendance.smart_attendance.members.model import Member
from src.smart_attendance.smart_attendance.members.mysql_member_repository import MySQLMemberRepository

DEMO_MEMBERS = (
    Member(member_id="m-001", name="Demo Member One"),
    Member(member_id="m-002", name="Demo Member Two"),
    Member(member_id="m-003", name="Demo Member Three"),
)


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    repo = MySQLMemberRepository(DatabaseConnection(DBConfig.from_dict(db_config)))
    for member in DEMO_MEMBERS:
        repo.save(member)

    print(
        f"OK: Seeded {len(DEMO_MEMBERS)} members -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
    )


if __name__ == "__main__":
    main()
