from __future__ import annotations

import sys
from pathlib import Path

import importlib

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.smart_attendance.smart_attendance.database.bootstrap import apply_schema, list_tables


def _apply(label: str, db_config: dict, schema_path: Path) -> None:
    apply_schema(db_config, schema_path=schema_path)
    tables = list_tables(db_config)
    print(
        f"OK: Applied schema.sql ({label}) -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')} "
        f"(tables={len(tables)})"
    )


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    schema_path = REPO_ROOT / "database" / "schema.sql"

    _apply("local", dict(settings.DB_CONFIG), schema_path)
    remote = getattr(settings, "REMOTE_DB_CONFIG", None)
    if remote:
        _apply("remote", dict(remote), schema_path)


if __name__ == "__main__":
    main()
