from __future__ import annotations

import atexit
import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .database.bootstrap import apply_schema, list_tables

from .container import Container, build_container
from .attendance.controller import register as register_attendance
from .events.controller import register as register_events
from .penalties.controller import register as register_penalties
from .sync.controller import register as register_sync

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    remote_db_config = getattr(settings, "REMOTE_DB_CONFIG", None)
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=str(getattr(settings, "LOG_LEVEL", "INFO")).upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logger.info(
        "settings=%s db=%s@%s:%s/%s remote=%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
        remote_db_config.get("host") if remote_db_config else "none",
    )

    if container is None:
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.info("Local schema ready (tables=%d)", len(list_tables(db_config)))

        container = build_container(
            db_config=db_config,
            remote_db_config=remote_db_config,
            location_timeout=float(getattr(settings, "LOCATION_TIMEOUT_SECONDS", 10)),
            remote_connect_timeout=int(getattr(settings, "REMOTE_CONNECT_TIMEOUT_SECONDS", 3)),
            sync_interval=float(getattr(settings, "SYNC_INTERVAL_SECONDS", 900)),
        )
        if bool(getattr(settings, "SYNC_ENABLED", False)) and container.sync_scheduler is not None:
            container.sync_scheduler.start()
        atexit.register(container.close)

    app.extensions["smart_attendance"] = container

    register_events(app, container)
    register_attendance(app, container)
    register_penalties(app, container)
    register_sync(app, container)

    return app
