from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..common.datetime_utils import ensure_aware, to_db
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .repository import WatermarkRepository


class MySQLWatermarkRepository(WatermarkRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, name: str) -> Optional[datetime]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT watermark FROM sync_state WHERE name=%s", (name,))
            r = fetchone(cur)
            return ensure_aware(r["watermark"]) if r else None

    def set(self, name: str, value: datetime) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO sync_state(name, watermark) VALUES(%s, %s)
                ON DUPLICATE KEY UPDATE watermark=VALUES(watermark)
                """,
                (name, to_db(value)),
            )
