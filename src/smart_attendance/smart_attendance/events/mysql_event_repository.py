from __future__ import annotations

from typing import Optional, Sequence

from ..common.datetime_utils import ensure_aware, to_db
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Event
from .repository import EventRepository

_COLUMNS = """
    event_id, name, start_time, end_time, latitude, longitude, geofence_radius,
    sign_in_start_offset, sign_in_end_offset, sign_out_start_offset, sign_out_end_offset, is_active
"""


def _to_event(r: dict) -> Event:
    return Event(
        event_id=str(r["event_id"]),
        name=r["name"],
        start_time=ensure_aware(r["start_time"]),
        end_time=ensure_aware(r["end_time"]),
        latitude=float(r["latitude"]),
        longitude=float(r["longitude"]),
        geofence_radius=float(r["geofence_radius"]),
        sign_in_start_offset=int(r["sign_in_start_offset"]),
        sign_in_end_offset=int(r["sign_in_end_offset"]),
        sign_out_start_offset=int(r["sign_out_start_offset"]),
        sign_out_end_offset=int(r["sign_out_end_offset"]),
        is_active=bool(r["is_active"]),
    )


class MySQLEventRepository(EventRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, event_id: str) -> Optional[Event]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM events WHERE event_id=%s", (event_id,))
            r = fetchone(cur)
            return _to_event(r) if r else None

    def save(self, event: Event) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO events({_COLUMNS})
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    name=VALUES(name),
                    start_time=VALUES(start_time),
                    end_time=VALUES(end_time),
                    latitude=VALUES(latitude),
                    longitude=VALUES(longitude),
                    geofence_radius=VALUES(geofence_radius),
                    sign_in_start_offset=VALUES(sign_in_start_offset),
                    sign_in_end_offset=VALUES(sign_in_end_offset),
                    sign_out_start_offset=VALUES(sign_out_start_offset),
                    sign_out_end_offset=VALUES(sign_out_end_offset),
                    is_active=VALUES(is_active)
                """,
                (
                    event.event_id,
                    event.name,
                    to_db(event.start_time),
                    to_db(event.end_time),
                    event.latitude,
                    event.longitude,
                    event.geofence_radius,
                    event.sign_in_start_offset,
                    event.sign_in_end_offset,
                    event.sign_out_start_offset,
                    event.sign_out_end_offset,
                    int(event.is_active),
                ),
            )

    def set_active(self, event_id: str, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE events SET is_active=%s WHERE event_id=%s", (int(is_active), event_id))
            return cur.rowcount > 0

    def list_active(self) -> Sequence[Event]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM events WHERE is_active=1 ORDER BY start_time")
            return [_to_event(r) for r in fetchall(cur)]
