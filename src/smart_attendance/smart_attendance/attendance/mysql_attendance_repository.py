from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional, Sequence

from ..common.datetime_utils import ensure_aware, to_db
from ..core.constants import CHANGE_LOOKBACK_SECONDS
from ..core.enums import AttendanceStatus, PenaltyType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from ..events.model import Event
from ..events.mysql_event_repository import MySQLEventRepository
from .model import AttendanceRecord
from .repository import ChangeSet, LocalStore, RemoteStore

_COLUMNS = """
    record_id, member_id, event_id, timestamp, status, penalty,
    latitude, longitude, synced, note, updated_at
"""


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        record_id=str(r["record_id"]),
        member_id=str(r["member_id"]),
        event_id=str(r["event_id"]),
        timestamp=ensure_aware(r["timestamp"]),
        status=AttendanceStatus(r["status"]),
        penalty=PenaltyType(r["penalty"]) if r.get("penalty") else None,
        latitude=float(r["latitude"]) if r.get("latitude") is not None else None,
        longitude=float(r["longitude"]) if r.get("longitude") is not None else None,
        synced=bool(r["synced"]),
        note=r.get("note"),
        updated_at=ensure_aware(r["updated_at"]),
    )


def _params(record: AttendanceRecord) -> tuple:
    return (
        record.record_id,
        record.member_id,
        record.event_id,
        to_db(record.timestamp),
        record.status.value,
        record.penalty.value if record.penalty else None,
        record.latitude,
        record.longitude,
        int(record.synced),
        record.note,
        to_db(record.updated_at),
    )


class MySQLAttendanceStore(LocalStore, RemoteStore):
    """MySQL implementation of both the local and the remote store.

    The two stores share one schema; the container builds one instance per
    database. ``list_unsynced``/``mark_synced`` are only used on the local
    side and ``list_changed_since`` only on the remote side.
    """

    def __init__(self, conn_factory: DatabaseConnection, *, change_lookback: float = CHANGE_LOOKBACK_SECONDS):
        self._conn_factory = conn_factory
        self._events = MySQLEventRepository(conn_factory)
        self._lookback = timedelta(seconds=change_lookback)

    def get_event(self, event_id: str) -> Optional[Event]:
        return self._events.get_by_id(event_id)

    def save_event(self, event: Event) -> None:
        self._events.save(event)

    def get_record(self, member_id: str, event_id: str) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE member_id=%s AND event_id=%s",
                (member_id, event_id),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_record_by_id(self, record_id: str) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE record_id=%s", (record_id,))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def create_record(self, record: AttendanceRecord) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO attendance_records({_COLUMNS})
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                _params(record),
            )

    def upsert_record(self, record: AttendanceRecord) -> None:
        """Insert or replace the row with this ``record_id``.

        Keyed on ``record_id`` only. A row holding the same (member, event)
        under another id is never touched: the INSERT trips
        ``uq_attendance_member_event`` and surfaces as ``DuplicateRecordError``.
        """
        with db_cursor(self._conn_factory) as (_, cur):
            # An UPDATE reports rowcount 0 for unchanged rows; look the id up instead.
            cur.execute(
                "SELECT record_id FROM attendance_records WHERE record_id=%s FOR UPDATE",
                (record.record_id,),
            )
            if fetchone(cur) is None:
                cur.execute(
                    f"""
                    INSERT INTO attendance_records({_COLUMNS})
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    _params(record),
                )
                return

            cur.execute(
                """
                UPDATE attendance_records
                SET timestamp=%s, status=%s, penalty=%s, latitude=%s, longitude=%s,
                    synced=%s, note=%s, updated_at=%s
                WHERE record_id=%s
                """,
                _params(record)[3:] + (record.record_id,),
            )

    def list_for_member(self, member_id: str) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance_records
                WHERE member_id=%s
                ORDER BY timestamp DESC
                """,
                (member_id,),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_unsynced(self) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE synced=0 ORDER BY updated_at ASC"
            )
            return [_to_record(r) for r in fetchall(cur)]

    def mark_synced(self, record_id: str, *, updated_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET synced=1
                WHERE record_id=%s AND updated_at=%s AND synced=0
                """,
                (record_id, to_db(updated_at)),
            )
            return cur.rowcount > 0

    def list_changed_since(self, watermark: Optional[datetime]) -> ChangeSet:
        clauses = []
        params: list[object] = []
        if watermark is not None:
            clauses.append("changed_at > %s")
            params.append(to_db(watermark - self._lookback))
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}, changed_at FROM attendance_records
                {where}
                ORDER BY changed_at ASC
                """,
                tuple(params),
            )
            rows = fetchall(cur)

        if not rows:
            return ChangeSet(records=[], watermark=watermark)
        latest = ensure_aware(rows[-1]["changed_at"])
        if watermark is not None and latest < watermark:
            latest = watermark
        return ChangeSet(records=[_to_record(r) for r in rows], watermark=latest)
