from __future__ import annotations

import threading
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Optional

from src.smart_attendance.smart_attendance.attendance.model import AttendanceRecord, Fix
from src.smart_attendance.smart_attendance.attendance.repository import ChangeSet
from src.smart_attendance.smart_attendance.core.constants import CHANGE_LOOKBACK_SECONDS
from src.smart_attendance.smart_attendance.core.enums import AttendanceStatus, PenaltyType
from src.smart_attendance.smart_attendance.core.exceptions import DuplicateRecordError, StoreError
from src.smart_attendance.smart_attendance.events.model import Event
from src.smart_attendance.smart_attendance.members.model import Member

T0 = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)

# Roughly 111 m per 0.001 degree of latitude.
EVENT_LAT = 10.7769
EVENT_LON = 106.7009


def make_event(event_id: str = "ev-1", *, start: datetime = T0, hours: int = 2, **overrides) -> Event:
    fields = dict(
        event_id=event_id,
        name="Lecture",
        start_time=start,
        end_time=start + timedelta(hours=hours),
        latitude=EVENT_LAT,
        longitude=EVENT_LON,
    )
    fields.update(overrides)
    return Event(**fields)


def fix_at(lat: float = EVENT_LAT, lon: float = EVENT_LON, *, accuracy: float = 5.0) -> Fix:
    return Fix(latitude=lat, longitude=lon, accuracy=accuracy, timestamp=T0)


def make_record(
    record_id: str = "r-1",
    *,
    member_id: str = "m-1",
    event_id: str = "ev-1",
    status: AttendanceStatus = AttendanceStatus.PRESENT,
    penalty: Optional[PenaltyType] = None,
    at: datetime = T0,
    updated_at: Optional[datetime] = None,
    synced: bool = False,
) -> AttendanceRecord:
    return AttendanceRecord(
        record_id=record_id,
        member_id=member_id,
        event_id=event_id,
        timestamp=at,
        status=status,
        penalty=penalty,
        latitude=EVENT_LAT,
        longitude=EVENT_LON,
        updated_at=updated_at or at,
        synced=synced,
    )


class InMemoryStore:
    """Local and remote store in one; ``changed_at`` mimics the server-side column."""

    def __init__(self, *, lookback: timedelta = timedelta(seconds=CHANGE_LOOKBACK_SECONDS)):
        self._lock = threading.Lock()
        self.lookback = lookback
        self.events: dict[str, Event] = {}
        self.records: dict[str, AttendanceRecord] = {}
        self.changed_at: dict[str, datetime] = {}
        self._clock = datetime(2026, 1, 1, tzinfo=timezone.utc)
        self.create_calls = 0

    def _touch(self, record_id: str) -> None:
        self._clock += timedelta(microseconds=1)
        self.changed_at[record_id] = self._clock

    def _holder(self, member_id: str, event_id: str) -> Optional[AttendanceRecord]:
        for r in self.records.values():
            if r.member_id == member_id and r.event_id == event_id:
                return r
        return None

    def get_event(self, event_id: str) -> Optional[Event]:
        return self.events.get(event_id)

    def save_event(self, event: Event) -> None:
        self.events[event.event_id] = event

    def get_record(self, member_id: str, event_id: str) -> Optional[AttendanceRecord]:
        with self._lock:
            return self._holder(member_id, event_id)

    def get_record_by_id(self, record_id: str) -> Optional[AttendanceRecord]:
        return self.records.get(record_id)

    def create_record(self, record: AttendanceRecord) -> None:
        with self._lock:
            self.create_calls += 1
            if record.record_id in self.records or self._holder(record.member_id, record.event_id):
                raise DuplicateRecordError("Duplicate entry")
            self.records[record.record_id] = record
            self._touch(record.record_id)

    def upsert_record(self, record: AttendanceRecord) -> None:
        with self._lock:
            holder = self._holder(record.member_id, record.event_id)
            if holder is not None and holder.record_id != record.record_id:
                raise DuplicateRecordError("Duplicate entry for (member, event)")
            self.records[record.record_id] = record
            self._touch(record.record_id)

    def list_for_member(self, member_id: str):
        items = [r for r in self.records.values() if r.member_id == member_id]
        items.sort(key=lambda r: r.timestamp, reverse=True)
        return items

    def list_unsynced(self):
        items = [r for r in self.records.values() if not r.synced]
        items.sort(key=lambda r: r.updated_at)
        return items

    def mark_synced(self, record_id: str, *, updated_at: datetime) -> bool:
        with self._lock:
            current = self.records.get(record_id)
            if current is None or current.synced or current.updated_at != updated_at:
                return False
            self.records[record_id] = replace(current, synced=True)
            return True

    def list_changed_since(self, watermark: Optional[datetime]) -> ChangeSet:
        floor = watermark - self.lookback if watermark is not None else None
        ids = sorted(
            (rid for rid, at in self.changed_at.items() if floor is None or at > floor),
            key=lambda rid: self.changed_at[rid],
        )
        if not ids:
            return ChangeSet(records=[], watermark=watermark)
        latest = self.changed_at[ids[-1]]
        if watermark is not None and latest < watermark:
            latest = watermark
        return ChangeSet(records=[self.records[rid] for rid in ids], watermark=latest)


class BrokenStore:
    """Every call raises ``StoreError``."""

    def __getattr__(self, name):
        def _fail(*args, **kwargs):
            raise StoreError(f"{name}: connection refused")

        return _fail


@dataclass
class InMemoryEvents:
    events: dict[str, Event] = field(default_factory=dict)

    def get_by_id(self, event_id: str) -> Optional[Event]:
        return self.events.get(event_id)

    def save(self, event: Event) -> None:
        self.events[event.event_id] = event

    def set_active(self, event_id: str, is_active: bool) -> bool:
        if event_id not in self.events:
            return False
        self.events[event_id] = replace(self.events[event_id], is_active=is_active)
        return True

    def list_active(self):
        return sorted((e for e in self.events.values() if e.is_active), key=lambda e: e.start_time)


@dataclass
class InMemoryMembers:
    members: dict[str, Member] = field(default_factory=dict)

    def get_by_id(self, member_id: str) -> Optional[Member]:
        return self.members.get(member_id)

    def list_active_ids(self):
        return sorted(m.member_id for m in self.members.values() if m.is_active)

    def save(self, member: Member) -> None:
        self.members[member.member_id] = member


@dataclass
class InMemoryWatermarks:
    values: dict[str, datetime] = field(default_factory=dict)

    def get(self, name: str) -> Optional[datetime]:
        return self.values.get(name)

    def set(self, name: str, value: datetime) -> None:
        self.values[name] = value
