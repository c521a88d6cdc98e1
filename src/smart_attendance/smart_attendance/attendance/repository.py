from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..events.model import Event
from .model import AttendanceRecord


@dataclass(frozen=True)
class ChangeSet:
    """Remote records changed after a watermark, plus the watermark to store next."""

    records: Sequence[AttendanceRecord]
    watermark: Optional[datetime]


class AttendanceStore(Protocol):
    """Operations shared by the local and the remote durable store."""

    def get_event(self, event_id: str) -> Optional[Event]:
        raise NotImplementedError

    def get_record(self, member_id: str, event_id: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_record_by_id(self, record_id: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def upsert_record(self, record: AttendanceRecord) -> None:
        """Insert or replace keyed by ``record_id``; safe to repeat.

        Raises ``DuplicateRecordError`` when another record id already holds
        the same (member, event).
        """

        raise NotImplementedError


class LocalStore(AttendanceStore, Protocol):
    def save_event(self, event: Event) -> None:
        raise NotImplementedError

    def create_record(self, record: AttendanceRecord) -> None:
        """Plain insert; raises ``DuplicateRecordError`` if (member, event) is taken."""

        raise NotImplementedError

    def list_for_member(self, member_id: str) -> Sequence[AttendanceRecord]:
        """Newest first."""

        raise NotImplementedError

    def list_unsynced(self) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def mark_synced(self, record_id: str, *, updated_at: datetime) -> bool:
        """Flip ``synced`` only if the row still carries ``updated_at``."""

        raise NotImplementedError


class RemoteStore(AttendanceStore, Protocol):
    def list_changed_since(self, watermark: Optional[datetime]) -> ChangeSet:
        """Rows changed after ``watermark`` minus a lookback margin.

        Rows stamped before the watermark but committed after it are still
        returned, so callers see some rows twice and must merge idempotently.
        The returned watermark never moves backwards.
        """

        raise NotImplementedError
