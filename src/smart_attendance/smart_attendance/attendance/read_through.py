from __future__ import annotations

import logging
import threading
import time
from dataclasses import replace
from datetime import datetime
from typing import Callable, Optional, Sequence

from ..core.constants import REMOTE_RETRY_AFTER_SECONDS
from ..core.exceptions import StoreError
from ..events.model import Event
from .model import AttendanceRecord
from .repository import LocalStore, RemoteStore

logger = logging.getLogger(__name__)


class ReadThroughStore(LocalStore):
    """Local-first reads with a remote fallback.

    The local store answers every read it can. On a local miss the remote store
    is asked, and a hit is written back locally (records as already synced).
    A remote fault during fallback is logged and treated as a miss so offline
    operation keeps working; after a fault the remote is not asked again for
    ``retry_after`` seconds. Writes only ever go to the local store.
    """

    def __init__(
        self,
        local: LocalStore,
        remote: Optional[RemoteStore] = None,
        *,
        retry_after: float = REMOTE_RETRY_AFTER_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._local = local
        self._remote = remote
        self._retry_after = retry_after
        self._clock = clock
        self._lock = threading.Lock()
        self._offline_until: Optional[float] = None

    @property
    def local(self) -> LocalStore:
        return self._local

    def _remote_available(self) -> bool:
        with self._lock:
            if self._offline_until is None:
                return True
            if self._clock() >= self._offline_until:
                self._offline_until = None
                return True
            return False

    def _from_remote(self, what: str, fetch):
        if self._remote is None or not self._remote_available():
            return None
        try:
            return fetch(self._remote)
        except StoreError as exc:
            logger.warning(
                "Remote lookup of %s failed, using local data only for %.0fs: %s", what, self._retry_after, exc
            )
            with self._lock:
                self._offline_until = self._clock() + self._retry_after
            return None

    def get_event(self, event_id: str) -> Optional[Event]:
        event = self._local.get_event(event_id)
        if event is not None:
            return event
        event = self._from_remote(f"event {event_id}", lambda remote: remote.get_event(event_id))
        if event is not None:
            self._local.save_event(event)
        return event

    def save_event(self, event: Event) -> None:
        self._local.save_event(event)

    def get_record(self, member_id: str, event_id: str) -> Optional[AttendanceRecord]:
        record = self._local.get_record(member_id, event_id)
        if record is not None:
            return record
        record = self._from_remote(
            f"record ({member_id}, {event_id})",
            lambda remote: remote.get_record(member_id, event_id),
        )
        return self._backfill(record)

    def get_record_by_id(self, record_id: str) -> Optional[AttendanceRecord]:
        record = self._local.get_record_by_id(record_id)
        if record is not None:
            return record
        record = self._from_remote(f"record {record_id}", lambda remote: remote.get_record_by_id(record_id))
        return self._backfill(record)

    def _backfill(self, record: Optional[AttendanceRecord]) -> Optional[AttendanceRecord]:
        if record is None:
            return None
        record = replace(record, synced=True)
        self._local.upsert_record(record)
        return record

    def create_record(self, record: AttendanceRecord) -> None:
        self._local.create_record(record)

    def upsert_record(self, record: AttendanceRecord) -> None:
        self._local.upsert_record(record)

    def list_for_member(self, member_id: str) -> Sequence[AttendanceRecord]:
        return self._local.list_for_member(member_id)

    def list_unsynced(self) -> Sequence[AttendanceRecord]:
        return self._local.list_unsynced()

    def mark_synced(self, record_id: str, *, updated_at: datetime) -> bool:
        return self._local.mark_synced(record_id, updated_at=updated_at)
