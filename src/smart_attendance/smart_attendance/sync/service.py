from __future__ import annotations

import logging
import threading
from dataclasses import replace

from ..attendance.model import AttendanceRecord
from ..attendance.repository import LocalStore, RemoteStore
from ..core.constants import PULL_WATERMARK_NAME
from .model import SyncOutcome, SyncReport
from .repository import WatermarkRepository

logger = logging.getLogger(__name__)


class SyncReconciler:
    """Reconciles the local store with the authoritative remote store.

    Only the ``synced`` flag of local rows is ever flipped by a push, and only
    when the row is unchanged since it was read, so a concurrent local write
    simply stays unsynced until the next cycle. Remote upserts are keyed by
    record id and therefore safe to repeat.
    """

    def __init__(
        self,
        local: LocalStore,
        remote: RemoteStore,
        watermarks: WatermarkRepository,
        *,
        watermark_name: str = PULL_WATERMARK_NAME,
    ):
        self._local = local
        self._remote = remote
        self._watermarks = watermarks
        self._watermark_name = watermark_name
        self._cycle = threading.Lock()

    def push(self) -> SyncOutcome:
        with self._cycle:
            return self._push()

    def pull(self) -> SyncOutcome:
        with self._cycle:
            return self._pull()

    def sync_all(self) -> SyncReport:
        # Pull first so records already superseded remotely are not re-uploaded.
        with self._cycle:
            pulled = self._pull()
            pushed = self._push()
        report = SyncReport(pull=pulled, push=pushed)
        logger.info("Sync cycle finished: %s", report.status.value)
        return report

    def _push(self) -> SyncOutcome:
        try:
            pending = list(self._local.list_unsynced())
        except Exception as exc:
            logger.exception("Reading unsynced records failed")
            return SyncOutcome(phase="push", fatal=f"Failed to read unsynced records: {exc}")

        succeeded = failed = 0
        errors: list[str] = []
        for record in pending:
            try:
                self._remote.upsert_record(replace(record, synced=True))
                if not self._local.mark_synced(record.record_id, updated_at=record.updated_at):
                    logger.debug("Record %s changed during push; it stays unsynced", record.record_id)
                succeeded += 1
            except Exception as exc:
                failed += 1
                errors.append(f"{record.record_id}: {exc}")
                logger.warning("Pushing record %s failed: %s", record.record_id, exc)

        outcome = SyncOutcome(phase="push", succeeded=succeeded, failed=failed, errors=tuple(errors))
        if pending:
            logger.info("Pushed %d/%d records", succeeded, len(pending))
        return outcome

    def _pull(self) -> SyncOutcome:
        try:
            since = self._watermarks.get(self._watermark_name)
            changes = self._remote.list_changed_since(since)
        except Exception as exc:
            logger.exception("Fetching remote changes failed")
            return SyncOutcome(phase="pull", fatal=f"Failed to fetch remote changes: {exc}")

        succeeded = failed = skipped = conflicts = 0
        errors: list[str] = []
        for remote_record in changes.records:
            try:
                verdict = self._merge(remote_record)
            except Exception as exc:
                failed += 1
                errors.append(f"{remote_record.record_id}: {exc}")
                logger.warning("Applying remote record %s failed: %s", remote_record.record_id, exc)
                continue
            if verdict == "applied":
                succeeded += 1
            elif verdict == "conflict":
                conflicts += 1
            else:
                skipped += 1

        if failed == 0 and changes.watermark is not None and changes.watermark != since:
            try:
                self._watermarks.set(self._watermark_name, changes.watermark)
            except Exception as exc:
                logger.exception("Storing pull watermark failed")
                errors.append(f"watermark: {exc}")
                failed += 1

        return SyncOutcome(
            phase="pull",
            succeeded=succeeded,
            failed=failed,
            skipped=skipped,
            conflicts=conflicts,
            errors=tuple(errors),
        )

    def _merge(self, remote_record: AttendanceRecord) -> str:
        local = self._local.get_record_by_id(remote_record.record_id)
        if local is None:
            holder = self._local.get_record(remote_record.member_id, remote_record.event_id)
            if holder is not None:
                logger.warning(
                    "Remote record %s conflicts with local record %s for (%s, %s); kept local",
                    remote_record.record_id,
                    holder.record_id,
                    remote_record.member_id,
                    remote_record.event_id,
                )
                return "conflict"
        elif remote_record.updated_at <= local.updated_at:
            # Never overwrite a local copy with an older or equal remote write.
            return "skipped"

        self._local.upsert_record(replace(remote_record, synced=True))
        return "applied"
