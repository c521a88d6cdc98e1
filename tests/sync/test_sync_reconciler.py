from __future__ import annotations

from dataclasses import replace
from datetime import timedelta

from src.smart_attendance.smart_attendance.core.constants import PULL_WATERMARK_NAME
from src.smart_attendance.smart_attendance.core.enums import AttendanceStatus, PenaltyType, SyncStatus
from src.smart_attendance.smart_attendance.core.exceptions import StoreError
from src.smart_attendance.smart_attendance.sync.service import SyncReconciler

from fakes import T0, BrokenStore, InMemoryStore, InMemoryWatermarks, make_record


class FlakyRemote(InMemoryStore):
    """Rejects upserts of the listed record ids."""

    def __init__(self, failing: set[str]):
        super().__init__()
        self.failing = failing

    def upsert_record(self, record):
        if record.record_id in self.failing:
            raise StoreError(f"write of {record.record_id} timed out")
        super().upsert_record(record)


def _reconciler(local=None, remote=None, watermarks=None):
    return SyncReconciler(local or InMemoryStore(), remote or InMemoryStore(), watermarks or InMemoryWatermarks())


def test_push_uploads_unsynced_and_marks_them():
    local, remote = InMemoryStore(), InMemoryStore()
    local.create_record(make_record("r-1"))
    local.create_record(make_record("r-2", event_id="ev-2"))

    outcome = _reconciler(local, remote).push()

    assert outcome.status == SyncStatus.SUCCESS
    assert outcome.succeeded == 2
    assert local.list_unsynced() == []
    assert all(r.synced for r in remote.records.values())


def test_round_trip_is_identity_up_to_synced_flag():
    local, remote = InMemoryStore(), InMemoryStore()
    original = make_record("r-1", status=AttendanceStatus.LATE, penalty=PenaltyType.MINOR)
    local.create_record(original)

    _reconciler(local, remote).push()

    assert remote.get_record_by_id("r-1") == replace(original, synced=True)


def test_push_reports_partial_success_and_keeps_failures_unsynced():
    local, remote = InMemoryStore(), FlakyRemote({"r-2"})
    for i in range(1, 4):
        local.create_record(make_record(f"r-{i}", event_id=f"ev-{i}"))

    outcome = _reconciler(local, remote).push()

    assert outcome.status == SyncStatus.PARTIAL_SUCCESS
    assert (outcome.succeeded, outcome.failed) == (2, 1)
    assert "r-2" in outcome.errors[0]
    assert [r.record_id for r in local.list_unsynced()] == ["r-2"]


def test_push_with_every_record_failing_is_failed():
    local = InMemoryStore()
    local.create_record(make_record("r-1"))
    outcome = _reconciler(local, FlakyRemote({"r-1"})).push()
    assert outcome.status == SyncStatus.FAILED


def test_push_with_nothing_pending_is_success():
    assert _reconciler().push().status == SyncStatus.SUCCESS


def test_record_changed_during_push_stays_unsynced():
    local, remote = InMemoryStore(), InMemoryStore()
    local.create_record(make_record("r-1"))

    class EditingRemote(InMemoryStore):
        def upsert_record(self, record):
            super().upsert_record(record)
            # A local edit lands between the upload and the flag flip.
            local.upsert_record(replace(local.records["r-1"], note="edited", updated_at=T0 + timedelta(minutes=1)))

    _reconciler(local, EditingRemote()).push()

    assert [r.record_id for r in local.list_unsynced()] == ["r-1"]


def test_unreachable_local_store_is_fatal():
    outcome = _reconciler(local=BrokenStore()).push()
    assert outcome.status == SyncStatus.FAILED
    assert outcome.fatal


def test_pull_applies_new_remote_records_as_synced():
    local, remote = InMemoryStore(), InMemoryStore()
    remote.upsert_record(make_record("r-9", member_id="m-2", synced=True))

    outcome = _reconciler(local, remote).pull()

    assert outcome.succeeded == 1
    assert local.get_record_by_id("r-9").synced is True
    assert local.list_unsynced() == []


def test_pull_keeps_newer_local_copy():
    local, remote = InMemoryStore(), InMemoryStore()
    local.upsert_record(make_record("r-1", updated_at=T0 + timedelta(minutes=10), status=AttendanceStatus.LATE))
    remote.upsert_record(make_record("r-1", updated_at=T0))

    outcome = _reconciler(local, remote).pull()

    assert outcome.skipped == 1
    assert local.get_record_by_id("r-1").status == AttendanceStatus.LATE


def test_pull_overwrites_older_local_copy():
    local, remote = InMemoryStore(), InMemoryStore()
    local.upsert_record(make_record("r-1", updated_at=T0))
    remote.upsert_record(make_record("r-1", updated_at=T0 + timedelta(minutes=1), status=AttendanceStatus.EXCUSED))

    _reconciler(local, remote).pull()

    assert local.get_record_by_id("r-1").status == AttendanceStatus.EXCUSED


def test_equal_timestamps_do_not_overwrite():
    local, remote = InMemoryStore(), InMemoryStore()
    local.upsert_record(make_record("r-1", status=AttendanceStatus.LATE))
    remote.upsert_record(make_record("r-1", status=AttendanceStatus.PRESENT))

    assert _reconciler(local, remote).pull().skipped == 1
    assert local.get_record_by_id("r-1").status == AttendanceStatus.LATE


def test_pull_never_duplicates_a_member_event_pair():
    local, remote = InMemoryStore(), InMemoryStore()
    local.create_record(make_record("local-1"))
    remote.upsert_record(make_record("remote-1"))

    outcome = _reconciler(local, remote).pull()

    assert outcome.conflicts == 1
    assert list(local.records) == ["local-1"]


def test_watermark_advances_and_next_pull_only_rereads_the_lookback():
    local, remote, marks = InMemoryStore(), InMemoryStore(), InMemoryWatermarks()
    remote.upsert_record(make_record("r-1"))
    reconciler = _reconciler(local, remote, marks)

    assert reconciler.pull().succeeded == 1
    assert marks.get(PULL_WATERMARK_NAME) == remote.changed_at["r-1"]

    second = reconciler.pull()
    assert (second.succeeded, second.skipped) == (0, 1)
    assert marks.get(PULL_WATERMARK_NAME) == remote.changed_at["r-1"]


def test_row_committed_after_a_later_stamped_row_is_still_pulled():
    local, remote, marks = InMemoryStore(), InMemoryStore(), InMemoryWatermarks()
    remote.upsert_record(make_record("r-1", event_id="ev-1"))
    reconciler = _reconciler(local, remote, marks)
    reconciler.pull()
    watermark = marks.get(PULL_WATERMARK_NAME)

    # Stamped before r-1 but only visible now.
    remote.upsert_record(make_record("r-2", event_id="ev-2"))
    remote.changed_at["r-2"] = watermark - timedelta(seconds=5)

    outcome = reconciler.pull()

    assert outcome.succeeded == 1
    assert local.get_record_by_id("r-2").synced is True
    assert marks.get(PULL_WATERMARK_NAME) == watermark


def test_without_lookback_rows_at_the_watermark_are_not_reread():
    local, remote, marks = InMemoryStore(), InMemoryStore(lookback=timedelta(0)), InMemoryWatermarks()
    remote.upsert_record(make_record("r-1"))
    reconciler = _reconciler(local, remote, marks)
    reconciler.pull()

    assert reconciler.pull().skipped == 0


def test_push_of_a_pair_held_remotely_under_another_id_fails_and_stays_unsynced():
    remote = InMemoryStore()
    remote.upsert_record(make_record("a", synced=True))
    tablet = InMemoryStore()
    tablet.create_record(make_record("b", status=AttendanceStatus.LATE, penalty=PenaltyType.MINOR))

    outcome = _reconciler(tablet, remote).push()

    assert outcome.status == SyncStatus.FAILED
    assert "b" in outcome.errors[0]
    assert remote.get_record_by_id("a").status == AttendanceStatus.PRESENT
    assert remote.get_record_by_id("b") is None
    assert [r.record_id for r in tablet.list_unsynced()] == ["b"]


def test_watermark_holds_when_a_record_fails():
    class FailingLocal(InMemoryStore):
        def upsert_record(self, record):
            raise StoreError("disk full")

    remote, marks = InMemoryStore(), InMemoryWatermarks()
    remote.upsert_record(make_record("r-1"))

    outcome = _reconciler(FailingLocal(), remote, marks).pull()

    assert outcome.status == SyncStatus.FAILED
    assert marks.get(PULL_WATERMARK_NAME) is None


def test_unreachable_remote_is_fatal_for_pull():
    outcome = _reconciler(remote=BrokenStore()).pull()
    assert outcome.status == SyncStatus.FAILED
    assert "remote" in outcome.fatal


def test_sync_all_pulls_before_pushing():
    calls = []

    class Recording(SyncReconciler):
        def _pull(self):
            calls.append("pull")
            return super()._pull()

        def _push(self):
            calls.append("push")
            return super()._push()

    local, remote = InMemoryStore(), InMemoryStore()
    local.create_record(make_record("r-1"))
    report = Recording(local, remote, InMemoryWatermarks()).sync_all()

    assert calls == ["pull", "push"]
    assert report.status == SyncStatus.SUCCESS
    assert report.as_dict()["push"]["succeeded"] == 1


def test_sync_all_reports_partial_when_one_phase_fails():
    local = InMemoryStore()
    local.create_record(make_record("r-1"))
    report = SyncReconciler(local, FlakyRemote({"r-1"}), InMemoryWatermarks()).sync_all()

    assert report.pull.status == SyncStatus.SUCCESS
    assert report.push.status == SyncStatus.FAILED
    assert report.status == SyncStatus.PARTIAL_SUCCESS


def test_two_devices_converge_through_remote():
    remote = InMemoryStore()
    phone, tablet = InMemoryStore(), InMemoryStore()
    phone.create_record(make_record("a", member_id="m-1"))
    tablet.create_record(make_record("b", member_id="m-2"))

    phone_sync = _reconciler(phone, remote, InMemoryWatermarks())
    tablet_sync = _reconciler(tablet, remote, InMemoryWatermarks())
    phone_sync.sync_all()
    tablet_sync.sync_all()
    phone_sync.sync_all()

    assert set(phone.records) == set(tablet.records) == {"a", "b"}
    assert phone.list_unsynced() == tablet.list_unsynced() == []
