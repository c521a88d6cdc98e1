from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.location import UNVERIFIED, CredentialVerifier
from .attendance.mysql_attendance_repository import MySQLAttendanceStore
from .attendance.read_through import ReadThroughStore
from .attendance.service import AttendanceGate, CheckInFlow
from .common.bounded import BoundedCaller
from .core.constants import (
    DEFAULT_LOCATION_TIMEOUT_SECONDS,
    DEFAULT_REMOTE_CONNECT_TIMEOUT_SECONDS,
    DEFAULT_SYNC_INTERVAL_SECONDS,
)
from .database.connection import DBConfig, DatabaseConnection
from .events.mysql_event_repository import MySQLEventRepository
from .events.service import EventService
from .members.mysql_member_repository import MySQLMemberRepository
from .penalties.service import PenaltyReportService
from .sync.mysql_watermark_repository import MySQLWatermarkRepository
from .sync.scheduler import PeriodicSync
from .sync.service import SyncReconciler


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection
    remote_conn: Optional[DatabaseConnection]

    local_store: MySQLAttendanceStore
    remote_store: Optional[MySQLAttendanceStore]
    events_repo: MySQLEventRepository
    members_repo: MySQLMemberRepository

    location_caller: BoundedCaller
    attendance_gate: AttendanceGate
    check_in_flow: CheckInFlow
    event_service: EventService
    penalty_report_service: PenaltyReportService
    sync_reconciler: Optional[SyncReconciler]
    sync_scheduler: Optional[PeriodicSync]

    def close(self) -> None:
        if self.sync_scheduler is not None:
            self.sync_scheduler.stop(timeout=5)
        self.location_caller.close()


def build_container(
    *,
    db_config: dict,
    remote_db_config: Optional[dict] = None,
    location_timeout: float = DEFAULT_LOCATION_TIMEOUT_SECONDS,
    remote_connect_timeout: int = DEFAULT_REMOTE_CONNECT_TIMEOUT_SECONDS,
    sync_interval: float = DEFAULT_SYNC_INTERVAL_SECONDS,
    verifier: Optional[CredentialVerifier] = None,
) -> Container:
    """Wire every service.

    ``verifier`` is the credential check used when a check-in does not carry
    its own verdict; by default such check-ins are rejected.
    """
    conn = DatabaseConnection(DBConfig.from_dict(db_config))
    remote_conn = (
        DatabaseConnection(DBConfig.from_dict(remote_db_config), connect_timeout=remote_connect_timeout)
        if remote_db_config
        else None
    )

    local_store = MySQLAttendanceStore(conn)
    remote_store = MySQLAttendanceStore(remote_conn) if remote_conn else None
    events_repo = MySQLEventRepository(conn)
    members_repo = MySQLMemberRepository(conn)

    location_caller = BoundedCaller(location_timeout, name="location")
    attendance_gate = AttendanceGate(
        ReadThroughStore(local_store, remote_store),
        members=members_repo,
        caller=location_caller,
    )
    check_in_flow = CheckInFlow(attendance_gate, verifier or UNVERIFIED, caller=location_caller)
    event_service = EventService(events_repo)
    penalty_report_service = PenaltyReportService(local_store)

    sync_reconciler = None
    sync_scheduler = None
    if remote_store is not None:
        sync_reconciler = SyncReconciler(local_store, remote_store, MySQLWatermarkRepository(conn))
        sync_scheduler = PeriodicSync(sync_reconciler, interval_seconds=sync_interval)

    return Container(
        conn=conn,
        remote_conn=remote_conn,
        local_store=local_store,
        remote_store=remote_store,
        events_repo=events_repo,
        members_repo=members_repo,
        location_caller=location_caller,
        attendance_gate=attendance_gate,
        check_in_flow=check_in_flow,
        event_service=event_service,
        penalty_report_service=penalty_report_service,
        sync_reconciler=sync_reconciler,
        sync_scheduler=sync_scheduler,
    )
