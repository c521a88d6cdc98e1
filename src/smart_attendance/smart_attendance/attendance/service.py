from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Callable, Optional

from ..common.bounded import BoundedCaller, CallTimeout
from ..common.datetime_utils import ensure_aware, now_utc
from ..common.locks import KeyedLock
from ..common.validators import require_coordinates, require_non_empty, require_positive
from ..core.constants import DEFAULT_LOCATION_TIMEOUT_SECONDS
from ..core.enums import ErrorKind
from ..core.exceptions import DuplicateRecordError, ValidationError
from ..core.result import Result
from ..events.model import Event
from ..geofence.evaluator import GeofenceEvaluator
from ..members.repository import MemberRepository
from .classifier import AttendanceWindowClassifier
from .location import CredentialVerifier, LocationSource
from .model import AttendanceRecord, Fix
from .repository import LocalStore
from .strategies.base import StatusDecision

logger = logging.getLogger(__name__)


class AttendanceGate:
    """Single entry point for marking attendance.

    Guarantees at most one record per (member, event): the duplicate check and
    the insert run under a lock keyed by that pair, and a duplicate-key error
    from the store is reported the same way.
    """

    def __init__(
        self,
        store: LocalStore,
        location: Optional[LocationSource] = None,
        members: Optional[MemberRepository] = None,
        *,
        classifier: Optional[AttendanceWindowClassifier] = None,
        geofence: Optional[GeofenceEvaluator] = None,
        caller: Optional[BoundedCaller] = None,
        locks: Optional[KeyedLock] = None,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ):
        self._store = store
        self._location = location
        self._members = members
        self._classifier = classifier or AttendanceWindowClassifier()
        self._geofence = geofence or GeofenceEvaluator()
        self._owns_caller = caller is None
        self._caller = caller or BoundedCaller(DEFAULT_LOCATION_TIMEOUT_SECONDS, name="location")
        self._locks = locks or KeyedLock()
        self._new_id = id_factory

    def close(self) -> None:
        if self._owns_caller:
            self._caller.close()

    def mark_attendance(
        self,
        member_id: str,
        event_id: str,
        *,
        location: Optional[LocationSource] = None,
        now: Optional[datetime] = None,
    ) -> Result[AttendanceRecord]:
        try:
            member_id = require_non_empty(member_id, "Member id")
            event_id = require_non_empty(event_id, "Event id")
        except ValidationError as exc:
            return Result.failure(ErrorKind.VALIDATION, str(exc))

        try:
            if self._members is not None:
                member = self._members.get_by_id(member_id)
                if not member or not member.is_active:
                    return Result.failure(ErrorKind.MEMBER_NOT_FOUND, f"Member {member_id} not found or inactive")

            event = self._store.get_event(event_id)
            if not event or not event.is_active:
                return Result.failure(ErrorKind.EVENT_NOT_FOUND, f"Event {event_id} not found or inactive")
            try:
                require_coordinates(event.latitude, event.longitude)
                require_positive(event.geofence_radius, "Geofence radius")
            except ValidationError as exc:
                return Result.failure(ErrorKind.VALIDATION, f"Event {event_id} has an invalid geofence: {exc}")

            with self._locks.hold((member_id, event_id)):
                return self._mark_locked(member_id, event, location or self._location, now)
        except Exception as exc:
            logger.exception("Marking attendance for %s at %s failed", member_id, event_id)
            return Result.failure(ErrorKind.OPERATION_FAILED, f"Failed to mark attendance: {exc}", exc)

    def _mark_locked(
        self,
        member_id: str,
        event: Event,
        location: Optional[LocationSource],
        now: Optional[datetime],
    ) -> Result[AttendanceRecord]:
        if self._store.get_record(member_id, event.event_id) is not None:
            logger.info("Attendance already marked for %s at %s", member_id, event.event_id)
            return Result.failure(ErrorKind.ALREADY_MARKED, "Attendance already marked for this event")

        fix = self._current_fix(location)
        if not fix.ok:
            return Result(error=fix.error)

        try:
            inside = self._geofence.is_within(event, fix.value)
        except ValidationError as exc:
            return Result.failure(ErrorKind.VALIDATION, f"Invalid location fix: {exc}")
        if not inside:
            meters = self._geofence.distance(event.location, fix.value)
            return Result.failure(
                ErrorKind.OUTSIDE_GEOFENCE,
                f"You are {meters:.0f}m from the event location (allowed {event.geofence_radius:.0f}m)",
            )

        at = ensure_aware(now or now_utc())
        decision = self._classifier.classify(event, at)
        record = AttendanceRecord(
            record_id=self._new_id(),
            member_id=member_id,
            event_id=event.event_id,
            timestamp=at,
            status=decision.status,
            penalty=decision.penalty,
            latitude=fix.value.latitude,
            longitude=fix.value.longitude,
            updated_at=at,
            synced=False,
            note=decision.note,
        )

        try:
            self._store.create_record(record)
        except DuplicateRecordError:
            logger.info("Store rejected duplicate record for %s at %s", member_id, event.event_id)
            return Result.failure(ErrorKind.ALREADY_MARKED, "Attendance already marked for this event")

        logger.info(
            "Marked %s at %s: %s%s",
            member_id,
            event.event_id,
            record.status.value,
            f"/{record.penalty.value}" if record.penalty else "",
        )
        return Result.success(record)

    def _current_fix(self, location: Optional[LocationSource]) -> Result[Fix]:
        if location is None:
            return Result.failure(ErrorKind.LOCATION_UNAVAILABLE, "No location source available")
        try:
            fix = self._caller.call(location.current_fix)
        except CallTimeout as exc:
            return Result.failure(ErrorKind.LOCATION_UNAVAILABLE, f"Unable to get current location: {exc}", exc)
        if fix is None:
            return Result.failure(
                ErrorKind.LOCATION_UNAVAILABLE,
                "Unable to get current location. Please ensure location services are enabled.",
            )
        return Result.success(fix)

    def classify(self, event_id: str, at: Optional[datetime] = None) -> Result[StatusDecision]:
        return self._classify_with(event_id, at, self._classifier.classify)

    def classify_departure(self, event_id: str, at: Optional[datetime] = None) -> Result[StatusDecision]:
        return self._classify_with(event_id, at, self._classifier.classify_departure)

    def _classify_with(self, event_id: str, at: Optional[datetime], fn) -> Result[StatusDecision]:
        try:
            event = self._store.get_event(event_id)
        except Exception as exc:
            logger.exception("Loading event %s failed", event_id)
            return Result.failure(ErrorKind.OPERATION_FAILED, f"Failed to load event: {exc}", exc)
        if not event:
            return Result.failure(ErrorKind.EVENT_NOT_FOUND, f"Event {event_id} not found")
        return Result.success(fn(event, ensure_aware(at or now_utc())))


class CheckInFlow:
    """Calling flow: verify the member's credential, then hand over to the gate.

    The gate itself never re-verifies.
    """

    def __init__(self, gate: AttendanceGate, verifier: CredentialVerifier, *, caller: BoundedCaller):
        self._gate = gate
        self._verifier = verifier
        self._caller = caller

    def check_in(
        self,
        member_id: str,
        event_id: str,
        *,
        location: Optional[LocationSource] = None,
        verifier: Optional[CredentialVerifier] = None,
        now: Optional[datetime] = None,
    ) -> Result[AttendanceRecord]:
        """``verifier`` overrides the configured one for this call only."""
        try:
            verdict = self._caller.call((verifier or self._verifier).verify)
        except CallTimeout as exc:
            return Result.failure(ErrorKind.OPERATION_FAILED, f"Credential check timed out: {exc}", exc)
        except Exception as exc:
            logger.exception("Credential verification failed for %s", member_id)
            return Result.failure(ErrorKind.OPERATION_FAILED, f"Credential check failed: {exc}", exc)

        if not verdict.passed:
            return Result.failure(
                ErrorKind.CREDENTIAL_REJECTED,
                verdict.reason or "Credential verification failed",
            )
        return self._gate.mark_attendance(member_id, event_id, location=location, now=now)
