from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import ensure_aware, now_utc
from ..common.validators import (
    require_coordinates,
    require_non_empty,
    require_non_negative,
    require_positive,
)
from ..core.constants import (
    DEFAULT_GEOFENCE_RADIUS_METERS,
    DEFAULT_SIGN_IN_END_OFFSET,
    DEFAULT_SIGN_IN_START_OFFSET,
    DEFAULT_SIGN_OUT_END_OFFSET,
    DEFAULT_SIGN_OUT_START_OFFSET,
)
from ..core.enums import ErrorKind
from ..core.exceptions import StoreError, ValidationError
from ..core.result import Result
from .model import Event
from .repository import EventRepository

logger = logging.getLogger(__name__)

# Administrative updates may only touch schedule, location and geofence fields.
UPDATABLE_FIELDS = frozenset(
    {
        "start_time",
        "end_time",
        "latitude",
        "longitude",
        "geofence_radius",
    }
)


def validate_event(event: Event) -> Event:
    """Return a normalized copy of ``event`` or raise ``ValidationError``."""
    event_id = require_non_empty(event.event_id, "Event id")
    name = require_non_empty(event.name, "Event name")
    start = ensure_aware(event.start_time)
    end = ensure_aware(event.end_time)
    if start >= end:
        raise ValidationError("End time must be after start time")
    lat, lon = require_coordinates(event.latitude, event.longitude)
    radius = require_positive(event.geofence_radius, "Geofence radius")
    return replace(
        event,
        event_id=event_id,
        name=name,
        start_time=start,
        end_time=end,
        latitude=lat,
        longitude=lon,
        geofence_radius=radius,
        sign_in_start_offset=require_non_negative(event.sign_in_start_offset, "Sign-in start offset"),
        sign_in_end_offset=require_non_negative(event.sign_in_end_offset, "Sign-in end offset"),
        sign_out_start_offset=require_non_negative(event.sign_out_start_offset, "Sign-out start offset"),
        sign_out_end_offset=require_non_negative(event.sign_out_end_offset, "Sign-out end offset"),
    )


class EventService:
    def __init__(self, events: EventRepository):
        self._events = events

    def create_event(
        self,
        *,
        name: str,
        start_time: datetime,
        end_time: datetime,
        latitude: float,
        longitude: float,
        geofence_radius: float = DEFAULT_GEOFENCE_RADIUS_METERS,
        sign_in_start_offset: int = DEFAULT_SIGN_IN_START_OFFSET,
        sign_in_end_offset: int = DEFAULT_SIGN_IN_END_OFFSET,
        sign_out_start_offset: int = DEFAULT_SIGN_OUT_START_OFFSET,
        sign_out_end_offset: int = DEFAULT_SIGN_OUT_END_OFFSET,
        now: Optional[datetime] = None,
    ) -> Result[Event]:
        now = now or now_utc()
        try:
            event = validate_event(
                Event(
                    event_id=str(uuid.uuid4()),
                    name=name,
                    start_time=start_time,
                    end_time=end_time,
                    latitude=latitude,
                    longitude=longitude,
                    geofence_radius=geofence_radius,
                    sign_in_start_offset=sign_in_start_offset,
                    sign_in_end_offset=sign_in_end_offset,
                    sign_out_start_offset=sign_out_start_offset,
                    sign_out_end_offset=sign_out_end_offset,
                )
            )
            if event.start_time <= ensure_aware(now):
                raise ValidationError("Event start time must be in the future")
        except (ValidationError, TypeError, ValueError) as exc:
            return Result.failure(ErrorKind.VALIDATION, str(exc))

        try:
            self._events.save(event)
        except StoreError as exc:
            logger.exception("Saving event %s failed", event.event_id)
            return Result.failure(ErrorKind.OPERATION_FAILED, f"Failed to create event: {exc}", exc)

        logger.info("Created event %s (%s)", event.event_id, event.name)
        return Result.success(event)

    def update_event(self, event_id: str, **changes) -> Result[Event]:
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            return Result.failure(
                ErrorKind.VALIDATION, f"Fields cannot be updated: {', '.join(sorted(unknown))}"
            )

        try:
            current = self._events.get_by_id(event_id)
            if not current:
                return Result.failure(ErrorKind.EVENT_NOT_FOUND, f"Event {event_id} not found")
            try:
                updated = validate_event(replace(current, **changes))
            except (ValidationError, TypeError, ValueError) as exc:
                return Result.failure(ErrorKind.VALIDATION, str(exc))
            self._events.save(updated)
        except StoreError as exc:
            logger.exception("Updating event %s failed", event_id)
            return Result.failure(ErrorKind.OPERATION_FAILED, f"Failed to update event: {exc}", exc)

        return Result.success(updated)

    def deactivate_event(self, event_id: str) -> Result[Event]:
        try:
            current = self._events.get_by_id(event_id)
            if not current:
                return Result.failure(ErrorKind.EVENT_NOT_FOUND, f"Event {event_id} not found")
            if current.is_active:
                self._events.set_active(event_id, False)
        except StoreError as exc:
            logger.exception("Deactivating event %s failed", event_id)
            return Result.failure(ErrorKind.OPERATION_FAILED, f"Failed to deactivate event: {exc}", exc)

        return Result.success(replace(current, is_active=False))

    def list_active_events(self) -> Sequence[Event]:
        return self._events.list_active()
