from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from ..core.constants import (
    DEFAULT_GEOFENCE_RADIUS_METERS,
    DEFAULT_SIGN_IN_END_OFFSET,
    DEFAULT_SIGN_IN_START_OFFSET,
    DEFAULT_SIGN_OUT_END_OFFSET,
    DEFAULT_SIGN_OUT_START_OFFSET,
)


@dataclass(frozen=True)
class LatLng:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class Event:
    """Thực thể miền (domain): Sự kiện có geofence và khung giờ điểm danh.

    Offsets are minutes: sign-in offsets are relative to ``start_time``,
    sign-out offsets to ``end_time``.
    """

    event_id: str
    name: str
    start_time: datetime
    end_time: datetime
    latitude: float
    longitude: float
    geofence_radius: float = DEFAULT_GEOFENCE_RADIUS_METERS
    sign_in_start_offset: int = DEFAULT_SIGN_IN_START_OFFSET
    sign_in_end_offset: int = DEFAULT_SIGN_IN_END_OFFSET
    sign_out_start_offset: int = DEFAULT_SIGN_OUT_START_OFFSET
    sign_out_end_offset: int = DEFAULT_SIGN_OUT_END_OFFSET
    is_active: bool = True

    @property
    def location(self) -> LatLng:
        return LatLng(self.latitude, self.longitude)

    @property
    def sign_in_opens(self) -> datetime:
        return self.start_time - timedelta(minutes=self.sign_in_start_offset)

    @property
    def sign_in_closes(self) -> datetime:
        return self.start_time + timedelta(minutes=self.sign_in_end_offset)

    @property
    def sign_out_opens(self) -> datetime:
        return self.end_time - timedelta(minutes=self.sign_out_start_offset)

    @property
    def sign_out_closes(self) -> datetime:
        return self.end_time + timedelta(minutes=self.sign_out_end_offset)
