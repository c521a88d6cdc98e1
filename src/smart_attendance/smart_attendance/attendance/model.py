from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import AttendanceStatus, PenaltyType


@dataclass(frozen=True)
class Fix:
    """A geographic fix reported by the location source."""

    latitude: float
    longitude: float
    accuracy: float
    timestamp: datetime


@dataclass(frozen=True)
class AttendanceRecord:
    """Thực thể miền (domain): Bản ghi điểm danh.

    ``updated_at`` marks the last change of a business field and drives
    last-writer-wins merges; flipping ``synced`` never touches it.
    """

    record_id: str
    member_id: str
    event_id: str
    timestamp: datetime
    status: AttendanceStatus
    penalty: Optional[PenaltyType]
    latitude: Optional[float]
    longitude: Optional[float]
    updated_at: datetime
    synced: bool = False
    note: Optional[str] = None
