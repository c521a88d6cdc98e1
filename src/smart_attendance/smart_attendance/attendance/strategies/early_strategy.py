from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from ...events.model import Event
from .base import AttendanceStrategy, StatusDecision


class OutsideWindowStrategy(AttendanceStrategy):
    """Arrival before the sign-in window opens, or departure after the sign-out window closes.

    Never penalized; only a note is kept.
    """

    def decide_arrival(self, *, event: Event, at: datetime) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT, note="Arrived before sign-in window opened")

    def decide_departure(self, *, event: Event, at: datetime) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT, note="Left after sign-out window closed")
