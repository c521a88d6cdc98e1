from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from ...events.model import Event
from .base import AttendanceStrategy, StatusDecision


class NormalStrategy(AttendanceStrategy):
    """Arrival inside the sign-in window up to the start, departure from the end onwards."""

    def decide_arrival(self, *, event: Event, at: datetime) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)

    def decide_departure(self, *, event: Event, at: datetime) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)
