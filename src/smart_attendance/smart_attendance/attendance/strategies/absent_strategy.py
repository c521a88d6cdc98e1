from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus, PenaltyType
from ...events.model import Event
from .base import AttendanceStrategy, StatusDecision


class AbsentStrategy(AttendanceStrategy):
    """Missed the window entirely."""

    def decide_arrival(self, *, event: Event, at: datetime) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.ABSENT, penalty=PenaltyType.CRITICAL)

    def decide_departure(self, *, event: Event, at: datetime) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.ABSENT, penalty=PenaltyType.CRITICAL)
