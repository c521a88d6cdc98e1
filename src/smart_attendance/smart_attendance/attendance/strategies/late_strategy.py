from __future__ import annotations

from datetime import datetime, timedelta

from ...core.constants import LATE_PENALTY_TIERS
from ...core.enums import AttendanceStatus, PenaltyType
from ...events.model import Event
from .base import AttendanceStrategy, StatusDecision


def penalty_for_delay(delay: timedelta) -> PenaltyType:
    """Tier for a positive delay; bounds are inclusive (5 min exactly is WARNING)."""
    for upper_minutes, penalty in LATE_PENALTY_TIERS:
        if delay <= timedelta(minutes=upper_minutes):
            return penalty
    return PenaltyType.CRITICAL


class LateStrategy(AttendanceStrategy):
    """Late arrival after the start, or early departure before the end, inside the window."""

    def decide_arrival(self, *, event: Event, at: datetime) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.LATE, penalty=penalty_for_delay(at - event.start_time))

    def decide_departure(self, *, event: Event, at: datetime) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.LATE, penalty=penalty_for_delay(event.end_time - at))
