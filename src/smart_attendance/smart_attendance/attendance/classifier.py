from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..common.datetime_utils import ensure_aware
from ..events.model import Event
from .factory import AttendanceStrategyFactory
from .strategies.base import StatusDecision


class AttendanceWindowClassifier:
    """Maps an event's time windows and an instant to a status and penalty.

    Pure: it never consults storage, so one instance can be shared by any
    number of threads.
    """

    def __init__(self, factory: Optional[AttendanceStrategyFactory] = None):
        self._factory = factory or AttendanceStrategyFactory()

    def classify(self, event: Event, at: datetime) -> StatusDecision:
        at = ensure_aware(at)
        strategy = self._factory.for_arrival(event=event, at=at)
        return strategy.decide_arrival(event=event, at=at)

    def classify_departure(self, event: Event, at: datetime) -> StatusDecision:
        at = ensure_aware(at)
        strategy = self._factory.for_departure(event=event, at=at)
        return strategy.decide_departure(event=event, at=at)
