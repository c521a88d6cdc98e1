from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..events.model import Event
from .strategies.absent_strategy import AbsentStrategy
from .strategies.base import AttendanceStrategy
from .strategies.early_strategy import OutsideWindowStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on the event windows."""

    def for_arrival(self, *, event: Event, at: datetime) -> AttendanceStrategy:
        if at < event.sign_in_opens:
            return OutsideWindowStrategy()
        if at <= event.start_time:
            return NormalStrategy()
        if at <= event.sign_in_closes:
            return LateStrategy()
        return AbsentStrategy()

    def for_departure(self, *, event: Event, at: datetime) -> AttendanceStrategy:
        if at > event.sign_out_closes:
            return OutsideWindowStrategy()
        if at >= event.end_time:
            return NormalStrategy()
        if at >= event.sign_out_opens:
            return LateStrategy()
        return AbsentStrategy()
