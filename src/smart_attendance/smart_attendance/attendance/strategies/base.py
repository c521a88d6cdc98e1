from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus, PenaltyType
from ...events.model import Event


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    penalty: Optional[PenaltyType] = None
    note: Optional[str] = None


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how we decide an attendance status."""

    @abstractmethod
    def decide_arrival(self, *, event: Event, at: datetime) -> StatusDecision:
        raise NotImplementedError

    @abstractmethod
    def decide_departure(self, *, event: Event, at: datetime) -> StatusDecision:
        raise NotImplementedError
