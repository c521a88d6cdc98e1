from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from ...core.enums import PenaltyType


class PenaltyPointsCalculator(ABC):
    """Calculator interface (Strategy Pattern for penalty points)."""

    @abstractmethod
    def points_for(self, penalty: Optional[PenaltyType]) -> int:
        raise NotImplementedError
