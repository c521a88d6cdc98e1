from __future__ import annotations

from typing import Optional

from ...core.constants import PENALTY_POINTS
from ...core.enums import PenaltyType
from .base import PenaltyPointsCalculator


class StandardPointsCalculator(PenaltyPointsCalculator):
    """Standard rule: fixed points per tier, no penalty scores 0."""

    def points_for(self, penalty: Optional[PenaltyType]) -> int:
        if penalty is None:
            return 0
        return PENALTY_POINTS[penalty]
