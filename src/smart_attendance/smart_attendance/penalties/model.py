from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from ..core.enums import AttendanceStatus, PenaltyType, RiskLevel


@dataclass(frozen=True)
class PenaltyRule:
    status: AttendanceStatus
    max_minutes_late: Optional[int]
    penalty: PenaltyType
    description: str


@dataclass(frozen=True)
class PenaltyPreview:
    """Risk a member would be at if ``penalty`` were recorded now."""

    penalty: Optional[PenaltyType]
    total_points: int
    risk_level: RiskLevel


@dataclass(frozen=True)
class PenaltyAnalysis:
    member_id: str
    total_points: int
    risk_level: RiskLevel
    breakdown: Dict[PenaltyType, int]
    attendance_rate: float
    total_events: int
    flagged_for_review: bool
    recommendations: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class PenaltyStatus:
    member_id: str
    late_count: int
    absent_count: int
    current_level: Optional[PenaltyType]
    recommended_action: Optional[str]
    # Repeated severe penalties among the most recent records.
    escalate: bool = False
