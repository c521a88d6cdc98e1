from __future__ import annotations

import logging
from collections import Counter
from typing import Iterable, Optional, Sequence

from ..attendance.model import AttendanceRecord
from ..attendance.repository import LocalStore
from ..core.constants import ESCALATION_WINDOW, RISK_THRESHOLDS, TARGET_ATTENDANCE_RATE
from ..core.enums import AttendanceStatus, ErrorKind, PenaltyType, RiskLevel
from ..core.result import Result
from .calculator.base import PenaltyPointsCalculator
from .calculator.standard_calculator import StandardPointsCalculator
from .model import PenaltyAnalysis, PenaltyPreview, PenaltyRule, PenaltyStatus
from .rules import (
    BELOW_TARGET_RECOMMENDATIONS,
    ESCALATION_LIMITS,
    PENALTY_RULES,
    PENALTY_STATUS_THRESHOLDS,
    RECOMMENDATIONS,
)

logger = logging.getLogger(__name__)

_ATTENDED = (AttendanceStatus.PRESENT, AttendanceStatus.LATE)
_SEVERE = (PenaltyType.MAJOR, PenaltyType.CRITICAL)


def risk_level(points: int) -> RiskLevel:
    for upper, level in RISK_THRESHOLDS:
        if points <= upper:
            return level
    return RiskLevel.CRITICAL


def recommendations_for(level: RiskLevel, attendance_rate: float) -> tuple[str, ...]:
    lines = RECOMMENDATIONS[level]
    if attendance_rate < TARGET_ATTENDANCE_RATE:
        lines = lines + BELOW_TARGET_RECOMMENDATIONS.get(level, ())
    return lines


class PenaltyLedger:
    """Read-side aggregation of a member's penalty history.

    Nothing here is persisted; every figure is recomputed from the records
    passed in.
    """

    def __init__(self, calculator: Optional[PenaltyPointsCalculator] = None):
        self._calculator = calculator or StandardPointsCalculator()

    def total_points(
        self,
        records: Iterable[AttendanceRecord],
        extra_penalty: Optional[PenaltyType] = None,
    ) -> int:
        """Sum of penalty points, optionally with one not-yet-recorded penalty."""
        total = sum(self._calculator.points_for(r.penalty) for r in records)
        return total + self._calculator.points_for(extra_penalty)

    def risk_level(self, points: int) -> RiskLevel:
        return risk_level(points)

    def preview(self, records: Iterable[AttendanceRecord], penalty: Optional[PenaltyType]) -> PenaltyPreview:
        points = self.total_points(records, penalty)
        return PenaltyPreview(penalty=penalty, total_points=points, risk_level=risk_level(points))

    def analysis(self, member_id: str, records: Sequence[AttendanceRecord]) -> PenaltyAnalysis:
        points = self.total_points(records)
        level = risk_level(points)
        breakdown = dict(Counter(r.penalty for r in records if r.penalty is not None))

        if records:
            attended = sum(1 for r in records if r.status in _ATTENDED)
            rate = attended / len(records) * 100
        else:
            rate = 100.0

        return PenaltyAnalysis(
            member_id=member_id,
            total_points=points,
            risk_level=level,
            breakdown=breakdown,
            attendance_rate=rate,
            total_events=len(records),
            flagged_for_review=level == RiskLevel.CRITICAL,
            recommendations=recommendations_for(level, rate),
        )

    def penalty_status(self, member_id: str, records: Sequence[AttendanceRecord]) -> PenaltyStatus:
        counts = {
            "late": sum(1 for r in records if r.status == AttendanceStatus.LATE),
            "severe": sum(1 for r in records if r.penalty in _SEVERE),
        }
        level, action = None, None
        for metric, minimum, tier, text in PENALTY_STATUS_THRESHOLDS:
            if counts[metric] >= minimum:
                level, action = tier, text
                break

        return PenaltyStatus(
            member_id=member_id,
            late_count=counts["late"],
            absent_count=sum(1 for r in records if r.status == AttendanceStatus.ABSENT),
            current_level=level,
            recommended_action=action,
            escalate=self.should_escalate(records),
        )

    def should_escalate(self, records: Sequence[AttendanceRecord]) -> bool:
        recent = sorted(records, key=lambda r: r.timestamp, reverse=True)[:ESCALATION_WINDOW]
        counts = Counter(r.penalty for r in recent)
        return any(counts[tier] >= limit for tier, limit in ESCALATION_LIMITS.items())

    @staticmethod
    def penalty_rules() -> Sequence[PenaltyRule]:
        return PENALTY_RULES


class PenaltyReportService:
    """Store-backed entry points; store faults come back as ``OPERATION_FAILED``."""

    def __init__(self, store: LocalStore, *, ledger: Optional[PenaltyLedger] = None):
        self._store = store
        self._ledger = ledger or PenaltyLedger()

    def _history(self, member_id: str) -> Sequence[AttendanceRecord]:
        return self._store.list_for_member(member_id)

    def analysis_for_member(self, member_id: str) -> Result[PenaltyAnalysis]:
        if not member_id or not member_id.strip():
            return Result.failure(ErrorKind.VALIDATION, "Member id must not be blank")
        try:
            records = self._history(member_id)
        except Exception as exc:
            logger.exception("Loading history of %s failed", member_id)
            return Result.failure(ErrorKind.OPERATION_FAILED, f"Failed to analyze penalties: {exc}", exc)
        return Result.success(self._ledger.analysis(member_id, records))

    def preview_for_member(self, member_id: str, penalty: Optional[PenaltyType]) -> Result[PenaltyPreview]:
        if not member_id or not member_id.strip():
            return Result.failure(ErrorKind.VALIDATION, "Member id must not be blank")
        try:
            records = self._history(member_id)
        except Exception as exc:
            logger.exception("Loading history of %s failed", member_id)
            return Result.failure(ErrorKind.OPERATION_FAILED, f"Failed to calculate penalty: {exc}", exc)
        return Result.success(self._ledger.preview(records, penalty))

    def status_for_member(self, member_id: str) -> Result[PenaltyStatus]:
        try:
            records = self._history(member_id)
        except Exception as exc:
            logger.exception("Loading history of %s failed", member_id)
            return Result.failure(ErrorKind.OPERATION_FAILED, f"Failed to evaluate penalties: {exc}", exc)
        return Result.success(self._ledger.penalty_status(member_id, records))

    def penalty_rules(self) -> Sequence[PenaltyRule]:
        return self._ledger.penalty_rules()

    def members_requiring_review(self, member_ids: Iterable[str]) -> list[str]:
        flagged = []
        for member_id in member_ids:
            result = self.analysis_for_member(member_id)
            if result.ok and result.value.flagged_for_review:
                flagged.append(member_id)
        return flagged
