"""Penalty rule tables.

Kept as data so they can be reviewed and tested without reading the ledger.
"""
from __future__ import annotations

from ..core.enums import AttendanceStatus, PenaltyType, RiskLevel
from .model import PenaltyRule

PENALTY_RULES = (
    PenaltyRule(AttendanceStatus.LATE, 5, PenaltyType.WARNING, "Late by up to 5 minutes"),
    PenaltyRule(AttendanceStatus.LATE, 15, PenaltyType.MINOR, "Late by more than 5 and up to 15 minutes"),
    PenaltyRule(AttendanceStatus.LATE, 30, PenaltyType.MAJOR, "Late by more than 15 and up to 30 minutes"),
    PenaltyRule(AttendanceStatus.LATE, None, PenaltyType.CRITICAL, "Late by more than 30 minutes"),
    PenaltyRule(AttendanceStatus.ABSENT, None, PenaltyType.CRITICAL, "Absent from the event"),
)

RECOMMENDATIONS = {
    RiskLevel.LOW: ("Maintain current attendance pattern",),
    RiskLevel.MEDIUM: (
        "Improve attendance to avoid further penalties",
        "Contact academic advisor for support",
        "Review course schedule for conflicts",
    ),
    RiskLevel.HIGH: (
        "Immediate improvement required",
        "Mandatory meeting with academic advisor",
        "Consider academic counseling",
        "Review academic load and time management",
    ),
    RiskLevel.CRITICAL: (
        "URGENT: Administrative review required",
        "Risk of academic probation",
        "Mandatory counseling session",
        "Possible course withdrawal consideration",
        "Contact student services immediately",
    ),
}

# Added after the level's own lines when the attendance rate is below target.
BELOW_TARGET_RECOMMENDATIONS = {
    RiskLevel.LOW: ("Aim for better punctuality to avoid warnings",),
}

# (metric, minimum count, level, action), checked top to bottom; first match wins.
# "severe" counts MAJOR and CRITICAL penalties, "late" counts LATE records.
PENALTY_STATUS_THRESHOLDS = (
    ("severe", 5, PenaltyType.CRITICAL, "Refer to Student Services Committee for disciplinary action"),
    ("severe", 3, PenaltyType.MAJOR, "Schedule meeting with academic advisor"),
    ("late", 5, PenaltyType.MINOR, "Issue formal warning letter"),
    ("late", 2, PenaltyType.WARNING, "Informal counseling session recommended"),
)

# Escalate when the most recent records hold at least this many of a tier.
ESCALATION_LIMITS = {
    PenaltyType.CRITICAL: 3,
    PenaltyType.MAJOR: 5,
}
