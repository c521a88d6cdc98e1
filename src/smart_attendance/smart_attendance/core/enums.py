from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Trạng thái điểm danh lưu trong CSDL."""

    PRESENT = "PRESENT"
    LATE = "LATE"
    ABSENT = "ABSENT"
    EXCUSED = "EXCUSED"


class PenaltyType(str, Enum):
    """Penalty tiers, declared from least to most severe."""

    WARNING = "WARNING"
    MINOR = "MINOR"
    MAJOR = "MAJOR"
    CRITICAL = "CRITICAL"

    @property
    def severity(self) -> int:
        return _PENALTY_ORDER.index(self)


_PENALTY_ORDER = list(PenaltyType)


class RiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class ErrorKind(str, Enum):
    """Closed set of outcomes a caller may see instead of a value."""

    VALIDATION = "VALIDATION"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    MEMBER_NOT_FOUND = "MEMBER_NOT_FOUND"
    ALREADY_MARKED = "ALREADY_MARKED"
    LOCATION_UNAVAILABLE = "LOCATION_UNAVAILABLE"
    OUTSIDE_GEOFENCE = "OUTSIDE_GEOFENCE"
    CREDENTIAL_REJECTED = "CREDENTIAL_REJECTED"
    OPERATION_FAILED = "OPERATION_FAILED"


class SyncStatus(str, Enum):
    SUCCESS = "SUCCESS"
    PARTIAL_SUCCESS = "PARTIAL_SUCCESS"
    FAILED = "FAILED"
