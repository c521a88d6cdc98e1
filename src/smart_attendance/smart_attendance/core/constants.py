"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from .enums import PenaltyType, RiskLevel

EARTH_RADIUS_METERS = 6_371_000.0

DEFAULT_GEOFENCE_RADIUS_METERS = 50.0
DEFAULT_SIGN_IN_START_OFFSET = 30
DEFAULT_SIGN_IN_END_OFFSET = 15
DEFAULT_SIGN_OUT_START_OFFSET = 30
DEFAULT_SIGN_OUT_END_OFFSET = 15

DEFAULT_LOCATION_TIMEOUT_SECONDS = 10.0
DEFAULT_SYNC_INTERVAL_SECONDS = 900.0
# Pulls re-read this far behind the watermark; changed_at is stamped before commit.
CHANGE_LOOKBACK_SECONDS = 60.0
DEFAULT_REMOTE_CONNECT_TIMEOUT_SECONDS = 3
REMOTE_RETRY_AFTER_SECONDS = 30.0

# Upper bound (minutes, inclusive) of each late tier; anything beyond is CRITICAL.
LATE_PENALTY_TIERS = (
    (5, PenaltyType.WARNING),
    (15, PenaltyType.MINOR),
    (30, PenaltyType.MAJOR),
)

PENALTY_POINTS = {
    PenaltyType.WARNING: 1,
    PenaltyType.MINOR: 3,
    PenaltyType.MAJOR: 8,
    PenaltyType.CRITICAL: 15,
}

# Inclusive upper bound of points per risk level; CRITICAL is open-ended.
RISK_THRESHOLDS = (
    (20, RiskLevel.LOW),
    (40, RiskLevel.MEDIUM),
    (60, RiskLevel.HIGH),
)

TARGET_ATTENDANCE_RATE = 95.0
ESCALATION_WINDOW = 10

PULL_WATERMARK_NAME = "attendance_records"
