from __future__ import annotations

import math

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} must not be blank")
    return str(value).strip()


def require_positive(value: float, field_name: str) -> float:
    if value is None or not math.isfinite(float(value)) or float(value) <= 0:
        raise ValidationError(f"{field_name} must be a positive number")
    return float(value)


def require_non_negative(value: int, field_name: str) -> int:
    if value is None or int(value) < 0:
        raise ValidationError(f"{field_name} must not be negative")
    return int(value)


def require_coordinates(latitude: float, longitude: float) -> tuple[float, float]:
    """Reject undefined, NaN, infinite or out-of-range coordinates."""
    if latitude is None or longitude is None:
        raise ValidationError("Coordinates are required")
    lat, lon = float(latitude), float(longitude)
    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise ValidationError("Coordinates must be finite numbers")
    if not -90.0 <= lat <= 90.0:
        raise ValidationError(f"Latitude out of range: {lat}")
    if not -180.0 <= lon <= 180.0:
        raise ValidationError(f"Longitude out of range: {lon}")
    return lat, lon
