"""Great-circle distance and geofence containment.

All functions here are pure and safe to call from any thread.
"""
from __future__ import annotations

import math
from typing import Union

from ..attendance.model import Fix
from ..common.validators import require_coordinates
from ..core.constants import EARTH_RADIUS_METERS
from ..core.exceptions import ValidationError
from ..events.model import Event, LatLng

Point = Union[LatLng, Fix]


def distance(a: Point, b: Point) -> float:
    """Haversine distance in meters between two lat/long points."""
    lat1, lon1 = require_coordinates(a.latitude, a.longitude)
    lat2, lon2 = require_coordinates(b.latitude, b.longitude)
    if (lat1, lon1) == (lat2, lon2):
        return 0.0

    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    h = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    # Rounding can push h marginally outside [0, 1] for antipodal points.
    h = min(1.0, max(0.0, h))
    return 2 * EARTH_RADIUS_METERS * math.asin(math.sqrt(h))


def is_within(event: Event, fix: Point) -> bool:
    """True iff ``fix`` lies inside (or on) the event's geofence circle."""
    if not math.isfinite(event.geofence_radius) or event.geofence_radius <= 0:
        raise ValidationError("Geofence radius must be a positive number")
    return distance(event.location, fix) <= event.geofence_radius


class GeofenceEvaluator:
    """Object seam over the module functions, injectable into services."""

    def distance(self, a: Point, b: Point) -> float:
        return distance(a, b)

    def is_within(self, event: Event, fix: Point) -> bool:
        return is_within(event, fix)
