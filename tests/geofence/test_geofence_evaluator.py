import math

import pytest

from src.smart_attendance.smart_attendance.core.exceptions import ValidationError
from src.smart_attendance.smart_attendance.events.model import LatLng
from src.smart_attendance.smart_attendance.geofence.evaluator import GeofenceEvaluator, distance, is_within

from fakes import EVENT_LAT, EVENT_LON, fix_at, make_event


def test_distance_is_zero_for_same_point():
    p = LatLng(EVENT_LAT, EVENT_LON)
    assert distance(p, p) == 0.0


def test_distance_is_symmetric():
    a = LatLng(10.7769, 106.7009)
    b = LatLng(21.0285, 105.8542)
    assert distance(a, b) == pytest.approx(distance(b, a))


def test_distance_matches_known_value():
    # Ho Chi Minh City -> Hanoi is about 1,140 km as the crow flies.
    a = LatLng(10.7769, 106.7009)
    b = LatLng(21.0285, 105.8542)
    assert distance(a, b) == pytest.approx(1_140_000, rel=0.02)


def test_one_thousandth_degree_of_latitude_is_about_111m():
    a = LatLng(0.0, 0.0)
    b = LatLng(0.001, 0.0)
    assert distance(a, b) == pytest.approx(111.19, abs=0.5)


def test_antipodal_points_do_not_blow_up():
    d = distance(LatLng(0.0, 0.0), LatLng(0.0, 180.0))
    assert d == pytest.approx(math.pi * 6_371_000.0)


@pytest.mark.parametrize(
    "lat, lon",
    [(float("nan"), 0.0), (0.0, float("inf")), (91.0, 0.0), (0.0, -181.0), (None, 0.0)],
)
def test_invalid_coordinates_are_rejected(lat, lon):
    with pytest.raises(ValidationError):
        distance(LatLng(lat, lon), LatLng(0.0, 0.0))


def test_fix_inside_radius_is_within():
    event = make_event(geofence_radius=50.0)
    # ~22 m north.
    assert is_within(event, fix_at(EVENT_LAT + 0.0002, EVENT_LON))


def test_fix_outside_radius_is_not_within():
    event = make_event(geofence_radius=50.0)
    # ~111 m north.
    assert not is_within(event, fix_at(EVENT_LAT + 0.001, EVENT_LON))


def test_larger_radius_accepts_the_same_fix():
    fix = fix_at(EVENT_LAT + 0.001, EVENT_LON)
    assert not is_within(make_event(geofence_radius=100.0), fix)
    assert is_within(make_event(geofence_radius=120.0), fix)


def test_non_positive_radius_is_rejected():
    with pytest.raises(ValidationError):
        GeofenceEvaluator().is_within(make_event(geofence_radius=0.0), fix_at())
