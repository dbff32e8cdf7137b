import math

import pytest

from routemap.geo import (
    RouteEngine,
    format_route_distance,
    haversine_km,
    route_length_km,
    segment_lengths_km,
    validate_latlng,
)

TOKYO = (35.681236, 139.767125)
NEARBY = (35.690, 139.780)
OSAKA = (34.702485, 135.495951)


def test_haversine_symmetric_and_zero():
    assert haversine_km(TOKYO, NEARBY) == pytest.approx(haversine_km(NEARBY, TOKYO))
    assert haversine_km(TOKYO, TOKYO) == 0.0


def test_haversine_known_distance():
    d = haversine_km(TOKYO, NEARBY)
    assert 1.4 < d < 1.6
    assert format_route_distance(d) == "経路距離: 1.52 km"


def test_haversine_quarter_meridian():
    # equator to pole along a meridian is a quarter of the circumference
    assert haversine_km((0.0, 0.0), (90.0, 0.0)) == pytest.approx(math.pi * 6371.0 / 2.0)


def test_segment_lengths_match_scalar_formula():
    pts = [TOKYO, NEARBY, OSAKA]
    segs = segment_lengths_km(pts)
    assert len(segs) == 2
    assert segs[0] == pytest.approx(haversine_km(TOKYO, NEARBY))
    assert segs[1] == pytest.approx(haversine_km(NEARBY, OSAKA))


def test_route_length_is_order_dependent_sum():
    a = route_length_km([TOKYO, OSAKA, NEARBY])
    b = route_length_km([TOKYO, NEARBY, OSAKA])
    assert a == pytest.approx(haversine_km(TOKYO, OSAKA) + haversine_km(OSAKA, NEARBY))
    assert b == pytest.approx(haversine_km(TOKYO, NEARBY) + haversine_km(NEARBY, OSAKA))
    assert a != pytest.approx(b)


def test_route_length_short_inputs():
    assert route_length_km([]) == 0.0
    assert route_length_km([TOKYO]) == 0.0
    assert len(segment_lengths_km([TOKYO])) == 0


def test_format_empty_without_route():
    assert format_route_distance(None) == ""
    assert format_route_distance(0.0) == "経路距離: 0.00 km"


def test_route_engine_replaces_previous_route():
    eng = RouteEngine()
    assert eng.update([TOKYO]) is None
    assert eng.distance_text == ""

    first = eng.update([TOKYO, NEARBY])
    assert first is not None and first.points == (TOKYO, NEARBY)
    second = eng.update([TOKYO, NEARBY, OSAKA])
    assert eng.current is second
    assert second.length_km > first.length_km

    eng.update([])
    assert eng.current is None
    assert eng.distance_text == ""


@pytest.mark.parametrize("lat,lon", [(91.0, 0.0), (-90.5, 0.0), (0.0, 180.1), (float("nan"), 0.0)])
def test_validate_latlng_rejects(lat, lon):
    with pytest.raises(ValueError):
        validate_latlng(lat, lon)


def test_validate_latlng_accepts_bounds():
    assert validate_latlng(-90, 180) == (-90.0, 180.0)
