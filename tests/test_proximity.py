import math
from datetime import datetime

import pytest

from airtracker.exceptions import InvalidCoordinates, InvalidParameters
from airtracker.proximity import (
    DEFAULT_RADIUS_KM,
    EARTH_RADIUS_KM,
    ProximityEngine,
    haversine_distance,
    is_visible,
    validate_query,
)

NYC = (40.7128, -74.006)


def north_of(point, km):
    """Point `km` due north along the meridian."""
    return point[0] + math.degrees(km / EARTH_RADIUS_KM), point[1]


@pytest.mark.parametrize(
    "lat, lon",
    [(0.0, 0.0), (40.7128, -74.006), (-33.8688, 151.2093), (89.9, 179.9)],
)
def test_haversine_identity(lat, lon):
    assert haversine_distance(lat, lon, lat, lon) == 0.0


def test_haversine_symmetry():
    london = (51.5074, -0.1278)
    d1 = haversine_distance(*NYC, *london)
    d2 = haversine_distance(*london, *NYC)
    assert d1 == pytest.approx(d2)
    assert d1 == pytest.approx(5570, abs=10)


def test_haversine_along_meridian_matches_arc_length():
    lat, lon = north_of(NYC, 50)
    assert haversine_distance(*NYC, lat, lon) == pytest.approx(50.0, abs=1e-6)


def test_within_radius_is_visible():
    assert is_visible(100.0, 1000.0, 100.0)


def test_local_bound_applies_regardless_of_radius():
    assert is_visible(200.0, None, 10.0)
    assert not is_visible(200.01, None, 10.0)


def test_high_altitude_tier_requires_strictly_higher_altitude():
    assert is_visible(399.0, 10501.0, 50.0)
    assert not is_visible(399.0, 10500.0, 50.0)
    assert not is_visible(400.01, 12000.0, 50.0)


def test_moderate_altitude_tier():
    assert is_visible(300.0, 8001.0, 100.0)
    assert not is_visible(300.0, 8000.0, 100.0)
    assert not is_visible(301.0, 8001.0, 100.0)


def test_radius_margin_tier():
    # 8000 m exactly fails the altitude tier, so only the x2 margin includes it
    assert is_visible(300.0, 8000.0, 150.0)
    assert is_visible(399.0, None, 199.5)
    assert not is_visible(399.0, None, 199.0)


def test_unknown_altitude_never_matches_altitude_tiers():
    assert not is_visible(250.0, None, 100.0)


def test_validate_query_defaults_radius():
    assert validate_query("40.7128", "-74.006") == (40.7128, -74.006, DEFAULT_RADIUS_KM)
    assert validate_query("40.7128", "-74.006", "") == (40.7128, -74.006, DEFAULT_RADIUS_KM)


def test_validate_query_accepts_fractional_radius():
    assert validate_query(0, 0, "12.5") == (0.0, 0.0, 12.5)


@pytest.mark.parametrize(
    "lat, lon, radius",
    [
        (None, "1", None),
        ("abc", "1", None),
        ("1", "", None),
        ("nan", "1", None),
        ("1", "inf", None),
        ("1", "1", "0"),
        ("1", "1", "-5"),
        ("1", "1", "wide"),
        (True, "1", None),
    ],
)
def test_validate_query_rejects_bad_values(lat, lon, radius):
    with pytest.raises(InvalidParameters):
        validate_query(lat, lon, radius)


@pytest.mark.parametrize("lat, lon", [("90.1", "0"), ("-91", "0"), ("0", "180.5"), ("0", "-181")])
def test_validate_query_rejects_out_of_range(lat, lon):
    with pytest.raises(InvalidCoordinates):
        validate_query(lat, lon)


def test_empty_store_returns_empty_list(store):
    assert ProximityEngine(store).nearby(*NYC, 100.0) == []


def test_new_york_fifty_km_scenario(store, make_record):
    lat, lon = north_of(NYC, 50)
    store.upsert_many([make_record("a1b2c3", latitude=lat, longitude=lon, altitude=9000.0)])

    results = ProximityEngine(store).nearby(*NYC, 100.0)

    assert len(results) == 1
    assert results[0].aircraft.icao24 == "a1b2c3"
    assert results[0].distance_km == pytest.approx(50.0, abs=0.01)
    assert results[0].to_dict()["distance_km"] == 50.0


def test_nearby_filters_and_sorts(store, make_record):
    records = []
    for icao24, km, altitude in [
        ("far001", 250, 11000.0),    # high-altitude tier
        ("near01", 10, 3000.0),
        ("mid001", 150, 5000.0),     # local bound
        ("out001", 250, 5000.0),     # no tier matches
        ("edge01", 350, 10600.0),    # high-altitude tier
    ]:
        lat, lon = north_of(NYC, km)
        records.append(make_record(icao24, latitude=lat, longitude=lon, altitude=altitude))

    lat, lon = north_of(NYC, 5)
    records.append(make_record("ground", latitude=lat, longitude=lon, on_ground=True))
    records.append(make_record("noalt1", latitude=lat, longitude=lon, altitude=None))
    store.upsert_many(records)

    results = ProximityEngine(store).nearby(*NYC, 100.0)

    assert [r.aircraft.icao24 for r in results] == ["near01", "mid001", "far001", "edge01"]
    distances = [r.distance_km for r in results]
    assert distances == sorted(distances)


def test_nearby_respects_candidate_limit(store, make_record):
    store.upsert_many([
        make_record("old001", last_updated=datetime(2024, 1, 1)),
        make_record("new001", last_updated=datetime(2024, 1, 2)),
    ])

    results = ProximityEngine(store, candidate_limit=1).nearby(*NYC, 100.0)

    assert [r.aircraft.icao24 for r in results] == ["new001"]
