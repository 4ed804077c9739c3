import math

import pytest

from stride_pulse.core.geo import (
    PathBuffer,
    haversine_m,
    reduce_location,
    signal_quality,
    speed_alert,
)
from stride_pulse.schemas.run import LocationSample, UserSettings

LAT, LON = 52.3676, 4.9041
T0 = 1_760_000_000_000


def sample(dlat=0.0, dlon=0.0, alt=None, t=T0, accuracy=5.0):
    return LocationSample(
        latitude=LAT + dlat,
        longitude=LON + dlon,
        timestamp_ms=t,
        altitude=alt,
        accuracy=accuracy,
    )


def test_haversine_zero_and_symmetric():
    assert haversine_m(LAT, LON, LAT, LON) == 0.0
    d_ab = haversine_m(LAT, LON, 48.8566, 2.3522)
    d_ba = haversine_m(48.8566, 2.3522, LAT, LON)
    assert d_ab == pytest.approx(d_ba)
    # Amsterdam -> Paris is roughly 430 km
    assert 420_000 < d_ab < 440_000


def test_haversine_one_degree_of_latitude():
    expected = 6371000.0 * math.pi / 180
    assert haversine_m(0.0, 0.0, 1.0, 0.0) == pytest.approx(expected)


def test_first_sample_seeds_path():
    path = PathBuffer(1000)
    r = reduce_location(path, 0.0, 0.0, sample(alt=10.0))
    assert r.accepted
    assert len(r.path) == 1
    assert r.distance_m == 0.0
    assert r.elevation_gain_m == 0.0


def test_jitter_is_dropped():
    path = PathBuffer(1000, [sample()])
    # ~1.1 m north
    r = reduce_location(path, 100.0, 5.0, sample(dlat=0.00001, alt=50.0))
    assert not r.accepted
    assert len(r.path) == 1
    assert r.distance_m == 100.0
    assert r.elevation_gain_m == 5.0


def test_accepted_sample_adds_exact_haversine():
    first = sample()
    nxt = sample(dlat=0.0001, dlon=0.0001)
    path = PathBuffer(1000, [first])
    r = reduce_location(path, 42.0, 0.0, nxt)
    expected = haversine_m(first.latitude, first.longitude, nxt.latitude, nxt.longitude)
    assert r.accepted
    assert expected > 2
    assert r.distance_m == pytest.approx(42.0 + expected)
    assert r.path.last() == nxt


def test_jitter_threshold_is_configurable():
    path = PathBuffer(1000, [sample()])
    # ~11 m is noise when the filter is 20 m wide
    r = reduce_location(path, 0.0, 0.0, sample(dlat=0.0001), jitter_m=20.0)
    assert not r.accepted


def test_elevation_gain_only():
    path = PathBuffer(1000, [sample(alt=10.0)])
    r = reduce_location(path, 0.0, 0.0, sample(dlat=0.0001, alt=15.0))
    assert r.elevation_gain_m == pytest.approx(5.0)

    # descent contributes nothing
    r = reduce_location(r.path, r.distance_m, r.elevation_gain_m, sample(dlat=0.0002, alt=3.0))
    assert r.accepted
    assert r.elevation_gain_m == pytest.approx(5.0)

    # gain is measured from the last accepted point, not the peak
    r = reduce_location(r.path, r.distance_m, r.elevation_gain_m, sample(dlat=0.0003, alt=4.0))
    assert r.elevation_gain_m == pytest.approx(6.0)


def test_missing_altitude_adds_no_elevation():
    path = PathBuffer(1000, [sample(alt=None)])
    r = reduce_location(path, 0.0, 0.0, sample(dlat=0.0001, alt=100.0))
    assert r.accepted
    assert r.elevation_gain_m == 0.0


def test_path_keeps_most_recent_thousand():
    path = PathBuffer(1000)
    distance, elevation = 0.0, 0.0
    fed = []
    for i in range(1500):
        s = sample(dlat=0.0001 * i, t=T0 + i * 1000)
        r = reduce_location(path, distance, elevation, s)
        assert r.accepted
        distance, elevation = r.distance_m, r.elevation_gain_m
        fed.append(s)

    assert len(path) == 1000
    assert path.to_list() == fed[500:]
    # running total is not recomputed from the trimmed path
    assert distance == pytest.approx(1499 * haversine_m(0, 0, 0.0001, 0), rel=1e-3)


def test_path_buffer_rejects_zero_capacity():
    with pytest.raises(ValueError):
        PathBuffer(0)


def test_signal_quality():
    assert signal_quality(None) is None
    assert signal_quality(10) == "good"
    assert signal_quality(25) == "good"
    assert signal_quality(30) == "poor"
    assert signal_quality(61) == "critical"


def test_speed_alert():
    prefs = UserSettings(min_speed_alert_kmh=8.0, max_speed_alert_kmh=14.0)
    assert speed_alert(None, prefs) is None
    assert speed_alert(0.0, prefs) is None
    assert speed_alert(2.0, prefs) == "slow"    # 7.2 km/h
    assert speed_alert(3.0, prefs) is None      # 10.8 km/h
    assert speed_alert(4.5, prefs) == "fast"    # 16.2 km/h
    assert speed_alert(4.5, UserSettings()) is None
