from stride_pulse.core.path_view import path_polyline
from stride_pulse.schemas.run import LocationSample


def pt(lat, lon):
    return LocationSample(latitude=lat, longitude=lon, timestamp_ms=0)


def test_needs_two_points():
    assert path_polyline([]).d == ""
    view = path_polyline([pt(52.0, 5.0)])
    assert view.d == ""
    assert view.start is None


def test_north_is_up_and_fills_padded_canvas():
    view = path_polyline([pt(52.0, 5.0), pt(52.01, 5.01)])
    # south-west corner -> bottom left, north-east corner -> top right
    assert view.start == (30, 210)
    assert view.end == (270, 30)
    assert view.d == "M 30,210 L 270,30"


def test_straight_north_line_stays_on_left_edge():
    view = path_polyline([pt(52.0, 5.0), pt(52.005, 5.0), pt(52.01, 5.0)])
    xs = [float(p.split(",")[0]) for p in view.d[2:].split(" L ")]
    assert xs == [30, 30, 30]
    assert view.end == (30, 30)
