from stride_pulse.core.constants import (
    PATH_VIEW_HEIGHT,
    PATH_VIEW_MIN_RANGE,
    PATH_VIEW_PADDING,
    PATH_VIEW_WIDTH,
)
from stride_pulse.schemas.run import PathView


def path_polyline(
    path,
    width: int = PATH_VIEW_WIDTH,
    height: int = PATH_VIEW_HEIGHT,
    padding: int = PATH_VIEW_PADDING,
) -> PathView:
    """Project a path onto a width x height canvas as an SVG path string.

    Longitude maps to x, latitude to y with north up. Fewer than two points
    give an empty path.
    """
    points = list(path)
    if len(points) < 2:
        return PathView(d="", width=width, height=height)

    lats = [p.latitude for p in points]
    lons = [p.longitude for p in points]
    min_lat, max_lat = min(lats), max(lats)
    min_lon, max_lon = min(lons), max(lons)
    lat_range = (max_lat - min_lat) or PATH_VIEW_MIN_RANGE
    lon_range = (max_lon - min_lon) or PATH_VIEW_MIN_RANGE

    coords = []
    for p in points:
        x = padding + ((p.longitude - min_lon) / lon_range) * (width - 2 * padding)
        y = height - (padding + ((p.latitude - min_lat) / lat_range) * (height - 2 * padding))
        coords.append((round(x, 2), round(y, 2)))

    d = "M " + " L ".join(f"{x:g},{y:g}" for x, y in coords)
    return PathView(d=d, start=coords[0], end=coords[-1], width=width, height=height)
