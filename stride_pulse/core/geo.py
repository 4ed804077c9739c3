"""Geo reduction of a live GPS stream.

Turns raw location fixes into an accepted path, a cumulative distance and a
gain-only elevation total. Fixes closer than the jitter threshold to the
last accepted point are dropped outright, which suppresses GPS noise while
standing still at the cost of under-counting very slow movement.
"""
import math
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

from stride_pulse.core.constants import EARTH_RADIUS_M
from stride_pulse.schemas.run import LocationSample, UserSettings


def haversine_m(lat1, lon1, lat2, lon2):
    """Return great-circle distance in meters between two WGS84 points."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


class PathBuffer:
    """Fixed-capacity ring buffer of accepted samples, oldest evicted first."""

    def __init__(self, capacity: int, samples: Iterable[LocationSample] = ()):
        if capacity <= 0:
            raise ValueError("capacity must be > 0")
        self.capacity = capacity
        self._slots: list[Optional[LocationSample]] = [None] * capacity
        self._head = 0  # index of the oldest sample
        self._size = 0
        for s in samples:
            self.append(s)

    def append(self, sample: LocationSample) -> None:
        tail = (self._head + self._size) % self.capacity
        self._slots[tail] = sample
        if self._size < self.capacity:
            self._size += 1
        else:
            self._head = (self._head + 1) % self.capacity

    def last(self) -> Optional[LocationSample]:
        if self._size == 0:
            return None
        return self._slots[(self._head + self._size - 1) % self.capacity]

    def to_list(self) -> list[LocationSample]:
        return list(self)

    def __len__(self) -> int:
        return self._size

    def __iter__(self) -> Iterator[LocationSample]:
        for i in range(self._size):
            yield self._slots[(self._head + i) % self.capacity]  # type: ignore[misc]


@dataclass
class Reduction:
    path: PathBuffer
    distance_m: float
    elevation_gain_m: float
    accepted: bool
    increment_m: float = 0.0


def reduce_location(
    path: PathBuffer,
    distance_m: float,
    elevation_gain_m: float,
    sample: LocationSample,
    jitter_m: float = 2.0,
) -> Reduction:
    """Fold one fix into the running path / distance / elevation.

    The first fix seeds the path. Later fixes are accepted only when they
    are more than `jitter_m` from the last accepted point; accepted fixes
    are appended to `path` in place. Rejected fixes change nothing.
    """
    last = path.last()
    if last is None:
        path.append(sample)
        return Reduction(path, distance_m, elevation_gain_m, accepted=True)

    added = haversine_m(last.latitude, last.longitude, sample.latitude, sample.longitude)
    if not added > jitter_m:
        return Reduction(path, distance_m, elevation_gain_m, accepted=False)

    gained = 0.0
    if sample.altitude is not None and last.altitude is not None:
        if sample.altitude > last.altitude:
            gained = sample.altitude - last.altitude

    path.append(sample)
    return Reduction(
        path,
        distance_m + added,
        elevation_gain_m + gained,
        accepted=True,
        increment_m=added,
    )


def signal_quality(accuracy_m, poor_m: float = 25.0, critical_m: float = 60.0):
    """Classify a reported GPS accuracy radius: None, 'good', 'poor' or 'critical'."""
    if accuracy_m is None:
        return None
    if accuracy_m > critical_m:
        return "critical"
    if accuracy_m > poor_m:
        return "poor"
    return "good"


def speed_alert(speed_mps, user_settings: UserSettings):
    """Compare a device speed (m/s) with the user's km/h alert band."""
    # stationary fixes never alert
    if not speed_mps or speed_mps <= 0:
        return None
    kmh = speed_mps * 3.6
    low = user_settings.min_speed_alert_kmh
    high = user_settings.max_speed_alert_kmh
    if low is not None and kmh < low:
        return "slow"
    if high is not None and kmh > high:
        return "fast"
    return None
