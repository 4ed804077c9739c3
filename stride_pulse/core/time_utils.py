import math
import time
from datetime import datetime, timezone

from stride_pulse.core.constants import KM_M, NO_PACE


def format_time(total_seconds: int) -> str:
    """
    Convert total seconds (int) -> 'H:MM:SS', or 'MM:SS' under one hour.
    Example: 3725 -> '1:02:05', 65 -> '01:05'
    """
    total_seconds = int(total_seconds)
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    seconds = total_seconds % 60
    prefix = f"{hours}:" if hours > 0 else ""
    return f"{prefix}{minutes:02d}:{seconds:02d}"


def format_pace(duration_seconds: float, distance_m: float) -> str:
    """
    Compute pace per kilometer as 'M:SS'.
    Example: duration=330 sec, distance=1000 m -> '5:30'
    No distance or no elapsed time yet gives '--:--'.
    """
    if distance_m == 0 or duration_seconds == 0:
        return NO_PACE

    minutes_per_km = (duration_seconds / 60) / (distance_m / KM_M)
    minutes = math.floor(minutes_per_km)
    # round half up, matching what the device UI shows
    seconds = math.floor((minutes_per_km - minutes) * 60 + 0.5)
    if seconds == 60:
        minutes += 1
        seconds = 0
    return f"{minutes}:{seconds:02d}"


def now_ms() -> int:
    """Current wall clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def ms_to_datetime(ms: int) -> datetime:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)


def to_local_datetime(dt, tz_name: str | None = None):
    """Convert a datetime from source tz (assume UTC if naive) to local or given tz.

    - If `tz_name` is 'local' or None: use system local timezone.
    - If `tz_name` is IANA tz name (e.g., 'America/New_York'): use that.
    - If `dt` has no tzinfo, assume UTC.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    if tz_name and tz_name.upper() == "UTC":
        return dt.astimezone(timezone.utc)
    if tz_name and tz_name != "local":
        from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
        try:
            return dt.astimezone(ZoneInfo(tz_name))
        except (ZoneInfoNotFoundError, ValueError):
            return dt.astimezone()
    return dt.astimezone()


def is_same_local_day(ms_a: int, ms_b: int, tz_name: str | None = None) -> bool:
    """True when both epoch-ms instants fall on the same calendar day in `tz_name`."""
    day_a = to_local_datetime(ms_to_datetime(ms_a), tz_name).date()
    day_b = to_local_datetime(ms_to_datetime(ms_b), tz_name).date()
    return day_a == day_b
