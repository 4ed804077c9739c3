from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase in the stored JSON blob and on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_blob(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class LocationSample(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    latitude: float
    longitude: float
    timestamp_ms: int = Field(alias="timestamp")
    altitude: Optional[float] = None
    accuracy: Optional[float] = None  # meters


class RunRecord(CamelModel):
    id: str
    start_time_ms: int = Field(alias="startTime")
    end_time_ms: Optional[int] = Field(default=None, alias="endTime")
    distance_m: float = Field(default=0.0, alias="distance")
    steps: int = 0
    # Most recent accepted samples only, see Settings.path_capacity
    path: list[LocationSample] = Field(default_factory=list)
    duration_s: int = Field(default=0, alias="duration")
    elevation_gain_m: float = Field(default=0.0, alias="elevationGain")
    notes: Optional[str] = None
    is_rest_day: bool = False
    shoe_id: Optional[str] = None
    avg_accuracy: Optional[float] = None


class ShoeProfile(CamelModel):
    id: str
    name: str
    current_mileage_m: float = Field(default=0.0, alias="currentMileage")
    limit_m: float = Field(alias="limit")
    is_active: bool = False

    @property
    def wear_ratio(self) -> float:
        if self.limit_m <= 0:
            return 0.0
        return self.current_mileage_m / self.limit_m


class AutoArchivePeriod(str, Enum):
    never = "never"
    six_months = "6months"
    one_year = "1year"


class UserSettings(CamelModel):
    min_speed_alert_kmh: Optional[float] = Field(default=None, alias="minSpeedAlert")
    max_speed_alert_kmh: Optional[float] = Field(default=None, alias="maxSpeedAlert")
    auto_archive_period: AutoArchivePeriod = AutoArchivePeriod.never


class LifetimeStats(CamelModel):
    total_distance_m: float = Field(default=0.0, alias="totalDistance")
    total_runs: int = 0
    total_steps: int = 0
    # Most recent first
    history: list[RunRecord] = Field(default_factory=list)
    shoes: list[ShoeProfile] = Field(default_factory=list)
    settings: UserSettings = Field(default_factory=UserSettings)


# --------- API payloads --------- #

class LocationIn(CamelModel):
    """Raw fix from the device. Null coordinates are dropped, not rejected."""

    latitude: Optional[float] = None
    longitude: Optional[float] = None
    timestamp_ms: Optional[int] = Field(default=None, alias="timestamp")
    altitude: Optional[float] = None
    accuracy: Optional[float] = None
    speed: Optional[float] = None  # m/s as reported by the device


class LocationErrorIn(BaseModel):
    message: str
    code: Optional[int] = None


class MotionIn(CamelModel):
    """Acceleration including gravity (m/s^2). Any null axis drops the sample."""

    x: Optional[float] = None
    y: Optional[float] = None
    z: Optional[float] = None
    timestamp_ms: Optional[int] = Field(default=None, alias="timestamp")


class MotionAccessIn(BaseModel):
    granted: bool


class TickIn(BaseModel):
    seconds: int = Field(default=1, ge=0)


class NotesIn(BaseModel):
    notes: Optional[str] = None


class SampleAck(CamelModel):
    accepted: bool


class ShoeCreate(CamelModel):
    name: str = Field(min_length=1)
    limit_km: float = Field(gt=0)


class SettingsUpdate(CamelModel):
    min_speed_alert_kmh: Optional[float] = Field(default=None, alias="minSpeedAlert")
    max_speed_alert_kmh: Optional[float] = Field(default=None, alias="maxSpeedAlert")
    auto_archive_period: Optional[AutoArchivePeriod] = None


class TodayRead(CamelModel):
    run: RunRecord
    pace: str        # e.g. "5:30" per km
    elapsed: str     # e.g. "1:02:05"
    gps_signal: Optional[str] = None   # good / poor / critical
    gps_accuracy: Optional[float] = None
    speed_alert: Optional[str] = None  # slow / fast
    motion: str                        # granted / denied / prompt
    active_shoe: Optional[ShoeProfile] = None


class PathView(CamelModel):
    d: str
    start: Optional[tuple[float, float]] = None
    end: Optional[tuple[float, float]] = None
    width: int
    height: int


class HistoryBar(CamelModel):
    start_time_ms: int = Field(alias="startTime")
    distance_m: float = Field(alias="distance")


class HistorySummary(CamelModel):
    runs: list[HistoryBar]
    avg_distance_m: float = Field(alias="avgDistance")
    max_distance_m: float = Field(alias="maxDistance")


class FeedbackRead(BaseModel):
    feedback: str
