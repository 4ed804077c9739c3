from pydantic_settings import BaseSettings
from pydantic import field_validator


class Settings(BaseSettings):
    database_url: str = "sqlite:///stride_pulse.db"
    # Timezone used for the daily session boundary.
    # Examples: "America/New_York", "Europe/London", or "local" to use system tz.
    timezone: str = "local"
    log_level: str = "INFO"
    log_format: str = "text"  # "text" or "json"

    # GPS jitter filter and path retention
    jitter_threshold_m: float = 2.0
    path_capacity: int = 1000
    gps_poor_accuracy_m: float = 25.0
    gps_critical_accuracy_m: float = 60.0

    # Step detector (m/s^2, gravity included)
    step_threshold: float = 12.0
    step_hysteresis: float = 1.0
    step_cooldown_ms: int = 280
    # Some devices (iOS) need an explicit user grant before motion samples flow
    motion_requires_permission: bool = True

    # AI feedback (optional)
    gemini_api_key: str | None = None
    gemini_model: str = "gemini-3-flash-preview"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    feedback_timeout_s: float = 15.0

    # Allow empty env strings for optional fields
    @field_validator("gemini_api_key", mode="before")
    @classmethod
    def _empty_to_none(cls, v):
        if v in ("", None, "null", "None"):
            return None
        return v

    class Config:
        env_file = ".env"


settings = Settings()
