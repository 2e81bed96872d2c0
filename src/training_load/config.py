"""Configuration settings for the training load engine."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


PACKAGE_ROOT = Path(__file__).parent.parent.parent


DEFAULT_RPE_INTENSITY: dict[int, float] = {
    1: 0.2,
    2: 0.3,
    3: 0.4,
    4: 0.5,
    5: 0.6,
    6: 0.7,
    7: 0.8,
    8: 0.9,
    9: 1.0,
    10: 1.2,
}

# TSS per hour keyed by provider sport label
DEFAULT_SPORT_TSS_PER_HOUR: dict[str, float] = {
    "Run": 90,
    "Trail Run": 100,
    "TrailRun": 100,
    "Ride": 60,
    "VirtualRide": 70,
    "Swim": 55,
    "WeightTraining": 40,
    "Workout": 45,
    "Walk": 30,
    "Hike": 60,
    "Yoga": 15,
    "CrossFit": 80,
    "Elliptical": 55,
    "StairStepper": 60,
    "Nordic Ski": 70,
    "Cross Country Skiing": 70,
    "Rowing": 65,
}

# Used when the sport label is missing or unknown
DEFAULT_MODALITY_TSS_PER_HOUR: dict[str, float] = {
    "run": 90,
    "bike": 60,
    "swim": 55,
    "strength": 40,
    "other": 45,
}


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="TRAINING_LOAD_",
        env_file=str(PACKAGE_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Fitness-fatigue model
    atl_time_constant: int = Field(default=7, gt=0)
    ctl_time_constant: int = Field(default=42, gt=0)
    display_window_days: int = Field(default=90, gt=0)
    fatigue_alert_tsb: float = -25.0

    # Stream normalization
    normalization_window: int = Field(default=30, gt=0)
    max_hold_seconds: int = Field(default=5, ge=1)

    # Threshold defaults when the athlete profile is incomplete
    default_ftp: float = Field(default=250.0, gt=0)
    default_lthr: float = Field(default=132.0, gt=0)
    lthr_max_hr_ratio: float = Field(default=0.7, gt=0)
    default_threshold_pace_min_per_km: float = Field(default=5.5, gt=0)
    default_css_min_per_100m: float = Field(default=1.75, gt=0)
    generic_reference_hr: float = Field(default=200.0, gt=0)

    # Pace tiers
    min_run_distance_m: float = 300.0
    min_swim_distance_m: float = 100.0
    min_intensity_factor: float = 0.5
    max_intensity_factor: float = 1.5

    # Fallback tiers
    relative_effort_factor: float = 1.5
    default_rpe_intensity: float = 0.6
    rpe_intensity: dict[int, float] = Field(default_factory=lambda: dict(DEFAULT_RPE_INTENSITY))
    sport_tss_per_hour: dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_SPORT_TSS_PER_HOUR)
    )
    modality_tss_per_hour: dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_MODALITY_TSS_PER_HOUR)
    )
    default_tss_per_hour: float = 45.0

    # WHOOP strain (0-21, logarithmic) to TSS: round((strain / max)^2 * scale)
    whoop_max_strain: float = Field(default=21.0, gt=0)
    whoop_strain_tss_scale: float = Field(default=200.0, ge=0)

    log_level: str = "WARNING"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
