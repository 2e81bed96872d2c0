"""Value types consumed and produced by the training load engine."""

import math
from dataclasses import asdict, dataclass
from datetime import date as date_type
from enum import Enum
from typing import Annotated, Any, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator


MAX_HOLD_SECONDS = 5


def to_camel(string: str) -> str:
    """Convert snake_case to camelCase."""
    components = string.split("_")
    return components[0] + "".join(x.title() for x in components[1:])


def _unset_if_not_positive(value: Any) -> Any:
    """Map zero, negative and non-finite numbers to None (threshold unset)."""
    if value is None or isinstance(value, bool):
        return value
    try:
        number = float(value)
    except (TypeError, ValueError):
        return value
    if not math.isfinite(number) or number <= 0:
        return None
    return value


# =============================================================================
# Enums
# =============================================================================

class Modality(str, Enum):
    """Sport family used to choose a scoring tier."""
    RUN = "run"
    BIKE = "bike"
    SWIM = "swim"
    STRENGTH = "strength"
    OTHER = "other"


class ActivityStatus(str, Enum):
    """Lifecycle of an activity. Only completed ones carry load."""
    PLANNED = "planned"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    SKIPPED = "skipped"


# =============================================================================
# Inputs
# =============================================================================

class _FrozenModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class SensorStream(_FrozenModel):
    """Per-sample sensor values (bpm or watts), optionally time-stamped."""

    samples: list[float] = Field(default_factory=list, description="Sensor samples")
    time_offsets: Optional[list[float]] = Field(
        None, description="Seconds from activity start, parallel to samples"
    )

    @model_validator(mode="after")
    def _check_offsets(self) -> "SensorStream":
        if self.time_offsets is None:
            return self
        if len(self.time_offsets) != len(self.samples):
            raise ValueError(
                f"time_offsets has {len(self.time_offsets)} entries "
                f"but samples has {len(self.samples)}"
            )
        if any(b < a for a, b in zip(self.time_offsets, self.time_offsets[1:])):
            raise ValueError("time_offsets must be non-decreasing")
        return self

    def __len__(self) -> int:
        return len(self.samples)

    def per_second(self, max_hold_seconds: int = MAX_HOLD_SECONDS) -> list[float]:
        """
        Resample onto a 1 Hz grid.

        Each sample is held until the next sample's offset, so a stream
        recorded every 2-3 seconds still yields one value per second.
        Gaps longer than max_hold_seconds are recording pauses: the sample
        before the pause counts for one second and the pause is skipped,
        matching moving time. The result is never longer than
        len(samples) * max_hold_seconds.
        Streams without offsets are already assumed to be 1 Hz.
        """
        if not self.time_offsets:
            return list(self.samples)

        start = self.time_offsets[0]
        slots = [int(round(offset - start)) for offset in self.time_offsets]
        resampled: list[float] = []
        for i, sample in enumerate(self.samples):
            hold = slots[i + 1] - slots[i] if i + 1 < len(slots) else 1
            if hold > max_hold_seconds:
                hold = 1
            resampled.extend([sample] * hold)
        return resampled


def _coerce_stream(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return {"samples": list(value)}
    return value


PositiveOrUnset = Annotated[Optional[float], BeforeValidator(_unset_if_not_positive)]
StreamInput = Annotated[Optional[SensorStream], BeforeValidator(_coerce_stream)]


class ActivityStreams(_FrozenModel):
    """Raw streams captured for one activity."""

    heart_rate: StreamInput = None
    power: StreamInput = None


class ActivityRecord(_FrozenModel):
    """One workout as handed over by a history provider or manual entry."""

    duration_seconds: float = Field(..., ge=0, allow_inf_nan=False, description="Moving time")
    modality: Modality = Field(..., description="Sport family")
    sport_type: Optional[str] = Field(None, description="Provider sport label, e.g. 'Trail Run'")
    distance_meters: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    average_heart_rate: PositiveOrUnset = None
    average_power: PositiveOrUnset = None
    weighted_average_power: PositiveOrUnset = Field(
        None, description="Provider-supplied normalized power equivalent"
    )
    perceived_effort: Optional[float] = Field(None, ge=1, le=10, description="RPE 1-10")
    relative_effort: PositiveOrUnset = Field(
        None, description="Provider relative effort score (Strava suffer score)"
    )
    heart_rate_stream: StreamInput = None
    power_stream: StreamInput = None

    # Bookkeeping used by daily aggregation
    activity_date: Optional[date_type] = None
    status: ActivityStatus = ActivityStatus.COMPLETED
    tss: Optional[float] = Field(None, ge=0, allow_inf_nan=False, description="Stored TSS")
    name: Optional[str] = None
    external_id: Optional[str] = None

    @property
    def duration_hours(self) -> float:
        return self.duration_seconds / 3600.0

    @property
    def duration_minutes(self) -> float:
        return self.duration_seconds / 60.0


class AthleteThresholds(_FrozenModel):
    """Per-athlete calibration. Every field is optional."""

    hr_max: PositiveOrUnset = Field(None, description="Maximum heart rate (bpm)")
    hr_resting: PositiveOrUnset = Field(None, description="Resting heart rate (bpm)")
    lthr: PositiveOrUnset = Field(None, description="Lactate threshold heart rate (bpm)")
    ftp: PositiveOrUnset = Field(None, description="Functional threshold power (W)")
    threshold_pace_min_per_km: PositiveOrUnset = Field(None, description="Run threshold pace")
    css_pace_min_per_100m: PositiveOrUnset = Field(None, description="Critical swim speed pace")


class DailyTssEntry(_FrozenModel):
    """Total TSS of all completed activities on one calendar day."""

    date: date_type
    tss: float = Field(..., ge=0, allow_inf_nan=False)


class DailyRecovery(_FrozenModel):
    """Daily recovery metrics from a wearable."""

    date: date_type
    recovery_score: float = Field(..., ge=0, le=100, description="Recovery score 0-100")
    hrv_ms: Optional[int] = Field(None, ge=0)
    resting_hr: Optional[int] = Field(None, ge=0)
    respiratory_rate: Optional[float] = None
    sleep_score: Optional[int] = Field(None, ge=0, le=100)
    sleep_duration_minutes: Optional[int] = Field(None, ge=0)
    sleep_deep_minutes: Optional[int] = Field(None, ge=0)
    sleep_rem_minutes: Optional[int] = Field(None, ge=0)
    sleep_light_minutes: Optional[int] = Field(None, ge=0)
    sleep_awake_minutes: Optional[int] = Field(None, ge=0)
    source: str = "whoop"


# =============================================================================
# Outputs
# =============================================================================

@dataclass(frozen=True)
class LoadPoint:
    """Fitness-fatigue state for one calendar day."""

    date: date_type
    daily_tss: float
    atl: float  # Acute Training Load (fatigue) - 7 day constant
    ctl: float  # Chronic Training Load (fitness) - 42 day constant
    tsb: float  # Training Stress Balance = yesterday's CTL - yesterday's ATL

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        data = asdict(self)
        data["date"] = self.date.isoformat()
        return data
