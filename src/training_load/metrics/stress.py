"""Per-activity Training Stress Score with a tiered fallback chain.

TSS = duration (h) x IF^2 x 100, where the Intensity Factor (IF) comes from
the best signal the activity carries. Tiers, first applicable wins:

1. Power (bike): IF = NP / FTP
2. Heart rate (run): IF = HR / LTHR
3. Pace (run without HR): IF = threshold pace / actual pace
4. Pace (swim): IF = CSS / pace per 100m
5. Heart rate (any sport): IF = HR / 200
6. Provider relative effort: score x 1.5
7. Perceived effort (RPE 1-10): minutes x intensity table
8. Duration only: sport-specific TSS per hour

Stream-derived values (NP, NHR) are preferred over provider averages.
Missing data lowers precision but always yields a number >= 0.
"""

import logging
import math
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Optional, Tuple

from ..config import Settings, get_settings
from ..models import (
    ActivityRecord,
    ActivityStreams,
    AthleteThresholds,
    Modality,
    SensorStream,
)
from .normalize import normalize_stream

logger = logging.getLogger(__name__)


class ScoringTier(str, Enum):
    """Which branch of the fallback chain produced the score."""
    POWER = "power"
    RUN_HEART_RATE = "run_heart_rate"
    RUN_PACE = "run_pace"
    SWIM_PACE = "swim_pace"
    HEART_RATE = "heart_rate"
    RELATIVE_EFFORT = "relative_effort"
    PERCEIVED_EFFORT = "perceived_effort"
    DURATION = "duration"
    NO_DURATION = "no_duration"


@dataclass(frozen=True)
class StressScore:
    """A TSS value together with how it was obtained."""

    tss: int
    tier: ScoringTier
    intensity_factor: Optional[float] = None
    intensity: Optional[float] = None  # NP, HR or pace that fed the IF
    from_stream: bool = False

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        data = asdict(self)
        data["tier"] = self.tier.value
        return data


def calculate_intensity_tss(duration_hours: float, intensity_factor: float) -> float:
    """
    TSS from duration and intensity factor.

    One hour at IF 1.0 (threshold) is 100 TSS.
    """
    return duration_hours * (intensity_factor ** 2) * 100


def clamp_intensity_factor(
    intensity_factor: float,
    settings: Optional[Settings] = None,
) -> float:
    """Clamp a pace-derived IF to the configured bounds (0.5-1.5 by default)."""
    settings = settings or get_settings()
    return max(settings.min_intensity_factor, min(settings.max_intensity_factor, intensity_factor))


def estimate_lthr(
    thresholds: Optional[AthleteThresholds] = None,
    settings: Optional[Settings] = None,
) -> float:
    """
    Lactate threshold heart rate used for running hrTSS.

    Athlete LTHR when known, else 70% of max HR, else 132 bpm.
    """
    settings = settings or get_settings()
    if thresholds is not None:
        if thresholds.lthr:
            return thresholds.lthr
        if thresholds.hr_max:
            return round(thresholds.hr_max * settings.lthr_max_hr_ratio)
    return settings.default_lthr


def estimate_tss_from_rpe(
    duration_minutes: float,
    rpe: float,
    settings: Optional[Settings] = None,
) -> int:
    """
    Estimate TSS from Rate of Perceived Exertion (1-10).

    RPE 5 is roughly 36 TSS/hour, RPE 9 about 60 TSS/hour. Unknown RPE
    values use the default intensity (0.6).
    """
    settings = settings or get_settings()
    if duration_minutes <= 0:
        return 0
    intensity = settings.rpe_intensity.get(round(rpe), settings.default_rpe_intensity)
    return _safe_round(duration_minutes * intensity)


def duration_tss_per_hour(
    activity: ActivityRecord,
    settings: Optional[Settings] = None,
) -> float:
    """Flat TSS/hour rate by sport label, then modality, then the default."""
    settings = settings or get_settings()
    if activity.sport_type and activity.sport_type in settings.sport_tss_per_hour:
        return settings.sport_tss_per_hour[activity.sport_type]
    return settings.modality_tss_per_hour.get(
        activity.modality.value, settings.default_tss_per_hour
    )


def _safe_round(value: float) -> int:
    if not math.isfinite(value) or value < 0:
        return 0
    return round(value)


def _pick_stream(
    explicit: Optional[SensorStream],
    carried: Optional[SensorStream],
) -> Optional[SensorStream]:
    if explicit is not None and len(explicit) > 0:
        return explicit
    if carried is not None and len(carried) > 0:
        return carried
    return None


def normalized_intensities(
    activity: ActivityRecord,
    streams: Optional[ActivityStreams] = None,
    settings: Optional[Settings] = None,
) -> Tuple[int, int]:
    """
    Normalized heart rate and power for an activity.

    Streams passed explicitly win over streams carried on the record.

    Returns:
        (normalized_hr, normalized_power), 0 where no stream is available
    """
    settings = settings or get_settings()
    hr_stream = _pick_stream(streams.heart_rate if streams else None, activity.heart_rate_stream)
    power_stream = _pick_stream(streams.power if streams else None, activity.power_stream)

    normalized_hr = (
        normalize_stream(hr_stream.per_second(settings.max_hold_seconds), settings.normalization_window)
        if hr_stream
        else 0
    )
    normalized_power = (
        normalize_stream(power_stream.per_second(settings.max_hold_seconds), settings.normalization_window)
        if power_stream
        else 0
    )
    return normalized_hr, normalized_power


def _intensity_score(
    tier: ScoringTier,
    duration_hours: float,
    intensity: float,
    intensity_factor: float,
    from_stream: bool = False,
) -> StressScore:
    tss = _safe_round(calculate_intensity_tss(duration_hours, intensity_factor))
    return StressScore(
        tss=tss,
        tier=tier,
        intensity_factor=round(intensity_factor, 3),
        intensity=intensity,
        from_stream=from_stream,
    )


def explain_activity_score(
    activity: ActivityRecord,
    thresholds: Optional[AthleteThresholds] = None,
    streams: Optional[ActivityStreams] = None,
    settings: Optional[Settings] = None,
) -> StressScore:
    """
    Score one completed activity and report which tier was used.

    Args:
        activity: The activity to score
        thresholds: Athlete calibration; defaults apply when None or partial
        streams: Raw HR/power streams, preferred over the record's own
        settings: Engine settings (cached environment settings by default)

    Returns:
        StressScore with the rounded TSS and the tier that produced it
    """
    settings = settings or get_settings()
    thresholds = thresholds or AthleteThresholds()

    if activity.duration_seconds <= 0:
        return StressScore(tss=0, tier=ScoringTier.NO_DURATION)

    hours = activity.duration_hours
    minutes = activity.duration_minutes
    modality = activity.modality
    normalized_hr, normalized_power = normalized_intensities(activity, streams, settings)
    heart_rate = normalized_hr or activity.average_heart_rate

    # Tier 1: cycling with power
    if modality == Modality.BIKE:
        power = normalized_power or activity.weighted_average_power
        if power:
            ftp = thresholds.ftp or settings.default_ftp
            score = _intensity_score(
                ScoringTier.POWER, hours, power, power / ftp, from_stream=bool(normalized_power)
            )
            logger.debug(
                "TSS calc (power): NP=%s (%s), FTP=%s, IF=%.2f, TSS=%s",
                power, "streams" if normalized_power else "provider", ftp,
                score.intensity_factor, score.tss,
            )
            return score

    if modality == Modality.RUN:
        # Tier 2: running with heart rate
        if heart_rate:
            lthr = estimate_lthr(thresholds, settings)
            score = _intensity_score(
                ScoringTier.RUN_HEART_RATE, hours, heart_rate, heart_rate / lthr,
                from_stream=bool(normalized_hr),
            )
            logger.debug(
                "TSS calc (running HR): HR=%s (%s), LTHR=%s, IF=%.2f, rTSS=%s",
                heart_rate, "NHR" if normalized_hr else "avg", lthr,
                score.intensity_factor, score.tss,
            )
            return score

        # Tier 3: running pace when no heart rate
        distance = activity.distance_meters or 0
        if distance > settings.min_run_distance_m:
            actual_pace = minutes / (distance / 1000)
            threshold_pace = (
                thresholds.threshold_pace_min_per_km or settings.default_threshold_pace_min_per_km
            )
            intensity_factor = clamp_intensity_factor(threshold_pace / actual_pace, settings)
            score = _intensity_score(ScoringTier.RUN_PACE, hours, actual_pace, intensity_factor)
            logger.debug(
                "TSS calc (running pace): pace=%.1f/km, threshold=%s/km, IF=%.2f, rTSS=%s",
                actual_pace, threshold_pace, score.intensity_factor, score.tss,
            )
            return score

    # Tier 4: swimming pace against critical swim speed
    if modality == Modality.SWIM:
        distance = activity.distance_meters or 0
        if distance > settings.min_swim_distance_m:
            pace_per_100m = minutes / (distance / 100)
            css = thresholds.css_pace_min_per_100m or settings.default_css_min_per_100m
            intensity_factor = clamp_intensity_factor(css / pace_per_100m, settings)
            score = _intensity_score(ScoringTier.SWIM_PACE, hours, pace_per_100m, intensity_factor)
            logger.debug(
                "TSS calc (swim): pace=%.2f/100m, CSS=%s, IF=%.2f, sTSS=%s",
                pace_per_100m, css, score.intensity_factor, score.tss,
            )
            return score

    # Tier 5: heart rate against a fixed reference for everything else
    if heart_rate:
        reference_hr = settings.generic_reference_hr
        score = _intensity_score(
            ScoringTier.HEART_RATE, hours, heart_rate, heart_rate / reference_hr,
            from_stream=bool(normalized_hr),
        )
        logger.debug(
            "TSS calc (hrTSS): HR=%s (%s), refHR=%s, IF=%.2f, hrTSS=%s",
            heart_rate, "NHR" if normalized_hr else "avg", reference_hr,
            score.intensity_factor, score.tss,
        )
        return score

    # Tier 6: provider relative effort
    if activity.relative_effort:
        tss = _safe_round(activity.relative_effort * settings.relative_effort_factor)
        logger.debug("TSS calc (relative effort): score=%s, TSS=%s", activity.relative_effort, tss)
        return StressScore(tss=tss, tier=ScoringTier.RELATIVE_EFFORT, intensity=activity.relative_effort)

    # Tier 7: perceived effort
    if activity.perceived_effort is not None:
        tss = estimate_tss_from_rpe(minutes, activity.perceived_effort, settings)
        logger.debug("TSS calc (RPE): rpe=%s, minutes=%.0f, TSS=%s", activity.perceived_effort, minutes, tss)
        return StressScore(tss=tss, tier=ScoringTier.PERCEIVED_EFFORT, intensity=activity.perceived_effort)

    # Tier 8: duration only
    rate = duration_tss_per_hour(activity, settings)
    tss = _safe_round(hours * rate)
    logger.debug(
        "TSS calc (duration): sport=%s, duration=%.2fh, rate=%s/h, TSS=%s",
        activity.sport_type or modality.value, hours, rate, tss,
    )
    return StressScore(tss=tss, tier=ScoringTier.DURATION, intensity=rate)


def score_activity(
    activity: ActivityRecord,
    thresholds: Optional[AthleteThresholds] = None,
    streams: Optional[ActivityStreams] = None,
    settings: Optional[Settings] = None,
) -> int:
    """
    Training Stress Score for one activity.

    See explain_activity_score for the tier order.

    Returns:
        TSS rounded to the nearest integer, never negative
    """
    return explain_activity_score(activity, thresholds, streams, settings).tss
