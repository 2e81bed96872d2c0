"""Map WHOOP recovery, sleep and workout payloads onto engine types."""

import logging
import math
from datetime import date, datetime
from typing import Any, Dict, Optional

from pydantic import ValidationError

from ..config import Settings, get_settings
from ..exceptions import ProviderPayloadError
from ..models import ActivityRecord, DailyRecovery, Modality

logger = logging.getLogger(__name__)

PROVIDER = "whoop"

# WHOOP sport IDs, common ones only
SPORT_ID_MODALITY: Dict[int, Modality] = {
    0: Modality.RUN,
    1: Modality.BIKE,
    33: Modality.SWIM,
    43: Modality.STRENGTH,
    44: Modality.RUN,  # Treadmill
    52: Modality.OTHER,  # Yoga
    63: Modality.OTHER,  # Hiking
    71: Modality.OTHER,  # Triathlon
}


def map_sport_id(sport_id: Optional[int]) -> Modality:
    """WHOOP sport ID to a modality, defaulting to other."""
    if sport_id is None:
        return Modality.OTHER
    return SPORT_ID_MODALITY.get(sport_id, Modality.OTHER)


def _milli_to_minutes(value: Optional[float]) -> Optional[int]:
    if value is None:
        return None
    return round(value / 60000)


def _round_or_none(value: Optional[float]) -> Optional[int]:
    return round(value) if value is not None else None


def recovery_from_whoop(
    recovery: Dict[str, Any],
    sleep: Optional[Dict[str, Any]] = None,
) -> DailyRecovery:
    """
    Convert a WHOOP recovery (and the matching sleep) into a DailyRecovery.

    Args:
        recovery: WHOOP recovery record with a "score" object
        sleep: WHOOP sleep record for the same night, if fetched

    Raises:
        ProviderPayloadError: If the recovery is unscored or malformed
    """
    score = recovery.get("score")
    created_at = recovery.get("created_at")
    if not score or score.get("recovery_score") is None:
        raise ProviderPayloadError(
            PROVIDER,
            "recovery has no score",
            details={"cycle_id": recovery.get("cycle_id"), "score_state": recovery.get("score_state")},
        )
    if not created_at:
        raise ProviderPayloadError(PROVIDER, "recovery has no created_at", details={"cycle_id": recovery.get("cycle_id")})

    sleep_score = (sleep or {}).get("score") or {}
    stages = sleep_score.get("stage_summary") or {}

    try:
        return DailyRecovery(
            date=date.fromisoformat(created_at[:10]),
            recovery_score=score["recovery_score"],
            hrv_ms=_round_or_none(score.get("hrv_rmssd_milli")),
            resting_hr=_round_or_none(score.get("resting_heart_rate")),
            respiratory_rate=sleep_score.get("respiratory_rate") or None,
            sleep_score=_round_or_none(sleep_score.get("sleep_performance_percentage")),
            sleep_duration_minutes=_milli_to_minutes(stages.get("total_in_bed_time_milli")),
            sleep_deep_minutes=_milli_to_minutes(stages.get("total_slow_wave_sleep_time_milli")),
            sleep_rem_minutes=_milli_to_minutes(stages.get("total_rem_sleep_time_milli")),
            sleep_light_minutes=_milli_to_minutes(stages.get("total_light_sleep_time_milli")),
            sleep_awake_minutes=_milli_to_minutes(stages.get("total_awake_time_milli")),
            source=PROVIDER,
        )
    except (ValidationError, ValueError) as e:
        logger.warning("Rejected WHOOP recovery for cycle %s: %s", recovery.get("cycle_id"), e)
        raise ProviderPayloadError(
            PROVIDER, "invalid recovery payload", details={"cycle_id": recovery.get("cycle_id"), "error": str(e)}
        ) from e


def strain_to_tss(strain: Optional[float], settings: Optional[Settings] = None) -> int:
    """
    TSS equivalent of a WHOOP workout strain.

    Strain is logarithmic on 0-21, so the mapping is quadratic:
    strain 21 is 200 TSS, strain 14 about 89.
    """
    settings = settings or get_settings()
    if strain is None or not math.isfinite(strain) or strain <= 0:
        return 0
    return round((strain / settings.whoop_max_strain) ** 2 * settings.whoop_strain_tss_scale)


def _parse_timestamp(value: str) -> datetime:
    # fromisoformat only accepts a trailing "Z" from Python 3.11
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def activity_from_whoop(
    workout: Dict[str, Any],
    settings: Optional[Settings] = None,
) -> ActivityRecord:
    """
    Convert a WHOOP workout into a completed ActivityRecord.

    Duration comes from start/end. A scored workout carries a stored TSS
    derived from its strain; an unscored one is left for the stress scorer.

    Raises:
        ProviderPayloadError: If start/end are missing or the workout is invalid
    """
    workout_id = workout.get("id")
    if not workout.get("start") or not workout.get("end"):
        raise ProviderPayloadError(PROVIDER, "workout has no start/end", details={"id": workout_id})

    score = workout.get("score") or {}
    strain = score.get("strain")
    modality = map_sport_id(workout.get("sport_id"))

    try:
        start = _parse_timestamp(workout["start"])
        end = _parse_timestamp(workout["end"])
        return ActivityRecord(
            duration_seconds=(end - start).total_seconds(),
            modality=modality,
            distance_meters=score.get("distance_meter"),
            average_heart_rate=score.get("average_heart_rate"),
            activity_date=start.date(),
            tss=strain_to_tss(strain, settings) if strain is not None else None,
            name=f"WHOOP {modality.value} workout",
            external_id=str(workout_id) if workout_id is not None else None,
        )
    except (ValidationError, ValueError, TypeError) as e:
        logger.warning("Rejected WHOOP workout %s: %s", workout_id, e)
        raise ProviderPayloadError(
            PROVIDER, "invalid workout payload", details={"id": workout_id, "error": str(e)}
        ) from e
