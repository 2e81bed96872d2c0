"""Map Strava activity and stream payloads onto engine types.

Only data mapping lives here. Fetching, OAuth and token refresh belong to
the surrounding application.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ..exceptions import ProviderPayloadError
from ..models import ActivityRecord, ActivityStreams, Modality, SensorStream

logger = logging.getLogger(__name__)

PROVIDER = "strava"

SPORT_TYPE_MODALITY: Dict[str, Modality] = {
    "Run": Modality.RUN,
    "Trail Run": Modality.RUN,
    "TrailRun": Modality.RUN,
    "VirtualRun": Modality.RUN,
    "Ride": Modality.BIKE,
    "VirtualRide": Modality.BIKE,
    "GravelRide": Modality.BIKE,
    "MountainBikeRide": Modality.BIKE,
    "EBikeRide": Modality.BIKE,
    "Swim": Modality.SWIM,
    "WeightTraining": Modality.STRENGTH,
    "Workout": Modality.STRENGTH,
    "Crossfit": Modality.STRENGTH,
    "Walk": Modality.OTHER,
    "Hike": Modality.OTHER,
}


def map_sport_type(sport_type: Optional[str]) -> Modality:
    """Strava sport_type (or legacy type) to a modality, defaulting to other."""
    if not sport_type:
        return Modality.OTHER
    return SPORT_TYPE_MODALITY.get(sport_type, Modality.OTHER)


def _stream_values(raw: Any) -> Optional[List[float]]:
    # key_by_type responses wrap values as {"data": [...]}
    if isinstance(raw, dict):
        raw = raw.get("data")
    if not raw:
        return None
    return list(raw)


def streams_from_strava(payload: Dict[str, Any]) -> ActivityStreams:
    """
    Build ActivityStreams from a Strava streams response.

    Accepts the key_by_type layout ({"heartrate": {"data": [...]}, ...}) or
    plain lists. The "time" stream becomes the offsets of both sensor
    streams when its length matches.
    """
    time = _stream_values(payload.get("time"))

    def build(key: str) -> Optional[SensorStream]:
        samples = _stream_values(payload.get(key))
        if samples is None:
            return None
        offsets = time if time is not None and len(time) == len(samples) else None
        return SensorStream(samples=samples, time_offsets=offsets)

    try:
        return ActivityStreams(heart_rate=build("heartrate"), power=build("watts"))
    except ValidationError as e:
        raise ProviderPayloadError(PROVIDER, "invalid stream payload", details={"error": str(e)}) from e


def activity_from_strava(
    payload: Dict[str, Any],
    streams: Optional[ActivityStreams] = None,
) -> ActivityRecord:
    """
    Convert a Strava activity summary into an ActivityRecord.

    Args:
        payload: Strava activity JSON
        streams: Streams fetched separately, attached to the record

    Raises:
        ProviderPayloadError: If moving_time is missing or a field is invalid
    """
    if payload.get("moving_time") is None:
        raise ProviderPayloadError(PROVIDER, "activity has no moving_time", details={"id": payload.get("id")})

    sport_type = payload.get("sport_type") or payload.get("type")
    start = payload.get("start_date_local") or payload.get("start_date")
    try:
        activity_date = date.fromisoformat(start[:10]) if start else None
        return ActivityRecord(
            duration_seconds=payload["moving_time"],
            modality=map_sport_type(sport_type),
            sport_type=sport_type,
            distance_meters=payload.get("distance"),
            average_heart_rate=payload.get("average_heartrate"),
            average_power=payload.get("average_watts"),
            weighted_average_power=payload.get("weighted_average_watts"),
            perceived_effort=payload.get("perceived_exertion"),
            relative_effort=payload.get("suffer_score"),
            heart_rate_stream=streams.heart_rate if streams else None,
            power_stream=streams.power if streams else None,
            activity_date=activity_date,
            name=payload.get("name"),
            external_id=str(payload["id"]) if payload.get("id") is not None else None,
        )
    except (ValidationError, ValueError) as e:
        logger.warning("Rejected Strava activity %s: %s", payload.get("id"), e)
        raise ProviderPayloadError(
            PROVIDER, "invalid activity payload", details={"id": payload.get("id"), "error": str(e)}
        ) from e
