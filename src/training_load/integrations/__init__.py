"""Provider payload adapters (Strava, WHOOP)."""

from .strava import activity_from_strava, map_sport_type, streams_from_strava
from .whoop import activity_from_whoop, map_sport_id, recovery_from_whoop, strain_to_tss

__all__ = [
    "activity_from_strava",
    "map_sport_type",
    "streams_from_strava",
    "activity_from_whoop",
    "map_sport_id",
    "recovery_from_whoop",
    "strain_to_tss",
]
