"""Training metrics calculations."""

from .normalize import (
    normalize_stream,
    calculate_normalized_power,
    calculate_normalized_heart_rate,
)
from .stress import (
    ScoringTier,
    StressScore,
    calculate_intensity_tss,
    clamp_intensity_factor,
    duration_tss_per_hour,
    estimate_lthr,
    estimate_tss_from_rpe,
    explain_activity_score,
    normalized_intensities,
    score_activity,
)
from .fitness import (
    calculate_ema,
    calculate_weekly_duration,
    calculate_weekly_tss,
    compute_loads,
    compute_training_load,
    daily_tss_totals,
    estimate_initial_loads,
    get_latest_load,
)

__all__ = [
    # Stream normalization
    "normalize_stream",
    "calculate_normalized_power",
    "calculate_normalized_heart_rate",
    # Activity stress
    "ScoringTier",
    "StressScore",
    "calculate_intensity_tss",
    "clamp_intensity_factor",
    "duration_tss_per_hour",
    "estimate_lthr",
    "estimate_tss_from_rpe",
    "explain_activity_score",
    "normalized_intensities",
    "score_activity",
    # Fitness model
    "calculate_ema",
    "calculate_weekly_duration",
    "calculate_weekly_tss",
    "compute_loads",
    "compute_training_load",
    "daily_tss_totals",
    "estimate_initial_loads",
    "get_latest_load",
]
