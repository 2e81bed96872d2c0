"""
Training load engine.

Scores workouts with Training Stress Score, models fitness and fatigue
(CTL/ATL/TSB) and interprets readiness.
"""

from .exceptions import (
    ErrorCode,
    InvalidInputError,
    InvalidWindowError,
    ProviderPayloadError,
    TrainingLoadError,
)
from .metrics import (
    compute_loads,
    compute_training_load,
    daily_tss_totals,
    estimate_initial_loads,
    explain_activity_score,
    normalize_stream,
    score_activity,
)
from .models import (
    ActivityRecord,
    ActivityStatus,
    ActivityStreams,
    AthleteThresholds,
    DailyRecovery,
    DailyTssEntry,
    LoadPoint,
    Modality,
    SensorStream,
)
from .readiness import interpret_recovery_score, interpret_tsb, needs_fatigue_alert

__version__ = "0.1.0"

__all__ = [
    # Models
    "ActivityRecord",
    "ActivityStatus",
    "ActivityStreams",
    "AthleteThresholds",
    "DailyRecovery",
    "DailyTssEntry",
    "LoadPoint",
    "Modality",
    "SensorStream",
    # Metrics
    "normalize_stream",
    "score_activity",
    "explain_activity_score",
    "estimate_initial_loads",
    "compute_loads",
    "compute_training_load",
    "daily_tss_totals",
    # Readiness
    "interpret_tsb",
    "interpret_recovery_score",
    "needs_fatigue_alert",
    # Errors
    "ErrorCode",
    "TrainingLoadError",
    "InvalidInputError",
    "InvalidWindowError",
    "ProviderPayloadError",
]
