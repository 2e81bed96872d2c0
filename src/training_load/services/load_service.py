"""Training load service: scores activities and builds the fitness timeline."""

from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional

from ..metrics.fitness import (
    calculate_weekly_duration,
    calculate_weekly_tss,
    compute_training_load,
    daily_tss_totals,
    get_latest_load,
)
from ..metrics.stress import StressScore, explain_activity_score
from ..models import ActivityRecord, ActivityStreams, AthleteThresholds, LoadPoint
from ..readiness import (
    RecoveryReadiness,
    TsbReadiness,
    interpret_recovery_score,
    interpret_tsb,
    needs_fatigue_alert,
)
from .base import BaseService


@dataclass
class TrainingLoadSummary:
    """Snapshot of an athlete's load and readiness on one day."""

    as_of: date
    latest: Optional[LoadPoint]
    readiness: Optional[TsbReadiness]
    recovery: Optional[RecoveryReadiness]
    weekly_tss: float
    weekly_duration_minutes: float
    fatigue_alert: bool

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "as_of": self.as_of.isoformat(),
            "latest": self.latest.to_dict() if self.latest else None,
            "readiness": self.readiness.to_dict() if self.readiness else None,
            "recovery": self.recovery.to_dict() if self.recovery else None,
            "weekly_tss": self.weekly_tss,
            "weekly_duration_minutes": self.weekly_duration_minutes,
            "fatigue_alert": self.fatigue_alert,
        }


class TrainingLoadService(BaseService):
    """
    Entry point for callers that hold a list of activities.

    Example:
        service = TrainingLoadService()
        points = service.timeline(activities, thresholds)
        summary = service.summary(activities, thresholds, recovery_score=72)
    """

    def score(
        self,
        activity: ActivityRecord,
        thresholds: Optional[AthleteThresholds] = None,
        streams: Optional[ActivityStreams] = None,
    ) -> StressScore:
        """Score one activity and report the tier used."""
        result = explain_activity_score(activity, thresholds, streams, self.settings)
        self.logger.debug(
            "Scored %s: %s TSS via %s", activity.external_id or activity.name, result.tss, result.tier.value
        )
        return result

    def timeline(
        self,
        activities: Iterable[ActivityRecord],
        thresholds: Optional[AthleteThresholds] = None,
        end_date: Optional[date] = None,
        display_days: Optional[int] = None,
    ) -> List[LoadPoint]:
        """
        Daily ATL/CTL/TSB for the display window ending at end_date.

        Completed activities are scored (or their stored TSS reused), summed
        per day and run through the warm-started load model.
        """
        daily = daily_tss_totals(activities, thresholds, self.settings)
        points = compute_training_load(daily, end_date, display_days, self.settings)
        self.logger.info("Built load timeline: %d day(s) from %d training day(s)", len(points), len(daily))
        return points

    def summary(
        self,
        activities: Iterable[ActivityRecord],
        thresholds: Optional[AthleteThresholds] = None,
        end_date: Optional[date] = None,
        recovery_score: Optional[float] = None,
    ) -> TrainingLoadSummary:
        """
        Latest load, readiness and weekly volume as of end_date.

        Args:
            activities: Training history
            thresholds: Athlete calibration
            end_date: Day of the snapshot (default: today)
            recovery_score: Wearable recovery score (0-100) for the same day
        """
        activities = list(activities)
        as_of = end_date or date.today()
        daily = daily_tss_totals(activities, thresholds, self.settings)
        latest = get_latest_load(compute_training_load(daily, as_of, settings=self.settings))

        readiness = interpret_tsb(latest.tsb) if latest else None
        recovery = interpret_recovery_score(recovery_score) if recovery_score is not None else None
        fatigue_alert = bool(latest) and needs_fatigue_alert(latest.tsb, settings=self.settings)
        if fatigue_alert:
            self.logger.warning("TSB %.1f on %s is below the fatigue alert threshold", latest.tsb, as_of)

        return TrainingLoadSummary(
            as_of=as_of,
            latest=latest,
            readiness=readiness,
            recovery=recovery,
            weekly_tss=calculate_weekly_tss(daily, as_of),
            weekly_duration_minutes=calculate_weekly_duration(activities, as_of),
            fatigue_alert=fatigue_alert,
        )
