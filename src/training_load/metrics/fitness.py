"""Fitness-Fatigue model calculations (ATL, CTL, TSB).

Uses the TrainingPeaks recursion:
- ATL_d = ATL_{d-1} + (TSS_d - ATL_{d-1}) / 7    (fatigue)
- CTL_d = CTL_{d-1} + (TSS_d - CTL_{d-1}) / 42   (fitness)
- TSB_d = CTL_{d-1} - ATL_{d-1}                  (form, uses yesterday's values)

The recursion is carried at full precision. Published ATL/CTL are rounded
to one decimal and TSB is taken from the previous day's published values,
so the series always satisfies tsb[i] == round(ctl[i-1] - atl[i-1], 1).
"""

import logging
import math
from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Tuple, Union

from ..config import Settings, get_settings
from ..exceptions import InvalidInputError, InvalidWindowError
from ..models import (
    ActivityRecord,
    ActivityStatus,
    AthleteThresholds,
    DailyTssEntry,
    LoadPoint,
)
from .stress import score_activity

logger = logging.getLogger(__name__)

DailySeries = Iterable[Union[DailyTssEntry, Tuple[date, float]]]


def calculate_ema(previous: float, tss: float, time_constant: float) -> float:
    """
    One step of the TrainingPeaks exponential moving average.

    Formula: new = previous + (tss - previous) / time_constant

    Args:
        previous: Yesterday's ATL or CTL
        tss: Today's total TSS
        time_constant: Days (7 for ATL, 42 for CTL)

    Returns:
        Today's value
    """
    return previous + (tss - previous) / time_constant


def _tss_by_date(daily_series: DailySeries) -> Dict[date, float]:
    """Sum entries per calendar day. Order of the input does not matter."""
    totals: Dict[date, float] = defaultdict(float)
    for entry in daily_series:
        if not isinstance(entry, DailyTssEntry):
            entry_date, tss = entry
            entry = DailyTssEntry(date=entry_date, tss=tss)
        totals[entry.date] += entry.tss
    return dict(totals)


def _check_seed(name: str, value: float) -> float:
    if not math.isfinite(value) or value < 0:
        raise InvalidInputError(f"{name} must be a finite, non-negative number", field=name)
    return float(value)


def estimate_initial_loads(
    daily_series: DailySeries,
    atl_time_constant: int = 7,
    ctl_time_constant: int = 42,
) -> Tuple[float, float]:
    """
    Warm-start ATL and CTL from the beginning of the history.

    Starting from zero makes an athlete with years of training look
    unrealistically fresh. Instead seed ATL with the mean daily TSS over the
    first min(7, N) days of history and CTL over the first min(42, N) days,
    where N is the number of calendar days the history spans.

    Returns:
        (initial_atl, initial_ctl), both 0.0 for an empty history
    """
    totals = _tss_by_date(daily_series)
    if not totals:
        return 0.0, 0.0

    first_day = min(totals)
    available_days = (max(totals) - first_day).days + 1

    def seed(time_constant: int) -> float:
        window_days = min(time_constant, available_days)
        window_total = sum(
            totals.get(first_day + timedelta(days=offset), 0.0) for offset in range(window_days)
        )
        return window_total / window_days

    return seed(atl_time_constant), seed(ctl_time_constant)


def compute_loads(
    daily_series: DailySeries,
    window_start: date,
    window_end: date,
    initial_atl: float = 0.0,
    initial_ctl: float = 0.0,
    atl_time_constant: int = 7,
    ctl_time_constant: int = 42,
) -> List[LoadPoint]:
    """
    Calculate ATL, CTL and TSB for every day of a window.

    Args:
        daily_series: Daily TSS totals (DailyTssEntry or (date, tss) tuples);
            repeated dates are summed, gaps count as rest days
        window_start: First day to compute (inclusive)
        window_end: Last day to compute (inclusive)
        initial_atl: ATL entering the window
        initial_ctl: CTL entering the window
        atl_time_constant: Days for ATL (default 7)
        ctl_time_constant: Days for CTL (default 42)

    Returns:
        One LoadPoint per calendar day, oldest first. Empty when there is no
        training history at all.

    Raises:
        InvalidWindowError: If window_start is after window_end
        InvalidInputError: If a seed is negative or not finite
    """
    if window_start > window_end:
        raise InvalidWindowError(window_start, window_end)
    atl = _check_seed("initial_atl", initial_atl)
    ctl = _check_seed("initial_ctl", initial_ctl)

    totals = _tss_by_date(daily_series)
    if not totals:
        return []

    skipped = sum(1 for day in totals if day < window_start)
    if skipped:
        logger.debug("Ignoring %d day(s) of TSS before %s; seeds carry that history", skipped, window_start)

    published_atl, published_ctl = atl, ctl
    results: List[LoadPoint] = []
    current = window_start
    while current <= window_end:
        daily_tss = totals.get(current, 0.0)

        # TSB uses yesterday's values
        tsb = round(published_ctl - published_atl, 1)

        atl = calculate_ema(atl, daily_tss, atl_time_constant)
        ctl = calculate_ema(ctl, daily_tss, ctl_time_constant)

        point = LoadPoint(
            date=current,
            daily_tss=round(daily_tss, 1),
            atl=round(atl, 1),
            ctl=round(ctl, 1),
            tsb=tsb,
        )
        results.append(point)
        published_atl, published_ctl = point.atl, point.ctl
        current += timedelta(days=1)

    return results


def compute_training_load(
    daily_series: DailySeries,
    end_date: Optional[date] = None,
    display_days: Optional[int] = None,
    settings: Optional[Settings] = None,
) -> List[LoadPoint]:
    """
    Warm-started load timeline trimmed to a trailing display window.

    The recursion always runs from the first day of history so the state
    entering the display window is correct; only the output is trimmed.

    Args:
        daily_series: Full TSS history
        end_date: Last day of the timeline (default: today)
        display_days: Days kept before end_date (default from settings, 90)
        settings: Engine settings

    Returns:
        LoadPoints from end_date - display_days through end_date
    """
    settings = settings or get_settings()
    totals = _tss_by_date(daily_series)
    if not totals:
        return []

    end_date = end_date or date.today()
    display_days = display_days if display_days is not None else settings.display_window_days
    first_day = min(totals)
    if end_date < first_day:
        return []

    initial_atl, initial_ctl = estimate_initial_loads(
        totals.items(), settings.atl_time_constant, settings.ctl_time_constant
    )
    logger.debug(
        "Warm start from %s: initial ATL=%.1f, CTL=%.1f", first_day, initial_atl, initial_ctl
    )

    loads = compute_loads(
        totals.items(),
        first_day,
        end_date,
        initial_atl=initial_atl,
        initial_ctl=initial_ctl,
        atl_time_constant=settings.atl_time_constant,
        ctl_time_constant=settings.ctl_time_constant,
    )

    display_start = end_date - timedelta(days=display_days)
    return [point for point in loads if point.date >= display_start]


def daily_tss_totals(
    activities: Iterable[ActivityRecord],
    thresholds: Optional[AthleteThresholds] = None,
    settings: Optional[Settings] = None,
) -> List[DailyTssEntry]:
    """
    Sum TSS of completed activities per day.

    Stored TSS is reused; activities without one are scored on the fly.
    Planned, skipped and undated activities contribute nothing.
    """
    totals: Dict[date, float] = defaultdict(float)
    for activity in activities:
        if activity.status != ActivityStatus.COMPLETED:
            continue
        if activity.activity_date is None:
            logger.warning("Skipping undated activity %s", activity.external_id or activity.name)
            continue
        tss = activity.tss
        if tss is None:
            tss = score_activity(activity, thresholds, settings=settings)
        totals[activity.activity_date] += tss

    return [DailyTssEntry(date=day, tss=tss) for day, tss in sorted(totals.items())]


def get_latest_load(loads: List[LoadPoint]) -> Optional[LoadPoint]:
    """Most recent point of a timeline, or None for an empty one."""
    if not loads:
        return None
    return loads[-1]


def calculate_weekly_tss(
    daily_series: DailySeries,
    as_of: Optional[date] = None,
) -> float:
    """Total TSS from as_of - 7 days through as_of, both ends included (eight calendar days)."""
    as_of = as_of or date.today()
    week_start = as_of - timedelta(days=7)
    totals = _tss_by_date(daily_series)
    return round(sum(tss for day, tss in totals.items() if week_start <= day <= as_of), 1)


def calculate_weekly_duration(
    activities: Iterable[ActivityRecord],
    as_of: Optional[date] = None,
) -> float:
    """Minutes of completed training from as_of - 7 days through as_of, both ends included."""
    as_of = as_of or date.today()
    week_start = as_of - timedelta(days=7)
    minutes = sum(
        activity.duration_minutes
        for activity in activities
        if activity.status == ActivityStatus.COMPLETED
        and activity.activity_date is not None
        and week_start <= activity.activity_date <= as_of
    )
    return round(minutes, 1)
