"""Tests for the fitness-fatigue model (ATL, CTL, TSB)."""

from datetime import date, timedelta

import pytest
from pydantic import ValidationError

from training_load.exceptions import ErrorCode, InvalidInputError, InvalidWindowError
from training_load.metrics.fitness import (
    calculate_ema,
    calculate_weekly_duration,
    calculate_weekly_tss,
    compute_loads,
    compute_training_load,
    daily_tss_totals,
    estimate_initial_loads,
    get_latest_load,
)
from training_load.models import (
    ActivityRecord,
    ActivityStatus,
    AthleteThresholds,
    DailyTssEntry,
    Modality,
)


def days_from(start: date, values):
    return [(start + timedelta(days=i), tss) for i, tss in enumerate(values)]


class TestEMA:
    """Tests for one step of the exponential moving average."""

    def test_step(self):
        assert calculate_ema(10, 80, 7) == pytest.approx(20)

    def test_steady_state(self):
        assert calculate_ema(50, 50, 42) == 50

    def test_decay(self):
        assert calculate_ema(42, 0, 42) == pytest.approx(41)


class TestComputeLoads:
    """Tests for the daily ATL/CTL/TSB recursion."""

    def test_three_day_regression(self, scenario_days):
        points = compute_loads(scenario_days, date(2024, 1, 1), date(2024, 1, 3))

        assert [p.daily_tss for p in points] == [100, 0, 50]
        assert [p.atl for p in points] == [14.3, 12.2, 17.6]
        # Recursion runs at full precision: 2.3243 + (50 - 2.3243) / 42 = 3.46
        assert [p.ctl for p in points] == [2.4, 2.3, 3.5]
        assert [p.tsb for p in points] == [0.0, -11.9, -9.9]

    def test_tsb_lags_one_day(self):
        series = days_from(date(2024, 2, 1), [80, 0, 120, 45, 0, 0, 200, 30, 60, 95])
        points = compute_loads(
            series, date(2024, 2, 1), date(2024, 2, 20), initial_atl=33.3, initial_ctl=48.7
        )

        assert points[0].tsb == round(48.7 - 33.3, 1)
        for previous, current in zip(points, points[1:]):
            assert current.tsb == round(previous.ctl - previous.atl, 1)

    def test_one_point_per_day(self):
        series = [(date(2024, 5, 3), 60), (date(2024, 5, 17), 90), (date(2024, 5, 28), 40)]
        points = compute_loads(series, date(2024, 5, 1), date(2024, 5, 30))

        assert len(points) == 30
        assert points[0].date == date(2024, 5, 1)
        assert points[-1].date == date(2024, 5, 30)
        for previous, current in zip(points, points[1:]):
            assert current.date - previous.date == timedelta(days=1)
        assert points[1].daily_tss == 0

    def test_single_day_window(self, scenario_days):
        points = compute_loads(scenario_days, date(2024, 1, 1), date(2024, 1, 1))
        assert len(points) == 1

    def test_rest_decays_to_zero(self):
        """All-zero days drain any seed toward zero."""
        series = [(date(2023, 1, 1), 0)]
        points = compute_loads(
            series, date(2023, 1, 1), date(2024, 2, 4), initial_atl=80, initial_ctl=60
        )

        ctl_values = [p.ctl for p in points]
        assert ctl_values == sorted(ctl_values, reverse=True)
        assert abs(points[-1].atl) < 0.1
        assert abs(points[-1].ctl) < 0.1
        assert abs(points[-1].tsb) < 0.1

    def test_empty_series(self):
        assert compute_loads([], date(2024, 1, 1), date(2024, 3, 31)) == []

    def test_inverted_window(self, scenario_days):
        with pytest.raises(InvalidWindowError) as exc_info:
            compute_loads(scenario_days, date(2024, 1, 3), date(2024, 1, 1))

        assert exc_info.value.code == ErrorCode.INVALID_WINDOW

    def test_negative_seed_rejected(self, scenario_days):
        with pytest.raises(InvalidInputError):
            compute_loads(scenario_days, date(2024, 1, 1), date(2024, 1, 3), initial_atl=-5)

    def test_negative_tss_rejected(self):
        with pytest.raises(ValidationError):
            compute_loads([(date(2024, 1, 1), -10)], date(2024, 1, 1), date(2024, 1, 2))

    def test_unordered_series(self, scenario_days):
        shuffled = [scenario_days[2], scenario_days[0], scenario_days[1]]
        expected = compute_loads(scenario_days, date(2024, 1, 1), date(2024, 1, 3))

        assert compute_loads(shuffled, date(2024, 1, 1), date(2024, 1, 3)) == expected

    def test_duplicate_dates_are_summed(self, scenario_days):
        split = [(date(2024, 1, 1), 60), (date(2024, 1, 1), 40)] + scenario_days[1:]
        expected = compute_loads(scenario_days, date(2024, 1, 1), date(2024, 1, 3))

        assert compute_loads(split, date(2024, 1, 1), date(2024, 1, 3)) == expected

    def test_history_before_window_is_ignored(self, scenario_days):
        series = [(date(2023, 12, 31), 500)] + scenario_days
        expected = compute_loads(scenario_days, date(2024, 1, 1), date(2024, 1, 3))

        assert compute_loads(series, date(2024, 1, 1), date(2024, 1, 3)) == expected

    def test_accepts_daily_entries(self, scenario_days):
        entries = [DailyTssEntry(date=d, tss=t) for d, t in scenario_days]
        points = compute_loads(entries, date(2024, 1, 1), date(2024, 1, 3))

        assert points[-1].atl == 17.6

    def test_to_dict(self, scenario_days):
        point = compute_loads(scenario_days, date(2024, 1, 1), date(2024, 1, 1))[0]
        assert point.to_dict() == {
            "date": "2024-01-01",
            "daily_tss": 100,
            "atl": 14.3,
            "ctl": 2.4,
            "tsb": 0.0,
        }


class TestInitialLoads:
    """Tests for the warm-start seeds."""

    def test_short_history(self, scenario_days):
        """Three days of history: both seeds average over three days."""
        assert estimate_initial_loads(scenario_days) == (50, 50)

    def test_windows_differ(self):
        series = [(date(2024, 1, 1), 140), (date(2024, 1, 9), 0)]
        atl, ctl = estimate_initial_loads(series)

        assert atl == pytest.approx(20)
        assert ctl == pytest.approx(140 / 9)

    def test_empty(self):
        assert estimate_initial_loads([]) == (0.0, 0.0)


class TestTrainingLoadTimeline:
    """Tests for the warm-started, display-trimmed timeline."""

    def test_steady_training_has_flat_load(self, settings):
        start = date(2024, 1, 1)
        series = days_from(start, [70] * 120)
        end = start + timedelta(days=119)

        points = compute_training_load(series, end, settings=settings)

        assert len(points) == 91
        assert points[0].date == end - timedelta(days=90)
        assert all(p.atl == 70 and p.ctl == 70 and p.tsb == 0 for p in points)

    def test_display_days(self, settings):
        series = days_from(date(2024, 1, 1), [50] * 30)
        points = compute_training_load(series, date(2024, 1, 30), display_days=7, settings=settings)

        assert len(points) == 8

    def test_short_history_is_not_padded(self, scenario_days, settings):
        points = compute_training_load(scenario_days, date(2024, 1, 3), settings=settings)

        assert [p.date for p in points] == [d for d, _ in scenario_days]
        assert points[0].tsb == 0.0

    def test_end_before_history(self, scenario_days, settings):
        assert compute_training_load(scenario_days, date(2023, 12, 1), settings=settings) == []

    def test_empty_history(self, settings):
        assert compute_training_load([], date(2024, 1, 1), settings=settings) == []

    def test_latest_load(self, scenario_days, settings):
        points = compute_training_load(scenario_days, date(2024, 1, 3), settings=settings)

        assert get_latest_load(points).date == date(2024, 1, 3)
        assert get_latest_load([]) is None


class TestDailyTotals:
    """Tests for per-day TSS aggregation of activities."""

    def test_completed_activities_only(self, threshold_ride, settings):
        day = threshold_ride.activity_date
        activities = [
            threshold_ride,
            ActivityRecord(duration_seconds=1800, modality=Modality.RUN, tss=50, activity_date=day),
            ActivityRecord(
                duration_seconds=3600,
                modality=Modality.RUN,
                tss=80,
                activity_date=day + timedelta(days=1),
                status=ActivityStatus.PLANNED,
            ),
            ActivityRecord(duration_seconds=3600, modality=Modality.RUN, tss=80),
        ]

        totals = daily_tss_totals(activities, AthleteThresholds(ftp=250), settings)

        assert totals == [DailyTssEntry(date=day, tss=127)]

    def test_sorted_by_date(self, settings):
        activities = [
            ActivityRecord(duration_seconds=600, modality=Modality.RUN, tss=10, activity_date=date(2024, 1, 5)),
            ActivityRecord(duration_seconds=600, modality=Modality.RUN, tss=20, activity_date=date(2024, 1, 2)),
        ]
        totals = daily_tss_totals(activities, settings=settings)

        assert [t.date for t in totals] == [date(2024, 1, 2), date(2024, 1, 5)]


class TestWeeklyTotals:
    """Tests for trailing weekly volume (as_of - 7 through as_of)."""

    def test_weekly_tss(self):
        as_of = date(2024, 3, 15)
        series = [
            (as_of - timedelta(days=8), 100),
            (as_of - timedelta(days=7), 10),
            (as_of, 20),
            (as_of + timedelta(days=1), 300),
        ]
        assert calculate_weekly_tss(series, as_of) == 30

    def test_weekly_window_spans_eight_days(self):
        as_of = date(2024, 3, 15)
        series = [(as_of - timedelta(days=offset), 1) for offset in range(12)]
        assert calculate_weekly_tss(series, as_of) == 8

    def test_weekly_duration(self):
        as_of = date(2024, 3, 15)
        activities = [
            ActivityRecord(duration_seconds=3600, modality=Modality.RUN, activity_date=as_of),
            ActivityRecord(duration_seconds=1800, modality=Modality.BIKE, activity_date=as_of - timedelta(days=3)),
            ActivityRecord(
                duration_seconds=3600,
                modality=Modality.RUN,
                activity_date=as_of,
                status=ActivityStatus.PLANNED,
            ),
            ActivityRecord(duration_seconds=3600, modality=Modality.RUN, activity_date=as_of - timedelta(days=10)),
        ]
        assert calculate_weekly_duration(activities, as_of) == 90
