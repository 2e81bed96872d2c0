"""Shared fixtures for the training load engine tests."""

from datetime import date

import pytest

from training_load.config import Settings, get_settings
from training_load.models import ActivityRecord, AthleteThresholds, Modality


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Make every test see a freshly built settings object."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings():
    """Default settings, ignoring any local .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def athlete():
    """A fully calibrated athlete."""
    return AthleteThresholds(
        hr_max=190,
        hr_resting=50,
        lthr=165,
        ftp=250,
        threshold_pace_min_per_km=5.5,
        css_pace_min_per_100m=1.75,
    )


@pytest.fixture
def threshold_ride():
    """One hour ride at 220 W weighted average power."""
    return ActivityRecord(
        duration_seconds=3600,
        modality=Modality.BIKE,
        sport_type="Ride",
        weighted_average_power=220,
        activity_date=date(2024, 3, 10),
        name="Tempo ride",
    )


@pytest.fixture
def scenario_days():
    """Three-day TSS history used as a regression fixture."""
    return [
        (date(2024, 1, 1), 100),
        (date(2024, 1, 2), 0),
        (date(2024, 1, 3), 50),
    ]
