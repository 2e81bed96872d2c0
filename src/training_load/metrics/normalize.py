"""Stream normalization (Normalized Power / Normalized Heart Rate)."""

import math
from typing import Sequence, Union

from ..models import SensorStream

StreamLike = Union[SensorStream, Sequence[float]]

ROLLING_WINDOW_SAMPLES = 30


def normalize_stream(samples: Sequence[float], window: int = ROLLING_WINDOW_SAMPLES) -> int:
    """
    Collapse a per-second stream into its normalized value.

    Takes the rolling `window`-sample average (sliding by one sample), raises
    every average to the 4th power, averages those and takes the 4th root.
    Sustained hard segments weigh more than short spikes or recovery dips.
    Non-finite samples are skipped; negative readings count as 0 so window
    positions stay aligned.

    Formula: NP = (mean(rolling_30s_avg^4))^0.25

    Args:
        samples: Per-second values (watts or bpm)
        window: Rolling window length in samples (30 = 30 seconds at 1 Hz)

    Returns:
        Normalized value rounded to the nearest integer. Streams shorter
        than the window return their plain mean (0 when empty).
    """
    values = [max(float(s), 0.0) for s in samples if s is not None and math.isfinite(s)]
    if not values:
        return 0

    if len(values) < window:
        return round(sum(values) / len(values))

    # Single pass: keep the window sum up to date instead of re-summing
    window_sum = sum(values[:window])
    fourth_power_sum = (window_sum / window) ** 4
    for i in range(window, len(values)):
        window_sum += values[i] - values[i - window]
        fourth_power_sum += (window_sum / window) ** 4

    rolling_count = len(values) - window + 1
    return round((fourth_power_sum / rolling_count) ** 0.25)


def _as_per_second(stream: StreamLike) -> list[float]:
    if isinstance(stream, SensorStream):
        return stream.per_second()
    return list(stream)


def calculate_normalized_power(power: StreamLike) -> int:
    """Normalized Power (watts) from a power stream."""
    return normalize_stream(_as_per_second(power))


def calculate_normalized_heart_rate(heart_rate: StreamLike) -> int:
    """Normalized Heart Rate (bpm) from a heart-rate stream."""
    return normalize_stream(_as_per_second(heart_rate))
