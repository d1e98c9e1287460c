"""Sample distributions: zero-argument callables returning one ordered value per call."""

from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import Callable, Optional, TypeVar

from numpy.random import Generator, default_rng

from deliverynet.errors import ConfigError

T = TypeVar("T")

SampleDistribution = Callable[[], T]
TimestampDistribution = Callable[[], datetime]

_MICROSECOND = timedelta(microseconds=1)


def uniform_float(value_range: float, rng: Optional[Generator] = None) -> Callable[[], float]:
    """Return a sampler drawing floats uniformly from ``[0, value_range)``."""
    if value_range is None or not value_range > 0 or not math.isfinite(value_range):
        raise ConfigError("Distribution range must be a positive number.")
    generator = rng or default_rng()
    scale = float(value_range)

    def _draw() -> float:
        return scale * float(generator.random())

    return _draw


def uniform_timestamp(
    start: datetime, duration: timedelta, rng: Optional[Generator] = None
) -> TimestampDistribution:
    """Return a sampler drawing timestamps uniformly from ``[start, start + duration)``.

    Draws have microsecond resolution, the finest unit ``datetime`` carries.
    """
    if duration is None or duration < _MICROSECOND:
        raise ConfigError("Timestamp duration must be positive.")
    generator = rng or default_rng()
    span_us = duration // _MICROSECOND

    def _draw() -> datetime:
        offset_us = int(generator.integers(0, span_us))
        return start + timedelta(microseconds=offset_us)

    return _draw


def gaussian_timestamp(
    mean: datetime, stddev: timedelta, rng: Optional[Generator] = None
) -> TimestampDistribution:
    """Return a sampler drawing timestamps from N(mean, stddev).

    A zero standard deviation is allowed and always yields ``mean``. Draws that
    would fall outside the range ``datetime`` can represent are clamped to
    ``datetime.min`` / ``datetime.max`` (keeping the tzinfo of ``mean``).
    """
    if stddev is None or stddev < timedelta(0):
        raise ConfigError("Standard deviation should not be negative")
    generator = rng or default_rng()
    sigma_us = stddev / _MICROSECOND
    wall_clock = mean.replace(tzinfo=None)
    lowest_us = (datetime.min - wall_clock) // _MICROSECOND
    highest_us = (datetime.max - wall_clock) // _MICROSECOND

    def _draw() -> datetime:
        if sigma_us == 0:
            return mean
        offset_us = round(float(generator.normal(0.0, sigma_us)))
        offset_us = min(max(offset_us, lowest_us), highest_us)
        return mean + timedelta(microseconds=offset_us)

    return _draw


__all__ = [
    "SampleDistribution",
    "TimestampDistribution",
    "gaussian_timestamp",
    "uniform_float",
    "uniform_timestamp",
]
