"""Sample distributions and the background sample generator."""

from .distributions import (
    SampleDistribution,
    TimestampDistribution,
    gaussian_timestamp,
    uniform_float,
    uniform_timestamp,
)
from .sample_generator import SampleGenerator, SampleStream

__all__ = [
    "SampleDistribution",
    "SampleGenerator",
    "SampleStream",
    "TimestampDistribution",
    "gaussian_timestamp",
    "uniform_float",
    "uniform_timestamp",
]
