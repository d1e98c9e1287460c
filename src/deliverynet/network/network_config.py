from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from pathlib import Path
from typing import Mapping, Optional

import yaml
from numpy.random import Generator

from deliverynet.errors import ConfigError
from deliverynet.sampling.distributions import (
    TimestampDistribution,
    gaussian_timestamp,
    uniform_timestamp,
)

from .delivery_network import (
    DeliveryNetwork,
    EdgeWeightBounds,
    as_count,
    make_delivery_network,
)

logger = logging.getLogger(__name__)

_KNOWN_KEYS = {"hubs", "stops", "distribution", "short_edge_minutes", "long_edge_minutes"}


def _parse_timestamp(value: object, label: str) -> datetime:
    """Accept YAML datetimes, YAML dates (as midnight) or ISO-8601 strings."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time())
    if isinstance(value, str) and value.strip():
        try:
            return datetime.fromisoformat(value.strip())
        except ValueError as exc:
            raise ConfigError(f"Network config {label} is not an ISO timestamp: {value!r}") from exc
    raise ConfigError(
        f"Network config {label} must be a datetime, a date or an ISO timestamp string"
    )


def _parse_minutes(value: object, label: str) -> timedelta:
    try:
        return timedelta(minutes=float(value))  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Network config {label} must be a number of minutes") from exc


def _parse_distribution(
    block: object, rng: Optional[Generator]
) -> TimestampDistribution:
    if not isinstance(block, Mapping):
        raise TypeError("Network config 'distribution' must be a mapping")
    kinds = [key for key in ("uniform", "gaussian") if key in block]
    if len(kinds) != 1:
        raise ConfigError("Network config distribution must be exactly one of 'uniform' or 'gaussian'")
    params = block[kinds[0]]
    if not isinstance(params, Mapping):
        raise TypeError(f"Distribution block '{kinds[0]}' must be a mapping")

    if kinds[0] == "uniform":
        start = _parse_timestamp(params.get("start"), "uniform.start")
        end = _parse_timestamp(params.get("end"), "uniform.end")
        if (start.tzinfo is None) != (end.tzinfo is None):
            raise ConfigError("uniform.start and uniform.end must both be naive or both timezone-aware")
        return uniform_timestamp(start, end - start, rng=rng)

    mean = _parse_timestamp(params.get("mean"), "gaussian.mean")
    stddev = _parse_minutes(params.get("stddev_minutes"), "gaussian.stddev_minutes")
    return gaussian_timestamp(mean, stddev, rng=rng)


@dataclass
class NetworkConfig:
    """Generation parameters for :func:`make_delivery_network`.

    Counts must be whole numbers. Their sign is checked by the generator.
    """

    hub_count: int
    stop_count: int
    distribution: TimestampDistribution
    edge_weight_bounds: Optional[EdgeWeightBounds] = None

    @classmethod
    def from_mapping(
        cls, data: Mapping[str, object], rng: Optional[Generator] = None
    ) -> "NetworkConfig":
        if not isinstance(data, Mapping):
            raise TypeError("Network config must be a mapping at the top level")
        unknown = sorted(set(data) - _KNOWN_KEYS)
        if unknown:
            logger.warning("Ignoring unknown network config keys: %s", ", ".join(unknown))
        hub_count = as_count(data.get("hubs", 0), "Network config 'hubs'")
        stop_count = as_count(data.get("stops", 0), "Network config 'stops'")
        if "distribution" not in data:
            raise ConfigError("Network config must contain a 'distribution' block")
        distribution = _parse_distribution(data["distribution"], rng)

        bounds: Optional[EdgeWeightBounds] = None
        short_raw = data.get("short_edge_minutes")
        long_raw = data.get("long_edge_minutes")
        if (short_raw is None) != (long_raw is None):
            raise ConfigError("short_edge_minutes and long_edge_minutes must be given together")
        if short_raw is not None:
            bounds = (
                _parse_minutes(short_raw, "short_edge_minutes"),
                _parse_minutes(long_raw, "long_edge_minutes"),
            )
        return cls(
            hub_count=hub_count,
            stop_count=stop_count,
            distribution=distribution,
            edge_weight_bounds=bounds,
        )

    @classmethod
    def from_yaml(cls, path: str | Path, rng: Optional[Generator] = None) -> "NetworkConfig":
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Network config YAML not found at {config_path}")
        with config_path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
        return cls.from_mapping(data, rng=rng)

    def build(self, rng: Optional[Generator] = None) -> DeliveryNetwork:
        return make_delivery_network(
            self.hub_count,
            self.stop_count,
            self.distribution,
            edge_weight_bounds=self.edge_weight_bounds,
            rng=rng,
        )


__all__ = ["NetworkConfig"]
