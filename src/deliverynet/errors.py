"""Exceptions shared by the sampling and network packages."""

from __future__ import annotations


class ConfigError(ValueError):
    """Invalid construction input (distribution, counts, bounds or config payload)."""


__all__ = ["ConfigError"]
