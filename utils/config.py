# utils/config.py
# This file is part of Sightline - Live Console Views
#
# Engine settings with environment variable overrides

"""Configuration for the console view engine.

All tunables live in one frozen dataclass. Defaults match the behavior
of the list view (fetch batches of 100, five-row scroll edges, 500ms
throttling for structured criteria and 250ms for the filter term) and
can be overridden through ``SIGHTLINE_*`` environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional


class ConfigError(ValueError):
    """Raised when a setting has an invalid value."""


DEFAULT_BATCH_SIZE = 100


@dataclass(frozen=True, slots=True)
class ConsoleConfig:
    """Settings shared by the criteria model, query engine and view window.

    Attributes:
        batch_size: Fetch batch hint and visible window growth step
        edge_size: Number of rows at each end of the window that count as
            "near" the top or bottom
        criteria_throttle: Seconds between structured criteria emissions
        filter_term_throttle: Seconds between filter term emissions
    """

    batch_size: int = DEFAULT_BATCH_SIZE
    edge_size: int = 5
    criteria_throttle: float = 0.5
    filter_term_throttle: float = 0.25

    def __post_init__(self):
        if self.batch_size <= 0:
            raise ConfigError(f"batch_size must be positive, got {self.batch_size}")
        if self.edge_size <= 0:
            raise ConfigError(f"edge_size must be positive, got {self.edge_size}")
        if self.criteria_throttle < 0 or self.filter_term_throttle < 0:
            raise ConfigError("throttle intervals cannot be negative")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> ConsoleConfig:
        """Build settings from environment variables.

        Recognized variables: SIGHTLINE_BATCH_SIZE, SIGHTLINE_EDGE_SIZE,
        SIGHTLINE_CRITERIA_THROTTLE, SIGHTLINE_FILTER_TERM_THROTTLE.
        Unset variables keep their defaults.

        Raises:
            ConfigError: A variable is set but cannot be parsed
        """
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            batch_size=_read(env, "SIGHTLINE_BATCH_SIZE", int, defaults.batch_size),
            edge_size=_read(env, "SIGHTLINE_EDGE_SIZE", int, defaults.edge_size),
            criteria_throttle=_read(
                env, "SIGHTLINE_CRITERIA_THROTTLE", float, defaults.criteria_throttle
            ),
            filter_term_throttle=_read(
                env, "SIGHTLINE_FILTER_TERM_THROTTLE", float, defaults.filter_term_throttle
            ),
        )


def _read(env: Mapping[str, str], name: str, convert, default):
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        return convert(raw)
    except ValueError:
        raise ConfigError(f"{name} has an invalid value: {raw!r}")
