"""Configuration, phase and call result types for Appliance Auto-Off."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from enum import StrEnum
from typing import Any, Mapping

from .const import (
    CONF_CHECK_DURATION,
    CONF_CHECK_INTERVAL,
    CONF_INITIAL_CHECK_DURATION,
    CONF_INITIAL_DELAY,
    CONF_KEEP_ALIVE,
    CONF_KEEP_ALIVE_INTERVAL,
    CONF_POWER_ACTIVE_THRESHOLD,
    CONF_POWER_ON_THRESHOLD,
    CONF_SIMULATION_MODE,
    DEFAULT_CHECK_DURATION,
    DEFAULT_CHECK_INTERVAL,
    DEFAULT_INITIAL_CHECK_DURATION,
    DEFAULT_INITIAL_DELAY,
    DEFAULT_KEEP_ALIVE_INTERVAL,
    DEFAULT_POWER_ACTIVE_THRESHOLD,
    DEFAULT_POWER_ON_THRESHOLD,
    PHASE_DELAY,
    PHASE_IDLE,
    PHASE_MONITORING,
)


class Phase(StrEnum):
    """Phase of the auto-off cycle."""

    IDLE = PHASE_IDLE
    DELAY = PHASE_DELAY
    MONITORING = PHASE_MONITORING


@dataclass(frozen=True)
class AutoOffConfig:
    """Timings and thresholds, loaded once per config entry."""

    initial_delay: timedelta
    check_duration: timedelta
    initial_check_duration: timedelta
    check_interval: timedelta
    keep_alive_interval: timedelta
    power_on_threshold: float
    power_active_threshold: float
    simulation_mode: bool = False
    keep_alive_enabled: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> AutoOffConfig:
        """Build the config from config entry data.

        In simulation mode the minute-valued durations are read as seconds
        so a whole cycle can be walked through in a couple of minutes.
        """
        simulation = bool(data.get(CONF_SIMULATION_MODE, False))
        unit = "seconds" if simulation else "minutes"

        def _minutes(key: str, default: float) -> timedelta:
            return timedelta(**{unit: float(data.get(key, default))})

        return cls(
            initial_delay=_minutes(CONF_INITIAL_DELAY, DEFAULT_INITIAL_DELAY),
            check_duration=_minutes(CONF_CHECK_DURATION, DEFAULT_CHECK_DURATION),
            initial_check_duration=_minutes(
                CONF_INITIAL_CHECK_DURATION, DEFAULT_INITIAL_CHECK_DURATION
            ),
            check_interval=timedelta(
                seconds=float(data.get(CONF_CHECK_INTERVAL, DEFAULT_CHECK_INTERVAL))
            ),
            keep_alive_interval=timedelta(
                seconds=float(
                    data.get(CONF_KEEP_ALIVE_INTERVAL, DEFAULT_KEEP_ALIVE_INTERVAL)
                )
            ),
            power_on_threshold=float(
                data.get(CONF_POWER_ON_THRESHOLD, DEFAULT_POWER_ON_THRESHOLD)
            ),
            power_active_threshold=float(
                data.get(CONF_POWER_ACTIVE_THRESHOLD, DEFAULT_POWER_ACTIVE_THRESHOLD)
            ),
            simulation_mode=simulation,
            keep_alive_enabled=bool(data.get(CONF_KEEP_ALIVE, False)),
        )


@dataclass(frozen=True)
class CallResult:
    """Outcome of an external call. Only ever logged."""

    ok: bool
    value: Any = None
    kind: str | None = None
    detail: str | None = None

    @classmethod
    def success(cls, value: Any = None) -> CallResult:
        """Return a successful result."""
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, kind: str, detail: str) -> CallResult:
        """Return a failed result."""
        return cls(ok=False, kind=kind, detail=detail)
