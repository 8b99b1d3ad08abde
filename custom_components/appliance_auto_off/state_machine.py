"""Auto-off state machine driven by power samples and timers."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from functools import partial
from typing import Any, Callable, ClassVar, Protocol, Union

from homeassistant.core import callback
from homeassistant.util import dt as dt_util

from .const import (
    EVENT_MACHINE_AUTO_OFF,
    EVENT_MACHINE_ON,
    EVENT_MONITORING_ACTIVE,
    EVENT_STANDBY_OFF_DETECTED,
    REASON_EMERGENCY,
    REASON_STANDBY,
    TOGGLE_SCENE,
)
from .models import AutoOffConfig, Phase

_LOGGER = logging.getLogger(__name__)


class Scheduler(Protocol):
    """Timer capability."""

    def schedule(
        self, delay: timedelta, repeating: bool, action: Callable[[], None]
    ) -> Any:
        """Run action after delay (every delay when repeating), return a handle."""
        ...

    def cancel(self, handle: Any) -> None:
        """Cancel a handle. Must tolerate fired or cancelled handles."""
        ...


class Relay(Protocol):
    """Switch capability of the smart plug."""

    def turn_off(self, reason: str) -> None:
        """Switch the relay off without waiting for the result."""
        ...


class Notifier(Protocol):
    """Notification and scene capability."""

    def notify(self, event_name: str) -> None:
        """Emit a named event."""
        ...

    def set_scene_enabled(self, scene_name: str, enabled: bool) -> None:
        """Enable or disable a named scene."""
        ...


@dataclass(eq=False)
class IdleState:
    """Waiting for the appliance to draw power."""

    phase: ClassVar[Phase] = Phase.IDLE


@dataclass(eq=False)
class DelayState:
    """Appliance presumed running, waiting out the initial delay."""

    phase: ClassVar[Phase] = Phase.DELAY

    delay_timer: Any = None
    early_confirm_timer: Any = None
    run_confirmed: bool = False


@dataclass(eq=False)
class MonitoringState:
    """Polling for sustained standby."""

    phase: ClassVar[Phase] = Phase.MONITORING

    started_at: datetime = field(default_factory=dt_util.utcnow)
    poll_timer: Any = None


CycleState = Union[IdleState, DelayState, MonitoringState]


class AutoOffStateMachine:
    """Decide when to switch an appliance off based on its power draw.

    Idle -> Delay -> Monitoring -> Idle. Every transition is a synchronous
    callback; external calls go through the injected relay and notifier and
    are never awaited. Timer callbacks are bound to the state object that
    armed them and do nothing once that state has been left.
    """

    def __init__(
        self,
        config: AutoOffConfig,
        scheduler: Scheduler,
        relay: Relay,
        notifier: Notifier,
        clock: Callable[[], datetime] = dt_util.utcnow,
        name: str = "appliance",
    ) -> None:
        """Initialize the state machine in the idle phase."""
        self._config = config
        self._scheduler = scheduler
        self._relay = relay
        self._notifier = notifier
        self._clock = clock
        self._name = name

        self._state: CycleState = IdleState()
        self._update_callbacks: list[Callable[[], None]] = []

    @property
    def phase(self) -> Phase:
        """Return the current phase."""
        return self._state.phase

    @property
    def run_confirmed(self) -> bool:
        """Return True once the run cycle was confirmed during the delay."""
        return isinstance(self._state, DelayState) and self._state.run_confirmed

    @property
    def monitoring_started_at(self) -> datetime | None:
        """Return when monitoring started, None outside monitoring."""
        if isinstance(self._state, MonitoringState):
            return self._state.started_at
        return None

    @property
    def delay_timer_armed(self) -> bool:
        """Return True while the initial delay timer is pending."""
        return (
            isinstance(self._state, DelayState)
            and self._state.delay_timer is not None
        )

    @property
    def early_confirm_timer_armed(self) -> bool:
        """Return True while the run confirmation window is open."""
        return (
            isinstance(self._state, DelayState)
            and self._state.early_confirm_timer is not None
        )

    @property
    def poll_timer_armed(self) -> bool:
        """Return True while standby polling is active."""
        return (
            isinstance(self._state, MonitoringState)
            and self._state.poll_timer is not None
        )

    @property
    def config(self) -> AutoOffConfig:
        """Return the configuration."""
        return self._config

    # --- Callback registration ---

    def register_update_callback(self, callback_fn: Callable[[], None]) -> None:
        """Register a callback to be called when the phase changes."""
        self._update_callbacks.append(callback_fn)

    def unregister_update_callback(self, callback_fn: Callable[[], None]) -> None:
        """Unregister a previously registered callback."""
        if callback_fn in self._update_callbacks:
            self._update_callbacks.remove(callback_fn)

    def _notify_update(self) -> None:
        for cb in self._update_callbacks:
            cb()

    # --- Inputs ---

    @callback
    def reconcile_startup(self, power: float | None) -> None:
        """Start a cycle if the appliance is already running at startup.

        A failed status read is passed as None and keeps the machine idle.
        """
        if power is None:
            _LOGGER.error(
                "%s: Could not retrieve initial power, waiting for power increase",
                self._name,
            )
            return

        _LOGGER.debug("%s: Initial power on startup: %.2f W", self._name, power)
        if power >= self._config.power_on_threshold and isinstance(
            self._state, IdleState
        ):
            _LOGGER.info("%s: Appliance active on startup", self._name)
            self._start_cycle()
        else:
            _LOGGER.debug(
                "%s: Appliance not active on startup, waiting for power increase",
                self._name,
            )

    @callback
    def handle_power_sample(self, power: float) -> None:
        """Interpret a power reading according to the current phase."""
        state = self._state
        _LOGGER.debug(
            "%s: Power %.2f W in phase %s", self._name, power, state.phase
        )

        # Renewed draw while monitoring wins over any other interpretation
        if isinstance(state, MonitoringState):
            if power >= self._config.power_active_threshold:
                self._emergency_shutdown(power)
                return

        elif isinstance(state, DelayState):
            if (
                power >= self._config.power_on_threshold
                and not state.run_confirmed
                and state.early_confirm_timer is not None
            ):
                self._scheduler.cancel(state.early_confirm_timer)
                state.early_confirm_timer = None
                state.run_confirmed = True
                _LOGGER.debug(
                    "%s: Run cycle confirmed (%.2f W), delay continues",
                    self._name,
                    power,
                )
                self._notify_update()
            return

        if power >= self._config.power_on_threshold:
            if isinstance(state, IdleState):
                self._start_cycle()
            else:
                _LOGGER.debug(
                    "%s: Power increase ignored, cycle already active (%s)",
                    self._name,
                    state.phase,
                )

    @callback
    def reset_and_stop(self) -> None:
        """Cancel every timer and return to idle. Safe from any phase."""
        state = self._state
        if isinstance(state, DelayState):
            for handle in (state.delay_timer, state.early_confirm_timer):
                if handle is not None:
                    self._scheduler.cancel(handle)
            state.delay_timer = None
            state.early_confirm_timer = None
        elif isinstance(state, MonitoringState):
            if state.poll_timer is not None:
                self._scheduler.cancel(state.poll_timer)
            state.poll_timer = None

        self._state = IdleState()
        if not isinstance(state, IdleState):
            _LOGGER.debug(
                "%s: Cycle timers stopped, state reset to idle", self._name
            )
            self._notify_update()

    # --- Transitions ---

    def _start_cycle(self) -> None:
        self.reset_and_stop()

        state = DelayState()
        self._state = state
        _LOGGER.info(
            "%s: Power increase detected, delaying monitoring for %s",
            self._name,
            self._config.initial_delay,
        )

        self._notifier.notify(EVENT_MACHINE_ON)
        self._notifier.set_scene_enabled(TOGGLE_SCENE, True)

        state.delay_timer = self._scheduler.schedule(
            self._config.initial_delay,
            False,
            partial(self._handle_delay_expired, state),
        )
        state.early_confirm_timer = self._scheduler.schedule(
            self._config.initial_check_duration,
            False,
            partial(self._handle_early_confirm_expired, state),
        )
        _LOGGER.debug(
            "%s: Waiting %s for run cycle confirmation",
            self._name,
            self._config.initial_check_duration,
        )
        self._notify_update()

    @callback
    def _handle_early_confirm_expired(self, state: DelayState) -> None:
        if self._state is not state or state.early_confirm_timer is None:
            _LOGGER.debug("%s: Ignoring stale confirmation timer", self._name)
            return

        state.early_confirm_timer = None
        if state.run_confirmed:
            return

        _LOGGER.warning(
            "%s: Run cycle not confirmed within %s, assuming false start",
            self._name,
            self._config.initial_check_duration,
        )
        self._notifier.set_scene_enabled(TOGGLE_SCENE, False)
        self.reset_and_stop()

    @callback
    def _handle_delay_expired(self, state: DelayState) -> None:
        if self._state is not state:
            _LOGGER.debug("%s: Ignoring stale delay timer", self._name)
            return

        state.delay_timer = None
        if state.early_confirm_timer is not None:
            self._scheduler.cancel(state.early_confirm_timer)
            state.early_confirm_timer = None
            _LOGGER.debug(
                "%s: Confirmation timer stopped, monitoring starts", self._name
            )

        monitoring = MonitoringState(started_at=self._clock())
        self._state = monitoring
        _LOGGER.info(
            "%s: Initial delay elapsed, monitoring for standby during %s",
            self._name,
            self._config.check_duration,
        )
        self._notifier.notify(EVENT_MONITORING_ACTIVE)

        monitoring.poll_timer = self._scheduler.schedule(
            self._config.check_interval,
            True,
            partial(self._handle_poll_tick, monitoring),
        )
        self._notify_update()

    @callback
    def _handle_poll_tick(self, state: MonitoringState) -> None:
        if self._state is not state:
            _LOGGER.debug("%s: Ignoring stale poll tick", self._name)
            return

        elapsed = self._clock() - state.started_at
        _LOGGER.debug(
            "%s: Standby check, %s of %s elapsed",
            self._name,
            elapsed,
            self._config.check_duration,
        )
        if elapsed < self._config.check_duration:
            return

        _LOGGER.info("%s: Standby confirmed, switching off", self._name)
        self._notifier.notify(EVENT_STANDBY_OFF_DETECTED)
        self._relay.turn_off(REASON_STANDBY)
        self._notifier.set_scene_enabled(TOGGLE_SCENE, True)
        self.reset_and_stop()

    def _emergency_shutdown(self, power: float) -> None:
        _LOGGER.warning(
            "%s: Power increase (%.2f W) while monitoring, emergency shutdown",
            self._name,
            power,
        )
        self._relay.turn_off(REASON_EMERGENCY)
        self._notifier.notify(EVENT_MACHINE_AUTO_OFF)
        self._notifier.set_scene_enabled(TOGGLE_SCENE, False)
        self.reset_and_stop()
