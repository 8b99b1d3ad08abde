"""Home Assistant wiring for the auto-off state machine."""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Callable

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import (
    ATTR_ENTITY_ID,
    SERVICE_TURN_OFF,
    STATE_UNAVAILABLE,
    STATE_UNKNOWN,
)
from homeassistant.core import CALLBACK_TYPE, Event, HomeAssistant, State, callback
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.aiohttp_client import async_get_clientsession
from homeassistant.helpers.event import (
    async_call_later,
    async_track_state_change_event,
    async_track_time_interval,
)

from .const import (
    CONF_APPLIANCE_NAME,
    CONF_CLOUD_AUTH_KEY,
    CONF_CLOUD_BASE_URL,
    CONF_POWER_ENTITY,
    CONF_SWITCH_ENTITY,
    EVENT_SWITCHED_OFF,
    SCENE_CONF_KEYS,
)
from .models import AutoOffConfig, CallResult, Phase
from .notifier import SceneNotifier
from .state_machine import AutoOffStateMachine

_LOGGER = logging.getLogger(__name__)


def parse_power(state: State | None) -> float | None:
    """Return the power of a sensor state, None when it has no usable value."""
    if state is None or state.state in (STATE_UNAVAILABLE, STATE_UNKNOWN):
        return None
    try:
        return float(state.state)
    except (ValueError, TypeError):
        return None


class HassTimer:
    """Timer handle wrapping a Home Assistant unsubscribe callback."""

    __slots__ = ("_unsub",)

    def __init__(self, unsub: CALLBACK_TYPE) -> None:
        """Initialize the handle."""
        self._unsub: CALLBACK_TYPE | None = unsub

    @property
    def active(self) -> bool:
        """Return True until the handle was cancelled."""
        return self._unsub is not None

    def cancel(self) -> None:
        """Cancel the timer. Calling it again does nothing."""
        if self._unsub is not None:
            unsub, self._unsub = self._unsub, None
            unsub()


class HassScheduler:
    """Timer capability backed by Home Assistant's event helpers."""

    def __init__(self, hass: HomeAssistant) -> None:
        """Initialize the scheduler."""
        self._hass = hass

    def schedule(
        self, delay: timedelta, repeating: bool, action: Callable[[], None]
    ) -> HassTimer:
        """Schedule action once after delay, or every delay when repeating."""

        @callback
        def _fire(_now: Any) -> None:
            action()

        if repeating:
            return HassTimer(async_track_time_interval(self._hass, _fire, delay))
        return HassTimer(async_call_later(self._hass, delay, _fire))

    @staticmethod
    def cancel(handle: HassTimer) -> None:
        """Cancel a handle returned by schedule."""
        handle.cancel()


class HassRelay:
    """Power readings and switch control of the monitored plug."""

    def __init__(
        self,
        hass: HomeAssistant,
        switch_entity: str,
        power_entity: str,
        name: str,
    ) -> None:
        """Initialize the relay adapter."""
        self._hass = hass
        self._switch_entity = switch_entity
        self._power_entity = power_entity
        self._name = name

    def get_power(self) -> float | None:
        """Return the instantaneous power, None if it cannot be read."""
        return parse_power(self._hass.states.get(self._power_entity))

    @callback
    def turn_off(self, reason: str) -> None:
        """Switch the plug off in the background."""
        self._hass.bus.async_fire(
            EVENT_SWITCHED_OFF,
            {
                "entity_id": self._switch_entity,
                "appliance_name": self._name,
                "reason": reason,
            },
        )
        self._hass.async_create_task(self.async_turn_off(reason))

    async def async_turn_off(self, reason: str) -> CallResult:
        """Call switch.turn_off and log the outcome."""
        try:
            await self._hass.services.async_call(
                "switch",
                SERVICE_TURN_OFF,
                {ATTR_ENTITY_ID: self._switch_entity},
                blocking=True,
            )
        except HomeAssistantError as err:
            _LOGGER.error(
                "%s: Could not switch off %s (%s): %s",
                self._name,
                self._switch_entity,
                reason,
                err,
            )
            return CallResult.failure("service", str(err))

        _LOGGER.debug(
            "%s: %s switched off (%s)", self._name, self._switch_entity, reason
        )
        return CallResult.success()


class AutoOffMonitor:
    """Feed power sensor updates into the state machine for one appliance."""

    def __init__(self, hass: HomeAssistant, entry: ConfigEntry) -> None:
        """Initialize the monitor from config entry data."""
        self.hass = hass
        self.entry = entry

        data = entry.data
        self._appliance_name: str = data[CONF_APPLIANCE_NAME]
        self._switch_entity: str = data[CONF_SWITCH_ENTITY]
        self._power_entity: str = data[CONF_POWER_ENTITY]
        self._config = AutoOffConfig.from_mapping(data)

        self._current_power: float | None = None

        self._relay = HassRelay(
            hass, self._switch_entity, self._power_entity, self._appliance_name
        )
        self._notifier = SceneNotifier(
            hass,
            async_get_clientsession(hass),
            data.get(CONF_CLOUD_BASE_URL),
            data.get(CONF_CLOUD_AUTH_KEY),
            {name: data.get(key) for name, key in SCENE_CONF_KEYS.items()},
            self._appliance_name,
        )
        self.machine = AutoOffStateMachine(
            self._config,
            HassScheduler(hass),
            self._relay,
            self._notifier,
            name=self._appliance_name,
        )

        # Listeners
        self._unsub_state_change: CALLBACK_TYPE | None = None
        self._unsub_keep_alive: CALLBACK_TYPE | None = None
        self._update_callbacks: list[Callable[[], None]] = []

        self.machine.register_update_callback(self._notify_update)

    @property
    def appliance_name(self) -> str:
        """Return the appliance name."""
        return self._appliance_name

    @property
    def power_entity(self) -> str:
        """Return the power entity ID."""
        return self._power_entity

    @property
    def switch_entity(self) -> str:
        """Return the switch entity ID."""
        return self._switch_entity

    @property
    def current_power(self) -> float | None:
        """Return the last power reading."""
        return self._current_power

    @property
    def phase(self) -> Phase:
        """Return the current phase."""
        return self.machine.phase

    @property
    def is_cycle_active(self) -> bool:
        """Return True while a cycle is running."""
        return self.machine.phase is not Phase.IDLE

    @property
    def run_confirmed(self) -> bool:
        """Return True once the run cycle was confirmed."""
        return self.machine.run_confirmed

    @property
    def monitoring_started_at(self) -> datetime | None:
        """Return when monitoring started."""
        return self.machine.monitoring_started_at

    # --- Callback registration ---

    def register_update_callback(self, callback_fn: Callable[[], None]) -> None:
        """Register a callback to be called when state changes."""
        self._update_callbacks.append(callback_fn)

    def unregister_update_callback(self, callback_fn: Callable[[], None]) -> None:
        """Unregister a previously registered callback."""
        if callback_fn in self._update_callbacks:
            self._update_callbacks.remove(callback_fn)

    def _notify_update(self) -> None:
        """Notify all registered callbacks about a state update."""
        for cb in self._update_callbacks:
            cb()

    # --- Start / Stop ---

    @callback
    def async_start(self) -> None:
        """Subscribe to the power sensor and reconcile with its current value."""
        _LOGGER.info(
            "%s: Auto-off started (simulation: %s, keep-alive: %s, delay: %s, "
            "check duration: %s, confirmation window: %s)",
            self._appliance_name,
            self._config.simulation_mode,
            self._config.keep_alive_enabled,
            self._config.initial_delay,
            self._config.check_duration,
            self._config.initial_check_duration,
        )

        self._unsub_state_change = async_track_state_change_event(
            self.hass, [self._power_entity], self._async_power_state_changed
        )

        if self._config.keep_alive_enabled:
            self._unsub_keep_alive = async_track_time_interval(
                self.hass, self._async_keep_alive, self._config.keep_alive_interval
            )
            _LOGGER.debug(
                "%s: Keep-alive every %s",
                self._appliance_name,
                self._config.keep_alive_interval,
            )

        power = self._relay.get_power()
        self._current_power = power
        self.machine.reconcile_startup(power)

    @callback
    def async_stop(self) -> None:
        """Stop monitoring and cancel every pending timer."""
        if self._unsub_state_change:
            self._unsub_state_change()
            self._unsub_state_change = None
        if self._unsub_keep_alive:
            self._unsub_keep_alive()
            self._unsub_keep_alive = None
        self.machine.reset_and_stop()
        _LOGGER.info("%s: Stopped monitoring", self._appliance_name)

    # --- Event handling ---

    @callback
    def _async_power_state_changed(self, event: Event) -> None:
        """Handle power sensor state changes."""
        power = parse_power(event.data.get("new_state"))
        if power is None:
            return

        self._current_power = power
        self.machine.handle_power_sample(power)
        self._notify_update()

    @callback
    def _async_keep_alive(self, _now: Any) -> None:
        """Poll the power sensor. Has no effect on the state machine."""
        _LOGGER.debug(
            "%s: Keep-alive check, power %s W",
            self._appliance_name,
            self._relay.get_power(),
        )
