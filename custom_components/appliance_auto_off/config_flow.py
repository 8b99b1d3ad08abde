"""Config flow for Appliance Auto-Off."""
from __future__ import annotations

from typing import Any

import voluptuous as vol

from homeassistant import config_entries
from homeassistant.helpers import selector

from .const import (
    CONF_APPLIANCE_NAME,
    CONF_CHECK_DURATION,
    CONF_CHECK_INTERVAL,
    CONF_CLOUD_AUTH_KEY,
    CONF_CLOUD_BASE_URL,
    CONF_INITIAL_CHECK_DURATION,
    CONF_INITIAL_DELAY,
    CONF_KEEP_ALIVE,
    CONF_KEEP_ALIVE_INTERVAL,
    CONF_POWER_ACTIVE_THRESHOLD,
    CONF_POWER_ENTITY,
    CONF_POWER_ON_THRESHOLD,
    CONF_SIMULATION_MODE,
    CONF_SWITCH_ENTITY,
    DEFAULT_CHECK_DURATION,
    DEFAULT_CHECK_INTERVAL,
    DEFAULT_INITIAL_CHECK_DURATION,
    DEFAULT_INITIAL_DELAY,
    DEFAULT_KEEP_ALIVE_INTERVAL,
    DEFAULT_POWER_ACTIVE_THRESHOLD,
    DEFAULT_POWER_ON_THRESHOLD,
    DOMAIN,
    SCENE_CONF_KEYS,
)


def _minutes_selector() -> selector.NumberSelector:
    return selector.NumberSelector(
        selector.NumberSelectorConfig(
            min=1,
            max=240,
            step=1,
            unit_of_measurement="min",
            mode=selector.NumberSelectorMode.BOX,
        )
    )


def _seconds_selector() -> selector.NumberSelector:
    return selector.NumberSelector(
        selector.NumberSelectorConfig(
            min=5,
            max=3600,
            step=5,
            unit_of_measurement="s",
            mode=selector.NumberSelectorMode.BOX,
        )
    )


def _watts_selector() -> selector.NumberSelector:
    return selector.NumberSelector(
        selector.NumberSelectorConfig(
            min=0.1,
            max=3000,
            step=0.1,
            unit_of_measurement="W",
            mode=selector.NumberSelectorMode.BOX,
        )
    )


USER_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_APPLIANCE_NAME): str,
        vol.Required(CONF_SWITCH_ENTITY): selector.EntitySelector(
            selector.EntitySelectorConfig(domain="switch", multiple=False),
        ),
        vol.Required(CONF_POWER_ENTITY): selector.EntitySelector(
            selector.EntitySelectorConfig(
                domain="sensor",
                device_class="power",
                multiple=False,
            ),
        ),
        vol.Required(
            CONF_INITIAL_DELAY, default=DEFAULT_INITIAL_DELAY
        ): _minutes_selector(),
        vol.Required(
            CONF_INITIAL_CHECK_DURATION, default=DEFAULT_INITIAL_CHECK_DURATION
        ): _minutes_selector(),
        vol.Required(
            CONF_CHECK_DURATION, default=DEFAULT_CHECK_DURATION
        ): _minutes_selector(),
        vol.Required(
            CONF_CHECK_INTERVAL, default=DEFAULT_CHECK_INTERVAL
        ): _seconds_selector(),
        vol.Required(
            CONF_POWER_ON_THRESHOLD, default=DEFAULT_POWER_ON_THRESHOLD
        ): _watts_selector(),
        vol.Required(
            CONF_POWER_ACTIVE_THRESHOLD, default=DEFAULT_POWER_ACTIVE_THRESHOLD
        ): _watts_selector(),
        vol.Required(CONF_SIMULATION_MODE, default=False): bool,
        vol.Required(CONF_KEEP_ALIVE, default=False): bool,
        vol.Required(
            CONF_KEEP_ALIVE_INTERVAL, default=DEFAULT_KEEP_ALIVE_INTERVAL
        ): _seconds_selector(),
    }
)

CLOUD_SCHEMA = vol.Schema(
    {
        vol.Optional(CONF_CLOUD_BASE_URL): selector.TextSelector(
            selector.TextSelectorConfig(type=selector.TextSelectorType.URL)
        ),
        vol.Optional(CONF_CLOUD_AUTH_KEY): selector.TextSelector(
            selector.TextSelectorConfig(type=selector.TextSelectorType.PASSWORD)
        ),
        **{vol.Optional(key): str for key in SCENE_CONF_KEYS.values()},
    }
)


def validate_timings(user_input: dict[str, Any]) -> dict[str, str]:
    """Return form errors for timings that cannot work together."""
    errors: dict[str, str] = {}
    if float(user_input[CONF_INITIAL_CHECK_DURATION]) >= float(
        user_input[CONF_INITIAL_DELAY]
    ):
        # The confirmation window has to close before monitoring starts
        errors[CONF_INITIAL_CHECK_DURATION] = "check_window_too_long"
    return errors


class ApplianceAutoOffConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    """Handle a config flow for Appliance Auto-Off."""

    VERSION = 1

    def __init__(self) -> None:
        """Initialize the flow."""
        super().__init__()
        self._data: dict[str, Any] = {}

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> config_entries.ConfigFlowResult:
        """Handle the appliance, timing and threshold step."""
        errors: dict[str, str] = {}

        if user_input is not None:
            for key in (CONF_SWITCH_ENTITY, CONF_POWER_ENTITY):
                if self.hass.states.get(user_input[key]) is None:
                    errors[key] = "entity_not_found"
            errors.update(validate_timings(user_input))

            if not errors:
                # One auto-off cycle per switch
                await self.async_set_unique_id(user_input[CONF_SWITCH_ENTITY])
                self._abort_if_unique_id_configured()

                self._data = dict(user_input)
                return await self.async_step_cloud()

        return self.async_show_form(
            step_id="user",
            data_schema=self.add_suggested_values_to_schema(
                USER_SCHEMA, user_input or {}
            ),
            errors=errors,
        )

    async def async_step_cloud(
        self, user_input: dict[str, Any] | None = None
    ) -> config_entries.ConfigFlowResult:
        """Handle the optional cloud notification step."""
        if user_input is not None:
            self._data.update(user_input)
            return self.async_create_entry(
                title=self._data[CONF_APPLIANCE_NAME],
                data=self._data,
            )

        return self.async_show_form(step_id="cloud", data_schema=CLOUD_SCHEMA)
