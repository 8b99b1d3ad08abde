"""Tests for configuration loading and config flow validation."""
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from custom_components.appliance_auto_off.config_flow import (
    ApplianceAutoOffConfigFlow,
    validate_timings,
)
from custom_components.appliance_auto_off.const import (
    CONF_APPLIANCE_NAME,
    CONF_CHECK_DURATION,
    CONF_CHECK_INTERVAL,
    CONF_CLOUD_AUTH_KEY,
    CONF_INITIAL_CHECK_DURATION,
    CONF_INITIAL_DELAY,
    CONF_POWER_ACTIVE_THRESHOLD,
    CONF_POWER_ENTITY,
    CONF_POWER_ON_THRESHOLD,
    CONF_SIMULATION_MODE,
    CONF_SWITCH_ENTITY,
    SCENE_CONF_KEYS,
    TOGGLE_SCENE,
)
from custom_components.appliance_auto_off.models import AutoOffConfig, CallResult


class TestAutoOffConfig:
    """Tests for AutoOffConfig.from_mapping."""

    def test_defaults(self):
        config = AutoOffConfig.from_mapping({})

        assert config.initial_delay == timedelta(minutes=30)
        assert config.check_duration == timedelta(minutes=20)
        assert config.initial_check_duration == timedelta(minutes=15)
        assert config.check_interval == timedelta(seconds=60)
        assert config.keep_alive_interval == timedelta(seconds=60)
        assert config.power_on_threshold == 0.7
        assert config.power_active_threshold == 0.7
        assert config.simulation_mode is False
        assert config.keep_alive_enabled is False

    def test_values_from_entry(self):
        config = AutoOffConfig.from_mapping(
            {
                CONF_INITIAL_DELAY: 45,
                CONF_CHECK_DURATION: 10.0,
                CONF_CHECK_INTERVAL: 30,
                CONF_POWER_ON_THRESHOLD: 2.5,
                CONF_POWER_ACTIVE_THRESHOLD: 25,
            }
        )

        assert config.initial_delay == timedelta(minutes=45)
        assert config.check_duration == timedelta(minutes=10)
        assert config.check_interval == timedelta(seconds=30)
        assert config.power_on_threshold == 2.5
        assert config.power_active_threshold == 25.0

    def test_simulation_mode_uses_seconds(self):
        config = AutoOffConfig.from_mapping(
            {
                CONF_SIMULATION_MODE: True,
                CONF_INITIAL_DELAY: 30,
                CONF_CHECK_DURATION: 20,
                CONF_INITIAL_CHECK_DURATION: 15,
            }
        )

        assert config.simulation_mode is True
        assert config.initial_delay == timedelta(seconds=30)
        assert config.check_duration == timedelta(seconds=20)
        assert config.initial_check_duration == timedelta(seconds=15)
        assert config.check_interval == timedelta(seconds=60)


class TestCallResult:
    """Tests for CallResult."""

    def test_success(self):
        result = CallResult.success(200)
        assert result.ok
        assert result.value == 200
        assert result.kind is None

    def test_failure(self):
        result = CallResult.failure("http", "HTTP 500")
        assert not result.ok
        assert result.kind == "http"
        assert result.detail == "HTTP 500"


class TestValidateTimings:
    """Tests for validate_timings."""

    def test_window_inside_delay(self):
        assert validate_timings(
            {CONF_INITIAL_DELAY: 30, CONF_INITIAL_CHECK_DURATION: 15}
        ) == {}

    @pytest.mark.parametrize("window", [30, 45])
    def test_window_too_long(self, window):
        assert validate_timings(
            {CONF_INITIAL_DELAY: 30, CONF_INITIAL_CHECK_DURATION: window}
        ) == {CONF_INITIAL_CHECK_DURATION: "check_window_too_long"}


def user_input(**overrides):
    data = {
        CONF_APPLIANCE_NAME: "Oven",
        CONF_SWITCH_ENTITY: "switch.oven",
        CONF_POWER_ENTITY: "sensor.oven_power",
        CONF_INITIAL_DELAY: 30,
        CONF_INITIAL_CHECK_DURATION: 15,
        CONF_CHECK_DURATION: 20,
    }
    data.update(overrides)
    return data


@pytest.fixture
def flow():
    """Create a config flow with form and entry creation mocked out."""
    flow = ApplianceAutoOffConfigFlow()
    flow.hass = MagicMock()
    flow.async_show_form = MagicMock(return_value={"type": "form"})
    flow.async_create_entry = MagicMock(return_value={"type": "create_entry"})
    flow.async_set_unique_id = AsyncMock()
    flow._abort_if_unique_id_configured = MagicMock()
    return flow


class TestConfigFlow:
    """Tests for ApplianceAutoOffConfigFlow."""

    @pytest.mark.asyncio
    async def test_missing_entities(self, flow):
        flow.hass.states.get.return_value = None

        await flow.async_step_user(user_input())

        errors = flow.async_show_form.call_args.kwargs["errors"]
        assert errors == {
            CONF_SWITCH_ENTITY: "entity_not_found",
            CONF_POWER_ENTITY: "entity_not_found",
        }
        flow.async_create_entry.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_window(self, flow):
        await flow.async_step_user(user_input(**{CONF_INITIAL_CHECK_DURATION: 40}))

        errors = flow.async_show_form.call_args.kwargs["errors"]
        assert errors == {CONF_INITIAL_CHECK_DURATION: "check_window_too_long"}

    @pytest.mark.asyncio
    async def test_full_flow(self, flow):
        await flow.async_step_user(user_input())

        flow.async_set_unique_id.assert_called_once_with("switch.oven")
        assert flow.async_show_form.call_args.kwargs["step_id"] == "cloud"

        cloud = {
            CONF_CLOUD_AUTH_KEY: "secret",
            SCENE_CONF_KEYS[TOGGLE_SCENE]: "2002",
        }
        await flow.async_step_cloud(cloud)

        kwargs = flow.async_create_entry.call_args.kwargs
        assert kwargs["title"] == "Oven"
        assert kwargs["data"][CONF_SWITCH_ENTITY] == "switch.oven"
        assert kwargs["data"]["scene_toggle_scene"] == "2002"
        assert kwargs["data"][CONF_CLOUD_AUTH_KEY] == "secret"
