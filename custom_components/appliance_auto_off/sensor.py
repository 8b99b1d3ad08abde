"""Sensor platform for Appliance Auto-Off."""
from __future__ import annotations

from homeassistant.components.sensor import (
    SensorDeviceClass,
    SensorEntity,
    SensorStateClass,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import UnitOfPower
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import CONF_APPLIANCE_NAME, DOMAIN
from .coordinator import AutoOffMonitor
from .models import Phase


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up Appliance Auto-Off sensors."""
    monitor: AutoOffMonitor = entry.runtime_data
    async_add_entities([
        AutoOffPhaseSensor(monitor, entry),
        AutoOffPowerSensor(monitor, entry),
    ])


class AutoOffBaseSensor(SensorEntity):
    """Base class for auto-off sensors with shared device info and update callback."""

    _attr_has_entity_name = True

    def __init__(self, monitor: AutoOffMonitor, entry: ConfigEntry) -> None:
        """Initialize the sensor."""
        self._monitor = monitor
        self._attr_device_info = DeviceInfo(
            identifiers={(DOMAIN, entry.entry_id)},
            name=entry.data[CONF_APPLIANCE_NAME],
            manufacturer="Appliance Auto-Off",
            model="Power Auto-Off",
        )

    async def async_added_to_hass(self) -> None:
        """Register update callback."""
        self._monitor.register_update_callback(self._handle_update)

    async def async_will_remove_from_hass(self) -> None:
        """Unregister update callback."""
        self._monitor.unregister_update_callback(self._handle_update)

    @callback
    def _handle_update(self) -> None:
        """Handle state update from monitor."""
        self.async_write_ha_state()


class AutoOffPhaseSensor(AutoOffBaseSensor):
    """Sensor showing the phase of the auto-off cycle."""

    _attr_translation_key = "phase"
    _attr_icon = "mdi:state-machine"
    _attr_device_class = SensorDeviceClass.ENUM
    _attr_options = [phase.value for phase in Phase]

    def __init__(self, monitor: AutoOffMonitor, entry: ConfigEntry) -> None:
        """Initialize the sensor."""
        super().__init__(monitor, entry)
        self._attr_unique_id = f"{entry.entry_id}_phase"

    @property
    def native_value(self) -> str:
        """Return the current phase."""
        return self._monitor.phase.value

    @property
    def extra_state_attributes(self) -> dict:
        """Return additional attributes."""
        attrs = {
            "switch_entity": self._monitor.switch_entity,
            "power_entity": self._monitor.power_entity,
            "run_confirmed": self._monitor.run_confirmed,
        }
        if self._monitor.monitoring_started_at:
            attrs["monitoring_started_at"] = (
                self._monitor.monitoring_started_at.isoformat()
            )
        return attrs


class AutoOffPowerSensor(AutoOffBaseSensor):
    """Sensor showing the last power sample."""

    _attr_translation_key = "current_power"
    _attr_icon = "mdi:flash"
    _attr_device_class = SensorDeviceClass.POWER
    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_native_unit_of_measurement = UnitOfPower.WATT

    def __init__(self, monitor: AutoOffMonitor, entry: ConfigEntry) -> None:
        """Initialize the sensor."""
        super().__init__(monitor, entry)
        self._attr_unique_id = f"{entry.entry_id}_power"

    @property
    def native_value(self) -> float | None:
        """Return current power."""
        return self._monitor.current_power
