"""Binary sensor platform for Appliance Auto-Off."""
from __future__ import annotations

from homeassistant.components.binary_sensor import (
    BinarySensorDeviceClass,
    BinarySensorEntity,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import CONF_APPLIANCE_NAME, DOMAIN
from .coordinator import AutoOffMonitor


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up Appliance Auto-Off binary sensor."""
    monitor: AutoOffMonitor = entry.runtime_data
    async_add_entities([AutoOffCycleActiveBinarySensor(monitor, entry)])


class AutoOffCycleActiveBinarySensor(BinarySensorEntity):
    """Binary sensor that is on while an auto-off cycle is running."""

    _attr_has_entity_name = True
    _attr_translation_key = "cycle_active"
    _attr_device_class = BinarySensorDeviceClass.RUNNING
    _attr_icon = "mdi:timer-cog-outline"

    def __init__(self, monitor: AutoOffMonitor, entry: ConfigEntry) -> None:
        """Initialize the binary sensor."""
        self._monitor = monitor

        self._attr_unique_id = f"{entry.entry_id}_cycle_active"
        self._attr_device_info = DeviceInfo(
            identifiers={(DOMAIN, entry.entry_id)},
            name=entry.data[CONF_APPLIANCE_NAME],
            manufacturer="Appliance Auto-Off",
            model="Power Auto-Off",
        )

    @property
    def is_on(self) -> bool:
        """Return True while a cycle is active."""
        return self._monitor.is_cycle_active

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
