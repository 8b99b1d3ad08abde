"""The Appliance Auto-Off integration."""
from __future__ import annotations

import logging

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from .const import PLATFORMS
from .coordinator import AutoOffMonitor

_LOGGER = logging.getLogger(__name__)

type ApplianceAutoOffConfigEntry = ConfigEntry[AutoOffMonitor]


async def async_setup_entry(
    hass: HomeAssistant, entry: ApplianceAutoOffConfigEntry
) -> bool:
    """Set up Appliance Auto-Off from a config entry."""
    monitor = AutoOffMonitor(hass, entry)
    entry.runtime_data = monitor

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)

    # Start after platforms are set up so entities see the startup phase
    monitor.async_start()

    return True


async def async_unload_entry(
    hass: HomeAssistant, entry: ApplianceAutoOffConfigEntry
) -> bool:
    """Unload a config entry."""
    monitor: AutoOffMonitor = entry.runtime_data
    monitor.async_stop()

    return await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
