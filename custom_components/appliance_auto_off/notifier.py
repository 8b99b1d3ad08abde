"""Cloud scene notifications for Appliance Auto-Off.

Scenes are run (push notification) or enabled/disabled through the cloud
scene endpoints. Every call is fire-and-forget: the request runs as a task on
the event loop and its outcome is only logged, so the state machine never
depends on delivery.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Mapping

import aiohttp

from homeassistant.core import HomeAssistant, callback

from .const import PLACEHOLDER_AUTH_KEY, REQUEST_TIMEOUT
from .models import CallResult

_LOGGER = logging.getLogger(__name__)


class SceneNotifier:
    """Map named events to cloud scene ids and trigger them."""

    def __init__(
        self,
        hass: HomeAssistant,
        session: aiohttp.ClientSession,
        base_url: str | None,
        auth_key: str | None,
        scene_ids: Mapping[str, str],
        name: str = "appliance",
    ) -> None:
        """Initialize the notifier."""
        self._hass = hass
        self._session = session
        self._base_url = (base_url or "").rstrip("/")
        self._auth_key = auth_key
        self._scene_ids = {key: value for key, value in scene_ids.items() if value}
        self._name = name

    @callback
    def notify(self, event_name: str) -> None:
        """Run the scene mapped to event_name."""
        params = self._resolve(event_name)
        if params is None:
            return
        self._hass.async_create_task(
            self._async_call(
                "manual_run", params, f"triggering scene '{event_name}'"
            )
        )

    @callback
    def set_scene_enabled(self, scene_name: str, enabled: bool) -> None:
        """Enable or disable the scene mapped to scene_name."""
        params = self._resolve(scene_name)
        if params is None:
            return
        params["enabled"] = "true" if enabled else "false"
        action = f"{'enabling' if enabled else 'disabling'} scene '{scene_name}'"
        self._hass.async_create_task(self._async_call("enable", params, action))

    def _resolve(self, scene_name: str) -> dict[str, str] | None:
        """Return query parameters, or None on a configuration error."""
        result = self._validate(scene_name)
        if not result.ok:
            _LOGGER.error("%s: %s", self._name, result.detail)
            return None
        return {"id": result.value, "auth_key": self._auth_key}

    def _validate(self, scene_name: str) -> CallResult:
        scene_id = self._scene_ids.get(scene_name)
        if not scene_id:
            return CallResult.failure(
                "config", f"No scene id configured for '{scene_name}'"
            )
        if not self._auth_key or self._auth_key == PLACEHOLDER_AUTH_KEY:
            return CallResult.failure(
                "config", "Cloud authorization key not set or incorrect"
            )
        if not self._base_url:
            return CallResult.failure("config", "Cloud base URL not set")
        return CallResult.success(scene_id)

    async def _async_call(
        self, endpoint: str, params: dict[str, str], action: str
    ) -> CallResult:
        """Issue a single request and log its outcome."""
        result = await self._async_get(f"{self._base_url}/scene/{endpoint}", params)
        if result.ok:
            _LOGGER.debug("%s: Success %s", self._name, action)
        else:
            _LOGGER.error(
                "%s: Error while %s: %s (%s)",
                self._name,
                action,
                result.detail,
                result.kind,
            )
        return result

    async def _async_get(self, url: str, params: dict[str, str]) -> CallResult:
        try:
            async with self._session.get(
                url,
                params=params,
                timeout=aiohttp.ClientTimeout(total=REQUEST_TIMEOUT),
            ) as response:
                if response.status >= 400:
                    text = await response.text()
                    return CallResult.failure(
                        "http", f"HTTP {response.status}: {text[:100]}"
                    )
                return CallResult.success(response.status)
        except asyncio.TimeoutError:
            return CallResult.failure(
                "timeout", f"No response within {REQUEST_TIMEOUT} s"
            )
        except aiohttp.ClientError as err:
            return CallResult.failure("connection", str(err) or type(err).__name__)
