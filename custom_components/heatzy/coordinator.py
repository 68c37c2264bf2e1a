"""Coordinator for the Heatzy integration."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

from homeassistant.core import CALLBACK_TYPE, callback
from homeassistant.helpers.event import async_call_later
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from .api import HeatzyApiClientError
from .const import (
    ALWAYS_ON_REVERT_DELAY,
    CAPABILITY_DEROG_BOOST,
    CAPABILITY_DEROG_END,
    CAPABILITY_DEROG_VACATION,
    CAPABILITY_MODE,
    CAPABILITY_ONOFF,
    CONF_ALWAYS_ON,
    CONF_ON_MODE,
    DEFAULT_ON_MODE,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_PREVIOUS_MODE,
    DEROG_MODE_BOOST,
    DEROG_MODE_VACATION,
    DOMAIN,
    MODE_STOP,
)
from .logs import DeviceLoggerAdapter
from .profiles import (
    build_post_data,
    compute_derog_end,
    decode_attrs,
    encode_capability,
    requested_mode,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant

    from .api import HeatzyApiClient, HeatzyBinding
    from .profiles import ProductProfile
    from .storage import HeatzyModeStore

_LOGGER = logging.getLogger(__name__)

ALWAYS_ON_WARNING = "Always on is enabled, the heater cannot be turned off"


class HeatzyDeviceCoordinator(DataUpdateCoordinator[dict[str, Any]]):
    """Coordinator that polls one Heatzy device and applies its changes.

    The data is the mapping of capability values of the device. Polls and
    control calls for the device are serialized by a lock, so a poll never
    overlaps a control call.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        config_entry: ConfigEntry,
        client: HeatzyApiClient,
        binding: HeatzyBinding,
        profile: ProductProfile,
        mode_store: HeatzyModeStore,
    ) -> None:
        """Initialize the coordinator."""
        super().__init__(
            hass,
            _LOGGER,
            config_entry=config_entry,
            name=f"{DOMAIN}_{binding.did}",
            update_interval=timedelta(seconds=DEFAULT_POLL_INTERVAL),
        )
        self.client = client
        self.binding = binding
        self.profile = profile
        self._mode_store = mode_store
        self._log = DeviceLoggerAdapter(_LOGGER, lambda: self.binding.alias)
        self._lock = asyncio.Lock()
        self._revert_unsub: CALLBACK_TYPE | None = None
        self._on_mode_setting: str = config_entry.options.get(
            CONF_ON_MODE, DEFAULT_ON_MODE
        )
        self._always_on: bool = config_entry.options.get(CONF_ALWAYS_ON, False)
        self.warning: str | None = None
        self.data = {}

    @property
    def always_on(self) -> bool:
        """Return True when the heater must never be turned off."""
        return self._always_on

    @property
    def on_mode(self) -> str:
        """Return the mode used when the heater is switched on."""
        if self._on_mode_setting in self.profile.on_modes:
            return self._on_mode_setting
        previous = self._mode_store.get(self.binding.did)
        if previous in self.profile.on_modes:
            return previous
        return DEFAULT_PREVIOUS_MODE

    async def _async_update_data(self) -> dict[str, Any]:
        async with self._lock:
            try:
                attrs = await self.client.async_get_device_data(self.binding.did)
                values = decode_attrs(self.profile, attrs, previous=self.data)
            except HeatzyApiClientError as err:
                self._set_warning(str(err))
                error_msg = f"Error fetching state of {self.binding.alias}: {err}"
                raise UpdateFailed(error_msg) from err

        mode = values.get(CAPABILITY_MODE)
        if mode in self.profile.on_modes:
            self._mode_store.async_set(self.binding.did, mode)
        self.warning = None
        self._log.debug("State: %s", values)
        return {**(self.data or {}), **values}

    async def async_set_capability(self, capability: str, value: Any) -> bool:  # noqa: ANN401
        """Apply a capability change to the device.

        Setting a capability to its current value sends nothing. With the
        always on option, a change that would stop the heater is rejected
        and the displayed value is restored shortly after.

        Returns:
            True if a control call was sent.

        Raises:
            ValueError: If the capability or value is not valid for the device.

        """
        if (self.data or {}).get(capability) == value:
            self._log.debug("%s is already %s", capability, value)
            return False

        on_mode = self.on_mode
        mode = requested_mode(capability, value, on_mode)
        if mode == MODE_STOP and self._always_on:
            self._async_reject_stop()
            return False

        attrs = encode_capability(self.profile, capability, value, on_mode=on_mode)
        post_data = build_post_data(self.profile, attrs)
        if post_data is None:
            self._log.debug("Nothing to send for %s", capability)
            return False

        optimistic = {**(self.data or {}), capability: value}
        if mode is not None:
            optimistic[CAPABILITY_MODE] = mode
            optimistic[CAPABILITY_ONOFF] = mode != MODE_STOP
        elif capability == CAPABILITY_DEROG_BOOST:
            optimistic[CAPABILITY_DEROG_VACATION] = 0
            optimistic[CAPABILITY_DEROG_END] = compute_derog_end(
                DEROG_MODE_BOOST, value
            )
        elif capability == CAPABILITY_DEROG_VACATION:
            optimistic[CAPABILITY_DEROG_BOOST] = 0
            optimistic[CAPABILITY_DEROG_END] = compute_derog_end(
                DEROG_MODE_VACATION, value
            )
        # Cancels the pending poll before the control call goes out
        self.async_set_updated_data(optimistic)

        try:
            async with self._lock:
                await self.client.async_control(self.binding.did, post_data)
        except HeatzyApiClientError as err:
            self._set_warning(str(err))
            self._log.warning("Failed to set %s to %s: %s", capability, value, err)
        else:
            self._log.info("%s set to %s", capability, value)

        await self.async_refresh()
        return True

    async def async_apply_options(self, options: Mapping[str, Any]) -> None:
        """Apply updated entry options to this device."""
        enable_always_on = options.get(CONF_ALWAYS_ON, False) and not self._always_on
        self._on_mode_setting = options.get(CONF_ON_MODE, DEFAULT_ON_MODE)
        self._always_on = options.get(CONF_ALWAYS_ON, False)
        if enable_always_on and (self.data or {}).get(CAPABILITY_ONOFF) is False:
            await self.async_set_capability(CAPABILITY_ONOFF, True)

    async def async_shutdown(self) -> None:
        """Cancel pending timers."""
        self._async_cancel_revert()
        await super().async_shutdown()

    def _set_warning(self, warning: str) -> None:
        self.warning = warning
        self._log.warning("%s", warning)

    @callback
    def _async_reject_stop(self) -> None:
        self._set_warning(ALWAYS_ON_WARNING)
        self._async_cancel_revert()
        self._revert_unsub = async_call_later(
            self.hass, ALWAYS_ON_REVERT_DELAY, self._async_revert
        )

    @callback
    def _async_revert(self, _now: datetime) -> None:
        self._revert_unsub = None
        self.warning = None
        self.async_update_listeners()

    @callback
    def _async_cancel_revert(self) -> None:
        if self._revert_unsub is not None:
            self._revert_unsub()
            self._revert_unsub = None
