"""Persistence of the last active mode of each Heatzy device."""

from __future__ import annotations

from typing import TYPE_CHECKING

from homeassistant.core import callback
from homeassistant.helpers.storage import Store

from .const import DEFAULT_PREVIOUS_MODE, DOMAIN

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

STORAGE_VERSION = 1
SAVE_DELAY = 10


class HeatzyModeStore:
    """Remember the last non-stop mode of each device across restarts."""

    def __init__(self, hass: HomeAssistant, entry_id: str) -> None:
        self._store: Store[dict[str, str]] = Store(
            hass, STORAGE_VERSION, f"{DOMAIN}.{entry_id}.previous_modes"
        )
        self._modes: dict[str, str] = {}

    async def async_load(self) -> None:
        """Load the remembered modes from disk."""
        self._modes = dict(await self._store.async_load() or {})

    def get(self, did: str) -> str:
        """Return the remembered mode of a device."""
        return self._modes.get(did, DEFAULT_PREVIOUS_MODE)

    @callback
    def async_set(self, did: str, mode: str) -> None:
        """Remember a mode, saving to disk shortly after."""
        if self._modes.get(did) == mode:
            return
        self._modes[did] = mode
        self._store.async_delay_save(lambda: dict(self._modes), SAVE_DELAY)

    async def async_remove(self) -> None:
        """Delete the stored modes."""
        await self._store.async_remove()
