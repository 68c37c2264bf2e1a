from __future__ import annotations

import logging

from homeassistant.components import persistent_notification
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import Platform
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import ConfigEntryAuthFailed, ConfigEntryNotReady
from homeassistant.loader import async_get_integration

from . import api
from .api import HeatzyApiClient, create_session_client
from .const import CHANGELOG, CONF_NOTIFIED_VERSION, DOMAIN
from .coordinator import HeatzyDeviceCoordinator
from .profiles import get_profile
from .session import ConfigEntrySettingStore, HeatzyTokenManager, RetryGate
from .storage import HeatzyModeStore

_LOGGER = logging.getLogger(__name__)

PLATFORMS = [Platform.CLIMATE, Platform.NUMBER, Platform.SENSOR, Platform.SWITCH]


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    _LOGGER.info("Setting up Heatzy integration for entry %s", entry.entry_id)

    session = create_session_client(hass)
    settings = ConfigEntrySettingStore(hass, entry)
    token_manager = HeatzyTokenManager(hass, session, settings)
    retry_gate = RetryGate(hass)
    client = HeatzyApiClient(session, token_manager, retry_gate)

    credentials = token_manager.credentials
    if credentials is None:
        _LOGGER.error("Missing credentials in configuration for entry %s", entry.entry_id)
        return False

    try:
        if not token_manager.is_token_valid():
            await token_manager.async_login(credentials)
        _LOGGER.debug("Fetching bound devices from Heatzy API")
        bindings = await client.async_get_bindings()
        _LOGGER.info("Successfully retrieved %d devices from Heatzy API", len(bindings))
    except api.HeatzyApiAuthError as err:
        _LOGGER.warning("Authentication failed for entry %s: %s", entry.entry_id, err)
        await _async_release(token_manager, retry_gate, {})
        raise ConfigEntryAuthFailed(str(err)) from err
    except api.HeatzyApiConnectionError as err:
        _LOGGER.warning("Connection error for entry %s: %s", entry.entry_id, err)
        await _async_release(token_manager, retry_gate, {})
        raise ConfigEntryNotReady(str(err)) from err
    except api.HeatzyApiClientError as err:
        _LOGGER.error("API client error for entry %s: %s", entry.entry_id, err)
        await _async_release(token_manager, retry_gate, {})
        return False

    token_manager.async_schedule_refresh()

    mode_store = HeatzyModeStore(hass, entry.entry_id)
    await mode_store.async_load()

    coordinators: dict[str, HeatzyDeviceCoordinator] = {}
    for binding in bindings:
        profile = get_profile(binding.product_key, binding.product_name)
        coordinator = HeatzyDeviceCoordinator(
            hass, entry, client, binding, profile, mode_store
        )
        # A failing device keeps polling and must not block the others
        await coordinator.async_refresh()
        coordinators[binding.did] = coordinator
        _LOGGER.debug("Set up %s as %s", binding.alias, profile.name)

    hass.data.setdefault(DOMAIN, {})[entry.entry_id] = {
        "session": session,
        "client": client,
        "token_manager": token_manager,
        "retry_gate": retry_gate,
        "devices": bindings,
        "coordinators": coordinators,
    }

    await _async_notify_changelog(hass, settings)
    entry.async_on_unload(entry.add_update_listener(_async_update_listener))

    try:
        await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
        _LOGGER.info("Successfully setup Heatzy integration for entry %s", entry.entry_id)
        return True
    except Exception as err:
        _LOGGER.error("Failed to setup platforms for entry %s: %s", entry.entry_id, err)
        hass.data[DOMAIN].pop(entry.entry_id, None)
        await _async_release(token_manager, retry_gate, coordinators)
        return False


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    _LOGGER.info("Unloading Heatzy integration for entry %s", entry.entry_id)

    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if not unload_ok:
        _LOGGER.warning("Failed to unload some platforms for entry %s", entry.entry_id)
        return False

    entry_data = hass.data.get(DOMAIN, {}).pop(entry.entry_id, None)
    if entry_data is not None:
        await _async_release(
            entry_data["token_manager"],
            entry_data["retry_gate"],
            entry_data["coordinators"],
        )
        _LOGGER.debug("Cleaned up data for entry %s", entry.entry_id)

    _LOGGER.info("Successfully unloaded Heatzy integration for entry %s", entry.entry_id)
    return True


async def async_remove_entry(hass: HomeAssistant, entry: ConfigEntry) -> None:
    await HeatzyModeStore(hass, entry.entry_id).async_remove()


async def _async_update_listener(hass: HomeAssistant, entry: ConfigEntry) -> None:
    entry_data = hass.data.get(DOMAIN, {}).get(entry.entry_id)
    if entry_data is None:
        return
    for coordinator in entry_data["coordinators"].values():
        await coordinator.async_apply_options(entry.options)


async def _async_notify_changelog(
    hass: HomeAssistant, settings: ConfigEntrySettingStore
) -> None:
    integration = await async_get_integration(hass, DOMAIN)
    version = str(integration.version) if integration.version else None
    if version is None or settings.get(CONF_NOTIFIED_VERSION) == version:
        return

    if message := CHANGELOG.get(version):
        persistent_notification.async_create(
            hass,
            message,
            title=f"Heatzy {version}",
            notification_id=f"{DOMAIN}_changelog",
        )
    settings.update({CONF_NOTIFIED_VERSION: version})


async def _async_release(
    token_manager: HeatzyTokenManager,
    retry_gate: RetryGate,
    coordinators: dict[str, HeatzyDeviceCoordinator],
) -> None:
    """Cancel the timers of an entry and stop polling its devices."""
    token_manager.async_clear_refresh()
    retry_gate.async_cancel()
    for coordinator in coordinators.values():
        await coordinator.async_shutdown()
