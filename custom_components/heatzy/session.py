"""Session management for the Heatzy integration.

This module owns the account credentials and the session token: it logs
in, persists the result, renews the token ahead of its expiry and bounds
automatic re-authentication through a retry gate.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from functools import partial
from typing import TYPE_CHECKING, Any, Protocol

from homeassistant.const import CONF_PASSWORD, CONF_USERNAME
from homeassistant.core import CALLBACK_TYPE, callback
from homeassistant.helpers.event import async_call_later

from . import api
from .const import (
    CONF_EXPIRE_AT,
    CONF_TOKEN,
    MAX_TIMER_DURATION,
    REFRESH_LEAD_TIME,
    RETRY_COOLDOWN,
)
from .models import Credentials, LoginData

if TYPE_CHECKING:
    import httpx
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant

_LOGGER = logging.getLogger(__name__)


class SettingStore(Protocol):
    """Durable key-value store holding credentials and session state."""

    def get(self, key: str) -> Any: ...  # noqa: ANN401, D102

    def update(self, values: dict[str, Any]) -> None: ...  # noqa: D102


class ConfigEntrySettingStore:
    """Setting store backed by the data of a config entry."""

    def __init__(self, hass: HomeAssistant, config_entry: ConfigEntry) -> None:
        self._hass = hass
        self._config_entry = config_entry

    def get(self, key: str) -> Any:  # noqa: ANN401
        """Return a persisted value, None when unset."""
        return self._config_entry.data.get(key)

    def update(self, values: dict[str, Any]) -> None:
        """Persist several values at once."""
        self._hass.config_entries.async_update_entry(
            self._config_entry,
            data={**self._config_entry.data, **values},
        )


class RetryGate:
    """Allow at most one automatic re-authentication per cooldown window."""

    def __init__(
        self,
        hass: HomeAssistant,
        cooldown: timedelta = RETRY_COOLDOWN,
    ) -> None:
        self._hass = hass
        self._cooldown = cooldown
        self._is_open = True
        self._reopen_unsub: CALLBACK_TYPE | None = None

    @property
    def is_open(self) -> bool:
        """Return True when an automatic retry is allowed."""
        return self._is_open

    @callback
    def close(self) -> None:
        """Close the gate until the cooldown elapses."""
        self._is_open = False
        self.async_cancel()
        self._reopen_unsub = async_call_later(
            self._hass, self._cooldown, self._async_reopen
        )
        _LOGGER.debug(
            "Automatic re-authentication paused for %s", self._cooldown
        )

    @callback
    def async_cancel(self) -> None:
        """Cancel the pending reopen timer."""
        if self._reopen_unsub is not None:
            self._reopen_unsub()
            self._reopen_unsub = None

    @callback
    def _async_reopen(self, _now: datetime) -> None:
        self._reopen_unsub = None
        self._is_open = True


class HeatzyTokenManager:
    """Manage the Heatzy session token with proactive renewal."""

    def __init__(
        self,
        hass: HomeAssistant,
        session: httpx.AsyncClient,
        settings: SettingStore,
        *,
        refresh_lead_time: timedelta = REFRESH_LEAD_TIME,
        max_timer_duration: timedelta = MAX_TIMER_DURATION,
    ) -> None:
        """Initialize the token manager.

        Args:
            hass: Home Assistant instance.
            session: HTTP client session used for login calls.
            settings: Durable store for credentials and token.
            refresh_lead_time: How long before expiry the token is renewed.
            max_timer_duration: Longest delay a single timer may be armed for.

        """
        self._hass = hass
        self._session = session
        self._settings = settings
        self._refresh_lead_time = refresh_lead_time
        self._max_timer_duration = max_timer_duration
        self._refresh_unsub: CALLBACK_TYPE | None = None

    @property
    def credentials(self) -> Credentials | None:
        """Return the persisted credentials, None when incomplete."""
        username = self._settings.get(CONF_USERNAME)
        password = self._settings.get(CONF_PASSWORD)
        if not username or not password:
            return None
        return Credentials(username=username, password=password)

    @property
    def token(self) -> str | None:
        """Return the current session token."""
        return self._settings.get(CONF_TOKEN) or None

    @property
    def expire_at(self) -> datetime | None:
        """Return the expiry of the current session token."""
        expire_at = self._settings.get(CONF_EXPIRE_AT)
        if not expire_at:
            return None
        return datetime.fromtimestamp(expire_at, tz=UTC)

    @property
    def refresh_scheduled(self) -> bool:
        """Return True when a refresh timer is armed."""
        return self._refresh_unsub is not None

    def is_token_valid(self) -> bool:
        """Return True when a token is present and not expired."""
        expire_at = self.expire_at
        return (
            self.token is not None
            and expire_at is not None
            and expire_at > datetime.now(UTC)
        )

    async def async_login(self, credentials: Credentials) -> LoginData:
        """Log in, persist the session and re-arm the refresh timer.

        Raises:
            HeatzyApiAuthError: If the credentials are rejected.
            HeatzyApiConnectionError: If the vendor cannot be reached. This is
                not an auth error, so a network outage never triggers a reauth.
            HeatzyApiClientError: If the login request fails otherwise.

        """
        login_data = await api.async_post_login(self._session, credentials)
        self._settings.update(
            {
                CONF_USERNAME: credentials.username,
                CONF_PASSWORD: credentials.password,
                CONF_TOKEN: login_data.token,
                CONF_EXPIRE_AT: login_data.expire_at,
            }
        )
        _LOGGER.info(
            "Logged in to Heatzy as %s, session valid until %s",
            credentials.username,
            login_data.expires.isoformat(),
        )
        self.async_schedule_refresh(allow_immediate=False)
        return login_data

    async def async_apply_login(
        self,
        credentials: Credentials | None = None,
        *,
        raise_on_error: bool = False,
    ) -> bool:
        """Log in with the given or the persisted credentials.

        Returns:
            True if the login succeeded, False otherwise.

        """
        credentials = credentials or self.credentials
        if credentials is None:
            _LOGGER.debug("No stored credentials, skipping login")
            return False
        try:
            await self.async_login(credentials)
        except api.HeatzyApiClientError as err:
            if raise_on_error:
                raise
            _LOGGER.warning("Login with stored credentials failed: %s", err)
            return False
        return True

    async def async_ensure_fresh_token(self) -> bool:
        """Log in again when the token is missing or expired.

        Returns:
            True if a usable token is present afterwards.

        """
        if self.is_token_valid():
            return True
        _LOGGER.debug("Session token missing or expired, logging in")
        return await self.async_apply_login()

    @callback
    def async_schedule_refresh(self, *, allow_immediate: bool = True) -> None:
        """Arm the refresh timer for the current token.

        The refresh is due ``refresh_lead_time`` before expiry. Delays longer
        than ``max_timer_duration`` are split: the timer re-arms itself until
        the remaining delay fits in one chunk.

        Args:
            allow_immediate: Refresh right away when the token is already due.
                Disabled right after a login so that a short-lived token
                cannot trigger a login loop; the refresh then waits for the
                token's own expiry.

        """
        self.async_clear_refresh()
        expire_at = self.expire_at
        if expire_at is None:
            return

        now = datetime.now(UTC)
        remaining = expire_at - self._refresh_lead_time - now
        if remaining <= timedelta(0):
            if allow_immediate:
                _LOGGER.debug("Session token due for renewal, logging in now")
                self._hass.async_create_task(self.async_apply_login())
                return
            remaining = max(expire_at - now, timedelta(0))

        delay = min(remaining, self._max_timer_duration)
        chunked = delay < remaining
        self._refresh_unsub = async_call_later(
            self._hass,
            delay,
            partial(self._async_handle_refresh_timer, chunked),
        )
        _LOGGER.debug("Next session refresh check in %s", delay)

    @callback
    def async_clear_refresh(self) -> None:
        """Cancel the pending refresh timer."""
        if self._refresh_unsub is not None:
            self._refresh_unsub()
            self._refresh_unsub = None

    @callback
    def _async_handle_refresh_timer(self, chunked: bool, _now: datetime) -> None:  # noqa: FBT001
        self._refresh_unsub = None
        if chunked:
            self.async_schedule_refresh()
            return
        self._hass.async_create_task(self.async_apply_login())
