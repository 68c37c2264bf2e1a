"""
Configuration flow for the Heatzy integration.

This module handles the setup, re-authentication and options of the
Heatzy integration through Home Assistant's config flow system.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import voluptuous as vol
from homeassistant.config_entries import (
    ConfigEntry,
    ConfigFlow,
    ConfigFlowResult,
    OptionsFlow,
)
from homeassistant.const import CONF_PASSWORD, CONF_USERNAME
from homeassistant.core import callback
from homeassistant.helpers.httpx_client import get_async_client

from . import api
from .const import (
    CONF_ALWAYS_ON,
    CONF_EXPIRE_AT,
    CONF_ON_MODE,
    CONF_TOKEN,
    DEFAULT_ON_MODE,
    DOMAIN,
    ERROR_API_ERROR,
    ERROR_CANNOT_CONNECT,
    ERROR_INVALID_AUTH,
    ERROR_UNKNOWN,
    ON_MODE_OPTIONS,
)
from .models import Credentials, LoginData

_LOGGER = logging.getLogger(__name__)


class HeatzyConfigFlow(ConfigFlow, domain=DOMAIN):
    """Handle configuration flow for the Heatzy integration."""

    VERSION = 1

    async def _async_try_login(
        self, credentials: Credentials
    ) -> tuple[LoginData | None, dict[str, str]]:
        """
        Log in to validate the credentials.

        Args:
            credentials: Username and password entered by the user.

        Returns:
            The session on success, and the form errors otherwise.

        """
        errors: dict[str, str] = {}
        try:
            session = get_async_client(self.hass)
            login_data = await api.async_post_login(session, credentials)
        except api.HeatzyApiAuthError as err:
            _LOGGER.warning("Authentication failed (%s): %s", ERROR_INVALID_AUTH, err)
            errors["base"] = ERROR_INVALID_AUTH
        except api.HeatzyApiConnectionError:
            _LOGGER.exception("Connection error (%s)", ERROR_CANNOT_CONNECT)
            errors["base"] = ERROR_CANNOT_CONNECT
        except api.HeatzyApiClientError:
            _LOGGER.exception("API client error (%s)", ERROR_API_ERROR)
            errors["base"] = ERROR_API_ERROR
        except Exception:
            _LOGGER.exception(
                "Unexpected error during authentication (%s)",
                ERROR_UNKNOWN,
            )
            errors["base"] = ERROR_UNKNOWN
        else:
            _LOGGER.info("Successfully authenticated with Heatzy API")
            return login_data, errors
        return None, errors

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """
        Handle the initial step of the config flow.

        Args:
            user_input: User input data containing username and password.

        Returns:
            ConfigFlowResult indicating the next step or errors.

        """
        errors: dict[str, str] = {}

        if user_input is not None:
            username = user_input[CONF_USERNAME]
            password = user_input[CONF_PASSWORD]
            login_data, errors = await self._async_try_login(
                Credentials(username=username, password=password)
            )

            if login_data is not None:
                await self.async_set_unique_id(username.lower())
                self._abort_if_unique_id_configured()

                return self.async_create_entry(
                    title=f"Heatzy ({username})",
                    data={
                        CONF_USERNAME: username,
                        CONF_PASSWORD: password,
                        CONF_TOKEN: login_data.token,
                        CONF_EXPIRE_AT: login_data.expire_at,
                    },
                )

        return self.async_show_form(
            step_id="user",
            data_schema=vol.Schema(
                {
                    vol.Required(CONF_USERNAME): str,
                    vol.Required(CONF_PASSWORD): str,
                }
            ),
            errors=errors,
        )

    async def async_step_reauth(
        self, entry_data: Mapping[str, Any]
    ) -> ConfigFlowResult:
        """Start re-authentication after the stored credentials were rejected."""
        return await self.async_step_reauth_confirm()

    async def async_step_reauth_confirm(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Ask for a new password and log in again."""
        errors: dict[str, str] = {}
        reauth_entry = self._get_reauth_entry()
        username = reauth_entry.data[CONF_USERNAME]

        if user_input is not None:
            password = user_input[CONF_PASSWORD]
            login_data, errors = await self._async_try_login(
                Credentials(username=username, password=password)
            )
            if login_data is not None:
                return self.async_update_reload_and_abort(
                    reauth_entry,
                    data_updates={
                        CONF_PASSWORD: password,
                        CONF_TOKEN: login_data.token,
                        CONF_EXPIRE_AT: login_data.expire_at,
                    },
                )

        return self.async_show_form(
            step_id="reauth_confirm",
            data_schema=vol.Schema({vol.Required(CONF_PASSWORD): str}),
            description_placeholders={"username": username},
            errors=errors,
        )

    @staticmethod
    @callback
    def async_get_options_flow(config_entry: ConfigEntry) -> HeatzyOptionsFlow:
        """Return the options flow handler."""
        return HeatzyOptionsFlow()


class HeatzyOptionsFlow(OptionsFlow):
    """Handle the heater behaviour options."""

    async def async_step_init(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Manage the on mode and always on options."""
        if user_input is not None:
            return self.async_create_entry(data=user_input)

        options = self.config_entry.options
        return self.async_show_form(
            step_id="init",
            data_schema=vol.Schema(
                {
                    vol.Required(
                        CONF_ON_MODE,
                        default=options.get(CONF_ON_MODE, DEFAULT_ON_MODE),
                    ): vol.In(ON_MODE_OPTIONS),
                    vol.Required(
                        CONF_ALWAYS_ON,
                        default=options.get(CONF_ALWAYS_ON, False),
                    ): bool,
                }
            ),
        )
