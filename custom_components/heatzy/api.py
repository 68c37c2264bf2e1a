"""API client for the Heatzy cloud.

This module provides functions to interact with the Gizwits cloud that
backs Heatzy heaters, including authentication, device discovery, state
polling and control, and the request pipeline that keeps the session alive.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import httpx
from homeassistant.helpers.httpx_client import create_async_httpx_client
from httpx_retries import Retry, RetryTransport

from .const import (
    APPLICATION_ID,
    BASE_URL,
    HEADER_APPLICATION_ID,
    HEADER_USER_TOKEN,
    LOGIN_PATH,
)
from .models import Credentials, LoginData

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from .session import HeatzyTokenManager, RetryGate

_LOGGER = logging.getLogger(__name__)

# HTTP status codes
HTTP_BAD_REQUEST = 400
HTTP_UNAUTHORIZED = 401
HTTP_SERVER_ERROR = 500

REDACTED = "**REDACTED**"


class HeatzyApiClientError(Exception):
    """Base exception for Heatzy API client errors."""


class HeatzyApiAuthError(HeatzyApiClientError):
    """Exception raised when the cloud rejects the account credentials."""


class HeatzyApiStaleTokenError(HeatzyApiClientError):
    """Exception raised when the cloud rejects the session token."""


class HeatzyApiConnectionError(HeatzyApiClientError):
    """Exception raised when the cloud cannot be reached."""


class HeatzyApiPayloadError(HeatzyApiClientError):
    """Exception raised when the cloud answers with an unexpected payload."""


@dataclass(frozen=True)
class HeatzyBinding:
    """Represents a Heatzy device bound to the account.

    Attributes:
        did: Unique device identifier.
        alias: Human-readable device name.
        product_key: Gizwits product key, identifies the hardware generation.
        product_name: Gizwits product name.

    """

    did: str
    alias: str
    product_key: str
    product_name: str


def create_headers(token: str | None = None) -> dict[str, str]:
    """Create HTTP headers for Heatzy API requests.

    Args:
        token: Optional session token to include in headers.

    Returns:
        Dictionary containing HTTP headers for API requests.

    """
    headers = {
        "accept": "application/json",
        "content-type": "application/json",
        HEADER_APPLICATION_ID: APPLICATION_ID,
    }
    if token:
        headers[HEADER_USER_TOKEN] = token
    return headers


def is_http_error(status: int) -> bool:
    """Check if HTTP status code indicates an error."""
    return status >= HTTP_BAD_REQUEST


def is_stale_token_error(status: int) -> bool:
    """Check if HTTP status code may indicate a rejected session token.

    The Gizwits cloud answers 400 for invalid or expired tokens.
    """
    return status in (HTTP_BAD_REQUEST, HTTP_UNAUTHORIZED)


def extract_error_message(data: Any, fallback: str) -> str:  # noqa: ANN401
    """Extract the most specific error message from an API payload.

    Args:
        data: Decoded response body, of any shape.
        fallback: Message used when the payload carries none.

    Returns:
        ``detail_message`` if present, else ``error_message``, else fallback.

    """
    if isinstance(data, dict):
        message = data.get("detail_message") or data.get("error_message")
        if message:
            return str(message)
    return fallback


def _parse_json(response: httpx.Response) -> Any:  # noqa: ANN401
    try:
        return response.json()
    except ValueError:
        return None


def validate_response(
    response: httpx.Response,
    *,
    login: bool = False,
) -> dict[str, Any]:
    """Validate HTTP response and return parsed JSON data.

    Args:
        response: HTTP response object to validate.
        login: Whether the response answers a login request.

    Returns:
        Parsed JSON data from response.

    Raises:
        HeatzyApiAuthError: If the login request was rejected.
        HeatzyApiStaleTokenError: If the session token was rejected.
        HeatzyApiPayloadError: If the body is not a JSON object.
        HeatzyApiClientError: If any other API error is detected.

    """
    data = _parse_json(response)
    status = response.status_code

    if is_http_error(status):
        message = extract_error_message(data, f"Request failed: {status}")
        if login and status < HTTP_SERVER_ERROR:
            raise HeatzyApiAuthError(message)
        if not login and is_stale_token_error(status):
            raise HeatzyApiStaleTokenError(message)
        raise HeatzyApiClientError(message)

    if not isinstance(data, dict):
        payload_error = f"Unexpected response payload: {response.text!r}"
        raise HeatzyApiPayloadError(payload_error)

    if data.get("error_message") or data.get("detail_message"):
        message = extract_error_message(data, "Unknown API error")
        if login:
            raise HeatzyApiAuthError(message)
        raise HeatzyApiClientError(message)

    return data


def extract_login_data(data: dict[str, Any]) -> LoginData:
    """Extract token and expiry from a login response."""
    try:
        return LoginData(token=str(data["token"]), expire_at=int(data["expire_at"]))
    except (KeyError, TypeError, ValueError) as err:
        error_msg = f"Malformed login response: {err}"
        raise HeatzyApiPayloadError(error_msg) from err


def extract_bindings(data: dict[str, Any]) -> list[HeatzyBinding]:
    """Extract the bound device list from a bindings response."""
    try:
        return [
            HeatzyBinding(
                did=device["did"],
                alias=device.get("dev_alias") or device["did"],
                product_key=device.get("product_key", ""),
                product_name=device.get("product_name", ""),
            )
            for device in data.get("devices", [])
        ]
    except (KeyError, TypeError, AttributeError) as err:
        error_msg = f"Malformed bindings response: {err}"
        raise HeatzyApiPayloadError(error_msg) from err


def extract_device_attrs(data: dict[str, Any]) -> dict[str, Any]:
    """Extract the attribute mapping from a latest device data response."""
    attrs = data.get("attr")
    if not isinstance(attrs, dict):
        error_msg = f"Malformed device data response: {data!r}"
        raise HeatzyApiPayloadError(error_msg)
    return attrs


def redact_body(body: dict[str, Any] | None) -> dict[str, Any] | None:
    """Return a copy of a request body safe to write to the logs."""
    if body is None or "password" not in body:
        return body
    return {**body, "password": REDACTED}


def create_session_client(hass: HomeAssistant) -> httpx.AsyncClient:
    """Create HTTP client with retry logic for the Heatzy API.

    Args:
        hass: Home Assistant instance.

    Returns:
        Configured httpx AsyncClient with retry transport.

    """
    base_client = create_async_httpx_client(hass, timeout=10.0)
    retry = Retry(total=3, backoff_factor=0.5)
    base_client._transport = RetryTransport(  # noqa: SLF001
        transport=base_client._transport,  # noqa: SLF001
        retry=retry,
    )
    return base_client


async def async_post_login(
    session: httpx.AsyncClient,
    credentials: Credentials,
) -> LoginData:
    """Authenticate with the Heatzy API using username and password.

    The login call bypasses the session pipeline: it never carries a
    user token and is never retried.

    Args:
        session: HTTP client session.
        credentials: Account credentials.

    Returns:
        The new session token and its expiry.

    Raises:
        HeatzyApiAuthError: If the credentials are rejected.
        HeatzyApiConnectionError: If the cloud cannot be reached.
        HeatzyApiClientError: If API request fails.

    """
    url = f"{BASE_URL}{LOGIN_PATH}"
    payload = {"username": credentials.username, "password": credentials.password}

    _LOGGER.debug("Sending request: POST %s %s", LOGIN_PATH, redact_body(payload))
    try:
        response = await session.post(url, headers=create_headers(), json=payload)
    except httpx.RequestError as err:
        message = str(err) or type(err).__name__
        _LOGGER.warning("Login request failed: %s", message)
        raise HeatzyApiConnectionError(message) from err

    _LOGGER.debug(
        "Received response: POST %s %s", LOGIN_PATH, response.status_code
    )
    data = validate_response(response, login=True)
    login_data = extract_login_data(data)
    _LOGGER.debug("Successfully authenticated with Heatzy API")
    return login_data


class HeatzyApiClient:
    """Session-aware client for the non-login Heatzy endpoints.

    Every call goes through the same pipeline: make sure the token is fresh,
    inject the headers, log the exchange and normalise errors. A rejected
    token triggers at most one login-and-replay per retry gate cooldown.
    """

    def __init__(
        self,
        session: httpx.AsyncClient,
        token_manager: HeatzyTokenManager,
        retry_gate: RetryGate,
        logger: logging.Logger | logging.LoggerAdapter = _LOGGER,
    ) -> None:
        """Initialize the client.

        Args:
            session: HTTP client session.
            token_manager: Owner of the credentials and session token.
            retry_gate: Gate bounding automatic re-authentication.
            logger: Logger used for request and response traces.

        """
        self._session = session
        self._token_manager = token_manager
        self._retry_gate = retry_gate
        self._logger = logger

    async def async_get_bindings(self) -> list[HeatzyBinding]:
        """Fetch the devices bound to the account."""
        data = await self._async_request("GET", "/bindings")
        bindings = extract_bindings(data)
        self._logger.debug("Retrieved %d devices from Heatzy API", len(bindings))
        return bindings

    async def async_get_device_data(self, did: str) -> dict[str, Any]:
        """Fetch the latest attribute mapping reported by a device."""
        data = await self._async_request("GET", f"/devdata/{did}/latest")
        return extract_device_attrs(data)

    async def async_control(
        self,
        did: str,
        post_data: dict[str, Any],
    ) -> dict[str, Any]:
        """Send a control payload to a device."""
        return await self._async_request("POST", f"/control/{did}", post_data)

    async def _async_request(
        self,
        method: str,
        path: str,
        body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        try:
            return await self._async_send(method, path, body)
        except HeatzyApiStaleTokenError:
            if path == LOGIN_PATH or not self._retry_gate.is_open:
                raise
            self._retry_gate.close()
            self._logger.info(
                "Session token rejected on %s %s, logging in again", method, path
            )
            if not await self._token_manager.async_apply_login():
                raise
            return await self._async_send(method, path, body)

    async def _async_send(
        self,
        method: str,
        path: str,
        body: dict[str, Any] | None,
    ) -> dict[str, Any]:
        token = None
        if path != LOGIN_PATH:
            await self._token_manager.async_ensure_fresh_token()
            token = self._token_manager.token

        headers = create_headers(token)
        self._logger.debug("Sending request: %s %s %s", method, path, body or "")
        try:
            response = await self._session.request(
                method,
                f"{BASE_URL}{path}",
                headers=headers,
                json=body,
            )
        except httpx.RequestError as err:
            message = str(err) or type(err).__name__
            self._logger.warning("Error in request: %s %s %s", method, path, message)
            raise HeatzyApiConnectionError(message) from err

        self._logger.debug(
            "Received response: %s %s %s", method, path, response.text
        )
        try:
            return validate_response(response)
        except HeatzyApiClientError as err:
            self._logger.warning("Error in response: %s %s %s", method, path, err)
            raise
