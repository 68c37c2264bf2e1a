"""Pytest configuration and fixtures for Heatzy tests."""

from datetime import UTC, datetime, timedelta
from typing import Any
from unittest.mock import Mock

import pytest
from homeassistant.const import CONF_PASSWORD, CONF_USERNAME

from custom_components.heatzy.const import CONF_EXPIRE_AT, CONF_TOKEN

TEST_USERNAME = "user@example.com"
TEST_PASSWORD = "password123"
TEST_TOKEN = "stored_token"
NEW_TOKEN = "new_token"


class DictSettingStore:
    """In-memory setting store."""

    def __init__(self, values: dict[str, Any] | None = None) -> None:
        self.values: dict[str, Any] = dict(values or {})

    def get(self, key: str) -> Any:  # noqa: ANN401
        return self.values.get(key)

    def update(self, values: dict[str, Any]) -> None:
        self.values.update(values)


def _close_coroutine(coro: Any, *args: Any, **kwargs: Any) -> Mock:  # noqa: ANN401
    coro.close()
    return Mock()


@pytest.fixture
def mock_hass() -> Mock:
    """Create a mock Home Assistant instance."""
    hass = Mock()
    hass.data = {}
    hass.config_entries = Mock()
    hass.config_entries.async_update_entry = Mock()
    hass.async_create_task = Mock(side_effect=_close_coroutine)
    return hass


@pytest.fixture
def future_expire_at() -> int:
    """Expiry timestamp one week from now."""
    return int((datetime.now(UTC) + timedelta(days=7)).timestamp())


@pytest.fixture
def stored_settings(future_expire_at: int) -> dict[str, Any]:
    """Persisted settings of a logged in account."""
    return {
        CONF_USERNAME: TEST_USERNAME,
        CONF_PASSWORD: TEST_PASSWORD,
        CONF_TOKEN: TEST_TOKEN,
        CONF_EXPIRE_AT: future_expire_at,
    }


@pytest.fixture
def settings(stored_settings: dict[str, Any]) -> DictSettingStore:
    """Setting store holding a valid session."""
    return DictSettingStore(stored_settings)


@pytest.fixture
def empty_settings() -> DictSettingStore:
    """Setting store without credentials nor session."""
    return DictSettingStore()


@pytest.fixture
def sample_login_response(future_expire_at: int) -> dict[str, Any]:
    """Fixture providing a sample login API response."""
    return {
        "token": NEW_TOKEN,
        "expire_at": future_expire_at,
        "uid": "user_id",
    }


@pytest.fixture
def sample_bindings_response() -> dict[str, Any]:
    """Fixture providing a sample bindings API response."""
    return {
        "devices": [
            {
                "dev_alias": "Living room",
                "did": "did1",
                "product_key": "9420ae048da545c88fc6274d204dd25f",
                "product_name": "Heatzy",
            },
            {
                "dev_alias": "Bedroom",
                "did": "did2",
                "product_key": "2fd622e45283470f9e27e8e6167d7533",
                "product_name": "Glow",
            },
        ],
    }


@pytest.fixture
def sample_device_data_response() -> dict[str, Any]:
    """Fixture providing a sample latest device data API response."""
    return {
        "did": "did2",
        "updated_at": 1700000000,
        "attr": {
            "mode": "eco",
            "lock_switch": 0,
            "timer_switch": 1,
            "derog_mode": 0,
            "derog_time": 0,
            "cft_tempL": 195,
            "cft_tempH": 170,
        },
    }
