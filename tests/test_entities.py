"""Tests for the Heatzy switch, number and sensor entities."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, Mock

import pytest

from custom_components.heatzy import number, sensor, switch
from custom_components.heatzy.api import HeatzyBinding
from custom_components.heatzy.const import (
    CAPABILITY_DEROG_BOOST,
    CAPABILITY_DEROG_END,
    CAPABILITY_DEROG_VACATION,
    CAPABILITY_LOCKED,
    CAPABILITY_TARGET_TEMPERATURE_COMPLEMENT,
    CAPABILITY_TIMER,
    DOMAIN,
)
from custom_components.heatzy.number import NUMBER_DESCRIPTIONS, HeatzyNumberEntity
from custom_components.heatzy.profiles import FIRST_GEN, GLOW, PILOTE, ProductProfile
from custom_components.heatzy.sensor import DEROG_END_DESCRIPTION, HeatzyDerogEndSensor
from custom_components.heatzy.switch import SWITCH_DESCRIPTIONS, HeatzySwitchEntity


def _mock_coordinator(
    profile: ProductProfile, did: str = "did1", data: dict | None = None
) -> Mock:
    coordinator = Mock()
    coordinator.binding = HeatzyBinding(
        did=did, alias="Bedroom", product_key="key", product_name=""
    )
    coordinator.profile = profile
    coordinator.data = data if data is not None else {}
    coordinator.async_add_listener = Mock(return_value=Mock())
    coordinator.async_set_capability = AsyncMock(return_value=True)
    return coordinator


def _description(descriptions: tuple, key: str):  # noqa: ANN202
    return next(description for description in descriptions if description.key == key)


async def _setup(platform, coordinators: list[Mock]) -> list:  # noqa: ANN001
    hass = Mock()
    entry = Mock()
    entry.entry_id = "entry1"
    hass.data = {
        DOMAIN: {
            "entry1": {
                "coordinators": {
                    coordinator.binding.did: coordinator for coordinator in coordinators
                }
            }
        }
    }
    async_add_entities = Mock()
    await platform.async_setup_entry(hass, entry, async_add_entities)
    return list(async_add_entities.call_args[0][0])


class TestPlatformSetup:
    """Tests that entities follow the device capabilities."""

    @pytest.mark.asyncio
    async def test_first_generation_has_no_extra_entities(self) -> None:
        """Test that first generation heaters only get a climate entity."""
        coordinators = [_mock_coordinator(FIRST_GEN)]
        assert await _setup(switch, coordinators) == []
        assert await _setup(number, coordinators) == []
        assert await _setup(sensor, coordinators) == []

    @pytest.mark.asyncio
    async def test_pilote_entities(self) -> None:
        """Test the entities of a Pilote heater."""
        coordinators = [_mock_coordinator(PILOTE)]
        switches = await _setup(switch, coordinators)
        numbers = await _setup(number, coordinators)
        sensors = await _setup(sensor, coordinators)
        assert {entity.unique_id for entity in switches} == {
            f"did1_{CAPABILITY_LOCKED}",
            f"did1_{CAPABILITY_TIMER}",
        }
        assert {entity.unique_id for entity in numbers} == {
            f"did1_{CAPABILITY_DEROG_BOOST}",
            f"did1_{CAPABILITY_DEROG_VACATION}",
        }
        assert [entity.unique_id for entity in sensors] == [
            f"did1_{CAPABILITY_DEROG_END}"
        ]

    @pytest.mark.asyncio
    async def test_glow_exposes_secondary_temperature(self) -> None:
        """Test that Glow heaters get the secondary temperature number."""
        numbers = await _setup(number, [_mock_coordinator(GLOW, did="did2")])
        assert f"did2_{CAPABILITY_TARGET_TEMPERATURE_COMPLEMENT}" in {
            entity.unique_id for entity in numbers
        }


class TestHeatzySwitchEntity:
    """Tests for HeatzySwitchEntity."""

    def test_is_on(self) -> None:
        """Test that the switch reflects the capability."""
        coordinator = _mock_coordinator(PILOTE, data={CAPABILITY_LOCKED: True})
        entity = HeatzySwitchEntity(
            coordinator, _description(SWITCH_DESCRIPTIONS, CAPABILITY_LOCKED)
        )
        assert entity.is_on is True

    @pytest.mark.asyncio
    async def test_turn_on_and_off(self) -> None:
        """Test that the switch sets the capability."""
        coordinator = _mock_coordinator(PILOTE)
        entity = HeatzySwitchEntity(
            coordinator, _description(SWITCH_DESCRIPTIONS, CAPABILITY_TIMER)
        )
        await entity.async_turn_on()
        coordinator.async_set_capability.assert_awaited_with(CAPABILITY_TIMER, True)
        await entity.async_turn_off()
        coordinator.async_set_capability.assert_awaited_with(CAPABILITY_TIMER, False)


class TestHeatzyNumberEntity:
    """Tests for HeatzyNumberEntity."""

    @pytest.mark.asyncio
    async def test_durations_are_integers(self) -> None:
        """Test that derogation durations are sent as integers."""
        coordinator = _mock_coordinator(PILOTE, data={CAPABILITY_DEROG_BOOST: 0})
        entity = HeatzyNumberEntity(
            coordinator, _description(NUMBER_DESCRIPTIONS, CAPABILITY_DEROG_BOOST)
        )
        assert entity.native_value == 0
        await entity.async_set_native_value(30.0)
        coordinator.async_set_capability.assert_awaited_once_with(
            CAPABILITY_DEROG_BOOST, 30
        )
        assert isinstance(coordinator.async_set_capability.call_args[0][1], int)

    @pytest.mark.asyncio
    async def test_temperature_keeps_decimals(self) -> None:
        """Test that the secondary temperature keeps its half degrees."""
        coordinator = _mock_coordinator(GLOW)
        entity = HeatzyNumberEntity(
            coordinator,
            _description(NUMBER_DESCRIPTIONS, CAPABILITY_TARGET_TEMPERATURE_COMPLEMENT),
        )
        await entity.async_set_native_value(16.5)
        coordinator.async_set_capability.assert_awaited_once_with(
            CAPABILITY_TARGET_TEMPERATURE_COMPLEMENT, 16.5
        )


class TestHeatzyDerogEndSensor:
    """Tests for HeatzyDerogEndSensor."""

    def test_native_value(self) -> None:
        """Test that the sensor reports the derogation end."""
        end = datetime(2026, 1, 1, 12, 30, tzinfo=UTC)
        coordinator = _mock_coordinator(PILOTE, data={CAPABILITY_DEROG_END: end})
        entity = HeatzyDerogEndSensor(coordinator, DEROG_END_DESCRIPTION)
        assert entity.native_value == end

    def test_no_derogation(self) -> None:
        """Test that the sensor is empty without derogation."""
        coordinator = _mock_coordinator(PILOTE, data={CAPABILITY_DEROG_END: None})
        entity = HeatzyDerogEndSensor(coordinator, DEROG_END_DESCRIPTION)
        assert entity.native_value is None
