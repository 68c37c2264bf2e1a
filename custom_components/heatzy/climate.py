"""Climate entities for Heatzy heaters.

Each heater is exposed as a climate entity: the HVAC mode carries the
on/off state, the preset carries the pilot wire mode, and Glow heaters
additionally expose their comfort temperature.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from homeassistant.components.climate import (
    ClimateEntity,
    ClimateEntityFeature,
    HVACMode,
)
from homeassistant.components.climate.const import PRESET_COMFORT, PRESET_ECO
from homeassistant.const import ATTR_TEMPERATURE, UnitOfTemperature

from .const import (
    CAPABILITY_MODE,
    CAPABILITY_ONOFF,
    CAPABILITY_TARGET_TEMPERATURE,
    DOMAIN,
)
from .entity import HeatzyEntity

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.entity_platform import AddEntitiesCallback

    from .coordinator import HeatzyDeviceCoordinator


PRESET_FROST_PROTECTION = "frost_protection"
PRESET_COMFORT_1 = "comfort_1"
PRESET_COMFORT_2 = "comfort_2"

PRESET_MODE_MAP = {
    PRESET_COMFORT: "cft",
    PRESET_COMFORT_1: "cft1",
    PRESET_COMFORT_2: "cft2",
    PRESET_ECO: "eco",
    PRESET_FROST_PROTECTION: "fro",
}
PRESET_MODE_REVERSE_MAP = {value: key for key, value in PRESET_MODE_MAP.items()}


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up climate entities for Heatzy heaters."""
    coordinators = hass.data[DOMAIN][entry.entry_id]["coordinators"]
    async_add_entities(
        HeatzyClimateEntity(coordinator) for coordinator in coordinators.values()
    )


class HeatzyClimateEntity(HeatzyEntity, ClimateEntity):
    """Climate entity for a Heatzy heater."""

    _attr_name = None
    _attr_temperature_unit = UnitOfTemperature.CELSIUS
    _attr_target_temperature_step = 0.5
    _attr_min_temp = 7.0
    _attr_max_temp = 30.0
    _attr_hvac_modes = [HVACMode.HEAT, HVACMode.OFF]

    def __init__(self, coordinator: HeatzyDeviceCoordinator) -> None:
        """Initialize the climate entity."""
        super().__init__(coordinator)
        profile = coordinator.profile
        self._attr_preset_modes = [
            PRESET_MODE_REVERSE_MAP[mode]
            for mode in profile.on_modes
            if mode in PRESET_MODE_REVERSE_MAP
        ]
        features = (
            ClimateEntityFeature.PRESET_MODE
            | ClimateEntityFeature.TURN_ON
            | ClimateEntityFeature.TURN_OFF
        )
        if profile.supports(CAPABILITY_TARGET_TEMPERATURE):
            features |= ClimateEntityFeature.TARGET_TEMPERATURE
        self._attr_supported_features = features

    @property
    def hvac_mode(self) -> HVACMode | None:
        """Return the current HVAC mode."""
        onoff = self._capability(CAPABILITY_ONOFF)
        if onoff is None:
            return None
        return HVACMode.HEAT if onoff else HVACMode.OFF

    @property
    def preset_mode(self) -> str | None:
        """Return the current preset, None while stopped."""
        return PRESET_MODE_REVERSE_MAP.get(self._capability(CAPABILITY_MODE))

    @property
    def target_temperature(self) -> float | None:
        """Return the comfort temperature of Glow heaters."""
        return self._capability(CAPABILITY_TARGET_TEMPERATURE)

    @property
    def extra_state_attributes(self) -> dict[str, Any] | None:
        """Expose the last device warning."""
        if self.coordinator.warning is None:
            return None
        return {"warning": self.coordinator.warning}

    async def async_set_hvac_mode(self, hvac_mode: HVACMode) -> None:
        """Set the HVAC mode."""
        await self._async_set_capability(CAPABILITY_ONOFF, hvac_mode != HVACMode.OFF)

    async def async_turn_on(self) -> None:
        """Turn the heater on in its on mode."""
        await self._async_set_capability(CAPABILITY_ONOFF, True)

    async def async_turn_off(self) -> None:
        """Turn the heater off."""
        await self._async_set_capability(CAPABILITY_ONOFF, False)

    async def async_set_preset_mode(self, preset_mode: str) -> None:
        """Set the pilot wire mode."""
        await self._async_set_capability(CAPABILITY_MODE, PRESET_MODE_MAP[preset_mode])

    async def async_set_temperature(self, **kwargs: Any) -> None:  # noqa: ANN401
        """Set the comfort temperature."""
        temperature = kwargs.get(ATTR_TEMPERATURE)
        if temperature is None:
            return
        await self._async_set_capability(CAPABILITY_TARGET_TEMPERATURE, temperature)
