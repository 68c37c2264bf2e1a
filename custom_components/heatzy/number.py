"""Number entities for Heatzy heaters.

Boost and vacation derogations are set as durations; a zero duration
cancels the derogation. Glow heaters also expose their secondary
temperature here.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from homeassistant.components.number import (
    NumberDeviceClass,
    NumberEntity,
    NumberEntityDescription,
    NumberMode,
)
from homeassistant.const import UnitOfTemperature, UnitOfTime

from .const import (
    CAPABILITY_DEROG_BOOST,
    CAPABILITY_DEROG_VACATION,
    CAPABILITY_TARGET_TEMPERATURE_COMPLEMENT,
    DOMAIN,
)
from .entity import HeatzyEntity

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.entity_platform import AddEntitiesCallback

    from .coordinator import HeatzyDeviceCoordinator

NUMBER_DESCRIPTIONS = (
    NumberEntityDescription(
        key=CAPABILITY_DEROG_BOOST,
        name="Boost duration",
        icon="mdi:rocket-launch",
        native_min_value=0,
        native_max_value=120,
        native_step=1,
        native_unit_of_measurement=UnitOfTime.MINUTES,
        mode=NumberMode.BOX,
    ),
    NumberEntityDescription(
        key=CAPABILITY_DEROG_VACATION,
        name="Vacation duration",
        icon="mdi:beach",
        native_min_value=0,
        native_max_value=255,
        native_step=1,
        native_unit_of_measurement=UnitOfTime.DAYS,
        mode=NumberMode.BOX,
    ),
    NumberEntityDescription(
        key=CAPABILITY_TARGET_TEMPERATURE_COMPLEMENT,
        name="Secondary target temperature",
        device_class=NumberDeviceClass.TEMPERATURE,
        native_min_value=7,
        native_max_value=30,
        native_step=0.5,
        native_unit_of_measurement=UnitOfTemperature.CELSIUS,
    ),
)

_INTEGER_CAPABILITIES = (CAPABILITY_DEROG_BOOST, CAPABILITY_DEROG_VACATION)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up number entities for Heatzy heaters."""
    coordinators = hass.data[DOMAIN][entry.entry_id]["coordinators"]
    async_add_entities(
        HeatzyNumberEntity(coordinator, description)
        for coordinator in coordinators.values()
        for description in NUMBER_DESCRIPTIONS
        if coordinator.profile.supports(description.key)
    )


class HeatzyNumberEntity(HeatzyEntity, NumberEntity):
    """Number mapped to a numeric capability."""

    def __init__(
        self,
        coordinator: HeatzyDeviceCoordinator,
        description: NumberEntityDescription,
    ) -> None:
        super().__init__(coordinator, description.key)
        self.entity_description = description

    @property
    def native_value(self) -> float | None:
        """Return the capability value."""
        return self._capability(self.entity_description.key)

    async def async_set_native_value(self, value: float) -> None:
        """Set the capability value."""
        key = self.entity_description.key
        await self._async_set_capability(
            key, int(value) if key in _INTEGER_CAPABILITIES else value
        )
