"""Sensor entities for Heatzy heaters."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from homeassistant.components.sensor import (
    SensorDeviceClass,
    SensorEntity,
    SensorEntityDescription,
)

from .const import CAPABILITY_DEROG_END, DOMAIN
from .entity import HeatzyEntity

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.entity_platform import AddEntitiesCallback

    from .coordinator import HeatzyDeviceCoordinator

DEROG_END_DESCRIPTION = SensorEntityDescription(
    key=CAPABILITY_DEROG_END,
    name="Derogation end",
    icon="mdi:timer-sand",
    device_class=SensorDeviceClass.TIMESTAMP,
)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up sensor entities for Heatzy heaters."""
    coordinators = hass.data[DOMAIN][entry.entry_id]["coordinators"]
    async_add_entities(
        HeatzyDerogEndSensor(coordinator, DEROG_END_DESCRIPTION)
        for coordinator in coordinators.values()
        if coordinator.profile.supports(CAPABILITY_DEROG_END)
    )


class HeatzyDerogEndSensor(HeatzyEntity, SensorEntity):
    """End of the active boost or vacation derogation."""

    def __init__(
        self,
        coordinator: HeatzyDeviceCoordinator,
        description: SensorEntityDescription,
    ) -> None:
        super().__init__(coordinator, description.key)
        self.entity_description = description

    @property
    def native_value(self) -> datetime | None:
        """Return when the derogation ends, None when none is active."""
        return self._capability(CAPABILITY_DEROG_END)
