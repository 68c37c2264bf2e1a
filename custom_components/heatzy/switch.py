"""Switch entities for Heatzy heaters."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from homeassistant.components.switch import SwitchEntity, SwitchEntityDescription
from homeassistant.const import EntityCategory

from .const import CAPABILITY_LOCKED, CAPABILITY_TIMER, DOMAIN
from .entity import HeatzyEntity

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.entity_platform import AddEntitiesCallback

    from .coordinator import HeatzyDeviceCoordinator

SWITCH_DESCRIPTIONS = (
    SwitchEntityDescription(
        key=CAPABILITY_LOCKED,
        name="Child lock",
        icon="mdi:lock",
        entity_category=EntityCategory.CONFIG,
    ),
    SwitchEntityDescription(
        key=CAPABILITY_TIMER,
        name="Schedule",
        icon="mdi:calendar-clock",
    ),
)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up switch entities for Heatzy heaters."""
    coordinators = hass.data[DOMAIN][entry.entry_id]["coordinators"]
    async_add_entities(
        HeatzySwitchEntity(coordinator, description)
        for coordinator in coordinators.values()
        for description in SWITCH_DESCRIPTIONS
        if coordinator.profile.supports(description.key)
    )


class HeatzySwitchEntity(HeatzyEntity, SwitchEntity):
    """Switch mapped to a boolean capability."""

    def __init__(
        self,
        coordinator: HeatzyDeviceCoordinator,
        description: SwitchEntityDescription,
    ) -> None:
        super().__init__(coordinator, description.key)
        self.entity_description = description

    @property
    def is_on(self) -> bool | None:
        """Return the capability value."""
        return self._capability(self.entity_description.key)

    async def async_turn_on(self, **kwargs: Any) -> None:  # noqa: ANN401
        """Enable the capability."""
        await self._async_set_capability(self.entity_description.key, True)

    async def async_turn_off(self, **kwargs: Any) -> None:  # noqa: ANN401
        """Disable the capability."""
        await self._async_set_capability(self.entity_description.key, False)
