"""Base entity for the Heatzy integration."""

from __future__ import annotations

from typing import Any

from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import DOMAIN
from .coordinator import HeatzyDeviceCoordinator


class HeatzyEntity(CoordinatorEntity[HeatzyDeviceCoordinator]):
    """Entity bound to one capability set of a Heatzy device."""

    _attr_has_entity_name = True

    def __init__(self, coordinator: HeatzyDeviceCoordinator, key: str | None = None) -> None:
        super().__init__(coordinator)
        binding = coordinator.binding
        self._attr_unique_id = binding.did if key is None else f"{binding.did}_{key}"
        self._attr_device_info = DeviceInfo(
            identifiers={(DOMAIN, binding.did)},
            name=binding.alias,
            manufacturer="Heatzy",
            model=binding.product_name or coordinator.profile.name,
        )

    def _capability(self, capability: str) -> Any:  # noqa: ANN401
        return (self.coordinator.data or {}).get(capability)

    async def _async_set_capability(self, capability: str, value: Any) -> None:  # noqa: ANN401
        try:
            await self.coordinator.async_set_capability(capability, value)
        except ValueError as err:
            raise HomeAssistantError(str(err)) from err
