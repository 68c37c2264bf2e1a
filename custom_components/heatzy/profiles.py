"""Product profiles and attribute translation for Heatzy devices.

Each hardware generation is described by a ProductProfile value: the
capabilities it exposes, the modes it accepts and the control protocol it
speaks. The functions below translate capability values into vendor
attributes and back; they hold no state.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from .api import HeatzyApiPayloadError
from .const import (
    ATTR_CFT_TEMP_HIGH,
    ATTR_CFT_TEMP_LOW,
    ATTR_DEROG_MODE,
    ATTR_DEROG_TIME,
    ATTR_LOCK_SWITCH,
    ATTR_MODE,
    ATTR_TIMER_SWITCH,
    CAPABILITY_DEROG_BOOST,
    CAPABILITY_DEROG_END,
    CAPABILITY_DEROG_VACATION,
    CAPABILITY_LOCKED,
    CAPABILITY_MODE,
    CAPABILITY_ONOFF,
    CAPABILITY_TARGET_TEMPERATURE,
    CAPABILITY_TARGET_TEMPERATURE_COMPLEMENT,
    CAPABILITY_TIMER,
    DEROG_MODE_BOOST,
    DEROG_MODE_OFF,
    DEROG_MODE_VACATION,
    FIRST_GEN_PRODUCT_KEY,
    FIRST_PILOT_PRODUCT_NAME,
    GLOW_PRODUCT_KEYS,
    MODE_MAP,
    MODE_REVERSE_MAP,
    MODE_STOP,
    MODE_ZH_MAP,
    TEMPERATURE_FACTOR,
)

FOUR_MODES = ("cft", "eco", "fro", "stop")
SIX_MODES = ("cft", "cft1", "cft2", "eco", "fro", "stop")

# Comfort variants fold into comfort on products that lack them
_COMFORT_VARIANTS = ("cft1", "cft2")

_PILOTE_CAPABILITIES = (
    CAPABILITY_ONOFF,
    CAPABILITY_MODE,
    CAPABILITY_LOCKED,
    CAPABILITY_TIMER,
    CAPABILITY_DEROG_BOOST,
    CAPABILITY_DEROG_VACATION,
    CAPABILITY_DEROG_END,
)


@dataclass(frozen=True)
class ProductProfile:
    """Capabilities and protocol of a Heatzy hardware generation.

    Attributes:
        name: Profile identifier, used for logs and diagnostics.
        capabilities: Capabilities exposed by this generation.
        modes: Modes accepted and reported by this generation.
        raw_protocol: Whether control calls use the first generation
            ``raw`` payload instead of JSON attributes.

    """

    name: str
    capabilities: tuple[str, ...]
    modes: tuple[str, ...]
    raw_protocol: bool = False

    def supports(self, capability: str) -> bool:
        """Return True if the capability exists on this generation."""
        return capability in self.capabilities

    @property
    def on_modes(self) -> tuple[str, ...]:
        """Return the modes in which the heater is considered on."""
        return tuple(mode for mode in self.modes if mode != MODE_STOP)


FIRST_GEN = ProductProfile(
    name="first_gen",
    capabilities=(CAPABILITY_ONOFF, CAPABILITY_MODE),
    modes=FOUR_MODES,
    raw_protocol=True,
)
PILOTE_SOC = ProductProfile(
    name="pilote_soc",
    capabilities=_PILOTE_CAPABILITIES,
    modes=FOUR_MODES,
)
PILOTE = ProductProfile(
    name="pilote",
    capabilities=_PILOTE_CAPABILITIES,
    modes=SIX_MODES,
)
GLOW = ProductProfile(
    name="glow",
    capabilities=(
        *_PILOTE_CAPABILITIES,
        CAPABILITY_TARGET_TEMPERATURE,
        CAPABILITY_TARGET_TEMPERATURE_COMPLEMENT,
    ),
    modes=SIX_MODES,
)


def get_profile(product_key: str, product_name: str) -> ProductProfile:
    """Select the profile matching a bound device."""
    if product_key == FIRST_GEN_PRODUCT_KEY:
        return FIRST_GEN
    if product_key in GLOW_PRODUCT_KEYS:
        return GLOW
    if product_name == FIRST_PILOT_PRODUCT_NAME:
        return PILOTE_SOC
    return PILOTE


def decode_mode(profile: ProductProfile, value: Any) -> str:  # noqa: ANN401
    """Decode a reported mode into a mode name.

    Accepts the numeric enumeration, the canonical names and the localized
    names returned by some firmwares.

    Raises:
        HeatzyApiPayloadError: If the value is not a known mode.

    """
    mode = None
    if isinstance(value, int) and not isinstance(value, bool):
        mode = MODE_REVERSE_MAP.get(value)
    elif isinstance(value, str):
        mode = MODE_ZH_MAP.get(value, value)

    if mode in _COMFORT_VARIANTS and mode not in profile.modes:
        mode = "cft"
    if mode not in profile.modes:
        error_msg = f"Unknown mode {value!r} for {profile.name}"
        raise HeatzyApiPayloadError(error_msg)
    return mode


def requested_mode(capability: str, value: Any, on_mode: str) -> str | None:  # noqa: ANN401
    """Return the mode a capability change resolves to, if any."""
    if capability == CAPABILITY_ONOFF:
        return on_mode if value else MODE_STOP
    if capability == CAPABILITY_MODE:
        return value
    return None


def encode_capability(
    profile: ProductProfile,
    capability: str,
    value: Any,  # noqa: ANN401
    *,
    on_mode: str,
) -> dict[str, int]:
    """Encode a capability change into vendor attributes.

    Args:
        profile: Profile of the target device.
        capability: Capability being changed.
        value: Requested capability value.
        on_mode: Mode used when the heater is switched on.

    Returns:
        Attribute mapping to send in a control call.

    Raises:
        ValueError: If the capability or value is not valid for the profile.

    """
    if not profile.supports(capability) or capability == CAPABILITY_DEROG_END:
        error_msg = f"Capability {capability} cannot be set on {profile.name}"
        raise ValueError(error_msg)

    if capability in (CAPABILITY_ONOFF, CAPABILITY_MODE):
        mode = requested_mode(capability, value, on_mode)
        if mode not in profile.modes:
            error_msg = f"Mode {mode!r} is not supported by {profile.name}"
            raise ValueError(error_msg)
        return {ATTR_MODE: MODE_MAP[mode]}
    if capability == CAPABILITY_LOCKED:
        return {ATTR_LOCK_SWITCH: int(bool(value))}
    if capability == CAPABILITY_TIMER:
        return {ATTR_TIMER_SWITCH: int(bool(value))}
    if capability in (CAPABILITY_DEROG_BOOST, CAPABILITY_DEROG_VACATION):
        duration = int(value)
        derog_mode = (
            DEROG_MODE_BOOST
            if capability == CAPABILITY_DEROG_BOOST
            else DEROG_MODE_VACATION
        )
        return {
            ATTR_DEROG_MODE: derog_mode if duration else DEROG_MODE_OFF,
            ATTR_DEROG_TIME: duration,
        }
    if capability == CAPABILITY_TARGET_TEMPERATURE:
        return {ATTR_CFT_TEMP_LOW: round(float(value) * TEMPERATURE_FACTOR)}
    return {ATTR_CFT_TEMP_HIGH: round(float(value) * TEMPERATURE_FACTOR)}


def build_post_data(
    profile: ProductProfile,
    attrs: Mapping[str, int],
) -> dict[str, Any] | None:
    """Wrap attributes in the control payload expected by the profile.

    First generation heaters only understand mode changes, sent as
    ``{"raw": [1, 1, mode]}``. Returns None when there is nothing to send.
    """
    if not attrs:
        return None
    if profile.raw_protocol:
        if ATTR_MODE not in attrs:
            return None
        return {"raw": [1, 1, attrs[ATTR_MODE]]}
    return {"attrs": dict(attrs)}


def compute_derog_end(
    derog_mode: int,
    duration: int,
    now: datetime | None = None,
) -> datetime | None:
    """Return when a derogation ends, None when no derogation is active."""
    now = now or datetime.now(UTC)
    if derog_mode == DEROG_MODE_VACATION and duration:
        return now + timedelta(days=duration)
    if derog_mode == DEROG_MODE_BOOST and duration:
        return now + timedelta(minutes=duration)
    return None


def decode_attrs(
    profile: ProductProfile,
    attrs: Mapping[str, Any],
    *,
    previous: Mapping[str, Any] | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Decode vendor attributes into capability values.

    Attributes the profile does not expose are ignored. The derogation end
    is only recomputed when the derogation changed, so that repeated polls
    do not push it forward.

    Args:
        profile: Profile of the reporting device.
        attrs: Attribute mapping reported by the cloud.
        previous: Capability values decoded on the previous poll.
        now: Reference time for the derogation end.

    Raises:
        HeatzyApiPayloadError: If an attribute has an unexpected shape.

    """
    previous = previous or {}
    values: dict[str, Any] = {}
    try:
        if ATTR_MODE in attrs:
            mode = decode_mode(profile, attrs[ATTR_MODE])
            values[CAPABILITY_MODE] = mode
            values[CAPABILITY_ONOFF] = mode != MODE_STOP

        if profile.supports(CAPABILITY_LOCKED) and ATTR_LOCK_SWITCH in attrs:
            values[CAPABILITY_LOCKED] = bool(int(attrs[ATTR_LOCK_SWITCH]))

        if profile.supports(CAPABILITY_TIMER) and ATTR_TIMER_SWITCH in attrs:
            values[CAPABILITY_TIMER] = bool(int(attrs[ATTR_TIMER_SWITCH]))

        if (
            profile.supports(CAPABILITY_DEROG_BOOST)
            and ATTR_DEROG_MODE in attrs
            and ATTR_DEROG_TIME in attrs
        ):
            derog_mode = int(attrs[ATTR_DEROG_MODE])
            duration = int(attrs[ATTR_DEROG_TIME])
            boost = duration if derog_mode == DEROG_MODE_BOOST else 0
            vacation = duration if derog_mode == DEROG_MODE_VACATION else 0
            values[CAPABILITY_DEROG_BOOST] = boost
            values[CAPABILITY_DEROG_VACATION] = vacation
            unchanged = (
                previous.get(CAPABILITY_DEROG_BOOST) == boost
                and previous.get(CAPABILITY_DEROG_VACATION) == vacation
                and CAPABILITY_DEROG_END in previous
            )
            values[CAPABILITY_DEROG_END] = (
                previous[CAPABILITY_DEROG_END]
                if unchanged
                else compute_derog_end(derog_mode, duration, now)
            )

        if profile.supports(CAPABILITY_TARGET_TEMPERATURE) and ATTR_CFT_TEMP_LOW in attrs:
            values[CAPABILITY_TARGET_TEMPERATURE] = (
                float(attrs[ATTR_CFT_TEMP_LOW]) / TEMPERATURE_FACTOR
            )

        if (
            profile.supports(CAPABILITY_TARGET_TEMPERATURE_COMPLEMENT)
            and ATTR_CFT_TEMP_HIGH in attrs
        ):
            values[CAPABILITY_TARGET_TEMPERATURE_COMPLEMENT] = (
                float(attrs[ATTR_CFT_TEMP_HIGH]) / TEMPERATURE_FACTOR
            )
    except (TypeError, ValueError) as err:
        error_msg = f"Malformed attributes for {profile.name}: {err}"
        raise HeatzyApiPayloadError(error_msg) from err

    return values
