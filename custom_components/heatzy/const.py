"""Constants for the Heatzy integration.

This module contains all the constants used throughout the integration,
including API endpoints, configuration keys, and timing policy.
"""

from datetime import timedelta

DOMAIN = "heatzy"

BASE_URL = "https://euapi.gizwits.com/app"
APPLICATION_ID = "c70a66ff039d41b4a220e198b0fcc8b3"
LOGIN_PATH = "/login"

HEADER_APPLICATION_ID = "X-Gizwits-Application-Id"
HEADER_USER_TOKEN = "X-Gizwits-User-token"  # noqa: S105

DEFAULT_POLL_INTERVAL = 60
RETRY_COOLDOWN = timedelta(minutes=1)
REFRESH_LEAD_TIME = timedelta(days=1)
# Longest delay representable as a signed 32-bit millisecond count
MAX_TIMER_DURATION = timedelta(milliseconds=2**31 - 1)
ALWAYS_ON_REVERT_DELAY = 1.0

ERROR_INVALID_AUTH = "invalid_auth"
ERROR_CANNOT_CONNECT = "cannot_connect"
ERROR_API_ERROR = "api_error"
ERROR_UNKNOWN = "unknown_error"

CONF_TOKEN = "token"  # noqa: S105
CONF_EXPIRE_AT = "expire_at"
CONF_NOTIFIED_VERSION = "notified_version"

CONF_ON_MODE = "on_mode"
CONF_ALWAYS_ON = "always_on"

ON_MODE_PREVIOUS = "previous"
DEFAULT_ON_MODE = ON_MODE_PREVIOUS
ON_MODE_OPTIONS = [ON_MODE_PREVIOUS, "cft", "cft1", "cft2", "eco", "fro"]
DEFAULT_PREVIOUS_MODE = "eco"

CAPABILITY_ONOFF = "onoff"
CAPABILITY_MODE = "mode"
CAPABILITY_LOCKED = "locked"
CAPABILITY_TIMER = "onoff.timer"
CAPABILITY_DEROG_BOOST = "derog_time_boost"
CAPABILITY_DEROG_VACATION = "derog_time_vacation"
CAPABILITY_DEROG_END = "derog_end"
CAPABILITY_TARGET_TEMPERATURE = "target_temperature"
CAPABILITY_TARGET_TEMPERATURE_COMPLEMENT = "target_temperature.complement"

ATTR_MODE = "mode"
ATTR_LOCK_SWITCH = "lock_switch"
ATTR_TIMER_SWITCH = "timer_switch"
ATTR_DEROG_MODE = "derog_mode"
ATTR_DEROG_TIME = "derog_time"
ATTR_CFT_TEMP_LOW = "cft_tempL"
ATTR_CFT_TEMP_HIGH = "cft_tempH"

MODE_MAP = {
    "cft": 0,
    "eco": 1,
    "fro": 2,
    "stop": 3,
    "cft1": 4,
    "cft2": 5,
}
MODE_REVERSE_MAP = {value: key for key, value in MODE_MAP.items()}
MODE_STOP = "stop"
# Some firmwares report localized mode names
MODE_ZH_MAP = {
    "舒适": "cft",
    "经济": "eco",
    "解冻": "fro",
    "停止": "stop",
}

DEROG_MODE_OFF = 0
DEROG_MODE_VACATION = 1
DEROG_MODE_BOOST = 2

TEMPERATURE_FACTOR = 10

FIRST_GEN_PRODUCT_KEY = "9420ae048da545c88fc6274d204dd25f"
GLOW_PRODUCT_KEYS = (
    "2fd622e45283470f9e27e8e6167d7533",
    "cffa0df68a52449085c5d1e72c2f6bb0",
)
FIRST_PILOT_PRODUCT_NAME = "Pilote_Soc"

CHANGELOG = {
    "1.0.0": (
        "Heatzy heaters are now polled every minute and the cloud session "
        "is renewed automatically one day before it expires."
    ),
}
