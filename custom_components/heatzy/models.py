"""Data models for the Heatzy integration."""

from dataclasses import dataclass
from datetime import UTC, datetime


@dataclass(frozen=True)
class Credentials:
    """Username and password of a Heatzy account."""

    username: str
    password: str


@dataclass
class LoginData:
    """Represents a Heatzy session token with its expiration timestamp."""

    token: str
    expire_at: int

    @property
    def expires(self) -> datetime:
        """Return the expiration as an aware datetime."""
        return datetime.fromtimestamp(self.expire_at, tz=UTC)
