"""Logging helpers for the Heatzy integration."""

from __future__ import annotations

import logging
from collections.abc import Callable, MutableMapping
from typing import Any


class DeviceLoggerAdapter(logging.LoggerAdapter):
    """Prefix every log line with a name resolved at emit time.

    The name provider is called for each record, so renaming a device in
    Home Assistant is reflected in the following log lines.
    """

    def __init__(self, logger: logging.Logger, name_provider: Callable[[], str]) -> None:
        super().__init__(logger, {})
        self._name_provider = name_provider

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]  # noqa: ANN401
    ) -> tuple[Any, MutableMapping[str, Any]]:
        return f"{self._name_provider()} - {msg}", kwargs
