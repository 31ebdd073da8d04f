# SPDX-License-Identifier: GPL-3.0-or-later
# Monitor configuration

"""Typed view of the settings the GPU monitor depends on."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .errors import ConfigError
from .gpu.base import ProviderKind, TemperatureUnit

REFRESH_RATE_KEY = "refreshrate"
PROVIDER_KEY = "provider"
TEMPERATURE_FORMAT_KEY = "tempformat"


@dataclass(frozen=True)
class MonitorConfig:
    """Settings the refresh loop needs, validated."""
    refresh_rate: int
    provider_kind: ProviderKind
    temperature_unit: TemperatureUnit

    def format_params(self) -> Dict[str, int]:
        return {TEMPERATURE_FORMAT_KEY: int(self.temperature_unit)}


def _require_int(settings: Any, key: str) -> int:
    value: Optional[Any] = settings.get(key)
    if value is None:
        raise ConfigError(f"Setting '{key}' is not set")
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"Setting '{key}' must be an integer, got {value!r}")
    return value


def read_monitor_config(settings: Any) -> MonitorConfig:
    """Read and validate the monitor settings.

    Args:
        settings: Any object with a ``get(key)`` method returning None for
            unset keys, such as :class:`nvidia_monitor.settings.Settings`.

    Raises:
        ConfigError: If a setting is missing or out of range. A wrong
            provider would select the wrong command set, so nothing is
            defaulted here.
    """
    refresh_rate = _require_int(settings, REFRESH_RATE_KEY)
    if refresh_rate < 1:
        raise ConfigError(f"Refresh rate must be at least 1 second, got {refresh_rate}")

    provider = _require_int(settings, PROVIDER_KEY)
    try:
        provider_kind = ProviderKind(provider)
    except ValueError:
        raise ConfigError(f"Invalid provider {provider}, check preferences") from None

    tempformat = _require_int(settings, TEMPERATURE_FORMAT_KEY)
    try:
        temperature_unit = TemperatureUnit(tempformat)
    except ValueError:
        raise ConfigError(f"Invalid temperature format {tempformat}") from None

    return MonitorConfig(refresh_rate, provider_kind, temperature_unit)
