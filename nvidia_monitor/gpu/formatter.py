# SPDX-License-Identifier: GPL-3.0-or-later
# Display formatting for GPU metrics

"""Pure display transforms for raw GPU metric values.

A :class:`Formatter` optionally cleans a raw value down to a number and
then applies one transform (unit suffix, temperature conversion). Neither
step keeps any state between calls.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Callable, Mapping, Optional

from ..errors import ParseError
from .base import TemperatureUnit

logger = logging.getLogger(__name__)

FormatParams = Optional[Mapping[str, Any]]
Transform = Callable[[str, FormatParams], Optional[str]]


def clean_numeric(raw: str) -> str:
    """Remove every character that is neither an ASCII digit nor '.'."""
    return ''.join(c for c in raw if c in '0123456789.')


def format_number(value: float) -> str:
    """Render a float without a trailing '.0' for whole numbers."""
    if value.is_integer():
        return str(int(value))
    return str(value)


def temperature_unit(params: FormatParams) -> TemperatureUnit:
    """Read the ``tempformat`` parameter, defaulting to Celsius.

    Raises:
        ParseError: If ``tempformat`` names no known unit.
    """
    if not params:
        return TemperatureUnit.CELSIUS
    raw = params.get('tempformat', TemperatureUnit.CELSIUS)
    try:
        return TemperatureUnit(int(raw))
    except (TypeError, ValueError):
        raise ParseError(f"Unknown temperature format: {raw!r}") from None


def identity(value: str, params: FormatParams = None) -> Optional[str]:
    return value


def percent(value: str, params: FormatParams = None) -> Optional[str]:
    return f"{value} %"


def memory(value: str, params: FormatParams = None) -> Optional[str]:
    return f"{value} MiB"


def power(value: str, params: FormatParams = None) -> Optional[str]:
    try:
        watts = math.floor(float(value))
    except ValueError:
        return None
    return f"{watts} W"


def temperature(value: str, params: FormatParams = None) -> Optional[str]:
    """Append the Celsius sign, or convert to Fahrenheit and floor."""
    if temperature_unit(params) is TemperatureUnit.CELSIUS:
        return f"{value}°C"

    try:
        celsius = float(value)
    except ValueError:
        return None
    fahrenheit = math.floor(celsius * 9 / 5 + 32)
    return f"{fahrenheit}°F"


class Formatter:
    """Formats one metric's raw value for display."""

    def __init__(self, name: str, transform: Transform) -> None:
        self.name = name
        self._transform = transform

    def __repr__(self) -> str:
        return f"Formatter({self.name!r})"

    def format(self, raw: str, clean: bool = True, params: FormatParams = None) -> Optional[str]:
        """Format a raw value.

        Args:
            raw: Value as printed by the vendor tool.
            clean: Strip non-numeric characters and parse as a number
                before transforming. Disable for names and other text.
            params: Optional display parameters such as ``tempformat``.

        Returns:
            The display string, or None if the value is not a valid number.
        """
        value = raw
        if clean:
            cleaned = clean_numeric(raw)
            try:
                value = format_number(float(cleaned))
            except ValueError:
                logger.debug("Not a valid number: %r", raw)
                return None

        return self._transform(value, params)


IDENTITY = Formatter('identity', identity)
PERCENT = Formatter('percent', percent)
MEMORY = Formatter('memory', memory)
POWER = Formatter('power', power)
TEMPERATURE = Formatter('temperature', temperature)
