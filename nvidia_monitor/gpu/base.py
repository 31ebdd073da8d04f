# SPDX-License-Identifier: GPL-3.0-or-later
# GPU statistics base types

"""Shared enums and result types for the GPU statistics providers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, Optional, Tuple

# Shown in place of a metric that failed during the current refresh
PLACEHOLDER = 'N/A'


class ProviderKind(IntEnum):
    """Backend used to query the GPUs, stored as the ``provider`` setting."""
    SETTINGS_AND_SMI = 0
    SETTINGS = 1
    SMI = 2
    OPTIMUS = 3

    @property
    def label(self) -> str:
        return _PROVIDER_LABELS[self]

    @property
    def uses_nvidia_settings(self) -> bool:
        return self in (ProviderKind.SETTINGS_AND_SMI, ProviderKind.SETTINGS)


_PROVIDER_LABELS = {
    ProviderKind.SETTINGS_AND_SMI: 'Nvidia Settings and Nvidia SMI',
    ProviderKind.SETTINGS: 'Nvidia Settings',
    ProviderKind.SMI: 'Nvidia SMI',
    ProviderKind.OPTIMUS: 'Nvidia Optimus',
}


class TemperatureUnit(IntEnum):
    """Display unit for temperatures, stored as the ``tempformat`` setting."""
    CELSIUS = 0
    FAHRENHEIT = 1


@dataclass
class GpuReading:
    """Formatted metric values for one GPU from one refresh.

    Attributes:
        uuid: GPU identifier the values belong to.
        values: Display strings keyed by metric id.
        errors: Failures keyed by metric id; a metric is in exactly one
            of ``values`` and ``errors``.
    """
    uuid: str
    values: Dict[str, str] = field(default_factory=dict)
    errors: Dict[str, Exception] = field(default_factory=dict)

    def display(self, metric_id: str) -> str:
        return self.values.get(metric_id, PLACEHOLDER)

    @property
    def title(self) -> str:
        return self.values.get('name', self.uuid)


@dataclass(frozen=True)
class RefreshResult:
    """Outcome of one refresh tick.

    ``error`` is set when the GPUs could not be enumerated; ``readings``
    is then empty and the caller keeps whatever it displayed before.
    """
    readings: Tuple[GpuReading, ...] = ()
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None
