# SPDX-License-Identifier: GPL-3.0-or-later
# Error types

"""Exceptions raised by the GPU monitoring pipeline.

Every error derives from :class:`GpuMonitorError` so the refresh loop can
isolate a failure to one GPU or one metric without catching unrelated
exceptions.
"""

from __future__ import annotations


class GpuMonitorError(Exception):
    """Base class for all GPU monitoring errors."""


class ConfigError(GpuMonitorError):
    """A required setting is missing or holds an invalid value."""


class ProcessError(GpuMonitorError):
    """An external vendor tool could not be run or gave no usable output."""


class ProcessSpawnError(ProcessError):
    """The operating system failed to start the tool."""


class ProcessOutputError(ProcessError):
    """The tool ran but produced no usable stdout."""


class CommandCancelledError(ProcessError):
    """The command runner was cancelled before or during the call."""


class ProviderError(GpuMonitorError):
    """A provider could not answer a query."""


class UnknownMetricError(ProviderError):
    """The metric is not supported by the current provider kind."""

    def __init__(self, metric_id: str, provider_name: str) -> None:
        super().__init__(
            f"Unknown property '{metric_id}' for provider '{provider_name}', "
            "check provider preferences"
        )
        self.metric_id = metric_id


class MalformedUuidOutputError(ProviderError):
    """A GPU listing line did not contain the expected UUID delimiters."""


class ParseError(ProviderError):
    """A raw value could not be interpreted as the expected number."""
