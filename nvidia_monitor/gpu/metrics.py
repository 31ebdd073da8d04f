# SPDX-License-Identifier: GPL-3.0-or-later
# GPU metric table

"""Static table of the GPU metrics and how each provider kind reads them."""

from __future__ import annotations

from typing import NamedTuple, Optional, Tuple

from . import formatter as fmt
from .formatter import Formatter


class MetricDefinition(NamedTuple):
    """One row of the metric table.

    ``smi_key`` is the ``--query-gpu`` field of nvidia-smi, ``settings_key``
    the attribute queried with nvidia-settings. ``settings_field`` names
    the field of the combined utilization record when nvidia-settings
    reports the metric together with another one.
    """
    metric_id: str
    title: str
    formatter: Formatter
    smi_key: Optional[str]
    settings_key: Optional[str] = None
    settings_field: Optional[str] = None
    clean: bool = True


METRICS: Tuple[MetricDefinition, ...] = (
    MetricDefinition('name', 'Name', fmt.IDENTITY, 'gpu_name', clean=False),
    MetricDefinition('util', 'GPU Utilization', fmt.PERCENT,
                     'utilization.gpu', 'GPUUtilization', 'gpu_percent'),
    MetricDefinition('mem_ctrl_util', 'Memory Controller Utilization', fmt.PERCENT,
                     'utilization.memory', 'GPUUtilization', 'mem_controller_percent'),
    MetricDefinition('temp', 'Temperature', fmt.TEMPERATURE,
                     'temperature.gpu', 'GPUCoreTemp'),
    MetricDefinition('memory_usage', 'Memory Usage', fmt.MEMORY,
                     'memory.used', 'UsedDedicatedGPUMemory'),
    MetricDefinition('memory_total', 'Memory Total', fmt.MEMORY,
                     'memory.total', 'TotalDedicatedGPUMemory'),
    # nvidia-settings reports fan speed per fan, not per GPU
    MetricDefinition('fan_speed', 'Fan Speed', fmt.PERCENT, 'fan.speed'),
    MetricDefinition('power_usage', 'Power Usage', fmt.POWER, 'power.draw'),
)

METRIC_IDS: Tuple[str, ...] = tuple(m.metric_id for m in METRICS)

METRIC_TITLES = {m.metric_id: m.title for m in METRICS}
