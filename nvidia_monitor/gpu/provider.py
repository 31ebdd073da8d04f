# SPDX-License-Identifier: GPL-3.0-or-later
# NVIDIA GPU statistics provider

"""NVIDIA GPU statistics using nvidia-smi, nvidia-settings and optirun."""

from __future__ import annotations

import logging
import subprocess
from typing import Dict, Iterable, List, Optional, Tuple

from ..commands import CommandRunner
from ..errors import GpuMonitorError, ParseError, ProcessOutputError, ProviderError, UnknownMetricError
from .base import GpuReading, ProviderKind
from .formatter import FormatParams
from .metrics import METRICS, MetricDefinition
from .parsing import extract_uuid
from .processor import Processor
from .metric_property import Property

logger = logging.getLogger(__name__)

SMI_QUERY_HEAD = '--query-gpu='
SMI_QUERY_TAIL = ('--format=csv,noheader', '-i')
SETTINGS_QUERY_HEAD = '-q=[gpu:'
SETTINGS_QUERY_MIDDLE = ']/'
SETTINGS_QUERY_TAIL = ('-t',)


def _smi_program(kind: ProviderKind) -> Tuple[str, ...]:
    if kind is ProviderKind.OPTIMUS:
        return ('optirun', 'nvidia-smi')
    return ('nvidia-smi',)


def _smi_query(kind: ProviderKind, runner: CommandRunner) -> Processor:
    return Processor(_smi_program(kind), SMI_QUERY_HEAD, SMI_QUERY_TAIL, runner=runner)


def _settings_query(runner: CommandRunner) -> Processor:
    return Processor(
        ('nvidia-settings',),
        SETTINGS_QUERY_HEAD,
        SETTINGS_QUERY_TAIL,
        middle=SETTINGS_QUERY_MIDDLE,
        runner=runner
    )


def _build_property(kind: ProviderKind, metric: MetricDefinition, runner: CommandRunner) -> Optional[Property]:
    """Build the Property for one metric, or None if the kind lacks it."""
    use_settings = (
        kind is ProviderKind.SETTINGS
        or (kind is ProviderKind.SETTINGS_AND_SMI and metric.settings_key is not None)
    )

    if use_settings:
        if metric.settings_key is None:
            return None
        return Property(
            metric.metric_id,
            metric.settings_key,
            _settings_query(runner),
            metric.formatter,
            clean=metric.clean,
            field=metric.settings_field
        )

    if metric.smi_key is None:
        return None
    return Property(
        metric.metric_id,
        metric.smi_key,
        _smi_query(kind, runner),
        metric.formatter,
        clean=metric.clean
    )


def build_properties(kind: ProviderKind, runner: CommandRunner) -> Tuple[Property, ...]:
    """Build the full, fixed set of Properties for a provider kind."""
    properties = (_build_property(kind, metric, runner) for metric in METRICS)
    return tuple(p for p in properties if p is not None)


class Provider:
    """GPU data source for one provider kind.

    The Properties are built once from the metric table and never change.
    All commands go through one :class:`CommandRunner`, so :meth:`cancel`
    stops everything this provider has in flight.
    """

    def __init__(self, kind: ProviderKind, runner: Optional[CommandRunner] = None) -> None:
        self.kind = ProviderKind(kind)
        self.runner = runner if runner is not None else CommandRunner()
        self.properties: Tuple[Property, ...] = build_properties(self.kind, self.runner)
        self._by_metric: Dict[str, Property] = {p.metric_id: p for p in self.properties}
        self._settings_proc: Optional[subprocess.Popen] = None

    def __repr__(self) -> str:
        return f"Provider({self.kind.name})"

    def supported_metrics(self) -> Tuple[str, ...]:
        return tuple(self._by_metric)

    def property_for(self, metric_id: str) -> Property:
        try:
            return self._by_metric[metric_id]
        except KeyError:
            raise UnknownMetricError(metric_id, self.kind.label) from None

    def wire_key(self, metric_id: str) -> str:
        """Return the name the vendor tool knows ``metric_id`` by."""
        return self.property_for(metric_id).processor_key

    def _uuid_processor(self) -> Processor:
        if self.kind.uses_nvidia_settings:
            return Processor(('nvidia-settings',), '-q', ('GpuUUID', '-t'), runner=self.runner)
        return Processor(_smi_program(self.kind), '-L', runner=self.runner)

    def get_gpu_uuids(self) -> List[str]:
        """Get the UUIDs of all GPUs.

        Raises:
            ProcessError: If the listing command failed or printed nothing.
            MalformedUuidOutputError: If a listing line has no UUID.
        """
        records = self._uuid_processor().process()
        if not records:
            raise ProcessOutputError("GPU listing returned no output")

        if self.kind.uses_nvidia_settings:
            return records
        return [extract_uuid(line) for line in records]

    def get_gpu_data(self, gpu_id: str, metric_id: str, params: FormatParams = None) -> str:
        """Query and format one metric of one GPU.

        Raises:
            UnknownMetricError: If this provider kind lacks the metric.
            ParseError: If the tool output is not a valid value.
            ProcessError: If the tool could not be run.
        """
        prop = self.property_for(metric_id)
        result = prop.parse(gpu_id, params)
        if result is None:
            raise ParseError(f"Invalid value for '{metric_id}' on {gpu_id}")
        return result

    def read_gpu(self, gpu_id: str, metric_ids: Iterable[str], params: FormatParams = None) -> GpuReading:
        """Read several metrics of one GPU, calling each tool command once.

        Metrics that share a command (GPU and memory-controller
        utilization under nvidia-settings) are filled from a single call.
        Failures are recorded per metric and never abort the others.
        """
        reading = GpuReading(gpu_id)
        groups: Dict[tuple, List[Property]] = {}

        for metric_id in metric_ids:
            try:
                prop = self.property_for(metric_id)
            except UnknownMetricError as e:
                reading.errors[metric_id] = e
                continue
            groups.setdefault(prop.call_key, []).append(prop)

        for props in groups.values():
            try:
                values = props[0].fetch(gpu_id)
            except GpuMonitorError as e:
                logger.warning("Failed to read %s of %s: %s",
                               props[0].processor_key, gpu_id, e)
                for prop in props:
                    reading.errors[prop.metric_id] = e
                continue

            for prop in props:
                try:
                    result = prop.format(values, params)
                    if result is None:
                        raise ParseError(
                            f"Invalid value for '{prop.metric_id}' on {gpu_id}: {values[0]!r}"
                        )
                except ParseError as e:
                    logger.info("%s", e)
                    reading.errors[prop.metric_id] = e
                else:
                    reading.values[prop.metric_id] = result

        return reading

    def open_settings(self) -> bool:
        """Open the Nvidia Settings application if this provider uses it.

        A second window is not started while the first is still open.

        Returns:
            True if nvidia-settings was started, False if it is already open.

        Raises:
            ProviderError: If the provider kind does not use nvidia-settings.
            ProcessSpawnError: If nvidia-settings could not be started.
        """
        if not self.kind.uses_nvidia_settings:
            raise ProviderError("Nvidia Settings is not enabled in preferences")
        if self._settings_proc is not None and self._settings_proc.poll() is None:
            logger.info("Nvidia Settings is already open")
            return False
        self._settings_proc = self.runner.spawn_detached(['nvidia-settings'])
        logger.info("Opening the Nvidia Settings app")
        return True

    def cancel(self) -> None:
        """Kill any tool commands this provider still has running."""
        self.runner.cancel()
