# SPDX-License-Identifier: GPL-3.0-or-later
# GPU metric property

"""Binding of one metric to the command that reads it and its formatter."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from ..errors import ProcessOutputError
from .formatter import FormatParams, Formatter
from .parsing import parse_utilization
from .processor import Processor


@dataclass(frozen=True)
class Property:
    """One metric of one provider.

    Attributes:
        metric_id: Provider-independent name used by the UI, e.g. ``temp``.
        processor_key: Name the vendor tool knows the metric by.
        processor: Command template used to query the tool.
        formatter: Display transform for the raw value.
        clean: Reduce the raw value to a number before formatting.
        field: Field of the combined utilization record to read, for
            metrics nvidia-settings reports together in one string.
    """
    metric_id: str
    processor_key: str
    processor: Processor
    formatter: Formatter
    clean: bool = True
    field: Optional[str] = None

    @property
    def call_key(self):
        """Properties with equal call keys share one tool invocation."""
        return (self.processor, self.processor_key)

    def fetch(self, target_id: str) -> List[str]:
        values = self.processor.process(target_id, self.processor_key)
        if not values:
            raise ProcessOutputError(
                f"Processor returned no data for property '{self.metric_id}'"
            )
        return values

    def format(self, values: List[str], params: FormatParams = None) -> Optional[str]:
        raw = values[0]
        if self.field is not None:
            raw = getattr(parse_utilization(raw), self.field)
        return self.formatter.format(raw, self.clean, params)

    def parse(self, target_id: str, params: FormatParams = None) -> Optional[str]:
        """Query the tool for this metric and format the first record."""
        return self.format(self.fetch(target_id), params)
