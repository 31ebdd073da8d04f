# SPDX-License-Identifier: GPL-3.0-or-later
# Vendor tool command builder

"""Builds and runs one vendor tool command for one metric."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..commands import CommandRunner
from ..errors import ProcessOutputError
from .parsing import split_records

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Processor:
    """Command template for one vendor tool call.

    Two argument shapes are supported:

    * joined (``middle`` is None): ``program + [head + key] + tail + [target]``,
      e.g. ``nvidia-smi --query-gpu=temperature.gpu --format=csv,noheader -i GPU-x``
    * bracket (``middle`` set): ``program + [head + target + middle + key] + tail``,
      e.g. ``nvidia-settings -q=[gpu:GPU-x]/GPUCoreTemp -t``

    Attributes:
        program: Leading arguments naming the executable, e.g.
            ``("optirun", "nvidia-smi")``.
        head: Fragment the metric key is appended to.
        tail: Fixed trailing arguments.
        middle: Fragment between target and key for the bracket shape.
        runner: Executes the built command. Each Processor built
            without one gets its own, so cancelling it affects no other.
    """
    program: Tuple[str, ...]
    head: str = ''
    tail: Tuple[str, ...] = ()
    middle: Optional[str] = None
    runner: CommandRunner = field(default_factory=CommandRunner, compare=False, repr=False)

    def build_argv(self, target_id: Optional[str] = None, metric_key: Optional[str] = None) -> List[str]:
        """Build the argument vector for one call.

        Raises:
            ValueError: If the bracket shape is missing its target or key.
        """
        argv = list(self.program)

        if self.middle is not None:
            if not target_id or not metric_key:
                raise ValueError(
                    f"{self.program[-1]} query needs both a GPU id and a metric key"
                )
            argv.append(f"{self.head}{target_id}{self.middle}{metric_key}")
            argv.extend(self.tail)
            return argv

        fragment = self.head + (metric_key or '')
        if fragment:
            argv.append(fragment)
        argv.extend(self.tail)
        if target_id:
            argv.append(target_id)
        return argv

    def process(self, target_id: Optional[str] = None, metric_key: Optional[str] = None) -> Optional[List[str]]:
        """Run the command and split its stdout into records.

        Returns:
            The output records, or None when the tool printed nothing at all.

        Raises:
            ProcessSpawnError: If the tool could not be started.
            ProcessOutputError: If the tool printed only to stderr.
        """
        argv = self.build_argv(target_id, metric_key)
        result = self.runner.run(argv)

        stdout = result.stdout.strip()
        stderr = result.stderr.strip()

        if stdout:
            if stderr:
                logger.warning("%s succeeded with errors: %s", argv[0], stderr)
            return split_records(stdout)

        if stderr:
            raise ProcessOutputError(f"{argv[0]} failed: {stderr}")

        return None
