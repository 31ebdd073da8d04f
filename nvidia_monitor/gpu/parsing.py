# SPDX-License-Identifier: GPL-3.0-or-later
# Vendor tool output parsing

"""Parsing helpers for nvidia-smi and nvidia-settings output."""

from __future__ import annotations

from typing import Dict, List, NamedTuple

from ..errors import MalformedUuidOutputError, ParseError

UUID_PREFIX = '(UUID: '
UUID_SUFFIX = ')'


class UtilizationRecord(NamedTuple):
    """GPU and memory-controller utilization reported together by nvidia-settings."""
    gpu_percent: str
    mem_controller_percent: str


def split_records(output: str) -> List[str]:
    """Split raw stdout into trimmed, non-empty lines."""
    return [line.strip() for line in output.splitlines() if line.strip()]


def extract_uuid(line: str) -> str:
    """Extract the UUID from an ``nvidia-smi -L`` line.

    Example:
        ``"GPU 0: NVIDIA GeForce RTX 3070 (UUID: GPU-abc123)"`` gives
        ``"GPU-abc123"``.

    Raises:
        MalformedUuidOutputError: If either delimiter is missing.
    """
    start = line.find(UUID_PREFIX)
    if start == -1:
        raise MalformedUuidOutputError(f"No UUID found in GPU listing: {line!r}")
    start += len(UUID_PREFIX)

    end = line.find(UUID_SUFFIX, start)
    if end == -1:
        raise MalformedUuidOutputError(f"Unterminated UUID in GPU listing: {line!r}")

    uuid = line[start:end].strip()
    if not uuid:
        raise MalformedUuidOutputError(f"Empty UUID in GPU listing: {line!r}")
    return uuid


def parse_utilization(raw: str) -> UtilizationRecord:
    """Parse the combined ``GPUUtilization`` string of nvidia-settings.

    The tool reports e.g. ``"graphics=12, memory=4, video=0, PCIe=0"``.

    Raises:
        ParseError: If the graphics or memory field is missing.
    """
    fields: Dict[str, str] = {}
    for part in raw.split(','):
        key, sep, value = part.partition('=')
        if sep:
            fields[key.strip().lower()] = value.strip()

    try:
        return UtilizationRecord(
            gpu_percent=fields['graphics'],
            mem_controller_percent=fields['memory']
        )
    except KeyError as e:
        raise ParseError(f"Utilization field {e} missing in {raw!r}") from e
