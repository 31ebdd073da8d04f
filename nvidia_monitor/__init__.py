# SPDX-License-Identifier: GPL-3.0-or-later
# NVIDIA Monitor

"""NVIDIA Monitor - A GTK4-based GPU monitor for Linux.

This package periodically queries nvidia-smi, nvidia-settings or optirun
for GPU telemetry, formats the values and shows them on one page per GPU.
"""

from .constants import APP_ID, APP_NAME, APP_VERSION

__all__ = ['APP_ID', 'APP_NAME', 'APP_VERSION']
__version__ = APP_VERSION
