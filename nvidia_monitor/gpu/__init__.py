# SPDX-License-Identifier: GPL-3.0-or-later
# GPU monitor facade

"""GPU statistics and monitoring for NVIDIA GPUs.

This module provides the refresh worker the UI polls. Tool commands run
on a single background worker so the GTK main loop never blocks, and at
most one refresh is in flight per provider.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Iterable, Optional, Tuple

from ..errors import GpuMonitorError
from .base import PLACEHOLDER, GpuReading, ProviderKind, RefreshResult, TemperatureUnit
from .formatter import FormatParams
from .metrics import METRIC_IDS, METRIC_TITLES
from .provider import Provider

__all__ = [
    'GpuMonitor',
    'GpuReading',
    'METRIC_IDS',
    'METRIC_TITLES',
    'PLACEHOLDER',
    'Provider',
    'ProviderKind',
    'RefreshResult',
    'TemperatureUnit',
]

logger = logging.getLogger(__name__)


class GpuMonitor:
    """Runs refreshes for one provider on a background worker.

    Call :meth:`request_refresh` from the UI timer. The result is passed to
    the callback on the worker thread; UI callers should hand it on with
    ``GLib.idle_add``.
    """

    def __init__(self, provider: Provider, metric_ids: Iterable[str] = METRIC_IDS) -> None:
        self.provider = provider
        self.metric_ids: Tuple[str, ...] = tuple(metric_ids)

        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="GpuRefresh")
        self._lock = threading.Lock()
        self._in_flight = False
        self._closed = False

    @property
    def busy(self) -> bool:
        with self._lock:
            return self._in_flight

    def request_refresh(
        self,
        params: FormatParams = None,
        callback: Optional[Callable[[RefreshResult], None]] = None
    ) -> Optional[Future]:
        """Start a refresh unless one is already running.

        Args:
            params: Display parameters passed to the formatters.
            callback: Invoked with the :class:`RefreshResult` when done.

        Returns:
            The future of the refresh, or None if the request was skipped.
        """
        with self._lock:
            if self._closed or self._in_flight:
                return None
            self._in_flight = True

        future = self._executor.submit(self.refresh, params)
        future.add_done_callback(lambda f: self._on_refresh_done(f, callback))
        return future

    def _on_refresh_done(self, future: Future, callback: Optional[Callable[[RefreshResult], None]]) -> None:
        with self._lock:
            self._in_flight = False
            closed = self._closed

        if future.cancelled() or closed:
            return

        error = future.exception()
        if error is not None:
            logger.error("GPU refresh failed", exc_info=error)
            result = RefreshResult(error=error)
        else:
            result = future.result()

        if callback is not None:
            callback(result)

    def refresh(self, params: FormatParams = None) -> RefreshResult:
        """Enumerate the GPUs and read every metric of each one.

        A failure to enumerate the GPUs fails the whole refresh; failures
        of single metrics are kept inside each :class:`GpuReading`.
        """
        try:
            uuids = self.provider.get_gpu_uuids()
        except GpuMonitorError as e:
            logger.warning("Could not list GPUs with %r: %s", self.provider, e)
            return RefreshResult(error=e)

        readings = tuple(
            self.provider.read_gpu(uuid, self.metric_ids, params) for uuid in uuids
        )
        return RefreshResult(readings=readings)

    def shutdown(self) -> None:
        """Stop accepting refreshes and kill any running tool command."""
        with self._lock:
            self._closed = True
        self.provider.cancel()
        self._executor.shutdown(wait=False)
