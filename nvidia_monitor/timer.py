# SPDX-License-Identifier: GPL-3.0-or-later
# Refresh timer

"""Recurring GLib timer with explicit cancel-before-rearm."""

from __future__ import annotations

from typing import Callable, Optional

from gi.repository import GLib


class RefreshTimer:
    """Owns at most one recurring GLib timeout source.

    The callback is invoked on the GTK main loop every ``seconds`` seconds
    until :meth:`cancel` is called or the callback returns False.
    """

    def __init__(self) -> None:
        self._source_id: Optional[int] = None
        self._callback: Optional[Callable[[], bool]] = None

    @property
    def armed(self) -> bool:
        return self._source_id is not None

    def arm(self, seconds: int, callback: Callable[[], bool]) -> None:
        """Start the timer, replacing any timer armed before."""
        self.cancel()
        self._callback = callback
        self._source_id = GLib.timeout_add_seconds(seconds, self._on_timeout)

    def cancel(self) -> None:
        if self._source_id is not None:
            GLib.source_remove(self._source_id)
            self._source_id = None

    def _on_timeout(self) -> bool:
        if self._callback is None or not self._callback():
            # Returning False removes the source
            self._source_id = None
            return GLib.SOURCE_REMOVE
        return GLib.SOURCE_CONTINUE
