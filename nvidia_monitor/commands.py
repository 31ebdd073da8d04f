# SPDX-License-Identifier: GPL-3.0-or-later
# Command utilities for running the vendor tools

"""Utilities for running vendor command line tools on the host system."""

from __future__ import annotations

import logging
import os
import subprocess
import threading
from typing import List, NamedTuple, Sequence, Set

from .errors import CommandCancelledError, ProcessOutputError, ProcessSpawnError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5


class CommandResult(NamedTuple):
    """Captured output of a finished child process."""
    stdout: str
    stderr: str
    returncode: int


def is_flatpak() -> bool:
    """Check if running inside a Flatpak sandbox.

    Returns:
        True if running inside Flatpak, False otherwise.
    """
    return os.path.exists('/.flatpak-info')


def host_argv(cmd: Sequence[str]) -> List[str]:
    """Return the argument vector that runs ``cmd`` on the host system.

    When running in Flatpak, the command is wrapped with
    ``flatpak-spawn --host`` so the vendor tools installed on the host
    are reachable. Otherwise the command is returned unchanged.
    """
    if is_flatpak():
        return ['flatpak-spawn', '--host'] + list(cmd)
    return list(cmd)


class CommandRunner:
    """Runs argument vectors as child processes without a shell.

    The runner remembers every child it is waiting on so that
    :meth:`cancel` can kill them, e.g. when the provider is replaced or
    the window closes. After cancellation every further call fails with
    :class:`CommandCancelledError`.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.timeout = timeout
        self._lock = threading.Lock()
        self._active: Set[subprocess.Popen] = set()
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def run(self, argv: Sequence[str]) -> CommandResult:
        """Run a command and wait for it to finish.

        Args:
            argv: Discrete argument vector; no shell interpretation occurs.

        Returns:
            The captured stdout, stderr and exit status.

        Raises:
            ProcessSpawnError: If the program could not be started.
            ProcessOutputError: If the program did not finish in time.
            CommandCancelledError: If the runner has been cancelled.
        """
        full_cmd = host_argv(argv)

        with self._lock:
            if self._cancelled:
                raise CommandCancelledError(f"Command cancelled: {' '.join(argv)}")
            try:
                proc = subprocess.Popen(
                    full_cmd,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.PIPE,
                    text=True
                )
            except OSError as e:
                raise ProcessSpawnError(f"{argv[0]}: {e.strerror or e}") from e
            self._active.add(proc)

        try:
            stdout, stderr = proc.communicate(timeout=self.timeout)
        except subprocess.TimeoutExpired:
            proc.kill()
            proc.communicate()
            raise ProcessOutputError(
                f"{argv[0]} did not finish within {self.timeout} seconds"
            )
        finally:
            with self._lock:
                self._active.discard(proc)

        if self._cancelled:
            raise CommandCancelledError(f"Command cancelled: {' '.join(argv)}")

        return CommandResult(stdout or '', stderr or '', proc.returncode)

    def spawn_detached(self, argv: Sequence[str]) -> subprocess.Popen:
        """Start a command without waiting for it (fire-and-forget).

        Raises:
            ProcessSpawnError: If the program could not be started.
        """
        try:
            return subprocess.Popen(
                host_argv(argv),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True
            )
        except OSError as e:
            raise ProcessSpawnError(f"{argv[0]}: {e.strerror or e}") from e

    def cancel(self) -> None:
        """Kill every in-flight child and refuse further commands."""
        with self._lock:
            self._cancelled = True
            active = list(self._active)

        for proc in active:
            try:
                proc.kill()
            except ProcessLookupError:
                pass
        if active:
            logger.info("Cancelled %d running command(s)", len(active))
