"""External command execution for distro drivers.

Drivers never call ``subprocess`` directly; they go through a
``CommandRunner`` so tests can substitute canned package-manager output.
"""

from __future__ import annotations

import logging
import subprocess
import threading
from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from reprofetch.errors import ExternalToolError, OperationCancelledError

logger = logging.getLogger(__name__)

# How often a running command checks its cancellation event
_POLL_INTERVAL = 0.2


@runtime_checkable
class CommandRunner(Protocol):
    """Protocol for running package-manager commands.

    With ``capture=True`` the command's stdout is returned as text.
    With ``capture=False`` stdio is inherited (interactive installers) and
    an empty string is returned. A non-zero exit raises
    ``ExternalToolError``.
    """

    def run(
        self,
        argv: Sequence[str],
        *,
        capture: bool = True,
        cancel: threading.Event | None = None,
    ) -> str: ...


class SubprocessRunner:
    """Default runner backed by ``subprocess.Popen``."""

    def run(
        self,
        argv: Sequence[str],
        *,
        capture: bool = True,
        cancel: threading.Event | None = None,
    ) -> str:
        argv = list(argv)
        logger.debug("Running %s", argv)
        try:
            proc = subprocess.Popen(
                argv,
                stdout=subprocess.PIPE if capture else None,
                stderr=subprocess.PIPE if capture else None,
                text=True,
            )
        except OSError as exc:
            raise ExternalToolError(argv, detail=str(exc)) from exc

        out, err = self._wait(proc, argv, cancel)
        if proc.returncode != 0:
            raise ExternalToolError(argv, proc.returncode, (err or "").strip()[-2000:])
        return out or ""

    @staticmethod
    def _wait(
        proc: subprocess.Popen[str],
        argv: list[str],
        cancel: threading.Event | None,
    ) -> tuple[str | None, str | None]:
        if cancel is None:
            return proc.communicate()
        while True:
            if cancel.is_set():
                proc.kill()
                proc.communicate()
                raise OperationCancelledError(f"command {argv!r} was cancelled")
            try:
                return proc.communicate(timeout=_POLL_INTERVAL)
            except subprocess.TimeoutExpired:
                continue
