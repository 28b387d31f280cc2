"""Tests for SubprocessRunner."""

from __future__ import annotations

import sys
import threading
import time

import pytest

from reprofetch.distro.runner import CommandRunner, SubprocessRunner
from reprofetch.errors import ExternalToolError, OperationCancelledError


class TestSubprocessRunner:
    def test_satisfies_protocol(self):
        assert isinstance(SubprocessRunner(), CommandRunner)

    def test_captures_stdout(self):
        out = SubprocessRunner().run([sys.executable, "-c", "print('hello')"])
        assert out == "hello\n"

    def test_nonzero_exit(self):
        argv = [sys.executable, "-c", "import sys; sys.stderr.write('E: boom'); sys.exit(3)"]
        with pytest.raises(ExternalToolError) as exc_info:
            SubprocessRunner().run(argv)
        assert exc_info.value.returncode == 3
        assert "boom" in str(exc_info.value)

    def test_missing_program(self):
        with pytest.raises(ExternalToolError):
            SubprocessRunner().run(["reprofetch-no-such-program"])

    def test_cancel(self):
        cancel = threading.Event()
        timer = threading.Timer(0.3, cancel.set)
        timer.start()
        started = time.monotonic()
        try:
            with pytest.raises(OperationCancelledError):
                SubprocessRunner().run(
                    [sys.executable, "-c", "import time; time.sleep(30)"], cancel=cancel
                )
        finally:
            timer.cancel()
        assert time.monotonic() - started < 10
