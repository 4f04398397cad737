"""
Progress reporting for long-running wizard steps.
"""

import sys
from typing import Optional, TextIO


class StatusReporter:
    """Prints one line when a step starts and one when it finishes.

    Components receive a reporter instead of writing progress lines
    themselves, so tests can pass a silent or mocked one.
    """

    def __init__(self, stream: Optional[TextIO] = None, prefix: str = "[create-nextws]"):
        self.stream = stream
        self.prefix = prefix
        self.label: Optional[str] = None

    def _write(self, text: str, error: bool = False) -> None:
        stream = self.stream or (sys.stderr if error else sys.stdout)
        print(f"{self.prefix} {text}", file=stream)

    def start(self, label: str) -> None:
        # A new step implicitly completes the previous one
        if self.label is not None:
            self.succeed()
        self.label = label
        self._write(f"⏳ {label}")

    def succeed(self, message: Optional[str] = None) -> None:
        text = message or self.label
        self.label = None
        if text:
            self._write(f"✅ {text}")

    def fail(self, message: Optional[str] = None) -> None:
        text = message or self.label
        self.label = None
        if text:
            self._write(f"❌ {text}", error=True)


class SilentReporter(StatusReporter):
    """A reporter that swallows all output."""

    def _write(self, text: str, error: bool = False) -> None:
        pass
