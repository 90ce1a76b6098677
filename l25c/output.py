"""Collects compiler and program output into named channels."""

from __future__ import annotations

import sys

CHANNELS = ("general", "code", "table", "result")


class Listing:
    """Accumulates text for the general, code, table and result channels.

    When ``echo`` is true every emitted piece of text is also written to
    standard output, once per call.
    """

    def __init__(self, echo: bool = False) -> None:
        self.echo = echo
        self._parts: dict[str, list[str]] = {name: [] for name in CHANNELS}

    def emit(self, text: str, *args: str) -> None:
        """Append ``text`` to each named channel and echo it if enabled."""
        for channel in args:
            self._channel(channel).append(text)
        if self.echo:
            sys.stdout.write(text)

    def text(self, channel: str) -> str:
        """Return everything written to ``channel`` so far."""
        return "".join(self._channel(channel))

    def clear(self) -> None:
        """Discard the contents of every channel."""
        for parts in self._parts.values():
            parts.clear()

    def _channel(self, name: str) -> list[str]:
        try:
            return self._parts[name]
        except KeyError:
            raise ValueError(f"unknown output channel: {name!r}") from None