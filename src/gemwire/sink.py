"""Process-wide logging sink.

Everything gemwire reports about a call (assembled payloads, response text,
failures) goes through one replaceable sink. The default forwards to the
stdlib ``gemwire`` logger, so consumers that already configure ``logging``
need nothing else. Hosts with their own console (game engines, notebooks,
GUI shells) install a sink of their own with :func:`set_sink`.

Example:
    class ConsoleSink(LoggingSink):
        def error(self, message: str) -> None:
            engine.console.print_error(message)

    set_sink(ConsoleSink())
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

log = logging.getLogger("gemwire")


@runtime_checkable
class LogSink(Protocol):
    """Duck-typed protocol for log sinks."""

    def log(self, message: str) -> None: ...  # noqa: D102
    def write(self, message: str) -> None: ...  # noqa: D102
    def write_line(self, message: str) -> None: ...  # noqa: D102
    def warning(self, message: str) -> None: ...  # noqa: D102
    def error(self, message: str) -> None: ...  # noqa: D102
    def fail(self, message: str) -> None: ...  # noqa: D102
    def assert_(self, condition: bool, message: str) -> None: ...  # noqa: D102
    def write_if(self, condition: bool, message: str) -> None: ...  # noqa: D102
    def write_line_if(self, condition: bool, message: str) -> None: ...  # noqa: D102


class LoggingSink:
    """Default sink backed by a stdlib logger.

    ``write`` fragments are buffered and emitted together with the next
    ``write_line`` call, since log records have no notion of a partial line.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or log
        self._pending: list[str] = []

    def log(self, message: str) -> None:
        self._logger.debug(message)

    def write(self, message: str) -> None:
        self._pending.append(message)

    def write_line(self, message: str) -> None:
        line = "".join((*self._pending, message))
        self._pending.clear()
        self._logger.debug(line)

    def warning(self, message: str) -> None:
        self._logger.warning(message)

    def error(self, message: str) -> None:
        self._logger.error(message)

    def fail(self, message: str) -> None:
        self._logger.critical(message)

    def assert_(self, condition: bool, message: str) -> None:
        if not condition:
            self._logger.error("Assertion failed: %s", message)

    def write_if(self, condition: bool, message: str) -> None:
        if condition:
            self.write(message)

    def write_line_if(self, condition: bool, message: str) -> None:
        if condition:
            self.write_line(message)


_sink: LogSink = LoggingSink()


def get_sink() -> LogSink:
    """Return the active process-wide sink."""
    return _sink


def set_sink(sink: LogSink) -> None:
    """Replace the process-wide sink. Takes effect for all subsequent calls."""
    global _sink
    if not isinstance(sink, LogSink):
        raise TypeError(f"{type(sink).__name__} does not implement LogSink")
    _sink = sink


def reset_sink() -> None:
    """Restore the default stdlib-backed sink."""
    global _sink
    _sink = LoggingSink()
