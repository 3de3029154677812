from __future__ import annotations

from typing import Protocol, runtime_checkable

from retrofit.observability.domain.logging import LogMessage


@runtime_checkable
class LogSink(Protocol):
    # Destination for structured adaptation events.
    def emit(self, message: LogMessage) -> None:
        raise NotImplementedError("LogSink.emit must be implemented")


class NullLogSink:
    # Default sink: adaptation is silent unless a sink is configured.
    def emit(self, message: LogMessage) -> None:
        _ = message


@runtime_checkable
class ClosableLogSink(LogSink, Protocol):
    # Sink holding a resource (file handle) that must be released on shutdown.
    def close(self) -> None:
        raise NotImplementedError("ClosableLogSink.close must be implemented")
