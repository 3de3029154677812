from .domain.logging import LogMessage
from .ports import ClosableLogSink, LogSink, NullLogSink

__all__ = ["ClosableLogSink", "LogMessage", "LogSink", "NullLogSink"]
