from .logging import JsonlLogSink, StdoutLogSink, log_jsonl, log_null, log_stdout

__all__ = ["JsonlLogSink", "StdoutLogSink", "log_jsonl", "log_null", "log_stdout"]
