from __future__ import annotations

import json
from pathlib import Path

from retrofit.adapters.contracts import adapter
from retrofit.observability.domain.logging import LEVELS, LogMessage
from retrofit.observability.ports import LogSink, NullLogSink


class StdoutLogSink:
    # Structured log sink writing one compact JSON object per line to stdout.
    def __init__(self, *, min_level: str = "debug") -> None:
        self._min_level = min_level

    def emit(self, message: LogMessage) -> None:
        if not message.at_least(self._min_level):
            return
        print(json.dumps(_log_to_dict(message), separators=(",", ":"), ensure_ascii=False, default=str))


class JsonlLogSink:
    # File-backed structured log sink for adaptation diagnostics.
    def __init__(self, path: Path, *, min_level: str = "debug") -> None:
        self._path = path
        self._min_level = min_level
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._file = self._path.open("a", encoding="utf-8")

    def emit(self, message: LogMessage) -> None:
        if not message.at_least(self._min_level):
            return
        payload = json.dumps(_log_to_dict(message), separators=(",", ":"), ensure_ascii=False, default=str)
        self._file.write(payload + "\n")
        self._file.flush()

    def close(self) -> None:
        # Idempotent so shared sinks can be closed by every owner.
        if not self._file.closed:
            self._file.close()


@adapter(name="stdout", role="log_sink", provides=LogSink)
def log_stdout(settings: dict[str, object]) -> StdoutLogSink:
    return StdoutLogSink(min_level=_min_level(settings, "log_stdout"))


@adapter(name="jsonl", role="log_sink", provides=LogSink)
def log_jsonl(settings: dict[str, object]) -> JsonlLogSink:
    path = settings.get("path")
    if not isinstance(path, str) or not path:
        raise ValueError("log_jsonl.settings.path must be a non-empty string")
    return JsonlLogSink(Path(path), min_level=_min_level(settings, "log_jsonl"))


@adapter(name="null", role="log_sink", provides=LogSink)
def log_null(settings: dict[str, object]) -> NullLogSink:
    _ = settings
    return NullLogSink()


def _min_level(settings: dict[str, object], owner: str) -> str:
    level = settings.get("min_level", "debug")
    if not isinstance(level, str) or level not in LEVELS:
        raise ValueError(f"{owner}.settings.min_level must be one of: {list(LEVELS)}")
    return level


def _log_to_dict(message: LogMessage) -> dict[str, object]:
    return {
        "level": message.level,
        "message": message.message,
        "timestamp": message.timestamp.isoformat().replace("+00:00", "Z"),
        "fields": message.fields,
    }
