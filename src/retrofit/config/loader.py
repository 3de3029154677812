from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import ValidationError

from retrofit.config.models import RetrofitConfig


class ConfigError(ValueError):
    # Raised for invalid retrofit config (fail fast).
    pass


def load_yaml_config(path: Path) -> dict[str, object]:
    # Raw YAML mapping; an empty file is an empty mapping.
    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError("Config root must be a mapping")
    return raw


def parse_config(raw: object) -> RetrofitConfig:
    if not isinstance(raw, dict):
        raise ConfigError("Config root must be a mapping")
    try:
        return RetrofitConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc


def load_retrofit_config(path: Path) -> RetrofitConfig:
    return parse_config(load_yaml_config(path))
