from __future__ import annotations

from pathlib import Path

import pytest

from retrofit.config.loader import ConfigError, load_retrofit_config, load_yaml_config, parse_config


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "retrofit.yml"
    path.write_text(text, encoding="utf-8")
    return path


def test_load_yaml_config_returns_mapping(tmp_path: Path) -> None:
    path = _write(tmp_path, "resolution:\n  cache: false\n")
    assert load_yaml_config(path) == {"resolution": {"cache": False}}


def test_empty_file_is_default_config(tmp_path: Path) -> None:
    config = load_retrofit_config(_write(tmp_path, ""))
    assert config.resolution.cache
    assert config.resolution.numeric_promotion
    assert config.resolution.aliases == {}
    assert config.logging.kind == "null"


def test_load_yaml_config_rejects_non_mapping(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_yaml_config(_write(tmp_path, "[]\n"))


def test_unknown_keys_are_rejected() -> None:
    with pytest.raises(ConfigError):
        parse_config({"resolution": {"strict": True}})
    with pytest.raises(ConfigError):
        parse_config({"tracing": {}})


def test_aliases_must_be_identifiers() -> None:
    with pytest.raises(ConfigError):
        parse_config({"resolution": {"aliases": {"area": "not a name"}}})


def test_parse_config_requires_mapping() -> None:
    with pytest.raises(ConfigError):
        parse_config(["resolution"])
