from __future__ import annotations

from pathlib import Path
from typing import cast

from retrofit.adapters.registry import AdapterRegistry, AdapterRegistryError
from retrofit.app.retrofitter import Retrofitter
from retrofit.config.loader import ConfigError, load_retrofit_config, parse_config
from retrofit.config.models import RetrofitConfig
from retrofit.kernel.cache import MethodResolutionCache, PassThroughCache
from retrofit.observability.adapters import logging as logging_adapters
from retrofit.observability.ports import LogSink

LOG_SINK_ROLE = "log_sink"


def default_adapter_registry() -> AdapterRegistry:
    return AdapterRegistry.from_modules([logging_adapters])


def build_retrofitter(
    config: RetrofitConfig | dict[str, object] | None = None,
    *,
    adapter_registry: AdapterRegistry | None = None,
) -> Retrofitter:
    # Wire a Retrofitter from validated config: cache policy, aliases and log sink.
    if config is None:
        config = RetrofitConfig()
    elif not isinstance(config, RetrofitConfig):
        config = parse_config(config)
    registry = adapter_registry or default_adapter_registry()
    logging_cfg: dict[str, object] = {"kind": config.logging.kind, "settings": dict(config.logging.settings)}
    try:
        sink = cast(LogSink, registry.build(LOG_SINK_ROLE, logging_cfg))
    except (AdapterRegistryError, ValueError) as exc:
        raise ConfigError(f"logging: {exc}") from exc
    resolution = config.resolution
    cache = MethodResolutionCache() if resolution.cache else PassThroughCache()
    return Retrofitter(
        cache=cache,
        aliases=resolution.aliases,
        numeric_promotion=resolution.numeric_promotion,
        log_sink=sink,
    )


def retrofitter_from_file(path: Path) -> Retrofitter:
    return build_retrofitter(load_retrofit_config(path))
