from __future__ import annotations

from types import ModuleType
from typing import Callable

from retrofit.adapters.contracts import get_adapter_meta


class AdapterDiscoveryError(RuntimeError):
    # Raised when adapter discovery finds duplicate names or invalid metadata.
    pass


def discover_adapters(
    modules: list[ModuleType],
) -> dict[tuple[str, str], Callable[[dict[str, object]], object]]:
    # Discover factories declared via @adapter, keyed by (role, name).
    discovered: dict[tuple[str, str], Callable[[dict[str, object]], object]] = {}
    for module in modules:
        for value in module.__dict__.values():
            meta = get_adapter_meta(value)
            if meta is None or not meta.name:
                continue
            if not callable(value):
                raise AdapterDiscoveryError(f"Adapter '{meta.name}' target is not callable")
            key = (meta.role, meta.name)
            if key in discovered:
                if discovered[key] is value:
                    # Same factory re-exported through another module.
                    continue
                raise AdapterDiscoveryError(f"Duplicate adapter discovered: {meta.role}/{meta.name}")
            discovered[key] = value
    return discovered
