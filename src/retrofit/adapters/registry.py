from __future__ import annotations

from types import ModuleType
from typing import Callable

from retrofit.adapters.contracts import AdapterMeta, get_adapter_meta
from retrofit.adapters.discovery import discover_adapters


class AdapterRegistryError(ValueError):
    # Raised when adapter lookup/build fails.
    pass


class AdapterRegistry:
    # Registry of adapter factories keyed by role + kind.
    def __init__(self) -> None:
        self._factories: dict[tuple[str, str], Callable[[dict[str, object]], object]] = {}
        self._meta: dict[tuple[str, str], AdapterMeta | None] = {}

    @classmethod
    def from_modules(cls, modules: list[ModuleType]) -> AdapterRegistry:
        registry = cls()
        for (role, kind), factory in discover_adapters(modules).items():
            registry.register(role, kind, factory)
        return registry

    def register(self, role: str, kind: str, factory: Callable[[dict[str, object]], object]) -> None:
        key = (role, kind)
        if key in self._factories:
            raise AdapterRegistryError(f"Duplicate adapter registration: {role}/{kind}")
        self._factories[key] = factory
        self._meta[key] = get_adapter_meta(factory)

    def build(self, role: str, config: dict[str, object]) -> object:
        if not isinstance(config, dict):
            raise AdapterRegistryError("Adapter config must be a mapping")
        kind = config.get("kind")
        if not isinstance(kind, str):
            raise AdapterRegistryError("Adapter kind must be a string")
        settings = config.get("settings", {})
        if not isinstance(settings, dict):
            raise AdapterRegistryError("Adapter settings must be a mapping")
        key = (role, kind)
        if key not in self._factories:
            raise AdapterRegistryError(f"Unknown adapter kind for role {role}: {kind}")
        built = self._factories[key](settings)
        meta = self._meta.get(key)
        if meta is not None and meta.provides is not None and not isinstance(built, meta.provides):
            raise AdapterRegistryError(
                f"Adapter {role}/{kind} built {type(built).__qualname__}, expected {meta.provides.__qualname__}"
            )
        return built

    def kinds(self, role: str) -> list[str]:
        return sorted(kind for (known_role, kind) in self._factories if known_role == role)

    def get_meta(self, role: str, kind: str) -> AdapterMeta | None:
        return self._meta.get((role, kind))
