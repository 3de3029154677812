from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class AdapterMeta:
    # Factory-level contract: registry role, config name (kind) and the port the product satisfies.
    name: str
    role: str
    provides: type[Any] | None


def adapter(
    *,
    role: str,
    name: str | None = None,
    provides: type[Any] | None = None,
) -> Callable[[T], T]:
    # Decorator attaches AdapterMeta to adapter factories for discovery.

    def _decorate(target: T) -> T:
        resolved_name = name
        if not isinstance(resolved_name, str) or not resolved_name:
            resolved_name = getattr(target, "__name__", "")
        meta = AdapterMeta(name=resolved_name, role=role, provides=provides)
        setattr(target, "__adapter_meta__", meta)
        return target

    return _decorate


def get_adapter_meta(target: object) -> AdapterMeta | None:
    meta = getattr(target, "__adapter_meta__", None)
    if isinstance(meta, AdapterMeta):
        return meta
    return None
