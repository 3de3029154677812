from __future__ import annotations

from dataclasses import dataclass, field
from threading import Lock
from typing import TYPE_CHECKING

from retrofit.kernel.contract import MethodContract

if TYPE_CHECKING:
    from retrofit.kernel.matcher import Resolution

# (target type, contract, name looked up on the target, numeric promotion enabled)
CacheKey = tuple[type, MethodContract, str, bool]


@dataclass(slots=True)
class MethodResolutionCache:
    # Process-wide memo of resolutions; values depend only on types, never on instances.
    _entries: dict[CacheKey, Resolution] = field(default_factory=dict)
    _lock: Lock = field(default_factory=Lock, init=False, repr=False)
    hits: int = 0
    misses: int = 0

    def get(self, key: CacheKey) -> Resolution | None:
        with self._lock:
            found = self._entries.get(key)
            if found is None:
                self.misses += 1
            else:
                self.hits += 1
            return found

    def put(self, key: CacheKey, resolution: Resolution) -> Resolution:
        # First writer wins; racing recomputations are identical anyway.
        with self._lock:
            return self._entries.setdefault(key, resolution)

    def invalidate(self, target_type: type | None = None) -> None:
        # Registrations on a base type affect every subclass, so drop those entries too.
        with self._lock:
            if target_type is None:
                self._entries.clear()
                return
            stale = [key for key in self._entries if target_type in key[0].__mro__]
            for key in stale:
                del self._entries[key]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class PassThroughCache(MethodResolutionCache):
    # Disabled cache: every lookup recomputes.
    def get(self, key: CacheKey) -> Resolution | None:
        return None

    def put(self, key: CacheKey, resolution: Resolution) -> Resolution:
        return resolution
