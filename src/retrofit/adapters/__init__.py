from .contracts import AdapterMeta, adapter, get_adapter_meta
from .discovery import AdapterDiscoveryError, discover_adapters
from .registry import AdapterRegistry, AdapterRegistryError

__all__ = [
    "adapter",
    "AdapterMeta",
    "get_adapter_meta",
    "discover_adapters",
    "AdapterDiscoveryError",
    "AdapterRegistry",
    "AdapterRegistryError",
]
