from __future__ import annotations

import types

import pytest

from retrofit.adapters.contracts import adapter, get_adapter_meta
from retrofit.adapters.discovery import AdapterDiscoveryError, discover_adapters
from retrofit.adapters.registry import AdapterRegistry, AdapterRegistryError
from retrofit.observability.ports import LogSink, NullLogSink


@adapter(role="log_sink", name="memory", provides=LogSink)
def memory_sink(settings: dict[str, object]) -> NullLogSink:
    return NullLogSink()


@adapter(role="log_sink", name="broken", provides=LogSink)
def broken_sink(settings: dict[str, object]) -> object:
    return object()


def _module(name: str, **values: object) -> types.ModuleType:
    module = types.ModuleType(name)
    module.__dict__.update(values)
    return module


def test_adapter_decorator_attaches_meta() -> None:
    meta = get_adapter_meta(memory_sink)
    assert meta is not None
    assert (meta.role, meta.name, meta.provides) == ("log_sink", "memory", LogSink)
    assert get_adapter_meta(object()) is None


def test_discovery_keys_by_role_and_name() -> None:
    found = discover_adapters([_module("sinks", memory_sink=memory_sink, unrelated=len)])
    assert found == {("log_sink", "memory"): memory_sink}


def test_reexported_factory_is_not_a_duplicate() -> None:
    modules = [_module("a", memory_sink=memory_sink), _module("b", again=memory_sink)]
    assert len(discover_adapters(modules)) == 1


def test_conflicting_names_fail_discovery() -> None:
    @adapter(role="log_sink", name="memory")
    def impostor(settings: dict[str, object]) -> NullLogSink:
        return NullLogSink()

    with pytest.raises(AdapterDiscoveryError):
        discover_adapters([_module("a", memory_sink=memory_sink), _module("b", impostor=impostor)])


def test_registry_builds_known_kind() -> None:
    registry = AdapterRegistry.from_modules([_module("sinks", memory_sink=memory_sink)])
    assert isinstance(registry.build("log_sink", {"kind": "memory"}), NullLogSink)


def test_registry_rejects_bad_requests() -> None:
    registry = AdapterRegistry()
    registry.register("log_sink", "memory", memory_sink)
    with pytest.raises(AdapterRegistryError):
        registry.register("log_sink", "memory", memory_sink)
    with pytest.raises(AdapterRegistryError):
        registry.build("log_sink", {"kind": "kafka"})
    with pytest.raises(AdapterRegistryError):
        registry.build("log_sink", {"kind": 1})
    with pytest.raises(AdapterRegistryError):
        registry.build("log_sink", {"kind": "memory", "settings": []})
    with pytest.raises(AdapterRegistryError):
        registry.build("log_sink", "memory")  # type: ignore[arg-type]


def test_registry_checks_provided_port() -> None:
    registry = AdapterRegistry()
    registry.register("log_sink", "broken", broken_sink)
    with pytest.raises(AdapterRegistryError):
        registry.build("log_sink", {"kind": "broken"})
