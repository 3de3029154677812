from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from threading import Lock
from typing import Any

from retrofit.errors import EnvironmentFault, NoSuitableEnvironmentError
from retrofit.kernel.contract import MethodContract, contracts_for_all, declared_capabilities
from retrofit.kernel.dispatcher import AdapterDispatcher
from retrofit.observability.domain.logging import LogMessage
from retrofit.observability.ports import LogSink, NullLogSink

DISPATCHER_ATTR = "_retrofit_dispatcher"


class StructuralError(TypeError):
    # An environment cannot host one of the exposed capabilities.
    pass


@dataclass(frozen=True, slots=True)
class Environment:
    # Where a handle class is built: the defining module and the metaclass that constructs it.
    module: str
    metaclass: type

    @property
    def label(self) -> str:
        return f"{self.module}:{self.metaclass.__qualname__}"

    def sees(self, capability: type) -> bool:
        return issubclass(self.metaclass, type(capability))


def environment_for(cls: type) -> Environment | None:
    # Built-in classes come from the interpreter itself and offer no environment.
    if cls.__module__ == "builtins":
        return None
    return Environment(module=cls.__module__, metaclass=type(cls))


def candidate_environments(target: object, interfaces: Sequence[type]) -> list[Environment | None]:
    # Target's own type first, then each requested capability in request order.
    return [environment_for(type(target))] + [environment_for(interface) for interface in interfaces]


def exposed_capabilities(target: object, interfaces: Sequence[type]) -> tuple[type, ...]:
    # Requested ∪ natively declared, without bases already implied by a more derived entry.
    ordered: list[type] = []
    for capability in (*interfaces, *declared_capabilities(type(target))):
        if capability not in ordered:
            ordered.append(capability)
    return tuple(
        capability
        for capability in ordered
        if not any(other is not capability and capability in other.__mro__ for other in ordered)
    )


@dataclass(slots=True)
class ProxyMaterializer:
    # Builds composite handles whose every contract method routes through an AdapterDispatcher.
    log_sink: LogSink = field(default_factory=NullLogSink)
    _classes: dict[tuple[tuple[type, ...], Environment], type] = field(default_factory=dict)
    _lock: Lock = field(default_factory=Lock, init=False, repr=False)

    def materialize(self, target: object, interfaces: Sequence[type], dispatcher: AdapterDispatcher) -> object:
        exposed = exposed_capabilities(target, interfaces)
        faults: list[EnvironmentFault] = []
        tried: set[Environment] = set()
        for environment in candidate_environments(target, interfaces):
            if environment is None or environment in tried:
                continue
            tried.add(environment)
            try:
                handle_cls = self.handle_class(exposed, environment)
                handle = object.__new__(handle_cls)
            except TypeError as exc:
                # This environment cannot build the handle; record and try the next one.
                faults.append(EnvironmentFault(environment=environment.label, error=exc))
                self.log_sink.emit(
                    LogMessage(
                        level="debug",
                        message="environment_rejected",
                        fields={"environment": environment.label, "error": str(exc)},
                    )
                )
                continue
            object.__setattr__(handle, DISPATCHER_ATTR, dispatcher)
            self.log_sink.emit(
                LogMessage(
                    level="debug",
                    message="retrofitted",
                    fields={
                        "target_type": type(target).__qualname__,
                        "capabilities": [capability.__qualname__ for capability in exposed],
                        "environment": environment.label,
                    },
                )
            )
            return handle
        self.log_sink.emit(
            LogMessage(
                level="error",
                message="no_suitable_environment",
                fields={"target_type": type(target).__qualname__, "faults": [str(fault) for fault in faults]},
            )
        )
        raise NoSuitableEnvironmentError(faults)

    def handle_class(self, exposed: tuple[type, ...], environment: Environment) -> type:
        key = (exposed, environment)
        with self._lock:
            cached = self._classes.get(key)
        if cached is not None:
            return cached
        built = _build_handle_class(exposed, environment)
        with self._lock:
            return self._classes.setdefault(key, built)


def _build_handle_class(exposed: tuple[type, ...], environment: Environment) -> type:
    for capability in exposed:
        if not environment.sees(capability):
            raise StructuralError(
                f"{capability.__module__}.{capability.__qualname__} "
                f"(metaclass {type(capability).__qualname__}) is not visible from {environment.label}"
            )
    name = "Retrofitted" + "".join(capability.__name__ for capability in exposed)
    namespace: dict[str, Any] = {
        "__module__": environment.module,
        "__qualname__": name,
        "__slots__": (DISPATCHER_ATTR,),
        "__retrofitted__": True,
        "__repr__": _handle_repr,
    }
    for contract in contracts_for_all(exposed):
        # First declaration of a name wins the slot in the dispatch table.
        if contract.name not in namespace:
            if contract.kind == "property":
                namespace[contract.name] = _property_forwarder(contract, owner=name)
            else:
                namespace[contract.name] = _forwarder(contract, owner=name)
    return environment.metaclass(name, exposed, namespace)


def _forwarder(contract: MethodContract, *, owner: str) -> Callable[..., object]:
    def forward(self: object, *args: object, **kwargs: object) -> object:
        dispatcher: AdapterDispatcher = getattr(self, DISPATCHER_ATTR)
        return dispatcher.invoke(contract, args, kwargs)

    forward.__name__ = contract.name
    forward.__qualname__ = f"{owner}.{contract.name}"
    forward.__doc__ = f"Forwards {contract.describe()} to the retrofitted target."
    return forward


def _property_forwarder(contract: MethodContract, *, owner: str) -> property:
    def read(self: object) -> object:
        dispatcher: AdapterDispatcher = getattr(self, DISPATCHER_ATTR)
        return dispatcher.invoke(contract, ())

    read.__name__ = contract.name
    read.__qualname__ = f"{owner}.{contract.name}"
    return property(read, doc=f"Reads {contract.describe()} from the retrofitted target.")


def _handle_repr(self: object) -> str:
    dispatcher: AdapterDispatcher = getattr(self, DISPATCHER_ATTR)
    return f"<{type(self).__name__} wrapping {dispatcher.target!r}>"
