from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any, TypeVar, overload

from retrofit.errors import InvalidArgumentError
from retrofit.kernel.cache import MethodResolutionCache
from retrofit.kernel.contract import MethodContract, contracts_for_all
from retrofit.kernel.descriptors import MethodRegistry
from retrofit.kernel.dispatcher import AdapterDispatcher
from retrofit.kernel.materializer import DISPATCHER_ATTR, ProxyMaterializer
from retrofit.kernel.matcher import Resolution, SignatureMatcher
from retrofit.kernel.validator import CompletionValidator
from retrofit.observability.ports import ClosableLogSink, LogSink, NullLogSink

T = TypeVar("T")
F = TypeVar("F", bound=Callable[..., Any])


class Retrofitter:
    """Adapt existing objects to capability classes they never declared.

    ``complete`` checks up front that every method of the requested capabilities
    resolves on the target and fails with ``MethodsNotImplementedError`` otherwise.
    ``partial`` returns immediately; a method without an implementation raises
    ``UnsupportedOperationError`` only when it is called.

    Implementations are looked up on the target's class and on functions
    registered for it through :meth:`register`. ``aliases`` maps capability
    method names to differently named target methods.
    """

    def __init__(
        self,
        *,
        registry: MethodRegistry | None = None,
        cache: MethodResolutionCache | None = None,
        aliases: Mapping[str, str] | None = None,
        numeric_promotion: bool = True,
        log_sink: LogSink | None = None,
    ) -> None:
        self.registry = registry if registry is not None else MethodRegistry()
        self.cache = cache if cache is not None else MethodResolutionCache()
        self.aliases: dict[str, str] = dict(aliases or {})
        self.numeric_promotion = numeric_promotion
        self.log_sink: LogSink = log_sink or NullLogSink()
        self.registry.subscribe(self.cache.invalidate)
        self._matcher = SignatureMatcher(
            self.registry,
            cache=self.cache,
            aliases=self.aliases,
            numeric_promotion=numeric_promotion,
            log_sink=self.log_sink,
        )
        self._materializer = ProxyMaterializer(log_sink=self.log_sink)

    def create_method_lookup(self, target: object) -> SignatureMatcher:
        # Hook for subclasses that resolve differently per target; resolution itself is type-based.
        _ = target
        return self._matcher

    @overload
    def complete(self, target: object, interfaces: type[T]) -> T: ...

    @overload
    def complete(self, target: object, interfaces: Iterable[type]) -> Any: ...

    def complete(self, target: object, interfaces: type | Iterable[type]) -> Any:
        requested = check_parameters(target, interfaces)
        matcher = self.create_method_lookup(target)
        CompletionValidator(matcher, log_sink=self.log_sink).validate_complete(contracts_for_all(requested), target)
        return self._materializer.materialize(target, requested, AdapterDispatcher(target, matcher))

    @overload
    def partial(self, target: object, interfaces: type[T]) -> T: ...

    @overload
    def partial(self, target: object, interfaces: Iterable[type]) -> Any: ...

    def partial(self, target: object, interfaces: type | Iterable[type]) -> Any:
        requested = check_parameters(target, interfaces)
        matcher = self.create_method_lookup(target)
        return self._materializer.materialize(target, requested, AdapterDispatcher(target, matcher))

    def register(self, target_type: type, *, name: str | None = None) -> Callable[[F], F]:
        # Associate a free function `func(target, ...)` with `target_type` as method `name`.
        return self.registry.implementation(target_type, name=name)

    def resolve(self, target: object, contract: MethodContract) -> Resolution:
        return self.create_method_lookup(target).resolve(contract, target)

    def with_aliases(self, aliases: Mapping[str, str]) -> Retrofitter:
        # Shares registry and cache; cache keys include the looked-up name.
        return Retrofitter(
            registry=self.registry,
            cache=self.cache,
            aliases={**self.aliases, **aliases},
            numeric_promotion=self.numeric_promotion,
            log_sink=self.log_sink,
        )

    def close(self) -> None:
        # Releases the log sink; Retrofitters derived through with_aliases share it.
        if isinstance(self.log_sink, ClosableLogSink):
            self.log_sink.close()

    def __enter__(self) -> Retrofitter:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def check_parameters(target: object, interfaces: type | Iterable[type] | None) -> tuple[type, ...]:
    # Reject malformed input before any resolution work happens.
    if target is None:
        raise InvalidArgumentError("Target object cannot be None")
    if interfaces is None:
        raise InvalidArgumentError("Interfaces to implement cannot be None")
    if isinstance(interfaces, type):
        candidates: tuple[object, ...] = (interfaces,)
    else:
        try:
            candidates = tuple(interfaces)
        except TypeError as exc:
            raise InvalidArgumentError(f"Interfaces must be a class or an iterable of classes: {interfaces!r}") from exc
    if not candidates:
        raise InvalidArgumentError("At least one interface to implement is required")
    requested: list[type] = []
    for candidate in candidates:
        if candidate is None:
            raise InvalidArgumentError("Interface to implement cannot be None")
        if not isinstance(candidate, type):
            raise InvalidArgumentError(f"Interface to implement must be a class: {candidate!r}")
        if candidate not in requested:
            requested.append(candidate)
    return tuple(requested)


def unwrap(handle: object) -> object:
    # Return the adapted target behind a retrofitted handle.
    dispatcher = getattr(handle, DISPATCHER_ATTR, None)
    if not isinstance(dispatcher, AdapterDispatcher):
        raise InvalidArgumentError(f"Not a retrofitted handle: {handle!r}")
    return dispatcher.target


def is_retrofitted(value: object) -> bool:
    return bool(getattr(type(value), "__retrofitted__", False))
