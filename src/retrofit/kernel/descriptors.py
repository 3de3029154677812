from __future__ import annotations

import inspect
import types
from collections.abc import Callable, Collection
from dataclasses import dataclass, field
from threading import Lock
from typing import Any, Literal, TypeVar

from retrofit.kernel.contract import signature_types
from retrofit.kernel.typing_compat import normalize_annotation

F = TypeVar("F", bound=Callable[..., Any])

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


class MethodRegistryError(ValueError):
    # Raised when an associated implementation cannot be registered.
    pass


@dataclass(frozen=True, slots=True)
class MethodDescriptor:
    # A member available on a target type, described for matching.
    # param_names lines up with param_types; None marks a positional-only parameter.
    name: str
    declaring: type
    member: object
    param_types: tuple[object, ...]
    return_type: object
    min_positional: int
    max_positional: int | None
    registered: bool = False
    param_names: tuple[str | None, ...] = ()
    keyword_params: tuple[tuple[str, object], ...] = ()
    required_keywords: frozenset[str] = frozenset()
    var_keyword: bool = False
    kind: Literal["method", "property"] = "method"

    def accepts_arity(self, count: int) -> bool:
        return self.accepts_call(count)

    def accepts_call(self, positional: int, keywords: Collection[str] = ()) -> bool:
        # Required parameters past the positional ones must be named by the caller.
        if self.max_positional is not None and positional > self.max_positional:
            return False
        for index in range(positional, self.min_positional):
            if index >= len(self.param_names) or self.param_names[index] not in keywords:
                return False
        return self.required_keywords.issubset(keywords)

    def keyword_type(self, keyword: str, *, positional: int) -> object | None:
        # Annotation of the parameter receiving `keyword`, or None when it cannot be passed.
        for index in range(positional, len(self.param_types)):
            if index < len(self.param_names) and self.param_names[index] == keyword:
                return self.param_types[index]
        for name, annotation in self.keyword_params:
            if name == keyword:
                return annotation
        return Any if self.var_keyword else None

    def bind(self, target: object) -> Any:
        # Descriptor protocol keeps static/class methods, plain functions and properties uniform.
        getter = getattr(self.member, "__get__", None)
        if getter is None:
            raise TypeError(f"{self.label()} is not bindable")
        return getter(target, type(target))

    def label(self) -> str:
        origin = "registered" if self.registered else "native"
        return f"{self.declaring.__qualname__}.{self.name} ({origin})"


def describe_member(name: str, declaring: type, member: object, *, registered: bool = False) -> MethodDescriptor | None:
    # Return None for members that are neither methods nor properties (data attributes).
    if isinstance(member, staticmethod):
        func, skip_first = member.__func__, False
    elif isinstance(member, classmethod):
        func, skip_first = member.__func__, True
    elif inspect.isfunction(member):
        func, skip_first = member, True
    elif isinstance(member, property):
        return _describe_property(name, declaring, member, registered=registered)
    elif isinstance(member, (types.WrapperDescriptorType, types.MethodDescriptorType)):
        return _describe_builtin(name, declaring, member, registered=registered)
    else:
        return None

    signature, hints = signature_types(func, skip_first=skip_first)
    param_types: list[object] = []
    param_names: list[str | None] = []
    keyword_params: list[tuple[str, object]] = []
    required_keywords: set[str] = set()
    var_keyword = False
    min_positional = 0
    max_positional: int | None = 0
    for param in signature.parameters.values():
        annotation = normalize_annotation(hints.get(param.name, param.annotation))
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            max_positional = None
        elif param.kind is inspect.Parameter.VAR_KEYWORD:
            var_keyword = True
        elif param.kind in _POSITIONAL:
            param_types.append(annotation)
            param_names.append(param.name if param.kind is inspect.Parameter.POSITIONAL_OR_KEYWORD else None)
            if param.default is inspect.Parameter.empty:
                min_positional += 1
            if max_positional is not None:
                max_positional += 1
        else:
            keyword_params.append((param.name, annotation))
            if param.default is inspect.Parameter.empty:
                required_keywords.add(param.name)
    return MethodDescriptor(
        name=name,
        declaring=declaring,
        member=member,
        param_types=tuple(param_types),
        return_type=normalize_annotation(hints.get("return", signature.return_annotation)),
        min_positional=min_positional,
        max_positional=max_positional,
        registered=registered,
        param_names=tuple(param_names),
        keyword_params=tuple(keyword_params),
        required_keywords=frozenset(required_keywords),
        var_keyword=var_keyword,
    )


def _describe_property(name: str, declaring: type, prop: property, *, registered: bool) -> MethodDescriptor:
    return_type: object = Any
    if prop.fget is not None:
        signature, hints = signature_types(prop.fget, skip_first=True)
        return_type = normalize_annotation(hints.get("return", signature.return_annotation))
    return MethodDescriptor(
        name=name,
        declaring=declaring,
        member=prop,
        param_types=(),
        return_type=return_type,
        min_positional=0,
        max_positional=0,
        registered=registered,
        kind="property",
    )


def _describe_builtin(name: str, declaring: type, member: object, *, registered: bool) -> MethodDescriptor:
    # C-level methods carry no annotations; text signatures give arity when available.
    try:
        signature = inspect.signature(member)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return MethodDescriptor(
            name=name,
            declaring=declaring,
            member=member,
            param_types=(),
            return_type=Any,
            min_positional=0,
            max_positional=None,
            registered=registered,
            var_keyword=True,
        )
    params = list(signature.parameters.values())[1:]
    positional = [p for p in params if p.kind in _POSITIONAL]
    keyword_only = [p for p in params if p.kind is inspect.Parameter.KEYWORD_ONLY]
    return MethodDescriptor(
        name=name,
        declaring=declaring,
        member=member,
        param_types=tuple(Any for _ in positional),
        return_type=Any,
        min_positional=sum(1 for p in positional if p.default is inspect.Parameter.empty),
        max_positional=None if any(p.kind is inspect.Parameter.VAR_POSITIONAL for p in params) else len(positional),
        registered=registered,
        param_names=tuple(p.name if p.kind is inspect.Parameter.POSITIONAL_OR_KEYWORD else None for p in positional),
        keyword_params=tuple((p.name, Any) for p in keyword_only),
        required_keywords=frozenset(p.name for p in keyword_only if p.default is inspect.Parameter.empty),
        var_keyword=any(p.kind is inspect.Parameter.VAR_KEYWORD for p in params),
    )


@dataclass(slots=True)
class MethodRegistry:
    # Queryable method descriptors per type: class members plus associated implementations.
    _registered: dict[type, dict[str, list[MethodDescriptor]]] = field(default_factory=dict)
    _listeners: list[Callable[[type], None]] = field(default_factory=list)
    _lock: Lock = field(default_factory=Lock, init=False, repr=False)

    def register(self, target_type: type, func: Callable[..., Any], *, name: str | None = None) -> MethodDescriptor:
        # Associate `func(target, ...)` with every instance of `target_type` under `name`.
        if not isinstance(target_type, type):
            raise MethodRegistryError(f"Associated implementations need a class, got {target_type!r}")
        method_name = name or getattr(func, "__name__", "")
        if not method_name or method_name == "<lambda>":
            raise MethodRegistryError("Associated implementation requires an explicit name")
        descriptor = describe_member(method_name, target_type, func, registered=True)
        if descriptor is None:
            raise MethodRegistryError(f"Associated implementation must be a function: {func!r}")
        with self._lock:
            self._registered.setdefault(target_type, {}).setdefault(method_name, []).append(descriptor)
            listeners = list(self._listeners)
        for listener in listeners:
            listener(target_type)
        return descriptor

    def implementation(self, target_type: type, *, name: str | None = None) -> Callable[[F], F]:
        # Decorator form of register().
        def _decorate(func: F) -> F:
            self.register(target_type, func, name=name)
            return func

        return _decorate

    def subscribe(self, listener: Callable[[type], None]) -> None:
        # Listeners are told which type gained an implementation (cache invalidation).
        with self._lock:
            self._listeners.append(listener)

    def candidates(self, target_type: type, name: str) -> list[MethodDescriptor]:
        # Declaration order: most derived class first; native member before registered ones.
        with self._lock:
            registered = {
                owner: list(by_name.get(name, ()))
                for owner, by_name in self._registered.items()
            }
        found: list[MethodDescriptor] = []
        native_taken = False
        for owner in target_type.__mro__:
            if not native_taken and name in owner.__dict__:
                # The first definition along the MRO shadows every later one.
                native_taken = True
                descriptor = describe_member(name, owner, owner.__dict__[name])
                if descriptor is not None:
                    found.append(descriptor)
            found.extend(registered.get(owner, ()))
        return found
