from __future__ import annotations

import abc
import inspect
import typing
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Literal, Protocol

from retrofit.kernel.typing_compat import describe_annotation, normalize_annotation

# Dunder methods that take part in capability contracts; other dunders are object plumbing.
# Abstract members are contracts whatever their name.
CONTRACT_DUNDERS = frozenset(
    {
        "__call__",
        "__len__",
        "__iter__",
        "__contains__",
        "__getitem__",
        "__setitem__",
        "__delitem__",
        "__enter__",
        "__exit__",
    }
)

# Framework bases that never contribute methods or count as declared capabilities.
_FRAMEWORK_BASES: tuple[type, ...] = (object, abc.ABC, Protocol, typing.Generic)

# method: called with arguments; property: read as an attribute;
# opaque: abstract member of a shape that cannot be forwarded (always unsupported).
ContractKind = Literal["method", "property", "opaque"]


@dataclass(frozen=True, slots=True)
class MethodContract:
    # One member required by a capability: name, parameter types, return type.
    name: str
    param_types: tuple[object, ...]
    return_type: object
    declaring: type
    keyword_params: tuple[tuple[str, object], ...] = ()
    kind: ContractKind = "method"

    def describe(self) -> str:
        owner = f"{self.declaring.__qualname__}.{self.name}"
        if self.kind == "property":
            return f"{owner}: {describe_annotation(self.return_type)}"
        if self.kind == "opaque":
            return f"{owner} (abstract member)"
        params = [describe_annotation(p) for p in self.param_types]
        if self.keyword_params:
            params.append("*")
            params.extend(f"{name}: {describe_annotation(annotation)}" for name, annotation in self.keyword_params)
        return f"{owner}({', '.join(params)}) -> {describe_annotation(self.return_type)}"


def is_contract_name(name: str) -> bool:
    return not name.startswith("_") or name in CONTRACT_DUNDERS


def contracts_for(capability: type) -> tuple[MethodContract, ...]:
    # Most derived declaration wins; order follows reversed MRO then definition order.
    abstract = frozenset(getattr(capability, "__abstractmethods__", ()))
    collected: dict[str, MethodContract] = {}
    for owner in reversed(capability.__mro__):
        if owner in _FRAMEWORK_BASES:
            continue
        for name, value in owner.__dict__.items():
            if not is_contract_name(name) and name not in abstract:
                continue
            contract = _contract_from_member(value, name=name, declaring=owner, abstract=name in abstract)
            if contract is None:
                # A non-method redefinition hides whatever a base declared under this name.
                collected.pop(name, None)
            else:
                collected[name] = contract
    for name in sorted(abstract - collected.keys()):
        collected[name] = MethodContract(
            name=name,
            param_types=(),
            return_type=Any,
            declaring=_declaring_owner(capability, name),
            kind="opaque",
        )
    return tuple(collected.values())


def contracts_for_all(capabilities: Iterable[type]) -> tuple[MethodContract, ...]:
    # Union across capabilities; identical contracts inherited from a shared base appear once.
    seen: set[MethodContract] = set()
    ordered: list[MethodContract] = []
    for capability in capabilities:
        for contract in contracts_for(capability):
            if contract in seen:
                continue
            seen.add(contract)
            ordered.append(contract)
    return tuple(ordered)


def declared_capabilities(target_type: type) -> tuple[type, ...]:
    # Abstract bases / protocols the target type already declares.
    found: list[type] = []
    for base in target_type.__mro__[1:]:
        if base in _FRAMEWORK_BASES:
            continue
        if isinstance(base, abc.ABCMeta):
            found.append(base)
    return tuple(found)


def signature_types(func: object, *, skip_first: bool) -> tuple[inspect.Signature, dict[str, Any]]:
    # Signature plus resolved type hints; unresolvable forward references degrade to raw annotations.
    signature = inspect.signature(func)  # type: ignore[arg-type]
    try:
        hints = typing.get_type_hints(func)
    except (NameError, TypeError):
        hints = dict(getattr(func, "__annotations__", {}) or {})
    if skip_first:
        params = list(signature.parameters.values())[1:]
        signature = signature.replace(parameters=params)
    return signature, hints


def _contract_from_member(value: object, *, name: str, declaring: type, abstract: bool) -> MethodContract | None:
    if inspect.isfunction(value):
        return _contract_from_function(value, name=name, declaring=declaring, skip_first=True)
    if isinstance(value, (staticmethod, classmethod)) and abstract:
        skip_first = isinstance(value, classmethod)
        return _contract_from_function(value.__func__, name=name, declaring=declaring, skip_first=skip_first)
    if isinstance(value, property) and (abstract or Protocol in declaring.__bases__):
        return _contract_from_property(value, name=name, declaring=declaring)
    return None


def _contract_from_function(func: object, *, name: str, declaring: type, skip_first: bool) -> MethodContract:
    signature, hints = signature_types(func, skip_first=skip_first)
    param_types: list[object] = []
    keyword_params: list[tuple[str, object]] = []
    for param in signature.parameters.values():
        annotation = normalize_annotation(hints.get(param.name, param.annotation))
        if param.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
            param_types.append(annotation)
        elif param.kind is inspect.Parameter.KEYWORD_ONLY:
            keyword_params.append((param.name, annotation))
    return_type = normalize_annotation(hints.get("return", signature.return_annotation))
    return MethodContract(
        name=name,
        param_types=tuple(param_types),
        return_type=return_type,
        declaring=declaring,
        keyword_params=tuple(keyword_params),
    )


def _contract_from_property(prop: property, *, name: str, declaring: type) -> MethodContract:
    return_type: object = Any
    if prop.fget is not None:
        signature, hints = signature_types(prop.fget, skip_first=True)
        return_type = normalize_annotation(hints.get("return", signature.return_annotation))
    return MethodContract(name=name, param_types=(), return_type=return_type, declaring=declaring, kind="property")


def _declaring_owner(capability: type, name: str) -> type:
    for owner in capability.__mro__:
        if name in owner.__dict__:
            return owner
    return capability
