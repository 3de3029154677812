from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Final

from retrofit.kernel.cache import MethodResolutionCache, PassThroughCache
from retrofit.kernel.contract import MethodContract
from retrofit.kernel.descriptors import MethodDescriptor, MethodRegistry
from retrofit.kernel.typing_compat import is_assignable, is_exact
from retrofit.observability.domain.logging import LogMessage
from retrofit.observability.ports import LogSink, NullLogSink


class _Unresolvable:
    # Sentinel type for "no compatible implementation".
    __slots__ = ()

    def __repr__(self) -> str:
        return "UNRESOLVABLE"

    def __bool__(self) -> bool:
        return False


UNRESOLVABLE: Final = _Unresolvable()


@dataclass(frozen=True, slots=True)
class CallPlan:
    # Resolved binding from a contract to one implementation on the target type.
    contract: MethodContract
    descriptor: MethodDescriptor
    ambiguous_with: tuple[str, ...] = ()

    def invoke(self, target: object, args: tuple[object, ...], kwargs: Mapping[str, object]) -> object:
        bound = self.descriptor.bind(target)
        if self.descriptor.kind == "property":
            return bound
        if self.contract.kind == "property":
            # Property read satisfied by a zero-argument method.
            return bound()
        return bound(*args, **kwargs)


Resolution = CallPlan | _Unresolvable


@dataclass(frozen=True, slots=True)
class _Ranked:
    descriptor: MethodDescriptor
    exact: int
    depth: int
    order: int


class SignatureMatcher:
    """Decide which implementation on a target type satisfies a method contract.

    A candidate is compatible when its name matches (after aliasing), it accepts
    the contract's positional arity and keyword names, each of its parameters
    accepts the contract parameter and its return type is assignable to the
    contract's return type. Property contracts are met by a property or by a
    method callable without arguments; opaque contracts never resolve.

    Among compatible candidates the most specific by parameter types wins. When
    several remain, the tie-break is, in order: more parameters whose annotation
    equals the contract's exactly, more derived declaring class in the target
    MRO, earlier declaration order (native member before registered ones).
    """

    def __init__(
        self,
        registry: MethodRegistry,
        *,
        cache: MethodResolutionCache | None = None,
        aliases: Mapping[str, str] | None = None,
        numeric_promotion: bool = True,
        log_sink: LogSink | None = None,
    ) -> None:
        self._registry = registry
        self._cache = cache if cache is not None else PassThroughCache()
        self._aliases = dict(aliases or {})
        self._numeric_promotion = numeric_promotion
        self._log = log_sink or NullLogSink()

    def lookup_name(self, contract: MethodContract) -> str:
        return self._aliases.get(contract.name, contract.name)

    def resolve(self, contract: MethodContract, target: object) -> Resolution:
        return self.resolve_type(contract, type(target))

    def resolve_type(self, contract: MethodContract, target_type: type) -> Resolution:
        name = self.lookup_name(contract)
        key = (target_type, contract, name, self._numeric_promotion)
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        return self._cache.put(key, self._resolve_uncached(contract, target_type, name))

    def _resolve_uncached(self, contract: MethodContract, target_type: type, name: str) -> Resolution:
        compatible = [
            descriptor
            for descriptor in self._registry.candidates(target_type, name)
            if self.is_compatible(contract, descriptor)
        ]
        if not compatible:
            return UNRESOLVABLE
        if len(compatible) == 1:
            return CallPlan(contract=contract, descriptor=compatible[0])

        maximal = [
            candidate
            for candidate in compatible
            if not any(self._dominates(other, candidate, contract) for other in compatible if other is not candidate)
        ]
        mro = target_type.__mro__
        ranked = sorted(
            (
                _Ranked(
                    descriptor=descriptor,
                    exact=_exact_count(descriptor, contract),
                    depth=mro.index(descriptor.declaring) if descriptor.declaring in mro else len(mro),
                    order=compatible.index(descriptor),
                )
                for descriptor in maximal
            ),
            key=lambda item: (-item.exact, item.depth, item.order),
        )
        winner = ranked[0].descriptor
        others = tuple(item.descriptor.label() for item in ranked[1:])
        if others:
            self._log.emit(
                LogMessage(
                    level="warning",
                    message="ambiguous_method",
                    fields={
                        "contract": contract.describe(),
                        "target_type": target_type.__qualname__,
                        "chosen": winner.label(),
                        "candidates": list(others),
                    },
                )
            )
        return CallPlan(contract=contract, descriptor=winner, ambiguous_with=others)

    def is_compatible(self, contract: MethodContract, descriptor: MethodDescriptor) -> bool:
        promote = self._numeric_promotion
        if contract.kind == "opaque":
            return False
        if contract.kind == "property":
            if descriptor.kind == "method" and not descriptor.accepts_call(0):
                return False
            return is_assignable(descriptor.return_type, contract.return_type, numeric_promotion=promote)
        if descriptor.kind != "method":
            return False
        arity = len(contract.param_types)
        keywords = [keyword for keyword, _ in contract.keyword_params]
        if not descriptor.accepts_call(arity, keywords):
            return False
        accepted = _accepted_types(descriptor, contract)
        if any(annotation is None for annotation in accepted):
            return False
        required = [*contract.param_types, *(annotation for _, annotation in contract.keyword_params)]
        for source, dest in zip(required, accepted):
            if not is_assignable(source, dest, numeric_promotion=promote):
                return False
        return is_assignable(descriptor.return_type, contract.return_type, numeric_promotion=promote)

    def _dominates(self, left: MethodDescriptor, right: MethodDescriptor, contract: MethodContract) -> bool:
        # `left` is strictly more specific than `right` over the contract's parameters.
        left_types = _accepted_types(left, contract)
        right_types = _accepted_types(right, contract)
        if not left_types:
            return False
        narrower = all(
            is_assignable(lt, rt, numeric_promotion=False) for lt, rt in zip(left_types, right_types)
        )
        wider = all(
            is_assignable(rt, lt, numeric_promotion=False) for lt, rt in zip(left_types, right_types)
        )
        return narrower and not wider


def _accepted_types(descriptor: MethodDescriptor, contract: MethodContract) -> list[object]:
    # Parameter annotations receiving the contract's positional then keyword arguments.
    # None marks a keyword the descriptor cannot take.
    positional = [_param_at(descriptor, index) for index in range(len(contract.param_types))]
    arity = len(contract.param_types)
    keywords = [descriptor.keyword_type(keyword, positional=arity) for keyword, _ in contract.keyword_params]
    return [*positional, *keywords]


def _param_at(descriptor: MethodDescriptor, index: int) -> object:
    if index < len(descriptor.param_types):
        return descriptor.param_types[index]
    return Any


def _exact_count(descriptor: MethodDescriptor, contract: MethodContract) -> int:
    required = [*contract.param_types, *(annotation for _, annotation in contract.keyword_params)]
    return sum(1 for source, dest in zip(required, _accepted_types(descriptor, contract)) if is_exact(source, dest))
