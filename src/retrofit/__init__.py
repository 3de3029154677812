from __future__ import annotations

from collections.abc import Iterable
from typing import Any, TypeVar, overload

from retrofit.app.retrofitter import Retrofitter, is_retrofitted, unwrap
from retrofit.errors import (
    EnvironmentFault,
    InvalidArgumentError,
    MethodsNotImplementedError,
    NoSuitableEnvironmentError,
    RetrofitError,
    UnsupportedOperationError,
)

T = TypeVar("T")

_default = Retrofitter()


@overload
def complete(target: object, interfaces: type[T]) -> T: ...


@overload
def complete(target: object, interfaces: Iterable[type]) -> Any: ...


def complete(target: object, interfaces: type | Iterable[type]) -> Any:
    return _default.complete(target, interfaces)


@overload
def partial(target: object, interfaces: type[T]) -> T: ...


@overload
def partial(target: object, interfaces: Iterable[type]) -> Any: ...


def partial(target: object, interfaces: type | Iterable[type]) -> Any:
    return _default.partial(target, interfaces)


def default_retrofitter() -> Retrofitter:
    return _default


__all__ = [
    "EnvironmentFault",
    "InvalidArgumentError",
    "MethodsNotImplementedError",
    "NoSuitableEnvironmentError",
    "RetrofitError",
    "Retrofitter",
    "UnsupportedOperationError",
    "complete",
    "default_retrofitter",
    "is_retrofitted",
    "partial",
    "unwrap",
]
