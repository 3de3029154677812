from __future__ import annotations

import inspect
import types
import typing
from typing import Any

# Implicit numeric promotions accepted by static checkers (int -> float -> complex).
_NUMERIC_PROMOTIONS: dict[type, tuple[type, ...]] = {
    int: (float, complex),
    float: (complex,),
}

_NONE_TYPE = type(None)


def normalize_annotation(annotation: object) -> object:
    # Collapse spellings of "anything" / "nothing" into canonical markers.
    if annotation is inspect.Parameter.empty or annotation is inspect.Signature.empty:
        return Any
    if annotation is None:
        return _NONE_TYPE
    if isinstance(annotation, str):
        # Unresolved forward reference; treated as dynamic.
        return Any
    if isinstance(annotation, typing.TypeVar):
        bound = annotation.__bound__
        return normalize_annotation(bound) if bound is not None else Any
    return annotation


def is_assignable(source: object, dest: object, *, numeric_promotion: bool = True) -> bool:
    # True when a value typed as `source` may be used where `dest` is expected.
    source = normalize_annotation(source)
    dest = normalize_annotation(dest)

    if source is Any or dest is Any or dest is object:
        return True
    if source == dest:
        return True

    source_members = _union_members(source)
    if source_members is not None:
        return all(is_assignable(member, dest, numeric_promotion=numeric_promotion) for member in source_members)
    dest_members = _union_members(dest)
    if dest_members is not None:
        return any(is_assignable(source, member, numeric_promotion=numeric_promotion) for member in dest_members)

    source_cls = _runtime_class(source)
    dest_cls = _runtime_class(dest)
    if source_cls is None or dest_cls is None:
        return False
    if dest_cls is object:
        return True
    if numeric_promotion and any(dest_cls in _NUMERIC_PROMOTIONS.get(base, ()) for base in source_cls.__mro__):
        return True
    if dest_cls in source_cls.__mro__:
        return True
    # Virtual subclasses (ABC.register) and runtime-checkable protocols.
    try:
        return issubclass(source_cls, dest_cls)
    except TypeError:
        return False


def is_exact(source: object, dest: object) -> bool:
    return normalize_annotation(source) == normalize_annotation(dest)


def describe_annotation(annotation: object) -> str:
    annotation = normalize_annotation(annotation)
    if annotation is Any:
        return "Any"
    if annotation is _NONE_TYPE:
        return "None"
    if isinstance(annotation, type) and not typing.get_args(annotation):
        return annotation.__qualname__
    return repr(annotation).replace("typing.", "")


def _union_members(annotation: object) -> tuple[object, ...] | None:
    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        return typing.get_args(annotation)
    return None


def _runtime_class(annotation: object) -> type | None:
    # Parametrized generics compare by origin; type arguments are not checked.
    origin = typing.get_origin(annotation)
    if origin is not None:
        annotation = origin
    if isinstance(annotation, type):
        return annotation
    return None
