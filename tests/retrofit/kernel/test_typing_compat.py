from __future__ import annotations

import inspect
from typing import Any, Optional, TypeVar, Union

from retrofit.kernel.typing_compat import describe_annotation, is_assignable, is_exact, normalize_annotation


class Animal:
    pass


class Dog(Animal):
    pass


TAnimal = TypeVar("TAnimal", bound=Animal)
TFree = TypeVar("TFree")


def test_missing_annotation_is_dynamic() -> None:
    assert normalize_annotation(inspect.Parameter.empty) is Any
    assert is_assignable(inspect.Parameter.empty, int)
    assert is_assignable(int, inspect.Parameter.empty)


def test_any_is_consistent_both_ways() -> None:
    assert is_assignable(Any, Dog)
    assert is_assignable(Dog, Any)


def test_subclass_is_assignable_to_base_only() -> None:
    assert is_assignable(Dog, Animal)
    assert not is_assignable(Animal, Dog)


def test_object_destination_accepts_everything() -> None:
    assert is_assignable(Animal, object)
    assert is_assignable(list[int], object)


def test_numeric_promotion_is_configurable() -> None:
    assert is_assignable(int, float)
    assert is_assignable(float, complex)
    assert not is_assignable(float, int)
    assert not is_assignable(int, float, numeric_promotion=False)


def test_none_is_normalized() -> None:
    assert is_assignable(None, type(None))
    assert not is_assignable(None, int)


def test_union_destination_needs_one_member() -> None:
    assert is_assignable(Dog, Union[int, Animal])
    assert is_assignable(Dog, Animal | None)
    assert not is_assignable(str, int | Animal)


def test_union_source_needs_every_member() -> None:
    assert is_assignable(Optional[Dog], Animal | None)
    assert not is_assignable(Dog | None, Animal)


def test_generics_compare_by_origin() -> None:
    assert is_assignable(list[int], list)
    assert is_assignable(list, list[str])
    assert not is_assignable(dict[str, int], list[int])


def test_typevar_uses_bound() -> None:
    assert is_assignable(Dog, TAnimal)
    assert not is_assignable(int, TAnimal)
    assert is_assignable(int, TFree)


def test_forward_reference_strings_are_dynamic() -> None:
    assert is_assignable("Unknown", int)


def test_is_exact_and_describe() -> None:
    assert is_exact(int, int)
    assert not is_exact(int, float)
    assert describe_annotation(inspect.Parameter.empty) == "Any"
    assert describe_annotation(None) == "None"
    assert describe_annotation(Dog) == "Dog"
