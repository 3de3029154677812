from __future__ import annotations

import abc
from collections.abc import Iterator, Sized
from typing import Any, Protocol

from retrofit.kernel.contract import MethodContract, contracts_for, contracts_for_all, declared_capabilities


class Shape(Protocol):
    def area(self) -> float: ...

    def scale(self, factor: float) -> Shape: ...


class Named(abc.ABC):
    @abc.abstractmethod
    def name(self) -> str:
        raise NotImplementedError

    def _private_helper(self) -> None:
        pass

    @staticmethod
    def make() -> Named:
        raise NotImplementedError

    @property
    def label(self) -> str:
        return "label"


class Container(Protocol):
    def __len__(self) -> int: ...

    def __repr__(self) -> str: ...


class Labeled(abc.ABC):
    @property
    @abc.abstractmethod
    def label(self) -> str:
        raise NotImplementedError

    @abc.abstractmethod
    def _checksum(self) -> int:
        raise NotImplementedError

    @classmethod
    @abc.abstractmethod
    def build(cls, seed: int) -> Labeled:
        raise NotImplementedError


class Sizable(Protocol):
    @property
    def size(self) -> int: ...


class Keyed(Protocol):
    def lookup(self, prefix: str, *, key: str, strict: bool = False) -> int: ...


class Slot:
    # Abstract member that is neither a function nor a property.
    __isabstractmethod__ = True


class Odd(abc.ABC):
    marker = Slot()


class Base(abc.ABC):
    def describe(self) -> str:
        return "base"


class Derived(Base):
    def describe(self, verbose: bool) -> str:
        return "derived"

    def extra(self) -> None:
        pass


class Left(Base):
    pass


class Right(Base):
    pass


class Plain:
    pass


class Implementation(Derived, Sized):
    def __len__(self) -> int:
        return 0


def _by_name(contracts: tuple[MethodContract, ...]) -> dict[str, MethodContract]:
    return {contract.name: contract for contract in contracts}


def test_protocol_methods_become_contracts() -> None:
    found = _by_name(contracts_for(Shape))
    assert set(found) == {"area", "scale"}
    assert found["area"].param_types == ()
    assert found["area"].return_type is float
    assert found["scale"].param_types == (float,)
    assert found["scale"].return_type is Shape
    assert found["scale"].declaring is Shape


def test_private_static_and_property_members_are_not_contracts() -> None:
    assert [contract.name for contract in contracts_for(Named)] == ["name"]


def test_only_allowed_dunders_are_contracts() -> None:
    assert [contract.name for contract in contracts_for(Container)] == ["__len__"]


def test_most_derived_declaration_wins() -> None:
    found = _by_name(contracts_for(Derived))
    assert found["describe"].declaring is Derived
    assert found["describe"].param_types == (bool,)
    assert set(found) == {"describe", "extra"}


def test_union_collapses_shared_base_contracts() -> None:
    contracts = contracts_for_all([Left, Right])
    assert [contract.name for contract in contracts] == ["describe"]


def test_missing_annotations_become_any() -> None:
    class Loose:
        def run(self, value):  # type: ignore[no-untyped-def]
            return value

    (contract,) = contracts_for(Loose)
    assert contract.param_types == (Any,)
    assert contract.return_type is Any


def test_declared_capabilities_lists_abstract_bases() -> None:
    declared = declared_capabilities(Implementation)
    assert Derived in declared
    assert Base in declared
    assert Sized in declared
    assert declared_capabilities(Plain) == ()


def test_contract_describe_is_readable() -> None:
    found = _by_name(contracts_for(Shape))
    assert found["scale"].describe() == "Shape.scale(float) -> Shape"


def test_abstract_members_become_contracts_whatever_their_name() -> None:
    found = _by_name(contracts_for(Labeled))
    assert set(found) == {"label", "_checksum", "build"}
    assert found["label"].kind == "property"
    assert found["label"].return_type is str
    assert found["_checksum"].kind == "method"
    assert found["build"].param_types == (int,)


def test_iterator_contract_includes_abstract_next() -> None:
    found = _by_name(contracts_for(Iterator))
    assert set(found) == {"__iter__", "__next__"}
    assert found["__next__"].declaring is Iterator


def test_protocol_properties_are_contracts() -> None:
    (contract,) = contracts_for(Sizable)
    assert contract.kind == "property"
    assert contract.describe() == "Sizable.size: int"


def test_keyword_only_parameters_are_carried() -> None:
    (contract,) = contracts_for(Keyed)
    assert contract.param_types == (str,)
    assert contract.keyword_params == (("key", str), ("strict", bool))
    assert contract.describe() == "Keyed.lookup(str, *, key: str, strict: bool) -> int"


def test_unforwardable_abstract_member_is_opaque() -> None:
    (contract,) = contracts_for(Odd)
    assert contract.name == "marker"
    assert contract.kind == "opaque"
    assert contract.declaring is Odd
