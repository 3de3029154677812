from __future__ import annotations

from typing import Protocol

import pytest

from retrofit.errors import UnsupportedOperationError
from retrofit.kernel.contract import contracts_for
from retrofit.kernel.descriptors import MethodRegistry
from retrofit.kernel.dispatcher import AdapterDispatcher
from retrofit.kernel.matcher import SignatureMatcher


class Account(Protocol):
    def deposit(self, amount: int) -> int: ...

    def withdraw(self, amount: int) -> int: ...

    def close(self) -> None: ...


class Wallet:
    def __init__(self) -> None:
        self.balance = 0

    def deposit(self, amount: int, note: str = "") -> int:
        self.balance += amount
        return self.balance

    def withdraw(self, amount: int) -> int:
        if amount > self.balance:
            raise ValueError("insufficient funds")
        self.balance -= amount
        return self.balance


CONTRACTS = {contract.name: contract for contract in contracts_for(Account)}


def _dispatcher(target: object) -> AdapterDispatcher:
    return AdapterDispatcher(target, SignatureMatcher(MethodRegistry()))


def test_invoke_forwards_arguments_and_result() -> None:
    wallet = Wallet()
    dispatcher = _dispatcher(wallet)
    assert dispatcher.invoke(CONTRACTS["deposit"], (10,)) == 10
    assert dispatcher.invoke(CONTRACTS["deposit"], (5,), {"note": "gift"}) == 15
    assert wallet.balance == 15
    assert dispatcher.target is wallet


def test_target_errors_propagate_unwrapped() -> None:
    dispatcher = _dispatcher(Wallet())
    with pytest.raises(ValueError, match="insufficient funds"):
        dispatcher.invoke(CONTRACTS["withdraw"], (1,))


def test_unresolvable_contract_raises_unsupported_operation() -> None:
    dispatcher = _dispatcher(Wallet())
    with pytest.raises(UnsupportedOperationError) as excinfo:
        dispatcher.invoke(CONTRACTS["close"], ())
    assert excinfo.value.contract is CONTRACTS["close"]
    assert isinstance(excinfo.value, NotImplementedError)
    assert dispatcher.plan_for(CONTRACTS["close"]) is None
