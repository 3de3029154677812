from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from retrofit.kernel.contract import MethodContract


class RetrofitError(RuntimeError):
    # Base error for adaptation failures raised by the framework itself.
    pass


class InvalidArgumentError(RetrofitError, ValueError):
    # Raised before any resolution work when target/interfaces are malformed.
    pass


class MethodsNotImplementedError(RetrofitError):
    # Raised by complete adaptation with every unresolved contract at once.
    def __init__(self, methods: Iterable[MethodContract]) -> None:
        self.methods: tuple[MethodContract, ...] = tuple(methods)
        listed = ", ".join(method.describe() for method in self.methods)
        super().__init__(f"Target does not implement required methods: {listed}")


@dataclass(frozen=True, slots=True)
class EnvironmentFault:
    # One failed materialization attempt (environment label + structural error).
    environment: str
    error: Exception

    def __str__(self) -> str:
        return f"{self.environment}: {self.error}"


class NoSuitableEnvironmentError(RetrofitError):
    # Raised when no candidate environment could build the composite handle.
    def __init__(self, faults: Iterable[EnvironmentFault]) -> None:
        self.faults: tuple[EnvironmentFault, ...] = tuple(faults)
        details = "; ".join(str(fault) for fault in self.faults) or "no eligible environment"
        super().__init__(f"Could not find a suitable environment for retrofitting: {details}")


class UnsupportedOperationError(RetrofitError, NotImplementedError):
    # Raised at call time by partial handles for a method without a call plan.
    def __init__(self, contract: MethodContract) -> None:
        self.contract = contract
        super().__init__(f"Retrofitted target does not support {contract.describe()}")
