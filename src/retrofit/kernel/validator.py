from __future__ import annotations

from collections.abc import Iterable

from retrofit.errors import MethodsNotImplementedError
from retrofit.kernel.contract import MethodContract
from retrofit.kernel.matcher import CallPlan, SignatureMatcher
from retrofit.observability.domain.logging import LogMessage
from retrofit.observability.ports import LogSink, NullLogSink


class CompletionValidator:
    # All-or-nothing check used by complete adaptation before any handle exists.
    def __init__(self, matcher: SignatureMatcher, *, log_sink: LogSink | None = None) -> None:
        self._matcher = matcher
        self._log = log_sink or NullLogSink()

    def unresolved(self, contracts: Iterable[MethodContract], target: object) -> tuple[MethodContract, ...]:
        return tuple(
            contract for contract in contracts if not isinstance(self._matcher.resolve(contract, target), CallPlan)
        )

    def validate_complete(self, contracts: Iterable[MethodContract], target: object) -> None:
        missing = self.unresolved(contracts, target)
        if not missing:
            return
        self._log.emit(
            LogMessage(
                level="error",
                message="methods_not_implemented",
                fields={
                    "target_type": type(target).__qualname__,
                    "methods": [contract.describe() for contract in missing],
                },
            )
        )
        raise MethodsNotImplementedError(missing)
