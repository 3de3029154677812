from __future__ import annotations

from collections.abc import Mapping

from retrofit.errors import UnsupportedOperationError
from retrofit.kernel.contract import MethodContract
from retrofit.kernel.matcher import CallPlan, SignatureMatcher


class AdapterDispatcher:
    # Routes every handle call to the target through a (cached) call plan.
    __slots__ = ("_target", "_matcher")

    def __init__(self, target: object, matcher: SignatureMatcher) -> None:
        self._target = target
        self._matcher = matcher

    @property
    def target(self) -> object:
        return self._target

    def plan_for(self, contract: MethodContract) -> CallPlan | None:
        resolution = self._matcher.resolve(contract, self._target)
        return resolution if isinstance(resolution, CallPlan) else None

    def invoke(
        self,
        contract: MethodContract,
        args: tuple[object, ...],
        kwargs: Mapping[str, object] | None = None,
    ) -> object:
        plan = self.plan_for(contract)
        if plan is None:
            raise UnsupportedOperationError(contract)
        # Target exceptions propagate unchanged.
        return plan.invoke(self._target, args, kwargs or {})
