from .cache import MethodResolutionCache, PassThroughCache
from .contract import MethodContract, contracts_for, contracts_for_all, declared_capabilities
from .descriptors import MethodDescriptor, MethodRegistry, MethodRegistryError
from .dispatcher import AdapterDispatcher
from .materializer import Environment, ProxyMaterializer
from .matcher import UNRESOLVABLE, CallPlan, SignatureMatcher
from .validator import CompletionValidator

__all__ = [
    "AdapterDispatcher",
    "CallPlan",
    "CompletionValidator",
    "Environment",
    "MethodContract",
    "MethodDescriptor",
    "MethodRegistry",
    "MethodRegistryError",
    "MethodResolutionCache",
    "PassThroughCache",
    "ProxyMaterializer",
    "SignatureMatcher",
    "UNRESOLVABLE",
    "contracts_for",
    "contracts_for_all",
    "declared_capabilities",
]
