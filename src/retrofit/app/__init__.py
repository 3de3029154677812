from .bootstrap import build_retrofitter, default_adapter_registry, retrofitter_from_file
from .retrofitter import Retrofitter, check_parameters, is_retrofitted, unwrap

__all__ = [
    "Retrofitter",
    "build_retrofitter",
    "check_parameters",
    "default_adapter_registry",
    "is_retrofitted",
    "retrofitter_from_file",
    "unwrap",
]
