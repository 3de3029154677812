from .loader import ConfigError, load_retrofit_config, load_yaml_config, parse_config
from .models import LoggingConfig, ResolutionConfig, RetrofitConfig

__all__ = [
    "ConfigError",
    "LoggingConfig",
    "ResolutionConfig",
    "RetrofitConfig",
    "load_retrofit_config",
    "load_yaml_config",
    "parse_config",
]
