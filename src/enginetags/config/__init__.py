"""Configuration loading, schema, and defaults."""

from enginetags.config.loader import ConfigError, load_config
from enginetags.config.schema import EngineTagsConfig, PoolConfig, SessionConfig

__all__ = [
    "ConfigError",
    "EngineTagsConfig",
    "PoolConfig",
    "SessionConfig",
    "load_config",
]
