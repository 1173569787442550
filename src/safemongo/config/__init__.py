"""Configuration loading, schema, and defaults."""

from safemongo.config.loader import load_config
from safemongo.config.schema import SafeMongoConfig, Severity, severity_at_or_above
from safemongo.errors import ConfigError

__all__ = [
    "ConfigError",
    "SafeMongoConfig",
    "Severity",
    "load_config",
    "severity_at_or_above",
]
