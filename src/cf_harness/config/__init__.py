"""Configuration for harness sessions."""

from .base import ConfigValidationResult, Configuration, ConfigurationError, ValidationError
from .harness import (
    DEFAULT_TARGET,
    HarnessConfig,
    derive_app_domain,
    endpoint_host,
    format_target,
)

__all__ = [
    "ConfigValidationResult",
    "Configuration",
    "ConfigurationError",
    "DEFAULT_TARGET",
    "HarnessConfig",
    "ValidationError",
    "derive_app_domain",
    "endpoint_host",
    "format_target",
]
