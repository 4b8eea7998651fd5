"""Base configuration classes and validation framework.

This module defines the building blocks every harness configuration type uses:

- ConfigurationError / ValidationError for configuration problems
- ConfigValidationResult for structured validation responses
- Configuration, the abstract base class with the validation interface
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List


class ConfigurationError(Exception):
    """Base exception for all configuration-related errors."""

    pass


class ValidationError(ConfigurationError):
    """Exception raised when a configuration fails validation.

    Used for missing endpoints, malformed targets and similar problems found
    before a session ever talks to the platform.
    """

    pass


@dataclass
class ConfigValidationResult:
    """Result of configuration validation.

    Attributes:
        success: True if validation passed, False otherwise
        errors: Messages describing each validation failure
    """

    success: bool
    errors: List[str]

    @property
    def error_count(self) -> int:
        return len(self.errors)

    def add_error(self, error: str) -> None:
        """Record an error message and mark the result as failed."""
        self.errors.append(error)
        self.success = False

    @classmethod
    def success_result(cls) -> ConfigValidationResult:
        return cls(success=True, errors=[])


class Configuration(ABC):
    """Abstract base class for harness configuration types.

    Subclasses must implement validate() and to_dict(). to_dict() output is
    meant for logs and debugging, so secrets must be masked there.
    """

    @abstractmethod
    def validate(self) -> ConfigValidationResult:
        """Check every configuration value and report the failures found."""
        pass

    @abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        """Convert the configuration to a JSON-compatible dictionary."""
        pass

    def is_valid(self) -> bool:
        return self.validate().success

    def validate_or_raise(self) -> None:
        """Validate the configuration and raise ValidationError if it is invalid.

        Raises:
            ValidationError: If configuration validation fails
        """
        result = self.validate()
        if not result.success:
            error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {error}" for error in result.errors)
            raise ValidationError(error_msg)
