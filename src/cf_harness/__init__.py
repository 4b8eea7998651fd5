"""Session-lifecycle management for platform verification harnesses.

A Session authenticates a test identity against a cloud controller, enforces
the admin/non-admin contract, resolves a working organization and space,
namespaces every resource it names, and tears those resources down again.
"""

from __future__ import annotations

from .config import HarnessConfig
from .ops.exceptions import (
    AuthenticationFailure,
    NoOrganizationsAvailable,
    PartialCleanupFailure,
    PlatformError,
    PrivilegeMismatch,
    ResourceLookupFailure,
)
from .session import Session

__version__ = "0.1.0"

__all__ = [
    "AuthenticationFailure",
    "HarnessConfig",
    "NoOrganizationsAvailable",
    "PartialCleanupFailure",
    "PlatformError",
    "PrivilegeMismatch",
    "ResourceLookupFailure",
    "Session",
]
