"""Platform operations abstraction layer.

This package holds the abstract platform capability interface and the error
taxonomy shared by harness sessions and platform clients.
"""

from .exceptions import (
    AuthenticationFailure,
    ForbiddenError,
    NoOrganizationsAvailable,
    NotFoundError,
    PartialCleanupFailure,
    PlatformAPIError,
    PlatformError,
    PrivilegeMismatch,
    ResourceLookupFailure,
)
from .platform_ops import PlatformOps

__all__ = [
    "AuthenticationFailure",
    "ForbiddenError",
    "NoOrganizationsAvailable",
    "NotFoundError",
    "PartialCleanupFailure",
    "PlatformAPIError",
    "PlatformError",
    "PlatformOps",
    "PrivilegeMismatch",
    "ResourceLookupFailure",
]
