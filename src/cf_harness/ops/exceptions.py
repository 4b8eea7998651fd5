"""Custom exceptions for harness sessions and platform operations.

This module defines domain-specific exceptions that provide clear error context
and debugging information for session lifecycle steps and for the platform
client operations they drive.

Every exception accepts an optional ``context`` dictionary carrying details such
as the target endpoint, the identity in use, or the resource being handled.
Secrets never belong in a context.
"""

from typing import Dict, Any, Optional


class PlatformError(Exception):
    """Base exception for all harness and platform client errors.

    Attributes:
        context: Dictionary containing error details for debugging
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        """Initialize PlatformError with message and optional context.

        Args:
            message: Human-readable error message
            context: Optional dictionary with error details for debugging
        """
        super().__init__(message)
        self.context = context or {}


class AuthenticationFailure(PlatformError):
    """Exception raised when the platform rejects a login.

    Login failures are fatal to session construction and are never retried.
    """


class PrivilegeMismatch(PlatformError):
    """Exception raised when the requested privilege level does not match the credentials.

    Raised at session construction, before any login on the session client, when
    a non-admin session is backed by administrator credentials.
    """


class NoOrganizationsAvailable(PlatformError):
    """Exception raised when the authenticated identity sees no organization."""


class ResourceLookupFailure(PlatformError):
    """Exception raised when a named lookup (space, domain, user, app) cannot be satisfied."""


class PartialCleanupFailure(PlatformError):
    """Exception raised when a deletion fails part way through a cleanup.

    Deletions that ran before the failure are not rolled back. The context
    records the resource that failed and how many deletions had succeeded.
    """


class PlatformAPIError(PlatformError):
    """Exception raised when the platform API answers with an error status.

    Attributes:
        status_code: HTTP status code returned by the platform (if any)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message, context)
        self.status_code = status_code


class ForbiddenError(PlatformAPIError):
    """The platform refused the request for the authenticated identity (HTTP 403)."""


class NotFoundError(PlatformAPIError):
    """The requested platform resource does not exist (HTTP 404)."""
