"""Session lifecycle: authentication, privilege, scope, namespace and cleanup."""

from .authenticator import DEFAULT_SETTLE_DELAY, SessionAuthenticator
from .cleanup import CLEANUP_MODES, MODE_ALL, MODE_CURRENT, CleanupCoordinator
from .namespace import NAMESPACE_SPACE, generate_namespace, to_base36
from .privilege import PrivilegeGuard
from .scope import OrgSpaceResolver
from .session import Session
from .tracing import render_recent_trace

__all__ = [
    "CLEANUP_MODES",
    "CleanupCoordinator",
    "DEFAULT_SETTLE_DELAY",
    "MODE_ALL",
    "MODE_CURRENT",
    "NAMESPACE_SPACE",
    "OrgSpaceResolver",
    "PrivilegeGuard",
    "Session",
    "SessionAuthenticator",
    "generate_namespace",
    "render_recent_trace",
    "to_base36",
]
