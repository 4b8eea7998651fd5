"""Domain objects for harness sessions.

This module contains client-agnostic data structures that represent platform
concepts without exposing implementation details from a specific client.
"""

from .platform import (
    Application,
    Domain,
    Organization,
    Route,
    ServiceInstance,
    ServiceOffering,
    Space,
    User,
)
from .trace_entry import TraceEntry

__all__ = [
    "Application",
    "Domain",
    "Organization",
    "Route",
    "ServiceInstance",
    "ServiceOffering",
    "Space",
    "TraceEntry",
    "User",
]
