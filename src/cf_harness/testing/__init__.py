"""Test support for harness sessions.

Modules
-------
fake_platform
    In-memory platform state and a PlatformOps client over it

Quick Start
-----------
    >>> from cf_harness.testing import FakePlatform
    >>> platform = FakePlatform()
    >>> platform.add_user("dev@example.com", "secret")
    >>> platform.add_organization("org")
    >>> session = Session(email="dev@example.com", passwd="secret",
    ...                   client_factory=platform.client_factory, settle_delay=0)
"""

from .fake_platform import FakePlatform, InMemoryPlatformClient

__all__ = ["FakePlatform", "InMemoryPlatformClient"]
