"""PlatformClientFactory implementation.

Sessions never construct clients directly; they call a factory so that the
privilege check can open its own throwaway client and tests can substitute an
in-memory platform.
"""

import logging
from typing import Callable

from cf_harness.backends.cloud_controller import CloudControllerClient
from cf_harness.ops.platform_ops import PlatformOps

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str], PlatformOps]


class PlatformClientFactory:
    """Factory for platform clients bound to a target endpoint."""

    @staticmethod
    def create(target: str) -> PlatformOps:
        """Create a fresh, unauthenticated client for ``target``."""
        logger.debug(f"Creating CloudControllerClient for target: {target}")
        return CloudControllerClient(target)
