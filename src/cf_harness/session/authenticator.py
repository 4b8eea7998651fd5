"""Login sequencing for harness sessions."""

import logging
import time
from typing import Callable, Optional, Tuple

from cf_harness.backends.factory import ClientFactory
from cf_harness.ops.platform_ops import PlatformOps

logger = logging.getLogger(__name__)

# Token timestamps have one-second granularity on the platform; a token used
# within the same second it was issued can be rejected.
DEFAULT_SETTLE_DELAY = 1.0


class SessionAuthenticator:
    """Obtains an authenticated client for a target endpoint.

    Login is attempted exactly once. Failures are logged with the target and
    identity (never the secret) and re-raised unchanged.
    """

    def __init__(
        self,
        client_factory: ClientFactory,
        trace: bool = False,
        settle_delay: float = DEFAULT_SETTLE_DELAY,
        sleep: Callable[[float], None] = time.sleep,
        log: Optional[logging.Logger] = None,
    ) -> None:
        self._client_factory = client_factory
        self._trace = trace
        self._settle_delay = settle_delay
        self._sleep = sleep
        self._log = log or logger

    def authenticate(self, target: str, identity: str, secret: str) -> Tuple[PlatformOps, str]:
        """Log in to ``target`` and return the client with its access token.

        Raises:
            AuthenticationFailure: When the platform rejects the credentials
            PlatformError: When the platform cannot be reached
        """
        self._log.info(f"Login in, target: {target}, email = {identity}")
        client = self._client_factory(target)
        client.trace = self._trace
        client.drain_trace()

        try:
            token = client.login(identity, secret)
        except Exception as e:
            self._log.error(f"Fail to log in, target: {target}, user: {identity}\n{e}")
            raise

        if self._settle_delay > 0:
            self._sleep(self._settle_delay)
        return client, token
