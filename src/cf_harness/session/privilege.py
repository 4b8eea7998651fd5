"""Privilege checks for harness sessions.

The admin check always runs on a throwaway client of its own so that it never
touches the session client's token, trace buffer or ambient scope. A
"forbidden" or "not found" answer to the admin query is a normal outcome for a
regular user and is reported as False.
"""

import logging
from typing import Optional

from cf_harness.backends.factory import ClientFactory
from cf_harness.ops.exceptions import ForbiddenError, NotFoundError, PlatformError, PrivilegeMismatch

logger = logging.getLogger(__name__)

ADMIN_USER = "admin user"
NORMAL_USER = "normal user"


def privilege_label(admin: bool) -> str:
    return ADMIN_USER if admin else NORMAL_USER


class PrivilegeGuard:
    """Determines and enforces the privilege level behind a credential pair."""

    def __init__(self, target: str, client_factory: ClientFactory, log: Optional[logging.Logger] = None) -> None:
        self._target = target
        self._client_factory = client_factory
        self._log = log or logger

    def is_admin(self, identity: str, secret: str) -> bool:
        """Return whether ``identity`` is a platform administrator.

        Only the admin query is normalized; any failure of the throwaway login
        itself propagates unchanged.

        Raises:
            AuthenticationFailure: When the throwaway login is rejected
            PlatformError: For login failures, and admin query failures other than forbidden/not found
        """
        check_client = self._client_factory(self._target)
        check_client.login(identity, secret)
        try:
            return check_client.current_user_is_admin()
        except (ForbiddenError, NotFoundError) as e:
            self._log.debug(f"Admin lookup refused for {identity} on {self._target}: {e}")
            return False
        except PlatformError as e:
            self._log.error(
                f"Fail to check user's admin privilege. Target: {self._target}, login email: {identity}\n{e}"
            )
            raise

    def ensure_privilege(self, identity: str, secret: str, admin: bool) -> None:
        """Fail when a non-admin session is requested with admin credentials.

        Sessions requested as admin are not checked here.

        Raises:
            PrivilegeMismatch: If ``admin`` is False and ``identity`` is an administrator
        """
        if admin:
            return
        if self.is_admin(identity, secret):
            self._log.error(f"Admin credentials supplied for a non-admin session, target: {self._target}, user: {identity}")
            raise PrivilegeMismatch(
                "current operation can not be performed as user with admin privileges",
                context={"target": self._target, "user": identity, "expected": NORMAL_USER, "actual": ADMIN_USER},
            )

    def check_privilege(self, identity: str, secret: str, expect_admin: bool = False) -> None:
        """Verify the credential privilege matches ``expect_admin`` in both directions.

        Raises:
            PrivilegeMismatch: If the actual privilege differs from the expected one
        """
        expected = privilege_label(expect_admin)
        actual = privilege_label(self.is_admin(identity, secret))

        if actual == expected:
            self._log.info(f"run bvt as {expected}")
            return

        self._log.error(f"user type does not match. Expected User Privilege: {expected} Actual User Privilege: {actual}")
        raise PrivilegeMismatch(
            f"Expected {expected}, got {actual}",
            context={"target": self._target, "user": identity, "expected": expected, "actual": actual},
        )
