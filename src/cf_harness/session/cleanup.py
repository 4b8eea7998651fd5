"""Teardown of platform resources created during a harness session.

Two scopes are supported:

- ``current``: the session's own space. The ambient org/space is re-asserted,
  then applications, service instances and finally every visible route are
  deleted. Applications go first because a service instance still bound to an
  application cannot be deleted.
- ``all``: every space visible to the client. Each space loses its service
  instances first and then its applications; visible routes go last.

The two modes order service instances and applications differently. Both
orders are kept as they are.

Deletion is sequential and best effort. The first failing delete stops the
cleanup with PartialCleanupFailure; earlier deletions stay done and a second
call simply retries whatever remains.
"""

import logging
from typing import Callable, Optional

from cf_harness.domain import Organization, Space
from cf_harness.ops.exceptions import PartialCleanupFailure, PlatformError
from cf_harness.ops.platform_ops import PlatformOps

logger = logging.getLogger(__name__)

MODE_CURRENT = "current"
MODE_ALL = "all"
CLEANUP_MODES = (MODE_CURRENT, MODE_ALL)


class CleanupCoordinator:
    """Deletes session resources in an order the platform accepts."""

    def __init__(self, client: PlatformOps, log: Optional[logging.Logger] = None) -> None:
        self._client = client
        self._log = log or logger
        self._deleted = 0

    def cleanup(self, mode: str, organization: Organization, space: Space) -> int:
        """Delete resources in ``mode`` scope and return the number of deletions.

        Raises:
            ValueError: If ``mode`` is not "current" or "all"
            PartialCleanupFailure: If a delete call fails
        """
        if mode not in CLEANUP_MODES:
            raise ValueError(f"Unknown cleanup mode: {mode!r} (expected one of {', '.join(CLEANUP_MODES)})")

        self._deleted = 0
        self._log.debug(f"Cleanup ({mode}) on {self._client.target}")
        if mode == MODE_ALL:
            self._cleanup_all()
        else:
            self._cleanup_current(organization, space)
        self._log.info(f"Cleanup ({mode}) deleted {self._deleted} resources on {self._client.target}")
        return self._deleted

    def _cleanup_current(self, organization: Organization, space: Space) -> None:
        self._client.current_organization = organization
        self._client.current_space = space

        for app in self._client.apps(space):
            self._delete("application", app.name, lambda app=app: self._client.delete_app(app))
        for instance in self._client.service_instances(space):
            self._delete(
                "service instance", instance.name, lambda instance=instance: self._client.delete_service_instance(instance)
            )
        self._delete_routes()

    def _cleanup_all(self) -> None:
        for space in self._client.spaces():
            for instance in self._client.service_instances(space):
                self._delete(
                    "service instance",
                    instance.name,
                    lambda instance=instance: self._client.delete_service_instance(instance),
                )
            for app in self._client.apps(space):
                self._delete("application", app.name, lambda app=app: self._client.delete_app(app))
        self._delete_routes()

    def _delete_routes(self) -> None:
        for route in self._client.routes():
            self._delete("route", route.url, lambda route=route: self._client.delete_route(route))

    def _delete(self, kind: str, name: str, delete: Callable[[], None]) -> None:
        try:
            delete()
        except PlatformError as e:
            self._log.error(f"Fail to delete {kind} '{name}' on {self._client.target} after {self._deleted} deletions: {e}")
            raise PartialCleanupFailure(
                f"Cleanup stopped: failed to delete {kind} '{name}'",
                context={"target": self._client.target, "kind": kind, "name": name, "deleted": self._deleted},
            ) from e
        self._deleted += 1
