"""Harness session: authenticated, scoped access to the platform under test.

Construction runs the whole setup sequence:

    resolve credentials -> enforce privilege -> log in -> settle -> resolve org/space

Usage:
    session = Session()                      # regular test user from the environment
    app = session.app("worker")              # name reserved as "<namespace>worker"
    ...
    session.cleanup()                        # delete what the session's space holds
"""

import logging
import random
import time
from typing import Any, Callable, Dict, List, Optional

from cf_harness.backends.factory import ClientFactory, PlatformClientFactory
from cf_harness.config import HarnessConfig, ValidationError, format_target
from cf_harness.domain import (
    Application,
    Domain,
    Organization,
    ServiceInstance,
    Space,
    User,
)
from cf_harness.ops.exceptions import ForbiddenError, PlatformError, ResourceLookupFailure
from cf_harness.ops.platform_ops import PlatformOps
from cf_harness.session.authenticator import DEFAULT_SETTLE_DELAY, SessionAuthenticator
from cf_harness.session.cleanup import MODE_CURRENT, CleanupCoordinator
from cf_harness.session.namespace import generate_namespace
from cf_harness.session.privilege import PrivilegeGuard
from cf_harness.session.scope import OrgSpaceResolver
from cf_harness.session.tracing import DEFAULT_TRACE_LINES, render_recent_trace

DEFAULT_LOGGER_NAME = "cf_harness.session"


class Session:
    """One authenticated identity, one token and one org/space scope on a target.

    Attributes:
        api_endpoint: Formatted target endpoint
        email: Login identity
        token: Access token obtained at login
        namespace: Random prefix applied to every resource name the session creates
        current_organization / current_space: Resolved scope, never None after construction
        test_domains: Names of domains reserved by this session
        client: Authenticated platform client (None after logout)
        log: Session logger
    """

    def __init__(
        self,
        api_endpoint: Optional[str] = None,
        email: Optional[str] = None,
        passwd: Optional[str] = None,
        admin: bool = False,
        config: Optional[HarnessConfig] = None,
        client_factory: Optional[ClientFactory] = None,
        logger: Optional[logging.Logger] = None,
        settle_delay: float = DEFAULT_SETTLE_DELAY,
        sleep: Callable[[float], None] = time.sleep,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._config = config or HarnessConfig.from_env()
        self._client_factory = client_factory or PlatformClientFactory.create
        self.log = logger or logging.getLogger(DEFAULT_LOGGER_NAME)

        self.api_endpoint = format_target(api_endpoint) if api_endpoint else self._config.api_endpoint
        self.email = email if email is not None else self._config.login_email(admin)
        self.passwd = passwd if passwd is not None else self._config.login_passwd(admin)
        if not self.email or self.passwd is None:
            kind = "admin" if admin else "test"
            raise ValidationError(f"No {kind} user credentials configured for target {self.api_endpoint}")

        self._guard = PrivilegeGuard(self.api_endpoint, self._client_factory, log=self.log)
        self._guard.ensure_privilege(self.email, self.passwd, admin)

        self.test_domains: List[str] = []
        self.namespace = generate_namespace(rng)
        self.token: Optional[str] = None
        self.client: Optional[PlatformOps] = None
        self.current_organization: Optional[Organization] = None
        self.current_space: Optional[Space] = None

        self._authenticator = SessionAuthenticator(
            self._client_factory,
            trace=self._config.trace,
            settle_delay=settle_delay,
            sleep=sleep,
            log=self.log,
        )
        self.login()

    def __repr__(self) -> str:
        return f"<Session '{self.api_endpoint}', '{self.email}'>"

    # ------------------------------------------------------------------
    # Authentication and scope
    # ------------------------------------------------------------------

    def login(self) -> str:
        """Authenticate the session client and resolve the working org/space."""
        self.client, self.token = self._authenticator.authenticate(self.api_endpoint, self.email, self.passwd)
        self.select_org_and_space()
        return self.token

    def logout(self) -> None:
        self.log.debug(f"logout, target: {self.api_endpoint}, email = {self.email}")
        self.client = None

    def _require_client(self) -> PlatformOps:
        if self.client is None:
            raise PlatformError("Session is logged out", context={"target": self.api_endpoint, "user": self.email})
        return self.client

    def select_org_and_space(self, org_name: str = "", space_name: str = "") -> Space:
        """Resolve the org/space scope and make it the client's ambient scope."""
        resolver = OrgSpaceResolver(self._require_client(), self.namespace, log=self.log)
        self.current_organization, self.current_space = resolver.resolve(org_name, space_name)
        return self.current_space

    def check_privilege(self, expect_admin: bool = False) -> None:
        """Verify the session credentials have exactly the expected privilege.

        Raises:
            PrivilegeMismatch: If the credentials are (or are not) admin against expectation
        """
        self._guard.check_privilege(self.email, self.passwd, expect_admin)

    def info(self) -> Dict[str, Any]:
        self.log.debug(f"get target info, target: {self.api_endpoint}")
        return self._require_client().info()

    def get_target_domain(self) -> str:
        """Return the domain application hostnames are derived on."""
        return self._config.target_domain(self.api_endpoint)

    # ------------------------------------------------------------------
    # Applications and services
    # ------------------------------------------------------------------

    def app(self, name: str, prefix: str = "", domain: Optional[str] = None) -> Application:
        """Reserve a namespaced application name in the current space."""
        return Application(
            guid=None,
            name=f"{prefix}{self.namespace}{name}",
            space_guid=self.current_space.guid if self.current_space else None,
            domain=domain,
        )

    def apps(self) -> List[Application]:
        return self._require_client().apps(self.current_space)

    def find_app(self, name: str) -> Application:
        """Return the application called ``name`` in the current space.

        Raises:
            ResourceLookupFailure: If there is no such application
        """
        app = self._lookup("application", name, lambda: self._require_client().app_by_name(name, self.current_space))
        if app is None:
            self.log.error(f"Fail to find application: {name}")
            raise ResourceLookupFailure(
                f"Application not found: {name}", context={"target": self.api_endpoint, "name": name}
            )
        return app

    def service(self, name: str, require_namespace: bool = True) -> ServiceInstance:
        """Reserve a service instance name in the current space."""
        return ServiceInstance(
            guid=None,
            name=f"{self.namespace}{name}" if require_namespace else name,
            space_guid=self.current_space.guid if self.current_space else None,
        )

    def services(self) -> List[ServiceInstance]:
        return self._require_client().service_instances(self.current_space)

    def system_services(self) -> Dict[str, Dict[str, Dict[str, Any]]]:
        """Group the marketplace offerings by label and provider.

        Returns:
            ``{label: {provider: {"description", "provider", "plans", "versions"}}}``;
            versions accumulate across offerings sharing a label and provider.
        """
        self.log.debug(f"get system services, target: {self.api_endpoint}")
        services: Dict[str, Dict[str, Dict[str, Any]]] = {}

        for offering in self._require_client().services():
            by_provider = services.setdefault(offering.label, {})
            versions = list(by_provider.get(offering.provider, {}).get("versions", []))
            if offering.version not in versions:
                versions.append(offering.version)
            by_provider[offering.provider] = {
                "description": offering.description,
                "provider": offering.provider,
                "plans": list(offering.plans),
                "versions": versions,
            }
        return services

    # ------------------------------------------------------------------
    # Organizations, spaces and domains
    # ------------------------------------------------------------------

    def organizations(self) -> List[Organization]:
        return self._require_client().organizations()

    def spaces(self) -> List[Space]:
        return self._require_client().spaces()

    def domains(self) -> List[Domain]:
        return self._require_client().domains()

    def space(self, name: str, require_namespace: bool = True) -> Space:
        """Return the named space of the current organization, or reserve it.

        Raises:
            ResourceLookupFailure: If the platform lookup fails
        """
        if require_namespace:
            name = f"{self.namespace}{name}"
        found = self._lookup(
            "space", name, lambda: self._require_client().space_by_name(name, self.current_organization)
        )
        if found is not None:
            return found
        return Space(guid=None, name=name, organization_guid=self.current_organization.guid)

    def domain(self, name: str, require_namespace: bool = True) -> Domain:
        """Return the named domain, or reserve it as a test-owned wildcard domain.

        Raises:
            ResourceLookupFailure: If the platform lookup fails
        """
        if require_namespace:
            name = f"{self.namespace}{name}"
        found = self._lookup("domain", name, lambda: self._require_client().domain_by_name(name))
        if found is not None:
            return found
        if name not in self.test_domains:
            self.test_domains.append(name)
        return Domain(guid=None, name=name, wildcard=True, owning_organization_guid=self.current_organization.guid)

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def users(self) -> List[User]:
        """List platform users.

        Raises:
            ResourceLookupFailure: If the platform refuses or fails the listing
        """
        self.log.debug(f"Get Users for target: {self.api_endpoint}, login email: {self.email}")
        try:
            return self._require_client().users()
        except PlatformError as e:
            self.log.error(f"Fail to list users for target: {self.api_endpoint}, login email: {self.email}")
            raise ResourceLookupFailure(
                f"Failed to list users: {e}", context={"target": self.api_endpoint, "user": self.email}
            ) from e

    def user(self, email: str, require_namespace: bool = True) -> User:
        """Return the named user, or an unregistered user value.

        User lookup is admin-only on the platform; a refused lookup yields the
        unregistered value as well.

        Raises:
            ResourceLookupFailure: If the platform lookup fails otherwise
        """
        if require_namespace:
            email = f"{self.namespace}{email}"
        client = self._require_client()

        def find() -> Optional[User]:
            try:
                return client.user_by_name(email)
            except ForbiddenError:
                self.log.debug(f"User lookup not permitted for {self.email}, using unregistered user: {email}")
                return None

        found = self._lookup("user", email, find)
        return found if found is not None else User(guid=None, username=email)

    def register(self, email: str, password: str) -> User:
        self.log.debug(f"Register user: {email}")
        return self._require_client().register(email, password)

    def _lookup(self, kind: str, name: str, find: Callable[[], Any]) -> Any:
        try:
            return find()
        except PlatformError as e:
            self.log.error(f"Fail to get {kind}: {name}")
            raise ResourceLookupFailure(
                f"Failed to look up {kind} '{name}': {e}",
                context={"target": self.api_endpoint, "kind": kind, "name": name},
            ) from e

    # ------------------------------------------------------------------
    # Teardown and diagnostics
    # ------------------------------------------------------------------

    def cleanup(self, mode: str = MODE_CURRENT) -> int:
        """Delete the resources in ``mode`` scope ("current" or "all").

        Returns:
            Number of resources deleted

        Raises:
            PartialCleanupFailure: If a deletion fails; earlier deletions are kept
        """
        coordinator = CleanupCoordinator(self._require_client(), log=self.log)
        return coordinator.cleanup(mode, self.current_organization, self.current_space)

    def render_recent_trace(self, n: int = DEFAULT_TRACE_LINES) -> str:
        """Drain the client trace buffer and render the last ``n`` exchanges."""
        return render_recent_trace(self._require_client(), n)

    def print_client_logs(self) -> str:
        return self.render_recent_trace()
