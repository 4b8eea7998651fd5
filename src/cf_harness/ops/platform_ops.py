"""PlatformOps abstract interface for the platform capabilities a session needs.

This module defines the abstract base class that a platform client must
implement to back a harness session. The interface is deliberately narrow: it
covers login, the organization/space/app/service/domain/route/user listings
and deletions a session drives, the client's ambient current organization and
space, and an optional request/response trace buffer.

Space-scoped listings accept an explicit space. When it is omitted the ambient
``current_space`` is used.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ..domain import (
    Application,
    Domain,
    Organization,
    Route,
    ServiceInstance,
    ServiceOffering,
    Space,
    TraceEntry,
    User,
)
from .exceptions import PlatformError


class PlatformOps(ABC):
    """Abstract interface for platform operations.

    Implementations are bound to a single target endpoint and hold at most one
    authenticated identity at a time. The ambient ``current_organization`` and
    ``current_space`` are mutable and act as implicit parameters to unscoped
    listing calls.

    Raises (for every method talking to the platform):
        AuthenticationFailure: When the platform rejects the credentials or token
        ForbiddenError: When the identity may not perform the request
        NotFoundError: When a referenced resource does not exist
        PlatformAPIError: For any other error status from the platform
        PlatformError: When the platform cannot be reached
    """

    def __init__(self, target: str) -> None:
        self.target = target
        self.trace = False
        self._current_organization: Optional[Organization] = None
        self._current_space: Optional[Space] = None

    # ------------------------------------------------------------------
    # Ambient scope
    # ------------------------------------------------------------------

    @property
    def current_organization(self) -> Optional[Organization]:
        return self._current_organization

    @current_organization.setter
    def current_organization(self, organization: Optional[Organization]) -> None:
        self._current_organization = organization

    @property
    def current_space(self) -> Optional[Space]:
        return self._current_space

    @current_space.setter
    def current_space(self, space: Optional[Space]) -> None:
        self._current_space = space

    def _scoped_space(self, space: Optional[Space]) -> Space:
        """Return ``space`` or the ambient current space.

        Raises:
            PlatformError: If neither is set
        """
        resolved = space or self._current_space
        if resolved is None:
            raise PlatformError("No space given and no current space selected", context={"target": self.target})
        return resolved

    # ------------------------------------------------------------------
    # Tracing
    # ------------------------------------------------------------------

    @abstractmethod
    def drain_trace(self) -> List[TraceEntry]:
        """Return the captured trace entries in chronological order and clear the buffer."""
        pass

    # ------------------------------------------------------------------
    # Authentication and identity
    # ------------------------------------------------------------------

    @abstractmethod
    def login(self, username: str, password: str) -> str:
        """Authenticate and return the access token.

        Raises:
            AuthenticationFailure: When the credentials are rejected
        """
        pass

    @abstractmethod
    def info(self) -> Dict[str, Any]:
        """Return the target's info document."""
        pass

    @abstractmethod
    def register(self, email: str, password: str) -> User:
        """Register a new user and return it."""
        pass

    @abstractmethod
    def current_user(self) -> User:
        """Return the authenticated user."""
        pass

    @abstractmethod
    def current_user_is_admin(self) -> bool:
        """Return whether the authenticated user is a platform administrator.

        Raises:
            ForbiddenError: When the platform refuses to disclose the user record
            NotFoundError: When the user record is not visible
        """
        pass

    # ------------------------------------------------------------------
    # Organizations and spaces
    # ------------------------------------------------------------------

    @abstractmethod
    def organizations(self) -> List[Organization]:
        """List organizations visible to the authenticated identity, in platform order."""
        pass

    @abstractmethod
    def organization_by_name(self, name: str) -> Optional[Organization]:
        """Return the organization with exactly this name, or None."""
        pass

    @abstractmethod
    def spaces(self, organization: Optional[Organization] = None) -> List[Space]:
        """List spaces of ``organization``, or every visible space when omitted."""
        pass

    @abstractmethod
    def space_by_name(self, name: str, organization: Organization) -> Optional[Space]:
        """Return the space with exactly this name in ``organization``, or None."""
        pass

    @abstractmethod
    def create_space(self, name: str, organization: Organization) -> Space:
        """Create and persist a space in ``organization``."""
        pass

    @abstractmethod
    def add_space_developer(self, space: Space, user: User) -> None:
        """Grant ``user`` the developer role on ``space``."""
        pass

    # ------------------------------------------------------------------
    # Applications and services
    # ------------------------------------------------------------------

    @abstractmethod
    def apps(self, space: Optional[Space] = None) -> List[Application]:
        """List applications of ``space`` (default: current space)."""
        pass

    @abstractmethod
    def app_by_name(self, name: str, space: Optional[Space] = None) -> Optional[Application]:
        """Return the application with this name in ``space`` (default: current space), or None."""
        pass

    @abstractmethod
    def delete_app(self, app: Application) -> None:
        """Delete an application together with its bindings."""
        pass

    @abstractmethod
    def service_instances(self, space: Optional[Space] = None) -> List[ServiceInstance]:
        """List service instances of ``space`` (default: current space)."""
        pass

    @abstractmethod
    def delete_service_instance(self, instance: ServiceInstance) -> None:
        """Delete a service instance."""
        pass

    @abstractmethod
    def services(self) -> List[ServiceOffering]:
        """List the service offerings of the platform marketplace."""
        pass

    # ------------------------------------------------------------------
    # Domains, routes and users
    # ------------------------------------------------------------------

    @abstractmethod
    def domains(self) -> List[Domain]:
        """List domains visible to the authenticated identity."""
        pass

    @abstractmethod
    def domain_by_name(self, name: str) -> Optional[Domain]:
        """Return the domain with exactly this name, or None."""
        pass

    @abstractmethod
    def routes(self) -> List[Route]:
        """List routes visible to the authenticated identity."""
        pass

    @abstractmethod
    def delete_route(self, route: Route) -> None:
        """Delete a route."""
        pass

    @abstractmethod
    def users(self) -> List[User]:
        """List platform users (usually requires admin rights)."""
        pass

    @abstractmethod
    def user_by_name(self, username: str) -> Optional[User]:
        """Return the user with this login name, or None.

        Raises:
            ForbiddenError: If the identity may not list platform users
        """
        pass
