"""Domain objects for platform records.

This module defines small immutable value types for the organizations, spaces,
applications, services, domains, routes and users a harness session works
with. Each value references the platform-side identifier (``guid``); the
platform stays the source of truth and a value is only a transient view.

A value whose ``guid`` is None describes a resource that has not been created
yet: only its name has been reserved inside the session namespace.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass(frozen=True)
class Organization:
    """Top-level tenant grouping on the platform.

    Attributes:
        guid: Platform identifier of the organization
        name: Organization name
    """

    guid: Optional[str]
    name: str


@dataclass(frozen=True)
class Space:
    """Sub-tenant scope within an organization.

    Attributes:
        guid: Platform identifier (None while not created)
        name: Space name
        organization_guid: Identifier of the owning organization
    """

    guid: Optional[str]
    name: str
    organization_guid: Optional[str]

    def belongs_to(self, organization: Organization) -> bool:
        """Return True when this space is owned by ``organization``."""
        return self.organization_guid is not None and self.organization_guid == organization.guid


@dataclass(frozen=True)
class Application:
    """Application record or name reservation.

    Attributes:
        guid: Platform identifier (None while not created)
        name: Application name, usually namespaced
        space_guid: Identifier of the space the application lives in
        domain: Domain the application routes are expected on (if chosen)
    """

    guid: Optional[str]
    name: str
    space_guid: Optional[str] = None
    domain: Optional[str] = None


@dataclass(frozen=True)
class ServiceInstance:
    """Provisioned service instance record or name reservation."""

    guid: Optional[str]
    name: str
    space_guid: Optional[str] = None


@dataclass(frozen=True)
class ServiceOffering:
    """Service offered by the platform marketplace.

    Attributes:
        guid: Platform identifier of the offering
        label: Service label (e.g. "mysql")
        provider: Service provider name
        version: Offering version string
        description: Human-readable description
        plans: Names of the plans available for the offering
    """

    guid: Optional[str]
    label: str
    provider: str
    version: str
    description: str = ""
    plans: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Domain:
    """Domain record or name reservation."""

    guid: Optional[str]
    name: str
    wildcard: bool = True
    owning_organization_guid: Optional[str] = None


@dataclass(frozen=True)
class Route:
    """Binding of a hostname on a domain."""

    guid: Optional[str]
    host: str
    domain_name: str
    space_guid: Optional[str] = None

    @property
    def url(self) -> str:
        return f"{self.host}.{self.domain_name}" if self.host else self.domain_name


@dataclass(frozen=True)
class User:
    """Platform user.

    Attributes:
        guid: Platform identifier (None while not registered)
        username: Login name, normally an email address
        is_admin: Whether the user is a platform administrator (if known)
    """

    guid: Optional[str]
    username: str
    is_admin: Optional[bool] = None
