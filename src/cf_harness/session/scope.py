"""Organization and space resolution for harness sessions.

Resolution is deterministic:

1. No visible organization is fatal (NoOrganizationsAvailable).
2. The organization hint is matched by exact name; without a hint, or when it
   matches nothing, the first listed organization is used.
3. An organization without spaces gets a new ``<namespace>space`` space, and the
   authenticated user is added to it as developer.
4. The space hint picks the first exact-name match; otherwise the first listed
   space is used.
5. The client's ambient current organization and space are set to the result.

Hints are always best effort; only the zero-organization case is an error.
"""

import logging
from typing import Optional, Tuple

from cf_harness.domain import Organization, Space
from cf_harness.ops.exceptions import NoOrganizationsAvailable
from cf_harness.ops.platform_ops import PlatformOps

logger = logging.getLogger(__name__)

DEFAULT_SPACE_SUFFIX = "space"


class OrgSpaceResolver:
    """Selects the organization and space a session is scoped to."""

    def __init__(self, client: PlatformOps, namespace: str, log: Optional[logging.Logger] = None) -> None:
        self._client = client
        self._namespace = namespace
        self._log = log or logger

    def resolve(self, org_name: str = "", space_name: str = "") -> Tuple[Organization, Space]:
        """Resolve and activate the session organization and space.

        Raises:
            NoOrganizationsAvailable: If the identity sees no organization
        """
        organization = self._select_organization(org_name)
        space = self._select_space(organization, space_name)

        self._client.current_organization = organization
        self._client.current_space = space
        self._log.debug(f"Selected organization '{organization.name}', space '{space.name}' on {self._client.target}")
        return organization, space

    def _select_organization(self, org_name: str) -> Organization:
        orgs = self._client.organizations()
        if not orgs:
            self._log.error(f"No organizations available on {self._client.target}")
            raise NoOrganizationsAvailable("no organizations.", context={"target": self._client.target})

        if org_name:
            found = self._client.organization_by_name(org_name)
            if found is not None:
                return found
            self._log.debug(f"Organization '{org_name}' not found, using '{orgs[0].name}'")
        return orgs[0]

    def _select_space(self, organization: Organization, space_name: str) -> Space:
        spaces = self._client.spaces(organization)
        if not spaces:
            return self._create_default_space(organization)

        if space_name:
            for space in spaces:
                if space.name == space_name:
                    return space
            self._log.debug(f"Space '{space_name}' not found in '{organization.name}', using '{spaces[0].name}'")
        return spaces[0]

    def _create_default_space(self, organization: Organization) -> Space:
        name = f"{self._namespace}{DEFAULT_SPACE_SUFFIX}"
        self._log.info(f"Organization '{organization.name}' has no spaces, creating '{name}'")
        space = self._client.create_space(name, organization)
        self._client.add_space_developer(space, self._client.current_user())
        return space
