"""Cloud controller (v2 REST API) implementation of PlatformOps.

This module provides a thin ``requests`` adapter covering only the calls a
harness session needs. It is not a general-purpose platform client.

Login uses the password grant of the UAA token endpoint advertised by
``/v2/info``. When tracing is enabled every response is recorded as a
TraceEntry as it is received. A ``requests.Session`` passed in by the caller
is used as is; the client never registers hooks on it.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Optional

import jwt
import requests

from cf_harness.domain import (
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
from cf_harness.ops.exceptions import (
    AuthenticationFailure,
    ForbiddenError,
    NotFoundError,
    PlatformAPIError,
    PlatformError,
)
from cf_harness.ops.platform_ops import PlatformOps

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30
REQUEST_ID_HEADER = "x-vcap-request-id"
# UAA client used by the platform CLI; it has no secret.
UAA_CLIENT = ("cf", "")


def _base_url(target: str) -> str:
    if "://" in target:
        return target.rstrip("/")
    return f"https://{target.rstrip('/')}"


def _guid(resource: Dict[str, Any]) -> Optional[str]:
    return resource.get("metadata", {}).get("guid")


def _entity(resource: Dict[str, Any]) -> Dict[str, Any]:
    return resource.get("entity", {})


class CloudControllerClient(PlatformOps):
    """PlatformOps backed by the cloud controller v2 REST API."""

    def __init__(
        self,
        target: str,
        session: Optional[requests.Session] = None,
        timeout: int = DEFAULT_TIMEOUT,
    ) -> None:
        super().__init__(target)
        self._base_url = _base_url(target)
        self._timeout = timeout
        self._token: Optional[str] = None
        self._token_endpoint: Optional[str] = None
        self._trace_log: List[TraceEntry] = []

        self._session = session or requests.Session()

        logger.debug(f"CloudControllerClient initialized for {self._base_url}")

    # ------------------------------------------------------------------
    # HTTP plumbing
    # ------------------------------------------------------------------

    def _record_trace(self, response: requests.Response) -> None:
        if not self.trace:
            return
        request = response.request
        self._trace_log.append(
            TraceEntry(
                date=response.headers.get("date", ""),
                elapsed=response.elapsed.total_seconds(),
                request_id=response.headers.get(REQUEST_ID_HEADER, ""),
                method=(request.method or "").upper(),
                status=response.status_code,
                url=request.url or "",
            )
        )

    def drain_trace(self) -> List[TraceEntry]:
        entries, self._trace_log = self._trace_log, []
        return entries

    def _error_for(self, response: requests.Response, url: str) -> PlatformError:
        status = response.status_code
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        description = body.get("description") or body.get("error_description") or response.text[:200]
        context = {"target": self.target, "url": url, "status_code": status, "error_code": body.get("error_code")}
        message = f"{response.request.method if response.request else 'Request'} {url} failed ({status}): {description}"

        if status == 401:
            return AuthenticationFailure(message, context=context)
        if status == 403:
            return ForbiddenError(message, context=context, status_code=status)
        if status == 404:
            return NotFoundError(message, context=context, status_code=status)
        return PlatformAPIError(message, context=context, status_code=status)

    def _request(
        self,
        method: str,
        path: str = "",
        *,
        url: Optional[str] = None,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
        auth: Optional[Any] = None,
    ) -> Dict[str, Any]:
        url = url or f"{self._base_url}{path}"
        headers = {"Accept": "application/json"}
        if self._token and auth is None:
            headers["Authorization"] = f"bearer {self._token}"

        try:
            response = self._session.request(
                method.upper(),
                url,
                params=params,
                json=json_body,
                data=data,
                headers=headers,
                auth=auth,
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise PlatformError(f"Request to {url} failed: {exc}", context={"target": self.target, "url": url}) from exc

        self._record_trace(response)
        if response.status_code >= 400:
            raise self._error_for(response, url)
        if response.status_code == 204 or not response.content:
            return {}
        return response.json()

    def _paged(self, path: str, params: Optional[Dict[str, Any]] = None) -> Iterator[Dict[str, Any]]:
        """Yield every resource of a paginated v2 listing."""
        page = self._request("GET", path, params=params)
        while True:
            yield from page.get("resources", [])
            next_url = page.get("next_url")
            if not next_url:
                return
            page = self._request("GET", next_url)

    # ------------------------------------------------------------------
    # Authentication and identity
    # ------------------------------------------------------------------

    def info(self) -> Dict[str, Any]:
        return self._request("GET", "/v2/info")

    def _uaa_endpoint(self) -> str:
        if self._token_endpoint is None:
            info = self.info()
            endpoint = info.get("token_endpoint") or info.get("authorization_endpoint")
            if not endpoint:
                raise PlatformError("Target info advertises no token endpoint", context={"target": self.target})
            self._token_endpoint = endpoint.rstrip("/")
        return self._token_endpoint

    def login(self, username: str, password: str) -> str:
        self._token = None
        payload = self._request(
            "POST",
            url=f"{self._uaa_endpoint()}/oauth/token",
            data={"grant_type": "password", "username": username, "password": password},
            auth=UAA_CLIENT,
        )
        token = payload.get("access_token")
        if not token:
            raise AuthenticationFailure(
                "Token endpoint returned no access token", context={"target": self.target, "user": username}
            )
        self._token = token
        return token

    def _claims(self) -> Dict[str, Any]:
        if not self._token:
            raise AuthenticationFailure("Not logged in", context={"target": self.target})
        return jwt.decode(self._token, options={"verify_signature": False})

    def register(self, email: str, password: str) -> User:
        created = self._request(
            "POST",
            url=f"{self._uaa_endpoint()}/Users",
            json_body={
                "userName": email,
                "emails": [{"value": email}],
                "password": password,
                "name": {"givenName": email, "familyName": email},
            },
        )
        guid = created.get("id")
        self._request("POST", "/v2/users", json_body={"guid": guid})
        return User(guid=guid, username=email, is_admin=False)

    def current_user(self) -> User:
        claims = self._claims()
        return User(guid=claims.get("user_id"), username=claims.get("user_name", ""))

    def current_user_is_admin(self) -> bool:
        user = self.current_user()
        record = self._request("GET", f"/v2/users/{user.guid}")
        return bool(_entity(record).get("admin", False))

    # ------------------------------------------------------------------
    # Organizations and spaces
    # ------------------------------------------------------------------

    @staticmethod
    def _to_org(resource: Dict[str, Any]) -> Organization:
        return Organization(guid=_guid(resource), name=_entity(resource).get("name", ""))

    @staticmethod
    def _to_space(resource: Dict[str, Any]) -> Space:
        entity = _entity(resource)
        return Space(guid=_guid(resource), name=entity.get("name", ""), organization_guid=entity.get("organization_guid"))

    def organizations(self) -> List[Organization]:
        return [self._to_org(r) for r in self._paged("/v2/organizations")]

    def organization_by_name(self, name: str) -> Optional[Organization]:
        for resource in self._paged("/v2/organizations", params={"q": f"name:{name}"}):
            org = self._to_org(resource)
            if org.name == name:
                return org
        return None

    def spaces(self, organization: Optional[Organization] = None) -> List[Space]:
        path = f"/v2/organizations/{organization.guid}/spaces" if organization else "/v2/spaces"
        return [self._to_space(r) for r in self._paged(path)]

    def space_by_name(self, name: str, organization: Organization) -> Optional[Space]:
        for resource in self._paged(f"/v2/organizations/{organization.guid}/spaces", params={"q": f"name:{name}"}):
            space = self._to_space(resource)
            if space.name == name:
                return space
        return None

    def create_space(self, name: str, organization: Organization) -> Space:
        created = self._request("POST", "/v2/spaces", json_body={"name": name, "organization_guid": organization.guid})
        return self._to_space(created)

    def add_space_developer(self, space: Space, user: User) -> None:
        self._request("PUT", f"/v2/spaces/{space.guid}/developers/{user.guid}")

    # ------------------------------------------------------------------
    # Applications and services
    # ------------------------------------------------------------------

    @staticmethod
    def _to_app(resource: Dict[str, Any]) -> Application:
        entity = _entity(resource)
        return Application(guid=_guid(resource), name=entity.get("name", ""), space_guid=entity.get("space_guid"))

    @staticmethod
    def _to_instance(resource: Dict[str, Any]) -> ServiceInstance:
        entity = _entity(resource)
        return ServiceInstance(guid=_guid(resource), name=entity.get("name", ""), space_guid=entity.get("space_guid"))

    def apps(self, space: Optional[Space] = None) -> List[Application]:
        scoped = self._scoped_space(space)
        return [self._to_app(r) for r in self._paged(f"/v2/spaces/{scoped.guid}/apps")]

    def app_by_name(self, name: str, space: Optional[Space] = None) -> Optional[Application]:
        scoped = self._scoped_space(space)
        for resource in self._paged(f"/v2/spaces/{scoped.guid}/apps", params={"q": f"name:{name}"}):
            app = self._to_app(resource)
            if app.name == name:
                return app
        return None

    def delete_app(self, app: Application) -> None:
        self._request("DELETE", f"/v2/apps/{app.guid}", params={"recursive": "true"})

    def service_instances(self, space: Optional[Space] = None) -> List[ServiceInstance]:
        scoped = self._scoped_space(space)
        return [self._to_instance(r) for r in self._paged(f"/v2/spaces/{scoped.guid}/service_instances")]

    def delete_service_instance(self, instance: ServiceInstance) -> None:
        self._request("DELETE", f"/v2/service_instances/{instance.guid}", params={"recursive": "true"})

    def services(self) -> List[ServiceOffering]:
        offerings = []
        for resource in self._paged("/v2/services", params={"inline-relations-depth": 1}):
            entity = _entity(resource)
            plans = tuple(_entity(plan).get("name", "") for plan in entity.get("service_plans", []))
            offerings.append(
                ServiceOffering(
                    guid=_guid(resource),
                    label=entity.get("label", ""),
                    provider=entity.get("provider") or "core",
                    version=str(entity.get("version") or ""),
                    description=entity.get("description", ""),
                    plans=plans,
                )
            )
        return offerings

    # ------------------------------------------------------------------
    # Domains, routes and users
    # ------------------------------------------------------------------

    @staticmethod
    def _to_domain(resource: Dict[str, Any]) -> Domain:
        entity = _entity(resource)
        return Domain(
            guid=_guid(resource),
            name=entity.get("name", ""),
            wildcard=bool(entity.get("wildcard", True)),
            owning_organization_guid=entity.get("owning_organization_guid"),
        )

    def domains(self) -> List[Domain]:
        return [self._to_domain(r) for r in self._paged("/v2/domains")]

    def domain_by_name(self, name: str) -> Optional[Domain]:
        for resource in self._paged("/v2/domains", params={"q": f"name:{name}"}):
            domain = self._to_domain(resource)
            if domain.name == name:
                return domain
        return None

    def routes(self) -> List[Route]:
        routes = []
        for resource in self._paged("/v2/routes", params={"inline-relations-depth": 1}):
            entity = _entity(resource)
            domain_name = _entity(entity.get("domain") or {}).get("name", "")
            routes.append(
                Route(guid=_guid(resource), host=entity.get("host", ""), domain_name=domain_name, space_guid=entity.get("space_guid"))
            )
        return routes

    def delete_route(self, route: Route) -> None:
        self._request("DELETE", f"/v2/routes/{route.guid}")

    def users(self) -> List[User]:
        return [
            User(guid=_guid(r), username=_entity(r).get("username", ""), is_admin=bool(_entity(r).get("admin", False)))
            for r in self._paged("/v2/users")
        ]

    def user_by_name(self, username: str) -> Optional[User]:
        # /v2/users is admin-only; a regular user gets ForbiddenError here
        for user in self.users():
            if user.username == username:
                return user
        return None
