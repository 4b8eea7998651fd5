"""Environment-driven configuration for harness sessions.

The harness reads everything it needs from the process environment:

- ``VCAP_BVT_TARGET``: target endpoint (default ``api.vcap.me``)
- ``VCAP_BVT_USER`` / ``VCAP_BVT_USER_PASSWD``: regular test user
- ``YETI_PARALLEL_USER`` / ``YETI_PARALLEL_USER_PASSWD``: per-worker user, overrides the test user
- ``VCAP_BVT_ADMIN_USER`` / ``VCAP_BVT_ADMIN_USER_PASSWD``: administrator
- ``VCAP_BVT_APP_DOMAIN``: application domain override
- ``VCAP_BVT_TRACE``: any non-empty value enables request/response tracing
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlparse

from dotenv import find_dotenv, load_dotenv

from .base import ConfigValidationResult, Configuration, ValidationError

DEFAULT_TARGET = "api.vcap.me"

ENV_TARGET = "VCAP_BVT_TARGET"
ENV_USER = "VCAP_BVT_USER"
ENV_USER_PASSWD = "VCAP_BVT_USER_PASSWD"
ENV_ADMIN_USER = "VCAP_BVT_ADMIN_USER"
ENV_ADMIN_USER_PASSWD = "VCAP_BVT_ADMIN_USER_PASSWD"
ENV_PARALLEL_USER = "YETI_PARALLEL_USER"
ENV_PARALLEL_USER_PASSWD = "YETI_PARALLEL_USER_PASSWD"
ENV_APP_DOMAIN = "VCAP_BVT_APP_DOMAIN"
ENV_TRACE = "VCAP_BVT_TRACE"

_MASK = "********"


def format_target(target: str) -> str:
    """Normalize a target endpoint.

    An explicit scheme is kept and trailing slashes are dropped; the host is
    prefixed with ``api.`` when it does not already start with it.

    Examples:
        >>> format_target("vcap.me")
        'api.vcap.me'
        >>> format_target("https://api.run.example.com/")
        'https://api.run.example.com'

    Raises:
        ValidationError: If the target is empty
    """
    cleaned = (target or "").strip().rstrip("/")
    if not cleaned:
        raise ValidationError("Target endpoint must be a non-empty string")

    scheme, sep, host = cleaned.rpartition("://")
    if not host.startswith("api."):
        host = f"api.{host}"
    return f"{scheme}{sep}{host}"


def endpoint_host(endpoint: str) -> str:
    """Return the host part of an endpoint given with or without a scheme."""
    if "://" in endpoint:
        return urlparse(endpoint).hostname or ""
    return endpoint.split("/", 1)[0].split(":", 1)[0]


def derive_app_domain(endpoint: str, override: Optional[str] = None) -> str:
    """Return the effective application domain.

    The override wins when set. Otherwise the endpoint host loses its first
    DNS label: ``api.runtime.example.com`` gives ``runtime.example.com``.
    """
    if override:
        return override
    return endpoint_host(endpoint).split(".", 1)[-1]


@dataclass
class HarnessConfig(Configuration):
    """Connection and credential settings consumed by harness sessions.

    Attributes:
        api_endpoint: Formatted target endpoint
        user / user_passwd: Regular test user
        admin_user / admin_passwd: Administrator
        parallel_user / parallel_passwd: Per-worker user that replaces the regular test user
        app_domain: Application domain override (None to derive it from the endpoint)
        trace: Whether platform clients capture request/response traces
    """

    api_endpoint: str = DEFAULT_TARGET
    user: Optional[str] = None
    user_passwd: Optional[str] = None
    admin_user: Optional[str] = None
    admin_passwd: Optional[str] = None
    parallel_user: Optional[str] = None
    parallel_passwd: Optional[str] = None
    app_domain: Optional[str] = None
    trace: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, load_env_file: bool = False) -> HarnessConfig:
        """Build a configuration from environment variables.

        Args:
            environ: Mapping to read instead of ``os.environ``
            load_env_file: Load a ``.env`` file from the working directory first
                (existing variables are not overridden)
        """
        if load_env_file:
            load_dotenv(find_dotenv(usecwd=True))
        env = os.environ if environ is None else environ

        return cls(
            api_endpoint=format_target(env.get(ENV_TARGET) or DEFAULT_TARGET),
            user=env.get(ENV_USER) or None,
            user_passwd=env.get(ENV_USER_PASSWD) or None,
            admin_user=env.get(ENV_ADMIN_USER) or None,
            admin_passwd=env.get(ENV_ADMIN_USER_PASSWD) or None,
            parallel_user=env.get(ENV_PARALLEL_USER) or None,
            parallel_passwd=env.get(ENV_PARALLEL_USER_PASSWD) or None,
            app_domain=env.get(ENV_APP_DOMAIN) or None,
            trace=bool(env.get(ENV_TRACE)),
        )

    def login_email(self, admin: bool = False) -> Optional[str]:
        if admin:
            return self.admin_user
        return self.parallel_user or self.user

    def login_passwd(self, admin: bool = False) -> Optional[str]:
        if admin:
            return self.admin_passwd
        return self.parallel_passwd or self.user_passwd

    def target_domain(self, endpoint: Optional[str] = None) -> str:
        """Return the application domain for ``endpoint`` (default: the configured one)."""
        return derive_app_domain(endpoint or self.api_endpoint, self.app_domain)

    def validate(self) -> ConfigValidationResult:
        result = ConfigValidationResult.success_result()

        if not self.api_endpoint or not self.api_endpoint.strip():
            result.add_error("api_endpoint must be a non-empty string")
        elif not endpoint_host(self.api_endpoint):
            result.add_error(f"api_endpoint has no host: {self.api_endpoint}")

        if bool(self.user) != bool(self.user_passwd):
            result.add_error(f"{ENV_USER} and {ENV_USER_PASSWD} must be set together")
        if bool(self.admin_user) != bool(self.admin_passwd):
            result.add_error(f"{ENV_ADMIN_USER} and {ENV_ADMIN_USER_PASSWD} must be set together")
        if bool(self.parallel_user) != bool(self.parallel_passwd):
            result.add_error(f"{ENV_PARALLEL_USER} and {ENV_PARALLEL_USER_PASSWD} must be set together")

        return result

    def to_dict(self) -> Dict[str, Any]:
        return {
            "api_endpoint": self.api_endpoint,
            "user": self.user,
            "user_passwd": _MASK if self.user_passwd else None,
            "admin_user": self.admin_user,
            "admin_passwd": _MASK if self.admin_passwd else None,
            "parallel_user": self.parallel_user,
            "parallel_passwd": _MASK if self.parallel_passwd else None,
            "app_domain": self.app_domain,
            "trace": self.trace,
        }
