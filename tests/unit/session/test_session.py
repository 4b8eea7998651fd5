"""Tests for the Session lifecycle and resource factories."""

import logging
import re
from unittest.mock import Mock

import pytest

from cf_harness.config import HarnessConfig, ValidationError
from cf_harness.ops.exceptions import (
    AuthenticationFailure,
    ForbiddenError,
    NoOrganizationsAvailable,
    PlatformError,
    PrivilegeMismatch,
    ResourceLookupFailure,
)
from tests.helpers import ADMIN_PASSWD, ADMIN_USER, TEST_PASSWD, TEST_TARGET, TEST_USER


class TestSessionConstruction:
    def test_ready_after_construction(self, make_session, platform):
        session = make_session()

        assert session.api_endpoint == TEST_TARGET
        assert session.email == TEST_USER
        assert session.token is not None
        assert session.current_organization.name == "main-org"
        assert session.current_space.name == "main-space"
        assert session.current_space.belongs_to(session.current_organization)
        assert session.client.current_space == session.current_space

    def test_namespace_shape(self, make_session):
        assert re.match(r"^t[0-9a-z]+-$", make_session().namespace)

    def test_independent_sessions_get_different_namespaces(self, make_session):
        first = make_session(rng=None)
        second = make_session(rng=None)

        assert first.namespace != second.namespace

    def test_settling_delay_applied(self, make_session):
        sleep = Mock()

        make_session(settle_delay=1.0, sleep=sleep)

        sleep.assert_called_once_with(1.0)

    def test_explicit_endpoint_is_formatted(self, make_session):
        assert make_session(api_endpoint="other.example.com").api_endpoint == "api.other.example.com"

    def test_repr_hides_secret(self, make_session):
        session = make_session()

        assert repr(session) == f"<Session '{TEST_TARGET}', '{TEST_USER}'>"
        assert TEST_PASSWD not in repr(session)

    def test_missing_credentials(self, make_session):
        with pytest.raises(ValidationError, match="No test user credentials"):
            make_session(config=HarnessConfig(api_endpoint=TEST_TARGET))

    def test_parallel_user_from_config(self, make_session, platform):
        platform.add_user("worker@example.com", "worker-secret")
        config = HarnessConfig(
            api_endpoint=TEST_TARGET,
            user=TEST_USER,
            user_passwd=TEST_PASSWD,
            parallel_user="worker@example.com",
            parallel_passwd="worker-secret",
        )

        assert make_session(config=config).email == "worker@example.com"

    def test_no_organization_fails_construction(self, make_session, platform):
        platform.orgs.clear()

        with pytest.raises(NoOrganizationsAvailable):
            make_session()

    def test_login_failure_propagates(self, make_session):
        with pytest.raises(AuthenticationFailure):
            make_session(passwd="wrong")

    def test_empty_organization_gets_session_space(self, make_session, platform):
        platform.space_records.clear()

        session = make_session()

        assert session.current_space.name == f"{session.namespace}space"
        assert session.current_space.belongs_to(session.current_organization)


class TestPrivilegeContract:
    def test_admin_credentials_rejected_for_normal_session(self, make_session, platform):
        with pytest.raises(PrivilegeMismatch):
            make_session(email=ADMIN_USER, passwd=ADMIN_PASSWD)

        # only the throwaway privilege-check client ever logged in
        assert len(platform.clients) == 1
        assert platform.operations("login") == [("login", ADMIN_USER)]
        assert platform.operations("organizations") == []

    def test_admin_session_uses_admin_credentials(self, make_session, platform):
        session = make_session(admin=True)

        assert session.email == ADMIN_USER
        assert len(platform.clients) == 1

    def test_check_privilege(self, make_session, caplog):
        session = make_session()

        with caplog.at_level(logging.INFO, logger="cf_harness.tests"):
            session.check_privilege(expect_admin=False)
        assert "run bvt as normal user" in caplog.text

        with pytest.raises(PrivilegeMismatch):
            session.check_privilege(expect_admin=True)


class TestScopeSelectors:
    def test_select_org_and_space_switches_ambient_scope(self, make_session, platform):
        other = platform.add_organization("other-org")
        target = platform.add_space("other-space", other)
        session = make_session()

        space = session.select_org_and_space("other-org", "other-space")

        assert space == target
        assert session.current_organization == other
        assert session.client.current_organization == other
        assert session.client.current_space == target

    def test_get_target_domain_derived_from_endpoint(self, make_session):
        assert make_session().get_target_domain() == "runtime.example.com"

    def test_get_target_domain_override(self, make_session, harness_config):
        harness_config.app_domain = "custom.test"

        assert make_session().get_target_domain() == "custom.test"


class TestResourceFactories:
    def test_app_name_is_namespaced(self, make_session):
        session = make_session()

        app = session.app("web", prefix="x", domain="apps.example.com")

        assert app.name == f"x{session.namespace}web"
        assert app.guid is None
        assert app.space_guid == session.current_space.guid
        assert app.domain == "apps.example.com"

    def test_service_namespace_opt_out(self, make_session):
        session = make_session()

        assert session.service("db").name == f"{session.namespace}db"
        assert session.service("db", require_namespace=False).name == "db"

    def test_apps_and_services_list_current_space(self, make_session, platform):
        session = make_session()
        platform.add_app("web", session.current_space)
        platform.add_service_instance("db", session.current_space)

        assert [a.name for a in session.apps()] == ["web"]
        assert [s.name for s in session.services()] == ["db"]

    def test_find_app(self, make_session, platform):
        session = make_session()
        web = platform.add_app("web", session.current_space)

        assert session.find_app("web") == web
        with pytest.raises(ResourceLookupFailure):
            session.find_app("missing")

    def test_space_returns_existing_or_reservation(self, make_session, platform):
        session = make_session()
        existing = platform.add_space(f"{session.namespace}qa", session.current_organization)

        assert session.space("qa") == existing
        reserved = session.space("staging")
        assert reserved.guid is None
        assert reserved.name == f"{session.namespace}staging"
        assert reserved.organization_guid == session.current_organization.guid
        assert session.space("main-space", require_namespace=False).guid is not None

    def test_domain_reservation_tracked_as_test_domain(self, make_session, platform):
        session = make_session()
        platform.add_domain("shared.example.com")

        assert session.domain("shared.example.com", require_namespace=False).guid is not None
        reserved = session.domain("apps.test")

        assert reserved.guid is None
        assert reserved.wildcard is True
        assert session.test_domains == [f"{session.namespace}apps.test"]

    def test_lookup_failure_logged_and_raised(self, make_session, platform, caplog):
        session = make_session()
        cause = PlatformError("connection reset")
        platform.failures["domain_by_name"] = cause

        with caplog.at_level(logging.ERROR, logger="cf_harness.tests"):
            with pytest.raises(ResourceLookupFailure) as exc_info:
                session.domain("apps.test")

        assert exc_info.value.__cause__ is cause
        assert f"Fail to get domain: {session.namespace}apps.test" in caplog.text

    def test_users_requires_admin(self, make_session, caplog):
        session = make_session()

        with caplog.at_level(logging.ERROR, logger="cf_harness.tests"):
            with pytest.raises(ResourceLookupFailure) as exc_info:
                session.users()

        assert isinstance(exc_info.value.__cause__, ForbiddenError)
        assert f"Fail to list users for target: {TEST_TARGET}" in caplog.text

    def test_users_as_admin(self, make_session):
        session = make_session(admin=True)

        assert {u.username for u in session.users()} == {TEST_USER, ADMIN_USER}

    def test_user_lookup(self, make_session):
        session = make_session(admin=True)

        assert session.user(TEST_USER, require_namespace=False).guid is not None
        reserved = session.user("new@example.com")
        assert reserved.guid is None
        assert reserved.username == f"{session.namespace}new@example.com"

    def test_user_for_normal_session_is_unregistered_value(self, make_session, platform):
        session = make_session()

        user = session.user(TEST_USER, require_namespace=False)

        assert user.guid is None
        assert user.username == TEST_USER
        assert platform.operations("user_by_name") == [("user_by_name", TEST_USER)]

    def test_user_lookup_failure_still_raises(self, make_session, platform):
        session = make_session(admin=True)
        platform.failures["user_by_name"] = PlatformError("connection reset")

        with pytest.raises(ResourceLookupFailure):
            session.user("new@example.com")

    def test_register(self, make_session, platform):
        session = make_session()

        user = session.register("fresh@example.com", "pw")

        assert platform.user_records["fresh@example.com"] == user

    def test_listings(self, make_session, platform):
        session = make_session()
        platform.add_domain("example.com")

        assert [o.name for o in session.organizations()] == ["main-org"]
        assert [s.name for s in session.spaces()] == ["main-space"]
        assert [d.name for d in session.domains()] == ["example.com"]
        assert session.info()["name"] == "fake"


class TestSystemServices:
    def test_groups_by_label_and_provider(self, make_session, platform):
        platform.add_offering("mysql", "core", "5.5", "MySQL database", ("100",))
        platform.add_offering("mysql", "core", "5.6", "MySQL database", ("100", "200"))
        platform.add_offering("mysql", "core", "5.6", "MySQL database", ("100", "200"))
        platform.add_offering("redis", "labs", "2.6", "Redis", ("free",))

        services = make_session().system_services()

        assert services == {
            "mysql": {
                "core": {
                    "description": "MySQL database",
                    "provider": "core",
                    "plans": ["100", "200"],
                    "versions": ["5.5", "5.6"],
                }
            },
            "redis": {"labs": {"description": "Redis", "provider": "labs", "plans": ["free"], "versions": ["2.6"]}},
        }


class TestTeardown:
    def test_cleanup_current(self, make_session, platform):
        session = make_session()
        platform.add_app(f"{session.namespace}web", session.current_space)
        platform.add_app(f"{session.namespace}worker", session.current_space)
        platform.add_service_instance(f"{session.namespace}db", session.current_space)
        platform.add_route("web", "runtime.example.com", session.current_space)

        session.cleanup()

        assert session.apps() == []
        assert session.services() == []
        assert session.client.routes() == []
        deletes = [op for op, _ in platform.operations("delete_app", "delete_service_instance")]
        assert deletes == ["delete_app", "delete_app", "delete_service_instance"]

    def test_cleanup_all(self, make_session, platform):
        session = make_session()
        second = platform.add_space("second", session.current_organization)
        platform.add_app("a", second)
        platform.add_service_instance("s", second)

        assert session.cleanup("all") == 2
        assert platform.app_records == []

    def test_logout_drops_client(self, make_session):
        session = make_session()

        session.logout()

        assert session.client is None
        with pytest.raises(PlatformError, match="logged out"):
            session.apps()


class TestTrace:
    def test_trace_rendering_drains_buffer(self, make_session, harness_config):
        harness_config.trace = True
        session = make_session()
        for _ in range(7):
            session.info()

        output = session.render_recent_trace()

        assert len(output.split("\n")) == 5
        assert session.client.drain_trace() == []

    def test_print_client_logs_without_trace(self, make_session):
        session = make_session()
        session.info()

        assert session.print_client_logs() == ""
