"""Tests for SessionAuthenticator."""

import logging
from unittest.mock import Mock

import pytest

from cf_harness.ops.exceptions import AuthenticationFailure, PlatformError
from cf_harness.session.authenticator import DEFAULT_SETTLE_DELAY, SessionAuthenticator
from tests.helpers import TEST_PASSWD, TEST_TARGET, TEST_USER


class TestAuthenticate:
    def test_returns_logged_in_client_and_token(self, platform):
        authenticator = SessionAuthenticator(platform.client_factory, settle_delay=0)

        client, token = authenticator.authenticate(TEST_TARGET, TEST_USER, TEST_PASSWD)

        assert token == client.token
        assert client.user.username == TEST_USER
        assert client.target == TEST_TARGET

    def test_settles_after_successful_login(self, platform):
        sleep = Mock()
        authenticator = SessionAuthenticator(platform.client_factory, sleep=sleep)

        authenticator.authenticate(TEST_TARGET, TEST_USER, TEST_PASSWD)

        sleep.assert_called_once_with(DEFAULT_SETTLE_DELAY)
        assert DEFAULT_SETTLE_DELAY == 1.0

    def test_zero_delay_skips_sleep(self, platform):
        sleep = Mock()
        SessionAuthenticator(platform.client_factory, settle_delay=0, sleep=sleep).authenticate(
            TEST_TARGET, TEST_USER, TEST_PASSWD
        )

        sleep.assert_not_called()

    def test_trace_flag_enables_client_tracing(self, platform):
        client, _ = SessionAuthenticator(platform.client_factory, trace=True, settle_delay=0).authenticate(
            TEST_TARGET, TEST_USER, TEST_PASSWD
        )

        assert client.trace is True
        assert [entry.url.rsplit("/", 1)[-1] for entry in client.drain_trace()] == ["login"]

    def test_tracing_off_by_default(self, platform):
        client, _ = SessionAuthenticator(platform.client_factory, settle_delay=0).authenticate(
            TEST_TARGET, TEST_USER, TEST_PASSWD
        )

        assert client.trace is False
        assert client.drain_trace() == []


class TestAuthenticateFailure:
    def test_failure_logged_without_secret_and_reraised(self, platform, caplog):
        sleep = Mock()
        authenticator = SessionAuthenticator(platform.client_factory, sleep=sleep)

        with caplog.at_level(logging.ERROR):
            with pytest.raises(AuthenticationFailure):
                authenticator.authenticate(TEST_TARGET, TEST_USER, "not-the-password")

        assert f"Fail to log in, target: {TEST_TARGET}, user: {TEST_USER}" in caplog.text
        assert "not-the-password" not in caplog.text
        sleep.assert_not_called()

    def test_login_attempted_once(self, platform):
        platform.failures["login"] = PlatformError("connection refused")
        authenticator = SessionAuthenticator(platform.client_factory, settle_delay=0)

        with pytest.raises(PlatformError, match="connection refused"):
            authenticator.authenticate(TEST_TARGET, TEST_USER, TEST_PASSWD)

        assert platform.operations("login") == [("login", TEST_USER)]
