"""Test configuration for pytest."""

import logging
import os
import random

import pytest

from cf_harness.config import HarnessConfig
from cf_harness.session import Session
from cf_harness.testing import FakePlatform

from tests.helpers import ADMIN_PASSWD, ADMIN_USER, TEST_PASSWD, TEST_TARGET, TEST_USER


@pytest.fixture(autouse=True)
def clean_harness_env(monkeypatch):
    """Keep the developer's harness environment out of unit tests."""
    for key in list(os.environ):
        if key.startswith(("VCAP_BVT_", "YETI_PARALLEL_")):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def harness_config() -> HarnessConfig:
    return HarnessConfig(
        api_endpoint=TEST_TARGET,
        user=TEST_USER,
        user_passwd=TEST_PASSWD,
        admin_user=ADMIN_USER,
        admin_passwd=ADMIN_PASSWD,
    )


@pytest.fixture
def platform() -> FakePlatform:
    """Platform with one regular user, one admin and one organization holding one space."""
    fake = FakePlatform()
    fake.add_user(TEST_USER, TEST_PASSWD)
    fake.add_user(ADMIN_USER, ADMIN_PASSWD, admin=True)
    org = fake.add_organization("main-org")
    fake.add_space("main-space", org)
    return fake


@pytest.fixture
def test_logger() -> logging.Logger:
    return logging.getLogger("cf_harness.tests")


@pytest.fixture
def make_session(platform, harness_config, test_logger):
    """Build sessions against the fake platform without the settling delay."""

    def _make(**kwargs) -> Session:
        kwargs.setdefault("config", harness_config)
        kwargs.setdefault("client_factory", platform.client_factory)
        kwargs.setdefault("logger", test_logger)
        kwargs.setdefault("settle_delay", 0)
        kwargs.setdefault("rng", random.Random(1234))
        return Session(**kwargs)

    return _make


def pytest_configure(config):
    config.addinivalue_line("markers", "slow: mark test as slow-running test")
