"""Shared constants for the harness test suite."""

TEST_TARGET = "api.runtime.example.com"
TEST_USER = "dev@example.com"
TEST_PASSWD = "dev-secret"
ADMIN_USER = "admin@example.com"
ADMIN_PASSWD = "admin-secret"
