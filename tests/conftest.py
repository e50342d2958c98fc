"""Shared fixtures for tenantshift tests."""

pytest_plugins = ["tenantshift.testing.fixtures"]
