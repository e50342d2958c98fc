"""Pytest fixtures for tenantshift testing.

To use these fixtures, add to your conftest.py:

    pytest_plugins = ["tenantshift.testing.fixtures"]
"""

import pytest

from tenantshift.core.models import TenantContext
from tenantshift.core.settings import TenantShiftSettings
from tenantshift.testing.mocks import InMemoryDataStore, InMemoryS3
from tenantshift.testing.utils import create_test_settings


@pytest.fixture
def tenantshift_settings() -> TenantShiftSettings:
    """Provide test settings for tenantshift."""
    return create_test_settings()


@pytest.fixture
def mock_s3() -> InMemoryS3:
    """Provide in-memory S3 mock."""
    s3 = InMemoryS3()
    yield s3
    s3.clear()


@pytest.fixture
def tenant_store() -> InMemoryDataStore:
    """Provide an in-memory tenant store with authorization disabled."""
    return InMemoryDataStore()


@pytest.fixture
def shared_store() -> InMemoryDataStore:
    """Provide an in-memory store for shared data."""
    return InMemoryDataStore()


@pytest.fixture
def tenant_context(
    tenant_store: InMemoryDataStore,
    shared_store: InMemoryDataStore,
) -> TenantContext:
    """Provide a tenant context over the in-memory stores."""
    return TenantContext(
        tenant_id="tenant1",
        tenant_store=tenant_store,
        shared_store=shared_store,
    )
