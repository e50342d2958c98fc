"""Testing utilities for tenantshift.

Usage in conftest.py:
    from tenantshift.testing import InMemoryDataStore, make_records

Or use provided fixtures directly:
    pytest_plugins = ["tenantshift.testing.fixtures"]
"""

from tenantshift.testing.mocks import InMemoryDataStore, InMemoryS3
from tenantshift.testing.utils import create_test_settings, make_records

__all__ = [
    "InMemoryDataStore",
    "InMemoryS3",
    "create_test_settings",
    "make_records",
]
