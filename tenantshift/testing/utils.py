"""Testing utilities for tenantshift."""

from tenantshift.core.models import Record
from tenantshift.core.settings import TenantShiftSettings


def create_test_settings(
    bucket_name: str = "test-bucket",
    base_path: str = "test/",
    page_limit: int = 100,
    **overrides
) -> TenantShiftSettings:
    """Create tenantshift settings for testing.

    Args:
        bucket_name: The S3 bucket name for tests
        base_path: The S3 base path for tests
        page_limit: Records per page
        **overrides: Additional settings to override

    Returns:
        TenantShiftSettings instance configured for testing
    """
    return TenantShiftSettings(
        aws_bucket_name=bucket_name,
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
        aws_default_region="us-east-1",
        aws_url="http://localhost:4566",
        base_path=base_path,
        page_limit=page_limit,
        **overrides,
    )


def make_records(collection_id: str, count: int, **attributes) -> list[Record]:
    """Build ``count`` records with zero-padded ids so id order is insertion order."""
    return [
        Record(
            id=f"{collection_id}-{i:04d}",
            collection_id=collection_id,
            attributes=dict(attributes),
        )
        for i in range(count)
    ]
