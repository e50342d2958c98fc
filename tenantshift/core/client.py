"""S3 client manager for migration runs."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from aiobotocore.client import AioBaseClient
from aiobotocore.session import get_session
from botocore.config import Config
from botocore.exceptions import ClientError

from tenantshift.core.exceptions import (
    ConfigurationError,
    StoreConnectionError,
    StoreOperationError,
)
from tenantshift.core.settings import TenantShiftSettings


def adjust_endpoint_url(
    endpoint_url: str | None, bucket_name: str | None
) -> str | None:
    """Adjust endpoint URL for path-style addressing if needed.

    Args:
        endpoint_url: The S3 endpoint URL
        bucket_name: The S3 bucket name

    Returns:
        Adjusted endpoint URL or None
    """
    if not endpoint_url:
        return None
    if bucket_name and f"{bucket_name}." in endpoint_url:
        return endpoint_url.replace(f"{bucket_name}.", "")
    return endpoint_url


class S3ClientManager:
    """Creates async S3 clients configured from settings."""

    def __init__(self, settings: TenantShiftSettings | None = None):
        self.settings = settings or TenantShiftSettings()
        if not self.settings.aws_bucket_name:
            raise ConfigurationError(missing_fields=["aws_bucket_name"])
        self._endpoint_url = adjust_endpoint_url(
            self.settings.aws_url, self.settings.aws_bucket_name
        )
        self._client_config = Config(
            s3={"addressing_style": "path"},
            retries={
                "max_attempts": self.settings.aws_retry_attempts,
                "mode": "standard",
            },
        )
        self._async_session = None

    @asynccontextmanager
    async def get_async_client(self) -> AsyncGenerator[AioBaseClient, None]:
        """Get an async S3 client within a context manager.

        Yields:
            An aiobotocore S3 client

        Raises:
            StoreConnectionError: If client creation fails
        """
        if self._async_session is None:
            self._async_session = get_session()

        try:
            client_context = self._async_session.create_client(
                "s3",
                region_name=self.settings.aws_default_region,
                aws_access_key_id=self.settings.aws_access_key_id,
                aws_secret_access_key=self.settings.aws_secret_access_key,
                endpoint_url=self._endpoint_url,
                config=self._client_config,
            )
            client = await client_context.__aenter__()
        except Exception as e:
            raise StoreConnectionError(
                message=f"Failed to create async S3 client: {e}",
                original_error=e,
                endpoint=self._endpoint_url,
            )
        try:
            yield client
        finally:
            await client_context.__aexit__(None, None, None)

    async def ensure_bucket_exists(self, client) -> None:
        """Ensure the configured bucket exists, creating it if necessary.

        Args:
            client: An async S3 client

        Raises:
            StoreConnectionError: If bucket creation fails
            StoreOperationError: If the bucket check fails
        """
        bucket = self.settings.aws_bucket_name
        try:
            await client.head_bucket(Bucket=bucket)
        except ClientError as e:
            error_code = e.response["Error"]["Code"]
            if error_code in ("404", "NoSuchBucket", "NotFound"):
                try:
                    await client.create_bucket(Bucket=bucket)
                except ClientError as create_error:
                    raise StoreConnectionError(
                        message=f"Failed to create bucket: {create_error}",
                        original_error=create_error,
                        endpoint=self._endpoint_url,
                    )
            elif error_code == "403":
                raise StoreOperationError("Permission denied checking bucket existence")
            else:
                raise StoreOperationError(f"Error checking bucket: {e}")
