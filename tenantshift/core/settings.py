"""Settings for tenantshift."""

from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class TenantShiftSettings(BaseSettings):
    """Configuration for a migration run.

    Values are read from ``TENANTSHIFT_*`` environment variables or a
    ``.env`` file. The database schema name also honours ``_APP_DB_SCHEMA``.
    """

    model_config = SettingsConfigDict(
        env_prefix="TENANTSHIFT_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: LogLevel = Field(default="INFO", description="Logging level")

    page_limit: int = Field(
        default=100,
        gt=0,
        description="Records fetched per page; shared by every collection in a run",
    )
    db_schema: str = Field(
        default="appwrite",
        validation_alias=AliasChoices("TENANTSHIFT_DB_SCHEMA", "_APP_DB_SCHEMA", "db_schema"),
        description="Database schema that collections are provisioned under",
    )
    collections_file: Path | None = Field(
        default=None,
        description="JSON file with the collection-schema registry",
    )

    aws_access_key_id: str | None = None
    aws_secret_access_key: str | None = None
    aws_default_region: str = "us-east-1"
    aws_url: str | None = None
    aws_bucket_name: str | None = None
    aws_retry_attempts: int = 3
    base_path: str = "tenantshift-data/"
