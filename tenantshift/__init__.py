"""tenantshift: per-tenant, versioned data migrations."""

__version__ = "0.1.0"

from tenantshift.core.exceptions import (
    ConfigurationError,
    MigrationError,
    PersistError,
    ProvisioningError,
    StoreConnectionError,
    StoreOperationError,
    TenantShiftError,
)
from tenantshift.core.models import (
    METADATA,
    AttributeDef,
    CollectionDescriptor,
    IndexDef,
    Record,
    TenantContext,
)
from tenantshift.core.settings import TenantShiftSettings
from tenantshift.core.store import DataStore, S3DataStore
from tenantshift.migrations import (
    CollectionWalker,
    Migration,
    RecordOutcome,
    RecordPipeline,
    SchemaProvisioner,
    differs,
)

__all__ = [
    "__version__",
    # Core
    "METADATA",
    "AttributeDef",
    "CollectionDescriptor",
    "IndexDef",
    "Record",
    "TenantContext",
    "TenantShiftSettings",
    "DataStore",
    "S3DataStore",
    # Errors
    "TenantShiftError",
    "ConfigurationError",
    "MigrationError",
    "PersistError",
    "ProvisioningError",
    "StoreConnectionError",
    "StoreOperationError",
    # Migrations
    "Migration",
    "CollectionWalker",
    "RecordPipeline",
    "RecordOutcome",
    "SchemaProvisioner",
    "differs",
]
