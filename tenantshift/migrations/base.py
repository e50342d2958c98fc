"""Base class for version-specific migration strategies."""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, ClassVar

from tenantshift.core.exceptions import MigrationError
from tenantshift.core.models import CollectionDescriptor, TenantContext
from tenantshift.core.schema import load_registry, merge_collections
from tenantshift.core.settings import TenantShiftSettings
from tenantshift.migrations.pipeline import Transform
from tenantshift.migrations.provisioning import SchemaProvisioner
from tenantshift.migrations.walker import CollectionWalker


class Migration(ABC):
    """A version-specific unit of work over one tenant's data.

    Subclasses implement ``execute``, typically by calling
    ``for_each_record`` with a field transform and ``create_collection``
    for collections the version introduces.

    Example:
        class V13(Migration):
            async def execute(self):
                await self.create_collection("buckets")
                await self.for_each_record(self.fix_record)

    Attributes:
        versions: Release version to strategy class name, for orchestrators
        collections: Collection descriptors, built-ins first
        settings: Settings for the run
    """

    versions: ClassVar[dict[str, str]] = {
        "0.13.0": "V12",
        "0.13.1": "V12",
        "0.13.2": "V12",
        "0.13.3": "V12",
        "0.13.4": "V12",
        "0.14.0": "V13",
    }

    def __init__(
        self,
        collections: Mapping[str, Any] | None = None,
        settings: TenantShiftSettings | None = None,
    ):
        """Initialize the migration.

        Args:
            collections: Registry of collection descriptors; loaded from
                ``settings.collections_file`` when omitted
            settings: Settings for the run
        """
        self.settings = settings or TenantShiftSettings()
        if collections is None and self.settings.collections_file:
            collections = load_registry(self.settings.collections_file)
        self.collections: dict[str, CollectionDescriptor] = merge_collections(collections)
        self._context: TenantContext | None = None

    @property
    def context(self) -> TenantContext:
        if self._context is None:
            raise MigrationError(f"{self.__class__.__name__} is not bound to a tenant")
        return self._context

    def bind(self, context: TenantContext) -> "Migration":
        """Bind the migration to a tenant.

        Args:
            context: The tenant to migrate

        Returns:
            self, for chaining

        Raises:
            MigrationError: If the migration is already bound
        """
        if self._context is not None:
            raise MigrationError(
                f"{self.__class__.__name__} is already bound to tenant {self._context.tenant_id}"
            )
        context.tenant_store.set_namespace(context.namespace)
        self._context = context
        return self

    async def for_each_record(self, transform: Transform) -> list[dict]:
        """Run a transform over every record of the tenant's collections."""
        walker = CollectionWalker(
            self.context.tenant_store,
            self.collections,
            page_limit=self.settings.page_limit,
        )
        return await walker.for_each_record(transform)

    async def create_collection(self, collection_id: str, name: str | None = None) -> bool:
        """Create a collection from its descriptor if it is missing."""
        provisioner = SchemaProvisioner(
            self.context.tenant_store,
            self.collections,
            database=self.settings.db_schema,
        )
        return await provisioner.ensure_collection(collection_id, name)

    @abstractmethod
    async def execute(self) -> None:
        """Run the migration for the bound tenant."""
        pass
