"""Idempotent creation of collections from their registry descriptors."""

import logging
from collections.abc import Mapping

from tenantshift.core.exceptions import ProvisioningError
from tenantshift.core.models import AttributeDef, CollectionDescriptor, IndexDef
from tenantshift.core.store import DataStore

logger = logging.getLogger(__name__)


class SchemaProvisioner:
    """Creates a collection in the tenant store if it does not exist yet."""

    def __init__(
        self,
        store: DataStore,
        collections: Mapping[str, CollectionDescriptor],
        database: str = "appwrite",
    ):
        """Initialize the provisioner.

        Args:
            store: The tenant store handle
            collections: Collection descriptors by id
            database: Database schema collections are created under
        """
        self.store = store
        self.collections = collections
        self.database = database

    async def ensure_collection(self, collection_id: str, name: str | None = None) -> bool:
        """Create a collection from its descriptor unless it already exists.

        Creation failures from the store propagate unchanged; there is no
        retry.

        Args:
            collection_id: Registry id of the descriptor to use
            name: Name to create the collection under (defaults to the id)

        Returns:
            True if the collection was created, False if it already existed

        Raises:
            ProvisioningError: If the descriptor is unknown or creation fails
        """
        name = name or collection_id

        if await self.store.exists(self.database, name):
            logger.debug(f"Collection {name} already exists, skipping creation")
            return False

        descriptor = self.collections.get(collection_id)
        if descriptor is None:
            raise ProvisioningError(
                f"Unknown collection '{collection_id}'",
                collection_id=collection_id,
            )

        attributes = [
            AttributeDef(
                id=attribute.id,
                type=attribute.type,
                size=attribute.size,
                required=attribute.required,
                signed=attribute.signed,
                array=attribute.array,
                filters=list(attribute.filters),
            )
            for attribute in descriptor.attributes
        ]
        indexes = [
            IndexDef(
                id=index.id,
                type=index.type,
                attributes=list(index.attributes),
                lengths=list(index.lengths),
                orders=list(index.orders),
            )
            for index in descriptor.indexes
        ]

        await self.store.create_collection(name, attributes, indexes)
        logger.info(f"Created collection {name} from descriptor {collection_id}")
        return True
