"""Keyset-paginated traversal of every migratable collection."""

import asyncio
import logging
from collections.abc import Mapping

from tenantshift.core.models import CollectionDescriptor, Record
from tenantshift.core.store import DataStore
from tenantshift.migrations.pipeline import RecordOutcome, RecordPipeline, Transform

logger = logging.getLogger(__name__)


class CollectionWalker:
    """Drives the record pipeline over every page of every collection.

    Collections are walked one at a time in descriptor order and only if
    they are metadata-governed. Within a collection, all records of a page
    are processed concurrently and the next page is requested only once
    every record of the current page has finished.
    """

    def __init__(
        self,
        store: DataStore,
        collections: Mapping[str, CollectionDescriptor],
        page_limit: int = 100,
    ):
        """Initialize the walker.

        Args:
            store: The tenant store handle
            collections: Collection descriptors in walk order
            page_limit: Maximum records per page
        """
        if page_limit < 1:
            raise ValueError("page_limit must be at least 1")
        self.store = store
        self.collections = collections
        self.page_limit = page_limit
        self.pipeline = RecordPipeline(store)

    async def for_each_record(self, transform: Transform) -> list[dict]:
        """Run a transform over every record of every eligible collection.

        Args:
            transform: Callable (sync or async) taking and returning a Record

        Returns:
            One result dict per walked collection
        """
        results = []
        for descriptor in self.collections.values():
            if not descriptor.is_metadata_governed:
                logger.debug(f"Skipping collection {descriptor.id} of kind {descriptor.kind}")
                continue
            results.append(await self.walk_collection(descriptor.id, transform))
        return results

    async def walk_collection(self, collection_id: str, transform: Transform) -> dict:
        """Run a transform over every record of one collection.

        Args:
            collection_id: The collection to walk
            transform: Callable (sync or async) taking and returning a Record

        Returns:
            Dictionary with page and record counts for the collection
        """
        total = await self.store.count(collection_id)
        logger.info(f"Migrating collection {collection_id}:")

        result = {
            "collection": collection_id,
            "total": total,
            "pages": 0,
            "processed": 0,
            **{outcome.value: 0 for outcome in RecordOutcome},
        }
        cursor: Record | None = None

        while True:
            records = await self.store.find(
                collection_id, limit=self.page_limit, cursor=cursor
            )
            count = len(records)
            result["pages"] += 1
            result["processed"] += count
            logger.info(f"{result['processed']} / {total}")

            outcomes = await asyncio.gather(
                *(self.pipeline.process_record(record, transform) for record in records),
                return_exceptions=True,
            )
            for outcome in outcomes:
                if isinstance(outcome, BaseException):
                    logger.error(f"Unexpected error migrating a {collection_id} record: {outcome}")
                    result[RecordOutcome.FAILED.value] += 1
                else:
                    result[outcome.value] += 1

            if count != self.page_limit:
                break
            cursor = records[-1]

        return result
