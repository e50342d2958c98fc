"""Per-record transform, diff and persist."""

import inspect
import logging
from collections.abc import Awaitable, Callable
from enum import Enum

from tenantshift.core.exceptions import PersistError
from tenantshift.core.models import Record
from tenantshift.core.store import DataStore
from tenantshift.migrations.diff import differs

logger = logging.getLogger(__name__)

Transform = Callable[[Record], Record | Awaitable[Record]]


class RecordOutcome(str, Enum):
    """What happened to a single record."""

    SKIPPED = "skipped"
    UNCHANGED = "unchanged"
    UPDATED = "updated"
    FAILED = "failed"


async def _apply(transform: Transform, record: Record) -> Record:
    result = transform(record)
    if inspect.isawaitable(result):
        result = await result
    return result


class RecordPipeline:
    """Applies a transform to one record and writes it back if it changed.

    The transform is applied to the record itself and then to every nested
    record attribute, including records inside list attributes. Failures
    stay at the record boundary: they are logged and reported as
    ``RecordOutcome.FAILED``, never raised.
    """

    def __init__(self, store: DataStore):
        self.store = store

    async def process_record(self, record: Record, transform: Transform) -> RecordOutcome:
        if not record.id or not record.collection_id:
            return RecordOutcome.SKIPPED

        collection_id, record_id = record.collection_id, record.id
        old = record.attribute_tree()

        try:
            new = await _apply(transform, record)
            for key, value in new.attributes.items():
                if isinstance(value, Record):
                    new.attributes[key] = await _apply(transform, value)
                elif isinstance(value, list):
                    for i, child in enumerate(value):
                        if isinstance(child, Record):
                            value[i] = await _apply(transform, child)
        except Exception as e:
            logger.error(f"Failed to transform record {collection_id}/{record_id}: {e}")
            return RecordOutcome.FAILED

        if not differs(new.attribute_tree(), old):
            return RecordOutcome.UNCHANGED

        try:
            await self._persist(collection_id, record_id, new)
        except PersistError as e:
            logger.error(f"Failed to update record: {e}")
            return RecordOutcome.FAILED

        return RecordOutcome.UPDATED

    async def _persist(self, collection_id: str, record_id: str, record: Record) -> None:
        try:
            await self.store.update_document(collection_id, record_id, record)
        except Exception as e:
            raise PersistError(
                f"{collection_id}/{record_id}: {e}",
                collection_id=collection_id,
                record_id=record_id,
                original_error=e,
            ) from e
