"""Tenant data-store interface and its S3 implementation."""

import asyncio
import json
import logging
from collections.abc import Iterable, Sequence
from typing import Any, Protocol, runtime_checkable

from botocore.exceptions import ClientError

from tenantshift.core.exceptions import ProvisioningError, StoreOperationError
from tenantshift.core.models import AttributeDef, IndexDef, Record

logger = logging.getLogger(__name__)

ROLE_ALL = "role:all"


@runtime_checkable
class DataStore(Protocol):
    """Protocol for tenant data-store operations used by migrations."""

    def set_namespace(self, namespace: str) -> None:
        """Scope the handle to a tenant namespace."""
        ...

    async def count(self, collection_id: str) -> int:
        """Count records in a collection."""
        ...

    async def find(
        self, collection_id: str, limit: int = 25, cursor: Record | None = None
    ) -> list[Record]:
        """Return up to ``limit`` records ordered after ``cursor``."""
        ...

    async def exists(self, database: str, name: str) -> bool:
        """Check whether a collection exists under a database schema."""
        ...

    async def create_collection(
        self,
        name: str,
        attributes: Sequence[AttributeDef],
        indexes: Sequence[IndexDef],
    ) -> None:
        """Create a collection."""
        ...

    async def update_document(
        self, collection_id: str, record_id: str, record: Record
    ) -> Record:
        """Replace a stored record."""
        ...


def is_permitted(record: Record, action: str, roles: Iterable[str]) -> bool:
    """Check a record's ``$read``/``$write`` permissions against roles.

    Args:
        record: The record to check
        action: Either "read" or "write"
        roles: Roles held by the caller

    Returns:
        True if any held role (or ``role:all``) is granted the action
    """
    allowed = record.get(f"${action}") or []
    if ROLE_ALL in allowed:
        return True
    return any(role in allowed for role in roles)


def validate_collection(
    name: str,
    attributes: Sequence[AttributeDef],
    indexes: Sequence[IndexDef],
) -> None:
    """Validate a collection definition before it is created.

    Raises:
        ProvisioningError: If the definition is inconsistent
    """
    if not name:
        raise ProvisioningError("Collection name must not be empty")

    seen: set[str] = set()
    for attribute in attributes:
        if attribute.id in seen:
            raise ProvisioningError(
                f"Duplicate attribute '{attribute.id}' in collection '{name}'",
                collection_id=name,
            )
        seen.add(attribute.id)

    index_ids: set[str] = set()
    for index in indexes:
        if index.id in index_ids:
            raise ProvisioningError(
                f"Duplicate index '{index.id}' in collection '{name}'",
                collection_id=name,
            )
        index_ids.add(index.id)
        for attribute_id in index.attributes:
            if attribute_id not in seen and not attribute_id.startswith("$"):
                raise ProvisioningError(
                    f"Index '{index.id}' references unknown attribute '{attribute_id}'",
                    collection_id=name,
                )
        if len(index.lengths) > len(index.attributes) or len(index.orders) > len(index.attributes):
            raise ProvisioningError(
                f"Index '{index.id}' has more lengths or orders than attributes",
                collection_id=name,
            )


def collection_document(
    name: str,
    attributes: Sequence[AttributeDef],
    indexes: Sequence[IndexDef],
) -> dict[str, Any]:
    """Build the stored schema document for a collection."""
    return {
        "$id": name,
        "attributes": [a.model_dump(by_alias=True) for a in attributes],
        "indexes": [i.model_dump(by_alias=True) for i in indexes],
    }


class S3DataStore:
    """Tenant data store backed by JSON objects in S3.

    Layout under ``base_path``::

        {database}/{namespace}/{collection}/_collection.json
        {database}/{namespace}/{collection}/records/{id}.json

    Records are paged in key order; the cursor is the last record of the
    previous page and maps to ``StartAfter``.
    """

    COLLECTION_FILE = "_collection.json"

    def __init__(
        self,
        s3_client,
        bucket_name: str,
        database: str = "appwrite",
        base_path: str = "",
        authorization: bool = True,
        roles: Iterable[str] | None = None,
    ):
        """Initialize the store handle.

        Args:
            s3_client: The S3 client to use
            bucket_name: The S3 bucket name
            database: Database schema the collections live under
            base_path: Key prefix for all data
            authorization: Enforce record permissions for this handle. With
                it off the handle sees and writes every record, which is
                how migration runs open their stores.
            roles: Roles held by this handle when authorization is on
        """
        self.s3_client = s3_client
        self.bucket_name = bucket_name
        self.database = database
        self.base_path = base_path
        self.authorization = authorization
        self.roles = set(roles or ())
        self.namespace = ""

    def set_namespace(self, namespace: str) -> None:
        self.namespace = namespace

    def _collection_prefix(self, name: str, database: str | None = None) -> str:
        return f"{self.base_path}{database or self.database}/{self.namespace}/{name}/"

    def _records_prefix(self, collection_id: str) -> str:
        return f"{self._collection_prefix(collection_id)}records/"

    def _record_key(self, collection_id: str, record_id: str) -> str:
        return f"{self._records_prefix(collection_id)}{record_id}.json"

    async def _list_keys(
        self,
        prefix: str,
        max_keys: int,
        start_after: str | None = None,
    ) -> tuple[list[str], bool]:
        params = {
            "Bucket": self.bucket_name,
            "Prefix": prefix,
            "MaxKeys": max_keys,
        }
        if start_after:
            params["StartAfter"] = start_after

        try:
            response = await self.s3_client.list_objects_v2(**params)
        except ClientError as e:
            raise StoreOperationError(
                f"Failed to list objects: {e}",
                operation="list_objects_v2",
                key=prefix,
                original_error=e,
            )

        keys = [
            obj["Key"]
            for obj in response.get("Contents", [])
            if obj["Key"].endswith(".json")
        ]
        return keys, response.get("IsTruncated", False)

    async def _load(self, key: str) -> Record:
        try:
            response = await self.s3_client.get_object(Bucket=self.bucket_name, Key=key)
            body = await response["Body"].read()
        except ClientError as e:
            raise StoreOperationError(
                f"Failed to load object: {e}",
                operation="get_object",
                key=key,
                original_error=e,
            )
        return Record.from_dict(json.loads(body.decode("utf-8")))

    async def _object_exists(self, key: str) -> bool:
        try:
            await self.s3_client.head_object(Bucket=self.bucket_name, Key=key)
            return True
        except ClientError as e:
            if e.response["Error"]["Code"] in ("404", "NoSuchKey", "NotFound"):
                return False
            raise StoreOperationError(
                f"Failed to check object: {e}",
                operation="head_object",
                key=key,
                original_error=e,
            )

    async def count(self, collection_id: str) -> int:
        prefix = self._records_prefix(collection_id)
        total = 0
        start_after = None

        while True:
            keys, truncated = await self._list_keys(prefix, 1000, start_after)
            if not keys:
                break
            if self.authorization:
                records = await asyncio.gather(*(self._load(k) for k in keys))
                total += sum(1 for r in records if is_permitted(r, "read", self.roles))
            else:
                total += len(keys)
            if not truncated:
                break
            start_after = keys[-1]

        return total

    async def find(
        self, collection_id: str, limit: int = 25, cursor: Record | None = None
    ) -> list[Record]:
        prefix = self._records_prefix(collection_id)
        start_after = self._record_key(collection_id, cursor.id) if cursor else None
        results: list[Record] = []

        while len(results) < limit:
            keys, truncated = await self._list_keys(
                prefix, limit - len(results), start_after
            )
            if not keys:
                break
            records = await asyncio.gather(*(self._load(k) for k in keys))
            for record in records:
                if self.authorization and not is_permitted(record, "read", self.roles):
                    continue
                results.append(record)
            if not truncated:
                break
            start_after = keys[-1]

        return results

    async def exists(self, database: str, name: str) -> bool:
        key = f"{self._collection_prefix(name, database)}{self.COLLECTION_FILE}"
        return await self._object_exists(key)

    async def create_collection(
        self,
        name: str,
        attributes: Sequence[AttributeDef],
        indexes: Sequence[IndexDef],
    ) -> None:
        validate_collection(name, attributes, indexes)
        key = f"{self._collection_prefix(name)}{self.COLLECTION_FILE}"
        document = collection_document(name, attributes, indexes)

        try:
            await self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=json.dumps(document).encode("utf-8"),
                ContentType="application/json",
            )
        except ClientError as e:
            raise ProvisioningError(
                f"Failed to create collection '{name}': {e}",
                collection_id=name,
                original_error=e,
            )
        logger.info(f"Created collection {name} under {self.database}/{self.namespace}")

    async def update_document(
        self, collection_id: str, record_id: str, record: Record
    ) -> Record:
        key = self._record_key(collection_id, record_id)

        if record.id != record_id or record.collection_id != collection_id:
            raise StoreOperationError(
                f"Record identity mismatch: {record.collection_id}/{record.id}",
                operation="update_document",
                key=key,
            )
        if not await self._object_exists(key):
            raise StoreOperationError(
                "Record not found",
                operation="update_document",
                key=key,
            )
        if self.authorization:
            existing = await self._load(key)
            if not is_permitted(existing, "write", self.roles):
                raise StoreOperationError(
                    "Missing write permission",
                    operation="update_document",
                    key=key,
                )

        try:
            await self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=json.dumps(record.to_dict()).encode("utf-8"),
                ContentType="application/json",
            )
        except ClientError as e:
            raise StoreOperationError(
                f"Failed to update record: {e}",
                operation="put_object",
                key=key,
                original_error=e,
            )
        return record

    async def insert(self, record: Record) -> Record:
        """Write a new record, overwriting any previous version."""
        key = self._record_key(record.collection_id, record.id)
        await self.s3_client.put_object(
            Bucket=self.bucket_name,
            Key=key,
            Body=json.dumps(record.to_dict()).encode("utf-8"),
            ContentType="application/json",
        )
        return record
