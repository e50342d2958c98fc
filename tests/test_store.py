"""Tests for the S3 data store and store helpers."""

import pytest

from tenantshift.core.exceptions import ProvisioningError, StoreOperationError
from tenantshift.core.models import AttributeDef, IndexDef, Record
from tenantshift.core.store import DataStore, S3DataStore, is_permitted, validate_collection
from tenantshift.testing.mocks import InMemoryDataStore, InMemoryS3
from tenantshift.testing.utils import make_records

BUCKET = "test-bucket"


@pytest.fixture
def s3_store(mock_s3: InMemoryS3) -> S3DataStore:
    store = S3DataStore(mock_s3, BUCKET, base_path="test/", authorization=False)
    store.set_namespace("_tenant1")
    return store


async def seed(store: S3DataStore, records: list[Record]) -> None:
    for record in records:
        await store.insert(record)


class TestS3DataStore:
    """Tests for S3DataStore."""

    def test_satisfies_protocol(self, s3_store):
        """Test the S3 store implements the DataStore protocol."""
        assert isinstance(s3_store, DataStore)
        assert isinstance(InMemoryDataStore(), DataStore)

    @pytest.mark.asyncio
    async def test_layout(self, s3_store, mock_s3):
        """Test records land under database, namespace and collection."""
        await s3_store.insert(Record("u1", "users", {"name": "ada"}))

        data = mock_s3.get_bucket_data(BUCKET)

        assert data == {
            "test/appwrite/_tenant1/users/records/u1.json": {
                "$id": "u1", "$collection": "users", "name": "ada",
            }
        }

    @pytest.mark.asyncio
    async def test_count(self, s3_store):
        """Test counting records of a collection."""
        await seed(s3_store, make_records("users", 5, name="x"))
        await seed(s3_store, make_records("teams", 2, name="t"))

        assert await s3_store.count("users") == 5
        assert await s3_store.count("missing") == 0

    @pytest.mark.asyncio
    async def test_find_pages_with_cursor(self, s3_store):
        """Test keyset pagination walks every record once."""
        await seed(s3_store, make_records("users", 5, name="x"))

        first = await s3_store.find("users", limit=2)
        second = await s3_store.find("users", limit=2, cursor=first[-1])
        third = await s3_store.find("users", limit=2, cursor=second[-1])

        ids = [r.id for r in first + second + third]
        assert ids == [f"users-{i:04d}" for i in range(5)]
        assert len(third) == 1

    @pytest.mark.asyncio
    async def test_find_restores_nested_records(self, s3_store):
        """Test nested records round-trip as Record instances."""
        owner = Record("u1", "users", {"name": "ada"})
        await s3_store.insert(Record("t1", "teams", {"owner": owner, "members": [owner]}))

        [team] = await s3_store.find("teams", limit=10)

        assert isinstance(team["owner"], Record)
        assert isinstance(team["members"][0], Record)
        assert team["owner"]["name"] == "ada"

    @pytest.mark.asyncio
    async def test_namespaces_are_separate(self, s3_store, mock_s3):
        """Test another namespace does not see the tenant's records."""
        await seed(s3_store, make_records("users", 2, name="x"))
        other = S3DataStore(mock_s3, BUCKET, base_path="test/", authorization=False)
        other.set_namespace("_tenant2")

        assert await other.count("users") == 0

    @pytest.mark.asyncio
    async def test_update_document(self, s3_store):
        """Test updating an existing record."""
        await s3_store.insert(Record("u1", "users", {"name": "ada"}))

        await s3_store.update_document("users", "u1", Record("u1", "users", {"name": "ADA"}))

        [saved] = await s3_store.find("users", limit=1)
        assert saved["name"] == "ADA"

    @pytest.mark.asyncio
    async def test_update_missing_record(self, s3_store):
        """Test updating a record that does not exist fails."""
        with pytest.raises(StoreOperationError) as exc_info:
            await s3_store.update_document("users", "u1", Record("u1", "users", {}))

        assert exc_info.value.operation == "update_document"

    @pytest.mark.asyncio
    async def test_update_identity_mismatch(self, s3_store):
        """Test a record cannot be written under another identity."""
        await s3_store.insert(Record("u1", "users", {"name": "ada"}))

        with pytest.raises(StoreOperationError):
            await s3_store.update_document("users", "u1", Record("u2", "users", {}))

    @pytest.mark.asyncio
    async def test_create_collection_and_exists(self, s3_store, mock_s3):
        """Test provisioning writes a schema document."""
        assert not await s3_store.exists("appwrite", "buckets")

        await s3_store.create_collection(
            "buckets",
            [AttributeDef(id="name", type="string", size=128)],
            [IndexDef(id="_key_name", type="key", attributes=["name"])],
        )

        assert await s3_store.exists("appwrite", "buckets")
        assert not await s3_store.exists("other", "buckets")
        schema = mock_s3.get_bucket_data(BUCKET)[
            "test/appwrite/_tenant1/buckets/_collection.json"
        ]
        assert schema["attributes"][0]["$id"] == "name"
        assert schema["indexes"][0]["attributes"] == ["name"]

    @pytest.mark.asyncio
    async def test_schema_file_not_counted(self, s3_store):
        """Test the schema document is not mistaken for a record."""
        await s3_store.create_collection("users", [], [])
        await seed(s3_store, make_records("users", 1, name="x"))

        assert await s3_store.count("users") == 1


class TestAuthorization:
    """Tests for per-handle authorization scoping."""

    @pytest.mark.asyncio
    async def test_s3_store_hides_unreadable_records(self, mock_s3):
        """Test an authorized handle only sees permitted records."""
        admin = S3DataStore(mock_s3, BUCKET, authorization=False)
        admin.set_namespace("_tenant1")
        await admin.insert(Record("a", "users", {"$read": ["role:all"], "$write": []}))
        await admin.insert(Record("b", "users", {"$read": ["user:1"], "$write": []}))
        await admin.insert(Record("c", "users", {"$read": [], "$write": []}))

        guest = S3DataStore(mock_s3, BUCKET, authorization=True, roles=["user:2"])
        guest.set_namespace("_tenant1")

        assert await admin.count("users") == 3
        assert await guest.count("users") == 1
        assert [r.id for r in await guest.find("users", limit=10)] == ["a"]

    @pytest.mark.asyncio
    async def test_s3_store_requires_write_permission(self, mock_s3):
        """Test an authorized handle cannot overwrite without $write."""
        store = S3DataStore(mock_s3, BUCKET, authorization=True, roles=["user:1"])
        store.set_namespace("_tenant1")
        await store.insert(Record("a", "users", {"$read": ["user:1"], "$write": []}))

        with pytest.raises(StoreOperationError) as exc_info:
            await store.update_document("users", "a", Record("a", "users", {"x": 1}))

        assert "permission" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_in_memory_store_matches(self):
        """Test the in-memory store applies the same rules."""
        store = InMemoryDataStore(authorization=True, roles=["user:1"])
        store.seed("users", [
            {"$id": "a", "$read": ["user:1"], "$write": ["user:1"]},
            {"$id": "b", "$read": ["user:9"], "$write": []},
        ])

        assert await store.count("users") == 1
        store.authorization = False
        assert await store.count("users") == 2


class TestHelpers:
    """Tests for store helper functions."""

    def test_is_permitted(self):
        """Test permission checks by role."""
        record = Record("a", "users", {"$read": ["user:1"], "$write": ["role:all"]})

        assert is_permitted(record, "read", ["user:1"])
        assert not is_permitted(record, "read", ["user:2"])
        assert is_permitted(record, "write", [])
        assert not is_permitted(Record("b", "users", {}), "read", ["user:1"])

    def test_validate_duplicate_attribute(self):
        """Test duplicate attribute ids are rejected."""
        attributes = [AttributeDef(id="a", type="string"), AttributeDef(id="a", type="string")]

        with pytest.raises(ProvisioningError):
            validate_collection("c", attributes, [])

    def test_validate_unknown_index_attribute(self):
        """Test indexes must reference declared attributes."""
        with pytest.raises(ProvisioningError):
            validate_collection("c", [], [IndexDef(id="i", type="key", attributes=["x"])])

    def test_validate_internal_index_attribute(self):
        """Test internal attributes such as $id may be indexed."""
        validate_collection("c", [], [IndexDef(id="i", type="key", attributes=["$id"])])

    def test_validate_too_many_lengths(self):
        """Test an index cannot have more lengths than attributes."""
        attributes = [AttributeDef(id="a", type="string")]
        index = IndexDef(id="i", type="key", attributes=["a"], lengths=[1, 2])

        with pytest.raises(ProvisioningError):
            validate_collection("c", attributes, [index])

    def test_validate_empty_name(self):
        """Test a collection needs a name."""
        with pytest.raises(ProvisioningError):
            validate_collection("", [], [])
