"""Data model for tenantshift: records, collection descriptors and tenants."""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from tenantshift.core.exceptions import MigrationError

if TYPE_CHECKING:
    from tenantshift.core.store import DataStore

# Kind of a collection whose schema is tracked by the metadata store.
METADATA = "_metadata"


def _serialize(value: Any) -> Any:
    if isinstance(value, Record):
        return value.to_dict()
    if isinstance(value, dict):
        return {k: _serialize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_serialize(v) for v in value]
    return value


def _deserialize(value: Any) -> Any:
    if isinstance(value, dict):
        if "$id" in value and "$collection" in value:
            return Record.from_dict(value)
        return {k: _deserialize(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_deserialize(v) for v in value]
    return value


@dataclass
class Record:
    """A single addressable unit of data within a collection.

    Attribute values may be scalars, nested records, or lists whose
    elements may themselves be records. ``(collection_id, id)`` is the
    record's identity and must never change during a migration.

    Attributes:
        id: Record ID, unique within its collection
        collection_id: ID of the owning collection
        attributes: Attribute name to value mapping
    """

    id: str
    collection_id: str
    attributes: dict[str, Any] = field(default_factory=dict)

    def __getitem__(self, key: str) -> Any:
        return self.attributes[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self.attributes[key] = value

    def __contains__(self, key: object) -> bool:
        return key in self.attributes

    def get(self, key: str, default: Any = None) -> Any:
        return self.attributes.get(key, default)

    def attribute_tree(self) -> dict[str, Any]:
        """Return a detached, plain-mapping copy of the attributes.

        Nested records are expanded into mappings carrying their
        ``$id`` and ``$collection`` keys.
        """
        return _serialize(self.attributes)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "$id": self.id,
            "$collection": self.collection_id,
            **self.attribute_tree(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Record":
        """Create from dictionary."""
        attributes = {
            k: _deserialize(v)
            for k, v in data.items()
            if k not in ("$id", "$collection")
        }
        return cls(
            id=data.get("$id", ""),
            collection_id=data.get("$collection", ""),
            attributes=attributes,
        )


class AttributeDef(BaseModel):
    """Definition of one attribute of a collection."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(alias="$id")
    type: str
    size: int = 0
    required: bool = False
    signed: bool = True
    array: bool = False
    filters: list[str] = Field(default_factory=list)


class IndexDef(BaseModel):
    """Definition of one index of a collection."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(alias="$id")
    type: str
    attributes: list[str] = Field(default_factory=list)
    lengths: list[int] = Field(default_factory=list)
    orders: list[str] = Field(default_factory=list)


class CollectionDescriptor(BaseModel):
    """Declarative schema of a collection as held by the schema registry.

    Registry entries use ``$id`` and ``$collection`` keys; ``$collection``
    is the collection's kind.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(alias="$id")
    kind: str = Field(alias="$collection")
    name: str | None = None
    attributes: list[AttributeDef] = Field(default_factory=list)
    indexes: list[IndexDef] = Field(default_factory=list)

    @property
    def is_metadata_governed(self) -> bool:
        return self.kind == METADATA


@dataclass(frozen=True)
class TenantContext:
    """The tenant a migration run is bound to.

    Attributes:
        tenant_id: ID of the tenant (project) being migrated
        tenant_store: Store handle scoped to the tenant's namespace
        shared_store: Store handle for global data shared by all tenants
    """

    tenant_id: str
    tenant_store: "DataStore"
    shared_store: "DataStore"

    def __post_init__(self):
        if not self.tenant_id:
            raise MigrationError("Tenant context requires a tenant id")

    @property
    def namespace(self) -> str:
        return f"_{self.tenant_id}"
