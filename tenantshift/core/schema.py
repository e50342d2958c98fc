"""Collection-schema registry for tenantshift.

The registry maps collection ids to declarative collection descriptors.
Three descriptors are always present and are merged ahead of whatever the
configured registry provides.
"""

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from tenantshift.core.exceptions import ConfigurationError
from tenantshift.core.models import METADATA, CollectionDescriptor

logger = logging.getLogger(__name__)

BUILTIN_COLLECTIONS: dict[str, dict[str, Any]] = {
    "_metadata": {"$id": "_metadata", "$collection": METADATA},
    "audit": {"$id": "audit", "$collection": METADATA},
    "abuse": {"$id": "abuse", "$collection": METADATA},
}


def load_registry(file_path: Path | str) -> dict[str, dict[str, Any]]:
    """Load a collection-schema registry from a JSON file.

    The file holds either a mapping of collection id to descriptor, or a
    list of descriptors each carrying its own ``$id``.

    Args:
        file_path: Path to the JSON file

    Returns:
        Mapping of collection id to raw descriptor, in file order

    Raises:
        ConfigurationError: If the file is missing or malformed
    """
    path = Path(file_path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ConfigurationError(f"Collections file not found: {path}")
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Collections file {path} is not valid JSON: {e}")

    if isinstance(data, list):
        registry = {}
        for entry in data:
            if not isinstance(entry, dict) or "$id" not in entry:
                raise ConfigurationError(
                    f"Every collection in {path} needs a '$id' key"
                )
            registry[entry["$id"]] = entry
        return registry
    if isinstance(data, dict):
        return data
    raise ConfigurationError(f"Collections file {path} must hold an object or a list")


def merge_collections(
    registry: Mapping[str, Any] | None = None,
) -> dict[str, CollectionDescriptor]:
    """Merge the built-in descriptors with a registry.

    Built-ins come first. A registry entry with the same id replaces the
    built-in's content but keeps its position.

    Args:
        registry: Mapping of collection id to raw descriptor or
            CollectionDescriptor

    Returns:
        Ordered mapping of collection id to CollectionDescriptor

    Raises:
        ConfigurationError: If a descriptor fails validation
    """
    merged: dict[str, Any] = dict(BUILTIN_COLLECTIONS)
    merged.update(registry or {})

    collections = {}
    for key, value in merged.items():
        if isinstance(value, CollectionDescriptor):
            collections[key] = value
            continue
        try:
            collections[key] = CollectionDescriptor.model_validate(value)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid descriptor for collection '{key}': {e}")

    logger.debug(f"Loaded {len(collections)} collection descriptors")
    return collections
