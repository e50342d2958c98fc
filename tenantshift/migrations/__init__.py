"""Migration engine for tenantshift.

A migration walks every record of a tenant's metadata-governed
collections page by page, applies a transform, and writes back only the
records the transform actually changed.
"""

from tenantshift.migrations.base import Migration
from tenantshift.migrations.diff import diff, differs
from tenantshift.migrations.pipeline import RecordOutcome, RecordPipeline
from tenantshift.migrations.provisioning import SchemaProvisioner
from tenantshift.migrations.registry import get_strategy, load_strategies
from tenantshift.migrations.walker import CollectionWalker

__all__ = [
    "Migration",
    "CollectionWalker",
    "RecordPipeline",
    "RecordOutcome",
    "SchemaProvisioner",
    "diff",
    "differs",
    "get_strategy",
    "load_strategies",
]
