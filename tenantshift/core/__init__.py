"""Core data model, configuration and storage for tenantshift."""
