"""Custom exceptions for tenantshift.

This module provides a hierarchy of exceptions with helpful error messages
so that a failed migration run is easy to diagnose.
"""


class TenantShiftError(Exception):
    """Base exception for all tenantshift errors.

    All tenantshift exceptions inherit from this class, making it easy
    to catch all engine-specific errors.
    """

    def __init__(self, message: str, hint: str | None = None):
        """Initialize the exception.

        Args:
            message: The error message
            hint: Optional hint for resolving the error
        """
        self.message = message
        self.hint = hint
        super().__init__(message)

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message}\nHint: {self.hint}"
        return self.message


class StoreConnectionError(TenantShiftError):
    """Raised when the backing store cannot be reached."""

    def __init__(
        self,
        message: str | None = None,
        original_error: Exception | None = None,
        endpoint: str | None = None,
    ):
        """Initialize the connection error.

        Args:
            message: Custom error message (optional)
            original_error: The original exception that caused this error
            endpoint: The endpoint URL being connected to
        """
        self.original_error = original_error
        self.endpoint = endpoint

        if message:
            final_message = message
            hint = None
        elif original_error:
            final_message = f"Store connection error: {original_error}"
            hint = "Check your AWS credentials and endpoint configuration."
        else:
            final_message = "Failed to connect to the data store"
            hint = "Check your AWS credentials and network connection."

        super().__init__(final_message, hint)


class StoreOperationError(TenantShiftError):
    """Raised when a data store operation fails."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        key: str | None = None,
        original_error: Exception | None = None,
    ):
        """Initialize the operation error.

        Args:
            message: The error message
            operation: The store operation that failed (e.g., 'update_document')
            key: The record or object key involved in the operation
            original_error: The original exception
        """
        self.operation = operation
        self.key = key
        self.original_error = original_error

        hint = None
        if "not found" in message.lower():
            hint = f"The record at '{key}' does not exist."
        elif "permission" in message.lower():
            hint = "Build migration store handles with authorization disabled."

        super().__init__(message, hint)


class ProvisioningError(TenantShiftError):
    """Raised when a collection cannot be created from its descriptor."""

    def __init__(
        self,
        message: str,
        collection_id: str | None = None,
        original_error: Exception | None = None,
    ):
        """Initialize the provisioning error.

        Args:
            message: The error message
            collection_id: The collection being provisioned
            original_error: The original exception
        """
        self.collection_id = collection_id
        self.original_error = original_error

        hint = None
        if "unknown collection" in message.lower():
            hint = "Add the collection to the registry file before provisioning it."
        elif "attribute" in message.lower() or "index" in message.lower():
            hint = f"Check the attribute and index definitions of '{collection_id}'."

        super().__init__(message, hint)


class PersistError(TenantShiftError):
    """Raised when a transformed record cannot be written back.

    The pipeline catches and logs this at the record boundary; it never
    aborts the page or the collection walk.
    """

    def __init__(
        self,
        message: str,
        collection_id: str | None = None,
        record_id: str | None = None,
        original_error: Exception | None = None,
    ):
        """Initialize the persist error.

        Args:
            message: The error message
            collection_id: Collection of the failed record
            record_id: ID of the failed record
            original_error: The original exception
        """
        self.collection_id = collection_id
        self.record_id = record_id
        self.original_error = original_error
        super().__init__(message)


class MigrationError(TenantShiftError):
    """Raised when a migration strategy is misused or cannot be resolved."""

    def __init__(self, message: str, version: str | None = None):
        """Initialize the migration error.

        Args:
            message: The error message
            version: The version involved, if any
        """
        self.version = version

        hint = None
        if "not bound" in message.lower():
            hint = "Call bind() with a TenantContext before execute()."
        elif version:
            hint = "Run `tenantshift versions` to list supported versions."

        super().__init__(message, hint)


class ConfigurationError(TenantShiftError):
    """Raised when tenantshift configuration is invalid."""

    def __init__(
        self,
        message: str | None = None,
        missing_fields: list[str] | None = None,
    ):
        """Initialize the configuration error.

        Args:
            message: Custom error message
            missing_fields: List of missing configuration fields
        """
        self.missing_fields = missing_fields or []

        if missing_fields:
            fields_str = ", ".join(missing_fields)
            message = f"Missing required configuration: {fields_str}"
            hint = "Set these as environment variables or in your .env file."
        else:
            hint = "Check your tenantshift configuration."

        super().__init__(message or "Invalid tenantshift configuration", hint)
