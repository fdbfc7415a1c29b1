"""Source domain exceptions."""

from src.core.domain.exceptions import DomainException, EntityNotFoundError


class SourceNotFoundError(EntityNotFoundError):
    """Raised when source is not found."""

    def __init__(self, name: str | None = None):
        super().__init__("DataSource", name)


class InactiveSourceError(SourceNotFoundError):
    """Raised when a source exists but is switched off."""

    error_code = "SOURCE_INACTIVE"

    def __init__(self, name: str):
        DomainException.__init__(self, f"DataSource '{name}' is not active")


class InvalidSourceConfigError(DomainException):
    """Raised when source configuration is invalid."""

    error_code = "INVALID_SOURCE_CONFIG"

    def __init__(self, message: str):
        super().__init__(f"Invalid source configuration: {message}")


class UnsupportedSourceError(DomainException):
    """Raised when no connector or normalizer is registered for a source."""

    error_code = "UNSUPPORTED_SOURCE"

    def __init__(self, source_name: str):
        super().__init__(f"No handler registered for source '{source_name}'")


class ConnectivityError(DomainException):
    """Source or repository unreachable before a run starts. No job is created."""

    error_code = "CONNECTIVITY_ERROR"


class SourceFetchError(DomainException):
    """Batch retrieval failed mid-run. The job is marked failed before this propagates."""

    error_code = "SOURCE_FETCH_ERROR"


class ItemProcessingError(DomainException):
    """A single item failed to normalize, classify or persist."""

    error_code = "ITEM_PROCESSING_ERROR"

    def __init__(self, external_id: str, message: str):
        self.external_id = external_id
        super().__init__(f"Item '{external_id}' failed: {message}")
