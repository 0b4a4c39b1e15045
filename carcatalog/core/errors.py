"""Error taxonomy for the catalog client."""
from typing import Optional


class CatalogError(Exception):
    """Base for failures at the network or storage boundary."""


class TransportError(CatalogError):
    """Connectivity failure: the request never got a response."""


class RemoteError(CatalogError):
    """Non-success response from the catalog API."""

    def __init__(self, status: int, message: Optional[str] = None) -> None:
        self.status = status
        super().__init__(message or f"HTTP {status}")


class StorageError(CatalogError):
    """Blob store put/delete failure."""


class UploadError(StorageError):
    """The upload transfer inside AssetCache.resolve failed."""


class ContractViolation(ValueError):
    """Caller broke a precondition (empty id, duplicate insert, empty reference)."""
