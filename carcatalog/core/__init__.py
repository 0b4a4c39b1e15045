"""Core services: catalog client, photo upload cache, list reconciler, mutations."""
from carcatalog.core.asset_cache import AssetCache
from carcatalog.core.blob_store import BlobStore, MinioBlobStore, StoreUrlRecognizer
from carcatalog.core.mutations import CatalogService, PresentationQueue
from carcatalog.core.reconciler import ListReconciler
from carcatalog.core.record_client import RecordClient
from carcatalog.core.result import Error, ResourceResult, Success
from carcatalog.core.upload_cache import UploadCacheStore

__all__ = [
    "AssetCache",
    "BlobStore",
    "MinioBlobStore",
    "StoreUrlRecognizer",
    "CatalogService",
    "PresentationQueue",
    "ListReconciler",
    "RecordClient",
    "Error",
    "ResourceResult",
    "Success",
    "UploadCacheStore",
]
