"""Shared fixtures: in-memory blob store, temp upload cache, dev backend client."""
from __future__ import annotations

import threading
from typing import List, Optional

import pytest
from fastapi.testclient import TestClient

from carcatalog.api.app import create_app
from carcatalog.api.car_store import CarStore
from carcatalog.api.state import AppState, get_state
from carcatalog.core.asset_cache import AssetCache
from carcatalog.core.blob_store import BlobStore, StoreUrlRecognizer
from carcatalog.core.errors import StorageError
from carcatalog.core.record_client import RecordClient
from carcatalog.core.upload_cache import UploadCacheStore
from carcatalog.models.record import Location, Record

STORE_PREFIX = "mem://photos/"


class MemoryBlobStore(BlobStore):
    """Blob store double: keeps objects in a dict, can be told to fail."""

    recognizer = StoreUrlRecognizer().extend(STORE_PREFIX)

    def __init__(self, barrier: Optional[threading.Barrier] = None) -> None:
        self.objects: dict = {}
        self.put_calls: List[str] = []
        self.deleted: List[str] = []
        self.fail_put = False
        self.fail_delete = False
        self._barrier = barrier
        self._lock = threading.Lock()

    def put(self, data: bytes, name: str) -> str:
        if self._barrier is not None:
            self._barrier.wait()
        if self.fail_put:
            raise StorageError("bucket unavailable")
        url = f"{STORE_PREFIX}{name}"
        with self._lock:
            self.put_calls.append(name)
            self.objects[url] = data
        return url

    def delete(self, url: str) -> None:
        if self.fail_delete:
            raise StorageError("permission denied")
        with self._lock:
            self.deleted.append(url)
            self.objects.pop(url, None)


@pytest.fixture
def blob_store() -> MemoryBlobStore:
    return MemoryBlobStore()


@pytest.fixture
def cache_store(tmp_path) -> UploadCacheStore:
    return UploadCacheStore(tmp_path / "image_uploads.json")


@pytest.fixture
def assets(blob_store, cache_store) -> AssetCache:
    return AssetCache(blob_store, cache_store, lock_per_hash=False)


@pytest.fixture
def photo(tmp_path):
    path = tmp_path / "IMG_0001.jpg"
    path.write_bytes(b"\xff\xd8\xff\xe0fake-jpeg-bytes")
    return path


@pytest.fixture
def backend() -> TestClient:
    """Dev catalog backend with a memory-only store."""
    app = create_app()
    state = AppState(CarStore(path=None))
    app.dependency_overrides[get_state] = lambda: state
    return TestClient(app)


@pytest.fixture
def client(backend) -> RecordClient:
    return RecordClient(backend)


def make_record(record_id=None, name="Fusca", photo_ref="", **overrides) -> Record:
    fields = dict(
        id=record_id,
        name=name,
        year="1972",
        licence="ABC-1234",
        photo_ref=photo_ref,
        location=Location(lat=-23.55, lng=-46.63),
    )
    fields.update(overrides)
    return Record(**fields)
