from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from minio.error import MinioException

from carcatalog.core.blob_store import MinioBlobStore, StoreUrlRecognizer
from carcatalog.core.errors import StorageError


@pytest.fixture
def minio_client():
    return MagicMock()


@pytest.fixture
def store(minio_client):
    return MinioBlobStore(minio_client, bucket="cars", public_base_url="https://cdn.example.com/")


def minio_error():
    return MinioException("AccessDenied")


@pytest.mark.parametrize(
    "value",
    [
        "https://firebasestorage.googleapis.com/v0/b/app/o/a.jpg",
        "gs://app.appspot.com/car_images/a.jpg",
        "https://mirror.example.com/firebasestorage/a.jpg",
    ],
)
def test_default_recognizer_accepts_firebase_forms(value):
    assert StoreUrlRecognizer()(value)


@pytest.mark.parametrize("value", ["", None, "/storage/emulated/0/DCIM/a.jpg", "content://media/1", "https://example.com/a.jpg"])
def test_default_recognizer_rejects_local_and_foreign(value):
    assert not StoreUrlRecognizer()(value)


def test_store_recognizes_its_public_and_short_urls(store):
    assert store.is_store_url("https://cdn.example.com/cars/car_images/a.jpg")
    assert store.is_store_url("minio://cars/car_images/a.jpg")
    assert not store.is_store_url("https://cdn.example.com/other-bucket/a.jpg")


def test_put_uploads_under_folder(store, minio_client):
    url = store.put(b"jpeg", "a.jpg")
    assert url == "https://cdn.example.com/cars/car_images/a.jpg"
    args, kwargs = minio_client.put_object.call_args
    assert args == ("cars", "car_images/a.jpg")
    assert kwargs["length"] == 4
    assert kwargs["content_type"] == "image/jpeg"


def test_put_failure_becomes_storage_error(store, minio_client):
    minio_client.put_object.side_effect = minio_error()
    with pytest.raises(StorageError):
        store.put(b"jpeg", "a.jpg")


def test_delete_maps_url_to_object(store, minio_client):
    store.delete("https://cdn.example.com/cars/car_images/a.jpg")
    store.delete("minio://cars/car_images/b.jpg")
    assert [c.args for c in minio_client.remove_object.call_args_list] == [
        ("cars", "car_images/a.jpg"),
        ("cars", "car_images/b.jpg"),
    ]


def test_delete_of_foreign_url_fails(store, minio_client):
    with pytest.raises(StorageError):
        store.delete("https://firebasestorage.googleapis.com/v0/b/app/o/a.jpg")
    minio_client.remove_object.assert_not_called()


def test_delete_failure_becomes_storage_error(store, minio_client):
    minio_client.remove_object.side_effect = minio_error()
    with pytest.raises(StorageError):
        store.delete("minio://cars/car_images/a.jpg")


def test_blob_store_is_abstract():
    from carcatalog.core.blob_store import BlobStore

    with pytest.raises(TypeError):
        BlobStore()
