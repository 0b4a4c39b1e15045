"""Remote photo storage: URL recognizer and the MinIO-backed blob store."""
import io
import logging
from abc import ABC, abstractmethod
from typing import Iterable, Optional, Tuple
from urllib.parse import urlparse

from minio import Minio
from minio.error import MinioException
from urllib3.exceptions import HTTPError as TransferError

from carcatalog.config import (
    IMAGE_FOLDER,
    MINIO_ACCESS_KEY,
    MINIO_BUCKET,
    MINIO_ENDPOINT,
    MINIO_PUBLIC_URL,
    MINIO_SECRET_KEY,
    STORE_URL_PREFIXES,
)
from carcatalog.core.errors import StorageError

logger = logging.getLogger(__name__)

# Firebase Storage forms the catalog's existing photos were stored under
DEFAULT_PREFIXES: Tuple[str, ...] = ("https://firebasestorage.googleapis.com/", "gs://")
DEFAULT_MARKERS: Tuple[str, ...] = ("firebasestorage",)


class StoreUrlRecognizer:
    """Prefix/substring match for URLs that already live in the blob store."""

    def __init__(
        self,
        prefixes: Iterable[str] = DEFAULT_PREFIXES,
        markers: Iterable[str] = DEFAULT_MARKERS,
    ) -> None:
        self.prefixes = tuple(p for p in prefixes if p)
        self.markers = tuple(m for m in markers if m)

    def __call__(self, value: Optional[str]) -> bool:
        if not value:
            return False
        return value.startswith(self.prefixes) or any(m in value for m in self.markers)

    def extend(self, *prefixes: str) -> "StoreUrlRecognizer":
        return StoreUrlRecognizer(self.prefixes + tuple(prefixes), self.markers)


class BlobStore(ABC):
    """put/delete boundary of the object store. Implementations raise StorageError."""

    recognizer: StoreUrlRecognizer = StoreUrlRecognizer()

    @abstractmethod
    def put(self, data: bytes, name: str) -> str:
        """Store data under name; return its durable URL."""

    @abstractmethod
    def delete(self, url: str) -> None:
        """Remove the object behind url."""

    def is_store_url(self, value: Optional[str]) -> bool:
        return self.recognizer(value)


class MinioBlobStore(BlobStore):
    """Objects under <bucket>/<folder>/; public URL is <public_base_url>/<bucket>/<object>."""

    def __init__(
        self,
        client: Minio,
        bucket: str = MINIO_BUCKET,
        public_base_url: str = MINIO_PUBLIC_URL,
        folder: str = IMAGE_FOLDER,
        content_type: str = "image/jpeg",
    ) -> None:
        self._client = client
        self._bucket = bucket
        self._public_base = public_base_url.rstrip("/")
        self._folder = folder.strip("/")
        self._content_type = content_type
        self.recognizer = StoreUrlRecognizer().extend(
            f"{self._public_base}/{bucket}/",
            f"minio://{bucket}/",
            *STORE_URL_PREFIXES,
        )

    @classmethod
    def from_config(cls) -> "MinioBlobStore":
        endpoint = MINIO_ENDPOINT.replace("http://", "").replace("https://", "")
        secure = MINIO_ENDPOINT.startswith("https")
        client = Minio(
            endpoint,
            access_key=MINIO_ACCESS_KEY,
            secret_key=MINIO_SECRET_KEY,
            secure=secure,
        )
        if not client.bucket_exists(MINIO_BUCKET):
            client.make_bucket(MINIO_BUCKET)
        return cls(client)

    def _object_name(self, name: str) -> str:
        return f"{self._folder}/{name}" if self._folder else name

    def object_name_for(self, url: str) -> Optional[str]:
        """Object key for a public or minio:// URL of this bucket, or None."""
        for prefix in (f"{self._public_base}/{self._bucket}/", f"minio://{self._bucket}/"):
            if url.startswith(prefix):
                key = urlparse(url[len(prefix):]).path
                return key or None
        return None

    def put(self, data: bytes, name: str) -> str:
        object_name = self._object_name(name)
        try:
            self._client.put_object(
                self._bucket,
                object_name,
                data=io.BytesIO(data),
                length=len(data),
                content_type=self._content_type,
            )
        except (MinioException, TransferError, OSError) as e:
            raise StorageError(f"upload of {object_name} failed: {e}") from e
        logger.info("Stored photo bucket=%s object=%s", self._bucket, object_name)
        return f"{self._public_base}/{self._bucket}/{object_name}"

    def delete(self, url: str) -> None:
        object_name = self.object_name_for(url)
        if object_name is None:
            raise StorageError(f"not an object of bucket {self._bucket}: {url}")
        try:
            self._client.remove_object(self._bucket, object_name)
        except (MinioException, TransferError, OSError) as e:
            raise StorageError(f"delete of {object_name} failed: {e}") from e
        logger.info("Removed photo bucket=%s object=%s", self._bucket, object_name)
