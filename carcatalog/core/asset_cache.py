"""Content-addressed photo uploads: upload each distinct image once, drop superseded blobs.

resolve() turns whatever the edit screen holds as the record's photo (a local
file the user picked, or the URL the record already had) into the URL to save
on the record:

1. a URL already in the blob store, or any other http(s) URL, is returned as is;
2. otherwise the file is hashed and looked up in the upload cache;
3. on a miss the bytes are uploaded under a fresh name and the cache updated;
4. after an upload, the record's previous photo is deleted from the store.

Only the upload in step 3 can fail the call (UploadError). Hashing, cache
reads and writes, and the cleanup delete degrade to logged warnings, reported
back through Resolution for callers that want to look.
"""
import hashlib
import logging
import os
import threading
import uuid
from contextlib import contextmanager, nullcontext
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple
from urllib.parse import unquote, urlparse

from carcatalog.config import IMAGE_SUFFIX, UPLOAD_LOCK_PER_HASH
from carcatalog.core.blob_store import BlobStore
from carcatalog.core.errors import ContractViolation, UploadError
from carcatalog.core.upload_cache import UploadCacheStore

logger = logging.getLogger(__name__)

DONE = "done"
SKIPPED = "skipped"
FAILED = "failed"

PASSTHROUGH = "passthrough"
CACHE = "cache"
UPLOAD = "upload"


@dataclass(frozen=True)
class BestEffort:
    """Outcome of a fire-and-forget step (cache write, old photo cleanup)."""
    status: str = SKIPPED
    message: str = ""

    @property
    def failed(self) -> bool:
        return self.status == FAILED


@dataclass(frozen=True)
class Resolution:
    url: str
    source: str  # passthrough | cache | upload
    content_hash: Optional[str] = None
    cache_write: BestEffort = field(default_factory=BestEffort)
    cleanup: BestEffort = field(default_factory=BestEffort)


REMOTE_SCHEMES = ("http://", "https://")


def is_remote_url(ref: str) -> bool:
    """http(s) URL served by someone else; never read from disk or uploaded."""
    return ref.lower().startswith(REMOTE_SCHEMES)


def local_path(ref: str) -> Path:
    """Filesystem path for a plain path or file:// URI."""
    if ref.startswith("file://"):
        return Path(unquote(urlparse(ref).path))
    return Path(ref)


class _HashLocks:
    """One lock per content hash, dropped when nobody holds or waits on it."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[str, List] = {}

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = [threading.Lock(), 0]
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]


class AssetCache:
    """Dedup layer in front of a BlobStore, keyed by content hash."""

    def __init__(
        self,
        blob_store: BlobStore,
        cache_store: UploadCacheStore,
        *,
        lock_per_hash: bool = UPLOAD_LOCK_PER_HASH,
        suffix: str = IMAGE_SUFFIX,
    ) -> None:
        self._store = blob_store
        self._cache = cache_store
        self._suffix = suffix
        self._hash_locks = _HashLocks() if lock_per_hash else None
        self._counter_lock = threading.Lock()
        self._uploads = 0

    @property
    def uploads(self) -> int:
        """Number of upload transfers attempted by this instance."""
        with self._counter_lock:
            return self._uploads

    def is_store_url(self, value: Optional[str]) -> bool:
        return self._store.is_store_url(value)

    def resolve(self, candidate_ref: str, previous_remote_ref: str = "") -> str:
        return self.resolve_detailed(candidate_ref, previous_remote_ref).url

    def resolve_detailed(self, candidate_ref: str, previous_remote_ref: str = "") -> Resolution:
        if not candidate_ref:
            raise ContractViolation("resolve needs a photo reference")
        if self._store.is_store_url(candidate_ref) or is_remote_url(candidate_ref):
            return Resolution(url=candidate_ref, source=PASSTHROUGH)

        data, digest = self._read_and_hash(candidate_ref)
        guard = self._hash_locks.hold(digest) if self._hash_locks else nullcontext()
        with guard:
            cached = self._lookup(digest)
            if cached:
                logger.debug("Photo %s already uploaded as %s", candidate_ref, cached)
                return Resolution(url=cached, source=CACHE, content_hash=digest)
            url = self._upload(candidate_ref, data)
            cache_write = self._remember(digest, url)

        cleanup = BestEffort()
        if previous_remote_ref and previous_remote_ref != url:
            cleanup = self.discard(previous_remote_ref)
        return Resolution(
            url=url,
            source=UPLOAD,
            content_hash=digest,
            cache_write=cache_write,
            cleanup=cleanup,
        )

    def content_hash(self, candidate_ref: str) -> str:
        return self._read_and_hash(candidate_ref)[1]

    def _read_and_hash(self, candidate_ref: str) -> Tuple[Optional[bytes], str]:
        """SHA-256 of the bytes; '<ref>_<size>' when they cannot be read."""
        path = local_path(candidate_ref)
        try:
            data = path.read_bytes()
        except (OSError, ValueError) as e:
            try:
                size = os.stat(path).st_size
            except (OSError, ValueError):
                size = 0
            logger.warning("Cannot read %s for hashing (%s); falling back to name+size", candidate_ref, e)
            return None, f"{candidate_ref}_{size}"
        return data, hashlib.sha256(data).hexdigest()

    def _lookup(self, digest: str) -> Optional[str]:
        try:
            cached = self._cache.get(digest)
        except Exception as e:
            logger.warning("Upload cache lookup failed, treating as miss: %s", e)
            return None
        if cached and self._store.is_store_url(cached):
            return cached
        if cached:
            logger.info("Ignoring cached photo URL outside the store: %s", cached)
        return None

    def _upload(self, candidate_ref: str, data: Optional[bytes]) -> str:
        if data is None:
            raise UploadError(f"photo upload failed: cannot read {candidate_ref}")
        name = f"{uuid.uuid4()}{self._suffix}"
        with self._counter_lock:
            self._uploads += 1
        try:
            url = self._store.put(data, name)
        except Exception as e:
            raise UploadError(f"photo upload failed: {e}") from e
        logger.info("Uploaded %s (%d bytes) as %s", candidate_ref, len(data), url)
        return url

    def _remember(self, digest: str, url: str) -> BestEffort:
        try:
            self._cache.put(digest, url)
        except Exception as e:
            logger.warning("Could not record upload of %s in cache: %s", url, e)
            return BestEffort(FAILED, str(e))
        return BestEffort(DONE)

    def discard(self, url: str) -> BestEffort:
        """Delete a store URL; failures are logged and reported, never raised."""
        if not url or not self._store.is_store_url(url):
            return BestEffort()
        try:
            self._store.delete(url)
        except Exception as e:
            logger.warning("Could not delete old photo %s: %s", url, e)
            return BestEffort(FAILED, str(e))
        return BestEffort(DONE)

    def clear_cache(self) -> None:
        self._cache.clear()
        logger.info("Upload cache cleared")
