"""Save/delete/refresh as background work; list updates handed back to the presentation thread."""
import logging
import queue
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Callable, Optional

from carcatalog.config import MUTATION_WORKERS
from carcatalog.core.asset_cache import AssetCache
from carcatalog.core.errors import ContractViolation, UploadError
from carcatalog.core.reconciler import ListReconciler
from carcatalog.core.record_client import RecordClient
from carcatalog.core.result import Error, ResourceResult
from carcatalog.models.record import Record

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("name", "year", "licence")

Callback = Callable[[ResourceResult], None]


class PresentationQueue:
    """Thread-safe hand-off of callables to the thread that calls drain()."""

    def __init__(self) -> None:
        self._queue: "queue.Queue[Callable[[], None]]" = queue.Queue()

    def __call__(self, fn: Callable[[], None]) -> None:
        self._queue.put(fn)

    def drain(self, timeout: Optional[float] = None) -> int:
        """Run everything pending. With a timeout, first wait that long for one item."""
        ran = 0
        if timeout is not None:
            try:
                fn = self._queue.get(timeout=timeout)
            except queue.Empty:
                return 0
            fn()
            ran += 1
        while True:
            try:
                fn = self._queue.get_nowait()
            except queue.Empty:
                return ran
            fn()
            ran += 1


def missing_fields(record: Record) -> list:
    return [name for name in REQUIRED_FIELDS if not getattr(record, name).strip()]


class CatalogService:
    """One background unit of work per save/delete/refresh; mutations are not serialized."""

    def __init__(
        self,
        client: RecordClient,
        assets: AssetCache,
        reconciler: ListReconciler,
        executor: Optional[Executor] = None,
        post: Optional[Callable[[Callable[[], None]], None]] = None,
    ) -> None:
        self._client = client
        self._assets = assets
        self._reconciler = reconciler
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=MUTATION_WORKERS, thread_name_prefix="catalog-mutation"
        )
        self._post = post or PresentationQueue()

    @property
    def post(self) -> Callable[[Callable[[], None]], None]:
        return self._post

    def close(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=True)

    def __enter__(self) -> "CatalogService":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def save(
        self,
        record: Record,
        photo_ref: Optional[str] = None,
        previous: Optional[Record] = None,
        on_done: Optional[Callback] = None,
    ) -> "Future[ResourceResult]":
        """Create (no id yet) or update the record, uploading photo_ref if it is new.

        previous is the record as it was before editing; its photo is deleted
        once a new one has been uploaded.
        """
        missing = missing_fields(record)
        if missing:
            raise ContractViolation(f"fill in all fields: {', '.join(missing)}")
        candidate = photo_ref or ""
        superseded = previous.photo_ref if (photo_ref and previous) else ""
        return self._executor.submit(self._save, record, candidate, superseded, on_done)

    def _save(self, record: Record, candidate: str, superseded: str, on_done: Optional[Callback]) -> ResourceResult:
        try:
            url = self._assets.resolve(candidate, superseded) if candidate else record.photo_ref
        except UploadError as e:
            logger.warning("Save of %s aborted: %s", record.name, e)
            result = Error(str(e))
            self._deliver(None, result, on_done)
            return result

        resolved = record.replace(photo_ref=url)
        if record.is_persisted:
            result = self._client.update(record.id, resolved)
        else:
            result = self._client.create(resolved)

        apply = None
        if result.ok:
            saved = result.value
            if record.is_persisted:
                apply = lambda: self._reconciler.apply_update(saved)
            else:
                apply = lambda: self._show_created(saved)
        self._deliver(apply, result, on_done)
        return result

    def _show_created(self, record: Record) -> None:
        # a refresh may already have brought it in
        if self._reconciler.index_of(record.id) != -1:
            self._reconciler.apply_update(record)
        else:
            self._reconciler.apply_insert(record)

    def delete(self, record: Record, on_done: Optional[Callback] = None) -> "Future[ResourceResult]":
        """Delete the record, then its photo (best-effort)."""
        if not record.is_persisted:
            raise ContractViolation("cannot delete a record that was never saved")
        return self._executor.submit(self._delete, record, on_done)

    def _delete(self, record: Record, on_done: Optional[Callback]) -> ResourceResult:
        result = self._client.delete(record.id)
        apply = None
        if result.ok:
            self._assets.discard(record.photo_ref)
            apply = lambda: self._reconciler.apply_delete(record.id)
        self._deliver(apply, result, on_done)
        return result

    def refresh(self, on_done: Optional[Callback] = None) -> "Future[ResourceResult]":
        """Full list fetch, reconciled into the visible list."""
        return self._executor.submit(self._refresh, on_done)

    def _refresh(self, on_done: Optional[Callback]) -> ResourceResult:
        result = self._client.list()
        apply = None
        if result.ok:
            records = result.value
            apply = lambda: self._reconciler.replace_all(records)
        self._deliver(apply, result, on_done)
        return result

    def _deliver(
        self,
        apply: Optional[Callable[[], None]],
        result: ResourceResult,
        on_done: Optional[Callback],
    ) -> None:
        if apply is None and on_done is None:
            return

        def run() -> None:
            if apply is not None:
                apply()
            if on_done is not None:
                on_done(result)

        self._post(run)
