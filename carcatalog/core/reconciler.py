"""Visible car list, updated in place after each save/delete instead of refetching."""
import logging
import threading
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, List, Optional, Tuple

from carcatalog.core.errors import ContractViolation
from carcatalog.models.record import Record

logger = logging.getLogger(__name__)

INSERTED = "inserted"
CHANGED = "changed"
REMOVED = "removed"
RESET = "reset"


@dataclass(frozen=True)
class Change:
    """Single-item notification; RESET has no index."""
    kind: str
    index: Optional[int] = None


Listener = Callable[[Change], None]


class ListReconciler:
    """Ordered records, newest first, unique by non-empty id.

    Bound to the thread that created it: the presentation context that also
    reads the list for display.
    """

    def __init__(self, records: Iterable[Record] = ()) -> None:
        self._records: List[Record] = []
        self._listeners: List[Listener] = []
        self._owner = threading.get_ident()
        for record in records:
            if record.id and self.index_of(record.id) != -1:
                raise ContractViolation(f"duplicate record id {record.id}")
            self._records.append(record)

    def _check_thread(self) -> None:
        if threading.get_ident() != self._owner:
            raise RuntimeError("ListReconciler used outside its presentation thread")

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register listener; returns a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, change: Change) -> None:
        for listener in list(self._listeners):
            listener(change)

    @property
    def records(self) -> Tuple[Record, ...]:
        return tuple(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Record]:
        return iter(tuple(self._records))

    def __getitem__(self, index: int) -> Record:
        return self._records[index]

    def index_of(self, record_id: Optional[str]) -> int:
        """Position of the record with this id, or -1. Empty ids never match."""
        if not record_id:
            return -1
        for i, r in enumerate(self._records):
            if r.id == record_id:
                return i
        return -1

    def apply_insert(self, record: Record) -> None:
        self._check_thread()
        if record.id and self.index_of(record.id) != -1:
            raise ContractViolation(f"record {record.id} is already in the list")
        self._records.insert(0, record)
        self._emit(Change(INSERTED, 0))

    def apply_update(self, record: Record) -> bool:
        """Replace the record with the same id; False if it is not in the list."""
        self._check_thread()
        index = self.index_of(record.id)
        if index == -1:
            logger.debug("Update for %s not in list, ignored", record.id)
            return False
        self._records[index] = record
        self._emit(Change(CHANGED, index))
        return True

    def apply_delete(self, record_id: str) -> bool:
        self._check_thread()
        index = self.index_of(record_id)
        if index == -1:
            return False
        del self._records[index]
        self._emit(Change(REMOVED, index))
        return True

    def replace_all(self, records: Iterable[Record]) -> None:
        """Take a full list from the backend, signalling as few changes as possible."""
        self._check_thread()
        new: List[Record] = []
        seen = set()
        for record in records:
            if record.id and record.id in seen:
                logger.warning("Backend listed record %s twice, keeping the first", record.id)
                continue
            seen.add(record.id)
            new.append(record)
        old = self._records
        self._records = new
        if len(old) != len(new):
            self._emit(Change(RESET))
            return
        for i, (before, after) in enumerate(zip(old, new)):
            if before != after:
                self._emit(Change(CHANGED, i))
