"""Shared backend state (injected into routes)."""
from carcatalog.api.car_store import CarStore


class AppState:
    def __init__(self, store: CarStore | None = None) -> None:
        self._store = store

    @property
    def cars(self) -> CarStore:
        if self._store is None:
            self._store = CarStore()
        return self._store


_state = AppState()


def get_state() -> AppState:
    return _state
