"""Persist and load the development backend's cars (JSON)."""
import json
import logging
import threading
import uuid
from pathlib import Path
from typing import Dict, List, Optional

from carcatalog.config import BACKEND_STORE_PATH
from carcatalog.models.wire import CarPayload

logger = logging.getLogger(__name__)


class CarStore:
    """Cars keyed by id, kept in insertion order and written through to disk."""

    def __init__(self, path: Optional[Path] = BACKEND_STORE_PATH) -> None:
        self._path = Path(path) if path is not None else None
        self._lock = threading.Lock()
        self._cars: Dict[str, CarPayload] = self._load()

    def _load(self) -> Dict[str, CarPayload]:
        if self._path is None or not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text())
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Car store %s unreadable, starting empty: %s", self._path, e)
            return {}
        out = {}
        for item in data.get("cars", []):
            try:
                car = CarPayload.model_validate(item)
            except ValueError:
                continue
            if car.id:
                out[car.id] = car
        return out

    def _save(self) -> None:
        if self._path is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        data = {"cars": [c.to_wire() for c in self._cars.values()]}
        self._path.write_text(json.dumps(data, indent=2))

    def list(self) -> List[CarPayload]:
        with self._lock:
            return list(self._cars.values())

    def get(self, car_id: str) -> Optional[CarPayload]:
        with self._lock:
            return self._cars.get(car_id)

    def add(self, car: CarPayload) -> CarPayload:
        """Store a new car under a server-assigned id."""
        with self._lock:
            created = car.model_copy(update={"id": str(uuid.uuid4())})
            self._cars[created.id] = created
            self._save()
            return created

    def update(self, car_id: str, changes: dict) -> Optional[CarPayload]:
        with self._lock:
            existing = self._cars.get(car_id)
            if existing is None:
                return None
            merged = existing.model_dump(by_alias=True)
            merged.update(changes)
            merged["id"] = car_id
            updated = CarPayload.model_validate(merged)
            self._cars[car_id] = updated
            self._save()
            return updated

    def delete(self, car_id: str) -> bool:
        with self._lock:
            if self._cars.pop(car_id, None) is None:
                return False
            self._save()
            return True
