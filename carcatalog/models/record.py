"""Catalog record and its map location."""
from dataclasses import dataclass, field, replace
from typing import Optional


@dataclass(frozen=True)
class Location:
    """Point picked on the map."""
    lat: float = 0.0
    lng: float = 0.0


@dataclass(frozen=True)
class Record:
    """One car in the catalog. Immutable: mutations go through replace()."""
    id: Optional[str]
    name: str
    year: str
    licence: str
    photo_ref: str = ""  # local file path/URI or remote store URL
    location: Location = field(default_factory=Location)

    @property
    def is_persisted(self) -> bool:
        """True once the backend has assigned an id."""
        return bool(self.id)

    def replace(self, **changes) -> "Record":
        return replace(self, **changes)
