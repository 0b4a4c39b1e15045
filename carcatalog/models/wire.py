"""Wire schema of the remote catalog API ({id, imageUrl, year, name, licence, place})."""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from carcatalog.models.record import Location, Record


class PlacePayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    lat: float = 0.0
    long: float = 0.0


class CarPayload(BaseModel):
    """A car as the backend sends and receives it."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: Optional[str] = None
    image_url: str = Field(default="", alias="imageUrl")
    year: str = ""
    name: str = ""
    licence: str = ""
    place: PlacePayload = Field(default_factory=PlacePayload)

    @classmethod
    def from_record(cls, record: Record) -> "CarPayload":
        return cls(
            id=record.id or None,
            image_url=record.photo_ref,
            year=record.year,
            name=record.name,
            licence=record.licence,
            place=PlacePayload(lat=record.location.lat, long=record.location.lng),
        )

    def to_record(self) -> Record:
        return Record(
            id=self.id or None,
            name=self.name,
            year=self.year,
            licence=self.licence,
            photo_ref=self.image_url,
            location=Location(lat=self.place.lat, lng=self.place.long),
        )

    def to_wire(self) -> dict:
        """JSON-ready dict using the backend's field names."""
        return self.model_dump(by_alias=True, mode="json")
