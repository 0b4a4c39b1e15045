"""Data models for catalog records and their wire form."""
from carcatalog.models.record import Location, Record
from carcatalog.models.wire import CarPayload, PlacePayload

__all__ = [
    "Location",
    "Record",
    "CarPayload",
    "PlacePayload",
]
