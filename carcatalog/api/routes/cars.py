"""Car CRUD for local development: the five operations the client calls."""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, ConfigDict, Field

from carcatalog.api.state import AppState, get_state
from carcatalog.models.wire import CarPayload, PlacePayload

router = APIRouter()


class UpdateCarBody(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    year: Optional[str] = None
    name: Optional[str] = None
    licence: Optional[str] = None
    place: Optional[PlacePayload] = None


@router.get("")
def list_cars(state: AppState = Depends(get_state)):
    """List all cars, oldest first."""
    return [c.to_wire() for c in state.cars.list()]


@router.post("")
def create_car(body: CarPayload, state: AppState = Depends(get_state)):
    """Create a car; any client-sent id is replaced by a server id."""
    return state.cars.add(body).to_wire()


@router.get("/{car_id}")
def get_car(car_id: str, state: AppState = Depends(get_state)):
    car = state.cars.get(car_id)
    if car is None:
        raise HTTPException(status_code=404, detail="Car not found")
    return car.to_wire()


@router.patch("/{car_id}")
def update_car(car_id: str, body: UpdateCarBody, state: AppState = Depends(get_state)):
    """Merge provided fields into the stored car."""
    changes = body.model_dump(by_alias=True, exclude_none=True)
    updated = state.cars.update(car_id, changes)
    if updated is None:
        raise HTTPException(status_code=404, detail="Car not found")
    return updated.to_wire()


@router.delete("/{car_id}", status_code=204)
def delete_car(car_id: str, state: AppState = Depends(get_state)):
    if not state.cars.delete(car_id):
        raise HTTPException(status_code=404, detail="Car not found")
    return Response(status_code=204)
