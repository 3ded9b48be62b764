from __future__ import annotations

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter


class NearbyRestaurant(BaseModel):
    id: str
    name: str
    price_level: Optional[int] = None
    rating: Optional[float] = None
    lat: float
    lng: float
    photo_ref: Optional[str] = None
    maps_url: str


class RestaurantWithDetails(NearbyRestaurant):
    distance: float  # miles
    attendee_count: int = 0
    is_user_attending: bool = False


class FiltersRead(BaseModel):
    distance: Optional[float] = None
    rating: Optional[float] = None
    price: Optional[int] = None


class RestaurantListing(BaseModel):
    restaurants_with_attendance: list[RestaurantWithDetails]
    restaurants_nearby: list[RestaurantWithDetails]
    filters: FiltersRead


class ActionResult(BaseModel):
    status: str
    message: str


class HealthResponse(BaseModel):
    ok: bool
    db: str


class JoinAction(BaseModel):
    intent: Literal["join"]
    restaurantId: str = Field(min_length=1)


class LeaveAction(BaseModel):
    intent: Literal["leave"]


DinnerGroupAction = TypeAdapter(
    Annotated[Union[JoinAction, LeaveAction], Field(discriminator="intent")]
)
