from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from .geo import METERS_PER_MILE
from .schemas import RestaurantWithDetails

DEFAULT_DISTANCE = 1  # miles
NEARBY_LIMIT = 30


class FilterParams(BaseModel):
    distance: Optional[float] = Field(default=None, ge=1, le=10)
    rating: Optional[float] = Field(default=None, ge=1, le=5)
    price: Optional[int] = Field(default=None, ge=1, le=4)


def parse_filters(
    distance: Optional[str] = None,
    rating: Optional[str] = None,
    price: Optional[str] = None,
) -> FilterParams:
    """Validate the query filters together. Any bad or blank value drops all of them."""
    raw = {"distance": distance, "rating": rating, "price": price}
    try:
        return FilterParams(**{k: v for k, v in raw.items() if v is not None})
    except ValidationError:
        return FilterParams()


def search_radius(filters: FilterParams) -> int:
    """Provider radius in metres: twice the distance filter, so there is enough to filter."""
    miles = filters.distance or DEFAULT_DISTANCE
    return int(miles * METERS_PER_MILE) * 2


def _matches(r: RestaurantWithDetails, filters: FilterParams) -> bool:
    if r.distance > (filters.distance or DEFAULT_DISTANCE):
        return False
    if filters.rating and (not r.rating or r.rating < filters.rating):
        return False
    if filters.price and r.price_level != filters.price:
        return False
    return True


def partition_restaurants(
    restaurants: list[RestaurantWithDetails],
    filters: FilterParams,
    limit: int = NEARBY_LIMIT,
) -> tuple[list[RestaurantWithDetails], list[RestaurantWithDetails]]:
    """Split into (restaurants with attendance, filtered restaurants nearby)."""
    with_attendance = sorted(
        (r for r in restaurants if r.attendee_count > 0),
        key=lambda r: r.attendee_count,
        reverse=True,
    )

    nearby = [r for r in restaurants if r.attendee_count == 0 and _matches(r, filters)]
    # rating desc, distance asc as tiebreaker
    nearby.sort(key=lambda r: (-(r.rating or 0), r.distance))

    return with_attendance, nearby[:limit]
