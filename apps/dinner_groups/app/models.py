from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Restaurant(SQLModel, table=True):
    # Provider-assigned place id
    id: str = Field(primary_key=True)
    name: str

    price_level: Optional[int] = None  # 1-4
    rating: Optional[float] = None  # 0-5

    lat: float
    lng: float

    photo_ref: Optional[str] = None
    maps_url: str

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class DinnerGroup(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    # One group per restaurant
    restaurant_id: str = Field(unique=True, index=True, foreign_key="restaurant.id")
    created_at: datetime = Field(default_factory=utcnow)


class Attendee(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    # A user sits in at most one group at a time
    user_id: str = Field(unique=True, index=True)
    dinner_group_id: int = Field(index=True, foreign_key="dinnergroup.id")
    created_at: datetime = Field(default_factory=utcnow)
