from __future__ import annotations

import logging
from typing import Iterable, Optional

from sqlalchemy import func
from sqlmodel import Session, select

from .cache import TTLCache, cached, restaurant_cache
from .errors import RestaurantNotFound
from .geo import calculate_distance
from .models import Attendee, DinnerGroup, Restaurant, utcnow
from .places import GooglePlacesClient
from .schemas import NearbyRestaurant, RestaurantWithDetails

logger = logging.getLogger(__name__)

DEFAULT_RADIUS = 1600  # metres, about a mile


def restaurant_cache_key(lat: float, lng: float, radius: int) -> str:
    return f"restaurants-{round(lat, 4)}-{round(lng, 4)}-{radius}"


def fetch_and_upsert_restaurants(
    session: Session,
    provider: GooglePlacesClient,
    lat: float,
    lng: float,
    radius: int,
) -> list[NearbyRestaurant]:
    """Fetch restaurants from the provider and upsert them into the database."""
    restaurants = provider.nearby_restaurants(lat, lng, radius)

    for r in restaurants:
        row = session.get(Restaurant, r.id)
        if row is None:
            session.add(Restaurant(**r.model_dump()))
            continue
        for field, value in r.model_dump(exclude={"id"}).items():
            setattr(row, field, value)
        row.updated_at = utcnow()
        session.add(row)
    session.commit()

    logger.info("Upserted %d restaurants near %s,%s (radius=%s)", len(restaurants), lat, lng, radius)
    return restaurants


def get_attendee_counts(session: Session, restaurant_ids: Iterable[str]) -> dict[str, int]:
    ids = list(restaurant_ids)
    if not ids:
        return {}
    stmt = (
        select(DinnerGroup.restaurant_id, func.count(Attendee.id))
        .join(Attendee, Attendee.dinner_group_id == DinnerGroup.id)
        .where(DinnerGroup.restaurant_id.in_(ids))
        .group_by(DinnerGroup.restaurant_id)
    )
    return {restaurant_id: count for restaurant_id, count in session.exec(stmt)}


def get_user_attending_restaurant(session: Session, user_id: str) -> Optional[str]:
    stmt = (
        select(DinnerGroup.restaurant_id)
        .join(Attendee, Attendee.dinner_group_id == DinnerGroup.id)
        .where(Attendee.user_id == user_id)
    )
    return session.exec(stmt).first()


def get_all_restaurant_details(
    session: Session,
    provider: GooglePlacesClient,
    lat: float,
    lng: float,
    user_id: str,
    radius: int = DEFAULT_RADIUS,
    cache: TTLCache = restaurant_cache,
) -> list[RestaurantWithDetails]:
    attending_restaurant_id = get_user_attending_restaurant(session, user_id)

    restaurants: list[NearbyRestaurant] = cached(
        cache,
        restaurant_cache_key(lat, lng, radius),
        lambda: fetch_and_upsert_restaurants(session, provider, lat, lng, radius),
    )

    attendee_counts = get_attendee_counts(session, (r.id for r in restaurants))

    return [
        RestaurantWithDetails(
            **r.model_dump(),
            distance=calculate_distance(lat, lng, r.lat, r.lng),
            attendee_count=attendee_counts.get(r.id, 0),
            is_user_attending=attending_restaurant_id == r.id,
        )
        for r in restaurants
    ]


def join_dinner_group(session: Session, user_id: str, restaurant_id: str) -> Attendee:
    if session.get(Restaurant, restaurant_id) is None:
        raise RestaurantNotFound(restaurant_id)

    leave_dinner_group(session, user_id)

    group = session.exec(select(DinnerGroup).where(DinnerGroup.restaurant_id == restaurant_id)).first()
    if group is None:
        group = DinnerGroup(restaurant_id=restaurant_id)
        session.add(group)
        session.commit()
        session.refresh(group)

    attendee = Attendee(user_id=user_id, dinner_group_id=group.id)
    session.add(attendee)
    session.commit()
    session.refresh(attendee)

    logger.info("User %s joined dinner group at %s", user_id, restaurant_id)
    return attendee


def leave_dinner_group(session: Session, user_id: str) -> Optional[str]:
    """Remove the user's attendance; drop the group once nobody is left.

    Returns the restaurant id of the group that was left, or None when the user
    was not attending anything.
    """
    attendee = session.exec(select(Attendee).where(Attendee.user_id == user_id)).first()
    if attendee is None:
        return None

    group_id = attendee.dinner_group_id
    group = session.get(DinnerGroup, group_id)
    restaurant_id = group.restaurant_id if group is not None else None

    session.delete(attendee)
    session.commit()

    remaining = session.exec(
        select(func.count(Attendee.id)).where(Attendee.dinner_group_id == group_id)
    ).one()
    if remaining == 0 and group is not None:
        session.delete(group)
        session.commit()

    logger.info("User %s left dinner group at %s", user_id, restaurant_id)
    return restaurant_id
