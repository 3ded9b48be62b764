from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from app.cache import restaurant_cache
from app.db import get_session
from app.main import app
from app.places import get_places_client
from app.schemas import NearbyRestaurant

# Hilton Salt Lake City Center
CENTER = (40.7596, -111.8867)


class FakePlaces:
    """Stands in for GooglePlacesClient.nearby_restaurants."""

    def __init__(self, restaurants: list[NearbyRestaurant] | None = None):
        self.restaurants = restaurants or []
        self.calls: list[tuple[float, float, int]] = []

    def nearby_restaurants(self, lat, lng, radius=1600):
        self.calls.append((lat, lng, radius))
        return list(self.restaurants)


def make_restaurant(id: str, lat: float = CENTER[0], lng: float = CENTER[1], **kwargs) -> NearbyRestaurant:
    fields = {
        "name": f"Restaurant {id}",
        "maps_url": f"https://maps.google.com/?cid={id}",
    }
    fields.update(kwargs)
    return NearbyRestaurant(id=id, lat=lat, lng=lng, **fields)


SAMPLE_RESTAURANTS = [
    make_restaurant("sushi", lat=40.7610, lng=-111.8880, rating=4.6, price_level=3),
    make_restaurant("tacos", lat=40.7580, lng=-111.8850, rating=4.2, price_level=1),
    make_restaurant("diner", lat=40.7600, lng=-111.8900, rating=3.8, price_level=2),
    # about 3 miles out
    make_restaurant("far-bbq", lat=40.8030, lng=-111.8867, rating=4.9, price_level=2),
    make_restaurant("no-rating", lat=40.7597, lng=-111.8868),
]


@pytest.fixture(autouse=True)
def _clear_cache():
    restaurant_cache.clear()
    yield
    restaurant_cache.clear()


@pytest.fixture(name="session")
def session_fixture():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session


@pytest.fixture(name="places")
def places_fixture():
    return FakePlaces(SAMPLE_RESTAURANTS)


@pytest.fixture(name="client")
def client_fixture(session, places):
    app.dependency_overrides[get_session] = lambda: session
    app.dependency_overrides[get_places_client] = lambda: places
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()
