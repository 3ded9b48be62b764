from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Optional

import requests

from .config import settings
from .errors import PlacesAPIError, invariant
from .schemas import NearbyRestaurant

logger = logging.getLogger(__name__)

NEARBY_SEARCH_URL = "https://maps.googleapis.com/maps/api/place/nearbysearch/json"
PLACE_DETAILS_URL = "https://maps.googleapis.com/maps/api/place/details/json"
PLACE_PHOTO_URL = "https://maps.googleapis.com/maps/api/place/photo"

DETAILS_FIELDS = "place_id,name,price_level,rating,geometry,photo,url"


class GooglePlacesClient:
    """Nearby restaurant search against the Google Places web service."""

    def __init__(
        self,
        api_key: str,
        timeout: float = 10.0,
        max_workers: int = 8,
        http: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.timeout = timeout
        self.max_workers = max_workers
        self.http = http or requests.Session()

    def close(self) -> None:
        self.http.close()

    def nearby_restaurants(self, lat: float, lng: float, radius: int = 1600) -> list[NearbyRestaurant]:
        invariant(self.api_key, "GOOGLE_PLACES_API_KEY must be set")

        params = {
            "location": f"{lat},{lng}",
            "radius": str(radius),
            "type": "restaurant",
            "key": self.api_key,
        }
        try:
            res = self.http.get(NEARBY_SEARCH_URL, params=params, timeout=self.timeout)
            data = res.json()
        except (requests.RequestException, ValueError) as e:
            logger.error("Google Places nearby search failed: %s", e)
            raise PlacesAPIError("REQUEST_FAILED", str(e)) from e

        status = data.get("status")
        if status not in ("OK", "ZERO_RESULTS"):
            logger.error("Google Places API Error: %s %s", status, data.get("error_message"))
            raise PlacesAPIError(status or "UNKNOWN", data.get("error_message"))

        results = data.get("results") or []
        if status == "ZERO_RESULTS" or not results:
            return []

        place_ids = [place["place_id"] for place in results]
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(place_ids))) as pool:
            details = list(pool.map(self._place_details, place_ids))

        return [d for d in details if d is not None]

    def _place_details(self, place_id: str) -> Optional[NearbyRestaurant]:
        params = {
            "place_id": place_id,
            "fields": DETAILS_FIELDS,
            "key": self.api_key,
        }
        try:
            res = self.http.get(PLACE_DETAILS_URL, params=params, timeout=self.timeout)
            data = res.json()
        except (requests.RequestException, ValueError):
            logger.warning("Error fetching details for place %s", place_id, exc_info=True)
            return None

        if not isinstance(data, dict):
            logger.warning("Unexpected details payload for place %s", place_id)
            return None

        result = data.get("result")
        if data.get("status") != "OK" or not isinstance(result, dict):
            logger.warning("Error fetching details for place %s: %s", place_id, data.get("status"))
            return None

        try:
            return _to_restaurant(result)
        except (AttributeError, KeyError, TypeError, ValueError):
            logger.warning("Malformed details for place %s", place_id, exc_info=True)
            return None

    def fetch_photo(self, photo_ref: Optional[str], max_width: str = "400", max_height: str = "300") -> requests.Response:
        invariant(photo_ref, "photoRef is required")
        invariant(self.api_key, "GOOGLE_PLACES_API_KEY must be set")

        params = {
            "photoreference": photo_ref,
            "maxwidth": max_width,
            "maxheight": max_height,
            "key": self.api_key,
        }
        return self.http.get(PLACE_PHOTO_URL, params=params, timeout=self.timeout, stream=True)


def _to_restaurant(result: dict[str, Any]) -> NearbyRestaurant:
    location = result["geometry"]["location"]
    lat, lng = location["lat"], location["lng"]
    photos = result.get("photos") or []

    return NearbyRestaurant(
        id=result["place_id"],
        name=result["name"],
        price_level=result.get("price_level"),
        rating=result.get("rating"),
        lat=lat,
        lng=lng,
        photo_ref=photos[0].get("photo_reference") if photos else None,
        maps_url=result.get("url") or f"https://maps.google.com/?q={lat},{lng}",
    )


places_client = GooglePlacesClient(
    api_key=settings.google_places_api_key,
    timeout=settings.places_timeout,
    max_workers=settings.places_max_workers,
)


def get_places_client() -> GooglePlacesClient:
    return places_client
