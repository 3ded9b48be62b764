from __future__ import annotations

from typing import Any, Optional


class InvariantError(Exception):
    """A required value was missing at runtime."""


def invariant(condition: Any, message: str) -> None:
    if not condition:
        raise InvariantError(message)


class PlacesAPIError(Exception):
    def __init__(self, status: str, error_message: Optional[str] = None):
        self.status = status
        self.error_message = error_message
        super().__init__(f"Places API error: {status}")


class RestaurantNotFound(LookupError):
    def __init__(self, restaurant_id: str):
        self.restaurant_id = restaurant_id
        super().__init__(f"Restaurant not found: {restaurant_id}")
