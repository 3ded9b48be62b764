from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, FastAPI, Form, HTTPException, Query, Request
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import ValidationError
from sqlmodel import Session
from starlette.background import BackgroundTask

from .auth import require_user_id
from .config import settings
from .db import engine, get_session, init_db
from .errors import InvariantError, PlacesAPIError, RestaurantNotFound
from .filters import parse_filters, partition_restaurants, search_radius
from .places import GooglePlacesClient, get_places_client, places_client
from .schemas import (
    ActionResult,
    DinnerGroupAction,
    FiltersRead,
    HealthResponse,
    JoinAction,
    RestaurantListing,
)
from .service import get_all_restaurant_details, join_dinner_group, leave_dinner_group

logger = logging.getLogger(__name__)

PHOTO_CACHE_CONTROL = "public, max-age=86400"

app = FastAPI(title="Dinner Groups", version="0.1.0")


@app.on_event("startup")
def _startup():
    logging.basicConfig(level=settings.log_level)
    init_db()


@app.on_event("shutdown")
def _shutdown():
    places_client.close()


@app.exception_handler(InvariantError)
def _invariant_failed(request: Request, exc: InvariantError):
    logger.error("Invariant failed on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": str(exc)})


@app.exception_handler(PlacesAPIError)
def _places_failed(request: Request, exc: PlacesAPIError):
    return JSONResponse(status_code=502, content={"detail": str(exc)})


@app.exception_handler(RestaurantNotFound)
def _restaurant_not_found(request: Request, exc: RestaurantNotFound):
    return JSONResponse(status_code=404, content={"detail": "Restaurant not found"})


@app.exception_handler(Exception)
def _unhandled(request: Request, exc: Exception):
    logger.exception("Unhandled exception on %s", request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.get("/health", response_model=HealthResponse)
def health():
    return HealthResponse(ok=True, db=engine.url.render_as_string(hide_password=True))


@app.get("/restaurants", response_model=RestaurantListing)
def get_restaurants(
    distance: Optional[str] = None,
    rating: Optional[str] = None,
    price: Optional[str] = None,
    user_id: str = Depends(require_user_id),
    session: Session = Depends(get_session),
    places: GooglePlacesClient = Depends(get_places_client),
):
    filters = parse_filters(distance, rating, price)

    restaurants = get_all_restaurant_details(
        session,
        places,
        lat=settings.conference_lat,
        lng=settings.conference_lng,
        user_id=user_id,
        radius=search_radius(filters),
    )
    with_attendance, nearby = partition_restaurants(restaurants, filters)

    return RestaurantListing(
        restaurants_with_attendance=with_attendance,
        restaurants_nearby=nearby,
        filters=FiltersRead(**filters.model_dump(exclude_none=True)),
    )


@app.post("/restaurants", response_model=ActionResult)
def restaurant_action(
    intent: Optional[str] = Form(default=None),
    restaurantId: Optional[str] = Form(default=None),
    user_id: str = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    form = {"intent": intent}
    if restaurantId is not None:
        form["restaurantId"] = restaurantId
    try:
        action = DinnerGroupAction.validate_python(form)
    except ValidationError:
        return JSONResponse(
            status_code=400,
            content=ActionResult(status="error", message="Invalid form data").model_dump(),
        )

    if isinstance(action, JoinAction):
        join_dinner_group(session, user_id, action.restaurantId)
        return ActionResult(status="success", message="Joined dinner group")

    leave_dinner_group(session, user_id)
    return ActionResult(status="success", message="Left dinner group")


@app.get("/resources/maps/photo")
def maps_photo(
    photoRef: Optional[str] = None,
    maxWidth: str = Query(default="400"),
    maxHeight: str = Query(default="300"),
    places: GooglePlacesClient = Depends(get_places_client),
):
    upstream = places.fetch_photo(photoRef, max_width=maxWidth, max_height=maxHeight)

    if not upstream.ok:
        upstream.close()
        raise HTTPException(status_code=upstream.status_code, detail="Failed to fetch photo")

    return StreamingResponse(
        upstream.iter_content(chunk_size=8192),
        media_type=upstream.headers.get("Content-Type") or "image/jpeg",
        headers={"Cache-Control": PHOTO_CACHE_CONTROL},
        background=BackgroundTask(upstream.close),
    )
