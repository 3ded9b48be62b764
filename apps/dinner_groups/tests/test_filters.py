from __future__ import annotations

from app.filters import FilterParams, parse_filters, partition_restaurants, search_radius
from app.schemas import RestaurantWithDetails


def _r(id, distance=0.5, rating=None, price_level=None, attendee_count=0):
    return RestaurantWithDetails(
        id=id,
        name=id,
        lat=0,
        lng=0,
        maps_url="",
        distance=distance,
        rating=rating,
        price_level=price_level,
        attendee_count=attendee_count,
    )


def test_parse_filters_coerces_strings():
    f = parse_filters("3", "4.5", "2")
    assert f == FilterParams(distance=3, rating=4.5, price=2)


def test_parse_filters_invalid_value_drops_all():
    assert parse_filters("3", "9", "2") == FilterParams()
    assert parse_filters("abc", None, None) == FilterParams()


def test_parse_filters_blank_value_drops_all():
    assert parse_filters("", "4", None) == FilterParams()
    assert parse_filters("3", None, "") == FilterParams()


def test_parse_filters_absent_values_are_ignored():
    assert parse_filters(None, "4", None) == FilterParams(rating=4)


def test_search_radius_doubles_distance_in_metres():
    assert search_radius(FilterParams()) == 3200
    assert search_radius(FilterParams(distance=5)) == 16000


def test_attended_restaurants_first_by_count():
    restaurants = [
        _r("one", attendee_count=1),
        _r("none"),
        _r("three", attendee_count=3, distance=9),
    ]

    with_attendance, nearby = partition_restaurants(restaurants, FilterParams())

    assert [r.id for r in with_attendance] == ["three", "one"]
    assert [r.id for r in nearby] == ["none"]


def test_default_distance_is_one_mile():
    restaurants = [_r("close", distance=0.9), _r("edge", distance=1.0), _r("far", distance=1.01)]

    _, nearby = partition_restaurants(restaurants, FilterParams())

    assert {r.id for r in nearby} == {"close", "edge"}


def test_nearby_sorted_by_rating_then_distance():
    restaurants = [
        _r("b", rating=4.0, distance=0.2),
        _r("a", rating=4.5, distance=0.9),
        _r("c", rating=4.0, distance=0.1),
        _r("unrated", distance=0.05),
    ]

    _, nearby = partition_restaurants(restaurants, FilterParams())

    assert [r.id for r in nearby] == ["a", "c", "b", "unrated"]


def test_nearby_results_satisfy_active_filters():
    restaurants = [
        _r(f"r{i}", distance=(i % 6) + 0.5, rating=(i % 5) + 0.5, price_level=(i % 4) + 1)
        for i in range(200)
    ] + [_r("unrated", distance=0.5, price_level=2)]
    filters = FilterParams(distance=4, rating=3, price=2)

    _, nearby = partition_restaurants(restaurants, filters)

    assert nearby
    for r in nearby:
        assert r.distance <= 4
        assert r.rating is not None and r.rating >= 3
        assert r.price_level == 2


def test_nearby_capped_at_thirty():
    restaurants = [_r(f"r{i}", distance=0.5, rating=4) for i in range(50)]

    with_attendance, nearby = partition_restaurants(restaurants, FilterParams())

    assert with_attendance == []
    assert len(nearby) == 30
