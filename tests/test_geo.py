import pytest

from towgo.models.search import Business, LatLng, SortBy
from towgo.utils import haversine_distance, normalize_place, sort_businesses

AUSTIN = LatLng(lat=30.2672, lng=-97.7431)
DALLAS = LatLng(lat=32.7767, lng=-96.7970)


def make_business(place_id, lat, lng, category=None, distance=None):
    return Business(
        place_id=place_id,
        name=f"Business {place_id}",
        category=category,
        address=f"{place_id} Main St",
        location=LatLng(lat=lat, lng=lng),
        distance=distance,
    )


def test_distance_to_self_is_zero():
    assert haversine_distance(AUSTIN, AUSTIN) == 0


def test_distance_is_symmetric():
    assert haversine_distance(AUSTIN, DALLAS) == pytest.approx(haversine_distance(DALLAS, AUSTIN))


def test_one_degree_of_latitude():
    a = LatLng(lat=0, lng=0)
    b = LatLng(lat=1, lng=0)
    assert haversine_distance(a, b) == pytest.approx(111195, abs=1)


def test_sort_by_distance_is_non_decreasing():
    businesses = [
        make_business("far", 30.40, -97.70),
        make_business("near", 30.27, -97.75),
        make_business("mid", 30.30, -97.74),
    ]

    ordered = sort_businesses(businesses, SortBy.DISTANCE, AUSTIN)

    assert [b.place_id for b in ordered] == ["near", "mid", "far"]
    distances = [b.distance for b in ordered]
    assert distances == sorted(distances)
    # inputs are left untouched
    assert all(b.distance is None for b in businesses)


def test_sort_by_distance_puts_unknown_last():
    businesses = [
        make_business("unknown", 0, 0),
        make_business("two", 0, 0, distance=2.0),
        make_business("one", 0, 0, distance=1.0),
    ]
    ordered = sort_businesses(businesses, SortBy.DISTANCE)
    assert [b.place_id for b in ordered] == ["one", "two", "unknown"]


def test_sort_by_category_groups_lexicographically_and_is_stable():
    businesses = [
        make_business("a", 0, 0, category="towing"),
        make_business("b", 0, 0, category="car repair"),
        make_business("c", 0, 0),
        make_business("d", 0, 0, category="car repair"),
    ]
    ordered = sort_businesses(businesses, SortBy.CATEGORY)
    assert [b.place_id for b in ordered] == ["c", "b", "d", "a"]


def test_sort_by_relevance_keeps_provider_order():
    businesses = [
        make_business("far", 30.40, -97.70),
        make_business("near", 30.27, -97.75),
    ]
    ordered = sort_businesses(businesses, SortBy.RELEVANCE, AUSTIN)
    assert [b.place_id for b in ordered] == ["far", "near"]
    assert all(b.distance is not None for b in ordered)


def test_normalize_place_maps_google_fields():
    raw = {
        "place_id": "ChIJ123",
        "name": "Joe's Towing",
        "types": ["car_repair", "point_of_interest"],
        "formatted_address": "123 Main St, Austin, TX 78701",
        "formatted_phone_number": "(512) 555-0100",
        "geometry": {"location": {"lat": 30.27, "lng": -97.74}},
    }

    business = normalize_place(raw)

    assert business.place_id == "ChIJ123"
    assert business.category == "car repair"
    assert business.address == "123 Main St, Austin, TX 78701"
    assert business.phone_number == "(512) 555-0100"
    assert business.location == LatLng(lat=30.27, lng=-97.74)
    assert business.distance is None


@pytest.mark.parametrize("raw", [
    {"name": "No id", "geometry": {"location": {"lat": 1, "lng": 2}}},
    {"place_id": "p1", "geometry": {"location": {"lat": 1, "lng": 2}}},
    {"place_id": "p1", "name": "No coordinates"},
])
def test_normalize_place_rejects_incomplete_results(raw):
    assert normalize_place(raw) is None
