import pytest

from towgo.models.favorites import FavoriteCreateRequest
from towgo.services.favorites_store import FavoriteExistsError, FavoritesStore

JOES = {
    "placeId": "ChIJjoes",
    "name": "Joe's Towing",
    "address": "123 Main St, Austin, TX 78701",
    "phoneNumber": "(512) 555-0100",
    "location": {"lat": 30.27, "lng": -97.74},
}


def make_request(**overrides):
    return FavoriteCreateRequest.model_validate({**JOES, **overrides})


def test_added_favorite_is_listed_unchanged(db_session):
    store = FavoritesStore(db_session, "user-1")
    store.add(make_request())

    [favorite] = store.list()

    assert favorite.place_id == JOES["placeId"]
    assert favorite.name == JOES["name"]
    assert favorite.address == JOES["address"]
    assert favorite.location == {"lat": 30.27, "lng": -97.74}


def test_remove_clears_membership(db_session):
    store = FavoritesStore(db_session, "user-1")
    store.add(make_request())
    assert store.is_favorite("ChIJjoes")

    assert store.remove("ChIJjoes") is True

    store.list()
    assert store.is_favorite("ChIJjoes") is False
    assert store.remove("ChIJjoes") is False


def test_is_favorite_answers_from_last_list(db_session):
    reader = FavoritesStore(db_session, "user-1")
    writer = FavoritesStore(db_session, "user-1")
    assert reader.list() == []

    writer.add(make_request())

    assert reader.is_favorite("ChIJjoes") is False
    reader.list()
    assert reader.is_favorite("ChIJjoes") is True


def test_duplicate_place_is_rejected(db_session):
    store = FavoritesStore(db_session, "user-1")
    store.add(make_request())
    with pytest.raises(FavoriteExistsError):
        store.add(make_request(name="Joe's Towing again"))


def test_favorites_are_scoped_per_user(db_session):
    FavoritesStore(db_session, "user-1").add(make_request())
    other = FavoritesStore(db_session, "user-2")

    assert other.list() == []
    other.add(make_request())
    assert len(other.list()) == 1


def test_favorites_api_round_trip(client):
    response = client.post("/api/favorites", json=JOES)
    assert response.status_code == 201
    created = response.json()
    assert created["placeId"] == JOES["placeId"]
    assert created["userId"] == "guest"

    listed = client.get("/api/favorites").json()
    assert [(f["placeId"], f["name"], f["address"]) for f in listed] == [
        (JOES["placeId"], JOES["name"], JOES["address"])
    ]

    assert client.post("/api/favorites", json=JOES).status_code == 409

    assert client.delete(f"/api/favorites/{JOES['placeId']}").status_code == 204
    assert client.get("/api/favorites").json() == []
    assert client.delete(f"/api/favorites/{JOES['placeId']}").status_code == 404


def test_favorites_api_validates_payload(client):
    response = client.post("/api/favorites", json={**JOES, "location": {"lat": 120, "lng": 0}})
    assert response.status_code == 422
