from datetime import datetime, timedelta, timezone

import pytest

from towgo.models.location_share import LocationShareRequest, ShareAccuracy
from towgo.search.location_sharing import (
    KEY_PREFIX,
    LocationShareService,
    ShareExpiredError,
    apply_privacy,
)


def make_share(accuracy="exact", expires_in=timedelta(hours=1), **overrides):
    values = {
        "address": "12 Elm St, Springfield, IL 62701",
        "location": {"lat": 39.78123, "lng": -89.65012},
        "accuracy": accuracy,
        "expires": datetime.now(timezone.utc) + expires_in,
    }
    values.update(overrides)
    return LocationShareRequest.model_validate(values)


@pytest.fixture
def shares(redis_store, make_settings):
    return LocationShareService(redis_store, make_settings(location_share_max_ttl_seconds=86400))


def test_apply_privacy_levels():
    share = make_share()

    assert apply_privacy(share, ShareAccuracy.EXACT) == share

    approximate = apply_privacy(share, ShareAccuracy.APPROXIMATE)
    assert (approximate.location.lat, approximate.location.lng) == (39.78, -89.65)
    assert approximate.address == share.address

    city = apply_privacy(share, ShareAccuracy.CITY)
    assert city.location is None
    assert city.address == "12 Elm St"


def test_create_and_get(shares, fake_redis):
    share_id = shares.create(make_share())

    stored = shares.get(share_id)

    assert stored.address == "12 Elm St, Springfield, IL 62701"
    assert 0 < fake_redis.ttls[f"{KEY_PREFIX}{share_id}"] <= 3600


def test_ttl_is_capped(shares, fake_redis):
    share_id = shares.create(make_share(expires_in=timedelta(days=3)))
    assert fake_redis.ttls[f"{KEY_PREFIX}{share_id}"] == 86400


def test_past_expiry_is_rejected(shares):
    with pytest.raises(ShareExpiredError):
        shares.create(make_share(expires_in=timedelta(minutes=-5)))


def test_expired_share_is_removed_on_read(shares, redis_store, fake_redis):
    expired = make_share(expires_in=timedelta(minutes=-1))
    redis_store.set(f"{KEY_PREFIX}old", expired.model_dump(mode="json", by_alias=True))

    assert shares.get("old") is None
    assert f"{KEY_PREFIX}old" not in fake_redis.store


def test_active_lists_only_live_shares(shares, redis_store):
    live_id = shares.create(make_share())
    expired = make_share(expires_in=timedelta(minutes=-1))
    redis_store.set(f"{KEY_PREFIX}old", expired.model_dump(mode="json", by_alias=True))

    active = shares.active()

    assert [item["id"] for item in active] == [live_id]


@pytest.mark.parametrize("stored", [
    {"address": "12 Elm St"},
    {"address": "12 Elm St", "accuracy": "exact", "expires": "not a date"},
    "plain string",
    ["not", "a", "share"],
])
def test_unreadable_share_reads_as_missing(shares, redis_store, stored):
    live_id = shares.create(make_share())
    redis_store.set(f"{KEY_PREFIX}broken", stored)

    assert shares.get("broken") is None
    assert [item["id"] for item in shares.active()] == [live_id]


def test_unreadable_share_api_is_not_found(client, redis_store):
    redis_store.set(f"{KEY_PREFIX}broken", {"address": "12 Elm St", "accuracy": "city", "expires": "soon"})

    assert client.get("/api/location-share/broken").status_code == 404
    assert client.get("/api/location-shares").json()["count"] == 0


def test_location_share_api(client):
    expires = (datetime.now(timezone.utc) + timedelta(hours=2)).isoformat()
    payload = {
        "address": "12 Elm St, Springfield, IL 62701",
        "location": {"lat": 39.78123, "lng": -89.65012},
        "accuracy": "approximate",
        "expires": expires,
        "includeVehicleInfo": True,
        "vehicleInfo": {"make": "Ford", "model": "F-150", "licensePlate": "ABC123"},
    }

    response = client.post("/api/location-share", json=payload)
    assert response.status_code == 201
    share_id = response.json()["shareId"]

    shared = client.get(f"/api/location-share/{share_id}").json()
    assert shared["location"] == {"lat": 39.78, "lng": -89.65}
    assert shared["vehicleInfo"]["licensePlate"] == "ABC123"

    listing = client.get("/api/location-shares").json()
    assert listing["count"] == 1
    assert listing["shares"][0]["id"] == share_id

    assert client.delete(f"/api/location-share/{share_id}").status_code == 204
    assert client.get(f"/api/location-share/{share_id}").status_code == 404
    assert client.delete(f"/api/location-share/{share_id}").status_code == 404


def test_location_share_api_rejects_past_expiry(client):
    payload = {
        "address": "12 Elm St",
        "accuracy": "city",
        "expires": (datetime.now(timezone.utc) - timedelta(hours=1)).isoformat(),
    }
    assert client.post("/api/location-share", json=payload).status_code == 400
