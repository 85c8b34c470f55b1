from towgo import main
from towgo.services.redis_client import RedisClient


def test_root(client):
    assert client.get("/").json()["message"] == "Welcome to TowGo API"


def test_health_reports_redis(client, monkeypatch, fake_redis):
    monkeypatch.setattr(main, "redis_client", RedisClient(client=fake_redis))
    assert client.get("/health").json() == {"status": "healthy", "redis": True}


def test_debug_config_masks_keys(client, monkeypatch):
    monkeypatch.setattr(main.settings, "environment", "development")
    monkeypatch.setattr(main.settings, "perplexity_api_key", "pplx-1234567890abcd")
    monkeypatch.setattr(main.settings, "smithery_api_key", None)

    body = client.get("/debug/config").json()

    assert body["perplexity_api_key"] == "pplx...abcd"
    assert body["smithery_api_key"] == "NOT_SET"


def test_debug_config_hidden_outside_development(client, monkeypatch):
    monkeypatch.setattr(main.settings, "environment", "production")
    assert "error" in client.get("/debug/config").json()
