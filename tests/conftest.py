import fnmatch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from towgo import dependencies
from towgo.config import Settings
from towgo.database import Base, get_db
from towgo.main import app
from towgo.search.aggregator import WebSearchAggregator
from towgo.search.query_enhancement import QueryEnhancementService
from towgo.services.google_maps import GoogleMapsClient
from towgo.services.redis_client import RedisClient
from towgo.services.smithery_client import SmitheryClient
from towgo.services.stripe_client import StripeClient


class FakeRedis:
    """In-memory stand-in for the redis-py client."""

    def __init__(self):
        self.store = {}
        self.ttls = {}

    def get(self, key):
        return self.store.get(key)

    def set(self, key, value):
        self.store[key] = value
        return True

    def setex(self, key, ttl, value):
        self.store[key] = value
        self.ttls[key] = ttl
        return True

    def delete(self, key):
        self.ttls.pop(key, None)
        return 1 if self.store.pop(key, None) is not None else 0

    def scan_iter(self, match=None):
        return iter([key for key in list(self.store) if match is None or fnmatch.fnmatch(key, match)])

    def ping(self):
        return True


@pytest.fixture
def make_settings():
    def factory(**overrides):
        values = {
            "perplexity_api_key": None,
            "smithery_api_key": None,
            "google_maps_api_key": None,
            "stripe_secret_key": None,
            "auth0_domain": None,
            "websearch_providers": "directory",
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return factory


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def redis_store(fake_redis):
    return RedisClient(client=fake_redis)


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def client(db_session, redis_store, make_settings):
    test_settings = make_settings()

    app.dependency_overrides.update({
        get_db: lambda: db_session,
        dependencies.get_redis: lambda: redis_store,
        dependencies.get_enhancement_service: lambda: QueryEnhancementService(test_settings),
        dependencies.get_aggregator: lambda: WebSearchAggregator(test_settings, cache=redis_store),
        dependencies.get_maps_client: lambda: GoogleMapsClient(test_settings),
        dependencies.get_smithery_client: lambda: SmitheryClient(test_settings),
        dependencies.get_stripe_client: lambda: StripeClient(test_settings),
    })
    yield TestClient(app)
    app.dependency_overrides.clear()
