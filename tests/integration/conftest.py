import os
import uuid
from collections.abc import Generator

import pytest
import redis

from listing_lens.config.settings import Settings
from listing_lens.store.connection import close_client, init_client
from listing_lens.store.redis_store import RedisStore


def _test_settings() -> Settings:
    return Settings(
        redis_url=os.environ.get("TEST_REDIS_URL", "redis://localhost:6379/15"),
        job_queue_name=f"listing-lens:test:{uuid.uuid4().hex[:8]}",
        payment_bypass=True,
        generation_provider="example",
    )


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def redis_client(test_settings: Settings) -> Generator[redis.Redis, None, None]:
    client = init_client(test_settings)
    try:
        client.ping()
    except redis.RedisError as e:
        close_client()
        pytest.skip(f"Redis not available: {e}. Set TEST_REDIS_URL to a scratch database")
    try:
        yield client
    finally:
        close_client()


@pytest.fixture
def redis_store(redis_client: redis.Redis) -> Generator[RedisStore, None, None]:
    redis_client.flushdb()
    yield RedisStore(redis_client)
    redis_client.flushdb()
