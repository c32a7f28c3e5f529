import redis

from listing_lens.config.settings import Settings

_client: redis.Redis | None = None


def init_client(settings: Settings) -> redis.Redis:
    """Initialize the global Redis client from settings."""
    global _client  # noqa: PLW0603
    _client = redis.Redis.from_url(settings.redis_url, max_connections=20)
    return _client


def close_client() -> None:
    """Close the global Redis client."""
    global _client  # noqa: PLW0603
    if _client is not None:
        _client.close()
        _client = None


def get_client() -> redis.Redis:
    """Return the global client. Raises if init_client() was never called."""
    if _client is None:
        raise RuntimeError("Redis client not initialized. Call init_client() first.")
    return _client
