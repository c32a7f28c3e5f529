"""Redis implementation of the ephemeral store."""

import json
from collections.abc import Iterator
from contextlib import contextmanager

import redis

from listing_lens.store.base import BaseEphemeralStore, StoreItem
from listing_lens.store.exceptions import StoreError

META_SUFFIX = ":meta"


@contextmanager
def translate_errors(operation: str) -> Iterator[None]:
    """Re-raise redis-py failures as StoreError."""
    try:
        yield
    except redis.RedisError as exc:
        raise StoreError(f"Store {operation} failed: {exc}") from exc


def _meta_key(key: str) -> str:
    return f"{key}{META_SUFFIX}"


class RedisStore(BaseEphemeralStore):
    """Ephemeral store backed by Redis key expiry.

    Side metadata is kept under ``{key}:meta`` and always written in the same
    transaction as its value, with the same TTL.
    """

    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    def put(self, key: str, value: bytes | str, ttl_seconds: int) -> None:
        with translate_errors("put"):
            self._client.set(key, value, ex=ttl_seconds)

    def get(self, key: str) -> bytes | None:
        with translate_errors("get"):
            return self._client.get(key)

    def delete(self, *keys: str) -> None:
        if not keys:
            return
        targets = [k for key in keys for k in (key, _meta_key(key))]
        with translate_errors("delete"):
            self._client.delete(*targets)

    def put_with_metadata(
        self,
        key: str,
        value: bytes | str,
        metadata: dict[str, str],
        ttl_seconds: int,
    ) -> None:
        self.put_batch([StoreItem(key=key, value=value, metadata=metadata)], ttl_seconds)

    def get_metadata(self, key: str) -> dict[str, str] | None:
        with translate_errors("get_metadata"):
            raw = self._client.get(_meta_key(key))
        if raw is None:
            return None
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            return None
        return parsed if isinstance(parsed, dict) else None

    def put_batch(self, items: list[StoreItem], ttl_seconds: int) -> None:
        if not items:
            return
        with translate_errors("put_batch"):
            pipe = self._client.pipeline(transaction=True)
            for item in items:
                pipe.set(item.key, item.value, ex=ttl_seconds)
                if item.metadata:
                    pipe.set(_meta_key(item.key), json.dumps(item.metadata), ex=ttl_seconds)
            pipe.execute()

    def put_if_absent(self, key: str, value: bytes | str, ttl_seconds: int) -> bool:
        with translate_errors("put_if_absent"):
            return bool(self._client.set(key, value, ex=ttl_seconds, nx=True))

    def increment(self, key: str) -> int:
        with translate_errors("increment"):
            return int(self._client.incr(key))

    def expire(self, key: str, ttl_seconds: int) -> None:
        with translate_errors("expire"):
            self._client.expire(key, ttl_seconds)

    def ttl(self, key: str) -> int | None:
        with translate_errors("ttl"):
            remaining = int(self._client.ttl(key))
        if remaining == -2:
            return None
        return remaining
