import json
from abc import ABC, abstractmethod

import redis

from listing_lens.jobs.models import JobTicket
from listing_lens.logging.logger import Log
from listing_lens.store.redis_store import translate_errors


class BaseJobQueue(ABC):
    """Hand-off between the dispatcher and worker processes."""

    @abstractmethod
    def enqueue(self, ticket: JobTicket) -> None:
        """Make a ticket visible to workers."""

    @abstractmethod
    def dequeue(self) -> JobTicket | None:
        """Claim the oldest ticket, or return None if the queue is empty."""


class RedisJobQueue(BaseJobQueue):
    """FIFO queue on a Redis list (LPUSH in, RPOP out)."""

    def __init__(self, client: redis.Redis, name: str) -> None:
        self._client = client
        self._name = name

    def enqueue(self, ticket: JobTicket) -> None:
        with translate_errors("enqueue"):
            self._client.lpush(self._name, ticket.to_json())

    def dequeue(self) -> JobTicket | None:
        with translate_errors("dequeue"):
            raw = self._client.rpop(self._name)
        if raw is None:
            return None
        try:
            payload = json.loads(raw)
            if not isinstance(payload, dict):
                raise ValueError("ticket must be an object")
            return JobTicket.from_dict(payload)
        except ValueError as exc:
            Log.error(f"Dropping malformed job ticket from {self._name}: {exc}")
            return None
