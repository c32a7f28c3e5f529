from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class StoreItem:
    """One value to write as part of a batch."""

    key: str
    value: bytes | str
    metadata: dict[str, str] = field(default_factory=dict)


class BaseEphemeralStore(ABC):
    """Contract for key/value stores with store-enforced expiry.

    Absence is the only signal of expiry: callers never sweep, they react to
    ``None``. Deleting a missing key is a no-op.
    """

    @abstractmethod
    def put(self, key: str, value: bytes | str, ttl_seconds: int) -> None:
        """Write a value that expires after ttl_seconds."""

    @abstractmethod
    def get(self, key: str) -> bytes | None:
        """Return the stored bytes, or None if missing or expired."""

    @abstractmethod
    def delete(self, *keys: str) -> None:
        """Delete keys and any side metadata attached to them."""

    @abstractmethod
    def put_with_metadata(
        self,
        key: str,
        value: bytes | str,
        metadata: dict[str, str],
        ttl_seconds: int,
    ) -> None:
        """Write a value plus small string tags sharing the same expiry."""

    @abstractmethod
    def get_metadata(self, key: str) -> dict[str, str] | None:
        """Return the side metadata for key, or None if there is none."""

    @abstractmethod
    def put_batch(self, items: list[StoreItem], ttl_seconds: int) -> None:
        """Write all items, in order, as a single all-or-nothing unit."""

    @abstractmethod
    def put_if_absent(self, key: str, value: bytes | str, ttl_seconds: int) -> bool:
        """Atomically write key only if it does not exist. Returns True if written."""

    @abstractmethod
    def increment(self, key: str) -> int:
        """Atomically increment a counter and return its new value."""

    @abstractmethod
    def expire(self, key: str, ttl_seconds: int) -> None:
        """Set the expiry of an existing key."""

    @abstractmethod
    def ttl(self, key: str) -> int | None:
        """Return remaining seconds for key, None if missing, -1 if it never expires."""
