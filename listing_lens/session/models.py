from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from listing_lens.timeutil import from_iso, to_iso


class Category(str, Enum):
    VEHICLE = "vehicle"
    PROPERTY = "property"
    ELECTRONICS = "electronics"
    OTHER = "other"

    @classmethod
    def parse(cls, value: object) -> "Category | None":
        """Return the matching category, or None for anything unknown."""
        if not isinstance(value, str):
            return None
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass(frozen=True)
class Asset:
    """One staged screenshot."""

    data: bytes
    content_type: str


@dataclass(frozen=True)
class SessionMetadata:
    """Stored description of an upload session (the assets live under their own keys)."""

    session_id: str
    category: str
    asset_count: int
    created_at: datetime
    expires_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "screenshotCount": self.asset_count,
            "createdAt": to_iso(self.created_at),
            "expiresAt": to_iso(self.expires_at),
        }

    @staticmethod
    def from_dict(session_id: str, payload: dict[str, Any]) -> "SessionMetadata":
        """Build metadata from its stored form.

        Raises:
            ValueError: if a required field is missing or has the wrong type.
        """
        category = payload.get("category")
        if not isinstance(category, str) or not category:
            raise ValueError("session metadata 'category' must be a non-empty string")
        count = payload.get("screenshotCount")
        if not isinstance(count, int) or isinstance(count, bool) or count < 1:
            raise ValueError("session metadata 'screenshotCount' must be a positive integer")
        created_at = payload.get("createdAt")
        expires_at = payload.get("expiresAt")
        if not isinstance(created_at, str) or not isinstance(expires_at, str):
            raise ValueError("session metadata timestamps must be strings")
        return SessionMetadata(
            session_id=session_id,
            category=category,
            asset_count=count,
            created_at=from_iso(created_at),
            expires_at=from_iso(expires_at),
        )
