"""Upload sessions: screenshots staged in the ephemeral store until a report is generated."""

import json
import uuid
from collections.abc import Callable, Sequence
from datetime import datetime, timedelta

from listing_lens.config.settings import Settings
from listing_lens.logging.logger import Log
from listing_lens.session.exceptions import InvalidCategoryError, NoValidAssetsError
from listing_lens.session.models import Asset, Category, SessionMetadata
from listing_lens.store.base import BaseEphemeralStore, StoreItem
from listing_lens.timeutil import utc_now

DEFAULT_CONTENT_TYPE = "image/jpeg"


def session_key(session_id: str) -> str:
    return f"session:{session_id}"


def asset_key(session_id: str, index: int) -> str:
    return f"screenshot:{session_id}:{index}"


def new_session_id() -> str:
    return uuid.uuid4().hex[:16]


class SessionManager:
    """Creates, reads and destroys upload sessions.

    A missing session is always reported as None. Callers treat that as
    expiry and never distinguish it from a session that never existed.
    """

    def __init__(
        self,
        store: BaseEphemeralStore,
        settings: Settings,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._settings = settings
        self._clock = clock

    def create_session(self, category: str, assets: Sequence[Asset]) -> SessionMetadata:
        """Validate an upload and stage it under a new session id.

        Unsupported or oversized files are dropped; files beyond the maximum
        count are ignored. Every asset is written before the metadata, in one
        batch with one TTL.

        Raises:
            InvalidCategoryError: if category is not a known category.
            NoValidAssetsError: if no file survives filtering.
            StoreError: if the store write fails.
        """
        if Category.parse(category) is None:
            Log.info(f"Rejected upload with category {category!r}")
            raise InvalidCategoryError("Invalid category")

        accepted = self._filter_assets(assets)
        if not accepted:
            raise NoValidAssetsError("No valid images uploaded")

        session_id = new_session_id()
        created_at = self._clock()
        ttl = self._settings.session_ttl_seconds
        metadata = SessionMetadata(
            session_id=session_id,
            category=category,
            asset_count=len(accepted),
            created_at=created_at,
            expires_at=created_at + timedelta(seconds=ttl),
        )

        items = [
            StoreItem(
                key=asset_key(session_id, index),
                value=asset.data,
                metadata={"mimeType": asset.content_type},
            )
            for index, asset in enumerate(accepted)
        ]
        items.append(StoreItem(key=session_key(session_id), value=json.dumps(metadata.to_dict())))
        self._store.put_batch(items, ttl)

        Log.info(
            f"Created session {session_id}: category={category} screenshots={len(accepted)}"
        )
        return metadata

    def get_session(self, session_id: str) -> SessionMetadata | None:
        """Return session metadata, or None if the session is gone."""
        raw = self._store.get(session_key(session_id))
        if raw is None:
            return None
        try:
            payload = json.loads(raw)
            if not isinstance(payload, dict):
                raise ValueError("session metadata must be an object")
            metadata = SessionMetadata.from_dict(session_id, payload)
        except ValueError as exc:
            Log.warning(f"Unreadable metadata for session {session_id}: {exc}")
            return None

        if metadata.expires_at <= self._clock():
            self._forget(session_id)
            return None
        return metadata

    def remaining_seconds(self, session_id: str) -> int | None:
        """Seconds until the session metadata expires, or None if it is gone."""
        remaining = self._store.ttl(session_key(session_id))
        if remaining is None or remaining == 0:
            return None
        return remaining

    def fetch_assets(self, session_id: str, asset_count: int) -> list[Asset]:
        """Fetch every screenshot still present, skipping ones that have expired."""
        assets: list[Asset] = []
        for index in range(asset_count):
            key = asset_key(session_id, index)
            data = self._store.get(key)
            if data is None:
                Log.warning(f"Screenshot {index} of session {session_id} not found")
                continue
            metadata = self._store.get_metadata(key) or {}
            assets.append(
                Asset(data=data, content_type=metadata.get("mimeType") or DEFAULT_CONTENT_TYPE)
            )
        return assets

    def delete_session(self, session_id: str, asset_count: int) -> None:
        """Delete metadata and screenshots. Failures are logged; the TTL is the backstop."""
        keys = [asset_key(session_id, index) for index in range(asset_count)]
        keys.append(session_key(session_id))
        try:
            self._store.delete(*keys)
            Log.info(f"Deleted session {session_id} ({asset_count} screenshots)")
        except Exception as exc:
            Log.warning(f"Cleanup of session {session_id} failed, leaving it to expire: {exc}")

    def _filter_assets(self, assets: Sequence[Asset]) -> list[Asset]:
        allowed = set(self._settings.allowed_mime_types)
        accepted: list[Asset] = []
        for asset in assets:
            if len(accepted) >= self._settings.max_assets:
                Log.debug(f"Ignoring screenshots beyond the limit of {self._settings.max_assets}")
                break
            if asset.content_type not in allowed:
                Log.debug(f"Discarding upload with content type {asset.content_type!r}")
                continue
            if not asset.data or len(asset.data) > self._settings.max_asset_bytes:
                Log.debug(f"Discarding upload of {len(asset.data)} bytes")
                continue
            accepted.append(asset)
        return accepted

    def _forget(self, session_id: str) -> None:
        try:
            self._store.delete(session_key(session_id))
        except Exception as exc:
            Log.warning(f"Could not delete expired session {session_id}: {exc}")
