import json
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from listing_lens.config.settings import Settings
from listing_lens.session.exceptions import InvalidCategoryError, NoValidAssetsError
from listing_lens.session.manager import SessionManager, asset_key, session_key
from listing_lens.session.models import Asset
from listing_lens.store.exceptions import StoreError
from tests.fakes import MemoryStore

NOW = datetime(2026, 3, 7, 12, 0, tzinfo=timezone.utc)


class _Clock:
    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def _make_manager(**overrides: object) -> tuple[SessionManager, MemoryStore, _Clock]:
    store = MemoryStore()
    clock = _Clock()
    manager = SessionManager(store, Settings(**overrides), clock=clock)
    return manager, store, clock


def _jpeg(size: int = 16) -> Asset:
    return Asset(data=b"\xff" * size, content_type="image/jpeg")


class TestCreateSession:
    def test_stores_assets_and_metadata(self) -> None:
        manager, store, _clock = _make_manager()

        meta = manager.create_session("vehicle", [_jpeg(), Asset(b"png", "image/png")])

        assert len(meta.session_id) == 16
        assert meta.asset_count == 2
        assert meta.expires_at == NOW + timedelta(seconds=900)
        assert store.get(asset_key(meta.session_id, 1)) == b"png"
        assert store.get_metadata(asset_key(meta.session_id, 1)) == {"mimeType": "image/png"}
        stored = json.loads(store.get(session_key(meta.session_id)))
        assert stored["category"] == "vehicle"
        assert stored["screenshotCount"] == 2

    def test_all_keys_share_session_ttl(self) -> None:
        manager, store, _clock = _make_manager()

        meta = manager.create_session("property", [_jpeg()])

        assert store.ttl(asset_key(meta.session_id, 0)) == 900
        assert store.ttl(session_key(meta.session_id)) == 900

    def test_rejects_unknown_category(self) -> None:
        manager, store, _clock = _make_manager()

        with pytest.raises(InvalidCategoryError):
            manager.create_session("boats", [_jpeg()])
        assert store.keys() == []

    def test_rejects_when_nothing_survives_filtering(self) -> None:
        manager, store, _clock = _make_manager()

        with pytest.raises(NoValidAssetsError, match="No valid images uploaded"):
            manager.create_session(
                "other",
                [Asset(b"%PDF", "application/pdf"), Asset(b"", "image/png")],
            )
        assert store.keys() == []

    def test_drops_oversized_files(self) -> None:
        manager, _store, _clock = _make_manager(max_asset_bytes=10)

        meta = manager.create_session("electronics", [_jpeg(11), _jpeg(10)])

        assert meta.asset_count == 1

    def test_caps_number_of_files(self) -> None:
        manager, _store, _clock = _make_manager()

        meta = manager.create_session("vehicle", [_jpeg() for _ in range(9)])

        assert meta.asset_count == 6

    def test_store_failure_propagates(self) -> None:
        store = MagicMock()
        store.put_batch.side_effect = StoreError("down")
        manager = SessionManager(store, Settings())

        with pytest.raises(StoreError):
            manager.create_session("vehicle", [_jpeg()])


class TestGetSession:
    def test_returns_metadata(self) -> None:
        manager, _store, _clock = _make_manager()
        created = manager.create_session("vehicle", [_jpeg()])

        found = manager.get_session(created.session_id)

        assert found == created

    def test_unknown_session_is_none(self) -> None:
        manager, _store, _clock = _make_manager()

        assert manager.get_session("0123456789abcdef") is None

    def test_expired_by_store_is_none(self) -> None:
        manager, store, _clock = _make_manager()
        created = manager.create_session("vehicle", [_jpeg()])

        store.advance(901)

        assert manager.get_session(created.session_id) is None

    def test_past_expires_at_is_none_and_deleted(self) -> None:
        manager, store, clock = _make_manager()
        created = manager.create_session("vehicle", [_jpeg()])

        clock.now = NOW + timedelta(seconds=900)

        assert manager.get_session(created.session_id) is None
        assert store.get(session_key(created.session_id)) is None

    def test_malformed_metadata_is_none(self) -> None:
        manager, store, _clock = _make_manager()
        store.put(session_key("abc"), b'{"category": "vehicle"}', 900)

        assert manager.get_session("abc") is None


class TestFetchAssets:
    def test_skips_missing_assets(self) -> None:
        manager, store, _clock = _make_manager()
        created = manager.create_session("vehicle", [_jpeg(), Asset(b"gif", "image/gif")])
        store.delete(asset_key(created.session_id, 0))

        assets = manager.fetch_assets(created.session_id, created.asset_count)

        assert assets == [Asset(b"gif", "image/gif")]

    def test_defaults_content_type_without_metadata(self) -> None:
        manager, store, _clock = _make_manager()
        store.put(asset_key("abc", 0), b"raw", 900)

        assets = manager.fetch_assets("abc", 1)

        assert assets[0].content_type == "image/jpeg"


class TestDeleteSession:
    def test_removes_every_key(self) -> None:
        manager, store, _clock = _make_manager()
        created = manager.create_session("vehicle", [_jpeg(), _jpeg()])

        manager.delete_session(created.session_id, created.asset_count)

        assert store.keys() == []

    def test_absent_session_is_fine(self) -> None:
        manager, _store, _clock = _make_manager()

        manager.delete_session("missing", 3)

    def test_store_failure_is_swallowed(self) -> None:
        store = MagicMock()
        store.delete.side_effect = StoreError("down")
        manager = SessionManager(store, Settings())

        manager.delete_session("abc", 1)


class TestRemainingSeconds:
    def test_reports_store_ttl(self) -> None:
        manager, store, _clock = _make_manager()
        created = manager.create_session("vehicle", [_jpeg()])
        store.advance(100)

        assert manager.remaining_seconds(created.session_id) == 800

    def test_missing_session_is_none(self) -> None:
        manager, _store, _clock = _make_manager()

        assert manager.remaining_seconds("missing") is None
