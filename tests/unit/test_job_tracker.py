import json
from datetime import datetime, timedelta, timezone

import pytest

from listing_lens.config.settings import Settings
from listing_lens.jobs.exceptions import InvalidJobTransitionError
from listing_lens.jobs.models import JobStatus
from listing_lens.jobs.tracker import JobTracker, job_key, new_report_id
from tests.fakes import MemoryStore

NOW = datetime(2026, 3, 7, 12, 0, tzinfo=timezone.utc)


class _Clock:
    def __init__(self) -> None:
        self.now = NOW

    def __call__(self) -> datetime:
        return self.now


def _make_tracker() -> tuple[JobTracker, MemoryStore, _Clock]:
    store = MemoryStore()
    clock = _Clock()
    return JobTracker(store, Settings(), clock=clock), store, clock


class TestCreate:
    def test_writes_queued_record(self) -> None:
        tracker, store, _clock = _make_tracker()

        record = tracker.create("job1")

        assert record.status is JobStatus.QUEUED
        stored = json.loads(store.get(job_key("job1")))
        assert stored == {"status": "queued", "queuedAt": "2026-03-07T12:00:00.000Z"}

    def test_record_has_job_ttl(self) -> None:
        tracker, store, _clock = _make_tracker()

        tracker.create("job1")

        assert store.ttl(job_key("job1")) == 3600


class TestTransitions:
    def test_full_success_path(self) -> None:
        tracker, _store, clock = _make_tracker()
        tracker.create("job1")
        clock.now = NOW + timedelta(seconds=1)
        tracker.mark_processing("job1")
        clock.now = NOW + timedelta(seconds=30)

        record = tracker.mark_complete("job1", "LL-ABCDE", "<html></html>")

        assert record.status is JobStatus.COMPLETE
        assert record.report_id == "LL-ABCDE"
        assert record.queued_at < record.started_at < record.completed_at

    def test_processing_without_queued_record(self) -> None:
        tracker, _store, _clock = _make_tracker()

        record = tracker.mark_processing("job1")

        assert record.status is JobStatus.PROCESSING

    def test_cannot_complete_a_queued_job(self) -> None:
        tracker, _store, _clock = _make_tracker()
        tracker.create("job1")

        with pytest.raises(InvalidJobTransitionError):
            tracker.mark_complete("job1", "LL-ABCDE", "<html></html>")

    @pytest.mark.parametrize("finish", ["complete", "error"])
    def test_cannot_finish_a_missing_job(self, finish: str) -> None:
        tracker, store, _clock = _make_tracker()

        with pytest.raises(InvalidJobTransitionError, match="missing"):
            if finish == "complete":
                tracker.mark_complete("job1", "LL-ABCDE", "<html></html>")
            else:
                tracker.mark_error("job1", "boom")

        assert store.get(job_key("job1")) is None

    def test_terminal_is_final(self) -> None:
        tracker, _store, _clock = _make_tracker()
        tracker.mark_processing("job1")
        tracker.mark_error("job1", "boom")

        with pytest.raises(InvalidJobTransitionError):
            tracker.mark_processing("job1")

    def test_timestamps_never_go_backwards(self) -> None:
        tracker, _store, clock = _make_tracker()
        tracker.create("job1")
        clock.now = NOW - timedelta(seconds=5)

        record = tracker.mark_processing("job1")

        assert record.started_at == record.queued_at


class TestFail:
    def test_queued_job_passes_through_processing(self) -> None:
        tracker, _store, _clock = _make_tracker()
        tracker.create("job1")

        record = tracker.fail("job1", "Session expired - please re-upload.")

        assert record is not None
        assert record.status is JobStatus.ERROR
        assert record.started_at is not None
        assert record.error == "Session expired - please re-upload."

    def test_missing_job_gets_an_error_record(self) -> None:
        tracker, _store, _clock = _make_tracker()

        record = tracker.fail("job1", "boom")

        assert record is not None
        assert tracker.get("job1").status is JobStatus.ERROR

    def test_does_not_overwrite_terminal_job(self) -> None:
        tracker, _store, _clock = _make_tracker()
        tracker.mark_processing("job1")
        tracker.mark_complete("job1", "LL-ABCDE", "<html></html>")

        assert tracker.fail("job1", "late failure") is None
        assert tracker.get("job1").status is JobStatus.COMPLETE


class TestPoll:
    def test_unknown_job_is_processing(self) -> None:
        tracker, _store, _clock = _make_tracker()

        record = tracker.poll("nope")

        assert record.to_dict() == {"status": "processing"}

    def test_non_terminal_record_is_kept(self) -> None:
        tracker, store, _clock = _make_tracker()
        tracker.create("job1")

        assert tracker.poll("job1").status is JobStatus.QUEUED
        assert store.get(job_key("job1")) is not None

    def test_terminal_record_is_delivered_once(self) -> None:
        tracker, store, _clock = _make_tracker()
        tracker.mark_processing("job1")
        tracker.mark_complete("job1", "LL-ABCDE", "<html></html>")

        first = tracker.poll("job1")
        second = tracker.poll("job1")

        assert first.status is JobStatus.COMPLETE
        assert first.html == "<html></html>"
        assert store.get(job_key("job1")) is None
        assert second.status is JobStatus.PROCESSING

    def test_unreadable_record_is_processing(self) -> None:
        tracker, store, _clock = _make_tracker()
        store.put(job_key("job1"), b'{"status": "paused"}', 60)

        assert tracker.poll("job1").status is JobStatus.PROCESSING


class TestReportId:
    def test_format(self) -> None:
        for _ in range(20):
            report_id = new_report_id()
            assert report_id.startswith("LL-")
            assert len(report_id) == 8
            assert report_id[3:].isalnum()
            assert report_id[3:] == report_id[3:].upper()
