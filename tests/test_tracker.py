"""Tests for tracker module."""

import logging
import pytest
from dataclasses import dataclass

from src.watchman_pdu.clock import ClockSpec
from src.watchman_pdu.query import QueryResult, decode_file_record
from src.watchman_pdu.tracker import FileStateTracker, TrackerState


def _result(files, fresh=False, clock="c:1:1", **extra):
    payload = {"version": "1", "is_fresh_instance": fresh, "files": files, "clock": clock}
    payload.update(extra)
    return QueryResult.from_dict(payload)


@pytest.fixture
def tracker():
    return FileStateTracker()


class TestFileStateTracker:
    """Tests for FileStateTracker."""

    def test_starts_unknown_with_null_since(self, tracker):
        assert tracker.state is TrackerState.UNKNOWN
        assert tracker.since() == ClockSpec.null()
        assert len(tracker) == 0

    def test_fresh_instance_sets_baseline(self, tracker):
        tracker.apply(_result([{"name": "a"}, {"name": "b"}], fresh=True, clock="c:1:5"))
        assert tracker.state is TrackerState.TRACKING
        assert set(tracker.files) == {"a", "b"}
        assert tracker.since() == ClockSpec.from_wire("c:1:5")

    def test_delta_merges(self, tracker):
        tracker.apply(_result([{"name": "a"}, {"name": "b"}], fresh=True))
        tracker.apply(_result([
            {"name": "b", "exists": False},
            {"name": "c", "exists": True},
            {"name": "a", "exists": True, "size": 10},
        ], clock="c:1:6"))
        assert set(tracker.files) == {"a", "c"}
        assert tracker.files["a"]["size"] == 10
        assert tracker.since() == ClockSpec.from_wire("c:1:6")

    def test_fresh_instance_replaces_rather_than_merges(self, tracker):
        tracker.apply(_result([{"name": "a"}, {"name": "b"}], fresh=True, clock="c:1:5"))
        tracker.apply(_result([{"name": "c"}], fresh=True, clock="c:2:1"))
        assert set(tracker.files) == {"c"}
        assert "a" not in tracker
        assert tracker.since() == ClockSpec.from_wire("c:2:1")

    def test_fresh_instance_logs_reset(self, tracker, caplog):
        tracker.apply(_result([{"name": "a"}], fresh=True))
        with caplog.at_level(logging.INFO):
            tracker.apply(_result([], fresh=True))
        assert "Fresh instance result" in caplog.text
        assert len(tracker) == 0

    def test_fresh_instance_drops_deleted_records(self, tracker):
        tracker.apply(_result([{"name": "a", "exists": False}, {"name": "b", "exists": True}], fresh=True))
        assert set(tracker.files) == {"b"}

    def test_delta_before_baseline_warns(self, tracker, caplog):
        with caplog.at_level(logging.WARNING):
            tracker.apply(_result([{"name": "a"}]))
        assert "before any baseline" in caplog.text
        assert tracker.state is TrackerState.TRACKING
        assert "a" in tracker

    def test_canceled_push_is_ignored(self, tracker):
        tracker.apply(_result([{"name": "a"}], fresh=True, clock="c:1:5"))
        tracker.apply(QueryResult.from_dict({"version": "1", "canceled": True, "subscription": "s"}))
        assert set(tracker.files) == {"a"}
        assert tracker.since() == ClockSpec.from_wire("c:1:5")

    def test_result_without_clock_keeps_previous(self, tracker):
        tracker.apply(_result([{"name": "a"}], fresh=True, clock="c:1:5"))
        tracker.apply(QueryResult.from_dict({"version": "1", "files": [{"name": "b"}]}))
        assert tracker.since() == ClockSpec.from_wire("c:1:5")

    def test_records_without_key_are_skipped(self, tracker):
        tracker.apply(_result([{"size": 1}, {"name": "a"}], fresh=True))
        assert set(tracker.files) == {"a"}

    def test_reset(self, tracker):
        tracker.apply(_result([{"name": "a"}], fresh=True))
        tracker.reset()
        assert tracker.state is TrackerState.UNKNOWN
        assert tracker.since() == ClockSpec.null()
        assert len(tracker) == 0

    def test_object_records(self, tracker):
        @dataclass
        class Record:
            name: str
            exists: bool = True

        result = QueryResult.from_dict(
            {"version": "1", "is_fresh_instance": True, "files": [{"name": "a"}, {"name": "b"}]},
            file_decoder=lambda r: Record(**r),
        )
        tracker.apply(result)
        tracker.apply(QueryResult.from_dict(
            {"version": "1", "files": [{"name": "a", "exists": False}]},
            file_decoder=lambda r: Record(**r),
        ))
        assert set(tracker.files) == {"b"}

    def test_custom_key(self):
        tracker = FileStateTracker(key="path")
        tracker.apply(_result([{"path": "x/y"}], fresh=True))
        assert "x/y" in tracker

    def test_validates_content_hashes(self, caplog):
        tracker = FileStateTracker(validate_content_hashes=True)
        result = QueryResult.from_dict(
            {"version": "1", "is_fresh_instance": True, "files": [
                {"name": "good", "content.sha1hex": "0123456789abcdef0123456789abcdefdeadbeef"},
                {"name": "bad", "content.sha1hex": "xyz"},
                {"name": "err", "content.sha1hex": {"error": "EACCES"}},
            ]},
            file_decoder=decode_file_record,
        )
        with caplog.at_level(logging.WARNING):
            tracker.apply(result)
        assert "Malformed content hash for bad" in caplog.text
        assert "good" not in caplog.text
        assert len(tracker) == 3
