import json
import logging

import pytest

from cache import (
    CACHE_SCHEMA_VERSION,
    CacheFormatError,
    CacheSnapshot,
    SnapshotCache,
    snapshot_from_dict,
    snapshot_to_dict,
)
from phplog.types import LogEntry, ScanMode, ScanState


def sample_snapshot():
    entry = LogEntry(
        type="fatal error",
        first=100,
        last=200,
        message="Uncaught Exception: boom in /var/www/a.php:3",
        hits=4,
        trace="#0 {main}",
        extra="  thrown in /var/www/a.php on line 3",
        path="/var/www/a.php",
        line=3,
        core="Uncaught Exception: boom",
        snippet="1. <?php",
    )
    return CacheSnapshot(
        offset=4096,
        entries={entry.message: entry, "plain": LogEntry(type="warning", first=5, last=5, message="plain")},
        types={"fatal error": "fatalerror", "warning": "warning"},
        counts={"fatal error": 1, "warning": 1},
        scan=ScanState(ScanMode.IN_EXTRA, "plain", ["more", "text"]),
    )


def test_round_trip(tmp_path):
    cache = SnapshotCache(tmp_path / "cache.json")
    original = sample_snapshot()

    cache.persist(original)
    restored = cache.restore(stream_length=4096)

    assert restored == original


def test_persist_replaces_without_leftovers(tmp_path):
    cache = SnapshotCache(tmp_path / "nested" / "cache.json")
    cache.persist(CacheSnapshot(offset=1))
    cache.persist(sample_snapshot())

    assert sorted(p.name for p in (tmp_path / "nested").iterdir()) == ["cache.json"]
    assert json.loads((tmp_path / "nested" / "cache.json").read_text())["offset"] == 4096


def test_missing_cache_is_empty(tmp_path):
    snapshot = SnapshotCache(tmp_path / "absent.json").restore(stream_length=10)
    assert snapshot == CacheSnapshot()


def test_corrupt_cache_warns_and_rescans(tmp_path, caplog):
    path = tmp_path / "cache.json"
    path.write_text("{not json")

    with caplog.at_level(logging.WARNING):
        snapshot = SnapshotCache(path).restore(stream_length=10)

    assert snapshot == CacheSnapshot()
    assert "unusable cache" in caplog.text


def test_stale_offset_warns_and_rescans(tmp_path, caplog):
    cache = SnapshotCache(tmp_path / "cache.json")
    cache.persist(sample_snapshot())

    with caplog.at_level(logging.WARNING):
        snapshot = cache.restore(stream_length=100)

    assert snapshot.offset == 0
    assert snapshot.entries == {}
    assert "truncated or rotated" in caplog.text


def test_offset_equal_to_length_is_valid(tmp_path):
    cache = SnapshotCache(tmp_path / "cache.json")
    cache.persist(sample_snapshot())
    assert cache.restore(stream_length=4096).offset == 4096


def test_persist_failure_raises(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("")

    with pytest.raises(OSError):
        SnapshotCache(blocker / "cache.json").persist(sample_snapshot())


@pytest.mark.parametrize(
    "data",
    [
        [],
        {"version": CACHE_SCHEMA_VERSION + 1, "offset": 0},
        {"version": CACHE_SCHEMA_VERSION, "offset": -1},
        {"version": CACHE_SCHEMA_VERSION, "offset": "12"},
        {"version": CACHE_SCHEMA_VERSION, "offset": 0, "entries": {"x": {"type": "warning"}}},
        {"version": CACHE_SCHEMA_VERSION, "offset": 0, "entries": {"x": {"bogus": 1}}},
        {"version": CACHE_SCHEMA_VERSION, "offset": 0, "scan": {"mode": "sideways"}},
        {"version": CACHE_SCHEMA_VERSION, "offset": 0, "entries": []},
        {"version": CACHE_SCHEMA_VERSION, "offset": 0, "entries": {"x": "warning"}},
        {"version": CACHE_SCHEMA_VERSION, "offset": 0,
         "entries": {"A": {"type": "warning", "first": "x", "last": 1, "message": "A"}}},
        {"version": CACHE_SCHEMA_VERSION, "offset": 0,
         "entries": {"A": {"type": "warning", "first": 1, "last": 1, "message": "A", "hits": "1"}}},
        {"version": CACHE_SCHEMA_VERSION, "offset": 0,
         "entries": {"A": {"type": "warning", "first": 1, "last": 1, "message": "A", "line": "3"}}},
        {"version": CACHE_SCHEMA_VERSION, "offset": 0,
         "entries": {"A": {"type": "warning", "first": 1, "last": 1, "message": "A", "hits": True}}},
        {"version": CACHE_SCHEMA_VERSION, "offset": 0,
         "entries": {"A": {"type": 7, "first": 1, "last": 1, "message": "A"}}},
        {"version": CACHE_SCHEMA_VERSION, "offset": 0,
         "entries": {"A": {"type": "warning", "first": 1, "last": 1, "message": "A", "trace": ["#0"]}}},
        {"version": CACHE_SCHEMA_VERSION, "offset": 0, "types": {"warning": 1}},
        {"version": CACHE_SCHEMA_VERSION, "offset": 0, "counts": {"warning": "1"}},
        {"version": CACHE_SCHEMA_VERSION, "offset": 0, "scan": {"buffer": "abc"}},
        {"version": CACHE_SCHEMA_VERSION, "offset": 0, "scan": {"buffer": [1]}},
        {"version": CACHE_SCHEMA_VERSION, "offset": 0, "scan": {"active": 3}},
        {"version": CACHE_SCHEMA_VERSION, "offset": 0, "scan": []},
    ],
)
def test_invalid_documents(data):
    with pytest.raises(CacheFormatError):
        snapshot_from_dict(data)


def test_document_shape():
    data = snapshot_to_dict(sample_snapshot())
    assert data["version"] == CACHE_SCHEMA_VERSION
    assert data["scan"] == {"mode": "in_extra", "active": "plain", "buffer": ["more", "text"]}
    assert data["entries"]["plain"]["hits"] == 1
