"""
Disk snapshot of a parse run, so the next run only reads appended bytes.

The snapshot holds the byte offset reached, the aggregated entries, the
type maps and the capturer's carry state. Writes go to a temp file that is
renamed over the previous snapshot, so an interrupted write leaves the last
good snapshot in place. No lock is taken: two runs against the same cache
file race and the last writer wins.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict

from phplog.types import LogEntry, ScanMode, ScanState

logger = logging.getLogger(__name__)

CACHE_SCHEMA_VERSION = 1

_ENTRY_FIELDS = {f.name for f in fields(LogEntry)}

# field -> (expected type, may be null)
_ENTRY_SCHEMA = {
    "type": (str, False),
    "first": (int, False),
    "last": (int, False),
    "message": (str, False),
    "hits": (int, False),
    "trace": (str, True),
    "extra": (str, True),
    "path": (str, True),
    "line": (int, True),
    "core": (str, True),
    "snippet": (str, True),
}


@dataclass
class CacheSnapshot:
    offset: int = 0
    entries: Dict[str, LogEntry] = field(default_factory=dict)
    types: Dict[str, str] = field(default_factory=dict)
    counts: Dict[str, int] = field(default_factory=dict)
    scan: ScanState = field(default_factory=ScanState)


class CacheFormatError(ValueError):
    pass


# ---------- Serialization ----------

def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _check_value(where: str, value: Any, expected: type, nullable: bool = False) -> None:
    if value is None and nullable:
        return
    ok = _is_int(value) if expected is int else isinstance(value, expected)
    if not ok:
        raise CacheFormatError(f"{where}: expected {expected.__name__}, got {value!r}")


def _entry_from_dict(key: str, raw: Any) -> LogEntry:
    if not isinstance(raw, dict):
        raise CacheFormatError(f"entry {key!r} is not an object")

    unknown = set(raw) - _ENTRY_FIELDS
    if unknown:
        raise CacheFormatError(f"unknown entry fields {sorted(unknown)}")

    for name, value in raw.items():
        expected, nullable = _ENTRY_SCHEMA[name]
        _check_value(f"entry {key!r} field {name!r}", value, expected, nullable)

    return LogEntry(**raw)


def snapshot_to_dict(snapshot: CacheSnapshot) -> Dict[str, Any]:
    return {
        "version": CACHE_SCHEMA_VERSION,
        "offset": int(snapshot.offset),
        "entries": {key: asdict(entry) for key, entry in snapshot.entries.items()},
        "types": dict(snapshot.types),
        "counts": dict(snapshot.counts),
        "scan": {
            "mode": snapshot.scan.mode.value,
            "active": snapshot.scan.active,
            "buffer": list(snapshot.scan.buffer),
        },
    }


def snapshot_from_dict(data: Any) -> CacheSnapshot:
    """Rebuild a snapshot, raising CacheFormatError on anything unexpected."""
    if not isinstance(data, dict):
        raise CacheFormatError("cache root is not an object")

    version = data.get("version")
    if version != CACHE_SCHEMA_VERSION:
        raise CacheFormatError(f"unsupported cache version {version!r}")

    offset = data.get("offset")
    if not _is_int(offset) or offset < 0:
        raise CacheFormatError(f"invalid offset {offset!r}")

    raw_entries = data.get("entries", {})
    raw_types = data.get("types", {})
    raw_counts = data.get("counts", {})
    scan_data = data.get("scan", {})
    for name, value in (("entries", raw_entries), ("types", raw_types),
                        ("counts", raw_counts), ("scan", scan_data)):
        _check_value(name, value, dict)

    try:
        entries = {key: _entry_from_dict(key, raw) for key, raw in raw_entries.items()}
    except TypeError as e:
        # missing required fields
        raise CacheFormatError(str(e)) from e

    for label, token in raw_types.items():
        _check_value(f"types[{label!r}]", token, str)
    for label, count in raw_counts.items():
        _check_value(f"counts[{label!r}]", count, int)

    active = scan_data.get("active")
    buffer = scan_data.get("buffer", [])
    _check_value("scan.active", active, str, nullable=True)
    _check_value("scan.buffer", buffer, list)
    for line in buffer:
        _check_value("scan.buffer line", line, str)

    try:
        mode = ScanMode(scan_data.get("mode", ScanMode.SCANNING.value))
    except ValueError as e:
        raise CacheFormatError(str(e)) from e

    types = dict(raw_types)
    counts = dict(raw_counts)
    scan = ScanState(mode=mode, active=active, buffer=list(buffer))

    return CacheSnapshot(
        offset=offset,
        entries=entries,
        types=types,
        counts=counts,
        scan=scan,
    )


# ---------- Cache file ----------

class SnapshotCache:
    def __init__(self, cache_file: Path):
        self.cache_file = Path(cache_file)

    def restore(self, stream_length: int) -> CacheSnapshot:
        """
        Load the last snapshot for a stream that is now `stream_length` bytes.

        Missing, unreadable, corrupt or stale snapshots all mean
        "start from scratch"; only the last three are worth a warning.
        """
        if not self.cache_file.exists():
            return CacheSnapshot()

        try:
            snapshot = snapshot_from_dict(json.loads(self.cache_file.read_text(encoding="utf-8")))
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unusable cache %s: %s", self.cache_file, e)
            return CacheSnapshot()

        if snapshot.offset > stream_length:
            logger.warning(
                "Cache offset %d is past the end of the log (%d bytes); "
                "the log was truncated or rotated, rescanning",
                snapshot.offset,
                stream_length,
            )
            return CacheSnapshot()

        return snapshot

    def persist(self, snapshot: CacheSnapshot) -> None:
        """Write the snapshot (tmp file + rename). Raises OSError on failure."""
        self.cache_file.parent.mkdir(parents=True, exist_ok=True)

        tmp = Path(f"{self.cache_file}.tmp.{os.getpid()}")
        try:
            tmp.write_text(
                json.dumps(snapshot_to_dict(snapshot), separators=(",", ":")),
                encoding="utf-8",
            )
            os.replace(str(tmp), str(self.cache_file))
        except OSError:
            try:
                tmp.unlink()
            except OSError:
                pass
            raise
