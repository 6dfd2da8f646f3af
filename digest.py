"""
One parse run: restore the cache, scan what was appended, persist, sort.

The result is the handoff to whatever displays it: sorted entries, the
label -> token map and the label -> count map.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Dict, Iterator, List, Optional, Sequence

from cache import CacheSnapshot, SnapshotCache
from phplog.scan import scan
from phplog.types import LogEntry
from sorting import DEFAULT_SORT, SortKey, sort_entries
from store import ErrorStore, TypeRegistry

logger = logging.getLogger(__name__)


class LogSourceError(Exception):
    def __init__(self, path: Path, reason: str = ""):
        self.path = path
        self.reason = reason
        super().__init__(f"cannot open {path} for reading: {reason}" if reason else f"cannot open {path}")


@dataclass(frozen=True)
class Digest:
    source: Path
    offset: int
    entries: List[LogEntry]
    types: Dict[str, str]
    counts: Dict[str, int]

    @property
    def total(self) -> int:
        return len(self.entries)


def _decoded_lines(fh: BinaryIO) -> Iterator[str]:
    for raw in fh:
        yield raw.decode("utf-8", errors="replace").rstrip("\r\n")


def build_digest(
    source: os.PathLike | str,
    cache_file: Optional[os.PathLike | str] = None,
    sort_keys: Sequence[SortKey] = DEFAULT_SORT,
    read_snippets: bool = True,
) -> Digest:
    path = Path(source)
    cache = SnapshotCache(Path(cache_file)) if cache_file else None

    try:
        fh = open(path, "rb")
    except OSError as e:
        raise LogSourceError(path, e.strerror or str(e)) from e

    with fh:
        length = os.fstat(fh.fileno()).st_size
        snapshot = cache.restore(length) if cache else CacheSnapshot()

        store = ErrorStore(
            entries=snapshot.entries,
            registry=TypeRegistry(snapshot.types, snapshot.counts),
            read_snippets=read_snippets,
        )

        if snapshot.offset:
            logger.debug("Resuming %s at byte %d of %d", path, snapshot.offset, length)
        fh.seek(snapshot.offset)

        state = scan(_decoded_lines(fh), store, snapshot.scan)
        offset = fh.tell()

    if cache:
        try:
            cache.persist(
                CacheSnapshot(
                    offset=offset,
                    entries=store.as_dict(),
                    types=store.registry.types,
                    counts=store.registry.counts,
                    scan=state,
                )
            )
        except OSError as e:
            logger.error("Could not write cache %s: %s", cache.cache_file, e)

    return Digest(
        source=path,
        offset=offset,
        entries=sort_entries(store.entries(), sort_keys),
        types=dict(sorted(store.registry.types.items())),
        counts=dict(sorted(store.registry.counts.items())),
    )
