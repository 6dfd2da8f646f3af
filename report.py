import socket
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from digest import Digest
from phplog.normalize import type_token
from phplog.types import LogEntry


RULE = "─" * 60
TIME_FORMAT = "%Y-%m-%d %H:%M"


# ---------------- Filters ----------------

def filter_entries(
    entries: Iterable[LogEntry],
    types: Dict[str, str],
    tokens: Optional[Iterable[str]] = None,
    path_contains: Optional[str] = None,
) -> List[LogEntry]:
    """
    Keep entries whose type token is in `tokens` and whose path contains
    `path_contains` (case-insensitive). Either filter is skipped when unset.
    """
    wanted = {type_token(t) for t in tokens} if tokens else None
    needle = (path_contains or "").lower()

    kept = []
    for e in entries:
        token = types.get(e.type) or type_token(e.type)
        if wanted is not None and token not in wanted:
            continue
        if needle and needle not in (e.path or "").lower():
            continue
        kept.append(e)

    return kept


# ---------------- Text ----------------

def format_time(epoch: int) -> str:
    return datetime.fromtimestamp(epoch, tz=timezone.utc).strftime(TIME_FORMAT)


def plural(n: int, one: str, many: str) -> str:
    return f"{n} {one if n == 1 else many}"


def render_entry(entry: LogEntry) -> str:
    lines = [
        f"[{entry.type}]",
        f"first seen {format_time(entry.first)}, "
        f"last seen {format_time(entry.last)}, "
        f"{plural(entry.hits, 'hit', 'hits')}",
        entry.core if entry.core is not None else entry.message,
    ]

    if entry.path:
        lines.append(f"{entry.path}, line {entry.line}")

    for title, block in (
        ("Code", entry.snippet),
        ("Stack trace", entry.trace),
        ("Additional text", entry.extra),
    ):
        if block:
            lines.append(f"\n{title}")
            lines.extend(f"  {b}" for b in block.splitlines())

    return "\n".join(lines)


def render_text(digest: Digest, entries: Optional[List[LogEntry]] = None) -> str:
    shown = digest.entries if entries is None else entries

    out = [
        f"Error log {digest.source} on {socket.gethostname()}",
        plural(digest.total, "distinct entry", "distinct entries"),
    ]

    if digest.types:
        out.append("\nTypes")
        for label in digest.types:
            out.append(f"  {label} ({digest.counts.get(label, 0)})")

    if len(shown) != digest.total:
        out.append(f"\nShowing {len(shown)} of {digest.total}")

    for e in shown:
        out.append("\n" + RULE)
        out.append(render_entry(e))

    if shown:
        out.append(RULE)

    return "\n".join(out)


# ---------------- JSON ----------------

def digest_to_dict(digest: Digest, entries: Optional[List[LogEntry]] = None) -> Dict[str, Any]:
    shown = digest.entries if entries is None else entries
    return {
        "source": str(digest.source),
        "offset": digest.offset,
        "total": digest.total,
        "types": dict(digest.types),
        "counts": dict(digest.counts),
        "entries": [asdict(e) for e in shown],
    }
