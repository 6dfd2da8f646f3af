from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


@dataclass(frozen=True)
class HeaderFields:
    """
    Result of classifying a header line.

    This is intentionally minimal:
    - no location extraction
    - no aggregation
    - timestamp already converted to epoch seconds
    """
    timestamp: int
    type: str
    message: str
    grammar: str


@dataclass
class LogEntry:
    """
    Aggregated record for one distinct message text.

    `message` is the dedup key and is never reassigned after creation.
    Location fields are derived once, when the entry is created.
    """
    type: str
    first: int
    last: int
    message: str
    hits: int = 1
    trace: Optional[str] = None
    extra: Optional[str] = None
    path: Optional[str] = None
    line: Optional[int] = None
    core: Optional[str] = None
    snippet: Optional[str] = None


class ScanMode(str, Enum):
    SCANNING = "scanning"
    IN_TRACE = "in_trace"
    IN_EXTRA = "in_extra"


@dataclass
class ScanState:
    """
    Carry state of the trace/extra capturer between two lines.

    `active` is the key of the entry trailing text attaches to.
    `buffer` holds the lines of the current trace or extra run and
    grows in place while the run lasts.
    """
    mode: ScanMode = ScanMode.SCANNING
    active: Optional[str] = None
    buffer: List[str] = field(default_factory=list)
