import re
from enum import Enum, auto
from typing import Optional


class LineKind(Enum):
    """
    Structural shape of a single log line.

    This is about structure, not meaning: a BRACKETED line may still
    fail every header grammar.
    """
    BRACKETED = auto()
    TEXT = auto()
    BLANK = auto()


# Fast, cheap structural checks
BRACKETED_PREFIX = re.compile(r"^\[[^\]]*\] ")
TRACE_INTRO_RE = re.compile(r"stack trace:$", re.IGNORECASE)

# xdebug style frames, optionally still carrying their own log prefix:
#   [16-Oct-2026 10:15:02 UTC] PHP   1. {main}() /var/www/index.php:0
NUMBERED_FRAME_RE = re.compile(r"^(?:\[[^\]]*\] PHP\s+)?(?P<frame>\d+\. .*)$")

# PHP 7+ exception frames:
#   #0 /var/www/lib/db.php(12): connect()
HASH_FRAME_RE = re.compile(r"^(?P<frame>#\d+ .*)$")


def detect_kind(line: str) -> LineKind:
    """
    Detect the structural kind of a log line.

    It should NEVER throw.
    """
    if not line or not line.strip():
        return LineKind.BLANK

    if BRACKETED_PREFIX.match(line):
        return LineKind.BRACKETED

    return LineKind.TEXT


def is_trace_intro(line: str) -> bool:
    return bool(TRACE_INTRO_RE.search(line.rstrip()))


def parse_frame(line: str) -> Optional[str]:
    """
    Return the frame text of a stack trace line, or None.

    The numbered grammar is tried first, then the hash grammar.
    """
    for pattern in (NUMBERED_FRAME_RE, HASH_FRAME_RE):
        m = pattern.match(line.strip())
        if m:
            return m.group("frame")
    return None
