import re
from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dateutil import parser as dateutil_parser

from .normalize import normalize_label, normalize_message
from .types import HeaderFields


OJS_TYPE_LABEL = "ojs2 application"


# -----------------------------
# TIMESTAMPS
# -----------------------------

PHP_TIME_FORMAT = "%d-%b-%Y %H:%M:%S"
UTC_ZONE_NAMES = {"UTC", "GMT", "Z"}


def parse_timestamp(raw: str) -> Optional[int]:
    """
    Convert a bracketed log timestamp into epoch seconds.

    PHP writes:
      16-Oct-2026 10:15:02 UTC
      16-Oct-2026 12:15:02 Europe/Berlin

    Anything else is handed to dateutil. Naive values are taken as UTC.
    Returns None when nothing can make sense of it.
    """
    text = (raw or "").strip()
    if not text:
        return None

    stamp, _, zone = text.rpartition(" ")
    try:
        dt = datetime.strptime(stamp, PHP_TIME_FORMAT)
        tz = timezone.utc if zone.upper() in UTC_ZONE_NAMES else ZoneInfo(zone)
        return int(dt.replace(tzinfo=tz).timestamp())
    except (ValueError, ZoneInfoNotFoundError, OSError):
        # tz directory names such as "America" raise IsADirectoryError
        pass

    try:
        dt = dateutil_parser.parse(text)
    except (ValueError, OverflowError, TypeError):
        # dateutil raises ParserError (a ValueError) for plain garbage
        return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp())


# -----------------------------
# ENGINE GRAMMAR
# -----------------------------

ENGINE_LINE_RE = re.compile(
    r"""
    ^
    \[(?P<time>[^\]]*)\]\s
    (?P<marker>PHP|ojs2:\s)       # producer marker
    (?P<type>.*?):                # Warning / Fatal error / Parse error ...
    \s+
    (?P<msg>.*)
    $
    """,
    re.VERBOSE,
)


def parse_engine_line(line: str) -> Optional[HeaderFields]:
    """
    Parse lines like:
      [16-Oct-2026 10:15:02 UTC] PHP Warning:  Undefined variable $x in /var/www/a.php on line 3
      [16-Oct-2026 10:15:02 UTC] ojs2: Notice: cache miss
    """
    m = ENGINE_LINE_RE.match(line)
    if not m:
        return None

    timestamp = parse_timestamp(m.group("time"))
    if timestamp is None:
        return None

    label = m.group("type")
    if m.group("marker").startswith("ojs2"):
        label = OJS_TYPE_LABEL

    return HeaderFields(
        timestamp=timestamp,
        type=normalize_label(label),
        message=normalize_message(m.group("msg")),
        grammar="engine",
    )


# -----------------------------
# SUBJECT GRAMMAR
# -----------------------------

SUBJECT_LINE_RE = re.compile(
    r"""
    ^
    \[(?P<time>[^\]]*)\]\s
    (?P<type>
        (?P<subject>WordPress|ojs2|\w+\shas\sproduced)
        \s+\w+\s\w+               # "database error", "an error" ...
    )
    \s+
    (?P<msg>.*)
    $
    """,
    re.VERBOSE,
)


def parse_subject_line(line: str) -> Optional[HeaderFields]:
    """
    Parse lines like:
      [16-Oct-2026 10:15:02 UTC] WordPress database error Table 'wp_posts' doesn't exist
    """
    m = SUBJECT_LINE_RE.match(line)
    if not m:
        return None

    timestamp = parse_timestamp(m.group("time"))
    if timestamp is None:
        return None

    label = m.group("type")
    if m.group("subject") == "ojs2":
        label = OJS_TYPE_LABEL

    return HeaderFields(
        timestamp=timestamp,
        type=normalize_label(label),
        message=normalize_message(m.group("msg")),
        grammar="subject",
    )
