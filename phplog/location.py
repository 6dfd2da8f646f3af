import re
from dataclasses import dataclass
from itertools import islice
from typing import Optional


# " in /var/www/app.php on line 42" or " in /var/www/app.php:42", anchored at the end
LOCATION_RE = re.compile(
    r"(?P<clause> in (?P<path>(?:zend\.view://)?/[^ :]*)(?: on line |:)(?P<line>\d+))$"
)

VIRTUAL_PATH_PREFIXES = ("zend.view://",)

SNIPPET_OFFSET = 4
SNIPPET_LINES = 7
NEWLINE_CHARS = "\r\n"


@dataclass(frozen=True)
class SourceLocation:
    path: str
    line: int
    core: str
    snippet: str = ""


def real_path(path: str) -> str:
    for prefix in VIRTUAL_PATH_PREFIXES:
        if path.startswith(prefix):
            return path[len(prefix):]
    return path


def read_snippet(path: str, line: int) -> str:
    """
    Read a small window of source around `line`.

    Each line is prefixed with its 1-based number:
      39. $a = 1;
      40. $b = 2;
      ...

    Best-effort: anything that goes wrong yields "".
    """
    start = max(line - SNIPPET_OFFSET, 0)
    try:
        with open(real_path(path), encoding="utf-8", errors="replace") as f:
            window = list(islice(f, start, start + SNIPPET_LINES))
    except (OSError, ValueError):
        return ""

    return "\n".join(
        f"{start + i + 1}. {text.rstrip(NEWLINE_CHARS)}"
        for i, text in enumerate(window)
    )


def extract_location(message: str, with_snippet: bool = True) -> Optional[SourceLocation]:
    """
    Split a trailing "in <path> on line <n>" clause off a message.

    Returns None when the message carries no location.
    """
    m = LOCATION_RE.search(message or "")
    if not m:
        return None

    path = m.group("path")
    line = int(m.group("line"))

    return SourceLocation(
        path=path,
        line=line,
        core=message[: m.start("clause")],
        snippet=read_snippet(path, line) if with_snippet else "",
    )
