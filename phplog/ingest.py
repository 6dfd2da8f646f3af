from typing import Callable, List, Optional, Tuple

from .detect import detect_kind, LineKind
from .parsers import (
    parse_engine_line,
    parse_subject_line,
)
from .types import HeaderFields


HeaderParser = Callable[[str], Optional[HeaderFields]]

# Tried in order; the first grammar that matches wins.
# Supporting another producer means appending one parser here.
HEADER_GRAMMARS: List[Tuple[str, HeaderParser]] = [
    ("engine", parse_engine_line),
    ("subject", parse_subject_line),
]


def classify_line(line: str) -> Optional[HeaderFields]:
    """
    Classify a single raw log line.

    Pipeline:
      raw line
        → structural check (bracketed timestamp prefix)
          → header grammars, in priority order
            → HeaderFields

    Returns None for continuation lines. This function must:
      - never throw
      - be deterministic
    """
    text = (line or "").rstrip()

    if detect_kind(text) != LineKind.BRACKETED:
        return None

    for _name, parse in HEADER_GRAMMARS:
        fields = parse(text)
        if fields is not None:
            return fields

    return None
