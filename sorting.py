import re
from typing import Any, Iterable, List, Sequence, Tuple


ASC = "asc"
DESC = "desc"

SortKey = Tuple[str, str]  # (field path, direction)

DEFAULT_SORT: List[SortKey] = [("last", DESC)]

DIGIT_RUN_RE = re.compile(r"(\d+)")


def project(item: Any, field_path: str) -> Any:
    """
    Resolve a dotted field path ("a.b.c") against attributes or mapping keys.

    Missing fields resolve to None.
    """
    node = item
    for part in field_path.split("."):
        if node is None:
            return None
        if isinstance(node, dict):
            node = node.get(part)
        else:
            node = getattr(node, part, None)
    return node


def natural_key(value: Any) -> List[Any]:
    """
    Case-insensitive, numeric-aware ordering key.

    "2" < "10", "file9" < "File10". None sorts like "".
    """
    text = "" if value is None else str(value).casefold()
    parts = DIGIT_RUN_RE.split(text)

    # split() puts digit runs at odd indexes, so positions line up
    # between any two keys and int/str are never compared.
    return [int(p) if i % 2 else p for i, p in enumerate(parts)]


def sort_entries(items: Iterable[Any], keys: Sequence[SortKey] = DEFAULT_SORT) -> List[Any]:
    """
    Stable multi-key sort.

    Keys are applied by precedence; items that tie on every key keep their
    original relative order.
    """
    ordered = list(items)

    # Python's sort is stable (also with reverse=True), so sorting by the
    # least significant key first yields the combined ordering.
    for field_path, direction in reversed(list(keys)):
        ordered.sort(
            key=lambda item: natural_key(project(item, field_path)),
            reverse=direction == DESC,
        )

    return ordered


def parse_sort_keys(spec: str) -> List[SortKey]:
    """
    Parse "hits:desc,type" into [("hits", "desc"), ("type", "asc")].
    """
    keys: List[SortKey] = []

    for chunk in (spec or "").split(","):
        chunk = chunk.strip()
        if not chunk:
            continue

        field_path, _, direction = chunk.partition(":")
        field_path = field_path.strip()
        direction = (direction.strip() or ASC).lower()

        if not field_path:
            raise ValueError(f"missing field name in sort key {chunk!r}")
        if direction not in (ASC, DESC):
            raise ValueError(f"unknown sort direction {direction!r}")

        keys.append((field_path, direction))

    if not keys:
        raise ValueError("empty sort specification")

    return keys
