from typing import Dict, List, Optional

from phplog.location import extract_location
from phplog.normalize import normalize_message, type_token
from phplog.types import HeaderFields, LogEntry


class TypeRegistry:
    def __init__(
        self,
        types: Optional[Dict[str, str]] = None,
        counts: Optional[Dict[str, int]] = None,
    ):
        # label -> token
        self.types: Dict[str, str] = dict(types or {})

        # label -> number of distinct entries
        self.counts: Dict[str, int] = dict(counts or {})

    def register(self, label: str) -> str:
        # Only called when an entry is created, so types and counts stay
        # keyed identically. A repeat under a different label adds nothing.
        token = type_token(label)
        self.types[label] = token
        self.counts[label] = self.counts.get(label, 0) + 1
        return token


class ErrorStore:
    def __init__(
        self,
        entries: Optional[Dict[str, LogEntry]] = None,
        registry: Optional[TypeRegistry] = None,
        read_snippets: bool = True,
    ):
        self.read_snippets = read_snippets

        # message -> entry, in order of first sighting
        self._entries: Dict[str, LogEntry] = dict(entries or {})

        self.registry = registry or TypeRegistry()

    # ---------- Write API ----------

    def observe(self, fields: HeaderFields) -> str:
        """
        Merge one header occurrence into the store.

        Returns the entry key so trailing trace/extra text can be
        attached to it by the caller.
        """
        key = normalize_message(fields.message)

        entry = self._entries.get(key)
        if entry is None:
            self._entries[key] = self._create_entry(key, fields)
        else:
            entry.hits += 1
            entry.first = min(entry.first, fields.timestamp)
            entry.last = max(entry.last, fields.timestamp)

        return key

    def _create_entry(self, key: str, fields: HeaderFields) -> LogEntry:
        entry = LogEntry(
            type=fields.type,
            first=fields.timestamp,
            last=fields.timestamp,
            message=key,
        )

        location = extract_location(key, with_snippet=self.read_snippets)
        if location:
            entry.path = location.path
            entry.line = location.line
            entry.core = location.core
            entry.snippet = location.snippet

        self.registry.register(fields.type)
        return entry

    def attach_trace(self, key: Optional[str], text: str):
        entry = self.get(key)
        if entry is not None and text:
            entry.trace = text

    def attach_extra(self, key: Optional[str], text: str):
        entry = self.get(key)
        if entry is not None and text:
            entry.extra = text

    # ---------- Read APIs ----------

    def get(self, key: Optional[str]) -> Optional[LogEntry]:
        if key is None:
            return None
        return self._entries.get(key)

    def entries(self) -> List[LogEntry]:
        return list(self._entries.values())

    def as_dict(self) -> Dict[str, LogEntry]:
        return dict(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
