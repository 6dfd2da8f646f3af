from typing import Iterable, Optional, Protocol

from .detect import is_trace_intro, parse_frame
from .ingest import classify_line
from .types import HeaderFields, ScanMode, ScanState


# ---------- Store Interface ----------

class EntrySink(Protocol):
    def observe(self, fields: HeaderFields) -> str:
        ...

    def attach_trace(self, key: Optional[str], text: str):
        ...

    def attach_extra(self, key: Optional[str], text: str):
        ...


# ---------- State machine ----------

def flush(state: ScanState, store: EntrySink):
    """Attach the run captured so far to the active entry."""
    if not state.buffer:
        return

    text = "\n".join(state.buffer)
    if state.mode == ScanMode.IN_TRACE:
        store.attach_trace(state.active, text)
    elif state.mode == ScanMode.IN_EXTRA:
        store.attach_extra(state.active, text)


def advance(state: ScanState, line: str, store: EntrySink) -> ScanState:
    """
    Feed one line to the capturer and return the next state.

    Header lines open a new record and become the active entry.
    Continuation lines are captured as a stack trace (when the run
    starts with a "stack trace:" line) or as additional text for the
    active entry. Text seen before any header is dropped. A blank line
    ends a stack trace and is kept as part of additional text.

    Captured runs are attached when they end; call flush() after the
    last line.
    """
    text = line.rstrip("\r\n")
    if state.active is None and not text.strip():
        return state

    if state.mode == ScanMode.IN_TRACE:
        frame = parse_frame(text)
        if frame is not None:
            state.buffer.append(frame)
            return state

        if is_trace_intro(text) and classify_line(text) is None:
            return state

        # The trace is over; whatever follows is extra text or a new record.
        flush(state, store)
        state = ScanState(ScanMode.IN_EXTRA, state.active, [])

    fields = classify_line(text)
    if fields is not None:
        flush(state, store)
        key = store.observe(fields)
        mode = ScanMode.IN_TRACE if is_trace_intro(text) else ScanMode.SCANNING
        return ScanState(mode, key, [])

    if state.mode == ScanMode.SCANNING and is_trace_intro(text):
        return ScanState(ScanMode.IN_TRACE, state.active, [])

    if state.active is None:
        return ScanState(ScanMode.IN_EXTRA, None, [])

    if state.mode != ScanMode.IN_EXTRA:
        state = ScanState(ScanMode.IN_EXTRA, state.active, [])

    state.buffer.append(text)
    return state


def scan(
    lines: Iterable[str],
    store: EntrySink,
    state: Optional[ScanState] = None,
) -> ScanState:
    """
    Run the capturer over a sequence of lines.

    The returned state can be handed back in to continue a later scan
    exactly where this one stopped.
    """
    state = state or ScanState()
    for line in lines:
        state = advance(state, line, store)

    flush(state, store)
    return state
