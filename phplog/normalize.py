import re


# Anything outside a-z is dropped from a type token.
# "fatal error" -> "fatalerror", "ojs2 application" -> "ojsapplication"
TOKEN_STRIP_RE = re.compile(r"[^a-z]")


def normalize_label(label: str) -> str:
    """Raw type label as displayed and counted: trimmed, lower-cased."""
    return (label or "").strip().lower()


def normalize_message(message: str) -> str:
    """
    Dedup key of a message.

    Only surrounding whitespace is removed; two messages that differ
    anywhere else are different entries.
    """
    return (message or "").strip()


def type_token(label: str) -> str:
    """
    Collapse a type label into a stable, display-safe token.

    This function must be:
    - deterministic
    - lossy (distinct labels may share a token)
    - side-effect free

    It should NEVER throw.
    """
    if not label:
        return ""

    return TOKEN_STRIP_RE.sub("", label.lower())
