"""
Redis stream naming for the message log.

One stream per (user, session); entry ids are derived from the append
timestamp so that a "messages since T" query is a single XRANGE.
"""
from uuid import UUID

from app.services.exceptions import InvalidIdentifier

# Sequence part of every entry id. Appends landing in the same millisecond
# on one stream collide and are rejected by Redis (see DuplicateEntry).
ENTRY_SEQUENCE = 0


def log_key(user_id: UUID, session_id: UUID) -> str:
    """
    Stream key for a (user, session) pair.

    Canonical UUID text is always 36 characters, so the pair can be split
    back at a fixed offset even though each half contains hyphens.
    """
    return f"{user_id}-{session_id}"


def entry_id(timestamp_ms: int) -> str:
    """Stream entry id for a message appended at timestamp_ms"""
    if timestamp_ms < 0:
        raise ValueError(f"timestamp must be non-negative, got {timestamp_ms}")
    return f"{timestamp_ms}-{ENTRY_SEQUENCE}"


def lower_bound_entry_id(timestamp_ms: int) -> str:
    """Inclusive XRANGE start for messages appended at or after timestamp_ms"""
    return entry_id(timestamp_ms)


def timestamp_from_entry_id(value: str) -> int:
    """
    Millisecond part of a stream entry id ("1700000000000-0" -> 1700000000000).

    Raises:
        ValueError: if value is not a "<ms>-<seq>" id
    """
    millis, sep, seq = value.partition("-")
    if not sep or not millis.isdigit() or not seq.isdigit():
        raise ValueError(f"Malformed stream entry id: {value!r}")
    return int(millis)


def parse_identifier(value: str, field: str) -> UUID:
    """
    Parse a caller-supplied userId/sessionId.

    Args:
        value: Textual UUID
        field: Name reported back to the caller on failure

    Raises:
        InvalidIdentifier: if value is not a UUID
    """
    try:
        return UUID(value)
    except (ValueError, TypeError, AttributeError):
        raise InvalidIdentifier(field, value) from None
