"""
core/ids.py -- Document identifiers.

Every stored document (users, tours, courses, events) is keyed by a 24-char
lowercase hex "object id": 8 hex chars of creation time in seconds followed by
16 random hex chars. The time prefix makes ids roughly creation-ordered; the
random suffix makes collisions practically impossible.

Path parameters are checked with is_valid_object_id() before they reach a
store query, so a malformed id is reported as such rather than as a miss.
"""

import re
import secrets
import time

_OBJECT_ID_RE = re.compile(r"[0-9a-f]{24}")


def new_object_id() -> str:
    """Return a fresh object id."""
    return f"{int(time.time()) & 0xFFFFFFFF:08x}{secrets.token_hex(8)}"


def is_valid_object_id(value: object) -> bool:
    """Return True if value is a well-formed object id."""
    return isinstance(value, str) and _OBJECT_ID_RE.fullmatch(value) is not None
