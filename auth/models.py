"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors the approach
in tours/models.py -- dataclasses own domain shape; stores and routes do the
work.

Layer rule: no imports from api/ or tours/.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass
class User:
    """A registered account.

    username and email are both unique and both usable as the login
    identifier. hashed_password is a bcrypt hash and never leaves the server.
    id is None before the record is written to the database.
    """

    username: str
    email: str
    hashed_password: str
    id: str | None = None
    created_at: str | None = None


@dataclass(frozen=True)
class Identity:
    """The authenticated caller, as resolved from a verified bearer token.

    Only the user id travels inside the token. expires_at is None for the
    synthetic development identity, which never expires.
    """

    id: str
    expires_at: datetime | None = None
