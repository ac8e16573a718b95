"""
auth/credentials.py -- Registration and login.

Both operations validate before they act: registration checks email and
username availability before hashing or writing anything, and login never
reveals which half of the credential pair was wrong.

Timing equalization:
  login() always runs bcrypt whether or not the identifier matches an
  account. An unknown identifier is checked against a dummy hash, so response
  time does not leak account existence any more than the message does.

Layer rule: no imports from api/ or tours/.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError

from auth.models import User
from auth.store import UserStore
from auth.tokens import TokenService, burn_password_check, hash_password, verify_password
from core.errors import Conflict, InvalidCredentials

logger = logging.getLogger("collegetours.auth")


def register(store: UserStore, tokens: TokenService, username: str, email: str, password: str) -> tuple[User, str]:
    """Create an account and return (user, token) for it.

    Raises Conflict if the email or the username is already registered; no
    record is created in that case.
    """
    if store.get_by_email(email) is not None:
        raise Conflict("User with this email already exists")
    if store.get_by_username(username) is not None:
        raise Conflict("Username is already taken")

    user = User(username=username, email=email, hashed_password=hash_password(password))
    try:
        user.id = store.create_user(user)
    except IntegrityError as exc:
        # A concurrent registration claimed the name between check and insert.
        raise Conflict("User with this email or username already exists") from exc

    logger.info("Registered user %s (%s)", user.id, username)
    return user, tokens.issue(user.id)


def login(
    store: UserStore,
    tokens: TokenService,
    password: str,
    email: Optional[str] = None,
    username: Optional[str] = None,
) -> tuple[User, str]:
    """Authenticate by email or username and return (user, token).

    The email lookup is tried first, then the username lookup. Every failure
    raises the same InvalidCredentials error.
    """
    user: Optional[User] = None
    if email:
        user = store.get_by_email(email)
    if user is None and username:
        user = store.get_by_username(username)

    if user is None:
        burn_password_check(password)
        logger.info("Login failed: unknown identifier")
        raise InvalidCredentials()
    if not verify_password(password, user.hashed_password):
        logger.info("Login failed: bad password for user %s", user.id)
        raise InvalidCredentials()

    return user, tokens.issue(user.id)
