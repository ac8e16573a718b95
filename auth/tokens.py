"""
auth/tokens.py -- JWT issuance/verification and password hashing.

Security design decisions:
  JWT: python-jose with HS256. Tokens carry {"user": {"id": <user id>}} plus
       iat and exp claims, and expire 24 hours after issuance by default.
       TokenService.verify() raises InvalidToken on any failure -- the auth
       dependency turns that into a 401.

  Passwords: bcrypt, used directly. Bcrypt is the right choice for
       low-entropy secrets (passwords) because its cost factor makes
       brute-force expensive, and gensalt() gives every hash its own salt.
       The _DUMMY_HASH constant enables timing equalization in the login flow
       so response time does not reveal whether an account exists.

  Secret: TokenService is constructed with the signing secret from
       core.config.Settings. The Settings validator guarantees the secret is
       present and at least 32 characters; this module never falls back to a
       built-in value.

Layer rule: no imports from api/ or tours/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from jose import JWTError, jwt

from auth.models import Identity

logger = logging.getLogger("collegetours.auth")

_ALGORITHM = "HS256"
_DEFAULT_EXPIRE_SECONDS = 24 * 60 * 60

# bcrypt refuses (5.x) or silently truncates (4.x) anything longer.
MAX_PASSWORD_BYTES = 72


class InvalidToken(Exception):
    """Raised when a token is malformed, tampered with, or expired."""


# ---------------------------------------------------------------------------
# Password hashing (bcrypt -- direct usage, no passlib wrapper)
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """Return a salted bcrypt hash of the given plaintext password.

    Raises ValueError for passwords over MAX_PASSWORD_BYTES once UTF-8
    encoded. The request models reject those with a 422 before they get here.
    """
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash."""
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Malformed stored hash, or a password over MAX_PASSWORD_BYTES.
        return False


# Computed once at module load so the first login attempt is not measurably
# slower than subsequent ones.
_DUMMY_HASH: str = hash_password("collegetours_timing_dummy")


def burn_password_check(plain: str) -> None:
    """Run one bcrypt comparison against a throwaway hash.

    Called when the login identifier matches no account, so an unknown user
    costs the same time as a wrong password.
    """
    verify_password(plain, _DUMMY_HASH)


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


class TokenService:
    """Issues and verifies signed, time-limited bearer tokens.

    Stateless: nothing is stored server-side, so verification only needs the
    same secret the token was signed with.

    Usage:
        tokens = TokenService(settings.secret_key, settings.token_expire_seconds)
        token = tokens.issue(user.id)
        identity = tokens.verify(token)   # raises InvalidToken
    """

    def __init__(self, secret_key: str, expire_seconds: int = _DEFAULT_EXPIRE_SECONDS) -> None:
        if not secret_key:
            raise ValueError("TokenService requires a signing secret.")
        self._secret_key = secret_key
        self.expire_seconds = expire_seconds

    def issue(self, user_id: str, issued_at: Optional[datetime] = None) -> str:
        """Encode a signed JWT for user_id, valid for expire_seconds.

        issued_at defaults to now. Passing an earlier time back-dates both the
        iat and exp claims, which is how the expiry behaviour is exercised.
        """
        iat = issued_at or datetime.now(timezone.utc)
        payload = {
            "user": {"id": user_id},
            "iat": iat,
            "exp": iat + timedelta(seconds=self.expire_seconds),
        }
        return jwt.encode(payload, self._secret_key, algorithm=_ALGORITHM)

    def verify(self, token: str) -> Identity:
        """Decode and verify a JWT. Returns the embedded Identity.

        Raises InvalidToken if the signature does not match, the token is
        malformed or expired, or it lacks the exp or user id claim.
        """
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[_ALGORITHM], options={"require_exp": True})
        except JWTError as exc:
            raise InvalidToken(str(exc)) from exc

        user = payload.get("user")
        user_id = user.get("id") if isinstance(user, dict) else None
        if not isinstance(user_id, str) or not user_id:
            raise InvalidToken("Token has no user id claim.")

        expires_at = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
        return Identity(id=user_id, expires_at=expires_at)
