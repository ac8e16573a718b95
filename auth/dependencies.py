"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

Two collaborators are built once per app from injected configuration and kept
on app.state:

  BearerAuth -- reads "Authorization: Bearer <token>", verifies it with the
                TokenService and returns the caller's Identity. Raises
                Unauthenticated (401) when the header is missing or the token
                does not verify. With dev_bypass on, a request carrying no
                token at all is given the synthetic "dev-user" identity; a bad
                token is still rejected.

  AdminGate  -- resolves the Identity to its stored User and checks the
                email against a fixed allow-list. Raises Forbidden (403) for
                anyone not on it.

get_current_user() and require_admin() are the route-facing dependencies.
They look the collaborators up on request.app.state, so route modules can
declare them at import time while the configuration arrives later through
api.main.create_app().

Layer rule: no imports from api/ or tours/.
  auth/dependencies.py may import from fastapi (for Depends/Request) because
  this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Optional

from fastapi import Depends, Request

from auth.models import Identity, User
from auth.store import UserStore
from auth.tokens import InvalidToken, TokenService
from core.errors import Forbidden, Unauthenticated

logger = logging.getLogger("collegetours.auth")

DEV_IDENTITY = Identity(id="dev-user")


def bearer_token(request: Request) -> Optional[str]:
    """Return the bearer token from the Authorization header, or None."""
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        token = auth_header[7:].strip()
        return token or None
    return None


class BearerAuth:
    """Verifies the bearer token on a request."""

    def __init__(self, tokens: TokenService, dev_bypass: bool = False) -> None:
        self.tokens = tokens
        self.dev_bypass = dev_bypass

    def authenticate(self, request: Request) -> Identity:
        token = bearer_token(request)
        if token is None:
            if self.dev_bypass:
                logger.warning("Auth bypassed in development mode for %s %s", request.method, request.url.path)
                return DEV_IDENTITY
            raise Unauthenticated()
        try:
            return self.tokens.verify(token)
        except InvalidToken as exc:
            logger.info("Token verification failed: %s", exc)
            raise Unauthenticated("Token is not valid") from exc


class AdminGate:
    """Allows only identities whose account email is on the admin allow-list."""

    def __init__(self, admin_emails: Iterable[str]) -> None:
        self.admin_emails = frozenset(admin_emails)

    def check(self, identity: Identity, user_store: UserStore) -> User:
        user = user_store.get_by_id(identity.id)
        if user is None or user.email not in self.admin_emails:
            logger.info("Admin gate refused identity %s", identity.id)
            raise Forbidden("Admin access required")
        return user


def get_current_user(request: Request) -> Identity:
    """Require authentication. Raises Unauthenticated (401) otherwise.

    Use as a FastAPI dependency:
        @router.post("/tours")
        def route(identity: Identity = Depends(get_current_user)): ...
    """
    bearer: BearerAuth = request.app.state.bearer_auth
    return bearer.authenticate(request)


def require_admin(request: Request, identity: Identity = Depends(get_current_user)) -> User:
    """Require an authenticated admin. 401 if unauthenticated, 403 if not on the allow-list.

    Use as a FastAPI dependency:
        @router.get("/auth/users")
        def route(admin: User = Depends(require_admin)): ...
    """
    gate: AdminGate = request.app.state.admin_gate
    return gate.check(identity, request.app.state.user_store)
