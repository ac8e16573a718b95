"""
api/routes/auth.py -- Registration, login and identity endpoints.

Routes:
  POST /api/auth/register   -- create an account; returns a bearer token
  POST /api/auth/login      -- email-or-username login; returns token + user
  GET  /api/auth/me         -- current user (requires auth)
  GET  /api/auth/users      -- list accounts (requires admin)
  GET  /api/check-auth      -- token introspection for the front end

Security:
  POST /register and POST /login are rate-limited per client IP.
  Login failures share one message whether the account is unknown or the
  password is wrong (auth.credentials.login).
  Cache-Control: no-store on every response that carries a token.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.limiter import limiter
from api.models import (
    CheckAuthResponse,
    ErrorResponse,
    IdentityClaim,
    LoginRequest,
    LoginResponse,
    PublicUser,
    RegisterRequest,
    TokenResponse,
)
from auth import credentials
from auth.dependencies import BearerAuth, bearer_token, get_current_user, require_admin
from auth.models import Identity, User
from auth.store import UserStore
from auth.tokens import InvalidToken, TokenService
from core.errors import NotFound

# Auth policy:
# - POST /api/auth/register: public -- rate limited
# - POST /api/auth/login:    public -- rate limited
# - GET  /api/auth/me:       requires auth (get_current_user)
# - GET  /api/auth/users:    requires admin (require_admin)
# - GET  /api/check-auth:    public -- reports on whatever token it is given
router = APIRouter()


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------


@limiter.limit("10/minute")  # must be ABOVE @router to preserve FastAPI introspection
@router.post("/auth/register", response_model=TokenResponse)
def register(request: Request, body: RegisterRequest) -> JSONResponse:
    """Create an account and return a token for it.

    409 if the email or username is already registered.
    """
    user_store: UserStore = request.app.state.user_store
    tokens: TokenService = request.app.state.tokens
    _user, token = credentials.register(user_store, tokens, body.username, body.email, body.password)
    resp = JSONResponse(content=TokenResponse(token=token).model_dump())
    resp.headers["Cache-Control"] = "no-store"
    return resp


@limiter.limit("10/minute")
@router.post("/auth/login", response_model=LoginResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with email or username plus password.

    The email is tried first, then the username. 400 invalid_credentials on
    any mismatch.
    """
    user_store: UserStore = request.app.state.user_store
    tokens: TokenService = request.app.state.tokens
    user, token = credentials.login(user_store, tokens, body.password, email=body.email, username=body.username)
    resp = JSONResponse(content=LoginResponse(token=token, user=PublicUser.from_user(user)).model_dump())
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.get("/check-auth", response_model=CheckAuthResponse, responses={401: {"model": ErrorResponse}})
def check_auth(request: Request) -> JSONResponse:
    """Report whether the request's bearer token is valid and when it expires.

    Never substitutes the development identity: this endpoint describes the
    token actually presented.
    """
    token = bearer_token(request)
    if token is None:
        return JSONResponse(status_code=401, content={"authenticated": False, "message": "No token provided"})

    bearer: BearerAuth = request.app.state.bearer_auth
    try:
        identity = bearer.tokens.verify(token)
    except InvalidToken:
        return JSONResponse(status_code=401, content={"authenticated": False, "message": "Invalid or expired token"})

    body = CheckAuthResponse(authenticated=True, user=IdentityClaim(id=identity.id), expires=identity.expires_at)
    return JSONResponse(content=body.model_dump(mode="json"))


# ---------------------------------------------------------------------------
# Authenticated endpoints
# ---------------------------------------------------------------------------


@router.get("/auth/me", response_model=PublicUser)
def me(request: Request, identity: Identity = Depends(get_current_user)) -> PublicUser:
    """Return the account behind the current token."""
    user_store: UserStore = request.app.state.user_store
    user = user_store.get_by_id(identity.id)
    if user is None:
        raise NotFound("User not found")
    return PublicUser.from_user(user)


@router.get("/auth/users", response_model=list[PublicUser])
def list_users(request: Request, admin: User = Depends(require_admin)) -> list[PublicUser]:
    """List all accounts. Admin allow-list only."""
    user_store: UserStore = request.app.state.user_store
    return [PublicUser.from_user(u) for u in user_store.list_users()]
