"""
api/routes/v1/auth.py -- Login and identity endpoints.

Routes:
  POST /api/v1/auth/login  -- email/password login; returns identity + bearer token
  GET  /api/v1/auth/me     -- identity asserted by the caller's token (requires auth)

Security:
  POST /login is rate-limited per client IP (Settings.login_rate_limit).
  authenticate_account() provides timing equalization -- use it, never inline
  get_by_email() + verify_password().
  Unknown email, wrong password and orphaned admin all produce the same
  400 invalid_credentials body.
  Cache-Control: no-store on login responses (they carry a credential).
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.limiter import limiter
from api.models import IdentityResponse, LoginRequest, LoginResponse
from auth.dependencies import get_current_identity
from auth.errors import InvalidCredentials
from auth.models import Identity
from auth.store import AccountStore
from auth.tokens import authenticate_account, create_access_token, token_lifetime
from core.config import get_settings

logger = logging.getLogger("clubsite.api")

# Auth policy:
# - POST /api/v1/auth/login: public -- login endpoint must be unauthenticated
# - GET  /api/v1/auth/me:    requires auth (get_current_identity)
router = APIRouter()


@limiter.limit(get_settings().login_rate_limit)  # must be ABOVE @router to preserve FastAPI introspection
@router.post("/auth/login", response_model=LoginResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with email and password; return the identity and a bearer token.

    The role in the token comes from the account's superadmin flag at this
    moment and is not re-checked until the next login.
    """
    store: AccountStore = request.app.state.account_store
    identity = authenticate_account(store, body.email, body.password)
    if identity is None:
        raise InvalidCredentials()

    lifetime = token_lifetime()
    token = create_access_token(identity)
    logger.info("Login succeeded for user_id=%s role=%s", identity.id, identity.role.value)
    resp = JSONResponse(
        status_code=200,
        content=LoginResponse(
            user=IdentityResponse.from_identity(identity),
            token=token,
            token_type="bearer",  # noqa: S106 # nosec B106 -- OAuth token type, not a password
            expires_in=lifetime or None,
        ).model_dump(mode="json"),
    )
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.get("/auth/me", response_model=IdentityResponse)
def me(identity: Identity = Depends(get_current_identity)) -> IdentityResponse:
    """Return the identity asserted by the caller's token."""
    return IdentityResponse.from_identity(identity)
