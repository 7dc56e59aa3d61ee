"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication and authorization.

The gate is a strict pipeline; the first failure short-circuits:
  1. get_current_identity() -- RequireToken. Reads "Authorization: Bearer <token>",
     verifies it, attaches the Identity to request.state.identity.
  2. require_superadmin()   -- RequireSuperadmin. Wraps get_current_identity()
     and rejects any role other than SUPERADMIN.
  3. require_club_access()  -- Tenant check for routes with a {club_id} path
     parameter. ensure_club_access() is the same check for handlers that learn
     the club from a stored record (e.g. /team/{member_id}).

The token is trusted as-is: no store lookup happens here, so a role or club
change only takes effect when the caller logs in again.

Layer rule: no imports from api/ or content/.
  auth/dependencies.py may import from fastapi (for Depends/Request) because
  this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

import logging

from fastapi import Depends, Request

from auth.errors import Forbidden, InvalidToken, Unauthenticated
from auth.models import Identity
from auth.tokens import decode_access_token

logger = logging.getLogger("clubsite.auth")


def extract_bearer_token(header: str | None) -> str:
    """Return the credential from an Authorization header value.

    Raises Unauthenticated when the header is absent or blank, and
    InvalidToken when it is present but not of the form "Bearer <token>".
    """
    if header is None or not header.strip():
        raise Unauthenticated()
    scheme, _, credentials = header.strip().partition(" ")
    credentials = credentials.strip()
    if scheme.lower() != "bearer" or not credentials or " " in credentials:
        raise InvalidToken()
    return credentials


def get_current_identity(request: Request) -> Identity:
    """Require a valid bearer token. Raises Unauthenticated or InvalidToken.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(identity: Identity = Depends(get_current_identity)): ...
    """
    token = extract_bearer_token(request.headers.get("Authorization"))
    identity = decode_access_token(token)
    request.state.identity = identity
    return identity


def _log_access_denied(request: Request, identity: Identity, reason: str, club_id: str | None = None) -> None:
    logger.warning(
        "Access denied (%s): user_id=%s role=%s scope=%s club_id=%s endpoint=%s %s",
        reason,
        identity.id,
        identity.role.value,
        identity.club_id,
        club_id,
        request.method,
        request.url.path,
    )


def require_superadmin(request: Request, identity: Identity = Depends(get_current_identity)) -> Identity:
    """Require the SUPERADMIN role. Raises Forbidden for any other role.

    Use as a FastAPI dependency:
        @router.post("/admins")
        def route(identity: Identity = Depends(require_superadmin)): ...
    """
    if not identity.is_superadmin:
        _log_access_denied(request, identity, "role_denied")
        raise Forbidden()
    return identity


def can_access_club(identity: Identity, club_id: str) -> bool:
    """Return True if identity may manage content under club_id.

    Superadmin scope matches every club. An admin matches only its own club,
    by exact string equality (no hierarchy, no prefix matching).
    """
    if identity.is_superadmin:
        return True
    return identity.club_id == club_id


def ensure_club_access(request: Request, identity: Identity, club_id: str) -> None:
    """Raise Forbidden unless can_access_club(identity, club_id)."""
    if not can_access_club(identity, club_id):
        _log_access_denied(request, identity, "club_mismatch", club_id)
        raise Forbidden()


def require_club_access(
    request: Request,
    club_id: str,
    identity: Identity = Depends(get_current_identity),
) -> Identity:
    """Require a token scoped to the {club_id} path parameter.

    Use as a FastAPI dependency on routes under /clubs/{club_id}/...
    """
    ensure_club_access(request, identity, club_id)
    return identity
