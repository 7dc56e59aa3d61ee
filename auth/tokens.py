"""
auth/tokens.py -- JWT, password hashing, and login utilities.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with SECRET_KEY and carry
       sub (account id), email, role, club_id, iat and, unless disabled, exp.
       They are never stored server-side: a token is valid iff its signature
       verifies, it has not expired and its claims have the expected shape.
       There is no revocation list; the expiry bounds the exposure window.
       TOKEN_EXPIRE_SECONDS=0 omits exp entirely (tokens never expire).

  Passwords: bcrypt used directly, cost factor from Settings.bcrypt_rounds
       (default 10). Input is truncated to bcrypt's 72-byte limit before
       hashing and checking, so over-long passwords never raise. The
       _DUMMY_HASH constant enables timing equalization in
       authenticate_account() so response time does not reveal whether an
       email exists.

  Temporary passwords: secrets.token_urlsafe(), returned once to the
       superadmin who provisioned the admin. Never a shared default.

Layer rule: no imports from api/ or content/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Optional

import bcrypt
from jose import JWTError, jwt

from auth.errors import InvalidToken
from auth.models import ALL_CLUBS, Account, ClubScope, Identity, Role, Scope, SuperadminScope
from core.config import get_settings

if TYPE_CHECKING:
    from auth.store import AccountStore

logger = logging.getLogger("clubsite.auth")

# ---------------------------------------------------------------------------
# Config -- read once at module load via the lru_cache singleton
# ---------------------------------------------------------------------------

_settings = get_settings()

_ALGORITHM = "HS256"

_BCRYPT_MAX_BYTES = 72

# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------


def _password_bytes(plain: str) -> bytes:
    return plain.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(plain: str, rounds: Optional[int] = None) -> str:
    """Return a bcrypt hash of the given plaintext password."""
    salt = bcrypt.gensalt(rounds=rounds or _settings.bcrypt_rounds)
    return bcrypt.hashpw(_password_bytes(plain), salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    A mismatch is not an error. A malformed stored hash also yields False.
    """
    try:
        return bcrypt.checkpw(_password_bytes(plain), hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def generate_temporary_password(length: Optional[int] = None) -> str:
    """Return a random URL-safe password for a freshly provisioned admin."""
    return secrets.token_urlsafe(length or _settings.temp_password_length)


# Timing equalization dummy hash. Computed once at module load so the first
# login attempt is not measurably slower than subsequent ones.
_DUMMY_HASH: str = hash_password("clubsite_timing_dummy")


# ---------------------------------------------------------------------------
# Login (constant-time)
# ---------------------------------------------------------------------------


def resolve_scope(account: Account) -> Scope | None:
    """Derive the token scope from the stored flag and club binding.

    Returns None for an orphaned admin (no club binding). Such an account
    must not be granted any scope, least of all the wildcard.
    """
    if account.is_superadmin:
        return SuperadminScope()
    if account.club_id:
        return ClubScope(account.club_id)
    return None


def authenticate_account(store: AccountStore, email: str, password: str) -> Identity | None:
    """Authenticate an email/password login with timing equalization.

    Always runs bcrypt whether or not the account exists:
    - Unknown email: bcrypt runs against _DUMMY_HASH (same cost as real check)
    - Wrong password: bcrypt runs against the real hash (same cost)

    Returns the Identity to embed in the token on success, None on any failure.
    """
    account = store.get_by_email(email)
    if account is None:
        verify_password(password, _DUMMY_HASH)
        return None
    if not verify_password(password, account.password_hash):
        return None
    scope = resolve_scope(account)
    if scope is None:
        logger.warning("Login refused for admin id=%s: no club binding", account.id)
        return None
    return Identity(id=account.id, email=account.email, scope=scope)


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


def token_lifetime(expire_seconds: Optional[int] = None) -> int:
    """Return the token lifetime in seconds; 0 means no expiry."""
    return _settings.token_expire_seconds if expire_seconds is None else expire_seconds


def create_access_token(identity: Identity, expire_seconds: Optional[int] = None) -> str:
    """Encode a signed JWT asserting identity, role and club scope.

    Args:
        identity:       The authenticated caller.
        expire_seconds: Token lifetime. None uses Settings.token_expire_seconds;
                        0 issues a token without an exp claim.
    """
    now = datetime.now(timezone.utc)
    payload: dict = {
        "sub": str(identity.id),
        "email": identity.email,
        "role": identity.role.value,
        "club_id": identity.club_id,
        "iat": now,
    }
    duration = token_lifetime(expire_seconds)
    if duration > 0:
        payload["exp"] = now + timedelta(seconds=duration)
    return jwt.encode(payload, _settings.secret_key, algorithm=_ALGORITHM)


def decode_access_token(token: str) -> Identity:
    """Verify a JWT and return the Identity it asserts.

    Raises InvalidToken when the signature does not verify, the token has
    expired, or the claims cannot be decoded into an Identity.
    """
    try:
        payload = jwt.decode(token, _settings.secret_key, algorithms=[_ALGORITHM])
    except JWTError as exc:
        raise InvalidToken() from exc
    return identity_from_claims(payload)


def identity_from_claims(payload: dict) -> Identity:
    """Build an Identity from decoded claims, rejecting anything off-shape.

    SUPERADMIN must carry the wildcard club id; ADMIN must carry a concrete
    one. Any other combination is a forged or corrupted token.
    """
    sub = payload.get("sub")
    email = payload.get("email")
    club_id = payload.get("club_id")
    if not isinstance(sub, str) or not sub.isdecimal() or int(sub) <= 0:
        raise InvalidToken()
    if not isinstance(email, str) or not email:
        raise InvalidToken()
    if not isinstance(club_id, str) or not club_id:
        raise InvalidToken()
    try:
        role = Role(payload.get("role"))
    except ValueError as exc:
        raise InvalidToken() from exc

    if role is Role.SUPERADMIN:
        if club_id != ALL_CLUBS:
            raise InvalidToken()
        scope: Scope = SuperadminScope()
    else:
        if club_id == ALL_CLUBS:
            raise InvalidToken()
        scope = ClubScope(club_id)
    return Identity(id=int(sub), email=email, scope=scope)
