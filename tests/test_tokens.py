"""
tests/test_tokens.py -- Unit tests for password hashing, login and JWT handling.

Coverage:
  - bcrypt hashing: round trip, mismatch, malformed stored hash, 72-byte limit
  - authenticate_account: success, wrong password, unknown email, orphaned admin,
    case-insensitive email
  - create/decode: claims round trip for both scopes, expiry, no-expiry mode
  - identity_from_claims: every off-shape claim set is rejected
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from auth.errors import InvalidToken
from auth.models import ALL_CLUBS, Account, ClubScope, Identity, Role, SuperadminScope
from auth.tokens import (
    authenticate_account,
    create_access_token,
    decode_access_token,
    generate_temporary_password,
    hash_password,
    identity_from_claims,
    resolve_scope,
    verify_password,
)
from core.config import get_settings

_ROOT = Identity(id=1, email="root@example.com", scope=SuperadminScope())
_ADMIN = Identity(id=7, email="coach@example.com", scope=ClubScope("robotics"))


def _sign(claims: dict, key: str | None = None) -> str:
    return jwt.encode(claims, key or get_settings().secret_key, algorithm="HS256")


# ---------------------------------------------------------------------------
# Passwords
# ---------------------------------------------------------------------------


class TestPasswords:
    def test_hash_then_verify(self) -> None:
        hashed = hash_password("s3cret!")
        assert hashed.startswith("$2")
        assert verify_password("s3cret!", hashed)

    def test_wrong_password_is_false_not_error(self) -> None:
        assert verify_password("nope", hash_password("s3cret!")) is False

    def test_malformed_hash_is_false(self) -> None:
        assert verify_password("anything", "not-a-bcrypt-hash") is False

    def test_only_first_72_bytes_count(self) -> None:
        prefix = "a" * 72
        hashed = hash_password(prefix + "tail-one")
        assert verify_password(prefix + "different-tail", hashed)

    def test_hashes_are_salted(self) -> None:
        assert hash_password("same") != hash_password("same")

    def test_temporary_passwords_are_random(self) -> None:
        first, second = generate_temporary_password(), generate_temporary_password()
        assert first != second
        assert len(first) >= 16


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------


class TestAuthenticateAccount:
    def test_superadmin_gets_wildcard_scope(self, account_store) -> None:
        uid = account_store.create_account("root@example.com", hash_password("pw-root"), is_superadmin=True)
        identity = authenticate_account(account_store, "root@example.com", "pw-root")
        assert identity == Identity(id=uid, email="root@example.com", scope=SuperadminScope())
        assert identity.club_id == ALL_CLUBS

    def test_admin_gets_club_scope(self, account_store) -> None:
        uid = account_store.create_admin("coach@example.com", hash_password("pw-coach"), "robotics")
        identity = authenticate_account(account_store, "coach@example.com", "pw-coach")
        assert identity is not None
        assert identity.id == uid
        assert identity.role is Role.ADMIN
        assert identity.club_id == "robotics"

    def test_email_lookup_ignores_case(self, account_store) -> None:
        account_store.create_admin("coach@example.com", hash_password("pw-coach"), "robotics")
        assert authenticate_account(account_store, "Coach@Example.COM", "pw-coach") is not None

    def test_wrong_password(self, account_store) -> None:
        account_store.create_admin("coach@example.com", hash_password("pw-coach"), "robotics")
        assert authenticate_account(account_store, "coach@example.com", "wrong") is None

    def test_unknown_email(self, account_store) -> None:
        assert authenticate_account(account_store, "ghost@example.com", "whatever") is None

    def test_orphaned_admin_is_refused(self, account_store, caplog) -> None:
        uid = account_store.create_account("orphan@example.com", hash_password("pw-orphan"))
        with caplog.at_level(logging.WARNING, logger="clubsite.auth"):
            assert authenticate_account(account_store, "orphan@example.com", "pw-orphan") is None
        assert f"id={uid}" in caplog.text

    def test_resolve_scope_never_widens_an_orphan(self) -> None:
        orphan = Account(email="o@example.com", password_hash="x", is_superadmin=False, id=3, club_id=None)
        assert resolve_scope(orphan) is None


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------


class TestTokenRoundTrip:
    def test_superadmin_claims(self) -> None:
        token = create_access_token(_ROOT, expire_seconds=60)
        claims = jwt.get_unverified_claims(token)
        assert claims["sub"] == "1"
        assert claims["role"] == "SUPERADMIN"
        assert claims["club_id"] == "*"
        assert "iat" in claims and "exp" in claims
        assert decode_access_token(token) == _ROOT

    def test_admin_claims(self) -> None:
        token = create_access_token(_ADMIN, expire_seconds=60)
        assert decode_access_token(token) == _ADMIN

    def test_zero_lifetime_omits_exp(self) -> None:
        token = create_access_token(_ADMIN, expire_seconds=0)
        assert "exp" not in jwt.get_unverified_claims(token)
        assert decode_access_token(token) == _ADMIN

    def test_expired_token_rejected(self) -> None:
        past = datetime.now(timezone.utc) - timedelta(minutes=5)
        token = _sign(
            {"sub": "7", "email": "coach@example.com", "role": "ADMIN", "club_id": "robotics", "exp": past}
        )
        with pytest.raises(InvalidToken):
            decode_access_token(token)

    def test_wrong_signing_key_rejected(self) -> None:
        token = _sign(
            {"sub": "1", "email": "root@example.com", "role": "SUPERADMIN", "club_id": "*"},
            key="x" * 64,
        )
        with pytest.raises(InvalidToken):
            decode_access_token(token)

    def test_garbage_rejected(self) -> None:
        with pytest.raises(InvalidToken):
            decode_access_token("not.a.jwt")

    def test_tampered_payload_rejected(self) -> None:
        header, _payload, signature = create_access_token(_ADMIN, expire_seconds=60).split(".")
        forged_payload = create_access_token(_ROOT, expire_seconds=60).split(".")[1]
        with pytest.raises(InvalidToken):
            decode_access_token(f"{header}.{forged_payload}.{signature}")


class TestIdentityFromClaims:
    _BASE = {"sub": "7", "email": "coach@example.com", "role": "ADMIN", "club_id": "robotics"}

    def test_valid_admin_claims(self) -> None:
        assert identity_from_claims(dict(self._BASE)) == _ADMIN

    @pytest.mark.parametrize(
        "override",
        [
            {"sub": "abc"},
            {"sub": "0"},
            {"sub": "-3"},
            {"sub": 7},
            {"email": ""},
            {"club_id": ""},
            {"role": "OWNER"},
            {"club_id": "*"},
            {"role": "SUPERADMIN"},
        ],
    )
    def test_off_shape_claims_rejected(self, override: dict) -> None:
        with pytest.raises(InvalidToken):
            identity_from_claims({**self._BASE, **override})

    @pytest.mark.parametrize("missing", ["sub", "email", "role", "club_id"])
    def test_missing_claim_rejected(self, missing: str) -> None:
        claims = dict(self._BASE)
        del claims[missing]
        with pytest.raises(InvalidToken):
            identity_from_claims(claims)
