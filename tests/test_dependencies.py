"""
tests/test_dependencies.py -- Unit tests for the request gate and tenant checks.

The gate functions are plain callables, so they are exercised directly with a
Starlette Request built from a minimal ASGI scope. The HTTP mapping of the
same failures is covered by test_api_auth.py.
"""

from __future__ import annotations

import pytest
from starlette.requests import Request

from auth.dependencies import (
    can_access_club,
    ensure_club_access,
    extract_bearer_token,
    get_current_identity,
    require_club_access,
    require_superadmin,
)
from auth.errors import Forbidden, InvalidToken, Unauthenticated
from auth.models import ClubScope, Identity, SuperadminScope
from auth.tokens import create_access_token

_ROOT = Identity(id=1, email="root@example.com", scope=SuperadminScope())
_ROBOTICS = Identity(id=2, email="coach@example.com", scope=ClubScope("robotics"))


def _request(authorization: str | None = None, path: str = "/api/v1/anything") -> Request:
    headers = [] if authorization is None else [(b"authorization", authorization.encode("latin-1"))]
    return Request({"type": "http", "method": "POST", "path": path, "headers": headers, "query_string": b""})


class TestExtractBearerToken:
    @pytest.mark.parametrize("header", [None, "", "   "])
    def test_absent_header_is_unauthenticated(self, header) -> None:
        with pytest.raises(Unauthenticated):
            extract_bearer_token(header)

    @pytest.mark.parametrize("header", ["Basic dXNlcjpwdw==", "Bearer", "Bearer   ", "Bearer a b", "Token abc"])
    def test_malformed_header_is_invalid_token(self, header: str) -> None:
        with pytest.raises(InvalidToken):
            extract_bearer_token(header)

    def test_scheme_is_case_insensitive(self) -> None:
        assert extract_bearer_token("bearer abc.def.ghi") == "abc.def.ghi"
        assert extract_bearer_token("Bearer abc.def.ghi") == "abc.def.ghi"


class TestGetCurrentIdentity:
    def test_valid_token_attaches_identity(self) -> None:
        request = _request(f"Bearer {create_access_token(_ROBOTICS, expire_seconds=60)}")
        identity = get_current_identity(request)
        assert identity == _ROBOTICS
        assert request.state.identity == _ROBOTICS

    def test_missing_header(self) -> None:
        with pytest.raises(Unauthenticated):
            get_current_identity(_request())

    def test_bad_token(self) -> None:
        with pytest.raises(InvalidToken):
            get_current_identity(_request("Bearer not-a-token"))


class TestRequireSuperadmin:
    def test_superadmin_passes(self) -> None:
        assert require_superadmin(_request(), identity=_ROOT) is _ROOT

    def test_admin_is_forbidden(self, caplog) -> None:
        with pytest.raises(Forbidden):
            require_superadmin(_request(path="/api/v1/admins"), identity=_ROBOTICS)
        assert "role_denied" in caplog.text
        assert "/api/v1/admins" in caplog.text


class TestClubAccess:
    def test_superadmin_reaches_every_club(self) -> None:
        assert can_access_club(_ROOT, "robotics")
        assert can_access_club(_ROOT, "chess")

    def test_admin_reaches_only_its_club(self) -> None:
        assert can_access_club(_ROBOTICS, "robotics")
        assert not can_access_club(_ROBOTICS, "chess")

    def test_match_is_exact(self) -> None:
        assert not can_access_club(_ROBOTICS, "Robotics")
        assert not can_access_club(_ROBOTICS, "robotics-juniors")
        assert not can_access_club(_ROBOTICS, "*")

    def test_ensure_club_access_logs_and_raises(self, caplog) -> None:
        with pytest.raises(Forbidden):
            ensure_club_access(_request(), _ROBOTICS, "chess")
        assert "club_mismatch" in caplog.text

    def test_require_club_access_returns_identity(self) -> None:
        assert require_club_access(_request(), "robotics", identity=_ROBOTICS) is _ROBOTICS
        with pytest.raises(Forbidden):
            require_club_access(_request(), "chess", identity=_ROBOTICS)


class TestScopeModel:
    def test_club_scope_rejects_wildcard_and_empty(self) -> None:
        with pytest.raises(ValueError):
            ClubScope("*")
        with pytest.raises(ValueError):
            ClubScope("")

    def test_derived_role_and_club(self) -> None:
        assert _ROOT.role.value == "SUPERADMIN"
        assert _ROOT.club_id == "*"
        assert _ROBOTICS.role.value == "ADMIN"
        assert _ROBOTICS.club_id == "robotics"
        assert not _ROBOTICS.is_superadmin
