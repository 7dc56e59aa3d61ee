"""
tests/conftest.py -- Shared test fixtures for ClubSite tests.

This module provides:
  - _make_test_stores(): creates an isolated in-memory DB for accounts + content
  - _patch_lifespan(): wires test stores into app.state, bypassing real startup
  - api_client: TestClient plus superadmin and club-admin JWTs
  - account_store / content_store: fresh stores for unit tests

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker thread.
The named URI format (file:name?mode=memory&cache=shared&uri=true) shares
one in-memory instance across all connections in the same process.

Environment must be set before any api/auth/core import: get_settings() is
cached on first call and several modules read it at import time.
"""

from __future__ import annotations

import os
import tempfile
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: DEBUG lets Settings auto-generate SECRET_KEY instead of raising.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOGIN_RATE_LIMIT", "1000/minute")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="clubsite-uploads-"))

import pytest
from fastapi.testclient import TestClient

from asgi import app
from auth.models import ClubScope, Identity, SuperadminScope
from auth.store import AccountStore
from auth.tokens import create_access_token, hash_password
from content.files import UploadStorage
from content.store import ContentStore
from core.config import get_settings

SUPERADMIN_EMAIL = "root@example.com"
SUPERADMIN_PASSWORD = "root-pass-123"
ADMIN_EMAIL = "coach@example.com"
ADMIN_PASSWORD = "coach-pass-123"
ADMIN_CLUB = "robotics"

# Kept small so the 413 path can be exercised without large payloads.
TEST_MAX_UPLOAD_BYTES = 64 * 1024


# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _memory_url(db_suffix: str) -> str:
    return f"sqlite:///file:test_clubsite_{db_suffix}?mode=memory&cache=shared&uri=true"


def _make_test_stores(db_suffix: str) -> tuple[AccountStore, ContentStore]:
    """Create both stores over one named shared-memory SQLite database.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state.
    """
    url = _memory_url(db_suffix)
    return AccountStore(db_url=url), ContentStore(db_url=url)


def _patch_lifespan(account_store: AccountStore, content_store: ContentStore):
    """Return an async context manager that replaces the real lifespan.

    Skips the superadmin bootstrap: fixtures seed their own accounts.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.account_store = account_store
        app.state.content_store = content_store
        app.state.uploads = UploadStorage(get_settings().upload_dir, TEST_MAX_UPLOAD_BYTES)
        yield

    return test_lifespan


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


# ---------------------------------------------------------------------------
# Module-scoped fixtures -- one TestClient per test module for speed
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client(request) -> Generator[tuple[TestClient, str, str], None, None]:
    """Yield (client, superadmin_token, admin_token) for API integration tests.

    The TestClient uses the real app (including the /uploads mount) with a
    patched lifespan, so tests hit real route handlers against an isolated
    in-memory database. Seeded accounts:
      - SUPERADMIN_EMAIL / SUPERADMIN_PASSWORD  (superadmin)
      - ADMIN_EMAIL / ADMIN_PASSWORD            (admin of ADMIN_CLUB)
    """
    account_store, content_store = _make_test_stores(request.module.__name__.rsplit(".", 1)[-1])

    root_id = account_store.create_account(
        SUPERADMIN_EMAIL, hash_password(SUPERADMIN_PASSWORD), is_superadmin=True
    )
    admin_id = account_store.create_admin(ADMIN_EMAIL, hash_password(ADMIN_PASSWORD), ADMIN_CLUB)

    root_token = create_access_token(Identity(root_id, SUPERADMIN_EMAIL, SuperadminScope()), expire_seconds=3600)
    admin_token = create_access_token(Identity(admin_id, ADMIN_EMAIL, ClubScope(ADMIN_CLUB)), expire_seconds=3600)

    app.router.lifespan_context = _patch_lifespan(account_store, content_store)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, root_token, admin_token

    content_store.close()
    account_store.close()


# ---------------------------------------------------------------------------
# Function-scoped store fixtures for unit tests
# ---------------------------------------------------------------------------


@pytest.fixture
def account_store() -> Generator[AccountStore, None, None]:
    store = AccountStore(db_url=_memory_url(f"accounts_{uuid.uuid4().hex}"))
    yield store
    store.close()


@pytest.fixture
def content_store() -> Generator[ContentStore, None, None]:
    store = ContentStore(db_url=_memory_url(f"content_{uuid.uuid4().hex}"))
    yield store
    store.close()
