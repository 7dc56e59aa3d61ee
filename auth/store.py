"""
auth/store.py -- SQLAlchemy Core persistence layer for accounts.

Pattern: Repository + Data Mapper.
AccountStore is the repository; _row_to_account is the mapper.
Route and dependency code never touches SQL directly.

Tables:
  users        -- one row per login identity (superadmins and admins)
  club_admins  -- binds a regular admin to exactly one club.
                  user_id is UNIQUE and ON DELETE CASCADE, so deleting the
                  account removes its binding.

Security:
  All queries use bound parameters. No f-strings in SQL.

  delete_admin() carries the superadmin guard in its WHERE clause. A route
  that forgets to check the target still cannot delete a superadmin.

Consistency:
  create_admin() issues two single-statement writes (account, then binding)
  without a surrounding transaction. A crash between them leaves an orphaned
  admin with no club; login refuses such accounts rather than repairing them.

Layer rule: no imports from api/ or content/.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    Boolean,
    Column,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    false,
    select,
    text,
    true,
)
from sqlalchemy.engine import Engine

from auth.models import Account
from core.db import make_engine

_DEFAULT_DB_URL = "sqlite:///clubsite.db"

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("password_hash", String(255), nullable=False),
    Column("is_superadmin", Boolean, nullable=False, server_default=false()),
    Column("created_at", String(32), nullable=False),
)

_club_admins = Table(
    "club_admins",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "user_id",
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    ),
    Column("club_id", String(64), nullable=False),
    Column("role", String(30), nullable=False, server_default="ADMIN"),
)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class AccountStore:
    """Repository for Account entities and their club bindings.

    Usage:
        store = AccountStore()
        store.create_admin("coach@example.com", hash_password("secret"), club_id="robotics")
        account = store.get_by_email("coach@example.com")
        store.close()
    """

    def __init__(self, db_url: str = _DEFAULT_DB_URL, pool_size: int = 10, engine: Optional[Engine] = None) -> None:
        # A caller-supplied engine is shared and stays open on close().
        self._owns_engine = engine is None
        self.engine: Engine = engine if engine is not None else make_engine(db_url, pool_size)
        metadata.create_all(self.engine)

    def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def _select_accounts(self):
        return select(
            _users.c.id,
            _users.c.email,
            _users.c.password_hash,
            _users.c.is_superadmin,
            _users.c.created_at,
            _club_admins.c.club_id,
        ).select_from(_users.outerjoin(_club_admins, _club_admins.c.user_id == _users.c.id))

    def get_by_email(self, email: str) -> Account | None:
        """Look up an account by email (normalized to lower case). Returns None if not found."""
        query = self._select_accounts().where(_users.c.email == normalize_email(email))
        with self.engine.connect() as conn:
            row = conn.execute(query).fetchone()
        return _row_to_account(row) if row is not None else None

    def get_by_id(self, account_id: int) -> Account | None:
        """Look up an account by primary key. Returns None if not found."""
        query = self._select_accounts().where(_users.c.id == account_id)
        with self.engine.connect() as conn:
            row = conn.execute(query).fetchone()
        return _row_to_account(row) if row is not None else None

    def list_accounts(self) -> list[Account]:
        """Return every account with its club binding, superadmins first, then by email."""
        query = self._select_accounts().order_by(_users.c.is_superadmin.desc(), _users.c.email)
        with self.engine.connect() as conn:
            rows = conn.execute(query).fetchall()
        return [_row_to_account(r) for r in rows]

    def has_superadmin(self) -> bool:
        """Return True if at least one account has the superadmin flag set."""
        with self.engine.connect() as conn:
            row = conn.execute(select(_users.c.id).where(_users.c.is_superadmin == true()).limit(1)).fetchone()
        return row is not None

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_account(self, email: str, password_hash: str, is_superadmin: bool = False) -> int:
        """Insert a new account and return its assigned database ID.

        Raises sqlalchemy.exc.IntegrityError if the email already exists.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _users.insert().values(
                    email=normalize_email(email),
                    password_hash=password_hash,
                    is_superadmin=is_superadmin,
                    created_at=_now_iso(),
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def bind_club(self, account_id: int, club_id: str) -> None:
        """Write the club binding for a regular admin.

        Raises sqlalchemy.exc.IntegrityError if the account already has one.
        """
        with self.engine.connect() as conn:
            conn.execute(_club_admins.insert().values(user_id=account_id, club_id=club_id, role="ADMIN"))
            conn.commit()

    def create_admin(self, email: str, password_hash: str, club_id: str) -> int:
        """Create a regular admin account bound to club_id. Returns the account ID."""
        account_id = self.create_account(email, password_hash, is_superadmin=False)
        self.bind_club(account_id, club_id)
        return account_id

    def delete_admin(self, account_id: int) -> bool:
        """Delete a regular admin. Returns True if a row was deleted.

        Superadmin rows never match the WHERE clause, so this returns False for
        them exactly as for unknown ids. The club binding goes with the account
        via ON DELETE CASCADE.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _users.delete().where((_users.c.id == account_id) & (_users.c.is_superadmin == false()))
            )
            conn.commit()
        return result.rowcount > 0

    def close(self) -> None:
        if self._owns_engine:
            self.engine.dispose()


# ---------------------------------------------------------------------------
# Helpers and row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _row_to_account(row) -> Account:
    return Account(
        id=row.id,
        email=row.email,
        password_hash=row.password_hash,
        is_superadmin=bool(row.is_superadmin),
        club_id=row.club_id,
        created_at=row.created_at,
    )
