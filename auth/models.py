"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, near-zero logic). Stores and routes
do the work; these classes own the domain shape.

Role and club scope are a single tagged variant (SuperadminScope | ClubScope)
rather than an is_superadmin flag plus a nullable club id. An admin identity
without a club therefore cannot be built: the orphaned-admin case is handled
at login (auth.tokens.resolve_scope) instead of leaking into tokens.

Layer rule: no imports from api/, core/, or content/.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

# Club id used on the wire for "every club". Never a valid club id itself.
ALL_CLUBS = "*"


class Role(str, Enum):
    ADMIN = "ADMIN"
    SUPERADMIN = "SUPERADMIN"


@dataclass(frozen=True)
class SuperadminScope:
    """Unrestricted scope: every club, plus admin management."""

    @property
    def role(self) -> Role:
        return Role.SUPERADMIN

    @property
    def club_id(self) -> str:
        return ALL_CLUBS


@dataclass(frozen=True)
class ClubScope:
    """A regular admin bound to exactly one club."""

    club_id: str

    def __post_init__(self) -> None:
        if not self.club_id or self.club_id == ALL_CLUBS:
            raise ValueError("ClubScope requires a concrete club id")

    @property
    def role(self) -> Role:
        return Role.ADMIN


Scope = Union[SuperadminScope, ClubScope]


@dataclass
class Account:
    """A stored login identity.

    club_id is the admin's club binding (club_admins row), filled in by the
    store's joined lookups. It is None for superadmins and for orphaned admins
    whose binding row was never written.
    """

    email: str
    password_hash: str
    is_superadmin: bool = False
    id: int | None = None
    club_id: str | None = None
    created_at: str | None = None


@dataclass(frozen=True)
class Identity:
    """The authenticated caller, as asserted by a verified token.

    Built at login from an Account and at request time from token claims.
    Handlers trust it without re-querying the store.
    """

    id: int
    email: str
    scope: Scope

    @property
    def role(self) -> Role:
        return self.scope.role

    @property
    def club_id(self) -> str:
        return self.scope.club_id

    @property
    def is_superadmin(self) -> bool:
        return isinstance(self.scope, SuperadminScope)
