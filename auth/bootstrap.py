"""
auth/bootstrap.py -- Guarantee a superadmin account exists before serving traffic.

Called once, synchronously, from the API lifespan (and from the CLI
"bootstrap" command). Idempotent: when any superadmin already exists the
routine performs no write, so restarts never create a second one.

Failure policy: any database error is re-raised as StoreUnavailable. The
lifespan lets it propagate, so the server never starts without both a
superadmin and a store able to create one.

Layer rule: no imports from api/ or content/.
"""

from __future__ import annotations

import logging
import secrets

from sqlalchemy.exc import SQLAlchemyError

from auth.errors import StoreUnavailable
from auth.store import AccountStore
from auth.tokens import hash_password
from core.config import Settings

logger = logging.getLogger("clubsite.bootstrap")


def ensure_superadmin(store: AccountStore, settings: Settings) -> bool:
    """Create the configured superadmin if none exists.

    Returns True if an account was created, False if one already existed.
    Raises StoreUnavailable if the store cannot be queried or written.

    SUPERADMIN_PASSWORD is mandatory outside DEBUG (Settings enforces it).
    In DEBUG with no password configured, a random one is generated and
    logged once, since it is the only way to reach the admin endpoints.
    """
    try:
        if store.has_superadmin():
            logger.info("Superadmin present; bootstrap skipped")
            return False

        password = settings.superadmin_password
        generated = not password
        if generated:
            password = secrets.token_urlsafe(settings.temp_password_length)

        logger.info("No superadmin found. Creating one...")
        store.create_account(settings.superadmin_email, hash_password(password), is_superadmin=True)
    except SQLAlchemyError as exc:
        raise StoreUnavailable("Credential store unavailable during bootstrap") from exc

    logger.info("Superadmin created with email: %s", settings.superadmin_email)
    if generated:
        logger.warning("DEBUG: generated superadmin password: %s", password)
    return True
