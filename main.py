#!/usr/bin/env python3
"""
ClubSite -- Management commands for the club website backend.

Usage:
  python main.py bootstrap
  python main.py create-admin --email coach@example.com --club robotics
  python main.py list-admins
  python main.py serve
  python main.py serve --host 0.0.0.0 --port 8080 --reload

Environment variables (see core/config.py for the full list):
  SECRET_KEY           Token signing key, at least 32 characters. Required unless DEBUG=true.
  SUPERADMIN_EMAIL     Email of the account created by "bootstrap" and at server start.
  SUPERADMIN_PASSWORD  Its password. Required unless DEBUG=true.
  DATABASE_URL         SQLAlchemy URL (default: sqlite:///clubsite.db).
"""

import argparse
import logging
import sys

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError

from api.models import AdminCreate
from auth.bootstrap import ensure_superadmin
from auth.errors import StoreUnavailable
from auth.models import ALL_CLUBS
from auth.store import AccountStore
from auth.tokens import generate_temporary_password, hash_password
from core.config import get_settings

logger = logging.getLogger("clubsite.cli")


def _open_store() -> AccountStore:
    settings = get_settings()
    return AccountStore(settings.database_url, settings.db_pool_size)


def cmd_bootstrap(args: argparse.Namespace) -> int:
    """Create the configured superadmin if none exists yet."""
    store = _open_store()
    try:
        created = ensure_superadmin(store, get_settings())
    except StoreUnavailable as e:
        print(f"  [!] {e}")
        return 1
    finally:
        store.close()
    print("  Superadmin created." if created else "  Superadmin already present; nothing to do.")
    return 0


def cmd_create_admin(args: argparse.Namespace) -> int:
    """Provision a club admin and print its temporary password once."""
    if args.club == ALL_CLUBS:
        print(f"  [!] '{ALL_CLUBS}' is not a club id.")
        return 2
    try:
        body = AdminCreate(email=args.email, club_id=args.club)
    except ValidationError as e:
        for err in e.errors():
            print(f"  [!] Invalid {err['loc'][0]}: {err['msg']}")
        return 2
    store = _open_store()
    password = generate_temporary_password()
    try:
        admin_id = store.create_admin(body.email, hash_password(password), body.club_id)
    except IntegrityError:
        print(f"  [!] An account with email '{body.email}' already exists.")
        return 1
    finally:
        store.close()
    print(f"  Admin #{admin_id} created for club '{body.club_id}'.")
    print(f"  Temporary password: {password}")
    print("  It will not be shown again.")
    return 0


def cmd_list_admins(args: argparse.Namespace) -> int:
    store = _open_store()
    try:
        accounts = store.list_accounts()
    finally:
        store.close()
    if not accounts:
        print("  No accounts.")
        return 0
    print(f"  {'ID':>5}  {'ROLE':<10}  {'CLUB':<20}  EMAIL")
    print("  " + "─" * 60)
    for account in accounts:
        role = "SUPERADMIN" if account.is_superadmin else "ADMIN"
        club = ALL_CLUBS if account.is_superadmin else (account.club_id or "(none)")
        print(f"  {account.id:>5}  {role:<10}  {club:<20}  {account.email}")
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("asgi:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="clubsite",
        description="Management commands for the ClubSite backend.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py bootstrap
  python main.py create-admin --email coach@example.com --club robotics
  python main.py list-admins
  python main.py serve --port 8080
        """,
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    p = sub.add_parser("bootstrap", help="Create the configured superadmin if none exists")
    p.set_defaults(func=cmd_bootstrap)

    p = sub.add_parser("create-admin", help="Provision a club admin with a temporary password")
    p.add_argument("--email", required=True, help="Login email for the new admin")
    p.add_argument("--club", required=True, metavar="CLUB_ID", help="Club the admin may manage")
    p.set_defaults(func=cmd_create_admin)

    p = sub.add_parser("list-admins", help="List every account with its role and club")
    p.set_defaults(func=cmd_list_admins)

    p = sub.add_parser("serve", help="Run the API server with uvicorn")
    p.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    p.add_argument("--port", type=int, default=8000, help="Port (default: 8000)")
    p.add_argument("--reload", action="store_true", help="Restart on code changes (development only)")
    p.set_defaults(func=cmd_serve)

    args = parser.parse_args(argv)
    if not getattr(args, "func", None):
        parser.print_help()
        return 0

    logging.basicConfig(level=logging.INFO, format="%(levelname)-5s %(name)s %(message)s")
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
