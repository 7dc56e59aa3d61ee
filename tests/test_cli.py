"""
tests/test_cli.py -- Management commands in main.py.

get_settings() is patched to point the commands at a throwaway in-memory
database; output is checked through capsys.
"""

from __future__ import annotations

import uuid

import pytest

import main as cli
from auth.store import AccountStore
from auth.tokens import authenticate_account
from core.config import Settings


@pytest.fixture
def cli_settings(monkeypatch) -> Settings:
    settings = Settings(
        debug=True,
        secret_key="c" * 32,
        superadmin_email="cli-root@example.com",
        superadmin_password="cli-root-pass",
        database_url=f"sqlite:///file:test_cli_{uuid.uuid4().hex}?mode=memory&cache=shared&uri=true",
    )
    monkeypatch.setattr(cli, "get_settings", lambda: settings)
    # Keeps the shared-memory database alive between commands.
    keeper = AccountStore(settings.database_url)
    yield settings
    keeper.close()


def test_no_command_prints_help(capsys) -> None:
    assert cli.main([]) == 0
    assert "create-admin" in capsys.readouterr().out


def test_bootstrap_is_idempotent(cli_settings, capsys) -> None:
    assert cli.main(["bootstrap"]) == 0
    assert "Superadmin created" in capsys.readouterr().out
    assert cli.main(["bootstrap"]) == 0
    assert "already present" in capsys.readouterr().out


def test_create_admin_prints_working_password(cli_settings, capsys) -> None:
    assert cli.main(["create-admin", "--email", "lead@example.com", "--club", "robotics"]) == 0
    out = capsys.readouterr().out
    password = next(line.split(": ", 1)[1] for line in out.splitlines() if "Temporary password" in line)

    store = AccountStore(cli_settings.database_url)
    try:
        identity = authenticate_account(store, "lead@example.com", password)
    finally:
        store.close()
    assert identity is not None
    assert identity.club_id == "robotics"


def test_create_admin_duplicate(cli_settings, capsys) -> None:
    cli.main(["create-admin", "--email", "lead@example.com", "--club", "robotics"])
    capsys.readouterr()
    assert cli.main(["create-admin", "--email", "lead@example.com", "--club", "chess"]) == 1
    assert "already exists" in capsys.readouterr().out


def test_create_admin_rejects_wildcard(cli_settings, capsys) -> None:
    assert cli.main(["create-admin", "--email", "x@example.com", "--club", "*"]) == 2


@pytest.mark.parametrize(
    ("email", "club"),
    [("empty@example.com", ""), ("coach@example.com", "a/b c"), ("not-an-email", "robotics")],
)
def test_create_admin_rejects_invalid_input(cli_settings, capsys, email, club) -> None:
    assert cli.main(["create-admin", "--email", email, "--club", club]) == 2
    assert "[!] Invalid" in capsys.readouterr().out
    store = AccountStore(cli_settings.database_url)
    try:
        assert store.list_accounts() == []
    finally:
        store.close()


def test_create_admin_normalizes_email(cli_settings, capsys) -> None:
    assert cli.main(["create-admin", "--email", "  Lead@Example.COM ", "--club", "robotics"]) == 0
    assert "already exists" not in capsys.readouterr().out
    store = AccountStore(cli_settings.database_url)
    try:
        assert store.get_by_email("lead@example.com").club_id == "robotics"
    finally:
        store.close()


def test_list_admins(cli_settings, capsys) -> None:
    cli.main(["bootstrap"])
    cli.main(["create-admin", "--email", "lead@example.com", "--club", "robotics"])
    capsys.readouterr()
    assert cli.main(["list-admins"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert "SUPERADMIN" in lines[2] and "cli-root@example.com" in lines[2]
    assert "robotics" in lines[3] and "lead@example.com" in lines[3]
