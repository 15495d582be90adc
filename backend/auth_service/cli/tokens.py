"""Flask CLI commands for refresh token housekeeping."""

from __future__ import annotations

import click
from flask import current_app
from flask.cli import with_appcontext

from auth_service.services._shared.errors import StorageError


@click.group("tokens")
def tokens_cli() -> None:
    """Refresh token maintenance commands."""


@tokens_cli.command("purge-expired")
@with_appcontext
def purge_expired_command() -> None:
    """Delete refresh tokens whose expiry has passed."""
    ledger = current_app.extensions["refresh_ledger"]
    try:
        removed = ledger.purge_expired()
    except StorageError as exc:
        raise click.ClickException(f"Purge failed: {exc}") from exc
    click.echo(f"Purged {removed} expired refresh token(s).")
