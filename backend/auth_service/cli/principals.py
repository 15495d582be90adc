"""Flask CLI commands for provisioning credential records."""

from __future__ import annotations

import logging

import click
from flask.cli import with_appcontext
from sqlalchemy.exc import SQLAlchemyError

from auth_service.models import Principal
from auth_service.uow import SQLAlchemyUnitOfWork

LOGGER = logging.getLogger(__name__)


@click.group("principals")
def principals_cli() -> None:
    """Manage principal credential records."""


@principals_cli.command("create")
@click.argument("username")
@click.option(
    "--password",
    prompt=True,
    hide_input=True,
    confirmation_prompt=True,
    help="Initial password (prompted when omitted).",
)
@with_appcontext
def create_command(username: str, password: str) -> None:
    """Create a principal with USERNAME and a hashed password."""
    username = username.strip()
    if not username:
        raise click.UsageError("USERNAME must not be blank.")
    try:
        with SQLAlchemyUnitOfWork() as uow:
            if uow.principals.exists_by_username(username):
                raise click.ClickException(f"Principal {username!r} already exists.")
            principal = Principal(username=username)
            principal.password = password
            uow.principals.add(principal)
            principal_id = principal.id
    except SQLAlchemyError as exc:
        raise click.ClickException(f"Could not create principal: {exc}") from exc
    LOGGER.info("principal.created", extra={"event": "provision", "principal_id": principal_id})
    click.echo(principal_id)
