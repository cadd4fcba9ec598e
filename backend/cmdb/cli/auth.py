"""Flask CLI commands for account bootstrap and refresh-token maintenance."""

from __future__ import annotations

import logging
from datetime import timedelta

import click
from flask import current_app
from flask.cli import with_appcontext

from cmdb.models.role import Role
from cmdb.services._shared.errors import ServiceError
from cmdb.services.registry import get_session_service, get_user_service
from cmdb.services.users.service import UserCreateIn

LOGGER = logging.getLogger(__name__)


@click.group("auth")
def auth_cli() -> None:
    """Account and session maintenance commands."""


@auth_cli.command("create-user")
@click.argument("username")
@click.option(
    "--role",
    type=click.Choice(Role.values(), case_sensitive=False),
    default=Role.USER.value,
    show_default=True,
)
@click.option("--email", default=None, help="Optional contact email.")
@click.option(
    "--password",
    prompt=True,
    hide_input=True,
    confirmation_prompt=True,
    help="Read from a prompt when omitted.",
)
@with_appcontext
def create_user_command(username: str, role: str, email: str | None, password: str) -> None:
    """Create USERNAME with the given role."""
    try:
        user = get_user_service().create_user(
            UserCreateIn(
                username=username,
                password=password,
                role=Role.parse(role.lower()),
                email=email,
            )
        )
    except (ServiceError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Created {user.role.value} '{user.username}' ({user.id})")


@auth_cli.command("revoke-user")
@click.argument("username")
@with_appcontext
def revoke_user_command(username: str) -> None:
    """Revoke every refresh token of USERNAME (forces a new login everywhere)."""
    try:
        revoked = get_session_service().revoke_user(username)
    except ServiceError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Revoked {revoked} refresh token(s) for '{username}'")


@auth_cli.command("clean-expired")
@click.option(
    "--retention-hours",
    type=click.IntRange(min=0),
    default=None,
    help="Keep revoked rows this long (defaults to REFRESH_TOKEN_RETENTION_HOURS).",
)
@with_appcontext
def clean_expired_command(retention_hours: int | None) -> None:
    """Delete expired refresh tokens and revoked ones past the retention window."""
    if retention_hours is None:
        retention_hours = int(current_app.config.get("REFRESH_TOKEN_RETENTION_HOURS", 24))
    removed = get_session_service().clean_expired(retention=timedelta(hours=retention_hours))
    LOGGER.info("clean-expired finished", extra={"event": "cli.clean_expired", "removed": removed})
    click.echo(f"Removed {removed} refresh token row(s)")
