"""Flask CLI commands managing the accounts the credential verifier reads."""

from __future__ import annotations

import logging

import click
from flask.cli import with_appcontext
from sqlalchemy.exc import IntegrityError

from auth_service.core.extensions import db
from auth_service.repositories.user import UserRepository

LOGGER = logging.getLogger(__name__)


@click.group("users")
def users_cli() -> None:
    """Account management commands."""


@users_cli.command("init-db")
@with_appcontext
def init_db() -> None:
    """Create the account tables when missing."""
    db.create_all()
    click.echo("Database tables ready.")


@users_cli.command("create")
@with_appcontext
@click.option("--email", required=True, help="Login email (principal identifier).")
@click.password_option("--password", help="Initial password.")
def create_user(email: str, password: str) -> None:
    """Create an account that can sign in."""
    repo = UserRepository(session=db.session)
    try:
        user = repo.create(email, password)
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        raise click.ClickException(f"Account {email!r} already exists.") from exc
    except ValueError as exc:
        db.session.rollback()
        raise click.BadParameter(str(exc)) from exc
    LOGGER.info("users.created", extra={"principal": user.email})
    click.echo(f"Created {user.email}")


@users_cli.command("delete")
@with_appcontext
@click.option("--email", required=True, help="Login email of the account to soft-delete.")
def delete_user(email: str) -> None:
    """Soft-delete an account; its refresh tokens stop working immediately."""
    repo = UserRepository(session=db.session)
    if not repo.soft_delete(email):
        raise click.ClickException(f"No active account {email!r}.")
    db.session.commit()
    LOGGER.info("users.deleted", extra={"principal": email})
    click.echo(f"Deleted {email}")
