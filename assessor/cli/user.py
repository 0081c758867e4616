"""CLI commands for managing users."""

from __future__ import annotations

import secrets

import pydantic as p
from sqlalchemy.orm import Session

import assessor.lib.cli as click
from assessor.core import di
from assessor.model import UserRole
from assessor.storage import user as user_storage


@click.group("user")
def user():
    """Manage users."""
    ...


@user.command("create")
@click.argument("email")
@click.argument("username")
@click.option(
    "--role",
    "-r",
    type=click.EnumType(UserRole),
    default=UserRole.Participant,
    help="User role",
)
@click.option("--password", "-p", help="Password (if not provided, a random one is generated)")
@di.inject
def user_create(
    email: str,
    username: str,
    role: UserRole,
    password: str | None,
    session: Session = di.Provide["storage.persistent.session"],
) -> None:
    """Create a new user.

    EMAIL is the user's email address (used for login).
    USERNAME is the user's display name.
    """
    generated_password = None
    if not password:
        generated_password = secrets.token_urlsafe(12)
        password = generated_password

    with session.begin():
        if user_storage.get(email=email, session=session):
            click.echo(f"Error: User with email '{email}' already exists.", err=True)
            raise SystemExit(1)
        if user_storage.get(username=username, session=session):
            click.echo(f"Error: User with username '{username}' already exists.", err=True)
            raise SystemExit(1)

        new_user = user_storage.create(
            username=username,
            email=email,
            password=p.Secret(password),
            role=role,
            session=session,
        )

    click.echo(f"Created user: {new_user.username}")
    click.echo(f"  ID: {new_user.user_id}")
    click.echo(f"  Email: {new_user.email}")
    click.echo(f"  Role: {new_user.role.value}")
    if generated_password:
        click.echo(f"  Generated password: {generated_password}")


@user.command("list")
@click.option("--role", "-r", type=click.EnumType(UserRole), help="Filter by role")
@di.inject
def user_list(
    role: UserRole | None,
    session: Session = di.Provide["storage.persistent.session"],
) -> None:
    """List users, optionally filtered by role."""
    with session.begin():
        users = user_storage.find(role=role, session=session)

    if not users:
        click.echo("No users found.")
        return

    click.echo(f"{'ID':<30} {'Username':<25} {'Email':<30} {'Role':<12}")
    click.echo("-" * 97)
    for u in users:
        click.echo(f"{str(u.user_id):<30} {u.username:<25} {u.email:<30} {u.role.value:<12}")


@user.command("set-role")
@click.argument("email")
@click.argument("role", type=click.EnumType(UserRole))
@di.inject
def user_set_role(
    email: str,
    role: UserRole,
    session: Session = di.Provide["storage.persistent.session"],
) -> None:
    """Change a user's role.

    EMAIL is the user's email address.
    """
    with session.begin():
        found_user = user_storage.get(email=email, session=session)
        if not found_user:
            click.echo(f"Error: User '{email}' not found.", err=True)
            raise SystemExit(1)
        updated_user = user_storage.update(found_user.user_id, role=role, session=session)

    click.echo(f"{updated_user.username} is now a {updated_user.role.value}")


@user.command("reset-password")
@click.argument("email")
@click.option("--password", "-p", help="New password (if not provided, a random one is generated)")
@di.inject
def user_reset_password(
    email: str,
    password: str | None,
    session: Session = di.Provide["storage.persistent.session"],
) -> None:
    """Reset a user's password.

    EMAIL is the user's email address.
    """
    generated_password = None
    if not password:
        generated_password = secrets.token_urlsafe(12)
        password = generated_password

    with session.begin():
        found_user = user_storage.get(email=email, session=session)
        if not found_user:
            click.echo(f"Error: User '{email}' not found.", err=True)
            raise SystemExit(1)

        try:
            updated_user = user_storage.update(found_user.user_id, password=p.Secret(password), session=session)
        except KeyError as e:
            click.echo("Error: Failed to update password.", err=True)
            raise SystemExit(1) from e

    click.echo(f"Password reset for {updated_user.username} ({updated_user.email})")
    if generated_password:
        click.echo(f"  New password: {generated_password}")


command = user
