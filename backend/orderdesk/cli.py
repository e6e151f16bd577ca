# Overview: Flask CLI command groups for database bootstrap and account inspection.

# backend/orderdesk/cli.py
# Usage (from the backend directory, with FLASK_APP=wsgi.py):
#
#   flask system init-db
#       Create any missing tables. Safe to re-run.
#   flask system reset-db --yes
#       Local/dev only. Drops every table and recreates the schema.
#   flask users create-admin --name "Owner" --phone "0300" --address "HQ" \
#       --email owner@example.com --password "Passw0rd!"
#       Bootstrap an admin. Omitted options are prompted for.
#   flask users list [--role admin|salesman]
#       Print accounts with role and active flag.
#
# Production schema changes go through `flask db upgrade` (Flask-Migrate).

import click
from flask.cli import with_appcontext

from .errors import ServiceError
from .extensions import db
from .models import User
from .permissions import Role
from .services.auth_service import create_user


@click.group('system')
def system_group():
    """Database bootstrap commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables. Existing tables and data are left alone."""
    db.create_all()
    click.echo("OK Database tables created.")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Do not ask for confirmation')
@with_appcontext
def reset_db(yes):
    """Drop every table and recreate the schema. All data is lost."""
    if not yes:
        click.confirm("Every shop, product, order and account will be deleted. Continue?", abort=True)

    db.drop_all()
    db.create_all()

    click.echo("OK Schema recreated. Run 'flask users create-admin' to add an admin.")


@click.group('users')
def users_group():
    """Account bootstrap and inspection commands."""


@users_group.command('create-admin')
@click.option('--name', prompt=True, help='Full name')
@click.option('--phone', prompt=True, help='Phone number')
@click.option('--address', prompt=True, help='Address')
@click.option('--email', prompt=True, help='Login email')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@with_appcontext
def create_admin_cli(name, phone, address, email, password):
    """
    Create an admin account.

    The password policy is the same as for signup: at least 8 characters
    with a letter, a digit and a special character.
    """
    try:
        admin = create_user(
            name=name,
            phone=phone,
            address=address,
            email=email,
            password=password,
            role=Role.ADMIN,
        )
    except ServiceError as exc:
        raise click.ClickException(exc.message)

    click.echo(f"OK Admin #{admin.id} created: {admin.name} <{admin.email}>")


@users_group.command('list')
@click.option('--role', type=click.Choice([r.value for r in Role]), help='Only show this role')
@with_appcontext
def list_users(role):
    """Print accounts with their role and active flag."""
    query = db.session.query(User)
    if role:
        query = query.filter(User.role == Role(role))

    accounts = query.order_by(User.id.asc()).all()
    if not accounts:
        click.echo("No users found.")
        return

    header = f"{'ID':<5} {'Name':<25} {'Email':<35} {'Role':<10} Active"
    click.echo(header)
    click.echo("-" * len(header))
    for account in accounts:
        click.echo(
            f"{account.id:<5} {account.name:<25} {(account.email or '-'):<35} "
            f"{account.role.value:<10} {'yes' if account.is_active else 'no'}"
        )


def register_commands(app):
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
