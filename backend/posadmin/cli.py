# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/posadmin/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system init-db
#   Create all tables that do not exist yet (use `flask db upgrade` for migrations).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Admin accounts:
# - python -m flask admins create --username superadmin --password "..."
#   Create a platform admin (prompts for the password if omitted).
# - python -m flask admins list
#
# POS businesses:
# - python -m flask businesses list [--status pending]
# - python -m flask businesses approve 3 --admin superadmin
#
# Maintenance:
# - python -m flask maintenance cleanup-sessions --retention-days 30
#   Delete expired/revoked sessions older than the retention window.

import click
from flask import Flask
from flask.cli import with_appcontext

from .errors import AppError
from .extensions import db
from .models import AdminUser, BUSINESS_STATUSES
from .services import approval_service, auth_service, session_service


@click.group('system')
def system_group():
    """System bootstrap commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create missing tables."""
    db.create_all()
    click.echo("PASS Database tables are in place")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Confirm destructive reset')
@with_appcontext
def reset_db(yes):
    """DEV/TEST only: drop and recreate all tables."""
    if not yes:
        click.echo("FAIL Refusing to reset without --yes")
        raise SystemExit(1)
    db.drop_all()
    db.create_all()
    click.echo("PASS Database reset")


@click.group('admins')
def admins_group():
    """Admin account commands."""


@admins_group.command('create')
@click.option('--username', prompt=True)
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
@with_appcontext
def create_admin(username, password):
    try:
        admin = auth_service.create_admin(username, password)
    except AppError as e:
        click.echo(f"FAIL {e.message}")
        raise SystemExit(1)
    click.echo(f"PASS Created admin: {admin.username} (ID: {admin.id})")


@admins_group.command('list')
@with_appcontext
def list_admins():
    admins = db.session.query(AdminUser).order_by(AdminUser.id.asc()).all()
    if not admins:
        click.echo("No admins. Run: python -m flask admins create")
        return
    for admin in admins:
        click.echo(f"{admin.id:>5}  {admin.username}")


@click.group('businesses')
def businesses_group():
    """POS business commands."""


@businesses_group.command('list')
@click.option('--status', type=click.Choice(BUSINESS_STATUSES), default=None)
@with_appcontext
def list_businesses(status):
    businesses = approval_service.list_businesses(status=status)
    if not businesses:
        click.echo("No POS businesses found")
        return
    for b in businesses:
        click.echo(f"{b.id:>5}  {b.status:<9} {b.username:<20} {b.business_name}")


@businesses_group.command('approve')
@click.argument('business_id', type=int)
@click.option('--admin', 'admin_username', required=True, help='Username of the approving admin')
@with_appcontext
def approve_business(business_id, admin_username):
    admin = db.session.query(AdminUser).filter_by(username=admin_username).first()
    if admin is None:
        click.echo(f"FAIL Admin '{admin_username}' not found")
        raise SystemExit(1)
    try:
        business = approval_service.approve(business_id, admin.id)
    except AppError as e:
        click.echo(f"FAIL {e.message}")
        raise SystemExit(1)
    click.echo(f"PASS Approved {business.business_name} (ID: {business.id})")


@click.group('maintenance')
def maintenance_group():
    """Housekeeping commands."""


@maintenance_group.command('cleanup-sessions')
@click.option('--retention-days', default=30, show_default=True, type=int)
@with_appcontext
def cleanup_sessions(retention_days):
    deleted = session_service.cleanup_expired_sessions(retention_days=retention_days)
    click.echo(f"PASS Deleted {deleted} expired or revoked sessions")


def register_commands(app: Flask) -> None:
    app.cli.add_command(system_group)
    app.cli.add_command(admins_group)
    app.cli.add_command(businesses_group)
    app.cli.add_command(maintenance_group)
