# Overview: Flask CLI command groups for bootstrap, inspection, and daily summaries.

# backend/warehouse/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create all tables that do not exist yet (dev shortcut; prefer `flask db upgrade`).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# User inspection/bootstrap:
# - python -m flask users list
#   List all users with verification status and item/sale counts.
# - python -m flask users create --email owner@example.com --password "Password123" --warehouse "Main"
#   Create a user (prompts if options are omitted); --verified skips the email step.
# - python -m flask users verify owner@example.com
#   Mark an account verified without the emailed link.
#
# Daily summaries:
# - python -m flask summaries send [--date 2024-01-31]
#   Send summaries for one day (default: yesterday, UTC).
# - python -m flask summaries run [--interval 60]
#   Blocking scheduler loop; sends yesterday's summaries each time the UTC date rolls over.
#   The WSGI app does not run this loop: deploy it as its own long-running process next to
#   the web server (same config/DATABASE_URL), or daily summaries never go out.

import threading
from datetime import timedelta

import click
from flask import current_app
from flask.cli import with_appcontext

from .extensions import db
from .models import User, Item, Sale
from .scheduler import DailySummaryScheduler
from .services.auth_service import hash_password, normalize_email, validate_email, PasswordValidationError
from .services.summary_service import send_daily_summaries
from .validation import ValidationError
from .time_utils import utcnow, parse_day


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create missing tables."""
    db.create_all()
    click.echo("PASS Database tables created")


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


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('list')
@with_appcontext
def list_users():
    """List all users."""
    users = db.session.query(User).order_by(User.id.asc()).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*90)
    click.echo(f"{'ID':<5} {'Email':<35} {'Warehouse':<25} {'Verified':<9} {'Items':<6} {'Sales'}")
    click.echo("="*90)

    for user in users:
        item_count = db.session.query(Item).filter_by(user_id=user.id).count()
        sale_count = db.session.query(Sale).filter_by(user_id=user.id).count()
        verified_str = "Yes" if user.is_verified else "No"

        click.echo(
            f"{user.id:<5} {user.email:<35} {user.warehouse_name or '-':<25} "
            f"{verified_str:<9} {item_count:<6} {sale_count}"
        )

    click.echo("="*90 + "\n")


@users_group.command('create')
@click.option('--email', prompt=True, help='Login email')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--name', default=None, help='Display name')
@click.option('--warehouse', 'warehouse_name', default=None, help='Warehouse name')
@click.option('--verified', is_flag=True, help='Create the account already verified')
@with_appcontext
def create_user_cli(email, password, name, warehouse_name, verified):
    """Create a user directly (no verification email is sent)."""
    email = normalize_email(email)
    try:
        validate_email(email)
        if db.session.query(User).filter_by(email=email).first():
            raise ValidationError("Email already exists")
        user = User(
            email=email,
            password_hash=hash_password(password),
            name=name,
            warehouse_name=warehouse_name,
            is_verified=verified,
        )
    except PasswordValidationError as e:
        click.echo(f"FAIL Password validation failed: {e}")
        raise SystemExit(1)
    except ValidationError as e:
        click.echo(f"FAIL {e}")
        raise SystemExit(1)

    db.session.add(user)
    db.session.commit()
    click.echo(f"PASS Created user {user.email} (ID: {user.id}, verified: {user.is_verified})")


@users_group.command('verify')
@click.argument('email')
@with_appcontext
def verify_user_cli(email):
    """Mark an account verified."""
    user = db.session.query(User).filter_by(email=normalize_email(email)).first()
    if not user:
        click.echo(f"FAIL User not found: {email}")
        raise SystemExit(1)

    user.is_verified = True
    user.verification_token_hash = None
    user.verification_token_expires = None
    db.session.commit()
    click.echo(f"PASS Verified {user.email}")


@click.group('summaries')
def summaries_group():
    """Daily sales summary commands."""


@summaries_group.command('send')
@click.option('--date', 'day_str', default=None, help='Day to summarize (YYYY-MM-DD, UTC); default yesterday')
@with_appcontext
def send_summaries_cli(day_str):
    """Send daily summaries for one day."""
    try:
        day = parse_day(day_str) or (utcnow().date() - timedelta(days=1))
    except ValueError:
        click.echo(f"FAIL Invalid date: {day_str}")
        raise SystemExit(1)

    sent = send_daily_summaries(day)
    click.echo(f"PASS Sent {sent} summaries for {day.isoformat()}")


@summaries_group.command('run')
@click.option('--interval', type=float, default=None, help='Seconds between clock checks')
@with_appcontext
def run_scheduler_cli(interval):
    """Run the daily summary scheduler until interrupted."""
    app = current_app._get_current_object()

    def job(day):
        # Fresh app context (and session) per run
        with app.app_context():
            send_daily_summaries(day)

    scheduler = DailySummaryScheduler(
        job,
        interval=interval or app.config["SUMMARY_CHECK_INTERVAL"],
    )
    stop_event = threading.Event()

    click.echo(f"START Daily summary scheduler (checking every {scheduler.interval}s, Ctrl-C to stop)")
    try:
        scheduler.run(stop_event)
    except KeyboardInterrupt:
        stop_event.set()
        click.echo("\nDONE Scheduler stopped")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(summaries_group)
