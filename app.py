from flask import Flask
from config import Config

from models import db
from flask_migrate import Migrate
from security.lockout_policy import LockoutPolicy


def create_app(overrides=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    # Fail fast on a bad lockout policy instead of on the first login
    LockoutPolicy.from_config(app.config)

    # Database init
    db.init_app(app)

    # Migrations
    Migrate(app, db)

    register_cli(app)

    return app

#-------------------------
import click
from models.user import User
from security.bruteforce import get_gate
from security.lockout_admin import lock_account, unlock_account, list_active_lockouts

def _find_user(email):
    return User.query.filter_by(email=email.strip().lower()).first()

def register_cli(app):
    @app.cli.command("unlock-account")
    @click.argument("email")
    @click.option("--by", "cleared_by", default=None, help="Who is clearing the lockout.")
    def unlock_account_command(email, cleared_by):
        """Clear every active lockout for a user and reset their failure window."""
        user = _find_user(email)
        if not user:
            print("User not found")
            return

        cleared = unlock_account(user.id, cleared_by=cleared_by)
        print(f"{user.email} unlocked ({cleared} lockout(s) cleared)")

    @app.cli.command("lock-account")
    @click.argument("email")
    @click.option("--minutes", type=click.IntRange(min=1), default=None,
                  help="Lock for this many minutes. Omit for a permanent lock.")
    @click.option("--by", "locked_by", default=None, help="Who is locking the account.")
    def lock_account_command(email, minutes, locked_by):
        """Lock a user by hand."""
        user = _find_user(email)
        if not user:
            print("User not found")
            return

        lock_account(user.id, minutes=minutes, locked_by=locked_by)
        if minutes:
            print(f"{user.email} locked for {minutes} minute(s)")
        else:
            print(f"{user.email} locked until an administrator unlocks it")

    @app.cli.command("lockout-status")
    @click.argument("email")
    def lockout_status_command(email):
        """Show lock, throttle and failure-window state for a user."""
        user = _find_user(email)
        if not user:
            print("User not found")
            return

        gate = get_gate()
        delay = gate.get_backoff_delay_seconds(user.id)
        print(f"locked: {'yes' if gate.is_locked(user.id) else 'no'}")
        print(f"failed attempts in window: {gate.get_failed_attempts_count(user.id)}")
        print(f"backoff: {f'{delay}s' if delay else 'none'}")
        for lockout in list_active_lockouts(user.id):
            end = lockout.lockout_end.isoformat() if lockout.lockout_end else "permanent"
            print(f"  lockout #{lockout.id} since {lockout.lockout_start.isoformat()} until {end}")

