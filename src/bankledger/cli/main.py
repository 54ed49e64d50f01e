"""Main CLI entry point."""

import click
from bankledger.database.factories import create_sqlite_database
from bankledger.domain.authorization import Actor, SYSTEM_ACTOR
from bankledger.logging_config import setup_logging

# Import and register all commands at module level
from bankledger.cli.commands import (
    user,
    account,
    transaction,
    card,
    goal,
    notification,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides BANKLEDGER_DB_PATH environment variable)",
    envvar="BANKLEDGER_DB_PATH",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    envvar="BANKLEDGER_LOG_LEVEL",
    help="Log level for structured logs on stderr",
)
@click.option(
    "--as-user",
    "as_user",
    envvar="BANKLEDGER_USER",
    help="Act as this user ID (default: system operator with admin rights)",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str, as_user: str | None):
    """bankledger - accounts, transactions, cards and notifications.

    Administrators record transactions, issue cards and manage accounts;
    customers manage their cards, goals and notifications.
    """
    ctx.ensure_object(dict)
    setup_logging(log_level)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)

        actor = SYSTEM_ACTOR
        if as_user:
            profile = db.get_profile(as_user)
            if profile is None:
                click.echo(f"Error: User {as_user} not found", err=True)
                ctx.exit(1)
            actor = Actor(user_id=profile.id, is_admin=profile.is_admin)
        ctx.obj["actor"] = actor


# Register all commands
user.register_commands(cli)
account.register_commands(cli)
transaction.register_commands(cli)
card.register_commands(cli)
goal.register_commands(cli)
notification.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
