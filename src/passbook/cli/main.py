"""Main CLI entry point."""

import click
from passbook.database.factories import DB_PATH_ENV_VAR, create_sqlite_database
from passbook.logging_config import LOG_LEVEL_ENV_VAR, setup_logging

# Import and register all commands at module level
from passbook.cli.commands import (
    account,
    recipient,
    transaction,
)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help=f"Path to database file (overrides {DB_PATH_ENV_VAR} environment variable)",
    envvar=DB_PATH_ENV_VAR,
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    help=f"Logging verbosity (overrides {LOG_LEVEL_ENV_VAR} environment variable)",
    envvar=LOG_LEVEL_ENV_VAR,
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str):
    """Passbook - small-business bookkeeping.

    Keep accounts, payees and transactions (cheques, bank and online
    transfers, UPI settlements, bank charges, cash deposits and transfers
    between your own accounts) with running balances.
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


# Register all commands
account.register_commands(cli)
recipient.register_commands(cli)
transaction.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
