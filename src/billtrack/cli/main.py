"""Main CLI entry point."""

import logging

import click

from billtrack.database.factories import create_sqlite_store
from billtrack.database.repository import Repository
from billtrack.domain.profile import ProfileService
from billtrack.sync.crypto import DEFAULT_ITERATIONS, EncryptionCodec

# Import and register all commands at module level
from billtrack.cli.commands import (
    backup,
    balance,
    bill,
    card,
    installment,
    profile,
    statement,
    summary,
    sync,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides BILLTRACK_DB_PATH environment variable)",
    envvar="BILLTRACK_DB_PATH",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    envvar="BILLTRACK_LOG_LEVEL",
    help="Logging verbosity",
)
@click.option(
    "--kdf-iterations",
    type=click.IntRange(min=1),
    default=DEFAULT_ITERATIONS,
    show_default=True,
    envvar="BILLTRACK_KDF_ITERATIONS",
    help="PBKDF2 iterations used when encrypting new backups",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str, kdf_iterations: int):
    """Billtrack - Credit card bill tracking.

    Track monthly statements, installment plans and one-time bills across
    profiles, with encrypted backups and cloud sync.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj["codec"] = EncryptionCodec(iterations=kdf_iterations)

    # Open the store only when running a command, not when showing help
    if ctx.invoked_subcommand is not None:
        store = create_sqlite_store(database_path=db_path)
        store.connect()
        store.initialize_schema()
        ctx.call_on_close(store.disconnect)
        repo = Repository(store)
        ProfileService(repo).ensure_default_profile()
        ctx.obj["store"] = store
        ctx.obj["repo"] = repo


# Register all commands
profile.register_commands(cli)
card.register_commands(cli)
statement.register_commands(cli)
installment.register_commands(cli)
bill.register_commands(cli)
balance.register_commands(cli)
summary.register_commands(cli)
backup.register_commands(cli)
sync.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
