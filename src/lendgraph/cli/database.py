import click

from lendgraph.cli import cli
from lendgraph.config import get_settings
from lendgraph.database.operations import (
    backup_sqlite_database,
    compact_sqlite_database,
    create_new_sqlite_database,
)
from lendgraph.exceptions.database import BackupExists
from lendgraph.version import __version__


@cli.group()
def database() -> None:
    """
    Database commands
    """


@database.command("init")
def database_init() -> None:
    """
    Create the database if it does not exist.
    """

    db_path = get_settings().database.path
    if db_path.exists():
        click.echo(f"A database already exists at {db_path}.")
    else:
        create_new_sqlite_database(db_path)


@database.command("backup")
def database_backup() -> None:
    """
    Back up the database.
    """

    db_path = get_settings().database.path
    try:
        backup_sqlite_database(db_path)
    except BackupExists as exc:
        user_confirm = click.confirm(
            f"An existing backup was found at {exc.path}. Do you want to remove it and continue?",
            default=False,
        )
        if user_confirm:
            exc.path.unlink()
            backup_sqlite_database(db_path)
        else:
            raise click.Abort from None


@database.command("reset")
@click.option(
    "--force",
    is_flag=True,
    help="Skip confirmation prompt",
)
def database_reset(*, force: bool) -> None:
    """
    Remove and recreate the database.
    """

    db_path = get_settings().database.path
    if force or click.confirm(
        f"The existing database at {db_path} will be removed and a new, empty database will be created and initialized using the schema included in lendgraph version {__version__}. Do you want to proceed?",  # noqa: E501
        default=False,
    ):
        db_path.unlink(missing_ok=True)
        create_new_sqlite_database(db_path)
    else:
        raise click.Abort


@database.command("compact")
def database_compact() -> None:
    """
    Compact the database.
    """
    compact_sqlite_database(get_settings().database.path)
