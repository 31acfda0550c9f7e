"""
CLI command to project a file of lending pool logs into the database.

The input is a JSON-lines file with one `eth_getLogs` log object per line, in chain order. Each log
must include a `blockTimestamp` field. Blank lines are skipped.
"""

import json
import pathlib
from collections.abc import Iterator
from typing import Any

import click
import tqdm

from lendgraph.cli import cli
from lendgraph.config import get_settings
from lendgraph.database.operations import create_new_sqlite_database, get_scoped_sqlite_session
from lendgraph.exceptions.base import LendgraphError
from lendgraph.exceptions.store import EntityStoreError
from lendgraph.logging import logger
from lendgraph.projection.decoding import decode_log
from lendgraph.projection.dispatcher import ProjectionDispatcher
from lendgraph.projection.store import SqlEntityStore


def _read_logs(log_file: pathlib.Path) -> Iterator[dict[str, Any]]:
    with log_file.open() as file:
        for line_number, line in enumerate(file, start=1):
            if not line.strip():
                continue
            try:
                yield json.loads(line)
            except json.JSONDecodeError as exc:
                msg = f"{log_file}:{line_number} is not valid JSON: {exc}"
                raise click.ClickException(msg) from exc


@cli.command("project")
@click.argument(
    "log_file",
    type=click.Path(exists=True, dir_okay=False, path_type=pathlib.Path),
)
@click.option(
    "--database",
    "database_path",
    type=click.Path(dir_okay=False, path_type=pathlib.Path),
    default=None,
    help="SQLite database to write to. Defaults to the database in the config file.",
)
@click.option(
    "--batch-size",
    type=click.IntRange(min=1),
    default=None,
    help="Number of events applied between commits. Defaults to the config file value.",
)
@click.option(
    "--no-progress",
    is_flag=True,
    default=False,
    help="Suppress the progress bar.",
)
def project(
    log_file: pathlib.Path,
    database_path: pathlib.Path | None,
    batch_size: int | None,
    *,
    no_progress: bool,
) -> None:
    """
    Project lending pool logs from a JSON-lines file into the database.
    """

    if database_path is None or batch_size is None:
        settings = get_settings()
        if database_path is None:
            database_path = settings.database.path
        if batch_size is None:
            batch_size = settings.projection.batch_size

    if not database_path.exists():
        create_new_sqlite_database(database_path)

    db_session = get_scoped_sqlite_session(database_path)
    store = SqlEntityStore(db_session())
    dispatcher = ProjectionDispatcher(store)

    applied = 0
    try:
        for log in tqdm.tqdm(
            _read_logs(log_file),
            desc="Projecting events",
            leave=False,
            disable=no_progress,
        ):
            dispatcher.apply(decode_log(log))
            applied += 1
            if applied % batch_size == 0:
                store.commit()
        store.commit()
    except EntityStoreError as exc:
        # the failed commit leaves the session unusable until it is rolled back
        db_session.rollback()
        msg = f"Could not commit after {applied} events: {exc}"
        raise click.ClickException(msg) from exc
    except LendgraphError as exc:
        store.commit()
        msg = f"Stopped after {applied} events: {exc}"
        raise click.ClickException(msg) from exc
    finally:
        db_session.remove()

    logger.info(f"Projected {applied} events from {log_file} into {database_path}")
