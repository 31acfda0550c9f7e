import pathlib
import sqlite3
from typing import Any

from sqlalchemy import URL, Connection, Engine, create_engine, event, text
from sqlalchemy.orm import Session, scoped_session, sessionmaker

from lendgraph.database.models import Base
from lendgraph.exceptions.database import BackupExists
from lendgraph.logging import logger


def create_sqlite_engine(db_path: pathlib.Path | None = None) -> Engine:
    """
    Create an engine for the SQLite database at the given path, or an in-memory database if no path
    is given.

    The pysqlite driver defers BEGIN until the first DML statement, which breaks SAVEPOINT. The
    driver's own transaction handling is disabled and BEGIN is emitted explicitly instead, so that
    per-event savepoints roll back correctly.
    """

    engine = create_engine(
        URL.create(
            drivername="sqlite",
            database=None if db_path is None else str(db_path.absolute()),
        )
    )

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(
        dbapi_connection: sqlite3.Connection,
        connection_record: Any,  # noqa: ARG001
    ) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(connection: Connection) -> None:
        connection.exec_driver_sql("BEGIN")

    return engine


def backup_sqlite_database(db_path: pathlib.Path) -> None:
    assert db_path.exists()

    backup_path = pathlib.Path(db_path).with_suffix(db_path.suffix + ".bak")
    if backup_path.exists():
        raise BackupExists(path=backup_path)

    engine = create_engine(
        f"sqlite:///{db_path.absolute()}",
    )
    with engine.connect() as connection:
        connection.execute(
            text("PRAGMA wal_checkpoint(FULL);"),
        )

    with sqlite3.connect(db_path) as src, sqlite3.connect(backup_path) as dest:
        src.backup(target=dest)

    logger.info(f"Backed up SQLite database at {db_path} to {backup_path}")


def create_new_sqlite_database(db_path: pathlib.Path) -> None:
    db_path.parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(
        f"sqlite:///{db_path.absolute()}",
    )
    with engine.connect() as connection:
        assert (
            connection.execute(
                text("PRAGMA journal_mode=WAL;"),
            ).scalar()
            == "wal"
        )
        connection.execute(
            text("PRAGMA auto_vacuum=FULL;"),
        )

    Base.metadata.create_all(bind=engine)

    with engine.connect() as connection:
        connection.execute(
            text("VACUUM;"),
        )

    logger.info(f"Initialized new SQLite database at {db_path}")


def compact_sqlite_database(db_path: pathlib.Path) -> None:
    engine = create_engine(
        f"sqlite:///{db_path.absolute()}",
    )
    with engine.connect() as connection:
        connection.execute(
            text("VACUUM;"),
        )
        logger.info(f"Compacted SQLite database at {db_path}")


def get_scoped_sqlite_session(database_path: pathlib.Path) -> scoped_session[Session]:
    return scoped_session(
        session_factory=sessionmaker(
            bind=create_sqlite_engine(database_path),
        )
    )
