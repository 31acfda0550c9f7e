import logging
from collections.abc import Callable, Generator

import pytest
from eth_typing import ChecksumAddress
from sqlalchemy.orm import Session

from lendgraph.checksum_cache import get_checksum_address
from lendgraph.database.models import Base
from lendgraph.database.operations import create_sqlite_engine
from lendgraph.logging import logger
from lendgraph.projection.dispatcher import ProjectionDispatcher, VerboseConfig
from lendgraph.projection.events import EventCoordinates
from lendgraph.projection.resolver import EntityResolver
from lendgraph.projection.store import SqlEntityStore

LENDING_POOL_ADDRESS: ChecksumAddress = get_checksum_address(
    "0x7d2768dE32b0b80b7a3454c06BdAc94A69DDc7A9"
)


@pytest.fixture(autouse=True)
def _reset_verbose_config():
    """
    Before each test, clear global verbose logging settings
    """
    VerboseConfig.toggle_all(enabled=False)
    VerboseConfig.clear_users()


@pytest.fixture(scope="session", autouse=True)
def _set_lendgraph_logging():
    """
    Set the logging level to DEBUG for the test run
    """
    logger.setLevel(logging.DEBUG)


@pytest.fixture
def session() -> Generator[Session, None, None]:
    """
    A session bound to a fresh in-memory SQLite database with all tables created.
    """
    engine = create_sqlite_engine()
    Base.metadata.create_all(bind=engine)
    with Session(engine) as session:
        yield session
    engine.dispose()


@pytest.fixture
def store(session: Session) -> SqlEntityStore:
    return SqlEntityStore(session)


@pytest.fixture
def resolver(store: SqlEntityStore) -> EntityResolver:
    return EntityResolver(store)


@pytest.fixture
def dispatcher(store: SqlEntityStore) -> ProjectionDispatcher:
    return ProjectionDispatcher(store)


@pytest.fixture
def pool_address() -> ChecksumAddress:
    return LENDING_POOL_ADDRESS


@pytest.fixture
def make_coordinates() -> Callable[..., EventCoordinates]:
    """
    Factory for event coordinates in the test lending pool. Each call without an explicit log index
    advances to the next log index, so that events built in sequence have distinct coordinates.
    """

    log_indices = iter(range(1_000_000))

    def _make_coordinates(
        block_number: int = 12_000_000,
        transaction_index: int = 0,
        log_index: int | None = None,
        block_timestamp: int = 1_617_000_000,
    ) -> EventCoordinates:
        return EventCoordinates(
            address=LENDING_POOL_ADDRESS,
            block_number=block_number,
            block_timestamp=block_timestamp,
            transaction_index=transaction_index,
            log_index=next(log_indices) if log_index is None else log_index,
        )

    return _make_coordinates
