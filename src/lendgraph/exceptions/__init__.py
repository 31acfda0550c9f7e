from lendgraph.exceptions.base import LendgraphError, LendgraphValueError
from lendgraph.exceptions.database import BackupExists
from lendgraph.exceptions.projection import (
    EventProcessingError,
    InvalidBorrowRateMode,
    MalformedLog,
    UnknownEventTopic,
    UnknownEventType,
)
from lendgraph.exceptions.store import EntityStoreError

from . import database, projection, store

__all__ = (
    "BackupExists",
    "EntityStoreError",
    "EventProcessingError",
    "InvalidBorrowRateMode",
    "LendgraphError",
    "LendgraphValueError",
    "MalformedLog",
    "UnknownEventTopic",
    "UnknownEventType",
    "database",
    "projection",
    "store",
)
