from .checksum_cache import get_checksum_address
from .logging import logger
from .version import __version__

# isort: split

from .projection import (
    EntityResolver,
    EventCoordinates,
    ProjectionDispatcher,
    SqlEntityStore,
    decode_log,
)
from .types import BorrowRateMode, HistoryActionKind

__all__ = (
    "BorrowRateMode",
    "EntityResolver",
    "EventCoordinates",
    "HistoryActionKind",
    "ProjectionDispatcher",
    "SqlEntityStore",
    "__version__",
    "decode_log",
    "get_checksum_address",
    "logger",
)
