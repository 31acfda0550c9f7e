"""Projection of lending pool events into reserves, user reserves and history actions."""

from lendgraph.projection.decoding import LendingPoolEvent, decode_log
from lendgraph.projection.dispatcher import ProjectionDispatcher, VerboseConfig
from lendgraph.projection.events import (
    BorrowEvent,
    DepositEvent,
    EventCoordinates,
    FlashLoanEvent,
    LiquidationCallEvent,
    PausedEvent,
    PoolEvent,
    RebalanceStableBorrowRateEvent,
    RepayEvent,
    ReserveDataUpdatedEvent,
    ReserveUsedAsCollateralDisabledEvent,
    ReserveUsedAsCollateralEnabledEvent,
    SwapEvent,
    UnpausedEvent,
    WithdrawEvent,
)
from lendgraph.projection.resolver import EntityKind, EntityResolver
from lendgraph.projection.store import EntityStore, SqlEntityStore

__all__ = [
    "BorrowEvent",
    "DepositEvent",
    "EntityKind",
    "EntityResolver",
    "EntityStore",
    "EventCoordinates",
    "FlashLoanEvent",
    "LendingPoolEvent",
    "LiquidationCallEvent",
    "PausedEvent",
    "PoolEvent",
    "ProjectionDispatcher",
    "RebalanceStableBorrowRateEvent",
    "RepayEvent",
    "ReserveDataUpdatedEvent",
    "ReserveUsedAsCollateralDisabledEvent",
    "ReserveUsedAsCollateralEnabledEvent",
    "SqlEntityStore",
    "SwapEvent",
    "UnpausedEvent",
    "VerboseConfig",
    "WithdrawEvent",
    "decode_log",
]
