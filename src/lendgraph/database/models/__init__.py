from .base import Base
from .history import (
    BorrowActionTable,
    DepositActionTable,
    FlashLoanActionTable,
    HistoryActionTable,
    LiquidationCallActionTable,
    RebalanceStableBorrowRateActionTable,
    RedeemUnderlyingActionTable,
    RepayActionTable,
    SwapActionTable,
    UsageAsCollateralActionTable,
)
from .protocol import PoolTable, ReferrerTable, ReserveTable, UserReserveTable, UserTable

__all__ = (
    "Base",
    "BorrowActionTable",
    "DepositActionTable",
    "FlashLoanActionTable",
    "HistoryActionTable",
    "LiquidationCallActionTable",
    "PoolTable",
    "RebalanceStableBorrowRateActionTable",
    "RedeemUnderlyingActionTable",
    "ReferrerTable",
    "RepayActionTable",
    "ReserveTable",
    "SwapActionTable",
    "UsageAsCollateralActionTable",
    "UserReserveTable",
    "UserTable",
)
