"""
Append-only history of lending pool actions.

Each action kind is a subclass of `HistoryActionTable` using joined table inheritance, so all
actions share one id space and may be queried together through the base table.
"""

from sqlalchemy import Enum as SqlEnum
from sqlalchemy.orm import Mapped, mapped_column

from lendgraph.types import BorrowRateMode

from .base import Address, Base, BigInteger
from .types import (
    ForeignKeyPoolId,
    ForeignKeyReferrerId,
    ForeignKeyReserveId,
    ForeignKeyUserId,
    ForeignKeyUserReserveId,
    PrimaryForeignKeyHistoryActionId,
    PrimaryKeyStr,
)

BorrowRateModeColumn = SqlEnum(
    BorrowRateMode,
    name="borrow_rate_mode",
    values_callable=lambda modes: [mode.value for mode in modes],
)


class HistoryActionTable(Base):
    __tablename__ = "history_actions"
    __mapper_args__ = {  # noqa: RUF012
        "polymorphic_on": "kind",
        "polymorphic_identity": "base",
    }

    id: Mapped[PrimaryKeyStr]
    kind: Mapped[str]
    pool_id: Mapped[ForeignKeyPoolId]
    timestamp: Mapped[int]


class UserReserveActionMixin:
    """
    A mixin class defining the user, reserve and user reserve references shared by most actions.
    """

    user_id: Mapped[ForeignKeyUserId]
    reserve_id: Mapped[ForeignKeyReserveId]
    user_reserve_id: Mapped[ForeignKeyUserReserveId]


class DepositActionTable(HistoryActionTable, UserReserveActionMixin):
    __tablename__ = "deposit_actions"
    __mapper_args__ = {  # noqa: RUF012
        "polymorphic_identity": "deposit",
    }

    id: Mapped[PrimaryForeignKeyHistoryActionId]
    on_behalf_of: Mapped[Address]
    amount: Mapped[BigInteger]
    referrer_id: Mapped[ForeignKeyReferrerId | None]


class RedeemUnderlyingActionTable(HistoryActionTable, UserReserveActionMixin):
    __tablename__ = "redeem_underlying_actions"
    __mapper_args__ = {  # noqa: RUF012
        "polymorphic_identity": "redeem_underlying",
    }

    id: Mapped[PrimaryForeignKeyHistoryActionId]
    on_behalf_of: Mapped[Address]
    amount: Mapped[BigInteger]


class BorrowActionTable(HistoryActionTable, UserReserveActionMixin):
    __tablename__ = "borrow_actions"
    __mapper_args__ = {  # noqa: RUF012
        "polymorphic_identity": "borrow",
    }

    id: Mapped[PrimaryForeignKeyHistoryActionId]
    on_behalf_of: Mapped[Address]
    amount: Mapped[BigInteger]
    borrow_rate: Mapped[BigInteger]
    borrow_rate_mode: Mapped[BorrowRateMode] = mapped_column(BorrowRateModeColumn)
    # Debt of the user reserve as it stood before this borrow
    stable_token_debt: Mapped[BigInteger]
    variable_token_debt: Mapped[BigInteger]
    referrer_id: Mapped[ForeignKeyReferrerId | None]


class RepayActionTable(HistoryActionTable, UserReserveActionMixin):
    __tablename__ = "repay_actions"
    __mapper_args__ = {  # noqa: RUF012
        "polymorphic_identity": "repay",
    }

    id: Mapped[PrimaryForeignKeyHistoryActionId]
    on_behalf_of: Mapped[Address]
    amount: Mapped[BigInteger]


class SwapActionTable(HistoryActionTable, UserReserveActionMixin):
    __tablename__ = "swap_actions"
    __mapper_args__ = {  # noqa: RUF012
        "polymorphic_identity": "swap",
    }

    id: Mapped[PrimaryForeignKeyHistoryActionId]
    borrow_rate_mode_from: Mapped[BorrowRateMode] = mapped_column(BorrowRateModeColumn)
    borrow_rate_mode_to: Mapped[BorrowRateMode] = mapped_column(BorrowRateModeColumn)
    stable_borrow_rate: Mapped[BigInteger]
    variable_borrow_rate: Mapped[BigInteger]


class RebalanceStableBorrowRateActionTable(HistoryActionTable, UserReserveActionMixin):
    __tablename__ = "rebalance_stable_borrow_rate_actions"
    __mapper_args__ = {  # noqa: RUF012
        "polymorphic_identity": "rebalance_stable_borrow_rate",
    }

    id: Mapped[PrimaryForeignKeyHistoryActionId]
    borrow_rate_from: Mapped[BigInteger]
    borrow_rate_to: Mapped[BigInteger]


class UsageAsCollateralActionTable(HistoryActionTable, UserReserveActionMixin):
    __tablename__ = "usage_as_collateral_actions"
    __mapper_args__ = {  # noqa: RUF012
        "polymorphic_identity": "usage_as_collateral",
    }

    id: Mapped[PrimaryForeignKeyHistoryActionId]
    from_state: Mapped[bool]
    to_state: Mapped[bool]


class LiquidationCallActionTable(HistoryActionTable):
    __tablename__ = "liquidation_call_actions"
    __mapper_args__ = {  # noqa: RUF012
        "polymorphic_identity": "liquidation_call",
    }

    id: Mapped[PrimaryForeignKeyHistoryActionId]
    user_id: Mapped[ForeignKeyUserId]
    collateral_reserve_id: Mapped[ForeignKeyReserveId]
    collateral_user_reserve_id: Mapped[ForeignKeyUserReserveId]
    collateral_amount: Mapped[BigInteger]
    principal_reserve_id: Mapped[ForeignKeyReserveId]
    principal_user_reserve_id: Mapped[ForeignKeyUserReserveId]
    principal_amount: Mapped[BigInteger]
    liquidator: Mapped[Address]


class FlashLoanActionTable(HistoryActionTable):
    __tablename__ = "flash_loan_actions"
    __mapper_args__ = {  # noqa: RUF012
        "polymorphic_identity": "flash_loan",
    }

    id: Mapped[PrimaryForeignKeyHistoryActionId]
    reserve_id: Mapped[ForeignKeyReserveId]
    target: Mapped[Address]
    initiator: Mapped[Address]
    amount: Mapped[BigInteger]
    total_fee: Mapped[BigInteger]
