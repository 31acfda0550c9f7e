from sqlalchemy import Index
from sqlalchemy.orm import Mapped, relationship

from .base import Address, Base, BigInteger
from .types import (
    ForeignKeyPoolId,
    ForeignKeyReserveId,
    ForeignKeyUserId,
    PrimaryKeyStr,
)


class PoolTable(Base):
    __tablename__ = "pools"

    # Lowercase address of the lending pool contract
    id: Mapped[PrimaryKeyStr]
    address: Mapped[Address]

    # Relationships
    reserves: Mapped[list["ReserveTable"]] = relationship(
        "ReserveTable",
        back_populates="pool",
    )


class ReserveTable(Base):
    """
    Aggregate state for one underlying asset of a lending pool.

    The `lifetime_*` columns are running totals and only ever increase. Rates and indices are
    overwritten by `ReserveDataUpdated` events and are expressed in ray units.
    """

    __tablename__ = "reserves"

    # Lowercase asset address followed by the lowercase pool address
    id: Mapped[PrimaryKeyStr]
    pool_id: Mapped[ForeignKeyPoolId]
    underlying_asset: Mapped[Address]

    available_liquidity: Mapped[BigInteger]
    lifetime_liquidated: Mapped[BigInteger]
    lifetime_flash_loans: Mapped[BigInteger]
    lifetime_flashloan_protocol_fee: Mapped[BigInteger]
    lifetime_fee_collected: Mapped[BigInteger]

    liquidity_rate: Mapped[BigInteger]
    stable_borrow_rate: Mapped[BigInteger]
    variable_borrow_rate: Mapped[BigInteger]
    liquidity_index: Mapped[BigInteger]
    variable_borrow_index: Mapped[BigInteger]

    paused: Mapped[bool]
    last_update_timestamp: Mapped[int]

    # Relationships
    pool: Mapped["PoolTable"] = relationship(
        "PoolTable",
        back_populates="reserves",
    )
    user_reserves: Mapped[list["UserReserveTable"]] = relationship(
        "UserReserveTable",
        back_populates="reserve",
    )


Index(
    "ix_reserves_underlying_asset_pool",
    ReserveTable.underlying_asset,
    ReserveTable.pool_id,
    unique=True,
)


class UserTable(Base):
    __tablename__ = "users"

    # Lowercase user address
    id: Mapped[PrimaryKeyStr]
    address: Mapped[Address]

    # Relationships
    reserves: Mapped[list["UserReserveTable"]] = relationship(
        "UserReserveTable",
        back_populates="user",
    )


class UserReserveTable(Base):
    __tablename__ = "user_reserves"

    # Lowercase user address, asset address and pool address, concatenated
    id: Mapped[PrimaryKeyStr]
    pool_id: Mapped[ForeignKeyPoolId]
    user_id: Mapped[ForeignKeyUserId]
    reserve_id: Mapped[ForeignKeyReserveId]

    principal_stable_debt: Mapped[BigInteger]
    scaled_variable_debt: Mapped[BigInteger]
    old_stable_borrow_rate: Mapped[BigInteger]
    stable_borrow_rate: Mapped[BigInteger]
    usage_as_collateral_enabled_on_user: Mapped[bool]
    last_update_timestamp: Mapped[int]

    # Relationships
    user: Mapped["UserTable"] = relationship(
        "UserTable",
        back_populates="reserves",
    )
    reserve: Mapped["ReserveTable"] = relationship(
        "ReserveTable",
        back_populates="user_reserves",
    )


Index(
    "ix_user_reserves_user_reserve",
    UserReserveTable.user_id,
    UserReserveTable.reserve_id,
    unique=True,
)


class ReferrerTable(Base):
    __tablename__ = "referrers"

    # Decimal string of the referral code
    id: Mapped[PrimaryKeyStr]
