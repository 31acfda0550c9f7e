"""Get-or-create resolution of the entities touched by an event."""

from enum import Enum
from typing import Any

from eth_typing import ChecksumAddress

from lendgraph.database.models import (
    Base,
    PoolTable,
    ReferrerTable,
    ReserveTable,
    UserReserveTable,
    UserTable,
)
from lendgraph.exceptions.base import LendgraphValueError
from lendgraph.logging import logger
from lendgraph.projection.ids import (
    get_pool_id,
    get_referrer_id,
    get_reserve_id,
    get_user_id,
    get_user_reserve_id,
)
from lendgraph.projection.store import EntityStore


class EntityKind(Enum):
    POOL = "pool"
    RESERVE = "reserve"
    USER = "user"
    USER_RESERVE = "user_reserve"
    REFERRER = "referrer"


class EntityResolver:
    """
    Resolve entities by their logical key, creating and saving a zero-valued entity the first time a
    key is seen.

    Resolution is a get-or-create: an entity created by an earlier event is returned with every
    mutation committed since, never replaced with a fresh default.
    """

    def __init__(self, store: EntityStore) -> None:
        self.store = store

    def resolve(self, kind: EntityKind, key: tuple[Any, ...]) -> Base:
        """
        Resolve an entity of the given kind. The key holds the arguments of the matching
        `get_or_init_*` method, e.g. `(asset, pool)` for a reserve.
        """

        match kind:
            case EntityKind.POOL:
                return self.get_or_init_pool(*key)
            case EntityKind.RESERVE:
                return self.get_or_init_reserve(*key)
            case EntityKind.USER:
                return self.get_or_init_user(*key)
            case EntityKind.USER_RESERVE:
                return self.get_or_init_user_reserve(*key)
            case EntityKind.REFERRER:
                return self.get_or_init_referrer(*key)
            case _:
                msg = f"Unknown entity kind {kind}"
                raise LendgraphValueError(msg)

    def get_or_init_pool(self, pool_address: ChecksumAddress) -> PoolTable:
        pool_id = get_pool_id(pool_address)
        if (pool := self.store.load(PoolTable, pool_id)) is None:
            pool = PoolTable(id=pool_id, address=pool_address)
            self.store.save(pool)
            logger.debug(f"Initialized pool {pool_address}")
        return pool

    def get_or_init_reserve(
        self,
        underlying_asset: ChecksumAddress,
        pool_address: ChecksumAddress,
    ) -> ReserveTable:
        reserve_id = get_reserve_id(underlying_asset, pool_address)
        if (reserve := self.store.load(ReserveTable, reserve_id)) is None:
            pool = self.get_or_init_pool(pool_address)
            reserve = ReserveTable(
                id=reserve_id,
                pool_id=pool.id,
                underlying_asset=underlying_asset,
                available_liquidity=0,
                lifetime_liquidated=0,
                lifetime_flash_loans=0,
                lifetime_flashloan_protocol_fee=0,
                lifetime_fee_collected=0,
                liquidity_rate=0,
                stable_borrow_rate=0,
                variable_borrow_rate=0,
                liquidity_index=0,
                variable_borrow_index=0,
                paused=False,
                last_update_timestamp=0,
            )
            self.store.save(reserve)
            logger.debug(f"Initialized reserve {underlying_asset} in pool {pool_address}")
        return reserve

    def get_or_init_user(self, user_address: ChecksumAddress) -> UserTable:
        user_id = get_user_id(user_address)
        if (user := self.store.load(UserTable, user_id)) is None:
            user = UserTable(id=user_id, address=user_address)
            self.store.save(user)
        return user

    def get_or_init_user_reserve(
        self,
        user_address: ChecksumAddress,
        underlying_asset: ChecksumAddress,
        pool_address: ChecksumAddress,
    ) -> UserReserveTable:
        user_reserve_id = get_user_reserve_id(user_address, underlying_asset, pool_address)
        if (user_reserve := self.store.load(UserReserveTable, user_reserve_id)) is None:
            user = self.get_or_init_user(user_address)
            reserve = self.get_or_init_reserve(underlying_asset, pool_address)
            user_reserve = UserReserveTable(
                id=user_reserve_id,
                pool_id=reserve.pool_id,
                user_id=user.id,
                reserve_id=reserve.id,
                principal_stable_debt=0,
                scaled_variable_debt=0,
                old_stable_borrow_rate=0,
                stable_borrow_rate=0,
                usage_as_collateral_enabled_on_user=False,
                last_update_timestamp=0,
            )
            self.store.save(user_reserve)
        return user_reserve

    def get_or_init_referrer(self, referral_code: int) -> ReferrerTable:
        referrer_id = get_referrer_id(referral_code)
        if (referrer := self.store.load(ReferrerTable, referrer_id)) is None:
            referrer = ReferrerTable(id=referrer_id)
            self.store.save(referrer)
        return referrer
