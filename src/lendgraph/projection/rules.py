"""
Accounting rules for Aave lending pool events.

Each rule resolves the entities an event touches, applies the event's accounting to the mutable
reserve and user reserve state, and records one immutable history action. `ReserveDataUpdated`,
`Paused` and `Unpaused` only update reserve state and record no history.

Snapshot fields copied into history actions (debt balances, rates, collateral usage) are read
before the rule mutates anything, so they reflect the state immediately before the event.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from lendgraph.database.models import (
    BorrowActionTable,
    DepositActionTable,
    FlashLoanActionTable,
    LiquidationCallActionTable,
    RebalanceStableBorrowRateActionTable,
    RedeemUnderlyingActionTable,
    RepayActionTable,
    SwapActionTable,
    UsageAsCollateralActionTable,
)
from lendgraph.logging import logger
from lendgraph.projection.events import (
    BorrowEvent,
    DepositEvent,
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
from lendgraph.projection.ids import get_history_id, get_unused_history_id
from lendgraph.projection.resolver import EntityResolver
from lendgraph.projection.store import EntityStore
from lendgraph.types import BorrowRateMode, HistoryActionKind


@dataclass(slots=True)
class ProjectionContext:
    """State shared by the accounting rules while applying one event."""

    store: EntityStore
    resolver: EntityResolver
    verbose: bool = False


def _process_deposit_event(event: DepositEvent, context: ProjectionContext) -> None:
    coordinates = event.coordinates
    pool_reserve = context.resolver.get_or_init_reserve(event.reserve, coordinates.address)
    user_reserve = context.resolver.get_or_init_user_reserve(
        event.user, event.reserve, coordinates.address
    )

    # A single transaction may produce more than one deposit sharing the same coordinates
    history_id = get_unused_history_id(
        store=context.store,
        action_type=DepositActionTable,
        coordinates=coordinates,
        kind=HistoryActionKind.DEPOSIT,
    )

    deposit = DepositActionTable(
        id=history_id,
        pool_id=pool_reserve.pool_id,
        user_id=user_reserve.user_id,
        on_behalf_of=event.on_behalf_of,
        reserve_id=pool_reserve.id,
        user_reserve_id=user_reserve.id,
        amount=event.amount,
        timestamp=coordinates.block_timestamp,
        referrer_id=None,
    )
    if event.referral != 0:
        deposit.referrer_id = context.resolver.get_or_init_referrer(event.referral).id
    context.store.save(deposit)

    if context.verbose:
        logger.info(f"Deposit {history_id}: {event.user} supplied {event.amount} {event.reserve}")


def _process_withdraw_event(event: WithdrawEvent, context: ProjectionContext) -> None:
    coordinates = event.coordinates
    pool_reserve = context.resolver.get_or_init_reserve(event.reserve, coordinates.address)
    user_reserve = context.resolver.get_or_init_user_reserve(
        event.user, event.reserve, coordinates.address
    )

    context.store.save(
        RedeemUnderlyingActionTable(
            id=get_history_id(coordinates, HistoryActionKind.REDEEM),
            pool_id=pool_reserve.pool_id,
            user_id=user_reserve.user_id,
            on_behalf_of=event.to,
            reserve_id=pool_reserve.id,
            user_reserve_id=user_reserve.id,
            amount=event.amount,
            timestamp=coordinates.block_timestamp,
        )
    )

    if context.verbose:
        logger.info(f"Withdraw: {event.user} redeemed {event.amount} {event.reserve} to {event.to}")


def _process_borrow_event(event: BorrowEvent, context: ProjectionContext) -> None:
    coordinates = event.coordinates
    borrow_rate_mode = BorrowRateMode.from_code(event.borrow_rate_mode)

    user_reserve = context.resolver.get_or_init_user_reserve(
        event.user, event.reserve, coordinates.address
    )
    pool_reserve = context.resolver.get_or_init_reserve(event.reserve, coordinates.address)

    borrow = BorrowActionTable(
        id=get_history_id(coordinates, HistoryActionKind.BORROW),
        pool_id=pool_reserve.pool_id,
        user_id=user_reserve.user_id,
        on_behalf_of=event.on_behalf_of,
        reserve_id=pool_reserve.id,
        user_reserve_id=user_reserve.id,
        amount=event.amount,
        stable_token_debt=user_reserve.principal_stable_debt,
        variable_token_debt=user_reserve.scaled_variable_debt,
        borrow_rate=event.borrow_rate,
        borrow_rate_mode=borrow_rate_mode,
        timestamp=coordinates.block_timestamp,
        referrer_id=None,
    )
    if event.referral != 0:
        borrow.referrer_id = context.resolver.get_or_init_referrer(event.referral).id
    context.store.save(borrow)

    if context.verbose:
        logger.info(
            f"Borrow: {event.user} borrowed {event.amount} {event.reserve} "
            f"({borrow_rate_mode.value}, rate {event.borrow_rate})"
        )


def _process_repay_event(event: RepayEvent, context: ProjectionContext) -> None:
    coordinates = event.coordinates
    user_reserve = context.resolver.get_or_init_user_reserve(
        event.user, event.reserve, coordinates.address
    )
    pool_reserve = context.resolver.get_or_init_reserve(event.reserve, coordinates.address)
    context.store.save(pool_reserve)

    context.store.save(
        RepayActionTable(
            id=get_history_id(coordinates, HistoryActionKind.REPAY),
            pool_id=pool_reserve.pool_id,
            user_id=user_reserve.user_id,
            on_behalf_of=event.repayer,
            reserve_id=pool_reserve.id,
            user_reserve_id=user_reserve.id,
            amount=event.amount,
            timestamp=coordinates.block_timestamp,
        )
    )

    if context.verbose:
        logger.info(f"Repay: {event.repayer} repaid {event.amount} {event.reserve} for {event.user}")


def _process_swap_event(event: SwapEvent, context: ProjectionContext) -> None:
    coordinates = event.coordinates
    borrow_rate_mode_from = BorrowRateMode.from_code(event.rate_mode)

    user_reserve = context.resolver.get_or_init_user_reserve(
        event.user, event.reserve, coordinates.address
    )
    pool_reserve = context.resolver.get_or_init_reserve(event.reserve, coordinates.address)

    context.store.save(
        SwapActionTable(
            id=get_history_id(coordinates, HistoryActionKind.SWAP),
            pool_id=pool_reserve.pool_id,
            user_id=user_reserve.user_id,
            reserve_id=pool_reserve.id,
            user_reserve_id=user_reserve.id,
            borrow_rate_mode_from=borrow_rate_mode_from,
            borrow_rate_mode_to=borrow_rate_mode_from.opposite,
            stable_borrow_rate=pool_reserve.stable_borrow_rate,
            variable_borrow_rate=pool_reserve.variable_borrow_rate,
            timestamp=coordinates.block_timestamp,
        )
    )


def _process_rebalance_stable_borrow_rate_event(
    event: RebalanceStableBorrowRateEvent,
    context: ProjectionContext,
) -> None:
    coordinates = event.coordinates
    user_reserve = context.resolver.get_or_init_user_reserve(
        event.user, event.reserve, coordinates.address
    )
    pool_reserve = context.resolver.get_or_init_reserve(event.reserve, coordinates.address)

    context.store.save(
        RebalanceStableBorrowRateActionTable(
            id=get_history_id(coordinates, HistoryActionKind.REBALANCE_STABLE_BORROW_RATE),
            pool_id=pool_reserve.pool_id,
            user_id=user_reserve.user_id,
            reserve_id=pool_reserve.id,
            user_reserve_id=user_reserve.id,
            borrow_rate_from=user_reserve.old_stable_borrow_rate,
            borrow_rate_to=user_reserve.stable_borrow_rate,
            timestamp=coordinates.block_timestamp,
        )
    )


def _process_liquidation_call_event(
    event: LiquidationCallEvent,
    context: ProjectionContext,
) -> None:
    coordinates = event.coordinates
    user = context.resolver.get_or_init_user(event.user)

    collateral_pool_reserve = context.resolver.get_or_init_reserve(
        event.collateral_asset, coordinates.address
    )
    collateral_user_reserve = context.resolver.get_or_init_user_reserve(
        event.user, event.collateral_asset, coordinates.address
    )
    collateral_pool_reserve.lifetime_liquidated += event.liquidated_collateral_amount
    context.store.save(collateral_pool_reserve)

    principal_user_reserve = context.resolver.get_or_init_user_reserve(
        event.user, event.debt_asset, coordinates.address
    )
    principal_pool_reserve = context.resolver.get_or_init_reserve(
        event.debt_asset, coordinates.address
    )
    context.store.save(principal_pool_reserve)

    context.store.save(
        LiquidationCallActionTable(
            id=get_history_id(coordinates, HistoryActionKind.LIQUIDATION_CALL),
            pool_id=collateral_pool_reserve.pool_id,
            user_id=user.id,
            collateral_reserve_id=collateral_pool_reserve.id,
            collateral_user_reserve_id=collateral_user_reserve.id,
            collateral_amount=event.liquidated_collateral_amount,
            principal_reserve_id=principal_pool_reserve.id,
            principal_user_reserve_id=principal_user_reserve.id,
            principal_amount=event.debt_to_cover,
            liquidator=event.liquidator,
            timestamp=coordinates.block_timestamp,
        )
    )

    if context.verbose:
        logger.info(
            f"Liquidation: {event.liquidator} covered {event.debt_to_cover} {event.debt_asset} "
            f"for {event.user}, seized {event.liquidated_collateral_amount} "
            f"{event.collateral_asset}"
        )


def _process_flash_loan_event(event: FlashLoanEvent, context: ProjectionContext) -> None:
    coordinates = event.coordinates
    pool_reserve = context.resolver.get_or_init_reserve(event.asset, coordinates.address)

    premium = event.premium
    pool_reserve.available_liquidity += premium
    pool_reserve.lifetime_flash_loans += event.amount
    pool_reserve.lifetime_flashloan_protocol_fee += premium
    pool_reserve.lifetime_fee_collected += premium
    context.store.save(pool_reserve)

    context.store.save(
        FlashLoanActionTable(
            id=get_history_id(coordinates, HistoryActionKind.FLASH_LOAN),
            pool_id=pool_reserve.pool_id,
            reserve_id=pool_reserve.id,
            target=event.target,
            initiator=event.initiator,
            total_fee=premium,
            amount=event.amount,
            timestamp=coordinates.block_timestamp,
        )
    )


def _set_usage_as_collateral(
    event: ReserveUsedAsCollateralEnabledEvent | ReserveUsedAsCollateralDisabledEvent,
    context: ProjectionContext,
    *,
    enabled: bool,
) -> None:
    coordinates = event.coordinates
    pool_reserve = context.resolver.get_or_init_reserve(event.reserve, coordinates.address)
    user_reserve = context.resolver.get_or_init_user_reserve(
        event.user, event.reserve, coordinates.address
    )

    # The history action is written before the user reserve is changed
    context.store.save(
        UsageAsCollateralActionTable(
            id=get_history_id(coordinates, HistoryActionKind.USAGE_AS_COLLATERAL),
            pool_id=pool_reserve.pool_id,
            user_id=user_reserve.user_id,
            reserve_id=pool_reserve.id,
            user_reserve_id=user_reserve.id,
            from_state=user_reserve.usage_as_collateral_enabled_on_user,
            to_state=enabled,
            timestamp=coordinates.block_timestamp,
        )
    )

    user_reserve.usage_as_collateral_enabled_on_user = enabled
    user_reserve.last_update_timestamp = coordinates.block_timestamp
    context.store.save(user_reserve)


def _process_reserve_used_as_collateral_enabled_event(
    event: ReserveUsedAsCollateralEnabledEvent,
    context: ProjectionContext,
) -> None:
    _set_usage_as_collateral(event, context, enabled=True)


def _process_reserve_used_as_collateral_disabled_event(
    event: ReserveUsedAsCollateralDisabledEvent,
    context: ProjectionContext,
) -> None:
    _set_usage_as_collateral(event, context, enabled=False)


def _process_reserve_data_updated_event(
    event: ReserveDataUpdatedEvent,
    context: ProjectionContext,
) -> None:
    coordinates = event.coordinates
    reserve = context.resolver.get_or_init_reserve(event.reserve, coordinates.address)

    if reserve.last_update_timestamp > coordinates.block_timestamp:
        logger.warning(
            f"Reserve {event.reserve} updated at {coordinates.block_timestamp}, earlier than its "
            f"last update at {reserve.last_update_timestamp}"
        )

    reserve.liquidity_rate = event.liquidity_rate
    reserve.stable_borrow_rate = event.stable_borrow_rate
    reserve.variable_borrow_rate = event.variable_borrow_rate
    reserve.liquidity_index = event.liquidity_index
    reserve.variable_borrow_index = event.variable_borrow_index
    reserve.last_update_timestamp = coordinates.block_timestamp
    context.store.save(reserve)


def _process_paused_event(event: PausedEvent, context: ProjectionContext) -> None:
    # The pause events carry no asset, so the reserve is keyed by the emitting contract
    coordinates = event.coordinates
    reserve = context.resolver.get_or_init_reserve(coordinates.address, coordinates.address)
    reserve.paused = True
    context.store.save(reserve)


def _process_unpaused_event(event: UnpausedEvent, context: ProjectionContext) -> None:
    coordinates = event.coordinates
    reserve = context.resolver.get_or_init_reserve(coordinates.address, coordinates.address)
    reserve.paused = False
    context.store.save(reserve)


type EventHandler = Callable[[Any, ProjectionContext], None]

EVENT_HANDLERS: dict[type[PoolEvent], EventHandler] = {
    DepositEvent: _process_deposit_event,
    WithdrawEvent: _process_withdraw_event,
    BorrowEvent: _process_borrow_event,
    RepayEvent: _process_repay_event,
    SwapEvent: _process_swap_event,
    RebalanceStableBorrowRateEvent: _process_rebalance_stable_borrow_rate_event,
    LiquidationCallEvent: _process_liquidation_call_event,
    FlashLoanEvent: _process_flash_loan_event,
    ReserveUsedAsCollateralEnabledEvent: _process_reserve_used_as_collateral_enabled_event,
    ReserveUsedAsCollateralDisabledEvent: _process_reserve_used_as_collateral_disabled_event,
    ReserveDataUpdatedEvent: _process_reserve_data_updated_event,
    PausedEvent: _process_paused_event,
    UnpausedEvent: _process_unpaused_event,
}
