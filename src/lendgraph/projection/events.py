"""Typed lending pool event records consumed by the projection dispatcher."""

from dataclasses import dataclass

from eth_typing import ChecksumAddress
from hexbytes import HexBytes


@dataclass(frozen=True, slots=True)
class EventCoordinates:
    """Position of an event in the chain, plus the contract that emitted it."""

    address: ChecksumAddress
    block_number: int
    block_timestamp: int
    transaction_index: int
    log_index: int
    transaction_hash: HexBytes | None = None

    @property
    def position(self) -> tuple[int, int, int]:
        """Sort key for chain order."""
        return self.block_number, self.transaction_index, self.log_index


@dataclass(frozen=True, slots=True)
class PoolEvent:
    """
    Base class for all lending pool events.

    Records carry the full decoded log payload. Some fields, such as the transaction hash, the
    liquidation `receive_a_token` flag and the flash loan referral code, are not read by any
    accounting rule but are kept so that callers can inspect the complete event.
    """

    coordinates: EventCoordinates


@dataclass(frozen=True, slots=True)
class DepositEvent(PoolEvent):
    reserve: ChecksumAddress
    user: ChecksumAddress
    on_behalf_of: ChecksumAddress
    amount: int
    referral: int


@dataclass(frozen=True, slots=True)
class WithdrawEvent(PoolEvent):
    reserve: ChecksumAddress
    user: ChecksumAddress
    to: ChecksumAddress
    amount: int


@dataclass(frozen=True, slots=True)
class BorrowEvent(PoolEvent):
    reserve: ChecksumAddress
    user: ChecksumAddress
    on_behalf_of: ChecksumAddress
    amount: int
    borrow_rate_mode: int  # raw numeric code, decoded by the accounting rule
    borrow_rate: int
    referral: int


@dataclass(frozen=True, slots=True)
class RepayEvent(PoolEvent):
    reserve: ChecksumAddress
    user: ChecksumAddress
    repayer: ChecksumAddress
    amount: int


@dataclass(frozen=True, slots=True)
class SwapEvent(PoolEvent):
    reserve: ChecksumAddress
    user: ChecksumAddress
    rate_mode: int


@dataclass(frozen=True, slots=True)
class RebalanceStableBorrowRateEvent(PoolEvent):
    reserve: ChecksumAddress
    user: ChecksumAddress


@dataclass(frozen=True, slots=True)
class ReserveUsedAsCollateralEnabledEvent(PoolEvent):
    reserve: ChecksumAddress
    user: ChecksumAddress


@dataclass(frozen=True, slots=True)
class ReserveUsedAsCollateralDisabledEvent(PoolEvent):
    reserve: ChecksumAddress
    user: ChecksumAddress


@dataclass(frozen=True, slots=True)
class LiquidationCallEvent(PoolEvent):
    collateral_asset: ChecksumAddress
    debt_asset: ChecksumAddress
    user: ChecksumAddress
    debt_to_cover: int
    liquidated_collateral_amount: int
    liquidator: ChecksumAddress
    receive_a_token: bool


@dataclass(frozen=True, slots=True)
class FlashLoanEvent(PoolEvent):
    target: ChecksumAddress
    initiator: ChecksumAddress
    asset: ChecksumAddress
    amount: int
    premium: int
    referral_code: int


@dataclass(frozen=True, slots=True)
class ReserveDataUpdatedEvent(PoolEvent):
    reserve: ChecksumAddress
    liquidity_rate: int
    stable_borrow_rate: int
    variable_borrow_rate: int
    liquidity_index: int
    variable_borrow_index: int


@dataclass(frozen=True, slots=True)
class PausedEvent(PoolEvent): ...


@dataclass(frozen=True, slots=True)
class UnpausedEvent(PoolEvent): ...
