"""
Decode raw Aave V2 `LendingPool` logs into typed event records.

Logs are accepted in the shape returned by `eth_getLogs`, with either `HexBytes` or hex string
values. The log must also carry a `blockTimestamp` value, which some clients include and which
otherwise must be added by the caller from the block header.
"""

from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any

import eth_abi.abi
from eth_abi.exceptions import DecodingError
from eth_typing import ChecksumAddress
from hexbytes import HexBytes
from web3 import Web3

from lendgraph.checksum_cache import get_checksum_address
from lendgraph.exceptions.projection import MalformedLog, UnknownEventTopic
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


class LendingPoolEvent(Enum):
    DEPOSIT = Web3.keccak(text="Deposit(address,address,address,uint256,uint16)")
    WITHDRAW = Web3.keccak(text="Withdraw(address,address,address,uint256)")
    BORROW = Web3.keccak(text="Borrow(address,address,address,uint256,uint256,uint256,uint16)")
    REPAY = Web3.keccak(text="Repay(address,address,address,uint256)")
    SWAP = Web3.keccak(text="Swap(address,address,uint256)")
    RESERVE_USED_AS_COLLATERAL_ENABLED = Web3.keccak(
        text="ReserveUsedAsCollateralEnabled(address,address)"
    )
    RESERVE_USED_AS_COLLATERAL_DISABLED = Web3.keccak(
        text="ReserveUsedAsCollateralDisabled(address,address)"
    )
    REBALANCE_STABLE_BORROW_RATE = Web3.keccak(text="RebalanceStableBorrowRate(address,address)")
    FLASH_LOAN = Web3.keccak(text="FlashLoan(address,address,address,uint256,uint256,uint16)")
    PAUSED = Web3.keccak(text="Paused()")
    UNPAUSED = Web3.keccak(text="Unpaused()")
    LIQUIDATION_CALL = Web3.keccak(
        text="LiquidationCall(address,address,address,uint256,uint256,address,bool)"
    )
    RESERVE_DATA_UPDATED = Web3.keccak(
        text="ReserveDataUpdated(address,uint256,uint256,uint256,uint256,uint256)"
    )


def _decode_address(input_: bytes) -> ChecksumAddress:
    """
    Get the checksummed address from the given byte stream.
    """

    (address,) = eth_abi.abi.decode(types=["address"], data=input_)
    return get_checksum_address(address)


def _decode_uint16(input_: bytes) -> int:
    (value,) = eth_abi.abi.decode(types=["uint16"], data=input_)
    return value


def _to_int(value: int | str) -> int:
    return value if isinstance(value, int) else int(value, 16)


def _get_coordinates(log: Mapping[str, Any]) -> EventCoordinates:
    try:
        transaction_hash = log.get("transactionHash")
        return EventCoordinates(
            address=get_checksum_address(log["address"]),
            block_number=_to_int(log["blockNumber"]),
            block_timestamp=_to_int(log["blockTimestamp"]),
            transaction_index=_to_int(log["transactionIndex"]),
            log_index=_to_int(log["logIndex"]),
            transaction_hash=None if transaction_hash is None else HexBytes(transaction_hash),
        )
    except KeyError as exc:
        raise MalformedLog(reason=f"missing field {exc.args[0]!r}") from exc
    except (TypeError, ValueError) as exc:
        raise MalformedLog(reason=f"invalid log coordinates: {exc}") from exc


def _decode_deposit(
    coordinates: EventCoordinates, topics: list[HexBytes], data: HexBytes
) -> DepositEvent:
    # event Deposit(
    #     address indexed reserve,
    #     address user,
    #     address indexed onBehalfOf,
    #     uint256 amount,
    #     uint16 indexed referral
    # );
    user, amount = eth_abi.abi.decode(types=["address", "uint256"], data=data)
    return DepositEvent(
        coordinates=coordinates,
        reserve=_decode_address(topics[1]),
        user=get_checksum_address(user),
        on_behalf_of=_decode_address(topics[2]),
        amount=amount,
        referral=_decode_uint16(topics[3]),
    )


def _decode_withdraw(
    coordinates: EventCoordinates, topics: list[HexBytes], data: HexBytes
) -> WithdrawEvent:
    # event Withdraw(
    #     address indexed reserve,
    #     address indexed user,
    #     address indexed to,
    #     uint256 amount
    # );
    (amount,) = eth_abi.abi.decode(types=["uint256"], data=data)
    return WithdrawEvent(
        coordinates=coordinates,
        reserve=_decode_address(topics[1]),
        user=_decode_address(topics[2]),
        to=_decode_address(topics[3]),
        amount=amount,
    )


def _decode_borrow(
    coordinates: EventCoordinates, topics: list[HexBytes], data: HexBytes
) -> BorrowEvent:
    # event Borrow(
    #     address indexed reserve,
    #     address user,
    #     address indexed onBehalfOf,
    #     uint256 amount,
    #     uint256 borrowRateMode,
    #     uint256 borrowRate,
    #     uint16 indexed referral
    # );
    user, amount, borrow_rate_mode, borrow_rate = eth_abi.abi.decode(
        types=["address", "uint256", "uint256", "uint256"], data=data
    )
    return BorrowEvent(
        coordinates=coordinates,
        reserve=_decode_address(topics[1]),
        user=get_checksum_address(user),
        on_behalf_of=_decode_address(topics[2]),
        amount=amount,
        borrow_rate_mode=borrow_rate_mode,
        borrow_rate=borrow_rate,
        referral=_decode_uint16(topics[3]),
    )


def _decode_repay(
    coordinates: EventCoordinates, topics: list[HexBytes], data: HexBytes
) -> RepayEvent:
    # event Repay(
    #     address indexed reserve,
    #     address indexed user,
    #     address indexed repayer,
    #     uint256 amount
    # );
    (amount,) = eth_abi.abi.decode(types=["uint256"], data=data)
    return RepayEvent(
        coordinates=coordinates,
        reserve=_decode_address(topics[1]),
        user=_decode_address(topics[2]),
        repayer=_decode_address(topics[3]),
        amount=amount,
    )


def _decode_swap(
    coordinates: EventCoordinates, topics: list[HexBytes], data: HexBytes
) -> SwapEvent:
    # event Swap(
    #     address indexed reserve,
    #     address indexed user,
    #     uint256 rateMode
    # );
    (rate_mode,) = eth_abi.abi.decode(types=["uint256"], data=data)
    return SwapEvent(
        coordinates=coordinates,
        reserve=_decode_address(topics[1]),
        user=_decode_address(topics[2]),
        rate_mode=rate_mode,
    )


def _decode_reserve_and_user(
    event_type: type[
        RebalanceStableBorrowRateEvent
        | ReserveUsedAsCollateralEnabledEvent
        | ReserveUsedAsCollateralDisabledEvent
    ],
) -> "EventDecoder":
    # event ...(
    #     address indexed reserve,
    #     address indexed user
    # );
    def decode(
        coordinates: EventCoordinates,
        topics: list[HexBytes],
        data: HexBytes,  # noqa: ARG001
    ) -> PoolEvent:
        return event_type(
            coordinates=coordinates,
            reserve=_decode_address(topics[1]),
            user=_decode_address(topics[2]),
        )

    return decode


def _decode_flash_loan(
    coordinates: EventCoordinates, topics: list[HexBytes], data: HexBytes
) -> FlashLoanEvent:
    # event FlashLoan(
    #     address indexed target,
    #     address indexed initiator,
    #     address indexed asset,
    #     uint256 amount,
    #     uint256 premium,
    #     uint16 referralCode
    # );
    amount, premium, referral_code = eth_abi.abi.decode(
        types=["uint256", "uint256", "uint16"], data=data
    )
    return FlashLoanEvent(
        coordinates=coordinates,
        target=_decode_address(topics[1]),
        initiator=_decode_address(topics[2]),
        asset=_decode_address(topics[3]),
        amount=amount,
        premium=premium,
        referral_code=referral_code,
    )


def _decode_liquidation_call(
    coordinates: EventCoordinates, topics: list[HexBytes], data: HexBytes
) -> LiquidationCallEvent:
    # event LiquidationCall(
    #     address indexed collateralAsset,
    #     address indexed debtAsset,
    #     address indexed user,
    #     uint256 debtToCover,
    #     uint256 liquidatedCollateralAmount,
    #     address liquidator,
    #     bool receiveAToken
    # );
    debt_to_cover, liquidated_collateral_amount, liquidator, receive_a_token = (
        eth_abi.abi.decode(types=["uint256", "uint256", "address", "bool"], data=data)
    )
    return LiquidationCallEvent(
        coordinates=coordinates,
        collateral_asset=_decode_address(topics[1]),
        debt_asset=_decode_address(topics[2]),
        user=_decode_address(topics[3]),
        debt_to_cover=debt_to_cover,
        liquidated_collateral_amount=liquidated_collateral_amount,
        liquidator=get_checksum_address(liquidator),
        receive_a_token=receive_a_token,
    )


def _decode_reserve_data_updated(
    coordinates: EventCoordinates, topics: list[HexBytes], data: HexBytes
) -> ReserveDataUpdatedEvent:
    # event ReserveDataUpdated(
    #     address indexed reserve,
    #     uint256 liquidityRate,
    #     uint256 stableBorrowRate,
    #     uint256 variableBorrowRate,
    #     uint256 liquidityIndex,
    #     uint256 variableBorrowIndex
    # );
    (
        liquidity_rate,
        stable_borrow_rate,
        variable_borrow_rate,
        liquidity_index,
        variable_borrow_index,
    ) = eth_abi.abi.decode(types=["uint256"] * 5, data=data)
    return ReserveDataUpdatedEvent(
        coordinates=coordinates,
        reserve=_decode_address(topics[1]),
        liquidity_rate=liquidity_rate,
        stable_borrow_rate=stable_borrow_rate,
        variable_borrow_rate=variable_borrow_rate,
        liquidity_index=liquidity_index,
        variable_borrow_index=variable_borrow_index,
    )


def _decode_paused(
    coordinates: EventCoordinates,
    topics: list[HexBytes],  # noqa: ARG001
    data: HexBytes,  # noqa: ARG001
) -> PausedEvent:
    return PausedEvent(coordinates=coordinates)


def _decode_unpaused(
    coordinates: EventCoordinates,
    topics: list[HexBytes],  # noqa: ARG001
    data: HexBytes,  # noqa: ARG001
) -> UnpausedEvent:
    return UnpausedEvent(coordinates=coordinates)


type EventDecoder = Callable[[EventCoordinates, list[HexBytes], HexBytes], PoolEvent]

EVENT_DECODERS: dict[HexBytes, EventDecoder] = {
    LendingPoolEvent.DEPOSIT.value: _decode_deposit,
    LendingPoolEvent.WITHDRAW.value: _decode_withdraw,
    LendingPoolEvent.BORROW.value: _decode_borrow,
    LendingPoolEvent.REPAY.value: _decode_repay,
    LendingPoolEvent.SWAP.value: _decode_swap,
    LendingPoolEvent.RESERVE_USED_AS_COLLATERAL_ENABLED.value: _decode_reserve_and_user(
        ReserveUsedAsCollateralEnabledEvent
    ),
    LendingPoolEvent.RESERVE_USED_AS_COLLATERAL_DISABLED.value: _decode_reserve_and_user(
        ReserveUsedAsCollateralDisabledEvent
    ),
    LendingPoolEvent.REBALANCE_STABLE_BORROW_RATE.value: _decode_reserve_and_user(
        RebalanceStableBorrowRateEvent
    ),
    LendingPoolEvent.FLASH_LOAN.value: _decode_flash_loan,
    LendingPoolEvent.PAUSED.value: _decode_paused,
    LendingPoolEvent.UNPAUSED.value: _decode_unpaused,
    LendingPoolEvent.LIQUIDATION_CALL.value: _decode_liquidation_call,
    LendingPoolEvent.RESERVE_DATA_UPDATED.value: _decode_reserve_data_updated,
}


def decode_log(log: Mapping[str, Any]) -> PoolEvent:
    """
    Decode a lending pool log into its typed event record.

    Raises:
        UnknownEventTopic: if topic0 is not a known lending pool event
        MalformedLog: if fields are missing or the topics and data cannot be decoded
    """

    coordinates = _get_coordinates(log)
    try:
        topics = [HexBytes(topic) for topic in log.get("topics", [])]
        data = HexBytes(log.get("data", b""))
    except (TypeError, ValueError) as exc:
        raise MalformedLog(reason=f"invalid topics or data: {exc}") from exc
    if not topics:
        raise MalformedLog(reason="log has no topics")

    decoder = EVENT_DECODERS.get(topics[0])
    if decoder is None:
        raise UnknownEventTopic(topic=topics[0])

    try:
        return decoder(coordinates, topics, data)
    except (DecodingError, IndexError) as exc:
        raise MalformedLog(reason=f"cannot decode {topics[0].to_0x_hex()}: {exc}") from exc
