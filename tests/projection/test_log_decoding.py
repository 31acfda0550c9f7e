from typing import Any

import eth_abi.abi
import pytest
from hexbytes import HexBytes
from web3 import Web3

from lendgraph.checksum_cache import get_checksum_address
from lendgraph.exceptions import MalformedLog, UnknownEventTopic
from lendgraph.projection.decoding import EVENT_DECODERS, LendingPoolEvent, decode_log
from lendgraph.projection.events import (
    BorrowEvent,
    DepositEvent,
    FlashLoanEvent,
    LiquidationCallEvent,
    PausedEvent,
    RebalanceStableBorrowRateEvent,
    RepayEvent,
    ReserveDataUpdatedEvent,
    ReserveUsedAsCollateralDisabledEvent,
    ReserveUsedAsCollateralEnabledEvent,
    SwapEvent,
    UnpausedEvent,
    WithdrawEvent,
)

LENDING_POOL = get_checksum_address("0x7d2768dE32b0b80b7a3454c06BdAc94A69DDc7A9")
WETH = get_checksum_address("0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2")
USDC = get_checksum_address("0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48")
ALICE = get_checksum_address("0x00000000000000000000000000000000000a11ce")
BOB = get_checksum_address("0x0000000000000000000000000000000000000b0b")


def _topic(abi_type: str, value: Any) -> HexBytes:
    return HexBytes(eth_abi.abi.encode([abi_type], [value]))


def _log(event: LendingPoolEvent, topics: list[HexBytes], data: bytes = b"") -> dict[str, Any]:
    return {
        "address": LENDING_POOL,
        "blockNumber": 12_345_678,
        "blockTimestamp": 1_620_000_000,
        "transactionIndex": 12,
        "logIndex": 34,
        "transactionHash": HexBytes("0x" + "ab" * 32),
        "topics": [event.value, *topics],
        "data": HexBytes(data),
    }


def test_event_topics():
    assert LendingPoolEvent.PAUSED.value == Web3.keccak(text="Paused()")
    assert all(len(event.value) == 32 for event in LendingPoolEvent)
    assert len({event.value for event in LendingPoolEvent}) == 13
    assert set(EVENT_DECODERS) == {event.value for event in LendingPoolEvent}


def test_decode_coordinates():
    event = decode_log(
        _log(
            LendingPoolEvent.PAUSED,
            topics=[],
        )
    )
    assert isinstance(event, PausedEvent)
    coordinates = event.coordinates
    assert coordinates.address == LENDING_POOL
    assert coordinates.block_number == 12_345_678
    assert coordinates.block_timestamp == 1_620_000_000
    assert coordinates.transaction_index == 12
    assert coordinates.log_index == 34
    assert coordinates.transaction_hash == HexBytes("0x" + "ab" * 32)


def test_decode_hex_string_log():
    """
    JSON-RPC responses carry quantities and byte strings as hex strings.
    """

    log = {
        "address": LENDING_POOL.lower(),
        "blockNumber": hex(12_345_678),
        "blockTimestamp": hex(1_620_000_000),
        "transactionIndex": "0xc",
        "logIndex": "0x22",
        "topics": [
            LendingPoolEvent.WITHDRAW.value.to_0x_hex(),
            _topic("address", WETH).to_0x_hex(),
            _topic("address", ALICE).to_0x_hex(),
            _topic("address", BOB).to_0x_hex(),
        ],
        "data": HexBytes(eth_abi.abi.encode(["uint256"], [10**18])).to_0x_hex(),
    }
    event = decode_log(log)
    assert event == WithdrawEvent(
        coordinates=event.coordinates,
        reserve=WETH,
        user=ALICE,
        to=BOB,
        amount=10**18,
    )
    assert event.coordinates.address == LENDING_POOL
    assert event.coordinates.block_number == 12_345_678
    assert event.coordinates.log_index == 34
    assert event.coordinates.transaction_hash is None


def test_decode_deposit():
    event = decode_log(
        _log(
            LendingPoolEvent.DEPOSIT,
            topics=[_topic("address", WETH), _topic("address", BOB), _topic("uint16", 88)],
            data=eth_abi.abi.encode(["address", "uint256"], [ALICE, 5 * 10**18]),
        )
    )
    assert isinstance(event, DepositEvent)
    assert event.reserve == WETH
    assert event.user == ALICE
    assert event.on_behalf_of == BOB
    assert event.amount == 5 * 10**18
    assert event.referral == 88


def test_decode_borrow():
    event = decode_log(
        _log(
            LendingPoolEvent.BORROW,
            topics=[_topic("address", USDC), _topic("address", ALICE), _topic("uint16", 0)],
            data=eth_abi.abi.encode(
                ["address", "uint256", "uint256", "uint256"],
                [ALICE, 1_000 * 10**6, 2, 35 * 10**24],
            ),
        )
    )
    assert isinstance(event, BorrowEvent)
    assert event.reserve == USDC
    assert event.user == ALICE
    assert event.on_behalf_of == ALICE
    assert event.amount == 1_000 * 10**6
    assert event.borrow_rate_mode == 2
    assert event.borrow_rate == 35 * 10**24
    assert event.referral == 0


def test_decode_repay():
    event = decode_log(
        _log(
            LendingPoolEvent.REPAY,
            topics=[_topic("address", USDC), _topic("address", ALICE), _topic("address", BOB)],
            data=eth_abi.abi.encode(["uint256"], [123]),
        )
    )
    assert event == RepayEvent(
        coordinates=event.coordinates, reserve=USDC, user=ALICE, repayer=BOB, amount=123
    )


def test_decode_swap():
    event = decode_log(
        _log(
            LendingPoolEvent.SWAP,
            topics=[_topic("address", USDC), _topic("address", ALICE)],
            data=eth_abi.abi.encode(["uint256"], [1]),
        )
    )
    assert event == SwapEvent(coordinates=event.coordinates, reserve=USDC, user=ALICE, rate_mode=1)


@pytest.mark.parametrize(
    ("topic", "event_type"),
    [
        (LendingPoolEvent.RESERVE_USED_AS_COLLATERAL_ENABLED, ReserveUsedAsCollateralEnabledEvent),
        (
            LendingPoolEvent.RESERVE_USED_AS_COLLATERAL_DISABLED,
            ReserveUsedAsCollateralDisabledEvent,
        ),
        (LendingPoolEvent.REBALANCE_STABLE_BORROW_RATE, RebalanceStableBorrowRateEvent),
    ],
)
def test_decode_reserve_and_user_events(topic: LendingPoolEvent, event_type: type):
    event = decode_log(_log(topic, topics=[_topic("address", WETH), _topic("address", ALICE)]))
    assert type(event) is event_type
    assert event.reserve == WETH
    assert event.user == ALICE


def test_decode_flash_loan():
    event = decode_log(
        _log(
            LendingPoolEvent.FLASH_LOAN,
            topics=[_topic("address", BOB), _topic("address", ALICE), _topic("address", WETH)],
            data=eth_abi.abi.encode(["uint256", "uint256", "uint16"], [10**21, 9 * 10**17, 0]),
        )
    )
    assert event == FlashLoanEvent(
        coordinates=event.coordinates,
        target=BOB,
        initiator=ALICE,
        asset=WETH,
        amount=10**21,
        premium=9 * 10**17,
        referral_code=0,
    )


def test_decode_liquidation_call():
    event = decode_log(
        _log(
            LendingPoolEvent.LIQUIDATION_CALL,
            topics=[_topic("address", WETH), _topic("address", USDC), _topic("address", ALICE)],
            data=eth_abi.abi.encode(
                ["uint256", "uint256", "address", "bool"],
                [500 * 10**6, 3 * 10**17, BOB, True],
            ),
        )
    )
    assert event == LiquidationCallEvent(
        coordinates=event.coordinates,
        collateral_asset=WETH,
        debt_asset=USDC,
        user=ALICE,
        debt_to_cover=500 * 10**6,
        liquidated_collateral_amount=3 * 10**17,
        liquidator=BOB,
        receive_a_token=True,
    )


def test_decode_reserve_data_updated():
    event = decode_log(
        _log(
            LendingPoolEvent.RESERVE_DATA_UPDATED,
            topics=[_topic("address", USDC)],
            data=eth_abi.abi.encode(["uint256"] * 5, [1, 2, 3, 10**27, 10**27 + 5]),
        )
    )
    assert event == ReserveDataUpdatedEvent(
        coordinates=event.coordinates,
        reserve=USDC,
        liquidity_rate=1,
        stable_borrow_rate=2,
        variable_borrow_rate=3,
        liquidity_index=10**27,
        variable_borrow_index=10**27 + 5,
    )


def test_decode_unpaused():
    assert isinstance(decode_log(_log(LendingPoolEvent.UNPAUSED, topics=[])), UnpausedEvent)


def test_unknown_topic():
    log = _log(LendingPoolEvent.PAUSED, topics=[])
    log["topics"] = [Web3.keccak(text="Transfer(address,address,uint256)")]
    with pytest.raises(UnknownEventTopic) as exc_info:
        decode_log(log)
    assert exc_info.value.topic == Web3.keccak(text="Transfer(address,address,uint256)")


def test_log_without_topics():
    log = _log(LendingPoolEvent.PAUSED, topics=[])
    log["topics"] = []
    with pytest.raises(MalformedLog, match="no topics"):
        decode_log(log)


def test_log_without_timestamp():
    log = _log(LendingPoolEvent.PAUSED, topics=[])
    del log["blockTimestamp"]
    with pytest.raises(MalformedLog, match="blockTimestamp"):
        decode_log(log)


@pytest.mark.parametrize(
    ("field", "value"),
    [
        ("blockNumber", "0xzz"),
        ("blockTimestamp", "not a number"),
        ("logIndex", None),
        ("address", "0xnotanaddress"),
        ("transactionHash", "0xzz"),
    ],
)
def test_log_with_invalid_coordinates(field: str, value: Any):
    log = _log(LendingPoolEvent.PAUSED, topics=[])
    log[field] = value
    with pytest.raises(MalformedLog, match="invalid log coordinates"):
        decode_log(log)


def test_log_with_invalid_hex_topic():
    log = _log(LendingPoolEvent.WITHDRAW, topics=[])
    log["topics"] = [LendingPoolEvent.WITHDRAW.value.to_0x_hex(), "0xzz"]
    with pytest.raises(MalformedLog, match="invalid topics or data"):
        decode_log(log)


def test_log_with_invalid_hex_data():
    log = _log(LendingPoolEvent.WITHDRAW, topics=[])
    log["data"] = "0xnothex"
    with pytest.raises(MalformedLog, match="invalid topics or data"):
        decode_log(log)


def test_log_with_missing_topics():
    with pytest.raises(MalformedLog):
        decode_log(_log(LendingPoolEvent.WITHDRAW, topics=[_topic("address", WETH)]))


def test_log_with_short_data():
    with pytest.raises(MalformedLog):
        decode_log(
            _log(
                LendingPoolEvent.BORROW,
                topics=[_topic("address", USDC), _topic("address", ALICE), _topic("uint16", 0)],
                data=eth_abi.abi.encode(["uint256"], [1]),
            )
        )
