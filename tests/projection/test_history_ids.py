import pytest
from eth_typing import ChecksumAddress

from lendgraph.checksum_cache import get_checksum_address
from lendgraph.constants import MAX_UINT16
from lendgraph.database.models import DepositActionTable
from lendgraph.projection.events import EventCoordinates
from lendgraph.projection.ids import (
    get_history_id,
    get_referrer_id,
    get_reserve_id,
    get_unused_history_id,
    get_user_reserve_id,
)
from lendgraph.projection.resolver import EntityResolver
from lendgraph.projection.store import SqlEntityStore
from lendgraph.types import HistoryActionKind

WETH = get_checksum_address("0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2")
ALICE = get_checksum_address("0x00000000000000000000000000000000000a11ce")


def _coordinates(pool_address: ChecksumAddress) -> EventCoordinates:
    return EventCoordinates(
        address=pool_address,
        block_number=11_362_579,
        block_timestamp=1_606_780_800,
        transaction_index=17,
        log_index=42,
    )


@pytest.mark.parametrize(
    ("kind", "expected_id"),
    [
        (HistoryActionKind.DEPOSIT, "11362579:17:42:1"),
        (HistoryActionKind.BORROW, "11362579:17:42:2"),
        (HistoryActionKind.REDEEM, "11362579:17:42:3"),
        (HistoryActionKind.REPAY, "11362579:17:42:4"),
        (HistoryActionKind.SWAP, "11362579:17:42:5"),
        (HistoryActionKind.USAGE_AS_COLLATERAL, "11362579:17:42:6"),
        (HistoryActionKind.REBALANCE_STABLE_BORROW_RATE, "11362579:17:42:7"),
        (HistoryActionKind.LIQUIDATION_CALL, "11362579:17:42:8"),
        (HistoryActionKind.FLASH_LOAN, "11362579:17:42:9"),
    ],
)
def test_history_id(pool_address: ChecksumAddress, kind: HistoryActionKind, expected_id: str):
    assert get_history_id(_coordinates(pool_address), kind) == expected_id


def test_history_id_is_deterministic(pool_address: ChecksumAddress):
    assert get_history_id(_coordinates(pool_address), HistoryActionKind.DEPOSIT) == get_history_id(
        _coordinates(pool_address), HistoryActionKind.DEPOSIT
    )


def test_entity_ids_ignore_checksum_casing(pool_address: ChecksumAddress):
    assert get_reserve_id(WETH, pool_address) == get_reserve_id(WETH.lower(), pool_address.lower())
    assert get_reserve_id(WETH, pool_address) == WETH.lower() + pool_address.lower()
    assert (
        get_user_reserve_id(ALICE, WETH, pool_address)
        == ALICE.lower() + WETH.lower() + pool_address.lower()
    )
    assert get_referrer_id(0) == "0"
    assert get_referrer_id(MAX_UINT16) == "65535"


class TestUnusedHistoryId:
    def _save_deposit(
        self,
        store: SqlEntityStore,
        resolver: EntityResolver,
        pool_address: ChecksumAddress,
        history_id: str,
    ) -> None:
        user_reserve = resolver.get_or_init_user_reserve(ALICE, WETH, pool_address)
        store.save(
            DepositActionTable(
                id=history_id,
                pool_id=user_reserve.pool_id,
                user_id=user_reserve.user_id,
                on_behalf_of=ALICE,
                reserve_id=user_reserve.reserve_id,
                user_reserve_id=user_reserve.id,
                amount=1,
                timestamp=0,
                referrer_id=None,
            )
        )

    def test_unused_id_is_returned_unchanged(
        self, store: SqlEntityStore, pool_address: ChecksumAddress
    ):
        coordinates = _coordinates(pool_address)
        assert (
            get_unused_history_id(
                store, DepositActionTable, coordinates, HistoryActionKind.DEPOSIT
            )
            == "11362579:17:42:1"
        )

    def test_suffix_increments_past_used_ids(
        self,
        store: SqlEntityStore,
        resolver: EntityResolver,
        pool_address: ChecksumAddress,
    ):
        coordinates = _coordinates(pool_address)
        expected_ids = ["11362579:17:42:1", "11362579:17:42:1-1", "11362579:17:42:1-2"]

        for expected_id in expected_ids:
            history_id = get_unused_history_id(
                store, DepositActionTable, coordinates, HistoryActionKind.DEPOSIT
            )
            assert history_id == expected_id
            self._save_deposit(store, resolver, pool_address, history_id)
