"""
Deterministic identifiers for projected entities.

Entity ids are derived from lowercase hex addresses so that the same address always maps to the same
row regardless of checksum casing. History ids are derived from event coordinates, so replaying an
event stream yields the same ids.
"""

from typing import TYPE_CHECKING

from lendgraph.projection.events import EventCoordinates
from lendgraph.types import HistoryActionKind

if TYPE_CHECKING:
    from lendgraph.database.models import HistoryActionTable
    from lendgraph.projection.store import EntityStore


def get_pool_id(pool_address: str) -> str:
    return pool_address.lower()


def get_user_id(user_address: str) -> str:
    return user_address.lower()


def get_reserve_id(underlying_asset: str, pool_address: str) -> str:
    return underlying_asset.lower() + pool_address.lower()


def get_user_reserve_id(user_address: str, underlying_asset: str, pool_address: str) -> str:
    return user_address.lower() + underlying_asset.lower() + pool_address.lower()


def get_referrer_id(referral_code: int) -> str:
    return str(referral_code)


def get_history_id(coordinates: EventCoordinates, kind: HistoryActionKind) -> str:
    return (
        f"{coordinates.block_number}:{coordinates.transaction_index}:"
        f"{coordinates.log_index}:{kind.value}"
    )


def get_unused_history_id(
    store: "EntityStore",
    action_type: type["HistoryActionTable"],
    coordinates: EventCoordinates,
    kind: HistoryActionKind,
) -> str:
    """
    Get the history id for the event, or a suffixed alternate if an action of the same type already
    holds it.

    The first alternate is `{id}-1`, then `{id}-2`, and so on. The result depends only on the store
    contents, so replaying the same stream against the same store yields the same sequence of ids.
    """

    history_id = get_history_id(coordinates, kind)
    candidate = history_id
    suffix = 0
    while store.load(action_type, candidate) is not None:
        suffix += 1
        candidate = f"{history_id}-{suffix}"
    return candidate
