"""Routing of events to accounting rules with per-event atomic commits."""

import os
from collections.abc import Iterable
from typing import ClassVar

from eth_typing import ChecksumAddress

from lendgraph.checksum_cache import get_checksum_address
from lendgraph.exceptions.projection import EventProcessingError, UnknownEventType
from lendgraph.logging import logger
from lendgraph.projection.events import PoolEvent
from lendgraph.projection.resolver import EntityResolver
from lendgraph.projection.rules import EVENT_HANDLERS, EventHandler, ProjectionContext
from lendgraph.projection.store import EntityStore


class VerboseConfig:
    """Runtime configurable verbose logging settings for event projection."""

    all_enabled: ClassVar[bool] = False
    users: ClassVar[set[ChecksumAddress]] = set()

    @classmethod
    def toggle_all(cls, *, enabled: bool | None = None) -> bool:
        """Toggle or set verbose logging for all events. Returns the new state."""
        if enabled is None:
            cls.all_enabled = not cls.all_enabled
        else:
            cls.all_enabled = enabled
        return cls.all_enabled

    @classmethod
    def add_user(cls, user_address: ChecksumAddress) -> None:
        cls.users.add(user_address)

    @classmethod
    def clear_users(cls) -> None:
        cls.users.clear()

    @classmethod
    def is_verbose(cls, event: PoolEvent) -> bool:
        """Check if verbose logging should be enabled for the given event."""
        user_address: ChecksumAddress | None = getattr(event, "user", None)
        return cls.all_enabled or (user_address is not None and user_address in cls.users)


def _init_verbose_config_from_env() -> None:
    """Initialize VerboseConfig from environment variables."""
    # LENDGRAPH_VERBOSE_ALL: Set to "1", "true", or "yes" to enable
    if os.environ.get("LENDGRAPH_VERBOSE_ALL", "").lower() in {"1", "true", "yes"}:
        VerboseConfig.toggle_all(enabled=True)

    # LENDGRAPH_VERBOSE_USERS: Comma-separated list of addresses
    for addr in os.environ.get("LENDGRAPH_VERBOSE_USERS", "").split(","):
        addr_ = addr.strip()
        if addr_:
            VerboseConfig.add_user(get_checksum_address(addr_))


# Initialize from environment on module load
_init_verbose_config_from_env()


class ProjectionDispatcher:
    """
    Apply lending pool events to an entity store, one at a time and in delivery order.

    Each event runs inside its own store transaction. If the accounting rule raises, none of the
    event's writes are kept and the failure is raised as an `EventProcessingError`. Events are
    never buffered or reordered.
    """

    def __init__(
        self,
        store: EntityStore,
        handlers: dict[type[PoolEvent], EventHandler] | None = None,
    ) -> None:
        self.store = store
        self.resolver = EntityResolver(store)
        self.handlers = EVENT_HANDLERS if handlers is None else handlers
        self.last_position: tuple[int, int, int] | None = None

    def apply(self, event: PoolEvent) -> None:
        handler = self.handlers.get(type(event))
        if handler is None:
            raise UnknownEventType(event=event)

        coordinates = event.coordinates
        if self.last_position is not None and coordinates.position < self.last_position:
            logger.warning(
                f"{type(event).__name__} at {coordinates.position} precedes the previously "
                f"applied event at {self.last_position}"
            )

        context = ProjectionContext(
            store=self.store,
            resolver=self.resolver,
            verbose=VerboseConfig.is_verbose(event),
        )
        logger.debug(f"Applying {type(event).__name__} at {coordinates.position}")

        try:
            with self.store.transaction():
                handler(event, context)
        except Exception as exc:
            logger.error(f"Failed to apply {type(event).__name__} at {coordinates.position}: {exc}")
            raise EventProcessingError(event=event, coordinates=coordinates) from exc

        self.last_position = coordinates.position

    def apply_all(self, events: Iterable[PoolEvent]) -> int:
        """
        Apply the events in iteration order and return the number applied.
        """

        count = 0
        for event in events:
            self.apply(event)
            count += 1
        return count
