from typing import TYPE_CHECKING, Any

from hexbytes import HexBytes

from lendgraph.exceptions.base import LendgraphError, LendgraphValueError

if TYPE_CHECKING:
    from lendgraph.projection.events import EventCoordinates


class InvalidBorrowRateMode(LendgraphValueError):
    """
    Raised when an event carries a borrow rate mode code other than 1 (stable) or 2 (variable).
    """

    def __init__(self, code: int) -> None:
        self.code = code
        super().__init__(message=f"Invalid borrow rate mode: {code}")


class UnknownEventType(LendgraphValueError):
    """
    Raised by the dispatcher when no accounting rule is registered for an event type.
    """

    def __init__(self, event: Any) -> None:
        self.event = event
        super().__init__(message=f"No accounting rule for event type {type(event).__name__}")


class UnknownEventTopic(LendgraphValueError):
    """
    Raised by the log decoder when topic0 does not match a known lending pool event.
    """

    def __init__(self, topic: HexBytes) -> None:
        self.topic = topic
        super().__init__(message=f"Unknown event topic: {topic.to_0x_hex()}")


class MalformedLog(LendgraphValueError):
    """
    Raised by the log decoder when a log is missing fields or cannot be ABI-decoded.
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(message=f"Malformed log: {reason}")


class EventProcessingError(LendgraphError):
    """
    Raised by the dispatcher when an event could not be applied. None of the event's entity writes
    are kept. The original exception is available as `__cause__`.
    """

    def __init__(self, event: Any, coordinates: "EventCoordinates") -> None:
        self.event = event
        self.coordinates = coordinates
        super().__init__(
            message=(
                f"Failed to process {type(event).__name__} at block {coordinates.block_number}, "
                f"transaction index {coordinates.transaction_index}, "
                f"log index {coordinates.log_index}"
            )
        )
