from enum import Enum, IntEnum

from lendgraph.exceptions.projection import InvalidBorrowRateMode


class BorrowRateMode(Enum):
    """Interest rate regime of a borrow position."""

    STABLE = "Stable"
    VARIABLE = "Variable"

    @classmethod
    def from_code(cls, code: int) -> "BorrowRateMode":
        """
        Decode the numeric rate mode emitted by the lending pool (1 = stable, 2 = variable).

        Raises:
            InvalidBorrowRateMode: for any other code
        """

        match code:
            case 1:
                return cls.STABLE
            case 2:
                return cls.VARIABLE
            case _:
                raise InvalidBorrowRateMode(code=code)

    @property
    def opposite(self) -> "BorrowRateMode":
        return BorrowRateMode.VARIABLE if self is BorrowRateMode.STABLE else BorrowRateMode.STABLE


class HistoryActionKind(IntEnum):
    """
    Numeric tag for each history action kind. The value is embedded in history ids, so existing
    values must never be renumbered.
    """

    DEPOSIT = 1
    BORROW = 2
    REDEEM = 3
    REPAY = 4
    SWAP = 5
    USAGE_AS_COLLATERAL = 6
    REBALANCE_STABLE_BORROW_RATE = 7
    LIQUIDATION_CALL = 8
    FLASH_LOAN = 9
