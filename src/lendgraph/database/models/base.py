from typing import Annotated, ClassVar

from sqlalchemy import Dialect, String, Text
from sqlalchemy.orm import DeclarativeBase, mapped_column
from sqlalchemy.types import TypeDecorator

from lendgraph.constants import MAX_UINT256


class Uint256MappedToString(TypeDecorator[int]):
    """
    Amounts, rates and indices emitted by the lending pool are uint256 values, which overflow the 8
    byte integer columns of SQLite. They are stored as decimal strings in a 78 character VARCHAR,
    wide enough for MAX_UINT256.

    Binding a negative or oversized value raises `ValueError`, so an accounting error surfaces at
    flush time instead of being written.
    """

    cache_ok = True
    impl = String(78)

    def process_bind_param(
        self,
        value: int | None,
        dialect: Dialect,  # noqa: ARG002
    ) -> str | None:
        if value is None:
            return None
        if not 0 <= value <= MAX_UINT256:
            msg = f"{value} is outside the uint256 range"
            raise ValueError(msg)
        return str(value)

    def process_result_value(
        self,
        value: str | None,
        dialect: Dialect,  # noqa: ARG002
    ) -> int | None:
        return None if value is None else int(value)


Address = Annotated[str, mapped_column(String(42))]
BigInteger = Annotated[int, Uint256MappedToString]


class Base(DeclarativeBase):
    type_annotation_map: ClassVar = {
        BigInteger: Uint256MappedToString,
        str: Text,
    }
