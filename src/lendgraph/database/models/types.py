from typing import Annotated

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import mapped_column

# Entity ids are opaque strings derived from addresses, referral codes or event coordinates
PrimaryKeyStr = Annotated[
    str,
    mapped_column(String(160), primary_key=True),
]
PrimaryForeignKeyHistoryActionId = Annotated[
    str,
    mapped_column(ForeignKey("history_actions.id"), primary_key=True),
]
ForeignKeyPoolId = Annotated[
    str,
    mapped_column(ForeignKey("pools.id"), index=True),
]
ForeignKeyReserveId = Annotated[
    str,
    mapped_column(ForeignKey("reserves.id"), index=True),
]
ForeignKeyUserId = Annotated[
    str,
    mapped_column(ForeignKey("users.id"), index=True),
]
ForeignKeyUserReserveId = Annotated[
    str,
    mapped_column(ForeignKey("user_reserves.id"), index=True),
]
ForeignKeyReferrerId = Annotated[
    str,
    mapped_column(ForeignKey("referrers.id"), index=True),
]
