"""Per-deployment exchange context: the take fee and the privileged settler.

Engines receive an ExchangeContext explicitly; nothing reads fee or settler from
module globals.
"""

import asyncio
from dataclasses import dataclass, field

from src.pm_common.errors import InvalidFeeError

MAX_FEE_BPS = 2000
BPS_DENOMINATOR = 10_000


def validate_fee_bps(fee_bps: int) -> None:
    if not (0 <= fee_bps <= MAX_FEE_BPS):
        raise InvalidFeeError(fee_bps)


@dataclass
class ExchangeContext:
    settler_id: str
    fee_bps: int = 0
    fee_lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False, compare=False)

    def __post_init__(self) -> None:
        validate_fee_bps(self.fee_bps)

    def is_settler(self, caller: str) -> bool:
        return caller == self.settler_id
