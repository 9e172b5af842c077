"""In-memory fungible collateral asset and the registry resolving asset addresses.

The exchange holds all deposited collateral in a single custody account
(EXCHANGE_VAULT_ID) per asset; per-market attribution lives on the Market record.
"""

import logging
from collections import defaultdict

from src.pm_account.domain.models import CollateralTransfer
from src.pm_account.domain.repository import CollateralAssetProtocol
from src.pm_common.datetime_utils import utc_now
from src.pm_common.errors import CollateralTransferError, InvalidCollateralAssetError

logger = logging.getLogger(__name__)

EXCHANGE_VAULT_ID = "EXCHANGE_VAULT"
ZERO_ADDRESS = "0x" + "0" * 40


class InMemoryCollateralAsset:
    def __init__(self, address: str, decimals: int = 6) -> None:
        if not (0 <= decimals <= 36):
            raise ValueError(f"decimals must be 0-36, got {decimals}")
        self._address = address
        self._decimals = decimals
        self._balances: dict[str, int] = defaultdict(int)
        self._transfers: list[CollateralTransfer] = []

    @property
    def address(self) -> str:
        return self._address

    def _move(self, src: str, dst: str, amount: int) -> None:
        if amount < 0:
            raise CollateralTransferError(f"negative amount {amount}")
        available = self._balances.get(src, 0)
        if available < amount:
            raise CollateralTransferError(
                f"{src} holds {available} {self._address}, {amount} required"
            )
        self._balances[src] = available - amount
        self._balances[dst] += amount
        self._transfers.append(
            CollateralTransfer(
                sequence=len(self._transfers) + 1,
                asset=self._address,
                holder_from=src,
                holder_to=dst,
                amount=amount,
                created_at=utc_now(),
            )
        )

    def mint(self, holder: str, amount: int) -> None:
        """Faucet: create native units out of thin air (test / simulation only)."""
        if amount <= 0:
            raise ValueError(f"mint amount must be positive, got {amount}")
        self._balances[holder] += amount
        logger.info("Collateral faucet: asset=%s holder=%s amount=%d", self._address, holder, amount)

    async def transfer_in(self, holder: str, amount: int) -> None:
        self._move(holder, EXCHANGE_VAULT_ID, amount)

    async def transfer_out(self, holder: str, amount: int) -> None:
        self._move(EXCHANGE_VAULT_ID, holder, amount)

    async def decimals(self) -> int:
        return self._decimals

    async def balance_of(self, holder: str) -> int:
        return self._balances.get(holder, 0)

    @property
    def transfers(self) -> list[CollateralTransfer]:
        return list(self._transfers)


class CollateralAssetRegistry:
    """Resolves collateral asset addresses; unknown, empty or zero addresses are rejected."""

    def __init__(self) -> None:
        self._assets: dict[str, CollateralAssetProtocol] = {}

    def register(self, asset: CollateralAssetProtocol) -> None:
        if not asset.address or asset.address == ZERO_ADDRESS:
            raise InvalidCollateralAssetError(asset.address)
        self._assets[asset.address] = asset

    def resolve(self, address: str | None) -> CollateralAssetProtocol:
        if not address or address == ZERO_ADDRESS:
            raise InvalidCollateralAssetError(address)
        asset = self._assets.get(address)
        if asset is None:
            raise InvalidCollateralAssetError(address)
        return asset

    def addresses(self) -> list[str]:
        return sorted(self._assets)
