# src/pm_clearing/domain/global_invariants.py
"""Global custody invariant check (INV-G)."""
import logging
from collections import defaultdict
from collections.abc import Iterable

from src.pm_account.infrastructure.collateral import EXCHANGE_VAULT_ID, CollateralAssetRegistry
from src.pm_market.domain.models import Market

logger = logging.getLogger(__name__)


async def verify_custody_invariants(
    markets: Iterable[Market], assets: CollateralAssetRegistry
) -> list[str]:
    """Check INV-G: for every asset, vault balance == sum(collateral_balance + fees_accrued).

    Returns list of violation strings.
    """
    violations: list[str] = []
    owed: dict[str, int] = defaultdict(int)
    for market in markets:
        owed[market.collateral_asset] += market.collateral_balance + market.fees_accrued

    for address in assets.addresses():
        asset = assets.resolve(address)
        held = await asset.balance_of(EXCHANGE_VAULT_ID)
        if held != owed.get(address, 0):
            msg = (
                f"INV-G violated: vault holds {held} {address} "
                f"!= market collateral + fees = {owed.get(address, 0)}"
            )
            violations.append(msg)
            logger.error(msg)
    return violations
