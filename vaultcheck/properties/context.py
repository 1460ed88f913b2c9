"""Harness wiring: one vault, its underlying asset and the actor set."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from vaultcheck.core.config import Settings, get_settings
from vaultcheck.core.types import VaultVariant
from vaultcheck.harness.actors import ActorRegistry
from vaultcheck.harness.assets import AssetRegistry, MockERC20
from vaultcheck.harness.bounding import UINT128_MAX, UINT256_MAX, derive_seed
from vaultcheck.vaults.base import VaultAdapter
from vaultcheck.vaults.erc4626 import ERC4626Vault
from vaultcheck.vaults.reference import ReferenceVault

logger = logging.getLogger(__name__)


@dataclass
class Harness:
    """Everything a target function or check needs, passed explicitly."""

    vault: VaultAdapter
    assets: AssetRegistry
    asset_id: str
    actors: ActorRegistry
    safety_cap: int = UINT128_MAX

    @property
    def token(self) -> MockERC20:
        return self.assets.get(self.asset_id)

    def seed(self, actor: str, salt: str = "") -> int:
        """Deterministic sample source tied to the actor and live totals."""
        return derive_seed(actor, self.vault.total_supply(), self.vault.total_assets(), salt)

    def mint_headroom(self) -> int:
        """Largest amount of the underlying that can still be minted."""
        return UINT256_MAX - self.token.total_supply()

    def is_degenerate(self) -> bool:
        """Shares outstanding against zero assets."""
        return self.vault.total_supply() > 0 and self.vault.total_assets() == 0


def build_harness(
    variant: VaultVariant | str | None = None,
    *,
    actor_count: int | None = None,
    asset_decimals: int | None = None,
    decimals_offset: int | None = None,
    settings: Settings | None = None,
) -> Harness:
    """Deploy an asset, a vault of ``variant`` over it and register actors."""
    s = settings or get_settings()
    variant = VaultVariant(variant or s.vault_variant)
    actor_count = s.actor_count if actor_count is None else actor_count
    asset_decimals = s.asset_decimals if asset_decimals is None else asset_decimals
    decimals_offset = s.vault_decimals_offset if decimals_offset is None else decimals_offset

    actors = ActorRegistry(max_actors=s.max_actors)
    for i in range(actor_count):
        actors.new_actor(f"actor{i}")

    assets = AssetRegistry()
    asset_id = assets.new_asset(asset_decimals)
    token = assets.get(asset_id)

    vault: VaultAdapter
    if variant is VaultVariant.ERC4626:
        vault = ERC4626Vault(token, decimals_offset=decimals_offset)
    else:
        vault = ReferenceVault(token)

    logger.debug(
        "Harness ready: %s over %s with %d actors",
        type(vault).__name__, asset_id, len(actors),
    )
    return Harness(
        vault=vault,
        assets=assets,
        asset_id=asset_id,
        actors=actors,
        safety_cap=s.safety_cap,
    )
