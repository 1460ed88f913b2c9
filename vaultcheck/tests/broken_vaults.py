"""Deliberately non-conforming vaults, one defect each."""

from __future__ import annotations

from vaultcheck.harness.actors import ActorRegistry
from vaultcheck.harness.assets import AssetRegistry
from vaultcheck.harness.errors import Revert
from vaultcheck.properties.context import Harness
from vaultcheck.vaults.erc4626 import ERC4626Vault
from vaultcheck.vaults.math import Rounding


def make_harness(vault_cls: type = ERC4626Vault, actor_count: int = 3, decimals: int = 18) -> Harness:
    actors = ActorRegistry()
    for i in range(actor_count):
        actors.new_actor(f"actor{i}")
    assets = AssetRegistry()
    asset_id = assets.new_asset(decimals)
    return Harness(
        vault=vault_cls(assets.get(asset_id)),
        assets=assets,
        asset_id=asset_id,
        actors=actors,
    )


class InflatedTotalAssetsVault(ERC4626Vault):
    def total_assets(self) -> int:
        return super().total_assets() + 1


class OverPromisingDepositVault(ERC4626Vault):
    """previewDeposit promises one share more than deposit mints."""

    def preview_deposit(self, assets: int) -> int:
        return self._to_shares(assets, Rounding.FLOOR) + 1

    def deposit(self, assets: int, receiver: str, *, sender: str) -> int:
        shares = self._to_shares(assets, Rounding.FLOOR)
        self._deposit(sender, receiver, assets, shares)
        return shares


class GenerousPreviewRedeemVault(ERC4626Vault):
    def preview_redeem(self, shares: int) -> int:
        return self._to_assets(shares, Rounding.FLOOR) + 1

    def redeem(self, shares: int, receiver: str, owner: str, *, sender: str) -> int:
        assets = self._to_assets(shares, Rounding.FLOOR)
        self._withdraw(sender, receiver, owner, assets, shares)
        return assets


class UnderchargingPreviewMintVault(ERC4626Vault):
    def preview_mint(self, shares: int) -> int:
        return max(self._to_assets(shares, Rounding.FLOOR) - 1, 0)


class UnderchargingPreviewWithdrawVault(ERC4626Vault):
    def preview_withdraw(self, assets: int) -> int:
        return max(self._to_shares(assets, Rounding.FLOOR) - 1, 0)


class CappedVault(ERC4626Vault):
    CAP = 10**24

    def max_deposit(self, receiver: str) -> int:
        return self.CAP

    def max_mint(self, receiver: str) -> int:
        return self.CAP


class InflatedMaxWithdrawVault(ERC4626Vault):
    def max_withdraw(self, owner: str) -> int:
        return super().max_withdraw(owner) + 1


class InflatedMaxRedeemVault(ERC4626Vault):
    def max_redeem(self, owner: str) -> int:
        return self.balance_of(owner) + 1


class BrokenAssetVault(ERC4626Vault):
    def asset(self) -> str:
        raise Revert("asset() unavailable")


class BrokenTotalAssetsVault(ERC4626Vault):
    def total_assets(self) -> int:
        raise Revert("oracle down")


class DividingMaxWithdrawVault(ERC4626Vault):
    """maxWithdraw divides by the owner's balance."""

    def max_withdraw(self, owner: str) -> int:
        return self.total_assets() // self.balance_of(owner)


class CallerDependentVault(ERC4626Vault):
    """Gives ``favoured`` one extra unit on every conversion."""

    favoured: str | None = None

    def convert_to_shares(self, assets: int, *, caller: str | None = None) -> int:
        bonus = 1 if caller is not None and caller == self.favoured else 0
        return super().convert_to_shares(assets) + bonus

    def convert_to_assets(self, shares: int, *, caller: str | None = None) -> int:
        bonus = 1 if caller is not None and caller == self.favoured else 0
        return super().convert_to_assets(shares) + bonus


class GreedyMintVault(ERC4626Vault):
    """Charges one asset more than previewMint."""

    def mint(self, shares: int, receiver: str, *, sender: str) -> int:
        assets = self.preview_mint(shares) + 1
        self._deposit(sender, receiver, assets, shares)
        return assets


class GreedyWithdrawVault(ERC4626Vault):
    """Burns one share more than previewWithdraw."""

    def withdraw(self, assets: int, receiver: str, owner: str, *, sender: str) -> int:
        shares = self.preview_withdraw(assets) + 1
        self._withdraw(sender, receiver, owner, assets, shares)
        return shares


class StingyRedeemVault(ERC4626Vault):
    """Pays one asset less than previewRedeem."""

    def redeem(self, shares: int, receiver: str, owner: str, *, sender: str) -> int:
        assets = self.preview_redeem(shares) - 1
        self._withdraw(sender, receiver, owner, assets, shares)
        return assets
