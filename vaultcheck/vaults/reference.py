"""Simplified reference vault.

Shares are minted 1:1 while the supply is zero; afterwards conversions
divide by the live totals with no virtual offset. A vault holding
shares but no assets therefore cannot convert assets to shares at all.
"""

from __future__ import annotations

import hashlib

from vaultcheck.harness.assets import MockERC20
from vaultcheck.harness.bounding import UINT256_MAX
from vaultcheck.harness.errors import Revert
from vaultcheck.vaults.base import VaultAdapter
from vaultcheck.vaults.math import Rounding, mul_div
from vaultcheck.vaults.shares import ShareLedger


class ReferenceVault(ShareLedger, VaultAdapter):

    def __init__(self, asset: MockERC20, name: str = "Reference Vault") -> None:
        address = "0x" + hashlib.sha256(f"vault:{name}:{asset.address}".encode()).digest()[-20:].hex()
        super().__init__(address)
        self.name = name
        self.decimals = asset.decimals
        self._asset = asset

    def __repr__(self) -> str:
        return (
            f"ReferenceVault({self.name}, assets={self.total_assets()}, "
            f"supply={self.total_supply()})"
        )

    def asset(self) -> str:
        return self._asset.address

    def total_assets(self) -> int:
        return self._asset.balance_of(self.address)

    def convert_to_shares(self, assets: int, *, caller: str | None = None) -> int:
        supply = self.total_supply()
        if supply == 0:
            return assets
        return mul_div(assets, supply, self.total_assets())

    def convert_to_assets(self, shares: int, *, caller: str | None = None) -> int:
        supply = self.total_supply()
        if supply == 0:
            return shares
        return mul_div(shares, self.total_assets(), supply)

    def preview_deposit(self, assets: int) -> int:
        return self.convert_to_shares(assets)

    def preview_mint(self, shares: int) -> int:
        supply = self.total_supply()
        if supply == 0:
            return shares
        return mul_div(shares, self.total_assets(), supply, Rounding.CEIL)

    def preview_withdraw(self, assets: int) -> int:
        supply = self.total_supply()
        if supply == 0:
            return assets
        return mul_div(assets, supply, self.total_assets(), Rounding.CEIL)

    def preview_redeem(self, shares: int) -> int:
        return self.convert_to_assets(shares)

    def max_deposit(self, receiver: str) -> int:
        return UINT256_MAX

    def max_mint(self, receiver: str) -> int:
        return UINT256_MAX

    def max_withdraw(self, owner: str) -> int:
        return self.convert_to_assets(self.balance_of(owner))

    def max_redeem(self, owner: str) -> int:
        return self.balance_of(owner)

    def deposit(self, assets: int, receiver: str, *, sender: str) -> int:
        shares = self.preview_deposit(assets)
        if shares == 0:
            raise Revert("ZERO_SHARES")
        self._asset.transfer_from(self.address, sender, self.address, assets)
        self._mint_shares(receiver, shares)
        return shares

    def mint(self, shares: int, receiver: str, *, sender: str) -> int:
        assets = self.preview_mint(shares)
        self._asset.transfer_from(self.address, sender, self.address, assets)
        self._mint_shares(receiver, shares)
        return assets

    def withdraw(self, assets: int, receiver: str, owner: str, *, sender: str) -> int:
        shares = self.preview_withdraw(assets)
        self._check_exit(owner, sender, assets, shares)
        self._exit(sender, receiver, owner, assets, shares)
        return shares

    def redeem(self, shares: int, receiver: str, owner: str, *, sender: str) -> int:
        assets = self.preview_redeem(shares)
        if assets == 0:
            raise Revert("ZERO_ASSETS")
        self._check_exit(owner, sender, assets, shares)
        self._exit(sender, receiver, owner, assets, shares)
        return assets

    def _check_exit(self, owner: str, sender: str, assets: int, shares: int) -> None:
        """Every exit precondition, evaluated before any state changes."""
        if shares > self.balance_of(owner):
            raise Revert("ERC20: burn amount exceeds balance")
        if sender != owner and shares > self.allowance(owner, sender):
            raise Revert("ERC20: insufficient allowance")
        if assets > self.total_assets():
            raise Revert("ERC20: transfer amount exceeds balance")

    def _exit(self, sender: str, receiver: str, owner: str, assets: int, shares: int) -> None:
        if sender != owner:
            self._spend_share_allowance(owner, sender, shares)
        self._burn_shares(owner, shares)
        self._asset.transfer(self.address, receiver, assets)
