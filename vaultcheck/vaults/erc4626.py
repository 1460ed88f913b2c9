"""Production-grade vault with virtual-offset share accounting.

Conversions add virtual shares (``10**decimals_offset``) and one virtual
asset to the live totals, so they are defined in every state, including
an empty vault and a vault whose assets were drained to zero.
"""

from __future__ import annotations

import hashlib

from vaultcheck.harness.assets import MockERC20
from vaultcheck.harness.bounding import UINT256_MAX
from vaultcheck.harness.errors import Revert
from vaultcheck.vaults.base import VaultAdapter
from vaultcheck.vaults.math import Rounding, mul_div
from vaultcheck.vaults.shares import ShareLedger


class ERC4626Vault(ShareLedger, VaultAdapter):
    """Vault whose previews always round in the vault's favour."""

    def __init__(self, asset: MockERC20, decimals_offset: int = 0, name: str = "Vault") -> None:
        address = "0x" + hashlib.sha256(f"vault:{name}:{asset.address}".encode()).digest()[-20:].hex()
        super().__init__(address)
        self.name = name
        self.decimals_offset = decimals_offset
        self.decimals = asset.decimals + decimals_offset
        self._asset = asset

    def __repr__(self) -> str:
        return (
            f"ERC4626Vault({self.name}, assets={self.total_assets()}, "
            f"supply={self.total_supply()})"
        )

    def asset(self) -> str:
        return self._asset.address

    def total_assets(self) -> int:
        return self._asset.balance_of(self.address)

    # ── Conversions ──────────────────────────────────────────────────

    def _to_shares(self, assets: int, rounding: Rounding) -> int:
        return mul_div(
            assets,
            self.total_supply() + 10**self.decimals_offset,
            self.total_assets() + 1,
            rounding,
        )

    def _to_assets(self, shares: int, rounding: Rounding) -> int:
        return mul_div(
            shares,
            self.total_assets() + 1,
            self.total_supply() + 10**self.decimals_offset,
            rounding,
        )

    def convert_to_shares(self, assets: int, *, caller: str | None = None) -> int:
        return self._to_shares(assets, Rounding.FLOOR)

    def convert_to_assets(self, shares: int, *, caller: str | None = None) -> int:
        return self._to_assets(shares, Rounding.FLOOR)

    def preview_deposit(self, assets: int) -> int:
        return self._to_shares(assets, Rounding.FLOOR)

    def preview_mint(self, shares: int) -> int:
        return self._to_assets(shares, Rounding.CEIL)

    def preview_withdraw(self, assets: int) -> int:
        return self._to_shares(assets, Rounding.CEIL)

    def preview_redeem(self, shares: int) -> int:
        return self._to_assets(shares, Rounding.FLOOR)

    # ── Limits ───────────────────────────────────────────────────────

    def max_deposit(self, receiver: str) -> int:
        return UINT256_MAX

    def max_mint(self, receiver: str) -> int:
        return UINT256_MAX

    def max_withdraw(self, owner: str) -> int:
        return self._to_assets(self.balance_of(owner), Rounding.FLOOR)

    def max_redeem(self, owner: str) -> int:
        return self.balance_of(owner)

    # ── Entry points ─────────────────────────────────────────────────

    def deposit(self, assets: int, receiver: str, *, sender: str) -> int:
        if assets > self.max_deposit(receiver):
            raise Revert("ERC4626: deposit more than max")
        shares = self.preview_deposit(assets)
        self._deposit(sender, receiver, assets, shares)
        return shares

    def mint(self, shares: int, receiver: str, *, sender: str) -> int:
        if shares > self.max_mint(receiver):
            raise Revert("ERC4626: mint more than max")
        assets = self.preview_mint(shares)
        self._deposit(sender, receiver, assets, shares)
        return assets

    def withdraw(self, assets: int, receiver: str, owner: str, *, sender: str) -> int:
        if assets > self.max_withdraw(owner):
            raise Revert("ERC4626: withdraw more than max")
        shares = self.preview_withdraw(assets)
        self._withdraw(sender, receiver, owner, assets, shares)
        return shares

    def redeem(self, shares: int, receiver: str, owner: str, *, sender: str) -> int:
        if shares > self.max_redeem(owner):
            raise Revert("ERC4626: redeem more than max")
        assets = self.preview_redeem(shares)
        self._withdraw(sender, receiver, owner, assets, shares)
        return assets

    def _deposit(self, sender: str, receiver: str, assets: int, shares: int) -> None:
        self._asset.transfer_from(self.address, sender, self.address, assets)
        self._mint_shares(receiver, shares)

    def _withdraw(self, sender: str, receiver: str, owner: str, assets: int, shares: int) -> None:
        if sender != owner:
            self._spend_share_allowance(owner, sender, shares)
        self._burn_shares(owner, shares)
        self._asset.transfer(self.address, receiver, assets)
