"""Vault adapter surface and the two bundled vault variants."""

from vaultcheck.vaults.base import VaultAdapter
from vaultcheck.vaults.erc4626 import ERC4626Vault
from vaultcheck.vaults.reference import ReferenceVault

__all__ = ["VaultAdapter", "ERC4626Vault", "ReferenceVault"]
