"""vaultcheck — stateful invariant harness for ERC-4626-style share vaults."""

__version__ = "0.1.0"
