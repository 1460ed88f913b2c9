"""The behavioural surface the property engine consumes.

Every vault variant, bundled or external, is driven exclusively through
``VaultAdapter``. Nothing in the engine inspects a vault's storage.

Mutating calls take the sender explicitly (``sender=``); the two
conversion views accept an optional ``caller`` so that caller-independence
can be observed.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from vaultcheck.harness.errors import Revert


class VaultAdapter(ABC):
    """Deposit/mint/withdraw/redeem share vault over one underlying asset."""

    address: str
    timestamp: int

    # ── Accounting views ─────────────────────────────────────────────

    @abstractmethod
    def asset(self) -> str: ...

    @abstractmethod
    def total_assets(self) -> int: ...

    @abstractmethod
    def total_supply(self) -> int: ...

    @abstractmethod
    def balance_of(self, account: str) -> int: ...

    @abstractmethod
    def allowance(self, owner: str, spender: str) -> int: ...

    @abstractmethod
    def convert_to_shares(self, assets: int, *, caller: str | None = None) -> int: ...

    @abstractmethod
    def convert_to_assets(self, shares: int, *, caller: str | None = None) -> int: ...

    # ── Previews ─────────────────────────────────────────────────────

    @abstractmethod
    def preview_deposit(self, assets: int) -> int: ...

    @abstractmethod
    def preview_mint(self, shares: int) -> int: ...

    @abstractmethod
    def preview_withdraw(self, assets: int) -> int: ...

    @abstractmethod
    def preview_redeem(self, shares: int) -> int: ...

    # ── Limits ───────────────────────────────────────────────────────

    @abstractmethod
    def max_deposit(self, receiver: str) -> int: ...

    @abstractmethod
    def max_mint(self, receiver: str) -> int: ...

    @abstractmethod
    def max_withdraw(self, owner: str) -> int: ...

    @abstractmethod
    def max_redeem(self, owner: str) -> int: ...

    # ── Entry points ─────────────────────────────────────────────────

    @abstractmethod
    def deposit(self, assets: int, receiver: str, *, sender: str) -> int: ...

    @abstractmethod
    def mint(self, shares: int, receiver: str, *, sender: str) -> int: ...

    @abstractmethod
    def withdraw(self, assets: int, receiver: str, owner: str, *, sender: str) -> int: ...

    @abstractmethod
    def redeem(self, shares: int, receiver: str, owner: str, *, sender: str) -> int: ...

    # ── Share token ──────────────────────────────────────────────────

    @abstractmethod
    def approve(self, spender: str, amount: int, *, sender: str) -> bool: ...

    @abstractmethod
    def transfer(self, to: str, amount: int, *, sender: str) -> bool: ...

    @abstractmethod
    def transfer_from(self, owner: str, to: str, amount: int, *, sender: str) -> bool: ...

    @property
    def supports_permit(self) -> bool:
        return False

    def nonces(self, owner: str) -> int:
        return 0

    def permit(
        self,
        owner: str,
        spender: str,
        value: int,
        deadline: int,
        public_key: bytes,
        signature: bytes,
    ) -> None:
        """Signature-based approval. Optional; unsupported by default."""
        raise Revert("PERMIT_UNSUPPORTED")
