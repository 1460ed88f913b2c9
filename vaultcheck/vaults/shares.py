"""ERC-20 share ledger with signature-based approvals, shared by both vaults."""

from __future__ import annotations

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

from vaultcheck.harness.actors import address_from_public_key
from vaultcheck.harness.bounding import UINT256_MAX, is_uint256
from vaultcheck.harness.errors import Revert


def permit_message(
    vault: str, owner: str, spender: str, value: int, nonce: int, deadline: int
) -> bytes:
    """Canonical bytes an owner signs to approve ``spender`` via permit."""
    return f"permit|{vault}|{owner}|{spender}|{value}|{nonce}|{deadline}".encode()


class ShareLedger:
    """Balances, allowances, nonces and a block clock for vault shares."""

    def __init__(self, address: str) -> None:
        self.address = address
        self.timestamp = 1
        self._share_supply = 0
        self._share_balances: dict[str, int] = {}
        self._share_allowances: dict[tuple[str, str], int] = {}
        self._nonces: dict[str, int] = {}

    def total_supply(self) -> int:
        return self._share_supply

    def balance_of(self, account: str) -> int:
        return self._share_balances.get(account, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._share_allowances.get((owner, spender), 0)

    def nonces(self, owner: str) -> int:
        return self._nonces.get(owner, 0)

    @property
    def supports_permit(self) -> bool:
        return True

    def approve(self, spender: str, amount: int, *, sender: str) -> bool:
        if not is_uint256(amount):
            raise Revert("ERC20: invalid amount")
        self._share_allowances[(sender, spender)] = amount
        return True

    def transfer(self, to: str, amount: int, *, sender: str) -> bool:
        self._move_shares(sender, to, amount)
        return True

    def transfer_from(self, owner: str, to: str, amount: int, *, sender: str) -> bool:
        self._spend_share_allowance(owner, sender, amount)
        self._move_shares(owner, to, amount)
        return True

    def permit(
        self,
        owner: str,
        spender: str,
        value: int,
        deadline: int,
        public_key: bytes,
        signature: bytes,
    ) -> None:
        if deadline < self.timestamp:
            raise Revert("PERMIT_DEADLINE_EXPIRED")
        if address_from_public_key(public_key) != owner:
            raise Revert("INVALID_SIGNER")
        nonce = self.nonces(owner)
        message = permit_message(self.address, owner, spender, value, nonce, deadline)
        try:
            Ed25519PublicKey.from_public_bytes(public_key).verify(signature, message)
        except (InvalidSignature, ValueError):
            raise Revert("INVALID_SIGNER") from None
        self._nonces[owner] = nonce + 1
        self.approve(spender, value, sender=owner)

    # ── Internal share bookkeeping ───────────────────────────────────

    def _mint_shares(self, to: str, amount: int) -> None:
        if self._share_supply + amount > UINT256_MAX:
            raise Revert("ERC20: share supply overflow")
        self._share_supply += amount
        self._share_balances[to] = self.balance_of(to) + amount

    def _burn_shares(self, owner: str, amount: int) -> None:
        balance = self.balance_of(owner)
        if amount > balance:
            raise Revert("ERC20: burn amount exceeds balance")
        self._share_balances[owner] = balance - amount
        self._share_supply -= amount

    def _move_shares(self, sender: str, to: str, amount: int) -> None:
        balance = self.balance_of(sender)
        if amount < 0 or amount > balance:
            raise Revert("ERC20: transfer amount exceeds balance")
        self._share_balances[sender] = balance - amount
        self._share_balances[to] = self.balance_of(to) + amount

    def _spend_share_allowance(self, owner: str, spender: str, amount: int) -> None:
        current = self.allowance(owner, spender)
        if current == UINT256_MAX:
            return
        if amount < 0 or amount > current:
            raise Revert("ERC20: insufficient allowance")
        self._share_allowances[(owner, spender)] = current - amount
