"""Asset registry and the simulated fungible token used as vault collateral."""

from __future__ import annotations

import hashlib
import logging

from vaultcheck.harness.bounding import UINT256_MAX, is_uint256
from vaultcheck.harness.errors import AssetOverflowError, Revert, UnknownAssetError

logger = logging.getLogger(__name__)


class MockERC20:
    """Minimal fungible token with balances, allowances and open minting.

    Every state-changing call takes the sender explicitly.
    """

    def __init__(self, address: str, name: str, symbol: str, decimals: int = 18) -> None:
        if not 0 <= decimals <= 255:
            raise ValueError(f"decimals must fit in a uint8, got {decimals}")
        self.address = address
        self.name = name
        self.symbol = symbol
        self.decimals = decimals
        self._total_supply = 0
        self._balances: dict[str, int] = {}
        self._allowances: dict[tuple[str, str], int] = {}

    def __repr__(self) -> str:
        return f"MockERC20({self.symbol}, decimals={self.decimals}, supply={self._total_supply})"

    # ── Views ────────────────────────────────────────────────────────

    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, account: str) -> int:
        return self._balances.get(account, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((owner, spender), 0)

    # ── Mutations ────────────────────────────────────────────────────

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        if not is_uint256(amount):
            raise Revert("ERC20: invalid amount")
        self._allowances[(owner, spender)] = amount
        return True

    def transfer(self, sender: str, to: str, amount: int) -> bool:
        self._move(sender, to, amount)
        return True

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> bool:
        self._spend_allowance(owner, spender, amount)
        self._move(owner, to, amount)
        return True

    def mint(self, to: str, amount: int) -> None:
        if amount < 0:
            raise ValueError("cannot mint a negative amount")
        if self._total_supply + amount > UINT256_MAX:
            raise AssetOverflowError(
                f"minting {amount} {self.symbol} overflows total supply {self._total_supply}"
            )
        self._total_supply += amount
        self._balances[to] = self.balance_of(to) + amount

    def burn(self, account: str, amount: int) -> None:
        balance = self.balance_of(account)
        if amount < 0 or amount > balance:
            raise Revert("ERC20: burn amount exceeds balance")
        self._balances[account] = balance - amount
        self._total_supply -= amount

    def _move(self, sender: str, to: str, amount: int) -> None:
        balance = self.balance_of(sender)
        if amount < 0 or amount > balance:
            raise Revert("ERC20: transfer amount exceeds balance")
        self._balances[sender] = balance - amount
        self._balances[to] = self.balance_of(to) + amount

    def _spend_allowance(self, owner: str, spender: str, amount: int) -> None:
        current = self.allowance(owner, spender)
        if current == UINT256_MAX:
            return
        if amount < 0 or amount > current:
            raise Revert("ERC20: insufficient allowance")
        self._allowances[(owner, spender)] = current - amount


class AssetRegistry:
    """Creates and owns the underlying assets of a harness."""

    def __init__(self) -> None:
        self._assets: dict[str, MockERC20] = {}

    def __len__(self) -> int:
        return len(self._assets)

    @property
    def assets(self) -> tuple[str, ...]:
        return tuple(self._assets)

    def new_asset(self, decimals: int = 18, name: str | None = None) -> str:
        """Deploy a token with ``decimals`` precision and return its address."""
        index = len(self._assets)
        name = name or f"Mock Asset {index}"
        address = "0x" + hashlib.sha256(f"asset:{index}:{name}".encode()).digest()[-20:].hex()
        self._assets[address] = MockERC20(address, name, f"MOCK{index}", decimals)
        logger.debug("Deployed asset %s (%d decimals) at %s", name, decimals, address)
        return address

    def get(self, asset: str) -> MockERC20:
        try:
            return self._assets[asset]
        except KeyError:
            raise UnknownAssetError(f"unknown asset {asset}") from None

    def mint(self, asset: str, to: str, amount: int) -> None:
        """Credit ``amount`` of ``asset`` to ``to``.

        Raises ``AssetOverflowError`` if the supply would exceed ``UINT256_MAX``.
        """
        self.get(asset).mint(to, amount)
