"""Target function surface — the state-mutating calls a campaign may make.

Two layers:
  - ``execute_*``: exact operations (fund, approve, call) used by both the
    fuzz-facing targets and the oracle checks, so every mutation goes
    through one path
  - the targets themselves: take raw uint arguments, bound them into a
    valid domain and dispatch to ``execute_*``

Every target receives the acting actor explicitly. A ``Revert`` raised by
the vault propagates to the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from vaultcheck.harness.bounding import UINT256_MAX, bound
from vaultcheck.properties.context import Harness
from vaultcheck.vaults.shares import permit_message

logger = logging.getLogger(__name__)

MAX_PERMIT_WINDOW = 365 * 24 * 3600


# ── Exact operations ─────────────────────────────────────────────────────────


def fund(h: Harness, actor: str, amount: int) -> None:
    """Mint ``amount`` of the underlying to ``actor`` and approve the vault for it."""
    h.assets.mint(h.asset_id, actor, amount)
    h.token.approve(actor, h.vault.address, amount)


def execute_deposit(h: Harness, actor: str, assets: int, receiver: str) -> int:
    fund(h, actor, assets)
    return h.vault.deposit(assets, receiver, sender=actor)


def execute_mint(h: Harness, actor: str, shares: int, receiver: str, assets_needed: int) -> int:
    fund(h, actor, assets_needed)
    return h.vault.mint(shares, receiver, sender=actor)


def execute_withdraw(h: Harness, actor: str, assets: int, receiver: str, owner: str) -> int:
    return h.vault.withdraw(assets, receiver, owner, sender=actor)


def execute_redeem(h: Harness, actor: str, shares: int, receiver: str, owner: str) -> int:
    return h.vault.redeem(shares, receiver, owner, sender=actor)


# ── Bounded targets ──────────────────────────────────────────────────────────


def deposit(h: Harness, actor: str, assets: int, receiver_index: int) -> int:
    receiver = h.actors.pick(receiver_index)
    ceiling = min(h.vault.max_deposit(receiver), h.safety_cap, h.mint_headroom())
    assets = bound(assets, ceiling)
    return execute_deposit(h, actor, assets, receiver)


def mint(h: Harness, actor: str, shares: int, receiver_index: int) -> int:
    receiver = h.actors.pick(receiver_index)
    shares = bound(shares, min(h.vault.max_mint(receiver), h.safety_cap))
    needed = h.vault.preview_mint(shares)
    if needed > h.mint_headroom():
        logger.debug("mint of %d shares needs %d assets, beyond mint headroom", shares, needed)
        return 0
    return execute_mint(h, actor, shares, receiver, needed)


def withdraw(h: Harness, actor: str, assets: int, receiver_index: int, owner_index: int) -> int:
    receiver = h.actors.pick(receiver_index)
    owner = h.actors.pick(owner_index)
    assets = bound(assets, h.vault.max_withdraw(owner))
    return execute_withdraw(h, actor, assets, receiver, owner)


def redeem(h: Harness, actor: str, shares: int, receiver_index: int, owner_index: int) -> int:
    receiver = h.actors.pick(receiver_index)
    owner = h.actors.pick(owner_index)
    shares = bound(shares, h.vault.max_redeem(owner))
    return execute_redeem(h, actor, shares, receiver, owner)


def transfer(h: Harness, actor: str, to_index: int, amount: int) -> bool:
    to = h.actors.pick(to_index)
    amount = bound(amount, h.vault.balance_of(actor))
    return h.vault.transfer(to, amount, sender=actor)


def approve(h: Harness, actor: str, spender_index: int, amount: int) -> bool:
    spender = h.actors.pick(spender_index)
    return h.vault.approve(spender, bound(amount, UINT256_MAX), sender=actor)


def transfer_from(h: Harness, actor: str, owner_index: int, to_index: int, amount: int) -> bool:
    owner = h.actors.pick(owner_index)
    to = h.actors.pick(to_index)
    spendable = min(h.vault.balance_of(owner), h.vault.allowance(owner, actor))
    amount = bound(amount, spendable)
    return h.vault.transfer_from(owner, to, amount, sender=actor)


def permit(h: Harness, actor: str, spender_index: int, value: int, deadline_offset: int) -> bool:
    """Sign a permit as ``actor`` and submit it.

    Vaults without a permit entry point are left untouched and report
    ``False``.
    """
    if not h.vault.supports_permit:
        return False
    spender = h.actors.pick(spender_index)
    value = bound(value, UINT256_MAX)
    deadline = h.vault.timestamp + bound(deadline_offset, MAX_PERMIT_WINDOW)
    signer = h.actors.get(actor)
    message = permit_message(
        h.vault.address, actor, spender, value, h.vault.nonces(actor), deadline
    )
    h.vault.permit(actor, spender, value, deadline, signer.public_key, signer.sign(message))
    return True


# ── Registration ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class TargetSpec:
    """A named target and the names of its raw uint parameters."""

    name: str
    fn: Callable[..., int | bool]
    params: tuple[str, ...]

    def __call__(self, h: Harness, actor: str, *args: int) -> int | bool:
        return self.fn(h, actor, *args)


TARGETS: tuple[TargetSpec, ...] = (
    TargetSpec("deposit", deposit, ("assets", "receiver_index")),
    TargetSpec("mint", mint, ("shares", "receiver_index")),
    TargetSpec("withdraw", withdraw, ("assets", "receiver_index", "owner_index")),
    TargetSpec("redeem", redeem, ("shares", "receiver_index", "owner_index")),
    TargetSpec("transfer", transfer, ("to_index", "amount")),
    TargetSpec("approve", approve, ("spender_index", "amount")),
    TargetSpec("transfer_from", transfer_from, ("owner_index", "to_index", "amount")),
    TargetSpec("permit", permit, ("spender_index", "value", "deadline_offset")),
)

_BY_NAME = {t.name: t for t in TARGETS}


def get_target(name: str) -> TargetSpec:
    try:
        return _BY_NAME[name]
    except KeyError:
        raise KeyError(f"unknown target function {name!r}") from None
