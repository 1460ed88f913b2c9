"""Invariant catalog — the 18 accounting properties every vault must satisfy.

Each check takes the harness and the acting actor and either returns the
values it compared (pass), raises ``CheckSkipped`` (precondition filter)
or raises ``InvariantViolation`` carrying the invariant's literal tag.

Read-only checks (01-14) never mutate vault or asset state. Oracle checks
(15-18) perform a real operation through the target layer and compare
its outcome with the preview taken just before:

  15  mints + approves the sample to the actor, deposits it for the actor
  16  mints + approves previewMint(sample) to the actor, mints shares to it
  17  deposits as in 15, then withdraws part of the position to the actor
  18  deposits as in 15, then redeems part of the position to the actor

Checks 03, 05, 13 and the four oracles skip while the vault has shares
outstanding against zero assets. The remaining comparisons still run
there; a view that genuinely cannot convert reverts on both sides and
skips through the comparison helper instead.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from vaultcheck.core.types import CheckKind
from vaultcheck.harness.bounding import UINT256_MAX, bound
from vaultcheck.harness.errors import CheckSkipped, InvariantViolation, Revert
from vaultcheck.properties import targets
from vaultcheck.properties.context import Harness

logger = logging.getLogger(__name__)

CheckFn = Callable[[Harness, str], dict[str, int]]

DEGENERATE_STATE = "nonzero supply with zero assets"


# ── Helpers ──────────────────────────────────────────────────────────────────


def _fail(check_id: str, tag: str, **values: Any) -> InvariantViolation:
    return InvariantViolation(check_id, tag, values)


def _require_convertible(h: Harness) -> None:
    if h.is_degenerate():
        raise CheckSkipped(DEGENERATE_STATE)


def _view(fn: Callable[..., int], *args: Any, **kwargs: Any) -> tuple[int | None, str | None]:
    """Call a view, turning a revert into ``(None, reason)``."""
    try:
        return fn(*args, **kwargs), None
    except Revert as exc:
        return None, exc.reason


def _compare_views(
    check_id: str,
    tag: str,
    lhs: tuple[int | None, str | None],
    rhs: tuple[int | None, str | None],
    ok: Callable[[int, int], bool],
    **values: int,
) -> dict[str, int]:
    """Apply ``ok`` to two view results; both reverting is a skip."""
    (left, left_err), (right, right_err) = lhs, rhs
    if left_err is not None and right_err is not None:
        raise CheckSkipped(f"both views reverted: {left_err}")
    if left is None or right is None:
        raise _fail(check_id, tag, **values, reverted=1, lhs=left or 0, rhs=right or 0)
    if not ok(left, right):
        raise _fail(check_id, tag, **values, lhs=left, rhs=right)
    return {**values, "lhs": left, "rhs": right}


def _sample(h: Harness, actor: str, check_id: str, ceiling: int) -> int:
    return bound(h.seed(actor, check_id), ceiling)


def _open_position(h: Harness, actor: str, check_id: str) -> int:
    """Deposit a sampled amount for ``actor``; shared set-up of 17 and 18."""
    ceiling = min(h.safety_cap, h.mint_headroom())
    assets = _sample(h, actor, check_id, ceiling)
    if assets == 0:
        raise CheckSkipped("zero deposit sample")
    preview, err = _view(h.vault.preview_deposit, assets)
    if err is not None or not preview:
        raise CheckSkipped("deposit preview is zero")
    try:
        targets.execute_deposit(h, actor, assets, actor)
    except Revert as exc:
        raise CheckSkipped(f"setup deposit reverted: {exc.reason}") from exc
    return assets


# ── Read-only checks ─────────────────────────────────────────────────────────


def check_total_assets_matches_balance(h: Harness, actor: str) -> dict[str, int]:
    total = h.vault.total_assets()
    balance = h.token.balance_of(h.vault.address)
    if total != balance:
        raise _fail("01", TAG["01"], total_assets=total, balance=balance)
    return {"total_assets": total, "balance": balance}


def check_preview_deposit_equals_convert(h: Harness, actor: str) -> dict[str, int]:
    assets = _sample(h, actor, "02", h.safety_cap)
    return _compare_views(
        "02", TAG["02"],
        _view(h.vault.preview_deposit, assets),
        _view(h.vault.convert_to_shares, assets),
        lambda a, b: a == b,
        assets=assets,
    )


def check_preview_redeem_equals_convert(h: Harness, actor: str) -> dict[str, int]:
    _require_convertible(h)
    shares = _sample(h, actor, "03", h.safety_cap)
    return _compare_views(
        "03", TAG["03"],
        _view(h.vault.preview_redeem, shares),
        _view(h.vault.convert_to_assets, shares),
        lambda a, b: a == b,
        shares=shares,
    )


def check_preview_mint_rounds_up(h: Harness, actor: str) -> dict[str, int]:
    shares = _sample(h, actor, "04", h.safety_cap)
    return _compare_views(
        "04", TAG["04"],
        _view(h.vault.preview_mint, shares),
        _view(h.vault.convert_to_assets, shares),
        lambda a, b: a >= b,
        shares=shares,
    )


def check_preview_withdraw_rounds_up(h: Harness, actor: str) -> dict[str, int]:
    _require_convertible(h)
    assets = _sample(h, actor, "05", h.safety_cap)
    return _compare_views(
        "05", TAG["05"],
        _view(h.vault.preview_withdraw, assets),
        _view(h.vault.convert_to_shares, assets),
        lambda a, b: a >= b,
        assets=assets,
    )


def check_max_deposit_unbounded(h: Harness, actor: str) -> dict[str, int]:
    limit = h.vault.max_deposit(actor)
    if limit != UINT256_MAX:
        raise _fail("06", TAG["06"], max_deposit=limit)
    return {"max_deposit": limit}


def check_max_mint_unbounded(h: Harness, actor: str) -> dict[str, int]:
    limit = h.vault.max_mint(actor)
    if limit != UINT256_MAX:
        raise _fail("07", TAG["07"], max_mint=limit)
    return {"max_mint": limit}


def check_max_withdraw_matches_balance(h: Harness, actor: str) -> dict[str, int]:
    balance = h.vault.balance_of(actor)
    return _compare_views(
        "08", TAG["08"],
        _view(h.vault.max_withdraw, actor),
        _view(h.vault.convert_to_assets, balance),
        lambda a, b: a == b,
        shares=balance,
    )


def check_max_redeem_matches_balance(h: Harness, actor: str) -> dict[str, int]:
    limit = h.vault.max_redeem(actor)
    balance = h.vault.balance_of(actor)
    if limit != balance:
        raise _fail("09", TAG["09"], max_redeem=limit, balance=balance)
    return {"max_redeem": limit, "balance": balance}


def check_asset_never_fails(h: Harness, actor: str) -> dict[str, int]:
    try:
        h.vault.asset()
    except Exception as exc:
        raise _fail("10", TAG["10"]) from exc
    return {}


def check_total_assets_never_fails(h: Harness, actor: str) -> dict[str, int]:
    try:
        total = h.vault.total_assets()
    except Exception as exc:
        raise _fail("11", TAG["11"]) from exc
    return {"total_assets": total}


def check_max_functions_never_fail(h: Harness, actor: str) -> dict[str, int]:
    for index, account in enumerate(h.actors.actors):
        for name in ("max_deposit", "max_mint", "max_withdraw", "max_redeem"):
            try:
                getattr(h.vault, name)(account)
            except Exception as exc:
                raise _fail("12", TAG["12"], actor_index=index) from exc
    return {"actors": len(h.actors)}


def check_convert_to_shares_caller_independent(h: Harness, actor: str) -> dict[str, int]:
    _require_convertible(h)
    assets = _sample(h, actor, "13", h.safety_cap)
    return _compare_across_callers("13", h, h.vault.convert_to_shares, assets, assets=assets)


def check_convert_to_assets_caller_independent(h: Harness, actor: str) -> dict[str, int]:
    shares = _sample(h, actor, "14", h.safety_cap)
    return _compare_across_callers("14", h, h.vault.convert_to_assets, shares, shares=shares)


def _compare_across_callers(
    check_id: str, h: Harness, fn: Callable[..., int], amount: int, **values: int
) -> dict[str, int]:
    callers = h.actors.actors
    if not callers:
        raise CheckSkipped("no registered callers")
    first = _view(fn, amount, caller=callers[0])
    for index, caller in enumerate(callers[1:], start=1):
        _compare_views(
            check_id, TAG[check_id], first, _view(fn, amount, caller=caller),
            lambda a, b: a == b, **values, caller_index=index,
        )
    return {**values, "result": first[0] or 0, "callers": len(callers)}


# ── Oracle checks ────────────────────────────────────────────────────────────


def check_deposit_meets_preview(h: Harness, actor: str) -> dict[str, int]:
    _require_convertible(h)
    assets = _sample(h, actor, "15", min(h.safety_cap, h.mint_headroom()))
    if assets == 0:
        raise CheckSkipped("zero sample")
    preview, err = _view(h.vault.preview_deposit, assets)
    if err is not None:
        raise CheckSkipped(f"preview reverted: {err}")
    if preview == 0:
        raise CheckSkipped("zero preview")
    try:
        shares = targets.execute_deposit(h, actor, assets, actor)
    except Revert as exc:
        raise _fail("15", TAG["15"], assets=assets, preview=preview, reverted=1) from exc
    if shares < preview:
        raise _fail("15", TAG["15"], assets=assets, preview=preview, shares=shares)
    return {"assets": assets, "preview": preview, "shares": shares}


def check_mint_within_preview(h: Harness, actor: str) -> dict[str, int]:
    _require_convertible(h)
    shares = _sample(h, actor, "16", h.safety_cap)
    if shares == 0:
        raise CheckSkipped("zero sample")
    preview, err = _view(h.vault.preview_mint, shares)
    if err is not None:
        raise CheckSkipped(f"preview reverted: {err}")
    if preview == 0:
        raise CheckSkipped("zero preview")
    if preview > h.mint_headroom():
        raise CheckSkipped("preview exceeds asset mint headroom")
    try:
        assets = targets.execute_mint(h, actor, shares, actor, preview)
    except Revert as exc:
        raise _fail("16", TAG["16"], shares=shares, preview=preview, reverted=1) from exc
    if assets > preview:
        raise _fail("16", TAG["16"], shares=shares, preview=preview, assets=assets)
    return {"shares": shares, "preview": preview, "assets": assets}


def check_withdraw_within_preview(h: Harness, actor: str) -> dict[str, int]:
    _require_convertible(h)
    sample = _open_position(h, actor, "17")
    limit, err = _view(h.vault.max_withdraw, actor)
    if limit is None:
        raise CheckSkipped(f"maxWithdraw reverted: {err}")
    assets = bound(sample, limit)
    if assets == 0:
        raise CheckSkipped("zero sample")
    preview, err = _view(h.vault.preview_withdraw, assets)
    if err is not None:
        raise CheckSkipped(f"preview reverted: {err}")
    if preview == 0:
        raise CheckSkipped("zero preview")
    try:
        shares = targets.execute_withdraw(h, actor, assets, actor, actor)
    except Revert as exc:
        raise _fail(
            "17", TAG["17"], assets=assets, max_withdraw=limit, preview=preview, reverted=1
        ) from exc
    if shares > preview:
        raise _fail("17", TAG["17"], assets=assets, preview=preview, shares=shares)
    return {"assets": assets, "max_withdraw": limit, "preview": preview, "shares": shares}


def check_redeem_meets_preview(h: Harness, actor: str) -> dict[str, int]:
    _require_convertible(h)
    sample = _open_position(h, actor, "18")
    limit, err = _view(h.vault.max_redeem, actor)
    if limit is None:
        raise CheckSkipped(f"maxRedeem reverted: {err}")
    shares = bound(sample, limit)
    if shares == 0:
        raise CheckSkipped("zero sample")
    preview, err = _view(h.vault.preview_redeem, shares)
    if err is not None:
        raise CheckSkipped(f"preview reverted: {err}")
    if preview == 0:
        raise CheckSkipped("zero preview")
    try:
        assets = targets.execute_redeem(h, actor, shares, actor, actor)
    except Revert as exc:
        raise _fail(
            "18", TAG["18"], shares=shares, max_redeem=limit, preview=preview, reverted=1
        ) from exc
    if assets < preview:
        raise _fail("18", TAG["18"], shares=shares, preview=preview, assets=assets)
    return {"shares": shares, "max_redeem": limit, "preview": preview, "assets": assets}


# ── Registration ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class InvariantSpec:
    """One catalogued invariant: identity, rule and executable check."""

    id: str
    name: str
    statement: str
    tag: str
    kind: CheckKind
    check: CheckFn
    mutates: str = ""

    @property
    def is_oracle(self) -> bool:
        return self.kind is CheckKind.ORACLE


TAG: dict[str, str] = {
    "01": "VAULT-01: totalAssets() != asset.balanceOf(vault)",
    "02": "VAULT-02: previewDeposit(a) != convertToShares(a)",
    "03": "VAULT-03: previewRedeem(s) != convertToAssets(s)",
    "04": "VAULT-04: previewMint(s) < convertToAssets(s)",
    "05": "VAULT-05: previewWithdraw(a) < convertToShares(a)",
    "06": "VAULT-06: maxDeposit(owner) is capped",
    "07": "VAULT-07: maxMint(owner) is capped",
    "08": "VAULT-08: maxWithdraw(owner) != convertToAssets(balanceOf(owner))",
    "09": "VAULT-09: maxRedeem(owner) != balanceOf(owner)",
    "10": "VAULT-10: asset() failed",
    "11": "VAULT-11: totalAssets() failed",
    "12": "VAULT-12: a max* function failed",
    "13": "VAULT-13: convertToShares depends on caller",
    "14": "VAULT-14: convertToAssets depends on caller",
    "15": "VAULT-15: deposit returned fewer shares than previewDeposit",
    "16": "VAULT-16: mint consumed more assets than previewMint",
    "17": "VAULT-17: withdraw burned more shares than previewWithdraw",
    "18": "VAULT-18: redeem returned fewer assets than previewRedeem",
}

_RO, _OR = CheckKind.READ_ONLY, CheckKind.ORACLE

CATALOG: tuple[InvariantSpec, ...] = (
    InvariantSpec("01", "total_assets_matches_balance",
                  "totalAssets() equals the vault's balance of its underlying asset",
                  TAG["01"], _RO, check_total_assets_matches_balance),
    InvariantSpec("02", "preview_deposit_equals_convert",
                  "previewDeposit(a) equals convertToShares(a)",
                  TAG["02"], _RO, check_preview_deposit_equals_convert),
    InvariantSpec("03", "preview_redeem_equals_convert",
                  "previewRedeem(s) equals convertToAssets(s)",
                  TAG["03"], _RO, check_preview_redeem_equals_convert),
    InvariantSpec("04", "preview_mint_rounds_up",
                  "previewMint(s) >= convertToAssets(s)",
                  TAG["04"], _RO, check_preview_mint_rounds_up),
    InvariantSpec("05", "preview_withdraw_rounds_up",
                  "previewWithdraw(a) >= convertToShares(a)",
                  TAG["05"], _RO, check_preview_withdraw_rounds_up),
    InvariantSpec("06", "max_deposit_unbounded",
                  "maxDeposit(owner) equals the unbounded maximum",
                  TAG["06"], _RO, check_max_deposit_unbounded),
    InvariantSpec("07", "max_mint_unbounded",
                  "maxMint(owner) equals the unbounded maximum",
                  TAG["07"], _RO, check_max_mint_unbounded),
    InvariantSpec("08", "max_withdraw_matches_balance",
                  "maxWithdraw(owner) equals convertToAssets(balanceOf(owner))",
                  TAG["08"], _RO, check_max_withdraw_matches_balance),
    InvariantSpec("09", "max_redeem_matches_balance",
                  "maxRedeem(owner) equals balanceOf(owner)",
                  TAG["09"], _RO, check_max_redeem_matches_balance),
    InvariantSpec("10", "asset_never_fails",
                  "asset() never fails",
                  TAG["10"], _RO, check_asset_never_fails),
    InvariantSpec("11", "total_assets_never_fails",
                  "totalAssets() never fails",
                  TAG["11"], _RO, check_total_assets_never_fails),
    InvariantSpec("12", "max_functions_never_fail",
                  "maxDeposit/maxMint/maxWithdraw/maxRedeem never fail, for any caller",
                  TAG["12"], _RO, check_max_functions_never_fail),
    InvariantSpec("13", "convert_to_shares_caller_independent",
                  "convertToShares(a) is identical regardless of caller identity",
                  TAG["13"], _RO, check_convert_to_shares_caller_independent),
    InvariantSpec("14", "convert_to_assets_caller_independent",
                  "convertToAssets(s) is identical regardless of caller identity",
                  TAG["14"], _RO, check_convert_to_assets_caller_independent),
    InvariantSpec("15", "deposit_meets_preview",
                  "shares returned by deposit(a) are >= previewDeposit(a)",
                  TAG["15"], _OR, check_deposit_meets_preview,
                  mutates="mints and approves a to the actor; deposits a for the actor"),
    InvariantSpec("16", "mint_within_preview",
                  "assets consumed by mint(s) are <= previewMint(s)",
                  TAG["16"], _OR, check_mint_within_preview,
                  mutates="mints and approves previewMint(s) to the actor; mints s shares to the actor"),
    InvariantSpec("17", "withdraw_within_preview",
                  "shares burned by withdraw(a) are <= previewWithdraw(a)",
                  TAG["17"], _OR, check_withdraw_within_preview,
                  mutates="deposits a sampled amount for the actor; withdraws a to the actor"),
    InvariantSpec("18", "redeem_meets_preview",
                  "assets returned by redeem(s) are >= previewRedeem(s)",
                  TAG["18"], _OR, check_redeem_meets_preview,
                  mutates="deposits a sampled amount for the actor; redeems s shares to the actor"),
)

_BY_ID = {spec.id: spec for spec in CATALOG}


def get_invariant(check_id: str) -> InvariantSpec:
    try:
        return _BY_ID[check_id.zfill(2)]
    except KeyError:
        raise KeyError(f"unknown invariant {check_id!r}") from None
