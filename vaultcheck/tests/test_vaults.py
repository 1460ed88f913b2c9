"""Tests for the bundled vault variants and the mul-div helper."""

from __future__ import annotations

import pytest

from vaultcheck.core.types import CheckOutcome
from vaultcheck.harness.bounding import UINT256_MAX
from vaultcheck.harness.errors import Revert
from vaultcheck.properties import targets
from vaultcheck.properties.context import build_harness
from vaultcheck.properties.engine import PropertyEngine
from vaultcheck.vaults.base import VaultAdapter
from vaultcheck.vaults.math import Rounding, mul_div
from vaultcheck.vaults.shares import permit_message


class TestMulDiv:
    def test_floor_and_ceil(self):
        assert mul_div(10, 1, 3) == 3
        assert mul_div(10, 1, 3, Rounding.CEIL) == 4
        assert mul_div(9, 1, 3, Rounding.CEIL) == 3

    def test_wide_intermediate_product(self):
        assert mul_div(UINT256_MAX, UINT256_MAX, UINT256_MAX) == UINT256_MAX

    def test_division_by_zero_reverts(self):
        with pytest.raises(Revert):
            mul_div(1, 1, 0)

    def test_result_overflow_reverts(self):
        with pytest.raises(Revert):
            mul_div(UINT256_MAX, 2, 1)


class TestVaultBasics:
    def test_is_a_vault_adapter(self, harness):
        assert isinstance(harness.vault, VaultAdapter)
        assert harness.vault.asset() == harness.asset_id

    def test_first_deposit_scenario(self, harness):
        """18-decimal asset, empty vault, one actor deposits 1_000_000."""
        h = harness
        actor = h.actors.active_actor()
        assert h.vault.total_supply() == 0 and h.vault.total_assets() == 0

        expected = h.vault.preview_deposit(1_000_000)
        h.assets.mint(h.asset_id, actor, 1_000_000)
        h.token.approve(actor, h.vault.address, 1_000_000)
        shares = h.vault.deposit(1_000_000, actor, sender=actor)

        assert shares == expected
        assert h.vault.total_assets() == 1_000_000
        assert h.vault.total_assets() == h.token.balance_of(h.vault.address)
        assert PropertyEngine(h).run_check("01").outcome is CheckOutcome.PASSED

    @pytest.mark.parametrize("amount", [1, 999, 10**18 + 3, 2**100 + 17])
    def test_deposit_then_redeem_never_manufactures_value(self, populated, amount):
        h = populated
        actor = h.actors.actors[1]
        before = h.vault.balance_of(actor)
        try:
            targets.execute_deposit(h, actor, amount, actor)
        except Revert:
            pytest.skip("deposit mints zero shares at this share price")
        shares = h.vault.balance_of(actor) - before
        preview = h.vault.preview_redeem(shares)
        if preview == 0:
            returned = 0
        else:
            returned = targets.execute_redeem(h, actor, shares, actor, actor)
        assert returned <= amount
        assert returned >= preview

    def test_unbounded_limits(self, harness):
        actor = harness.actors.active_actor()
        assert harness.vault.max_deposit(actor) == UINT256_MAX
        assert harness.vault.max_mint(actor) == UINT256_MAX

    def test_max_redeem_is_balance(self, populated):
        for actor in populated.actors.actors:
            assert populated.vault.max_redeem(actor) == populated.vault.balance_of(actor)

    @pytest.mark.parametrize("amount", [-1, UINT256_MAX + 1])
    def test_approve_rejects_amounts_outside_uint256(self, harness, amount):
        owner, spender = harness.actors.actors[:2]
        with pytest.raises(Revert, match="invalid amount"):
            harness.vault.approve(spender, amount, sender=owner)
        with pytest.raises(Revert, match="invalid amount"):
            harness.token.approve(owner, spender, amount)

    def test_withdraw_for_other_owner_needs_allowance(self, populated):
        owner, spender = populated.actors.actors[:2]
        with pytest.raises(Revert):
            populated.vault.withdraw(10, spender, owner, sender=spender)
        populated.vault.approve(spender, UINT256_MAX, sender=owner)
        populated.vault.withdraw(10, spender, owner, sender=spender)


class TestReferenceVault:
    @pytest.fixture
    def harness(self, settings):
        return build_harness("reference", settings=settings)

    def test_zero_share_deposit_reverts(self, harness):
        actor = harness.actors.active_actor()
        with pytest.raises(Revert, match="ZERO_SHARES"):
            targets.execute_deposit(harness, actor, 0, actor)

    def test_conversion_undefined_without_assets(self, degenerate):
        with pytest.raises(Revert):
            degenerate.vault.convert_to_shares(10)
        assert degenerate.vault.convert_to_assets(10) == 0

    def _positions(self, h, owner, spender):
        return (
            h.vault.allowance(owner, spender),
            h.vault.balance_of(owner),
            h.vault.total_supply(),
            h.token.balance_of(spender),
            h.vault.total_assets(),
        )

    def test_zero_asset_redeem_leaves_state_untouched(self, harness):
        owner, spender = harness.actors.actors[:2]
        targets.execute_deposit(harness, owner, 10**18, owner)
        harness.vault.approve(spender, 5, sender=owner)
        harness.token.burn(harness.vault.address, harness.vault.total_assets() - 1)
        before = self._positions(harness, owner, spender)
        with pytest.raises(Revert, match="ZERO_ASSETS"):
            harness.vault.redeem(1, spender, owner, sender=spender)
        assert self._positions(harness, owner, spender) == before

    def test_overdrawn_withdraw_leaves_allowance_untouched(self, harness):
        owner, spender = harness.actors.actors[:2]
        targets.execute_deposit(harness, owner, 10**18, owner)
        harness.vault.approve(spender, 10**30, sender=owner)
        before = self._positions(harness, owner, spender)
        with pytest.raises(Revert, match="exceeds balance"):
            harness.vault.withdraw(2 * 10**18, spender, owner, sender=spender)
        assert self._positions(harness, owner, spender) == before


class TestERC4626Vault:
    @pytest.fixture
    def harness(self, settings):
        return build_harness("erc4626", settings=settings)

    def test_conversion_defined_without_assets(self, degenerate):
        assert degenerate.vault.convert_to_shares(10) > 0

    def test_zero_share_deposit_allowed(self, harness):
        actor = harness.actors.active_actor()
        assert targets.execute_deposit(harness, actor, 0, actor) == 0

    def test_withdraw_more_than_max_reverts(self, populated):
        actor = populated.actors.actors[0]
        limit = populated.vault.max_withdraw(actor)
        with pytest.raises(Revert, match="withdraw more than max"):
            populated.vault.withdraw(limit + 1, actor, actor, sender=actor)


class TestPermit:
    def _sign(self, h, owner, spender, value, deadline, nonce=None):
        actor = h.actors.get(owner)
        nonce = h.vault.nonces(owner) if nonce is None else nonce
        message = permit_message(h.vault.address, owner, spender, value, nonce, deadline)
        return actor.public_key, actor.sign(message)

    def test_permit_sets_allowance_and_bumps_nonce(self, harness):
        owner, spender = harness.actors.actors[:2]
        key, sig = self._sign(harness, owner, spender, 500, 100)
        harness.vault.permit(owner, spender, 500, 100, key, sig)
        assert harness.vault.allowance(owner, spender) == 500
        assert harness.vault.nonces(owner) == 1

    def test_replayed_permit_rejected(self, harness):
        owner, spender = harness.actors.actors[:2]
        key, sig = self._sign(harness, owner, spender, 500, 100)
        harness.vault.permit(owner, spender, 500, 100, key, sig)
        with pytest.raises(Revert, match="INVALID_SIGNER"):
            harness.vault.permit(owner, spender, 500, 100, key, sig)

    def test_expired_permit_rejected(self, harness):
        owner, spender = harness.actors.actors[:2]
        harness.vault.timestamp = 50
        key, sig = self._sign(harness, owner, spender, 1, 49)
        with pytest.raises(Revert, match="PERMIT_DEADLINE_EXPIRED"):
            harness.vault.permit(owner, spender, 1, 49, key, sig)

    def test_signature_from_another_actor_rejected(self, harness):
        owner, spender, other = harness.actors.actors[:3]
        key, sig = self._sign(harness, other, spender, 1, 100)
        with pytest.raises(Revert, match="INVALID_SIGNER"):
            harness.vault.permit(owner, spender, 1, 100, key, sig)

    def test_tampered_value_rejected(self, harness):
        owner, spender = harness.actors.actors[:2]
        key, sig = self._sign(harness, owner, spender, 1, 100)
        with pytest.raises(Revert, match="INVALID_SIGNER"):
            harness.vault.permit(owner, spender, 2, 100, key, sig)
