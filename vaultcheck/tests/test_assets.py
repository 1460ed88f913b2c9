"""Tests for vaultcheck.harness.assets — registry and the mock token."""

from __future__ import annotations

import pytest

from vaultcheck.harness.assets import AssetRegistry
from vaultcheck.harness.bounding import UINT256_MAX
from vaultcheck.harness.errors import AssetOverflowError, Revert, UnknownAssetError


@pytest.fixture
def registry() -> AssetRegistry:
    return AssetRegistry()


class TestAssetRegistry:
    def test_new_asset_with_decimals(self, registry):
        asset = registry.new_asset(6)
        assert registry.get(asset).decimals == 6
        assert registry.assets == (asset,)

    def test_assets_get_distinct_addresses(self, registry):
        assert registry.new_asset(18) != registry.new_asset(18)

    def test_decimals_must_fit_uint8(self, registry):
        with pytest.raises(ValueError):
            registry.new_asset(256)

    def test_mint_credits_balance_and_supply(self, registry):
        asset = registry.new_asset(18)
        registry.mint(asset, "0xalice", 1_000)
        registry.mint(asset, "0xalice", 500)
        token = registry.get(asset)
        assert token.balance_of("0xalice") == 1_500
        assert token.total_supply() == 1_500

    def test_mint_overflow(self, registry):
        asset = registry.new_asset(18)
        registry.mint(asset, "0xalice", UINT256_MAX)
        with pytest.raises(AssetOverflowError):
            registry.mint(asset, "0xbob", 1)
        assert registry.get(asset).balance_of("0xbob") == 0

    def test_overflow_error_is_an_overflow_error(self):
        assert issubclass(AssetOverflowError, OverflowError)

    def test_mint_does_not_approve(self, registry):
        asset = registry.new_asset(18)
        registry.mint(asset, "0xalice", 10)
        assert registry.get(asset).allowance("0xalice", "0xvault") == 0

    def test_unknown_asset(self, registry):
        with pytest.raises(UnknownAssetError):
            registry.get("0xnope")


class TestMockERC20:
    @pytest.fixture
    def token(self, registry):
        token = registry.get(registry.new_asset(18))
        token.mint("0xalice", 100)
        return token

    def test_transfer(self, token):
        token.transfer("0xalice", "0xbob", 40)
        assert token.balance_of("0xalice") == 60
        assert token.balance_of("0xbob") == 40

    def test_transfer_exceeding_balance_reverts(self, token):
        with pytest.raises(Revert):
            token.transfer("0xalice", "0xbob", 101)

    def test_transfer_from_spends_allowance(self, token):
        token.approve("0xalice", "0xspender", 50)
        token.transfer_from("0xspender", "0xalice", "0xbob", 30)
        assert token.allowance("0xalice", "0xspender") == 20
        with pytest.raises(Revert):
            token.transfer_from("0xspender", "0xalice", "0xbob", 21)

    def test_infinite_allowance_is_not_spent(self, token):
        token.approve("0xalice", "0xspender", UINT256_MAX)
        token.transfer_from("0xspender", "0xalice", "0xbob", 30)
        assert token.allowance("0xalice", "0xspender") == UINT256_MAX

    def test_burn(self, token):
        token.burn("0xalice", 100)
        assert token.total_supply() == 0
        with pytest.raises(Revert):
            token.burn("0xalice", 1)
