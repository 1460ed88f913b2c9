"""Tests for vaultcheck.harness.bounding — clamping and state-derived seeds."""

from __future__ import annotations

import pytest

from vaultcheck.harness.bounding import (
    UINT128_MAX,
    UINT256_MAX,
    bound,
    derive_seed,
    is_uint256,
)


class TestBound:
    def test_unbounded_max_passes_value_through(self):
        assert bound(UINT256_MAX - 5, UINT256_MAX) == UINT256_MAX - 5
        assert bound(0, UINT256_MAX) == 0

    @pytest.mark.parametrize("value", [0, 1, 41, 42, 43, 10**30, UINT256_MAX])
    def test_result_never_exceeds_max(self, value):
        assert 0 <= bound(value, 42) <= 42

    def test_modulo_projection(self):
        assert bound(43, 42) == 0
        assert bound(44, 42) == 1
        assert bound(7, 42) == 7

    def test_zero_max_collapses_to_zero(self):
        assert bound(UINT128_MAX, 0) == 0

    def test_deterministic(self):
        assert bound(123456789, 1000) == bound(123456789, 1000)

    def test_covers_whole_range(self):
        assert {bound(v, 9) for v in range(100)} == set(range(10))

    def test_rejects_negative_input(self):
        with pytest.raises(ValueError):
            bound(-1, 10)


class TestDeriveSeed:
    def test_same_state_same_seed(self):
        assert derive_seed("0xabc", 10, 20) == derive_seed("0xabc", 10, 20)

    def test_seed_tracks_actor_and_totals(self):
        base = derive_seed("0xabc", 10, 20)
        assert derive_seed("0xdef", 10, 20) != base
        assert derive_seed("0xabc", 11, 20) != base
        assert derive_seed("0xabc", 10, 21) != base

    def test_salt_separates_checks(self):
        assert derive_seed("0xabc", 1, 1, "02") != derive_seed("0xabc", 1, 1, "03")

    def test_seed_is_uint256(self):
        assert is_uint256(derive_seed("0xabc", UINT256_MAX, UINT256_MAX))
