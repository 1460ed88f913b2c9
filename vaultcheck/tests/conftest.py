"""Shared fixtures for the vaultcheck test suite."""

from __future__ import annotations

import pytest

from vaultcheck.core.config import Settings
from vaultcheck.properties import targets
from vaultcheck.properties.context import Harness, build_harness
from vaultcheck.properties.engine import PropertyEngine


# ── Settings ─────────────────────────────────────────────────────────────────


@pytest.fixture
def settings() -> Settings:
    """Settings with defaults only, isolated from the environment."""
    return Settings(_env_file=None)


# ── Harness Fixtures ─────────────────────────────────────────────────────────


VARIANTS = [
    pytest.param(("erc4626", 0), id="erc4626"),
    pytest.param(("erc4626", 3), id="erc4626-offset3"),
    pytest.param(("reference", 0), id="reference"),
]


@pytest.fixture(params=VARIANTS)
def harness(request: pytest.FixtureRequest, settings: Settings) -> Harness:
    """A fresh harness for every bundled vault variant."""
    variant, offset = request.param
    return build_harness(variant, decimals_offset=offset, settings=settings)


@pytest.fixture
def populated(harness: Harness) -> Harness:
    """The harness after every actor deposited and one actor withdrew."""
    for i, actor in enumerate(harness.actors.actors):
        targets.execute_deposit(harness, actor, (i + 1) * 10**18 + 7, actor)
    first = harness.actors.actors[0]
    targets.execute_withdraw(harness, first, 3 * 10**17 + 1, first, first)
    return harness


@pytest.fixture
def engine(harness: Harness) -> PropertyEngine:
    return PropertyEngine(harness)


@pytest.fixture
def degenerate(harness: Harness) -> Harness:
    """Shares outstanding while the vault holds no assets."""
    actor = harness.actors.active_actor()
    targets.execute_deposit(harness, actor, 10**18, actor)
    harness.token.burn(harness.vault.address, harness.vault.total_assets())
    return harness
