"""Value bounding and state-derived seeds.

Random inputs reach the checks as raw 256-bit integers. ``bound`` projects
them into a check's valid domain and ``derive_seed`` turns the live vault
state into a deterministic source of such integers, so replaying a trace
replays every sample.
"""

from __future__ import annotations

import hashlib

UINT256_MAX = 2**256 - 1
UINT128_MAX = 2**128 - 1


def bound(value: int, max_value: int) -> int:
    """Clamp ``value`` into ``[0, max_value]``.

    ``max_value == UINT256_MAX`` means unbounded and returns ``value``
    unchanged. Otherwise the projection is uniform modulo reduction.
    """
    if value < 0 or max_value < 0:
        raise ValueError("bound() operates on unsigned integers")
    if max_value >= UINT256_MAX:
        return value
    return value % (max_value + 1)


def derive_seed(actor: str, total_supply: int, total_assets: int, salt: str = "") -> int:
    """Hash the active actor and vault totals into a 256-bit seed."""
    h = hashlib.sha256()
    h.update(actor.encode())
    h.update(total_supply.to_bytes(32, "big"))
    h.update(total_assets.to_bytes(32, "big"))
    if salt:
        h.update(salt.encode())
    return int.from_bytes(h.digest(), "big")


def is_uint256(value: int) -> bool:
    return 0 <= value <= UINT256_MAX
