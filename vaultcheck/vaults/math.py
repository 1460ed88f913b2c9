"""Integer mul-div with explicit rounding direction."""

from __future__ import annotations

from enum import Enum

from vaultcheck.harness.bounding import UINT256_MAX
from vaultcheck.harness.errors import Revert


class Rounding(Enum):
    FLOOR = "floor"
    CEIL = "ceil"


def mul_div(x: int, y: int, denominator: int, rounding: Rounding = Rounding.FLOOR) -> int:
    """Full-precision ``x * y / denominator``.

    The intermediate product may exceed 256 bits; only a result that does
    not fit in a uint256 reverts.
    """
    if denominator == 0:
        raise Revert("MATH: division by zero")
    q, r = divmod(x * y, denominator)
    if rounding is Rounding.CEIL and r:
        q += 1
    if q > UINT256_MAX:
        raise Revert("MATH: mulDiv overflow")
    return q
