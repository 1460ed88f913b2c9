"""Error taxonomy for the harness.

  - Setup errors (``HarnessError`` subclasses): misconfiguration, fatal
  - ``AssetOverflowError``: minting past ``UINT256_MAX``
  - ``Revert``: a simulated contract call was refused
  - ``InvariantViolation``: the only expected finding, tagged
  - ``CheckSkipped``: precondition filter signal, never a finding
"""

from __future__ import annotations

from typing import Any


class HarnessError(Exception):
    """Base class for harness setup errors."""


class CapacityError(HarnessError):
    """The actor registry is full."""


class NoActorsError(HarnessError):
    """An active actor was requested from an empty registry."""


class UnknownActorError(HarnessError):
    """An actor that was never registered was selected."""


class UnknownAssetError(HarnessError):
    """An asset handle does not belong to the registry."""


class AssetOverflowError(HarnessError, OverflowError):
    """Minting would push a balance or total supply past ``UINT256_MAX``."""


class Revert(Exception):
    """A simulated contract call failed."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class InvariantViolation(AssertionError):
    """An invariant check failed.

    ``tag`` is the literal, stable identifier of the violated invariant;
    ``values`` holds the concrete sampled values that produced it.
    """

    def __init__(self, check_id: str, tag: str, values: dict[str, Any] | None = None) -> None:
        self.check_id = check_id
        self.tag = tag
        self.values = dict(values or {})
        rendered = ", ".join(f"{k}={v}" for k, v in self.values.items())
        super().__init__(f"{tag} ({rendered})" if rendered else tag)


class CheckSkipped(Exception):
    """Raised by a precondition filter; the engine records a skip."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason
