"""Target function surface, invariant catalog and the property engine."""

from vaultcheck.properties.catalog import CATALOG, InvariantSpec, get_invariant
from vaultcheck.properties.context import Harness, build_harness
from vaultcheck.properties.engine import PropertyEngine
from vaultcheck.properties.targets import TARGETS, TargetSpec, get_target

__all__ = [
    "CATALOG",
    "Harness",
    "InvariantSpec",
    "PropertyEngine",
    "TARGETS",
    "TargetSpec",
    "build_harness",
    "get_invariant",
    "get_target",
]
