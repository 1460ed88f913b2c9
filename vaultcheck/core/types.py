"""Shared enums and result schemas used across the harness."""

from __future__ import annotations

import enum
from typing import Any

from pydantic import BaseModel, Field


# ── Enums ────────────────────────────────────────────────────────────────────


class CheckOutcome(str, enum.Enum):
    """Result of a single invariant check invocation."""

    PASSED = "passed"
    SKIPPED = "skipped"
    FAILED = "failed"


class CheckKind(str, enum.Enum):
    """Whether a check only reads state or performs a real operation."""

    READ_ONLY = "read_only"
    ORACLE = "oracle"


class VaultVariant(str, enum.Enum):
    """Bundled vault implementations the catalog can be run against."""

    ERC4626 = "erc4626"
    REFERENCE = "reference"


# ── Schemas ──────────────────────────────────────────────────────────────────


class CheckResult(BaseModel):
    """Outcome of one check invocation."""

    check_id: str
    name: str
    tag: str
    outcome: CheckOutcome
    actor: str = ""
    skip_reason: str | None = None
    values: dict[str, int] = Field(default_factory=dict)


class CheckCoverage(BaseModel):
    """Running counters for one check, so filtered branches stay auditable."""

    check_id: str
    passed: int = 0
    failed: int = 0
    skipped: dict[str, int] = Field(default_factory=dict)

    @property
    def total_skipped(self) -> int:
        return sum(self.skipped.values())

    @property
    def invocations(self) -> int:
        return self.passed + self.failed + self.total_skipped


class ViolationReport(BaseModel):
    """A violated invariant together with the trace that produced it."""

    check_id: str
    tag: str
    values: dict[str, Any] = Field(default_factory=dict)
    sequence_id: str = ""
    transitions: list[str] = Field(default_factory=list)
