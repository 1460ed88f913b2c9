"""Stateful vault campaign — random call sequences against a live vault.

Each sequence starts from a fresh harness and accumulates state across
target-function calls; the invariant catalog runs every
``check_interval`` calls and the first violation ends the sequence.

Architecture
------------
::

    VaultCampaign
      │
      ├── StateTransition    — recorded (actor, target, raw args, result)
      ├── StatefulSequence   — one trace from a fresh harness
      ├── Phase 1: Exploration  — random sequences, catalog after each step
      └── Phase 2: Minimization — chunked delta debugging of violating
                                  traces, confirmed by re-execution

Everything is deterministic for a given seed: arguments come from
``random.Random(seed)`` and every in-check sample is derived from vault
state, so a minimized trace replays to the same violation.
"""

from __future__ import annotations

import hashlib
import logging
import random
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from vaultcheck.core.config import Settings, get_settings
from vaultcheck.core.logging import CampaignLogFilter
from vaultcheck.core.types import CheckCoverage, ViolationReport
from vaultcheck.harness.bounding import UINT128_MAX, UINT256_MAX
from vaultcheck.harness.errors import InvariantViolation, Revert
from vaultcheck.properties.context import Harness, build_harness
from vaultcheck.properties.engine import PropertyEngine
from vaultcheck.properties.targets import TARGETS, TargetSpec

logger = logging.getLogger(__name__)

_BOUNDARY_VALUES = (0, 1, UINT256_MAX, UINT256_MAX - 1, UINT128_MAX + 1)


# ── Data Models ──────────────────────────────────────────────────────────────


class TransitionResult(str, Enum):
    """Outcome of a state transition."""
    SUCCESS = "success"
    REVERT = "revert"
    INVARIANT_VIOLATED = "invariant_violated"


@dataclass
class StateTransition:
    """A recorded state transition (one target call)."""
    step: int
    actor_index: int
    function: str
    args: tuple[int, ...] = ()
    params: tuple[str, ...] = ()
    result: TransitionResult = TransitionResult.SUCCESS
    return_value: Any = None
    revert_reason: str = ""

    @property
    def signature(self) -> str:
        """Human-readable call signature."""
        names = self.params or tuple(f"arg{i}" for i in range(len(self.args)))
        arg_str = ", ".join(f"{k}={v}" for k, v in zip(names, self.args))
        return f"actor{self.actor_index}.{self.function}({arg_str})"

    def replay(self) -> StateTransition:
        return StateTransition(
            step=self.step,
            actor_index=self.actor_index,
            function=self.function,
            args=self.args,
            params=self.params,
        )


@dataclass
class StatefulSequence:
    """A complete sequence of state transitions."""
    id: str
    transitions: list[StateTransition] = field(default_factory=list)
    violation: InvariantViolation | None = None

    @property
    def length(self) -> int:
        return len(self.transitions)

    def append(self, tx: StateTransition) -> None:
        self.transitions.append(tx)

    def report(self) -> ViolationReport:
        if self.violation is None:
            raise ValueError(f"sequence {self.id} has no violation to report")
        return ViolationReport(
            check_id=self.violation.check_id,
            tag=self.violation.tag,
            values=self.violation.values,
            sequence_id=self.id,
            transitions=[t.signature for t in self.transitions],
        )


@dataclass
class CampaignConfig:
    """Configuration for a vault campaign."""
    sequences: int = 50
    sequence_length: int = 30
    check_interval: int = 1
    seed: int | None = None
    enable_minimization: bool = True
    boundary_probability: float = 0.3

    def __post_init__(self) -> None:
        if self.sequences < 0:
            raise ValueError(f"sequences must be >= 0, got {self.sequences}")
        if self.sequence_length < 1:
            raise ValueError(f"sequence_length must be >= 1, got {self.sequence_length}")
        if self.check_interval < 1:
            raise ValueError(f"check_interval must be >= 1, got {self.check_interval}")
        if not 0.0 <= self.boundary_probability <= 1.0:
            raise ValueError(
                f"boundary_probability must be within [0, 1], got {self.boundary_probability}"
            )

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> CampaignConfig:
        s = settings or get_settings()
        return cls(
            sequences=s.campaign_sequences,
            sequence_length=s.campaign_sequence_length,
            check_interval=s.campaign_check_interval,
            seed=s.campaign_seed,
            enable_minimization=s.campaign_enable_shrinking,
        )


@dataclass
class CampaignResult:
    """Results from a vault campaign."""
    sequences_executed: int = 0
    total_transitions: int = 0
    reverts: int = 0
    violations: list[ViolationReport] = field(default_factory=list)
    minimized: list[ViolationReport] = field(default_factory=list)
    coverage: dict[str, CheckCoverage] = field(default_factory=dict)
    duration_seconds: float = 0.0

    @property
    def passed(self) -> bool:
        return not self.violations

    def to_dict(self) -> dict[str, Any]:
        return {
            "sequences_executed": self.sequences_executed,
            "total_transitions": self.total_transitions,
            "reverts": self.reverts,
            "violations": [v.model_dump() for v in self.violations],
            "minimized": [v.model_dump() for v in self.minimized],
            "coverage": {
                k: {"passed": c.passed, "failed": c.failed, "skipped": c.skipped}
                for k, c in sorted(self.coverage.items())
            },
            "duration_seconds": round(self.duration_seconds, 3),
        }


# ── Campaign Engine ──────────────────────────────────────────────────────────


class VaultCampaign:
    """Drives random target sequences and the invariant catalog.

    ``harness_factory`` must build an identical fresh harness on every
    call; re-execution during minimization depends on it.
    """

    def __init__(
        self,
        harness_factory: Callable[[], Harness] | None = None,
        config: CampaignConfig | None = None,
        targets: tuple[TargetSpec, ...] = TARGETS,
    ) -> None:
        self._factory = harness_factory or build_harness
        self._config = config or CampaignConfig.from_settings()
        self._targets = targets
        self._by_name = {t.name: t for t in targets}
        self._rng = random.Random(self._config.seed)
        self._violation_sequences: list[StatefulSequence] = []

    def run_campaign(self) -> CampaignResult:
        """Execute exploration then minimization."""
        result = CampaignResult()
        start_time = time.monotonic()

        logger.info(
            "Vault campaign: %d sequences of up to %d calls",
            self._config.sequences, self._config.sequence_length,
        )

        for i in range(self._config.sequences):
            seq = self._generate_random_sequence()
            self._execute_sequence(seq, result)
            result.sequences_executed += 1
            if seq.violation is not None:
                self._violation_sequences.append(seq)
                result.violations.append(seq.report())

            if i % 10 == 0 and i > 0:
                logger.info(
                    "Exploration: %d/%d sequences, %d transitions, %d violations",
                    i, self._config.sequences, result.total_transitions,
                    len(self._violation_sequences),
                )

        if self._config.enable_minimization:
            for vseq in self._violation_sequences:
                result.minimized.append(self._minimize_sequence(vseq).report())

        result.duration_seconds = time.monotonic() - start_time
        logger.info(
            "Vault campaign complete: %d sequences, %d transitions, "
            "%d reverts, %d violations in %.1fs",
            result.sequences_executed,
            result.total_transitions,
            result.reverts,
            len(result.violations),
            result.duration_seconds,
        )
        return result

    # ── Sequence Generation ──────────────────────────────────────────

    def _generate_random_sequence(self) -> StatefulSequence:
        seq_id = hashlib.sha256(f"seq-{self._rng.random()}".encode()).hexdigest()[:12]
        seq = StatefulSequence(id=seq_id)
        length = self._rng.randint(1, self._config.sequence_length)
        for step in range(length):
            seq.append(self._generate_random_transition(step))
        return seq

    def _generate_random_transition(self, step: int) -> StateTransition:
        target = self._rng.choice(self._targets)
        return StateTransition(
            step=step,
            actor_index=self._rng.randint(0, 15),
            function=target.name,
            args=tuple(self._random_arg(p) for p in target.params),
            params=target.params,
        )

    def _random_arg(self, param: str) -> int:
        if param.endswith("_index"):
            return self._rng.randint(0, 15)
        if self._rng.random() < self._config.boundary_probability:
            return self._rng.choice(_BOUNDARY_VALUES)
        # Favour magnitudes spread across the whole range
        bits = self._rng.randint(1, 256)
        return self._rng.getrandbits(bits)

    # ── Execution ────────────────────────────────────────────────────

    def _execute_sequence(
        self, seq: StatefulSequence, result: CampaignResult | None = None
    ) -> None:
        """Run ``seq`` on a fresh harness, recording outcomes in place."""
        harness = self._factory()
        engine = PropertyEngine(harness)
        log_filter = CampaignLogFilter(seq.id)
        logger.addFilter(log_filter)
        try:
            for i, tx in enumerate(seq.transitions):
                log_filter.step = i
                actor = harness.actors.pick(tx.actor_index)
                harness.actors.select_actor(actor)
                try:
                    tx.return_value = self._by_name[tx.function](harness, actor, *tx.args)
                    tx.result = TransitionResult.SUCCESS
                except Revert as exc:
                    tx.result = TransitionResult.REVERT
                    tx.revert_reason = exc.reason
                    logger.debug("%s reverted: %s", tx.signature, exc.reason)
                    if result is not None:
                        result.reverts += 1
                if result is not None:
                    result.total_transitions += 1

                if (i + 1) % self._config.check_interval == 0:
                    try:
                        engine.run_all(actor)
                    except InvariantViolation as violation:
                        tx.result = TransitionResult.INVARIANT_VIOLATED
                        seq.violation = violation
                        del seq.transitions[i + 1:]
                        logger.warning(
                            "Sequence %s violated %s after %d calls",
                            seq.id, violation.tag, i + 1,
                            extra={"check_id": violation.check_id},
                        )
                        break
        finally:
            logger.removeFilter(log_filter)
            if result is not None:
                _merge_coverage(result.coverage, engine.coverage())

    # ── Minimization ─────────────────────────────────────────────────

    def _minimize_sequence(self, seq: StatefulSequence) -> StatefulSequence:
        """Delta-debugging minimization of a failing sequence.

        Iteratively removes chunks of transitions while the same tag
        still fires on re-execution, producing a minimal reproducer.
        """
        if seq.violation is None:
            raise ValueError(f"sequence {seq.id} has no violation to minimize")
        tag = seq.violation.tag
        transitions = [t.replay() for t in seq.transitions]
        best = self._replay(seq.id, transitions)
        if best.violation is None or best.violation.tag != tag:
            logger.warning("Sequence %s does not reproduce on replay; keeping it as is", seq.id)
            return seq

        chunk_size = len(transitions) // 2
        while chunk_size >= 1:
            i = 0
            while i < len(transitions):
                candidate = transitions[:i] + transitions[i + chunk_size:]
                attempt = self._replay(seq.id, candidate)
                if attempt.violation is not None and attempt.violation.tag == tag:
                    transitions = candidate
                    best = attempt
                else:
                    i += chunk_size
            chunk_size //= 2

        logger.info(
            "Minimized sequence %s: %d → %d transitions",
            seq.id, seq.length, best.length,
        )
        return best

    def _replay(self, seq_id: str, transitions: list[StateTransition]) -> StatefulSequence:
        candidate = StatefulSequence(
            id=f"min-{seq_id}",
            transitions=[t.replay() for t in transitions],
        )
        if candidate.transitions:
            self._execute_sequence(candidate)
        return candidate


def _merge_coverage(into: dict[str, CheckCoverage], new: dict[str, CheckCoverage]) -> None:
    for check_id, cov in new.items():
        agg = into.setdefault(check_id, CheckCoverage(check_id=check_id))
        agg.passed += cov.passed
        agg.failed += cov.failed
        for reason, count in cov.skipped.items():
            agg.skipped[reason] = agg.skipped.get(reason, 0) + count
