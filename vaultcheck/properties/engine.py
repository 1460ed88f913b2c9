"""Property engine — runs catalogued checks and accounts for their outcomes.

A check invocation ends in exactly one of three ways:

  - PASSED   the assertion held
  - SKIPPED  a precondition filter short-circuited; the reason is counted
             so coverage of filtered branches can be audited
  - FAILED   the invariant was violated; the ``InvariantViolation`` is
             re-raised unless the engine runs in collecting mode

Setup errors (``HarnessError``), including an unregistered acting actor,
propagate unchanged.
"""

from __future__ import annotations

import logging
from typing import Iterable

from vaultcheck.core.types import CheckCoverage, CheckOutcome, CheckResult
from vaultcheck.harness.errors import CheckSkipped, InvariantViolation
from vaultcheck.properties.catalog import CATALOG, InvariantSpec, get_invariant
from vaultcheck.properties.context import Harness

logger = logging.getLogger(__name__)


class PropertyEngine:
    """Executes invariant checks against one harness.

    Usage::

        engine = PropertyEngine(build_harness("erc4626"))
        engine.run_check("15")          # raises InvariantViolation on failure
        report = engine.coverage()
    """

    def __init__(
        self,
        harness: Harness,
        catalog: Iterable[InvariantSpec] = CATALOG,
        raise_on_violation: bool = True,
    ) -> None:
        self.harness = harness
        self._catalog = tuple(catalog)
        self._raise = raise_on_violation
        self._coverage: dict[str, CheckCoverage] = {
            spec.id: CheckCoverage(check_id=spec.id) for spec in self._catalog
        }

    @property
    def catalog(self) -> tuple[InvariantSpec, ...]:
        return self._catalog

    def run_check(self, check_id: str, actor: str | None = None) -> CheckResult:
        """Run one check as ``actor`` (default: the active actor)."""
        spec = get_invariant(check_id)
        if spec.id not in self._coverage:
            raise KeyError(f"invariant {spec.id} is not part of this engine's catalog")
        return self._run(spec, actor)

    def run_all(self, actor: str | None = None) -> list[CheckResult]:
        """Run the whole catalog in table order.

        In raising mode the first violation aborts the pass.
        """
        return [self._run(spec, actor) for spec in self._catalog]

    def coverage(self) -> dict[str, CheckCoverage]:
        return {k: v.model_copy(deep=True) for k, v in self._coverage.items()}

    # ── Internals ────────────────────────────────────────────────────

    def _run(self, spec: InvariantSpec, actor: str | None) -> CheckResult:
        if actor is None:
            actor = self.harness.actors.active_actor()
        else:
            self.harness.actors.get(actor)
        counters = self._coverage[spec.id]
        extra = {"check_id": spec.id, "tag": spec.tag, "actor": actor}

        try:
            values = spec.check(self.harness, actor)
        except CheckSkipped as skip:
            counters.skipped[skip.reason] = counters.skipped.get(skip.reason, 0) + 1
            logger.debug(
                "%s skipped: %s", spec.name, skip.reason,
                extra={**extra, "outcome": CheckOutcome.SKIPPED.value},
            )
            return CheckResult(
                check_id=spec.id,
                name=spec.name,
                tag=spec.tag,
                outcome=CheckOutcome.SKIPPED,
                actor=actor,
                skip_reason=skip.reason,
            )
        except InvariantViolation as violation:
            counters.failed += 1
            logger.warning(
                "%s violated: %s", spec.name, violation,
                extra={**extra, "outcome": CheckOutcome.FAILED.value},
            )
            if self._raise:
                raise
            return CheckResult(
                check_id=spec.id,
                name=spec.name,
                tag=spec.tag,
                outcome=CheckOutcome.FAILED,
                actor=actor,
                values=violation.values,
            )

        counters.passed += 1
        logger.debug(
            "%s passed", spec.name,
            extra={**extra, "outcome": CheckOutcome.PASSED.value},
        )
        return CheckResult(
            check_id=spec.id,
            name=spec.name,
            tag=spec.tag,
            outcome=CheckOutcome.PASSED,
            actor=actor,
            values=values,
        )
