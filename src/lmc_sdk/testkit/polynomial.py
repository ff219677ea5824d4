"""
LMC Test Kit - Polynomial Brute Force
=====================================

Builtin test for programs that evaluate a quadratic.

The program must read four inputs ``a``, ``b``, ``c``, ``x`` (in that
order), output ``a + b*x + c*x*x`` clamped to 0..999, and halt. The
harness tries every combination in the configured ranges.

Work is split by ``x`` over a thread pool. Each run grades its own copy of
the base state, so workers share nothing but the totals, which are merged
under a lock once a worker finishes its slice.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from lmc_sdk.cpu import MAX_WORD
from lmc_sdk.emulator.cpu import InterpreterState
from lmc_sdk.testkit.tester import (
    CaseOutcome,
    ExpectedAction,
    Verdict,
    expect_in,
    expect_out,
    run_test,
)

logger = logging.getLogger(__name__)

# Failures kept for the report; the counts always cover everything
MAX_RECORDED_FAILURES = 10


def polynomial_value(a: int, b: int, c: int, x: int) -> int:
    """``a + b*x + c*x*x`` clamped to 0..999."""
    return max(0, min(MAX_WORD, a + b * x + c * x * x))


def polynomial_script(a: int, b: int, c: int, x: int) -> List[ExpectedAction]:
    """The I/O script for one combination."""
    return [
        expect_in(a),
        expect_in(b),
        expect_in(c),
        expect_in(x),
        expect_out(polynomial_value(a, b, c, x)),
    ]


@dataclass
class PolynomialReport:
    """
    Totals of a brute-force run.

    Attributes:
        passed: Combinations that passed
        failed: Combinations that failed
        crashed: Combinations that crashed
        failures: The first few non-passing combinations with their outcome
    """
    passed: int = 0
    failed: int = 0
    crashed: int = 0
    failures: List[Tuple[Tuple[int, int, int, int], CaseOutcome]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.passed + self.failed + self.crashed

    @property
    def ok(self) -> bool:
        return self.failed == 0 and self.crashed == 0

    def __str__(self) -> str:
        return f"Pass: {self.passed}, Fail: {self.failed}, Crash: {self.crashed}"


class PolynomialTester:
    """
    Brute-force tester for quadratic evaluators.

    Attributes:
        coefficients: Values tried for each of a, b and c
        xs: Values tried for x
        workers: Thread pool size
        max_steps: Step budget per run (None for no limit)
    """

    def __init__(
        self,
        coefficients: Sequence[int] = range(10),
        xs: Sequence[int] = range(10),
        workers: int = 4,
        max_steps: Optional[int] = 10_000,
    ):
        self.coefficients = list(coefficients)
        self.xs = list(xs)
        self.workers = max(1, workers)
        self.max_steps = max_steps

        self._lock = threading.Lock()
        self._report = PolynomialReport()

    @property
    def combinations(self) -> int:
        return len(self.coefficients) ** 3 * len(self.xs)

    def run(self, state: InterpreterState) -> PolynomialReport:
        """
        Try every combination against ``state``.

        Returns:
            PolynomialReport with the totals
        """
        self._report = PolynomialReport()
        logger.info(f"Testing {self.combinations} combinations on {self.workers} workers")

        with ThreadPoolExecutor(max_workers=self.workers) as pool:
            futures = [pool.submit(self._run_slice, state, x) for x in self.xs]
            for future in futures:
                # Re-raise anything a worker could not grade
                future.result()

        logger.info(str(self._report))
        return self._report

    def _run_slice(self, state: InterpreterState, x: int) -> None:
        passed = failed = crashed = 0
        failures = []

        for a in self.coefficients:
            for b in self.coefficients:
                for c in self.coefficients:
                    outcome = run_test(state, polynomial_script(a, b, c, x), self.max_steps)
                    if outcome.verdict is Verdict.PASS:
                        passed += 1
                        continue

                    if outcome.verdict is Verdict.FAIL:
                        failed += 1
                    else:
                        crashed += 1
                    if len(failures) < MAX_RECORDED_FAILURES:
                        failures.append(((a, b, c, x), outcome))

        with self._lock:
            report = self._report
            report.passed += passed
            report.failed += failed
            report.crashed += crashed
            room = MAX_RECORDED_FAILURES - len(report.failures)
            report.failures.extend(failures[:max(0, room)])
            logger.info(f"x={x} done. Done: {report.total}, Pass: {report.passed}")


def run_polynomial_test(
    state: InterpreterState,
    coefficients: Sequence[int] = range(10),
    xs: Sequence[int] = range(10),
    workers: int = 4,
    max_steps: Optional[int] = 10_000,
) -> PolynomialReport:
    """Convenience function: build a `PolynomialTester` and run it."""
    return PolynomialTester(coefficients, xs, workers, max_steps).run(state)

