"""
LMC Test Kit - Scripted Runs
============================

Runs a program against an exact I/O script and grades the run.

An I/O script is a sequence of `ExpectedAction` values: each one is either
an input the program should ask for (and will be given) or an output it
should produce. `ValidatorIO` plays the script through the interpreter's
I/O boundary and raises `HarnessFailure` as soon as the program departs
from it.

Verdicts:
    PASS   the program followed the script exactly and halted
    FAIL   the program broke the script, faulted, or ran out of steps
    CRASH  anything else went wrong during the run

Usage:
    from lmc_sdk.testkit import expect_in, expect_out, run_test

    outcome = run_test(state, [expect_in(2), expect_in(3), expect_out(5)])
    assert outcome.verdict is Verdict.PASS
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, List, Optional, Protocol

from lmc_sdk.emulator.cpu import Interpreter, InterpreterState
from lmc_sdk.emulator.io import IOBoundary
from lmc_sdk.errors import HarnessFailure

logger = logging.getLogger(__name__)


# =============================================================================
# Script Actions
# =============================================================================

@dataclass(frozen=True)
class ExpectedAction:
    """
    One step of an I/O script.

    Attributes:
        is_input: True for an input request, False for an output
        value: Value supplied (input) or expected (output)
    """
    is_input: bool
    value: int

    def __str__(self) -> str:
        return f"{'IN' if self.is_input else 'OUT'} {self.value}"


def expect_in(value: int) -> ExpectedAction:
    """The program should request input; it will receive ``value``."""
    return ExpectedAction(is_input=True, value=value)


def expect_out(value: int) -> ExpectedAction:
    """The program should output ``value``."""
    return ExpectedAction(is_input=False, value=value)


# =============================================================================
# Validator Boundary
# =============================================================================

class GradingIO(IOBoundary, Protocol):
    """An I/O boundary that can tell whether the program finished its script."""
    def check_done(self) -> None:
        ...


class ValidatorIO:
    """
    I/O boundary that enforces an I/O script.

    Attributes:
        consumed: Number of script actions used so far
        messages: Log lines received from the interpreter
    """

    def __init__(self, actions: Iterable[ExpectedAction]):
        self._actions: Iterator[ExpectedAction] = iter(actions)
        self.consumed = 0
        self.messages: List[str] = []

    def _next(self) -> Optional[ExpectedAction]:
        action = next(self._actions, None)
        if action is not None:
            self.consumed += 1
        return action

    def request_input(self) -> int:
        action = self._next()
        if action is None or not action.is_input:
            raise HarnessFailure("Unexpected input request.")
        return action.value

    def emit_output(self, value: int) -> None:
        action = self._next()
        if action is None or action.is_input:
            raise HarnessFailure("Unexpected output")
        if action.value != value:
            raise HarnessFailure(f"Output {value} != expected {action.value}")

    def log(self, message: str) -> None:
        self.messages.append(message)

    def check_done(self) -> None:
        """
        Raises:
            HarnessFailure: If script actions remain unused
        """
        if self._next() is not None:
            raise HarnessFailure("Unexpected end of program.")


# =============================================================================
# Outcomes
# =============================================================================

class Verdict(Enum):
    """Grade of one scripted run."""
    PASS = "PASS"
    FAIL = "FAIL"
    CRASH = "CRASH"


@dataclass
class CaseOutcome:
    """
    Result of one scripted run.

    Attributes:
        verdict: PASS, FAIL or CRASH
        reason: Why the run did not pass (empty on PASS)
        steps: Steps the interpreter executed
    """
    verdict: Verdict
    reason: str = ""
    steps: int = 0

    @property
    def passed(self) -> bool:
        return self.verdict is Verdict.PASS

    def __str__(self) -> str:
        if self.reason:
            return f"{self.verdict.value}: {self.reason}"
        return self.verdict.value


# =============================================================================
# Runner
# =============================================================================

def run_test(
    state: InterpreterState,
    actions: Iterable[ExpectedAction],
    max_steps: Optional[int] = None,
) -> CaseOutcome:
    """
    Run a program against an I/O script.

    The run works on a copy of ``state`` with PC, accumulator and flag reset,
    so one base state can be graded many times (and from many threads).

    Args:
        state: Base machine state
        actions: The I/O script
        max_steps: Step budget; running out before halting is a FAIL

    Returns:
        CaseOutcome describing the run
    """
    return grade_run(state, ValidatorIO(actions), max_steps)


def grade_run(
    state: InterpreterState,
    io: GradingIO,
    max_steps: Optional[int] = None,
) -> CaseOutcome:
    """
    Run a copy of ``state`` through a grading boundary and grade the run.

    ``io`` raises `HarnessFailure` when the program departs from what it
    expects, and its ``check_done`` raises if the program halted early.
    """
    machine = state.copy()
    machine.reset()
    interpreter = Interpreter(io)

    try:
        interpreter.run(machine, max_steps)
        if interpreter.fault is not None:
            return CaseOutcome(Verdict.FAIL, str(interpreter.fault), interpreter.steps)
        if not interpreter.halted:
            return CaseOutcome(
                Verdict.FAIL,
                f"Did not halt within {max_steps} steps",
                interpreter.steps,
            )
        io.check_done()
    except HarnessFailure as e:
        return CaseOutcome(Verdict.FAIL, str(e), interpreter.steps)
    except Exception as e:
        logger.debug(f"Run crashed: {e!r}")
        return CaseOutcome(Verdict.CRASH, f"{type(e).__name__}: {e}", interpreter.steps)

    return CaseOutcome(Verdict.PASS, steps=interpreter.steps)
