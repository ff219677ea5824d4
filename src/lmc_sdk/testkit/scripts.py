"""
LMC Test Kit - Test Files
=========================

Scripted test files hold one test case per line::

    # name;inputs;expected outputs;max instructions
    add two;2,3;5;100
    echo;7;7;
    no input;;42;50

Fields are separated by ``;``. Inputs and expected outputs are
comma-separated lists of integers and may be empty. The instruction limit
may be left empty for no limit. Blank lines and lines starting with ``#``
are skipped.

Inputs are fed to the program in order whenever it asks for one, and
outputs are compared in order. A case passes when the program halts having
produced exactly the expected outputs and consumed every input.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from lmc_sdk.cpu import MAX_WORD, is_word
from lmc_sdk.emulator.cpu import InterpreterState
from lmc_sdk.errors import HarnessFailure, TestFileError
from lmc_sdk.testkit.tester import CaseOutcome, grade_run

logger = logging.getLogger(__name__)

FIELD_SEPARATOR = ";"
VALUE_SEPARATOR = ","
COMMENT_CHAR = "#"

_NUMBER_RE = re.compile(r"[0-9]+")


# =============================================================================
# Test Cases
# =============================================================================

@dataclass
class ScriptedCase:
    """
    One record of a test file.

    Attributes:
        name: Case name
        inputs: Values given to IN, in order
        outputs: Values expected from OUT, in order
        max_steps: Instruction limit, or None for none
        line: 1-indexed line of the record in its file
    """
    name: str
    inputs: List[int] = field(default_factory=list)
    outputs: List[int] = field(default_factory=list)
    max_steps: Optional[int] = None
    line: int = 0


class RecordIO:
    """
    Grading boundary for a `ScriptedCase`.

    Unlike `ValidatorIO` it does not fix how inputs and outputs interleave,
    only their order within each list.
    """

    def __init__(self, case: ScriptedCase):
        self._inputs = list(case.inputs)
        self._outputs = list(case.outputs)
        self._next_input = 0
        self._next_output = 0
        self.messages: List[str] = []

    def request_input(self) -> int:
        if self._next_input >= len(self._inputs):
            raise HarnessFailure("Unexpected input request.")
        value = self._inputs[self._next_input]
        self._next_input += 1
        return value

    def emit_output(self, value: int) -> None:
        if self._next_output >= len(self._outputs):
            raise HarnessFailure("Unexpected output")
        expected = self._outputs[self._next_output]
        self._next_output += 1
        if value != expected:
            raise HarnessFailure(f"Output {value} != expected {expected}")

    def log(self, message: str) -> None:
        self.messages.append(message)

    def check_done(self) -> None:
        missing = len(self._outputs) - self._next_output
        if missing:
            raise HarnessFailure(f"Unexpected end of program: {missing} output(s) missing")
        unused = len(self._inputs) - self._next_input
        if unused:
            raise HarnessFailure(f"Unexpected end of program: {unused} input(s) unused")


# =============================================================================
# Parsing
# =============================================================================

def _parse_values(text: str, what: str, line: int) -> List[int]:
    text = text.strip()
    if not text:
        return []

    values = []
    for item in text.split(VALUE_SEPARATOR):
        item = item.strip()
        if not _NUMBER_RE.fullmatch(item):
            raise TestFileError(f"{what} value {item!r} is not a decimal number", line)
        value = int(item)
        if not is_word(value):
            raise TestFileError(f"{what} value {value} out of range 0..{MAX_WORD}", line)
        values.append(value)
    return values


def parse_record(text: str, line: int = 0) -> ScriptedCase:
    """
    Parse one ``name;inputs;outputs;max`` record.

    Raises:
        TestFileError: If the record is malformed
    """
    fields = text.split(FIELD_SEPARATOR)
    if len(fields) != 4:
        raise TestFileError(
            f"expected 4 ';'-separated fields, found {len(fields)}", line
        )

    name, inputs, outputs, limit = (f.strip() for f in fields)
    if not name:
        raise TestFileError("test case has no name", line)

    max_steps = None
    if limit:
        if not _NUMBER_RE.fullmatch(limit):
            raise TestFileError(f"instruction limit {limit!r} is not a decimal number", line)
        max_steps = int(limit)
        if max_steps <= 0:
            raise TestFileError(f"instruction limit must be positive, got {max_steps}", line)

    return ScriptedCase(
        name=name,
        inputs=_parse_values(inputs, "input", line),
        outputs=_parse_values(outputs, "output", line),
        max_steps=max_steps,
        line=line,
    )


def parse_test_file(source: Union[str, Iterable[str]]) -> List[ScriptedCase]:
    """
    Parse test file text (or lines) into cases.

    Raises:
        TestFileError: If any record is malformed
    """
    lines = source.splitlines() if isinstance(source, str) else source

    cases = []
    for number, raw in enumerate(lines, start=1):
        text = raw.strip()
        if not text or text.startswith(COMMENT_CHAR):
            continue
        cases.append(parse_record(text, number))
    return cases


def load_test_file(path: Union[str, Path]) -> List[ScriptedCase]:
    """Read and parse a UTF-8 test file."""
    return parse_test_file(Path(path).read_text(encoding="utf-8"))


# =============================================================================
# Running
# =============================================================================

def run_case(state: InterpreterState, case: ScriptedCase) -> CaseOutcome:
    """Run one case against a copy of ``state``."""
    return grade_run(state, RecordIO(case), case.max_steps)


def run_test_file(
    state: InterpreterState,
    cases: Union[str, Path, Iterable[ScriptedCase]],
) -> List[Tuple[ScriptedCase, CaseOutcome]]:
    """
    Run every case of a test file.

    Args:
        state: Base machine state (never modified)
        cases: Path to a test file, or already parsed cases

    Returns:
        (case, outcome) for each case, in file order
    """
    if isinstance(cases, (str, Path)):
        cases = load_test_file(cases)

    results = []
    for case in cases:
        outcome = run_case(state, case)
        logger.info(f"{case.name}: {outcome}")
        results.append((case, outcome))

    passed = sum(1 for _, outcome in results if outcome.passed)
    logger.info(f"{passed}/{len(results)} test cases passed")
    return results
