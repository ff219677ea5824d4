"""
LMC Test Kit
============

Automated grading of LMC programs by their I/O behaviour.

- **run_test**: play an exact I/O script (`expect_in` / `expect_out`)
- **Test files**: ``name;inputs;outputs;max`` records, see `scripts`
- **PolynomialTester**: brute-force check of a quadratic evaluator

Quick Start
-----------

    from lmc_sdk.assembler import assemble_file
    from lmc_sdk.emulator import InterpreterState
    from lmc_sdk.testkit import expect_in, expect_out, run_test

    state = InterpreterState.from_image(assemble_file("add.lmc").image)
    outcome = run_test(state, [expect_in(2), expect_in(3), expect_out(5)])
    print(outcome)          # PASS
"""

from .tester import (
    ExpectedAction,
    expect_in,
    expect_out,
    ValidatorIO,
    Verdict,
    CaseOutcome,
    run_test,
    grade_run,
)
from .scripts import (
    ScriptedCase,
    RecordIO,
    parse_record,
    parse_test_file,
    load_test_file,
    run_case,
    run_test_file,
)
from .polynomial import (
    PolynomialReport,
    PolynomialTester,
    polynomial_value,
    polynomial_script,
    run_polynomial_test,
)

__all__ = [
    # Scripted runs
    "ExpectedAction",
    "expect_in",
    "expect_out",
    "ValidatorIO",
    "Verdict",
    "CaseOutcome",
    "run_test",
    "grade_run",
    # Test files
    "ScriptedCase",
    "RecordIO",
    "parse_record",
    "parse_test_file",
    "load_test_file",
    "run_case",
    "run_test_file",
    # Polynomial
    "PolynomialReport",
    "PolynomialTester",
    "polynomial_value",
    "polynomial_script",
    "run_polynomial_test",
]
