"""
lmc - Little Man Computer Toolchain
===================================

Command-line front end for the LMC assembler, interpreter, debugger,
optimiser and test kit.

Usage Examples
--------------
Validate a program and show memory statistics:
    $ lmc val program.lmc

Assemble and run, reading input from the terminal:
    $ lmc run program.lmc

Debug a program (or an empty machine):
    $ lmc dbg program.lmc
    $ lmc dbg

Remove trailing zero storage:
    $ lmc optimise program.lmc                 # writes program_packed.lmc
    $ lmc optimise program.lmc small.lmc --no-notice

Show the assembled listing:
    $ lmc disasm program.lmc

Grade a program:
    $ lmc test list
    $ lmc test polynomial quad.lmc
    $ lmc testfile program.lmc cases.txt

Exit Codes
----------
0 - Success (and, for test commands, every case passed)
1 - Assembly, state or test-file error, or a failing test
2 - Invalid arguments or missing files
3 - Internal error
"""

import logging
import sys
from pathlib import Path
from typing import Callable, Dict, Optional

import click

from lmc_sdk import __version__
from lmc_sdk.assembler import Assembler, AssemblyResult, optimize_file
from lmc_sdk.cli.errors import ExitCode, handle_cli_exception
from lmc_sdk.config import LMCConfig
from lmc_sdk.disassembler import LMCDisassembler
from lmc_sdk.emulator import ConsoleIO, Debugger, Interpreter, InterpreterState
from lmc_sdk.testkit import PolynomialReport, PolynomialTester, run_test_file

logger = logging.getLogger(__name__)


# =============================================================================
# CLI Context and Utilities
# =============================================================================

class Context:
    """
    Shared context for CLI commands.

    Stores verbosity and the configuration loaded from the environment.
    """

    def __init__(self) -> None:
        self.verbose: bool = False
        self.config: LMCConfig = LMCConfig.from_env()

    def setup_logging(self) -> None:
        """Configure logging based on verbosity."""
        level = logging.DEBUG if self.verbose else logging.INFO
        logging.basicConfig(
            level=level,
            format="%(levelname)s: %(message)s" if self.verbose else "%(message)s",
        )


pass_context = click.make_pass_decorator(Context, ensure=True)


def assemble_program(path: str) -> AssemblyResult:
    """Assemble a source file for a command."""
    return Assembler().assemble_file(path)


def load_program(path: str) -> tuple[InterpreterState, AssemblyResult]:
    """Assemble a source file and load it into a fresh machine."""
    result = assemble_program(path)
    return InterpreterState.from_image(result.image), result


# =============================================================================
# Main CLI Group
# =============================================================================

@click.group()
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Enable verbose output",
)
@click.version_option(version=__version__, prog_name="lmc")
@pass_context
def main(ctx: Context, verbose: bool) -> None:
    """
    Little Man Computer toolchain.

    Assemble, run, debug, optimise and test LMC programs.
    """
    ctx.verbose = verbose
    ctx.setup_logging()


# =============================================================================
# Validate Command
# =============================================================================

@main.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False))
@pass_context
def val(ctx: Context, source: str) -> None:
    """
    Assemble SOURCE and report memory statistics.

    Example:
        lmc val program.lmc
    """
    try:
        result = assemble_program(source)
    except Exception as e:
        handle_cli_exception(e, verbose=ctx.verbose, stage="Assembly")

    click.echo("Assembled successfully.")
    click.echo(
        f"{result.size} boxes, {len(result.tags)} tags, "
        f"{result.nonzero_count} non-zero cells"
    )


# =============================================================================
# Run Command
# =============================================================================

@main.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--max-steps",
    type=click.IntRange(min=1),
    default=None,
    help="Stop after this many steps (default: run until halt)",
)
@pass_context
def run(ctx: Context, source: str, max_steps: Optional[int]) -> None:
    """
    Assemble SOURCE and run it on the terminal.

    IN prompts for a number 0-999; OUT prints it.

    Example:
        lmc run program.lmc
        lmc run program.lmc --max-steps 1000
    """
    try:
        state, _ = load_program(source)
    except Exception as e:
        handle_cli_exception(e, verbose=ctx.verbose, stage="Assembly")

    budget = max_steps if max_steps is not None else ctx.config.max_steps
    interpreter = Interpreter(ConsoleIO(ctx.config.input_prompt))
    steps = interpreter.run(state, budget)

    if interpreter.halted:
        click.echo(f"Finished in {steps} steps")
    else:
        click.echo(f"Stopped after {steps} steps (step limit reached)")


# =============================================================================
# Debug Command
# =============================================================================

@main.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False), required=False)
@pass_context
def dbg(ctx: Context, source: Optional[str]) -> None:
    """
    Debug SOURCE interactively (an empty machine if omitted).

    Type 'help' at the prompt for the command list.

    Example:
        lmc dbg program.lmc
    """
    state = None
    tags: Dict[str, int] = {}
    if source is not None:
        try:
            state, result = load_program(source)
        except Exception as e:
            handle_cli_exception(e, verbose=ctx.verbose, stage="Assembly")
        tags = result.tags

    def prompt(text: str) -> str:
        # click turns end of input into Abort; the debugger expects EOFError
        try:
            return click.prompt(text, default="", show_default=False, prompt_suffix="")
        except click.Abort:
            raise EOFError from None

    debugger = Debugger(
        state,
        tags,
        io=ConsoleIO(ctx.config.input_prompt),
        echo=click.echo,
        prompt=prompt,
    )
    debugger.loop()


# =============================================================================
# Optimise Command
# =============================================================================

@main.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False))
@click.argument("output", type=click.Path(dir_okay=False), required=False)
@click.option(
    "--notice/--no-notice",
    default=None,
    help="Prefix the output with an explanatory comment block",
)
@pass_context
def optimise(ctx: Context, source: str, output: Optional[str], notice: Optional[bool]) -> None:
    """
    Pack SOURCE by not defining trailing zero storage.

    OUTPUT defaults to SOURCE with '_packed' added to its name. The packed
    program assembles to exactly the same memory image.

    Example:
        lmc optimise program.lmc
        lmc optimise program.lmc small.lmc --no-notice
    """
    if notice is None:
        notice = ctx.config.optimiser_notice

    try:
        result, written = optimize_file(
            source,
            output,
            notice=notice,
            suffix=ctx.config.optimised_suffix,
        )
    except Exception as e:
        handle_cli_exception(e, verbose=ctx.verbose, stage="Assembly")

    click.echo(f"Optimised out {result.saved_cells} boxes")
    click.echo(f"Written to {written}")


# =============================================================================
# Disassemble Command
# =============================================================================

@main.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--all", "-a", "show_all",
    is_flag=True,
    help="List all 100 boxes, not just the program",
)
@pass_context
def disasm(ctx: Context, source: str, show_all: bool) -> None:
    """
    Assemble SOURCE and print the disassembled listing.

    Example:
        lmc disasm program.lmc
    """
    try:
        result = assemble_program(source)
    except Exception as e:
        handle_cli_exception(e, verbose=ctx.verbose, stage="Assembly")

    count = None if show_all else result.size
    listing = LMCDisassembler(result.tags).disassemble_to_text(result.image, count=count)
    if listing:
        click.echo(listing)


# =============================================================================
# Test Commands
# =============================================================================

def _run_polynomial(ctx: Context, state: InterpreterState) -> PolynomialReport:
    tester = PolynomialTester(
        coefficients=range(ctx.config.polynomial_coefficients),
        xs=range(ctx.config.polynomial_x),
        workers=ctx.config.polynomial_workers,
        max_steps=ctx.config.test_max_steps,
    )
    return tester.run(state)


# Builtin test name -> (description, runner)
BUILTIN_TESTS: Dict[str, tuple[str, Callable[[Context, InterpreterState], PolynomialReport]]] = {
    "polynomial": (
        "reads a, b, c, x and outputs a + b*x + c*x*x clamped to 0-999",
        _run_polynomial,
    ),
}


@main.command()
@click.argument("name")
@click.argument("source", type=click.Path(exists=True, dir_okay=False), required=False)
@click.option("--coefficients", type=click.IntRange(1, 1000), default=None,
              help="a, b and c range over 0..N-1")
@click.option("--xs", type=click.IntRange(1, 1000), default=None,
              help="x ranges over 0..N-1")
@click.option("--workers", type=click.IntRange(min=1), default=None,
              help="Number of worker threads")
@pass_context
def test(
    ctx: Context,
    name: str,
    source: Optional[str],
    coefficients: Optional[int],
    xs: Optional[int],
    workers: Optional[int],
) -> None:
    """
    Run builtin test NAME on SOURCE, or 'list' the builtin tests.

    Example:
        lmc test list
        lmc test polynomial quad.lmc --coefficients 20 --xs 5
    """
    if name == "list":
        click.echo("Builtin tests:")
        for test_name, (description, _) in BUILTIN_TESTS.items():
            click.echo(f"  {test_name} - {description}")
        return

    entry = BUILTIN_TESTS.get(name.lower())
    if entry is None:
        handle_cli_exception(
            click.BadParameter(f"No such test {name}. Use 'lmc test list'."),
            verbose=ctx.verbose,
        )
    if source is None:
        handle_cli_exception(
            click.BadParameter(f"test {name} requires a SOURCE file"),
            verbose=ctx.verbose,
        )

    if coefficients is not None:
        ctx.config.polynomial_coefficients = coefficients
    if xs is not None:
        ctx.config.polynomial_x = xs
    if workers is not None:
        ctx.config.polynomial_workers = workers

    try:
        state, _ = load_program(source)
    except Exception as e:
        handle_cli_exception(e, verbose=ctx.verbose, stage="Assembly")

    _, runner = entry
    report = runner(ctx, state)

    click.echo(str(report))
    for (a, b, c, x), outcome in report.failures:
        click.echo(f"  a={a} b={b} c={c} x={x}: {outcome}")

    if not report.ok:
        sys.exit(ExitCode.FAILURE)


@main.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False))
@click.argument("tests", type=click.Path(exists=True, dir_okay=False))
@pass_context
def testfile(ctx: Context, source: str, tests: str) -> None:
    """
    Run the scripted test file TESTS on SOURCE.

    Each line of TESTS is 'name;inputs;outputs;max-instructions', for
    example 'add;2,3;5;100'.

    Example:
        lmc testfile program.lmc cases.txt
    """
    try:
        state, _ = load_program(source)
        results = run_test_file(state, Path(tests))
    except Exception as e:
        handle_cli_exception(e, verbose=ctx.verbose)

    passed = 0
    for case, outcome in results:
        click.echo(f"{case.name}: {outcome} ({outcome.steps} steps)")
        if outcome.passed:
            passed += 1

    click.echo(f"{passed}/{len(results)} passed")
    if passed != len(results):
        sys.exit(ExitCode.FAILURE)


if __name__ == "__main__":
    main()
