"""
I/O Boundary
============

The interpreter never talks to a terminal directly. ``IN`` and ``OUT``
go through an object implementing `IOBoundary`, as do fault reports.
This keeps the core usable from the CLI, the debugger and the test
harness alike.

Implementations:
    - `ConsoleIO`: interactive terminal via click
    - `ScriptedIO`: fixed input list, records outputs (tests, batch runs)
"""

from typing import Iterable, List, Protocol

import click

from lmc_sdk.cpu import MAX_WORD, is_word
from lmc_sdk.errors import BoundaryContractError


class IOBoundary(Protocol):
    """
    Protocol defining what the interpreter needs from the outside world.
    """
    def request_input(self) -> int:
        """Return the next input value (must be 0..999)."""
        ...

    def emit_output(self, value: int) -> None:
        """Receive a value written by OUT."""
        ...

    def log(self, message: str) -> None:
        """Receive a diagnostic line (faults and similar)."""
        ...


class ConsoleIO:
    """
    Terminal I/O using click.

    Input is re-requested until the user types an integer in 0..999.
    """

    def __init__(self, prompt: str = "Input> "):
        self.prompt = prompt

    def request_input(self) -> int:
        # click appends ": " unless the suffix is overridden
        return click.prompt(
            self.prompt.rstrip(),
            type=click.IntRange(0, MAX_WORD),
            prompt_suffix=" ",
        )

    def emit_output(self, value: int) -> None:
        click.echo(f"Output: {value}")

    def log(self, message: str) -> None:
        click.echo(message, err=True)


class ScriptedIO:
    """
    In-memory I/O with a fixed list of inputs.

    Attributes:
        outputs: Values written by OUT, in order
        messages: Log lines received
    """

    def __init__(self, inputs: Iterable[int] = ()):
        self._inputs = list(inputs)
        self._cursor = 0
        self.outputs: List[int] = []
        self.messages: List[str] = []

    @property
    def remaining(self) -> int:
        """Number of inputs not yet consumed."""
        return len(self._inputs) - self._cursor

    def request_input(self) -> int:
        if self._cursor >= len(self._inputs):
            raise BoundaryContractError("no scripted input left")

        value = self._inputs[self._cursor]
        self._cursor += 1
        if not is_word(value):
            raise BoundaryContractError(f"scripted input {value} out of range 0..{MAX_WORD}")
        return value

    def emit_output(self, value: int) -> None:
        self.outputs.append(value)

    def log(self, message: str) -> None:
        self.messages.append(message)
