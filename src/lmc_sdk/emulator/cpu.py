"""
LMC Interpreter
===============

Fetch-decode-execute loop for the Little Man Computer.

The machine is a small state record (`InterpreterState`: memory, program
counter, accumulator, negative flag) driven by an `Interpreter` that
owns no machine state of its own, only the outcome of the current run
(halted, fault, step count). All I/O goes through an `IOBoundary`.

One step:
    1. fetch ``memory[pc]``
    2. ``pc = (pc + 1) mod 100``
    3. digit = word // 100, operand = word % 100
    4. execute

Unknown words (400s, 900s other than 901/902) are a fault: the machine
halts, the failing box and word are logged through the boundary, and the
fault is kept on ``interpreter.fault``. Faults are never raised.

Example:
    >>> state = InterpreterState.from_image(assemble(source).image)
    >>> io = ScriptedIO([5])
    >>> steps = Interpreter(io).run(state)
    >>> io.outputs
    [5]
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Sequence

from lmc_sdk.cpu import (
    MEMORY_SIZE,
    decode_word,
    is_word,
    normalize_accumulator,
    wrap_address,
)
from lmc_sdk.emulator.io import IOBoundary
from lmc_sdk.emulator.memory import Memory
from lmc_sdk.errors import (
    AssembledTooLargeError,
    BoundaryContractError,
    UnknownInstructionFault,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Machine State
# =============================================================================

@dataclass
class InterpreterState:
    """
    Complete machine state.

    A plain value: `copy` yields a machine that shares no storage with the
    original, so many runs of one program can start from the same base
    state.

    Attributes:
        memory: The 100 memory cells
        pc: Program counter (0..99)
        accumulator: Accumulator (0..999)
        negative: Negative flag, set by an ADD/SUB that went below zero
    """
    memory: Memory = field(default_factory=Memory)
    pc: int = 0
    accumulator: int = 0
    negative: bool = False

    @classmethod
    def from_image(cls, image: Sequence[int]) -> "InterpreterState":
        """
        Create a fresh state with ``image`` loaded from address 0.

        Raises:
            AssembledTooLargeError: If image has more than 100 words
            ValueError: If a word is outside 0..999
        """
        if len(image) > MEMORY_SIZE:
            raise AssembledTooLargeError(len(image), MEMORY_SIZE)
        return cls(memory=Memory(image))

    @classmethod
    def empty(cls) -> "InterpreterState":
        """Create a state with all-zero memory."""
        return cls()

    def set_accumulator(self, value: int) -> None:
        """Store an arithmetic result, normalizing it and updating the flag."""
        self.accumulator, self.negative = normalize_accumulator(value)

    def reset(self) -> None:
        """Zero PC, accumulator and flag. Memory is left untouched."""
        self.pc = 0
        self.accumulator = 0
        self.negative = False

    def copy(self) -> "InterpreterState":
        """Return a fully independent copy."""
        return InterpreterState(
            memory=self.memory.copy(),
            pc=self.pc,
            accumulator=self.accumulator,
            negative=self.negative,
        )


# =============================================================================
# Interpreter
# =============================================================================

class Interpreter:
    """
    Executes LMC code against an `InterpreterState`.

    Attributes:
        io: The I/O boundary used by IN, OUT and fault reports
        halted: True once HLT or a fault has executed
        fault: The fault that stopped the last run, if any
        steps: Steps executed by the current run (the halting step included)
    """

    def __init__(self, io: IOBoundary):
        self.io = io
        self.halted = False
        self.fault: Optional[UnknownInstructionFault] = None
        self.steps = 0

        # Hundreds digit -> handler(state, operand). Digit 4 is unused.
        self._handlers: Dict[int, Callable[[InterpreterState, int], None]] = {
            0: self._op_hlt,
            1: self._op_add,
            2: self._op_sub,
            3: self._op_sto,
            5: self._op_lda,
            6: self._op_br,
            7: self._op_brz,
            8: self._op_brp,
            9: self._op_io,
        }

    def reset(self) -> None:
        """Clear the run outcome so the interpreter can be reused."""
        self.halted = False
        self.fault = None
        self.steps = 0

    # =========================================================================
    # Execution
    # =========================================================================

    def step(self, state: InterpreterState) -> bool:
        """
        Execute one instruction.

        Returns:
            True if the machine is still running afterwards

        Raises:
            BoundaryContractError: If the boundary returns an input outside 0..999
        """
        pc = state.pc
        word = state.memory[pc]
        state.pc = wrap_address(pc + 1)
        self.steps += 1

        digit, operand = decode_word(word)
        handler = self._handlers.get(digit)
        if handler is None or (digit == 9 and operand not in (1, 2)):
            self._fault(pc, word)
        else:
            handler(state, operand)

        return not self.halted

    def run(self, state: InterpreterState, max_steps: Optional[int] = None) -> int:
        """
        Run until the machine halts or ``max_steps`` steps have executed.

        Running out of budget is not an error: check ``halted`` (or compare
        the returned count with the budget) to tell the two apart.

        Args:
            state: Machine state, mutated in place
            max_steps: Optional step budget

        Returns:
            Number of steps executed, the halting step included
        """
        self.reset()

        while not self.halted:
            if max_steps is not None and self.steps >= max_steps:
                logger.debug(f"Step budget of {max_steps} exhausted at PC {state.pc:02d}")
                break
            self.step(state)

        return self.steps

    # =========================================================================
    # Faults
    # =========================================================================

    def _fault(self, pc: int, word: int) -> None:
        fault = UnknownInstructionFault(pc, word)
        self.fault = fault
        self.halted = True
        logger.debug(str(fault))
        self.io.log(str(fault))

    # =========================================================================
    # Instruction Handlers
    # =========================================================================

    def _op_hlt(self, state: InterpreterState, operand: int) -> None:
        self.halted = True

    def _op_add(self, state: InterpreterState, operand: int) -> None:
        state.set_accumulator(state.accumulator + state.memory[operand])

    def _op_sub(self, state: InterpreterState, operand: int) -> None:
        state.set_accumulator(state.accumulator - state.memory[operand])

    def _op_sto(self, state: InterpreterState, operand: int) -> None:
        state.memory[operand] = state.accumulator

    def _op_lda(self, state: InterpreterState, operand: int) -> None:
        state.accumulator = state.memory[operand]
        state.negative = False

    def _op_br(self, state: InterpreterState, operand: int) -> None:
        state.pc = operand

    def _op_brz(self, state: InterpreterState, operand: int) -> None:
        if state.accumulator == 0:
            state.pc = operand

    def _op_brp(self, state: InterpreterState, operand: int) -> None:
        if not state.negative:
            state.pc = operand

    def _op_io(self, state: InterpreterState, operand: int) -> None:
        if operand == 1:
            value = self.io.request_input()
            if not is_word(value):
                raise BoundaryContractError(f"input {value} out of range 0..999")
            state.accumulator = value
            state.negative = False
        else:
            self.io.emit_output(state.accumulator)


def run_image(
    image: Sequence[int],
    io: IOBoundary,
    max_steps: Optional[int] = None,
) -> tuple[InterpreterState, Interpreter]:
    """
    Convenience function: load an image into a fresh machine and run it.

    Returns:
        (final state, interpreter holding the run outcome)
    """
    state = InterpreterState.from_image(image)
    interpreter = Interpreter(io)
    interpreter.run(state, max_steps)
    return state, interpreter
