"""
LMC SDK - Toolchain for the Little Man Computer
===============================================

This package provides a complete toolchain for the Little Man Computer, a
teaching model of a stored-program computer with a decimal instruction
set: 100 memory boxes holding values 0-999, one accumulator with a
negative flag, and ten instructions.

Main Components
---------------
- **assembler**: two-pass assembler and storage optimiser
    Converts assembly source to a 100-word memory image plus tag table

- **disassembler**: word -> mnemonic text, with tag names

- **emulator**: interpreter, state snapshots and debugger
    Runs images against a pluggable I/O boundary

- **testkit**: grading of programs by their I/O behaviour

Quick Start
-----------
Assemble and run a program:
    >>> from lmc_sdk import assemble, Interpreter, InterpreterState, ScriptedIO
    >>> result = assemble("first LDA num\\n OUT\\n HLT\\nnum DAT 42\\n")
    >>> io = ScriptedIO()
    >>> Interpreter(io).run(InterpreterState.from_image(result.image))
    3
    >>> io.outputs
    [42]

Or use the command-line tool:
    $ lmc val program.lmc
    $ lmc run program.lmc
    $ lmc dbg program.lmc

Version History
---------------
1.0.0 - Initial release with assembler, interpreter, debugger, optimiser
        and test kit
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from lmc_sdk.assembler import (
    Assembler,
    AssemblyResult,
    assemble,
    assemble_file,
    StorageOptimizer,
    optimize_source,
    optimize_file,
)
from lmc_sdk.disassembler import LMCDisassembler
from lmc_sdk.emulator import (
    Memory,
    Interpreter,
    InterpreterState,
    ConsoleIO,
    ScriptedIO,
    Debugger,
)
from lmc_sdk.errors import (
    LMCError,
    AssemblerError,
    ParseError,
    UnknownOpcodeError,
    DuplicateTagError,
    UndefinedTagError,
    MissingOperandError,
    DatRangeError,
    AssembledTooLargeError,
    MalformedStateError,
    UnknownInstructionFault,
    BoundaryContractError,
)

__all__ = [
    # Version
    "__version__",
    # Assembler
    "Assembler",
    "AssemblyResult",
    "assemble",
    "assemble_file",
    "StorageOptimizer",
    "optimize_source",
    "optimize_file",
    # Disassembler
    "LMCDisassembler",
    # Emulator
    "Memory",
    "Interpreter",
    "InterpreterState",
    "ConsoleIO",
    "ScriptedIO",
    "Debugger",
    # Errors
    "LMCError",
    "AssemblerError",
    "ParseError",
    "UnknownOpcodeError",
    "DuplicateTagError",
    "UndefinedTagError",
    "MissingOperandError",
    "DatRangeError",
    "AssembledTooLargeError",
    "MalformedStateError",
    "UnknownInstructionFault",
    "BoundaryContractError",
]
