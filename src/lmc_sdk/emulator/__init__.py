"""
LMC Emulator
============

Interpreter, machine state and debugging tools for the Little Man Computer.

- **Memory**: 100 bounds-checked cells, every address taken mod 100
- **InterpreterState / Interpreter**: fetch-execute loop with a step budget
- **IOBoundary**: the only way the interpreter reaches the outside world
- **Snapshots**: 205-byte binary and one-line text state formats
- **Debugger**: step/run/inspect command processor

Quick Start
-----------

    >>> from lmc_sdk.assembler import assemble
    >>> from lmc_sdk.emulator import Interpreter, InterpreterState, ScriptedIO
    >>> result = assemble("first LDA num\\n OUT\\n HLT\\nnum DAT 42\\n")
    >>> state = InterpreterState.from_image(result.image)
    >>> io = ScriptedIO()
    >>> Interpreter(io).run(state)
    3
    >>> io.outputs
    [42]
"""

from .memory import Memory
from .cpu import Interpreter, InterpreterState, run_image
from .io import IOBoundary, ConsoleIO, ScriptedIO
from .snapshot import (
    SNAPSHOT_SIZE,
    encode_binary,
    decode_binary,
    save_binary,
    load_binary,
    encode_text,
    decode_text,
)
from .debugger import Debugger, DEBUGGER_HELP

__all__ = [
    # Machine
    "Memory",
    "Interpreter",
    "InterpreterState",
    "run_image",
    # I/O
    "IOBoundary",
    "ConsoleIO",
    "ScriptedIO",
    # Snapshots
    "SNAPSHOT_SIZE",
    "encode_binary",
    "decode_binary",
    "save_binary",
    "load_binary",
    "encode_text",
    "decode_text",
    # Debugging
    "Debugger",
    "DEBUGGER_HELP",
]
