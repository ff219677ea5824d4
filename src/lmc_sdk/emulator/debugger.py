"""
Interactive LMC Debugger
========================

Command processor for stepping through an LMC program. All terminal I/O
goes through two callables (``echo`` for output, ``prompt`` for follow-up
questions such as a filename), so the debugger can be driven from the CLI
or scripted in tests.

Commands
--------
``<enter>``         step one instruction
``run``             run until the program halts
``var <point>``     show the box at a tag or address
``vars``            show every tagged box
``runto <point>``   step until the PC reaches a tag or address
``s``               skip the instruction at the PC
``br <point>``      set the PC to a tag or address
``dumpstr``         print the state as a text snapshot
``loadstr``         read a text snapshot (bad text leaves the state alone)
``save <name>``     keep a copy of the state for this session
``load <name>``     restore a saved copy
``export [file]``   write a binary snapshot
``import [file]``   read a binary snapshot
``help``            list commands
``quit`` / ``exit`` leave the debugger

Example:
    >>> dbg = Debugger(state, tags, io=ScriptedIO([]), echo=print, prompt=input)
    >>> dbg.execute("runto loop")
    >>> dbg.execute("var total")
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from lmc_sdk.cpu import wrap_address
from lmc_sdk.disassembler import LMCDisassembler
from lmc_sdk.emulator.cpu import Interpreter, InterpreterState
from lmc_sdk.emulator.io import ConsoleIO, IOBoundary
from lmc_sdk.emulator.snapshot import decode_text, encode_text, load_binary, save_binary
from lmc_sdk.errors import LMCError

logger = logging.getLogger(__name__)

_ADDRESS_RE = re.compile(r"[0-9]+")


DEBUGGER_HELP = """\
Debugger commands:
    <enter> - empty input steps forward one instruction
    run - run the program until it ends
    var <var> - prints the value of <var> which can be a label or address
    vars - prints the names and values of all labels
    runto <point> - runs the program until the PC reaches <point>, a label or address
    s - skips the current instruction, incrementing the PC without executing it
    br <target> - jumps (sets the PC) to a target label or address
    dumpstr - output the LMC state as a human readable string
    loadstr - load the LMC state from a human readable string
    save <name> - keep a copy of the state in memory until the debugger exits
    load <name> - restore the copy saved as <name>
    export [file] - save the LMC state in binary to a file
    import [file] - load the LMC state in binary from a file
    quit/exit - leave the debugger
    help - shows this message

Debugger view:
    First line shows the PC, the accumulator (CALC) and the negative flag
    Second line shows a disassembly of the instruction at the PC
"""


@dataclass
class DebugCommand:
    """
    A debugger command.

    Attributes:
        name: Command keyword
        handler: Called with the argument list
        min_args: Minimum number of arguments
        max_args: Maximum number of arguments
    """
    name: str
    handler: Callable[[List[str]], None]
    min_args: int = 0
    max_args: int = 0


class Debugger:
    """
    Debugger session over one machine state.

    Attributes:
        state: The machine being debugged
        tags: Tag table used for names in listings and command targets
        halted: True once the program has halted
        finished: True once the session should end (halt or quit)
    """

    def __init__(
        self,
        state: Optional[InterpreterState] = None,
        tags: Optional[Dict[str, int]] = None,
        io: Optional[IOBoundary] = None,
        echo: Callable[[str], None] = print,
        prompt: Callable[[str], str] = input,
    ):
        self.state = state if state is not None else InterpreterState.empty()
        self.tags = dict(tags or {})
        self.interpreter = Interpreter(io if io is not None else ConsoleIO())
        self.disassembler = LMCDisassembler(self.tags)
        self.echo = echo
        self.prompt = prompt

        self.halted = False
        self.finished = False
        self._saved: Dict[str, InterpreterState] = {}

        self._commands: Dict[str, DebugCommand] = {}
        for command in (
            DebugCommand("run", self._cmd_run),
            DebugCommand("var", self._cmd_var, 1, 1),
            DebugCommand("vars", self._cmd_vars),
            DebugCommand("runto", self._cmd_runto, 1, 1),
            DebugCommand("s", self._cmd_skip),
            DebugCommand("br", self._cmd_branch, 1, 1),
            DebugCommand("dumpstr", self._cmd_dumpstr),
            DebugCommand("loadstr", self._cmd_loadstr),
            DebugCommand("save", self._cmd_save, 1, 1),
            DebugCommand("load", self._cmd_load, 1, 1),
            DebugCommand("export", self._cmd_export, 0, 1),
            DebugCommand("import", self._cmd_import, 0, 1),
            DebugCommand("help", self._cmd_help),
            DebugCommand("quit", self._cmd_quit),
            DebugCommand("exit", self._cmd_quit),
        ):
            self._commands[command.name] = command

    # =========================================================================
    # Display
    # =========================================================================

    def status_line(self) -> str:
        """``PC 003  CALC 042  NEGATIVE``"""
        flag = "NEGATIVE" if self.state.negative else ""
        return f"PC {self.state.pc:03d}  CALC {self.state.accumulator:03d}  {flag}".rstrip()

    def describe(self, address: int) -> str:
        """Disassembly of the word at ``address``."""
        address = wrap_address(address)
        return str(self.disassembler.disassemble_one(self.state.memory[address], address))

    def show_status(self) -> None:
        self.echo("")
        self.echo(self.status_line())
        self.echo(f"  next: {self.describe(self.state.pc)}")

    def show_halted(self) -> None:
        self.echo("Execution halted")
        self.echo(self.status_line())
        self.echo(f"  on: {self.describe(self.state.pc - 1)}")

    # =========================================================================
    # Command Loop
    # =========================================================================

    def loop(self) -> None:
        """Read and execute commands until the program halts or the user quits."""
        while not self.finished:
            self.show_status()
            try:
                self.execute(self.prompt(">"))
            except EOFError:
                break

        if self.halted:
            self.show_halted()

    def execute(self, command: str) -> None:
        """
        Execute one debugger command line.

        Unknown commands and bad arguments are reported through ``echo``;
        they never raise.
        """
        words = command.split()
        if not words:
            self._step()
            return

        name, args = words[0], words[1:]
        entry = self._commands.get(name)
        if entry is None or not entry.min_args <= len(args) <= entry.max_args:
            self.echo(f"Unknown command: {command.strip()}")
            return

        entry.handler(args)

    def resolve(self, target: str) -> Optional[int]:
        """Resolve a decimal address or tag name, or None if neither."""
        if _ADDRESS_RE.fullmatch(target):
            return wrap_address(int(target))
        return self.tags.get(target)

    # =========================================================================
    # Execution Commands
    # =========================================================================

    def _step(self) -> bool:
        running = self.interpreter.step(self.state)
        if not running:
            self.halted = True
            self.finished = True
        return running

    def _cmd_run(self, args: List[str]) -> None:
        self.interpreter.run(self.state)
        self.halted = True
        self.finished = True

    def _cmd_runto(self, args: List[str]) -> None:
        target = self.resolve(args[0])
        if target is None:
            self.echo(f"Unknown breakpoint: {args[0]}. Enter address or label.")
            return

        self.echo(f"Stepping to {target:02d}")
        executed = 0
        while True:
            executed += 1
            if not self._step():
                break
            if self.state.pc == target:
                break
        self.echo(f"Stepped {executed} instructions")

    def _cmd_skip(self, args: List[str]) -> None:
        self.echo("Skip instruction")
        self.state.pc = wrap_address(self.state.pc + 1)

    def _cmd_branch(self, args: List[str]) -> None:
        target = self.resolve(args[0])
        if target is None:
            self.echo(f"Unknown target: {args[0]}. Enter address or label.")
            return
        self.state.pc = target

    # =========================================================================
    # Inspection Commands
    # =========================================================================

    def _show_box(self, address: int, tag: Optional[str]) -> None:
        name = f" ({tag})" if tag else ""
        self.echo(f"{address:03d}{name} = {self.state.memory[address]}")

    def _cmd_var(self, args: List[str]) -> None:
        address = self.resolve(args[0])
        if address is None:
            self.echo(f"No such tag {args[0]}")
            return
        tag = args[0] if args[0] in self.tags else self.disassembler.tag_at(address)
        self._show_box(address, tag)

    def _cmd_vars(self, args: List[str]) -> None:
        for tag, address in self.tags.items():
            self._show_box(address, tag)

    def _cmd_help(self, args: List[str]) -> None:
        self.echo(DEBUGGER_HELP)

    def _cmd_quit(self, args: List[str]) -> None:
        self.finished = True

    # =========================================================================
    # State Commands
    # =========================================================================

    def _cmd_dumpstr(self, args: List[str]) -> None:
        self.echo(encode_text(self.state))

    def _cmd_loadstr(self, args: List[str]) -> None:
        text = self.prompt("Load>")
        try:
            state = decode_text(text)
        except LMCError as e:
            self.echo(f"Invalid input: {e}")
            return
        self.state = state

    def _cmd_save(self, args: List[str]) -> None:
        self._saved[args[0]] = self.state.copy()
        self.echo(f"Stored state as {args[0]}.")

    def _cmd_load(self, args: List[str]) -> None:
        saved = self._saved.get(args[0])
        if saved is None:
            self.echo(f"No stored state found: {args[0]}")
            return
        self.state = saved.copy()
        self.echo(f"Loaded stored state {args[0]}")

    def _filename(self, args: List[str]) -> str:
        return args[0] if args else self.prompt("Filename> ").strip()

    def _cmd_export(self, args: List[str]) -> None:
        filename = self._filename(args)
        try:
            save_binary(filename, self.state)
        except OSError as e:
            self.echo(f"Failed to write: {e}")
            return
        logger.debug(f"Exported state to {filename}")

    def _cmd_import(self, args: List[str]) -> None:
        filename = self._filename(args)
        try:
            state = load_binary(filename)
        except FileNotFoundError:
            self.echo("File not found")
            return
        except (OSError, LMCError) as e:
            self.echo(f"Failed to read: {e}")
            return
        self.state = state
        logger.debug(f"Imported state from {filename}")
