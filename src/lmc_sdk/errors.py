"""
LMC SDK Error Hierarchy
=======================

This module defines the exception hierarchy for the entire LMC SDK.
All exceptions inherit from LMCError, allowing callers to catch all
SDK-related errors with a single except clause if desired.

Exception Hierarchy
-------------------
LMCError (base)
├── AssemblerError (assembler-related)
│   ├── ParseError - line does not fit the source grammar
│   ├── UnknownOpcodeError - mnemonic not in the instruction set
│   ├── DuplicateTagError - tag defined on more than one line
│   ├── UndefinedTagError - operand names a tag that was never defined
│   ├── MissingOperandError - instruction needs an operand but has none
│   └── DatRangeError - DAT literal outside 0..999
├── AssembledTooLargeError - raw word array longer than memory
├── StateError (machine state)
│   └── MalformedStateError - snapshot text/bytes do not parse
├── UnknownInstructionFault - runtime fault (recorded, never raised by the core)
├── BoundaryContractError - I/O boundary broke its contract
└── TestKitError (scripted testing)
    ├── HarnessFailure - program did not follow the expected I/O script
    └── TestFileError - malformed scripted test file

Assembly errors abort the whole assembly. Runtime faults halt the machine
and are reported through the I/O boundary's log channel instead of being
raised, so "halted" is the only terminal outcome of a run.

Error messages follow this format:
    filename:line:column: error: description
        source_line_text
        ^
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class LMCError(Exception):
    """
    Base exception for all LMC SDK errors.

        try:
            assemble_file("program.lmc")
        except LMCError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed, 0 when unknown)
    """
    filename: str
    line: int
    column: int = 0

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(LMCError):
    """
    Base exception for all assembler-related errors.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The actual source text at the error location (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    @property
    def line(self) -> Optional[int]:
        """Source line number of the error, if known."""
        return self.location.line if self.location else None

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            prog.lmc:4:9: error: undefined tag 'nmu'
                    LDA     nmu
                            ^
            hint: did you mean 'num'?
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class ParseError(AssemblerError):
    """
    A source line does not fit `[tag] mnemonic [operand]`.

    Raised for lines carrying too many tokens, or an operand on a line
    that is indented (and so has no tag) but still has three fields.
    """

    def __init__(
        self,
        line: int,
        text: str,
        reason: str = "cannot parse line",
        filename: str = "<input>",
    ):
        self.text = text
        super().__init__(
            reason,
            location=SourceLocation(filename, line),
            hint="expected '[tag] MNEMONIC [operand]'",
            source_line=text,
        )


class UnknownOpcodeError(AssemblerError):
    """Mnemonic is not part of the LMC instruction set."""

    def __init__(
        self,
        mnemonic: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.mnemonic = mnemonic
        super().__init__(
            f"unknown opcode '{mnemonic}'",
            location=location,
            hint="valid opcodes: HLT, DAT, ADD, SUB, STO, LDA, BR, BRZ, BRP, IN, OUT",
            source_line=source_line,
        )


class DuplicateTagError(AssemblerError):
    """
    Tag defined on more than one line.

    Raised on the second definition; the first definition's location is
    included in the hint when known.
    """

    def __init__(
        self,
        tag: str,
        location: Optional[SourceLocation] = None,
        original_location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.tag = tag
        self.original_location = original_location

        hint = None
        if original_location:
            hint = f"'{tag}' was first defined at {original_location}"

        super().__init__(
            f"duplicate tag '{tag}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class UndefinedTagError(AssemblerError):
    """
    Operand names a tag with no definition.

    The assembler suggests similarly-named tags to help catch typos.
    """

    def __init__(
        self,
        tag: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        similar_tags: Optional[list[str]] = None,
    ):
        self.tag = tag
        self.similar_tags = similar_tags or []

        hint = None
        if self.similar_tags:
            suggestions = ", ".join(f"'{s}'" for s in self.similar_tags[:3])
            hint = f"did you mean {suggestions}?"

        super().__init__(
            f"undefined tag '{tag}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class MissingOperandError(AssemblerError):
    """Instruction requires an operand but none was given."""

    def __init__(
        self,
        mnemonic: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.mnemonic = mnemonic
        super().__init__(
            f"'{mnemonic}' requires an operand but none is provided",
            location=location,
            source_line=source_line,
        )


class DatRangeError(AssemblerError):
    """DAT literal is not a decimal number in 0..999."""

    def __init__(
        self,
        literal: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.literal = literal
        super().__init__(
            f"DAT value '{literal}' is out of range",
            location=location,
            hint="DAT takes a decimal literal between 0 and 999",
            source_line=source_line,
        )


class AssembledTooLargeError(LMCError):
    """
    A raw word array does not fit in memory.

    Distinct from over-length source text, which is truncated with a
    warning: this is raised when a caller hands over more than 100 words.
    """

    def __init__(self, size: int, capacity: int = 100):
        self.size = size
        self.capacity = capacity
        super().__init__(
            f"assembled code is too long for the machine ({size} > {capacity} words)"
        )


# =============================================================================
# Machine State Exceptions
# =============================================================================

class StateError(LMCError):
    """Base exception for machine state handling errors."""
    pass


class MalformedStateError(StateError):
    """
    Snapshot data does not parse.

    Attributes:
        token: The offending token (or byte description)
        position: Character/byte offset where parsing failed, if known
    """

    def __init__(self, token: str, reason: str, position: Optional[int] = None):
        self.token = token
        self.reason = reason
        self.position = position
        where = f" at offset {position}" if position is not None else ""
        super().__init__(f"malformed state{where}: {reason} (got {token!r})")


# =============================================================================
# Runtime Exceptions
# =============================================================================

class UnknownInstructionFault(LMCError):
    """
    The machine fetched a word that does not decode to an instruction.

    The interpreter records this fault and halts instead of raising it.

    Attributes:
        pc: Address the word was fetched from
        word: The raw word
    """

    def __init__(self, pc: int, word: int):
        self.pc = pc
        self.word = word
        super().__init__(f"Unknown instruction {word:03d} in box {pc:02d}")


class BoundaryContractError(LMCError):
    """An I/O boundary returned or was asked for something it cannot honour."""
    pass


# =============================================================================
# Test Kit Exceptions
# =============================================================================

class TestKitError(LMCError):
    """Base exception for scripted testing errors."""
    __test__ = False


class HarnessFailure(TestKitError):
    """
    Program under test broke its I/O script.

    Reasons: unexpected input request, unexpected output, wrong output
    value, or the program ended before the script did.
    """
    pass


class TestFileError(TestKitError):
    """
    Scripted test file record is malformed.

    Attributes:
        line: 1-indexed line number of the bad record
    """

    def __init__(self, message: str, line: Optional[int] = None):
        self.line = line
        prefix = f"line {line}: " if line is not None else ""
        super().__init__(f"{prefix}{message}")
