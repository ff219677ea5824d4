"""
LMC Assembly Language Parser
============================

This module splits LMC assembly source into `SourceLine` records that the
assembler's two passes work from. LMC source is strictly one statement per
line, so there is no token stream: each line is parsed on its own.

Line Grammar
------------
::

    [tag] <ws> MNEMONIC [<ws> operand]   [# comment]

- ``#`` starts a comment that runs to the end of the line.
- Blank and comment-only lines are skipped.
- A line that begins with whitespace has no tag.
- A line that begins in column 1 carries a tag when it has three fields,
  or two fields of which only the second is a mnemonic (``loop HLT``).
  Otherwise its first field is the mnemonic (``LDA num``, ``HLT``).
- Mnemonics are matched case-insensitively; tags are case-sensitive.

Examples:
    ```
    first   LDA     num     # tag, mnemonic, operand
            OUT             # mnemonic only
    num     DAT     042     # data word
    ```
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Optional, Union

from lmc_sdk.cpu import Opcode, is_valid_mnemonic
from lmc_sdk.errors import ParseError, SourceLocation, UnknownOpcodeError


COMMENT_CHAR = "#"

_FIELD_RE = re.compile(r"\S+")


# =============================================================================
# Statement Data Class
# =============================================================================

@dataclass
class SourceLine:
    """
    One parsed statement.

    Attributes:
        location: File, 1-indexed line number, and column of the mnemonic
        text: The full original line (comment included, newline stripped)
        tag: Label bound to this line's address, or None
        opcode: The instruction mnemonic
        operand: Raw operand text, or None
        operand_column: 1-indexed column of the operand (0 if absent)
    """
    location: SourceLocation
    text: str
    tag: Optional[str]
    opcode: Opcode
    operand: Optional[str] = None
    operand_column: int = 0

    @property
    def line(self) -> int:
        """1-indexed source line number."""
        return self.location.line

    @property
    def mnemonic(self) -> str:
        """Upper-case mnemonic text."""
        return self.opcode.value

    @property
    def operand_location(self) -> SourceLocation:
        """Location pointing at the operand (or the mnemonic if none)."""
        if self.operand is None:
            return self.location
        return SourceLocation(self.location.filename, self.location.line, self.operand_column)


# =============================================================================
# Line Parser
# =============================================================================

def strip_comment(text: str) -> str:
    """Remove a trailing ``#`` comment from a line."""
    index = text.find(COMMENT_CHAR)
    if index != -1:
        return text[:index]
    return text


def parse_line(text: str, line: int, filename: str = "<input>") -> Optional[SourceLine]:
    """
    Parse a single source line.

    Args:
        text: Line text without its newline
        line: 1-indexed line number for error messages
        filename: Source filename for error messages

    Returns:
        SourceLine, or None for blank and comment-only lines

    Raises:
        ParseError: If the line has the wrong number of fields
        UnknownOpcodeError: If the mnemonic is not recognized
    """
    code = strip_comment(text)
    if not code.strip():
        return None

    # (text, 1-indexed column) for each whitespace-separated field
    fields = [(m.group(), m.start() + 1) for m in _FIELD_RE.finditer(code)]
    indented = code[0].isspace()

    if len(fields) > 3:
        raise ParseError(line, text, f"too many fields ({len(fields)})", filename)

    tag_field = None
    if indented:
        if len(fields) == 3:
            raise ParseError(line, text, "indented line cannot carry a tag", filename)
        mnemonic_field, operand_field = fields[0], (fields[1] if len(fields) == 2 else None)
    elif len(fields) == 3:
        tag_field, mnemonic_field, operand_field = fields
    elif (
        len(fields) == 2
        and not is_valid_mnemonic(fields[0][0])
        and is_valid_mnemonic(fields[1][0])
    ):
        # A leading mnemonic is never a tag: `LDA out` loads `out`
        tag_field, mnemonic_field, operand_field = fields[0], fields[1], None
    else:
        mnemonic_field, operand_field = fields[0], (fields[1] if len(fields) == 2 else None)

    mnemonic, column = mnemonic_field
    location = SourceLocation(filename, line, column)

    if not is_valid_mnemonic(mnemonic):
        raise UnknownOpcodeError(mnemonic, location=location, source_line=text)

    return SourceLine(
        location=location,
        text=text,
        tag=tag_field[0] if tag_field else None,
        opcode=Opcode(mnemonic.upper()),
        operand=operand_field[0] if operand_field else None,
        operand_column=operand_field[1] if operand_field else 0,
    )


def iter_source_lines(
    source: Union[str, Iterable[str]],
    filename: str = "<input>",
) -> Iterator[SourceLine]:
    """
    Lazily parse source into statements, skipping blank lines.

    Parsing is lazy so the assembler can stop at the memory limit without
    ever looking at the lines it drops.

    Args:
        source: Source text, or an iterable of lines
        filename: Source filename for error messages
    """
    lines = source.splitlines() if isinstance(source, str) else source
    for number, raw in enumerate(lines, start=1):
        parsed = parse_line(raw.rstrip("\r\n"), number, filename)
        if parsed is not None:
            yield parsed


def parse_source(
    source: Union[str, Iterable[str]],
    filename: str = "<input>",
) -> list[SourceLine]:
    """
    Convenience function to parse a whole source.

    Returns:
        List of parsed statements (no memory limit applied)
    """
    return list(iter_source_lines(source, filename))


def read_source(path: Union[str, Path]) -> list[str]:
    """Read a UTF-8 source file as a list of lines."""
    return Path(path).read_text(encoding="utf-8").splitlines()
