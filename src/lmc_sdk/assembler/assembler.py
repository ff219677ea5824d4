"""
LMC Assembler - Main Interface
==============================

This module provides the Assembler class, which turns LMC assembly source
into a 100-word memory image plus the tag table (label -> address) that the
disassembler, optimiser and debugger use to show symbolic names.

Example Usage
-------------
>>> from lmc_sdk.assembler import Assembler
>>>
>>> asm = Assembler()
>>> result = asm.assemble('''
... first   LDA     num
...         OUT
...         HLT
... num     DAT     042
... ''')
>>> result.image[:4]
[503, 902, 0, 42]
>>> result.tags
{'first': 0, 'num': 3}

Assembly Process
----------------
1. **Pass 1**: every non-blank line gets the next address from 0 and its
   tag (if any) is registered. After 100 lines memory is full: the rest of
   the source is dropped with a warning. This is not an error.
2. **Pass 2**: each line is encoded. Addressed instructions resolve their
   operand tag; ``DAT`` emits its literal; ``IN``/``OUT`` are fixed words.

Any error aborts the whole assembly; there is no partial result.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional, Union

from lmc_sdk.assembler.parser import SourceLine, parse_line, read_source, strip_comment
from lmc_sdk.cpu import (
    MAX_WORD,
    MEMORY_SIZE,
    NO_OPERAND_OPCODES,
    encode_instruction,
    get_base,
    is_word,
)
from lmc_sdk.errors import (
    AssembledTooLargeError,
    DatRangeError,
    DuplicateTagError,
    MissingOperandError,
    UndefinedTagError,
)

logger = logging.getLogger(__name__)

# Label -> address, in source definition order
TagTable = dict[str, int]

_LITERAL_RE = re.compile(r"[0-9]+")


# =============================================================================
# Assembly Result
# =============================================================================

@dataclass
class AssemblyResult:
    """
    Output of a successful assembly.

    Attributes:
        image: Exactly 100 words, zero-padded past the last line
        tags: Tag table in source order
        lines: Assembled statements; a statement's index is its address
        warnings: Non-fatal messages (e.g. truncation)
        truncated: True if source lines past the 100th were dropped
        filename: Source filename used in messages
    """
    image: list[int]
    tags: TagTable
    lines: list[SourceLine]
    warnings: list[str] = field(default_factory=list)
    truncated: bool = False
    filename: str = "<input>"

    @property
    def size(self) -> int:
        """Number of memory cells the program defines."""
        return len(self.lines)

    @property
    def nonzero_count(self) -> int:
        """Number of cells holding a non-zero word."""
        return sum(1 for word in self.image if word != 0)

    @property
    def last_nonzero_address(self) -> int:
        """Highest address holding a non-zero word, or -1 if none."""
        for address in range(len(self.image) - 1, -1, -1):
            if self.image[address] != 0:
                return address
        return -1

    def address_of(self, line: int) -> Optional[int]:
        """Address assigned to a 1-indexed source line, or None if not assembled."""
        for address, statement in enumerate(self.lines):
            if statement.line == line:
                return address
        return None


# =============================================================================
# Assembler
# =============================================================================

class Assembler:
    """
    Two-pass LMC assembler.

    The assembler keeps the result of the last run so callers can query the
    image and tag table after assembling, in the same way for string and
    file input.

    Attributes:
        verbose: If True, log progress at INFO instead of DEBUG
    """

    def __init__(self, verbose: bool = False):
        self._verbose = verbose
        self._result: Optional[AssemblyResult] = None

    def _progress(self, message: str) -> None:
        logger.log(logging.INFO if self._verbose else logging.DEBUG, message)

    # =========================================================================
    # Assembly Methods
    # =========================================================================

    def assemble(
        self,
        source: Union[str, Iterable[str]],
        filename: str = "<input>",
    ) -> AssemblyResult:
        """
        Assemble source text or an iterable of lines.

        Args:
            source: Assembly source
            filename: Virtual filename for error messages

        Returns:
            AssemblyResult with the image and tag table

        Raises:
            AssemblerError: If assembly fails
        """
        lines = source.splitlines() if isinstance(source, str) else source

        statements, tags, truncated_at = self._first_pass(lines, filename)
        self._progress(f"Pass 1: {len(statements)} boxes, {len(tags)} tags")

        image = [0] * MEMORY_SIZE
        for address, statement in enumerate(statements):
            image[address] = self.encode_line(statement, tags)
        self._progress(f"Pass 2: {sum(1 for w in image if w)} non-zero cells")

        result = AssemblyResult(
            image=image,
            tags=tags,
            lines=statements,
            filename=filename,
        )

        if truncated_at is not None:
            message = (
                f"{filename}: program truncated at line {truncated_at}, "
                f"over {MEMORY_SIZE} boxes"
            )
            logger.warning(message)
            result.warnings.append(message)
            result.truncated = True

        self._result = result
        return result

    def assemble_file(self, filepath: Union[str, Path]) -> AssemblyResult:
        """
        Assemble a UTF-8 source file.

        Raises:
            AssemblerError: If assembly fails
            FileNotFoundError: If source file not found
        """
        filepath = Path(filepath)
        self._progress(f"Assembling {filepath}...")
        return self.assemble(read_source(filepath), str(filepath))

    def load_words(self, words: Iterable[int]) -> list[int]:
        """
        Build a 100-word image from raw machine words.

        Raises:
            AssembledTooLargeError: If more than 100 words are given
            ValueError: If a word is outside 0..999
        """
        words = list(words)
        if len(words) > MEMORY_SIZE:
            raise AssembledTooLargeError(len(words), MEMORY_SIZE)

        for address, word in enumerate(words):
            if not is_word(word):
                raise ValueError(f"word {word} at box {address:02d} out of range 0..{MAX_WORD}")

        return words + [0] * (MEMORY_SIZE - len(words))

    # =========================================================================
    # Pass 1: Addresses and Tags
    # =========================================================================

    def _first_pass(
        self,
        lines: Iterable[str],
        filename: str,
    ) -> tuple[list[SourceLine], TagTable, Optional[int]]:
        """
        Assign addresses and register tags.

        Returns:
            (statements, tag table, line number where truncation began or None)
        """
        statements: list[SourceLine] = []
        tags: TagTable = {}

        for number, raw in enumerate(lines, start=1):
            raw = raw.rstrip("\r\n")
            if not strip_comment(raw).strip():
                continue

            # Memory is full: the remainder is dropped unparsed
            if len(statements) >= MEMORY_SIZE:
                return statements, tags, number

            statement = parse_line(raw, number, filename)
            if statement.tag is not None:
                if statement.tag in tags:
                    original = statements[tags[statement.tag]].location
                    raise DuplicateTagError(
                        statement.tag,
                        location=statement.location,
                        original_location=original,
                        source_line=raw,
                    )
                tags[statement.tag] = len(statements)

            statements.append(statement)

        return statements, tags, None

    # =========================================================================
    # Pass 2: Encoding
    # =========================================================================

    def encode_line(self, statement: SourceLine, tags: TagTable) -> int:
        """
        Encode one statement to its machine word.

        HLT with an operand is treated as DAT: operand presence decides,
        not the mnemonic.

        Raises:
            MissingOperandError: Operand required but absent
            DatRangeError: DAT literal outside 0..999
            UndefinedTagError: Operand tag not in the tag table
        """
        mnemonic = statement.mnemonic

        if mnemonic in NO_OPERAND_OPCODES:
            return get_base(mnemonic)

        if mnemonic == "HLT" and statement.operand is None:
            return 0

        if mnemonic in ("HLT", "DAT"):
            return self._encode_literal(statement)

        if statement.operand is None:
            raise MissingOperandError(
                mnemonic, location=statement.location, source_line=statement.text
            )

        if statement.operand not in tags:
            raise UndefinedTagError(
                statement.operand,
                location=statement.operand_location,
                source_line=statement.text,
                similar_tags=find_similar_tags(statement.operand, tags),
            )

        return encode_instruction(mnemonic, tags[statement.operand])

    def _encode_literal(self, statement: SourceLine) -> int:
        """Encode a DAT literal."""
        literal = statement.operand
        if literal is None:
            raise MissingOperandError(
                statement.mnemonic, location=statement.location, source_line=statement.text
            )

        if not _LITERAL_RE.fullmatch(literal) or int(literal) > MAX_WORD:
            raise DatRangeError(
                literal, location=statement.operand_location, source_line=statement.text
            )

        return int(literal)

    # =========================================================================
    # Output Methods
    # =========================================================================

    def get_result(self) -> Optional[AssemblyResult]:
        """Get the result of the last assembly, or None."""
        return self._result

    def get_image(self) -> list[int]:
        """Get a copy of the last assembled 100-word image."""
        if self._result is None:
            return [0] * MEMORY_SIZE
        return list(self._result.image)

    def get_tags(self) -> TagTable:
        """Get a copy of the last tag table."""
        if self._result is None:
            return {}
        return dict(self._result.tags)

    def get_warnings(self) -> list[str]:
        """Get warnings from the last assembly."""
        if self._result is None:
            return []
        return list(self._result.warnings)


# =============================================================================
# Tag Suggestions
# =============================================================================

def find_similar_tags(name: str, tags: Iterable[str]) -> list[str]:
    """
    Find tags with similar names for error hints.

    Uses simple edit distance heuristic.
    """
    name_lower = name.lower()
    similar = []

    for tag in tags:
        tag_lower = tag.lower()
        if (
            tag_lower == name_lower or
            abs(len(tag) - len(name)) <= 1 and
            _edit_distance(name_lower, tag_lower) <= 2
        ):
            similar.append(tag)

    return similar[:3]


def _edit_distance(s1: str, s2: str) -> int:
    """Calculate Levenshtein edit distance between two strings."""
    if len(s1) < len(s2):
        s1, s2 = s2, s1

    distances = list(range(len(s2) + 1))
    for i, c1 in enumerate(s1):
        new_distances = [i + 1]
        for j, c2 in enumerate(s2):
            if c1 == c2:
                new_distances.append(distances[j])
            else:
                new_distances.append(1 + min((
                    distances[j],
                    distances[j + 1],
                    new_distances[-1]
                )))
        distances = new_distances

    return distances[-1]


# =============================================================================
# Convenience Functions
# =============================================================================

def assemble(source: Union[str, Iterable[str]], filename: str = "<input>") -> AssemblyResult:
    """
    Convenience function to assemble source code.

    Raises:
        AssemblerError: If assembly fails
    """
    return Assembler().assemble(source, filename)


def assemble_file(filepath: Union[str, Path]) -> AssemblyResult:
    """
    Convenience function to assemble a file.

    Raises:
        AssemblerError: If assembly fails
        FileNotFoundError: If source file not found
    """
    return Assembler().assemble_file(filepath)
