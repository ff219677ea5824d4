"""
LMC Disassembler
================

Disassembles LMC machine words into assembly text. This is the inverse
operation of the assembler's second pass.

Decoding Rules
--------------
- ``901`` / ``902`` render as ``IN`` / ``OUT``.
- Any word below 100 renders as ``HLT`` (it executes as a halt; a
  non-zero value is noted in the comment since it is probably data).
- Otherwise the low two digits are the operand address and
  ``word - operand`` is looked up in the base table. A match renders as
  ``MNEMONIC operand``; no match (400s, other 900s) renders as ``???``
  with the raw word.

When a tag table is supplied, operand addresses and the instruction's own
address are shown by tag name. If several tags share an address the one
defined first in the source wins.

Usage:
    disasm = LMCDisassembler(result.tags)
    for instr in disasm.disassemble(result.image, count=result.size):
        print(instr)
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from lmc_sdk.cpu import (
    BASE_MNEMONICS,
    INPUT_WORD,
    INSTRUCTION_DIVISOR,
    MEMORY_SIZE,
    OUTPUT_WORD,
    wrap_address,
)


UNKNOWN_MNEMONIC = "???"


# =============================================================================
# Data Structures
# =============================================================================

@dataclass
class DisassembledInstruction:
    """
    Represents a single disassembled LMC word.

    Attributes:
        word: The raw machine word
        mnemonic: Instruction mnemonic, or ``???`` for undecodable words
        operand: Operand address (or raw word for unknown), None if none
        operand_str: Formatted operand (tag name when known)
        address: Memory address the word came from, if known
        label: Tag defined at ``address``, if any
        comment: Optional annotation (e.g. data value under HLT)
    """
    word: int
    mnemonic: str
    operand: Optional[int] = None
    operand_str: str = ""
    address: Optional[int] = None
    label: Optional[str] = None
    comment: str = ""

    @property
    def is_unknown(self) -> bool:
        """True if the word does not decode to an instruction."""
        return self.mnemonic == UNKNOWN_MNEMONIC

    @property
    def text(self) -> str:
        """Mnemonic and operand only, e.g. ``LDA num``."""
        if self.operand_str:
            return f"{self.mnemonic} {self.operand_str}"
        return self.mnemonic

    def __str__(self) -> str:
        """Format as listing line: ADDRESS (LABEL): WORD  MNEMONIC OPERAND"""
        parts = []
        if self.address is not None:
            where = f"{self.address:02d}"
            if self.label:
                where += f" ({self.label})"
            parts.append(f"{where}: {self.word:03d}")
        else:
            parts.append(f"{self.word:03d}")

        line = f"{parts[0]}  {self.text}"
        if self.comment:
            line = f"{line:<32} # {self.comment}"
        return line


# =============================================================================
# LMC Disassembler
# =============================================================================

class LMCDisassembler:
    """
    Disassembler for LMC machine words.

    Attributes:
        _tags_by_address: Reverse tag table, address -> first tag defined there
    """

    def __init__(self, tags: Optional[Dict[str, int]] = None):
        """
        Initialize the disassembler.

        Args:
            tags: Optional tag table (label -> address) from the assembler.
        """
        self._tags_by_address = self._build_reverse_table(tags or {})

    @staticmethod
    def _build_reverse_table(tags: Dict[str, int]) -> Dict[int, str]:
        """
        Build reverse lookup table: address -> tag.

        Tags are visited in table order (source order from the assembler);
        when two tags share an address the first one is kept.
        """
        reverse: Dict[int, str] = {}
        for tag, address in tags.items():
            address = wrap_address(address)
            if address in reverse:
                continue
            reverse[address] = tag
        return reverse

    def tag_at(self, address: int) -> Optional[str]:
        """Get the tag defined at an address, if any."""
        return self._tags_by_address.get(wrap_address(address))

    def format_address(self, address: int) -> str:
        """Render an address as its tag name, or two decimal digits."""
        tag = self.tag_at(address)
        return tag if tag is not None else f"{wrap_address(address):02d}"

    def disassemble_one(self, word: int, address: Optional[int] = None) -> DisassembledInstruction:
        """
        Disassemble a single word.

        Args:
            word: Machine word (0..999)
            address: Memory address of the word, for label annotation

        Returns:
            DisassembledInstruction with decoded information
        """
        label = self.tag_at(address) if address is not None else None

        if word == INPUT_WORD or word == OUTPUT_WORD:
            return DisassembledInstruction(
                word=word,
                mnemonic=BASE_MNEMONICS[word],
                address=address,
                label=label,
            )

        if word // INSTRUCTION_DIVISOR == 0:
            return DisassembledInstruction(
                word=word,
                mnemonic=BASE_MNEMONICS[0],
                address=address,
                label=label,
                comment=f"DAT {word:03d}" if word else "",
            )

        operand = word % INSTRUCTION_DIVISOR
        mnemonic = BASE_MNEMONICS.get(word - operand)

        if mnemonic is None:
            return DisassembledInstruction(
                word=word,
                mnemonic=UNKNOWN_MNEMONIC,
                operand=word,
                operand_str=f"{word:03d}",
                address=address,
                label=label,
                comment="unknown instruction",
            )

        return DisassembledInstruction(
            word=word,
            mnemonic=mnemonic,
            operand=operand,
            operand_str=self.format_address(operand),
            address=address,
            label=label,
        )

    def disassemble(
        self,
        image: Sequence[int],
        start: int = 0,
        count: Optional[int] = None,
    ) -> List[DisassembledInstruction]:
        """
        Disassemble consecutive memory cells.

        Args:
            image: Memory words (a full image or any prefix of one)
            start: First address to decode
            count: Number of cells to decode (None = through end of image)

        Returns:
            List of DisassembledInstruction objects
        """
        end = len(image) if count is None else min(len(image), start + count)
        end = min(end, MEMORY_SIZE)
        return [self.disassemble_one(image[address], address) for address in range(start, end)]

    def disassemble_to_text(
        self,
        image: Sequence[int],
        start: int = 0,
        count: Optional[int] = None,
    ) -> str:
        """Disassemble and return a multi-line listing."""
        return "\n".join(str(instr) for instr in self.disassemble(image, start, count))


def disassemble_word(word: int, address: Optional[int] = None, tags: Optional[Dict[str, int]] = None) -> str:
    """Convenience function: render one word as ``MNEMONIC operand`` text."""
    return LMCDisassembler(tags).disassemble_one(word, address).text
