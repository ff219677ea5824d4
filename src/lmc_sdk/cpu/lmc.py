"""
LMC Instruction Set Definition
==============================

This module defines the Little Man Computer instruction set: opcode bases,
the word and memory geometry, and the accumulator arithmetic rules shared
by the assembler, disassembler, optimiser and interpreter.

Machine Geometry
----------------
- 100 memory cells ("boxes"), addresses 0..99, all address arithmetic mod 100
- Each cell holds a decimal word 0..999
- One accumulator (0..999) plus a negative flag used by BRP
- A program counter that advances by one per fetch

Instruction Encoding
--------------------
An instruction word is ``base + address``. The hundreds digit selects the
operation and the low two digits are the operand address:

    =========  ====  ==========================================
    Mnemonic   Base  Effect
    =========  ====  ==========================================
    HLT / DAT     0  halt / literal data word
    ADD         100  acc += mem[addr]
    SUB         200  acc -= mem[addr]
    STO         300  mem[addr] = acc
    (unused)    400
    LDA         500  acc = mem[addr]
    BR          600  pc = addr
    BRZ         700  if acc == 0: pc = addr
    BRP         800  if not negative: pc = addr
    IN          901  acc = input
    OUT         902  output acc
    =========  ====  ==========================================

HLT and DAT share base 0. The assembler tells them apart only by operand
presence: ``HLT`` alone is the halt word 0, while ``HLT 5`` is read as
``DAT 5``. This quirk is kept on purpose.
"""

from enum import Enum


# =============================================================================
# Machine Geometry
# =============================================================================

MEMORY_SIZE = 100
WORD_MODULUS = 1000
MAX_WORD = WORD_MODULUS - 1

# Hundreds digit of an instruction word
INSTRUCTION_DIVISOR = 100


# =============================================================================
# Opcodes
# =============================================================================

class Opcode(Enum):
    """LMC mnemonics. Use `base` for the number added to the operand."""
    HLT = "HLT"
    DAT = "DAT"
    ADD = "ADD"
    SUB = "SUB"
    STO = "STO"
    LDA = "LDA"
    BR = "BR"
    BRZ = "BRZ"
    BRP = "BRP"
    IN = "IN"
    OUT = "OUT"

    @property
    def base(self) -> int:
        """Numeric base of this opcode."""
        return OPCODE_BASES[self.value]

    def __str__(self) -> str:
        return self.value


# Forward table: mnemonic -> base. HLT and DAT deliberately share 0.
OPCODE_BASES: dict[str, int] = {
    "HLT": 0,
    "DAT": 0,
    "ADD": 100,
    "SUB": 200,
    "STO": 300,
    "LDA": 500,
    "BR": 600,
    "BRZ": 700,
    "BRP": 800,
    "IN": 901,
    "OUT": 902,
}

# Reverse table: base -> mnemonic. Base 0 renders as HLT.
BASE_MNEMONICS: dict[int, str] = {}
for _mnemonic, _base in OPCODE_BASES.items():
    BASE_MNEMONICS.setdefault(_base, _mnemonic)
del _mnemonic, _base

MNEMONICS = frozenset(OPCODE_BASES)

# Opcodes that never take an operand (any operand written is ignored)
NO_OPERAND_OPCODES = frozenset({"IN", "OUT"})

# Opcodes whose operand is a tag resolved to an address
TAG_OPERAND_OPCODES = frozenset({"ADD", "SUB", "STO", "LDA", "BR", "BRZ", "BRP"})

# Full instruction words for the two I/O operations
INPUT_WORD = OPCODE_BASES["IN"]
OUTPUT_WORD = OPCODE_BASES["OUT"]


# =============================================================================
# Lookup Functions
# =============================================================================

def is_valid_mnemonic(mnemonic: str) -> bool:
    """Return True if mnemonic (any case) is part of the instruction set."""
    return mnemonic.upper() in OPCODE_BASES


def get_base(mnemonic: str) -> int:
    """
    Get the numeric base for a mnemonic.

    Raises:
        KeyError: If the mnemonic is unknown
    """
    return OPCODE_BASES[mnemonic.upper()]


def is_word(value: int) -> bool:
    """Return True if value fits in a memory cell."""
    return 0 <= value <= MAX_WORD


def wrap_address(address: int) -> int:
    """Reduce an address into 0..99."""
    return address % MEMORY_SIZE


def decode_word(word: int) -> tuple[int, int]:
    """
    Split an instruction word into (hundreds digit, operand address).

    >>> decode_word(503)
    (5, 3)
    """
    return word // INSTRUCTION_DIVISOR, word % INSTRUCTION_DIVISOR


def encode_instruction(mnemonic: str, address: int) -> int:
    """
    Encode an addressed instruction.

    >>> encode_instruction("LDA", 3)
    503
    """
    return get_base(mnemonic) + wrap_address(address)


def normalize_accumulator(value: int) -> tuple[int, bool]:
    """
    Normalize an arithmetic result to (word, negative flag).

    Non-negative values wrap mod 1000 with the flag cleared. Negative values
    have 1000 added until they are non-negative, and set the flag.

    >>> normalize_accumulator(-5)
    (995, True)
    >>> normalize_accumulator(1005)
    (5, False)
    """
    if value >= 0:
        return value % WORD_MODULUS, False

    while value < 0:
        value += WORD_MODULUS
    return value, True
