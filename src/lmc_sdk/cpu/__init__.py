"""
LMC SDK CPU Package
===================

Instruction set definitions shared by the assembler, disassembler,
optimiser and interpreter. Keeping them in one place means the code that
encodes instructions and the code that decodes them cannot drift apart.

Usage:
    from lmc_sdk.cpu import (
        OPCODE_BASES,
        MEMORY_SIZE,
        normalize_accumulator,
    )
"""

from lmc_sdk.cpu.lmc import (
    # Geometry
    MEMORY_SIZE,
    WORD_MODULUS,
    MAX_WORD,
    INSTRUCTION_DIVISOR,
    # Opcodes
    Opcode,
    OPCODE_BASES,
    BASE_MNEMONICS,
    MNEMONICS,
    NO_OPERAND_OPCODES,
    TAG_OPERAND_OPCODES,
    INPUT_WORD,
    OUTPUT_WORD,
    # Lookup functions
    is_valid_mnemonic,
    get_base,
    is_word,
    wrap_address,
    decode_word,
    encode_instruction,
    normalize_accumulator,
)

__all__ = [
    "MEMORY_SIZE",
    "WORD_MODULUS",
    "MAX_WORD",
    "INSTRUCTION_DIVISOR",
    "Opcode",
    "OPCODE_BASES",
    "BASE_MNEMONICS",
    "MNEMONICS",
    "NO_OPERAND_OPCODES",
    "TAG_OPERAND_OPCODES",
    "INPUT_WORD",
    "OUTPUT_WORD",
    "is_valid_mnemonic",
    "get_base",
    "is_word",
    "wrap_address",
    "decode_word",
    "encode_instruction",
    "normalize_accumulator",
]
