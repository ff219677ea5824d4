"""
LMC SDK Disassembler Module
===========================

Turns LMC machine words back into assembly text, annotated with tag
names when the assembler's tag table is available. Used by the debugger
to show the next instruction and by ``lmc disasm`` for listings.

Usage:
    from lmc_sdk.disassembler import LMCDisassembler

    disasm = LMCDisassembler(tags={"num": 3})
    print(disasm.disassemble_one(503, address=0))   # 00: 503  LDA num
"""

from .lmc import LMCDisassembler, DisassembledInstruction, UNKNOWN_MNEMONIC, disassemble_word

__all__ = [
    "LMCDisassembler",
    "DisassembledInstruction",
    "UNKNOWN_MNEMONIC",
    "disassemble_word",
]
