"""
LMC Assembler
=============

This package turns Little Man Computer assembly source into a 100-word
memory image, and rewrites source to drop trailing zero storage.

Main Components
---------------
- **Assembler**: two-pass assembler producing an `AssemblyResult`
- **parse_line / parse_source**: line grammar (``[tag] MNEMONIC [operand]``)
- **StorageOptimizer**: elides trailing all-zero storage declarations

Assembly Process
----------------
1. **Pass 1**: assign sequential addresses from 0, register tags. Source
   past the 100th statement is dropped with a warning.
2. **Pass 2**: encode each statement (``base + tag address``, DAT
   literals, fixed IN/OUT words).

Example Usage
-------------
>>> from lmc_sdk.assembler import assemble
>>> result = assemble("        IN\\n        OUT\\n        HLT\\n")
>>> result.image[:3]
[901, 902, 0]
"""

from lmc_sdk.assembler.assembler import (
    Assembler,
    AssemblyResult,
    TagTable,
    assemble,
    assemble_file,
    find_similar_tags,
)
from lmc_sdk.assembler.parser import (
    SourceLine,
    parse_line,
    parse_source,
    iter_source_lines,
    read_source,
    strip_comment,
)
from lmc_sdk.assembler.optimizer import (
    StorageOptimizer,
    OptimizationResult,
    OMITTED_PREFIX,
    optimize_source,
    optimize_file,
    packed_path,
)

__all__ = [
    # Main class and functions
    "Assembler",
    "AssemblyResult",
    "TagTable",
    "assemble",
    "assemble_file",
    "find_similar_tags",
    # Parser
    "SourceLine",
    "parse_line",
    "parse_source",
    "iter_source_lines",
    "read_source",
    "strip_comment",
    # Optimizer
    "StorageOptimizer",
    "OptimizationResult",
    "OMITTED_PREFIX",
    "optimize_source",
    "optimize_file",
    "packed_path",
]
