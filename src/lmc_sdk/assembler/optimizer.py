"""
LMC Storage Optimizer
=====================

Shrinks LMC programs by not declaring storage that is never initialised.

Programs usually end with a run of ``DAT 0`` variables. Those cells are
zero in the assembled image anyway, so declaring them only costs boxes in
the listing. The optimizer rewrites the source so that:

1. Every instruction that refers to such a trailing variable becomes a
   ``DAT`` carrying the instruction's exact machine word, with the
   original text kept as a trailing comment.
2. The trailing declarations themselves are commented out with an
   ``# OMITTED #`` prefix. Lines are commented, never deleted, so line
   numbers in the output still match the input.

Assembling the optimized source reproduces the original 100-word image
exactly; the variables still live at the same addresses at run time,
they just no longer appear in the program.

Definitions
-----------
``L``
    Highest address holding a non-zero word after assembly (-1 if none).
packable tag
    A tag whose address is greater than ``L``.

Example
-------
Input::

    loop    IN
            STO     total
            LDA     total
            OUT
            HLT
    total   DAT     0

Output (notice omitted)::

    loop    IN
            DAT     305 # STO     total
            DAT     505 # LDA     total
            OUT
            HLT
    # OMITTED #     total   DAT     0
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional, Union

from lmc_sdk.assembler.assembler import Assembler
from lmc_sdk.assembler.parser import read_source, strip_comment
from lmc_sdk.cpu import TAG_OPERAND_OPCODES

logger = logging.getLogger(__name__)


OMITTED_PREFIX = "# OMITTED #"

OPTIMIZER_NOTICE = """\
##################################
# NOTICE - File optimised by automated tool
#   Uninitialised variables at the end of the program are no longer defined.
#   This has decreased the size of the compiled program by {saved} boxes.
#   Instructions that referred to those boxes were rewritten as DAT words
#   holding the same machine code; the original instruction follows each
#   one as a comment.
#   Declarations that were optimised out are prefixed with `{prefix}`.
##################################
"""


# =============================================================================
# Result
# =============================================================================

@dataclass
class OptimizationResult:
    """
    Outcome of an optimization run.

    Attributes:
        text: The rewritten source, newline-terminated
        packed_tags: Tags whose declarations were elided, in source order
        amended_lines: 1-indexed lines rewritten as DAT directives
        omitted_lines: 1-indexed lines commented out
        saved_cells: Boxes removed from the program
        last_nonzero: Highest non-zero address of the image (``L``)
    """
    text: str
    packed_tags: list[str] = field(default_factory=list)
    amended_lines: list[int] = field(default_factory=list)
    omitted_lines: list[int] = field(default_factory=list)
    saved_cells: int = 0
    last_nonzero: int = -1

    @property
    def lines(self) -> list[str]:
        """Rewritten source as a list of lines."""
        return self.text.splitlines()


# =============================================================================
# Optimizer
# =============================================================================

class StorageOptimizer:
    """
    Elides trailing all-zero storage declarations from LMC source.

    Attributes:
        notice: If True, prefix the output with an explanatory comment block
    """

    def __init__(self, notice: bool = True):
        self.notice = notice

    def optimize(
        self,
        source: Union[str, Iterable[str]],
        filename: str = "<input>",
    ) -> OptimizationResult:
        """
        Rewrite source so trailing zero storage is not declared.

        Args:
            source: Assembly source text or lines
            filename: Virtual filename for error messages

        Returns:
            OptimizationResult holding the rewritten text

        Raises:
            AssemblerError: If the input does not assemble
        """
        lines = source.splitlines() if isinstance(source, str) else list(source)

        logger.info("Getting assembled info...")
        assembled = Assembler().assemble(lines, filename)
        last = assembled.last_nonzero_address

        packable = [tag for tag, address in assembled.tags.items() if address > last]
        packable_set = set(packable)
        logger.info(f"Packing {len(packable)} variables")

        # line number -> (machine word, tag)
        amend: dict[int, tuple[int, Optional[str]]] = {}
        # line number -> tag
        omit: dict[int, Optional[str]] = {}

        for address, statement in enumerate(assembled.lines):
            if statement.operand is None:
                continue

            if statement.mnemonic in TAG_OPERAND_OPCODES and statement.operand in packable_set:
                amend[statement.line] = (assembled.image[address], statement.tag)
            elif address > last:
                omit[statement.line] = statement.tag

        saved = len(omit)

        # Lines dropped by truncation would be pulled back in once boxes free up
        if assembled.truncated:
            last_line = assembled.lines[-1].line
            for number, raw in enumerate(lines, start=1):
                if number > last_line and strip_comment(raw).strip():
                    omit[number] = None

        output: list[str] = []
        if self.notice:
            output.extend(
                OPTIMIZER_NOTICE.format(saved=saved, prefix=OMITTED_PREFIX).splitlines()
            )
            output.append("")

        for number, raw in enumerate(lines, start=1):
            text = raw.rstrip()

            if number in amend:
                value, tag = amend[number]
                body = text.lstrip()
                if tag:
                    # Drop the tag from the comment so it is not duplicated
                    body = body[len(tag):].lstrip()
                text = f"{tag or ''}\tDAT\t{value:03d} # {body}"
                logger.info(f"Patching instruction on line {number}: {body}")
            elif number in omit:
                text = f"{OMITTED_PREFIX}\t{text.lstrip()}"
                if omit[number]:
                    logger.info(f"Omitting definition of `{omit[number]}` on line {number}")
                else:
                    logger.info(f"Omitting line {number}")

            output.append(text)

        logger.info(f"Optimised out {saved} boxes")

        return OptimizationResult(
            text="\n".join(output) + "\n",
            packed_tags=packable,
            amended_lines=sorted(amend),
            omitted_lines=sorted(omit),
            saved_cells=saved,
            last_nonzero=last,
        )


# =============================================================================
# Convenience Functions
# =============================================================================

def optimize_source(
    source: Union[str, Iterable[str]],
    filename: str = "<input>",
    notice: bool = True,
) -> OptimizationResult:
    """Convenience function to optimize source code."""
    return StorageOptimizer(notice=notice).optimize(source, filename)


def packed_path(infile: Union[str, Path], suffix: str = "_packed") -> Path:
    """Default output path: ``prog.lmc`` -> ``prog_packed.lmc``."""
    infile = Path(infile)
    return infile.with_name(f"{infile.stem}{suffix}{infile.suffix}")


def optimize_file(
    infile: Union[str, Path],
    outfile: Union[str, Path, None] = None,
    notice: bool = True,
    suffix: str = "_packed",
) -> tuple[OptimizationResult, Path]:
    """
    Optimize a source file and write the result.

    Args:
        infile: Source file to optimize
        outfile: Output path (default: ``<stem>_packed<ext>`` next to infile)
        notice: Include the explanatory comment block
        suffix: Stem suffix for the default output path

    Returns:
        (result, path written)

    Raises:
        AssemblerError: If the input does not assemble
        FileNotFoundError: If infile does not exist
    """
    infile = Path(infile)
    outpath = Path(outfile) if outfile is not None else packed_path(infile, suffix)

    result = optimize_source(read_source(infile), str(infile), notice=notice)
    outpath.write_text(result.text, encoding="utf-8")
    logger.info(f"Written to {outpath}")

    return result, outpath
