"""
Machine State Snapshots
=======================

Two ways to save and restore an `InterpreterState`.

Binary Format
-------------
Little-endian, 205 bytes, no header or length prefix::

    Offset  Size  Field
    ------  ----  -----------------------------
    0       2     accumulator (uint16)
    2       2     program counter (uint16)
    4       1     negative flag (0 or 1)
    5       200   memory: 100 x uint16

Text Format
-----------
One human-editable line::

    LMC[P 003 042 503 902 000 042 000 ... 000]

``P`` (positive) or ``N`` (negative) is the flag, followed by the PC, the
accumulator and the 100 memory words. The encoder always writes three
digits; the decoder accepts one to three digits per field. Anything else
raises `MalformedStateError` naming the offending token.
"""

import re
import struct
from pathlib import Path
from typing import Union

from lmc_sdk.cpu import MAX_WORD, MEMORY_SIZE
from lmc_sdk.emulator.cpu import InterpreterState
from lmc_sdk.emulator.memory import Memory
from lmc_sdk.errors import MalformedStateError


# =============================================================================
# Binary Format
# =============================================================================

HEADER_FORMAT = "<HH?"
HEADER_SIZE = struct.calcsize(HEADER_FORMAT)
MEMORY_FORMAT = f"<{MEMORY_SIZE}H"
SNAPSHOT_SIZE = HEADER_SIZE + struct.calcsize(MEMORY_FORMAT)


def encode_binary(state: InterpreterState) -> bytes:
    """Serialize a state to the 205-byte binary layout."""
    header = struct.pack(HEADER_FORMAT, state.accumulator, state.pc, state.negative)
    return header + struct.pack(MEMORY_FORMAT, *state.memory)


def decode_binary(data: bytes) -> InterpreterState:
    """
    Deserialize a binary snapshot.

    Raises:
        MalformedStateError: Wrong length, bad flag byte, PC > 99 or a
            value > 999
    """
    if len(data) != SNAPSHOT_SIZE:
        raise MalformedStateError(
            f"{len(data)} bytes", f"expected exactly {SNAPSHOT_SIZE} bytes"
        )

    # '?' accepts any non-zero byte, so check the flag by hand
    flag = data[4]
    if flag not in (0, 1):
        raise MalformedStateError(f"0x{flag:02X}", "flag byte must be 0 or 1", position=4)

    accumulator, pc, negative = struct.unpack_from(HEADER_FORMAT, data, 0)
    words = struct.unpack_from(MEMORY_FORMAT, data, HEADER_SIZE)

    if accumulator > MAX_WORD:
        raise MalformedStateError(str(accumulator), "accumulator out of range 0..999", position=0)
    if pc >= MEMORY_SIZE:
        raise MalformedStateError(str(pc), "program counter out of range 0..99", position=2)
    for address, word in enumerate(words):
        if word > MAX_WORD:
            raise MalformedStateError(
                str(word),
                f"value in box {address:02d} out of range 0..999",
                position=HEADER_SIZE + 2 * address,
            )

    return InterpreterState(
        memory=Memory(words),
        pc=pc,
        accumulator=accumulator,
        negative=negative,
    )


def save_binary(path: Union[str, Path], state: InterpreterState) -> None:
    """Write a binary snapshot to ``path``."""
    Path(path).write_bytes(encode_binary(state))


def load_binary(path: Union[str, Path]) -> InterpreterState:
    """
    Read a binary snapshot from ``path``.

    Raises:
        FileNotFoundError: If the file does not exist
        MalformedStateError: If the contents do not decode
    """
    return decode_binary(Path(path).read_bytes())


# =============================================================================
# Text Format
# =============================================================================

TEXT_PREFIX = "LMC["
TEXT_SUFFIX = "]"

_NUMBER_RE = re.compile(r"[0-9]{1,3}")


def encode_text(state: InterpreterState) -> str:
    """Serialize a state to its one-line text form."""
    flag = "N" if state.negative else "P"
    fields = [f"{state.pc:03d}", f"{state.accumulator:03d}"]
    fields.extend(f"{word:03d}" for word in state.memory)
    return f"{TEXT_PREFIX}{flag} {' '.join(fields)}{TEXT_SUFFIX}"


def decode_text(text: str) -> InterpreterState:
    """
    Parse the text form produced by `encode_text`.

    Surrounding whitespace is ignored; everything else is strict.

    Raises:
        MalformedStateError: On any deviation from the format
    """
    text = text.strip()

    if not text.startswith(TEXT_PREFIX):
        raise MalformedStateError(text[:len(TEXT_PREFIX)], f"expected {TEXT_PREFIX!r}", position=0)
    pos = len(TEXT_PREFIX)

    flag = text[pos:pos + 1]
    if flag not in ("P", "N"):
        raise MalformedStateError(flag, "flag must be 'P' or 'N'", position=pos)
    pos += 1

    # PC, accumulator, then the memory words
    values = []
    total = 2 + MEMORY_SIZE
    for index in range(total):
        if text[pos:pos + 1] != " ":
            raise MalformedStateError(text[pos:pos + 1], "expected a space", position=pos)
        pos += 1

        match = _NUMBER_RE.match(text, pos)
        if match is None:
            raise MalformedStateError(_token_at(text, pos), "expected a 1-3 digit number", position=pos)
        end = match.end()

        terminator = text[end:end + 1]
        last = index == total - 1
        if terminator != (TEXT_SUFFIX if last else " "):
            raise MalformedStateError(
                _token_at(text, pos),
                _terminator_reason(terminator, last),
                position=pos,
            )

        values.append(int(match.group()))
        pos = end

    if text[pos:] != TEXT_SUFFIX:
        raise MalformedStateError(text[pos:], f"expected {TEXT_SUFFIX!r} to end the state", position=pos)

    pc, accumulator, *words = values
    if pc >= MEMORY_SIZE:
        raise MalformedStateError(str(pc), "program counter out of range 0..99")

    return InterpreterState(
        memory=Memory(words),
        pc=pc,
        accumulator=accumulator,
        negative=flag == "N",
    )


def _token_at(text: str, pos: int) -> str:
    """The run of non-space characters starting at ``pos``."""
    end = pos
    while end < len(text) and text[end] not in (" ", TEXT_SUFFIX):
        end += 1
    return text[pos:end] or text[pos:pos + 1]


def _terminator_reason(terminator: str, last: bool) -> str:
    if terminator == TEXT_SUFFIX:
        return "too few values"
    if last and terminator == " ":
        return "too many values"
    return "malformed number"
