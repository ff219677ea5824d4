"""
Memory Subsystem for the LMC Interpreter
========================================

The LMC has exactly 100 memory cells ("boxes"), each holding a decimal word
0..999. Every address is reduced mod 100 at every access, so address 100 is
box 00 and address -1 is box 99.

The container is fixed-length: it supports indexing and iteration but has
no way to grow or shrink. Writing a value outside 0..999 raises
``ValueError``; the interpreter never produces such a value because the
accumulator is always normalized first.
"""

from typing import Iterable, Iterator, List, Optional

from lmc_sdk.cpu import MAX_WORD, MEMORY_SIZE, is_word, wrap_address


class Memory:
    """
    Fixed-size, bounds-checked LMC memory.

    Attributes:
        size: Number of cells (always 100)
    """

    size = MEMORY_SIZE

    def __init__(self, words: Optional[Iterable[int]] = None):
        """
        Initialize memory.

        Args:
            words: Initial contents, at most 100 words. Missing cells are zero.

        Raises:
            ValueError: If more than 100 words are given or a word is out of range
        """
        self._cells: List[int] = [0] * MEMORY_SIZE
        if words is not None:
            self.load(words)

    def load(self, words: Iterable[int], start: int = 0) -> None:
        """
        Copy words into consecutive cells beginning at ``start``.

        Raises:
            ValueError: If the words do not fit or a word is out of range
        """
        words = list(words)
        if len(words) > MEMORY_SIZE:
            raise ValueError(f"{len(words)} words do not fit in {MEMORY_SIZE} cells")

        for offset, value in enumerate(words):
            self[start + offset] = value

    def read(self, address: int) -> int:
        """Read the word at ``address`` (mod 100)."""
        return self._cells[wrap_address(address)]

    def write(self, address: int, value: int) -> None:
        """
        Write a word at ``address`` (mod 100).

        Raises:
            ValueError: If value is outside 0..999
        """
        if not is_word(value):
            raise ValueError(f"value {value} out of range 0..{MAX_WORD}")
        self._cells[wrap_address(address)] = value

    def clear(self) -> None:
        """Zero every cell."""
        self._cells = [0] * MEMORY_SIZE

    def copy(self) -> "Memory":
        """Return an independent copy."""
        clone = Memory()
        clone._cells = list(self._cells)
        return clone

    def to_list(self) -> List[int]:
        """Return the 100 words as a new list."""
        return list(self._cells)

    def __getitem__(self, address: int) -> int:
        return self.read(address)

    def __setitem__(self, address: int, value: int) -> None:
        self.write(address, value)

    def __len__(self) -> int:
        return MEMORY_SIZE

    def __iter__(self) -> Iterator[int]:
        return iter(list(self._cells))

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Memory):
            return self._cells == other._cells
        return NotImplemented

    def __repr__(self) -> str:
        used = sum(1 for word in self._cells if word)
        return f"Memory({used} non-zero cells)"
