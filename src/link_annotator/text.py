"""TextBuffer — immutable text indexed by UTF-16 code units.

Python strings index by code point, host text systems by UTF-16 code
unit.  Classifiers work on the plain ``str`` and everything they emit is
converted here, so links, layout queries and attributed runs all speak
UTF-16 offsets.
"""

from __future__ import annotations
from bisect import bisect_left

from .types import TextRange


class TextBuffer:
    """Plain text plus a code point → UTF-16 offset table."""

    __slots__ = ("_text", "_offsets")

    def __init__(self, text: str = "") -> None:
        self._text = text
        offsets = [0]
        total = 0
        for ch in text:
            total += 2 if ord(ch) > 0xFFFF else 1
            offsets.append(total)
        self._offsets: tuple[int, ...] = tuple(offsets)

    @property
    def text(self) -> str:
        return self._text

    def __len__(self) -> int:
        return self._offsets[-1]

    def __str__(self) -> str:
        return self._text

    def __repr__(self) -> str:
        return f"TextBuffer({self._text!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, TextBuffer):
            return self._text == other._text
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._text)

    # ------------------------------------------------------------------
    # Offset conversion
    # ------------------------------------------------------------------

    def to_utf16(self, index: int) -> int:
        """Code point index → UTF-16 offset."""
        return self._offsets[index]

    def from_utf16(self, offset: int) -> int | None:
        """UTF-16 offset → code point index, None if it splits a surrogate pair."""
        if offset < 0 or offset > len(self):
            return None
        idx = bisect_left(self._offsets, offset)
        if self._offsets[idx] != offset:
            return None
        return idx

    def span_to_range(self, start: int, end: int) -> TextRange | None:
        """Convert a code point span; None for empty, inverted or out-of-range spans."""
        if start < 0 or end > len(self._text) or start >= end:
            return None
        lo = self._offsets[start]
        return TextRange(lo, self._offsets[end] - lo)

    def substring(self, rng: TextRange) -> str:
        start = self.from_utf16(rng.location)
        end = self.from_utf16(rng.end)
        if start is None or end is None:
            raise ValueError(f"range {tuple(rng)} does not fall on character boundaries")
        return self._text[start:end]
