"""Fixed-cell layout engine.

A stand-in for a real text system: every character occupies one
``char_width`` x ``line_height`` cell, lines break only on ``\\n``, and
newlines draw nothing.  Good enough for the CLI and for tests.
"""

from __future__ import annotations

from .text import TextBuffer
from .types import Point, Rect, TextRange


class MonospaceLayout:
    """Implements ``LayoutEngine`` for a fixed-width grid."""

    __slots__ = ("_buffer", "_char_width", "_line_height", "_lines", "_cells")

    def __init__(self, buffer: TextBuffer, *, char_width: float = 10.0, line_height: float = 20.0) -> None:
        self._buffer = buffer
        self._char_width = char_width
        self._line_height = line_height
        # Per line: offsets of drawn characters, and the offset where the line ends
        self._lines: list[tuple[list[int], int]] = []
        # UTF-16 offset (both halves of a surrogate pair) → (row, col)
        self._cells: dict[int, tuple[int, int]] = {}
        drawn: list[int] = []
        for i, ch in enumerate(buffer.text):
            start, end = buffer.to_utf16(i), buffer.to_utf16(i + 1)
            if ch == "\n":
                self._lines.append((drawn, start))
                drawn = []
                continue
            for offset in range(start, end):
                self._cells[offset] = (len(self._lines), len(drawn))
            drawn.append(start)
        self._lines.append((drawn, len(buffer)))

    def bounding_rects(self, rng: TextRange) -> list[Rect]:
        """One rectangle per line touched by the range, covering its drawn characters."""
        per_row: dict[int, list[int]] = {}
        for offset in range(rng.location, rng.end):
            cell = self._cells.get(offset)
            if cell is not None:
                per_row.setdefault(cell[0], []).append(cell[1])
        rects = []
        for row in sorted(per_row):
            cols = per_row[row]
            first, last = min(cols), max(cols)
            rects.append(Rect(
                x=first * self._char_width,
                y=row * self._line_height,
                width=(last - first + 1) * self._char_width,
                height=self._line_height,
            ))
        return rects

    def character_index(self, point: Point) -> int | None:
        """Nearest character offset; clamps to the last line and line ends."""
        if not self._buffer.text:
            return None
        row = int(max(point.y, 0) // self._line_height)
        row = min(row, len(self._lines) - 1)
        drawn, line_end = self._lines[row]
        if not drawn:
            return min(line_end, len(self._buffer) - 1)
        col = int(max(point.x, 0) // self._char_width)
        return drawn[min(col, len(drawn) - 1)]
