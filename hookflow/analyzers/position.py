"""Byte offset to (line, column) conversion.

Build one :class:`PositionIndex` per source string and reuse it for every
lookup in that file.
"""

from bisect import bisect_right
from typing import Sequence, Tuple

LineStarts = Tuple[int, ...]


def index(source: str) -> LineStarts:
    """Compute the byte offset at which each line starts.

    An empty source yields an empty index.
    """
    if not source:
        return ()
    encoded = source.encode("utf-8")
    starts = [0]
    position = encoded.find(b"\n")
    while position != -1:
        starts.append(position + 1)
        position = encoded.find(b"\n", position + 1)
    return tuple(starts)


def line_of(line_starts: Sequence[int], offset: int, line_offset: int = 1) -> int:
    """1-based line for a byte offset, shifted by ``line_offset - 1``."""
    if not line_starts:
        return line_offset
    return bisect_right(line_starts, offset) + (line_offset - 1)


def column_of(line_starts: Sequence[int], offset: int) -> int:
    """0-based column for a byte offset."""
    if not line_starts:
        return 0
    line_index = bisect_right(line_starts, offset) - 1
    return offset - line_starts[max(line_index, 0)]


class PositionIndex:
    """Precomputed line starts for one source string.

    Args:
        source: Full text the offsets refer to
        line_offset: 1-based line of ``source`` within a larger file, e.g.
            the line where a ``<script>`` block begins
    """

    def __init__(self, source: str, line_offset: int = 1):
        self.line_starts = index(source)
        self.line_offset = line_offset

    def line(self, offset: int) -> int:
        return line_of(self.line_starts, offset, self.line_offset)

    def column(self, offset: int) -> int:
        return column_of(self.line_starts, offset)

    def position(self, offset: int) -> Tuple[int, int]:
        return self.line(offset), self.column(offset)

    def of(self, node) -> Tuple[int, int]:
        """Position of a syntax node's first byte."""
        return self.position(node.start_byte)
