"""
Spreadsheet addressing helpers.

This module provides the small amount of spreadsheet geometry the package needs:
- column_letter / letter_to_column: bijective base-26 column names (A..Z, AA..)
- Range: a rectangular cell region parsed from and rendered to A1 notation
"""

import re
from typing import Any, List, Optional


_CELL_RE = re.compile(r"^([A-Z]+)(\d+)$")


def column_letter(col: int) -> str:
    """Convert a column number (0-indexed) to letter(s) for A1 notation.

    The encoding is bijective base-26 with no zero digit, so 0 = A, 25 = Z,
    26 = AA, 701 = ZZ and 702 = AAA.

    Args:
        col: Column number (0-indexed, non-negative)

    Returns:
        Column letter(s) in A1 notation

    Raises:
        ValueError: If col is negative
    """
    if col < 0:
        raise ValueError("Column index must be non-negative (0-indexed)")

    # Convert 0-indexed to 1-indexed for A1 notation
    col_1indexed = col + 1
    result = ""
    while col_1indexed > 0:
        col_1indexed -= 1
        result = chr(65 + (col_1indexed % 26)) + result
        col_1indexed //= 26
    return result


def letter_to_column(letters: str) -> int:
    """Convert column letter(s) to a column number (0-indexed).

    Args:
        letters: Column letter(s) in A1 notation (A, Z, AA, etc.)

    Returns:
        Column number (0-indexed: A = 0, Z = 25, AA = 26, etc.)
    """
    col_1indexed = 0
    for char in letters.upper():
        col_1indexed = col_1indexed * 26 + (ord(char) - 64)
    return col_1indexed - 1


class Range:
    """Represents a rectangular cell region in A1 notation.

    IMPORTANT: Range uses 0-indexed coordinates internally (Python convention),
    but converts to 1-indexed A1 notation for spreadsheet APIs via to_a1().

    Attributes:
        row: Starting row (0-indexed)
        col: Starting column (0-indexed)
        row_end: Ending row (0-indexed, inclusive)
        col_end: Ending column (0-indexed, inclusive)
    """

    def __init__(
        self,
        row: int,
        col: int,
        row_end: Optional[int] = None,
        col_end: Optional[int] = None
    ) -> None:
        if row < 0 or col < 0:
            raise ValueError("Row and column must be non-negative (0-indexed)")

        self.row = row
        self.col = col
        self.row_end = row_end if row_end is not None else row
        self.col_end = col_end if col_end is not None else col

        if self.row_end < self.row or self.col_end < self.col:
            raise ValueError("End coordinates must be >= start coordinates")

    @classmethod
    def from_a1(cls, notation: str) -> "Range":
        """Parse an A1 notation string such as ``B2`` or ``A1:C10``.

        A sheet prefix (``Data!A1:C10``) is accepted and ignored.

        Args:
            notation: A1 notation string (1-indexed spreadsheet convention)

        Returns:
            Range object with 0-indexed internal coordinates

        Raises:
            ValueError: If notation is invalid
        """
        notation = notation.strip()
        if "!" in notation:
            notation = notation.rsplit("!", 1)[1]
        if not notation:
            raise ValueError("Empty range notation")

        parts = notation.split(":")
        if len(parts) > 2:
            raise ValueError(f"Invalid range notation: {notation}")

        coords = []
        for part in parts:
            match = _CELL_RE.match(part.strip().upper())
            if not match:
                raise ValueError(f"Invalid range notation: {notation}")
            letters, row_str = match.groups()
            coords.append((int(row_str) - 1, letter_to_column(letters)))

        (row, col) = coords[0]
        (row_end, col_end) = coords[-1]
        return cls(row=row, col=col, row_end=row_end, col_end=col_end)

    def to_a1(self) -> str:
        """Convert Range to A1 notation string (1-indexed for spreadsheet APIs)."""
        start_cell = f"{column_letter(self.col)}{self.row + 1}"

        if self.row == self.row_end and self.col == self.col_end:
            return start_cell

        end_cell = f"{column_letter(self.col_end)}{self.row_end + 1}"
        return f"{start_cell}:{end_cell}"

    @property
    def num_rows(self) -> int:
        return self.row_end - self.row + 1

    @property
    def num_cols(self) -> int:
        return self.col_end - self.col + 1

    def slice(self, grid: List[List[Any]]) -> List[List[Any]]:
        """Cut this range out of a full-sheet grid.

        Cells beyond the grid's extent read as ``None`` so the result is always
        ``num_rows`` by ``num_cols``.
        """
        result = []
        for r in range(self.row, self.row_end + 1):
            source = grid[r] if r < len(grid) else []
            result.append([
                source[c] if c < len(source) else None
                for c in range(self.col, self.col_end + 1)
            ])
        return result

    def __repr__(self) -> str:
        return f"Range({self.to_a1()})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Range):
            return NotImplemented
        return (
            self.row == other.row
            and self.col == other.col
            and self.row_end == other.row_end
            and self.col_end == other.col_end
        )
