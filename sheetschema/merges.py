"""Merged-cell ranges expressed as integer coordinates."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Iterable, List

from openpyxl.utils import get_column_letter
from openpyxl.utils.cell import range_boundaries

from .errors import MergeRangeError

_RANGE_RE = re.compile(r"^[A-Z]+[1-9]\d*:[A-Z]+[1-9]\d*$")


@dataclass(frozen=True)
class MergeRange:
    """Rectangular span anchored at (min_col, min_row); columns are 1-based ordinals."""

    min_col: int
    min_row: int
    max_col: int
    max_row: int

    @classmethod
    def parse(cls, value: str) -> "MergeRange":
        if not isinstance(value, str) or not _RANGE_RE.match(value.strip()):
            raise MergeRangeError(value)
        min_col, min_row, max_col, max_row = range_boundaries(value.strip())
        return cls(
            min_col=min(min_col, max_col),
            min_row=min(min_row, max_row),
            max_col=max(min_col, max_col),
            max_row=max(min_row, max_row),
        )

    @property
    def height(self) -> int:
        """Rows spanned below the anchor row."""
        return self.max_row - self.min_row

    @property
    def width(self) -> int:
        """Columns spanned right of the anchor column."""
        return self.max_col - self.min_col

    @property
    def is_vertical(self) -> bool:
        return self.height > 0

    @property
    def is_single_cell(self) -> bool:
        return not self.height and not self.width

    def anchored_at(self, col: int, row: int) -> bool:
        return self.min_col == col and self.min_row == row

    def covers_row(self, row: int) -> bool:
        return self.min_row <= row <= self.max_row

    def moved(self, top: int, bottom: int) -> "MergeRange":
        return replace(self, min_row=top, max_row=bottom)

    @property
    def coord(self) -> str:
        return (
            f"{get_column_letter(self.min_col)}{self.min_row}:"
            f"{get_column_letter(self.max_col)}{self.max_row}"
        )

    def __str__(self) -> str:
        return self.coord


def parse_merge_cells(values: Iterable[str]) -> List[MergeRange]:
    """Parse ``"A1:B2"`` strings; the first malformed entry aborts."""

    return [MergeRange.parse(value) for value in values]
