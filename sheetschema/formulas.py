"""Rewrites formula coordinates after rows were inserted or deleted."""

# Module responsibilities:
# - Shift references below each row action ("outside" shifts).
# - Re-point same-row references of cloned formulas ("inside" shifts).
# - Grow single-row ranges over the rows a repeat inserted.

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Sequence

from .markers import has_plain_marker
from .merges import MergeRange
from .schema import RowAction
from .utils.log import get_logger

logger = get_logger("formulas")

Grid = Dict[int, Dict[int, Any]]

_FORMULA_RE = re.compile(r"^=[A-Z]")
_REFERENCE_RE = re.compile(r"(?<![A-Za-z0-9_])(\$?[A-Z]+)(\d+)(?![\d(])")
_RANGE_RE = re.compile(r"(?<![A-Za-z0-9_])(\$?[A-Z]+)(\d+):(\$?[A-Z]+)(\d+)(?![\d(])")


def is_formula(value: Any) -> bool:
    return isinstance(value, str) and bool(_FORMULA_RE.match(value))


def shift_references(formula: str, rewrite: Callable[[int], int]) -> str:
    """Apply ``rewrite`` to the row number of every coordinate reference."""

    def _sub(match: re.Match[str]) -> str:
        return f"{match.group(1)}{rewrite(int(match.group(2)))}"

    return _REFERENCE_RE.sub(_sub, formula)


@dataclass(frozen=True)
class InsertedRange:
    """Rows ``from_row + 1 .. to_row`` were added right below ``from_row``."""

    from_row: int
    to_row: int


def inserted_ranges(actions: Sequence[RowAction]) -> List[InsertedRange]:
    """Collapse maximal runs of consecutive ``add`` actions."""

    ranges: List[InsertedRange] = []
    start = previous = None
    for action in actions:
        if action.is_add and previous is not None and action.row == previous + 1:
            previous = action.row
            continue
        if start is not None:
            ranges.append(InsertedRange(start - 1, previous))
        start = previous = action.row if action.is_add else None
    if start is not None:
        ranges.append(InsertedRange(start - 1, previous))
    return ranges


class FormulaRebaser:
    """Keeps formula references pointing at the same data after expansion."""

    def __init__(self, actions: Sequence[RowAction], merges: Sequence[MergeRange]) -> None:
        self._actions = list(actions)
        self._merges = list(merges)

    def _formulas(self, grid: Grid):
        for row, columns in grid.items():
            for col, value in columns.items():
                if is_formula(value):
                    yield row, col, value

    def _shift_outside(self, grid: Grid) -> None:
        for action in self._actions:
            if action.is_add:
                rewrite = lambda ref, at=action.row: ref + 1 if ref >= at else ref
            else:
                rewrite = lambda ref, at=action.row: ref - 1 if ref > at else ref
            for row, col, value in list(self._formulas(grid)):
                grid[row][col] = shift_references(value, rewrite)

    def _shift_inside(self, grid: Grid) -> None:
        position = 0
        previous: RowAction | None = None
        for action in self._actions:
            if previous is not None and previous.is_add and action.is_add and action.row == previous.row + 1:
                position += 1
            else:
                position = 0
            previous = action
            if not action.is_add:
                continue

            run = position + 1
            source = action.row - run
            columns = grid.get(action.row, {})
            for col, value in list(columns.items()):
                if is_formula(value):
                    columns[col] = shift_references(
                        value, lambda ref: ref + run if ref == source else ref
                    )

    def _is_unmaterialized(self, grid: Grid, inserted: InsertedRange) -> bool:
        for merge in self._merges:
            if not merge.is_vertical or not merge.covers_row(inserted.from_row):
                continue
            if has_plain_marker(grid.get(merge.min_row, {}).get(merge.min_col)):
                return True
        return False

    def _grow_ranges(self, grid: Grid) -> None:
        ranges = [
            item for item in inserted_ranges(self._actions) if not self._is_unmaterialized(grid, item)
        ]
        if not ranges:
            return

        def _sub(match: re.Match[str]) -> str:
            start_row, end_row = int(match.group(2)), int(match.group(4))
            if start_row == end_row:
                for item in ranges:
                    if item.from_row == start_row:
                        return f"{match.group(1)}{start_row}:{match.group(3)}{item.to_row}"
            return match.group(0)

        for row, col, value in list(self._formulas(grid)):
            grid[row][col] = _RANGE_RE.sub(_sub, value)

    def rebase(self, grid: Grid) -> Grid:
        """Rebase formulas of ``grid`` in place and return it."""

        if not self._actions:
            return grid
        self._shift_outside(grid)
        self._shift_inside(grid)
        self._grow_ranges(grid)
        logger.debug("Formulas rebased", extra={"actions": len(self._actions)})
        return grid
