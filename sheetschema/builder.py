"""Row/column expansion of the template grid driven by array-shaped data."""

# Module responsibilities:
# - Walk template rows in order, keeping one cumulative row shift.
# - Delete rows whose row-scoped condition fails, drop static cells of plain rows.
# - Clone cells rightward (column expansion) and rows downward (row expansion).
# - Keep vertically merged blocks aligned with the rows they interleave with.
# - Record every structural change on the Schema.

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .formulas import is_formula
from .markers import (
    Modifier,
    fill_wildcards,
    has_marker,
    has_plain_marker,
    increment_markers,
    increment_path,
    is_repeatable,
    scan_markers,
)
from .merges import MergeRange
from .schema import Schema
from .utils.log import get_logger

logger = get_logger("builder")

Row = Dict[int, Any]
Grid = Dict[int, Row]


@dataclass
class InterleaveState:
    """Tracks the template rows covered by a repeated, vertically merged block.

    The anchor row of the block decides the repeat ``count`` and the block
    ``stride`` (merge height + 1). The ``remaining`` rows below it reuse that
    count, place their clones ``stride`` rows apart and emit no row actions of
    their own. ``origin`` is the row shift in force when the block started.
    """

    remaining: int = 0
    height: int = 0
    count: int = 0
    origin: int = 0

    @property
    def active(self) -> bool:
        return self.remaining > 0

    @property
    def stride(self) -> int:
        return self.height + 1

    @property
    def added_rows(self) -> int:
        return self.count * self.stride

    def enter(self, height: int, count: int, origin: int) -> None:
        self.remaining = height
        self.height = height
        self.count = count
        self.origin = origin

    def advance(self) -> Optional[int]:
        """Consume one block row; returns the closing shift once the block ends."""
        if not self.active:
            return None
        self.remaining -= 1
        if self.remaining:
            return None
        return self.close()

    def close(self) -> int:
        shift = self.origin + self.added_rows
        self.remaining = self.height = self.count = self.origin = 0
        return shift


class DataSchemaBuilder:
    """Expands a canonical template grid against a flattened data map."""

    def __init__(self, data: Mapping[str, Any], merges: List[MergeRange], schema: Schema) -> None:
        self._data = data
        self._merges = list(merges)
        self._schema = schema
        self._positions: Dict[int, int] = {}
        self._deleted: set[int] = set()
        self._first_row = 1
        self._final_shift = 0

    @property
    def merges(self) -> List[MergeRange]:
        """Working merge list: template merges plus ones created by column expansion."""
        return list(self._merges)

    # ------------------------------------------------------------------ scan

    def _count_siblings(self, key: str, first: bool) -> int:
        qty = 0
        pattern: Optional[str] = key
        while (pattern := increment_path(pattern, first)) is not None and pattern in self._data:
            qty += 1
        return qty

    def _scan(self, cells: Row) -> Tuple[int, int, Optional[int]]:
        """Return (row count, column count, column anchor) for one template row."""

        rows = columns = 0
        anchor: Optional[int] = None
        for col in sorted(cells):
            for marker in scan_markers(cells[col]):
                if marker.modifier is not Modifier.NONE or marker.key not in self._data:
                    continue
                if not is_repeatable(marker.path):
                    continue
                rows = max(rows, self._count_siblings(marker.key, first=True))
                qty = self._count_siblings(marker.key, first=False)
                if qty:
                    columns = max(columns, qty)
                    anchor = col
        return rows, columns, anchor

    def should_delete(self, cells: Row) -> bool:
        """True when a row-scoped condition (``[=path]`` / ``[!path]``) fails."""

        return any(
            marker.modifier.row_scoped and marker.is_suppressed(self._data)
            for value in cells.values()
            for marker in scan_markers(value)
        )

    # ------------------------------------------------------------- columns

    def _horizontal_span(self, col: int, row: int) -> int:
        for merge in self._merges:
            if merge.anchored_at(col, row) and not merge.is_vertical:
                return merge.width
        return 0

    def _expand_columns(self, cells: Row, row: int, out_row: int, anchor: int, count: int) -> None:
        schema = self._schema
        span = self._horizontal_span(anchor, row)
        value = cells.get(anchor)
        cursor = anchor + span
        for _ in range(count):
            cursor += 1
            value = increment_markers(value, first=False)
            cells[cursor] = value
            schema.copy_style(anchor, out_row, cursor, out_row)
            schema.copy_cell_format(anchor, out_row, cursor, out_row)
            schema.copy_width(anchor, cursor)

            if span:
                start = cursor
                for offset in range(1, span + 1):
                    cursor += 1
                    schema.copy_style(anchor + offset, out_row, cursor, out_row)
                    schema.copy_width(anchor + offset, cursor)
                schema.merge_cells(MergeRange(start, out_row, cursor, out_row))
                self._merges.append(MergeRange(start, row, cursor, row))

    # ---------------------------------------------------------------- rows

    def _anchored_merges(self, col: int, row: int) -> List[MergeRange]:
        return [merge for merge in self._merges if merge.anchored_at(col, row)]

    def _clamp_merges(self, row: int, limit: int) -> None:
        """Cut merges anchored in ``row`` to at most ``limit`` rows below it.

        Rows of an interleaved block are cloned one stride apart, so a merge
        may not reach past the block's last row.
        """

        clamped: List[MergeRange] = []
        for merge in self._merges:
            if merge.min_row == row and merge.height > limit:
                merge = merge.moved(row, row + limit)
                logger.debug("Merge clamped to block", extra={"merge": merge.coord})
                if merge.is_single_cell:
                    continue
            clamped.append(merge)
        self._merges = clamped

    def _repeat_template(self, cells: Row, row: int, track_height: bool) -> Tuple[Row, int]:
        """Cells that repeat, and the tallest marker-carrying merge anchored in the row."""

        template = dict(cells)
        height = 0
        for col in sorted(cells):
            for merge in self._anchored_merges(col, row):
                if not merge.is_vertical:
                    continue
                if not has_plain_marker(cells[col]):
                    template.pop(col, None)
                elif track_height:
                    height = max(height, merge.height)
        return template, height

    def _expand_rows(
        self,
        grid: Grid,
        template: Row,
        row: int,
        out_row: int,
        count: int,
        stride: int,
        emit_rows: bool,
    ) -> None:
        schema = self._schema
        current = template
        for offset in range(1, count + 1):
            current = {col: increment_markers(value, first=True) for col, value in current.items()}
            target = out_row + offset * stride
            grid[target] = dict(current)
            if emit_rows:
                schema.add_row(target)

            for col in sorted(current):
                schema.copy_style(col, out_row, col, target)
                schema.copy_cell_format(col, out_row, col, target)
                for merge in self._anchored_merges(col, row):
                    schema.merge_cells(
                        MergeRange(merge.min_col, target, merge.max_col, target + merge.height)
                    )
                    for extra in range(merge.min_col + 1, merge.max_col + 1):
                        schema.copy_style(extra, out_row, extra, target)

            if emit_rows:
                for filler in range(1, stride):
                    schema.add_row(target + filler)

    # ---------------------------------------------------------------- pass

    def build(self, values: Grid) -> Grid:
        """Expand ``values`` and return the grid keyed by output row index."""

        grid: Grid = {}
        if not values:
            self._remap_merges()
            return grid

        first, last = min(values), max(values)
        self._first_row = first
        rows = {row: dict(values.get(row, {})) for row in range(first, last + 1)}

        shift = 0
        state = InterleaveState()
        for row, original in rows.items():
            out_row = row + shift
            row_count, col_count, col_anchor = self._scan(original)
            cells = {col: fill_wildcards(value) for col, value in original.items()}

            if not state.active and self.should_delete(cells):
                logger.debug("Row deleted by condition", extra={"row": row, "output_row": out_row})
                self._schema.delete_row(out_row)
                self._positions[row] = out_row
                self._deleted.add(row)
                shift -= 1
                continue

            self._positions[row] = out_row
            if state.active:
                row_count = state.count

            if not row_count:
                cells = {
                    col: value for col, value in cells.items() if has_marker(value) or is_formula(value)
                }
                if not cells:
                    continue

            if col_count and col_anchor is not None:
                logger.debug(
                    "Column expansion",
                    extra={"row": row, "column": col_anchor, "count": col_count},
                )
                self._expand_columns(cells, row, out_row, col_anchor, col_count)

            grid[out_row] = dict(cells)
            if not row_count:
                continue

            if state.active:
                self._clamp_merges(row, state.remaining - 1)
                template, _ = self._repeat_template(cells, row, track_height=False)
                self._expand_rows(grid, template, row, out_row, row_count, state.stride, emit_rows=False)
                closing = state.advance()
                if closing is not None:
                    shift = closing
                continue

            template, height = self._repeat_template(cells, row, track_height=True)
            logger.debug(
                "Row expansion",
                extra={"row": row, "output_row": out_row, "count": row_count, "merge_height": height},
            )
            self._expand_rows(grid, template, row, out_row, row_count, height + 1, emit_rows=True)
            if height:
                state.enter(height, row_count, shift)
            else:
                shift += row_count

        if state.active:
            shift = state.close()
        self._final_shift = shift
        self._remap_merges()
        return grid

    def _position(self, row: int) -> int:
        if row in self._positions:
            return self._positions[row]
        if row < self._first_row:
            return row
        return row + self._final_shift

    def _remap_merges(self) -> None:
        """Emit every template merge at its output position."""

        for merge in self._merges:
            if merge.min_row in self._deleted:
                continue
            top = self._position(merge.min_row)
            bottom = self._position(merge.max_row) - (1 if merge.max_row in self._deleted else 0)
            moved = merge.moved(top, max(top, bottom))
            if moved.is_single_cell:
                continue
            self._schema.merge_cells(moved)
