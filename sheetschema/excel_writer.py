"""Excel output helpers: apply a compiled Schema to an openpyxl worksheet."""

# Module responsibilities:
# - Apply schema actions in renderer order: rows, copies, cells, merges.
# - Keep template merges aligned while rows are inserted or deleted.
# - Render a template workbook end to end without destroying styles.

from __future__ import annotations

from copy import copy
from pathlib import Path
from typing import Any, List, Optional, Tuple

from openpyxl.utils.cell import range_boundaries
from openpyxl.worksheet.worksheet import Worksheet

from .data import Converter
from .excel_reader import load_template, read_template, select_sheet
from .parser import compile_schema
from .schema import RowAction, Schema
from .utils.log import get_logger

logger = get_logger("excel_writer")

Bounds = Tuple[int, int, int, int]


def _shift_bounds(bounds: Bounds, action: RowAction) -> Optional[Bounds]:
    min_col, min_row, max_col, max_row = bounds
    if action.is_add:
        if action.row <= min_row:
            return min_col, min_row + 1, max_col, max_row + 1
        if action.row <= max_row:
            return min_col, min_row, max_col, max_row + 1
        return bounds
    if action.row < min_row:
        return min_col, min_row - 1, max_col, max_row - 1
    if action.row <= max_row:
        if min_row == max_row or (min_col == max_col and max_row - min_row == 1):
            return None
        return min_col, min_row, max_col, max_row - 1
    return bounds


def _overlaps(left: Bounds, right: Bounds) -> bool:
    return not (
        left[2] < right[0] or left[0] > right[2] or left[3] < right[1] or left[1] > right[3]
    )


def _copy_style(ws: Worksheet, source: str, target: str) -> None:
    src, dst = ws[source], ws[target]
    dst.font = copy(src.font)
    dst.alignment = copy(src.alignment)
    dst.border = copy(src.border)
    dst.fill = copy(src.fill)
    dst.protection = copy(src.protection)


def _write_cell(ws: Worksheet, coordinate: str, value: Any) -> None:
    cell = ws[coordinate]
    if callable(value):
        result = value(ws, cell)
        if result is not None:
            cell.value = result
        return
    cell.value = value


def apply_schema(ws: Worksheet, schema: Schema) -> None:
    """Apply ``schema`` to a template worksheet in place."""

    template_merges: List[Bounds] = []
    for merged in list(ws.merged_cells.ranges):
        template_merges.append(range_boundaries(str(merged.coord)))
        ws.unmerge_cells(str(merged.coord))

    for action in schema.rows:
        if action.is_add:
            ws.insert_rows(action.row)
        else:
            ws.delete_rows(action.row)
        shifted = (_shift_bounds(bounds, action) for bounds in template_merges)
        template_merges = [bounds for bounds in shifted if bounds is not None]

    for source, target in schema.style_copies:
        _copy_style(ws, source, target)
    for source, target in schema.format_copies:
        ws[target].number_format = ws[source].number_format
    for source, target in schema.width_copies:
        ws.column_dimensions[target].width = ws.column_dimensions[source].width

    for row, col, value in schema.sorted_cells():
        _write_cell(ws, f"{col}{row}", value)

    declared = [range_boundaries(coord) for coord in sorted(schema.merges)]
    leftovers = [bounds for bounds in template_merges if not any(_overlaps(bounds, d) for d in declared)]
    for min_col, min_row, max_col, max_row in declared + leftovers:
        ws.merge_cells(start_row=min_row, start_column=min_col, end_row=max_row, end_column=max_col)

    logger.info(
        "Schema applied",
        extra={"sheet": ws.title, "row_actions": len(schema.rows), "cells": len(schema.cells)},
    )


def render_template(
    template_path: Path,
    data: Any,
    out_path: Path,
    *,
    sheet: Optional[str] = None,
    dry_run: bool = False,
    converter: Optional[Converter] = None,
) -> Path:
    """Render ``data`` into an Excel template.

    Args:
        template_path: Path to the template workbook.
        data: Nested payload (mapping, list, pydantic model, DataFrame ...).
        out_path: Output workbook path.
        sheet: Template sheet name; defaults to the active sheet.
        dry_run: When True, compile and log the plan without writing.
        converter: Optional payload conversion capability.

    Returns:
        The output path.

    Raises:
        FileNotFoundError: When the template workbook is absent.
        ConfigError: When the template sheet is missing.
    """

    workbook = load_template(template_path)
    ws = select_sheet(workbook, sheet)
    values, merges = read_template(ws)
    schema = compile_schema(values, data, merges, converter=converter)

    if dry_run:
        logger.info(
            "Dry run: would render template",
            extra={"output": str(out_path), "row_actions": len(schema.rows), "cells": len(schema.cells)},
        )
        return out_path

    apply_schema(ws, schema)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    workbook.save(out_path)
    logger.info("Workbook rendered", extra={"output": str(out_path)})
    return out_path
