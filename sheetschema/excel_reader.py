"""Excel input helpers: turn a template worksheet into compiler inputs."""

# Module responsibilities:
# - Load template workbooks with openpyxl and select the template sheet.
# - Extract the sparse value grid and merged ranges the compiler consumes.

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from openpyxl import Workbook, load_workbook
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from .errors import ConfigError
from .utils.log import get_logger

logger = get_logger("excel_reader")

TemplateValues = Dict[int, Dict[str, Any]]


def load_template(path: Path) -> Workbook:
    """Open a template workbook.

    Raises:
        FileNotFoundError: When the template workbook is absent.
    """

    if not path.exists():
        raise FileNotFoundError(f"Template workbook not found: {path}")
    logger.info("Loading template workbook", extra={"path": str(path)})
    return load_workbook(path)


def select_sheet(workbook: Workbook, sheet: Optional[str] = None) -> Worksheet:
    if sheet is None:
        return workbook.active
    if sheet not in workbook.sheetnames:
        raise ConfigError(f"Sheet '{sheet}' not found in template")
    return workbook[sheet]


def read_template(ws: Worksheet) -> Tuple[TemplateValues, List[str]]:
    """Return ``(values, merge_cells)`` for a template worksheet.

    Empty cells and merged placeholders are skipped; values are keyed by
    row and column letter.
    """

    values: TemplateValues = {}
    for row in ws.iter_rows():
        for cell in row:
            if cell.value is None or cell.value == "":
                continue
            values.setdefault(cell.row, {})[get_column_letter(cell.column)] = cell.value
    merges = [str(merged.coord) for merged in ws.merged_cells.ranges]

    logger.info(
        "Template sheet read",
        extra={"sheet": ws.title, "rows": len(values), "merges": len(merges)},
    )
    return values, merges
