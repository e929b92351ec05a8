"""Rendering schema produced by the compiler and consumed by a renderer."""

# Module responsibilities:
# - Record row actions, resolved cell values, merges and copy instructions in order.
# - Serialize the schema for renderers and previews.

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Set, Tuple

import pandas as pd
from openpyxl.utils import column_index_from_string, get_column_letter

from .merges import MergeRange

CellKey = Tuple[int, str]
CopyPair = Tuple[str, str]


class RowActionKind(str, Enum):
    ADD = "add"
    DELETE = "delete"


@dataclass(frozen=True)
class RowAction:
    """Insert a blank row at ``row`` or delete ``row``, in output coordinates."""

    action: RowActionKind
    row: int

    @property
    def is_add(self) -> bool:
        return self.action is RowActionKind.ADD

    def to_dict(self) -> Dict[str, Any]:
        return {"action": self.action.value, "row": self.row}


def _coordinate(col: int | str, row: int) -> str:
    letter = col if isinstance(col, str) else get_column_letter(col)
    return f"{letter}{row}"


def _letter(col: int | str) -> str:
    return col if isinstance(col, str) else get_column_letter(col)


@dataclass
class Schema:
    """Ordered record of everything a renderer must apply to the template.

    Renderers apply ``rows`` first (in order), then the copy instructions,
    then ``cells``, then ``merges``.
    """

    rows: List[RowAction] = field(default_factory=list)
    cells: Dict[CellKey, Any] = field(default_factory=dict)
    merges: Set[str] = field(default_factory=set)
    style_copies: List[CopyPair] = field(default_factory=list)
    format_copies: List[CopyPair] = field(default_factory=list)
    width_copies: List[CopyPair] = field(default_factory=list)

    def add_row(self, row: int) -> None:
        self.rows.append(RowAction(RowActionKind.ADD, row))

    def delete_row(self, row: int) -> None:
        self.rows.append(RowAction(RowActionKind.DELETE, row))

    def add_data(self, row: int, col: int | str, value: Any) -> None:
        self.cells[(row, _letter(col))] = value

    def merge_cells(self, merge: MergeRange | str) -> None:
        self.merges.add(str(merge))

    def copy_style(self, src_col: int | str, src_row: int, dst_col: int | str, dst_row: int) -> None:
        self.style_copies.append((_coordinate(src_col, src_row), _coordinate(dst_col, dst_row)))

    def copy_cell_format(self, src_col: int | str, src_row: int, dst_col: int | str, dst_row: int) -> None:
        self.format_copies.append((_coordinate(src_col, src_row), _coordinate(dst_col, dst_row)))

    def copy_width(self, src_col: int | str, dst_col: int | str) -> None:
        self.width_copies.append((_letter(src_col), _letter(dst_col)))

    def merge_ranges(self) -> List[MergeRange]:
        return [MergeRange.parse(value) for value in sorted(self.merges)]

    def sorted_cells(self) -> List[Tuple[int, str, Any]]:
        ordered = sorted(self.cells.items(), key=lambda item: (item[0][0], column_index_from_string(item[0][1])))
        return [(row, col, value) for (row, col), value in ordered]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rows": [action.to_dict() for action in self.rows],
            "cells": {f"{col}{row}": value for row, col, value in self.sorted_cells()},
            "merges": sorted(self.merges),
            "styleCopies": [list(pair) for pair in self.style_copies],
            "formatCopies": [list(pair) for pair in self.format_copies],
            "widthCopies": [list(pair) for pair in self.width_copies],
        }

    def cells_frame(self) -> pd.DataFrame:
        """Resolved cells as a ``row``/``column``/``value`` DataFrame."""

        return pd.DataFrame(self.sorted_cells(), columns=["row", "column", "value"])
