"""Final marker substitution: conditional blanking and literal values."""

from __future__ import annotations

from typing import Any, Dict, Mapping

from openpyxl.utils import get_column_letter

from .errors import SubstitutionError
from .markers import Marker, Modifier, rewrite_markers, scan_markers
from .schema import Schema
from .utils.log import get_logger

logger = get_logger("substitution")

Grid = Dict[int, Dict[int, Any]]


def _stringify(value: Any) -> str:
    return "" if value is None else str(value)


class MarkerSubstitution:
    """Replaces markers with data map values and writes cells into a Schema."""

    def __init__(self, data: Mapping[str, Any]) -> None:
        self._data = data

    def _interpolate(self, marker: Marker) -> str:
        if marker.key not in self._data:
            return ""
        value = self._data[marker.key]
        if callable(value):
            raise SubstitutionError(
                f"Value of {marker.text} is callable and cannot be used as part of a cell's text"
            )
        return _stringify(value)

    def substitute(self, value: Any) -> Any:
        """Resolve one cell; returns None for "no value"."""

        if not isinstance(value, str):
            return value

        markers = scan_markers(value)
        if any(m.modifier.cell_scoped and m.is_suppressed(self._data) for m in markers):
            return None

        text = rewrite_markers(value, lambda m: "" if m.modifier.is_conditional else None).strip()
        markers = scan_markers(text)
        if (
            len(markers) == 1
            and markers[0].text == text
            and markers[0].modifier is Modifier.NONE
            and markers[0].key in self._data
        ):
            resolved = self._data[markers[0].key]
            return None if isinstance(resolved, str) and not resolved else resolved

        text = rewrite_markers(text, self._interpolate).strip()
        return text or None

    def apply(self, grid: Grid, schema: Schema) -> None:
        """Write every cell of ``grid`` into ``schema`` in row/column order."""

        for row in sorted(grid):
            for col in sorted(grid[row]):
                schema.add_data(row, get_column_letter(col), self.substitute(grid[row][col]))
        logger.debug("Markers substituted", extra={"cells": len(schema.cells)})
