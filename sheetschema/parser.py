"""Template + data -> rendering Schema."""

# Module responsibilities:
# - Canonicalize caller inputs into private working copies.
# - Run resolver -> builder -> formula rebaser -> substitution, strictly in order.

from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Optional

from openpyxl.utils import column_index_from_string

from .builder import DataSchemaBuilder
from .data import Converter, DataMap, canonize_data, flatten
from .errors import TemplateError
from .formulas import FormulaRebaser
from .merges import parse_merge_cells
from .resolver import MarkerPathResolver
from .schema import Schema
from .substitution import MarkerSubstitution
from .utils.log import get_logger

logger = get_logger("parser")

Values = Mapping[Any, Mapping[Any, Any]]


def _column_index(column: Any) -> int:
    if isinstance(column, int) and column > 0:
        return column
    if isinstance(column, str) and column.isalpha():
        try:
            return column_index_from_string(column.upper())
        except ValueError as exc:
            raise TemplateError(f"Invalid column: {column!r}") from exc
    raise TemplateError(f"Invalid column: {column!r}")


def parse_values(values: Values) -> Dict[int, Dict[int, Any]]:
    """Copy the sparse template grid with integer row/column keys in ascending order."""

    grid: Dict[int, Dict[int, Any]] = {}
    for row, columns in values.items():
        try:
            index = int(row)
        except (TypeError, ValueError) as exc:
            raise TemplateError(f"Invalid row: {row!r}") from exc
        if index < 1:
            raise TemplateError(f"Invalid row: {row!r}")
        cells = {_column_index(col): value for col, value in (columns or {}).items() if value is not None}
        grid[index] = dict(sorted(cells.items()))
    return dict(sorted(grid.items()))


def parse_data(data: Any, converter: Optional[Converter] = None) -> DataMap:
    return flatten(canonize_data(data, converter))


class SchemaParser:
    """Compiles a template grid and a data payload into a :class:`Schema`."""

    def __init__(self, converter: Optional[Converter] = None) -> None:
        self.converter = converter

    def schema(self, values: Values, data: Any, merge_cells: Iterable[str] = ()) -> Schema:
        schema = Schema()

        grid = parse_values(values)
        data_map = parse_data(data, self.converter)
        merges = parse_merge_cells(merge_cells)
        logger.info(
            "Compiling schema",
            extra={"rows": len(grid), "keys": len(data_map), "merges": len(merges)},
        )

        grid = MarkerPathResolver(data_map).resolve(grid)

        builder = DataSchemaBuilder(data_map, merges, schema)
        expanded = builder.build(grid)

        FormulaRebaser(schema.rows, schema.merge_ranges()).rebase(expanded)

        MarkerSubstitution(data_map).apply(expanded, schema)

        logger.info(
            "Schema compiled",
            extra={"row_actions": len(schema.rows), "cells": len(schema.cells), "merges": len(schema.merges)},
        )
        return schema


def compile_schema(
    values: Values,
    data: Any,
    merge_cells: Iterable[str] = (),
    *,
    converter: Optional[Converter] = None,
) -> Schema:
    """Functional entry point wrapping :meth:`SchemaParser.schema`."""

    return SchemaParser(converter=converter).schema(values, data, merge_cells)
