"""`sheetschema` compiles spreadsheet templates plus data into rendering schemas."""

# Module responsibilities:
# - Re-export the compiler entry points and the openpyxl adapters as a stable API surface.

from __future__ import annotations

from .errors import ConfigError, MergeRangeError, SheetSchemaError, SubstitutionError, TemplateError
from .excel_reader import read_template
from .excel_writer import apply_schema, render_template
from .merges import MergeRange
from .parser import SchemaParser, compile_schema
from .schema import RowAction, RowActionKind, Schema

__all__ = [
    "SchemaParser",
    "compile_schema",
    "Schema",
    "RowAction",
    "RowActionKind",
    "MergeRange",
    "read_template",
    "apply_schema",
    "render_template",
    "SheetSchemaError",
    "ConfigError",
    "MergeRangeError",
    "SubstitutionError",
    "TemplateError",
]

__version__ = "0.1.0"
