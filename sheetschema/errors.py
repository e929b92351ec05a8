"""Custom exceptions used across sheetschema."""


class SheetSchemaError(Exception):
    """Base error for the package."""


class ConfigError(SheetSchemaError):
    """Configuration related error."""


class MergeRangeError(ConfigError, ValueError):
    """Raised when a merge range string is not ``<col><row>:<col><row>``."""

    def __init__(self, value: object) -> None:
        super().__init__(f"Malformed merge range: {value!r}")
        self.value = value


class TemplateError(SheetSchemaError):
    """Raised when the template grid or workbook cannot be used."""


class SubstitutionError(SheetSchemaError, TypeError):
    """Raised when a data value cannot be written into cell text."""
