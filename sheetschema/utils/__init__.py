"""Internal helpers for sheetschema."""
