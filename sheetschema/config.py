"""Render job configuration loaded from YAML."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, model_validator

from .errors import ConfigError


def load_payload(path: Path) -> Any:
    """Load a data payload from a ``.json`` or YAML file."""

    if not path.exists():
        raise ConfigError(f"Data file not found: {path}")
    with path.open("r", encoding="utf-8") as fh:
        if path.suffix.lower() == ".json":
            return json.load(fh)
        return yaml.safe_load(fh) or {}


class RenderJob(BaseModel):
    """One template rendering: template + data -> output workbook."""

    model_config = ConfigDict(extra="forbid")

    template: Path
    output: Path
    sheet: Optional[str] = None
    data: Optional[Dict[str, Any]] = None
    data_file: Optional[Path] = None
    dry_run: bool = False

    @model_validator(mode="after")
    def _check_data_source(self) -> "RenderJob":
        if (self.data is None) == (self.data_file is None):
            raise ValueError("exactly one of 'data' or 'data_file' must be given")
        return self

    @classmethod
    def from_yaml(cls, path: Path) -> "RenderJob":
        """Load a job file; relative paths resolve against its directory."""

        if not path.exists():
            raise ConfigError(f"Job file not found: {path}")
        with path.open("r", encoding="utf-8") as fh:
            payload = yaml.safe_load(fh)
        if not isinstance(payload, dict):
            raise ConfigError("Invalid job YAML structure (expected mapping)")
        try:
            job = cls.model_validate(payload)
        except ValidationError as exc:
            raise ConfigError(f"Invalid job file {path}: {exc}") from exc
        return job.relative_to(path.parent)

    def relative_to(self, base: Path) -> "RenderJob":
        def _resolve(value: Optional[Path]) -> Optional[Path]:
            if value is None or value.is_absolute():
                return value
            return base / value

        return self.model_copy(
            update={
                "template": _resolve(self.template),
                "output": _resolve(self.output),
                "data_file": _resolve(self.data_file),
            }
        )

    def load_data(self) -> Any:
        if self.data is not None:
            return self.data
        return load_payload(self.data_file)  # type: ignore[arg-type]


__all__ = ["RenderJob", "load_payload"]
