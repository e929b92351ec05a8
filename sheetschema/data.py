"""Payload helpers: convert caller objects to plain data and flatten to dot paths."""

# Module responsibilities:
# - Turn objects exposing a conversion capability into plain mappings/lists.
# - Flatten nested payloads into a ``path -> scalar`` data map.
# - Decide whether a path counts as "set" for conditional markers.

from __future__ import annotations

import dataclasses
from typing import Any, Callable, Dict, Mapping, Optional

import pandas as pd
from pydantic import BaseModel

DataMap = Dict[str, Any]
Converter = Callable[[Any], Any]


def _frame_records(frame: pd.DataFrame) -> list[dict[str, Any]]:
    cleaned = frame.astype(object).where(pd.notna(frame), None)
    return cleaned.to_dict(orient="records")


def canonize_data(data: Any, converter: Optional[Converter] = None) -> Any:
    """Convert a top-level payload object into plain data.

    Args:
        data: Mapping, list or object exposing a conversion capability.
        converter: Optional caller-supplied conversion taking precedence.

    Returns:
        Plain data; nested objects are converted lazily by :func:`flatten`.
    """

    if converter is not None:
        return converter(data)
    if isinstance(data, BaseModel):
        return data.model_dump()
    if isinstance(data, pd.DataFrame):
        return _frame_records(data)
    if dataclasses.is_dataclass(data) and not isinstance(data, type):
        return dataclasses.asdict(data)
    to_dict = getattr(data, "to_dict", None)
    if callable(to_dict) and not isinstance(data, Mapping):
        return to_dict()
    return data


def _children(value: Any) -> Optional[list[tuple[str, Any]]]:
    value = canonize_data(value)
    if isinstance(value, Mapping):
        return [(str(key), item) for key, item in value.items()]
    if isinstance(value, (list, tuple)):
        return [(str(index), item) for index, item in enumerate(value)]
    return None


def flatten(data: Any, prefix: str = "") -> DataMap:
    """Flatten nested mappings/lists into dot-separated paths.

    Empty containers are dropped; list elements are keyed by position
    (``items.0.sku``).
    """

    result: DataMap = {}
    children = _children(data)
    if children is None:
        return result
    for key, value in children:
        path = f"{prefix}{key}"
        nested = _children(value)
        if nested is None:
            result[path] = value
        elif nested:
            result.update(flatten(value, f"{path}."))
    return result


def is_set(value: Any) -> bool:
    """Return False for absent, null, empty string, zero or empty container."""

    if value is None:
        return False
    if pd.api.types.is_scalar(value) and pd.isna(value):
        return False
    try:
        return bool(value)
    except (TypeError, ValueError):
        return True


def path_is_set(path: str, data: Mapping[str, Any]) -> bool:
    """True when ``path`` or any of its dotted descendants holds a set value."""

    if is_set(data.get(path)):
        return True
    prefix = f"{path}."
    return any(key.startswith(prefix) and is_set(value) for key, value in data.items())
