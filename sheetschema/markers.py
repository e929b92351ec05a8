"""Marker syntax: tokenizing scan, path rewriting and index arithmetic."""

# Module responsibilities:
# - Locate ``[<modifier><path>]`` markers inside cell text without regex callbacks.
# - Rewrite marker paths (wildcards, numeric segment increments).
# - Evaluate conditional modifiers against a flattened data map.

from __future__ import annotations

import string
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterator, List, Mapping, Optional

from .data import path_is_set

WILDCARD = "*"
_PATH_START = frozenset(string.ascii_letters + "_")
_PATH_CHARS = frozenset(string.ascii_letters + string.digits + "._" + WILDCARD)


class Modifier(Enum):
    """Conditional prefix carried by a marker."""

    NONE = ""
    NOT = "!"
    EQ = "="
    CELL_NOT = "$!"
    CELL_EQ = "$="

    @property
    def is_conditional(self) -> bool:
        return self is not Modifier.NONE

    @property
    def cell_scoped(self) -> bool:
        return self in (Modifier.CELL_NOT, Modifier.CELL_EQ)

    @property
    def row_scoped(self) -> bool:
        return self in (Modifier.NOT, Modifier.EQ)


@dataclass(frozen=True)
class Marker:
    """One marker occurrence; ``start``/``end`` index into the scanned text."""

    start: int
    end: int
    modifier: Modifier
    prefix: str
    path: str

    @property
    def text(self) -> str:
        return f"[{self.prefix}{self.path}]"

    @property
    def key(self) -> str:
        """Data map key addressed by the marker, wildcards read as index 0."""
        return normalize_wildcards(self.path)

    def with_path(self, path: str) -> str:
        return f"[{self.prefix}{path}]"

    def is_suppressed(self, data: Mapping[str, Any]) -> bool:
        """Whether the condition asks for the owning cell or row to be dropped.

        ``=`` drops when the path and all its descendants are unset, ``!``
        drops when the path or any descendant is set. Plain markers never drop.
        """
        if self.modifier in (Modifier.EQ, Modifier.CELL_EQ):
            return not path_is_set(self.key, data)
        if self.modifier in (Modifier.NOT, Modifier.CELL_NOT):
            return path_is_set(self.key, data)
        return False


def _read_marker(text: str, start: int) -> Optional[Marker]:
    idx = start + 1
    length = len(text)
    cell_scoped = idx < length and text[idx] == "$"
    if cell_scoped:
        idx += 1
    op = text[idx] if idx < length else ""
    if op in ("!", "="):
        idx += 1
        while idx < length and text[idx].isspace():
            idx += 1
        modifier = Modifier(("$" if cell_scoped else "") + op)
    elif cell_scoped:
        return None
    else:
        modifier = Modifier.NONE

    path_start = idx
    if idx >= length or text[idx] not in _PATH_START:
        return None
    while idx < length and text[idx] in _PATH_CHARS:
        idx += 1
    if idx >= length or text[idx] != "]":
        return None
    return Marker(
        start=start,
        end=idx + 1,
        modifier=modifier,
        prefix=text[start + 1 : path_start],
        path=text[path_start:idx],
    )


def iter_markers(text: str) -> Iterator[Marker]:
    """Yield markers left to right; malformed brackets are skipped."""

    pos = 0
    while True:
        start = text.find("[", pos)
        if start < 0:
            return
        marker = _read_marker(text, start)
        if marker is None:
            pos = start + 1
            continue
        yield marker
        pos = marker.end


def scan_markers(value: Any) -> List[Marker]:
    if not isinstance(value, str):
        return []
    return list(iter_markers(value))


def has_marker(value: Any) -> bool:
    return bool(scan_markers(value))


def has_plain_marker(value: Any) -> bool:
    return any(m.modifier is Modifier.NONE for m in scan_markers(value))


def rewrite_markers(text: str, replace: Callable[[Marker], Optional[str]]) -> str:
    """Rebuild ``text`` with each marker replaced by ``replace(marker)``.

    A ``None`` replacement keeps the marker verbatim.
    """

    parts: List[str] = []
    pos = 0
    for marker in iter_markers(text):
        parts.append(text[pos : marker.start])
        replacement = replace(marker)
        parts.append(marker.text if replacement is None else replacement)
        pos = marker.end
    parts.append(text[pos:])
    return "".join(parts)


def normalize_wildcards(path: str) -> str:
    return ".".join("0" if segment == WILDCARD else segment for segment in path.split("."))


def wildcard_indices(path: str) -> str:
    """Turn every ``0`` index after the root segment into a wildcard."""
    head, *rest = path.split(".")
    return ".".join([head] + [WILDCARD if segment == "0" else segment for segment in rest])


def is_repeatable(path: str) -> bool:
    """True for ``*`` paths and paths whose indices are all ``0``.

    ``[items.1.sku]`` is a fixed reference and never drives expansion.
    """
    segments = path.split(".")
    if WILDCARD in segments:
        return True
    numeric = [segment for segment in segments if segment.isdigit()]
    return bool(numeric) and all(segment == "0" for segment in numeric)


def increment_path(path: str, first: bool, step: int = 1) -> Optional[str]:
    """Add ``step`` to the first (row) or last (column) numeric segment.

    Last-segment increments need at least two numeric segments, so a plain
    list index never drives column expansion. Returns None when no segment
    qualifies.
    """

    segments = path.split(".")
    numeric = [idx for idx, segment in enumerate(segments) if segment.isdigit()]
    if not numeric or (not first and len(numeric) < 2):
        return None
    target = numeric[0] if first else numeric[-1]
    segments[target] = str(int(segments[target]) + step)
    return ".".join(segments)


def increment_markers(value: Any, first: bool, step: int = 1) -> Any:
    """Increment every marker in a cell; non-string cells pass through."""

    if not isinstance(value, str):
        return value

    def _bump(marker: Marker) -> Optional[str]:
        path = increment_path(marker.key, first, step)
        return None if path is None else marker.with_path(path)

    return rewrite_markers(value, _bump)


def fill_wildcards(value: Any) -> Any:
    """Replace wildcard segments with index 0 in every marker of a cell."""

    if not isinstance(value, str):
        return value
    return rewrite_markers(
        value,
        lambda marker: marker.with_path(marker.key) if WILDCARD in marker.path else None,
    )
