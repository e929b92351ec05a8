"""Short marker path -> fully qualified data map path."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Set

from .markers import Marker, normalize_wildcards, rewrite_markers, wildcard_indices
from .utils.log import get_logger

logger = get_logger("resolver")

Grid = Dict[int, Dict[int, Any]]


class MarkerPathResolver:
    """Rewrites markers such as ``[sku]`` to ``[items.*.sku]`` against a data map."""

    def __init__(self, data: Mapping[str, Any]) -> None:
        self._data = data
        self._prefixes: Set[str] = set()
        for key in data:
            segments = key.split(".")
            for size in range(1, len(segments)):
                self._prefixes.add(".".join(segments[:size]))

    def is_short_path(self, path: str) -> bool:
        """True when ``path`` is a key or a dotted prefix of one."""
        return path in self._data or path in self._prefixes

    def resolve_path(self, path: str) -> Optional[str]:
        """Return the long path for ``path``, or None when it stays unresolved."""

        if normalize_wildcards(path) in self._data:
            return path

        result = ""
        for segment in path.split("."):
            grew = True
            while grew:
                grew = False
                candidate = f"{result}.{segment}" if result else segment
                if self.is_short_path(candidate):
                    result = candidate
                    grew = True
                if result and self.is_short_path(f"{result}.0"):
                    result = f"{result}.0"
                    grew = True
                if result in self._data:
                    break
            if result in self._data:
                break

        if result not in self._data or isinstance(self._data[result], (Mapping, list, tuple)):
            return None
        return wildcard_indices(result)

    def _rewrite(self, marker: Marker) -> Optional[str]:
        resolved = self.resolve_path(marker.path)
        if resolved is None:
            logger.debug("Marker left unresolved", extra={"marker": marker.text})
            return None
        if resolved == marker.path:
            return None
        return marker.with_path(resolved)

    def resolve_value(self, value: Any) -> Any:
        if not isinstance(value, str) or "[" not in value:
            return value
        return rewrite_markers(value, self._rewrite)

    def resolve(self, values: Grid) -> Grid:
        """Return a copy of ``values`` with every marker canonicalized."""

        return {
            row: {col: self.resolve_value(value) for col, value in columns.items()}
            for row, columns in values.items()
        }
