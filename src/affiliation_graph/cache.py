"""
Flat JSON key-value caches persisted between runs.

A missing cache file loads as an empty cache. Values are whatever JSON
can hold; the resolution cache stores record text, or null for
identifiers that could not be found.
"""

import json
import logging
from pathlib import Path
from typing import Any, Iterator, MutableMapping, Optional

logger = logging.getLogger(__name__)


class JsonCache(MutableMapping[str, Any]):
    """Dict-like cache backed by a single JSON object file."""

    def __init__(self, path: Optional[Path] = None, data: Optional[dict[str, Any]] = None):
        self.path = Path(path) if path is not None else None
        self._data: dict[str, Any] = dict(data or {})

    @classmethod
    def load(cls, path: str | Path) -> "JsonCache":
        """Load a cache from ``path``; an absent file gives an empty cache."""
        path = Path(path)
        if not path.exists():
            logger.debug(f"Cache file {path} not found, starting empty")
            return cls(path)
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Cache file {path} must contain a JSON object, got {type(data).__name__}")
        logger.debug(f"Loaded {len(data)} entries from {path}")
        return cls(path, data)

    def save(self, path: Optional[str | Path] = None) -> None:
        """Write the cache to ``path`` (defaults to the path it was loaded from)."""
        target = Path(path) if path is not None else self.path
        if target is None:
            raise ValueError("No path given for an in-memory cache")
        target.parent.mkdir(parents=True, exist_ok=True)
        tmp = target.with_name(target.name + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(self._data, f)
        tmp.replace(target)
        logger.info(f"Saved {len(self._data)} entries to {target}")

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._data[key] = value

    def __delitem__(self, key: str) -> None:
        del self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data
