"""JSON project configuration addressed by dotted key paths.

A multi-app workspace keeps each sub-project's settings under
``projects.<id>`` in a single shared file; a ``ProjectConfigFile`` created
with that prefix reads and writes inside it transparently.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

_MISSING = object()


class ProjectConfigFile:
    """Read/write access to one JSON config file.

    Args:
        path: The JSON file. It is created on first write if missing.
        prefix: Dotted key prepended to every ``get``/``set``.
    """

    def __init__(self, path: str | Path, prefix: str = "") -> None:
        self.path = Path(path)
        self.prefix = prefix

    def _key(self, key: str) -> list[str]:
        full = f"{self.prefix}.{key}" if self.prefix and key else (self.prefix or key)
        return [part for part in full.split(".") if part]

    def read(self) -> dict[str, Any]:
        """Return the whole file as a dict; empty if the file does not exist."""
        if not self.path.exists():
            return {}
        data = json.loads(self.path.read_text(encoding="utf-8"))
        return data if isinstance(data, dict) else {}

    def write(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")

    def get(self, key: str = "", default: Any = None) -> Any:
        node: Any = self.read()
        for part in self._key(key):
            if not isinstance(node, dict):
                return default
            node = node.get(part, _MISSING)
            if node is _MISSING:
                return default
        return node

    def set(self, key: str, value: Any) -> None:
        parts = self._key(key)
        if not parts:
            raise ValueError("Cannot set the config root")

        data = self.read()
        node = data
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[parts[-1]] = value
        self.write(data)

