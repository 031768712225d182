"""Reading the optional ``ionic.starter.json`` shipped inside a starter."""

from __future__ import annotations

import json
from pathlib import Path

from appstart.models import StarterManifest


def read_starter_manifest(path: str | Path) -> StarterManifest:
    """Parse a starter manifest.

    Raises:
        FileNotFoundError: If the manifest does not exist.
        ValueError: If the file is not valid JSON or not a JSON object
            (``pydantic.ValidationError`` is a ``ValueError``).
    """
    raw = Path(path).read_text(encoding="utf-8")
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError(f"{path} does not contain a JSON object")
    return StarterManifest.model_validate(data)
