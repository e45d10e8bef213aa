"""Off-platform catalog from a local JSON export."""

from __future__ import annotations

import json
from pathlib import Path

from .base import OffPlatformSource, SourceResult, parse_sellers


class JsonFileSource(OffPlatformSource):
    """Reads a JSON array of listings, or an object with a ``sellers`` array."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    @property
    def source_name(self) -> str:
        return f"json_file:{self.path.name}"

    def fetch(self) -> SourceResult:
        if not self.path.exists():
            return SourceResult(source=self.source_name, errors=[f"File not found: {self.path}"])
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            return SourceResult(source=self.source_name, errors=[f"{self.path}: {e!s}"])

        if isinstance(data, dict):
            data = data.get("sellers", data.get("off_platform", []))
        if not isinstance(data, list):
            return SourceResult(source=self.source_name, errors=[f"{self.path}: expected a list of listings"])
        return parse_sellers(data, self.source_name)
