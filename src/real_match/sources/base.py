"""Base interface for off-platform listing sources."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Iterable

from ..errors import ValidationError
from ..models import OffPlatformSeller


@dataclass
class SourceResult:
    """Result of a source fetch operation."""

    sellers: list[OffPlatformSeller] = field(default_factory=list)
    source: str = ""
    errors: list[str] = field(default_factory=list)


def parse_sellers(items: Iterable[Any], source: str) -> SourceResult:
    """Parse raw feed items; malformed items are skipped and reported, duplicates keep the first."""
    result = SourceResult(source=source)
    seen: set[str] = set()
    for i, item in enumerate(items):
        if not isinstance(item, dict):
            result.errors.append(f"item {i}: expected an object, got {type(item).__name__}")
            continue
        try:
            seller = OffPlatformSeller.from_dict(item)
        except ValidationError as e:
            result.errors.append(f"item {i}: {e}")
            continue
        if seller.id in seen:
            result.errors.append(f"item {i}: duplicate id {seller.id}")
            continue
        seen.add(seller.id)
        result.sellers.append(seller)
    return result


class OffPlatformSource(ABC):
    """
    Abstract interface for off-platform seller catalogs.
    Implementations: JsonFileSource, HttpFeedSource.
    """

    @abstractmethod
    def fetch(self) -> SourceResult:
        """Fetch the full catalog. Transport failures are reported in ``errors``."""
        ...

    @property
    @abstractmethod
    def source_name(self) -> str:
        """Identifier for this data source."""
        ...
