"""Off-platform listing sources."""

from .base import OffPlatformSource, SourceResult, parse_sellers
from .http_feed import HttpFeedSource
from .json_file import JsonFileSource

__all__ = [
    "OffPlatformSource",
    "SourceResult",
    "parse_sellers",
    "HttpFeedSource",
    "JsonFileSource",
]
