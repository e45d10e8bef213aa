"""Off-platform catalog from an HTTP JSON feed."""

from __future__ import annotations

import logging
import os

import httpx

from .base import OffPlatformSource, SourceResult, parse_sellers

logger = logging.getLogger(__name__)


class HttpFeedSource(OffPlatformSource):
    """
    GETs a JSON feed of off-platform listings.
    The body may be a list of listings or an object with a ``sellers`` (or
    ``results``) array. Pass ``client`` to reuse a configured httpx.Client.
    """

    def __init__(
        self,
        url: str | None = None,
        token: str | None = None,
        timeout: float = 60,
        client: httpx.Client | None = None,
    ) -> None:
        self.url = url or os.environ.get("REAL_MATCH_FEED_URL", "")
        self.token = token or os.environ.get("REAL_MATCH_FEED_TOKEN", "")
        self.timeout = timeout
        self._client = client

    @property
    def source_name(self) -> str:
        return "http_feed"

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _get(self) -> httpx.Response:
        if self._client is not None:
            return self._client.get(self.url, headers=self._headers())
        with httpx.Client(timeout=self.timeout) as client:
            return client.get(self.url, headers=self._headers())

    def fetch(self) -> SourceResult:
        if not self.url:
            return SourceResult(
                source=self.source_name,
                errors=["REAL_MATCH_FEED_URL not set. Set env var or pass url."],
            )

        try:
            resp = self._get()
        except httpx.HTTPError as e:
            return SourceResult(source=self.source_name, errors=[f"{self.url}: {e!s}"])

        if resp.status_code != 200:
            return SourceResult(source=self.source_name, errors=[f"{self.url}: HTTP {resp.status_code}"])

        try:
            data = resp.json()
        except ValueError as e:
            return SourceResult(source=self.source_name, errors=[f"{self.url}: invalid JSON ({e!s})"])

        if isinstance(data, dict):
            data = data.get("sellers") or data.get("results") or []
        if not isinstance(data, list):
            return SourceResult(source=self.source_name, errors=[f"{self.url}: expected a list of listings"])

        result = parse_sellers(data, self.source_name)
        logger.info("Fetched %d off-platform listings (%d errors)", len(result.sellers), len(result.errors))
        return result
