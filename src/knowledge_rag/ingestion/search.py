"""Content-search providers — query a search API and get page text back."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import requests
from pydantic import BaseModel

from knowledge_rag.errors import ProviderUnavailableError

logger = logging.getLogger(__name__)


class SearchResult(BaseModel):
    """One raw search hit with fetched contents (not yet cleaned)."""

    url: str
    title: str | None = None
    text: str | None = None
    summary: str | None = None


class ContentSearchProvider(ABC):
    """Search-and-fetch interface used by the content acquirer."""

    provider_name: str = "search"

    @abstractmethod
    def search_and_fetch(self, query: str, max_results: int, domains: list[str]) -> list[SearchResult]:
        """Return up to *max_results* pages for *query* restricted to *domains*.

        Raises :class:`~knowledge_rag.errors.ProviderUnavailableError` when
        the provider cannot be reached or rejects the request.
        """
        ...

    def is_available(self) -> bool:
        """Return ``True`` when a credential is configured."""
        return True


class ExaSearchProvider(ContentSearchProvider):
    """Exa ``/search_and_contents`` over plain HTTPS.

    Parameters
    ----------
    api_key:
        Exa API key.  Empty means the provider is unavailable.
    base_url:
        API root, overridable for proxies and tests.
    timeout:
        Per-request timeout in seconds.
    max_characters:
        Per-result cap on returned page text.
    """

    provider_name = "exa"

    _MAX_RESULTS_CAP = 25

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = "https://api.exa.ai",
        timeout: float = 20.0,
        max_characters: int = 12000,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._max_characters = max_characters

    def is_available(self) -> bool:
        return bool(self._api_key)

    def search_and_fetch(self, query: str, max_results: int, domains: list[str]) -> list[SearchResult]:
        if not self._api_key:
            raise ProviderUnavailableError("EXA_API_KEY not configured", self.provider_name)

        payload = {
            "query": query,
            "num_results": min(max(max_results, 1), self._MAX_RESULTS_CAP),
            "include_domains": domains,
            "type": "neural",
            "contents": {
                "max_characters": self._max_characters,
                "include_html": False,
                "summary": True,
            },
            "use_autoprompt": True,
        }
        try:
            resp = requests.post(
                f"{self._base_url}/search_and_contents",
                json=payload,
                headers={"Content-Type": "application/json", "x-api-key": self._api_key},
                timeout=self._timeout,
            )
            resp.raise_for_status()
            body = resp.json()
        except (requests.RequestException, ValueError) as exc:
            raise ProviderUnavailableError(f"search_and_contents failed: {exc}", self.provider_name) from exc

        results: list[SearchResult] = []
        for item in body.get("results") or []:
            url = item.get("url")
            if not url:
                continue
            content = item.get("content") or {}
            results.append(
                SearchResult(
                    url=url,
                    title=item.get("title"),
                    text=content.get("text", item.get("text")),
                    summary=content.get("summary", item.get("summary")),
                )
            )
        logger.debug("Exa returned %d results for %r", len(results), query)
        return results
