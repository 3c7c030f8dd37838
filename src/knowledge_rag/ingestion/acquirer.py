"""Content acquisition — search-provider results plus direct-fetch fallback.

Protocol
--------
1. Run every topic query against the search provider, each asking for
   ``max(limit // len(queries), 3)`` results from the domain allow-list.
2. Keep results whose cleaned text is at least ``MIN_CONTENT_LENGTH`` long.
3. With fewer than ``min_results`` accepted, fetch the fallback URLs
   directly and strip their HTML.
4. Deduplicate by URL without query string (first wins, order kept).
5. Truncate to ``limit``.

One failing query or URL is logged and counts as zero results; it never
aborts the acquisition.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable

import requests

from knowledge_rag.ingestion.models import MIN_CONTENT_LENGTH, SourceDocument
from knowledge_rag.ingestion.normalizer import clean_text, html_to_text, normalize_url
from knowledge_rag.ingestion.search import ContentSearchProvider, SearchResult

logger = logging.getLogger(__name__)

_DEFAULT_HEADERS = {
    "User-Agent": "knowledge-rag/0.1 (+content acquisition)",
    "Accept": "text/html,application/xhtml+xml;q=0.9,*/*;q=0.8",
}

Fetcher = Callable[[str], str]


def dedupe_by_url(docs: Iterable[SourceDocument]) -> list[SourceDocument]:
    """Keep the first document per normalised URL, preserving order."""
    seen: set[str] = set()
    out: list[SourceDocument] = []
    for doc in docs:
        key = normalize_url(doc.url)
        if key in seen:
            continue
        seen.add(key)
        out.append(doc)
    return out


def to_source_document(result: SearchResult, provider: str) -> SourceDocument | None:
    """Clean a raw search hit; ``None`` when what remains is too short."""
    text = clean_text(result.text or result.summary or "")
    if len(text) < MIN_CONTENT_LENGTH:
        return None
    return SourceDocument(url=result.url, title=result.title or result.url, text=text, provider=provider)


class HttpFetcher:
    """GET a URL and return its body, retrying transient failures.

    Parameters
    ----------
    timeout:
        Per-request timeout in seconds.
    max_retries:
        Attempts before giving up; waits ``2 ** attempt`` seconds between.
    headers:
        Extra HTTP headers.
    """

    def __init__(self, *, timeout: float = 15.0, max_retries: int = 3, headers: dict[str, str] | None = None) -> None:
        self.timeout = timeout
        self.max_retries = max_retries
        self.headers = {**_DEFAULT_HEADERS, **(headers or {})}

    def __call__(self, url: str) -> str:
        last_exc: Exception | None = None
        for attempt in range(1, self.max_retries + 1):
            try:
                resp = requests.get(url, headers=self.headers, timeout=self.timeout)
                resp.raise_for_status()
                return resp.text
            except requests.RequestException as exc:
                last_exc = exc
                if attempt < self.max_retries:
                    wait = 2**attempt
                    logger.warning("Retry %d/%d for %s (wait %ds): %s", attempt, self.max_retries, url, wait, exc)
                    time.sleep(wait)
        raise RuntimeError(f"Failed to fetch {url} after {self.max_retries} attempts") from last_exc


class ContentAcquirer:
    """Produce a deduplicated, size-bounded set of cleaned documents.

    Parameters
    ----------
    search_provider:
        Search-and-fetch provider, or ``None`` to go straight to direct fetch.
    queries:
        Topic-targeted search queries.
    domains:
        Domain allow-list passed to the search provider.
    fallback_urls:
        Well-known pages fetched directly when search yields too little.
    fetcher:
        Callable returning raw HTML for a URL.  Defaults to :class:`HttpFetcher`.
    min_results:
        Accepted search documents below which the direct fallback runs.
    """

    def __init__(
        self,
        search_provider: ContentSearchProvider | None,
        *,
        queries: list[str],
        domains: list[str],
        fallback_urls: list[str],
        fetcher: Fetcher | None = None,
        min_results: int = 5,
    ) -> None:
        if not queries:
            raise ValueError("ContentAcquirer needs at least one query")
        self._provider = search_provider
        self.queries = list(queries)
        self.domains = list(domains)
        self.fallback_urls = list(fallback_urls)
        self._fetch = fetcher or HttpFetcher()
        self.min_results = min_results

    def acquire(self, limit: int = 15) -> list[SourceDocument]:
        """Collect up to *limit* documents."""
        if limit < 1:
            raise ValueError(f"limit must be >= 1, got {limit}")

        aggregated = self._search_all(limit)
        if len(aggregated) < self.min_results:
            logger.info("Search returned %d documents; fetching %d known pages", len(aggregated), len(self.fallback_urls))
            aggregated.extend(self._fetch_fallbacks())

        docs = dedupe_by_url(aggregated)[:limit]
        logger.info("Acquired %d documents", len(docs))
        return docs

    # -- internals ------------------------------------------------------------

    def _search_all(self, limit: int) -> list[SourceDocument]:
        provider = self._provider
        if provider is None or not provider.is_available():
            logger.warning("Search provider not configured; skipping search")
            return []

        per_query = max(limit // len(self.queries), 3)
        accepted: list[SourceDocument] = []
        for query in self.queries:
            try:
                results = provider.search_and_fetch(query, per_query, self.domains)
            except Exception as exc:  # noqa: BLE001
                logger.error("Search failed for %r: %s", query, exc)
                continue
            for result in results:
                doc = to_source_document(result, provider.provider_name)
                if doc is not None:
                    accepted.append(doc)
        return accepted

    def _fetch_fallbacks(self) -> list[SourceDocument]:
        docs: list[SourceDocument] = []
        for url in self.fallback_urls:
            try:
                text = html_to_text(self._fetch(url))
            except Exception as exc:  # noqa: BLE001
                logger.error("Direct fetch failed for %s: %s", url, exc)
                continue
            if len(text) >= MIN_CONTENT_LENGTH:
                docs.append(SourceDocument(url=url, title=url, text=text, provider="direct"))
            else:
                logger.debug("Discarding %s (%d chars after cleaning)", url, len(text))
        return docs
