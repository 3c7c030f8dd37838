"""Unit tests for the Exa search provider."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
import requests

from knowledge_rag.errors import ProviderUnavailableError
from knowledge_rag.ingestion.search import ExaSearchProvider


def _response(body: dict) -> MagicMock:
    return MagicMock(json=MagicMock(return_value=body), raise_for_status=MagicMock())


class TestExaSearchProvider:
    def test_unavailable_without_key(self) -> None:
        provider = ExaSearchProvider("")
        assert not provider.is_available()
        with pytest.raises(ProviderUnavailableError):
            provider.search_and_fetch("fees", 3, ["aven.com"])

    @patch("knowledge_rag.ingestion.search.requests.post")
    def test_request_shape(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response({"results": []})
        provider = ExaSearchProvider("secret", base_url="https://exa.test/", timeout=5)

        provider.search_and_fetch("aven fees", 40, ["aven.com"])

        args, kwargs = mock_post.call_args
        assert args[0] == "https://exa.test/search_and_contents"
        assert kwargs["headers"]["x-api-key"] == "secret"
        assert kwargs["timeout"] == 5
        payload = kwargs["json"]
        assert payload["query"] == "aven fees"
        assert payload["num_results"] == 25
        assert payload["include_domains"] == ["aven.com"]
        assert payload["type"] == "neural"
        assert payload["contents"] == {"max_characters": 12000, "include_html": False, "summary": True}

    @patch("knowledge_rag.ingestion.search.requests.post")
    def test_num_results_floor(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response({"results": []})
        ExaSearchProvider("secret").search_and_fetch("q", 0, [])
        assert mock_post.call_args.kwargs["json"]["num_results"] == 1

    @patch("knowledge_rag.ingestion.search.requests.post")
    def test_parses_results_and_drops_missing_urls(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response({
            "results": [
                {"url": "https://aven.com/a", "title": "A", "content": {"text": "body", "summary": "sum"}},
                {"title": "no url"},
                {"url": "https://aven.com/b", "text": "flat text"},
            ]
        })
        results = ExaSearchProvider("secret").search_and_fetch("q", 5, [])

        assert [r.url for r in results] == ["https://aven.com/a", "https://aven.com/b"]
        assert results[0].text == "body"
        assert results[0].summary == "sum"
        assert results[1].text == "flat text"

    @patch("knowledge_rag.ingestion.search.requests.post")
    def test_http_error_becomes_provider_unavailable(self, mock_post: MagicMock) -> None:
        mock_post.side_effect = requests.HTTPError("503")
        with pytest.raises(ProviderUnavailableError, match=r"\[exa\]"):
            ExaSearchProvider("secret").search_and_fetch("q", 5, [])
