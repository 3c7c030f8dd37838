"""Unit tests for sentence-bounded chunking and chunk ids."""

from __future__ import annotations

import pytest

from knowledge_rag.ingestion.chunker import build_chunks, chunk_id, chunk_text, split_sentences
from knowledge_rag.ingestion.models import SourceDocument


def _sentence(i: int, length: int = 90) -> str:
    """A sentence of exactly *length* characters ending in a period."""
    head = f"Fact {i:02d} about the card "
    return head + "x" * (length - len(head) - 1) + "."


class TestSplitSentences:
    def test_keeps_terminal_punctuation(self) -> None:
        assert split_sentences("One. Two! Three?") == ["One.", " Two!", " Three?"]

    def test_text_without_punctuation_is_one_unit(self) -> None:
        assert split_sentences("no punctuation here") == ["no punctuation here"]

    def test_trailing_fragment_preserved(self) -> None:
        text = "Complete sentence. trailing words"
        assert "".join(split_sentences(text)) == text


class TestChunkText:
    def test_uniform_sentences_fill_three_chunks(self) -> None:
        """2,300 chars of 90-char sentences at max_length=900 → 3 chunks."""
        text = "".join(_sentence(i) for i in range(25)) + "y" * 50
        assert len(text) == 2300

        chunks = chunk_text(text, max_length=900)

        assert len(chunks) == 3
        assert all(len(c) <= 900 for c in chunks)
        assert "".join(chunks) == text

    def test_chunks_are_stripped_and_non_empty(self) -> None:
        chunks = chunk_text("  First sentence.   Second sentence.  ", max_length=20)
        assert chunks == ["First sentence.", "Second sentence."]
        assert all(c == c.strip() and c for c in chunks)

    def test_oversized_sentence_passes_through(self) -> None:
        giant = "y" * 1500 + "."
        chunks = chunk_text(f"Short one. {giant} Short two.", max_length=900)
        assert giant in chunks
        assert all(len(c) <= 900 for c in chunks if c != giant)

    def test_deterministic(self) -> None:
        text = "".join(_sentence(i) for i in range(30))
        assert chunk_text(text, 400) == chunk_text(text, 400)

    def test_empty_text(self) -> None:
        assert chunk_text("") == []
        assert chunk_text("   ") == []

    def test_rejects_non_positive_max_length(self) -> None:
        with pytest.raises(ValueError, match="max_length"):
            chunk_text("Anything.", max_length=0)


class TestChunkIds:
    def test_stable_across_calls(self) -> None:
        assert chunk_id("https://www.aven.com/help", 2) == chunk_id("https://www.aven.com/help", 2)

    def test_query_string_does_not_change_identity(self) -> None:
        assert chunk_id("https://www.aven.com/?utm=1", 0) == chunk_id("https://www.aven.com/?utm=2", 0)

    def test_namespace_and_index_in_id(self) -> None:
        cid = chunk_id("https://www.aven.com/", 3, namespace="aven")
        assert cid.startswith("aven:")
        assert cid.endswith(":3")

    def test_build_chunks_attaches_position_metadata(self) -> None:
        doc = SourceDocument(
            url="https://www.aven.com/help",
            title="Help",
            text="".join(_sentence(i) for i in range(20)),
            provider="exa",
        )
        chunks = build_chunks(doc, max_length=900)

        assert [c.index for c in chunks] == list(range(len(chunks)))
        assert {c.total for c in chunks} == {len(chunks)}
        assert len({c.id for c in chunks}) == len(chunks)
        assert all(c.provider == "exa" and c.title == "Help" for c in chunks)

    def test_build_chunks_title_defaults_to_url(self) -> None:
        doc = SourceDocument(url="https://www.aven.com/", text="A sentence that stands alone.")
        assert build_chunks(doc)[0].title == "https://www.aven.com/"
