"""Shared configuration loaded from environment / .env file."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings, populated from env vars or .env file."""

    # LLM
    openai_api_key: str = Field(default="", description="OpenAI API key; empty disables OpenAI-backed providers")
    llm_model_name: str = Field(default="gpt-4o-mini", description="Chat model identifier")
    llm_base_url: str = Field(
        default="",
        description=(
            "Base URL for an OpenAI-compatible chat endpoint. Leave empty to "
            "use OpenAI cloud."
        ),
    )
    llm_temperature: float = 0.7
    llm_max_tokens: int = 500

    # Embedding
    embedding_provider: str = Field(default="openai", description="'openai' or 'huggingface'")
    embedding_model: str = "text-embedding-3-small"
    embedding_dimension: int = 1536

    # Vector store
    chroma_host: str = "localhost"
    chroma_port: int = 8000
    chroma_collection: str = "knowledge-base"
    distance_metric: str = "cosine"
    index_ready_timeout: float = 30.0

    # Content search
    exa_api_key: str = Field(default="", description="Exa API key; empty skips search and uses direct fetch")
    exa_base_url: str = "https://api.exa.ai"
    search_domains: list[str] = Field(
        default_factory=lambda: [
            "aven.com",
            "www.aven.com",
            "tryaven.com",
            "www.tryaven.com",
            "blog.aven.com",
        ]
    )
    search_queries: list[str] = Field(
        default_factory=lambda: [
            "site:aven.com Aven credit card balance transfer rewards fees",
            "site:aven.com support help contact privacy security",
            "site:aven.com app iOS Android features",
            "Aven fintech credit card overview",
        ]
    )
    fallback_urls: list[str] = Field(
        default_factory=lambda: [
            "https://www.aven.com/",
            "https://www.aven.com/legal/privacy",
            "https://www.aven.com/legal/terms",
            "https://www.aven.com/help",
        ]
    )
    request_timeout: float = 20.0

    # Corpus
    seed_corpus_path: str = Field(default="", description="JSON seed corpus; empty uses the bundled one")
    knowledge_topic: str = "aven"

    # Support
    support_contact: str = "1-800-AVEN-HLP"

    # Logging
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


# Singleton: import `settings` at process entry points.
settings = Settings()
