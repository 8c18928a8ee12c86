"""
Pipeline configuration.

Loads retrieval, rate-limit and model settings from environment variables.
"""

import os
from dataclasses import dataclass


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() in ("true", "1", "yes")


@dataclass
class RagConfig:
    """Configuration for the retrieval pipeline.

    Environment Variables:
        DATABASE_URL: PostgreSQL connection string
        RAG_DOCUMENTS_TABLE: Table holding documents (default: documents)
        RAG_MIN_RESULTS: Distinct documents wanted before escalation stops (default: 3)
        RAG_RATE_WINDOW_SECONDS: Rate limiter window length (default: 1.5)
        RAG_RATE_MAX_PER_WINDOW: Store calls admitted per window (default: 10)
        RAG_EMBEDDINGS_TIMEOUT: Embedding request timeout in seconds, 0 = none (default: 0)
        RAG_INPUT_WORD_LIMIT: Max words accepted by answer() (default: 1000)
        RAG_EMPTY_CONTENT_POLICY: "abort" or "skip" (default: abort)
        RAG_FAIL_FAST: Abort retrieve() on first tier fault (default: true)
        EMBEDDING_MODEL: OpenAI embedding model (default: text-embedding-3-small)
        COMPLETION_MODEL: OpenAI chat model (default: gpt-4o-mini)
        USE_POSTGRES: Use PgDocumentStore instead of the in-memory store (default: false)
        USE_MOCK_EMBEDDINGS: Use hash embeddings (default: true)
    """

    database_url: str = "postgresql://localhost/contextual_rag"
    documents_table: str = "documents"
    min_results: int = 3
    rate_window_seconds: float = 1.5
    rate_max_per_window: int = 10
    embeddings_timeout: float = 0.0
    input_word_limit: int = 1000
    empty_content_policy: str = "abort"
    fail_fast: bool = True
    embedding_model: str = "text-embedding-3-small"
    completion_model: str = "gpt-4o-mini"
    use_postgres: bool = False
    use_mock_embeddings: bool = True

    @classmethod
    def from_env(cls) -> "RagConfig":
        """Load config from environment variables."""
        return cls(
            database_url=os.environ.get("DATABASE_URL", "postgresql://localhost/contextual_rag"),
            documents_table=os.environ.get("RAG_DOCUMENTS_TABLE", "documents"),
            min_results=int(os.environ.get("RAG_MIN_RESULTS", "3")),
            rate_window_seconds=float(os.environ.get("RAG_RATE_WINDOW_SECONDS", "1.5")),
            rate_max_per_window=int(os.environ.get("RAG_RATE_MAX_PER_WINDOW", "10")),
            embeddings_timeout=float(os.environ.get("RAG_EMBEDDINGS_TIMEOUT", "0")),
            input_word_limit=int(os.environ.get("RAG_INPUT_WORD_LIMIT", "1000")),
            empty_content_policy=os.environ.get("RAG_EMPTY_CONTENT_POLICY", "abort").lower(),
            fail_fast=_env_bool("RAG_FAIL_FAST", "true"),
            embedding_model=os.environ.get("EMBEDDING_MODEL", "text-embedding-3-small"),
            completion_model=os.environ.get("COMPLETION_MODEL", "gpt-4o-mini"),
            use_postgres=_env_bool("USE_POSTGRES", "false"),
            use_mock_embeddings=_env_bool("USE_MOCK_EMBEDDINGS", "true"),
        )


# Global config singleton
_config: RagConfig | None = None


def get_config() -> RagConfig:
    """Get the global pipeline config (lazy-loaded from env)."""
    global _config
    if _config is None:
        _config = RagConfig.from_env()
    return _config


def reset_config() -> None:
    """Reset config (useful for testing)."""
    global _config
    _config = None
