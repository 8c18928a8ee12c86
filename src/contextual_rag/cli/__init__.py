"""
CLI module - command-line interface.

Provides entry points for asking, ingesting, keyword extraction
and listing stored documents.
"""

from contextual_rag.cli.commands import (
    main,
    build_parser,
    run_ask_cli,
    run_ingest_cli,
    run_keywords_cli,
    run_docs_cli,
    run_init_db_cli,
)

__all__ = [
    "main",
    "build_parser",
    "run_ask_cli",
    "run_ingest_cli",
    "run_keywords_cli",
    "run_docs_cli",
    "run_init_db_cli",
]
