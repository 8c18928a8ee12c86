"""
CLI commands - thin entry points over the pipeline.

Each command follows a consistent pattern:
1. Parse arguments
2. Load environment
3. Build the pipeline and run one coroutine
4. Print results
5. Return exit code (0 ok, 1 fault, 130 interrupted)
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Awaitable, Callable

from contextual_rag.core import RetrievalFault
from contextual_rag.pipeline import Pipeline, build_pipeline


def _load_env() -> None:
    """Load environment variables from .env file."""
    from dotenv import load_dotenv

    load_dotenv()


def _run(use_mock: bool, action: Callable[[Pipeline], Awaitable[int]]) -> int:
    """Build a pipeline, run one action, always close the store."""

    async def runner() -> int:
        pipeline = build_pipeline(use_mock=use_mock)
        try:
            return await action(pipeline)
        finally:
            await pipeline.close()

    try:
        return asyncio.run(runner())
    except RetrievalFault as e:
        print(f"ERROR: {type(e).__name__}: {e}", file=sys.stderr)
        return 1


def run_ask_cli(args: argparse.Namespace) -> int:
    """Answer a question with retrieved context."""

    async def action(pipeline: Pipeline) -> int:
        response = await pipeline.assembler.answer(args.text, timeout=args.timeout)
        if args.json:
            print(json.dumps(response.to_dict(), indent=2))
            return 0

        print(response.answer)
        print(f"\nSources ({len(response.sources)}):")
        for i, source in enumerate(response.sources, 1):
            print(f"  [{i}] {source[:120]}")
        return 0

    return _run(args.mock, action)


def run_ingest_cli(args: argparse.Namespace) -> int:
    """Store a piece of content with its embedding."""

    async def action(pipeline: Pipeline) -> int:
        metadata = json.loads(args.metadata) if args.metadata else None
        await pipeline.ingestion.store_embedding(args.text, metadata)
        print(f"Stored {len(args.text)} chars")
        return 0

    return _run(args.mock, action)


def run_keywords_cli(args: argparse.Namespace) -> int:
    """Print the keywords of a text."""

    async def action(pipeline: Pipeline) -> int:
        keywords = await pipeline.keywords.extract_keywords(args.text)
        print(", ".join(keywords))
        return 0

    return _run(args.mock, action)


def run_docs_cli(args: argparse.Namespace) -> int:
    """List every stored document."""

    async def action(pipeline: Pipeline) -> int:
        contents = await pipeline.ingestion.list_contents(args.table)
        for i, content in enumerate(contents, 1):
            print(f"[{i}] {content[:120]}")
        print(f"\nTotal: {len(contents)}")
        return 0

    return _run(args.mock, action)


def run_init_db_cli(args: argparse.Namespace) -> int:
    """Create the documents table and its indexes."""

    async def action(pipeline: Pipeline) -> int:
        await pipeline.store.create_schema()
        print("Schema ready")
        return 0

    return _run(args.mock, action)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="contextual-rag",
        description="Retrieval-augmented answers over a document store",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  contextual-rag ingest "Postgres supports full-text search"
  contextual-rag ask "how do I search text in postgres?"
  contextual-rag keywords "some long paragraph ..."
  contextual-rag init-db
  contextual-rag docs --table archive
        """,
    )
    parser.add_argument(
        "--mock",
        action="store_true",
        help="Use in-memory store, hash embeddings and scripted completions",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    ask = subparsers.add_parser("ask", help="Answer a question with retrieved context")
    ask.add_argument("text")
    ask.add_argument("--timeout", type=float, default=None, help="Retrieval timeout in seconds")
    ask.add_argument("--json", action="store_true", help="Print answer and sources as JSON")
    ask.set_defaults(handler=run_ask_cli)

    ingest = subparsers.add_parser("ingest", help="Store content with its embedding")
    ingest.add_argument("text")
    ingest.add_argument("--metadata", default=None, help="JSON object stored with the document")
    ingest.set_defaults(handler=run_ingest_cli)

    keywords = subparsers.add_parser("keywords", help="Extract keywords from text")
    keywords.add_argument("text")
    keywords.set_defaults(handler=run_keywords_cli)

    docs = subparsers.add_parser("docs", help="List stored documents")
    docs.add_argument("--table", default=None, help="Table to list (default: RAG_DOCUMENTS_TABLE)")
    docs.set_defaults(handler=run_docs_cli)

    init_db = subparsers.add_parser("init-db", help="Create the documents table and indexes")
    init_db.set_defaults(handler=run_init_db_cli)

    return parser


def main(argv: list[str] | None = None) -> int:
    """
    Main CLI entry point with subcommands.

    Usage:
        contextual-rag ask TEXT        # Answer with retrieved context
        contextual-rag ingest TEXT     # Store content + embedding
        contextual-rag keywords TEXT   # Extract keywords
        contextual-rag docs            # List stored documents
        contextual-rag init-db         # Create table and indexes
    """
    _load_env()

    from contextual_rag.observability import init_phoenix

    init_phoenix()

    args = build_parser().parse_args(argv)
    try:
        return args.handler(args)
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
