"""
Unit Tests for CLI Commands

Tests the CLI entry points against the mock pipeline.

STAFF ENGINEER PATTERNS:
------------------------
1. --mock runs every command without network or database
2. Test CLI argument parsing
3. Verify exit codes
4. Test error handling
"""

import json
from unittest.mock import patch

import pytest

from contextual_rag.cli import commands
from contextual_rag.config import reset_config
from contextual_rag.retrieval.rate_limiter import reset_rate_limiter


@pytest.fixture(autouse=True)
def fresh_singletons(monkeypatch):
    monkeypatch.delenv("USE_POSTGRES", raising=False)
    reset_config()
    reset_rate_limiter()
    yield
    reset_config()
    reset_rate_limiter()


# ---------------------------------------------------------------------------
# LOAD_ENV TESTS
# ---------------------------------------------------------------------------


class TestLoadEnv:
    def test_load_env_does_not_raise(self):
        commands._load_env()


# ---------------------------------------------------------------------------
# ARGUMENT PARSING
# ---------------------------------------------------------------------------


class TestParser:
    def test_ask_arguments(self):
        args = commands.build_parser().parse_args(["--mock", "ask", "hi", "--timeout", "2", "--json"])

        assert args.mock is True
        assert args.text == "hi"
        assert args.timeout == 2.0
        assert args.json is True
        assert args.handler is commands.run_ask_cli

    def test_docs_table_defaults_to_configured(self):
        args = commands.build_parser().parse_args(["docs"])

        assert args.table is None

    def test_command_required(self):
        with pytest.raises(SystemExit):
            commands.build_parser().parse_args([])


# ---------------------------------------------------------------------------
# MAIN CLI DISPATCH TESTS
# ---------------------------------------------------------------------------


class TestMainCliDispatch:
    def test_main_dispatches_to_handler(self):
        with patch.object(commands, "run_keywords_cli", return_value=0) as handler:
            result = commands.main(["keywords", "some text"])

        handler.assert_called_once()
        assert handler.call_args.args[0].text == "some text"
        assert result == 0

    def test_main_handles_keyboard_interrupt(self, capsys):
        with patch.object(commands, "run_ask_cli", side_effect=KeyboardInterrupt):
            result = commands.main(["ask", "question"])

        assert result == 130
        assert "Interrupted" in capsys.readouterr().out


# ---------------------------------------------------------------------------
# COMMANDS AGAINST THE MOCK PIPELINE
# ---------------------------------------------------------------------------


class TestMockCommands:
    def test_ask_prints_answer(self, capsys):
        assert commands.main(["--mock", "ask", "what is\nsourdough"]) == 0

        out = capsys.readouterr().out
        assert "Answer to 'what is sourdough' from 0 documents" in out
        assert "Sources (0)" in out

    def test_ask_json(self, capsys):
        assert commands.main(["--mock", "ask", "question", "--json"]) == 0

        payload = json.loads(capsys.readouterr().out)
        assert payload["sources"] == []
        assert "question" in payload["answer"]

    def test_ask_empty_input_exits_with_fault(self, capsys):
        assert commands.main(["--mock", "ask", "   "]) == 1

        assert "ValidationFault" in capsys.readouterr().err

    def test_ingest(self, capsys):
        assert commands.main(["--mock", "ingest", "hello world", "--metadata", '{"a": 1}']) == 0

        assert "Stored 11 chars" in capsys.readouterr().out

    def test_docs_on_fresh_store(self, capsys):
        assert commands.main(["--mock", "docs"]) == 0

        assert "Total: 0" in capsys.readouterr().out

    def test_docs_uses_configured_table(self, monkeypatch, capsys):
        monkeypatch.setenv("RAG_DOCUMENTS_TABLE", "notes")

        assert commands.main(["--mock", "docs"]) == 0

        captured = capsys.readouterr()
        assert "Total: 0" in captured.out
        assert "StoreFault" not in captured.err

    def test_docs_unknown_table_is_store_fault(self, capsys):
        assert commands.main(["--mock", "docs", "--table", "missing"]) == 1

        assert "StoreFault" in capsys.readouterr().err

    def test_keywords_with_mock_completion(self, capsys):
        assert commands.main(["--mock", "keywords", "sourdough starter feeding"]) == 0

        assert "sourdough, starter, feeding" in capsys.readouterr().out

    def test_init_db(self, capsys):
        assert commands.main(["--mock", "init-db"]) == 0

        assert "Schema ready" in capsys.readouterr().out


class TestRealProviders:
    def test_missing_api_key_is_reported_as_fault(self, monkeypatch, capsys):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        monkeypatch.setenv("USE_MOCK_EMBEDDINGS", "true")

        assert commands.main(["ask", "question"]) == 1

        assert "CompletionFault" in capsys.readouterr().err
