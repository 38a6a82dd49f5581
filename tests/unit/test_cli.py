"""Unit tests for the clip management CLI (clipvault.cli.clips)."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from clipvault.cli.clips import _build_parser, main
from clipvault.utils.errors import AnalysisError


@pytest.fixture
def cli_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Point the CLI at a temporary database and upload dir, with no LLM keys."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "clips.db"))
    monkeypatch.setenv("UPLOAD_DIR", str(tmp_path / "uploads"))
    monkeypatch.setenv("ANTHROPIC_API_KEY", "")
    monkeypatch.setenv("OPENAI_API_KEY", "")
    return tmp_path


def _run(argv: list[str]) -> int:
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code


class TestParser:
    def test_search_arguments(self) -> None:
        args = _build_parser().parse_args(["search", "--query", "cat", "--type", "image", "--json"])
        assert args.command == "search"
        assert args.query == "cat"
        assert args.type == "image"
        assert args.json is True

    def test_unknown_type_rejected(self) -> None:
        with pytest.raises(SystemExit):
            _build_parser().parse_args(["search", "--type", "video"])


class TestCommands:
    def test_no_command_prints_help(self, cli_env: Path) -> None:
        assert _run([]) == 1

    def test_search_empty(self, cli_env: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert _run(["search"]) == 0
        assert "No clips found." in capsys.readouterr().out

    def test_search_json_empty(self, cli_env: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert _run(["search", "--json"]) == 0
        assert json.loads(capsys.readouterr().out) == []

    def test_remove_missing_exits_1(self, cli_env: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert _run(["remove", "nope"]) == 1
        assert "Clip not found" in capsys.readouterr().err

    def test_ingest_without_llm_exits_1(self, cli_env: Path, capsys: pytest.CaptureFixture[str]) -> None:
        note = cli_env / "note.txt"
        note.write_text("hello")
        assert _run(["ingest", str(note)]) == 1
        assert "API key" in capsys.readouterr().err

    def test_ingest_missing_file(self, cli_env: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert _run(["ingest", str(cli_env / "missing.txt")]) == 1
        assert "file not found" in capsys.readouterr().err

    def test_ingest_search_remove(self, cli_env: Path, capsys: pytest.CaptureFixture[str]) -> None:
        from clipvault.models.clip import AnalysisResult

        note = cli_env / "note.txt"
        note.write_text("hello there")
        result = AnalysisResult(summary="A greeting.", tags=["hello"], category="note")

        with patch.dict("os.environ", {"OPENAI_API_KEY": "sk-test"}), patch(
            "clipvault.services.analysis_service.AnalysisService.analyze",
            new=AsyncMock(return_value=result),
        ):
            assert _run(["ingest", str(note)]) == 0
        assert "note.txt" in capsys.readouterr().out

        assert _run(["search", "--query", "GREETING", "--json"]) == 0
        [clip] = json.loads(capsys.readouterr().out)
        assert clip["ai_tags"] == ["hello"]
        assert clip["file_type"] == "text"
        assert clip["thumbnail_url"] is None

        assert _run(["remove", clip["id"]]) == 0
        assert _run(["search", "--json"]) == 0
        capsys.readouterr()
        assert not any((cli_env / "uploads").iterdir())

    def test_analysis_error_exits_1(self, cli_env: Path, capsys: pytest.CaptureFixture[str]) -> None:
        note = cli_env / "note.txt"
        note.write_text("hello")
        with patch.dict("os.environ", {"OPENAI_API_KEY": "sk-test"}), patch(
            "clipvault.services.analysis_service.AnalysisService.analyze",
            new=AsyncMock(side_effect=AnalysisError("model unavailable")),
        ):
            assert _run(["ingest", str(note)]) == 1
        assert "model unavailable" in capsys.readouterr().err
