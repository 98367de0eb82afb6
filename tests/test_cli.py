"""Tests for the CLI commands using Click's CliRunner."""

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import yaml
from click.testing import CliRunner

from leaflet.cli.commands import leaflet
from leaflet.output.store import AnalysisStore


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click CliRunner."""
    return CliRunner()


@pytest.fixture
def sample_project(tmp_path: Path) -> Path:
    """Create a small mixed-language project."""
    root = tmp_path / "sample"
    (root / "src").mkdir(parents=True)
    (root / "src" / "a.ts").write_text("\n".join(f"const v{i} = {i};" for i in range(10)))
    (root / "src" / "b.py").write_text("\n".join(f"x{i} = {i}" for i in range(5)))
    (root / "node_modules" / "dep").mkdir(parents=True)
    (root / "node_modules" / "dep" / "index.js").write_text("module.exports = {};\n")
    return root


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """A config.yaml keeping all output under tmp_path."""
    path = tmp_path / "config.yaml"
    path.write_text(
        yaml.dump(
            {
                "output": {
                    "output_dir": str(tmp_path / "output"),
                    "temp_dir": str(tmp_path / "temp"),
                },
                "logging": {"level": "WARNING"},
            }
        )
    )
    return path


def _invoke(runner: CliRunner, config_file: Path, *args: str):
    return runner.invoke(leaflet, ["--config", str(config_file), *args])


def _mock_llm_class(*replies: str) -> MagicMock:
    results = []
    for reply in replies:
        result = MagicMock()
        result.content = reply
        results.append(result)
    llm_class = MagicMock()
    llm_class.return_value.generate.side_effect = results
    return llm_class


class TestLeafletGroup:
    """Tests for the main leaflet command group."""

    def test_help(self, runner: CliRunner) -> None:
        result = runner.invoke(leaflet, ["--help"])
        assert result.exit_code == 0
        assert "AI-powered documentation generator" in result.output
        for command in ("analyze", "inventory", "templates", "config", "serve"):
            assert command in result.output

    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(leaflet, ["--version"])
        assert result.exit_code == 0
        assert "1.0.0" in result.output


class TestInventoryCommand:
    """Tests for the 'inventory' command."""

    def test_text_report(
        self, runner: CliRunner, config_file: Path, sample_project: Path
    ) -> None:
        result = _invoke(runner, config_file, "inventory", str(sample_project))
        assert result.exit_code == 0, result.output
        assert "📁 sample/" in result.output
        assert "📄 a.ts" in result.output
        assert "node_modules" not in result.output
        assert "Files: 2" in result.output
        assert "Lines: 15" in result.output
        assert ".ts: 10" in result.output
        assert "Version: 1.0.0" in result.output

    def test_json_to_file(
        self, runner: CliRunner, config_file: Path, sample_project: Path, tmp_path: Path
    ) -> None:
        out = tmp_path / "inventory.json"
        result = _invoke(
            runner, config_file, "inventory", str(sample_project), "-o", str(out)
        )
        assert result.exit_code == 0, result.output
        data = json.loads(out.read_text())
        assert data["structure"]["totalFiles"] == 2
        assert data["structure"]["languageBreakdown"] == {".ts": 10, ".py": 5}
        assert data["metadata"]["version"] == "1.0.0"
        assert data["sampleLength"] > 0

    def test_ignore_and_sample_size(
        self, runner: CliRunner, config_file: Path, sample_project: Path, tmp_path: Path
    ) -> None:
        out = tmp_path / "inventory.json"
        result = _invoke(
            runner,
            config_file,
            "inventory",
            str(sample_project),
            "--ignore",
            "**/*.py",
            "--sample-size",
            "0",
            "-o",
            str(out),
        )
        assert result.exit_code == 0, result.output
        data = json.loads(out.read_text())
        assert data["structure"]["totalFiles"] == 1
        assert data["sampleLength"] == 0

    def test_missing_root(self, runner: CliRunner, config_file: Path, tmp_path: Path) -> None:
        result = _invoke(runner, config_file, "inventory", str(tmp_path / "missing"))
        assert result.exit_code != 0
        assert "does not exist" in result.output


class TestAnalyzeCommand:
    """Tests for the 'analyze' command."""

    def test_json_output(
        self,
        runner: CliRunner,
        config_file: Path,
        sample_project: Path,
        tmp_path: Path,
        analysis_reply,
    ) -> None:
        out_dir = tmp_path / "docs"
        llm_class = _mock_llm_class(analysis_reply())
        with patch("leaflet.cli.commands.LLMClient", llm_class):
            result = _invoke(
                runner, config_file, "analyze", str(sample_project), "-o", str(out_dir)
            )

        assert result.exit_code == 0, result.output
        assert "Documentation generation complete!" in result.output
        assert "Project: demo-app" in result.output
        assert "Files analyzed: 2" in result.output
        assert "Total lines: 15" in result.output
        data = json.loads((out_dir / "analysis.json").read_text())
        assert data["projectName"] == "demo-app"

    def test_markdown_with_templates(
        self,
        runner: CliRunner,
        config_file: Path,
        sample_project: Path,
        tmp_path: Path,
        analysis_reply,
    ) -> None:
        out_dir = tmp_path / "docs"
        llm_class = _mock_llm_class(analysis_reply(), "# Demo docs")
        with patch("leaflet.cli.commands.LLMClient", llm_class):
            result = _invoke(
                runner,
                config_file,
                "analyze",
                str(sample_project),
                "-o",
                str(out_dir),
                "-f",
                "markdown",
                "--api-docs",
                "--templates",
            )

        assert result.exit_code == 0, result.output
        assert (out_dir / "analysis.md").read_text() == "# Demo docs\n"
        assert (out_dir / "templates" / "API.md").exists()
        assert not (out_dir / "templates" / "SETUP.md").exists()

    def test_model_and_key_overrides(
        self,
        runner: CliRunner,
        config_file: Path,
        sample_project: Path,
        tmp_path: Path,
        analysis_reply,
    ) -> None:
        llm_class = _mock_llm_class(analysis_reply())
        with patch("leaflet.cli.commands.LLMClient", llm_class):
            _invoke(
                runner,
                config_file,
                "analyze",
                str(sample_project),
                "-o",
                str(tmp_path / "docs"),
                "--api-key",
                "sk-test",
                "--model",
                "claude-haiku-4-5-20251001",
            )

        kwargs = llm_class.call_args[1]
        assert kwargs["api_key"] == "sk-test"
        assert kwargs["config"].model == "claude-haiku-4-5-20251001"

    def test_failure_exits_nonzero(
        self, runner: CliRunner, config_file: Path, sample_project: Path, tmp_path: Path
    ) -> None:
        llm_class = _mock_llm_class("not json at all")
        with patch("leaflet.cli.commands.LLMClient", llm_class):
            result = _invoke(
                runner, config_file, "analyze", str(sample_project), "-o", str(tmp_path / "d")
            )

        assert result.exit_code == 1
        assert "Documentation generation failed" in result.output


class TestTemplatesCommand:
    """Tests for the 'templates' command."""

    def test_writes_all_scaffolds(
        self,
        runner: CliRunner,
        config_file: Path,
        sample_project: Path,
        tmp_path: Path,
        analysis_reply,
    ) -> None:
        out_dir = tmp_path / "tpl"
        with patch("leaflet.cli.commands.LLMClient", _mock_llm_class(analysis_reply())):
            result = _invoke(
                runner, config_file, "templates", str(sample_project), "-o", str(out_dir)
            )

        assert result.exit_code == 0, result.output
        assert "Templates generated in:" in result.output
        assert sorted(p.name for p in out_dir.iterdir()) == [
            "API.md",
            "CONTRIBUTING.md",
            "README.md",
            "SETUP.md",
        ]


class TestConfigCommand:
    """Tests for the 'config' command."""

    def test_shows_settings(
        self, runner: CliRunner, config_file: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        result = _invoke(runner, config_file, "config")
        assert result.exit_code == 0
        assert "Leaflet Configuration" in result.output
        assert "API Key: Not set" in result.output
        assert "Default Model: claude-sonnet-4-20250514" in result.output
        assert "Max Tokens: 4000" in result.output

    def test_api_key_set(
        self, runner: CliRunner, config_file: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")
        result = _invoke(runner, config_file, "config")
        assert "API Key: Set" in result.output


class TestStoredAnalysisCommands:
    """Tests for the history, show and delete commands."""

    def test_history_empty(self, runner: CliRunner, config_file: Path) -> None:
        result = _invoke(runner, config_file, "history")
        assert result.exit_code == 0
        assert "No stored analyses." in result.output

    def test_history_show_delete(
        self, runner: CliRunner, config_file: Path, tmp_path: Path
    ) -> None:
        store = AnalysisStore(str(tmp_path / "output"))
        analysis_id, path = store.create()
        store.save(analysis_id, {"projectName": "demo", "technology": ["Go", "gRPC"]})

        history = _invoke(runner, config_file, "history")
        assert f"{analysis_id}  demo  [Go, gRPC]" in history.output

        shown = _invoke(runner, config_file, "show", analysis_id)
        assert shown.exit_code == 0
        assert '"projectName": "demo"' in shown.output

        deleted = _invoke(runner, config_file, "delete", analysis_id, "--yes")
        assert deleted.exit_code == 0
        assert not path.exists()

    def test_show_missing(self, runner: CliRunner, config_file: Path) -> None:
        result = _invoke(runner, config_file, "show", "12345")
        assert result.exit_code == 1
        assert "Analysis not found: 12345" in result.output

    def test_delete_missing(self, runner: CliRunner, config_file: Path) -> None:
        result = _invoke(runner, config_file, "delete", "12345", "--yes")
        assert result.exit_code == 1


class TestServeCommand:
    """Tests for the 'serve' command."""

    def test_runs_uvicorn(self, runner: CliRunner, config_file: Path) -> None:
        with patch("leaflet.cli.commands.uvicorn.run") as run:
            result = _invoke(runner, config_file, "serve", "--port", "9001")

        assert result.exit_code == 0, result.output
        assert run.call_args[1]["port"] == 9001
        assert run.call_args[1]["host"] == "127.0.0.1"
