"""Tests for the end-to-end documentation generator."""

import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from leaflet.generators.doc_generator import DocumentationGenerator
from leaflet.generators.models import DocumentationOptions, ProjectAnalysis
from leaflet.generators.template_manager import TemplateManager
from leaflet.utils.config import AnalysisConfig, AppConfig


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A small project on disk."""
    root = tmp_path / "my-project"
    (root / "src").mkdir(parents=True)
    (root / "src" / "a.ts").write_text("\n".join(["x"] * 10))
    (root / "src" / "b.py").write_text("\n".join(["y"] * 5))
    (root / "package.json").write_text(json.dumps({"version": "3.0.0", "license": "ISC"}))
    return root


@pytest.fixture
def config() -> AppConfig:
    """Default app config without reading config.yaml."""
    return AppConfig()


class TestGenerateDocumentation:
    """Tests for DocumentationGenerator.generate_documentation."""

    def test_success(self, project: Path, config: AppConfig, make_llm, analysis_reply) -> None:
        generator = DocumentationGenerator(str(project), make_llm(analysis_reply()), config=config)
        result = generator.generate_documentation()

        assert result.success
        assert result.error is None
        assert result.processing_time >= 0
        analysis = result.data
        assert analysis.project_name == "demo-app"
        assert analysis.technology == ["TypeScript", "Python"]
        assert [d.name for d in analysis.dependencies] == ["express", "jest"]
        assert analysis.dependencies[1].type == "development"
        assert len(analysis.sections("api")) == 1
        assert analysis.structure.total_files == 3
        assert analysis.metadata.version == "3.0.0"

    def test_fallback_name_and_description(
        self, project: Path, config: AppConfig, make_llm
    ) -> None:
        generator = DocumentationGenerator(str(project), make_llm('{"technology": []}'), config=config)
        result = generator.generate_documentation()

        assert result.success
        assert result.data.project_name == "my-project"
        assert result.data.description == "No description available"

    def test_malformed_entries_dropped(
        self, project: Path, config: AppConfig, make_llm, analysis_reply
    ) -> None:
        reply = analysis_reply(
            dependencies=[{"version": "1"}, {"name": "ok", "type": "weird"}],
            documentation=[{"type": "bogus", "title": "x"}, {"type": "readme", "title": "R"}],
        )
        result = DocumentationGenerator(str(project), make_llm(reply), config=config).generate_documentation()

        assert [d.name for d in result.data.dependencies] == ["ok"]
        assert result.data.dependencies[0].type == "production"
        assert [s.title for s in result.data.documentation] == ["R"]

    def test_bad_ai_reply_reported(self, project: Path, config: AppConfig, make_llm) -> None:
        result = DocumentationGenerator(str(project), make_llm("sorry"), config=config).generate_documentation()
        assert not result.success
        assert "No JSON found" in result.error
        assert result.data is None

    def test_missing_project_reported(self, tmp_path: Path, config: AppConfig, make_llm) -> None:
        llm = make_llm()
        generator = DocumentationGenerator(str(tmp_path / "missing"), llm, config=config)
        result = generator.generate_documentation()

        assert not result.success
        assert "does not exist" in result.error
        llm.generate.assert_not_called()

    def test_missing_templates_reported(
        self, project: Path, tmp_path: Path, config: AppConfig, make_llm
    ) -> None:
        llm = make_llm()
        generator = DocumentationGenerator(
            str(project),
            llm,
            config=config,
            template_manager=TemplateManager(str(tmp_path / "no-templates")),
        )
        result = generator.generate_documentation()

        assert not result.success
        assert "analysis_prompt.j2" in result.error
        assert result.processing_time >= 0
        llm.generate.assert_not_called()

    def test_unexpected_client_error_reported(
        self, project: Path, config: AppConfig
    ) -> None:
        llm = MagicMock()
        llm.generate.side_effect = RuntimeError("connection reset")
        result = DocumentationGenerator(str(project), llm, config=config).generate_documentation()

        assert not result.success
        assert result.error == "connection reset"
        assert result.data is None

    def test_sample_size_from_config(self, project: Path, make_llm, analysis_reply) -> None:
        config = AppConfig(analysis=AnalysisConfig(sample_size=0))
        llm = make_llm(analysis_reply())
        DocumentationGenerator(str(project), llm, config=config).generate_documentation()
        prompt = llm.generate.call_args[0][0]
        assert "// File:" not in prompt

    def test_ignore_patterns_from_config(self, project: Path, make_llm, analysis_reply) -> None:
        config = AppConfig(analysis=AnalysisConfig(ignore_patterns=["**/*.py"]))
        result = DocumentationGenerator(
            str(project), make_llm(analysis_reply()), config=config
        ).generate_documentation()
        assert ".py" not in result.data.structure.language_breakdown


class TestSaveDocumentation:
    """Tests for DocumentationGenerator.save_documentation."""

    def test_json_output(
        self, project: Path, config: AppConfig, sample_analysis: ProjectAnalysis, tmp_path: Path
    ) -> None:
        llm = MagicMock()
        generator = DocumentationGenerator(str(project), llm, config=config)
        path = generator.save_documentation(sample_analysis, str(tmp_path / "out" / "analysis.json"))

        data = json.loads(path.read_text())
        assert data["projectName"] == "demo-app"
        assert data["structure"]["totalLines"] == 10
        assert path.read_text().endswith("}\n")
        llm.generate.assert_not_called()

    def test_markdown_output(
        self, project: Path, config: AppConfig, sample_analysis: ProjectAnalysis, tmp_path: Path, make_llm
    ) -> None:
        options = DocumentationOptions(output_format="markdown")
        generator = DocumentationGenerator(
            str(project), make_llm("# Docs\n"), options=options, config=config
        )
        path = generator.save_documentation(sample_analysis, str(tmp_path / "analysis.md"))
        assert path.read_text() == "# Docs\n"


class TestGenerateTemplates:
    """Tests for DocumentationGenerator.generate_templates."""

    def test_default_templates(
        self, project: Path, config: AppConfig, sample_analysis: ProjectAnalysis, tmp_path: Path
    ) -> None:
        generator = DocumentationGenerator(str(project), MagicMock(), config=config)
        written = generator.generate_templates(sample_analysis, str(tmp_path / "templates"))

        assert [p.name for p in written] == ["README.md", "CONTRIBUTING.md"]
        assert (tmp_path / "templates" / "README.md").read_text().startswith("# demo-app")

    def test_all_templates(
        self, project: Path, config: AppConfig, sample_analysis: ProjectAnalysis, tmp_path: Path
    ) -> None:
        options = DocumentationOptions(include_api_docs=True, include_setup_guide=True)
        generator = DocumentationGenerator(str(project), MagicMock(), options=options, config=config)
        written = generator.generate_templates(sample_analysis, str(tmp_path))

        assert [p.name for p in written] == [
            "README.md",
            "API.md",
            "SETUP.md",
            "CONTRIBUTING.md",
        ]
        assert all(p.exists() for p in written)
