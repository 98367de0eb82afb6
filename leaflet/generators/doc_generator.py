"""End-to-end documentation generation for a project.

Runs the file inventory, samples source code, asks the LLM for a
semantic analysis, compiles the ProjectAnalysis, and writes the
documentation output and scaffold templates.
"""

import json
import logging
import os
import time
from pathlib import Path
from typing import Optional

from leaflet.errors import LeafletError
from leaflet.generators.ai_service import SemanticAnalyzer
from leaflet.generators.llm_client import LLMClient
from leaflet.generators.models import (
    AnalysisResult,
    DocumentationOptions,
    ProjectAnalysis,
    parse_dependencies,
    parse_sections,
)
from leaflet.generators.template_manager import TemplateManager
from leaflet.inventory.analyzer import FileAnalyzer
from leaflet.utils.config import AppConfig, load_config

logger = logging.getLogger(__name__)


def _string_list(value: object) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value]


class DocumentationGenerator:
    """Generates documentation for one project directory."""

    def __init__(
        self,
        project_path: str,
        llm_client: LLMClient,
        options: Optional[DocumentationOptions] = None,
        config: Optional[AppConfig] = None,
        template_manager: Optional[TemplateManager] = None,
    ) -> None:
        """Initialize the generator.

        Args:
            project_path: Root directory of the project to document.
            llm_client: The LLM client for API calls.
            options: Documentation options. Uses defaults if not provided.
            config: Application configuration.
            template_manager: Template manager for prompts and scaffolds.
        """
        self.project_path = os.path.abspath(project_path)
        self.options = options or DocumentationOptions()
        self.config = config or load_config()
        self.templates = template_manager or TemplateManager()
        self.file_analyzer = FileAnalyzer(
            self.project_path, self.config.analysis.ignore_patterns
        )
        self.ai_service = SemanticAnalyzer(llm_client, self.templates)

    def generate_documentation(self) -> AnalysisResult:
        """Analyze the project and compile a ProjectAnalysis.

        Never raises for analysis failures; they are reported through
        the returned AnalysisResult.

        Returns:
            An AnalysisResult with the analysis or the error message,
            and the processing time in milliseconds.
        """
        start = time.monotonic()
        try:
            logger.info("Analyzing project structure of %s", self.project_path)
            file_structure, metadata = self.file_analyzer.analyze_project()

            logger.info("Extracting source code sample")
            sample = self.file_analyzer.get_source_code_sample(
                self.config.analysis.sample_size
            )

            logger.info("Running AI analysis")
            ai_analysis = self.ai_service.analyze_project(file_structure, sample)

            analysis = ProjectAnalysis(
                project_name=str(
                    ai_analysis.get("projectName") or Path(self.project_path).name
                ),
                description=str(
                    ai_analysis.get("description") or "No description available"
                ),
                structure=file_structure,
                metadata=metadata,
                technology=_string_list(ai_analysis.get("technology")),
                dependencies=parse_dependencies(ai_analysis.get("dependencies")),
                entry_points=_string_list(ai_analysis.get("entryPoints")),
                documentation=parse_sections(ai_analysis.get("documentation")),
            )
        except LeafletError as e:
            logger.error("Documentation generation failed: %s", e)
            return AnalysisResult(
                success=False, error=str(e), processing_time=self._elapsed_ms(start)
            )
        except Exception as e:
            logger.exception("Unexpected error during documentation generation")
            return AnalysisResult(
                success=False,
                error=str(e) or type(e).__name__,
                processing_time=self._elapsed_ms(start),
            )

        return AnalysisResult(
            success=True, data=analysis, processing_time=self._elapsed_ms(start)
        )

    def save_documentation(self, analysis: ProjectAnalysis, output_path: str) -> Path:
        """Write the documentation in the configured output format.

        JSON output is the serialized analysis; markdown and html
        output are generated by the LLM from the analysis.

        Args:
            analysis: The compiled project analysis.
            output_path: File to write.

        Returns:
            The path written.

        Raises:
            AIServiceError: If LLM documentation generation fails.
            OSError: If the file cannot be written.
        """
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        if self.options.output_format == "json":
            content = json.dumps(analysis.to_dict(), indent=2, ensure_ascii=False)
        else:
            content = self.ai_service.generate_documentation(analysis, self.options)

        path.write_text(content + "\n", encoding="utf-8")
        logger.info("Documentation saved to %s", path)
        return path

    def generate_templates(self, analysis: ProjectAnalysis, output_dir: str) -> list[Path]:
        """Write the Markdown scaffold documents.

        README.md and CONTRIBUTING.md are always written; API.md and
        SETUP.md follow the include flags of the options.

        Args:
            analysis: The compiled project analysis.
            output_dir: Directory to write the templates to.

        Returns:
            Paths of the written files.
        """
        directory = Path(output_dir)
        directory.mkdir(parents=True, exist_ok=True)

        names = ["README.md"]
        if self.options.include_api_docs:
            names.append("API.md")
        if self.options.include_setup_guide:
            names.append("SETUP.md")
        names.append("CONTRIBUTING.md")

        written = []
        for name in names:
            path = directory / name
            path.write_text(self.templates.render_scaffold(name, analysis), encoding="utf-8")
            written.append(path)

        logger.info("Templates generated in %s", directory)
        return written

    @staticmethod
    def _elapsed_ms(start: float) -> int:
        return int((time.monotonic() - start) * 1000)
