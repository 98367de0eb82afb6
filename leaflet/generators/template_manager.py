"""Template manager for loading and rendering Jinja2 templates.

Provides a centralized interface for rendering the LLM prompts and the
Markdown scaffold documents (README, API, setup and contributing
guides) from Jinja2 templates stored in the templates/ directory.
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from leaflet.generators.models import DocumentationOptions, ProjectAnalysis
from leaflet.inventory.structure import FileStructure
from leaflet.inventory.tree import format_directory_tree

logger = logging.getLogger(__name__)

_DEFAULT_TEMPLATES_DIR = Path(__file__).parent.parent.parent / "templates"

SCAFFOLD_TEMPLATES = {
    "README.md": "readme.md.j2",
    "API.md": "api.md.j2",
    "SETUP.md": "setup.md.j2",
    "CONTRIBUTING.md": "contributing.md.j2",
}


class TemplateManager:
    """Loads and renders Jinja2 templates for analysis and documentation."""

    def __init__(self, templates_dir: Optional[str] = None) -> None:
        """Initialize the template manager.

        Args:
            templates_dir: Path to the templates directory. Uses the
                default templates/ directory if not specified.
        """
        self._templates_path = (
            Path(templates_dir) if templates_dir else _DEFAULT_TEMPLATES_DIR
        )

        if not self._templates_path.exists():
            logger.warning("Templates directory not found: %s", self._templates_path)

        self._env = Environment(
            loader=FileSystemLoader(str(self._templates_path)),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )
        logger.debug("Template manager initialized with: %s", self._templates_path)

    def render_analysis_prompt(
        self, file_structure: FileStructure, source_sample: str
    ) -> str:
        """Render the semantic analysis prompt.

        Args:
            file_structure: Inventory of the project.
            source_sample: Bounded sample of the project's source code.

        Returns:
            Rendered prompt string ready for LLM submission.
        """
        return self._render(
            "analysis_prompt.j2",
            structure_json=json.dumps(
                file_structure.to_dict(), indent=2, ensure_ascii=False
            ),
            source_sample=source_sample,
        )

    def render_documentation_prompt(
        self, analysis: ProjectAnalysis, options: DocumentationOptions
    ) -> str:
        """Render the documentation generation prompt.

        Args:
            analysis: The compiled project analysis.
            options: Output format, tone, verbosity and include flags.

        Returns:
            Rendered prompt string ready for LLM submission.
        """
        return self._render(
            "documentation_prompt.j2",
            analysis_json=json.dumps(analysis.to_dict(), indent=2, ensure_ascii=False),
            options=options,
        )

    def render_scaffold(self, filename: str, analysis: ProjectAnalysis) -> str:
        """Render one of the Markdown scaffold documents.

        Args:
            filename: Output name, one of the SCAFFOLD_TEMPLATES keys.
            analysis: The compiled project analysis.

        Returns:
            The rendered Markdown document.

        Raises:
            KeyError: If ``filename`` is not a known scaffold.
        """
        return self._render(
            SCAFFOLD_TEMPLATES[filename],
            analysis=analysis,
            tree=format_directory_tree(analysis.structure.root),
            license=analysis.metadata.license or "MIT",
        )

    def _render(self, template_name: str, **kwargs: Any) -> str:
        """Render a template with the given context variables.

        Raises:
            TemplateNotFound: If the template file does not exist.
        """
        template = self._env.get_template(template_name)
        rendered = template.render(**kwargs)
        logger.debug("Rendered template %s (%d chars)", template_name, len(rendered))
        return rendered

    def list_templates(self) -> list[str]:
        """List all available template files."""
        return self._env.list_templates()
