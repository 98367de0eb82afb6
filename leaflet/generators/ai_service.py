"""Semantic project analysis and documentation text via the LLM.

Sends the file inventory and source sample to the LLM, extracts the
JSON analysis from its reply, and asks for formatted documentation
text based on a compiled ProjectAnalysis.
"""

import json
import logging
import re
from typing import Any, Optional

import anthropic

from leaflet.errors import AIResponseError, AIServiceError
from leaflet.generators.llm_client import LLMClient
from leaflet.generators.models import DocumentationOptions, ProjectAnalysis
from leaflet.generators.template_manager import TemplateManager
from leaflet.inventory.structure import FileStructure

logger = logging.getLogger(__name__)

_ANALYSIS_SYSTEM_PROMPT = (
    "You are a senior software engineer who reads codebases and reports "
    "on them as strict JSON."
)

_DOCUMENTATION_SYSTEM_PROMPT = (
    "You are a technical writer creating documentation for a software project. "
    "Return only the requested document without any wrapper."
)

_FENCE_START = re.compile(r"^```(?:json)?\s*")
_FENCE_END = re.compile(r"\s*```$")
_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


def parse_analysis_response(response: str) -> dict[str, Any]:
    """Extract the JSON analysis object from an LLM reply.

    Markdown code fences are stripped, then the outermost ``{...}``
    span is parsed.

    Args:
        response: Raw text returned by the LLM.

    Returns:
        The parsed JSON object.

    Raises:
        AIResponseError: If no JSON object can be found or parsed.
    """
    cleaned = response.strip()
    if cleaned.startswith("```"):
        cleaned = _FENCE_END.sub("", _FENCE_START.sub("", cleaned))

    match = _JSON_OBJECT.search(cleaned)
    if not match:
        logger.error("No JSON found in AI response: %.500s", response)
        raise AIResponseError("No JSON found in AI response")

    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        logger.error("Failed to parse AI response: %s", e)
        raise AIResponseError(f"Failed to parse AI response: {e}") from e

    if not isinstance(data, dict):
        raise AIResponseError("AI response is not a JSON object")
    return data


class SemanticAnalyzer:
    """Runs the LLM-backed steps of the documentation pipeline."""

    def __init__(
        self,
        llm_client: LLMClient,
        template_manager: Optional[TemplateManager] = None,
    ) -> None:
        """Initialize the analyzer.

        Args:
            llm_client: The LLM client for API calls.
            template_manager: Template manager for prompts.
        """
        self.llm = llm_client
        self.templates = template_manager or TemplateManager()

    def analyze_project(
        self, file_structure: FileStructure, source_sample: str
    ) -> dict[str, Any]:
        """Ask the LLM to describe the project.

        Args:
            file_structure: Inventory of the project.
            source_sample: Bounded sample of the project's source code.

        Returns:
            The raw analysis fields (projectName, description, ...).

        Raises:
            AIServiceError: If the API call fails or no key is set.
            AIResponseError: If the reply holds no valid JSON object.
        """
        prompt = self.templates.render_analysis_prompt(file_structure, source_sample)
        content = self._generate(prompt, _ANALYSIS_SYSTEM_PROMPT, "AI analysis")
        return parse_analysis_response(content)

    def generate_documentation(
        self, analysis: ProjectAnalysis, options: DocumentationOptions
    ) -> str:
        """Ask the LLM for documentation text in the requested format.

        Args:
            analysis: The compiled project analysis.
            options: Output format, tone, verbosity and include flags.

        Returns:
            The generated documentation text.

        Raises:
            AIServiceError: If the API call fails or no key is set.
        """
        prompt = self.templates.render_documentation_prompt(analysis, options)
        return self._generate(
            prompt, _DOCUMENTATION_SYSTEM_PROMPT, "Documentation generation"
        ).strip()

    def _generate(self, prompt: str, system: str, step: str) -> str:
        try:
            result = self.llm.generate(prompt, system=system)
        except ValueError as e:
            raise AIServiceError(f"{step} failed: {e}") from e
        except anthropic.RateLimitError as e:
            raise AIServiceError(
                "Rate limit exceeded after retries. Please try again later."
            ) from e
        except anthropic.APIError as e:
            raise AIServiceError(f"{step} failed: {e}") from e
        return result.content
