"""CLI commands for the Leaflet documentation generator.

Provides the Click-based command group 'leaflet' with subcommands for
analyzing projects, inspecting the file inventory, generating
templates, browsing stored analyses, and serving the HTTP API.
"""

import dataclasses
import json
import logging
from pathlib import Path
from typing import Optional

import click
import uvicorn

from leaflet import __version__
from leaflet.errors import AnalysisNotFoundError, LeafletError
from leaflet.generators.doc_generator import DocumentationGenerator
from leaflet.generators.llm_client import LLMClient
from leaflet.generators.models import DocumentationOptions, ProjectAnalysis
from leaflet.inventory.analyzer import FileAnalyzer
from leaflet.inventory.tree import format_directory_tree
from leaflet.output.store import AnalysisStore
from leaflet.server.app import create_app
from leaflet.utils.config import (
    SUPPORTED_FORMATS,
    SUPPORTED_TONES,
    SUPPORTED_VERBOSITY,
    AppConfig,
    load_config,
)
from leaflet.utils.logging import setup_logging_from_config

logger = logging.getLogger(__name__)

OUTPUT_EXTENSIONS = {"json": "json", "markdown": "md", "html": "html"}


def _build_llm_client(
    config: AppConfig, api_key: Optional[str], model: Optional[str]
) -> LLMClient:
    """Create an LLM client, applying command-line overrides."""
    api_config = dataclasses.replace(config.api, model=model) if model else config.api
    return LLMClient(config=api_config, api_key=api_key)


def _run_analysis(
    config: AppConfig,
    project_path: str,
    options: DocumentationOptions,
    api_key: Optional[str],
    model: Optional[str],
) -> tuple[DocumentationGenerator, ProjectAnalysis]:
    """Run the documentation generator or abort the command.

    Returns:
        The generator and the successful ProjectAnalysis.

    Raises:
        click.ClickException: If the analysis fails.
    """
    llm = _build_llm_client(config, api_key, model)
    generator = DocumentationGenerator(project_path, llm, options=options, config=config)
    result = generator.generate_documentation()
    if not result.success:
        raise click.ClickException(f"Documentation generation failed: {result.error}")
    click.echo(f"Documentation generated successfully in {result.processing_time}ms")
    return generator, result.data


@click.group()
@click.version_option(version=__version__, prog_name="leaflet")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to a config.yaml file.",
)
@click.pass_context
def leaflet(ctx: click.Context, config_path: Optional[str]) -> None:
    """Leaflet: AI-powered documentation generator."""
    config = load_config(config_path)
    setup_logging_from_config(config.logging)
    ctx.obj = config


@leaflet.command()
@click.argument("project_path", type=click.Path(exists=True, file_okay=False))
@click.option(
    "-o", "--output", type=click.Path(), default="./docs", help="Output directory."
)
@click.option(
    "-f",
    "--format",
    "output_format",
    type=click.Choice(SUPPORTED_FORMATS),
    default=None,
    help="Output format.",
)
@click.option("-t", "--tone", type=click.Choice(SUPPORTED_TONES), default=None)
@click.option(
    "-v", "--verbosity", type=click.Choice(SUPPORTED_VERBOSITY), default=None
)
@click.option("--api-docs", is_flag=True, help="Include API documentation.")
@click.option("--setup-guide", is_flag=True, help="Include a setup guide.")
@click.option("--inline-comments", is_flag=True, help="Include inline code comments.")
@click.option("--templates", "with_templates", is_flag=True, help="Also write templates.")
@click.option("--api-key", default=None, help="Anthropic API key.")
@click.option("--model", default=None, help="Model to use.")
@click.pass_obj
def analyze(
    config: AppConfig,
    project_path: str,
    output: str,
    output_format: Optional[str],
    tone: Optional[str],
    verbosity: Optional[str],
    api_docs: bool,
    setup_guide: bool,
    inline_comments: bool,
    with_templates: bool,
    api_key: Optional[str],
    model: Optional[str],
) -> None:
    """Analyze a project and generate documentation.

    Inventories the project, asks the LLM for a semantic analysis, and
    writes the documentation to the output directory.
    """
    options = DocumentationOptions(
        output_format=output_format or config.documentation.output_format,
        include_inline=inline_comments,
        include_api_docs=api_docs,
        include_setup_guide=setup_guide,
        tone=tone or config.documentation.tone,
        verbosity=verbosity or config.documentation.verbosity,
    )
    generator, analysis = _run_analysis(config, project_path, options, api_key, model)

    output_dir = Path(output).resolve()
    output_file = output_dir / f"analysis.{OUTPUT_EXTENSIONS[options.output_format]}"
    try:
        generator.save_documentation(analysis, str(output_file))
        if with_templates:
            generator.generate_templates(analysis, str(output_dir / "templates"))
    except (LeafletError, OSError) as e:
        raise click.ClickException(str(e)) from e

    click.echo("\nDocumentation generation complete!")
    click.echo(f"Output: {output_file}")
    click.echo(f"Project: {analysis.project_name}")
    click.echo(f"Description: {analysis.description}")
    click.echo(f"Technologies: {', '.join(analysis.technology)}")
    click.echo(f"Files analyzed: {analysis.structure.total_files}")
    click.echo(f"Total lines: {analysis.structure.total_lines}")


@leaflet.command()
@click.argument("project_path", type=click.Path())
@click.option("--ignore", multiple=True, help="Extra ignore pattern (repeatable).")
@click.option(
    "--sample-size",
    type=click.IntRange(min=0),
    default=None,
    help="Source sample budget in characters.",
)
@click.option("--json", "as_json", is_flag=True, help="Emit the inventory as JSON.")
@click.option(
    "-o", "--output", type=click.Path(), default=None, help="Write JSON to a file."
)
@click.pass_obj
def inventory(
    config: AppConfig,
    project_path: str,
    ignore: tuple[str, ...],
    sample_size: Optional[int],
    as_json: bool,
    output: Optional[str],
) -> None:
    """Inventory a project's files without calling the LLM.

    Prints the directory tree, line totals and per-extension breakdown.
    """
    analyzer = FileAnalyzer(
        project_path, [*config.analysis.ignore_patterns, *ignore]
    )
    budget = config.analysis.sample_size if sample_size is None else sample_size
    try:
        structure, metadata = analyzer.analyze_project()
        sample = analyzer.get_source_code_sample(budget)
    except LeafletError as e:
        raise click.ClickException(str(e)) from e

    for warning in analyzer.warnings:
        click.echo(f"Warning: {warning}", err=True)

    if as_json or output:
        payload = json.dumps(
            {
                "structure": structure.to_dict(),
                "metadata": metadata.to_dict(),
                "sampleLength": len(sample),
            },
            indent=2,
            ensure_ascii=False,
        )
        if output:
            Path(output).write_text(payload + "\n", encoding="utf-8")
            click.echo(f"Inventory written to {output}")
        else:
            click.echo(payload)
        return

    click.echo(format_directory_tree(structure.root), nl=False)
    click.echo(f"\nFiles: {structure.total_files}")
    click.echo(f"Lines: {structure.total_lines}")
    breakdown = sorted(structure.language_breakdown.items(), key=lambda kv: (-kv[1], kv[0]))
    for extension, lines in breakdown:
        click.echo(f"  {extension or '(none)'}: {lines}")
    click.echo(f"Version: {metadata.version}")
    click.echo(f"Source sample: {len(sample)} characters")


@leaflet.command()
@click.argument("project_path", type=click.Path(exists=True, file_okay=False))
@click.option(
    "-o",
    "--output",
    type=click.Path(file_okay=False),
    default="./templates",
    help="Output directory for templates.",
)
@click.option("--api-key", default=None, help="Anthropic API key.")
@click.option("--model", default=None, help="Model to use.")
@click.pass_obj
def templates(
    config: AppConfig,
    project_path: str,
    output: str,
    api_key: Optional[str],
    model: Optional[str],
) -> None:
    """Generate documentation templates for a project.

    Writes README, API, setup and contributing scaffolds.
    """
    options = DocumentationOptions(
        output_format="markdown",
        include_inline=True,
        include_api_docs=True,
        include_setup_guide=True,
    )
    generator, analysis = _run_analysis(config, project_path, options, api_key, model)
    try:
        written = generator.generate_templates(analysis, output)
    except OSError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Templates generated in: {output} ({len(written)} files)")


@leaflet.command(name="config")
@click.pass_obj
def show_config(config: AppConfig) -> None:
    """Show the current configuration."""
    api_key_set = LLMClient(config=config.api).has_api_key
    click.echo("Leaflet Configuration")
    click.echo(f"API Key: {'Set' if api_key_set else 'Not set'}")
    click.echo(f"Default Model: {config.api.model}")
    click.echo(f"Default Temperature: {config.api.temperature}")
    click.echo(f"Max Tokens: {config.api.max_tokens}")
    click.echo(f"Output Directory: {config.output.output_dir}")


@leaflet.command()
@click.pass_obj
def history(config: AppConfig) -> None:
    """List stored analyses, newest first."""
    entries = AnalysisStore(config.output.output_dir).history()
    if not entries:
        click.echo("No stored analyses.")
        return
    for entry in entries:
        technologies = ", ".join(entry["technologies"] or [])
        click.echo(f"{entry['id']}  {entry['projectName']}  [{technologies}]")


@leaflet.command()
@click.argument("analysis_id")
@click.pass_obj
def show(config: AppConfig, analysis_id: str) -> None:
    """Print a stored analysis as JSON."""
    try:
        analysis = AnalysisStore(config.output.output_dir).load(analysis_id)
    except AnalysisNotFoundError as e:
        raise click.ClickException(str(e)) from e
    click.echo(json.dumps(analysis, indent=2, ensure_ascii=False))


@leaflet.command()
@click.argument("analysis_id")
@click.confirmation_option(prompt="Delete this analysis?")
@click.pass_obj
def delete(config: AppConfig, analysis_id: str) -> None:
    """Delete a stored analysis."""
    try:
        AnalysisStore(config.output.output_dir).delete(analysis_id)
    except AnalysisNotFoundError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Deleted analysis {analysis_id}")


@leaflet.command()
@click.option("--host", default=None, help="Bind address.")
@click.option("--port", type=int, default=None, help="Port to listen on.")
@click.pass_obj
def serve(config: AppConfig, host: Optional[str], port: Optional[int]) -> None:
    """Run the HTTP API server."""
    uvicorn.run(
        create_app(config),
        host=host or config.server.host,
        port=port or config.server.port,
    )
