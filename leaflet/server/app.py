"""HTTP API for project analysis and stored-analysis management.

Endpoints:
    GET    /health                  liveness probe
    GET    /api/config              effective LLM and documentation settings
    POST   /api/analyze             import, analyze and store a project
    GET    /api/history             stored analyses, newest first
    GET    /api/download/{id}       a stored analysis.json
    DELETE /api/analysis/{id}       remove a stored analysis

Analysis work is blocking, so the routes are plain ``def`` functions
and FastAPI runs them in its threadpool.
"""

import dataclasses
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Literal, Optional

from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from leaflet import __version__
from leaflet.errors import AnalysisNotFoundError, LeafletError, RepoImportError
from leaflet.generators.doc_generator import DocumentationGenerator
from leaflet.generators.llm_client import LLMClient
from leaflet.generators.models import DocumentationOptions
from leaflet.output.store import ANALYSIS_FILE, AnalysisStore, download_url
from leaflet.utils.config import (
    SUPPORTED_FORMATS,
    SUPPORTED_TONES,
    SUPPORTED_VERBOSITY,
    APIConfig,
    AppConfig,
    load_config,
)
from leaflet.utils.repo_importer import RepoImporter

logger = logging.getLogger(__name__)

LLMFactory = Callable[[APIConfig, Optional[str]], LLMClient]

_EXTENSIONS = {"markdown": "md", "html": "html"}


class AnalyzeRequest(BaseModel):
    """Body of POST /api/analyze. Field names are camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    project_path: Optional[str] = None
    repo_url: Optional[str] = None
    branch: Optional[str] = None
    output_format: Literal["json", "markdown", "html"] = "json"
    tone: Literal["technical", "friendly", "formal"] = "friendly"
    verbosity: Literal["minimal", "standard", "detailed"] = "standard"
    include_api_docs: bool = False
    include_setup_guide: bool = False
    include_inline: bool = False
    generate_templates: bool = False
    api_key: Optional[str] = None
    model: Optional[str] = None


def _default_llm_factory(api_config: APIConfig, api_key: Optional[str]) -> LLMClient:
    return LLMClient(config=api_config, api_key=api_key)


router = APIRouter()


def _config(request: Request) -> AppConfig:
    return request.app.state.config


def _store(request: Request) -> AnalysisStore:
    return AnalysisStore(_config(request).output.output_dir)


@router.get("/health")
def health() -> dict[str, str]:
    """Report that the service is up."""
    return {
        "status": "ok",
        "version": __version__,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/api/config")
def get_config(request: Request) -> dict[str, Any]:
    """Return the effective LLM and documentation settings."""
    config = _config(request)
    api_key_set = _default_llm_factory(config.api, None).has_api_key
    return {
        "apiKey": "Set" if api_key_set else "Not set",
        "model": config.api.model,
        "temperature": config.api.temperature,
        "maxTokens": config.api.max_tokens,
        "supportedFormats": list(SUPPORTED_FORMATS),
        "supportedTones": list(SUPPORTED_TONES),
        "supportedVerbosity": list(SUPPORTED_VERBOSITY),
    }


def _import_project(
    body: AnalyzeRequest, config: AppConfig, importer: RepoImporter
) -> Path:
    """Copy or clone the requested project into the temp directory.

    Raises:
        HTTPException 400: Missing input, missing path, or import failure.
    """
    try:
        if body.repo_url:
            branch = body.branch or config.documentation.default_branch
            return importer.import_repository(body.repo_url, branch)
        if body.project_path:
            if not Path(body.project_path).exists():
                raise HTTPException(status_code=400, detail="Project path does not exist")
            return importer.import_local_directory(body.project_path)
    except RepoImportError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    raise HTTPException(status_code=400, detail="Either projectPath or repoUrl is required")


@router.post("/api/analyze")
def analyze(body: AnalyzeRequest, request: Request) -> Any:
    """Import a project, analyze it, and store the result.

    The imported copy is removed once the request completes.

    Returns:
        The analysis with processing time, output path, download URL
        and the imported path. Generator failures return 500 with the
        error and the processing time.
    """
    config = _config(request)
    importer = RepoImporter(config.output.temp_dir)
    imported_path = _import_project(body, config, importer)
    try:
        return _analyze_imported(body, request, config, imported_path)
    finally:
        importer.remove(imported_path)


def _analyze_imported(
    body: AnalyzeRequest, request: Request, config: AppConfig, imported_path: Path
) -> Any:
    api_config = (
        dataclasses.replace(config.api, model=body.model) if body.model else config.api
    )
    llm = request.app.state.llm_factory(api_config, body.api_key)
    options = DocumentationOptions(
        output_format=body.output_format,
        include_inline=body.include_inline,
        include_api_docs=body.include_api_docs,
        include_setup_guide=body.include_setup_guide,
        tone=body.tone,
        verbosity=body.verbosity,
    )
    generator = DocumentationGenerator(
        str(imported_path), llm, options=options, config=config
    )
    result = generator.generate_documentation()
    if not result.success:
        return JSONResponse(
            status_code=500,
            content={"error": result.error, "processingTime": result.processing_time},
        )

    store = _store(request)
    analysis_id, output_dir = store.create()
    output_path = store.save(analysis_id, result.data.to_dict())
    try:
        if body.output_format in _EXTENSIONS:
            output_path = generator.save_documentation(
                result.data,
                str(output_dir / f"analysis.{_EXTENSIONS[body.output_format]}"),
            )
        if body.generate_templates:
            generator.generate_templates(result.data, str(output_dir / "templates"))
    except (LeafletError, OSError) as e:
        logger.error("Failed to write documentation for %s: %s", analysis_id, e)
        return JSONResponse(
            status_code=500,
            content={"error": str(e), "processingTime": result.processing_time},
        )

    return {
        "success": True,
        "id": analysis_id,
        "data": result.data.to_dict(),
        "processingTime": result.processing_time,
        "outputPath": str(output_path),
        "downloadUrl": download_url(analysis_id),
        "importedPath": str(imported_path),
    }


@router.get("/api/history")
def get_history(request: Request) -> list[dict[str, Any]]:
    """List stored analyses, newest first."""
    return _store(request).history()


@router.get("/api/download/{analysis_id}")
def download_analysis(analysis_id: str, request: Request) -> dict[str, Any]:
    """Return the stored analysis.json of an analysis."""
    return _store(request).load(analysis_id)


@router.delete("/api/analysis/{analysis_id}")
def delete_analysis(analysis_id: str, request: Request) -> dict[str, bool]:
    """Delete a stored analysis."""
    _store(request).delete(analysis_id)
    return {"success": True}


def create_app(
    config: Optional[AppConfig] = None,
    llm_factory: Optional[LLMFactory] = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        config: Application configuration. Loaded from config.yaml if
            not provided.
        llm_factory: Builds the LLM client for each analysis request.

    Returns:
        The configured FastAPI application.
    """
    app = FastAPI(
        title="Leaflet API",
        description="AI-powered project documentation generator",
        version=__version__,
    )
    app.state.config = config or load_config()
    app.state.llm_factory = llm_factory or _default_llm_factory
    app.include_router(router)

    RepoImporter(app.state.config.output.temp_dir).cleanup_temp_files(
        app.state.config.output.temp_max_age_hours
    )

    @app.exception_handler(AnalysisNotFoundError)
    def _not_found(request: Request, exc: AnalysisNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"error": str(exc)})

    logger.info(
        "API ready, analyses stored in %s/*/%s",
        app.state.config.output.output_dir,
        ANALYSIS_FILE,
    )
    return app
