"""Configuration loader and validator for the documentation generator.

Loads settings from configs/config.yaml and provides typed access
to all configuration sections via dataclasses.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "configs" / "config.yaml"

SUPPORTED_FORMATS = ("json", "markdown", "html")
SUPPORTED_TONES = ("technical", "friendly", "formal")
SUPPORTED_VERBOSITY = ("minimal", "standard", "detailed")


@dataclass
class APIConfig:
    """Configuration for the Anthropic API client."""

    provider: str = "anthropic"
    model: str = "claude-sonnet-4-20250514"
    max_tokens: int = 4000
    temperature: float = 0.3
    rate_limit_rpm: int = 50
    retry_max_attempts: int = 3
    retry_base_delay: float = 1.0


@dataclass
class AnalysisConfig:
    """Configuration for the project file inventory."""

    ignore_patterns: list[str] = field(default_factory=list)
    sample_size: int = 50_000


@dataclass
class DocumentationConfig:
    """Default options for generated documentation."""

    output_format: str = "json"
    tone: str = "friendly"
    verbosity: str = "standard"
    default_branch: str = "main"


@dataclass
class OutputConfig:
    """Configuration for analysis storage and imports."""

    output_dir: str = "output"
    temp_dir: str = "temp"
    temp_max_age_hours: int = 24


@dataclass
class ServerConfig:
    """Configuration for the HTTP API server."""

    host: str = "127.0.0.1"
    port: int = 4000


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[str] = None


@dataclass
class AppConfig:
    """Top-level application configuration."""

    api: APIConfig = field(default_factory=APIConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    documentation: DocumentationConfig = field(default_factory=DocumentationConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _choice(value: str, allowed: tuple[str, ...], default: str, name: str) -> str:
    """Validate a setting against its allowed values.

    Args:
        value: Configured value.
        allowed: Accepted values.
        default: Value used when ``value`` is not accepted.
        name: Setting name for the log message.

    Returns:
        ``value`` if allowed, otherwise ``default``.
    """
    if value not in allowed:
        logger.warning("Unsupported %s %r, using %r", name, value, default)
        return default
    return value


def _build_documentation_config(data: dict) -> DocumentationConfig:
    """Build a DocumentationConfig from a dictionary.

    Args:
        data: Dictionary with documentation settings.

    Returns:
        A validated DocumentationConfig instance.
    """
    return DocumentationConfig(
        output_format=_choice(
            data.get("output_format", "json"), SUPPORTED_FORMATS, "json", "output format"
        ),
        tone=_choice(data.get("tone", "friendly"), SUPPORTED_TONES, "friendly", "tone"),
        verbosity=_choice(
            data.get("verbosity", "standard"),
            SUPPORTED_VERBOSITY,
            "standard",
            "verbosity",
        ),
        default_branch=data.get("default_branch", "main"),
    )


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """Load application configuration from a YAML file.

    Reads the YAML config file and constructs a fully typed AppConfig
    object. Falls back to defaults for any missing values. The API key
    is read from the ANTHROPIC_API_KEY environment variable, not from
    the config file. The LEAFLET_CONFIG environment variable overrides
    the default config location.

    Args:
        config_path: Path to the YAML config file. If None, uses
            LEAFLET_CONFIG or the default path at configs/config.yaml.

    Returns:
        A fully populated AppConfig instance.

    Raises:
        yaml.YAMLError: If the config file contains invalid YAML.
    """
    path = Path(config_path or os.getenv("LEAFLET_CONFIG") or _DEFAULT_CONFIG_PATH)

    if not path.exists():
        logger.warning("Config file not found at %s, using defaults", path)
        return AppConfig()

    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    logger.info("Loaded configuration from %s", path)

    api_data = raw.get("api", {})
    if not os.getenv("ANTHROPIC_API_KEY"):
        logger.warning("ANTHROPIC_API_KEY not set in environment")

    api_config = APIConfig(
        provider=api_data.get("provider", "anthropic"),
        model=api_data.get("model", "claude-sonnet-4-20250514"),
        max_tokens=api_data.get("max_tokens", 4000),
        temperature=api_data.get("temperature", 0.3),
        rate_limit_rpm=api_data.get("rate_limit_rpm", 50),
        retry_max_attempts=api_data.get("retry_max_attempts", 3),
        retry_base_delay=api_data.get("retry_base_delay", 1.0),
    )

    analysis_data = raw.get("analysis", {})
    analysis_config = AnalysisConfig(
        ignore_patterns=list(analysis_data.get("ignore_patterns") or []),
        sample_size=analysis_data.get("sample_size", 50_000),
    )

    output_data = raw.get("output", {})
    output_config = OutputConfig(
        output_dir=output_data.get("output_dir", "output"),
        temp_dir=output_data.get("temp_dir", "temp"),
        temp_max_age_hours=output_data.get("temp_max_age_hours", 24),
    )

    server_data = raw.get("server", {})
    server_config = ServerConfig(
        host=server_data.get("host", "127.0.0.1"),
        port=int(os.getenv("PORT") or server_data.get("port", 4000)),
    )

    logging_data = raw.get("logging", {})
    logging_config = LoggingConfig(
        level=logging_data.get("level", "INFO"),
        format=logging_data.get(
            "format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        ),
        file=logging_data.get("file"),
    )

    return AppConfig(
        api=api_config,
        analysis=analysis_config,
        documentation=_build_documentation_config(raw.get("documentation", {})),
        output=output_config,
        server=server_config,
        logging=logging_config,
    )
