"""Shared fixtures for the test suite."""

import json
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from leaflet.generators.models import Dependency, DocumentationSection, ProjectAnalysis
from leaflet.inventory.structure import DirectoryNode, FileStructure, NodeKind, ProjectMetadata

ANALYSIS_REPLY = {
    "projectName": "demo-app",
    "description": "A demo application that greets people.",
    "technology": ["TypeScript", "Python"],
    "entryPoints": ["src/a.ts"],
    "dependencies": [
        {"name": "express", "version": "^4.18.0", "type": "production", "description": "HTTP"},
        {"name": "jest", "version": "^29.0.0", "type": "development"},
    ],
    "documentation": [
        {"type": "api", "title": "Greeting API", "content": "GET /hello", "priority": 1},
        {"type": "setup", "title": "Install", "content": "Run npm install", "priority": 2},
        {"type": "readme", "title": "Overview", "content": "Says hi", "priority": 1},
    ],
}


@pytest.fixture
def sample_analysis() -> ProjectAnalysis:
    """A small, fully populated ProjectAnalysis."""
    root = DirectoryNode(name="demo", kind=NodeKind.DIRECTORY, full_path="/tmp/demo")
    src = DirectoryNode(name="src", kind=NodeKind.DIRECTORY, full_path="/tmp/demo/src")
    src.children.append(
        DirectoryNode(name="a.ts", kind=NodeKind.FILE, full_path="/tmp/demo/src/a.ts")
    )
    root.children.append(src)
    ts = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return ProjectAnalysis(
        project_name="demo-app",
        description="A demo application that greets people.",
        structure=FileStructure(
            root=root, total_files=1, total_lines=10, language_breakdown={".ts": 10}
        ),
        metadata=ProjectMetadata(created_at=ts, last_modified=ts, license="Apache-2.0"),
        technology=["TypeScript", "Node.js"],
        dependencies=[Dependency(name="express", version="^4.18.0")],
        entry_points=["src/a.ts"],
        documentation=[
            DocumentationSection(type="api", title="Greeting API", content="GET /hello"),
            DocumentationSection(type="setup", title="Install", content="Run npm install"),
        ],
    )


def make_llm(*replies: str) -> MagicMock:
    """Build a mock LLMClient whose generate() returns the given texts."""
    llm = MagicMock()
    results = []
    for reply in replies:
        result = MagicMock()
        result.content = reply
        results.append(result)
    llm.generate.side_effect = results
    return llm


def analysis_reply(**overrides: object) -> str:
    """The canonical analysis reply as JSON text, with optional overrides."""
    return json.dumps({**ANALYSIS_REPLY, **overrides})


@pytest.fixture(name="make_llm")
def make_llm_fixture():
    """Factory fixture for mock LLM clients."""
    return make_llm


@pytest.fixture(name="analysis_reply")
def analysis_reply_fixture():
    """Factory fixture for analysis reply JSON."""
    return analysis_reply
