"""
Pytest configuration and fixtures for the Mermaid repair test suite.
"""

import pytest
from pathlib import Path
from fastapi.testclient import TestClient

# Add server directory to Python path
import sys
server_dir = Path(__file__).parent.parent
sys.path.insert(0, str(server_dir))

from mermaid_repair.__main__ import app


@pytest.fixture
def client():
    """Create a test client for FastAPI application."""
    return TestClient(app)


@pytest.fixture
def broken_flowchart():
    """AI output carrying every defect class the sanitizer repairs."""
    return (
        "flowchart TD\n"
        "    A[File.open] -->|{:ok, file}| B[process(file)]\n"
        "    A -->|{:error, msg}| C[IO.puts]\n"
        "    B -->|\"\"| D[Done]\n"
        "    C -->|\"{self, \"World!\"}\"| E[\"receive\"]\n"
        "    E --> F[\"inner function\"].\n"
    )


@pytest.fixture
def valid_flowchart():
    """A diagram the sanitizer must leave byte-identical."""
    return (
        "flowchart TD\n"
        "    A[\"Start Process\"] --> B{\"Decision Point\"}\n"
        "    B -->|\"yes\"| C[\"Action One\"]\n"
        "    B --> D[Action Two]\n"
        "    C --> E[\"End\"]\n"
        "    D --> E\n"
    )


@pytest.fixture
def generated_payload():
    """Diagram JSON as returned by the generation model."""
    return {
        "title": "File IO Flow",
        "domain": "elixir",
        "tags": ["elixir", "io"],
        "mermaid": "```mermaid\nflowchart TD\n    A[File.open] --> B[IO.puts]\n```",
        "summary": "Opening a file and printing its contents.",
        "notes_md": "- File.open returns a tuple",
    }
