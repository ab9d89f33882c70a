"""
Tests for API endpoints.
"""

import json

import pytest
from fastapi import status


class TestSanitizeEndpoint:
    """Test the syntax-only repair endpoint."""

    def test_fixes_broken_diagram(self, client, broken_flowchart):
        response = client.post("/api/mermaid/sanitize", json={"source": broken_flowchart})

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["status"] == "fixed"
        assert data["changed"] is True
        assert 'B["process(file)"]' in data["source"]
        assert set(data["rules_applied"]) == {
            "special_chars", "empty_edge_labels", "nested_quotes", "trailing_punctuation",
        }

    def test_valid_diagram_is_unchanged(self, client, valid_flowchart):
        response = client.post("/api/mermaid/sanitize", json={"source": valid_flowchart})

        data = response.json()
        assert data == {
            "status": "unchanged",
            "source": valid_flowchart,
            "changed": False,
            "rules_applied": [],
        }

    def test_sanitize_does_not_strip_directives(self, client):
        source = 'flowchart TD\n    click A href "x"\n    A --> B'

        response = client.post("/api/mermaid/sanitize", json={"source": source})

        assert response.json()["source"] == source

    def test_missing_source_is_rejected(self, client):
        response = client.post("/api/mermaid/sanitize", json={})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


class TestCleanEndpoint:
    """Test security filter plus repair."""

    def test_clean_strips_and_repairs(self, client):
        source = 'flowchart TD\n    click A call alert(1)\n    A[IO.puts] --> B'

        response = client.post("/api/mermaid/clean", json={"source": source})

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["source"] == 'flowchart TD\n    A["IO.puts"] --> B'
        assert data["security_stripped"] is True
        assert data["syntax_fixed"] is True
        assert data["rules_applied"] == ["special_chars"]


class TestRenderErrorEndpoint:
    """Test render-time recovery."""

    def test_auto_fixed(self, client):
        response = client.post("/api/mermaid/render-error", json={
            "source": "flowchart TD\n    A[File.open] --> B",
            "error_message": "Parse error on line 2",
        })

        data = response.json()
        assert data["action"] == "auto_fixed"
        assert data["source"] == 'flowchart TD\n    A["File.open"] --> B'
        assert data["fix_prompt"] is None

    def test_escalate(self, client, valid_flowchart):
        response = client.post("/api/mermaid/render-error", json={
            "source": valid_flowchart,
            "error_message": "Lexical error on line 4",
            "summary": "Decision flow",
        })

        data = response.json()
        assert data["action"] == "escalate"
        assert data["source"] == valid_flowchart
        assert "Lexical error on line 4" in data["fix_prompt"]
        assert "Decision flow" in data["fix_prompt"]


class TestPrepareEndpoint:
    """Test the diagram generation hand-off."""

    def test_prepare_dict_payload(self, client, generated_payload):
        response = client.post("/api/diagrams/prepare", json={"payload": generated_payload})

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["slug"] == "file-io-flow"
        assert data["tags"] == ["elixir", "io"]
        assert data["diagram_source"] == 'flowchart TD\n    A["File.open"] --> B["IO.puts"]'
        assert data["syntax_fixed"] is True
        assert data["security_stripped"] is False

    def test_prepare_json_text_payload(self, client, generated_payload):
        response = client.post("/api/diagrams/prepare", json={"payload": json.dumps(generated_payload)})

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["title"] == "File IO Flow"

    @pytest.mark.parametrize("payload", [
        "not json at all",
        {"title": "no mermaid"},
        {"mermaid": ""},
    ])
    def test_bad_payload_returns_422(self, client, payload):
        response = client.post("/api/diagrams/prepare", json={"payload": payload})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["detail"]
