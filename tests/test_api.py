"""Tests for the upload endpoint and health check."""

import pytest
from fastapi.testclient import TestClient

from backend.main import app
from backend.routes import analyze as analyze_route

from tests.fakes import SCENARIO_TEXT, FakeLLM, as_json, model_finding


@pytest.fixture
def client():
    app.dependency_overrides[analyze_route.get_llm] = lambda: None
    yield TestClient(app)
    app.dependency_overrides.clear()


def _upload(client, name="policy.txt", content=SCENARIO_TEXT.encode("utf-8")):
    return client.post("/api/analyze-file", files={"file": (name, content, "text/plain")})


def test_health(client):
    for path in ("/health", "/api/health"):
        response = client.get(path)
        assert response.status_code == 200
        assert response.json()["status"] == "ok"


def test_analyze_text_upload(client):
    response = _upload(client)
    assert response.status_code == 200
    data = response.json()
    assert data["stats"]["findings_source"] == "heuristic"
    assert data["scores"]["privacy"] == 40
    assert len(data["remediation_plan"]) <= 6
    assert data["findings"][0]["id"] == "H-001"


def test_analyze_pdf_upload(client, sample_pdf_path):
    with open(sample_pdf_path, "rb") as f:
        response = client.post(
            "/api/analyze-file", files={"file": ("policy.pdf", f.read(), "application/pdf")}
        )
    assert response.status_code == 200
    assert response.json()["doc"]["jurisdiction_mentions"] == ["AU"]


def test_missing_file_is_400(client):
    response = client.post("/api/analyze-file")
    assert response.status_code == 400
    assert response.json() == {"error": "No file uploaded"}


def test_short_text_is_400(client):
    response = _upload(client, content=b"hi")
    assert response.status_code == 400
    assert response.json() == {"error": "Could not extract meaningful text from file"}


def test_corrupt_pdf_is_400(client):
    response = _upload(client, name="scan.pdf", content=b"not a pdf at all, not even close")
    assert response.status_code == 400
    assert "error" in response.json()


def test_oversized_upload_is_400(client, monkeypatch):
    monkeypatch.setattr(analyze_route, "MAX_UPLOAD_BYTES", 10)
    response = _upload(client)
    assert response.status_code == 400
    assert "too large" in response.json()["error"]


def test_model_findings_are_used(client):
    app.dependency_overrides[analyze_route.get_llm] = lambda: FakeLLM([as_json(model_finding())])
    response = _upload(client)
    assert response.status_code == 200
    data = response.json()
    assert data["stats"]["findings_source"] == "model"
    assert data["findings"][0]["source"] == "model"


def test_gateway_failure_is_500(client):
    app.dependency_overrides[analyze_route.get_llm] = lambda: FakeLLM(fail_on={0})
    response = _upload(client)
    assert response.status_code == 500
    assert "Model call failed" in response.json()["error"]
