"""
Tests for the Job Agent HTTP server.
"""

import httpx
import pytest
from fastapi.testclient import TestClient

from job_agent.config import Settings
from job_agent.providers import build_registry
from job_agent.server import create_app

JOB_RESULTS = {
    "organic_results": [
        {
            "title": "Python Developer - Acme",
            "link": "https://example.com/careers/1",
            "snippet": "Acme is hiring in Philadelphia. $90k - $110k per year.",
        },
        {
            "title": "Python Developer - Globex",
            "link": "https://example.com/careers/2",
            "snippet": "Posted 2 days ago",
        },
    ]
}


@pytest.fixture
def judge(fake_client):
    return fake_client("judge", content='{"done": true, "feedback": []}')


@pytest.fixture
def app(tmp_path, make_registry, judge):
    settings = Settings(downloads_dir=str(tmp_path / "downloads"), serpapi_key="serp-key")
    return create_app(registry=make_registry(judge), settings=settings)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def serpapi(app):
    """Route the app's SerpAPI calls to canned results."""
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json=JOB_RESULTS))
    app.state.agent.toolbox.search._client = httpx.AsyncClient(transport=transport)
    return transport


# =============================================================================
# Health and Provider Tests
# =============================================================================

class TestStatusEndpoints:
    """Test health, provider status and reset."""

    def test_health(self, client):
        data = client.get("/api/health").json()
        assert data["status"] == "healthy"
        assert data["jobsInMemory"] == 0

    def test_providers(self, client):
        data = client.get("/api/providers").json()
        assert data["success"] is True
        assert data["providers"]["providers"] == {"judge": "unknown"}
        assert data["providers"]["active"] == "judge"
        assert data["providers"]["client_types"] == {"judge": "FakeClient"}

    def test_reset(self, client, app, judge):
        app.state.agent.registry.active_set().cache.mark_unavailable("judge", "down")
        assert client.post("/api/providers/reset").json()["success"] is True
        assert client.get("/api/providers").json()["providers"]["providers"] == {"judge": "unknown"}
        assert judge.reset_count == 1


class TestSettingsEndpoint:
    """Test runtime reconfiguration."""

    @pytest.fixture
    def unconfigured(self, tmp_path):
        settings = Settings(downloads_dir=str(tmp_path))
        return TestClient(create_app(registry=build_registry("single"), settings=settings))

    def test_groq_key(self, unconfigured):
        data = unconfigured.post("/api/settings", json={"apiKey": "gsk_abc"}).json()
        assert data["success"] is True
        assert data["providers"]["providers"] == {"groq": "unknown"}
        assert data["providers"]["client_types"] == {"groq": "GroqClient"}

    def test_url_key(self, unconfigured):
        data = unconfigured.post("/api/settings", json={
            "apiKey": "sk-x",
            "llmProviderUrl": "https://llm.example.com/v1",
        }).json()
        assert data["providers"]["client_types"] == {"openai_compatible": "OpenAICompatibleClient"}

    def test_invalid_configuration(self, unconfigured):
        response = unconfigured.post("/api/settings", json={"apiKey": "sk-x"})
        assert response.status_code == 500
        assert response.json()["success"] is False

    def test_serpapi_key_only(self, unconfigured):
        response = unconfigured.post("/api/settings", json={"serpApiKey": "new-key"})
        assert response.json()["success"] is True
        assert unconfigured.app.state.agent.toolbox.search.api_key == "new-key"

    def test_empty_key_clears_providers(self, unconfigured):
        unconfigured.post("/api/settings", json={"apiKey": "gsk_abc"})
        data = unconfigured.post("/api/settings", json={"apiKey": ""}).json()

        assert data["success"] is True
        assert data["providers"]["providers"] == {}
        assert data["providers"]["active"] is None
        assert unconfigured.app.state.agent.registry.is_configured is False


class TestStartupConfiguration:
    """Test building the app from operator settings."""

    def test_key_without_url_starts_unconfigured(self, tmp_path):
        settings = Settings(api_key="sk-x", downloads_dir=str(tmp_path))
        client = TestClient(create_app(settings=settings))

        assert client.get("/api/health").json()["status"] == "healthy"
        status = client.get("/api/providers").json()["providers"]
        assert status["providers"] == {}
        assert status["active"] is None

        data = client.post("/api/settings", json={
            "apiKey": "sk-x",
            "llmProviderUrl": "https://llm.example.com/v1",
        }).json()
        assert data["providers"]["providers"] == {"openai_compatible": "unknown"}

    def test_groq_key_only(self, tmp_path):
        settings = Settings(groq_key="gsk_abc", downloads_dir=str(tmp_path))
        client = TestClient(create_app(settings=settings))

        status = client.get("/api/providers").json()["providers"]
        assert status["client_types"] == {"groq": "GroqClient"}


# =============================================================================
# Tool Endpoint Tests
# =============================================================================

class TestToolEndpoints:
    """Test the individual tool endpoints."""

    def test_todos(self, client):
        result = client.post("/api/tools/add-todos", json={"newTodos": ["a", "b"]}).json()
        assert result == {"success": True, "result": "Added 2 to todo list. Now have 2 todos."}

        client.post("/api/tools/mark-todo-done", json={"todo": "a"})
        assert client.get("/api/tools/check-todos").json()["result"] == '["b"]'

    def test_check_goal_done(self, client, judge):
        result = client.post("/api/tools/check-goal-done", json={"goal": "g", "answer": "a"}).json()
        assert result == {"success": True, "result": {"done": True, "feedback": []}}
        assert len(judge.calls) == 1

    def test_search_google(self, client, serpapi):
        result = client.post("/api/tools/search-google", json={"query": "python jobs"}).json()
        assert result["success"] is True
        assert "https://example.com/careers/1" in result["result"]

    def test_search_google_without_key(self, tmp_path, make_registry, judge):
        app = create_app(registry=make_registry(judge), settings=Settings(downloads_dir=str(tmp_path)))
        response = TestClient(app).post("/api/tools/search-google", json={"query": "python jobs"})
        assert response.status_code == 500
        assert "SerpAPI key not configured" in response.json()["error"]

    def test_validation_error(self, client):
        assert client.post("/api/tools/mark-todo-done", json={}).status_code == 422


# =============================================================================
# Search, History and Export Tests
# =============================================================================

class TestSearchAndExport:
    """Test the job search flow through history and export."""

    def test_search_jobs_saves_report(self, client, serpapi, tmp_path):
        data = client.post("/api/search-jobs", json={
            "query": "Python Developer",
            "location": "Philadelphia, PA",
            "count": 2,
        }).json()

        assert data["success"] is True
        assert data["count"] == 2
        assert [job["company"] for job in data["jobs"]] == ["Acme", "Globex"]
        report = tmp_path / "downloads" / data["filename"].split("/")[-1]
        assert report.is_file()
        assert client.get("/api/health").json()["jobsInMemory"] == 2

    def test_history_and_reexport(self, client, serpapi):
        client.post("/api/search-jobs", json={"query": "Python Developer", "count": 2})

        files = client.get("/api/history").json()["files"]
        assert len(files) == 1
        name = files[0]["filename"]
        assert files[0]["csvUrl"] == f"/api/export/{name}/csv"

        csv_response = client.get(f"/api/export/{name}/csv")
        assert csv_response.status_code == 200
        assert csv_response.headers["content-type"].startswith("text/csv")
        assert name.replace(".txt", ".csv") in csv_response.headers["content-disposition"]
        assert "Acme" in csv_response.text

        assert client.get(f"/api/export/{name}/pdf").content.startswith(b"%PDF")
        assert client.get(files[0]["downloadUrl"]).status_code == 200

    def test_history_empty(self, client):
        assert client.get("/api/history").json() == {"success": True, "files": []}

    def test_reexport_missing_file(self, client):
        assert client.get("/api/export/missing.txt/csv").status_code == 404

    def test_reexport_invalid_format(self, client, serpapi):
        client.post("/api/search-jobs", json={"query": "Python Developer", "count": 1})
        name = client.get("/api/history").json()["files"][0]["filename"]
        assert client.get(f"/api/export/{name}/docx").status_code == 400

    def test_export_posted_jobs(self, client):
        jobs = [{"jobTitle": "Engineer", "company": "Acme"}]
        response = client.post("/api/export/excel", json={"jobs": jobs})
        assert response.status_code == 200
        assert response.content[:2] == b"PK"
        assert ".xlsx" in response.headers["content-disposition"]

    def test_export_posted_invalid_format(self, client):
        response = client.post("/api/export/docx", json={"jobs": []})
        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Invalid format"}
