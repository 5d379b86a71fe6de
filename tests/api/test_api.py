"""
Tests for the HTTP API.
Each test gets a fresh application lifespan, so a fresh store and orchestrator.
"""
import pytest
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock, patch

from lead_scoring.agents.intent_classifier import IntentClassifier
from lead_scoring.api.main import app, cors_origins
from lead_scoring.config import get_settings
from lead_scoring.core.scoring_orchestrator import ScoringInProgressError

HEADER = "name,role,company,industry,location,linkedin_bio\n"
LEADS_CSV = (
    HEADER
    + "Ava Patel,CEO,FlowMetrics,SaaS,San Francisco,Builds analytics tools\n"
    + "Sam Lee,Junior Developer,FarmCo,Agriculture,Iowa,First production services\n"
    + "Kim Ortiz,Senior Analyst,Shopline,Retail,Austin,Pricing analytics\n"
    + "Raj Rao,VP Engineering,CloudNine,Cloud Infrastructure,Seattle,Scaling platforms\n"
)
OFFER = {
    "name": "AI Outreach Automation",
    "value_props": ["24/7 outreach", "6x more meetings"],
    "ideal_use_cases": ["B2B SaaS mid-market"],
}


class FailingClassifier(IntentClassifier):
    name = "failing"

    async def classify(self, lead, offer):
        raise RuntimeError("classifier down")

    def get_status(self):
        return {"configured": False}


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


def upload(client, content=LEADS_CSV, filename="leads.csv", content_type="text/csv"):
    if isinstance(content, str):
        content = content.encode()
    return client.post("/api/leads/upload", files={"file": (filename, content, content_type)})


def prepare(client):
    assert client.post("/api/offer", json=OFFER).status_code == 201
    assert upload(client).status_code == 201


class TestServiceEndpoints:

    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert "POST /api/score" in response.json()["endpoints"]

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "lead-scoring"
        assert data["environment"] == "test"
        assert data["uptime_seconds"] >= 0
        assert data["classifier"]["configured"] is False

    def test_metrics(self, client):
        prepare(client)
        client.post("/api/score")

        response = client.get("/metrics")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "lead_scoring_runs_total 1.0" in response.text
        assert 'lead_scoring_classifier_calls_total{source="fallback"} 4.0' in response.text


class TestOfferEndpoints:

    def test_create_offer(self, client):
        response = client.post("/api/offer", json=OFFER)

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["data"]["name"] == "AI Outreach Automation"
        assert body["data"]["ideal_use_cases"] == ["B2B SaaS mid-market"]
        assert body["data"]["id"]
        assert body["data"]["created_at"]
        assert body["meta"]["ready_for_scoring"] is False

    def test_name_required(self, client):
        response = client.post("/api/offer", json={"value_props": ["x"]})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "Validation failed"
        assert body["details"]

    def test_blank_value_prop_rejected(self, client):
        response = client.post("/api/offer", json={"name": "X", "value_props": [""]})

        assert response.status_code == 400

    def test_get_and_clear(self, client):
        assert client.get("/api/offer").status_code == 404

        client.post("/api/offer", json=OFFER)
        response = client.get("/api/offer")
        assert response.status_code == 200
        assert response.json()["data"]["name"] == OFFER["name"]

        assert client.delete("/api/offer").json()["success"] is True
        assert client.get("/api/offer").status_code == 404

    def test_ready_once_leads_exist(self, client):
        upload(client)

        response = client.post("/api/offer", json=OFFER)

        assert response.json()["meta"]["ready_for_scoring"] is True


class TestLeadEndpoints:

    def test_upload(self, client):
        response = upload(client)

        assert response.status_code == 201
        body = response.json()
        assert body["data"]["total_leads"] == 4
        assert body["data"]["valid_leads"] == 4
        assert body["validation"] == {"errors_count": 0, "errors": [], "has_more_errors": False}
        assert body["meta"]["ready_for_scoring"] is False

    def test_upload_reports_missing_columns(self, client):
        rows = "".join(f"Lead {i},CEO,Co,SaaS,NY\n" for i in range(12))
        response = upload(client, "name,role,company,industry,location\n" + rows)

        assert response.status_code == 201
        body = response.json()
        assert body["data"]["invalid_leads"] == 12
        assert body["validation"]["errors_count"] == 12
        assert len(body["validation"]["errors"]) == 10
        assert body["validation"]["has_more_errors"] is True
        assert body["validation"]["errors"][0] == {
            "line": 2,
            "lead": "Lead 0",
            "errors": ["Missing field: linkedin_bio"],
        }

    def test_no_file(self, client):
        response = client.post("/api/leads/upload")

        assert response.status_code == 400
        assert response.json()["error"] == "No file uploaded"

    def test_non_csv_rejected(self, client):
        response = upload(client, filename="leads.txt", content_type="text/plain")

        assert response.status_code == 400
        assert response.json()["error"] == "Only CSV files are allowed"

    def test_empty_csv_rejected(self, client):
        response = upload(client, HEADER)

        assert response.status_code == 400
        assert response.json()["error"] == "No valid lead data found"

    def test_too_large(self, client, monkeypatch):
        monkeypatch.setenv("MAX_UPLOAD_SIZE_BYTES", "32")
        get_settings.cache_clear()

        response = upload(client)

        assert response.status_code == 413

    def test_get_and_clear(self, client):
        assert client.get("/api/leads").status_code == 404

        upload(client)
        data = client.get("/api/leads").json()["data"]
        assert data["total_leads"] == 4
        assert len(data["sample_leads"]) == 3
        assert data["sample_leads"][0] == {
            "name": "Ava Patel",
            "role": "CEO",
            "company": "FlowMetrics",
            "industry": "SaaS",
            "is_valid": True,
        }

        client.delete("/api/leads")
        assert client.get("/api/leads").status_code == 404


class TestScoringEndpoints:

    def test_score_requires_offer(self, client):
        upload(client)

        response = client.post("/api/score")

        assert response.status_code == 400
        assert response.json()["error"] == "No offer data available"

    def test_score_requires_leads(self, client):
        client.post("/api/offer", json=OFFER)

        response = client.post("/api/score")

        assert response.status_code == 400
        assert response.json()["error"] == "No leads data available"

    def test_score(self, client):
        prepare(client)

        response = client.post("/api/score")

        assert response.status_code == 200
        body = response.json()
        data = body["data"]
        assert data["total_leads"] == 4
        assert len(data["preview"]) == 3
        assert data["preview"][0]["name"] == "Ava Patel"
        assert data["preview"][0]["score"] == 100
        assert data["preview"][0]["intent"] == "High"
        assert data["preview"][1]["score"] == 20
        assert data["preview"][1]["intent"] == "Low"
        assert data["summary"]["total_leads"] == 4
        assert body["processing"]["errors_count"] == 0
        assert body["processing"]["errors"] == []

    def test_errors_preview_truncated(self, client):
        rows = "".join(f"Lead {i},CEO,Co,SaaS,NY,Bio\n" for i in range(7))
        client.post("/api/offer", json=OFFER)
        upload(client, HEADER + rows)
        client.app.state.orchestrator.classifier = FailingClassifier()

        body = client.post("/api/score").json()

        assert body["processing"]["errors_count"] == 7
        assert len(body["processing"]["errors"]) == 5
        assert body["processing"]["errors"][0] == {"lead": "Lead 0", "error": "classifier down"}
        assert body["data"]["preview"][0]["score"] == 0
        assert body["data"]["preview"][0]["details"]["error"] is True

    def test_score_conflict(self, client):
        prepare(client)
        orchestrator = client.app.state.orchestrator

        with patch.object(
            orchestrator,
            "run_for_store",
            AsyncMock(side_effect=ScoringInProgressError("A scoring run is already in progress")),
        ):
            response = client.post("/api/score")

        assert response.status_code == 409
        assert response.json()["success"] is False

    def test_results(self, client):
        assert client.get("/api/results").status_code == 404

        prepare(client)
        results_id = client.post("/api/score").json()["data"]["results_id"]

        body = client.get("/api/results").json()
        assert body["meta"]["results_id"] == results_id
        assert body["meta"]["total_leads"] == 4
        assert len(body["data"]) == 4
        assert body["meta"]["summary"]["intent_distribution"]["high"] >= 1

    def test_latest_results_after_rerun(self, client):
        prepare(client)
        client.post("/api/score")
        second_id = client.post("/api/score").json()["data"]["results_id"]

        assert client.get("/api/results").json()["meta"]["results_id"] == second_id

    def test_export(self, client):
        assert client.get("/api/results/export").status_code == 404

        prepare(client)
        client.post("/api/score")

        response = client.get("/api/results/export")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "lead_scores_" in response.headers["content-disposition"]
        lines = response.text.strip().splitlines()
        assert lines[0] == "Name,Role,Company,Industry,Location,Intent,Score,Rule Score,AI Score,Reasoning"
        assert len(lines) == 5


class TestUnhandledErrors:

    def test_internal_error_body(self):
        with TestClient(app, raise_server_exceptions=False) as client:
            with patch.object(
                client.app.state.store,
                "get_latest_results",
                AsyncMock(side_effect=RuntimeError("store unavailable")),
            ):
                response = client.get("/api/results")

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "Internal server error"


class TestRateLimiting:

    @pytest.fixture
    def limited_client(self, monkeypatch):
        monkeypatch.setenv("RATE_LIMIT_MAX_REQUESTS", "3")
        get_settings.cache_clear()
        with TestClient(app) as test_client:
            yield test_client

    def test_api_requests_over_limit_get_429(self, limited_client):
        codes = [limited_client.get("/api/offer").status_code for _ in range(5)]

        assert codes == [404, 404, 404, 429, 429]

        response = limited_client.get("/api/offer")
        assert response.json() == {
            "success": False,
            "error": "Too many requests",
            "message": "Too many requests from this IP, please try again later.",
        }
        assert int(response.headers["retry-after"]) >= 1
        assert response.headers["ratelimit-remaining"] == "0"

    def test_remaining_header_counts_down(self, limited_client):
        first = limited_client.get("/api/offer")
        second = limited_client.get("/api/leads")

        assert first.headers["ratelimit-limit"] == "3"
        assert first.headers["ratelimit-remaining"] == "2"
        assert second.headers["ratelimit-remaining"] == "1"

    def test_non_api_routes_not_limited(self, limited_client):
        codes = [limited_client.get("/health").status_code for _ in range(6)]

        assert codes == [200] * 6
        assert limited_client.get("/api/offer").status_code == 404

    def test_default_limit_allows_normal_traffic(self, client):
        codes = {client.get("/api/offer").status_code for _ in range(100)}

        assert codes == {404}
        assert client.get("/api/offer").status_code == 429


class TestCors:

    def test_preflight_allows_configured_origin(self, client):
        response = client.options(
            "/api/offer",
            headers={
                "Origin": "https://app.example.com",
                "Access-Control-Request-Method": "POST",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] in ("*", "https://app.example.com")
        assert response.headers["access-control-allow-credentials"] == "true"

    def test_simple_request_carries_cors_header(self, client):
        response = client.get("/health", headers={"Origin": "https://app.example.com"})

        assert response.headers["access-control-allow-origin"] in ("*", "https://app.example.com")

    def test_origins_parsed_from_setting(self, monkeypatch):
        monkeypatch.setenv("CORS_ORIGIN", "https://a.example.com, https://b.example.com")
        get_settings.cache_clear()

        assert cors_origins() == ["https://a.example.com", "https://b.example.com"]
