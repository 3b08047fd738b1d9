"""
Tests for the HTTP API.

Run with: pytest backend/tests/test_routes.py -v

The pipeline dependency is overridden with fake collaborators, so the
endpoints run the real analyzers and gate without calling OpenAI.
"""

import json

import pytest
from fastapi.testclient import TestClient

from truthlens.api.routes import get_audit_pipeline
from truthlens.main import app
from truthlens.services.pipeline import AuditPipeline


@pytest.fixture
def client_with(fake_checker, fake_explainer):
    """Build a TestClient whose pipeline uses the given collaborators."""

    def build(checker=None, explainer=None) -> TestClient:
        pipeline = AuditPipeline(checker or fake_checker(), explainer or fake_explainer())
        app.dependency_overrides[get_audit_pipeline] = lambda: pipeline
        return TestClient(app)

    yield build
    app.dependency_overrides.clear()


@pytest.fixture
def client(client_with):
    return client_with()


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


# =============================================================================
# POST /api/audit
# =============================================================================

def test_audit_returns_camel_case_report(client, stable_rows):
    response = client.post("/api/audit", json={
        "rows": stable_rows(30),
        "aiOutputText": "Visits are stable.",
        "fileLabel": "visits.csv",
    })

    assert response.status_code == 200
    body = response.json()
    assert body["overallTrustScore"] == 95
    assert body["riskBadge"] == "SAFE"
    assert body["criticalFlags"] == []
    assert body["governanceOverride"] is False
    assert body["dataQuality"]["totalRows"] == 30
    assert body["drift"]["driftedFeatures"] == []
    assert body["explainability"]["insights"] == ["fake insight"]
    assert body["fileLabel"] == "visits.csv"
    assert "timestamp" in body


def test_audit_accepts_field_names(client, stable_rows):
    response = client.post("/api/audit", json={
        "rows": stable_rows(30),
        "ai_output_text": "Visits are stable.",
    })

    assert response.status_code == 200


def test_insufficient_data_serializes_null_score(client, stable_rows):
    response = client.post("/api/audit", json={"rows": stable_rows(12)})

    body = response.json()
    assert response.status_code == 200
    assert body["overallTrustScore"] is None
    assert body["riskBadge"] == "INSUFFICIENT"
    assert body["criticalFlags"] == ["INSUFFICIENT_DATA"]


def test_empty_dataset_is_rejected(client):
    response = client.post("/api/audit", json={"rows": []})

    assert response.status_code == 400
    assert response.json()["detail"] == "Please upload a dataset first."


def test_engine_fault_is_500(client_with, stable_rows, broken_explainer):
    client = client_with(explainer=broken_explainer)

    response = client.post("/api/audit", json={"rows": stable_rows(30)})

    assert response.status_code == 500
    assert response.json()["detail"] == "Audit engine fault"


# =============================================================================
# POST /api/audit/upload
# =============================================================================

def test_upload_csv(client_with, fake_checker, stable_rows):
    checker = fake_checker()
    client = client_with(checker=checker)
    lines = ["visits,spend"] + [f"{r['visits']},{r['spend']}" for r in stable_rows(30)]

    response = client.post(
        "/api/audit/upload",
        files={"file": ("visits.csv", "\n".join(lines).encode(), "text/csv")},
        data={"ai_output_text": "Visits are stable."},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["riskBadge"] == "SAFE"
    assert body["fileLabel"] == "visits.csv"
    assert checker.calls[0][0] == "Visits are stable."


def test_upload_json_with_huge_integer(client, stable_rows):
    rows = stable_rows(30)
    body = json.dumps(rows).replace('"visits": 10,', '"visits": 1' + "0" * 400 + ",", 1)

    response = client.post(
        "/api/audit/upload",
        files={"file": ("visits.json", body.encode(), "application/json")},
    )

    assert response.status_code == 200
    assert response.json()["dataQuality"]["totalRows"] == 30


def test_audit_with_huge_integer(client, stable_rows):
    rows = stable_rows(30)
    rows[0]["spend"] = 10**400

    response = client.post("/api/audit", json={"rows": rows})

    assert response.status_code == 200


def test_upload_rejects_unsupported_file(client):
    response = client.post(
        "/api/audit/upload",
        files={"file": ("report.pdf", b"%PDF-1.7", "application/pdf")},
    )

    assert response.status_code == 400
    assert "Unsupported file type" in response.json()["detail"]


def test_upload_rejects_empty_file(client):
    response = client.post(
        "/api/audit/upload",
        files={"file": ("empty.csv", b"", "text/csv")},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Please upload a dataset first."


# =============================================================================
# GET /api/audit/demo
# =============================================================================

def test_demo_scenario_round_trip(client):
    demo = client.get("/api/audit/demo")

    assert demo.status_code == 200
    scenario = demo.json()
    assert scenario["fileLabel"] == "financial_audit_demo.json"
    assert len(scenario["rows"]) == 15
    assert "850" in scenario["aiOutputText"]

    response = client.post("/api/audit", json=scenario)

    # 15 rows: the data-volume veto decides before anything else
    assert response.json()["riskBadge"] == "INSUFFICIENT"


def test_demo_scenario_is_deterministic(client):
    assert client.get("/api/audit/demo").json() == client.get("/api/audit/demo").json()
