"""Tests for FastAPI API endpoints using TestClient."""

import json

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def services(store, ledger):
    """Point the API singletons at the test store and ledger."""
    from bluecarbon.api import deps

    deps.set_services(store=store, ledger=ledger)
    yield store, ledger
    deps.reset_services()


@pytest.fixture
def app(services):
    """Create a fresh app instance with a clean config and rate limiter."""
    import bluecarbon.config
    from bluecarbon.api.auth import _rate_buckets

    bluecarbon.config._config = None
    _rate_buckets.clear()

    from bluecarbon.api.main import create_app
    return create_app()


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def owner_headers(owner):
    return {"X-User-Id": owner.id}


@pytest.fixture
def verifier_headers(verifier):
    return {"X-User-Id": verifier.id}


@pytest.fixture
def registered(client, owner_headers, sample_submission):
    """A project registered through the API."""
    response = client.post("/api/projects", json=sample_submission.model_dump(mode="json"), headers=owner_headers)
    assert response.status_code == 201
    return response.json()["project"]


class TestHealthEndpoint:
    def test_health_returns_200(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["store_available"] is True
        assert data["ledger_available"] is True

    def test_health_counts_projects(self, client, registered):
        assert client.get("/api/health").json()["project_count"] == 1

    def test_health_degraded_when_store_down(self, client, store, monkeypatch):
        def broken(*args, **kwargs):
            raise ConnectionError("store offline")

        monkeypatch.setattr(store, "list_projects", broken)
        data = client.get("/api/health").json()
        assert data["status"] == "degraded"
        assert data["store_available"] is False

    def test_request_id_header(self, client):
        response = client.get("/api/health")
        assert "X-Request-ID" in response.headers


class TestCalculatorEndpoints:
    def test_forward_calculation(self, client):
        response = client.post("/api/calculate", json={"area_m2": 100_000, "ecosystem_type": "mangrove"})
        assert response.status_code == 200
        data = response.json()
        assert data["annual_absorption"] == 71.05
        assert data["cumulative_absorption"] == 1421.0
        assert data["equivalences"] == {"cars_removed": 32, "homes_powered": 9, "trees_planted": 22736}
        assert data["sequestration_factor"] == 10.15
        assert data["buffer_factor"] == pytest.approx(0.7)
        assert data["years"] == 20
        assert data["policy_area_needed"] is None

    def test_policy_calculation(self, client):
        response = client.post(
            "/api/calculate/policy",
            json={"target_co2_reduction": 1000, "ecosystem_type": "seagrass", "years": 20},
        )
        assert response.status_code == 200
        assert response.json()["policy_area_needed"] == 82102

    def test_non_positive_area_rejected(self, client):
        response = client.post("/api/calculate", json={"area_m2": 0, "ecosystem_type": "mangrove"})
        assert response.status_code == 422

    def test_unknown_ecosystem_rejected(self, client):
        response = client.post("/api/calculate", json={"area_m2": 1000, "ecosystem_type": "tundra"})
        assert response.status_code == 422

    def test_degenerate_buffers_rejected(self, client):
        response = client.post("/api/calculate", json={
            "area_m2": 1000,
            "ecosystem_type": "mangrove",
            "buffers": {"uncertainty": 50, "mortality": 40, "verification": 10},
        })
        assert response.status_code == 422
        assert response.json()["error"] == "InvalidInput"

    def test_nan_buffer_rejected(self, client):
        response = client.post(
            "/api/calculate",
            content='{"area_m2": 1000, "ecosystem_type": "mangrove", "buffers": {"uncertainty": NaN}}',
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 422

    def test_infinite_area_rejected(self, client):
        response = client.post(
            "/api/calculate",
            content='{"area_m2": Infinity, "ecosystem_type": "mangrove"}',
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 422

    def test_reference_data(self, client):
        data = client.get("/api/reference").json()
        assert data["sequestration_factors"]["kelp_forest"] == 12.3
        assert data["default_buffers"] == {"uncertainty": 10, "mortality": 15, "verification": 5}
        assert len(data["hotspots"]) > 0


class TestProjectEndpoints:
    def test_register_requires_user(self, client, sample_submission):
        response = client.post("/api/projects", json=sample_submission.model_dump(mode="json"))
        assert response.status_code == 401

    def test_register_unknown_user(self, client, sample_submission):
        response = client.post(
            "/api/projects", json=sample_submission.model_dump(mode="json"), headers={"X-User-Id": "ghost"}
        )
        assert response.status_code == 401

    def test_register(self, registered, owner):
        assert registered["status"] == "pending"
        assert registered["owner_id"] == owner.id
        assert registered["credibility_score"] == 100
        assert registered["carbon_calculations"]["annual_co2_absorption"] == 71.05

    def test_register_invalid_area(self, client, owner_headers, sample_submission):
        body = sample_submission.model_dump(mode="json")
        body["area_m2"] = -5
        response = client.post("/api/projects", json=body, headers=owner_headers)
        assert response.status_code == 422

    def test_register_nan_area(self, client, owner_headers, sample_submission):
        body = sample_submission.model_dump(mode="json")
        body["area_m2"] = float("nan")
        response = client.post(
            "/api/projects",
            content=json.dumps(body),
            headers={**owner_headers, "Content-Type": "application/json"},
        )
        assert response.status_code == 422

    def test_list_and_get(self, client, registered):
        listing = client.get("/api/projects").json()
        assert listing["count"] == 1
        assert listing["projects"][0]["id"] == registered["id"]

        response = client.get(f"/api/projects/{registered['id']}")
        assert response.status_code == 200
        assert response.json()["name"] == registered["name"]

    def test_list_filters_by_status(self, client, registered):
        assert client.get("/api/projects", params={"status": "approved"}).json()["count"] == 0
        assert client.get("/api/projects", params={"status": "pending"}).json()["count"] == 1

    def test_missing_project(self, client):
        assert client.get("/api/projects/does-not-exist").status_code == 404

    def test_invalid_project_id(self, client):
        assert client.get("/api/projects/bad.id").status_code == 400

    def test_anomalies(self, client, registered):
        data = client.get(f"/api/projects/{registered['id']}/anomalies").json()
        assert data["credibility_score"] == 100
        assert data["report"] == {"is_suspicious": False, "flags": [], "credibility_impact": 0}

    def test_events(self, client, registered):
        data = client.get(f"/api/projects/{registered['id']}/events").json()
        assert [e["event_type"] for e in data["events"]] == ["registration"]

    def test_recalculate(self, client, registered, owner_headers):
        response = client.post(
            f"/api/projects/{registered['id']}/calculation",
            json={"area_m2": 250_000},
            headers=owner_headers,
        )
        assert response.status_code == 200
        project = response.json()["project"]
        assert project["credibility_score"] == 75
        assert project["anomaly_flags"] == ["Unrealistic area expansion detected"]


class TestVerificationEndpoints:
    def test_owner_cannot_verify(self, client, registered, owner_headers):
        response = client.post(
            f"/api/projects/{registered['id']}/verify", json={"decision": "approve"}, headers=owner_headers
        )
        assert response.status_code == 403

    def test_approve(self, client, registered, verifier_headers):
        response = client.post(
            f"/api/projects/{registered['id']}/verify",
            json={"decision": "approve", "comments": "Survey confirmed"},
            headers=verifier_headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["project"]["status"] == "approved"
        assert data["verification_details"]["nft_token_id"] is not None
        assert [e["event_type"] for e in data["ledger_events"]] == ["nft_mint", "verification"]

    def test_second_decision_conflicts(self, client, registered, verifier_headers):
        url = f"/api/projects/{registered['id']}/verify"
        client.post(url, json={"decision": "reject"}, headers=verifier_headers)
        response = client.post(url, json={"decision": "approve"}, headers=verifier_headers)
        assert response.status_code == 409
        assert response.json()["error"] == "InvalidStateTransition"

    def test_unknown_decision(self, client, registered, verifier_headers):
        response = client.post(
            f"/api/projects/{registered['id']}/verify", json={"decision": "maybe"}, headers=verifier_headers
        )
        assert response.status_code == 422

    def test_start_review(self, client, registered, verifier_headers):
        response = client.post(f"/api/projects/{registered['id']}/review", headers=verifier_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "under_review"

    def test_ledger_outage_returns_503(self, client, registered, verifier_headers, failing_ledger):
        from bluecarbon.api import deps

        failing_ledger.fail_log = True
        deps.set_services(ledger=failing_ledger)
        response = client.post(
            f"/api/projects/{registered['id']}/verify", json={"decision": "approve"}, headers=verifier_headers
        )
        assert response.status_code == 503
        body = response.json()
        assert body["error"] == "CollaboratorUnavailable"
        assert len(body["ledger_transactions"]) == 1
        assert client.get(f"/api/projects/{registered['id']}").json()["status"] == "pending"

    def test_stats(self, client, registered, verifier_headers):
        client.post(f"/api/projects/{registered['id']}/verify", json={"decision": "approve"}, headers=verifier_headers)
        data = client.get("/api/stats").json()
        assert data["total_projects"] == 1
        assert data["approved_projects"] == 1
        assert data["total_co2_absorbed"] == 1421.0
