"""Tests for the traceability REST API."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from foodsafe.traceability.setup import configure_traceability, get_traceability

PREFIX = "/api/v1/traceability"


@pytest.fixture
def app(config, store):
    app = FastAPI()
    configure_traceability(app, config=config, store=store)
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


class TestSetup:
    """Service registration."""

    def test_get_traceability(self, app):
        """The service is stored on app.state."""
        assert get_traceability(app).get_statistics()["rules"] == 12

    def test_unconfigured_app(self):
        """An app without the service raises RuntimeError."""
        with pytest.raises(RuntimeError):
            get_traceability(FastAPI())


class TestGraphEndpoints:
    """Genealogy, supply chain and lineage endpoints."""

    def test_tree(self, client):
        """GET tree returns the genealogy tree."""
        response = client.get(f"{PREFIX}/products/PRD-SOUP/tree")

        assert response.status_code == 200
        body = response.json()
        assert body["node_count"] == 5
        assert body["root"]["children"][0]["id"] == "PRD-BROTH"

    def test_tree_depth_limited(self, client):
        """max_depth is honoured."""
        body = client.get(f"{PREFIX}/products/PRD-SOUP/tree", params={"max_depth": 1}).json()
        assert body["node_count"] == 3
        assert body["root"]["children"][0]["truncated"] is True

    def test_tree_not_found(self, client):
        """Unknown products return 404 with the error payload."""
        response = client.get(f"{PREFIX}/products/PRD-404/tree")

        assert response.status_code == 404
        assert response.json()["detail"]["error_code"] == "FS_TRACEABILITY_NOT_FOUND_ERROR"

    def test_supply_chain(self, client):
        """Product-filtered supply chain graph."""
        body = client.get(f"{PREFIX}/supply-chain", params={"product_id": "PRD-STEW"}).json()
        assert [e["id"] for e in body["edges"]] == ["L1"]

    def test_lot_components(self, client):
        """Components carry their kind."""
        body = client.get(f"{PREFIX}/lots/LOT-SOUP-01/components").json()
        assert [(i["id"], i["kind"]) for i in body[:2]] == [
            ("PRD-BROTH", "Product"), ("CMP-NOODLE", "Component"),
        ]

    def test_affected_products(self, client):
        """Upstream products of a component lot."""
        body = client.get(f"{PREFIX}/lots/LOT-CHK-7/affected-products").json()
        assert [p["id"] for p in body] == ["PRD-BROTH", "PRD-SOUP", "PRD-STEW"]


class TestEvaluationEndpoints:
    """Recall, compliance and reporting endpoints."""

    def test_evaluate_recall(self, client, compliant_batch):
        """Complaint trend in the body is applied to the batch product."""
        response = client.post(f"{PREFIX}/recall/evaluate", json={
            "batch": compliant_batch.model_dump(mode="json"),
            "complaint_trend": 18.0,
        })

        assert response.status_code == 200
        assert response.json()["tier"] == "monitor"

    def test_stored_batch_evaluation(self, client):
        """A stored risky batch is recommended for recall."""
        body = client.get(f"{PREFIX}/batches/LOT-SOUP-02/evaluation").json()
        assert body["assessment"]["tier"] == "recall"
        assert body["compliance"]["passed"] is False

    def test_stored_batch_missing(self, client):
        """Unknown batches return 404."""
        assert client.get(f"{PREFIX}/batches/LOT-404/evaluation").status_code == 404

    def test_validate_compliance(self, client, compliant_batch):
        """The batch itself is the request body."""
        response = client.post(
            f"{PREFIX}/compliance/validate",
            json=compliant_batch.model_dump(mode="json"),
        )
        assert response.json()["score"] == 100.0

    def test_scenarios(self, client):
        """Scenario self test passes."""
        body = client.get(f"{PREFIX}/compliance/scenarios").json()
        assert body["summary"]["pass_rate"] == 100.0

    def test_single_scenario(self, client):
        """Single scenario by id, 404 when unknown."""
        assert client.get(f"{PREFIX}/compliance/scenarios/failed-ccp").json()["match"] is True
        assert client.get(f"{PREFIX}/compliance/scenarios/nope").status_code == 404

    def test_fda204_report(self, client, compliant_batch):
        """Report carries a 64-character provenance hash."""
        body = client.post(f"{PREFIX}/reports/fda204", json={
            "batch": compliant_batch.model_dump(mode="json"),
        }).json()
        assert len(body["provenance_hash"]) == 64

    def test_recall_scope(self, client):
        """Recall scope lists missing lots."""
        body = client.get(f"{PREFIX}/recalls/RC-001/scope").json()
        assert body["missing_batch_lots"] == ["LOT-UNKNOWN"]


class TestWorkflowEndpoints:
    """Workflow and escalation endpoints."""

    def test_valid_transition(self, client, app):
        """Initiated moves to Document Review."""
        workflow = get_traceability(app).start_approval("SUP-POULTRY")
        response = client.post(f"{PREFIX}/workflows/transition", json={
            "workflow": workflow.model_dump(mode="json"),
            "to_state": "Document Review",
            "actor": "qa",
        })

        assert response.status_code == 200
        assert response.json()["state"] == "Document Review"

    def test_invalid_transition_conflict(self, client, app):
        """Skipping steps returns 409."""
        workflow = get_traceability(app).start_approval("SUP-POULTRY")
        response = client.post(f"{PREFIX}/workflows/transition", json={
            "workflow": workflow.model_dump(mode="json"),
            "to_state": "Approved",
        })

        assert response.status_code == 409
        assert response.json()["detail"]["context"]["allowed_states"] == ["Document Review"]

    def test_escalation(self, client):
        """Eight days On Hold escalates to medium."""
        body = client.post(f"{PREFIX}/non-conformance/escalation", json={
            "status": "On Hold",
            "status_since": "2024-06-01T00:00:00Z",
            "now": "2024-06-09T00:00:00Z",
        }).json()

        assert body["requires_escalation"] is True
        assert body["escalation_level"] == "medium"
        assert body["days_in_current_status"] == 8

    def test_health(self, client):
        """Health check reports status and statistics."""
        body = client.get(f"{PREFIX}/health").json()
        assert body["status"] == "healthy"
        assert body["scenarios"] == 7
