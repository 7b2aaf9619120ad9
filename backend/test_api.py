"""HTTP surface: status mapping and response envelopes"""

import pytest
from fastapi.testclient import TestClient

from flowscope.analysis.complexity import ComplexityAnalyzer
from flowscope.main import app


@pytest.fixture
def client():
    return TestClient(app)


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_overview_lists_endpoints(client):
    body = client.get("/api").json()
    assert "POST /api/analysis/complexity" in body["endpoints"]
    assert body["policyVersion"]


def test_unknown_route(client):
    assert client.get("/api/nope").status_code == 404


def test_cors_header_for_configured_origin(client):
    response = client.get("/health", headers={"Origin": "http://localhost:5173"})
    assert response.headers["access-control-allow-origin"] == "http://localhost:5173"


class TestBadInput:
    def test_missing_visualization(self, client):
        response = client.post("/api/diagrams/validate", json={})
        assert response.status_code == 400
        assert response.json() == {"error": "Bad Request", "message": "Visualization data is required"}

    def test_visualization_not_an_object(self, client):
        response = client.post("/api/analysis/complexity", json={"visualization": "diagram"})
        assert response.status_code == 400
        assert response.json()["message"] == "Visualization data must be an object"

    def test_nodes_not_a_list(self, client):
        response = client.post("/api/analysis/dependencies", json={"visualization": {"nodes": {}}})
        assert response.status_code == 400
        assert response.json()["message"] == "Nodes must be an array"

    def test_unknown_analysis_type_is_rejected(self, client, branching_payload):
        response = client.post(
            "/api/analysis/recommendations",
            json={"visualization": branching_payload, "analysisType": "bogus"},
        )
        assert response.status_code == 422


def test_internal_failure_is_a_500(client, monkeypatch, branching_payload):
    def explode(self, diagram):
        raise RuntimeError("boom")

    monkeypatch.setattr(ComplexityAnalyzer, "analyze", explode)

    response = client.post("/api/analysis/complexity", json={"visualization": branching_payload})

    assert response.status_code == 500
    assert response.json() == {
        "error": "Complexity Analysis Error",
        "message": "Complexity analysis failed: boom",
    }


class TestEndpoints:
    def test_validate_empty_diagram(self, client):
        response = client.post("/api/diagrams/validate", json={"visualization": {"nodes": [], "edges": []}})
        body = response.json()

        assert response.status_code == 200
        assert body["success"] is True
        assert body["valid"] is False
        assert [e["type"] for e in body["validation"]["errors"]] == ["empty_diagram"]
        assert body["validation"]["score"] == 64

    def test_parse(self, client, branching_payload):
        response = client.post(
            "/api/diagrams/parse",
            json={"visualization": branching_payload, "options": {"includeMetadata": False}},
        )
        body = response.json()

        assert response.status_code == 200
        assert body["meta"]["nodeCount"] == 5
        assert body["meta"]["edgeCount"] == 5
        assert body["meta"]["processSteps"] == 5
        assert body["meta"]["complexity"]["level"] == "Low"
        assert body["data"]["metadata"] is None
        assert body["data"]["nodes"][1]["semanticRole"] == "conditional_logic"

    def test_extract_patterns(self, client, branching_payload):
        body = client.post("/api/diagrams/extract-patterns", json={"visualization": branching_payload}).json()
        assert body["patternCount"] == 1
        assert body["patterns"][0]["type"] == "decision"
        assert body["patterns"][0]["instances"][0]["outgoingPaths"] == 2

    def test_process_flow(self, client, branching_payload):
        body = client.post("/api/analysis/process-flow", json={"visualization": branching_payload}).json()

        assert body["insights"]["totalPaths"] == 2
        assert body["insights"]["criticalPath"]["id"] == "path-0"
        assert body["insights"]["criticalPath"]["isCritical"] is True
        assert body["analysis"]["parallelProcesses"][0]["forkNode"] == "check"
        assert body["analysis"]["metrics"]["fanInOut"]["maxFanIn"] == 2

    def test_complexity(self, client, branching_payload):
        body = client.post("/api/analysis/complexity", json={"visualization": branching_payload}).json()

        assert body["success"] is True
        assert body["metrics"]["score"] == body["complexity"]["overallScore"]
        assert body["metrics"]["level"] == body["complexity"]["level"]
        assert body["complexity"]["metrics"]["structural"]["metrics"]["cyclomaticComplexity"] == 3
        assert body["metrics"]["factors"]["nodeDistribution"]["distribution"]["api-call"] == 1

    def test_recommendations(self, client):
        payload = {"nodes": [
            {"id": f"db{i}", "type": "database", "position": {"x": 0, "y": 0}, "data": {"label": "Store"}}
            for i in range(4)
        ]}
        body = client.post("/api/analysis/recommendations", json={"visualization": payload}).json()

        first = body["recommendations"][0]
        assert first["title"] == "Optimize Database Operations"
        assert first["priority"] == "high"
        assert first["id"] == "rec-1"
        assert body["summary"]["totalRecommendations"] == len(body["recommendations"])
        assert body["summary"]["categories"][0] == "performance"

    def test_recommendations_by_category(self, client, branching_payload):
        body = client.post(
            "/api/analysis/recommendations",
            json={"visualization": branching_payload, "analysisType": "security"},
        ).json()
        assert body["summary"]["categories"] == ["security"]
        assert [r["title"] for r in body["recommendations"]] == ["Ensure Secure Communication"]

    def test_dependencies(self, client, branching_payload):
        body = client.post("/api/analysis/dependencies", json={"visualization": branching_payload}).json()
        assert body["insights"]["strongDependencies"] == 1
        assert body["insights"]["mostDependentComponent"]["nodeId"] == "check"
        assert body["dependencies"]["dependencyMatrix"]["start"]["check"] is True

    def test_performance(self, client, branching_payload):
        body = client.post(
            "/api/analysis/performance",
            json={"visualization": branching_payload, "metrics": {"expectedDataLoad": "high"}},
        ).json()
        assert body["bottlenecks"] == [
            {"nodeId": "api", "estimatedTime": 400.0, "severity": "high", "bottleneckType": "performance"},
        ]
        assert body["optimizations"][0]["target"] == "api"
        assert body["performance"]["overall"]["estimatedTotalTime"] == 414.0
