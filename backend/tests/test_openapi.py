from fastapi.testclient import TestClient
from main import app

client = TestClient(app)


def test_openapi_contains_routes():
    spec = client.get("/openapi.json")
    assert spec.status_code == 200
    assert spec.json()["info"]["title"] == "Daysheets API"
    paths = spec.json().get("paths", {})
    assert "/auth/login" in paths
    assert "/api/selection-groups/{group_id}/select" in paths
    assert "/api/logo/airline" in paths
    assert "/api/legs/{leg_id}/passengers" in paths


def test_document_schema_exposes_current_flag():
    spec = client.get("/openapi.json")
    schema = spec.json()["components"]["schemas"]["DocumentResponse"]
    assert "is_current" in schema.get("properties", {})
