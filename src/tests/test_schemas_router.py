"""
HTTP surface: status mapping and payload shapes of the schema routes.
Each test gets its own service so the process-wide cache is never touched.
"""
import pytest
from fastapi.testclient import TestClient

from routers.schemas import get_schema_service
from schema_server import app
from services.schema_validation import SchemaValidationService


@pytest.fixture
def client():
    service = SchemaValidationService()
    app.dependency_overrides[get_schema_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_generate_then_fetch(client):
    res = client.post("/schemas/GetUser/type-definition", json={"response": {"id": 1, "name": "x"}})
    assert res.status_code == 200
    body = res.json()
    assert body["type_definition"] == "type GetUser = {\n  id: number;\n  name: string;\n};"
    assert body["schema"]["kind"] == "object"

    res = client.get("/schemas")
    assert res.json() == {"names": ["GetUser"]}

    res = client.get("/schemas/GetUser")
    assert res.status_code == 200
    assert set(res.json()["schema"]["properties"]) == {"id", "name"}


def test_inline_format_and_text_body(client):
    res = client.post("/schemas/T/type-definition", json={"response": '[1, "a"]', "format": "inline"})
    assert res.status_code == 200
    assert res.json()["type_definition"] == "type T = (number | string)[];"


def test_generate_rejects_bad_input(client):
    res = client.post("/schemas/T/type-definition", json={"response": "{nope"})
    assert res.status_code == 400
    assert "Failed to generate type definition" in res.json()["detail"]

    res = client.post("/schemas/T/type-definition", json={"response": {}, "format": "yaml"})
    assert res.status_code == 400

    res = client.post("/schemas/T/type-definition", json={})
    assert res.status_code == 400
    assert "response" in res.json()["detail"]


def test_non_json_request_body(client):
    res = client.post("/compare", content=b"not json", headers={"content-type": "application/json"})
    assert res.status_code == 400


def test_unknown_schema_is_404(client):
    assert client.get("/schemas/nothing").status_code == 404
    res = client.post("/schemas/nothing/validate", json={"response": {"a": 1}})
    assert res.status_code == 404
    assert "nothing" in res.json()["detail"]


def test_validate_against_cached(client):
    client.post("/schemas/Feed/type-definition", json={"response": {"a": 1, "b": "x"}})

    res = client.post("/schemas/Feed/validate", json={"response": {"a": "1", "b": "y", "c": True}})
    assert res.status_code == 200
    body = res.json()
    assert body["is_valid"] is False
    assert body["summary"] == {"error_count": 1, "warning_count": 1}
    assert body["errors"][0]["path"] == "a"
    assert "BREAKING" in body["narrative"]


def test_learn_route(client):
    res = client.post("/schemas/Feed/learn", json={"response": {"a": 1}})
    assert res.json()["validation"] is None

    res = client.post("/schemas/Feed/learn", json={"response": {"a": None}})
    body = res.json()
    assert body["validation"]["is_valid"] is False
    assert body["schema"]["properties"]["a"]["optional"] is True


def test_adhoc_validate_never_fails(client):
    res = client.post("/validate", json={"candidate": "{broken", "reference": {"a": 1}})
    assert res.status_code == 200
    body = res.json()
    assert body["is_valid"] is False
    assert body["errors"][0]["path"] == "root"

    res = client.post("/validate", json={"candidate": {"a": 2, "z": 0}, "reference": {"a": 1}})
    assert res.json()["is_valid"] is True
    assert res.json()["summary"]["warning_count"] == 1

    assert client.post("/validate", json={"candidate": {}}).status_code == 400


def test_compare(client):
    res = client.post("/compare", json={"sample_a": {"a": 1, "b": 2}, "sample_b": {"a": 1}})
    assert res.status_code == 200
    body = res.json()
    assert body["is_compatible"] is False
    assert body["errors"][0]["path"] == "b"

    res = client.post("/compare", json={"sample_a": "{", "sample_b": {}})
    assert res.status_code == 400


def test_type_diff(client):
    res = client.post("/type-diff", json={
        "before": "type T = { id: number; name: string };",
        "after": "type T = { id: string; email: string };",
    })
    assert res.status_code == 200
    body = res.json()
    assert body["diff"]["added"] == ["email"]
    assert body["diff"]["removed"] == ["name"]
    assert [c["path"] for c in body["changes"]] == ["email", "name", "id"]
    assert "Removed Fields (1)" in body["report"]

    assert client.post("/type-diff", json={"before": 1, "after": "x"}).status_code == 400


def test_clear(client):
    client.post("/schemas/One/type-definition", json={"response": {}})
    res = client.delete("/schemas")
    assert res.json() == {"status": "cleared", "schemas_cleared": 1}
    assert client.get("/schemas").json() == {"names": []}


def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json()["status"] == "ok"


def test_non_string_format_is_400(client):
    res = client.post("/schemas/T/type-definition", json={"response": {}, "format": 5})
    assert res.status_code == 400
    assert "Invalid format" in res.json()["detail"]
    assert client.get("/schemas/T").status_code == 404, "nothing cached on a rejected request"


def test_type_definition_route_reports_the_schema_it_generated(client):
    res = client.post("/schemas/T/type-definition", json={"response": {"id": 1}})
    assert res.json()["schema"] == {"kind": "object", "properties": {"id": {"kind": "number"}}}
