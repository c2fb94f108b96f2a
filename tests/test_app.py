from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from core.errors import UpstreamError
from tools import build_registry
from tools.registry import ToolName, ToolSpec


@pytest.fixture
def client(monkeypatch, graphql_down) -> TestClient:
    import app as app_module  # after graphql is stubbed

    return TestClient(app_module.app)


def test_health(client: TestClient):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["ok"] is True


def test_list_tools(client: TestClient):
    r = client.get("/tools")
    assert r.status_code == 200
    names = {t["name"] for t in r.json()["tools"]}
    assert names == {n.value for n in ToolName}
    math_tool = next(t for t in r.json()["tools"] if t["name"] == "math")
    assert math_tool["inputSchema"]["required"] == ["input"]


def test_missing_tool_is_400(client: TestClient):
    r = client.post("/tools", json={"parameters": {"input": "2+2"}})
    assert r.status_code == 400
    assert r.json() == {"error": "Tool name is required"}


def test_unknown_tool_is_400(client: TestClient):
    r = client.post("/tools", json={"tool": "teleport"})
    assert r.status_code == 400
    body = r.json()
    assert body["error"] == "Unknown tool: teleport"
    assert body["status"] == "error"


def test_success_is_200_with_envelope(client: TestClient):
    r = client.post("/tools", json={"tool": "math", "parameters": {"input": "2+2"}})
    assert r.status_code == 200, r.text
    assert r.json() == {"result": 4, "status": "success", "sourceHint": "local"}


def test_params_alias_and_precedence(client: TestClient):
    r = client.post("/tools", json={"tool": "math", "params": {"input": "3*3"}})
    assert r.json()["result"] == 9

    r = client.post("/tools", json={"tool": "math", "parameters": {"input": "1+1"}, "params": {"input": "5*5"}})
    assert r.json()["result"] == 2

    r = client.post("/tools", json={"tool": "math", "parameters": "input=1", "params": {"input": "4*4"}})
    assert r.json()["result"] == 16


@pytest.mark.parametrize("expression", ["(-8)^0.5", "(9^999)^5"])
def test_unrepresentable_math_is_json_400(client: TestClient, expression):
    r = client.post("/tools", json={"tool": "math", "parameters": {"input": expression}})
    assert r.status_code == 400
    assert r.headers["content-type"].startswith("application/json")
    assert r.json()["status"] == "error"
    assert r.json()["kind"] == "input"


def test_single_registry_per_process(client: TestClient):
    import app as app_module
    from tools import default_registry

    assert app_module.REGISTRY is default_registry()
    assert app_module.app.state.registry is app_module.REGISTRY


def test_handler_failure_is_400(client: TestClient):
    r = client.post("/tools", json={"tool": "news", "parameters": {"topic": "x"}})
    assert r.status_code == 400
    assert r.json()["error"] == "NEWS_API_KEY is not configured"
    assert r.json()["kind"] == "config"


def test_invalid_json_is_500(client: TestClient):
    r = client.post("/tools", content=b"{not json", headers={"Content-Type": "application/json"})
    assert r.status_code == 500
    assert "error" in r.json()


def test_refresh_reports_summary(client: TestClient, monkeypatch):
    import app as app_module

    async def good(params):
        return {"result": params.get("input")}

    async def bad(params):
        raise UpstreamError("down")

    registry = build_registry([
        ToolSpec(name=ToolName.MATH, description="", input_schema={}, handler=good, sample={"input": "1"}),
        ToolSpec(name=ToolName.NEWS, description="", input_schema={}, handler=bad),
    ])
    monkeypatch.setattr(app_module.app.state, "registry", registry)

    r = client.get("/tools/refresh")
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["summary"]["total"] == 2
    assert body["summary"]["passed"] == 1
    assert body["summary"]["failed"] == 1
    assert body["results"]["news"] == {"ok": False, "error": "down", "kind": "upstream", "checked_at": body["results"]["news"]["checked_at"]}
